from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from academy.api import deps
from academy.models.user import User
from academy.services.user_service import UserService
from academy.schemas.user import UserResponse
from academy.schemas.responses import SuccessResponse

router = APIRouter()


@router.get("/me", response_model=SuccessResponse[UserResponse])
async def read_current_user(
    current_user: User = Depends(deps.get_current_user),
) -> Any:
    """Profile of the logged-in user, including their student ID."""
    return SuccessResponse(data=UserResponse.model_validate(current_user))


@router.get("/by-student-id/{student_id}", response_model=SuccessResponse[UserResponse])
async def read_user_by_student_id(
    student_id: str,
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """
    Resolve a scanned or typed student ID to the student account.
    Used by the attendance scanner.
    """
    user = await UserService.get_user_by_student_id(db, student_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No student with ID {student_id}",
        )
    return SuccessResponse(data=UserResponse.model_validate(user))
