from datetime import timedelta
from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from academy.api import deps
from academy.core import security
from academy.core.rate_limit import limiter
from academy.config import settings
from academy.models.user import User
from academy.services.branch_counter_service import BranchCounterService
from academy.services.user_service import UserService
from academy.schemas.auth import LoginRequest, RefreshTokenRequest, SignupRequest, SignupResult, Token
from academy.schemas.user import UserResponse
from academy.schemas.responses import SuccessResponse

router = APIRouter()


def _issue_tokens(user: User) -> Token:
    token_data = {"sub": str(user.id), "role": user.role.value}
    if user.student_id:
        token_data["student_id"] = user.student_id

    access_token = security.create_access_token(
        data=token_data,
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )
    refresh_token = security.create_refresh_token(
        data={"sub": str(user.id), "role": user.role.value}
    )
    return Token(
        access_token=access_token,
        refresh_token=refresh_token,
        token_type="bearer",
        role=user.role.value,
        user_id=str(user.id),
        student_id=user.student_id,
    )


@router.post("/signup", response_model=SuccessResponse[SignupResult])
@limiter.limit(settings.SIGNUP_RATE_LIMIT)
async def signup(
    request: Request,
    signup_in: SignupRequest,
    db: AsyncSession = Depends(deps.get_db),
    counter_service: BranchCounterService = Depends(deps.get_branch_counter_service),
) -> Any:
    """
    Student self-registration.

    Allocates the next student ID for the chosen branch and creates the
    account under it. Allocation failures surface through the
    AllocationError handlers and no account is created.
    """
    try:
        user = await UserService.signup_student(db, counter_service, signup_in)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return SuccessResponse(
        data=SignupResult(user=UserResponse.model_validate(user), token=_issue_tokens(user)),
        message="Account created successfully",
    )


@router.post("/login", response_model=SuccessResponse[Token])
@limiter.limit(settings.SIGNUP_RATE_LIMIT)
async def login(
    request: Request,
    login_data: LoginRequest,
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Login for students and admins.
    Returns JWT access token, refresh token, role and student ID.
    """
    user = await UserService.authenticate_user(db, email=login_data.email, password=login_data.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
        )

    return SuccessResponse(data=_issue_tokens(user), message="Login successful")


@router.post("/refresh", response_model=SuccessResponse[Token])
async def refresh(
    refresh_in: RefreshTokenRequest,
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Exchange a refresh token for a new token pair.
    The user is reloaded so the new access token carries the current role and student ID.
    """
    invalid = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid refresh token",
        headers={"WWW-Authenticate": "Bearer"},
    )
    payload = security.decode_token(refresh_in.refresh_token)
    if not payload or payload.get("type") != "refresh" or not payload.get("sub"):
        raise invalid

    try:
        user_id = UUID(payload["sub"])
    except ValueError:
        raise invalid

    user = await UserService.get_user_by_id(db, user_id)
    if not user or user.is_deleted or not user.is_active:
        raise invalid

    return SuccessResponse(data=_issue_tokens(user), message="Token refreshed")
