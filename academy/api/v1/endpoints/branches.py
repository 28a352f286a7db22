from typing import Any, List

from fastapi import APIRouter, Depends

from academy.api import deps
from academy.core.branches import BRANCH_NAMES, branch_code
from academy.models.enums import Branch
from academy.models.user import User
from academy.services.branch_counter_service import BranchCounterService
from academy.schemas.branch import BranchInfo, BranchCounterSummary
from academy.schemas.responses import SuccessResponse

router = APIRouter()


@router.get("", response_model=SuccessResponse[List[BranchInfo]])
async def list_branches() -> Any:
    """Branches a student can sign up at."""
    return SuccessResponse(
        data=[
            BranchInfo(branch=branch, name=BRANCH_NAMES[branch], code=branch_code(branch))
            for branch in Branch
        ]
    )


@router.get("/counters", response_model=SuccessResponse[List[BranchCounterSummary]])
async def list_branch_counters(
    current_user: User = Depends(deps.require_admin),
    counter_service: BranchCounterService = Depends(deps.get_branch_counter_service),
) -> Any:
    """
    Student IDs issued per branch so far.
    Display only; the next ID is always allocated at signup.
    """
    summary = await counter_service.get_counter_summary()
    return SuccessResponse(data=[BranchCounterSummary(**row) for row in summary])
