"""Branch Schemas"""

from typing import Optional
from pydantic import BaseModel

from academy.models.enums import Branch


class BranchInfo(BaseModel):
    """A branch as offered in the signup branch picker"""
    branch: Branch
    name: str
    code: str


class BranchCounterSummary(BranchInfo):
    """Issued-ID statistics for one branch (admin reporting)"""
    count: int
    last_student_id: Optional[str] = None
