"""Models Package - Export all models for easy imports"""

from academy.models.base import BaseModel, TimestampMixin, SoftDeleteMixin, StatusMixin
from academy.models.enums import UserRole, Branch
from academy.models.user import User
from academy.models.branch_counter import BranchCounter


__all__ = [
    # Base classes
    "BaseModel",
    "TimestampMixin",
    "SoftDeleteMixin",
    "StatusMixin",

    # Enums
    "UserRole",
    "Branch",

    # User
    "User",

    # Student ID allocation
    "BranchCounter",
]
