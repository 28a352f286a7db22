"""User Pydantic Schemas"""

from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, EmailStr, ConfigDict

from academy.models.enums import UserRole, Branch


class UserResponse(BaseModel):
    """Schema for user responses"""
    id: UUID
    email: EmailStr
    name: str
    phone: str
    secondary_phone: Optional[str] = None
    role: UserRole
    branch: Optional[Branch] = None
    student_id: Optional[str] = None
    district: Optional[str] = None
    tehsil: Optional[str] = None
    village: Optional[str] = None
    street: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime
    last_login: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
