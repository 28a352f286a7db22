import re
from typing import Optional
from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from academy.schemas.user import UserResponse

_PHONE_RE = re.compile(r"^\d{10}$")


class Address(BaseModel):
    district: str = Field(..., min_length=1)
    tehsil: str = Field(..., min_length=1)
    village: str = Field(..., min_length=1)
    street: Optional[str] = None


class SignupRequest(BaseModel):
    """
    Student self-registration.

    ``branch`` is kept as a plain string so an unknown branch is reported as
    INVALID_BRANCH by the allocator rather than as a generic validation error.
    """
    name: str = Field(..., min_length=1)
    phone: str
    email: EmailStr
    password: str = Field(..., min_length=6, description="Password must be at least 6 characters long")
    confirm_password: str
    branch: str = Field(..., min_length=1)
    secondary_phone: Optional[str] = None
    address: Optional[Address] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v

    @field_validator("phone", "secondary_phone")
    @classmethod
    def check_phone(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not _PHONE_RE.match(v):
            raise ValueError("Please enter a valid 10-digit phone number")
        return v

    @model_validator(mode="after")
    def passwords_match(self) -> "SignupRequest":
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class RefreshTokenRequest(BaseModel):
    refresh_token: str


class Token(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    role: str
    user_id: str
    student_id: Optional[str] = None


class SignupResult(BaseModel):
    user: UserResponse
    token: Token
