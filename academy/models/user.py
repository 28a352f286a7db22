"""User & Authentication Model"""

from sqlalchemy import Column, String, DateTime
from sqlalchemy.dialects.postgresql import ENUM

from academy.models.base import BaseModel, SoftDeleteMixin, StatusMixin
from academy.models.enums import UserRole, Branch
from academy.utils.time import get_utc_now


class User(BaseModel, SoftDeleteMixin, StatusMixin):
    """
    Students and admins.

    ``id`` is the internal account id. Students also carry ``student_id``,
    the branch-sequenced business identifier (e.g. NG0042) shown on ID cards
    and scanned for attendance.
    """
    __tablename__ = "users"

    # Authentication
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)

    # Personal Information
    name = Column(String(255), nullable=False)
    phone = Column(String(20), nullable=False)
    secondary_phone = Column(String(20), nullable=True)

    # Address
    district = Column(String(255), nullable=True)
    tehsil = Column(String(255), nullable=True)
    village = Column(String(255), nullable=True)
    street = Column(String(255), nullable=True)

    # Role & branch
    role = Column(
        ENUM(UserRole, name="user_role", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        index=True,
    )
    branch = Column(
        ENUM(Branch, name="branch", values_callable=lambda e: [m.value for m in e], create_type=False),
        nullable=True,
        index=True,
    )
    student_id = Column(String(20), unique=True, nullable=True, index=True)

    last_login = Column(DateTime, nullable=True)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_student(self) -> bool:
        return self.role == UserRole.STUDENT

    def touch_login(self) -> None:
        self.last_login = get_utc_now()

    def __repr__(self) -> str:
        return f"<User {self.email} ({self.role})>"
