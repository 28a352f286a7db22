"""User Service - Business Logic Layer"""

from typing import Optional
from uuid import UUID
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from academy.core.branches import normalize_branch
from academy.core.security import get_password_hash, verify_password
from academy.models.enums import UserRole
from academy.models.user import User
from academy.schemas.auth import SignupRequest
from academy.services.branch_counter_service import BranchCounterService

logger = logging.getLogger(__name__)


class UserService:
    """Service layer for user-related operations"""

    @staticmethod
    async def signup_student(
        db: AsyncSession,
        counter_service: BranchCounterService,
        signup: SignupRequest,
    ) -> User:
        """
        Register a student under a freshly allocated student ID.

        Order matters: the branch and email are checked first so a doomed
        signup does not consume a number; then the ID is allocated (its own
        committed transaction); only then is the user row written. Any
        AllocationError aborts before a user row exists. A failure after
        allocation leaves that number unused, since issued numbers are never
        handed back.

        Raises:
            InvalidBranch / AllocationConflict / StorageFault: from allocation
            ValueError: email already registered
        """
        branch = normalize_branch(signup.branch)
        email = signup.email.lower()

        if await UserService.get_user_by_email(db, email):
            raise ValueError("A user with this email already exists")

        student_id = await counter_service.allocate_student_id(branch)

        address = signup.address
        user = User(
            email=email,
            hashed_password=get_password_hash(signup.password),
            name=signup.name,
            phone=signup.phone,
            secondary_phone=signup.secondary_phone,
            role=UserRole.STUDENT,
            branch=branch,
            student_id=student_id,
            district=address.district if address else None,
            tehsil=address.tehsil if address else None,
            village=address.village if address else None,
            street=address.street if address else None,
            is_active=True,
        )
        db.add(user)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            logger.error(
                "Signup lost an email race after allocating a student ID",
                extra={"student_id": student_id, "branch": branch.value},
            )
            raise ValueError("A user with this email already exists")
        except SQLAlchemyError:
            await db.rollback()
            logger.error(
                "Signup failed after allocating a student ID",
                extra={"student_id": student_id, "branch": branch.value},
                exc_info=True,
            )
            raise
        await db.refresh(user)

        logger.info(
            "Student registered",
            extra={"user_id": str(user.id), "student_id": student_id, "branch": branch.value},
        )
        return user

    @staticmethod
    async def create_admin(
        db: AsyncSession,
        email: str,
        password: str,
        name: str,
        phone: str,
    ) -> User:
        """Create an admin account. Admins have no branch and no student ID."""
        email = email.lower()
        if await UserService.get_user_by_email(db, email):
            raise ValueError("A user with this email already exists")

        admin = User(
            email=email,
            hashed_password=get_password_hash(password),
            name=name,
            phone=phone,
            role=UserRole.ADMIN,
            is_active=True,
        )
        db.add(admin)
        await db.commit()
        await db.refresh(admin)
        return admin

    @staticmethod
    async def get_user_by_id(db: AsyncSession, user_id: UUID) -> Optional[User]:
        result = await db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
        """
        Get user by email.

        Args:
            db: Database session
            email: User email (matched case-insensitively; stored lowercase)

        Returns:
            User or None if not found
        """
        result = await db.execute(select(User).where(User.email == email.lower()))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_user_by_student_id(db: AsyncSession, student_id: str) -> Optional[User]:
        """Look up an active student by the ID printed on their card (e.g. NG0042)"""
        result = await db.execute(
            select(User).where(
                User.student_id == student_id.strip().upper(),
                User.deleted_at.is_(None),
            )
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def authenticate_user(
        db: AsyncSession,
        email: str,
        password: str
    ) -> Optional[User]:
        """
        Authenticate user with email and password.

        Returns:
            User if authenticated, None otherwise
        """
        user = await UserService.get_user_by_email(db, email)

        if not user or user.is_deleted:
            return None

        if not verify_password(password, user.hashed_password):
            return None

        if not user.is_active:
            return None

        user.touch_login()
        await db.commit()

        return user
