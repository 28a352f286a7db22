"""Base Models and Mixins"""

import uuid
from sqlalchemy import Column, DateTime, Boolean
from sqlalchemy.dialects.postgresql import UUID

from academy.database import Base
from academy.utils.time import get_utc_now


class TimestampMixin:
    """
    created_at / updated_at columns.

    Used on its own by tables keyed by something other than a UUID
    (branch counters are keyed by branch).
    """
    created_at = Column(DateTime, default=get_utc_now, nullable=False)
    updated_at = Column(DateTime, default=get_utc_now, onupdate=get_utc_now, nullable=False)


class BaseModel(Base, TimestampMixin):
    """
    Base model class for UUID-keyed tables.

    Provides:
    - UUID primary key
    - created_at timestamp
    - updated_at timestamp
    """
    __abstract__ = True

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)


class SoftDeleteMixin:
    """
    Mixin for soft delete functionality.

    Provides:
    - deleted_at timestamp (NULL = active, NOT NULL = deleted)
    """
    deleted_at = Column(DateTime, nullable=True, index=True)

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None


class StatusMixin:
    """
    Mixin for models with active/inactive status.

    Provides:
    - is_active boolean flag
    """
    is_active = Column(Boolean, default=True, nullable=False, index=True)
