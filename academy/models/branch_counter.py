"""Per-branch student ID sequence"""

from sqlalchemy import Column, Integer, CheckConstraint
from sqlalchemy.dialects.postgresql import ENUM

from academy.database import Base
from academy.models.base import TimestampMixin
from academy.models.enums import Branch


class BranchCounter(Base, TimestampMixin):
    """
    Number of student IDs issued so far for one branch.

    A missing row means nothing has been issued (count 0). ``version`` is
    bumped on every write and is what concurrent writers compare against;
    ``count`` is only ever changed through SqlCounterStore.compare_and_set.
    """
    __tablename__ = "branch_counters"
    __table_args__ = (
        CheckConstraint("count >= 0", name="ck_branch_counters_count_non_negative"),
    )

    branch = Column(
        ENUM(Branch, name="branch", values_callable=lambda e: [m.value for m in e]),
        primary_key=True,
    )
    count = Column(Integer, nullable=False, default=0)
    version = Column(Integer, nullable=False, default=1)

    def __repr__(self) -> str:
        return f"<BranchCounter {self.branch} count={self.count} v{self.version}>"
