"""Branch Counter Service - student ID allocation"""

import asyncio
import random
from typing import Any, Dict, List, Optional, Union

from academy.config import settings
from academy.core.branches import BRANCH_NAMES, branch_code, format_student_id, normalize_branch
from academy.core.exceptions import AllocationConflict, StorageFault
from academy.core.logging import get_logger
from academy.models.enums import Branch
from academy.store.base import CounterStore

logger = get_logger(__name__)


class BranchCounterService:
    """
    Hands out sequential student IDs per branch.

    allocate_student_id is the only code path that changes a branch count.
    Each attempt reads the counter, computes count + 1 and writes it back
    with compare_and_set; a lost race re-reads and tries again, up to
    ``max_attempts`` times. A write only loses to another caller's
    committed write, so N concurrent callers on one branch all succeed
    whenever ``max_attempts >= N``, with or without backoff.
    Read-only helpers below exist for display and must never feed the
    next id.
    """

    def __init__(
        self,
        store: CounterStore,
        max_attempts: Optional[int] = None,
        backoff_base_ms: Optional[int] = None,
        backoff_max_ms: Optional[int] = None,
        width: Optional[int] = None,
    ):
        self.store = store
        self.max_attempts = settings.ALLOCATION_MAX_ATTEMPTS if max_attempts is None else max_attempts
        self.backoff_base_ms = settings.ALLOCATION_BACKOFF_BASE_MS if backoff_base_ms is None else backoff_base_ms
        self.backoff_max_ms = settings.ALLOCATION_BACKOFF_MAX_MS if backoff_max_ms is None else backoff_max_ms
        self.width = settings.STUDENT_ID_WIDTH if width is None else width

        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.width < 1:
            raise ValueError("width must be at least 1")
        if self.backoff_base_ms < 0 or self.backoff_max_ms < self.backoff_base_ms:
            raise ValueError("backoff must satisfy 0 <= backoff_base_ms <= backoff_max_ms")

    async def allocate_student_id(self, branch: Union[Branch, str]) -> str:
        """
        Reserve the next number for ``branch`` and return its student ID.

        Raises:
            InvalidBranch: branch is not configured (nothing is read or written)
            AllocationConflict: every attempt lost a race; safe to retry later
            StorageFault: the store failed; no number was consumed
        """
        branch = normalize_branch(branch)

        for attempt in range(1, self.max_attempts + 1):
            try:
                current = await self.store.read(branch)
                next_number = (current.count if current is not None else 0) + 1
                committed = await self.store.compare_and_set(branch, current, next_number)
            except StorageFault as e:
                logger.error(
                    "Student ID allocation failed: storage fault",
                    extra={"branch": branch.value, "error_kind": e.code, "attempt": attempt},
                    exc_info=True,
                )
                raise

            if committed:
                student_id = format_student_id(branch, next_number, self.width)
                logger.info(
                    "Issued student ID",
                    extra={"branch": branch.value, "student_id": student_id, "attempt": attempt},
                )
                return student_id

            logger.debug(
                "Branch counter write conflict, retrying",
                extra={"branch": branch.value, "attempt": attempt},
            )
            if attempt < self.max_attempts:
                await asyncio.sleep(self._backoff_delay(attempt))

        logger.warning(
            "Student ID allocation gave up after repeated conflicts",
            extra={"branch": branch.value, "error_kind": AllocationConflict.code, "attempts": self.max_attempts},
        )
        raise AllocationConflict(branch.value, self.max_attempts)

    def _backoff_delay(self, attempt: int) -> float:
        """Full-jitter exponential backoff in seconds"""
        ceiling = min(self.backoff_max_ms, self.backoff_base_ms * (2 ** (attempt - 1)))
        return random.uniform(0, ceiling) / 1000.0

    async def get_branch_count(self, branch: Union[Branch, str]) -> int:
        """How many student IDs the branch has issued so far"""
        branch = normalize_branch(branch)
        record = await self.store.read(branch)
        return record.count if record is not None else 0

    async def get_counter_summary(self) -> List[Dict[str, Any]]:
        """Count and most recently issued ID for every branch, including untouched ones"""
        records = await self.store.read_all()
        summary = []
        for branch in Branch:
            record = records.get(branch)
            count = record.count if record is not None else 0
            summary.append({
                "branch": branch,
                "name": BRANCH_NAMES[branch],
                "code": branch_code(branch),
                "count": count,
                "last_student_id": format_student_id(branch, count, self.width) if count else None,
            })
        return summary
