"""Counter store interface"""

import abc
from dataclasses import dataclass
from typing import Dict, Optional

from academy.models.enums import Branch


@dataclass(frozen=True)
class CounterRecord:
    """Snapshot of one branch counter as read from the store"""
    branch: Branch
    count: int
    version: int


class CounterStore(abc.ABC):
    """
    Durable home of the per-branch counters.

    Writes go through compare_and_set only: a write lands if the record is
    still exactly the snapshot the caller read, so a read-increment-write
    cycle is linearizable per branch. Different branches are separate
    records and never conflict.
    """

    @abc.abstractmethod
    async def read(self, branch: Branch) -> Optional[CounterRecord]:
        """Point read. None when nothing has been issued for the branch yet."""

    @abc.abstractmethod
    async def compare_and_set(
        self,
        branch: Branch,
        expected: Optional[CounterRecord],
        new_count: int,
    ) -> bool:
        """
        Store ``new_count`` if the record still matches ``expected``.

        ``expected=None`` means the record must not exist yet. Returns False
        when another writer got there first, raises StorageFault for any
        other failure. Nothing is written unless True is returned, and when
        True is returned the write is already committed.
        """

    @abc.abstractmethod
    async def read_all(self) -> Dict[Branch, CounterRecord]:
        """All existing counters, for reporting"""
