"""Process-local counter store for development and tests"""

import asyncio
from typing import Dict, Optional

from academy.models.enums import Branch
from academy.store.base import CounterRecord, CounterStore


class InMemoryCounterStore(CounterStore):
    """
    CounterStore kept in a dict.

    Not durable and not shared between processes, so settings refuse it in
    production. Reads yield to the event loop before returning, which lets
    concurrent allocations interleave between their read and their write the
    way they do against a real database.
    """

    def __init__(self, initial: Optional[Dict[Branch, int]] = None):
        self._records: Dict[Branch, CounterRecord] = {}
        self._lock = asyncio.Lock()
        for branch, count in (initial or {}).items():
            self._records[branch] = CounterRecord(branch=branch, count=count, version=1)

    async def read(self, branch: Branch) -> Optional[CounterRecord]:
        record = self._records.get(branch)
        await asyncio.sleep(0)
        return record

    async def compare_and_set(
        self,
        branch: Branch,
        expected: Optional[CounterRecord],
        new_count: int,
    ) -> bool:
        async with self._lock:
            current = self._records.get(branch)
            if expected is None:
                if current is not None:
                    return False
                self._records[branch] = CounterRecord(branch=branch, count=new_count, version=1)
                return True
            if current is None or current.version != expected.version:
                return False
            self._records[branch] = CounterRecord(
                branch=branch, count=new_count, version=current.version + 1
            )
            return True

    async def read_all(self) -> Dict[Branch, CounterRecord]:
        return dict(self._records)
