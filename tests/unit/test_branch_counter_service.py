"""Unit tests for BranchCounterService against the in-memory counter store."""

import asyncio
from typing import Optional

import pytest

from academy.config import Settings
from academy.core.branches import parse_student_id
from academy.core.exceptions import AllocationConflict, InvalidBranch, StorageFault
from academy.models.enums import Branch
from academy.services import branch_counter_service
from academy.services.branch_counter_service import BranchCounterService
from academy.store.base import CounterRecord
from academy.store.memory import InMemoryCounterStore


def _numbers(student_ids):
    return sorted(parse_student_id(sid)[1] for sid in student_ids)


class FaultyStore(InMemoryCounterStore):
    """Fails the write after the read has happened, like a dropped connection mid-transaction."""

    def __init__(self, *args, fail_writes: int = 1, **kwargs):
        super().__init__(*args, **kwargs)
        self.fail_writes = fail_writes
        self.reads = 0

    async def read(self, branch: Branch) -> Optional[CounterRecord]:
        self.reads += 1
        return await super().read(branch)

    async def compare_and_set(self, branch, expected, new_count) -> bool:
        if self.fail_writes:
            self.fail_writes -= 1
            raise StorageFault("connection reset", branch=branch.value)
        return await super().compare_and_set(branch, expected, new_count)


class AlwaysConflictingStore(InMemoryCounterStore):
    """Every write loses the race."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.attempts = 0

    async def compare_and_set(self, branch, expected, new_count) -> bool:
        self.attempts += 1
        return False


class SpyStore(InMemoryCounterStore):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.calls = 0

    async def read(self, branch):
        self.calls += 1
        return await super().read(branch)

    async def compare_and_set(self, branch, expected, new_count):
        self.calls += 1
        return await super().compare_and_set(branch, expected, new_count)


@pytest.mark.asyncio
async def test_fresh_branch_starts_at_one(counter_service: BranchCounterService):
    first = await counter_service.allocate_student_id(Branch.WARDHA)
    second = await counter_service.allocate_student_id("wardha")

    assert first == "WR0001"
    assert second == "WR0002"
    assert await counter_service.get_branch_count(Branch.WARDHA) == 2


@pytest.mark.asyncio
async def test_existing_count_continues():
    store = InMemoryCounterStore({Branch.NAGPUR: 41})
    service = BranchCounterService(store, backoff_base_ms=0)

    student_id = await service.allocate_student_id(Branch.NAGPUR)

    assert student_id == "NG0042"
    record = await store.read(Branch.NAGPUR)
    assert record.count == 42


@pytest.mark.asyncio
async def test_fifty_concurrent_allocations_are_unique_and_gapless(
    counter_store: InMemoryCounterStore, counter_service: BranchCounterService
):
    # No backoff at all: the configured attempt budget alone must cover 50 callers.
    ids = await asyncio.gather(*(counter_service.allocate_student_id(Branch.BUTIBORI) for _ in range(50)))

    assert len(set(ids)) == 50
    assert _numbers(ids) == list(range(1, 51))
    assert (await counter_store.read(Branch.BUTIBORI)).count == 50


@pytest.mark.asyncio
async def test_fifty_concurrent_allocations_with_default_settings(monkeypatch):
    defaults = Settings(DATABASE_URL="postgresql://x@localhost/x", SECRET_KEY="k", _env_file=None)
    monkeypatch.setattr(branch_counter_service, "settings", defaults)
    store = InMemoryCounterStore()
    service = BranchCounterService(store)

    results = await asyncio.gather(
        *(service.allocate_student_id(Branch.WARDHA) for _ in range(50)),
        return_exceptions=True,
    )

    failures = [r for r in results if isinstance(r, Exception)]
    assert failures == []
    assert _numbers(results) == list(range(1, 51))
    assert (await store.read(Branch.WARDHA)).count == 50


@pytest.mark.parametrize("kwargs", [
    {"max_attempts": 0},
    {"width": 0},
    {"backoff_base_ms": -1},
    {"backoff_base_ms": 50, "backoff_max_ms": 10},
])
def test_invalid_service_arguments_are_rejected(kwargs):
    with pytest.raises(ValueError):
        BranchCounterService(InMemoryCounterStore(), **kwargs)


@pytest.mark.asyncio
async def test_concurrent_allocations_actually_conflict():
    class CountingStore(InMemoryCounterStore):
        conflicts = 0

        async def compare_and_set(self, branch, expected, new_count):
            committed = await super().compare_and_set(branch, expected, new_count)
            if not committed:
                self.conflicts += 1
            return committed

    store = CountingStore()
    service = BranchCounterService(store, max_attempts=20, backoff_base_ms=0, backoff_max_ms=0)

    await asyncio.gather(*(service.allocate_student_id(Branch.AKOLA) for _ in range(10)))

    assert store.conflicts > 0
    record = await store.read(Branch.AKOLA)
    assert record.count == 10
    # one version bump per committed write and nothing else
    assert record.version == 10


@pytest.mark.asyncio
async def test_branches_are_independent(counter_store: InMemoryCounterStore):
    service = BranchCounterService(counter_store, max_attempts=50, backoff_base_ms=0, backoff_max_ms=0)

    calls = []
    for _ in range(10):
        calls.append(service.allocate_student_id(Branch.WARDHA))
        calls.append(service.allocate_student_id(Branch.NAGPUR))
    calls.extend(service.allocate_student_id(Branch.AKOLA) for _ in range(3))
    ids = await asyncio.gather(*calls)

    by_branch = {}
    for sid in ids:
        branch, number = parse_student_id(sid)
        by_branch.setdefault(branch, []).append(number)

    assert sorted(by_branch[Branch.WARDHA]) == list(range(1, 11))
    assert sorted(by_branch[Branch.NAGPUR]) == list(range(1, 11))
    assert sorted(by_branch[Branch.AKOLA]) == [1, 2, 3]
    assert Branch.BUTIBORI not in by_branch
    assert await service.get_branch_count(Branch.BUTIBORI) == 0


@pytest.mark.asyncio
async def test_invalid_branch_has_no_storage_side_effects():
    store = SpyStore()
    service = BranchCounterService(store, backoff_base_ms=0)

    with pytest.raises(InvalidBranch):
        await service.allocate_student_id("pune")

    assert store.calls == 0
    assert await store.read_all() == {}


@pytest.mark.asyncio
async def test_storage_fault_leaves_count_unchanged():
    store = FaultyStore({Branch.NAGPUR: 5}, fail_writes=1)
    service = BranchCounterService(store, backoff_base_ms=0)

    with pytest.raises(StorageFault):
        await service.allocate_student_id(Branch.NAGPUR)

    assert store.reads == 1
    assert (await store.read(Branch.NAGPUR)).count == 5


@pytest.mark.asyncio
async def test_failed_allocation_does_not_consume_a_number():
    store = FaultyStore(fail_writes=0)
    service = BranchCounterService(store, backoff_base_ms=0)

    assert await service.allocate_student_id(Branch.WARDHA) == "WR0001"

    store.fail_writes = 1
    with pytest.raises(StorageFault):
        await service.allocate_student_id(Branch.WARDHA)

    assert await service.allocate_student_id(Branch.WARDHA) == "WR0002"
    assert await service.get_branch_count(Branch.WARDHA) == 2


@pytest.mark.asyncio
async def test_exhausted_retries_raise_conflict_without_writing():
    store = AlwaysConflictingStore({Branch.AKOLA: 3})
    service = BranchCounterService(store, max_attempts=4, backoff_base_ms=0, backoff_max_ms=0)

    with pytest.raises(AllocationConflict) as exc_info:
        await service.allocate_student_id(Branch.AKOLA)

    assert exc_info.value.attempts == 4
    assert exc_info.value.retryable is True
    assert store.attempts == 4
    assert (await store.read(Branch.AKOLA)).count == 3


@pytest.mark.asyncio
async def test_conflict_is_retried_transparently():
    class LosesFirstRace(InMemoryCounterStore):
        lost = False

        async def compare_and_set(self, branch, expected, new_count):
            if not self.lost:
                self.lost = True
                # a competing signup commits between our read and our write
                await super().compare_and_set(branch, expected, new_count)
                return False
            return await super().compare_and_set(branch, expected, new_count)

    store = LosesFirstRace()
    service = BranchCounterService(store, max_attempts=3, backoff_base_ms=0)

    student_id = await service.allocate_student_id(Branch.NAGPUR)

    assert student_id == "NG0002"
    assert (await store.read(Branch.NAGPUR)).count == 2


@pytest.mark.asyncio
async def test_counter_summary_lists_every_branch():
    store = InMemoryCounterStore({Branch.NAGPUR: 41, Branch.AKOLA: 2})
    service = BranchCounterService(store, width=4)

    summary = {row["branch"]: row for row in await service.get_counter_summary()}

    assert set(summary) == set(Branch)
    assert summary[Branch.NAGPUR]["count"] == 41
    assert summary[Branch.NAGPUR]["last_student_id"] == "NG0041"
    assert summary[Branch.AKOLA]["code"] == "AK"
    assert summary[Branch.WARDHA]["count"] == 0
    assert summary[Branch.WARDHA]["last_student_id"] is None
