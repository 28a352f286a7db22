"""PostgreSQL-backed counter store"""

from typing import Dict, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from academy.core.exceptions import StorageFault
from academy.core.logging import get_logger
from academy.models.branch_counter import BranchCounter
from academy.models.enums import Branch
from academy.store.base import CounterRecord, CounterStore
from academy.utils.time import get_utc_now

logger = get_logger(__name__)

# serialization_failure, deadlock_detected
_RETRYABLE_SQLSTATES = {"40001", "40P01"}


def _is_write_conflict(exc: DBAPIError) -> bool:
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    return sqlstate in _RETRYABLE_SQLSTATES


def _to_record(row: BranchCounter) -> CounterRecord:
    return CounterRecord(branch=Branch(row.branch), count=row.count, version=row.version)


class SqlCounterStore(CounterStore):
    """
    Counters in the ``branch_counters`` table.

    Every call opens its own session so an allocation never shares a
    transaction with the caller's request session; a True from
    compare_and_set means the new count is committed.
    """

    def __init__(self, session_factory: async_sessionmaker):
        self._session_factory = session_factory

    async def read(self, branch: Branch) -> Optional[CounterRecord]:
        async with self._session_factory() as session:
            try:
                result = await session.execute(
                    select(BranchCounter).where(BranchCounter.branch == branch)
                )
            except SQLAlchemyError as e:
                raise StorageFault(f"Failed to read counter for {branch.value}", branch=branch.value) from e
            row = result.scalar_one_or_none()
            return _to_record(row) if row is not None else None

    async def compare_and_set(
        self,
        branch: Branch,
        expected: Optional[CounterRecord],
        new_count: int,
    ) -> bool:
        async with self._session_factory() as session:
            try:
                if expected is None:
                    return await self._create(session, branch, new_count)
                return await self._update(session, branch, expected, new_count)
            except IntegrityError as e:
                await session.rollback()
                if expected is None:
                    # Another writer created the row between our read and insert
                    return False
                raise StorageFault(f"Counter write rejected for {branch.value}", branch=branch.value) from e
            except DBAPIError as e:
                await session.rollback()
                if _is_write_conflict(e):
                    logger.debug("Serialization conflict on branch counter", extra={"branch": branch.value})
                    return False
                raise StorageFault(f"Failed to write counter for {branch.value}", branch=branch.value) from e
            except SQLAlchemyError as e:
                await session.rollback()
                raise StorageFault(f"Failed to write counter for {branch.value}", branch=branch.value) from e

    async def _create(self, session: AsyncSession, branch: Branch, new_count: int) -> bool:
        session.add(BranchCounter(branch=branch, count=new_count, version=1))
        await session.commit()
        return True

    async def _update(
        self,
        session: AsyncSession,
        branch: Branch,
        expected: CounterRecord,
        new_count: int,
    ) -> bool:
        result = await session.execute(
            update(BranchCounter)
            .where(
                BranchCounter.branch == branch,
                BranchCounter.version == expected.version,
            )
            .values(
                count=new_count,
                version=BranchCounter.version + 1,
                updated_at=get_utc_now(),
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            await session.rollback()
            return False
        await session.commit()
        return True

    async def read_all(self) -> Dict[Branch, CounterRecord]:
        async with self._session_factory() as session:
            try:
                result = await session.execute(select(BranchCounter))
            except SQLAlchemyError as e:
                raise StorageFault("Failed to read branch counters") from e
            return {Branch(row.branch): _to_record(row) for row in result.scalars().all()}
