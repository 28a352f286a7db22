"""Counter store selection"""

from functools import lru_cache

from academy.config import settings
from academy.core.logging import get_logger
from academy.store.base import CounterStore

logger = get_logger(__name__)


def build_counter_store(backend: str) -> CounterStore:
    """Instantiate the counter store named by ``backend`` ("sql" or "memory")"""
    if backend == "memory":
        from academy.store.memory import InMemoryCounterStore

        logger.warning("Using in-memory counter store; student IDs will not survive a restart")
        return InMemoryCounterStore()
    if backend == "sql":
        from academy.database import AsyncSessionLocal
        from academy.store.sql import SqlCounterStore

        return SqlCounterStore(AsyncSessionLocal)
    raise ValueError(f"Unknown counter backend: {backend}")


@lru_cache(maxsize=1)
def get_counter_store() -> CounterStore:
    """Process-wide counter store for the configured COUNTER_BACKEND"""
    return build_counter_store(settings.COUNTER_BACKEND)
