"""Database Engine and Session Management"""

import re
import ssl
from typing import AsyncGenerator, Dict, Any, Tuple

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base

from academy.config import settings


def build_async_url(url: str) -> Tuple[str, Dict[str, Any]]:
    """
    Turn a plain postgresql:// URL into an asyncpg URL plus connect_args.

    asyncpg does not understand ``sslmode``; a require-style sslmode is
    replaced with an SSL context that encrypts without verifying the host.
    """
    async_url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
    connect_args: Dict[str, Any] = {}
    if re.search(r"[?&]sslmode=(require|required|verify-full)", async_url, re.I):
        ctx = ssl.create_default_context()
        ctx.check_hostname = False
        ctx.verify_mode = ssl.CERT_NONE
        connect_args["ssl"] = ctx
        async_url = re.sub(r"[?&]sslmode=[^&]+", "", async_url, flags=re.I)
        async_url = re.sub(r"\?&", "?", async_url).rstrip("?")
    if "?&" in async_url:
        async_url = async_url.replace("?&", "?")
    return async_url, connect_args


database_url, connect_args = build_async_url(settings.DATABASE_URL)

# Pooled engine; pool_pre_ping drops connections the server already closed
engine = create_async_engine(
    database_url,
    connect_args=connect_args,
    pool_pre_ping=True,
    pool_size=settings.DB_POOL_SIZE,
    max_overflow=settings.DB_MAX_OVERFLOW,
    pool_timeout=settings.DB_POOL_TIMEOUT,
    pool_recycle=settings.DB_POOL_RECYCLE,
    echo=settings.DEBUG,
    future=True,
)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)

# Base class for declarative models
Base = declarative_base()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Request-scoped database session.

    Commits when the request handler returns normally and rolls back
    when it raises.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_db() -> None:
    """Create tables directly (development only; Alembic owns the schema elsewhere)"""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Dispose of pooled connections"""
    await engine.dispose()
