"""Async engine, request-scoped sessions and row-policy context.

One session per request, committed on success. On PostgreSQL the caller is
published to the row-level policies through transaction-local settings
(``set_config(name, value, true)``), which reset at commit or rollback.
"""

from typing import Any, Optional, TypeVar

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from hrdesk.config import settings

ModelT = TypeVar("ModelT")

engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.ENVIRONMENT == "development",
    pool_pre_ping=True,
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    pass


async def get_db() -> AsyncSession:
    """FastAPI dependency: one session per request, committed on success."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


# ── Row-policy context ──────────────────────────────────────────────

def is_postgresql(session: AsyncSession) -> bool:
    return session.bind is not None and session.bind.dialect.name == "postgresql"


async def set_local(session: AsyncSession, name: str, value: str) -> None:
    """Set a transaction-local setting read by the row-level policies.

    No-op on other backends (the SQLite test database has no policies).
    """
    if not is_postgresql(session):
        return
    await session.execute(
        text("SELECT set_config(:name, :value, true)"),
        {"name": name, "value": value},
    )


async def get_for_update(
    session: AsyncSession,
    model: type[ModelT],
    ident: Any,
) -> Optional[ModelT]:
    """Load a row under ``SELECT ... FOR UPDATE``, bypassing the identity map.

    Concurrent writers queue on the row lock and then see the committed
    state, so state checks made after this call hold until commit.
    """
    return await session.get(
        model, ident, with_for_update=True, populate_existing=True,
    )
