"""Database engine, session factory, and declarative base.

All tables live in one schema. Tenant isolation is enforced in the query
layer (see fleetdesk.auth.scope), not by the database.

Two FastAPI dependencies:
  - get_db()               → one request-scoped session, commit on success
  - get_session_factory()  → the sessionmaker itself, for handlers that
                             open several sessions (dashboard fan-out)
"""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from fleetdesk.config import settings

_engine_kwargs: dict = {"echo": settings.debug and settings.environment == "development"}
if not settings.database_url.startswith("sqlite"):
    _engine_kwargs.update(pool_size=20, max_overflow=10, pool_pre_ping=True)

engine = create_async_engine(settings.database_url, **_engine_kwargs)

async_session = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


class Base(DeclarativeBase):
    pass


# ── Session dependencies ────────────────────────────────────

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a session; commit when the handler returns, roll back on error."""
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Return the session factory (overridden in tests)."""
    return async_session
