"""Database engine and session management."""

from __future__ import annotations

from pathlib import Path

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base declarative class for all models."""

    pass


def create_engine(database_dsn: str) -> AsyncEngine:
    """Create the async engine for ``database_dsn``."""

    return create_async_engine(database_dsn, echo=False)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Return a session factory bound to ``engine``."""

    return async_sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)


def ensure_database_directory(engine: AsyncEngine) -> None:
    """Create the parent directory of a file-backed SQLite database."""

    url = engine.url
    if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)
