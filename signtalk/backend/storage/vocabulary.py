"""Vocabulary table: word/letter keys mapped to a category and a gesture media URL."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import Integer, String, func, select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import Mapped, mapped_column

from signtalk.backend.core.config import seed_vocabulary
from signtalk.backend.core.logging import get_logger
from signtalk.backend.storage.database import Base, ensure_database_directory

logger = get_logger(__name__)


class VocabularyEntry(Base):
    """A gesture the app knows how to show."""

    __tablename__ = "vocabulary"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    key: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    category: Mapped[str] = mapped_column(String(64), nullable=False)
    media_url: Mapped[str] = mapped_column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"VocabularyEntry(key={self.key!r}, category={self.category!r})"


def normalize_key(key: str) -> str:
    """Vocabulary keys are matched trimmed and upper-case."""
    return key.strip().upper()


class VocabularyStore:
    """Read-mostly access to the vocabulary table.

    There is deliberately no update or delete path; the table is seeded once
    and maintained out-of-band.
    """

    def __init__(self, engine: AsyncEngine, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._engine = engine
        self._session_factory = session_factory

    async def initialize(self) -> int:
        """Create the table and seed it when empty.

        Returns:
            Number of rows inserted (0 when the table already had data).
        """
        ensure_database_directory(self._engine)
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        async with self._session_factory() as session:
            total = await session.scalar(select(func.count()).select_from(VocabularyEntry))
            if total:
                logger.info("vocabulary_ready", entries=total)
                return 0

            rows = seed_vocabulary()
            session.add_all(
                VocabularyEntry(key=normalize_key(key), category=category, media_url=media_url)
                for key, category, media_url in rows
            )
            await session.commit()

        logger.info("vocabulary_seeded", entries=len(rows))
        return len(rows)

    async def get_all(self) -> list[VocabularyEntry]:
        async with self._session_factory() as session:
            result = await session.execute(select(VocabularyEntry).order_by(VocabularyEntry.key))
            return list(result.scalars())

    async def get_by_key(self, key: str) -> Optional[VocabularyEntry]:
        """Look up an entry case-insensitively; ``None`` when absent."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(VocabularyEntry).where(VocabularyEntry.key == normalize_key(key))
            )
            return result.scalar_one_or_none()

    async def count(self) -> int:
        async with self._session_factory() as session:
            total = await session.scalar(select(func.count()).select_from(VocabularyEntry))
            return int(total or 0)
