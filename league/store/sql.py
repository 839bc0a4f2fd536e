"""SQLAlchemy-backed store: a single key/value table on an async engine."""
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import String, Text, delete, func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.pool import StaticPool

from league.errors import QuotaExhausted
from league.store.base import Store

logger = logging.getLogger("asl.store")


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class StoreEntry(Base):
    """One namespaced collection (asl_players, asl_matches, ...) as JSON text."""

    __tablename__ = "store_entries"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)


def _is_full_error(error: OperationalError) -> bool:
    text = str(error.orig if error.orig is not None else error).lower()
    return "full" in text or "quota" in text


class SqlStore(Store):
    """Store over SQLAlchemy's asyncio engine. Call init() once before use."""

    def __init__(self, url: str, quota: Optional[int] = None, echo: bool = False):
        super().__init__(quota)
        kwargs = {}
        if url.startswith("sqlite") and ":memory:" in url:
            # One shared connection, otherwise every checkout sees an empty database
            kwargs["poolclass"] = StaticPool
        self.engine = create_async_engine(url, echo=echo, **kwargs)
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    async def init(self) -> None:
        """Create the table if it does not exist."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def get_raw(self, key: str) -> Optional[str]:
        async with self.session_factory() as session:
            row = await session.get(StoreEntry, key)
            return row.value if row else None

    async def put_raw(self, key: str, value: str) -> None:
        await self.check_quota(key, value)
        async with self.session_factory() as session:
            row = await session.get(StoreEntry, key)
            if row:
                row.value = value
            else:
                session.add(StoreEntry(key=key, value=value))
            try:
                await session.commit()
            except OperationalError as e:
                await session.rollback()
                if _is_full_error(e):
                    raise QuotaExhausted(key, len(key) + len(value)) from e
                raise

    async def delete_raw(self, *keys: str) -> None:
        if not keys:
            return
        async with self.session_factory() as session:
            await session.execute(delete(StoreEntry).where(StoreEntry.key.in_(keys)))
            await session.commit()

    async def usage(self) -> dict[str, int]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(StoreEntry.key, func.length(StoreEntry.key) + func.length(StoreEntry.value))
            )
            return {key: int(size or 0) for key, size in result.all()}

    async def close(self) -> None:
        await self.engine.dispose()
