"""Namespaced key/value store: one JSON array per entity kind, replaced atomically."""
from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Optional

from league.errors import QuotaExhausted

logger = logging.getLogger("asl.store")


class Kind(str, Enum):
    """Entity collections and the key each is stored under."""

    PLAYERS = "players"
    TEAMS = "teams"
    TOURNAMENTS = "tournaments"
    MATCHES = "matches"
    GOALS = "goals"
    NEWS = "news"
    STORIES = "stories"
    OVERRIDES = "overrides"
    LINEUPS = "lineups"
    AUTH = "auth"

    @property
    def key(self) -> str:
        return STORAGE_KEYS[self]


STORAGE_KEYS = {
    Kind.PLAYERS: "asl_players",
    Kind.TEAMS: "asl_teams",
    Kind.TOURNAMENTS: "asl_tournaments",
    Kind.MATCHES: "asl_matches",
    Kind.GOALS: "asl_goals",
    Kind.NEWS: "asl_news",
    Kind.STORIES: "asl_media_stories",
    Kind.OVERRIDES: "asl_manual_table",
    Kind.LINEUPS: "asl_lineups",
    Kind.AUTH: "asl_admin_auth",
}


def _entry_size(key: str, value: str) -> int:
    # Characters, matching what the SQL backend's length() reports
    return len(key) + len(value)


class Store(ABC):
    """Backend-agnostic store. Subclasses provide raw string get/put/delete."""

    def __init__(self, quota: Optional[int] = None):
        self.quota = quota or None

    @abstractmethod
    async def get_raw(self, key: str) -> Optional[str]:
        """Return the stored string for key, or None."""

    @abstractmethod
    async def put_raw(self, key: str, value: str) -> None:
        """Replace the value for key in a single atomic step."""

    @abstractmethod
    async def delete_raw(self, *keys: str) -> None:
        """Remove the given keys (missing keys are ignored)."""

    @abstractmethod
    async def usage(self) -> dict[str, int]:
        """Size used per key (key + value characters)."""

    async def read(self, kind: Kind) -> list[dict[str, Any]]:
        """Current snapshot of a collection; empty when unset or unreadable."""
        raw = await self.get_raw(kind.key)
        if not raw:
            return []
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Ignoring unreadable value under %s", kind.key)
            return []
        if isinstance(data, dict):
            # Single-record layout (e.g. one manual table)
            return [data]
        if not isinstance(data, list):
            logger.warning("Ignoring non-list value under %s", kind.key)
            return []
        return [row for row in data if isinstance(row, dict)]

    async def write(self, kind: Kind, records: list[dict[str, Any]]) -> None:
        """Replace the collection. Raises QuotaExhausted without committing anything."""
        payload = json.dumps(records, separators=(",", ":"), ensure_ascii=False)
        await self.put_raw(kind.key, payload)

    async def check_quota(self, key: str, value: str) -> None:
        if not self.quota:
            return
        used = await self.usage()
        needed = sum(size for k, size in used.items() if k != key) + _entry_size(key, value)
        if needed > self.quota:
            logger.warning("Quota exceeded writing %s (%d > %d chars)", key, needed, self.quota)
            raise QuotaExhausted(key, needed, self.quota)

    async def clear_all(self) -> None:
        await self.delete_raw(*(kind.key for kind in Kind))
        logger.info("Cleared all collections")

    async def close(self) -> None:
        pass


class MemoryStore(Store):
    """Dict-backed store (tests, scratch sessions)."""

    def __init__(self, quota: Optional[int] = None):
        super().__init__(quota)
        self._data: dict[str, str] = {}

    async def get_raw(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def put_raw(self, key: str, value: str) -> None:
        await self.check_quota(key, value)
        self._data[key] = value

    async def delete_raw(self, *keys: str) -> None:
        for key in keys:
            self._data.pop(key, None)

    async def usage(self) -> dict[str, int]:
        return {k: _entry_size(k, v) for k, v in self._data.items()}
