"""Admin session flag."""
from __future__ import annotations

import logging

from league.store import Kind, Store

logger = logging.getLogger("asl.session")


class AdminSession:
    """The single logged-in flag, stored as the string "true" under the auth key."""

    def __init__(self, store: Store):
        self.store = store

    async def is_logged_in(self) -> bool:
        return (await self.store.get_raw(Kind.AUTH.key)) == "true"

    async def login(self) -> None:
        await self.store.put_raw(Kind.AUTH.key, "true")
        logger.info("Admin logged in")

    async def logout(self) -> None:
        await self.store.delete_raw(Kind.AUTH.key)
        logger.info("Admin logged out")
