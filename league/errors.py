"""Error kinds surfaced by the league engine."""
from __future__ import annotations

from typing import Optional


class LeagueError(Exception):
    """Base class for every error the engine reports to its callers."""

    kind = "league_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class QuotaExhausted(LeagueError):
    """The store cannot fit the write. Nothing was committed."""

    kind = "quota_exhausted"

    def __init__(self, key: str, needed: int, quota: Optional[int] = None):
        if quota:
            message = f"Store quota exhausted writing {key}: {needed} characters needed, {quota} allowed"
        else:
            message = f"Store is full, could not write {key}"
        super().__init__(message)
        self.key = key
        self.needed = needed
        self.quota = quota


class InvalidTransition(LeagueError):
    """A state-machine guard rejected the operation."""

    kind = "invalid_transition"


class UnknownReference(LeagueError):
    """An id (team, player, tournament, match...) does not resolve."""

    kind = "unknown_reference"

    def __init__(self, entity: str, entity_id: str):
        super().__init__(f"{entity.capitalize()} not found: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class ValidationFailure(LeagueError):
    """A required field is missing or a value is out of range."""

    kind = "validation_failure"
