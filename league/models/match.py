"""Match, goal and lineup models."""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field, field_validator

from league.models.base import Record


class MatchStatus(str, Enum):
    UPCOMING = "Upcoming"
    LIVE = "Live"
    COMPLETED = "Completed"


class Side(str, Enum):
    """Which team of a match an event belongs to."""

    A = "A"
    B = "B"


class Match(Record):
    """Fixture between two teams of a tournament."""

    id: str
    tournament_id: str
    team_a_id: str
    team_b_id: str
    score_a: int = Field(default=0, ge=0)
    score_b: int = Field(default=0, ge=0)
    status: MatchStatus = MatchStatus.UPCOMING
    scheduled_at: datetime
    player_of_the_match: Optional[str] = None

    @field_validator("scheduled_at")
    @classmethod
    def local_kickoff(cls, v: datetime) -> datetime:
        # Naive kickoffs are local time, like generated fixtures
        if v.tzinfo is None:
            return v.astimezone()
        return v

    def team_id(self, side: Side) -> str:
        return self.team_a_id if side == Side.A else self.team_b_id

    def involves(self, team_id: str) -> bool:
        return team_id in (self.team_a_id, self.team_b_id)


class Goal(Record):
    """Goal event. Append-only within its match; minute None means unknown."""

    id: str
    match_id: str
    team_id: str
    player_id: str
    minute: Optional[int] = Field(default=None, ge=0, le=130)


class Lineup(Record):
    """Starting lineups picked for a match, one list per side."""

    match_id: str
    team_a_lineup: list[str] = Field(default_factory=list)
    team_b_lineup: list[str] = Field(default_factory=list)

    @field_validator("team_a_lineup", "team_b_lineup")
    @classmethod
    def dedupe(cls, v: list[str]) -> list[str]:
        return list(dict.fromkeys(v))
