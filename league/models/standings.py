"""Standings rows and manual table overrides."""
from __future__ import annotations

from enum import Enum

from pydantic import Field

from league.models.base import Record


class StandingsRow(Record):
    """One team's line in a points table."""

    team_id: str
    played: int = Field(default=0, ge=0)
    won: int = Field(default=0, ge=0)
    drawn: int = Field(default=0, ge=0)
    lost: int = Field(default=0, ge=0)
    goals_for: int = Field(default=0, ge=0)
    goals_against: int = Field(default=0, ge=0)
    goal_difference: int = 0
    points: int = Field(default=0, ge=0)


class TableOverride(Record):
    """Admin-edited standings for one tournament; replaces the auto table until reset."""

    tournament_id: str
    data: list[StandingsRow] = Field(default_factory=list)


class TableMode(str, Enum):
    AUTO = "auto"
    MANUAL = "manual"
    UNAVAILABLE = "unavailable"


class StandingsView(Record):
    """Points table as served to readers."""

    tournament_id: str
    mode: TableMode
    rows: list[StandingsRow] = Field(default_factory=list)

    @property
    def available(self) -> bool:
        return self.mode != TableMode.UNAVAILABLE
