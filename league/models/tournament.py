"""Tournament model."""
from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Optional

from pydantic import Field, field_validator, model_validator

from league.models.base import Record


class TournamentType(str, Enum):
    LEAGUE = "League"
    KNOCKOUT = "Knockout"
    WEEKLY = "Weekly Match"


class Tournament(Record):
    """Tournament over a set of teams. At most one tournament is active at a time."""

    id: str
    name: str = Field(min_length=1)
    type: TournamentType = TournamentType.LEAGUE
    logo: Optional[str] = None
    banner: Optional[str] = None
    location: str = ""
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    team_ids: list[str] = Field(default_factory=list)
    is_active: bool = False

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def blank_date(cls, v):
        # Stored as "" when the admin left the field empty
        if v == "":
            return None
        return v

    @field_validator("team_ids")
    @classmethod
    def dedupe_teams(cls, v: list[str]) -> list[str]:
        return list(dict.fromkeys(v))

    @model_validator(mode="after")
    def check_window(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date is before start_date")
        return self

    def has_team(self, team_id: str) -> bool:
        return team_id in self.team_ids
