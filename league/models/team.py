"""Team model."""
from __future__ import annotations

from typing import Optional

from pydantic import Field, field_validator

from league.models.base import Record


class Team(Record):
    """Team with an ordered roster of player ids. Captain and manager are roster players."""

    id: str
    name: str = Field(min_length=1)
    logo: Optional[str] = None
    captain_id: str = ""
    manager_id: str = ""
    player_ids: list[str] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name is required")
        return v

    @field_validator("player_ids")
    @classmethod
    def dedupe_roster(cls, v: list[str]) -> list[str]:
        return list(dict.fromkeys(v))

    def has_player(self, player_id: str) -> bool:
        return player_id in self.player_ids
