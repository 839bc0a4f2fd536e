"""Player model."""
from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import Field, field_validator

from league.models.base import Record


class PlayingPosition(str, Enum):
    GOALKEEPER = "Goalkeeper"
    DEFENDER = "Defender"
    MIDFIELDER = "Midfielder"
    FORWARD = "Forward"


_POSITION_TOKENS = {
    "GK": PlayingPosition.GOALKEEPER,
    "GOALKEEPER": PlayingPosition.GOALKEEPER,
    "DEF": PlayingPosition.DEFENDER,
    "DEFENDER": PlayingPosition.DEFENDER,
    "MID": PlayingPosition.MIDFIELDER,
    "MIDFIELDER": PlayingPosition.MIDFIELDER,
    "FWD": PlayingPosition.FORWARD,
    "FORWARD": PlayingPosition.FORWARD,
}


def parse_position(token: Optional[str]) -> PlayingPosition:
    """Map GK/DEF/MID/FWD or a full position name (any case) to a position. Defaults to Forward."""
    if not token:
        return PlayingPosition.FORWARD
    return _POSITION_TOKENS.get(token.strip().upper(), PlayingPosition.FORWARD)


def is_position_token(token: Optional[str]) -> bool:
    return bool(token) and token.strip().upper() in _POSITION_TOKENS


class Player(Record):
    """A registered player. Belongs to at most one team roster at a time."""

    id: str
    name: str = Field(min_length=1)
    position: PlayingPosition = PlayingPosition.FORWARD
    jersey_number: int = Field(ge=1, le=99)
    mobile: Optional[str] = None
    photo: Optional[str] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name is required")
        return v
