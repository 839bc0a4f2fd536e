"""CSV parsers for bulk fixture and team imports.

Fixtures, one per line (header optional, detected by the word "team"):

    TeamAName, TeamBName[, YYYY-MM-DD[, HH:MM]]

Teams, blocks separated by blank lines:

    TEAM: <Team Name>[, <LogoURL>]
    <PlayerName>, <Pos>, <Jersey>[, <Mobile>]
"""
from __future__ import annotations

import csv
import io
import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import List, Optional, Tuple

from league.models import PlayingPosition, parse_position
from league.models.player import is_position_token
from league.services.fixtures import FixtureRecord

logger = logging.getLogger("asl.imports")

_DATE_FORMATS = ("%Y-%m-%d", "%d-%m-%Y", "%d/%m/%Y", "%Y/%m/%d")
_POSITION_OR_NUMBER = re.compile(r"^(GK|DEF|MID|FWD|\d+)$", re.I)


@dataclass
class PlayerRecord:
    name: str
    position: PlayingPosition = PlayingPosition.FORWARD
    jersey: Optional[int] = None
    mobile: Optional[str] = None


@dataclass
class TeamRecord:
    name: str
    logo: Optional[str] = None
    players: List[PlayerRecord] = field(default_factory=list)


def _rows(text: str) -> List[List[str]]:
    reader = csv.reader(io.StringIO(text.strip()), skipinitialspace=True)
    return [[cell.strip() for cell in row] for row in reader]


def parse_date(value: str) -> Optional[date]:
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    return None


def parse_time(value: str) -> Optional[time]:
    try:
        return datetime.strptime(value, "%H:%M").time()
    except ValueError:
        return None


def parse_fixture_csv(text: str) -> Tuple[List[FixtureRecord], List[str]]:
    """Parse fixture lines. Returns records plus one error message per rejected line."""
    records: List[FixtureRecord] = []
    errors: List[str] = []
    rows = _rows(text)
    if not rows:
        return records, errors
    start = 1 if "team" in ",".join(rows[0]).lower() else 0
    for i, parts in enumerate(rows[start:], start=start + 1):
        if not any(parts):
            continue
        if len(parts) < 2 or not parts[0] or not parts[1]:
            errors.append(f"Line {i}: Not enough fields")
            continue
        day = when = None
        if len(parts) > 2 and parts[2]:
            day = parse_date(parts[2])
            if day is None:
                errors.append(f'Line {i}: Invalid date "{parts[2]}"')
                continue
        if len(parts) > 3 and parts[3]:
            when = parse_time(parts[3])
            if when is None:
                errors.append(f'Line {i}: Invalid time "{parts[3]}"')
                continue
        records.append(FixtureRecord(team_a_name=parts[0], team_b_name=parts[1], date=day, time=when, line=i))
    logger.info("Parsed %d fixture rows (%d rejected)", len(records), len(errors))
    return records, errors


def _is_header(first: List[str]) -> bool:
    line = ",".join(first).lower()
    return ("team" in line and "name" in line and "position" in line) or (
        "player" in line and "jersey" in line
    )


def parse_team_csv(text: str) -> Tuple[List[TeamRecord], List[str]]:
    """Parse team blocks. Teams without any player line are dropped."""
    teams: List[TeamRecord] = []
    errors: List[str] = []
    lines = text.strip().splitlines()
    if not lines:
        return teams, errors
    start = 1 if _is_header(next(csv.reader([lines[0]]))) else 0
    current: Optional[TeamRecord] = None

    def close_team() -> None:
        nonlocal current
        if current is not None and current.players:
            teams.append(current)
        current = None

    for i, raw in enumerate(lines[start:], start=start + 1):
        line = raw.strip()
        if not line:
            close_team()
            continue
        parts = [p.strip() for p in next(csv.reader([line], skipinitialspace=True))]
        if parts[0].upper().startswith("TEAM:"):
            close_team()
            current = TeamRecord(name=parts[0][5:].strip(), logo=(parts[1] if len(parts) > 1 and parts[1] else None))
            if not current.name:
                errors.append(f"Line {i}: Missing team name")
                current = None
        elif current is None and len(parts) <= 2 and not (
            len(parts) > 1 and _POSITION_OR_NUMBER.match(parts[1])
        ):
            current = TeamRecord(name=parts[0], logo=(parts[1] if len(parts) > 1 and parts[1] else None))
        elif current is not None:
            name = parts[0]
            if not name:
                errors.append(f"Line {i}: Missing player name")
                continue
            pos = parts[1] if len(parts) > 1 else None
            if pos and not is_position_token(pos):
                logger.info("Line %d: unknown position %r, using Forward", i, pos)
            jersey = None
            if len(parts) > 2 and parts[2]:
                try:
                    jersey = int(parts[2])
                except ValueError:
                    errors.append(f'Line {i}: Invalid jersey "{parts[2]}", using running number')
            current.players.append(
                PlayerRecord(
                    name=name,
                    position=parse_position(pos),
                    jersey=jersey,
                    mobile=(parts[3] if len(parts) > 3 and parts[3] else None),
                )
            )
        else:
            errors.append(f'Line {i}: No team defined for player "{parts[0]}"')
    close_team()
    logger.info("Parsed %d teams (%d warnings)", len(teams), len(errors))
    return teams, errors
