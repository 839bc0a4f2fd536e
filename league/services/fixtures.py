"""Fixture generation: round-robin schedules and parsed fixture records."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import List, Optional

import config
from league.models import Match, MatchStatus, Tournament, new_id


@dataclass
class FixtureRecord:
    """One parsed fixture row: team names plus optional date and time."""

    team_a_name: str
    team_b_name: str
    date: Optional[date] = None
    time: Optional[time] = None
    line: int = 0


def kickoff_at(day: date, when: Optional[time] = None) -> datetime:
    """Local, timezone-aware kickoff on day (default kickoff time when when is None)."""
    return datetime.combine(day, when or config.DEFAULT_KICKOFF).astimezone()


def fixture_spacing() -> timedelta:
    return timedelta(days=config.FIXTURE_SPACING_DAYS)


def round_robin(
    tournament: Tournament,
    start: datetime,
    spacing: Optional[timedelta] = None,
) -> List[Match]:
    """Single round-robin over tournament.team_ids in stored order.

    Pair (i, j) with i < j becomes one Upcoming match, team i as team A.
    Kickoffs start at start and advance by spacing per match.
    """
    spacing = spacing if spacing is not None else fixture_spacing()
    team_ids = tournament.team_ids
    matches: List[Match] = []
    for i in range(len(team_ids)):
        for j in range(i + 1, len(team_ids)):
            matches.append(
                Match(
                    id=new_id(),
                    tournament_id=tournament.id,
                    team_a_id=team_ids[i],
                    team_b_id=team_ids[j],
                    status=MatchStatus.UPCOMING,
                    scheduled_at=start + spacing * len(matches),
                )
            )
    return matches
