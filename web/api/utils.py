"""Shared API utilities."""
from __future__ import annotations

from typing import Any, Iterable, Optional

from fastapi import Request

from league.engine import LeagueEngine
from league.models import Goal, Match, Player, Team


def get_engine(request: Request) -> LeagueEngine:
    """The engine created at startup. Tests swap it via dependency_overrides."""
    return request.app.state.engine


def team_display_name(team: Optional[Team]) -> str:
    """Team name for display. Dangling references show as "?"."""
    if not team:
        return "?"
    return team.name


def player_display_name(player: Optional[Player]) -> str:
    if not player:
        return "Unknown"
    return player.name


def match_response(match: Match, teams: dict[str, Team]) -> dict[str, Any]:
    data = match.dump()
    data["teamAName"] = team_display_name(teams.get(match.team_a_id))
    data["teamBName"] = team_display_name(teams.get(match.team_b_id))
    return data


def goal_response(goal: Goal, players: dict[str, Player]) -> dict[str, Any]:
    data = goal.dump()
    data["playerName"] = player_display_name(players.get(goal.player_id))
    return data


def by_id(records: Iterable[Any]) -> dict[str, Any]:
    return {r.id: r for r in records}
