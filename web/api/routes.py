"""API routes for players, teams, tournaments and matches."""
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from league.engine import LeagueEngine
from league.models import MatchStatus, PlayingPosition, Side, TournamentType
from league.services.imports import parse_fixture_csv, parse_team_csv
from web.api.utils import by_id, get_engine, goal_response, match_response
from web.auth import require_admin

logger = logging.getLogger("asl.api")

router = APIRouter(prefix="/api", tags=["league"])


class PlayerCreate(BaseModel):
    name: str
    position: PlayingPosition = PlayingPosition.FORWARD
    jersey_number: int = 1
    mobile: Optional[str] = None
    photo: Optional[str] = None


class PlayerUpdate(BaseModel):
    name: Optional[str] = None
    position: Optional[PlayingPosition] = None
    jersey_number: Optional[int] = None
    mobile: Optional[str] = None
    photo: Optional[str] = None


class TeamCreate(BaseModel):
    name: str
    player_ids: list[str] = Field(default_factory=list)
    logo: Optional[str] = None
    captain_id: Optional[str] = None
    manager_id: Optional[str] = None


class TeamUpdate(BaseModel):
    name: Optional[str] = None
    player_ids: Optional[list[str]] = None
    logo: Optional[str] = None
    captain_id: Optional[str] = None
    manager_id: Optional[str] = None


class TournamentCreate(BaseModel):
    name: str
    type: TournamentType = TournamentType.LEAGUE
    team_ids: list[str] = Field(default_factory=list)
    location: str = ""
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    logo: Optional[str] = None
    banner: Optional[str] = None


class TournamentUpdate(BaseModel):
    name: Optional[str] = None
    type: Optional[TournamentType] = None
    team_ids: Optional[list[str]] = None
    location: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    logo: Optional[str] = None
    banner: Optional[str] = None


class MatchCreate(BaseModel):
    team_a_id: str
    team_b_id: str
    scheduled_at: datetime
    tournament_id: Optional[str] = None


class MatchUpdate(BaseModel):
    team_a_id: Optional[str] = None
    team_b_id: Optional[str] = None
    scheduled_at: Optional[datetime] = None


class GoalCreate(BaseModel):
    side: Side
    player_id: str
    minute: Optional[int] = None


class PlayerOfTheMatch(BaseModel):
    player_id: str


class LineupUpdate(BaseModel):
    team_a_lineup: list[str] = Field(default_factory=list)
    team_b_lineup: list[str] = Field(default_factory=list)


class CsvImport(BaseModel):
    text: str


# --- Players ---


@router.get("/players")
async def list_players(engine: LeagueEngine = Depends(get_engine)):
    return [p.dump() for p in await engine.list_players()]


@router.post("/players")
async def create_player(body: PlayerCreate, admin: str = Depends(require_admin), engine: LeagueEngine = Depends(get_engine)):
    return (await engine.create_player(**body.model_dump())).dump()


@router.get("/players/{player_id}")
async def get_player(player_id: str, engine: LeagueEngine = Depends(get_engine)):
    return (await engine.get_player(player_id)).dump()


@router.patch("/players/{player_id}")
async def update_player(
    player_id: str, body: PlayerUpdate, admin: str = Depends(require_admin), engine: LeagueEngine = Depends(get_engine)
):
    return (await engine.update_player(player_id, **body.model_dump(exclude_unset=True))).dump()


@router.delete("/players/{player_id}")
async def delete_player(player_id: str, admin: str = Depends(require_admin), engine: LeagueEngine = Depends(get_engine)):
    await engine.delete_player(player_id)
    return {"ok": True}


# --- Teams ---


@router.get("/teams")
async def list_teams(engine: LeagueEngine = Depends(get_engine)):
    return [t.dump() for t in await engine.list_teams()]


@router.post("/teams")
async def create_team(body: TeamCreate, admin: str = Depends(require_admin), engine: LeagueEngine = Depends(get_engine)):
    return (await engine.create_team(**body.model_dump())).dump()


@router.post("/teams/import")
async def import_teams(body: CsvImport, admin: str = Depends(require_admin), engine: LeagueEngine = Depends(get_engine)):
    """Bulk-create teams and players from TEAM: blocks. Parser warnings come back with the result."""
    records, errors = parse_team_csv(body.text)
    report = await engine.import_teams(records)
    return {
        "created": [t.dump() for t in report.created],
        "errors": errors + report.errors,
    }


@router.get("/teams/{team_id}")
async def get_team(team_id: str, engine: LeagueEngine = Depends(get_engine)):
    return (await engine.get_team(team_id)).dump()


@router.get("/teams/{team_id}/profile")
async def team_profile(team_id: str, engine: LeagueEngine = Depends(get_engine)):
    profile = await engine.team_profile(team_id)
    return {
        "team": profile.team.dump(),
        "players": [p.dump() for p in profile.players],
        "captain": profile.captain.dump() if profile.captain else None,
        "manager": profile.manager.dump() if profile.manager else None,
    }


@router.patch("/teams/{team_id}")
async def update_team(
    team_id: str, body: TeamUpdate, admin: str = Depends(require_admin), engine: LeagueEngine = Depends(get_engine)
):
    return (await engine.update_team(team_id, **body.model_dump(exclude_unset=True))).dump()


@router.delete("/teams/{team_id}")
async def delete_team(team_id: str, admin: str = Depends(require_admin), engine: LeagueEngine = Depends(get_engine)):
    await engine.delete_team(team_id)
    return {"ok": True}


# --- Tournaments ---


@router.get("/tournaments")
async def list_tournaments(engine: LeagueEngine = Depends(get_engine)):
    return [t.dump() for t in await engine.list_tournaments()]


@router.get("/tournaments/active")
async def active_tournament(engine: LeagueEngine = Depends(get_engine)):
    """The active tournament, or null when none exists yet."""
    tournament = await engine.active_tournament()
    return tournament.dump() if tournament else None


@router.post("/tournaments")
async def create_tournament(
    body: TournamentCreate, admin: str = Depends(require_admin), engine: LeagueEngine = Depends(get_engine)
):
    return (await engine.create_tournament(**body.model_dump())).dump()


@router.get("/tournaments/{tournament_id}")
async def get_tournament(tournament_id: str, engine: LeagueEngine = Depends(get_engine)):
    return (await engine.get_tournament(tournament_id)).dump()


@router.patch("/tournaments/{tournament_id}")
async def update_tournament(
    tournament_id: str, body: TournamentUpdate, admin: str = Depends(require_admin), engine: LeagueEngine = Depends(get_engine)
):
    return (await engine.update_tournament(tournament_id, **body.model_dump(exclude_unset=True))).dump()


@router.post("/tournaments/{tournament_id}/activate")
async def activate_tournament(
    tournament_id: str, admin: str = Depends(require_admin), engine: LeagueEngine = Depends(get_engine)
):
    return (await engine.activate_tournament(tournament_id)).dump()


@router.delete("/tournaments/{tournament_id}")
async def delete_tournament(
    tournament_id: str, admin: str = Depends(require_admin), engine: LeagueEngine = Depends(get_engine)
):
    """Delete tournament, its matches and its manual table."""
    await engine.delete_tournament(tournament_id)
    return {"ok": True}


@router.post("/tournaments/{tournament_id}/fixtures/generate")
async def generate_fixtures(
    tournament_id: str, admin: str = Depends(require_admin), engine: LeagueEngine = Depends(get_engine)
):
    created = await engine.generate_fixtures(tournament_id)
    teams = by_id(await engine.list_teams())
    return [match_response(m, teams) for m in created]


# --- Matches ---


@router.get("/matches")
async def list_matches(
    tournament_id: Optional[str] = None,
    status: Optional[MatchStatus] = None,
    engine: LeagueEngine = Depends(get_engine),
):
    """Matches, latest first. Defaults to the active tournament when one exists."""
    if tournament_id is None:
        active = await engine.active_tournament()
        tournament_id = active.id if active else None
    teams = by_id(await engine.list_teams())
    return [match_response(m, teams) for m in await engine.list_matches(tournament_id, status)]


@router.post("/matches")
async def create_match(body: MatchCreate, admin: str = Depends(require_admin), engine: LeagueEngine = Depends(get_engine)):
    match = await engine.create_match(**body.model_dump())
    return match_response(match, by_id(await engine.list_teams()))


@router.post("/matches/import")
async def import_fixtures(body: CsvImport, admin: str = Depends(require_admin), engine: LeagueEngine = Depends(get_engine)):
    """Create Upcoming matches in the active tournament from fixture lines."""
    records, errors = parse_fixture_csv(body.text)
    report = await engine.import_fixtures(records)
    teams = by_id(await engine.list_teams())
    return {
        "created": [match_response(m, teams) for m in report.created],
        "errors": errors + report.errors,
    }


@router.get("/matches/live")
async def live_match(engine: LeagueEngine = Depends(get_engine)):
    """The live match of the active tournament with its goals, or null."""
    match = await engine.live_match()
    if match is None:
        return None
    teams = by_id(await engine.list_teams())
    players = by_id(await engine.list_players())
    data = match_response(match, teams)
    data["goals"] = [goal_response(g, players) for g in await engine.goals_for_match(match.id)]
    return data


@router.get("/matches/recent")
async def recent_results(limit: int = 2, engine: LeagueEngine = Depends(get_engine)):
    teams = by_id(await engine.list_teams())
    return [match_response(m, teams) for m in await engine.recent_results(limit)]


@router.get("/matches/{match_id}")
async def get_match(match_id: str, engine: LeagueEngine = Depends(get_engine)):
    return match_response(await engine.get_match(match_id), by_id(await engine.list_teams()))


@router.patch("/matches/{match_id}")
async def update_match(
    match_id: str, body: MatchUpdate, admin: str = Depends(require_admin), engine: LeagueEngine = Depends(get_engine)
):
    match = await engine.controller(match_id).edit(**body.model_dump(exclude_unset=True))
    return match_response(match, by_id(await engine.list_teams()))


@router.delete("/matches/{match_id}")
async def delete_match(match_id: str, admin: str = Depends(require_admin), engine: LeagueEngine = Depends(get_engine)):
    await engine.controller(match_id).delete()
    return {"ok": True}


@router.post("/matches/{match_id}/start")
async def start_match(match_id: str, admin: str = Depends(require_admin), engine: LeagueEngine = Depends(get_engine)):
    match = await engine.controller(match_id).start()
    return match_response(match, by_id(await engine.list_teams()))


@router.post("/matches/{match_id}/end")
async def end_match(match_id: str, admin: str = Depends(require_admin), engine: LeagueEngine = Depends(get_engine)):
    match = await engine.controller(match_id).end()
    return match_response(match, by_id(await engine.list_teams()))


@router.post("/matches/{match_id}/goals")
async def add_goal(
    match_id: str, body: GoalCreate, admin: str = Depends(require_admin), engine: LeagueEngine = Depends(get_engine)
):
    goal = await engine.controller(match_id).goal(body.side, body.player_id, body.minute)
    return goal_response(goal, by_id(await engine.list_players()))


@router.get("/matches/{match_id}/goals")
async def list_goals(match_id: str, engine: LeagueEngine = Depends(get_engine)):
    players = by_id(await engine.list_players())
    return [goal_response(g, players) for g in await engine.goals_for_match(match_id)]


@router.post("/matches/{match_id}/player-of-the-match")
async def set_player_of_the_match(
    match_id: str, body: PlayerOfTheMatch, admin: str = Depends(require_admin), engine: LeagueEngine = Depends(get_engine)
):
    match = await engine.controller(match_id).set_player_of_the_match(body.player_id)
    return match_response(match, by_id(await engine.list_teams()))


@router.get("/matches/{match_id}/lineup")
async def get_lineup(match_id: str, engine: LeagueEngine = Depends(get_engine)):
    return (await engine.get_lineup(match_id)).dump()


@router.put("/matches/{match_id}/lineup")
async def set_lineup(
    match_id: str, body: LineupUpdate, admin: str = Depends(require_admin), engine: LeagueEngine = Depends(get_engine)
):
    return (await engine.set_lineup(match_id, body.team_a_lineup, body.team_b_lineup)).dump()
