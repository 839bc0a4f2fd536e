"""Points table, top scorers and dashboard routes."""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from league.engine import LeagueEngine
from league.models import StandingsRow, StandingsView
from web.api.utils import by_id, get_engine, team_display_name
from web.auth import require_admin

router = APIRouter(prefix="/api", tags=["standings"])


class TableOverrideRequest(BaseModel):
    rows: list[StandingsRow]


class TableRowUpdate(BaseModel):
    played: Optional[int] = None
    won: Optional[int] = None
    drawn: Optional[int] = None
    lost: Optional[int] = None
    goal_difference: Optional[int] = None
    points: Optional[int] = None


async def _table_response(view: StandingsView, engine: LeagueEngine) -> dict:
    teams = by_id(await engine.list_teams())
    data = view.dump()
    for row in data["rows"]:
        row["teamName"] = team_display_name(teams.get(row["teamId"]))
    return data


@router.get("/table")
async def points_table(tournament_id: Optional[str] = None, engine: LeagueEngine = Depends(get_engine)):
    """Manual table when one is saved, otherwise the table derived from completed matches."""
    return await _table_response(await engine.points_table(tournament_id), engine)


@router.put("/table/override")
async def save_table_override(
    body: TableOverrideRequest,
    tournament_id: Optional[str] = None,
    admin: str = Depends(require_admin),
    engine: LeagueEngine = Depends(get_engine),
):
    return await _table_response(await engine.save_table_override(body.rows, tournament_id), engine)


@router.patch("/table/rows/{team_id}")
async def edit_table_row(
    team_id: str,
    body: TableRowUpdate,
    tournament_id: Optional[str] = None,
    admin: str = Depends(require_admin),
    engine: LeagueEngine = Depends(get_engine),
):
    view = await engine.edit_table_row(team_id, body.model_dump(exclude_none=True), tournament_id)
    return await _table_response(view, engine)


@router.delete("/table/override")
async def reset_table_override(
    tournament_id: Optional[str] = None,
    admin: str = Depends(require_admin),
    engine: LeagueEngine = Depends(get_engine),
):
    """Drop the manual table and go back to the derived one."""
    return await _table_response(await engine.reset_table_override(tournament_id), engine)


@router.get("/scorers")
async def top_scorers(tournament_id: Optional[str] = None, engine: LeagueEngine = Depends(get_engine)):
    return [
        {
            "player": entry.player.dump(),
            "teamId": entry.team.id if entry.team else None,
            "teamName": team_display_name(entry.team),
            "goals": entry.goals,
        }
        for entry in await engine.top_scorers(tournament_id)
    ]


@router.get("/dashboard")
async def dashboard(engine: LeagueEngine = Depends(get_engine)):
    return await engine.dashboard()
