"""Pytest configuration and fixtures for engine and API tests."""
import os

# Set test env BEFORE any imports that use config
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ADMIN_PASSWORD"] = "testpass123"
os.environ["RANDOM_GOAL_MINUTE"] = "false"

from datetime import datetime, timezone

import pytest
from httpx import ASGITransport, AsyncClient

from league.engine import LeagueEngine
from league.models import Side, TournamentType
from league.store import MemoryStore, SqlStore
from web.api.main import app
from web.api.utils import get_engine

KICKOFF = datetime(2024, 5, 1, 19, 0, tzinfo=timezone.utc)


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
async def sql_store():
    """SQL store on an in-memory sqlite database (lifespan doesn't run with httpx)."""
    s = SqlStore("sqlite+aiosqlite:///:memory:")
    await s.init()
    yield s
    await s.close()


@pytest.fixture
def engine(store):
    return LeagueEngine(store)


@pytest.fixture
async def client(engine):
    """Async HTTP client for testing the API against the test engine."""
    app.dependency_overrides[get_engine] = lambda: engine
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
async def auth_headers(client):
    """Login as admin and return Authorization headers for protected endpoints."""
    r = await client.post("/api/auth/login", json={"password": "testpass123"})
    assert r.status_code == 200, f"Login failed: {r.text}"
    token = r.json()["access_token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_team(engine):
    """Factory: create players and a team holding them. Returns (team, players)."""

    async def _make(name, *player_names):
        players = []
        for number, player_name in enumerate(player_names or (f"{name} Player",), start=1):
            players.append(await engine.create_player(player_name, jersey_number=number))
        team = await engine.create_team(name, [p.id for p in players])
        return team, players

    return _make


@pytest.fixture
async def league(engine, make_team):
    """Active League tournament with teams A, B, C (two players each)."""
    teams = {}
    players = {}
    for name in ("A", "B", "C"):
        team, squad = await make_team(name, f"{name}1", f"{name}2")
        teams[name] = team
        players[name] = squad
    tournament = await engine.create_tournament(
        "ASL Season 1", TournamentType.LEAGUE, [t.id for t in teams.values()]
    )
    return tournament, teams, players


@pytest.fixture
def play(engine):
    """Factory: play a match through the live controller and return it Completed."""

    async def _play(tournament, team_a, team_b, score_a, score_b, kickoff=KICKOFF):
        match = await engine.create_match(team_a.id, team_b.id, kickoff, tournament.id)
        live = engine.controller(match.id)
        await live.start()
        for _ in range(score_a):
            await live.goal(Side.A, team_a.player_ids[0])
        for _ in range(score_b):
            await live.goal(Side.B, team_b.player_ids[0])
        return await live.end()

    return _play
