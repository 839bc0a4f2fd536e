"""Tests for tournament lifecycle, fixtures and entity CRUD through the engine."""
from datetime import date, datetime, timedelta

import pytest

from league.errors import InvalidTransition, UnknownReference, ValidationFailure
from league.models import MatchStatus, TableMode, TournamentType
from league.services.fixtures import FixtureRecord


@pytest.mark.asyncio
async def test_first_tournament_is_active(engine, make_team):
    team, _ = await make_team("A")
    first = await engine.create_tournament("Season 1", team_ids=[team.id])
    second = await engine.create_tournament("Season 2", team_ids=[team.id])
    assert first.is_active and not second.is_active
    assert (await engine.active_tournament()).id == first.id


@pytest.mark.asyncio
async def test_single_active_after_any_activation_sequence(engine):
    ids = [(await engine.create_tournament(f"T{i}")).id for i in range(4)]
    for tid in (ids[2], ids[0], ids[3], ids[1], ids[2]):
        await engine.activate_tournament(tid)
        active = [t for t in await engine.list_tournaments() if t.is_active]
        assert [t.id for t in active] == [tid]


@pytest.mark.asyncio
async def test_activate_twice_rejected(engine):
    t = await engine.create_tournament("Only")
    with pytest.raises(InvalidTransition):
        await engine.activate_tournament(t.id)
    with pytest.raises(UnknownReference):
        await engine.activate_tournament("nope")


@pytest.mark.asyncio
async def test_tournament_needs_known_teams(engine):
    with pytest.raises(UnknownReference):
        await engine.create_tournament("Bad", team_ids=["t_missing"])


@pytest.mark.asyncio
async def test_end_before_start_rejected(engine):
    with pytest.raises(ValidationFailure):
        await engine.create_tournament("Bad", start_date=date(2024, 6, 1), end_date=date(2024, 5, 1))


@pytest.mark.asyncio
async def test_cascade_delete(engine, make_team):
    a, _ = await make_team("A")
    b, _ = await make_team("B")
    keep = await engine.create_tournament("Keep", team_ids=[a.id, b.id])
    doomed = await engine.create_tournament("Doomed", team_ids=[a.id, b.id])
    await engine.generate_fixtures(keep.id)
    created = await engine.generate_fixtures(doomed.id)
    assert len(created) == 1
    await engine.save_table_override((await engine.points_table(doomed.id)).rows, doomed.id)
    teams_before = await engine.list_teams()

    await engine.delete_tournament(doomed.id)

    assert all(m.tournament_id != doomed.id for m in await engine.list_matches())
    assert len(await engine.list_matches(keep.id)) == 1
    assert await engine.overrides.get_override(doomed.id) is None
    assert await engine.list_teams() == teams_before
    with pytest.raises(UnknownReference):
        await engine.get_tournament(doomed.id)


@pytest.mark.asyncio
async def test_reactivation_keeps_override(engine, league):
    tournament, teams, _ = league
    await engine.save_table_override((await engine.points_table()).rows)
    other = await engine.create_tournament("Friendly", team_ids=[teams["A"].id])
    await engine.activate_tournament(other.id)
    await engine.activate_tournament(tournament.id)
    assert (await engine.points_table()).mode == TableMode.MANUAL


@pytest.mark.asyncio
async def test_round_robin_fixtures(engine, league):
    tournament, teams, _ = league
    created = await engine.generate_fixtures()
    pairs = [(m.team_a_id, m.team_b_id) for m in created]
    a, b, c = teams["A"].id, teams["B"].id, teams["C"].id
    assert pairs == [(a, b), (a, c), (b, c)]
    assert all(m.status == MatchStatus.UPCOMING for m in created)
    gaps = [later.scheduled_at - earlier.scheduled_at for earlier, later in zip(created, created[1:])]
    assert gaps == [timedelta(days=3), timedelta(days=3)]
    assert created[0].scheduled_at.date() == engine.clock().date()


@pytest.mark.asyncio
async def test_round_robin_single_team_creates_nothing(engine, make_team):
    team, _ = await make_team("Solo")
    t = await engine.create_tournament("Solo Cup", team_ids=[team.id])
    assert await engine.generate_fixtures(t.id) == []


@pytest.mark.asyncio
async def test_no_active_tournament(engine):
    with pytest.raises(ValidationFailure):
        await engine.points_table()
    with pytest.raises(ValidationFailure):
        await engine.generate_fixtures()


@pytest.mark.asyncio
async def test_import_fixtures(engine, league, make_team):
    tournament, teams, _ = league
    outsider, _ = await make_team("Outsiders")
    records = [
        FixtureRecord("a", "B", date=date(2024, 7, 1), line=1),
        FixtureRecord("B", "C", line=2),
        FixtureRecord("A", "Nobody", line=3),
        FixtureRecord("A", "Outsiders", line=4),
    ]
    report = await engine.import_fixtures(records)
    assert report.created_count == 2
    assert report.error_count == 2
    assert report.created[0].team_a_id == teams["A"].id
    assert report.created[0].scheduled_at.date() == date(2024, 7, 1)
    assert report.created[1].scheduled_at.date() == engine.clock().date() + timedelta(days=3)
    assert "Nobody" in report.errors[0]
    assert len(await engine.list_matches()) == 2


@pytest.mark.asyncio
async def test_match_needs_tournament_teams(engine, league, make_team):
    tournament, teams, _ = league
    outsider, _ = await make_team("Z")
    kickoff = engine.clock()
    with pytest.raises(ValidationFailure):
        await engine.create_match(teams["A"].id, outsider.id, kickoff)
    with pytest.raises(InvalidTransition):
        await engine.create_match(teams["A"].id, teams["A"].id, kickoff)


@pytest.mark.asyncio
async def test_recent_results_and_live(engine, league, play):
    tournament, teams, _ = league
    first = await play(tournament, teams["A"], teams["B"], 1, 0)
    second = await play(tournament, teams["B"], teams["C"], 2, 2, kickoff=first.scheduled_at + timedelta(days=3))
    await play(tournament, teams["A"], teams["C"], 0, 1, kickoff=first.scheduled_at - timedelta(days=3))
    recent = await engine.recent_results()
    assert [m.id for m in recent] == [second.id, first.id]
    assert await engine.live_match() is None
    upcoming = await engine.create_match(teams["A"].id, teams["C"].id, engine.clock())
    await engine.controller(upcoming.id).start()
    assert (await engine.live_match()).id == upcoming.id


@pytest.mark.asyncio
async def test_team_defaults_captain_and_manager(engine):
    p1 = await engine.create_player("Imran", jersey_number=10)
    p2 = await engine.create_player("Kamal", jersey_number=7)
    team = await engine.create_team("Lions", [p1.id, p2.id])
    assert team.captain_id == p1.id and team.manager_id == p1.id
    updated = await engine.update_team(team.id, player_ids=[p2.id])
    assert updated.captain_id == p2.id and updated.manager_id == p2.id
    profile = await engine.team_profile(team.id)
    assert [p.id for p in profile.players] == [p2.id]
    assert profile.captain.id == p2.id


@pytest.mark.asyncio
async def test_team_validation(engine):
    p = await engine.create_player("Rafi")
    with pytest.raises(ValidationFailure):
        await engine.create_team("", [p.id])
    with pytest.raises(ValidationFailure):
        await engine.create_team("Empty", [])
    with pytest.raises(UnknownReference):
        await engine.create_team("Ghosts", ["p_missing"])
    with pytest.raises(ValidationFailure):
        await engine.create_team("Lions", [p.id], captain_id="p_other")


@pytest.mark.asyncio
async def test_player_validation_and_delete(engine):
    with pytest.raises(ValidationFailure):
        await engine.create_player("Tall", jersey_number=100)
    with pytest.raises(ValidationFailure):
        await engine.create_player("   ")
    p = await engine.create_player("Sumon", jersey_number=9)
    team = await engine.create_team("Tigers", [p.id])
    await engine.delete_player(p.id)
    # Rosters keep the dangling id
    assert (await engine.get_team(team.id)).player_ids == [p.id]
    assert (await engine.team_profile(team.id)).captain is None
    with pytest.raises(UnknownReference):
        await engine.delete_player(p.id)


@pytest.mark.asyncio
async def test_knockout_has_unavailable_table(engine, make_team):
    team, _ = await make_team("K")
    await engine.create_tournament("Cup", TournamentType.KNOCKOUT, [team.id])
    view = await engine.points_table()
    assert view.mode == TableMode.UNAVAILABLE


@pytest.mark.asyncio
async def test_naive_and_aware_kickoffs_sort_together(engine, league):
    tournament, teams, _ = league
    generated = await engine.generate_fixtures()
    naive = datetime(2026, 11, 1, 19, 0)
    manual = await engine.create_match(teams["A"].id, teams["B"].id, naive)
    assert manual.scheduled_at.tzinfo is not None
    assert manual.scheduled_at == naive.astimezone()
    matches = await engine.list_matches(tournament.id)
    assert len(matches) == len(generated) + 1
    edited = await engine.controller(generated[0].id).edit(scheduled_at=datetime(2020, 1, 1, 18, 0))
    assert edited.scheduled_at.tzinfo is not None
    assert (await engine.list_matches(tournament.id))[-1].id == edited.id
