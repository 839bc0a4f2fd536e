"""Tests for the points table calculator."""
from datetime import datetime, timezone

import pytest

from league.models import Match, MatchStatus, TableMode, Tournament, TournamentType
from league.services.standings import calculate_table, derive_table


def _match(mid, a, b, score_a, score_b, status=MatchStatus.COMPLETED, tournament_id="t1"):
    return Match(
        id=mid,
        tournament_id=tournament_id,
        team_a_id=a,
        team_b_id=b,
        score_a=score_a,
        score_b=score_b,
        status=status,
        scheduled_at=datetime(2024, 5, 1, 19, tzinfo=timezone.utc),
    )


@pytest.fixture
def tournament():
    return Tournament(id="t1", name="League", team_ids=["A", "B", "C"])


def test_three_team_round_robin(tournament):
    matches = [
        _match("m1", "A", "B", 2, 1),
        _match("m2", "B", "C", 1, 1),
        _match("m3", "C", "A", 0, 3),
    ]
    rows = calculate_table(tournament, matches)
    assert [r.team_id for r in rows] == ["A", "B", "C"]
    a, b, c = rows
    assert (a.played, a.won, a.drawn, a.lost, a.goals_for, a.goals_against, a.goal_difference, a.points) == (
        2, 2, 0, 0, 5, 1, 4, 6,
    )
    assert (b.played, b.won, b.drawn, b.lost, b.goals_for, b.goals_against, b.goal_difference, b.points) == (
        2, 0, 1, 1, 2, 3, -1, 1,
    )
    assert (c.played, c.won, c.drawn, c.lost, c.goals_for, c.goals_against, c.goal_difference, c.points) == (
        2, 0, 1, 1, 1, 4, -3, 1,
    )


def test_row_arithmetic_holds(tournament):
    matches = [
        _match("m1", "A", "B", 4, 4),
        _match("m2", "B", "C", 0, 2),
        _match("m3", "A", "C", 1, 0),
        _match("m4", "C", "A", 3, 3),
    ]
    for row in calculate_table(tournament, matches):
        assert row.played == row.won + row.drawn + row.lost
        assert row.points == 3 * row.won + row.drawn
        assert row.goal_difference == row.goals_for - row.goals_against


def test_one_row_per_team_without_matches(tournament):
    rows = calculate_table(tournament, [])
    assert [r.team_id for r in rows] == ["A", "B", "C"]
    assert all(r.played == 0 and r.points == 0 for r in rows)


def test_only_completed_matches_of_the_tournament_count(tournament):
    matches = [
        _match("m1", "A", "B", 1, 0, status=MatchStatus.LIVE),
        _match("m2", "A", "B", 1, 0, status=MatchStatus.UPCOMING),
        _match("m3", "A", "B", 1, 0, tournament_id="other"),
    ]
    assert all(r.played == 0 for r in calculate_table(tournament, matches))


def test_matches_with_outside_teams_are_skipped(tournament):
    rows = calculate_table(tournament, [_match("m1", "A", "Z", 5, 0)])
    assert len(rows) == 3
    assert all(r.played == 0 for r in rows)


def test_swapping_equal_matches_keeps_order(tournament):
    first = [_match("m1", "A", "B", 1, 1), _match("m2", "C", "A", 1, 1)]
    second = list(reversed(first))
    assert [r.team_id for r in calculate_table(tournament, first)] == [
        r.team_id for r in calculate_table(tournament, second)
    ]


def test_full_tie_keeps_team_order(tournament):
    rows = calculate_table(tournament, [])
    assert [r.team_id for r in rows] == tournament.team_ids


@pytest.mark.parametrize("kind", [TournamentType.KNOCKOUT, TournamentType.WEEKLY])
def test_non_league_has_no_table(kind):
    t = Tournament(id="k1", name="Cup", type=kind, team_ids=["A", "B"])
    view = derive_table(t, [_match("m1", "A", "B", 2, 0, tournament_id="k1")])
    assert view.mode == TableMode.UNAVAILABLE
    assert view.rows == []
    assert not view.available
