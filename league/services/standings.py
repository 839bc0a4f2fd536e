"""Points table calculation."""
from __future__ import annotations

from typing import Callable, Iterable, List

from league.models import (
    Match,
    MatchStatus,
    StandingsRow,
    StandingsView,
    TableMode,
    Tournament,
    TournamentType,
)


def ranking_key(row: StandingsRow) -> tuple[int, int, int]:
    """Points, then goal difference, then goals scored (all descending)."""
    return (-row.points, -row.goal_difference, -row.goals_for)


def sort_rows(rows: Iterable[StandingsRow]) -> List[StandingsRow]:
    """Stable sort: rows that tie on every criterion keep their input order."""
    return sorted(rows, key=ranking_key)


def calculate_table(tournament: Tournament, matches: Iterable[Match]) -> List[StandingsRow]:
    """Auto standings from the tournament's Completed matches.

    One row per team in tournament.team_ids, in team order before sorting.
    Matches naming a team outside the tournament are skipped.
    """
    table = {tid: StandingsRow(team_id=tid) for tid in tournament.team_ids}

    for m in matches:
        if m.tournament_id != tournament.id or m.status != MatchStatus.COMPLETED:
            continue
        row_a = table.get(m.team_a_id)
        row_b = table.get(m.team_b_id)
        if row_a is None or row_b is None or row_a is row_b:
            continue
        row_a.played += 1
        row_b.played += 1
        row_a.goals_for += m.score_a
        row_a.goals_against += m.score_b
        row_b.goals_for += m.score_b
        row_b.goals_against += m.score_a
        if m.score_a > m.score_b:
            row_a.won += 1
            row_a.points += 3
            row_b.lost += 1
        elif m.score_a < m.score_b:
            row_b.won += 1
            row_b.points += 3
            row_a.lost += 1
        else:
            row_a.drawn += 1
            row_b.drawn += 1
            row_a.points += 1
            row_b.points += 1

    for row in table.values():
        row.goal_difference = row.goals_for - row.goals_against
    return sort_rows(table.values())


# --- Per tournament type producers ---

TableProducer = Callable[[Tournament, List[Match]], StandingsView]


def league_table(tournament: Tournament, matches: List[Match]) -> StandingsView:
    return StandingsView(
        tournament_id=tournament.id,
        mode=TableMode.AUTO,
        rows=calculate_table(tournament, matches),
    )


def no_table(tournament: Tournament, matches: List[Match]) -> StandingsView:
    """Knockout and weekly formats have no points table."""
    return StandingsView(tournament_id=tournament.id, mode=TableMode.UNAVAILABLE)


TABLE_PRODUCERS: dict[TournamentType, TableProducer] = {
    TournamentType.LEAGUE: league_table,
    TournamentType.KNOCKOUT: no_table,
    TournamentType.WEEKLY: no_table,
}


def derive_table(tournament: Tournament, matches: List[Match]) -> StandingsView:
    producer = TABLE_PRODUCERS.get(tournament.type, no_table)
    return producer(tournament, matches)


def supports_table(tournament: Tournament) -> bool:
    return TABLE_PRODUCERS.get(tournament.type, no_table) is not no_table
