"""Top-scorer ranking."""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Iterable, List, Optional

from league.models import Goal, Match, Player, Team


@dataclass
class ScorerEntry:
    player: Player
    team: Optional[Team]
    goals: int


def team_of(player_id: str, teams: Iterable[Team]) -> Optional[Team]:
    """First team whose roster lists the player."""
    for team in teams:
        if team.has_player(player_id):
            return team
    return None


def rank_scorers(
    goals: Iterable[Goal],
    matches: Iterable[Match],
    players: Iterable[Player],
    teams: Iterable[Team],
    tournament_id: Optional[str] = None,
) -> List[ScorerEntry]:
    """Goal counts per player, most goals first, then by name.

    Goals of deleted matches (and of other tournaments, when tournament_id is
    given) are ignored. Players that no longer exist are dropped.
    """
    match_ids = {
        m.id for m in matches if tournament_id is None or m.tournament_id == tournament_id
    }
    counts = Counter(g.player_id for g in goals if g.match_id in match_ids)

    players_by_id = {p.id: p for p in players}
    teams = list(teams)
    entries = []
    for player_id, count in counts.items():
        player = players_by_id.get(player_id)
        if player is None:
            continue
        entries.append(ScorerEntry(player=player, team=team_of(player_id, teams), goals=count))
    entries.sort(key=lambda e: (-e.goals, e.player.name.casefold()))
    return entries
