"""Live match state machine: Upcoming -> Live -> Completed, with goal and player-of-the-match events."""
from __future__ import annotations

import logging
import random
from datetime import datetime
from typing import List, Optional

import config
from league.errors import InvalidTransition, QuotaExhausted, UnknownReference, ValidationFailure
from league.models import (
    Goal,
    Lineup,
    Match,
    MatchStatus,
    Side,
    Team,
    Tournament,
    dump_records,
    load_records,
    new_id,
)
from league.store import Kind, Store

logger = logging.getLogger("asl.live")


class LiveMatchController:
    """All transitions and event ingestion for one match.

    Each call reads the latest stored snapshot, checks the guard for the
    current state and writes the matches collection back. Guards never
    coerce: a call that does not fit the current state raises InvalidTransition.
    """

    def __init__(self, store: Store, match_id: str, rng: Optional[random.Random] = None):
        self.store = store
        self.match_id = match_id
        self.rng = rng or random.Random()

    # --- snapshot helpers ---

    async def _matches(self) -> List[Match]:
        return load_records(Match, await self.store.read(Kind.MATCHES))

    def _find(self, matches: List[Match]) -> tuple[int, Match]:
        for i, m in enumerate(matches):
            if m.id == self.match_id:
                return i, m
        raise UnknownReference("match", self.match_id)

    async def _commit(self, matches: List[Match], index: int, match: Match) -> Match:
        matches[index] = match
        await self.store.write(Kind.MATCHES, dump_records(matches))
        return match

    async def _team(self, team_id: str) -> Team:
        for team in load_records(Team, await self.store.read(Kind.TEAMS)):
            if team.id == team_id:
                return team
        raise UnknownReference("team", team_id)

    async def _tournament(self, tournament_id: str) -> Tournament:
        for t in load_records(Tournament, await self.store.read(Kind.TOURNAMENTS)):
            if t.id == tournament_id:
                return t
        raise UnknownReference("tournament", tournament_id)

    async def get(self) -> Match:
        _, match = self._find(await self._matches())
        return match

    @staticmethod
    def _require(match: Match, *allowed: MatchStatus, action: str) -> None:
        if match.status not in allowed:
            raise InvalidTransition(f"Cannot {action} a match that is {match.status.value}")

    # --- transitions ---

    async def edit(
        self,
        team_a_id: Optional[str] = None,
        team_b_id: Optional[str] = None,
        scheduled_at: Optional[datetime] = None,
    ) -> Match:
        """Replace teams and/or kickoff of an Upcoming match."""
        matches = await self._matches()
        index, match = self._find(matches)
        self._require(match, MatchStatus.UPCOMING, action="edit")
        team_a_id = team_a_id or match.team_a_id
        team_b_id = team_b_id or match.team_b_id
        if team_a_id == team_b_id:
            raise InvalidTransition("A match needs two different teams")
        tournament = await self._tournament(match.tournament_id)
        for team_id in (team_a_id, team_b_id):
            await self._team(team_id)
            if not tournament.has_team(team_id):
                raise ValidationFailure(f"Team {team_id} is not part of tournament {tournament.name}")
        changes = {"team_a_id": team_a_id, "team_b_id": team_b_id}
        if scheduled_at is not None:
            changes["scheduled_at"] = scheduled_at
        return await self._commit(matches, index, match.updated(**changes))

    async def start(self) -> Match:
        matches = await self._matches()
        index, match = self._find(matches)
        self._require(match, MatchStatus.UPCOMING, action="start")
        if match.team_a_id == match.team_b_id:
            raise InvalidTransition("Cannot start a match between a team and itself")
        logger.info("Match %s is live", match.id)
        return await self._commit(matches, index, match.updated(status=MatchStatus.LIVE))

    async def goal(self, side: Side, player_id: str, minute: Optional[int] = None) -> Goal:
        """Credit a goal to side's team: one score goes up by one and one Goal is appended."""
        side = Side(side)
        matches = await self._matches()
        index, match = self._find(matches)
        self._require(match, MatchStatus.LIVE, action="score in")
        team = await self._team(match.team_id(side))
        if not team.has_player(player_id):
            raise InvalidTransition(f"Player {player_id} is not on {team.name}'s roster")
        if minute is None and config.RANDOM_GOAL_MINUTE:
            minute = self.rng.randrange(90)
        goal = Goal.build(
            id=new_id(),
            match_id=match.id,
            team_id=team.id,
            player_id=player_id,
            minute=minute,
        )
        if side == Side.A:
            match = match.updated(score_a=match.score_a + 1)
        else:
            match = match.updated(score_b=match.score_b + 1)
        goals = await self.store.read(Kind.GOALS)
        await self.store.write(Kind.GOALS, goals + [goal.dump()])
        try:
            await self._commit(matches, index, match)
        except QuotaExhausted:
            # Score write failed: take the goal back out
            await self.store.write(Kind.GOALS, goals)
            raise
        logger.info("Goal for %s in match %s (%d-%d)", team.name, match.id, match.score_a, match.score_b)
        return goal

    async def set_player_of_the_match(self, player_id: str) -> Match:
        matches = await self._matches()
        index, match = self._find(matches)
        self._require(match, MatchStatus.LIVE, MatchStatus.COMPLETED, action="pick a player of the match for")
        rosters = []
        for team_id in (match.team_a_id, match.team_b_id):
            rosters.extend((await self._team(team_id)).player_ids)
        if player_id not in rosters:
            raise InvalidTransition(f"Player {player_id} did not play in this match")
        if match.player_of_the_match == player_id:
            return match
        return await self._commit(matches, index, match.updated(player_of_the_match=player_id))

    async def end(self) -> Match:
        matches = await self._matches()
        index, match = self._find(matches)
        self._require(match, MatchStatus.LIVE, action="end")
        logger.info("Match %s completed %d-%d", match.id, match.score_a, match.score_b)
        return await self._commit(matches, index, match.updated(status=MatchStatus.COMPLETED))

    async def delete(self) -> None:
        """Remove the match and its lineup. Its goals stay behind as orphans."""
        matches = await self._matches()
        index, match = self._find(matches)
        del matches[index]
        await self.store.write(Kind.MATCHES, dump_records(matches))
        lineups = load_records(Lineup, await self.store.read(Kind.LINEUPS))
        kept = [lu for lu in lineups if lu.match_id != match.id]
        if len(kept) != len(lineups):
            await self.store.write(Kind.LINEUPS, dump_records(kept))
        logger.info("Deleted match %s", match.id)

    # --- lineups ---

    async def set_lineup(self, team_a_lineup: List[str], team_b_lineup: List[str]) -> Lineup:
        """Store starting lineups; every player must be on the matching side's roster."""
        match = await self.get()
        for side, picked in ((Side.A, team_a_lineup), (Side.B, team_b_lineup)):
            team = await self._team(match.team_id(side))
            for player_id in picked:
                if not team.has_player(player_id):
                    raise ValidationFailure(f"Player {player_id} is not on {team.name}'s roster")
        lineup = Lineup.build(match_id=match.id, team_a_lineup=team_a_lineup, team_b_lineup=team_b_lineup)
        lineups = [lu for lu in load_records(Lineup, await self.store.read(Kind.LINEUPS)) if lu.match_id != match.id]
        lineups.append(lineup)
        await self.store.write(Kind.LINEUPS, dump_records(lineups))
        return lineup

    async def get_lineup(self) -> Lineup:
        match = await self.get()
        for lineup in load_records(Lineup, await self.store.read(Kind.LINEUPS)):
            if lineup.match_id == match.id:
                return lineup
        return Lineup(match_id=match.id)
