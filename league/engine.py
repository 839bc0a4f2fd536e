"""League engine: the context every admin and spectator operation goes through."""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Callable, Iterable, List, Optional, Sequence, Type, TypeVar

import config
from league.errors import InvalidTransition, UnknownReference, ValidationFailure
from league.models import (
    Goal,
    Lineup,
    Match,
    MatchStatus,
    MediaStory,
    NewsPost,
    Player,
    PlayingPosition,
    Record,
    StandingsRow,
    StandingsView,
    StoryType,
    Team,
    Tournament,
    TournamentType,
    dump_records,
    load_records,
    new_id,
)
from league.services.fixtures import FixtureRecord, fixture_spacing, kickoff_at, round_robin
from league.services.imports import TeamRecord
from league.services.live_match import LiveMatchController
from league.services.overrides import OverrideLayer
from league.services.scorers import ScorerEntry, rank_scorers
from league.session import AdminSession
from league.store import Kind, Store

logger = logging.getLogger("asl.engine")

R = TypeVar("R", bound=Record)

PLAYER_FIELDS = ("name", "position", "jersey_number", "mobile", "photo")
TEAM_FIELDS = ("name", "logo", "captain_id", "manager_id", "player_ids")
TOURNAMENT_FIELDS = ("name", "type", "logo", "banner", "location", "start_date", "end_date", "team_ids")


@dataclass
class ImportReport:
    """Outcome of a bulk import: what was committed and why the other rows were not."""

    created: List[Any] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def created_count(self) -> int:
        return len(self.created)

    @property
    def error_count(self) -> int:
        return len(self.errors)


@dataclass
class TeamProfile:
    team: Team
    players: List[Player]
    captain: Optional[Player]
    manager: Optional[Player]


def _local_now() -> datetime:
    return datetime.now().astimezone()


def _pick(changes: dict[str, Any], allowed: Sequence[str]) -> dict[str, Any]:
    unknown = set(changes) - set(allowed)
    if unknown:
        raise ValidationFailure(f"Unknown fields: {', '.join(sorted(unknown))}")
    return changes


class LeagueEngine:
    """Owns the store and exposes CRUD plus derived views.

    Derived views (table, scorers, live match) are recomputed from the
    current store snapshot on every call and scoped to the active
    tournament unless a tournament id is given.
    """

    def __init__(
        self,
        store: Store,
        clock: Optional[Callable[[], datetime]] = None,
        rng: Optional[random.Random] = None,
    ):
        self.store = store
        self.clock = clock or _local_now
        self.rng = rng
        self.session = AdminSession(store)
        self.overrides = OverrideLayer(store)

    # --- generic collection helpers ---

    async def _load(self, model: Type[R], kind: Kind) -> List[R]:
        return load_records(model, await self.store.read(kind))

    async def _save(self, kind: Kind, records: Iterable[Record]) -> None:
        await self.store.write(kind, dump_records(records))

    async def _get(self, model: Type[R], kind: Kind, entity: str, record_id: str) -> R:
        for record in await self._load(model, kind):
            if record.id == record_id:
                return record
        raise UnknownReference(entity, record_id)

    async def _replace(self, kind: Kind, record: Record) -> None:
        records = await self._load(type(record), kind)
        await self._save(kind, [record if r.id == record.id else r for r in records])

    async def _remove(self, model: Type[R], kind: Kind, entity: str, record_id: str) -> R:
        records = await self._load(model, kind)
        kept = [r for r in records if r.id != record_id]
        if len(kept) == len(records):
            raise UnknownReference(entity, record_id)
        await self._save(kind, kept)
        return next(r for r in records if r.id == record_id)

    # --- players ---

    async def list_players(self) -> List[Player]:
        return await self._load(Player, Kind.PLAYERS)

    async def get_player(self, player_id: str) -> Player:
        return await self._get(Player, Kind.PLAYERS, "player", player_id)

    async def create_player(
        self,
        name: str,
        position: PlayingPosition = PlayingPosition.FORWARD,
        jersey_number: int = 1,
        mobile: Optional[str] = None,
        photo: Optional[str] = None,
    ) -> Player:
        player = Player.build(
            id=new_id("p_"),
            name=name,
            position=position,
            jersey_number=jersey_number,
            mobile=mobile,
            photo=photo,
        )
        players = await self.list_players()
        players.append(player)
        await self._save(Kind.PLAYERS, players)
        return player

    async def update_player(self, player_id: str, **changes: Any) -> Player:
        player = (await self.get_player(player_id)).updated(**_pick(changes, PLAYER_FIELDS))
        await self._replace(Kind.PLAYERS, player)
        return player

    async def delete_player(self, player_id: str) -> Player:
        """Remove a player. Rosters and goals keep the dangling id."""
        return await self._remove(Player, Kind.PLAYERS, "player", player_id)

    # --- teams ---

    async def list_teams(self) -> List[Team]:
        return await self._load(Team, Kind.TEAMS)

    async def get_team(self, team_id: str) -> Team:
        return await self._get(Team, Kind.TEAMS, "team", team_id)

    async def _check_roster(self, player_ids: Sequence[str]) -> None:
        known = {p.id for p in await self.list_players()}
        for player_id in player_ids:
            if player_id not in known:
                raise UnknownReference("player", player_id)

    @staticmethod
    def _staff(player_ids: Sequence[str], captain_id: Optional[str], manager_id: Optional[str]) -> tuple[str, str]:
        """Captain and manager default to the first roster player and must be on the roster."""
        captain_id = captain_id or player_ids[0]
        manager_id = manager_id or player_ids[0]
        for role, pid in (("Captain", captain_id), ("Manager", manager_id)):
            if pid not in player_ids:
                raise ValidationFailure(f"{role} {pid} is not on the roster")
        return captain_id, manager_id

    async def create_team(
        self,
        name: str,
        player_ids: Sequence[str],
        logo: Optional[str] = None,
        captain_id: Optional[str] = None,
        manager_id: Optional[str] = None,
    ) -> Team:
        if not name or not name.strip():
            raise ValidationFailure("Team name is required")
        player_ids = list(dict.fromkeys(player_ids))
        if not player_ids:
            raise ValidationFailure("A team needs at least one player")
        await self._check_roster(player_ids)
        captain_id, manager_id = self._staff(player_ids, captain_id, manager_id)
        team = Team.build(
            id=new_id("t_"),
            name=name,
            logo=logo,
            captain_id=captain_id,
            manager_id=manager_id,
            player_ids=player_ids,
        )
        teams = await self.list_teams()
        teams.append(team)
        await self._save(Kind.TEAMS, teams)
        return team

    async def update_team(self, team_id: str, **changes: Any) -> Team:
        team = await self.get_team(team_id)
        changes = _pick(changes, TEAM_FIELDS)
        player_ids = list(dict.fromkeys(changes.get("player_ids", team.player_ids)))
        if not player_ids:
            raise ValidationFailure("A team needs at least one player")
        if "player_ids" in changes:
            await self._check_roster(player_ids)
        captain_id = changes.get("captain_id", team.captain_id)
        manager_id = changes.get("manager_id", team.manager_id)
        # Staff dropped from the roster fall back to the first player
        if captain_id not in player_ids and "captain_id" not in changes:
            captain_id = None
        if manager_id not in player_ids and "manager_id" not in changes:
            manager_id = None
        changes["captain_id"], changes["manager_id"] = self._staff(player_ids, captain_id, manager_id)
        changes["player_ids"] = player_ids
        team = team.updated(**changes)
        await self._replace(Kind.TEAMS, team)
        return team

    async def delete_team(self, team_id: str) -> Team:
        """Remove a team. Tournaments and matches keep the dangling id."""
        return await self._remove(Team, Kind.TEAMS, "team", team_id)

    async def team_profile(self, team_id: str) -> TeamProfile:
        team = await self.get_team(team_id)
        players = {p.id: p for p in await self.list_players()}
        return TeamProfile(
            team=team,
            players=[players[pid] for pid in team.player_ids if pid in players],
            captain=players.get(team.captain_id),
            manager=players.get(team.manager_id),
        )

    # --- tournaments ---

    async def list_tournaments(self) -> List[Tournament]:
        return await self._load(Tournament, Kind.TOURNAMENTS)

    async def get_tournament(self, tournament_id: str) -> Tournament:
        return await self._get(Tournament, Kind.TOURNAMENTS, "tournament", tournament_id)

    async def active_tournament(self) -> Optional[Tournament]:
        for t in await self.list_tournaments():
            if t.is_active:
                return t
        return None

    async def _resolve_tournament(self, tournament_id: Optional[str]) -> Tournament:
        if tournament_id:
            return await self.get_tournament(tournament_id)
        active = await self.active_tournament()
        if active is None:
            raise ValidationFailure("No active tournament")
        return active

    async def _check_teams(self, team_ids: Sequence[str]) -> None:
        known = {t.id for t in await self.list_teams()}
        for team_id in team_ids:
            if team_id not in known:
                raise UnknownReference("team", team_id)

    async def create_tournament(
        self,
        name: str,
        type: TournamentType = TournamentType.LEAGUE,
        team_ids: Sequence[str] = (),
        location: str = "",
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        logo: Optional[str] = None,
        banner: Optional[str] = None,
    ) -> Tournament:
        """Create a tournament. The very first tournament becomes the active one."""
        if not name or not name.strip():
            raise ValidationFailure("Tournament name is required")
        await self._check_teams(team_ids)
        tournaments = await self.list_tournaments()
        tournament = Tournament.build(
            id=new_id(),
            name=name,
            type=type,
            team_ids=list(team_ids),
            location=location,
            start_date=start_date,
            end_date=end_date,
            logo=logo,
            banner=banner,
            is_active=not tournaments,
        )
        tournaments.append(tournament)
        await self._save(Kind.TOURNAMENTS, tournaments)
        logger.info("Created tournament %s (%s)", tournament.name, tournament.id)
        return tournament

    async def update_tournament(self, tournament_id: str, **changes: Any) -> Tournament:
        tournament = await self.get_tournament(tournament_id)
        changes = _pick(changes, TOURNAMENT_FIELDS)
        if "team_ids" in changes:
            await self._check_teams(changes["team_ids"])
        tournament = tournament.updated(**changes)
        await self._replace(Kind.TOURNAMENTS, tournament)
        return tournament

    async def activate_tournament(self, tournament_id: str) -> Tournament:
        """Make one tournament active and every other inactive, in a single write."""
        tournaments = await self.list_tournaments()
        target = next((t for t in tournaments if t.id == tournament_id), None)
        if target is None:
            raise UnknownReference("tournament", tournament_id)
        if target.is_active:
            raise InvalidTransition(f"Tournament {target.name} is already active")
        flipped = [t.updated(is_active=(t.id == tournament_id)) for t in tournaments]
        await self._save(Kind.TOURNAMENTS, flipped)
        logger.info("Activated tournament %s (%s)", target.name, target.id)
        return next(t for t in flipped if t.id == tournament_id)

    async def delete_tournament(self, tournament_id: str) -> Tournament:
        """Delete a tournament with its matches and manual table. Teams and players are untouched."""
        tournament = await self.get_tournament(tournament_id)
        matches = await self._load(Match, Kind.MATCHES)
        kept = [m for m in matches if m.tournament_id != tournament_id]
        if len(kept) != len(matches):
            await self._save(Kind.MATCHES, kept)
        await self.overrides.discard(tournament_id)
        await self._remove(Tournament, Kind.TOURNAMENTS, "tournament", tournament_id)
        logger.info(
            "Deleted tournament %s with %d matches", tournament.name, len(matches) - len(kept)
        )
        return tournament

    # --- matches ---

    async def list_matches(
        self, tournament_id: Optional[str] = None, status: Optional[MatchStatus] = None
    ) -> List[Match]:
        """Matches, latest kickoff first, optionally filtered by tournament and status."""
        matches = [
            m
            for m in await self._load(Match, Kind.MATCHES)
            if (tournament_id is None or m.tournament_id == tournament_id)
            and (status is None or m.status == status)
        ]
        matches.sort(key=lambda m: m.scheduled_at, reverse=True)
        return matches

    async def get_match(self, match_id: str) -> Match:
        return await self._get(Match, Kind.MATCHES, "match", match_id)

    def controller(self, match_id: str) -> LiveMatchController:
        return LiveMatchController(self.store, match_id, rng=self.rng)

    async def create_match(
        self,
        team_a_id: str,
        team_b_id: str,
        scheduled_at: datetime,
        tournament_id: Optional[str] = None,
    ) -> Match:
        tournament = await self._resolve_tournament(tournament_id)
        if team_a_id == team_b_id:
            raise InvalidTransition("A match needs two different teams")
        await self._check_teams((team_a_id, team_b_id))
        for team_id in (team_a_id, team_b_id):
            if not tournament.has_team(team_id):
                raise ValidationFailure(f"Team {team_id} is not part of tournament {tournament.name}")
        match = Match.build(
            id=new_id(),
            tournament_id=tournament.id,
            team_a_id=team_a_id,
            team_b_id=team_b_id,
            scheduled_at=scheduled_at,
        )
        matches = await self._load(Match, Kind.MATCHES)
        matches.append(match)
        await self._save(Kind.MATCHES, matches)
        return match

    async def generate_fixtures(self, tournament_id: Optional[str] = None) -> List[Match]:
        """Append a full round-robin for the tournament, first kickoff today."""
        tournament = await self._resolve_tournament(tournament_id)
        start = kickoff_at(self.clock().date())
        created = round_robin(tournament, start)
        matches = await self._load(Match, Kind.MATCHES)
        await self._save(Kind.MATCHES, matches + created)
        logger.info("Generated %d fixtures for %s", len(created), tournament.name)
        return created

    async def import_fixtures(self, records: Sequence[FixtureRecord]) -> ImportReport:
        """Create Upcoming matches in the active tournament from parsed fixture rows.

        Team names match case-insensitively. Rows that do not resolve are
        reported and skipped; the rest are committed together.
        """
        tournament = await self._resolve_tournament(None)
        by_name = {}
        for team in await self.list_teams():
            by_name.setdefault(team.name.strip().casefold(), team)
        today = self.clock().date()
        report = ImportReport()
        for index, rec in enumerate(records):
            label = f"Line {rec.line}" if rec.line else f"Row {index + 1}"
            team_a = by_name.get(rec.team_a_name.strip().casefold())
            team_b = by_name.get(rec.team_b_name.strip().casefold())
            if team_a is None:
                report.errors.append(f'{label}: Team "{rec.team_a_name}" not found')
                continue
            if team_b is None:
                report.errors.append(f'{label}: Team "{rec.team_b_name}" not found')
                continue
            if team_a.id == team_b.id:
                report.errors.append(f"{label}: A team cannot play itself")
                continue
            missing = [t.name for t in (team_a, team_b) if not tournament.has_team(t.id)]
            if missing:
                report.errors.append(f"{label}: {', '.join(missing)} not in {tournament.name}")
                continue
            day = rec.date or today + fixture_spacing() * index
            report.created.append(
                Match(
                    id=new_id(),
                    tournament_id=tournament.id,
                    team_a_id=team_a.id,
                    team_b_id=team_b.id,
                    scheduled_at=kickoff_at(day, rec.time),
                )
            )
        if report.created:
            matches = await self._load(Match, Kind.MATCHES)
            await self._save(Kind.MATCHES, matches + report.created)
        logger.info("Imported %d fixtures (%d errors)", report.created_count, report.error_count)
        return report

    async def live_match(self, tournament_id: Optional[str] = None) -> Optional[Match]:
        tournament = await self._resolve_tournament(tournament_id)
        live = await self.list_matches(tournament.id, MatchStatus.LIVE)
        return live[0] if live else None

    async def recent_results(self, limit: int = 2, tournament_id: Optional[str] = None) -> List[Match]:
        tournament = await self._resolve_tournament(tournament_id)
        return (await self.list_matches(tournament.id, MatchStatus.COMPLETED))[:limit]

    async def goals_for_match(self, match_id: str) -> List[Goal]:
        await self.get_match(match_id)
        goals = [g for g in await self._load(Goal, Kind.GOALS) if g.match_id == match_id]
        goals.sort(key=lambda g: (g.minute is None, g.minute or 0))
        return goals

    async def set_lineup(self, match_id: str, team_a_lineup: List[str], team_b_lineup: List[str]) -> Lineup:
        return await self.controller(match_id).set_lineup(team_a_lineup, team_b_lineup)

    async def get_lineup(self, match_id: str) -> Lineup:
        return await self.controller(match_id).get_lineup()

    # --- standings & scorers ---

    async def points_table(self, tournament_id: Optional[str] = None) -> StandingsView:
        return await self.overrides.get_table(await self._resolve_tournament(tournament_id))

    async def save_table_override(
        self, rows: Sequence[StandingsRow], tournament_id: Optional[str] = None
    ) -> StandingsView:
        return await self.overrides.save_override(await self._resolve_tournament(tournament_id), rows)

    async def edit_table_row(
        self, team_id: str, updates: dict[str, Any], tournament_id: Optional[str] = None
    ) -> StandingsView:
        return await self.overrides.edit_row(await self._resolve_tournament(tournament_id), team_id, updates)

    async def reset_table_override(self, tournament_id: Optional[str] = None) -> StandingsView:
        return await self.overrides.reset_override(await self._resolve_tournament(tournament_id))

    async def top_scorers(self, tournament_id: Optional[str] = None) -> List[ScorerEntry]:
        tournament = await self._resolve_tournament(tournament_id)
        return rank_scorers(
            await self._load(Goal, Kind.GOALS),
            await self._load(Match, Kind.MATCHES),
            await self.list_players(),
            await self.list_teams(),
            tournament_id=tournament.id,
        )

    async def dashboard(self) -> dict[str, Any]:
        active = await self.active_tournament()
        matches = await self._load(Match, Kind.MATCHES)
        return {
            "players": len(await self.list_players()),
            "teams": len(await self.list_teams()),
            "tournaments": len(await self.list_tournaments()),
            "active_tournament_id": active.id if active else None,
            "live": any(m.status == MatchStatus.LIVE for m in matches),
        }

    # --- news feed ---

    async def list_news(self) -> List[NewsPost]:
        posts = await self._load(NewsPost, Kind.NEWS)
        posts.sort(key=lambda p: p.created_at, reverse=True)
        return posts

    async def create_news(self, caption: str, image: str = "") -> NewsPost:
        post = NewsPost.build(id=new_id("n"), caption=caption, image=image, created_at=self.clock())
        await self._save(Kind.NEWS, [post] + await self._load(NewsPost, Kind.NEWS))
        return post

    async def update_news(self, post_id: str, **changes: Any) -> NewsPost:
        post = await self._get(NewsPost, Kind.NEWS, "post", post_id)
        post = post.updated(**_pick(changes, ("caption", "image")))
        await self._replace(Kind.NEWS, post)
        return post

    async def delete_news(self, post_id: str) -> NewsPost:
        return await self._remove(NewsPost, Kind.NEWS, "post", post_id)

    async def add_story(
        self,
        type: StoryType,
        media_url: str,
        uploader: str = "admin",
        caption: Optional[str] = None,
        thumbnail: Optional[str] = None,
        duration: Optional[float] = None,
        match_id: Optional[str] = None,
    ) -> MediaStory:
        now = self.clock()
        story = MediaStory.build(
            id=new_id("s"),
            type=type,
            media_url=media_url,
            uploader=uploader,
            caption=caption,
            thumbnail=thumbnail,
            duration=duration,
            match_id=match_id,
            created_at=now,
            expires_at=now + timedelta(hours=config.STORY_EXPIRY_HOURS),
        )
        stories = await self._load(MediaStory, Kind.STORIES)
        stories.append(story)
        await self._save(Kind.STORIES, stories)
        return story

    async def active_stories(self, now: Optional[datetime] = None) -> List[MediaStory]:
        now = now or self.clock()
        stories = [s for s in await self._load(MediaStory, Kind.STORIES) if s.is_active(now)]
        stories.sort(key=lambda s: s.created_at, reverse=True)
        return stories

    async def prune_stories(self, now: Optional[datetime] = None) -> int:
        """Drop expired stories; returns how many were removed."""
        now = now or self.clock()
        stories = await self._load(MediaStory, Kind.STORIES)
        kept = [s for s in stories if s.is_active(now)]
        if len(kept) != len(stories):
            await self._save(Kind.STORIES, kept)
        return len(stories) - len(kept)

    # --- bulk team import ---

    async def import_teams(self, records: Sequence[TeamRecord]) -> ImportReport:
        """Create players and teams from parsed team blocks.

        The first parsed player captains and manages the team; jerseys
        default to the player's position in the block (1-based).
        """
        report = ImportReport()
        new_players: List[Player] = []
        for rec in records:
            if not rec.name or not rec.players:
                report.errors.append(f'Team "{rec.name}": needs a name and at least one player')
                continue
            squad = []
            for number, p in enumerate(rec.players, start=1):
                jersey = p.jersey if p.jersey is not None and 1 <= p.jersey <= 99 else number
                if p.jersey is not None and jersey != p.jersey:
                    report.errors.append(f'{rec.name}: jersey {p.jersey} for "{p.name}" out of range, using {jersey}')
                try:
                    squad.append(
                        Player.build(
                            id=new_id("p_"), name=p.name, position=p.position, jersey_number=jersey, mobile=p.mobile
                        )
                    )
                except ValidationFailure as e:
                    report.errors.append(f"{rec.name}: {e.message}")
            if not squad:
                report.errors.append(f'Team "{rec.name}": no valid players')
                continue
            ids = [p.id for p in squad]
            report.created.append(
                Team.build(
                    id=new_id("t_"),
                    name=rec.name,
                    logo=rec.logo,
                    captain_id=ids[0],
                    manager_id=ids[0],
                    player_ids=ids,
                )
            )
            new_players.extend(squad)
        if report.created:
            # Players first so a committed roster never points at missing players
            await self._save(Kind.PLAYERS, await self.list_players() + new_players)
            await self._save(Kind.TEAMS, await self.list_teams() + report.created)
        logger.info("Imported %d teams (%d warnings)", report.created_count, report.error_count)
        return report

    async def clear_all(self) -> None:
        await self.store.clear_all()
