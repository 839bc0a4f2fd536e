"""Entity records."""
from league.models.base import Record, dump_records, load_records, new_id
from league.models.match import Goal, Lineup, Match, MatchStatus, Side
from league.models.news import MediaStory, NewsPost, StoryType
from league.models.player import Player, PlayingPosition, parse_position
from league.models.standings import StandingsRow, StandingsView, TableMode, TableOverride
from league.models.team import Team
from league.models.tournament import Tournament, TournamentType

__all__ = [
    "Record",
    "dump_records",
    "load_records",
    "new_id",
    "Goal",
    "Lineup",
    "Match",
    "MatchStatus",
    "Side",
    "MediaStory",
    "NewsPost",
    "StoryType",
    "Player",
    "PlayingPosition",
    "parse_position",
    "StandingsRow",
    "StandingsView",
    "TableMode",
    "TableOverride",
    "Team",
    "Tournament",
    "TournamentType",
]
