"""Manual standings overrides: frozen per-tournament tables that replace the auto table."""
from __future__ import annotations

import logging
from typing import Any, Iterable, List, Optional

from league.errors import UnknownReference, ValidationFailure
from league.models import (
    Match,
    StandingsRow,
    StandingsView,
    TableMode,
    TableOverride,
    Tournament,
    dump_records,
    load_records,
)
from league.services.standings import derive_table, sort_rows, supports_table
from league.store import Kind, Store

logger = logging.getLogger("asl.standings")

# Fields an admin may set directly when editing a row. Goals for/against always
# carry over from the current table.
EDITABLE_FIELDS = ("played", "won", "drawn", "lost", "goal_difference", "points")


class OverrideLayer:
    """Reads and writes TableOverride records, keyed by tournament id."""

    def __init__(self, store: Store):
        self.store = store

    async def _load_all(self) -> List[TableOverride]:
        return load_records(TableOverride, await self.store.read(Kind.OVERRIDES))

    async def get_override(self, tournament_id: str) -> Optional[TableOverride]:
        for override in await self._load_all():
            if override.tournament_id == tournament_id:
                return override
        return None

    async def get_table(self, tournament: Tournament) -> StandingsView:
        """Override rows verbatim when one exists for this tournament, else the derived table."""
        if supports_table(tournament):
            override = await self.get_override(tournament.id)
            if override is not None:
                return StandingsView(
                    tournament_id=tournament.id,
                    mode=TableMode.MANUAL,
                    rows=override.data,
                )
        matches = load_records(Match, await self.store.read(Kind.MATCHES))
        return derive_table(tournament, matches)

    async def save_override(self, tournament: Tournament, rows: Iterable[StandingsRow]) -> StandingsView:
        if not supports_table(tournament):
            raise ValidationFailure(
                f"Points table is only available for League tournaments ({tournament.type.value})"
            )
        rows = sort_rows(rows)
        seen = set()
        for row in rows:
            if not tournament.has_team(row.team_id):
                raise UnknownReference("team", row.team_id)
            if row.team_id in seen:
                raise ValidationFailure(f"Duplicate row for team {row.team_id}")
            seen.add(row.team_id)

        others = [o for o in await self._load_all() if o.tournament_id != tournament.id]
        others.append(TableOverride(tournament_id=tournament.id, data=rows))
        await self.store.write(Kind.OVERRIDES, dump_records(others))
        logger.info("Saved manual table for tournament %s (%d rows)", tournament.id, len(rows))
        return StandingsView(tournament_id=tournament.id, mode=TableMode.MANUAL, rows=rows)

    async def edit_row(
        self, tournament: Tournament, team_id: str, updates: dict[str, Any]
    ) -> StandingsView:
        """Apply an admin edit to one team's row and save the result as the override."""
        unknown = set(updates) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValidationFailure(f"Fields not editable: {', '.join(sorted(unknown))}")
        current = await self.get_table(tournament)
        if not current.available:
            raise ValidationFailure(
                f"Points table is only available for League tournaments ({tournament.type.value})"
            )
        rows = []
        found = False
        for row in current.rows:
            if row.team_id == team_id:
                found = True
                row = row.updated(**updates, goals_for=row.goals_for, goals_against=row.goals_against)
            rows.append(row)
        if not found:
            raise UnknownReference("team", team_id)
        return await self.save_override(tournament, rows)

    async def reset_override(self, tournament: Tournament) -> StandingsView:
        await self.discard(tournament.id)
        return await self.get_table(tournament)

    async def discard(self, tournament_id: str) -> bool:
        overrides = await self._load_all()
        kept = [o for o in overrides if o.tournament_id != tournament_id]
        if len(kept) == len(overrides):
            return False
        await self.store.write(Kind.OVERRIDES, dump_records(kept))
        logger.info("Discarded manual table for tournament %s", tournament_id)
        return True
