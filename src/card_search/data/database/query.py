"""Query builder for parameterized SQL queries."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..models import CardFilters


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so user text only matches literally (ESCAPE '\\')."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def contains_pattern(value: str) -> str:
    """Build a %value% LIKE pattern with wildcards escaped."""
    return f"%{escape_like(value)}%"


@dataclass
class QueryBuilder:
    """Builds parameterized SQL WHERE clauses for card searches."""

    conditions: list[str] = field(default_factory=list)
    params: list[Any] = field(default_factory=list)

    def add_like(self, column: str, value: str | None) -> None:
        """Add a case-insensitive substring condition."""
        if value:
            self.conditions.append(f"{column} LIKE ? ESCAPE '\\'")
            self.params.append(contains_pattern(value))

    def add_exact(self, column: str, value: Any) -> None:
        """Add an exact match condition."""
        if value is not None:
            self.conditions.append(f"{column} = ?")
            self.params.append(value)

    def add_in(self, column: str, values: Sequence[Any] | None) -> None:
        """Add an IN condition (skipped when values is empty)."""
        if values:
            placeholders = ", ".join("?" for _ in values)
            self.conditions.append(f"{column} IN ({placeholders})")
            self.params.extend(values)

    def add_flag(self, column: str, value: bool | None) -> None:
        """Require a boolean column to be set (only True narrows)."""
        if value:
            self.conditions.append(f"{column} = 1")

    def add_card_players(self, player_ids: Sequence[int] | None) -> None:
        """Card must feature at least one of the players."""
        if player_ids:
            placeholders = ", ".join("?" for _ in player_ids)
            self.conditions.append(
                "c.card_id IN ("
                "SELECT cpt.card_id FROM card_player_team cpt "
                "JOIN player_team pt ON cpt.player_team_id = pt.player_team_id "
                f"WHERE pt.player_id IN ({placeholders}))"
            )
            self.params.extend(player_ids)

    def add_card_teams(self, team_ids: Sequence[int] | None) -> None:
        """Card must feature a player on at least one of the teams."""
        if team_ids:
            placeholders = ", ".join("?" for _ in team_ids)
            self.conditions.append(
                "c.card_id IN ("
                "SELECT cpt.card_id FROM card_player_team cpt "
                "JOIN player_team pt ON cpt.player_team_id = pt.player_team_id "
                f"WHERE pt.team_id IN ({placeholders}))"
            )
            self.params.extend(team_ids)

    def add_keyword(self, keyword: str | None) -> None:
        """Match a design keyword against series or color names."""
        if keyword:
            pattern = contains_pattern(keyword)
            self.conditions.append("(s.name LIKE ? ESCAPE '\\' OR col.name LIKE ? ESCAPE '\\')")
            self.params.extend([pattern, pattern])

    def build_where(self) -> str:
        """Build the WHERE clause."""
        return " AND ".join(self.conditions) if self.conditions else "1=1"

    @classmethod
    def from_filters(cls, filters: CardFilters) -> QueryBuilder:
        """Build a QueryBuilder from CardFilters; every active filter is ANDed."""
        qb = cls()
        qb.add_card_players(filters.player_ids)
        qb.add_like("c.card_number", filters.card_number)
        qb.add_exact("st.year", filters.year)
        qb.add_flag("c.is_rookie", filters.rookie)
        qb.add_flag("c.is_autograph", filters.autograph)
        qb.add_flag("c.is_short_print", filters.short_print)
        qb.add_flag("c.is_relic", filters.relic)
        qb.add_exact("c.print_run", filters.print_run)
        qb.add_in("s.series_id", filters.series_ids)
        qb.add_card_teams(filters.team_ids)
        qb.add_in("col.color_id", filters.color_ids)
        qb.add_in("s.series_id", filters.insert_series_ids)
        qb.add_keyword(filters.keyword)
        return qb
