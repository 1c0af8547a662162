"""Entity repository interface consumed by the search pipeline.

Implementations perform substring and phonetic lookups against the catalog.
Every method may raise RepositoryError; no ordering guarantee is required
beyond being stable enough to serve as a secondary sort key.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from ..models import CardFilters, CardRow, ColorRow, PlayerRow, SeriesRow, TeamRow


@runtime_checkable
class EntityRepository(Protocol):
    """Narrow read-only view of the card catalog."""

    async def search_players(self, fragment: str) -> list[PlayerRow]:
        """Players whose name components contain the fragment, most cards first."""
        ...

    async def search_players_by_soundex(self, code: str) -> list[PlayerRow]:
        """Players whose last name has the given Soundex code."""
        ...

    async def search_teams(self, fragment: str) -> list[TeamRow]:
        """Teams whose name, city, mascot or abbreviation contain the fragment."""
        ...

    async def search_series(self, fragment: str) -> list[SeriesRow]:
        """Series whose series, set or manufacturer name contain the fragment, newest first."""
        ...

    async def search_inserts(self, fragment: str) -> list[SeriesRow]:
        """Series whose own name contains the fragment, newest first."""
        ...

    async def search_colors(self, fragment: str) -> list[ColorRow]:
        """Colors whose name contains the fragment."""
        ...

    async def search_cards(self, filters: CardFilters, limit: int) -> list[CardRow]:
        """Cards matching every filter, newest and most popular first."""
        ...

    async def get_series(self, series_ids: Sequence[int]) -> list[SeriesRow]:
        """Series entities by id, with set and color details."""
        ...

    async def get_series_by_production_code(self, code: str, limit: int) -> list[SeriesRow]:
        """Series carrying the exact production code."""
        ...

    async def get_teams(self, team_ids: Sequence[int]) -> list[TeamRow]:
        """Teams by id, with player and card counts."""
        ...

    async def get_player_teams(self, player_ids: Sequence[int]) -> dict[int, list[TeamRow]]:
        """Teams each player has appeared for, keyed by player id."""
        ...
