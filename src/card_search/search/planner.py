"""Query planning and execution: strategy -> repository calls -> SearchResults."""

from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Awaitable, Callable

from ..data.database.repository import EntityRepository
from ..data.models import (
    CardFilters,
    CardRow,
    EntityType,
    Facet,
    Pattern,
    SearchResult,
    SeriesRow,
    Strategy,
    TeamRow,
    TokenSet,
)
from .constants import CARD_TYPE_CONFIDENCE

logger = logging.getLogger(__name__)

DEFAULT_ENTITY_CONFIDENCE = 80

# Facets that narrow an entity name down to specific cards
NARROWING_FACETS = (
    Facet.YEAR,
    Facet.CARD_NUMBER,
    Facet.SERIAL,
    Facet.CARD_TYPES,
    Facet.PARALLEL,
    Facet.INSERT,
)
ENTITY_FACETS = (Facet.PLAYER, Facet.TEAM, Facet.SET)

# Facets that become card filters (production codes only list series,
# keywords only filter the keyword browse)
CARD_FILTER_FACETS = frozenset(Facet) - {Facet.PRODUCTION_CODE, Facet.KEYWORDS}
KEYWORD_BROWSE_FACETS = frozenset({Facet.KEYWORDS, Facet.PARALLEL})

_Handler = Callable[[TokenSet, int], Awaitable[list[SearchResult]]]


def build_filters(tokens: TokenSet) -> CardFilters:
    """AND-combination of every active facet as card filters."""
    card_number = tokens.card_numbers[0].pattern if tokens.card_numbers else None
    return CardFilters(
        player_ids=[t.player_id for t in tokens.players],
        team_ids=[t.team_id for t in tokens.teams],
        series_ids=[t.series_id for t in tokens.sets],
        insert_series_ids=[t.series_id for t in tokens.inserts],
        color_ids=[t.color_id for t in tokens.parallels],
        card_number=card_number,
        year=tokens.years[0].year if tokens.years else None,
        print_run=tokens.serials[0].print_run if tokens.serials else None,
        rookie=tokens.card_types.rookie or None,
        autograph=tokens.card_types.autograph or None,
        short_print=tokens.card_types.short_print or None,
        relic=tokens.card_types.relic or None,
        exact_card_number_first=card_number is not None,
    )


def filter_relevance(tokens: TokenSet, facets: frozenset[Facet] = CARD_FILTER_FACETS) -> int:
    """Mean confidence of the facets that filtered a card search.

    Each card-type flag that is set contributes its own score.
    """
    scores: list[int] = []
    for facet in tokens.active_facets():
        if facet not in facets:
            continue
        if facet is Facet.CARD_TYPES:
            scores.extend([CARD_TYPE_CONFIDENCE] * tokens.card_types.active_count)
        else:
            scores.append(tokens.top_confidence(facet) or DEFAULT_ENTITY_CONFIDENCE)
    if not scores:
        return DEFAULT_ENTITY_CONFIDENCE
    return min(100, round(sum(scores) / len(scores)))


# =============================================================================
# Result construction
# =============================================================================


def card_result(row: CardRow, relevance: int) -> SearchResult:
    return SearchResult(
        entity_type=EntityType.CARD,
        entity_id=row.card_id,
        display_fields=row.model_dump(exclude={"card_id"}),
        relevance_score=relevance,
    )


def series_result(row: SeriesRow, relevance: int) -> SearchResult:
    return SearchResult(
        entity_type=EntityType.SERIES,
        entity_id=row.series_id,
        display_fields=row.model_dump(exclude={"series_id"}),
        relevance_score=relevance,
    )


def team_result(row: TeamRow, relevance: int) -> SearchResult:
    return SearchResult(
        entity_type=EntityType.TEAM,
        entity_id=row.team_id,
        display_fields=row.model_dump(exclude={"team_id"}),
        relevance_score=relevance,
    )


class QueryPlanner:
    """Executes the retrieval plan for a recognized pattern.

    Repository errors propagate to the caller.
    """

    def __init__(self, repository: EntityRepository):
        self._repo = repository
        self._handlers: dict[Strategy, _Handler] = {
            Strategy.NO_RESULTS: self._no_results,
            Strategy.PRODUCTION_CODE_ONLY: self._production_code,
            Strategy.PLAYER_ONLY: self._players,
            Strategy.SET_BROWSE: self._series,
            Strategy.TEAM_BROWSE: self._teams,
            Strategy.KEYWORD_BROWSE: self._keyword_browse,
            Strategy.CARDS_WITH_MULTI_FILTERS: self._multi_filter,
            Strategy.CARD_NUMBER_ONLY: self._cards,
            Strategy.YEAR_BROWSE: self._cards,
            Strategy.CARD_TYPE_ONLY: self._cards,
            Strategy.PARALLEL_BROWSE: self._cards,
            Strategy.SERIAL_BROWSE: self._cards,
            Strategy.INSERT_BROWSE: self._cards,
            Strategy.PLAYER_CARD_NUMBER: self._cards,
            Strategy.SET_YEAR_BROWSE: self._cards,
        }

    async def execute(self, tokens: TokenSet, pattern: Pattern, limit: int) -> list[SearchResult]:
        """Run the strategy and return results in repository order."""
        handler = self._handlers[pattern.strategy]
        results = await handler(tokens, limit)
        logger.debug("%s returned %d result(s)", pattern.strategy.value, len(results))
        return results

    async def _no_results(self, tokens: TokenSet, limit: int) -> list[SearchResult]:
        return []

    async def _cards(self, tokens: TokenSet, limit: int) -> list[SearchResult]:
        """Cards matching every active facet."""
        filters = build_filters(tokens)
        if filters.is_empty:
            return []
        rows = await self._repo.search_cards(filters, limit)
        relevance = filter_relevance(tokens)
        return [card_result(row, relevance) for row in rows]

    async def _keyword_browse(self, tokens: TokenSet, limit: int) -> list[SearchResult]:
        """Cards by color when a keyword named one, else by series/color name text."""
        if tokens.parallels:
            filters = CardFilters(color_ids=[t.color_id for t in tokens.parallels])
        else:
            filters = CardFilters(keyword=tokens.keywords[0].keyword)
        rows = await self._repo.search_cards(filters, limit)
        relevance = filter_relevance(tokens, KEYWORD_BROWSE_FACETS)
        return [card_result(row, relevance) for row in rows]

    async def _production_code(self, tokens: TokenSet, limit: int) -> list[SearchResult]:
        token = tokens.production_codes[0]
        rows = await self._repo.get_series_by_production_code(token.code, limit)
        return [series_result(row, token.confidence) for row in rows]

    async def _players(self, tokens: TokenSet, limit: int) -> list[SearchResult]:
        """Matched players with the teams they appeared for."""
        players = tokens.players[:limit]
        if not players:
            return []
        teams = await self._repo.get_player_teams([p.player_id for p in players])
        results = []
        for player in players:
            player_teams = teams.get(player.player_id, [])
            results.append(
                SearchResult(
                    entity_type=EntityType.PLAYER,
                    entity_id=player.player_id,
                    display_fields={
                        "full_name": player.full_name,
                        "first_name": player.first_name,
                        "last_name": player.last_name,
                        "nick_name": player.nick_name,
                        "card_count": player.card_count,
                        "is_hof": player.is_hof,
                        "teams": [
                            {
                                "team_id": team.team_id,
                                "name": team.name,
                                "abbreviation": team.abbreviation,
                                "primary_color": team.primary_color,
                                "secondary_color": team.secondary_color,
                            }
                            for team in player_teams
                        ],
                    },
                    relevance_score=player.confidence,
                )
            )
        return results

    async def _series(self, tokens: TokenSet, limit: int) -> list[SearchResult]:
        """Matched series, in token order."""
        sets = tokens.sets[:limit]
        if not sets:
            return []
        found = await self._repo.get_series([t.series_id for t in sets])
        rows = {row.series_id: row for row in found}
        return [
            series_result(rows[t.series_id], t.confidence)
            for t in sets
            if t.series_id in rows
        ]

    async def _teams(self, tokens: TokenSet, limit: int) -> list[SearchResult]:
        """Matched teams with player and card counts, in token order."""
        teams = tokens.teams[:limit]
        if not teams:
            return []
        found = await self._repo.get_teams([t.team_id for t in teams])
        rows = {row.team_id: row for row in found}
        return [
            team_result(rows[t.team_id], t.confidence)
            for t in teams
            if t.team_id in rows
        ]

    async def _multi_filter(self, tokens: TokenSet, limit: int) -> list[SearchResult]:
        """Cards when an entity name is narrowed, else entity listings, else cards."""
        has_entity = any(tokens.has(facet) for facet in ENTITY_FACETS)
        has_narrowing = any(tokens.has(facet) for facet in NARROWING_FACETS)

        if has_entity and not has_narrowing:
            share = math.ceil(limit / 3)
            listings = await asyncio.gather(
                self._players(tokens, share),
                self._teams(tokens, share),
                self._series(tokens, share),
            )
            return [result for listing in listings for result in listing]

        return await self._cards(tokens, limit)
