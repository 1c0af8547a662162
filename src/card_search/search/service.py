"""Universal search: the full query-understanding and retrieval pipeline."""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from ..config import Settings, get_settings
from ..data.database.cache import LookupCaches
from ..data.database.manager import create_catalog
from ..data.database.repository import EntityRepository
from ..data.models import (
    EntityType,
    PatternShape,
    PatternSummary,
    RelaxationInfo,
    SearchResponse,
    SearchResult,
    TokenSet,
)
from ..exceptions import RepositoryError, SearchFailedError
from .fuzzy import FuzzyEnhancer, generate_suggestions
from .patterns import recognize
from .planner import QueryPlanner
from .ranking import rank
from .relaxation import RelaxationController
from .tokenizer import TokenExtractor, resolve_collisions

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 2

# Category name -> entity type kept (None keeps everything)
CATEGORIES: dict[str, EntityType | None] = {
    "all": None,
    "cards": EntityType.CARD,
    "players": EntityType.PLAYER,
    "teams": EntityType.TEAM,
    "series": EntityType.SERIES,
}


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)


class SearchService:
    """Turns a free-text query into ranked catalog results.

    One service (and its lookup caches) is shared by every search in the
    process; each search owns its own TokenSet.
    """

    def __init__(
        self,
        repository: EntityRepository,
        caches: LookupCaches | None = None,
        settings: Settings | None = None,
    ):
        self._settings = settings or get_settings()
        self._caches = caches or LookupCaches.from_settings(self._settings)
        self._extractor = TokenExtractor(repository, self._caches, self._settings)
        self._fuzzy = FuzzyEnhancer(self._extractor, self._settings)
        self._planner = QueryPlanner(repository)
        self._relaxation = RelaxationController(self._planner)

    @property
    def caches(self) -> LookupCaches:
        return self._caches

    async def extract_tokens(self, query: str) -> TokenSet:
        """Extraction, fuzzy enhancement and collision cleanup for one query."""
        tokens = await self._extractor.extract(query)
        tokens = await self._fuzzy.enhance(query, tokens)
        return resolve_collisions(tokens)

    async def search(
        self, query: str, limit: int | None = None, category: str = "all"
    ) -> SearchResponse:
        """Search the catalog.

        Args:
            query: Free-text query such as "steven kwan pink 2020 bowman chrome auto /25".
            limit: Maximum number of results after ranking (default from settings).
            category: One of all, cards, players, teams, series.

        Returns:
            SearchResponse with ranked results, the recognized pattern, any
            relaxation that was applied and "did you mean" suggestions.

        Raises:
            SearchFailedError: If the catalog could not be queried.
        """
        start = time.perf_counter()
        query = (query or "").strip()
        limit = self._settings.default_limit if limit is None else limit

        if len(query) < MIN_QUERY_LENGTH:
            return SearchResponse(query=query, message="Query too short")
        if category not in CATEGORIES:
            return SearchResponse(
                query=query,
                message=f"Unknown category '{category}'. Use one of: {', '.join(CATEGORIES)}",
            )
        if limit <= 0:
            return SearchResponse(query=query, message="Limit must be positive")

        tokens = await self.extract_tokens(query)
        pattern = recognize(tokens)
        logger.info(
            "Search %r: %s/%s (confidence %d)",
            query,
            pattern.shape.value,
            pattern.strategy.value,
            pattern.confidence,
        )

        relaxed: RelaxationInfo | None = None
        message: str | None = None
        try:
            results = await self._planner.execute(tokens, pattern, limit)
            if not results and pattern.shape is not PatternShape.EMPTY:
                outcome = await self._relaxation.relax(tokens, limit)
                results = outcome.results
                message = outcome.message
                if outcome.filters_removed:
                    relaxed = RelaxationInfo(
                        filters_removed=outcome.filters_removed, message=outcome.message
                    )
        except RepositoryError as e:
            logger.error("Search %r failed: %s", query, e)
            raise SearchFailedError(query) from e

        final = self._finalize(results, category, limit)
        if not final and message is None:
            message = "No matches found"

        response = SearchResponse(
            query=query,
            results=final,
            total_results=len(final),
            pattern=PatternSummary(
                shape=pattern.shape, strategy=pattern.strategy, confidence=pattern.confidence
            ),
            relaxed=relaxed,
            suggestions=generate_suggestions(query, tokens),
            message=message,
            search_time_ms=_elapsed_ms(start),
        )
        logger.debug("Search %r returned %d result(s)", query, response.total_results)
        return response

    @staticmethod
    def _finalize(results: list[SearchResult], category: str, limit: int) -> list[SearchResult]:
        ranked = rank(results)
        entity_type = CATEGORIES[category]
        if entity_type is not None:
            ranked = [r for r in ranked if r.entity_type is entity_type]
        return ranked[:limit]


@asynccontextmanager
async def create_search_service(
    settings: Settings | None = None,
) -> AsyncIterator[SearchService]:
    """Open the catalog and serve searches against it for the duration of the block."""
    async with create_catalog(settings) as manager:
        yield SearchService(manager.db, manager.caches, settings)
