"""Progressive filter relaxation for zero-result searches."""

from __future__ import annotations

import logging

from pydantic import BaseModel, ConfigDict, Field

from ..data.models import Facet, Pattern, SearchResult, TokenSet
from .patterns import recognize
from .planner import QueryPlanner

logger = logging.getLogger(__name__)

# Least important first; players and production codes are never removed
RELAXATION_ORDER: tuple[Facet, ...] = (
    Facet.SERIAL,
    Facet.PARALLEL,
    Facet.CARD_TYPES,
    Facet.INSERT,
    Facet.KEYWORDS,
    Facet.CARD_NUMBER,
    Facet.YEAR,
    Facet.SET,
    Facet.TEAM,
)


class RelaxationOutcome(BaseModel):
    """Results of the first relaxation step that found anything."""

    model_config = ConfigDict(frozen=True)

    results: list[SearchResult] = Field(default_factory=list)
    filters_removed: list[str] = Field(default_factory=list)
    pattern: Pattern | None = None
    message: str

    @property
    def found(self) -> bool:
        return bool(self.results)


class RelaxationController:
    """Drops one facet at a time and re-runs recognition and execution."""

    def __init__(self, planner: QueryPlanner):
        self._planner = planner

    async def relax(self, tokens: TokenSet, limit: int) -> RelaxationOutcome:
        """Remove facets in priority order until a search returns results.

        Raises:
            RepositoryError: If a relaxed search fails.
        """
        removed: list[str] = []
        working = tokens

        for facet in RELAXATION_ORDER:
            if not working.has(facet):
                continue

            working = working.without(facet)
            removed.append(facet.value)
            pattern = recognize(working)
            results = await self._planner.execute(working, pattern, limit)
            logger.debug("Relaxed %s: %d result(s)", facet.value, len(results))

            if results:
                dropped = ", ".join(removed)
                logger.info("Relaxation found results without: %s", dropped)
                return RelaxationOutcome(
                    results=results,
                    filters_removed=removed,
                    pattern=pattern,
                    message=f"No exact matches found. Showing results without: {dropped}",
                )

        if removed:
            message = f"No matches even after relaxing filters: {', '.join(removed)}"
        else:
            message = "No matches found"
        return RelaxationOutcome(filters_removed=removed, message=message)
