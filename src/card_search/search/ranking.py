"""Final ordering of search results."""

from __future__ import annotations

from collections.abc import Iterable

from ..data.models import EntityType, SearchResult

# Tie-break order when entity types are mixed in one result list
ENTITY_PRIORITY: dict[EntityType, int] = {
    EntityType.CARD: 0,
    EntityType.PLAYER: 1,
    EntityType.TEAM: 2,
    EntityType.SERIES: 3,
}


def rank(results: Iterable[SearchResult]) -> list[SearchResult]:
    """Deduplicate by (entity type, id), keeping the first, then sort.

    Highest relevance first; ties go card, player, team, series; otherwise
    the incoming order is preserved.
    """
    seen: set[tuple[EntityType, int]] = set()
    unique: list[SearchResult] = []
    for result in results:
        key = (result.entity_type, result.entity_id)
        if key in seen:
            continue
        seen.add(key)
        unique.append(result)

    return sorted(
        unique,
        key=lambda r: (-r.relevance_score, ENTITY_PRIORITY[r.entity_type]),
    )
