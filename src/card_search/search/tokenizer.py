"""Query tokenization: concurrent extraction into one TokenSet."""

from __future__ import annotations

import asyncio
import logging

from ..config import Settings, get_settings
from ..data.database.cache import LookupCaches
from ..data.database.repository import EntityRepository
from ..data.models import KeywordToken, ParallelToken, TokenSet, unique_tokens
from .entities import EntityExtractor, isolated
from .extractors import PatternTokens

logger = logging.getLogger(__name__)

# A player match this strong (or spanning two words) owns its name words
COLLISION_PLAYER_CONFIDENCE = 95


class TokenExtractor:
    """Decomposes a raw query into a TokenSet.

    Pattern extractors run first (no I/O). The catalog-backed extractors then
    run concurrently, each seeing only the raw query and the pattern tokens.
    """

    def __init__(
        self,
        repository: EntityRepository,
        caches: LookupCaches,
        settings: Settings | None = None,
    ):
        self._entities = EntityExtractor(repository, caches, settings or get_settings())

    @property
    def entities(self) -> EntityExtractor:
        return self._entities

    async def extract(self, query: str) -> TokenSet:
        """Extract every token variant from the query.

        A repository failure inside one extractor empties only that
        extractor's contribution.
        """
        fixed = PatternTokens.from_query(query)
        entities = self._entities

        empty_keywords: tuple[list[KeywordToken], list[ParallelToken]] = ([], [])
        players, teams, sets, inserts, parallels, (keywords, keyword_colors) = (
            await asyncio.gather(
                isolated("Player", entities.extract_players(query, fixed), []),
                isolated("Team", entities.extract_teams(query, fixed), []),
                isolated("Set", entities.extract_sets(query, fixed), []),
                isolated("Insert", entities.extract_inserts(query), []),
                isolated("Parallel", entities.extract_parallels(query), []),
                isolated("Keyword", entities.extract_keywords(query), empty_keywords),
            )
        )

        merged_parallels = unique_tokens([*parallels, *keyword_colors])

        tokens = TokenSet(
            players=players,
            teams=teams,
            sets=sets,
            card_numbers=fixed.card_numbers,
            years=fixed.years,
            serials=fixed.serials,
            production_codes=fixed.production_codes,
            parallels=merged_parallels,
            inserts=inserts,
            card_types=fixed.card_types,
            keywords=keywords,
        )
        logger.debug(
            "Extracted %s from %r",
            ", ".join(facet.value for facet in tokens.active_facets()) or "nothing",
            query,
        )
        return tokens


def resolve_collisions(tokens: TokenSet) -> TokenSet:
    """Drop parallel tokens whose color word is really part of a name.

    A color word that is a first, last or nick name word of a strong player
    match, or a word of any matched team's name, city or mascot, is not a
    parallel ("evan white", "white sox").
    """
    if not tokens.parallels:
        return tokens

    name_words: set[str] = set()
    for player in tokens.players:
        if player.confidence >= COLLISION_PLAYER_CONFIDENCE or player.match_length >= 2:
            name_words |= player.name_words
    for team in tokens.teams:
        name_words |= team.name_words

    kept = [p for p in tokens.parallels if p.matched.lower() not in name_words]
    if len(kept) == len(tokens.parallels):
        return tokens

    dropped = sorted({p.matched for p in tokens.parallels} - {p.matched for p in kept})
    logger.debug("Dropped parallel tokens that are name words: %s", ", ".join(dropped))
    return tokens.model_copy(update={"parallels": kept})
