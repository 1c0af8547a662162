"""Fuzzy query enhancement: abbreviation expansion, phonetic fallback, suggestions."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from pydantic import BaseModel

from ..config import Settings, get_settings
from ..data.models import PlayerToken, Suggestion, TokenSet
from ..utils.text import levenshtein_distance, similarity_ratio, soundex
from .constants import (
    ABBREVIATIONS,
    DESIGN_KEYWORDS,
    INSERT_TERMS,
    MAX_PLAYER_SUGGESTIONS,
    PARALLEL_TERMS,
    SUGGESTION_THRESHOLD,
)
from .entities import isolated
from .extractors import PatternTokens, strip_terms
from .tokenizer import TokenExtractor

logger = logging.getLogger(__name__)

_PUNCTUATION = re.compile(r"[^a-z0-9&]")

PHONETIC_MIN_LETTERS = 3
PHONETIC_MAX_DISTANCE = 2
PHONETIC_CONFIDENCE_SCALE = 80


class CloseMatch(BaseModel):
    """A candidate string within a small edit distance of the query."""

    value: str
    distance: int
    confidence: int


def expand_abbreviations(query: str) -> str:
    """Lowercase the query and replace every known abbreviation word.

    Examples:
        >>> expand_abbreviations("Trout BC auto")
        'trout bowman chrome autograph'
    """
    words = query.lower().split()
    expanded = [ABBREVIATIONS.get(_PUNCTUATION.sub("", word), word) for word in words]
    return " ".join(expanded)


def find_close_matches(
    query: str, candidates: Iterable[str], max_distance: int = 2
) -> list[CloseMatch]:
    """Candidates within ``max_distance`` edits of the query, closest first."""
    text = query.lower()
    matches = []
    for candidate in candidates:
        distance = levenshtein_distance(text, candidate.lower())
        if distance <= max_distance:
            matches.append(
                CloseMatch(
                    value=candidate,
                    distance=distance,
                    confidence=round(similarity_ratio(text, candidate) * 100),
                )
            )
    matches.sort(key=lambda m: m.distance)
    return matches


def generate_suggestions(query: str, tokens: TokenSet) -> list[Suggestion]:
    """Alternatives for a weak player match and the series a weak set match used."""
    suggestions: list[Suggestion] = []

    if tokens.players and tokens.players[0].confidence < SUGGESTION_THRESHOLD:
        for player in tokens.players[1 : 1 + MAX_PLAYER_SUGGESTIONS]:
            suggestions.append(
                Suggestion(
                    type="player_alternative",
                    original=query,
                    suggestion=player.full_name,
                    reason=f'Did you mean "{player.full_name}"?',
                )
            )

    if tokens.sets and tokens.sets[0].confidence < SUGGESTION_THRESHOLD:
        series_name = tokens.sets[0].series_name
        suggestions.append(
            Suggestion(
                type="set_correction",
                original=query,
                suggestion=series_name,
                reason=f'Showing results for "{series_name}"',
            )
        )

    return suggestions


class FuzzyEnhancer:
    """Improves a TokenSet with abbreviation expansion and phonetic player matches."""

    def __init__(self, extractor: TokenExtractor, settings: Settings | None = None):
        self._extractor = extractor
        self._settings = settings or get_settings()

    async def enhance(self, query: str, tokens: TokenSet) -> TokenSet:
        """Return the TokenSet with any better player, team or set matches adopted."""
        tokens = await self._expand(query, tokens)
        if self._settings.phonetic_matching and not (
            tokens.players or tokens.teams or tokens.sets
        ):
            tokens = await self._phonetic_players(query, tokens)
        return tokens

    async def _expand(self, query: str, tokens: TokenSet) -> TokenSet:
        """Re-extract from the expanded query; adopt strictly better name matches."""
        expanded_query = expand_abbreviations(query)
        if expanded_query == query.lower():
            return tokens

        logger.debug("Expanded %r to %r", query, expanded_query)
        expanded = await self._extractor.extract(expanded_query)

        update: dict[str, list] = {}
        for field in ("players", "teams", "sets"):
            current = getattr(tokens, field)
            candidate = getattr(expanded, field)
            if candidate and (not current or candidate[0].confidence > current[0].confidence):
                update[field] = candidate
        if not update:
            return tokens

        logger.info("Abbreviation expansion improved %s", ", ".join(sorted(update)))
        return tokens.model_copy(update=update)

    async def _phonetic_players(self, query: str, tokens: TokenSet) -> TokenSet:
        """Sound-alike player lookups for words nothing else recognized."""
        fixed = PatternTokens.from_query(query)
        remaining = strip_terms(query, fixed.matched_spans())
        remaining = strip_terms(remaining, (*PARALLEL_TERMS, *DESIGN_KEYWORDS, *INSERT_TERMS))
        words = [
            word
            for word in dict.fromkeys(remaining.lower().split())
            if word.isalpha() and len(word) >= PHONETIC_MIN_LETTERS
        ]
        if not words:
            return tokens

        candidates = await isolated("Phonetic player", self._sound_alikes(words), [])
        if not candidates:
            return tokens
        logger.info("Phonetic matching found %d player candidate(s)", len(candidates))
        return tokens.model_copy(update={"players": candidates})

    async def _sound_alikes(self, words: list[str]) -> list[PlayerToken]:
        entities = self._extractor.entities
        best: dict[int, PlayerToken] = {}

        for word in words:
            code = soundex(word)
            if not code:
                continue
            rows = await entities.players_by_soundex(code)
            last_names = {row.last_name for row in rows}
            close_names = {
                match.value
                for match in find_close_matches(word, last_names, PHONETIC_MAX_DISTANCE)
            }
            for row in rows:
                if row.last_name not in close_names:
                    continue
                confidence = round(
                    similarity_ratio(word, row.last_name) * PHONETIC_CONFIDENCE_SCALE
                )
                existing = best.get(row.player_id)
                if existing is None or confidence > existing.confidence:
                    best[row.player_id] = entities.player_token(row, word, confidence)

        return sorted(best.values(), key=lambda t: -t.confidence)
