"""Catalog-backed token extractors: players, teams, sets, inserts, colors, keywords.

Each extractor receives the raw query and the pattern tokens only. Name
extractors strip already-recognized text, look up every n-gram of what is
left (cache first), keep the longest n-gram per matched entity and score it.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, TypeVar

from ..config import Settings, get_settings
from ..data.database.cache import LookupCache, LookupCaches, normalize_key
from ..data.database.repository import EntityRepository
from ..data.models import (
    ColorRow,
    InsertToken,
    KeywordToken,
    ParallelToken,
    PlayerRow,
    PlayerToken,
    SeriesRow,
    SetToken,
    TeamRow,
    TeamToken,
    Token,
)
from ..exceptions import RepositoryError
from .constants import (
    CANDIDATE_SPREAD,
    DESIGN_KEYWORDS,
    INSERT_NAME_CONFIDENCE,
    INSERT_PARTIAL_CONFIDENCE,
    INSERT_TERMS,
    KEYWORD_CONFIDENCE,
    KEYWORD_PARALLEL_CONFIDENCE,
    PARALLEL_CONFIDENCE,
    PARALLEL_TERMS,
    SET_NAME_FINISHES,
    STRONG_MATCH_CONFIDENCE,
)
from .extractors import PatternTokens, find_terms, generate_ngrams, strip_terms

logger = logging.getLogger(__name__)

T = TypeVar("T")
RowT = TypeVar("RowT")
TokenT = TypeVar("TokenT", bound=Token)


# =============================================================================
# Scoring
# =============================================================================


def _ngram_bonus(words: int, *, three: int, two: int) -> int:
    if words >= 3:
        return three
    if words == 2:
        return two
    return 0


def score_player(player: PlayerRow, ngram: str) -> int:
    """Confidence that an n-gram names this player.

    Exact full name 100, last name 95, first name 85, part of the full name
    90, anything else the catalog matched 70. Longer n-grams, hall of fame
    players and players with more than 1000 cards score higher.
    """
    text = ngram.lower()
    first = player.first_name.lower()
    last = player.last_name.lower()
    full = player.full_name.lower()

    if text in (full, f"{first} {last}"):
        confidence = 100
    elif text == last:
        confidence = 95
    elif text == first:
        confidence = 85
    elif text in full:
        confidence = 90
    else:
        confidence = 70

    confidence += _ngram_bonus(len(ngram.split()), three=10, two=5)
    if player.is_hof:
        confidence += 5
    if player.card_count > 1000:
        confidence += 3
    return min(100, confidence)


def score_team(team: TeamRow, ngram: str) -> int:
    """Confidence that an n-gram names this team."""
    text = ngram.lower()
    name = (team.name or "").lower()
    city = (team.city or "").lower()
    mascot = (team.mascot or "").lower()
    abbreviation = (team.abbreviation or "").lower()

    if text in (abbreviation, name):
        confidence = 95
    elif text in (city, mascot):
        confidence = 90
    elif text in name:
        confidence = 85
    elif text in city:
        confidence = 80
    elif text in mascot:
        confidence = 75
    else:
        confidence = 70

    if len(ngram.split()) >= 2:
        confidence += 5
    return min(100, confidence)


def score_set(series: SeriesRow, ngram: str) -> int:
    """Confidence that an n-gram names this series, its set or its manufacturer."""
    text = ngram.lower()
    series_name = series.series_name.lower()
    set_name = (series.set_name or "").lower()
    manufacturer = (series.manufacturer_name or "").lower()

    if text == series_name:
        confidence = 95
    elif text == set_name:
        confidence = 90
    elif text == manufacturer:
        confidence = 85
    elif text in series_name:
        confidence = 80
    elif text in set_name:
        confidence = 75
    elif text in manufacturer:
        confidence = 70
    else:
        confidence = 60

    confidence += _ngram_bonus(len(ngram.split()), three=10, two=5)
    return min(100, confidence)


def keep_best(tokens: Sequence[TokenT]) -> list[TokenT]:
    """Drop weak residue once a strong candidate exists.

    ``tokens`` must be sorted best first. A candidate survives when it scores
    at least 95, is within 15 points of the best, or matched at least as many
    words as the best.
    """
    if len(tokens) <= 1:
        return list(tokens)
    best = tokens[0]
    return [
        token
        for token in tokens
        if token.confidence >= STRONG_MATCH_CONFIDENCE
        or best.confidence - token.confidence <= CANDIDATE_SPREAD
        or token.match_length >= best.match_length
    ]


# =============================================================================
# Extraction
# =============================================================================


class EntityExtractor:
    """Runs the catalog-backed extractors against one repository and cache set."""

    def __init__(
        self,
        repository: EntityRepository,
        caches: LookupCaches,
        settings: Settings | None = None,
    ):
        self._repo = repository
        self._caches = caches
        self._settings = settings or get_settings()

    async def _lookup(
        self,
        cache: LookupCache[Any],
        namespace: str,
        fragment: str,
        fetch: Callable[[str], Awaitable[list[RowT]]],
    ) -> tuple[RowT, ...]:
        """Cached repository lookup; only completed lookups are stored."""
        key = normalize_key(namespace, fragment)
        cached = await cache.get(key)
        if cached is not None:
            return cached
        rows = await fetch(fragment)
        await cache.put(key, rows)
        return tuple(rows)

    async def _match_ngrams(
        self,
        ngrams: Sequence[str],
        cache: LookupCache[Any],
        namespace: str,
        fetch: Callable[[str], Awaitable[list[RowT]]],
        identity: Callable[[RowT], int],
    ) -> list[tuple[RowT, str]]:
        """Look up every n-gram concurrently; keep the longest n-gram per entity."""
        results = await asyncio.gather(
            *(self._lookup(cache, namespace, ngram, fetch) for ngram in ngrams)
        )
        matches: dict[int, tuple[RowT, str]] = {}
        for ngram, rows in zip(ngrams, results, strict=True):
            words = len(ngram.split())
            for row in rows:
                key = identity(row)
                existing = matches.get(key)
                if existing is None or words > len(existing[1].split()):
                    matches[key] = (row, ngram)
        return list(matches.values())

    def _name_ngrams(
        self, query: str, fixed: PatternTokens, min_chars: int, *, for_sets: bool = False
    ) -> list[str]:
        """N-grams for name lookups.

        Color words are stripped, but multi-word n-grams spanning a color word
        are kept so names like "Evan White" or "White Sox" still match whole.
        """
        finishes = SET_NAME_FINISHES if for_sets else frozenset()
        colors = [term for term in find_terms(query, PARALLEL_TERMS) if term not in finishes]

        base = strip_terms(query, fixed.matched_spans(include_years=not for_sets))
        cleaned = strip_terms(base, colors)

        max_words = self._settings.ngram_single_word_max_words
        ngrams = generate_ngrams(cleaned, min_chars, max_words)
        if colors:
            color_words = set(colors)
            for ngram in generate_ngrams(base, min_chars, single_word_max_words=0):
                words = ngram.lower().split()
                if any(word in color_words for word in words) and ngram not in ngrams:
                    ngrams.append(ngram)
        return ngrams

    async def extract_players(self, query: str, fixed: PatternTokens) -> list[PlayerToken]:
        """Players named anywhere in the query."""
        ngrams = self._name_ngrams(query, fixed, self._settings.player_ngram_min_chars)
        if not ngrams:
            return []
        matches = await self._match_ngrams(
            ngrams,
            self._caches.players,
            "player",
            self._repo.search_players,
            lambda row: row.player_id,
        )
        tokens = [self.player_token(row, ngram, score_player(row, ngram)) for row, ngram in matches]
        tokens.sort(key=lambda t: -t.confidence)
        for token in tokens:
            logger.debug(
                "Player %r via %r (%d)", token.full_name, token.matched, token.confidence
            )
        return keep_best(tokens)

    async def players_by_soundex(self, code: str) -> tuple[PlayerRow, ...]:
        """Players whose last name has the Soundex code (cached)."""
        return await self._lookup(
            self._caches.players, "soundex", code, self._repo.search_players_by_soundex
        )

    @staticmethod
    def player_token(row: PlayerRow, matched: str, confidence: int) -> PlayerToken:
        return PlayerToken(
            player_id=row.player_id,
            first_name=row.first_name,
            last_name=row.last_name,
            nick_name=row.nick_name,
            full_name=row.full_name,
            card_count=row.card_count,
            is_hof=row.is_hof,
            confidence=confidence,
            matched=matched,
        )

    async def extract_teams(self, query: str, fixed: PatternTokens) -> list[TeamToken]:
        """Teams named by full name, city, mascot or abbreviation."""
        ngrams = self._name_ngrams(query, fixed, self._settings.team_ngram_min_chars)
        if not ngrams:
            return []
        matches = await self._match_ngrams(
            ngrams,
            self._caches.teams,
            "team",
            self._repo.search_teams,
            lambda row: row.team_id,
        )
        tokens = [
            TeamToken(
                team_id=row.team_id,
                name=row.name,
                city=row.city,
                mascot=row.mascot,
                abbreviation=row.abbreviation,
                confidence=score_team(row, ngram),
                matched=ngram,
            )
            for row, ngram in matches
        ]
        tokens.sort(key=lambda t: -t.confidence)
        return keep_best(tokens)

    async def extract_sets(self, query: str, fixed: PatternTokens) -> list[SetToken]:
        """Series named by series, set or manufacturer name.

        Years stay in the text ("2020 bowman chrome") and so do the finishes
        that are part of set names (chrome, prism, prizm).
        """
        ngrams = self._name_ngrams(
            query, fixed, self._settings.set_ngram_min_chars, for_sets=True
        )
        if not ngrams:
            return []
        matches = await self._match_ngrams(
            ngrams,
            self._caches.series,
            "set",
            self._repo.search_series,
            lambda row: row.series_id,
        )
        tokens = [
            SetToken(
                series_id=row.series_id,
                series_name=row.series_name,
                set_name=row.set_name,
                manufacturer_name=row.manufacturer_name,
                year=row.year,
                confidence=score_set(row, ngram),
                matched=ngram,
            )
            for row, ngram in matches
        ]
        tokens.sort(key=lambda t: (-t.confidence, -(t.year or 0)))
        return keep_best(tokens)

    async def extract_inserts(self, query: str) -> list[InsertToken]:
        """Insert and subset series named by a known insert phrase."""
        phrases = find_terms(query, INSERT_TERMS)
        if not phrases:
            return []
        results = await asyncio.gather(
            *(
                self._lookup(self._caches.series, "insert", phrase, self._repo.search_inserts)
                for phrase in phrases
            )
        )
        matches: dict[int, InsertToken] = {}
        for phrase, rows in zip(phrases, results, strict=True):
            for row in rows:
                existing = matches.get(row.series_id)
                if existing is not None and len(existing.matched) >= len(phrase):
                    continue
                in_name = phrase in row.series_name.lower()
                matches[row.series_id] = InsertToken(
                    series_id=row.series_id,
                    series_name=row.series_name,
                    set_name=row.set_name,
                    manufacturer_name=row.manufacturer_name,
                    year=row.year,
                    confidence=INSERT_NAME_CONFIDENCE if in_name else INSERT_PARTIAL_CONFIDENCE,
                    matched=phrase,
                )
        return list(matches.values())

    async def _colors_for(
        self, terms: Sequence[str], confidence: int
    ) -> list[ParallelToken]:
        """One color lookup per distinct term, deduplicated by color."""
        results: Sequence[tuple[ColorRow, ...]] = await asyncio.gather(
            *(
                self._lookup(self._caches.colors, "color", term, self._repo.search_colors)
                for term in terms
            )
        )
        tokens: dict[int, ParallelToken] = {}
        for term, rows in zip(terms, results, strict=True):
            for row in rows:
                if row.color_id in tokens:
                    continue
                tokens[row.color_id] = ParallelToken(
                    color_id=row.color_id,
                    color_name=row.color_name,
                    hex_value=row.hex_value,
                    confidence=confidence,
                    matched=term,
                )
        return list(tokens.values())

    async def extract_parallels(self, query: str) -> list[ParallelToken]:
        """Parallels named by color or finish words, looked up one word at a time."""
        terms = find_terms(query, PARALLEL_TERMS)
        if not terms:
            return []
        return await self._colors_for(terms, PARALLEL_CONFIDENCE)

    async def extract_keywords(
        self, query: str
    ) -> tuple[list[KeywordToken], list[ParallelToken]]:
        """Design keywords, plus any colors those keywords name."""
        terms = find_terms(query, DESIGN_KEYWORDS)
        if not terms:
            return [], []
        keywords = [
            KeywordToken(keyword=term, confidence=KEYWORD_CONFIDENCE, matched=term)
            for term in terms
        ]
        return keywords, await self._colors_for(terms, KEYWORD_PARALLEL_CONFIDENCE)


async def isolated(label: str, extraction: Awaitable[T], empty: T) -> T:
    """Await one sub-extraction, treating a repository failure as no tokens."""
    try:
        return await extraction
    except RepositoryError as e:
        logger.warning("%s extraction failed, continuing without it: %s", label, e)
        return empty
