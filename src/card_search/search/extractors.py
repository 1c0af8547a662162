"""Pattern-based token extractors.

These run first and need no catalog access: card numbers, years, serial
numbers, production codes and card-type flags are recognized from the raw
query alone. Their matched text is later stripped before name lookups.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date
from functools import lru_cache

from ..data.models import (
    CardNumberClass,
    CardNumberToken,
    CardTypeFlags,
    ProductionCodeToken,
    SerialToken,
    YearToken,
)
from .constants import (
    AUTOGRAPH_TERMS,
    CARD_TYPE_TERMS,
    MAX_PRINT_RUN,
    MIN_CARD_YEAR,
    PRODUCTION_CODE_CONFIDENCE,
    RELIC_TERMS,
    ROOKIE_TERMS,
    SERIAL_PHRASE_CONFIDENCE,
    SERIAL_SLASH_CONFIDENCE,
    SHORT_PRINT_TERMS,
    VOCABULARY_HYPHENATED,
    YEAR_CONFIDENCE,
    YEAR_LOOKAHEAD,
)

logger = logging.getLogger(__name__)

# Ordered most to least specific; the first rule to claim an occurrence wins
CARD_NUMBER_RULES: tuple[tuple[re.Pattern[str], CardNumberClass, int], ...] = (
    (
        re.compile(r"\b([A-Z0-9]{2,}[A-Z]{1,3}-[A-Z0-9]{1,3})\b", re.IGNORECASE),
        CardNumberClass.COMPLEX_HYPHENATED,
        95,
    ),
    (
        re.compile(r"\b([A-Z]{1,4}-[A-Z0-9]{1,4})\b", re.IGNORECASE),
        CardNumberClass.STANDARD_HYPHENATED,
        95,
    ),
    (
        re.compile(r"\b([A-Z]-\d{1,3})\b", re.IGNORECASE),
        CardNumberClass.SIMPLE_HYPHENATED,
        95,
    ),
    (
        re.compile(r"\b([A-Z]{1,4}\d{1,4}[A-Z]?)\b", re.IGNORECASE),
        CardNumberClass.LETTERS_NUMBERS,
        90,
    ),
    (
        re.compile(r"\b(\d{1,4}[A-Z]{1,2})\b", re.IGNORECASE),
        CardNumberClass.NUMBERS_LETTERS,
        90,
    ),
    (
        re.compile(r"\b(\d{1,3})\b"),
        CardNumberClass.PURE_NUMERIC,
        70,
    ),
)

# "/25" is the canonical print-run form; phrases score lower
SERIAL_RULES: tuple[tuple[re.Pattern[str], int], ...] = (
    (re.compile(r"/(\d+)\b"), SERIAL_SLASH_CONFIDENCE),
    (re.compile(r"\bto\s+(\d+)\b", re.IGNORECASE), SERIAL_PHRASE_CONFIDENCE),
    (re.compile(r"\bnumbered\s+(\d+)\b", re.IGNORECASE), SERIAL_PHRASE_CONFIDENCE),
    (re.compile(r"#'?d\s*(\d+)\b", re.IGNORECASE), SERIAL_PHRASE_CONFIDENCE),
)

YEAR_PATTERN = re.compile(r"\b(\d{4})\b")
YEAR_SHAPED = re.compile(r"^(19|20)\d{2}$")
ORDINAL = re.compile(r"^\d+(st|nd|rd|th)$", re.IGNORECASE)
PRODUCTION_CODE_PATTERN = re.compile(r"\b(CMP\d{6})\b", re.IGNORECASE)

MAX_CARD_NUMBER_LENGTH = 10


@lru_cache(maxsize=512)
def _term_pattern(term: str) -> re.Pattern[str]:
    """Whole-word (or whole-phrase) matcher for a vocabulary term."""
    left = r"(?<![A-Za-z0-9])" if term[0].isalnum() else ""
    right = r"(?![A-Za-z0-9])" if term[-1].isalnum() else ""
    return re.compile(left + re.escape(term) + right, re.IGNORECASE)


def find_terms(text: str, terms: Iterable[str]) -> list[str]:
    """Vocabulary terms present in the text as whole words, in vocabulary order."""
    return [term for term in dict.fromkeys(terms) if _term_pattern(term).search(text)]


def strip_terms(text: str, terms: Iterable[str]) -> str:
    """Remove every whole-word occurrence of the terms and collapse whitespace."""
    for term in terms:
        if term:
            text = _term_pattern(term).sub(" ", text)
    return " ".join(text.split())


def generate_ngrams(text: str, min_chars: int, single_word_max_words: int = 2) -> list[str]:
    """Contiguous word n-grams of the text, longest first.

    One-word n-grams are only produced when the text has at most
    ``single_word_max_words`` words. N-grams shorter than ``min_chars``
    characters are dropped.

    Examples:
        >>> generate_ngrams("steven kwan", 2)
        ['steven kwan', 'steven', 'kwan']
        >>> generate_ngrams("mike trout angels", 2)
        ['mike trout angels', 'mike trout', 'trout angels']
    """
    words = text.split()
    min_words = 1 if len(words) <= single_word_max_words else 2
    ngrams: list[str] = []
    for length in range(len(words), min_words - 1, -1):
        for start in range(len(words) - length + 1):
            ngram = " ".join(words[start : start + length])
            if len(ngram) >= min_chars:
                ngrams.append(ngram)
    return ngrams


def _overlaps(span: tuple[int, int], claimed: Sequence[tuple[int, int]]) -> bool:
    start, end = span
    return any(start < c_end and c_start < end for c_start, c_end in claimed)


def serial_spans(query: str) -> list[tuple[int, int]]:
    """Character spans of every print-run phrase in the query."""
    return [match.span() for pattern, _ in SERIAL_RULES for match in pattern.finditer(query)]


def extract_card_numbers(query: str) -> list[CardNumberToken]:
    """Card numbers such as "108", "US-175", "BCP-25" or "T206".

    Serial phrases ("/25", "numbered 25"), ordinals, year-shaped numbers and
    hyphenated vocabulary ("game-used") are not card numbers.
    """
    claimed: list[tuple[int, int]] = serial_spans(query)
    seen: set[str] = set()
    tokens: list[CardNumberToken] = []

    for pattern, pattern_class, confidence in CARD_NUMBER_RULES:
        for match in pattern.finditer(query):
            span = match.span(1)
            if _overlaps(span, claimed):
                continue
            value = match.group(1)
            key = value.lower()
            if (
                key in seen
                or key in VOCABULARY_HYPHENATED
                or ORDINAL.match(value)
                or YEAR_SHAPED.match(value)
                or len(value) > MAX_CARD_NUMBER_LENGTH
            ):
                continue

            claimed.append(span)
            seen.add(key)
            tokens.append(
                CardNumberToken(
                    pattern=value,
                    pattern_class=pattern_class,
                    confidence=confidence,
                    matched=value,
                )
            )
            logger.debug("Card number %r (%s, %d)", value, pattern_class.value, confidence)

    return tokens


def extract_years(query: str, current_year: int | None = None) -> list[YearToken]:
    """Standalone four-digit years between 1887 and two years from now."""
    latest = (current_year or date.today().year) + YEAR_LOOKAHEAD
    tokens: list[YearToken] = []
    seen: set[int] = set()
    for match in YEAR_PATTERN.finditer(query):
        year = int(match.group(1))
        if not MIN_CARD_YEAR <= year <= latest or year in seen:
            continue
        seen.add(year)
        tokens.append(YearToken(year=year, confidence=YEAR_CONFIDENCE, matched=match.group(1)))
    return tokens


def extract_serials(query: str) -> list[SerialToken]:
    """Print runs written as "/25", "to 25", "numbered 25" or "#'d 25"."""
    tokens: list[SerialToken] = []
    seen: set[int] = set()
    for pattern, confidence in SERIAL_RULES:
        for match in pattern.finditer(query):
            print_run = int(match.group(1))
            if not 1 <= print_run <= MAX_PRINT_RUN or print_run in seen:
                continue
            seen.add(print_run)
            tokens.append(
                SerialToken(print_run=print_run, confidence=confidence, matched=match.group(0))
            )
    return tokens


def extract_production_codes(query: str) -> list[ProductionCodeToken]:
    """Production codes ("CMP" followed by six digits), uppercased."""
    tokens: list[ProductionCodeToken] = []
    seen: set[str] = set()
    for match in PRODUCTION_CODE_PATTERN.finditer(query):
        code = match.group(1).upper()
        if code in seen:
            continue
        seen.add(code)
        tokens.append(
            ProductionCodeToken(
                code=code, confidence=PRODUCTION_CODE_CONFIDENCE, matched=match.group(1)
            )
        )
    return tokens


def extract_card_types(query: str) -> CardTypeFlags:
    """Rookie, autograph, short-print and relic flags."""
    return CardTypeFlags(
        rookie=bool(find_terms(query, ROOKIE_TERMS)),
        autograph=bool(find_terms(query, AUTOGRAPH_TERMS)),
        short_print=bool(find_terms(query, SHORT_PRINT_TERMS)),
        relic=bool(find_terms(query, RELIC_TERMS)),
    )


@dataclass(frozen=True)
class PatternTokens:
    """Tokens recognized from the raw query without catalog lookups."""

    card_numbers: list[CardNumberToken] = field(default_factory=list)
    years: list[YearToken] = field(default_factory=list)
    serials: list[SerialToken] = field(default_factory=list)
    production_codes: list[ProductionCodeToken] = field(default_factory=list)
    card_types: CardTypeFlags = field(default_factory=CardTypeFlags)
    card_type_terms: list[str] = field(default_factory=list)

    @classmethod
    def from_query(cls, query: str) -> PatternTokens:
        return cls(
            card_numbers=extract_card_numbers(query),
            years=extract_years(query),
            serials=extract_serials(query),
            production_codes=extract_production_codes(query),
            card_types=extract_card_types(query),
            card_type_terms=find_terms(query, CARD_TYPE_TERMS),
        )

    def matched_spans(self, include_years: bool = True) -> list[str]:
        """Matched text to strip before name lookups, longest first."""
        spans = [t.matched for t in self.card_numbers]
        spans += [t.matched for t in self.serials]
        spans += [t.matched for t in self.production_codes]
        if include_years:
            spans += [t.matched for t in self.years]
        spans += self.card_type_terms
        return sorted(spans, key=len, reverse=True)
