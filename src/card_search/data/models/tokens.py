"""Typed tokens extracted from a free-text search query.

Every token carries a confidence score (0-100) and the part of the query it
was matched from. A TokenSet groups one list per token variant for a single
query; it is never shared between searches.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field


class Facet(str, Enum):
    """A countable, removable dimension of a TokenSet."""

    PLAYER = "player"
    TEAM = "team"
    SET = "set"
    CARD_NUMBER = "card_number"
    YEAR = "year"
    SERIAL = "serial"
    PRODUCTION_CODE = "production_code"
    PARALLEL = "parallel"
    INSERT = "insert"
    CARD_TYPES = "card_types"
    KEYWORDS = "keywords"


class CardNumberClass(str, Enum):
    """Shape of a card number, most specific first."""

    COMPLEX_HYPHENATED = "complex-hyphenated"
    STANDARD_HYPHENATED = "standard-hyphenated"
    SIMPLE_HYPHENATED = "simple-hyphenated"
    LETTERS_NUMBERS = "letters+numbers"
    NUMBERS_LETTERS = "numbers+letters"
    PURE_NUMERIC = "pure-numeric"


class Token(BaseModel):
    """Base token: a confidence-scored fact matched from part of the query."""

    model_config = ConfigDict(frozen=True)

    confidence: int = Field(ge=0, le=100)
    matched: str = ""

    @property
    def identity(self) -> Any:
        """Key used to deduplicate tokens of the same variant."""
        return self.matched.lower()

    @property
    def match_length(self) -> int:
        """Number of words in the matched span."""
        return len(self.matched.split())


class PlayerToken(Token):
    player_id: int
    first_name: str
    last_name: str
    nick_name: str | None = None
    full_name: str
    card_count: int = 0
    is_hof: bool = False

    @property
    def identity(self) -> int:
        return self.player_id

    @property
    def name_words(self) -> set[str]:
        """Lowercased words of the first, last and nick names."""
        words: set[str] = set()
        for part in (self.first_name, self.last_name, self.nick_name):
            if part:
                words.update(part.lower().split())
        return words


class TeamToken(Token):
    team_id: int
    name: str
    city: str | None = None
    mascot: str | None = None
    abbreviation: str | None = None

    @property
    def identity(self) -> int:
        return self.team_id

    @property
    def name_words(self) -> set[str]:
        """Lowercased words of the team name, city and mascot."""
        words: set[str] = set()
        for part in (self.name, self.city, self.mascot):
            if part:
                words.update(part.lower().split())
        return words


class SetToken(Token):
    series_id: int
    series_name: str
    set_name: str | None = None
    manufacturer_name: str | None = None
    year: int | None = None

    @property
    def identity(self) -> int:
        return self.series_id


class InsertToken(Token):
    series_id: int
    series_name: str
    set_name: str | None = None
    manufacturer_name: str | None = None
    year: int | None = None

    @property
    def identity(self) -> int:
        return self.series_id


class CardNumberToken(Token):
    pattern: str
    pattern_class: CardNumberClass

    @property
    def identity(self) -> str:
        return self.pattern.lower()


class YearToken(Token):
    year: int

    @property
    def identity(self) -> int:
        return self.year


class SerialToken(Token):
    print_run: int = Field(ge=1, le=9999)

    @property
    def identity(self) -> int:
        return self.print_run


class ProductionCodeToken(Token):
    code: str

    @property
    def identity(self) -> str:
        return self.code


class ParallelToken(Token):
    color_id: int
    color_name: str
    hex_value: str | None = None

    @property
    def identity(self) -> int:
        return self.color_id


class KeywordToken(Token):
    keyword: str

    @property
    def identity(self) -> str:
        return self.keyword


TokenT = TypeVar("TokenT", bound=Token)


def unique_tokens(tokens: Iterable[TokenT]) -> list[TokenT]:
    """First token per identity, in order."""
    seen: set[Any] = set()
    kept: list[TokenT] = []
    for token in tokens:
        if token.identity in seen:
            continue
        seen.add(token.identity)
        kept.append(token)
    return kept


class CardTypeFlags(BaseModel):
    """Boolean card-type indicators (a set of flags, not a token list)."""

    model_config = ConfigDict(frozen=True)

    rookie: bool = False
    autograph: bool = False
    short_print: bool = False
    relic: bool = False

    @property
    def active_count(self) -> int:
        """Number of flags that are set."""
        return sum((self.rookie, self.autograph, self.short_print, self.relic))

    @property
    def has_any(self) -> bool:
        return self.active_count > 0


# Facets backed by a token list, in TokenSet field order
_LIST_FACETS: dict[Facet, str] = {
    Facet.PLAYER: "players",
    Facet.TEAM: "teams",
    Facet.SET: "sets",
    Facet.CARD_NUMBER: "card_numbers",
    Facet.YEAR: "years",
    Facet.SERIAL: "serials",
    Facet.PRODUCTION_CODE: "production_codes",
    Facet.PARALLEL: "parallels",
    Facet.INSERT: "inserts",
    Facet.KEYWORDS: "keywords",
}


class TokenSet(BaseModel):
    """All tokens extracted from one query, one list per variant."""

    model_config = ConfigDict(frozen=True)

    players: list[PlayerToken] = Field(default_factory=list)
    teams: list[TeamToken] = Field(default_factory=list)
    sets: list[SetToken] = Field(default_factory=list)
    card_numbers: list[CardNumberToken] = Field(default_factory=list)
    years: list[YearToken] = Field(default_factory=list)
    serials: list[SerialToken] = Field(default_factory=list)
    production_codes: list[ProductionCodeToken] = Field(default_factory=list)
    parallels: list[ParallelToken] = Field(default_factory=list)
    inserts: list[InsertToken] = Field(default_factory=list)
    card_types: CardTypeFlags = Field(default_factory=CardTypeFlags)
    keywords: list[KeywordToken] = Field(default_factory=list)

    def tokens_for(self, facet: Facet) -> list[Token]:
        """Token list behind a list facet (empty for card types)."""
        field_name = _LIST_FACETS.get(facet)
        if field_name is None:
            return []
        tokens: list[Token] = getattr(self, field_name)
        return tokens

    def has(self, facet: Facet) -> bool:
        """Whether the facet is active."""
        if facet is Facet.CARD_TYPES:
            return self.card_types.has_any
        return bool(self.tokens_for(facet))

    def active_facets(self) -> list[Facet]:
        """Active facets in declaration order."""
        return [facet for facet in Facet if self.has(facet)]

    def top_confidence(self, facet: Facet) -> int | None:
        """Confidence of the first token of a list facet, if any."""
        tokens = self.tokens_for(facet)
        return tokens[0].confidence if tokens else None

    def without(self, facet: Facet) -> TokenSet:
        """Copy of this set with one facet cleared."""
        if facet is Facet.CARD_TYPES:
            return self.model_copy(update={"card_types": CardTypeFlags()})
        return self.model_copy(update={_LIST_FACETS[facet]: []})
