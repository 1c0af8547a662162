"""Pattern classification and search response models."""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

SuggestionType = Literal["player_alternative", "set_correction"]


class PatternShape(str, Enum):
    """Query shape, by number of active token types."""

    EMPTY = "EMPTY"
    SINGLE = "SINGLE"
    TWO = "TWO"
    THREE = "THREE"
    FOUR_RICH = "FOUR_RICH"
    COMPLEX = "COMPLEX"


class Strategy(str, Enum):
    """Retrieval strategy selected for a pattern."""

    NO_RESULTS = "NO_RESULTS"
    PRODUCTION_CODE_ONLY = "PRODUCTION_CODE_ONLY"
    PLAYER_ONLY = "PLAYER_ONLY"
    CARD_NUMBER_ONLY = "CARD_NUMBER_ONLY"
    YEAR_BROWSE = "YEAR_BROWSE"
    SET_BROWSE = "SET_BROWSE"
    TEAM_BROWSE = "TEAM_BROWSE"
    CARD_TYPE_ONLY = "CARD_TYPE_ONLY"
    PARALLEL_BROWSE = "PARALLEL_BROWSE"
    SERIAL_BROWSE = "SERIAL_BROWSE"
    INSERT_BROWSE = "INSERT_BROWSE"
    KEYWORD_BROWSE = "KEYWORD_BROWSE"
    PLAYER_CARD_NUMBER = "PLAYER_CARD_NUMBER"
    SET_YEAR_BROWSE = "SET_YEAR_BROWSE"
    CARDS_WITH_MULTI_FILTERS = "CARDS_WITH_MULTI_FILTERS"


class EntityType(str, Enum):
    """Catalog entity a search result points at."""

    CARD = "card"
    PLAYER = "player"
    TEAM = "team"
    SERIES = "series"


class Pattern(BaseModel):
    """Classification of a TokenSet into a retrieval strategy."""

    model_config = ConfigDict(frozen=True)

    shape: PatternShape
    strategy: Strategy
    confidence: int = Field(ge=0, le=100)
    active_type_count: int = 0


class SearchResult(BaseModel):
    """One ranked search hit."""

    model_config = ConfigDict(frozen=True)

    entity_type: EntityType
    entity_id: int
    display_fields: dict[str, Any] = Field(default_factory=dict)
    relevance_score: int = Field(ge=0, le=100)


class PatternSummary(BaseModel):
    """Pattern details reported back to the caller."""

    shape: PatternShape
    strategy: Strategy
    confidence: int


class RelaxationInfo(BaseModel):
    """Which filters were dropped to recover from a zero-result query."""

    filters_removed: list[str] = Field(default_factory=list)
    message: str


class Suggestion(BaseModel):
    """A "did you mean" hint."""

    type: SuggestionType
    original: str
    suggestion: str
    reason: str


class SearchResponse(BaseModel):
    """Result of a universal search."""

    query: str
    results: list[SearchResult] = Field(default_factory=list)
    total_results: int = 0
    pattern: PatternSummary | None = None
    relaxed: RelaxationInfo | None = None
    suggestions: list[Suggestion] = Field(default_factory=list)
    message: str | None = None
    search_time_ms: float = 0.0
