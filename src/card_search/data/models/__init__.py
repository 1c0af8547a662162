"""Data models for card search."""

from .responses import (
    EntityType,
    Pattern,
    PatternShape,
    PatternSummary,
    RelaxationInfo,
    SearchResponse,
    SearchResult,
    Strategy,
    Suggestion,
    SuggestionType,
)
from .rows import CardFilters, CardRow, ColorRow, PlayerRow, SeriesRow, TeamRow
from .tokens import (
    CardNumberClass,
    CardNumberToken,
    CardTypeFlags,
    Facet,
    InsertToken,
    KeywordToken,
    ParallelToken,
    PlayerToken,
    ProductionCodeToken,
    SerialToken,
    SetToken,
    TeamToken,
    Token,
    TokenSet,
    YearToken,
    unique_tokens,
)

__all__ = [
    "CardFilters",
    "CardNumberClass",
    "CardNumberToken",
    "CardRow",
    "CardTypeFlags",
    "ColorRow",
    "EntityType",
    "Facet",
    "InsertToken",
    "KeywordToken",
    "ParallelToken",
    "Pattern",
    "PatternShape",
    "PatternSummary",
    "PlayerRow",
    "PlayerToken",
    "ProductionCodeToken",
    "RelaxationInfo",
    "SearchResponse",
    "SearchResult",
    "SerialToken",
    "SeriesRow",
    "SetToken",
    "Strategy",
    "Suggestion",
    "SuggestionType",
    "TeamRow",
    "TeamToken",
    "Token",
    "TokenSet",
    "YearToken",
    "unique_tokens",
]
