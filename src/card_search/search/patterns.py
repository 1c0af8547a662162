"""Pattern recognition: classify a TokenSet into a retrieval strategy."""

from __future__ import annotations

from collections.abc import Callable

from ..data.models import Facet, Pattern, PatternShape, Strategy, TokenSet
from .constants import CARD_TYPE_CONFIDENCE

DEFAULT_SINGLE_CONFIDENCE = 80
DEFAULT_PRODUCTION_CODE_CONFIDENCE = 98

_SHAPES = {
    0: PatternShape.EMPTY,
    1: PatternShape.SINGLE,
    2: PatternShape.TWO,
    3: PatternShape.THREE,
    4: PatternShape.FOUR_RICH,
}

# Single-facet strategies, checked in this order
_SINGLE_STRATEGIES: tuple[tuple[Facet, Strategy], ...] = (
    (Facet.PRODUCTION_CODE, Strategy.PRODUCTION_CODE_ONLY),
    (Facet.PLAYER, Strategy.PLAYER_ONLY),
    (Facet.CARD_NUMBER, Strategy.CARD_NUMBER_ONLY),
    (Facet.YEAR, Strategy.YEAR_BROWSE),
    (Facet.SET, Strategy.SET_BROWSE),
    (Facet.TEAM, Strategy.TEAM_BROWSE),
    (Facet.CARD_TYPES, Strategy.CARD_TYPE_ONLY),
    (Facet.PARALLEL, Strategy.PARALLEL_BROWSE),
    (Facet.SERIAL, Strategy.SERIAL_BROWSE),
    (Facet.INSERT, Strategy.INSERT_BROWSE),
    (Facet.KEYWORDS, Strategy.KEYWORD_BROWSE),
)

# Single facets that keep their token's own confidence
_SELF_SCORED = (Facet.PLAYER, Facet.CARD_NUMBER, Facet.YEAR, Facet.SERIAL)

_SHAPE_BONUS = {
    PatternShape.THREE: 5,
    PatternShape.FOUR_RICH: 10,
    PatternShape.COMPLEX: 10,
}


def active_type_count(tokens: TokenSet) -> int:
    """Non-empty token variants; each set card-type flag counts once."""
    count = sum(1 for facet in tokens.active_facets() if facet is not Facet.CARD_TYPES)
    return count + tokens.card_types.active_count


def shape_for(count: int) -> PatternShape:
    return _SHAPES.get(count, PatternShape.COMPLEX)


def _only(tokens: TokenSet, *facets: Facet) -> bool:
    return set(tokens.active_facets()) == set(facets)


def _empty(tokens: TokenSet, shape: PatternShape, count: int) -> Strategy | None:
    return Strategy.NO_RESULTS if shape is PatternShape.EMPTY else None


def _single_facet(tokens: TokenSet, shape: PatternShape, count: int) -> Strategy | None:
    if shape is not PatternShape.SINGLE:
        return None
    for facet, strategy in _SINGLE_STRATEGIES:
        if tokens.has(facet):
            return strategy
    return None


def _player_card_number(tokens: TokenSet, shape: PatternShape, count: int) -> Strategy | None:
    if count == 2 and _only(tokens, Facet.PLAYER, Facet.CARD_NUMBER):
        return Strategy.PLAYER_CARD_NUMBER
    return None


def _set_year(tokens: TokenSet, shape: PatternShape, count: int) -> Strategy | None:
    if (
        tokens.has(Facet.YEAR)
        and tokens.has(Facet.SET)
        and not tokens.has(Facet.PLAYER)
        and not tokens.has(Facet.CARD_NUMBER)
    ):
        return Strategy.SET_YEAR_BROWSE
    return None


# Evaluated in order; the first rule returning a strategy wins
_STRATEGY_RULES: tuple[Callable[[TokenSet, PatternShape, int], Strategy | None], ...] = (
    _empty,
    _single_facet,
    _player_card_number,
    _set_year,
)


def select_strategy(tokens: TokenSet, shape: PatternShape, count: int) -> Strategy:
    """Strategy for a TokenSet; multi-filter card search when no rule applies."""
    for rule in _STRATEGY_RULES:
        strategy = rule(tokens, shape, count)
        if strategy is not None:
            return strategy
    return Strategy.CARDS_WITH_MULTI_FILTERS


def pattern_confidence(tokens: TokenSet, shape: PatternShape) -> int:
    """How sure we are about the pattern.

    Single-facet patterns use the token's own confidence for players, card
    numbers, years and serials (production codes default to 98, anything
    else 80). Multi-facet patterns average the top confidence of each active
    facet, card types counting 90, plus a bonus for richer queries.
    """
    if shape is PatternShape.EMPTY:
        return 0

    if shape is PatternShape.SINGLE:
        if tokens.has(Facet.PRODUCTION_CODE):
            code_confidence = tokens.top_confidence(Facet.PRODUCTION_CODE)
            return code_confidence or DEFAULT_PRODUCTION_CODE_CONFIDENCE
        for facet in _SELF_SCORED:
            if tokens.has(facet):
                return tokens.top_confidence(facet) or DEFAULT_SINGLE_CONFIDENCE
        return DEFAULT_SINGLE_CONFIDENCE

    scores: list[int] = []
    for facet in tokens.active_facets():
        if facet is Facet.CARD_TYPES:
            scores.append(CARD_TYPE_CONFIDENCE)
        else:
            scores.append(tokens.top_confidence(facet) or DEFAULT_SINGLE_CONFIDENCE)

    confidence = round(sum(scores) / len(scores)) + _SHAPE_BONUS.get(shape, 0)
    return min(100, confidence)


def recognize(tokens: TokenSet) -> Pattern:
    """Classify a TokenSet into shape, strategy and confidence."""
    count = active_type_count(tokens)
    shape = shape_for(count)
    return Pattern(
        shape=shape,
        strategy=select_strategy(tokens, shape, count),
        confidence=pattern_confidence(tokens, shape),
        active_type_count=count,
    )
