"""Tests for progressive filter relaxation and result ranking."""

from __future__ import annotations

from card_search.data.database import CatalogDatabase
from card_search.data.models import (
    CardTypeFlags,
    EntityType,
    Facet,
    KeywordToken,
    PlayerToken,
    SearchResult,
    SerialToken,
    Strategy,
    TokenSet,
    YearToken,
)
from card_search.search import RELAXATION_ORDER, QueryPlanner, RelaxationController, rank

KWAN = PlayerToken(
    player_id=2,
    first_name="Steven",
    last_name="Kwan",
    full_name="Steven Kwan",
    confidence=100,
    matched="steven kwan",
)


def _result(entity_type: EntityType, entity_id: int, relevance: int) -> SearchResult:
    return SearchResult(entity_type=entity_type, entity_id=entity_id, relevance_score=relevance)


class TestRelaxationOrder:
    def test_players_and_production_codes_never_removed(self) -> None:
        assert Facet.PLAYER not in RELAXATION_ORDER
        assert Facet.PRODUCTION_CODE not in RELAXATION_ORDER

    def test_least_important_first(self) -> None:
        assert RELAXATION_ORDER[0] is Facet.SERIAL
        assert RELAXATION_ORDER[-1] is Facet.TEAM


class TestRelaxationController:
    """Tests for relaxation against the seeded catalog."""

    async def test_drops_serial_first(self, catalog: CatalogDatabase) -> None:
        tokens = TokenSet(
            players=[KWAN],
            years=[YearToken(year=2020, confidence=95, matched="2020")],
            serials=[SerialToken(print_run=99, confidence=95, matched="/99")],
        )
        outcome = await RelaxationController(QueryPlanner(catalog)).relax(tokens, 50)

        assert outcome.found
        assert outcome.filters_removed == ["serial"]
        assert outcome.message == "No exact matches found. Showing results without: serial"
        assert {r.entity_id for r in outcome.results} == {3, 4}
        assert outcome.pattern is not None
        assert outcome.pattern.strategy is Strategy.CARDS_WITH_MULTI_FILTERS

    async def test_drops_facets_cumulatively(self, catalog: CatalogDatabase) -> None:
        tokens = TokenSet(
            players=[KWAN],
            years=[YearToken(year=1999, confidence=95, matched="1999")],
            serials=[SerialToken(print_run=99, confidence=95, matched="/99")],
            card_types=CardTypeFlags(relic=True),
        )
        outcome = await RelaxationController(QueryPlanner(catalog)).relax(tokens, 50)

        assert outcome.filters_removed == ["serial", "card_types", "year"]
        assert outcome.pattern is not None
        assert outcome.pattern.strategy is Strategy.PLAYER_ONLY
        assert [(r.entity_type, r.entity_id) for r in outcome.results] == [
            (EntityType.PLAYER, 2)
        ]

    async def test_exhausted(self, catalog: CatalogDatabase) -> None:
        mojo = KeywordToken(keyword="mojo", confidence=75, matched="mojo")
        outcome = await RelaxationController(QueryPlanner(catalog)).relax(
            TokenSet(keywords=[mojo]), 50
        )

        assert not outcome.found
        assert outcome.filters_removed == ["keywords"]
        assert outcome.message == "No matches even after relaxing filters: keywords"

    async def test_nothing_to_remove(self, catalog: CatalogDatabase) -> None:
        outcome = await RelaxationController(QueryPlanner(catalog)).relax(TokenSet(), 50)

        assert not outcome.found
        assert outcome.filters_removed == []
        assert outcome.message == "No matches found"


class TestRank:
    def test_relevance_descending(self) -> None:
        ranked = rank(
            [
                _result(EntityType.CARD, 1, 70),
                _result(EntityType.CARD, 2, 90),
                _result(EntityType.CARD, 3, 80),
            ]
        )
        assert [r.entity_id for r in ranked] == [2, 3, 1]

    def test_ties_by_entity_type(self) -> None:
        ranked = rank(
            [
                _result(EntityType.SERIES, 1, 90),
                _result(EntityType.TEAM, 1, 90),
                _result(EntityType.PLAYER, 1, 90),
                _result(EntityType.CARD, 1, 90),
            ]
        )
        assert [r.entity_type for r in ranked] == [
            EntityType.CARD,
            EntityType.PLAYER,
            EntityType.TEAM,
            EntityType.SERIES,
        ]

    def test_stable_for_equal_keys(self) -> None:
        ranked = rank([_result(EntityType.CARD, 5, 80), _result(EntityType.CARD, 4, 80)])
        assert [r.entity_id for r in ranked] == [5, 4]

    def test_deduplicates_keeping_first(self) -> None:
        ranked = rank(
            [
                _result(EntityType.CARD, 1, 70),
                _result(EntityType.CARD, 1, 95),
                _result(EntityType.PLAYER, 1, 60),
            ]
        )
        assert [(r.entity_type, r.relevance_score) for r in ranked] == [
            (EntityType.CARD, 70),
            (EntityType.PLAYER, 60),
        ]

    def test_empty(self) -> None:
        assert rank([]) == []
