"""Tests for query planning and execution."""

from __future__ import annotations

from card_search.data.database import CatalogDatabase
from card_search.data.models import (
    CardNumberClass,
    CardNumberToken,
    CardTypeFlags,
    EntityType,
    KeywordToken,
    ParallelToken,
    PlayerToken,
    ProductionCodeToken,
    SerialToken,
    SetToken,
    TeamToken,
    TokenSet,
    YearToken,
)
from card_search.search import QueryPlanner, build_filters, recognize
from card_search.search.planner import filter_relevance

TROUT = PlayerToken(
    player_id=1,
    first_name="Mike",
    last_name="Trout",
    full_name="Mike Trout",
    card_count=2500,
    confidence=98,
    matched="trout",
)
KWAN = PlayerToken(
    player_id=2,
    first_name="Steven",
    last_name="Kwan",
    full_name="Steven Kwan",
    confidence=100,
    matched="steven kwan",
)
MARINERS = TeamToken(team_id=3, name="Seattle Mariners", confidence=90, matched="mariners")
ANGELS = TeamToken(team_id=1, name="Los Angeles Angels", confidence=85, matched="angels")
PINK = ParallelToken(color_id=1, color_name="Pink", confidence=85, matched="pink")


def _card_number(value: str, confidence: int = 70) -> CardNumberToken:
    return CardNumberToken(
        pattern=value,
        pattern_class=CardNumberClass.PURE_NUMERIC,
        confidence=confidence,
        matched=value,
    )


def _set(series_id: int, name: str, confidence: int) -> SetToken:
    return SetToken(series_id=series_id, series_name=name, confidence=confidence, matched=name)


async def _run(catalog: CatalogDatabase, tokens: TokenSet, limit: int = 50):
    return await QueryPlanner(catalog).execute(tokens, recognize(tokens), limit)


class TestBuildFilters:
    def test_maps_every_facet(self) -> None:
        tokens = TokenSet(
            players=[TROUT, KWAN],
            teams=[ANGELS],
            sets=[_set(1, "Bowman Chrome", 100)],
            card_numbers=[_card_number("108"), _card_number("27")],
            years=[YearToken(year=2020, confidence=95, matched="2020")],
            serials=[SerialToken(print_run=25, confidence=95, matched="/25")],
            parallels=[PINK],
            card_types=CardTypeFlags(autograph=True),
        )
        filters = build_filters(tokens)

        assert filters.player_ids == [1, 2]
        assert filters.team_ids == [1]
        assert filters.series_ids == [1]
        assert filters.color_ids == [1]
        assert filters.card_number == "108"
        assert filters.year == 2020
        assert filters.print_run == 25
        assert filters.autograph is True
        assert filters.rookie is None
        assert filters.exact_card_number_first

    def test_keywords_do_not_filter_cards(self) -> None:
        mojo = KeywordToken(keyword="mojo", confidence=75, matched="mojo")
        filters = build_filters(TokenSet(players=[KWAN], keywords=[mojo]))

        assert filters.keyword is None
        assert filters.player_ids == [2]

    def test_empty(self) -> None:
        assert build_filters(TokenSet()).is_empty


class TestFilterRelevance:
    def test_mean_of_active_facets(self) -> None:
        tokens = TokenSet(players=[TROUT], card_numbers=[_card_number("108")])
        assert filter_relevance(tokens) == 84

    def test_card_types_count_ninety(self) -> None:
        tokens = TokenSet(card_types=CardTypeFlags(rookie=True))
        assert filter_relevance(tokens) == 90

    def test_each_card_type_flag_counts(self) -> None:
        tokens = TokenSet(players=[KWAN], card_types=CardTypeFlags(rookie=True, autograph=True))
        assert filter_relevance(tokens) == 93

    def test_keywords_ignored(self) -> None:
        mojo = KeywordToken(keyword="mojo", confidence=75, matched="mojo")
        assert filter_relevance(TokenSet(players=[KWAN], keywords=[mojo])) == 100

    def test_default(self) -> None:
        assert filter_relevance(TokenSet()) == 80


class TestQueryPlanner:
    """Tests for strategy execution against the seeded catalog."""

    async def test_no_results(self, catalog: CatalogDatabase) -> None:
        assert await _run(catalog, TokenSet()) == []

    async def test_player_card_number(self, catalog: CatalogDatabase) -> None:
        results = await _run(catalog, TokenSet(players=[TROUT], card_numbers=[_card_number("108")]))

        assert len(results) == 1
        assert results[0].entity_type is EntityType.CARD
        assert results[0].entity_id == 2
        assert results[0].relevance_score == 84
        assert results[0].display_fields["player_names"] == "Mike Trout"
        assert results[0].display_fields["team_abbreviation"] == "LAA"

    async def test_player_only_lists_teams(self, catalog: CatalogDatabase) -> None:
        results = await _run(catalog, TokenSet(players=[TROUT]))

        assert len(results) == 1
        assert results[0].entity_type is EntityType.PLAYER
        assert results[0].relevance_score == 98
        fields = results[0].display_fields
        assert fields["full_name"] == "Mike Trout"
        assert [team["abbreviation"] for team in fields["teams"]] == ["LAA"]

    async def test_team_browse_counts(self, catalog: CatalogDatabase) -> None:
        results = await _run(catalog, TokenSet(teams=[MARINERS]))

        assert len(results) == 1
        assert results[0].entity_type is EntityType.TEAM
        assert results[0].display_fields["player_count"] == 2
        assert results[0].display_fields["card_count"] == 1

    async def test_set_browse_keeps_token_order(self, catalog: CatalogDatabase) -> None:
        tokens = TokenSet(sets=[_set(2, "Bowman Chrome Pink Refractor", 95), _set(1, "x", 90)])
        results = await _run(catalog, tokens)

        assert [r.entity_id for r in results] == [2, 1]
        assert [r.relevance_score for r in results] == [95, 90]
        assert results[0].display_fields["color_name"] == "Pink"

    async def test_production_code(self, catalog: CatalogDatabase) -> None:
        code = ProductionCodeToken(code="CMP123456", confidence=98, matched="cmp123456")
        results = await _run(catalog, TokenSet(production_codes=[code]))

        assert [(r.entity_type, r.entity_id) for r in results] == [(EntityType.SERIES, 1)]
        assert results[0].relevance_score == 98

    async def test_year_browse(self, catalog: CatalogDatabase) -> None:
        tokens = TokenSet(years=[YearToken(year=2011, confidence=95, matched="2011")])
        results = await _run(catalog, tokens)

        assert [r.entity_id for r in results] == [1, 7]
        assert results[0].display_fields["card_number"] == "US175"

    async def test_card_number_exact_match_first(self, catalog: CatalogDatabase) -> None:
        results = await _run(catalog, TokenSet(card_numbers=[_card_number("BCP-25", 95)]))
        assert {r.entity_id for r in results} == {3, 4}

        # "17" is also inside "US175", a more popular card of the same year
        results = await _run(catalog, TokenSet(card_numbers=[_card_number("17")]))
        assert [r.entity_id for r in results] == [7, 1]

    async def test_parallel_browse(self, catalog: CatalogDatabase) -> None:
        results = await _run(catalog, TokenSet(parallels=[PINK]))

        assert [r.entity_id for r in results] == [3]
        assert results[0].display_fields["print_run"] == 25

    async def test_keyword_browse_matches_series_name(self, catalog: CatalogDatabase) -> None:
        keyword = KeywordToken(keyword="refractor", confidence=75, matched="refractor")
        results = await _run(catalog, TokenSet(keywords=[keyword]))

        assert [r.entity_id for r in results] == [3]

    async def test_multi_filter_cards(self, catalog: CatalogDatabase) -> None:
        tokens = TokenSet(
            players=[KWAN],
            sets=[_set(1, "Bowman Chrome", 100), _set(2, "Bowman Chrome Pink Refractor", 95)],
            years=[YearToken(year=2020, confidence=95, matched="2020")],
            serials=[SerialToken(print_run=25, confidence=95, matched="/25")],
            parallels=[PINK],
            card_types=CardTypeFlags(autograph=True),
        )
        results = await _run(catalog, tokens)

        assert [r.entity_id for r in results] == [3]
        assert all(r.entity_type is EntityType.CARD for r in results)

    async def test_keyword_does_not_narrow_cards(self, catalog: CatalogDatabase) -> None:
        numbered = KeywordToken(keyword="numbered", confidence=75, matched="numbered")
        tokens = TokenSet(
            players=[KWAN],
            serials=[SerialToken(print_run=25, confidence=85, matched="numbered 25")],
            keywords=[numbered],
        )
        results = await _run(catalog, tokens)

        assert [(r.entity_type, r.entity_id) for r in results] == [(EntityType.CARD, 3)]
        assert results[0].relevance_score == 92

    async def test_no_card_filters_returns_nothing(self, catalog: CatalogDatabase) -> None:
        """Facets that never filter cards do not turn into an unfiltered card listing."""
        code = ProductionCodeToken(code="CMP999999", confidence=98, matched="cmp999999")
        mojo = KeywordToken(keyword="mojo", confidence=75, matched="mojo")

        assert await _run(catalog, TokenSet(production_codes=[code], keywords=[mojo])) == []

    async def test_multi_filter_entity_listings(self, catalog: CatalogDatabase) -> None:
        """Entity names without narrowing facets list the entities themselves."""
        results = await _run(catalog, TokenSet(players=[TROUT], teams=[ANGELS]))

        assert [(r.entity_type, r.entity_id) for r in results] == [
            (EntityType.PLAYER, 1),
            (EntityType.TEAM, 1),
        ]

    async def test_limit(self, catalog: CatalogDatabase) -> None:
        tokens = TokenSet(card_types=CardTypeFlags(rookie=True))
        assert len(await _run(catalog, tokens, limit=1)) == 1
