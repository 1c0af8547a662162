"""Tests for the pattern-based extractors (no catalog access)."""

from __future__ import annotations

import pytest

from card_search.data.models import CardNumberClass
from card_search.search.extractors import (
    PatternTokens,
    extract_card_numbers,
    extract_card_types,
    extract_production_codes,
    extract_serials,
    extract_years,
    find_terms,
    generate_ngrams,
    strip_terms,
)


class TestNgrams:
    def test_two_words_include_single_words(self) -> None:
        assert generate_ngrams("steven kwan", 2) == ["steven kwan", "steven", "kwan"]

    def test_three_words_skip_single_words(self) -> None:
        assert generate_ngrams("mike trout angels", 2) == [
            "mike trout angels",
            "mike trout",
            "trout angels",
        ]

    def test_min_chars(self) -> None:
        assert generate_ngrams("a bc", 3) == ["a bc"]

    def test_single_word_limit_configurable(self) -> None:
        ngrams = generate_ngrams("mike trout angels", 2, single_word_max_words=3)
        assert ngrams[-3:] == ["mike", "trout", "angels"]

    def test_empty(self) -> None:
        assert generate_ngrams("", 2) == []


class TestTerms:
    def test_whole_words_only(self) -> None:
        assert find_terms("sparkling refractor", ["sp", "refractor"]) == ["refractor"]

    def test_vocabulary_order(self) -> None:
        assert find_terms("gold pink", ["pink", "gold"]) == ["pink", "gold"]

    def test_phrase(self) -> None:
        assert find_terms("trout 1st bowman", ["1st bowman"]) == ["1st bowman"]

    def test_strip_collapses_whitespace(self) -> None:
        assert strip_terms("steven  kwan auto /25", ["auto", "/25"]) == "steven kwan"


class TestCardNumbers:
    @pytest.mark.parametrize(
        ("query", "pattern", "pattern_class", "confidence"),
        [
            ("kwan bcp-25", "bcp-25", CardNumberClass.COMPLEX_HYPHENATED, 95),
            ("trout US-175", "US-175", CardNumberClass.STANDARD_HYPHENATED, 95),
            ("T206 wagner", "T206", CardNumberClass.LETTERS_NUMBERS, 90),
            ("27a white", "27a", CardNumberClass.NUMBERS_LETTERS, 90),
            ("108 trout", "108", CardNumberClass.PURE_NUMERIC, 70),
        ],
    )
    def test_classes(
        self, query: str, pattern: str, pattern_class: CardNumberClass, confidence: int
    ) -> None:
        tokens = extract_card_numbers(query)

        assert len(tokens) == 1
        assert tokens[0].pattern == pattern
        assert tokens[0].pattern_class is pattern_class
        assert tokens[0].confidence == confidence

    def test_hyphenated_number_not_reclaimed_as_numeric(self) -> None:
        """The digits of "US-175" are not a second card number."""
        assert [t.pattern for t in extract_card_numbers("US-175")] == ["US-175"]

    @pytest.mark.parametrize(
        "query",
        ["trout /25", "2020 topps", "1st bowman", "game-used jersey", "numbered 50"],
    )
    def test_not_card_numbers(self, query: str) -> None:
        assert extract_card_numbers(query) == []

    def test_hash_prefix_is_card_number(self) -> None:
        assert [t.pattern for t in extract_card_numbers("trout #108")] == ["108"]

    def test_duplicates_dropped(self) -> None:
        assert len(extract_card_numbers("108 trout 108")) == 1


class TestYears:
    def test_range(self) -> None:
        years = extract_years("1886 1887 2028 2030", current_year=2026)
        assert [t.year for t in years] == [1887, 2028]

    def test_confidence_and_dedupe(self) -> None:
        years = extract_years("2020 bowman 2020")
        assert len(years) == 1
        assert years[0].confidence == 95
        assert years[0].matched == "2020"

    def test_not_inside_longer_number(self) -> None:
        assert extract_years("CMP202012") == []


class TestSerials:
    @pytest.mark.parametrize(
        ("query", "print_run", "confidence"),
        [
            ("kwan /25", 25, 95),
            ("trout numbered 50", 50, 85),
            ("trout to 99", 99, 85),
            ("trout #'d 10", 10, 85),
        ],
    )
    def test_forms(self, query: str, print_run: int, confidence: int) -> None:
        serials = extract_serials(query)

        assert len(serials) == 1
        assert serials[0].print_run == print_run
        assert serials[0].confidence == confidence

    @pytest.mark.parametrize("query", ["trout /0", "trout /10000", "trout #108"])
    def test_out_of_range_or_not_serial(self, query: str) -> None:
        assert extract_serials(query) == []


class TestProductionCodes:
    def test_uppercased(self) -> None:
        codes = extract_production_codes("cmp123456")
        assert [t.code for t in codes] == ["CMP123456"]
        assert codes[0].confidence == 98

    def test_requires_six_digits(self) -> None:
        assert extract_production_codes("CMP12345") == []


class TestCardTypes:
    def test_flags(self) -> None:
        flags = extract_card_types("trout 1st bowman chrome auto")
        assert flags.rookie
        assert flags.autograph
        assert not flags.short_print
        assert not flags.relic
        assert flags.active_count == 2

    def test_relic_phrase(self) -> None:
        assert extract_card_types("game used jersey").relic

    def test_substring_does_not_count(self) -> None:
        assert not extract_card_types("sparkling").has_any


class TestPatternTokens:
    def test_from_query(self) -> None:
        fixed = PatternTokens.from_query("steven kwan pink 2020 bowman chrome auto /25")

        assert fixed.card_numbers == []
        assert [t.year for t in fixed.years] == [2020]
        assert [t.print_run for t in fixed.serials] == [25]
        assert fixed.card_types.autograph
        assert fixed.card_type_terms == ["auto"]

    def test_matched_spans_longest_first(self) -> None:
        fixed = PatternTokens.from_query("trout us-175 2011 rc")
        assert fixed.matched_spans() == ["us-175", "2011", "rc"]
        assert fixed.matched_spans(include_years=False) == ["us-175", "rc"]
