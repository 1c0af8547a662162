"""Tests for string similarity and phonetic helpers."""

from __future__ import annotations

import pytest

from card_search.utils.text import (
    levenshtein_distance,
    similarity_ratio,
    soundex,
)


class TestLevenshtein:
    @pytest.mark.parametrize(
        ("first", "second", "expected"),
        [
            ("kitten", "sitting", 3),
            ("trout", "trout", 0),
            ("trowt", "trout", 1),
            ("", "abc", 3),
            ("kwan", "", 4),
        ],
    )
    def test_distance(self, first: str, second: str, expected: int) -> None:
        assert levenshtein_distance(first, second) == expected

    def test_symmetric(self) -> None:
        assert levenshtein_distance("longoria", "longria") == levenshtein_distance(
            "longria", "longoria"
        )


class TestSimilarityRatio:
    def test_identical_ignoring_case(self) -> None:
        assert similarity_ratio("Trout", "trout") == 1.0

    def test_both_empty(self) -> None:
        assert similarity_ratio("", "") == 1.0

    def test_one_edit_in_five(self) -> None:
        assert similarity_ratio("trowt", "trout") == pytest.approx(0.8)


class TestSoundex:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("Trout", "T630"),
            ("Robert", "R163"),
            ("Rupert", "R163"),
            ("Tymczak", "T522"),
            ("Pfister", "P236"),
            ("Kwan", "K500"),
            ("Lee", "L000"),
        ],
    )
    def test_codes(self, value: str, expected: str) -> None:
        assert soundex(value) == expected

    def test_ignores_non_letters(self) -> None:
        assert soundex("O'Neil") == soundex("ONeil")

    @pytest.mark.parametrize("value", [None, "", "123"])
    def test_empty_code(self, value: str | None) -> None:
        assert soundex(value) == ""
