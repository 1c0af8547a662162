"""String similarity and phonetic helpers.

Used for matching user input (player names, team names) to catalog records
when the literal text does not match.
"""

from __future__ import annotations

import re

# Standard Soundex consonant classes; vowels and H, W, Y have no class
_SOUNDEX_CLASSES: dict[str, str] = {
    **dict.fromkeys("BFPV", "1"),
    **dict.fromkeys("CGJKQSXZ", "2"),
    **dict.fromkeys("DT", "3"),
    "L": "4",
    **dict.fromkeys("MN", "5"),
    "R": "6",
}

_NON_LETTERS = re.compile(r"[^A-Z]")


def levenshtein_distance(first: str, second: str) -> int:
    """Minimum number of single-character edits turning one string into the other.

    Examples:
        >>> levenshtein_distance("kitten", "sitting")
        3
        >>> levenshtein_distance("mike", "mike")
        0
    """
    rows, cols = len(first), len(second)
    dp = [[0] * (cols + 1) for _ in range(rows + 1)]

    for i in range(rows + 1):
        dp[i][0] = i
    for j in range(cols + 1):
        dp[0][j] = j

    for i in range(1, rows + 1):
        for j in range(1, cols + 1):
            if first[i - 1] == second[j - 1]:
                dp[i][j] = dp[i - 1][j - 1]
            else:
                dp[i][j] = 1 + min(
                    dp[i - 1][j],  # deletion
                    dp[i][j - 1],  # insertion
                    dp[i - 1][j - 1],  # substitution
                )

    return dp[rows][cols]


def similarity_ratio(first: str, second: str) -> float:
    """Similarity from 0.0 (completely different) to 1.0 (identical), case-insensitive."""
    max_length = max(len(first), len(second))
    if max_length == 0:
        return 1.0
    distance = levenshtein_distance(first.lower(), second.lower())
    return 1.0 - distance / max_length


def soundex(value: str | None) -> str:
    """Four-character Soundex code, e.g. "T630" for "Trout".

    Returns an empty string when the value has no letters.
    """
    if not value:
        return ""

    letters = _NON_LETTERS.sub("", value.upper())
    if not letters:
        return ""

    code = letters[0]
    previous = _SOUNDEX_CLASSES.get(letters[0], "0")

    for char in letters[1:]:
        if len(code) >= 4:
            break
        digit = _SOUNDEX_CLASSES.get(char, "0")
        if digit == "0":
            previous = "0"
            continue
        if digit != previous:
            code += digit
            previous = digit

    return (code + "000")[:4]

