"""Approximate string matching for vehicle and name deduplication.

Tolerance scales with string length: a third of the shorter string's
length, rounded down, so "RAV4" vs "Rav 4" gets one edit while longer
model names get a little more slack.
"""

from typing import Optional

# Each tolerated edit needs this many characters of the shorter string
CHARS_PER_EDIT = 3


def levenshtein_distance(a: str, b: str) -> int:
    """Classic unit-cost insert/delete/substitute edit distance."""
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            if char_a == char_b:
                current.append(previous[j - 1])
            else:
                current.append(1 + min(previous[j - 1], previous[j], current[j - 1]))
        previous = current
    return previous[-1]


def is_fuzzy_match(first: Optional[str], second: Optional[str]) -> bool:
    """Case-insensitive equality that tolerates a few typos.

    Examples:
        >>> is_fuzzy_match("Camry", "camary")
        True
        >>> is_fuzzy_match("Kia", "Audi")
        False
    """
    if not first or not second:
        return False
    a = first.lower().strip()
    b = second.lower().strip()
    if not a or not b:
        return False
    if a == b:
        return True
    max_edits = min(len(a), len(b)) // CHARS_PER_EDIT
    return levenshtein_distance(a, b) <= max_edits
