"""
Text canonicalization helpers.
"""

import re
import unicodedata

_WHITESPACE = re.compile(r"\s+")
_NON_DIGITS = re.compile(r"[^0-9]")


def normalize(text: str) -> str:
    """
    Canonical form used to compare and persist category/subcategory names.

    Trims, strips accents (NFD + combining marks removed), lower-cases and
    collapses internal whitespace. normalize("Café ") == normalize("CAFE").
    """
    # Lower before decomposing: some upper-case letters lower to a base + mark
    decomposed = unicodedata.normalize("NFD", text.strip().lower())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _WHITESPACE.sub(" ", stripped).strip()


def digits_only(text: str) -> str:
    """Keep only ASCII digits, e.g. '+55 (11) 2345' -> '55112345'."""
    return _NON_DIGITS.sub("", text)
