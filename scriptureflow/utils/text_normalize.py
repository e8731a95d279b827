"""
Text normalization helpers used by the offline search engine.

Search is case-insensitive and partial-word: the engine matches query tokens
as substrings of the folded verse text, so the fold must keep every character
at its original index.
"""

from __future__ import annotations

import sys
from functools import lru_cache
from typing import Dict, List

APOSTROPHE = "'"


def fold_char(ch: str) -> str:
    """
    Case-fold a single character to a single character.

    Uses the Unicode case fold when it is one character (so "Σ" and final "ς"
    both become "σ"); expanding folds (ß -> "ss", U+0130 -> "i̇") fall back to
    the first character of the lowercase mapping.
    """
    folded = ch.casefold()
    if len(folded) == 1:
        return folded
    return ch.lower()[0]


@lru_cache(maxsize=1)
def _fold_table() -> Dict[int, int]:
    """Per-character fold table covering every code point."""
    table: Dict[int, int] = {}
    for cp in range(sys.maxunicode + 1):
        ch = chr(cp)
        folded = fold_char(ch)
        if folded != ch:
            table[cp] = ord(folded)
    return table


def lowercase_for_search(text: str) -> str:
    """
    Case-fold text without changing its length.

    The fold is a context-free table lookup, so index i of the result is always
    the folded form of index i of the input and match offsets computed on the
    result are valid offsets into the original text.
    """
    return text.translate(_fold_table())


def _is_token_char(ch: str) -> bool:
    # Keep apostrophe to allow queries like "lord's".
    return ch.isalpha() or ch.isdecimal() or ch == APOSTROPHE


def query_tokens(query: str) -> List[str]:
    """
    Convert a raw query into search tokens.

    Punctuation and symbols act as separators, the result is lowercased and
    split on runs of whitespace. Returns [] for blank or all-punctuation input.
    """
    if not query:
        return []
    normalized = "".join(ch if _is_token_char(ch) else " " for ch in query)
    normalized = lowercase_for_search(normalized)
    return [token for token in normalized.split() if token]
