"""
Offline verse search for ScriptureFlow.
Provides case-insensitive, partial-word, multi-token substring search
with merged highlight ranges.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from .utils import text_normalize
from .utils.types import MatchRange, SearchResult, Verse

DEFAULT_LIMIT = 200


def merge_ranges(ranges: Iterable[MatchRange]) -> List[MatchRange]:
    """
    Coalesce overlapping and touching ranges.

    Returns ascending, disjoint ranges where ranges[i].end < ranges[i+1].start.
    """
    ordered = sorted(ranges, key=lambda r: (r.start, r.end))
    if not ordered:
        return []

    merged: List[MatchRange] = []
    current_start = ordered[0].start
    current_end = ordered[0].end

    for r in ordered[1:]:
        if r.start <= current_end:
            current_end = max(current_end, r.end)
        else:
            merged.append(MatchRange(start=current_start, end=current_end))
            current_start = r.start
            current_end = r.end

    merged.append(MatchRange(start=current_start, end=current_end))
    return merged


def highlight(text: str, ranges: Sequence[MatchRange], open_mark: str = "[", close_mark: str = "]") -> str:
    """Wrap every match range of text in markers."""
    parts: List[str] = []
    pos = 0
    for r in ranges:
        parts.append(text[pos:r.start])
        parts.append(open_mark + text[r.start:r.end] + close_mark)
        pos = r.end
    parts.append(text[pos:])
    return "".join(parts)


class SearchEngine:
    """
    Offline-only verse search.

    - case-insensitive
    - partial-word matches
    - multi-word queries: all tokens must match within verse.text
    - match ranges refer to indices in the original verse.text
    """

    def __init__(self, normalizer=text_normalize):
        self.normalizer = normalizer

    def search(
        self,
        verses: Sequence[Verse],
        query: str,
        limit: int = DEFAULT_LIMIT,
    ) -> List[SearchResult]:
        """
        Search verses for a query.

        Args:
            verses: Corpus to scan, in display order
            query: Free-text query
            limit: Maximum number of results

        Returns:
            List of SearchResult objects in corpus order
        """
        if limit <= 0:
            return []

        tokens = self.normalizer.query_tokens(query)
        if not tokens:
            return []

        results: List[SearchResult] = []
        for verse in verses:
            match_ranges = self._find_all_token_matches(verse.text, tokens)
            if match_ranges is None:
                continue
            results.append(SearchResult(verse=verse, match_ranges=tuple(match_ranges)))
            if len(results) >= limit:
                break

        return results

    def _find_all_token_matches(self, verse_text: str, tokens: Sequence[str]) -> Optional[List[MatchRange]]:
        """Return merged match ranges if ALL tokens match at least once, else None."""
        lowered = self.normalizer.lowercase_for_search(verse_text)
        all_ranges: List[MatchRange] = []

        for token in tokens:
            found_any = False
            idx = lowered.find(token)
            while idx >= 0:
                found_any = True
                all_ranges.append(MatchRange(start=idx, end=idx + len(token)))
                # Overlapping occurrences count, so resume one character later.
                idx = lowered.find(token, idx + 1)

            if not found_any:
                return None

        return merge_ranges(all_ranges)
