from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Tuple


@dataclass(frozen=True)
class VerseRef:
    """A logical scripture location."""
    book: str
    chapter: int
    verse: int


@dataclass(frozen=True)
class Verse:
    """A single verse with its derived id."""
    id: str
    ref: VerseRef
    text: str

    @staticmethod
    def make_id(book: str, chapter: int, verse: int) -> str:
        return f"{book}|{chapter}|{verse}"

    @classmethod
    def from_ref(cls, ref: VerseRef, text: str) -> "Verse":
        return cls(id=cls.make_id(ref.book, ref.chapter, ref.verse), ref=ref, text=text)


@dataclass(frozen=True)
class MatchRange:
    """Half-open [start, end) interval over a verse text."""
    start: int
    end: int


@dataclass(frozen=True)
class SearchResult:
    """A single search result."""
    verse: Verse
    match_ranges: Tuple[MatchRange, ...]


@dataclass
class Bookmark:
    verse_id: str
    created_at_epoch_ms: int


@dataclass
class Highlight:
    verse_id: str
    color_argb: int
    created_at_epoch_ms: int


@dataclass
class ReadingPreferences:
    font_size_sp: float
    line_height_multiplier: float
    font_style: str
    theme_mode: str
    text_alignment: str


JsonDict = Dict[str, Any]
