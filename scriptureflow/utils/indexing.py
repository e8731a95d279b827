from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from .types import Verse, VerseRef

BookChapter = Tuple[str, int]


@dataclass(frozen=True)
class VerseCorpusIndex:
    """
    Navigation lookups derived from a verse list.

    The index is a pure function of the list it was built from and is never
    updated in place; a changed verse list means building a new index.
    """

    books: Tuple[str, ...]
    chapters_by_book: Mapping[str, Tuple[int, ...]]
    verse_ids_by_book_chapter: Mapping[BookChapter, Tuple[str, ...]]
    verse_by_id: Mapping[str, Verse]

    @classmethod
    def build(cls, verses: Sequence[Verse]) -> "VerseCorpusIndex":
        # Duplicate ids: last writer wins.
        verse_by_id: Dict[str, Verse] = {}
        for v in verses:
            verse_by_id[v.id] = v

        chapters: Dict[str, set] = defaultdict(set)
        by_chapter: Dict[BookChapter, List[Verse]] = defaultdict(list)
        for v in verse_by_id.values():
            chapters[v.ref.book].add(v.ref.chapter)
            by_chapter[(v.ref.book, v.ref.chapter)].append(v)

        books = tuple(sorted(chapters))
        chapters_by_book = {book: tuple(sorted(chapters[book])) for book in books}
        verse_ids_by_book_chapter = {
            key: tuple(v.id for v in sorted(lst, key=lambda x: x.ref.verse))
            for key, lst in by_chapter.items()
        }

        return cls(
            books=books,
            chapters_by_book=MappingProxyType(chapters_by_book),
            verse_ids_by_book_chapter=MappingProxyType(verse_ids_by_book_chapter),
            verse_by_id=MappingProxyType(verse_by_id),
        )

    def get_verse(self, verse_id: str) -> Optional[Verse]:
        return self.verse_by_id.get(verse_id)

    def list_books(self) -> List[str]:
        return list(self.books)

    def list_chapters(self, book: str) -> List[int]:
        return list(self.chapters_by_book.get(book, ()))

    def list_verse_ids(self, book: str, chapter: int) -> List[str]:
        return list(self.verse_ids_by_book_chapter.get((book, chapter), ()))

    def get_chapter(self, book: str, chapter: int) -> List[Verse]:
        """All verses of a chapter in verse order; [] if unknown."""
        return [self.verse_by_id[vid] for vid in self.list_verse_ids(book, chapter)]

    def first_verse_ref(self, book: str, chapter: int) -> Optional[VerseRef]:
        ids = self.verse_ids_by_book_chapter.get((book, chapter))
        if not ids:
            return None
        return self.verse_by_id[ids[0]].ref
