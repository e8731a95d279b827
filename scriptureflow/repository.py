"""
Offline-first coordinator for ScriptureFlow.
Ties together the corpus cache, search, navigation, verse of the day,
bookmarks, highlights and reading preferences.
"""

from __future__ import annotations

import json
from datetime import date as Date
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from .cache import CorpusCache, CorpusSnapshot
from .config import Settings, load_settings
from .prefs import ReadingPrefsStore
from .search import DEFAULT_LIMIT, SearchEngine
from .store import DEFAULT_HIGHLIGHT_ARGB, UserDataStore
from .utils.daily import verse_of_the_day
from .utils.loaders import load_bible_asset
from .utils.types import Bookmark, Highlight, ReadingPreferences, SearchResult, Verse, VerseRef


class ScriptureRepository:
    """
    Single entry point used by front ends.

    The verse list is loaded lazily on first use and cached for the life of
    the repository; every read goes through one immutable snapshot.
    """

    def __init__(
        self,
        cache: CorpusCache,
        store: Optional[UserDataStore] = None,
        prefs: Optional[ReadingPrefsStore] = None,
        search_engine: Optional[SearchEngine] = None,
        log_dir: Optional[str | Path] = None,
    ):
        self.cache = cache
        self.store = store or UserDataStore()
        self.prefs = prefs or ReadingPrefsStore()
        self.search_engine = search_engine or SearchEngine()
        self.log_dir = Path(log_dir) if log_dir else None
        if self.log_dir:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            self.search_log_path: Optional[Path] = self.log_dir / "search_log.jsonl"
        else:
            self.search_log_path = None

    def _write_jsonl(self, path: Optional[Path], payload: dict) -> None:
        if not path:
            return
        try:
            with path.open("a", encoding="utf-8") as f:
                f.write(json.dumps(payload, ensure_ascii=False) + "\n")
        except OSError as e:
            print(f"Failed to write log entry: {e}")

    def snapshot(self) -> CorpusSnapshot:
        return self.cache.get()

    def ensure_verses_loaded(self) -> Sequence[Verse]:
        return self.cache.get().verses

    def reload(self) -> CorpusSnapshot:
        return self.cache.reload()

    def search(self, query: str, limit: int = DEFAULT_LIMIT) -> List[SearchResult]:
        """
        Search the cached corpus.

        Args:
            query: Free-text query
            limit: Maximum number of results

        Returns:
            List of SearchResult objects in corpus order
        """
        verses = self.ensure_verses_loaded()
        results = self.search_engine.search(verses, query, limit=limit)
        self._write_jsonl(self.search_log_path, {
            "timestamp": datetime.now().isoformat(timespec="seconds"),
            "query": query,
            "limit": limit,
            "result_count": len(results),
            "verse_ids": [r.verse.id for r in results],
        })
        return results

    # Navigation

    def get_books(self) -> List[str]:
        return self.snapshot().index.list_books()

    def get_chapters(self, book: str) -> List[int]:
        return self.snapshot().index.list_chapters(book)

    def get_verses(self, book: str, chapter: int) -> List[Verse]:
        return self.snapshot().index.get_chapter(book, chapter)

    def get_first_verse_ref(self, book: str, chapter: int) -> Optional[VerseRef]:
        return self.snapshot().index.first_verse_ref(book, chapter)

    def get_verse_by_id(self, verse_id: str) -> Optional[Verse]:
        return self.snapshot().index.get_verse(verse_id)

    def get_verse_of_the_day(self, date: Optional[Date] = None) -> Verse:
        return verse_of_the_day(self.ensure_verses_loaded(), date)

    # Bookmarks

    def add_bookmark(self, verse_id: str, now_epoch_ms: Optional[int] = None) -> Bookmark:
        return self.store.upsert_bookmark(verse_id, now_epoch_ms)

    def remove_bookmark(self, verse_id: str) -> None:
        self.store.delete_bookmark(verse_id)

    def is_bookmarked(self, verse_id: str) -> bool:
        return self.store.is_bookmarked(verse_id)

    def list_bookmarks(self) -> List[Bookmark]:
        return self.store.list_bookmarks()

    # Highlights

    def set_highlight(
        self,
        verse_id: str,
        color_argb: int = DEFAULT_HIGHLIGHT_ARGB,
        now_epoch_ms: Optional[int] = None,
    ) -> Highlight:
        return self.store.upsert_highlight(verse_id, color_argb, now_epoch_ms)

    def clear_highlight(self, verse_id: str) -> None:
        self.store.delete_highlight(verse_id)

    def is_highlighted(self, verse_id: str) -> bool:
        return self.store.is_highlighted(verse_id)

    def list_highlights(self) -> List[Highlight]:
        return self.store.list_highlights()

    # Reading preferences

    def reading_preferences(self) -> ReadingPreferences:
        return self.prefs.load()


def create_repository(
    settings: Optional[Settings] = None,
    loader: Optional[Callable[[], Sequence[Verse]]] = None,
) -> ScriptureRepository:
    """
    Factory function to create a repository from settings.

    Args:
        settings: Resolved settings (defaults to the environment)
        loader: Verse source; defaults to the configured bible asset

    Returns:
        Configured ScriptureRepository instance
    """
    settings = settings or load_settings()
    if loader is None:
        asset_path = settings.asset_path
        loader = lambda: load_bible_asset(asset_path)
    return ScriptureRepository(
        cache=CorpusCache(loader),
        store=UserDataStore(settings.db_path),
        prefs=ReadingPrefsStore(settings.prefs_path),
        log_dir=settings.log_dir,
    )
