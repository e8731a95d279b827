"""
SQLite storage for bookmarks and highlights.
Both tables are keyed by verse id, so saving twice is idempotent.
"""

from __future__ import annotations

import sqlite3
import threading
import time
from pathlib import Path
from typing import List, Optional

from .utils.types import Bookmark, Highlight

SCHEMA = """
PRAGMA journal_mode=WAL;
CREATE TABLE IF NOT EXISTS bookmarks (
    verse_id TEXT PRIMARY KEY,
    created_at_epoch_ms INTEGER NOT NULL
);
CREATE TABLE IF NOT EXISTS highlights (
    verse_id TEXT PRIMARY KEY,
    color_argb INTEGER NOT NULL,
    created_at_epoch_ms INTEGER NOT NULL
);
"""

# Soft yellow, packed ARGB.
DEFAULT_HIGHLIGHT_ARGB = 0xFFFFF59D


def now_epoch_ms() -> int:
    return int(time.time() * 1000)


class UserDataStore:
    """Bookmarks and highlights persisted in a local SQLite database."""

    def __init__(self, db_path: str | Path = ":memory:"):
        self.db_path = str(db_path)
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self.conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self.conn.executescript(SCHEMA)
        self.conn.commit()

    def close(self) -> None:
        self.conn.close()

    def _execute(self, sql: str, params: tuple = ()) -> List[sqlite3.Row]:
        with self._lock:
            cur = self.conn.execute(sql, params)
            rows = cur.fetchall()
            self.conn.commit()
            return rows

    # Bookmarks

    def upsert_bookmark(self, verse_id: str, created_at_epoch_ms: Optional[int] = None) -> Bookmark:
        if created_at_epoch_ms is None:
            created_at_epoch_ms = now_epoch_ms()
        bookmark = Bookmark(verse_id=verse_id, created_at_epoch_ms=created_at_epoch_ms)
        self._execute(
            "INSERT OR REPLACE INTO bookmarks(verse_id, created_at_epoch_ms) VALUES (?, ?)",
            (bookmark.verse_id, bookmark.created_at_epoch_ms),
        )
        return bookmark

    def delete_bookmark(self, verse_id: str) -> None:
        self._execute("DELETE FROM bookmarks WHERE verse_id = ?", (verse_id,))

    def is_bookmarked(self, verse_id: str) -> bool:
        rows = self._execute("SELECT EXISTS(SELECT 1 FROM bookmarks WHERE verse_id = ?)", (verse_id,))
        return bool(rows[0][0])

    def list_bookmarks(self) -> List[Bookmark]:
        rows = self._execute("SELECT * FROM bookmarks ORDER BY created_at_epoch_ms DESC")
        return [Bookmark(verse_id=r["verse_id"], created_at_epoch_ms=r["created_at_epoch_ms"]) for r in rows]

    # Highlights

    def upsert_highlight(
        self,
        verse_id: str,
        color_argb: int = DEFAULT_HIGHLIGHT_ARGB,
        created_at_epoch_ms: Optional[int] = None,
    ) -> Highlight:
        highlight = Highlight(
            verse_id=verse_id,
            color_argb=color_argb,
            created_at_epoch_ms=now_epoch_ms() if created_at_epoch_ms is None else created_at_epoch_ms,
        )
        self._execute(
            "INSERT OR REPLACE INTO highlights(verse_id, color_argb, created_at_epoch_ms) VALUES (?, ?, ?)",
            (highlight.verse_id, highlight.color_argb, highlight.created_at_epoch_ms),
        )
        return highlight

    def delete_highlight(self, verse_id: str) -> None:
        self._execute("DELETE FROM highlights WHERE verse_id = ?", (verse_id,))

    def is_highlighted(self, verse_id: str) -> bool:
        rows = self._execute("SELECT EXISTS(SELECT 1 FROM highlights WHERE verse_id = ?)", (verse_id,))
        return bool(rows[0][0])

    def list_highlights(self) -> List[Highlight]:
        rows = self._execute("SELECT * FROM highlights ORDER BY created_at_epoch_ms DESC")
        return [
            Highlight(
                verse_id=r["verse_id"],
                color_argb=r["color_argb"],
                created_at_epoch_ms=r["created_at_epoch_ms"],
            )
            for r in rows
        ]
