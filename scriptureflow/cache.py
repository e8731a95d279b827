"""
Process-wide corpus cache.
Loads the verse list once and builds the navigation index alongside it.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple

from .utils.indexing import VerseCorpusIndex
from .utils.loaders import sort_verses
from .utils.types import Verse


@dataclass(frozen=True)
class CorpusSnapshot:
    """An immutable verse list together with the index built from it."""
    verses: Tuple[Verse, ...]
    index: VerseCorpusIndex


class CorpusCache:
    """
    Lazily loads the corpus exactly once.

    get() uses double-checked locking: the published snapshot is read without
    the lock, and only a miss takes the lock, re-checks and builds. Concurrent
    first callers all receive the same snapshot instance.
    """

    def __init__(self, loader: Callable[[], Sequence[Verse]]):
        self._loader = loader
        self._lock = threading.Lock()
        self._snapshot: Optional[CorpusSnapshot] = None

    @property
    def is_loaded(self) -> bool:
        return self._snapshot is not None

    def get(self) -> CorpusSnapshot:
        snapshot = self._snapshot
        if snapshot is not None:
            return snapshot

        with self._lock:
            if self._snapshot is None:
                self._snapshot = self._build()
            return self._snapshot

    def reload(self) -> CorpusSnapshot:
        """Replace the snapshot wholesale; existing holders keep the old one."""
        with self._lock:
            self._snapshot = self._build()
            return self._snapshot

    def _build(self) -> CorpusSnapshot:
        # Loader errors propagate and leave the cache empty.
        verses = tuple(sort_verses(self._loader()))
        return CorpusSnapshot(verses=verses, index=VerseCorpusIndex.build(verses))
