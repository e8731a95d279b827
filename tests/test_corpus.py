"""
Tests for the corpus index, the corpus cache and the asset loaders.
"""

import json
import sys
import tempfile
import threading
import time
import unittest
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from scriptureflow.cache import CorpusCache
from scriptureflow.utils.indexing import VerseCorpusIndex
from scriptureflow.utils.loaders import (
    compute_coverage,
    load_bible_asset,
    load_verses,
    save_verses,
    sort_verses,
)
from scriptureflow.utils.types import Verse, VerseRef

SAMPLE_ASSET = Path(__file__).parent.parent / "data" / "bibles" / "kjv_sample.json"


def v(book: str, chapter: int, verse: int, text: str = "text") -> Verse:
    return Verse.from_ref(VerseRef(book=book, chapter=chapter, verse=verse), text)


class TestVerseCorpusIndex(unittest.TestCase):
    """Test index construction and lookups."""

    def setUp(self):
        self.verses = [
            v("John", 3, 17),
            v("Genesis", 12, 1),
            v("John", 3, 16),
            v("Genesis", 1, 2),
            v("Genesis", 1, 1),
            v("Psalms", 23, 1),
        ]
        self.index = VerseCorpusIndex.build(self.verses)

    def test_books_sorted(self):
        self.assertEqual(self.index.list_books(), ["Genesis", "John", "Psalms"])

    def test_chapters_sorted(self):
        self.assertEqual(self.index.list_chapters("Genesis"), [1, 12])
        self.assertEqual(self.index.list_chapters("John"), [3])

    def test_verse_ids_in_verse_order(self):
        self.assertEqual(self.index.list_verse_ids("John", 3), ["John|3|16", "John|3|17"])
        self.assertEqual(self.index.list_verse_ids("Genesis", 1), ["Genesis|1|1", "Genesis|1|2"])

    def test_verse_number_order_not_string_order(self):
        index = VerseCorpusIndex.build([v("Acts", 1, 10), v("Acts", 1, 9), v("Acts", 1, 2)])
        self.assertEqual(index.list_verse_ids("Acts", 1), ["Acts|1|2", "Acts|1|9", "Acts|1|10"])

    def test_get_verse(self):
        self.assertEqual(self.index.get_verse("Psalms|23|1").ref, VerseRef("Psalms", 23, 1))
        self.assertIsNone(self.index.get_verse("Psalms|23|99"))

    def test_unknown_lookups_are_empty(self):
        self.assertEqual(self.index.list_chapters("Exodus"), [])
        self.assertEqual(self.index.list_verse_ids("Exodus", 1), [])
        self.assertEqual(self.index.list_verse_ids("Genesis", 50), [])
        self.assertEqual(self.index.get_chapter("Exodus", 1), [])
        self.assertIsNone(self.index.first_verse_ref("Exodus", 1))

    def test_get_chapter_and_first_ref(self):
        chapter = self.index.get_chapter("John", 3)
        self.assertEqual([x.ref.verse for x in chapter], [16, 17])
        self.assertEqual(self.index.first_verse_ref("John", 3), VerseRef("John", 3, 16))

    def test_empty_corpus(self):
        index = VerseCorpusIndex.build([])
        self.assertEqual(index.list_books(), [])
        self.assertEqual(dict(index.chapters_by_book), {})
        self.assertEqual(dict(index.verse_by_id), {})

    def test_determinism(self):
        other = VerseCorpusIndex.build(self.verses)
        self.assertEqual(other.books, self.index.books)
        self.assertEqual(dict(other.chapters_by_book), dict(self.index.chapters_by_book))
        self.assertEqual(
            list(other.verse_ids_by_book_chapter.items()),
            list(self.index.verse_ids_by_book_chapter.items()),
        )

    def test_duplicate_ids_last_writer_wins(self):
        index = VerseCorpusIndex.build([v("Ruth", 1, 1, "first"), v("Ruth", 1, 1, "second")])
        self.assertEqual(index.get_verse("Ruth|1|1").text, "second")
        self.assertEqual(index.list_verse_ids("Ruth", 1), ["Ruth|1|1"])

    def test_index_is_read_only(self):
        with self.assertRaises(TypeError):
            self.index.verse_by_id["x"] = None


class TestCorpusCache(unittest.TestCase):
    """Test the one-time corpus build."""

    def test_lazy_and_cached(self):
        calls = []

        def loader():
            calls.append(1)
            return [v("John", 1, 1), v("Genesis", 1, 1)]

        cache = CorpusCache(loader)
        self.assertFalse(cache.is_loaded)
        first = cache.get()
        second = cache.get()
        self.assertIs(first, second)
        self.assertEqual(len(calls), 1)
        self.assertTrue(cache.is_loaded)
        # Sorted by (book, chapter, verse) before publishing.
        self.assertEqual([x.id for x in first.verses], ["Genesis|1|1", "John|1|1"])

    def test_concurrent_first_access_builds_once(self):
        calls = []

        def slow_loader():
            calls.append(1)
            time.sleep(0.05)
            return [v("Genesis", 1, i) for i in range(1, 50)]

        cache = CorpusCache(slow_loader)
        barrier = threading.Barrier(8)
        snapshots = []
        lock = threading.Lock()

        def worker():
            barrier.wait()
            snap = cache.get()
            with lock:
                snapshots.append(snap)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertEqual(len(calls), 1)
        self.assertEqual(len(snapshots), 8)
        for snap in snapshots:
            self.assertIs(snap, snapshots[0])

    def test_reload_replaces_snapshot(self):
        corpora = [[v("Genesis", 1, 1)], [v("Exodus", 1, 1)]]
        cache = CorpusCache(lambda: corpora.pop(0))
        old = cache.get()
        new = cache.reload()
        self.assertIsNot(old, new)
        self.assertEqual(old.index.list_books(), ["Genesis"])
        self.assertEqual(new.index.list_books(), ["Exodus"])
        self.assertIs(cache.get(), new)

    def test_loader_failure_propagates_and_retries(self):
        attempts = []

        def flaky_loader():
            attempts.append(1)
            if len(attempts) == 1:
                raise FileNotFoundError("asset missing")
            return [v("Genesis", 1, 1)]

        cache = CorpusCache(flaky_loader)
        with self.assertRaises(FileNotFoundError):
            cache.get()
        self.assertFalse(cache.is_loaded)
        self.assertEqual(len(cache.get().verses), 1)


class TestLoaders(unittest.TestCase):
    """Test asset parsing and verse files."""

    def test_load_sample_asset(self):
        verses = load_bible_asset(SAMPLE_ASSET)
        self.assertGreater(len(verses), 0)
        first = verses[0]
        self.assertEqual(first.id, "Genesis|1|1")
        self.assertTrue(first.text.startswith("In the beginning"))
        self.assertEqual(len({x.id for x in verses}), len(verses))

    def test_unknown_keys_ignored(self):
        raw = {
            "version": "kjv",
            "extra": True,
            "books": [{"name": "Ruth", "abbr": "RUT", "chapters": [
                {"chapter": 1, "verses": [{"verse": 1, "text": "Now it came to pass", "notes": []}]}
            ]}],
        }
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "asset.json"
            path.write_text(json.dumps(raw), encoding="utf-8")
            verses = load_bible_asset(path)
        self.assertEqual(verses, [v("Ruth", 1, 1, "Now it came to pass")])

    def test_missing_key_raises(self):
        raw = {"books": [{"name": "Ruth", "chapters": [{"chapter": 1, "verses": [{"verse": 1}]}]}]}
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "asset.json"
            path.write_text(json.dumps(raw), encoding="utf-8")
            with self.assertRaises(ValueError):
                load_bible_asset(path)

    def test_missing_file_raises(self):
        with self.assertRaises(FileNotFoundError):
            load_bible_asset("/nonexistent/kjv.json")

    def test_save_and_load_flat_verses(self):
        verses = [v("John", 3, 16, "For God so loved the world"), v("Ruth", 1, 1, "Now")]
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "verses.json"
            save_verses(verses, path)
            self.assertEqual(load_verses(path), verses)

    def test_sort_and_coverage(self):
        verses = sort_verses([v("John", 3, 17), v("John", 1, 1), v("Genesis", 1, 1)])
        self.assertEqual([x.id for x in verses], ["Genesis|1|1", "John|1|1", "John|3|17"])
        coverage = compute_coverage(verses)
        self.assertEqual(coverage["John"]["chapters_present"], [1, 3])
        self.assertEqual(coverage["John"]["last_ref"], {"chapter": 3, "verse": 17})
        self.assertEqual(coverage["John"]["total_verses"], 2)


if __name__ == "__main__":
    unittest.main()
