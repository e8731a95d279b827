from __future__ import annotations

import json
from collections import defaultdict
from pathlib import Path
from typing import Any, Dict, List, Sequence

from .types import JsonDict, Verse, VerseRef


def _require(obj: Dict[str, Any], key: str, where: str) -> Any:
    if not isinstance(obj, dict) or key not in obj:
        raise ValueError(f"Missing '{key}' in {where}")
    return obj[key]


def flatten_bible(raw: JsonDict) -> List[Verse]:
    """
    Flatten the nested asset layout into verses, in asset order.

    Expected schema:
    {
      "version": "kjv",
      "books": [
        {"name": "Genesis", "chapters": [{"chapter": 1, "verses": [{"verse": 1, "text": "..."}]}]}
      ]
    }
    Unknown keys are ignored.
    """
    out: List[Verse] = []
    for b_pos, book in enumerate(_require(raw, "books", "asset")):
        book_name = str(_require(book, "name", f"books[{b_pos}]"))
        for c_pos, chapter in enumerate(_require(book, "chapters", book_name)):
            where = f"{book_name} chapters[{c_pos}]"
            chapter_num = int(_require(chapter, "chapter", where))
            for v_pos, v in enumerate(_require(chapter, "verses", where)):
                v_where = f"{book_name} {chapter_num} verses[{v_pos}]"
                ref = VerseRef(
                    book=book_name,
                    chapter=chapter_num,
                    verse=int(_require(v, "verse", v_where)),
                )
                out.append(Verse.from_ref(ref, str(_require(v, "text", v_where))))
    return out


def load_bible_asset(path: str | Path) -> List[Verse]:
    """Load verses from a nested bible asset (e.g. kjv_sample.json)."""
    p = Path(path)
    raw = json.loads(p.read_text(encoding="utf-8"))
    return flatten_bible(raw)


def sort_verses(verses: Sequence[Verse]) -> List[Verse]:
    """Stable ordering helps determinism across restarts."""
    return sorted(verses, key=lambda v: (v.ref.book, v.ref.chapter, v.ref.verse))


def load_verses(path: str | Path) -> List[Verse]:
    """Load a flat list of verses (verses.json)."""
    p = Path(path)
    raw = json.loads(p.read_text(encoding="utf-8"))
    verses: List[Verse] = []
    for v in raw:
        ref = VerseRef(book=v["book"], chapter=int(v["chapter"]), verse=int(v["verse"]))
        verses.append(Verse(id=v.get("id") or Verse.make_id(ref.book, ref.chapter, ref.verse), ref=ref, text=v["text"]))
    return verses


def save_verses(verses: Sequence[Verse], path: str | Path) -> None:
    p = Path(path)
    data = []
    for v in verses:
        data.append(
            {
                "id": v.id,
                "book": v.ref.book,
                "chapter": v.ref.chapter,
                "verse": v.ref.verse,
                "text": v.text,
            }
        )
    p.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")


def compute_coverage(verses: Sequence[Verse]) -> dict:
    """Per-book summary of what the corpus contains."""
    by_book = defaultdict(list)
    for v in verses:
        by_book[v.ref.book].append(v)

    coverage = {}
    for book, lst in sorted(by_book.items()):
        lst_sorted = sorted(lst, key=lambda x: (x.ref.chapter, x.ref.verse))
        first = lst_sorted[0].ref
        last = lst_sorted[-1].ref
        coverage[book] = {
            "chapters_present": sorted({v.ref.chapter for v in lst_sorted}),
            "first_ref": {"chapter": first.chapter, "verse": first.verse},
            "last_ref": {"chapter": last.chapter, "verse": last.verse},
            "total_verses": len(lst_sorted),
        }
    return coverage
