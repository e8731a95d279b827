from __future__ import annotations

import argparse
import json
import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv
from tqdm import tqdm

from .utils.indexing import VerseCorpusIndex
from .utils.loaders import compute_coverage, flatten_bible, save_verses, sort_verses
from .utils.types import Verse


def flatten_with_progress(raw: dict) -> List[Verse]:
    """Flatten the asset one book at a time so large translations show progress."""
    verses: List[Verse] = []
    if not isinstance(raw, dict) or "books" not in raw:
        raise ValueError("Missing 'books' in asset")
    books = raw["books"]
    for book in tqdm(books, desc="Flattening books"):
        verses.extend(flatten_bible({"books": [book]}))
    return verses


def main() -> None:
    load_dotenv()

    ap = argparse.ArgumentParser(description="Flatten a bible asset into verses.json and coverage.json.")
    ap.add_argument("--asset", default=os.getenv("SCRIPTUREFLOW_ASSET_PATH"), help="Path to the nested bible asset.")
    ap.add_argument("--out_dir", required=True, help="Output directory for corpus artifacts.")
    args = ap.parse_args()

    if not args.asset:
        ap.error("--asset is required (or set SCRIPTUREFLOW_ASSET_PATH)")

    out_dir = Path(args.out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    raw = json.loads(Path(args.asset).read_text(encoding="utf-8"))
    verses = sort_verses(flatten_with_progress(raw))
    index = VerseCorpusIndex.build(verses)
    if len(index.verse_by_id) != len(verses):
        print(f"Warning: {len(verses) - len(index.verse_by_id)} duplicate verse id(s) in asset")

    verses_path = out_dir / "verses.json"
    coverage_path = out_dir / "coverage.json"

    save_verses(verses, verses_path)
    coverage_path.write_text(json.dumps(compute_coverage(verses), ensure_ascii=False, indent=2), encoding="utf-8")

    print("Built corpus artifacts successfully:")
    print(f"- {verses_path} ({len(verses)} verses, {len(index.books)} books)")
    print(f"- {coverage_path}")


if __name__ == "__main__":
    main()
