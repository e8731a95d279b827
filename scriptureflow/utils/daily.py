from __future__ import annotations

from datetime import date as Date
from typing import Optional, Sequence

from .types import Verse


def string_hash32(s: str) -> int:
    """Signed 32-bit polynomial string hash (h = 31*h + c) over UTF-16 code units."""
    h = 0
    data = s.encode("utf-16-be")
    for i in range(0, len(data), 2):
        unit = (data[i] << 8) | data[i + 1]
        h = (31 * h + unit) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return h


def verse_of_the_day(verses: Sequence[Verse], date: Optional[Date] = None) -> Verse:
    """
    Pick a verse deterministically per local calendar date.

    The seed depends only on the date and the corpus size, so the same corpus
    yields the same verse all day.
    """
    if not verses:
        raise ValueError("No verses loaded from assets.")
    date = date or Date.today()
    seed = f"{date.year}-{date.month}-{date.day}|{len(verses)}"
    return verses[abs(string_hash32(seed)) % len(verses)]
