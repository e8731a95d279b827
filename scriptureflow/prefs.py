"""
Reading preferences stored as a small JSON file.

Fields:
- font_size_sp (float, 12..42)
- line_height_multiplier (float, 1.0..2.0)
- font_style ("serif" | "sans")
- theme_mode ("light" | "dark" | "system")
- text_alignment ("start" | "center" | "justify")
"""

from __future__ import annotations

import json
import threading
from dataclasses import asdict, replace
from pathlib import Path
from typing import Any, Dict, Optional

from .utils.types import ReadingPreferences

FONT_STYLE_SERIF = "serif"
FONT_STYLE_SANS = "sans"

THEME_MODE_LIGHT = "light"
THEME_MODE_DARK = "dark"
THEME_MODE_SYSTEM = "system"

TEXT_ALIGN_START = "start"
TEXT_ALIGN_CENTER = "center"
TEXT_ALIGN_JUSTIFY = "justify"

DEFAULT_PREFERENCES = ReadingPreferences(
    font_size_sp=18.0,
    line_height_multiplier=1.3,
    font_style=FONT_STYLE_SERIF,
    theme_mode=THEME_MODE_SYSTEM,
    text_alignment=TEXT_ALIGN_START,
)


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, float(value)))


def _pick(value: Any, allowed: tuple, default: str) -> str:
    return value if value in allowed else default


def sanitize(raw: Dict[str, Any]) -> ReadingPreferences:
    """Build preferences from stored values, replacing anything invalid with defaults."""
    d = DEFAULT_PREFERENCES

    def number(key: str, default: float, lo: float, hi: float) -> float:
        try:
            return _clamp(raw.get(key, default), lo, hi)
        except (TypeError, ValueError):
            return default

    return ReadingPreferences(
        font_size_sp=number("font_size_sp", d.font_size_sp, 12.0, 42.0),
        line_height_multiplier=number("line_height_multiplier", d.line_height_multiplier, 1.0, 2.0),
        font_style=_pick(raw.get("font_style"), (FONT_STYLE_SERIF, FONT_STYLE_SANS), d.font_style),
        theme_mode=_pick(
            raw.get("theme_mode"), (THEME_MODE_LIGHT, THEME_MODE_DARK, THEME_MODE_SYSTEM), d.theme_mode
        ),
        text_alignment=_pick(
            raw.get("text_alignment"), (TEXT_ALIGN_START, TEXT_ALIGN_CENTER, TEXT_ALIGN_JUSTIFY), d.text_alignment
        ),
    )


class ReadingPrefsStore:
    """Key/value preferences persisted to a JSON file (or kept in memory when path is None)."""

    def __init__(self, path: Optional[str | Path] = None):
        self.path = Path(path) if path else None
        self._lock = threading.Lock()
        self._memory: Dict[str, Any] = {}

    def _read_raw(self) -> Dict[str, Any]:
        if self.path is None:
            return dict(self._memory)
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            print(f"Failed to read reading preferences, using defaults: {e}")
            return {}
        return raw if isinstance(raw, dict) else {}

    def _write(self, prefs: ReadingPreferences) -> ReadingPreferences:
        data = asdict(prefs)
        if self.path is None:
            self._memory = data
        else:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
        return prefs

    def load(self) -> ReadingPreferences:
        return sanitize(self._read_raw())

    def _update(self, **changes: Any) -> ReadingPreferences:
        with self._lock:
            current = asdict(self.load())
            current.update(changes)
            return self._write(sanitize(current))

    def update_font_size_sp(self, value: float) -> ReadingPreferences:
        return self._update(font_size_sp=value)

    def update_line_height_multiplier(self, value: float) -> ReadingPreferences:
        return self._update(line_height_multiplier=value)

    def update_font_style(self, value: str) -> ReadingPreferences:
        return self._update(font_style=value)

    def update_theme_mode(self, value: str) -> ReadingPreferences:
        return self._update(theme_mode=value)

    def update_text_alignment(self, value: str) -> ReadingPreferences:
        return self._update(text_alignment=value)

    def reset_to_defaults(self) -> ReadingPreferences:
        with self._lock:
            return self._write(replace(DEFAULT_PREFERENCES))
