"""
Runtime settings, read from the environment (and a .env file if present).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

ROOT_DIR = Path(__file__).resolve().parent.parent
DEFAULT_ASSET_PATH = ROOT_DIR / "data" / "bibles" / "kjv_sample.json"
DEFAULT_DB_PATH = ROOT_DIR / "data" / "scriptureflow.sqlite3"
DEFAULT_PREFS_PATH = ROOT_DIR / "data" / "reading_preferences.json"


@dataclass
class Settings:
    asset_path: Path
    db_path: Path
    prefs_path: Path
    log_dir: Optional[Path]
    search_limit: int


def load_settings(**overrides) -> Settings:
    """Resolve settings from env vars; keyword overrides (e.g. CLI flags) win when not None."""
    load_dotenv()

    log_dir = os.getenv("SCRIPTUREFLOW_LOG_DIR")
    settings = Settings(
        asset_path=Path(os.getenv("SCRIPTUREFLOW_ASSET_PATH") or DEFAULT_ASSET_PATH),
        db_path=Path(os.getenv("SCRIPTUREFLOW_DB_PATH") or DEFAULT_DB_PATH),
        prefs_path=Path(os.getenv("SCRIPTUREFLOW_PREFS_PATH") or DEFAULT_PREFS_PATH),
        log_dir=Path(log_dir) if log_dir else None,
        search_limit=int(os.getenv("SCRIPTUREFLOW_SEARCH_LIMIT", "200")),
    )
    for key, value in overrides.items():
        if value is None:
            continue
        if key in ("asset_path", "db_path", "prefs_path", "log_dir"):
            value = Path(value)
        setattr(settings, key, value)
    return settings
