"""Load env configuration and data-table locations."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from talentrank.log import get_logger

log = get_logger(__name__)

load_dotenv()

ROOT_DIR: Path = Path(__file__).resolve().parent.parent
CONFIG_DIR: Path = ROOT_DIR / "config"
GEO_PATH: Path = CONFIG_DIR / "geo.yaml"
DATA_DIR: Path = ROOT_DIR / "data"
REPORTS_DIR: Path = ROOT_DIR / "reports"


def get_env(key: str, default: str = "") -> str:
    return os.environ.get(key, default).strip()


def get_flag(key: str, default: bool = True) -> bool:
    raw = get_env(key)
    if not raw:
        return default
    return raw.lower() in ("1", "true", "yes", "on")


def _get_number(key: str, default: float) -> float:
    raw = get_env(key)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        log.warning("Ignoring non-numeric %s=%r, using %s", key, raw, default)
        return default


@dataclass
class Settings:
    http_timeout: float = 15.0
    top_k: int = 200
    ranked_limit: int = 150
    memory_path: Path = DATA_DIR / "search-memory.json"
    cases_path: Path = DATA_DIR / "recruiting-cases.json"
    geo_path: Path = GEO_PATH
    vocabulary_path: Path | None = None
    web_search_enabled: bool = True


def load_settings() -> Settings:
    vocab = get_env("VOCABULARY_PATH")
    return Settings(
        http_timeout=_get_number("HTTP_TIMEOUT", 15.0),
        top_k=int(_get_number("TOP_K", 200)),
        ranked_limit=int(_get_number("RANKED_LIMIT", 150)),
        memory_path=Path(get_env("MEMORY_PATH") or DATA_DIR / "search-memory.json"),
        cases_path=Path(get_env("CASES_PATH") or DATA_DIR / "recruiting-cases.json"),
        geo_path=Path(get_env("GEO_PATH") or GEO_PATH),
        vocabulary_path=Path(vocab) if vocab else None,
        web_search_enabled=get_flag("WEB_SEARCH_ENABLED", True),
    )


def ensure_dirs() -> None:
    for d in (DATA_DIR, REPORTS_DIR):
        d.mkdir(parents=True, exist_ok=True)
