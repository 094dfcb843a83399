"""Process-wide logging setup on top of the stdlib ``logging`` module.

Every module does ``log = get_logger(__name__)``; the first call installs a
stdout handler and, unless ``TALENTRANK_FILE_LOG`` is off, a per-day file
under ``logs/``.
"""
from __future__ import annotations

import logging
import os
import sys
from datetime import datetime
from pathlib import Path

LOG_DIR = Path(__file__).resolve().parent.parent / "logs"
LOG_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s  %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# HTTP plumbing logs every connection at DEBUG.
_QUIET_LOGGERS = ("urllib3", "charset_normalizer", "bs4")

_configured = False


def _file_logging_enabled() -> bool:
    return os.environ.get("TALENTRANK_FILE_LOG", "1").strip().lower() not in ("0", "false", "no", "off")


def configure_logging(level: str | None = None, log_dir: Path = LOG_DIR) -> Path | None:
    """Install root handlers once; returns the log file path when one is used."""
    global _configured
    if _configured:
        return None
    _configured = True

    level_name = (level or os.environ.get("LOG_LEVEL") or "INFO").upper()
    root = logging.getLogger()
    root.setLevel(getattr(logging, level_name, logging.INFO))
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    # Embedding applications may have set up logging already.
    if root.handlers:
        return None

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(formatter)
    root.addHandler(console)

    if not _file_logging_enabled():
        return None
    log_file = log_dir / f"talentrank_{datetime.now():%Y-%m-%d}.log"
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_file, encoding="utf-8")
    except OSError as exc:
        root.warning("File logging disabled, cannot open %s: %s", log_file, exc)
        return None
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(formatter)
    root.addHandler(fh)
    return log_file


def set_level(level: str) -> None:
    logging.getLogger().setLevel(getattr(logging, level.upper(), logging.INFO))


def get_logger(name: str) -> logging.Logger:
    configure_logging()
    return logging.getLogger(name)
