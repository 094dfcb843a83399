"""Parse publication times out of snippets and API date fields."""
from __future__ import annotations

import math
import re
import time
from datetime import datetime, timezone
from typing import Any

from talentrank.models import Published
from talentrank.text import normalize

HOUR = 3600
DAY = 24 * HOUR
WEEK = 7 * DAY

# (patterns, seconds per unit, label suffix), checked in this order.
_RELATIVE: list[tuple[tuple[re.Pattern[str], ...], int, str]] = [
    ((re.compile(r"hace\s+(\d+)\s+horas?\b"), re.compile(r"(\d+)\s+hours?\s+ago")), HOUR, "h"),
    ((re.compile(r"hace\s+(\d+)\s+dias?\b"), re.compile(r"(\d+)\s+days?\s+ago")), DAY, "d"),
    ((re.compile(r"hace\s+(\d+)\s+semanas?\b"), re.compile(r"(\d+)\s+weeks?\s+ago")), WEEK, "sem"),
]

_ISO_DATE_RE = re.compile(r"\b(20\d{2})[-/](\d{1,2})[-/](\d{1,2})\b")


def _relative(text: str, now: float) -> Published | None:
    for patterns, unit, suffix in _RELATIVE:
        for pattern in patterns:
            m = pattern.search(text)
            if m:
                n = int(m.group(1))
                return Published(ts=now - n * unit, label=f"{n} {suffix}")
    return None


def _absolute(text: str) -> Published | None:
    m = _ISO_DATE_RE.search(text)
    if not m:
        return None
    y, mo, d = (int(g) for g in m.groups())
    try:
        dt = datetime(y, mo, d, tzinfo=timezone.utc)
    except ValueError:
        return None
    return Published(ts=dt.timestamp(), label=f"{y}-{mo:02d}-{d:02d}")


def parse_published(snippet: str | None, now: float | None = None) -> Published:
    """Relative hours, days, weeks (English or Spanish), then an ISO date.

    Unmatched text gives ``Published(0, "Sin fecha")`` so ranking treats it
    as the oldest possible posting.
    """
    if not snippet:
        return Published()
    now = time.time() if now is None else now
    return _relative(normalize(snippet), now) or _absolute(snippet) or Published()


def _from_epoch(value: int | float) -> Published:
    """Epoch seconds or milliseconds; out-of-range values count as unknown."""
    try:
        ts = float(value)
    except OverflowError:
        return Published()
    if not math.isfinite(ts):
        return Published()
    if ts > 1e12:
        ts /= 1000.0
    if ts <= 0:
        return Published()
    try:
        label = datetime.fromtimestamp(ts, tz=timezone.utc).strftime("%Y-%m-%d")
    except (OverflowError, OSError, ValueError):
        return Published()
    return Published(ts=ts, label=label)


def parse_timestamp(value: Any, now: float | None = None) -> Published:
    """Best-effort conversion of an API date field (epoch, ISO string or text)."""
    if value is None or value == "":
        return Published()
    if isinstance(value, bool):
        return Published()
    if isinstance(value, (int, float)):
        return _from_epoch(value)

    text = str(value).strip()
    if text.isascii() and text.isdigit():
        return _from_epoch(int(text)) if len(text) <= 20 else Published()
    try:
        dt = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return parse_published(text, now)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    try:
        ts = dt.timestamp()
    except (OverflowError, OSError, ValueError):
        return Published()
    if ts <= 0:
        return Published()
    return Published(ts=ts, label=dt.strftime("%Y-%m-%d"))
