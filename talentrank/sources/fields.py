"""Field picking over untrusted provider payloads.

Each provider declares, per logical attribute, an ordered list of candidate
keys; the first key holding a usable value wins. Dotted keys walk nested
objects (``company.display_name``).
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Mapping

from talentrank.text import clean


def _lookup(record: Mapping[str, Any], key: str) -> Any:
    value: Any = record
    for part in key.split("."):
        if not isinstance(value, Mapping):
            return None
        value = value.get(part)
    return value


def pick_str(record: Any, keys: list[str] | tuple[str, ...]) -> str:
    if not isinstance(record, Mapping):
        return ""
    for key in keys:
        value = _lookup(record, key)
        if isinstance(value, str) and value.strip():
            return clean(value)
        if isinstance(value, (list, tuple)) and value:
            joined = ", ".join(clean(str(x)) for x in value if x is not None and str(x).strip())
            if joined:
                return joined
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
    return ""


def pick_number(record: Any, keys: list[str] | tuple[str, ...]) -> float | None:
    if not isinstance(record, Mapping):
        return None
    for key in keys:
        value = _lookup(record, key)
        if isinstance(value, bool):
            continue
        if isinstance(value, (int, float)) and math.isfinite(value):
            return float(value)
        if isinstance(value, str):
            try:
                parsed = float(value)
            except ValueError:
                continue
            if math.isfinite(parsed):
                return parsed
    return None


def pick_raw(record: Any, keys: list[str] | tuple[str, ...]) -> Any:
    """First non-empty value of any type (used for date fields)."""
    if not isinstance(record, Mapping):
        return None
    for key in keys:
        value = _lookup(record, key)
        if value not in (None, "", [], {}):
            return value
    return None


def pick_list(record: Any, keys: list[str] | tuple[str, ...]) -> list[Any]:
    """First list-valued field; used to locate the result rows in a payload."""
    if isinstance(record, list):
        return record
    if not isinstance(record, Mapping):
        return []
    for key in keys:
        value = _lookup(record, key)
        if isinstance(value, list):
            return value
    return []


@dataclass(frozen=True)
class FieldMap:
    """Ordered candidate keys per logical field of a job record."""

    results: tuple[str, ...] = ("results", "data", "jobs")
    title: tuple[str, ...] = ("title", "job_title", "position", "name")
    organization: tuple[str, ...] = ("company", "company_name", "employer_name", "organization")
    location: tuple[str, ...] = ("location", "job_location", "city", "candidate_required_location")
    url: tuple[str, ...] = ("url", "redirect_url", "job_apply_link", "link", "apply_url")
    description: tuple[str, ...] = ("description", "job_description", "snippet", "summary")
    published: tuple[str, ...] = ("created", "posted_at", "date_posted", "publication_date")
    salary_min: tuple[str, ...] = ("salary_min", "min_salary")
    salary_max: tuple[str, ...] = ("salary_max", "max_salary")
    tags: tuple[str, ...] = ("tags", "skills", "category")
