"""Collapse duplicate candidate records by provider and canonical URL.

The key is ``normalize(source + "|" + url)`` with the query string and
fragment removed, except for the parameters in ``IDENTITY_PARAMS``. Those
name the posting itself on some boards, so unlike a fully query-stripped
key, two Indeed ``viewjob?jk=...`` links stay distinct.
"""
from __future__ import annotations

from typing import Iterable
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from talentrank.models import CandidateRecord
from talentrank.text import normalize

# Query parameters that identify the posting itself on some boards
# (e.g. pe.indeed.com/viewjob?jk=...); every other parameter is tracking noise.
IDENTITY_PARAMS: frozenset[str] = frozenset({"jk", "vjk", "currentjobid", "jobid", "id"})


def canonical_url(url: str) -> str:
    """URL without fragment and without non-identity query parameters."""
    try:
        parts = urlsplit(url.strip())
    except ValueError:
        return url.strip()
    kept = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k.lower() in IDENTITY_PARAMS]
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(kept), ""))


def dedupe_key(record: CandidateRecord) -> str:
    # Placeholder links differ only by their search query, so keep it whole.
    url = record.url.strip() if record.placeholder else canonical_url(record.url)
    return normalize(f"{record.source}|{url}")


def dedupe(records: Iterable[CandidateRecord]) -> list[CandidateRecord]:
    """First-seen record wins; records without a URL are dropped."""
    seen: dict[str, CandidateRecord] = {}
    for rec in records:
        if not rec.url:
            continue
        key = dedupe_key(rec)
        if key not in seen:
            seen[key] = rec
    return list(seen.values())
