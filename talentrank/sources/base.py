"""Uniform interface every job source implements."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

import requests

from talentrank.errors import (
    ProviderError,
    ProviderRateLimited,
    ProviderTransientFailure,
    ProviderUnavailable,
)
from talentrank.log import get_logger
from talentrank.models import CandidateRecord, ProviderStatus, SearchQuery
from talentrank.recency import parse_timestamp
from talentrank.sources.fields import FieldMap, pick_list, pick_number, pick_raw, pick_str
from talentrank.text import extract_tags, normalize

log = get_logger(__name__)

UNKNOWN_COMPANY = "Empresa no detectada"
UNKNOWN_LOCATION = "No especificado"
MAX_TAGS = 10


class JobSource(ABC):
    name: str = "unknown"

    def is_configured(self) -> bool:
        return True

    def disabled_reason(self) -> str:
        return ""

    @abstractmethod
    def search(self, query: SearchQuery) -> list[CandidateRecord]:
        pass

    def run(self, query: SearchQuery) -> tuple[list[CandidateRecord], ProviderStatus]:
        """Search and report; recoverable failures become a failed status."""
        if not self.is_configured():
            reason = self.disabled_reason() or "not configured"
            log.info("[%s] disabled: %s", self.name, reason)
            return [], ProviderStatus(self.name, enabled=False, success=False, error=reason)
        try:
            records = self.search(query)
        except ProviderError as exc:
            log.warning("[%s] %s", self.name, exc.message)
            return [], ProviderStatus(self.name, enabled=True, success=False, error=exc.message)
        except requests.RequestException as exc:
            log.warning("[%s] request failed: %s", self.name, exc)
            return [], ProviderStatus(self.name, enabled=True, success=False, error=f"request failed: {exc}")
        log.info("[%s] returned %d jobs", self.name, len(records))
        return records, ProviderStatus(self.name, enabled=True, success=True, count=len(records))


def check_response(provider: str, response: requests.Response) -> None:
    status = response.status_code
    if status == 429:
        raise ProviderRateLimited(provider, "rate limited (HTTP 429)")
    if status in (401, 403):
        raise ProviderUnavailable(provider, f"credentials rejected (HTTP {status})")
    if status >= 400:
        raise ProviderTransientFailure(provider, f"HTTP {status}")


def parse_json(provider: str, response: requests.Response) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise ProviderTransientFailure(provider, "malformed JSON payload") from exc


def map_rows(payload: Any, fields: FieldMap, source: str) -> list[CandidateRecord]:
    """Map every usable row of a provider payload; rows without title or URL are dropped."""
    rows = pick_list(payload, fields.results)
    records: list[CandidateRecord] = []
    for row in rows:
        rec = map_record(row, fields, source)
        if rec is not None:
            records.append(rec)
    if len(records) < len(rows):
        log.debug("[%s] dropped %d unusable rows", source, len(rows) - len(records))
    return records


def map_record(row: Any, fields: FieldMap, source: str) -> CandidateRecord | None:
    title = pick_str(row, fields.title)
    url = pick_str(row, fields.url)
    if not title or not url.startswith("http"):
        return None
    description = pick_str(row, fields.description)
    declared = [normalize(t) for t in pick_str(row, fields.tags).split(",") if t.strip()]
    tags = list(dict.fromkeys(declared + extract_tags(f"{title} {description}")))[:MAX_TAGS]
    return CandidateRecord(
        title=title,
        organization=pick_str(row, fields.organization) or UNKNOWN_COMPANY,
        location=pick_str(row, fields.location) or UNKNOWN_LOCATION,
        source=source,
        url=url,
        tags=tags,
        published=parse_timestamp(pick_raw(row, fields.published)),
        description=description[:2000],
        salary_min=pick_number(row, fields.salary_min),
        salary_max=pick_number(row, fields.salary_max),
        raw=row if isinstance(row, dict) else {},
    )


def api_query_text(query: SearchQuery, max_terms: int = 3) -> str:
    """Role if the caller gave one, else the top keywords."""
    if query.desired_role:
        return query.desired_role
    return " ".join(query.seeds[:max_terms]) or "software developer"
