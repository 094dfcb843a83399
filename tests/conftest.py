from __future__ import annotations

import os

os.environ.setdefault("TALENTRANK_FILE_LOG", "0")

import json
from pathlib import Path
from typing import Any

import pytest
import requests

from talentrank.config import GEO_PATH
from talentrank.geo import GeoTable
from talentrank.models import CandidateRecord, Published, QueryProfile

NOW = 1_760_000_000.0


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, text: str = "") -> None:
        self.status_code = status_code
        self._payload = payload
        self.text = text if text else (json.dumps(payload) if payload is not None else "")

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("no JSON")
        return self._payload


class FakeSession:
    """Stands in for ``requests.Session``; routes GETs by URL substring."""

    def __init__(self, routes: dict[str, Any] | None = None) -> None:
        self.routes = routes or {}
        self.calls: list[tuple[str, dict]] = []

    def get(self, url: str, params: dict | None = None, **kwargs: Any) -> FakeResponse:
        self.calls.append((url, dict(params or {})))
        for fragment, reply in self.routes.items():
            if fragment in url:
                if isinstance(reply, Exception):
                    raise reply
                if callable(reply):
                    return reply(url, params or {})
                return reply
        raise requests.ConnectionError(f"no route for {url}")


@pytest.fixture(autouse=True)
def _no_sleep(monkeypatch):
    monkeypatch.setattr("talentrank.retry.time.sleep", lambda _s: None)


@pytest.fixture
def geo() -> GeoTable:
    return GeoTable.from_yaml(Path(GEO_PATH))


@pytest.fixture
def now() -> float:
    return NOW


def make_record(
    title: str = "Backend Developer",
    organization: str = "Acme",
    location: str = "Lima, Peru",
    source: str = "Computrabajo",
    url: str = "https://pe.computrabajo.com/ofertas/123",
    tags: list[str] | None = None,
    ts: float = 0.0,
    placeholder: bool = False,
) -> CandidateRecord:
    return CandidateRecord(
        title=title,
        organization=organization,
        location=location,
        source=source,
        url=url,
        tags=list(tags or []),
        published=Published(ts=ts, label="x") if ts else Published(),
        placeholder=placeholder,
    )


def make_profile(keywords: list[str], level: str = "mid", country: str = "Peru", city: str = "") -> QueryProfile:
    return QueryProfile(
        keywords=keywords,
        country=country,
        city=city,
        level=level,
        prefers_entry_level=level == "intern",
    )
