"""Adzuna job search: aggregator API keyed by country endpoint.

Free tier: 250 requests/day.  Sign up at https://developer.adzuna.com/
"""
from __future__ import annotations

from typing import Any, Callable

import requests

from talentrank.geo import GeoTable
from talentrank.log import get_logger
from talentrank.models import CandidateRecord, SearchQuery
from talentrank.retry import retry
from talentrank.sources.base import JobSource, check_response, map_rows, parse_json
from talentrank.sources.fields import FieldMap

log = get_logger(__name__)

DEFAULT_BASE_URL = "https://api.adzuna.com/v1/api/jobs"
RESULTS_PER_PAGE = 50

FIELDS = FieldMap(
    results=("results",),
    title=("title",),
    organization=("company.display_name", "company.name"),
    location=("location.display_name", "location.area"),
    url=("redirect_url", "url", "adref"),
    description=("description",),
    published=("created",),
    tags=("category.label",),
)


class AdzunaSource(JobSource):
    name = "Adzuna"

    def __init__(
        self,
        env_getter: Callable[[str], str],
        geo: GeoTable,
        session: requests.Session | None = None,
        timeout: float = 20.0,
    ) -> None:
        self.app_id: str = env_getter("ADZUNA_APP_ID")
        self.app_key: str = env_getter("ADZUNA_APP_KEY")
        self.base_url: str = (env_getter("ADZUNA_BASE_URL") or DEFAULT_BASE_URL).rstrip("/")
        self.geo = geo
        self.session = session or requests.Session()
        self.timeout = timeout

    def is_configured(self) -> bool:
        return bool(self.app_id and self.app_key and self.base_url)

    def disabled_reason(self) -> str:
        return "ADZUNA_APP_ID / ADZUNA_APP_KEY not set"

    @retry(max_attempts=2, base_delay=1.0)
    def _fetch(self, what: str, country_code: str, page: int = 1) -> Any:
        r = self.session.get(
            f"{self.base_url}/{country_code}/search/{max(int(page), 1)}",
            params={
                "app_id": self.app_id,
                "app_key": self.app_key,
                "what": what,
                "results_per_page": RESULTS_PER_PAGE,
                "content-type": "application/json",
            },
            timeout=self.timeout,
        )
        check_response(self.name, r)
        return parse_json(self.name, r)

    def search(self, query: SearchQuery) -> list[CandidateRecord]:
        what = " ".join(query.keywords[:10]) or "software developer"
        code = self.geo.adzuna_code(query.country)
        data = self._fetch(what, code)
        jobs = map_rows(data, FIELDS, self.name)
        log.debug("Adzuna country=%s what=%r returned %d jobs", code, what, len(jobs))
        return jobs
