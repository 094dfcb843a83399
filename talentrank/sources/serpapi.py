"""SerpAPI Google Jobs search."""
from __future__ import annotations

from typing import Any, Callable

import requests

from talentrank.log import get_logger
from talentrank.models import CandidateRecord, SearchQuery
from talentrank.retry import retry
from talentrank.sources.base import JobSource, api_query_text, check_response, map_rows, parse_json
from talentrank.sources.fields import FieldMap

log = get_logger(__name__)

FIELDS = FieldMap(
    results=("jobs_results",),
    title=("title",),
    organization=("company_name",),
    location=("location",),
    url=("apply_link", "share_link", "link"),
    description=("description",),
    published=("detected_extensions.posted_at", "extensions"),
)


def _best_apply_link(hit: Any) -> str:
    if not isinstance(hit, dict):
        return ""
    for opts_key in ("apply_options", "related_links"):
        opts = hit.get(opts_key, [])
        if opts and isinstance(opts, list):
            for opt in opts:
                link = opt.get("link", "") if isinstance(opt, dict) else ""
                if link:
                    return link
    return hit.get("share_link", "") or hit.get("link", "")


class SerpApiSource(JobSource):
    name = "SerpApi"

    def __init__(
        self,
        env_getter: Callable[[str], str],
        session: requests.Session | None = None,
        timeout: float = 20.0,
    ) -> None:
        self.api_key: str = env_getter("SERPAPI_KEY")
        self.session = session or requests.Session()
        self.timeout = timeout

    def is_configured(self) -> bool:
        return bool(self.api_key)

    def disabled_reason(self) -> str:
        return "SERPAPI_KEY not set"

    @retry(max_attempts=2, base_delay=1.0)
    def _fetch(self, text: str, location: str) -> Any:
        params = {"engine": "google_jobs", "q": text, "api_key": self.api_key}
        if location:
            params["location"] = location
        r = self.session.get("https://serpapi.com/search", params=params, timeout=self.timeout)
        check_response(self.name, r)
        return parse_json(self.name, r)

    def search(self, query: SearchQuery) -> list[CandidateRecord]:
        location = ", ".join(x for x in (query.city, query.country) if x)
        data = self._fetch(api_query_text(query), location)
        # Google Jobs nests the apply URL in option lists; flatten it first.
        if isinstance(data, dict):
            for hit in data.get("jobs_results") or []:
                if isinstance(hit, dict) and not hit.get("apply_link"):
                    hit["apply_link"] = _best_apply_link(hit)
        jobs = map_rows(data, FIELDS, self.name)
        log.debug("SerpAPI location=%r returned %d jobs", location, len(jobs))
        return jobs
