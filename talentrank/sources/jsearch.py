"""JSearch API (RapidAPI): aggregated job listings."""
from __future__ import annotations

from typing import Any, Callable

import requests

from talentrank.log import get_logger
from talentrank.models import CandidateRecord, SearchQuery
from talentrank.retry import retry
from talentrank.sources.base import JobSource, api_query_text, check_response, map_rows, parse_json
from talentrank.sources.fields import FieldMap

log = get_logger(__name__)

API_HOST = "jsearch.p.rapidapi.com"

FIELDS = FieldMap(
    results=("data",),
    title=("job_title", "title"),
    organization=("employer_name", "company_name"),
    location=("job_city", "job_state", "job_country"),
    url=("job_apply_link", "job_google_link", "job_url"),
    description=("job_description",),
    published=("job_posted_at_timestamp", "job_posted_at_datetime_utc"),
    salary_min=("job_min_salary",),
    salary_max=("job_max_salary",),
    tags=("job_required_skills",),
)


class JSearchSource(JobSource):
    name = "JSearch"
    BASE = f"https://{API_HOST}"

    def __init__(
        self,
        env_getter: Callable[[str], str],
        session: requests.Session | None = None,
        timeout: float = 15.0,
    ) -> None:
        self.api_key: str = env_getter("JSEARCH_API_KEY")
        self.session = session or requests.Session()
        self.timeout = timeout

    def is_configured(self) -> bool:
        return bool(self.api_key)

    def disabled_reason(self) -> str:
        return "JSEARCH_API_KEY not set"

    @retry(max_attempts=2, base_delay=1.0)
    def _fetch(self, text: str) -> Any:
        r = self.session.get(
            f"{self.BASE}/search",
            params={"query": text, "num_pages": "1"},
            headers={
                "X-RapidAPI-Key": self.api_key,
                "X-RapidAPI-Host": API_HOST,
            },
            timeout=self.timeout,
        )
        check_response(self.name, r)
        return parse_json(self.name, r)

    def search(self, query: SearchQuery) -> list[CandidateRecord]:
        where = ", ".join(x for x in (query.city, query.country) if x) or query.location
        text = f"{api_query_text(query)} in {where}" if where else api_query_text(query)
        jobs = map_rows(self._fetch(text), FIELDS, self.name)
        log.debug("JSearch query=%r returned %d jobs", text, len(jobs))
        return jobs
