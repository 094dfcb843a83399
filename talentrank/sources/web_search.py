"""Full-text web search scrape restricted to registered job boards.

One DuckDuckGo HTML query per (seed keyword x board). Only links on the
board's own domain are kept; company, location and recency are guessed
from the title and snippet.
"""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from urllib.parse import parse_qs, urlsplit

import requests
from bs4 import BeautifulSoup

from talentrank.errors import ProviderError, ProviderTransientFailure
from talentrank.geo import Board, GeoTable
from talentrank.log import get_logger
from talentrank.models import CandidateRecord, SearchQuery
from talentrank.recency import parse_published
from talentrank.retry import retry
from talentrank.sources.base import UNKNOWN_COMPANY, JobSource, check_response
from talentrank.text import clean, extract_tags

log = get_logger(__name__)

SEARCH_URL = "https://duckduckgo.com/html/"
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/123 Safari/537.36"
)
MAX_SEEDS = 3
PER_QUERY_LIMIT = 14


def resolve_link(href: str) -> str:
    """Absolute result URL; unwraps DuckDuckGo ``/l/?uddg=`` redirects."""
    href = clean(href)
    if not href:
        return ""
    if href.startswith("http") and "duckduckgo.com/l/" not in href:
        return href
    target = parse_qs(urlsplit(href).query).get("uddg", [""])[0]
    return target if target.startswith("http") else ""


def extract_company(title: str, snippet: str) -> str:
    for text in (title, snippet):
        parts = [clean(p) for p in text.split(" - ")]
        if len(parts) > 1 and parts[1]:
            return parts[1][:80]
    return UNKNOWN_COMPANY


class WebSearchSource(JobSource):
    name = "WebSearch"

    def __init__(
        self,
        geo: GeoTable,
        session: requests.Session | None = None,
        timeout: float = 15.0,
        enabled: bool = True,
        max_workers: int = 8,
    ) -> None:
        self.geo = geo
        self.session = session or requests.Session()
        self.timeout = timeout
        self.enabled = enabled
        self.max_workers = max_workers

    def is_configured(self) -> bool:
        return self.enabled

    def disabled_reason(self) -> str:
        return "WEB_SEARCH_ENABLED is off"

    def build_queries(self, query: SearchQuery) -> list[tuple[str, Board]]:
        location = query.location or self.geo.display_name(query.country)
        out: list[tuple[str, Board]] = []
        for board in self.geo.boards_for(query.country):
            for seed in query.seeds[:MAX_SEEDS]:
                out.append((f"{board.site_query()} empleo {location} {seed}", board))
        return out

    @retry(max_attempts=2, base_delay=1.0)
    def _fetch_html(self, q: str) -> str:
        r = self.session.get(
            SEARCH_URL,
            params={"q": q},
            headers={"User-Agent": USER_AGENT},
            timeout=self.timeout,
        )
        check_response(self.name, r)
        return r.text

    def parse_results(self, html: str, board: Board, query: SearchQuery) -> list[CandidateRecord]:
        soup = BeautifulSoup(html or "", "lxml")
        jobs: list[CandidateRecord] = []
        for el in soup.select(".result"):
            anchor = el.select_one(".result__a")
            if anchor is None:
                continue
            url = resolve_link(anchor.get("href", ""))
            if not url or board.domain not in url.lower():
                continue
            title = clean(anchor.get_text(" ")) or "Vacante"
            snippet_el = el.select_one(".result__snippet")
            snippet = clean(snippet_el.get_text(" ")) if snippet_el else ""
            jobs.append(
                CandidateRecord(
                    title=title,
                    organization=extract_company(title, snippet),
                    location=self.geo.detect_location(snippet, query.country, native=board.native),
                    source=board.name,
                    url=url,
                    tags=extract_tags(f"{title} {snippet}"),
                    published=parse_published(snippet),
                    description=snippet,
                )
            )
            if len(jobs) >= PER_QUERY_LIMIT:
                break
        return jobs

    def _search_one(self, q: str, board: Board, query: SearchQuery) -> list[CandidateRecord]:
        html = self._fetch_html(q)
        jobs = self.parse_results(html, board, query)
        log.debug("WebSearch %r returned %d jobs", q, len(jobs))
        return jobs

    def search(self, query: SearchQuery) -> list[CandidateRecord]:
        queries = self.build_queries(query)
        if not queries:
            return []

        jobs: list[CandidateRecord] = []
        failures: list[str] = []
        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(queries))) as pool:
            futures = [pool.submit(self._search_one, q, board, query) for q, board in queries]
            for (q, _board), future in zip(queries, futures):
                try:
                    jobs.extend(future.result())
                except (requests.RequestException, ProviderError) as exc:
                    log.debug("WebSearch %r failed: %s", q, exc)
                    failures.append(str(exc))

        if failures:
            log.warning("WebSearch: %d/%d queries failed", len(failures), len(queries))
        if len(failures) == len(queries):
            raise ProviderTransientFailure(self.name, f"all {len(queries)} queries failed: {failures[-1]}")
        return jobs
