"""Fan a query out to every job source, then merge, dedupe and geo-filter."""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Sequence

from talentrank.dedupe import dedupe
from talentrank.geo import GeoTable
from talentrank.log import get_logger
from talentrank.models import CandidateRecord, ProviderStatus, QueryProfile, RetrievalResult, SearchQuery
from talentrank.profile import seniority_terms_for
from talentrank.skills import sanitize_keywords
from talentrank.sources import JobSource, PortalLinkGenerator
from talentrank.text import clean

log = get_logger(__name__)

SEED_COUNT = 3


class MultiSourceJobRetriever:
    def __init__(
        self,
        sources: Sequence[JobSource],
        geo: GeoTable,
        fallback: PortalLinkGenerator | None = None,
    ) -> None:
        self.sources = list(sources)
        self.geo = geo
        self.fallback = fallback or PortalLinkGenerator(geo)

    def build_query(
        self,
        keywords: Sequence[str],
        location: str = "",
        country: str = "",
        desired_role: str = "",
        profile: QueryProfile | None = None,
    ) -> SearchQuery:
        cleaned = sanitize_keywords(keywords)
        country_name = self.geo.display_name(clean(country) or clean(location))
        city = clean(profile.city) if profile and profile.city else ""
        level = profile.level if profile else "mid"
        return SearchQuery(
            keywords=cleaned,
            seeds=cleaned[:SEED_COUNT],
            location=clean(location) or city or country_name,
            country=country_name,
            city=city,
            desired_role=clean(desired_role),
            level=level,
            seniority_terms=list(profile.seniority_terms) if profile else seniority_terms_for(level),
        )

    def _run_all(self, query: SearchQuery) -> tuple[list[CandidateRecord], list[ProviderStatus]]:
        if not self.sources:
            return [], []
        records: list[CandidateRecord] = []
        statuses: list[ProviderStatus] = []
        with ThreadPoolExecutor(max_workers=len(self.sources)) as pool:
            futures = [pool.submit(src.run, query) for src in self.sources]
            # Joined in registration order only after every call has settled.
            for src, future in zip(self.sources, futures):
                try:
                    batch, status = future.result()
                except Exception as exc:
                    log.error("[%s] FAILED: %s", src.name, exc)
                    batch, status = [], ProviderStatus(src.name, enabled=True, success=False, error=str(exc))
                records.extend(batch)
                statuses.append(status)
        return records, statuses

    def geo_filter(self, records: list[CandidateRecord], query: SearchQuery) -> list[CandidateRecord]:
        """Keep local records; keep everything if nothing would survive."""
        local = [r for r in records if self.geo.is_local(r, query.country, query.city)]
        if not local and records:
            log.info("Geo filter for %s would drop all %d records; skipping it", query.country, len(records))
            return records
        return local

    def retrieve(
        self,
        keywords: Sequence[str],
        location: str = "",
        country: str = "",
        desired_role: str = "",
        profile: QueryProfile | None = None,
    ) -> RetrievalResult:
        query = self.build_query(keywords, location, country, desired_role, profile)
        log.info(
            "Searching %d source(s) in parallel for %s (seeds=%s)",
            len(self.sources), query.country, query.seeds,
        )
        merged, statuses = self._run_all(query)
        unique = dedupe(merged)
        local = self.geo_filter(unique, query)
        placeholders = self.fallback.generate(query)
        records = dedupe(local + placeholders)
        log.info(
            "Retrieved %d raw -> %d unique -> %d local records, plus %d portal links",
            len(merged), len(unique), len(local), len(placeholders),
        )
        return RetrievalResult(records=records, provider_statuses=statuses)
