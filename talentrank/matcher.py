"""
Résumé-to-jobs matching.

Runs: profile → learned weights → multi-source retrieval → rank → top-K,
then queues a feedback update from the returned top results.
"""
from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Iterable

import requests

from talentrank.cases import CaseStore, MatchCase
from talentrank.config import Settings, ensure_dirs, get_env, load_settings
from talentrank.geo import load_geo_table
from talentrank.log import get_logger
from talentrank.memory import FeedbackWeightStore
from talentrank.models import CandidateRecord, ProviderStatus, QueryProfile
from talentrank.profile import build_query_profile
from talentrank.ranking import RankingEngine
from talentrank.retriever import MultiSourceJobRetriever
from talentrank.skills import load_vocabulary
from talentrank.sources import get_sources

log = get_logger(__name__)


@dataclass
class MatchResult:
    profile: QueryProfile
    records: list[CandidateRecord]
    provider_statuses: list[ProviderStatus]
    similar_cases: list[MatchCase] = field(default_factory=list)

    @property
    def genuine(self) -> list[CandidateRecord]:
        return [r for r in self.records if not r.placeholder]

    def to_dict(self) -> dict[str, Any]:
        return {
            "extractedKeywords": list(self.profile.keywords),
            "experienceProfile": {
                "years": self.profile.years,
                "level": self.profile.level,
                "prefersInternships": self.profile.prefers_entry_level,
                "seniorityTerms": list(self.profile.seniority_terms),
            },
            "totalJobsFound": len(self.records),
            "jobs": [r.to_dict() for r in self.records],
            "providerStatus": [s.to_dict() for s in self.provider_statuses],
            "similarCases": [c.id for c in self.similar_cases],
        }


class JobMatcher:
    def __init__(
        self,
        retriever: MultiSourceJobRetriever,
        memory: FeedbackWeightStore,
        engine: RankingEngine | None = None,
        vocabulary: Iterable[str] | None = None,
        top_k: int = 200,
        ranked_limit: int = 150,
        learn_in_background: bool = True,
        cases: CaseStore | None = None,
    ) -> None:
        self.retriever = retriever
        self.memory = memory
        self.cases = cases
        self.engine = engine or RankingEngine(geo=retriever.geo)
        self.vocabulary = set(vocabulary) if vocabulary else None
        self.top_k = top_k
        self.ranked_limit = ranked_limit
        # One worker: feedback writes are applied in submission order.
        self._learner = ThreadPoolExecutor(max_workers=1) if learn_in_background else None

    def match(
        self,
        raw_text: str | None,
        desired_role: str = "",
        country: str = "",
        city: str = "",
        extra_keywords: Iterable[str] = (),
    ) -> MatchResult:
        profile = build_query_profile(
            raw_text, desired_role, country, city, vocabulary=self.vocabulary, extra_keywords=extra_keywords
        )
        country_name = self.retriever.geo.display_name(profile.country)
        profile.country = country_name

        learning = self.memory.get_profile(country_name, profile.level)
        retrieval = self.retriever.retrieve(
            profile.keywords, profile.city, country_name, profile.desired_role, profile
        )

        ranked = self.engine.rank(retrieval.records, profile, learning)
        genuine = [r for r in ranked if not r.placeholder][: self.ranked_limit]
        placeholders = [r for r in ranked if r.placeholder]
        records = (genuine + placeholders)[: self.top_k]

        self._schedule_learning(country_name, profile.level, profile.keywords, records)
        similar = self.cases.find_accepted_cases(" ".join(profile.keywords)) if self.cases else []

        log.info(
            "Match complete: country=%s level=%s jobs=%d (genuine=%d) providers ok=%d/%d",
            country_name, profile.level, len(records), len(genuine),
            sum(1 for s in retrieval.provider_statuses if s.success), len(retrieval.provider_statuses),
        )
        return MatchResult(
            profile=profile,
            records=records,
            provider_statuses=retrieval.provider_statuses,
            similar_cases=similar,
        )

    def _schedule_learning(
        self, country: str, level: str, keywords: list[str], records: list[CandidateRecord]
    ) -> Future | None:
        if self._learner is None:
            self.memory.learn_from_results(country, level, keywords, records)
            return None
        future = self._learner.submit(self.memory.learn_from_results, country, level, list(keywords), list(records))
        future.add_done_callback(_log_learning_failure)
        return future

    def close(self) -> None:
        """Wait for queued feedback updates to be written."""
        if self._learner is not None:
            self._learner.shutdown(wait=True)
            self._learner = None

    def __enter__(self) -> JobMatcher:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()


def _log_learning_failure(future: Future) -> None:
    exc = future.exception()
    if exc is not None:
        log.error("Feedback update failed: %s", exc)


def build_matcher(settings: Settings | None = None) -> JobMatcher:
    """Wire the production object graph once, at process start."""
    settings = settings or load_settings()
    ensure_dirs()
    geo = load_geo_table(settings.geo_path)
    session = requests.Session()
    sources = get_sources(
        get_env,
        geo,
        session=session,
        timeout=settings.http_timeout,
        web_search_enabled=settings.web_search_enabled,
    )
    vocabulary = None
    if settings.vocabulary_path and settings.vocabulary_path.exists():
        vocabulary = load_vocabulary(settings.vocabulary_path)
    return JobMatcher(
        retriever=MultiSourceJobRetriever(sources, geo),
        memory=FeedbackWeightStore(settings.memory_path),
        engine=RankingEngine(geo=geo),
        vocabulary=vocabulary,
        top_k=settings.top_k,
        ranked_limit=settings.ranked_limit,
        cases=CaseStore(settings.cases_path),
    )
