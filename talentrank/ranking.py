"""Score and rank candidate records against a query profile."""
from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Iterable

from talentrank.geo import GeoTable, contains_token, load_geo_table
from talentrank.log import get_logger
from talentrank.models import PLACEHOLDER_SCORE, CandidateRecord, LearningProfile, QueryProfile
from talentrank.text import normalize

log = get_logger(__name__)

ENTRY_TERMS: list[str] = [
    "intern", "internship", "trainee", "junior", "jr", "entry level", "entry-level",
    "practicante", "practicas", "pasante", "sin experiencia", "recien egresado",
]

SENIOR_TERMS: list[str] = [
    "senior", "sr", "lead", "manager", "principal", "head", "jefe", "gerente",
    "lider", "director", "arquitecto",
]


@dataclass
class RankingWeights:
    keyword_hit: float = 12.0
    country: float = 8.0
    city: float = 6.0
    # (max age in hours, bonus), checked in order; older or unknown gets nothing.
    recency: tuple[tuple[float, float], ...] = ((24.0, 10.0), (72.0, 6.0), (168.0, 3.0))
    provider_trust: dict[str, float] = field(
        default_factory=lambda: {"adzuna": 4.0, "jsearch": 4.0, "serpapi": 3.0}
    )
    entry_match: float = 8.0
    entry_mismatch: float = -10.0
    senior_match: float = 6.0
    senior_mismatch: float = -8.0
    keyword_boost_cap: float = 12.0
    source_boost_cap: float = 8.0
    placeholder_score: float = PLACEHOLDER_SCORE


@dataclass
class ScoreBreakdown:
    keywords: float = 0.0
    geo: float = 0.0
    recency: float = 0.0
    trust: float = 0.0
    experience: float = 0.0
    feedback: float = 0.0
    matched_keywords: list[str] = field(default_factory=list)
    reasons: list[str] = field(default_factory=list)

    @property
    def total(self) -> float:
        return self.keywords + self.geo + self.recency + self.trust + self.experience + self.feedback


def _has_any(haystack: str, terms: Iterable[str]) -> bool:
    return any(contains_token(haystack, t) for t in terms)


class RankingEngine:
    def __init__(self, weights: RankingWeights | None = None, geo: GeoTable | None = None) -> None:
        self.weights = weights or RankingWeights()
        self.geo = geo or load_geo_table()

    def recency_bonus(self, published_ts: float, now: float) -> float:
        if published_ts <= 0:
            return 0.0
        age_hours = max(now - published_ts, 0.0) / 3600.0
        for max_hours, bonus in self.weights.recency:
            if age_hours <= max_hours:
                return bonus
        return 0.0

    def experience_fit(self, haystack: str, profile: QueryProfile) -> float:
        """Reward postings aligned with the profile's level; mid is neutral."""
        w = self.weights
        is_entry = _has_any(haystack, ENTRY_TERMS)
        is_senior = _has_any(haystack, SENIOR_TERMS)
        if profile.is_entry_level:
            if is_senior and not is_entry:
                return w.entry_mismatch
            return w.entry_match if is_entry else 0.0
        if profile.level == "senior":
            if is_entry and not is_senior:
                return w.senior_mismatch
            return w.senior_match if is_senior else 0.0
        return 0.0

    def score_record(
        self,
        record: CandidateRecord,
        profile: QueryProfile,
        learning: LearningProfile | None = None,
        now: float | None = None,
    ) -> ScoreBreakdown:
        w = self.weights
        now = time.time() if now is None else now
        haystack = normalize(record.searchable_text())
        out = ScoreBreakdown()

        for kw in dict.fromkeys(normalize(k) for k in profile.keywords):
            if kw and kw in haystack:
                out.matched_keywords.append(kw)
        out.keywords = w.keyword_hit * len(out.matched_keywords)
        if out.matched_keywords:
            out.reasons.append(f"Keywords: {', '.join(out.matched_keywords[:5])}")

        if self.geo.has_country_token(haystack, profile.country):
            out.geo += w.country
            out.reasons.append("Country match")
        if self.geo.has_city_token(haystack, profile.country, profile.city):
            out.geo += w.city
            out.reasons.append("City match")

        out.recency = self.recency_bonus(record.published.ts, now)
        if out.recency:
            out.reasons.append(f"Recent ({record.published.label})")

        out.trust = w.provider_trust.get(normalize(record.source), 0.0)

        out.experience = self.experience_fit(haystack, profile)
        if out.experience > 0:
            out.reasons.append("Seniority level fit")
        elif out.experience < 0:
            out.reasons.append("Seniority mismatch")

        if learning is not None and not learning.empty:
            kw_boost = sum(learning.keyword_weights.get(k, 0.0) for k in out.matched_keywords)
            src_boost = learning.source_weights.get(normalize(record.source), 0.0)
            out.feedback = min(kw_boost, w.keyword_boost_cap) + min(src_boost, w.source_boost_cap)
            if out.feedback:
                out.reasons.append("Learned preference")

        return out

    def rank(
        self,
        records: Iterable[CandidateRecord],
        profile: QueryProfile,
        learning: LearningProfile | None = None,
        limit: int | None = None,
        now: float | None = None,
    ) -> list[CandidateRecord]:
        """Assign scores and sort: score desc, then newer first.

        Placeholder links keep their fixed score and always follow genuine
        postings.
        """
        now = time.time() if now is None else now
        items = list(records)
        for rec in items:
            if rec.placeholder:
                rec.score = self.weights.placeholder_score
            else:
                rec.score = self.score_record(rec, profile, learning, now).total

        ranked = sorted(items, key=lambda r: (r.placeholder, -r.score, -r.published.ts))
        if limit is not None:
            ranked = ranked[:limit]
        log.info(
            "Ranked %d records (%d placeholders) -> %d returned",
            len(items), sum(1 for r in items if r.placeholder), len(ranked),
        )
        return ranked
