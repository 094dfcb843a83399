"""Data models for queries, candidate records and learned weights."""
from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from typing import Any

LEVELS: tuple[str, ...] = ("intern", "junior", "mid", "senior")
ENTRY_LEVELS: frozenset[str] = frozenset({"intern", "junior"})

UNKNOWN_DATE_LABEL = "Sin fecha"

# Fixed score of synthesized "search on portal" links; always ranked after real postings.
PLACEHOLDER_SCORE = 5.0


@dataclass(frozen=True)
class Published:
    """Publication time; ``ts`` is epoch seconds and 0 means unknown."""

    ts: float = 0.0
    label: str = UNKNOWN_DATE_LABEL

    @property
    def known(self) -> bool:
        return self.ts > 0


@dataclass
class QueryProfile:
    keywords: list[str]
    desired_role: str = ""
    country: str = ""
    city: str = ""
    level: str = "mid"
    prefers_entry_level: bool = False
    seniority_terms: list[str] = field(default_factory=list)
    years: int = 0

    @property
    def is_entry_level(self) -> bool:
        return self.level in ENTRY_LEVELS or self.prefers_entry_level


@dataclass
class CandidateRecord:
    title: str
    organization: str
    location: str
    source: str
    url: str
    tags: list[str] = field(default_factory=list)
    score: float = 0.0
    published: Published = field(default_factory=Published)
    description: str = ""
    placeholder: bool = False
    salary_min: float | None = None
    salary_max: float | None = None
    raw: dict = field(default_factory=dict)

    def searchable_text(self) -> str:
        return " ".join([self.title, self.organization, self.location, " ".join(self.tags)])

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "company": self.organization,
            "location": self.location,
            "source": self.source,
            "url": self.url,
            "tags": list(self.tags),
            "score": round(self.score, 2),
            "publishedAt": self.published.label,
            "publishedTs": self.published.ts,
            "placeholder": self.placeholder,
            "salaryMin": self.salary_min,
            "salaryMax": self.salary_max,
        }


@dataclass
class ProviderStatus:
    provider: str
    enabled: bool
    success: bool
    count: int = 0
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class SearchQuery:
    """Parameters every job source receives for one retrieval call."""

    keywords: list[str]
    seeds: list[str]
    location: str
    country: str
    city: str = ""
    desired_role: str = ""
    level: str = "mid"
    seniority_terms: list[str] = field(default_factory=list)


@dataclass
class RetrievalResult:
    records: list[CandidateRecord]
    provider_statuses: list[ProviderStatus]


@dataclass
class LearningProfile:
    keyword_weights: dict[str, float] = field(default_factory=dict)
    source_weights: dict[str, float] = field(default_factory=dict)

    @property
    def empty(self) -> bool:
        return not self.keyword_weights and not self.source_weights


def _weights(raw: Any) -> dict[str, float]:
    """Finite numeric entries of a stored weight map; anything else is skipped."""
    if not isinstance(raw, dict):
        return {}
    out: dict[str, float] = {}
    for k, v in raw.items():
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            continue
        try:
            weight = float(v)
        except OverflowError:
            continue
        if math.isfinite(weight):
            out[str(k)] = weight
    return out


def _count(raw: Any) -> int:
    if isinstance(raw, bool):
        return 0
    if isinstance(raw, int):
        return max(raw, 0)
    if isinstance(raw, float) and math.isfinite(raw):
        return max(int(raw), 0)
    return 0


@dataclass
class FeedbackBucket:
    keyword_weights: dict[str, float] = field(default_factory=dict)
    source_weights: dict[str, float] = field(default_factory=dict)
    updates: int = 0
    updated_at: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FeedbackBucket:
        return cls(
            keyword_weights=_weights(data.get("keyword_weights")),
            source_weights=_weights(data.get("source_weights")),
            updates=_count(data.get("updates")),
            updated_at=str(data.get("updated_at") or ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
