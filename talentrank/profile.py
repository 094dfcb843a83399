"""Build the per-request query profile from résumé text and intent."""
from __future__ import annotations

import re
from typing import Iterable

from talentrank.log import get_logger
from talentrank.models import QueryProfile
from talentrank.skills import extract_skills, fallback_keywords, sanitize_keywords
from talentrank.text import clean, normalize

log = get_logger(__name__)

_YEARS_RE = re.compile(r"(\d{1,2})\s*\+?\s*(?:anos|ano|years|year|yrs)\b")

ENTRY_SIGNALS: tuple[str, ...] = (
    "practicante", "practica", "intern", "trainee", "sin experiencia", "estudiante",
)
SENIOR_SIGNALS: tuple[str, ...] = (
    "senior", "lead", "lider", "manager", "jefe", "principal", "arquitecto",
)

SENIORITY_TERMS: dict[str, list[str]] = {
    "intern": ["practicante", "intern", "trainee", "junior"],
    "junior": ["junior", "entry level", "asistente", "analista junior"],
    "mid": ["analista", "associate", "mid level"],
    "senior": ["senior", "lead", "manager", "principal"],
}


def infer_experience(text: str | None, desired_role: str = "") -> tuple[int, str]:
    """Return ``(years, level)`` from year mentions and seniority signals."""
    haystack = normalize(f"{desired_role} {text or ''}")
    years = max((int(m) for m in _YEARS_RE.findall(haystack)), default=0)
    entry_hits = sum(1 for s in ENTRY_SIGNALS if s in haystack)
    senior_hits = sum(1 for s in SENIOR_SIGNALS if s in haystack)

    if years <= 1 or entry_hits >= 2:
        level = "intern"
    elif years <= 3 or entry_hits > 0:
        level = "junior"
    elif years >= 6 or senior_hits >= 2:
        level = "senior"
    else:
        level = "mid"
    return years, level


def seniority_terms_for(level: str) -> list[str]:
    return list(SENIORITY_TERMS.get(level, SENIORITY_TERMS["mid"]))


def _ordered_skills(text: str, desired_role: str, vocabulary: Iterable[str] | None) -> list[str]:
    combined = f"{desired_role} {text}"
    haystack = normalize(combined)
    skills = extract_skills(combined, vocabulary)
    return sorted(skills, key=lambda s: (haystack.find(s), s))


def build_query_profile(
    raw_text: str | None,
    desired_role: str = "",
    country: str = "",
    city: str = "",
    vocabulary: Iterable[str] | None = None,
    extra_keywords: Iterable[str] = (),
) -> QueryProfile:
    """Turn résumé text plus request parameters into a ``QueryProfile``.

    ``extra_keywords`` are keywords found upstream (for instance by an LLM
    extractor); they are merged after the role and the lexicon matches.
    """
    text = raw_text or ""
    role = clean(desired_role)
    vocab = list(vocabulary) if vocabulary else None

    found = _ordered_skills(text, role, vocab)
    candidates: list[str] = ([role] if role else []) + found + list(extra_keywords)
    if not found and text.strip():
        candidates += fallback_keywords(text, role)

    keywords = sanitize_keywords(candidates)
    years, level = infer_experience(text, role)
    prefers_entry = level == "intern" or (level == "junior" and years <= 1)

    profile = QueryProfile(
        keywords=keywords,
        desired_role=role,
        country=clean(country),
        city=clean(city),
        level=level,
        prefers_entry_level=prefers_entry,
        seniority_terms=seniority_terms_for(level),
        years=years,
    )
    log.debug(
        "Query profile: level=%s years=%d keywords=%s", profile.level, profile.years, profile.keywords[:6]
    )
    return profile
