"""Extract technical skills and search keywords from free text.

Matching is substring-based on normalized text against a built-in lexicon,
optionally widened with a vocabulary loaded from training/import data.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable

import yaml

from talentrank.log import get_logger
from talentrank.text import normalize

log = get_logger(__name__)

MAX_SKILLS = 40
MAX_KEYWORDS = 14
MIN_VOCAB_LEN = 2

DEFAULT_SEEDS: list[str] = ["practicante", "analista", "asistente"]

BUILTIN_LEXICON: tuple[str, ...] = (
    # languages
    "python", "java", "javascript", "typescript", "c#", "c++", "php", "ruby",
    "kotlin", "swift", "golang", "scala", "rust",
    # frameworks
    "react", "angular", "vue", "node", "express", "nestjs", "django", "flask",
    "fastapi", "spring", "laravel", ".net", "next.js", "flutter",
    # data
    "sql", "nosql", "mongodb", "postgresql", "mysql", "redis", "oracle",
    "pandas", "spark", "kafka", "elasticsearch", "power bi", "tableau", "excel",
    "machine learning", "deep learning", "tensorflow", "pytorch",
    # platforms and tools
    "aws", "azure", "gcp", "docker", "kubernetes", "terraform", "linux", "git",
    "jenkins", "ci/cd", "graphql", "rest", "microservices", "figma",
    "agile", "scrum", "jira", "sap", "salesforce",
)

_NOISE: frozenset[str] = frozenset({
    "proyecto", "titulo", "descripcion", "descripci", "club", "deportivo",
    "intermedio", "desarrollado", "estudiante", "ciclo", "2022",
})

_STOPWORDS: frozenset[str] = frozenset({
    "de", "la", "el", "en", "con", "para", "por", "del", "las", "los", "una", "uno",
    "and", "the", "for", "with", "que", "como", "this", "that", "from",
})

_KEYWORD_STRIP_RE = re.compile(r"[^a-z0-9+#.\s-]")
_WORD_RE = re.compile(r"[a-z0-9+#.]{3,}")

# Keys a training/import row may carry skill lists under.
_VOCAB_FIELDS: tuple[str, ...] = (
    "required_skills", "nice_to_have", "extracted_skills", "missing_skills", "skills",
)

_LEXICON_NORMALIZED: tuple[str, ...] = tuple(dict.fromkeys(normalize(t) for t in BUILTIN_LEXICON))


@dataclass
class SkillGap:
    matched: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)
    match_percentage: int = 0


def extract_skills(text: str | None, vocabulary: Iterable[str] | None = None) -> set[str]:
    """Return normalized skills present in *text*, capped at ``MAX_SKILLS``."""
    haystack = normalize(text)
    if not haystack:
        return set()

    terms: list[str] = list(_LEXICON_NORMALIZED)
    if vocabulary:
        for entry in vocabulary:
            norm = normalize(entry)
            if len(norm) >= MIN_VOCAB_LEN:
                terms.append(norm)

    found: dict[str, None] = {}
    for term in terms:
        if term in haystack:
            found[term] = None
            if len(found) >= MAX_SKILLS:
                break
    return set(found)


def load_vocabulary(path: Path) -> set[str]:
    """Read skill terms from a YAML/JSON list of strings or training rows."""
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    rows: list[Any]
    if isinstance(data, dict):
        rows = data.get("rows") or data.get("skills") or []
    elif isinstance(data, list):
        rows = data
    else:
        rows = []

    vocab: set[str] = set()
    for row in rows:
        if isinstance(row, str):
            values: list[Any] = [row]
        elif isinstance(row, dict):
            values = []
            for key in _VOCAB_FIELDS:
                v = row.get(key)
                if isinstance(v, list):
                    values.extend(v)
        else:
            continue
        for value in values:
            norm = normalize(str(value))
            if len(norm) >= MIN_VOCAB_LEN:
                vocab.add(norm)

    log.info("Loaded %d vocabulary terms from %s", len(vocab), Path(path).name)
    return vocab


def sanitize_keywords(keywords: Iterable[str]) -> list[str]:
    """Normalize and filter search keywords; never returns an empty list."""
    cleaned: list[str] = []
    for kw in keywords:
        norm = " ".join(_KEYWORD_STRIP_RE.sub(" ", normalize(str(kw))).split())
        if norm and len(norm) >= 3 and norm not in _NOISE:
            cleaned.append(norm)
    uniq = list(dict.fromkeys(cleaned))
    if not uniq:
        log.debug("No usable keywords, falling back to generic seeds")
        return list(DEFAULT_SEEDS)
    return uniq[:MAX_KEYWORDS]


def fallback_keywords(text: str | None, desired_role: str = "", limit: int = 20) -> list[str]:
    """Plain word extraction used when no known skill was recognised."""
    base = _KEYWORD_STRIP_RE.sub(" ", normalize(f"{desired_role} {text or ''}"))
    words = [w for w in _WORD_RE.findall(base) if w not in _STOPWORDS and w not in _NOISE]
    return list(dict.fromkeys(words))[:limit]


def skill_gap(
    resume_text: str | None,
    job_text: str | None,
    vocabulary: Iterable[str] | None = None,
) -> SkillGap:
    """Compare the skills a job asks for with those the résumé shows."""
    vocab = list(vocabulary) if vocabulary else None
    wanted = extract_skills(job_text, vocab)
    have = extract_skills(resume_text, vocab)
    if not wanted:
        return SkillGap()
    matched = sorted(wanted & have)
    missing = sorted(wanted - have)
    return SkillGap(
        matched=matched,
        missing=missing,
        match_percentage=round(100 * len(matched) / len(wanted)),
    )
