"""History of past match predictions and career paths, retrieved by token overlap.

Retrieved cases are fed into prompts as examples, so the store keeps a
``quality`` per case that user feedback moves up or down within bounds.
"""
from __future__ import annotations

import json
import os
import threading
import time
import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from talentrank import overlap
from talentrank.errors import CaseNotFound
from talentrank.log import get_logger

log = get_logger(__name__)

MATCH_QUALITY_BOUND = 5.0
PATH_QUALITY_BOUND = 6.0
MAX_USEFUL_STEPS = 24

_INITIAL_QUALITY = {"accepted": 1.2, "rejected": -0.8, "unknown": 0.0}
_POSITIVE = {"match": ("accepted", "like"), "career_path": ("completed", "like")}
_NEGATIVE = {"match": ("rejected", "dislike"), "career_path": ("not_useful", "dislike")}


@dataclass
class MatchCase:
    id: str
    candidate_summary: str
    job_summary: str
    why_accepted: str
    verdict: str = "unknown"
    quality: float = 0.0
    created_at: str = ""

    def text(self) -> str:
        return f"{self.candidate_summary} {self.job_summary} {self.why_accepted}"


@dataclass
class CareerPath:
    id: str
    user_id: str
    target_role: str
    summary: str
    steps: list[dict[str, Any]] = field(default_factory=list)
    useful_step_titles: list[str] = field(default_factory=list)
    quality: float = 0.0
    created_at: str = ""

    def text(self) -> str:
        return f"{self.target_role} {self.summary}"


def _new_id(prefix: str) -> str:
    return f"{prefix}_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _from_dict(cls: type, data: dict[str, Any]) -> Any:
    known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
    return cls(**known)


class CaseStore:
    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read_db(self) -> tuple[list[MatchCase], list[CareerPath]]:
        if not self.path.exists():
            return [], []
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            log.warning("Unreadable case store %s (%s), starting empty", self.path.name, exc)
            return [], []
        cases = [_from_dict(MatchCase, c) for c in data.get("match_cases") or [] if isinstance(c, dict)]
        paths = [_from_dict(CareerPath, p) for p in data.get("career_paths") or [] if isinstance(p, dict)]
        return cases, paths

    def _write_db(self, cases: list[MatchCase], paths: list[CareerPath]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(self.path.name + ".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(
                {"match_cases": [asdict(c) for c in cases], "career_paths": [asdict(p) for p in paths]},
                f,
                indent=2,
                ensure_ascii=False,
            )
        os.replace(tmp, self.path)

    # ── Retrieval ────────────────────────────────────────────────────────

    def find_accepted_cases(self, query: str, limit: int = 4) -> list[MatchCase]:
        """Accepted cases most relevant to *query*, by overlap plus quality."""
        cases, _ = self._read_db()
        accepted = [c for c in cases if c.verdict == "accepted"]
        accepted.sort(key=lambda c: overlap.score(query, c.text()) + c.quality, reverse=True)
        return accepted[:limit]

    def find_successful_career_paths(self, target_role: str, limit: int = 4) -> list[CareerPath]:
        _, paths = self._read_db()
        ranked = sorted(paths, key=lambda p: overlap.score(target_role, p.text()) + p.quality, reverse=True)
        return ranked[:limit]

    # ── Writes ───────────────────────────────────────────────────────────

    def save_match_prediction(
        self,
        candidate_summary: str,
        job_summary: str,
        why_accepted: str,
        verdict: str = "unknown",
    ) -> str:
        verdict = verdict if verdict in _INITIAL_QUALITY else "unknown"
        case = MatchCase(
            id=_new_id("match"),
            candidate_summary=candidate_summary[:700],
            job_summary=job_summary[:700],
            why_accepted=why_accepted[:900],
            verdict=verdict,
            quality=_INITIAL_QUALITY[verdict],
            created_at=_now(),
        )
        with self._lock:
            cases, paths = self._read_db()
            cases.append(case)
            self._write_db(cases, paths)
        log.debug("Saved match case %s (%s)", case.id, verdict)
        return case.id

    def save_career_path(
        self,
        target_role: str,
        summary: str,
        steps: list[dict[str, Any]],
        user_id: str = "anonymous",
    ) -> str:
        path = CareerPath(
            id=_new_id("path"),
            user_id=user_id,
            target_role=target_role,
            summary=summary,
            steps=list(steps),
            created_at=_now(),
        )
        with self._lock:
            cases, paths = self._read_db()
            paths.append(path)
            self._write_db(cases, paths)
        log.debug("Saved career path %s for %r", path.id, target_role)
        return path.id

    def register_feedback(self, kind: str, ref_id: str, verdict: str, notes: str = "") -> bool:
        """Apply user feedback to a stored case; returns False for unknown ids."""
        if kind not in _POSITIVE:
            raise ValueError(f"Unknown case kind: {kind!r}")
        with self._lock:
            cases, paths = self._read_db()
            try:
                if kind == "match":
                    self._match_feedback(cases, ref_id, verdict, notes)
                else:
                    self._path_feedback(paths, ref_id, verdict, notes)
            except CaseNotFound:
                log.info("Feedback for unknown %s %s ignored", kind, ref_id)
                return False
            self._write_db(cases, paths)
        return True

    @staticmethod
    def _match_feedback(cases: list[MatchCase], ref_id: str, verdict: str, notes: str) -> None:
        row = next((c for c in cases if c.id == ref_id), None)
        if row is None:
            raise CaseNotFound(ref_id)
        if verdict in _POSITIVE["match"]:
            row.verdict = "accepted"
            row.quality = min(row.quality + 1, MATCH_QUALITY_BOUND)
        elif verdict in _NEGATIVE["match"]:
            row.verdict = "rejected"
            row.quality = max(row.quality - 1, -MATCH_QUALITY_BOUND)
        if notes:
            row.why_accepted = f"{row.why_accepted}\nFeedback: {notes}".strip()

    @staticmethod
    def _path_feedback(paths: list[CareerPath], ref_id: str, verdict: str, notes: str) -> None:
        row = next((p for p in paths if p.id == ref_id), None)
        if row is None:
            raise CaseNotFound(ref_id)
        if verdict in _POSITIVE["career_path"]:
            row.quality = min(row.quality + 1, PATH_QUALITY_BOUND)
            if notes:
                row.useful_step_titles = list(dict.fromkeys([*row.useful_step_titles, notes]))[:MAX_USEFUL_STEPS]
        elif verdict in _NEGATIVE["career_path"]:
            row.quality = max(row.quality - 1, -PATH_QUALITY_BOUND)
