"""Per-bucket keyword and source weights learned from observed top results.

Buckets are keyed by ``country|level``. Weights only grow, by positive
reinforcement from each retrieval's top results, and are capped so a
popular keyword or provider cannot dominate ranking forever.
"""
from __future__ import annotations

import fcntl
import json
import os
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator, Sequence

from talentrank.log import get_logger
from talentrank.models import CandidateRecord, FeedbackBucket, LearningProfile
from talentrank.text import normalize

log = get_logger(__name__)

KEYWORD_CAP = 6.0
SOURCE_CAP = 8.0
TOP_RESULTS = 20
KEYWORD_STEP = 0.2
SOURCE_BONUS_START = 1.2
SOURCE_BONUS_DECAY = 0.05
SOURCE_BONUS_FLOOR = 0.2


def bucket_key(country: str | None, level: str | None) -> str:
    return f"{normalize(country) or 'global'}|{normalize(level) or 'unknown'}"


def source_bonus(rank_index: int) -> float:
    return max(SOURCE_BONUS_START - rank_index * SOURCE_BONUS_DECAY, SOURCE_BONUS_FLOOR)


@contextmanager
def _file_lock(lock_path: Path) -> Iterator[None]:
    """Advisory cross-process lock (Unix fcntl) around a read-modify-write."""
    lock_path.parent.mkdir(parents=True, exist_ok=True)
    with open(lock_path, "a+") as f:
        try:
            fcntl.flock(f.fileno(), fcntl.LOCK_EX)
        except OSError:
            pass
        try:
            yield
        finally:
            try:
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)
            except OSError:
                pass


class FeedbackWeightStore:
    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._lock_path = self.path.with_name(self.path.name + ".lock")
        # The whole document is rewritten on every update, so one writer at a time.
        self._write_lock = threading.Lock()

    def _read_db(self) -> dict[str, Any]:
        if not self.path.exists():
            return {"buckets": {}}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            log.warning("Unreadable feedback store %s (%s), starting empty", self.path.name, exc)
            return {"buckets": {}}
        if not isinstance(data, dict) or not isinstance(data.get("buckets"), dict):
            return {"buckets": {}}
        return data

    def _write_db(self, db: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(self.path.name + ".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(db, f, indent=2, ensure_ascii=False)
        os.replace(tmp, self.path)

    def bucket(self, country: str | None, level: str | None) -> FeedbackBucket | None:
        raw = self._read_db()["buckets"].get(bucket_key(country, level))
        if not isinstance(raw, dict):
            return None
        return FeedbackBucket.from_dict(raw)

    def get_profile(self, country: str | None, level: str | None) -> LearningProfile:
        """Learned weights for the bucket; empty maps when nothing was learned yet."""
        b = self.bucket(country, level)
        if b is None:
            return LearningProfile()
        return LearningProfile(keyword_weights=dict(b.keyword_weights), source_weights=dict(b.source_weights))

    def learn_from_results(
        self,
        country: str | None,
        level: str | None,
        searched_keywords: Sequence[str],
        results: Sequence[CandidateRecord],
    ) -> FeedbackBucket | None:
        """Reinforce keywords found in the top results and the providers that produced them.

        Placeholder links are not observations and are ignored. Returns the
        updated bucket, or ``None`` when there was nothing to learn from.
        """
        top = [r for r in results if not r.placeholder][:TOP_RESULTS]
        keywords = list(dict.fromkeys(k for k in (normalize(k) for k in searched_keywords) if k))
        if not top or not keywords:
            return None

        key = bucket_key(country, level)
        with self._write_lock, _file_lock(self._lock_path):
            db = self._read_db()
            raw = db["buckets"].get(key)
            b = FeedbackBucket.from_dict(raw) if isinstance(raw, dict) else FeedbackBucket()

            haystacks = [normalize(f"{r.title} {' '.join(r.tags)}") for r in top]
            for kw in keywords:
                hits = sum(1 for h in haystacks if kw in h)
                if hits:
                    current = b.keyword_weights.get(kw, 0.0)
                    b.keyword_weights[kw] = min(current + hits * KEYWORD_STEP, KEYWORD_CAP)

            for index, rec in enumerate(top):
                src = normalize(rec.source)
                if not src:
                    continue
                current = b.source_weights.get(src, 0.0)
                b.source_weights[src] = min(current + source_bonus(index), SOURCE_CAP)

            b.updates += 1
            b.updated_at = datetime.now(timezone.utc).isoformat()
            db["buckets"][key] = b.to_dict()
            self._write_db(db)

        log.debug("Learned bucket %s (update #%d)", key, b.updates)
        return b
