"""Asymmetric token-overlap relevance."""
from __future__ import annotations

from talentrank.text import tokenize


def score(query_text: str | None, candidate_text: str | None) -> float:
    """Fraction of the query's tokens that also appear in the candidate.

    ``score(a, b)`` is generally not ``score(b, a)``: it answers "how much of
    what I'm looking for is present", not how similar the two texts are.
    """
    query_tokens = tokenize(query_text)
    if not query_tokens:
        return 0.0
    candidate_tokens = tokenize(candidate_text)
    return len(query_tokens & candidate_tokens) / len(query_tokens)
