"""Error taxonomy for provider and store failures."""
from __future__ import annotations


class ProviderError(Exception):
    """Base class for anything a job source can fail with."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.message = message


class ProviderUnavailable(ProviderError):
    """Missing credential or configuration; the source is skipped."""


class ProviderTransientFailure(ProviderError):
    """Timeout, 5xx or malformed payload for this retrieval only."""


class ProviderRateLimited(ProviderTransientFailure):
    """HTTP 429 or exhausted quota."""


class CaseNotFound(LookupError):
    pass
