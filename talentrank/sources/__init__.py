from typing import Callable

import requests

from .adzuna import AdzunaSource
from .base import JobSource
from .fallback import PortalLinkGenerator
from .jsearch import JSearchSource
from .serpapi import SerpApiSource
from .web_search import WebSearchSource

from talentrank.geo import GeoTable
from talentrank.log import get_logger

log = get_logger(__name__)

__all__ = [
    "JobSource", "WebSearchSource", "AdzunaSource", "JSearchSource",
    "SerpApiSource", "PortalLinkGenerator", "get_sources",
]


def get_sources(
    env_getter: Callable[[str], str],
    geo: GeoTable,
    session: requests.Session | None = None,
    timeout: float = 15.0,
    web_search_enabled: bool = True,
) -> list[JobSource]:
    """Every known source; unconfigured ones stay registered and report themselves disabled."""
    session = session or requests.Session()
    sources: list[JobSource] = [
        WebSearchSource(geo, session=session, timeout=timeout, enabled=web_search_enabled),
        AdzunaSource(env_getter, geo, session=session, timeout=max(timeout, 20.0)),
        JSearchSource(env_getter, session=session, timeout=timeout),
        SerpApiSource(env_getter, session=session, timeout=max(timeout, 20.0)),
    ]
    for src in sources:
        state = "enabled" if src.is_configured() else f"disabled ({src.disabled_reason()})"
        log.info("Registered source: %s (%s)", src.name, state)
    return sources
