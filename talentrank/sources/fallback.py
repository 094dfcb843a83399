"""Deterministic "search on portal" links, generated without any I/O.

They guarantee the caller always gets actionable links even when every
live source fails or returns nothing.
"""
from __future__ import annotations

from talentrank.geo import GeoTable
from talentrank.log import get_logger
from talentrank.models import PLACEHOLDER_SCORE, CandidateRecord, Published, SearchQuery
from talentrank.skills import DEFAULT_SEEDS

log = get_logger(__name__)

MAX_SEEDS = 20


class PortalLinkGenerator:
    def __init__(self, geo: GeoTable, max_seeds: int = MAX_SEEDS) -> None:
        self.geo = geo
        self.max_seeds = max_seeds

    def generate(self, query: SearchQuery) -> list[CandidateRecord]:
        location = query.location or self.geo.display_name(query.country) or "Peru"
        seeds = list(dict.fromkeys(query.keywords))[: self.max_seeds] or [*DEFAULT_SEEDS, "python"]
        boards = self.geo.boards_for(query.country)

        entries: list[CandidateRecord] = []
        for seed in seeds:
            tags = list(dict.fromkeys([seed, *seeds[:4]]))
            for board in boards:
                entries.append(
                    CandidateRecord(
                        title=f'Buscar "{seed}" en {board.name} ({location})',
                        organization=board.name,
                        location=location,
                        source=board.name,
                        url=board.search_link(seed, location),
                        tags=tags,
                        score=PLACEHOLDER_SCORE,
                        published=Published(),
                        placeholder=True,
                    )
                )
        log.debug("Generated %d portal links (%d seeds x %d boards)", len(entries), len(seeds), len(boards))
        return entries
