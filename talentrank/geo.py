"""Country/city alias table and job-board registry backed by config/geo.yaml."""
from __future__ import annotations

import functools
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from urllib.parse import quote_plus

import yaml

from talentrank.config import GEO_PATH
from talentrank.log import get_logger
from talentrank.models import CandidateRecord
from talentrank.text import normalize

log = get_logger(__name__)


@dataclass(frozen=True)
class Country:
    key: str
    name: str
    iso: str = ""
    adzuna: str = "us"
    aliases: tuple[str, ...] = ()
    cities: tuple[str, ...] = ()


@dataclass(frozen=True)
class Board:
    name: str
    domain: str
    countries: tuple[str, ...] = ("*",)
    native: bool = False
    search_url: str = ""

    def site_query(self) -> str:
        return f"site:{self.domain}"

    def search_link(self, keyword: str, location: str) -> str:
        if self.search_url:
            return self.search_url.format(keyword=quote_plus(keyword), location=quote_plus(location))
        query = quote_plus(f"{self.site_query()} {keyword} {location}")
        return f"https://www.bing.com/search?q={query}"


def contains_token(haystack: str, token: str) -> bool:
    """Whole-word containment on already-normalized text."""
    if not token:
        return False
    return re.search(rf"(?<![a-z0-9]){re.escape(token)}(?![a-z0-9])", haystack) is not None


class GeoTable:
    def __init__(self, countries: dict[str, Country], boards: list[Board], default_country: str = "") -> None:
        self.countries = countries
        self.boards = boards
        self.default_country = default_country
        self._lookup: dict[str, Country] = {}
        for c in countries.values():
            for alias in (c.key, c.name, c.iso, *c.aliases):
                norm = normalize(alias)
                if norm:
                    self._lookup.setdefault(norm, c)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GeoTable:
        countries: dict[str, Country] = {}
        for key, row in (data.get("countries") or {}).items():
            row = row or {}
            norm_key = normalize(key)
            countries[norm_key] = Country(
                key=norm_key,
                name=str(row.get("name") or key),
                iso=normalize(row.get("iso") or ""),
                adzuna=normalize(row.get("adzuna") or "us"),
                aliases=tuple(normalize(a) for a in row.get("aliases") or [] if normalize(a)),
                cities=tuple(normalize(c) for c in row.get("cities") or [] if normalize(c)),
            )
        boards = [
            Board(
                name=str(b["name"]),
                domain=str(b["domain"]).lower(),
                countries=tuple(normalize(c) if c != "*" else "*" for c in b.get("countries") or ["*"]),
                native=bool(b.get("native", False)),
                search_url=str(b.get("search_url") or ""),
            )
            for b in data.get("boards") or []
        ]
        return cls(countries, boards, normalize(data.get("default_country") or ""))

    @classmethod
    def from_yaml(cls, path: Path) -> GeoTable:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        table = cls.from_dict(data)
        log.debug("Loaded geo table: %d countries, %d boards", len(table.countries), len(table.boards))
        return table

    def country(self, name: str | None) -> Country | None:
        norm = normalize(name) or self.default_country
        return self._lookup.get(norm)

    def display_name(self, name: str | None) -> str:
        c = self.country(name)
        if c:
            return c.name
        return (name or "").strip()

    def country_tokens(self, name: str | None) -> list[str]:
        c = self.country(name)
        if c is None:
            norm = normalize(name)
            return [norm] if norm else []
        return list(dict.fromkeys([normalize(c.name), *c.aliases]))

    def city_tokens(self, name: str | None) -> list[str]:
        c = self.country(name)
        return list(c.cities) if c else []

    def adzuna_code(self, name: str | None) -> str:
        c = self.country(name)
        return c.adzuna if c else "us"

    def boards_for(self, name: str | None) -> list[Board]:
        c = self.country(name)
        key = c.key if c else ""
        specific = [b for b in self.boards if key and key in b.countries]
        wildcard = [b for b in self.boards if "*" in b.countries]
        if specific:
            return specific + [b for b in wildcard if b not in specific]
        defaults = [b for b in self.boards if "default" in b.countries]
        return defaults + wildcard

    def has_country_token(self, text: str, country: str | None) -> bool:
        """Country name or alias present; cities do not count."""
        haystack = normalize(text)
        return any(contains_token(haystack, t) for t in self.country_tokens(country))

    def has_city_token(self, text: str, country: str | None, city: str = "") -> bool:
        haystack = normalize(text)
        wanted = normalize(city)
        if wanted:
            return contains_token(haystack, wanted)
        return any(contains_token(haystack, t) for t in self.city_tokens(country))

    def detect_location(self, text: str, country: str | None, native: bool = False) -> str:
        """Location label for a scraped snippet: first known city, else the country."""
        haystack = normalize(text)
        name = self.display_name(country) or "Peru"
        for city in self.city_tokens(country):
            if contains_token(haystack, city):
                return f"{city.title()}, {name}"
        if native or any(contains_token(haystack, t) for t in self.country_tokens(country)):
            return name
        return f"{name} (no especificado)"

    def is_local(self, record: CandidateRecord, country: str | None, city: str = "") -> bool:
        geo_text = f"{record.title} {record.location} {' '.join(record.tags)}"
        if self.has_country_token(geo_text, country):
            return True
        if self.has_city_token(geo_text, country):
            return True
        return bool(city) and self.has_city_token(geo_text, country, city)


@functools.lru_cache(maxsize=4)
def load_geo_table(path: Path = GEO_PATH) -> GeoTable:
    return GeoTable.from_yaml(path)
