#!/usr/bin/env python3
"""Match a résumé text file against live job sources and print a report.

Usage: python run_match.py resume.txt [--role "Backend Developer"] [--country Peru] [--city Lima]
"""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from talentrank.log import get_logger, set_level

log = get_logger(__name__)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Rank job postings for a résumé.")
    parser.add_argument("resume", type=Path, help="plain-text résumé")
    parser.add_argument("--role", default="", help="desired role")
    parser.add_argument("--country", default="", help="target country (default from config/geo.yaml)")
    parser.add_argument("--city", default="", help="city or region")
    parser.add_argument("--json", action="store_true", help="print JSON instead of Markdown")
    parser.add_argument("--save", action="store_true", help="also write the report under reports/")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser.parse_args(argv)


if __name__ == "__main__":
    args = _parse_args(sys.argv[1:])
    if args.verbose:
        set_level("DEBUG")
    if not args.resume.exists():
        log.error("Résumé not found: %s", args.resume)
        sys.exit(1)

    from talentrank.matcher import build_matcher
    from talentrank.report import build_match_report, write_match_report

    text = args.resume.read_text(encoding="utf-8", errors="ignore")
    with build_matcher() as matcher:
        result = matcher.match(text, desired_role=args.role, country=args.country, city=args.city)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    else:
        content = build_match_report(result)
        print(content)
        if args.save:
            write_match_report(content)
