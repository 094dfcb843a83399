"""Render a match result as a Markdown report."""
from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from urllib.parse import urlparse

from talentrank.config import REPORTS_DIR
from talentrank.log import get_logger
from talentrank.matcher import MatchResult

log = get_logger(__name__)


def _short_url_label(url: str) -> str:
    host = (urlparse(url).hostname or "").replace("www.", "")
    parts = host.split(".")
    return parts[0].capitalize() if parts and parts[0] else "Link"


def _truncate(text: str, n: int) -> str:
    return text[:n] + ("…" if len(text) > n else "")


def build_match_report(result: MatchResult, top: int = 15) -> str:
    date = datetime.now(timezone.utc).strftime("%Y-%m-%d")
    p = result.profile
    genuine = result.genuine
    links = [r for r in result.records if r.placeholder]

    lines: list[str] = [f"# Job Match Report: {date}", ""]
    lines.append(
        f"**{len(genuine)}** postings | **{len(links)}** portal searches | "
        f"level **{p.level}** | {p.country or 'global'}"
    )
    lines.append(f"Keywords: {', '.join(p.keywords[:10])}")
    lines.append("")

    lines.append("## Sources")
    lines.append("")
    lines.append("| Source | Enabled | OK | Jobs | Note |")
    lines.append("|--------|:-------:|:--:|-----:|------|")
    for s in result.provider_statuses:
        note = _truncate(s.error or "", 60)
        lines.append(
            f"| {s.provider} | {'yes' if s.enabled else 'no'} | {'yes' if s.success else 'no'} | {s.count} | {note} |"
        )
    lines.append("")

    if genuine:
        lines.append("## Top Matches")
        lines.append("")
        lines.append("| # | Role | Company | Location | Score | Posted | Link |")
        lines.append("|--:|------|---------|----------|------:|--------|------|")
        for i, r in enumerate(genuine[:top], 1):
            link = f"[{_short_url_label(r.url)}]({r.url})"
            lines.append(
                f"| {i} | {_truncate(r.title, 40)} | {_truncate(r.organization, 22)} | "
                f"{_truncate(r.location.split(',')[0], 18)} | {r.score:.0f} | {r.published.label} | {link} |"
            )
        lines.append("")

    if result.similar_cases:
        lines.append("## Similar Accepted Matches")
        lines.append("")
        for case in result.similar_cases:
            lines.append(f"- {_truncate(case.candidate_summary, 60)} → {_truncate(case.job_summary, 60)}")
        lines.append("")

    if links:
        lines.append("## Search Directly")
        lines.append("")
        for r in links[:top]:
            lines.append(f"- [{r.title}]({r.url})")
        lines.append("")

    log.info("Built match report: %d postings, %d portal links", len(genuine), len(links))
    return "\n".join(lines)


def write_match_report(content: str, reports_dir: Path = REPORTS_DIR) -> Path:
    reports_dir.mkdir(parents=True, exist_ok=True)
    stamp = datetime.now(timezone.utc).strftime("%Y-%m-%d_%H%M%S")
    path = reports_dir / f"match_{stamp}.md"
    path.write_text(content, encoding="utf-8")
    log.info("Report written → %s", path)
    return path
