"""Markdown digest of new job matches."""
from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from careerhub.config import REPORTS_DIR
from careerhub.log import get_logger
from careerhub.matches import score_tier, tier_label
from careerhub.models import Match, MatchTier

log = get_logger(__name__)

_TIER_BADGES: dict[MatchTier, str] = {
    MatchTier.STRONG: "\U0001f7e2",
    MatchTier.GOOD: "\U0001f535",
    MatchTier.FAIR: "\U0001f7e1",
    MatchTier.WEAK: "⚪",
}


def _clip(text: str, width: int) -> str:
    return text[:width] + ("…" if len(text) > width else "")


def format_salary(low: int | None, high: int | None) -> str:
    if low and high:
        return f"${low:,} – ${high:,}"
    if low:
        return f"From ${low:,}"
    if high:
        return f"Up to ${high:,}"
    return ""


def build_match_digest(matches: list[Match], *, now: datetime | None = None) -> str:
    now = now or datetime.now(timezone.utc)
    lines: list[str] = [f"# New Job Matches — {now.strftime('%Y-%m-%d')}", ""]

    if not matches:
        lines.append("No new matches yet. We'll let you know when something fits.")
        return "\n".join(lines)

    strong = sum(1 for m in matches if score_tier(m.match_score) is MatchTier.STRONG)
    lines.append(f"**{len(matches)}** new match(es) | **{strong}** strong")
    lines.append("")
    lines.append("## Matches")
    lines.append("")
    for m in matches:
        job = m.job
        tier = score_tier(m.match_score)
        lines.append(f"### {_TIER_BADGES[tier]} {job.title} @ {job.company}")
        lines.append(f"- **Match:** {m.match_score}% — {tier_label(m.match_score)}")
        if job.location:
            lines.append(f"- **Location:** {job.location}")
        if job.employment_type:
            lines.append(f"- **Type:** {job.employment_type.replace('_', ' ').title()}")
        salary = format_salary(job.salary_low, job.salary_high)
        if salary:
            lines.append(f"- **Salary:** {salary}")
        if job.posted_at:
            lines.append(f"- **Posted:** {job.posted_at[:10]}")
        lines.append("")

    lines.append("---")
    lines.append("")
    lines.append("## Quick Reference")
    lines.append("")
    lines.append("| # | Role | Company | Location | Match |")
    lines.append("|--:|------|---------|----------|------:|")
    for i, m in enumerate(matches, 1):
        loc = m.job.location.split(",")[0][:18] if m.job.location else "—"
        lines.append(
            f"| {i} | {_clip(m.job.title, 40)} | {_clip(m.job.company, 22)} | {loc} | {m.match_score}% |"
        )
    lines.append("")

    log.info("Built match digest: %d match(es), %d strong", len(matches), strong)
    return "\n".join(lines)


def write_digest(content: str, reports_dir: Path = REPORTS_DIR) -> Path:
    reports_dir.mkdir(parents=True, exist_ok=True)
    stamp = datetime.now(timezone.utc).strftime("%Y-%m-%d_%H%M")
    path = reports_dir / f"matches_{stamp}.md"
    path.write_text(content, encoding="utf-8")
    log.info("Digest written → %s", path)
    return path
