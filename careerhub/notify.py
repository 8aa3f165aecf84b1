"""Decide which new matches are worth an alert right now."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time
from typing import Any, Iterable

from careerhub.log import get_logger
from careerhub.models import Match

log = get_logger(__name__)


def _parse_hhmm(value: Any) -> time | None:
    if isinstance(value, time):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        hours, minutes = value.strip().split(":")
        return time(int(hours), int(minutes))
    except ValueError:
        log.warning("Ignoring malformed quiet-hours value %r (want HH:MM)", value)
        return None


@dataclass
class NotificationGate:
    enabled: bool = True
    min_score: int = 60
    max_per_digest: int = 15
    quiet_start: time | None = None
    quiet_end: time | None = None

    @classmethod
    def from_settings(cls, settings: dict) -> NotificationGate:
        alerts = settings.get("alerts", {}) or {}
        quiet = alerts.get("quiet_hours") or {}
        return cls(
            enabled=bool(alerts.get("enabled", True)),
            min_score=int(alerts.get("min_score", 60)),
            max_per_digest=int(alerts.get("max_per_digest", 15)),
            quiet_start=_parse_hhmm(quiet.get("start")) if isinstance(quiet, dict) else None,
            quiet_end=_parse_hhmm(quiet.get("end")) if isinstance(quiet, dict) else None,
        )

    def in_quiet_hours(self, now: datetime) -> bool:
        if self.quiet_start is None or self.quiet_end is None or self.quiet_start == self.quiet_end:
            return False
        t = now.time().replace(second=0, microsecond=0)
        if self.quiet_start < self.quiet_end:
            return self.quiet_start <= t < self.quiet_end
        # window wraps midnight, e.g. 22:00-07:00
        return t >= self.quiet_start or t < self.quiet_end

    def allows(self, match: Match, already_sent: set[str]) -> bool:
        return (
            match.match_score >= self.min_score
            and match.notified_at is None
            and match.job.id not in already_sent
        )

    def select(self, matches: Iterable[Match], now: datetime, already_sent: set[str]) -> list[Match]:
        """Eligible matches in server order, capped at ``max_per_digest``."""
        if not self.enabled:
            log.info("Match alerts disabled")
            return []
        if self.in_quiet_hours(now):
            log.info("Quiet hours (%s-%s); holding alerts", self.quiet_start, self.quiet_end)
            return []
        picked = [m for m in matches if self.allows(m, already_sent)]
        return picked[: self.max_per_digest]
