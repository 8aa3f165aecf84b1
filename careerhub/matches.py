"""Pre-apply match feed: ranked matches with dismiss / applied transitions."""
from __future__ import annotations

from enum import Enum

from careerhub.api import ApiClient, payload_list
from careerhub.log import get_logger
from careerhub.models import Match, MatchTier
from careerhub.optimistic import OptimisticList

log = get_logger(__name__)

MATCHES_PATH = "/api/pre-apply/matches"

TIER_LABELS: dict[MatchTier, str] = {
    MatchTier.STRONG: "Strong match",
    MatchTier.GOOD: "Good match",
    MatchTier.FAIR: "Fair match",
    MatchTier.WEAK: "Weak match",
}


def score_tier(score: int) -> MatchTier:
    if score >= 80:
        return MatchTier.STRONG
    if score >= 60:
        return MatchTier.GOOD
    if score >= 40:
        return MatchTier.FAIR
    return MatchTier.WEAK


def tier_label(score: int) -> str:
    return TIER_LABELS[score_tier(score)]


class FeedStatus(str, Enum):
    IDLE = "idle"
    READY = "ready"
    EMPTY = "empty"
    ERROR = "error"


class MatchFeed:
    """Matches for the logged-in member, in the order the server ranked them."""

    def __init__(self, api: ApiClient, default_limit: int = 20) -> None:
        self.api = api
        self.default_limit = default_limit
        self._list: OptimisticList[Match] = OptimisticList(key=lambda m: m.job.id, name="matches")
        self._loaded = False
        self._last_limit = default_limit

    @property
    def matches(self) -> list[Match]:
        return self._list.items

    @property
    def error(self) -> str | None:
        return self._list.error

    @property
    def status(self) -> FeedStatus:
        if self._list.error and not self._loaded:
            return FeedStatus.ERROR
        if not self._loaded:
            return FeedStatus.IDLE
        return FeedStatus.READY if self.matches else FeedStatus.EMPTY

    def fetch(self, limit: int) -> list[Match]:
        data = self.api.get(MATCHES_PATH, action="load matches", params={"limit": limit})
        return [Match.from_dict(m) for m in payload_list(data, "matches")]

    def load_matches(self, limit: int | None = None) -> list[Match]:
        self._last_limit = limit or self.default_limit
        if self._list.load(lambda: self.fetch(self._last_limit)):
            self._loaded = True
            log.info("Loaded %d match(es)", len(self.matches))
        else:
            self._loaded = False
        return self.matches

    def refresh(self) -> list[Match]:
        return self.load_matches(self._last_limit)

    def _transition(self, job_id: str, endpoint: str, verb: str) -> bool:
        if self._list.get(job_id) is None:
            log.warning("No visible match for job %s; not sending %s", job_id, endpoint)
            return False
        ok = self._list.confirm_then_remove(
            job_id,
            lambda: self.api.post(f"/api/pre-apply/{job_id}/{endpoint}", action=verb),
        )
        if ok:
            log.info("Match for job %s %s", job_id, "dismissed" if endpoint == "dismiss" else "marked applied")
        return ok

    def dismiss(self, job_id: str) -> bool:
        return self._transition(job_id, "dismiss", "dismiss match")

    def mark_applied(self, job_id: str) -> bool:
        return self._transition(job_id, "applied", "mark match as applied")

    def close(self) -> None:
        self._list.close()
