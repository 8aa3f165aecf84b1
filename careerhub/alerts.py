"""
Pre-apply match alerts.

Runs: load matches → gate (score, quiet hours, already alerted) → digest →
(optional) e-mail → record in the local ledger.
"""
from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any

from careerhub.api import ApiClient
from careerhub.config import REPORTS_DIR, ensure_dirs
from careerhub.digest import build_match_digest, write_digest
from careerhub.log import get_logger
from careerhub.mailer import send_digest_email
from careerhub.matches import FeedStatus, MatchFeed
from careerhub.notify import NotificationGate
from careerhub.tracker import ALERTS_CSV, get_alerted_job_ids, record_alerts

log = get_logger(__name__)


def run_alerts(
    api: ApiClient,
    settings: dict,
    *,
    now: datetime | None = None,
    send_email: bool = True,
    write_report: bool = True,
    ledger: Path = ALERTS_CSV,
    reports_dir: Path = REPORTS_DIR,
) -> dict[str, Any]:
    now = now or datetime.now()
    ensure_dirs()
    gate = NotificationGate.from_settings(settings)
    feed = MatchFeed(api, default_limit=int(settings.get("matches", {}).get("limit", 20)))

    result: dict[str, Any] = {
        "matches_found": 0,
        "alerted": 0,
        "report_path": None,
        "emailed": False,
        "error": None,
    }

    feed.load_matches()
    if feed.status is FeedStatus.ERROR:
        log.error("Match alerts aborted: %s", feed.error)
        result["error"] = feed.error
        return result
    result["matches_found"] = len(feed.matches)

    selected = gate.select(feed.matches, now, get_alerted_job_ids(ledger))
    feed.close()
    if not selected:
        log.info("No matches to alert on (%d loaded)", result["matches_found"])
        return result

    content = build_match_digest(selected, now=now)
    if write_report:
        result["report_path"] = str(write_digest(content, reports_dir))

    delivered = True
    if send_email:
        ok, msg = send_digest_email(content)
        log.info("Email: %s", msg)
        result["emailed"] = ok
        delivered = ok

    # only remember what actually reached the member
    if delivered:
        record_alerts(selected, ledger)
        result["alerted"] = len(selected)

    log.info(
        "Alerts complete — found=%d, alerted=%d, emailed=%s",
        result["matches_found"], result["alerted"], result["emailed"],
    )
    return result
