"""Ledger of jobs already included in a match alert (CSV with file locking)."""
from __future__ import annotations

import csv
import fcntl
from datetime import datetime, timezone
from pathlib import Path

from careerhub.config import DATA_DIR
from careerhub.log import get_logger
from careerhub.models import Match

log = get_logger(__name__)

ALERTS_CSV: Path = DATA_DIR / "alerted_matches.csv"
HEADERS: list[str] = ["job_id", "match_id", "title", "company", "score", "alerted_at"]


def _lock(f, exclusive: bool = True) -> None:
    """Advisory file lock (Unix fcntl)."""
    try:
        op = fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH
        fcntl.flock(f.fileno(), op)
    except (OSError, AttributeError):
        pass


def _unlock(f) -> None:
    try:
        fcntl.flock(f.fileno(), fcntl.LOCK_UN)
    except (OSError, AttributeError):
        pass


def ensure_ledger(path: Path = ALERTS_CSV) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    if not path.exists():
        with open(path, "w", newline="", encoding="utf-8") as f:
            _lock(f)
            csv.writer(f).writerow(HEADERS)
            _unlock(f)
        log.info("Created alert ledger → %s", path.name)


def record_alerts(matches: list[Match], path: Path = ALERTS_CSV) -> None:
    if not matches:
        return
    ensure_ledger(path)
    stamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M")
    rows = [
        {
            "job_id": m.job.id,
            "match_id": m.id,
            "title": m.job.title,
            "company": m.job.company,
            "score": str(m.match_score),
            "alerted_at": stamp,
        }
        for m in matches
    ]
    with open(path, "a", newline="", encoding="utf-8") as f:
        _lock(f)
        csv.DictWriter(f, fieldnames=HEADERS).writerows(rows)
        _unlock(f)
    log.debug("Recorded %d alerted match(es)", len(rows))


def get_alerted_job_ids(path: Path = ALERTS_CSV) -> set[str]:
    ensure_ledger(path)
    with open(path, "r", encoding="utf-8") as f:
        _lock(f, exclusive=False)
        rows = list(csv.DictReader(f))
        _unlock(f)
    return {r["job_id"] for r in rows if r.get("job_id")}
