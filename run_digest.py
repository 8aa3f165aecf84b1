#!/usr/bin/env python3
"""
Send the match digest once a day at DIGEST_RUN_HOUR (local time, from .env).

Usage:
  - Cron (recommended): install with: python setup_cron.py
      Then: 0 9 * * * cd /path/to/project && .venv/bin/python run_digest.py --once
  - Or keep this script running in the background: python run_digest.py
"""
from __future__ import annotations

import sys
import time
from datetime import datetime, timedelta
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent))

from careerhub.alerts import run_alerts
from careerhub.config import TOKEN_ENV, get_env, get_token, load_settings
from careerhub.context import SessionContext
from careerhub.log import get_logger

log = get_logger(__name__)

TARGET_HOUR = int(get_env("DIGEST_RUN_HOUR", "9") or 9)
TARGET_MINUTE = 0


def run_once() -> dict | None:
    token = get_token()
    if not token:
        log.error("%s not set in .env — skipping digest", TOKEN_ENV)
        return None
    settings = load_settings()
    with SessionContext(settings) as ctx:
        ctx.login(token)
        result = run_alerts(ctx.api, settings)
    log.info("Run complete.")
    log.info("  Matches loaded: %d", result["matches_found"])
    log.info("  Alerted: %d", result["alerted"])
    if result["report_path"]:
        log.info("  Report: %s", result["report_path"])
    return result


def next_run(now: datetime | None = None) -> datetime:
    now = now or datetime.now()
    target = now.replace(hour=TARGET_HOUR, minute=TARGET_MINUTE, second=0, microsecond=0)
    if now >= target:
        target = target + timedelta(days=1)
    return target


def main() -> None:
    log.info("Scheduler: digest daily at %d:%02d", TARGET_HOUR, TARGET_MINUTE)
    while True:
        target = next_run()
        wait_secs = (target - datetime.now()).total_seconds()
        log.info("Next run at %s (in %.1f hours)", target, wait_secs / 3600)
        time.sleep(max(0.0, min(wait_secs, 86400)))
        now = datetime.now()
        if now.hour == TARGET_HOUR and now.minute < 30:
            run_once()
            log.info("Done. Next run tomorrow.")


if __name__ == "__main__":
    if "--once" in sys.argv:
        sys.exit(0 if run_once() is not None else 1)
    main()
