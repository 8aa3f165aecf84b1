#!/usr/bin/env python3
"""
Install a cron job that sends the match digest at DIGEST_RUN_HOUR (local time, from .env).

Run once:   python setup_cron.py
Preview:    python setup_cron.py --print
"""
from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path

from dotenv import load_dotenv

ROOT = Path(__file__).resolve().parent
load_dotenv(ROOT / ".env")

MARKER = "# careerhub match digest"


def _python() -> Path:
    venv_python = ROOT / ".venv" / "bin" / "python"
    return venv_python if venv_python.exists() else Path(sys.executable)


def cron_entry(hour: int) -> str:
    if not 0 <= hour <= 23:
        raise ValueError(f"DIGEST_RUN_HOUR must be 0-23, got {hour}")
    return f"0 {hour} * * * cd {ROOT} && {_python()} {ROOT / 'run_digest.py'} --once {MARKER}"


def merge_crontab(existing: str, entry: str) -> str:
    """Replace any earlier careerhub line so a changed hour does not leave two jobs."""
    kept = [line for line in existing.splitlines() if MARKER not in line and line.strip()]
    return "\n".join([*kept, entry])


def _write_crontab_file(content: str) -> Path:
    path = ROOT / "crontab.txt"
    path.write_text(content + "\n", encoding="utf-8")
    print(f"Wrote {path}")
    return path


def main(argv: list[str] | None = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    try:
        entry = cron_entry(int(os.environ.get("DIGEST_RUN_HOUR", "9")))
    except ValueError as e:
        print(f"Error: {e}")
        return 1
    if "--print" in argv:
        print(entry)
        return 0

    try:
        out = subprocess.run(["crontab", "-l"], capture_output=True, text=True, timeout=5)
        existing = (out.stdout or "") if out.returncode == 0 else ""
        if entry in existing.splitlines():
            print("Cron entry already present. No change.")
            return 0
        new_crontab = merge_crontab(existing, entry)
        proc = subprocess.run(["crontab", "-"], input=new_crontab + "\n", capture_output=True, text=True, timeout=5)
    except FileNotFoundError:
        print("crontab not found. On Windows use Task Scheduler; on Mac/Linux ensure cron is available.")
        _write_crontab_file(entry)
        return 1
    except subprocess.TimeoutExpired:
        path = _write_crontab_file(entry)
        print(f"Crontab timed out. To install manually, run:\n  crontab {path}")
        return 1

    if proc.returncode != 0:
        path = _write_crontab_file(new_crontab)
        print(f"Could not install crontab automatically. Run manually:\n  crontab {path}")
        return 1
    print(f"Cron installed: digest daily at {entry.split()[1]}:00")
    print(f"  Entry: {entry}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
