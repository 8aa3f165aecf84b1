"""
Unit tests for the cron installer helpers.
"""
import pytest

import setup_cron


pytestmark = [pytest.mark.unit]


class TestCronEntry:

    def test_entry_runs_digest_once(self):
        entry = setup_cron.cron_entry(7)
        assert entry.startswith("0 7 * * * cd ")
        assert "run_digest.py --once" in entry
        assert entry.endswith(setup_cron.MARKER)

    def test_hour_validated(self):
        with pytest.raises(ValueError):
            setup_cron.cron_entry(24)

    def test_merge_replaces_previous_entry(self):
        """Changing the hour swaps the old careerhub line instead of adding one."""
        old = setup_cron.cron_entry(9)
        existing = f"*/5 * * * * backup.sh\n{old}\n"
        merged = setup_cron.merge_crontab(existing, setup_cron.cron_entry(6))
        lines = merged.splitlines()
        assert lines[0] == "*/5 * * * * backup.sh"
        assert len(lines) == 2
        assert lines[1].startswith("0 6 ")

    def test_print_only(self, capsys, monkeypatch):
        monkeypatch.setenv("DIGEST_RUN_HOUR", "8")
        assert setup_cron.main(["--print"]) == 0
        assert capsys.readouterr().out.startswith("0 8 * * *")
