"""
Integration tests for the command-line interface.
"""
from unittest.mock import patch

import pytest

from careerhub import cli
from careerhub.context import SessionContext

from conftest import FakeSession, match_payload, session_payload


pytestmark = [pytest.mark.integration]


@pytest.fixture
def fake(settings, monkeypatch):
    """Route the CLI's context onto a FakeSession."""
    session = FakeSession()
    monkeypatch.setattr(cli, "load_settings", lambda: settings)
    monkeypatch.setattr(cli, "get_token", lambda: "tok")
    monkeypatch.setattr(cli, "SessionContext", lambda s: SessionContext(s, session_factory=lambda: session))
    return session


def test_no_command_prints_help(capsys):
    assert cli.main([]) == 1
    assert "Available commands" in capsys.readouterr().out


def test_missing_token(settings, monkeypatch, capsys):
    monkeypatch.setattr(cli, "load_settings", lambda: settings)
    monkeypatch.setattr(cli, "get_token", lambda: None)
    assert cli.main(["matches"]) == 1
    assert "CAREERHUB_API_TOKEN" in capsys.readouterr().err


def test_matches(fake, capsys):
    fake.add("GET", "/api/pre-apply/matches", payload={"matches": [match_payload("j1", 85, "Data Engineer")]})
    assert cli.main(["matches", "--limit", "5"]) == 0
    out = capsys.readouterr().out
    assert "Data Engineer @ Acme" in out
    assert "Strong match" in out
    assert fake.calls[0]["params"] == {"limit": 5}


def test_matches_error(fake, capsys):
    fake.add("GET", "/api/pre-apply/matches", status=500, payload={})
    assert cli.main(["matches"]) == 1
    assert "Failed to load matches" in capsys.readouterr().err


def test_dismiss(fake, capsys):
    fake.add("GET", "/api/pre-apply/matches", payload={"matches": [match_payload("j1", 85)]})
    fake.add("POST", "/api/pre-apply/j1/dismiss", payload={})
    assert cli.main(["dismiss", "j1"]) == 0
    assert fake.calls_to("POST", "/api/pre-apply/j1/dismiss")


def test_practice_session(fake, capsys):
    """Two answers then completion prints the score."""
    fake.add("POST", "/api/interview/sessions", payload=session_payload(count=2))
    fake.add("POST", "/api/interview/sessions/s-1/answers", payload={})
    fake.add("POST", "/api/interview/sessions/s-1/complete", payload={"overallScore": 72, "strengths": ["Concise"]})
    lines = iter(["First answer", "", "Second answer", ""])
    with patch("builtins.input", lambda *a: next(lines)):
        assert cli.main(["practice", "--count", "2"]) == 0
    out = capsys.readouterr().out
    assert "Overall score: 72%" in out
    assert "+ Concise" in out
    assert len(fake.calls_to("POST", "/api/interview/sessions/s-1/answers")) == 2


def test_practice_quit(fake, capsys):
    fake.add("POST", "/api/interview/sessions", payload=session_payload(count=2))
    lines = iter([":quit", ""])
    with patch("builtins.input", lambda *a: next(lines)):
        assert cli.main(["practice"]) == 0
    assert "Session discarded" in capsys.readouterr().out
    assert not fake.calls_to("POST", "/api/interview/sessions/s-1/complete")


def test_practice_clear_erases_saved_answer(fake, capsys):
    """':clear' empties a saved answer so it is not submitted."""
    fake.add("POST", "/api/interview/sessions", payload=session_payload(count=2))
    fake.add("POST", "/api/interview/sessions/s-1/answers", payload={})
    fake.add("POST", "/api/interview/sessions/s-1/complete", payload={"overallScore": 60})
    lines = iter(["draft", "", ":prev", "", ":clear", "", "", "Second answer", ""])
    with patch("builtins.input", lambda *a: next(lines)):
        assert cli.main(["practice", "--count", "2"]) == 0
    sent = fake.calls_to("POST", "/api/interview/sessions/s-1/answers")
    assert [c["json"]["questionId"] for c in sent] == ["q2"]
    assert "Overall score: 60%" in capsys.readouterr().out
