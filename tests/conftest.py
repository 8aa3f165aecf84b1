"""Shared fixtures: a scripted HTTP session and sample API payloads."""
import json
import os
import tempfile
from urllib.parse import urlsplit

os.environ.setdefault("CAREERHUB_LOG_DIR", tempfile.mkdtemp(prefix="careerhub-logs-"))

import pytest
import requests

from careerhub.api import ApiClient

BASE_URL = "http://api.test"


def make_response(status=200, payload=None, raw=None):
    r = requests.Response()
    r.status_code = status
    if raw is not None:
        r._content = raw.encode("utf-8")
    elif payload is not None:
        r._content = json.dumps(payload).encode("utf-8")
    else:
        r._content = b""
    r.headers["Content-Type"] = "application/json"
    return r


class FakeSession:
    """Stands in for ``requests.Session``.

    Responses are queued per ``(METHOD, path)``; the last queued response for
    a route is reused once the queue drains. Queue an exception instance to
    have ``request`` raise it, or a callable to build the response when the
    request arrives.
    """

    def __init__(self):
        self.headers = {}
        self.calls = []
        self.closed = False
        self._routes = {}

    def add(self, method, path, status=200, payload=None, raw=None, exc=None, hook=None):
        if hook is not None:
            item = hook
        elif exc is not None:
            item = exc
        else:
            item = make_response(status, payload, raw)
        self._routes.setdefault((method.upper(), path), []).append(item)
        return self

    def request(self, method, url, params=None, json=None, timeout=None):
        path = urlsplit(url).path
        self.calls.append({"method": method, "path": path, "params": params, "json": json})
        queue = self._routes.get((method, path))
        if not queue:
            return make_response(404, {"error": "not found"})
        item = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(item, Exception):
            raise item
        if callable(item):
            return item()
        return item

    def calls_to(self, method, path):
        return [c for c in self.calls if c["method"] == method and c["path"] == path]

    def close(self):
        self.closed = True


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def api(session):
    return ApiClient(BASE_URL, "tok-123", timeout=5, session=session)


@pytest.fixture
def settings():
    return {
        "api": {"base_url": BASE_URL, "timeout": 5, "read_attempts": 1},
        "matches": {"limit": 20},
        "alerts": {"enabled": True, "min_score": 60, "max_per_digest": 15, "quiet_hours": None},
        "practice": {"default_time_limit": 120},
    }


def match_payload(job_id, score, title="Engineer", company="Acme", notified_at=None):
    return {
        "id": f"m-{job_id}",
        "matchScore": score,
        "notifiedAt": notified_at,
        "job": {
            "id": job_id,
            "title": title,
            "company": {"name": company},
            "location": "Sydney, NSW",
            "employmentType": "FULL_TIME",
            "salaryLow": 90000,
            "salaryHigh": 120000,
            "postedAt": "2026-10-01T09:00:00Z",
        },
    }


def question_payload(qid, time_limit=90):
    return {
        "id": qid,
        "question": f"Tell me about {qid}",
        "category": "behavioral",
        "difficulty": "medium",
        "tips": ["Use STAR"],
        "timeLimit": time_limit,
    }


def session_payload(session_id="s-1", count=5, session_type="quick"):
    return {
        "id": session_id,
        "type": session_type,
        "questions": [question_payload(f"q{i}") for i in range(1, count + 1)],
    }


@pytest.fixture
def matches_payload():
    return {"matches": [match_payload("j1", 85, "Data Engineer"), match_payload("j2", 45, "Analyst")]}
