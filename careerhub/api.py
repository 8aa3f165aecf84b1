"""JSON REST client for the platform API (requests based)."""
from __future__ import annotations

from typing import Any

import requests

from careerhub.errors import ApiError, ErrorKind, TransientApiError
from careerhub.log import get_logger
from careerhub.retry import retry

log = get_logger(__name__)


def payload_list(data: Any, key: str) -> list[dict]:
    """``data[key]`` as a list of dicts; anything else reads as empty."""
    if not isinstance(data, dict):
        return []
    items = data.get(key)
    if not isinstance(items, list):
        if items is not None:
            log.warning("Expected a list under %r, got %s", key, type(items).__name__)
        return []
    return [i for i in items if isinstance(i, dict)]


def payload_dict(data: Any, action: str) -> dict:
    if not isinstance(data, dict):
        raise ApiError(f"Failed to {action}", ErrorKind.MALFORMED)
    return data


class ApiClient:
    """Thin wrapper over a ``requests.Session``.

    Every failure is raised as :class:`ApiError` carrying the generic
    "Failed to <action>" text; transport errors and 5xx responses raise the
    :class:`TransientApiError` subclass. GET requests are retried up to
    ``read_attempts`` times on transient errors; other verbs are sent once.
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        *,
        timeout: float = 15.0,
        read_attempts: int = 1,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.read_attempts = max(1, int(read_attempts))
        self.session = session if session is not None else requests.Session()
        self.session.headers["Accept"] = "application/json"
        self.set_token(token)

    @classmethod
    def from_settings(
        cls, settings: dict, token: str | None = None, session: requests.Session | None = None
    ) -> ApiClient:
        api = settings.get("api", {})
        return cls(
            api.get("base_url", ""),
            token,
            timeout=float(api.get("timeout", 15)),
            read_attempts=int(api.get("read_attempts", 1)),
            session=session,
        )

    def set_token(self, token: str | None) -> None:
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"
        else:
            self.session.headers.pop("Authorization", None)

    def close(self) -> None:
        self.session.close()

    def _send(
        self,
        method: str,
        path: str,
        *,
        action: str,
        params: dict | None = None,
        body: Any = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        if params:
            params = {k: v for k, v in params.items() if v is not None and v != ""}
        try:
            r = self.session.request(method, url, params=params or None, json=body, timeout=self.timeout)
        except requests.RequestException as exc:
            log.warning("%s %s: %s", method, path, exc)
            raise TransientApiError(f"Failed to {action}", ErrorKind.NETWORK) from exc

        if not 200 <= r.status_code < 300:
            log.warning("%s %s -> HTTP %d", method, path, r.status_code)
            err_cls = TransientApiError if r.status_code >= 500 else ApiError
            raise err_cls(f"Failed to {action}", ErrorKind.HTTP, status=r.status_code)

        if not r.content:
            return None
        try:
            return r.json()
        except ValueError as exc:
            log.warning("%s %s returned a non-JSON body", method, path)
            raise ApiError(f"Failed to {action}", ErrorKind.MALFORMED, status=r.status_code) from exc

    def get(self, path: str, *, action: str, params: dict | None = None) -> Any:
        fetch = retry(
            max_attempts=self.read_attempts,
            base_delay=1.0,
            retryable=(TransientApiError,),
        )(self._send)
        return fetch("GET", path, action=action, params=params)

    def post(self, path: str, *, action: str, body: Any = None) -> Any:
        return self._send("POST", path, action=action, body=body)

    def put(self, path: str, *, action: str, body: Any = None) -> Any:
        return self._send("PUT", path, action=action, body=body)

    def patch(self, path: str, *, action: str, body: Any = None) -> Any:
        return self._send("PATCH", path, action=action, body=body)

    def delete(self, path: str, *, action: str) -> Any:
        return self._send("DELETE", path, action=action)
