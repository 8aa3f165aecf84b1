"""Explicitly scoped session context: API client plus feature-flag cache."""
from __future__ import annotations

from typing import Any

import requests

from careerhub.api import ApiClient
from careerhub.errors import NotAuthenticated
from careerhub.log import get_logger
from careerhub.models import FeatureFlag

log = get_logger(__name__)


class SessionContext:
    """Owns everything that lives between login and logout.

    Controllers receive the context (or its :attr:`api`) at construction;
    nothing here is module-global, so two contexts never share state.
    """

    def __init__(self, settings: dict, *, session_factory=requests.Session) -> None:
        self.settings = settings
        self._session_factory = session_factory
        self._api: ApiClient | None = None
        self._flags: dict[str, FeatureFlag] = {}

    def login(self, token: str) -> ApiClient:
        if not token:
            raise ValueError("token is required")
        if self._api is not None:
            self.logout()
        self._api = ApiClient.from_settings(self.settings, token, session=self._session_factory())
        log.info("Session opened against %s", self._api.base_url)
        return self._api

    def logout(self) -> None:
        if self._api is not None:
            self._api.close()
            log.info("Session closed")
        self._api = None
        self._flags.clear()

    @property
    def is_authenticated(self) -> bool:
        return self._api is not None

    @property
    def api(self) -> ApiClient:
        if self._api is None:
            raise NotAuthenticated("login() before making API calls")
        return self._api

    # feature-flag cache

    def remember_flags(self, flags: list[FeatureFlag]) -> None:
        self._flags = {f.key: f for f in flags if f.key}

    def forget_flag(self, key: str) -> None:
        self._flags.pop(key, None)

    def is_enabled(self, key: str, default: bool = False) -> bool:
        flag = self._flags.get(key)
        return flag.enabled if flag is not None else default

    def flag_value(self, key: str, default: Any = None) -> Any:
        flag = self._flags.get(key)
        if flag is None or not flag.enabled:
            return default
        return flag.value if flag.value is not None else flag.default_value

    def __enter__(self) -> SessionContext:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.logout()
