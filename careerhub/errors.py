"""Error taxonomy shared by the API client and the workflow controllers."""
from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    NETWORK = "network"
    HTTP = "http"
    MALFORMED = "malformed"


class ApiError(Exception):
    """A request failed; ``str(exc)`` is the user-facing "Failed to ..." text."""

    def __init__(self, message: str, kind: ErrorKind, status: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.status = status

    @property
    def retryable(self) -> bool:
        return self.kind is ErrorKind.NETWORK or (self.status or 0) >= 500

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, kind={self.kind.value}, status={self.status})"


class TransientApiError(ApiError):
    """Connectivity failure or 5xx; safe to repeat for idempotent reads."""


class NotAuthenticated(RuntimeError):
    """Raised when an API call is attempted outside a logged-in context."""


class InvalidTransition(RuntimeError):
    """A state-machine action was attempted from a state that forbids it."""


class InvalidSelection(ValueError):
    """A booking choice violates the coach's or the platform's constraints."""
