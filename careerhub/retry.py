"""Retry decorator with exponential backoff."""
from __future__ import annotations

import functools
import logging
import random
import time
from typing import Any, Callable, Tuple, Type

logger = logging.getLogger(__name__)


def retry(
    *,
    max_attempts: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    backoff_factor: float = 2.0,
    jitter: bool = True,
    retryable: Tuple[Type[BaseException], ...] = (Exception,),
    sleep: Callable[[float], None] | None = None,
) -> Callable:
    """Decorator: retries the wrapped function with exponential backoff.

    Only exceptions listed in *retryable* trigger another attempt; anything
    else propagates immediately. ``max_attempts=1`` disables retrying.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")

    def decorator(fn: Callable) -> Callable:
        name = getattr(fn, "__qualname__", None) or repr(fn)

        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            for attempt in range(1, max_attempts + 1):
                try:
                    return fn(*args, **kwargs)
                except retryable as exc:
                    if attempt == max_attempts:
                        if max_attempts > 1:
                            logger.error(
                                "%s failed after %d attempts: %s",
                                name,
                                max_attempts,
                                exc,
                            )
                        raise
                    delay = min(
                        base_delay * (backoff_factor ** (attempt - 1)), max_delay
                    )
                    if jitter:
                        delay *= 0.5 + random.random()
                    logger.warning(
                        "%s attempt %d/%d failed (%s), retrying in %.1fs",
                        name,
                        attempt,
                        max_attempts,
                        exc,
                        delay,
                    )
                    (sleep or time.sleep)(delay)
            raise AssertionError("unreachable")  # pragma: no cover

        return wrapper

    return decorator
