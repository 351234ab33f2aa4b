"""
speechtxt/retry.py
===================
Shared retry utility for external Google Cloud calls

Wraps a single call to the speech or storage service and retries on
transient failures (429 rate-limit, 5xx server errors, deadline and
connection errors) with exponential back-off.

Usage::

    from speechtxt.retry import call_with_retry

    response = call_with_retry(
        client.recognize,
        config=config,
        audio=audio,
        max_retries=2,
    )

This module does NOT:
    - Create or manage client instances
    - Wrap the audio normalization functions (those never retry)
"""

import logging
import time
from typing import Any, Callable

logger = logging.getLogger("speechtxt.retry")

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

MAX_RETRIES: int = 2          # total attempts = MAX_RETRIES + 1 (initial)
BASE_DELAY: float = 1.0       # seconds — first back-off delay
MAX_DELAY: float = 30.0
BACKOFF_FACTOR: float = 2.0

_RETRYABLE_STATUS_CODES: set[int] = {429, 500, 502, 503, 504}

# google.api_core.exceptions class names that are always transient
_RETRYABLE_TYPE_NAMES: set[str] = {
    "TooManyRequests",
    "ResourceExhausted",
    "InternalServerError",
    "BadGateway",
    "ServiceUnavailable",
    "GatewayTimeout",
    "DeadlineExceeded",
    "RetryError",
    "ConnectionError",
    "Timeout",
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def is_retryable(exc: Exception) -> bool:
    """Return True if the exception is a transient Google API error."""
    if type(exc).__name__ in _RETRYABLE_TYPE_NAMES:
        return True

    code = getattr(exc, "code", None)
    if isinstance(code, int):
        return code in _RETRYABLE_STATUS_CODES

    return False


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def call_with_retry(
    fn: Callable[..., Any],
    *args: Any,
    max_retries: int = MAX_RETRIES,
    base_delay: float = BASE_DELAY,
    sleep: Callable[[float], None] = time.sleep,
    **kwargs: Any,
) -> Any:
    """
    Call ``fn(*args, **kwargs)`` with automatic retry.

    Retries up to ``max_retries`` times on transient errors using
    exponential back-off. Non-retryable errors are re-raised immediately.

    Raises:
        The last exception if all retries are exhausted.
    """
    delay = base_delay
    name = getattr(fn, "__qualname__", repr(fn))

    for attempt in range(max_retries + 1):
        try:
            return fn(*args, **kwargs)
        except Exception as exc:
            if not is_retryable(exc):
                logger.warning("%s failed with non-retryable error: %s", name, exc)
                raise

            if attempt >= max_retries:
                logger.error("%s failed after %d attempts: %s", name, attempt + 1, exc)
                raise

            logger.warning(
                "%s failed (attempt %d/%d): %s — retrying in %.1fs",
                name, attempt + 1, max_retries + 1, exc, delay,
            )
            sleep(delay)
            delay = min(delay * BACKOFF_FACTOR, MAX_DELAY)
