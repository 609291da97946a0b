"""Centralized retry / backoff helpers.

Provides a single small function ``run_with_retries`` that encapsulates
exponential backoff with jitter and simple classification of transient
GitHub HTTP failure modes (gateway errors, rate limit / abuse / secondary
rate limits, dropped connections).

Environment overrides:
  ISSUEWINDOW_RETRY_ATTEMPTS (default 3)
  ISSUEWINDOW_RETRY_BASE (seconds base, default 0.5)
  ISSUEWINDOW_RETRY_MAX_SLEEP (cap in seconds, unset = no cap)

The caller supplies a thunk returning a ``requests.Response``. Transient
statuses are raised as ``TransientHTTPError`` and retried; connection errors
and timeouts are retried as well. Any other failure propagates immediately.
"""

from __future__ import annotations

import os
import random
import re
import time
from collections.abc import Callable
from dataclasses import dataclass, field

import requests

from .logging import get_logger

TRANSIENT_TOKENS = (
    "rate limit",
    "abuse detection",
    "secondary rate",
)
TRANSIENT_STATUSES = frozenset({502, 503, 504})
THROTTLE_STATUSES = frozenset({403, 429})

_RE_RETRY_AFTER = re.compile(r"retry[-\s]after:?\s*(\d+)", re.IGNORECASE)
_RE_SECONDS_HINT = re.compile(r"wait\s*(\d+)\s*seconds", re.IGNORECASE)
_JITTER = random.SystemRandom()


class TransientHTTPError(RuntimeError):
    """Raised for a response that is worth retrying."""

    def __init__(self, response: requests.Response):
        super().__init__(f"transient HTTP {response.status_code}")
        self.response = response


def _extract_explicit_backoff(text: str) -> float | None:
    """Extract an explicit backoff (seconds) from error output.

    Supports patterns like:
      Retry-After: 12
      retry after 12
      wait 30 seconds
    Returns None if no valid positive value found.
    """
    if not text:
        return None
    m = _RE_RETRY_AFTER.search(text)
    if m:
        val = float(m.group(1))
        return val if val > 0 else None
    m2 = _RE_SECONDS_HINT.search(text)
    if m2:
        val = float(m2.group(1))
        return val if val > 0 else None
    return None


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.environ.get(name, str(default)))
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.environ.get(name, str(default)))
    except ValueError:
        return default


@dataclass
class RetryConfig:
    attempts: int = field(default_factory=lambda: _env_int("ISSUEWINDOW_RETRY_ATTEMPTS", 3))
    base_sleep: float = field(default_factory=lambda: _env_float("ISSUEWINDOW_RETRY_BASE", 0.5))


def is_transient(output: str) -> bool:
    out_lower = output.lower()
    return any(tok in out_lower for tok in TRANSIENT_TOKENS)


def is_transient_response(response: requests.Response) -> bool:
    if response.status_code in TRANSIENT_STATUSES:
        return True
    if response.status_code in THROTTLE_STATUSES:
        return is_transient(response.text or "")
    return False


def _response_hint(response: requests.Response) -> str:
    retry_after = response.headers.get("Retry-After")
    if retry_after:
        return f"Retry-After: {retry_after}"
    return response.text or ""


def _compute_sleep(attempt: int, cfg: RetryConfig, out: str) -> float:
    explicit = _extract_explicit_backoff(out)
    backoff = cfg.base_sleep * (2 ** (attempt - 1)) + _JITTER.uniform(0, 0.25)
    sleep_for: float = explicit if explicit is not None else backoff
    max_cap_env = os.environ.get("ISSUEWINDOW_RETRY_MAX_SLEEP")
    if max_cap_env:
        try:
            cap = float(max_cap_env)
        except ValueError:  # pragma: no cover
            return sleep_for
        if cap >= 0:
            sleep_for = min(sleep_for, cap)
    return sleep_for


def _sleep_before_retry(attempt: int, attempts: int, cfg: RetryConfig, hint: str, reason: str) -> None:
    sleep_for = _compute_sleep(attempt, cfg, hint)
    get_logger().warning(
        f"[retry] {reason}, attempt {attempt}/{attempts}, sleeping {sleep_for:.2f}s",
        operation="retry",
        attempt=attempt,
    )
    time.sleep(sleep_for)


def run_with_retries(
    fn: Callable[[], requests.Response], *, cfg: RetryConfig | None = None
) -> requests.Response:
    """Run ``fn`` until it yields a non-transient response or attempts run out.

    When the final attempt still produces a transient response, that response
    is returned so the caller can report the HTTP error itself.
    """
    cfg = cfg or RetryConfig()
    attempts = max(1, cfg.attempts)
    for attempt in range(1, attempts + 1):
        try:
            response = fn()
            if attempt < attempts and is_transient_response(response):
                raise TransientHTTPError(response)
            return response
        except TransientHTTPError as exc:
            _sleep_before_retry(
                attempt, attempts, cfg, _response_hint(exc.response), str(exc)
            )
        except (requests.ConnectionError, requests.Timeout) as exc:
            if attempt >= attempts:
                raise
            _sleep_before_retry(attempt, attempts, cfg, "", exc.__class__.__name__)
    raise RuntimeError("retry logic exited unexpectedly")  # pragma: no cover


__all__ = [
    "RetryConfig",
    "TransientHTTPError",
    "is_transient",
    "is_transient_response",
    "run_with_retries",
]
