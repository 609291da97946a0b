"""Error taxonomy & redaction.

Fetch failures propagate untouched through the library. The CLI uses
``classify_error`` to turn whatever escaped into a one-line, token-free
message and a category for structured logs.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

import requests

from .graphql import GitHubAPIError
from .paginator import PaginationError

_SENSITIVE_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"ghp_[A-Za-z0-9]{20,40}"),  # GitHub classic tokens
    re.compile(r"github_pat_\w{20,}"),  # GitHub fine-grained tokens
    re.compile(r"gh[ous]_[A-Za-z0-9]{20,40}"),  # OAuth / server / user-to-server tokens
    re.compile(r"(?i)(bearer\s+)[A-Za-z0-9_.\-]{8,}"),
]

_REDACTION_PLACEHOLDER = "<redacted>"
_AUTH_STATUSES = (401, 403)


@dataclass
class ErrorInfo:
    category: str
    message: str
    original_type: str
    transient: bool = False
    details: dict[str, Any] | None = None


def redact(text: str) -> str:
    """Replace anything that looks like a credential with a placeholder."""
    if not text:
        return text
    redacted = text
    for pat in _SENSITIVE_PATTERNS:
        if pat.groups:
            redacted = pat.sub(lambda m: m.group(1) + _REDACTION_PLACEHOLDER, redacted)
        else:
            redacted = pat.sub(_REDACTION_PLACEHOLDER, redacted)
    return redacted


def classify_error(exc: BaseException) -> ErrorInfo:
    """Best-effort classification of an exception.

    - GitHub API errors -> 'github.auth' for 401/403 without a rate-limit hint,
      'github.rate_limit' when the text mentions rate limits, else 'github.api'
    - requests connection errors / timeouts and network keywords -> 'network'
    - pagination invariants -> 'pagination'
    - YAML / parse errors -> 'parse'
    - Fallback -> 'generic'
    """
    msg = str(exc) if exc else ""
    low = msg.lower()
    name = exc.__class__.__name__

    if isinstance(exc, GitHubAPIError):
        detail = f"{low} {(exc.response_text or '').lower()}"
        details = {"status": exc.status} if exc.status is not None else None
        if "rate limit" in detail or "secondary rate" in detail:
            return ErrorInfo("github.rate_limit", redact(msg), name, transient=True, details=details)
        if exc.status in _AUTH_STATUSES:
            return ErrorInfo("github.auth", redact(msg), name, details=details)
        return ErrorInfo("github.api", redact(msg), name, details=details)
    if isinstance(exc, (requests.ConnectionError, requests.Timeout)):
        return ErrorInfo("network", redact(msg), name, transient=True)
    if isinstance(exc, PaginationError):
        return ErrorInfo("pagination", redact(msg), name)
    if "rate limit" in low or "secondary rate" in low:
        return ErrorInfo("github.rate_limit", redact(msg), name, transient=True)
    if any(k in low for k in ("timeout", "connection reset", "temporarily unavailable")):
        return ErrorInfo("network", redact(msg), name, transient=True)
    if any(k in low for k in ("yaml", "scannererror", "parsererror")):
        return ErrorInfo("parse", redact(msg), name)
    return ErrorInfo("generic", redact(msg), name)


__all__ = ["ErrorInfo", "classify_error", "redact"]
