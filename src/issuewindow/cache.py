"""Persistent memoization of fetch results.

``cached(key, producer)`` returns the stored value for ``key`` or runs the
producer and stores what it returns. Nothing is written when the producer
raises, so a failed fetch never leaves a partial entry behind.

``FileCache`` keeps one signed JSON document per key. A document whose
signature or key does not match is ignored (and recomputed on the next call).
"""

from __future__ import annotations

import hashlib
import json
import logging
import re
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Protocol, TypeVar

from .graphql import DEFAULT_API_HOST, split_repository
from .models import ResourceType

logger = logging.getLogger(__name__)

T = TypeVar("T")

CACHE_VERSION = 1
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def compute_signature(value: Any) -> str:
    canonical = json.dumps(value, sort_keys=True, separators=(",", ":")).encode("utf-8")
    return hashlib.sha256(canonical).hexdigest()


def fetch_key(repository: str, resource: ResourceType, host: str | None = None) -> str:
    """Cache key for the full history of one resource type in one repository.

    GitHub treats owner and name case-insensitively, so the key is lowercased.
    Repositories on a host other than api.github.com get the host as a prefix.
    """
    owner, name = split_repository(repository)
    scope = f"{owner}/{name}".lower()
    if host and host.lower() != DEFAULT_API_HOST:
        scope = f"{host.lower()}/{scope}"
    return f"{scope}:fetch-{resource.slug}"


class Cache(Protocol):
    def cached(self, key: str, producer: Callable[[], T]) -> T: ...

    def invalidate(self, key: str) -> None: ...

    def clear(self) -> None: ...


class MemoryCache:
    def __init__(self) -> None:
        self._entries: dict[str, Any] = {}

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def cached(self, key: str, producer: Callable[[], T]) -> T:
        if key in self._entries:
            return self._entries[key]  # type: ignore[no-any-return]
        value = producer()
        self._entries[key] = value
        return value

    def invalidate(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()


class FileCache:
    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()[:12]
        stem = _UNSAFE_CHARS.sub("_", key).strip("_") or "entry"
        return self.directory / f"{stem}-{digest}.json"

    def __contains__(self, key: str) -> bool:
        found, _ = self._load(key)
        return found

    def cached(self, key: str, producer: Callable[[], T]) -> T:
        found, value = self._load(key)
        if found:
            logger.debug("cache hit for %s", key)
            return value  # type: ignore[no-any-return]
        logger.debug("cache miss for %s", key)
        value = producer()
        self._store(key, value)
        return value

    def invalidate(self, key: str) -> None:
        self.path_for(key).unlink(missing_ok=True)

    def clear(self) -> None:
        if not self.directory.exists():
            return
        for pattern in ("*.json", "*.json.tmp"):
            for path in self.directory.glob(pattern):
                path.unlink(missing_ok=True)

    def _load(self, key: str) -> tuple[bool, Any]:
        path = self.path_for(key)
        if not path.exists():
            return False, None
        try:
            raw: Any = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Unreadable cache entry %s: %s", path, exc)
            return False, None
        if not isinstance(raw, dict) or raw.get("key") != key or "value" not in raw:
            logger.warning("Cache entry %s does not belong to %s; ignoring", path, key)
            return False, None
        if raw.get("signature") != compute_signature(raw["value"]):
            logger.warning("Cache signature mismatch detected at %s; ignoring entry", path)
            return False, None
        return True, raw["value"]

    def _store(self, key: str, value: Any) -> None:
        path = self.path_for(key)
        payload = {
            "version": CACHE_VERSION,
            "key": key,
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "signature": compute_signature(value),
            "value": value,
        }
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(path.suffix + ".tmp")
        tmp.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
        tmp.replace(path)


__all__ = ["Cache", "FileCache", "MemoryCache", "compute_signature", "fetch_key"]
