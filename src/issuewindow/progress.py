"""Progress observers for long-running fetches.

The paginator and fetcher report what they are doing through an injected
observer rather than printing, so they stay silent in tests and libraries.
"""

from __future__ import annotations

import sys
from typing import Protocol, TextIO

from .logging import StructuredLogger, get_logger
from .models import ResourceType


class ProgressObserver(Protocol):
    def on_start(self, repository: str, resource: ResourceType) -> None: ...

    def on_page(self, resource: ResourceType, page: int, size: int) -> None: ...

    def on_finish(self, resource: ResourceType, total: int) -> None: ...


class NullProgress:
    def on_start(self, repository: str, resource: ResourceType) -> None:
        return None

    def on_page(self, resource: ResourceType, page: int, size: int) -> None:
        return None

    def on_finish(self, resource: ResourceType, total: int) -> None:
        return None


class TextProgress:
    """Human-readable progress: a header line, then one dot per page."""

    def __init__(self, stream: TextIO | None = None):
        self.stream = stream or sys.stderr

    def on_start(self, repository: str, resource: ResourceType) -> None:
        self.stream.write(f"Fetching {repository} {resource.pretty_name} data.")
        self.stream.flush()

    def on_page(self, resource: ResourceType, page: int, size: int) -> None:
        self.stream.write(".")
        self.stream.flush()

    def on_finish(self, resource: ResourceType, total: int) -> None:
        self.stream.write("\n")
        self.stream.flush()


class LoggingProgress:
    def __init__(self, logger: StructuredLogger | None = None):
        self.logger = logger or get_logger()

    def on_start(self, repository: str, resource: ResourceType) -> None:
        self.logger.log_operation("fetch_start", repository=repository, resource=resource.slug)

    def on_page(self, resource: ResourceType, page: int, size: int) -> None:
        self.logger.log_page(resource.slug, page, size)

    def on_finish(self, resource: ResourceType, total: int) -> None:
        self.logger.log_operation("fetch_finish", resource=resource.slug, total=total)


__all__ = ["LoggingProgress", "NullProgress", "ProgressObserver", "TextProgress"]
