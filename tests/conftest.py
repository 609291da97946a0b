"""Pytest configuration for issuewindow tests.

Ensures the in-repo `src` directory is on `sys.path` so the package can be
imported without an editable install (`pip install -e .`), and provides an
in-memory stand-in for the GitHub GraphQL connection.
"""

from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from issuewindow.models import Edge, ResourceType  # noqa: E402


def make_node(
    number: int,
    created: str,
    closed: str | None = None,
    *,
    state: str | None = None,
    labels: list[str] | None = None,
) -> dict[str, Any]:
    """GraphQL-shaped node, as the API returns it."""
    return {
        "number": number,
        "createdAt": f"{created}T12:00:00Z",
        "closedAt": f"{closed}T12:00:00Z" if closed else None,
        "updatedAt": f"{closed or created}T12:00:00Z",
        "state": state or ("CLOSED" if closed else "OPEN"),
        "title": f"Item {number}",
        "url": f"https://github.com/acme/widgets/issues/{number}",
        "labels": {"nodes": [{"name": name} for name in labels or []]},
    }


class FakeConnection:
    """Serves issues / pull requests in creation order with cursors ``c<number>``."""

    def __init__(self, nodes: dict[ResourceType, list[dict[str, Any]]] | None = None):
        self.nodes: dict[ResourceType, list[dict[str, Any]]] = {
            ResourceType.ISSUES: [],
            ResourceType.PULL_REQUESTS: [],
        }
        if nodes:
            self.nodes.update(nodes)
        self.page_calls: list[tuple[ResourceType, str | None, int]] = []
        self.last_calls: list[ResourceType] = []
        self.after_last: Callable[[], None] | None = None

    def _edges(self, resource: ResourceType) -> list[Edge]:
        return [Edge(f"c{node['number']}", node) for node in self.nodes[resource]]

    def fetch_last(self, resource: ResourceType, last: int = 1) -> list[Edge]:
        self.last_calls.append(resource)
        edges = self._edges(resource)[-last:] if self.nodes[resource] else []
        result = [Edge(edge.cursor, {"createdAt": edge.node["createdAt"]}) for edge in edges]
        if self.after_last is not None:
            self.after_last()
        return result

    def fetch_page(self, resource: ResourceType, after: str | None, first: int) -> list[Edge]:
        self.page_calls.append((resource, after, first))
        edges = self._edges(resource)
        start = 0
        if after is not None:
            cursors = [edge.cursor for edge in edges]
            start = cursors.index(after) + 1
        return edges[start : start + first]


@pytest.fixture
def connection() -> FakeConnection:
    return FakeConnection()
