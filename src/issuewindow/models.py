from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, NamedTuple

from .dates import parse_timestamp


class ResourceType(str, Enum):
    """Repository connections that can be paged through.

    Values are the GraphQL connection names on ``Repository``.
    """

    ISSUES = "issues"
    PULL_REQUESTS = "pullRequests"

    @property
    def slug(self) -> str:
        return "issues" if self is ResourceType.ISSUES else "pull-requests"

    @property
    def pretty_name(self) -> str:
        return "issue" if self is ResourceType.ISSUES else "pull request"

    @classmethod
    def from_name(cls, name: str) -> ResourceType:
        lookup = {
            "issues": cls.ISSUES,
            "issue": cls.ISSUES,
            "pulls": cls.PULL_REQUESTS,
            "pull": cls.PULL_REQUESTS,
            "pull-requests": cls.PULL_REQUESTS,
            "pullrequests": cls.PULL_REQUESTS,
        }
        try:
            return lookup[name.strip().lower()]
        except KeyError:
            raise ValueError(f"Unknown resource type: {name!r}") from None


class RecordState(str, Enum):
    OPEN = "OPEN"
    CLOSED = "CLOSED"
    MERGED = "MERGED"

    @classmethod
    def parse(cls, raw: Any) -> RecordState:
        return cls(str(raw).upper())


@dataclass(frozen=True)
class Record:
    """One issue or pull request as returned by the GraphQL API."""

    number: int
    created_at: datetime
    closed_at: datetime | None
    updated_at: datetime
    state: RecordState
    title: str
    url: str
    labels: tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_closed(self) -> bool:
        # Merged pull requests are closed as far as reports are concerned.
        return self.state is not RecordState.OPEN

    @classmethod
    def from_node(cls, node: dict[str, Any]) -> Record:
        """Build a record from a GraphQL node or from its flattened cache form."""
        labels_raw = node.get("labels") or []
        if isinstance(labels_raw, dict):
            labels_raw = labels_raw.get("nodes") or []
        labels: list[str] = []
        for entry in labels_raw:
            if isinstance(entry, dict):
                name = entry.get("name")
                if isinstance(name, str):
                    labels.append(name)
            elif isinstance(entry, str):
                labels.append(entry)
        closed_raw = node.get("closedAt")
        return cls(
            number=int(node["number"]),
            created_at=parse_timestamp(node["createdAt"]),
            closed_at=parse_timestamp(closed_raw) if closed_raw else None,
            updated_at=parse_timestamp(node.get("updatedAt") or node["createdAt"]),
            state=RecordState.parse(node.get("state", "OPEN")),
            title=str(node.get("title") or ""),
            url=str(node.get("url") or ""),
            labels=tuple(labels),
        )

    def to_node(self) -> dict[str, Any]:
        """Flat JSON form, with labels as a plain list of names."""
        return {
            "number": self.number,
            "createdAt": _isoformat(self.created_at),
            "closedAt": _isoformat(self.closed_at) if self.closed_at else None,
            "updatedAt": _isoformat(self.updated_at),
            "state": self.state.value,
            "title": self.title,
            "url": self.url,
            "labels": list(self.labels),
        }


def _isoformat(value: datetime) -> str:
    return value.isoformat().replace("+00:00", "Z")


class Edge(NamedTuple):
    cursor: str
    node: dict[str, Any]


__all__ = ["Edge", "Record", "RecordState", "ResourceType"]
