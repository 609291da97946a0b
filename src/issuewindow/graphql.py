"""GitHub GraphQL transport and the paged query capability built on it."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlparse

import requests

from . import __version__
from .models import Edge, ResourceType
from .retry import RetryConfig, run_with_retries

DEFAULT_GRAPHQL_URL = "https://api.github.com/graphql"
DEFAULT_API_HOST = "api.github.com"
USER_AGENT = f"issuewindow/{__version__}"
HTTP_ERROR_STATUS = 400
REQUEST_TIMEOUT = 30

_NODE_FIELDS = """
        number
        createdAt
        closedAt
        updatedAt
        state
        title
        url
        labels(first: 100) {
          nodes {
            name
          }
        }
"""

PAGE_QUERY = """
query($owner: String!, $name: String!, $first: Int!, $after: String) {
  repository(owner: $owner, name: $name) {
    %(connection)s(first: $first, after: $after, orderBy: {field: CREATED_AT, direction: ASC}) {
      edges {
        cursor
        node {%(fields)s        }
      }
    }
  }
}
"""

LAST_QUERY = """
query($owner: String!, $name: String!, $last: Int!) {
  repository(owner: $owner, name: $name) {
    %(connection)s(last: $last, orderBy: {field: CREATED_AT, direction: ASC}) {
      edges {
        cursor
        node {
          createdAt
        }
      }
    }
  }
}
"""


class GitHubAPIError(RuntimeError):
    """Raised when the GitHub GraphQL API returns an error."""

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        response_text: str | None = None,
    ):
        super().__init__(message)
        self.status = status
        self.response_text = response_text


def api_host(graphql_url: str) -> str:
    """Host part of a GraphQL endpoint URL, lowercased."""
    return (urlparse(graphql_url).hostname or DEFAULT_API_HOST).lower()


def split_repository(repository: str) -> tuple[str, str]:
    owner, sep, name = repository.strip().partition("/")
    if not sep or not owner or not name or "/" in name:
        raise ValueError(f"Repository must look like 'owner/name', got {repository!r}")
    return owner, name


@dataclass
class GitHubGraphQLClient:
    """Lightweight GraphQL client for GitHub."""

    token: str | None
    graphql_url: str = DEFAULT_GRAPHQL_URL
    session: requests.Session | None = None
    retry: RetryConfig | None = None
    _session: requests.Session = field(init=False, repr=False)

    def __post_init__(self) -> None:  # pragma: no cover - simple wiring
        self._session = self.session or requests.Session()
        if self.token:
            self._session.headers.setdefault("Authorization", f"Bearer {self.token}")
        self._session.headers.setdefault("Accept", "application/vnd.github+json")
        self._session.headers.setdefault("User-Agent", USER_AGENT)

    def graphql(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        payload = {"query": query, "variables": variables or {}}

        def _run() -> requests.Response:
            return self._session.request(
                "POST",
                self.graphql_url,
                json=payload,
                headers=self._session.headers,
                timeout=REQUEST_TIMEOUT,
            )

        response = run_with_retries(_run, cfg=self.retry)
        if response.status_code >= HTTP_ERROR_STATUS:
            raise GitHubAPIError(
                f"GitHub GraphQL POST {self.graphql_url} failed with {response.status_code}",
                status=response.status_code,
                response_text=response.text,
            )
        try:
            data = response.json()
        except ValueError as exc:
            raise GitHubAPIError(
                "GitHub GraphQL response was not valid JSON",
                status=response.status_code,
                response_text=response.text,
            ) from exc
        if not isinstance(data, dict):
            raise GitHubAPIError("GitHub GraphQL response was not an object")
        if data.get("errors"):
            raise GitHubAPIError(f"GraphQL query failed: {data['errors']}")
        return data


class PagedQueryClient:
    """Runs the two paged queries the fetcher needs against one repository."""

    def __init__(self, transport: GitHubGraphQLClient, repository: str):
        self.transport = transport
        self.repository = repository
        self.owner, self.name = split_repository(repository)

    def fetch_page(
        self, resource: ResourceType, after: str | None, first: int
    ) -> list[Edge]:
        query = PAGE_QUERY % {"connection": resource.value, "fields": _NODE_FIELDS}
        variables = {"owner": self.owner, "name": self.name, "first": first, "after": after}
        raw = self.transport.graphql(query, variables)
        return self._edges(raw, resource, with_nodes=True)

    def fetch_last(self, resource: ResourceType, last: int = 1) -> list[Edge]:
        query = LAST_QUERY % {"connection": resource.value}
        variables = {"owner": self.owner, "name": self.name, "last": last}
        raw = self.transport.graphql(query, variables)
        return self._edges(raw, resource, with_nodes=False)

    def _edges(
        self, raw: dict[str, Any], resource: ResourceType, *, with_nodes: bool
    ) -> list[Edge]:
        repository = (raw.get("data") or {}).get("repository")
        if not isinstance(repository, dict):
            raise GitHubAPIError(
                f"GraphQL response for {self.repository} has no repository data"
            )
        connection = repository.get(resource.value) or {}
        edges_raw = connection.get("edges") or []
        edges: list[Edge] = []
        for entry in edges_raw:
            if not isinstance(entry, dict) or not isinstance(entry.get("cursor"), str):
                raise GitHubAPIError(
                    f"Malformed {resource.value} edge in response for {self.repository}"
                )
            node = entry.get("node")
            if not with_nodes and not isinstance(node, dict):
                node = {}
            if not isinstance(node, dict):
                raise GitHubAPIError(
                    f"Malformed {resource.value} node in response for {self.repository}"
                )
            edges.append(Edge(entry["cursor"], node))
        return edges


__all__ = [
    "DEFAULT_API_HOST",
    "DEFAULT_GRAPHQL_URL",
    "GitHubAPIError",
    "GitHubGraphQLClient",
    "PagedQueryClient",
    "api_host",
    "split_repository",
]
