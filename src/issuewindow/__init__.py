"""issuewindow - collect issue and pull request history for a report window.

High-level public API:

from issuewindow import DateWindow, FileCache, IssueSource, PagedQueryClient
from issuewindow.graphql import GitHubGraphQLClient

client = PagedQueryClient(GitHubGraphQLClient(token=token), 'owner/name')
window = DateWindow.parse('2018-01-01', '2018-03-01')
issues = IssueSource.issues('owner/name', window, client, FileCache('.issuewindow_cache'))
print(len(issues.to_list()))

The full history of each resource type is cached once per repository; the
window only decides which records are returned.
"""

from __future__ import annotations

# Defined before the submodule imports; graphql.py reads it for the User-Agent.
__version__ = "0.1.0"

from .cache import FileCache, MemoryCache, fetch_key  # noqa: E402
from .config import ReportConfig, load_config  # noqa: E402
from .dates import DateWindow  # noqa: E402
from .fetcher import IssueFetcher  # noqa: E402
from .graphql import GitHubAPIError, PagedQueryClient  # noqa: E402
from .models import Record, ResourceType  # noqa: E402
from .paginator import CursorPaginator, PaginationError  # noqa: E402
from .relevance import filter_relevant, is_relevant  # noqa: E402
from .sources import IssueSource  # noqa: E402

__all__ = [
    "CursorPaginator",
    "DateWindow",
    "FileCache",
    "GitHubAPIError",
    "IssueFetcher",
    "IssueSource",
    "MemoryCache",
    "PagedQueryClient",
    "PaginationError",
    "Record",
    "ReportConfig",
    "ResourceType",
    "fetch_key",
    "filter_relevant",
    "is_relevant",
    "load_config",
    "__version__",
]
