from __future__ import annotations

from datetime import datetime, timedelta, timezone

from conftest import FakeConnection, make_node

from issuewindow.cache import MemoryCache
from issuewindow.dates import DateWindow
from issuewindow.models import ResourceType
from issuewindow.sources import IssueSource

WINDOW = DateWindow.parse("2018-01-01", "2018-03-01")
NOW = datetime(2018, 3, 1, 12, tzinfo=timezone.utc)


def _source() -> IssueSource:
    connection = FakeConnection(
        {
            ResourceType.ISSUES: [
                make_node(1, "2018-01-01", labels=["bug"]),
                make_node(2, "2018-01-20", "2018-01-25", labels=["bug", "ui"]),
                make_node(3, "2018-02-20", labels=["docs"]),
                make_node(4, "2018-05-01", labels=["bug"]),
            ],
            ResourceType.PULL_REQUESTS: [
                make_node(10, "2018-02-01", "2018-02-02", state="MERGED"),
            ],
        }
    )
    return IssueSource.issues("acme/widgets", WINDOW, connection, MemoryCache())


def test_open_and_closed_split():
    source = _source()
    assert [r.number for r in source.open()] == [1, 3]
    assert [r.number for r in source.closed()] == [2]


def test_oldest_and_newest_open_records():
    source = _source()
    assert source.oldest().number == 1  # type: ignore[union-attr]
    assert source.newest().number == 3  # type: ignore[union-attr]


def test_average_age_of_open_records():
    age = _source().average_age(NOW)
    # 59 days and 9 days old at NOW.
    assert age == timedelta(days=34)


def test_label_counts_sorted_by_frequency():
    assert _source().label_counts() == {"bug": 2, "docs": 1, "ui": 1}


def test_summary_is_plain_data():
    summary = _source().summary(NOW)
    assert summary["type"] == "issues"
    assert summary["total"] == 3
    assert summary["open"] == 2
    assert summary["closed"] == 1
    assert summary["average_age_days"] == 34.0
    assert summary["oldest"]["number"] == 1
    assert summary["window"] == {"start": "2018-01-01", "end": "2018-03-01"}


def test_pulls_constructor_and_merged_state():
    connection = FakeConnection(
        {ResourceType.PULL_REQUESTS: [make_node(10, "2018-02-01", "2018-02-02", state="MERGED")]}
    )
    source = IssueSource.pulls("acme/widgets", WINDOW, connection, MemoryCache())

    assert source.pretty_type == "pull request"
    assert [r.number for r in source.closed()] == [10]
    assert source.oldest() is None
    assert source.average_age(NOW) is None
