"""Date helpers shared by the fetcher and the relevance filter.

GitHub reports timestamps as ISO-8601 strings (``2018-01-15T10:32:00Z``).
Everything that decides whether a record belongs to a report window compares
calendar dates only, so the time-of-day component never matters.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone

DateLike = date | datetime | str


def parse_timestamp(value: str) -> datetime:
    """Parse a GitHub ISO-8601 timestamp into an aware UTC datetime."""
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def to_date(value: DateLike) -> date:
    """Normalize a date, datetime or ISO string to a calendar date."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if len(text) == 10:  # noqa: PLR2004 - plain YYYY-MM-DD
            return date.fromisoformat(text)
        return parse_timestamp(text).date()
    raise TypeError(f"Cannot interpret {value!r} as a date")


def date_le(left: DateLike, right: DateLike) -> bool:
    return to_date(left) <= to_date(right)


def date_ge(left: DateLike, right: DateLike) -> bool:
    return to_date(left) >= to_date(right)


@dataclass(frozen=True)
class DateWindow:
    """Inclusive ``[start_date, end_date]`` range a report covers."""

    start_date: date
    end_date: date

    def __post_init__(self) -> None:
        object.__setattr__(self, "start_date", to_date(self.start_date))
        object.__setattr__(self, "end_date", to_date(self.end_date))
        if self.start_date > self.end_date:
            raise ValueError(
                f"Window start {self.start_date.isoformat()} is after end {self.end_date.isoformat()}"
            )

    @classmethod
    def parse(cls, start: DateLike, end: DateLike) -> DateWindow:
        return cls(to_date(start), to_date(end))

    def contains(self, value: DateLike) -> bool:
        return date_ge(value, self.start_date) and date_le(value, self.end_date)

    def __str__(self) -> str:
        return f"{self.start_date.isoformat()}..{self.end_date.isoformat()}"


__all__ = ["DateLike", "DateWindow", "date_ge", "date_le", "parse_timestamp", "to_date"]
