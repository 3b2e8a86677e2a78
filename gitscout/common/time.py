"""Common time utilities."""

from __future__ import annotations

import dataclasses
import datetime as dt


def utcnow() -> dt.datetime:
    """Return an aware UTC timestamp."""
    return dt.datetime.now(dt.UTC)


@dataclasses.dataclass(frozen=True, slots=True)
class DateWindow:
    """Inclusive calendar-date window evaluated in UTC.

    ``end`` is inclusive through the end of that day, so the timestamp range
    is ``[start 00:00, end + 1 day 00:00)``.

    Examples
    --------
    >>> window = DateWindow(dt.date(2024, 1, 1), dt.date(2024, 1, 31))
    >>> window.contains(dt.datetime(2024, 1, 31, 23, 59, tzinfo=dt.UTC))
    True
    >>> window.contains(dt.datetime(2024, 2, 1, tzinfo=dt.UTC))
    False

    """

    start: dt.date
    end: dt.date

    @property
    def lower_bound(self) -> dt.datetime:
        """Return the first instant inside the window."""
        return dt.datetime.combine(self.start, dt.time(), tzinfo=dt.UTC)

    @property
    def upper_bound(self) -> dt.datetime:
        """Return the first instant after the window."""
        return dt.datetime.combine(
            self.end + dt.timedelta(days=1), dt.time(), tzinfo=dt.UTC
        )

    def contains(self, moment: dt.datetime) -> bool:
        """Return True when ``moment`` falls inside the window."""
        if moment.tzinfo is None:
            msg = "moment must be timezone-aware"
            raise ValueError(msg)
        return self.lower_bound <= moment < self.upper_bound

    def search_range(self) -> str:
        """Return the window in GitHub search ``start..end`` syntax."""
        return f"{self.start.isoformat()}..{self.end.isoformat()}"
