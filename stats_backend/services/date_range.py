"""
Inclusive calendar date range used throughout query normalization.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterator


@dataclass(frozen=True)
class DateRange:
    """
    Inclusive [first, last] range of calendar dates.

    Construction fails when ``first`` is after ``last``, so a DateRange held by
    a Query is always non-decreasing.
    """
    first: date
    last: date

    def __post_init__(self) -> None:
        if self.first > self.last:
            raise ValueError(f"first ({self.first}) must be <= last ({self.last})")

    def __contains__(self, day: object) -> bool:
        return isinstance(day, date) and self.first <= day <= self.last

    def __iter__(self) -> Iterator[date]:
        for offset in range(self.days):
            yield self.first + timedelta(days=offset)

    @property
    def days(self) -> int:
        """Number of days in the range, counting both ends."""
        return (self.last - self.first).days + 1

    def overlaps(self, first: date, last: date) -> bool:
        """True if [first, last] shares at least one day with this range."""
        return first <= self.last and last >= self.first

    def shift(self, days: int) -> "DateRange":
        """Move both ends by the same number of days."""
        delta = timedelta(days=days)
        return DateRange(self.first + delta, self.last + delta)
