"""
Enumeration definitions for the Stats Query backend.

All enums inherit from both `str` and `Enum` so they serialize directly through
Pydantic models and compare equal to the raw request strings they are parsed from
(e.g. ``Period.MONTH == "month"``).
"""

from enum import Enum


class Period(str, Enum):
    """
    Coarse time-window selector chosen on the dashboard.

    Values are the keywords accepted in the ``period`` request parameter.
    ``30d`` is the default window applied when no period is given. ``30m`` is
    the realtime view under the name older dashboards use.
    """
    DAY = "day"
    REALTIME = "realtime"
    THIRTY_MINUTES = "30m"
    SEVEN_DAYS = "7d"
    THIRTY_DAYS = "30d"
    MONTH = "month"
    SIX_MONTHS = "6mo"
    TWELVE_MONTHS = "12mo"
    YEAR = "year"
    ALL = "all"
    CUSTOM = "custom"

    @property
    def is_realtime(self) -> bool:
        """True for the periods answered from the last few minutes of events."""
        return self in (Period.REALTIME, Period.THIRTY_MINUTES)


class Interval(str, Enum):
    """
    Bucketing granularity for time series inside the resolved date range.

    ``date`` is the daily bucket; the name matches what the graph endpoints expect.
    """
    MINUTE = "minute"
    HOUR = "hour"
    DATE = "date"
    WEEK = "week"
    MONTH = "month"


class FilterOperator(str, Enum):
    """
    Predicate operator of a parsed dashboard filter.

    - is / is_not: exact (negated) match against a single value
    - member / not_member: (negated) match against a ``|`` separated list
    - matches / does_not_match: (negated) wildcard match using ``*``
    """
    IS = "is"
    IS_NOT = "is_not"
    MEMBER = "member"
    NOT_MEMBER = "not_member"
    MATCHES = "matches"
    DOES_NOT_MATCH = "does_not_match"


class GoalKind(str, Enum):
    """Kind of goal a goal filter refers to: a custom event or a pageview goal."""
    EVENT = "event"
    PAGE = "page"


class ComparisonMode(str, Enum):
    """How the comparison date range is derived from the main date range."""
    PREVIOUS_PERIOD = "previous_period"
    YEAR_OVER_YEAR = "year_over_year"
    CUSTOM = "custom"


class ImportSource(str, Enum):
    """External provider a site import was ingested from."""
    GOOGLE_ANALYTICS_4 = "google_analytics_4"
    UNIVERSAL_ANALYTICS = "universal_analytics"
    CSV = "csv"


class ImportStatus(str, Enum):
    """
    Lifecycle state of a site import.

    Only COMPLETED imports contribute data to stats queries.
    """
    PENDING = "pending"
    IMPORTING = "importing"
    COMPLETED = "completed"
    FAILED = "failed"
