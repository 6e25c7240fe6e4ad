"""
Period Resolution

Maps each Period to the rules that turn request parameters into a concrete
date range and time-series interval:

| Period   | Date range                                           | Default interval |
|----------|------------------------------------------------------|------------------|
| day      | the given date (or today)                            | hour             |
| realtime | today                                                | minute           |
| 30m      | today (same as realtime)                             | minute           |
| 7d       | 6 days before the given date through it              | date             |
| 30d      | 30 days before the given date through it             | date             |
| month    | calendar month containing the given date             | date             |
| 6mo      | first of the month 5 months back to end of month     | month            |
| 12mo     | first of the month 11 months back to end of month    | month            |
| year     | calendar year containing the given date              | month            |
| all      | local stats start date (or today) through today      | by span          |
| custom   | explicit from/to                                     | date             |

"today" and "the given date" are calendar dates in the site's timezone. The
table is a closed mapping keyed by Period; importing this module fails if a
Period has no rule.
"""

import logging
from datetime import date, datetime, time, timedelta
from typing import Callable, FrozenSet, Mapping, NamedTuple, Optional

import pytz
from dateutil.relativedelta import relativedelta

from stats_backend.core.errors import InvalidQueryParameter
from stats_backend.models.enums import Interval, Period
from stats_backend.models.schemas import SiteMetadata
from stats_backend.services.date_range import DateRange


logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"

# Window of accepted request dates. Range and boundary arithmetic reaches up to
# a year past either end, which must stay inside the calendar.
EARLIEST_DATE = date(1970, 1, 1)
LATEST_DATE = date(9998, 12, 31)


# =============================================================================
# Resolution Context
# =============================================================================


class PeriodContext(NamedTuple):
    """Inputs available to a range resolver."""
    today: date
    params: Mapping[str, str]
    site: SiteMetadata


def parse_date(value: object, parameter: str) -> date:
    """
    Parse a ``YYYY-MM-DD`` request value.

    Raises:
        InvalidQueryParameter: If the value is not a calendar date in that format,
            or falls outside EARLIEST_DATE..LATEST_DATE.
    """
    if not isinstance(value, str):
        raise InvalidQueryParameter(parameter, "expected a date formatted as YYYY-MM-DD")
    try:
        parsed = datetime.strptime(value.strip(), DATE_FORMAT).date()
    except ValueError as e:
        raise InvalidQueryParameter(
            parameter, f"'{value}' is not a date formatted as YYYY-MM-DD"
        ) from e

    if not EARLIEST_DATE <= parsed <= LATEST_DATE:
        raise InvalidQueryParameter(
            parameter, f"{parsed} is outside the supported range {EARLIEST_DATE}..{LATEST_DATE}"
        )
    return parsed


def today_for_site(site: SiteMetadata, now: datetime) -> date:
    """Calendar date of ``now`` in the site's timezone."""
    return now.astimezone(site.tzinfo).date()


def local_stats_start_date(site: SiteMetadata) -> Optional[date]:
    """
    The site's stats start date as a calendar date in the site's timezone.

    The stored date marks UTC midnight, so for sites west of UTC it falls on
    the previous local day.
    """
    if site.stats_start_date is None:
        return None
    midnight = pytz.utc.localize(datetime.combine(site.stats_start_date, time.min))
    return midnight.astimezone(site.tzinfo).date()


def end_of_month(day: date) -> date:
    return day.replace(day=1) + relativedelta(months=1) - timedelta(days=1)


def _base_date(ctx: PeriodContext) -> date:
    value = ctx.params.get("date")
    if not value:
        return ctx.today
    return parse_date(value, "date")


# =============================================================================
# Range Resolvers
# =============================================================================


def _day_range(ctx: PeriodContext) -> DateRange:
    day = _base_date(ctx)
    return DateRange(day, day)


def _realtime_range(ctx: PeriodContext) -> DateRange:
    return DateRange(ctx.today, ctx.today)


def _last_days_range(days_back: int) -> Callable[[PeriodContext], DateRange]:
    def resolve(ctx: PeriodContext) -> DateRange:
        last = _base_date(ctx)
        return DateRange(last - timedelta(days=days_back), last)
    return resolve


def _month_range(ctx: PeriodContext) -> DateRange:
    day = _base_date(ctx)
    return DateRange(day.replace(day=1), end_of_month(day))


def _last_months_range(months: int) -> Callable[[PeriodContext], DateRange]:
    def resolve(ctx: PeriodContext) -> DateRange:
        day = _base_date(ctx)
        first = day.replace(day=1) - relativedelta(months=months - 1)
        return DateRange(first, end_of_month(day))
    return resolve


def _year_range(ctx: PeriodContext) -> DateRange:
    day = _base_date(ctx)
    return DateRange(day.replace(month=1, day=1), day.replace(month=12, day=31))


def _all_time_range(ctx: PeriodContext) -> DateRange:
    start = local_stats_start_date(ctx.site)
    if start is None or start > ctx.today:
        start = ctx.today
    return DateRange(start, ctx.today)


def _custom_range(ctx: PeriodContext) -> DateRange:
    raw_from = ctx.params.get("from")
    raw_to = ctx.params.get("to")

    # Older dashboard links encode the range as date=YYYY-MM-DD,YYYY-MM-DD
    legacy = ctx.params.get("date")
    if not raw_from and not raw_to and isinstance(legacy, str) and "," in legacy:
        raw_from, _, raw_to = legacy.partition(",")
        first = parse_date(raw_from, "date")
        last = parse_date(raw_to, "date")
    else:
        if not raw_from:
            raise InvalidQueryParameter("from", "required when period is custom")
        if not raw_to:
            raise InvalidQueryParameter("to", "required when period is custom")
        first = parse_date(raw_from, "from")
        last = parse_date(raw_to, "to")

    if first > last:
        raise InvalidQueryParameter("to", f"{last} is before the start of the range ({first})")
    return DateRange(first, last)


# =============================================================================
# Interval Defaults
# =============================================================================


def _fixed(interval: Interval) -> Callable[[DateRange], Interval]:
    return lambda _date_range: interval


def _all_time_interval(date_range: DateRange) -> Interval:
    span = relativedelta(date_range.last, date_range.first)
    if span.years * 12 + span.months > 0:
        return Interval.MONTH
    if date_range.first < date_range.last:
        return Interval.DATE
    return Interval.HOUR


# =============================================================================
# Period Rule Table
# =============================================================================


class PeriodRule(NamedTuple):
    """Range resolution and interval rules for one period."""
    resolve_range: Callable[[PeriodContext], DateRange]
    default_interval: Callable[[DateRange], Interval]
    allowed_intervals: FrozenSet[Interval]


_COARSE = frozenset({Interval.DATE, Interval.WEEK, Interval.MONTH})

PERIOD_RULES = {
    Period.DAY: PeriodRule(
        _day_range, _fixed(Interval.HOUR), frozenset({Interval.MINUTE, Interval.HOUR})
    ),
    Period.REALTIME: PeriodRule(
        _realtime_range, _fixed(Interval.MINUTE), frozenset({Interval.MINUTE})
    ),
    Period.THIRTY_MINUTES: PeriodRule(
        _realtime_range, _fixed(Interval.MINUTE), frozenset({Interval.MINUTE})
    ),
    Period.SEVEN_DAYS: PeriodRule(
        _last_days_range(6), _fixed(Interval.DATE), frozenset({Interval.HOUR, Interval.DATE})
    ),
    Period.THIRTY_DAYS: PeriodRule(
        _last_days_range(30), _fixed(Interval.DATE), frozenset({Interval.DATE, Interval.WEEK})
    ),
    Period.MONTH: PeriodRule(
        _month_range, _fixed(Interval.DATE), frozenset({Interval.DATE, Interval.WEEK})
    ),
    Period.SIX_MONTHS: PeriodRule(_last_months_range(6), _fixed(Interval.MONTH), _COARSE),
    Period.TWELVE_MONTHS: PeriodRule(_last_months_range(12), _fixed(Interval.MONTH), _COARSE),
    Period.YEAR: PeriodRule(_year_range, _fixed(Interval.MONTH), _COARSE),
    Period.ALL: PeriodRule(_all_time_range, _all_time_interval, _COARSE),
    Period.CUSTOM: PeriodRule(_custom_range, _fixed(Interval.DATE), _COARSE),
}

_missing = set(Period) - set(PERIOD_RULES)
if _missing:
    raise RuntimeError(f"No period rule for: {sorted(p.value for p in _missing)}")


# =============================================================================
# Public API
# =============================================================================


def parse_period(value: Optional[str], default: str) -> Period:
    """
    Parse the ``period`` parameter, falling back to ``default`` when absent or empty.

    Raises:
        InvalidQueryParameter: If the keyword is not a known period.
    """
    keyword = value or default
    try:
        return Period(keyword)
    except ValueError as e:
        raise InvalidQueryParameter("period", f"unknown period '{keyword}'") from e


def resolve_date_range(period: Period, ctx: PeriodContext) -> DateRange:
    """Resolve the inclusive date range for ``period``."""
    return PERIOD_RULES[period].resolve_range(ctx)


def resolve_interval(period: Period, date_range: DateRange, requested: Optional[str]) -> Interval:
    """
    Pick the time-series interval for a resolved period.

    An explicit ``requested`` interval is used only when the period supports
    it; otherwise the period's default is kept and a warning is logged.
    """
    rule = PERIOD_RULES[period]
    default = rule.default_interval(date_range)
    if not requested:
        return default

    try:
        interval = Interval(requested)
    except ValueError:
        logger.warning(f"Ignoring unknown interval '{requested}', using {default.value}")
        return default

    if interval == default or interval in rule.allowed_intervals:
        return interval

    logger.warning(
        f"Interval '{interval.value}' is not supported for period '{period.value}', "
        f"using {default.value}"
    )
    return default
