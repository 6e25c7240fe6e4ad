"""
Period Comparisons

Derives the date range a query is compared against.

Modes:
- previous_period: the range of equal length ending the day before the main range
- year_over_year: the main range shifted back one calendar year
- custom: explicit ``compare_from``/``compare_to`` parameters

For ranges still in progress (this month, this year, ...), the main range is
clipped to today before the comparison is derived, so "this month so far" is
compared with the same number of days rather than with a full month.

With ``match_day_of_week=true`` the derived range is moved to the nearest date
falling on the same weekday as the main range's first day.
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Mapping, Optional

from dateutil.relativedelta import relativedelta

from stats_backend.core.errors import InvalidQueryParameter
from stats_backend.models.enums import ComparisonMode, Period
from stats_backend.services.date_range import DateRange
from stats_backend.services.periods import parse_date


logger = logging.getLogger(__name__)

DISABLED_VALUES = ("", "off", "false")


@dataclass(frozen=True)
class Comparison:
    """Comparison mode and the date range it resolved to."""
    mode: ComparisonMode
    date_range: DateRange


def comparison_from(
    period: Period,
    date_range: DateRange,
    params: Mapping[str, str],
    today: date,
) -> Optional[Comparison]:
    """
    Resolve the comparison requested by ``params``, if any.

    Args:
        period: Resolved main period; realtime queries are never compared.
        date_range: Resolved main date range.
        params: Raw request parameters (``comparison``, ``compare_from``,
            ``compare_to``, ``match_day_of_week``).
        today: Today in the site's timezone, from the query's captured now.

    Returns:
        The Comparison, or None when no comparison was requested.

    Raises:
        InvalidQueryParameter: On an unknown mode or bad custom bounds.
    """
    raw_mode = params.get("comparison")
    if raw_mode is None or raw_mode in DISABLED_VALUES:
        return None

    try:
        mode = ComparisonMode(raw_mode)
    except ValueError as e:
        raise InvalidQueryParameter("comparison", f"unknown comparison mode '{raw_mode}'") from e

    if period.is_realtime:
        logger.debug("Comparison requested for a realtime query, ignoring")
        return None

    if mode == ComparisonMode.CUSTOM:
        return Comparison(mode, _custom_range(params))

    source = _clip_to_today(date_range, today)
    try:
        if mode == ComparisonMode.PREVIOUS_PERIOD:
            compared = source.shift(-source.days)
        else:
            compared = DateRange(
                source.first - relativedelta(years=1),
                source.last - relativedelta(years=1),
            )

        if params.get("match_day_of_week") == "true":
            compared = _match_day_of_week(compared, source.first)
    except (OverflowError, ValueError) as e:
        raise InvalidQueryParameter(
            "comparison", f"{mode.value} of {source.first}..{source.last} falls outside the calendar"
        ) from e

    return Comparison(mode, compared)


def _clip_to_today(date_range: DateRange, today: date) -> DateRange:
    if date_range.first <= today < date_range.last:
        return DateRange(date_range.first, today)
    return date_range


def _custom_range(params: Mapping[str, str]) -> DateRange:
    raw_from = params.get("compare_from")
    raw_to = params.get("compare_to")
    if not raw_from:
        raise InvalidQueryParameter("compare_from", "required when comparison is custom")
    if not raw_to:
        raise InvalidQueryParameter("compare_to", "required when comparison is custom")

    first = parse_date(raw_from, "compare_from")
    last = parse_date(raw_to, "compare_to")
    if first > last:
        raise InvalidQueryParameter(
            "compare_to", f"{last} is before the start of the comparison ({first})"
        )
    return DateRange(first, last)


def _match_day_of_week(compared: DateRange, source_first: date) -> DateRange:
    forward = (source_first.weekday() - compared.first.weekday()) % 7
    shift = forward if forward <= 3 else forward - 7
    return compared.shift(shift)
