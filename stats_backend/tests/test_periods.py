"""
Test suite for period resolution and the DateRange value type.

Covers the per-period range rules, the interval rules (defaults and which
explicit overrides each period accepts) and DateRange helpers used by the
eligibility rule and comparisons.
"""

from datetime import date

import pytest

from stats_backend.core.errors import InvalidQueryParameter
from stats_backend.models import Interval, Period
from stats_backend.services.date_range import DateRange
from stats_backend.services.periods import (
    EARLIEST_DATE,
    LATEST_DATE,
    PERIOD_RULES,
    PeriodContext,
    end_of_month,
    local_stats_start_date,
    parse_date,
    parse_period,
    resolve_date_range,
    resolve_interval,
)


# =============================================================================
# HELPERS
# =============================================================================


def resolve(period: Period, site, today: date, **params) -> DateRange:
    """Resolve the range of ``period`` with the given request params."""
    return resolve_date_range(period, PeriodContext(today, params, site))


# =============================================================================
# DATE RANGE
# =============================================================================


class TestDateRange:
    """Tests for the inclusive DateRange type."""

    def test_rejects_reversed_range(self) -> None:
        with pytest.raises(ValueError):
            DateRange(date(2024, 1, 2), date(2024, 1, 1))

    def test_days_counts_both_ends(self) -> None:
        assert DateRange(date(2024, 1, 1), date(2024, 1, 1)).days == 1
        assert DateRange(date(2024, 1, 1), date(2024, 1, 31)).days == 31

    def test_membership_and_iteration(self) -> None:
        date_range = DateRange(date(2024, 2, 28), date(2024, 3, 1))

        assert list(date_range) == [date(2024, 2, 28), date(2024, 2, 29), date(2024, 3, 1)]
        assert date(2024, 2, 29) in date_range
        assert date(2024, 3, 2) not in date_range

    def test_shift(self) -> None:
        assert DateRange(date(2024, 1, 1), date(2024, 1, 7)).shift(-7) == DateRange(
            date(2023, 12, 25), date(2023, 12, 31)
        )


# =============================================================================
# RANGE RULES
# =============================================================================


class TestRangeRules:
    """Tests for the date range each period resolves to."""

    def test_every_period_has_a_rule(self) -> None:
        assert set(PERIOD_RULES) == set(Period)

    def test_seven_days_ends_on_date(self, site, today) -> None:
        assert resolve(Period.SEVEN_DAYS, site, today, date="2024-03-15") == DateRange(
            date(2024, 3, 9), date(2024, 3, 15)
        )

    def test_thirty_days_ends_on_date(self, site, today) -> None:
        assert resolve(Period.THIRTY_DAYS, site, today, date="2024-03-15") == DateRange(
            date(2024, 2, 14), date(2024, 3, 15)
        )

    def test_month_in_leap_february(self, site, today) -> None:
        assert resolve(Period.MONTH, site, today, date="2024-02-10") == DateRange(
            date(2024, 2, 1), date(2024, 2, 29)
        )

    def test_six_months(self, site, today) -> None:
        assert resolve(Period.SIX_MONTHS, site, today, date="2024-03-15") == DateRange(
            date(2023, 10, 1), date(2024, 3, 31)
        )

    def test_twelve_months(self, site, today) -> None:
        assert resolve(Period.TWELVE_MONTHS, site, today, date="2024-03-15") == DateRange(
            date(2023, 4, 1), date(2024, 3, 31)
        )

    def test_year_with_date(self, site, today) -> None:
        assert resolve(Period.YEAR, site, today, date="2019-06-15") == DateRange(
            date(2019, 1, 1), date(2019, 12, 31)
        )

    def test_realtime_ignores_date(self, site, today) -> None:
        assert resolve(Period.REALTIME, site, today, date="2019-06-15") == DateRange(today, today)

    def test_thirty_minutes_is_today(self, site, today) -> None:
        assert resolve(Period.THIRTY_MINUTES, site, today, date="2019-06-15") == DateRange(today, today)

    def test_all_with_future_stats_start_is_today(self, make_site, today) -> None:
        site = make_site(stats_start_date=date(2030, 1, 1))

        assert resolve(Period.ALL, site, today) == DateRange(today, today)

    def test_custom_legacy_date_pair(self, site, today) -> None:
        """Older links carry the custom range as date=first,last."""
        assert resolve(Period.CUSTOM, site, today, date="2021-01-01,2021-01-31") == DateRange(
            date(2021, 1, 1), date(2021, 1, 31)
        )

    def test_custom_requires_bounds(self, site, today) -> None:
        with pytest.raises(InvalidQueryParameter) as exc_info:
            resolve(Period.CUSTOM, site, today)

        assert exc_info.value.parameter == "from"

    def test_custom_non_string_date(self, site, today) -> None:
        with pytest.raises(InvalidQueryParameter) as exc_info:
            resolve(Period.CUSTOM, site, today, date=20210101)

        assert exc_info.value.parameter == "from"

    def test_end_of_month(self) -> None:
        assert end_of_month(date(2023, 2, 10)) == date(2023, 2, 28)
        assert end_of_month(date(2023, 12, 31)) == date(2023, 12, 31)

    def test_local_stats_start_date(self, make_site) -> None:
        assert local_stats_start_date(make_site(stats_start_date=None)) is None
        assert local_stats_start_date(
            make_site(timezone="Europe/Tallinn", stats_start_date=date(2020, 1, 1))
        ) == date(2020, 1, 1)
        assert local_stats_start_date(
            make_site(timezone="America/Cancun", stats_start_date=date(2020, 1, 1))
        ) == date(2019, 12, 31)


# =============================================================================
# INTERVAL RULES
# =============================================================================


class TestIntervalRules:
    """Tests for default intervals and accepted overrides."""

    @pytest.mark.parametrize(
        "period, expected",
        [
            (Period.DAY, Interval.HOUR),
            (Period.REALTIME, Interval.MINUTE),
            (Period.THIRTY_MINUTES, Interval.MINUTE),
            (Period.SEVEN_DAYS, Interval.DATE),
            (Period.THIRTY_DAYS, Interval.DATE),
            (Period.MONTH, Interval.DATE),
            (Period.SIX_MONTHS, Interval.MONTH),
            (Period.TWELVE_MONTHS, Interval.MONTH),
            (Period.YEAR, Interval.MONTH),
            (Period.CUSTOM, Interval.DATE),
        ],
    )
    def test_default_interval(self, period, expected) -> None:
        date_range = DateRange(date(2024, 1, 1), date(2024, 1, 31))

        assert resolve_interval(period, date_range, None) == expected

    @pytest.mark.parametrize(
        "period, requested, expected",
        [
            (Period.DAY, "minute", Interval.MINUTE),
            (Period.DAY, "date", Interval.HOUR),
            (Period.REALTIME, "hour", Interval.MINUTE),
            (Period.THIRTY_MINUTES, "hour", Interval.MINUTE),
            (Period.SEVEN_DAYS, "hour", Interval.HOUR),
            (Period.SEVEN_DAYS, "month", Interval.DATE),
            (Period.THIRTY_DAYS, "week", Interval.WEEK),
            (Period.YEAR, "week", Interval.WEEK),
            (Period.YEAR, "hour", Interval.MONTH),
            (Period.CUSTOM, "month", Interval.MONTH),
            (Period.MONTH, "fortnight", Interval.DATE),
        ],
    )
    def test_override(self, period, requested, expected) -> None:
        date_range = DateRange(date(2024, 1, 1), date(2024, 1, 31))

        assert resolve_interval(period, date_range, requested) == expected

    def test_rejected_override_is_logged(self, caplog) -> None:
        date_range = DateRange(date(2024, 1, 1), date(2024, 1, 31))

        with caplog.at_level("WARNING", logger="stats_backend.services.periods"):
            resolve_interval(Period.MONTH, date_range, "minute")

        assert "not supported" in caplog.text

    def test_all_time_interval_by_span(self) -> None:
        one_day = DateRange(date(2024, 3, 15), date(2024, 3, 15))
        two_days = DateRange(date(2024, 3, 14), date(2024, 3, 15))
        one_month = DateRange(date(2024, 2, 15), date(2024, 3, 15))

        assert resolve_interval(Period.ALL, one_day, None) == Interval.HOUR
        assert resolve_interval(Period.ALL, two_days, None) == Interval.DATE
        assert resolve_interval(Period.ALL, one_month, None) == Interval.MONTH

    def test_all_time_accepts_date_override(self) -> None:
        one_day = DateRange(date(2024, 3, 15), date(2024, 3, 15))

        assert resolve_interval(Period.ALL, one_day, "date") == Interval.DATE


# =============================================================================
# PARAMETER PARSING
# =============================================================================


class TestParameterParsing:
    """Tests for period keyword and date parsing."""

    def test_parse_period(self) -> None:
        assert parse_period("6mo", "30d") == Period.SIX_MONTHS
        assert parse_period(None, "30d") == Period.THIRTY_DAYS

    def test_parse_period_unknown(self) -> None:
        with pytest.raises(InvalidQueryParameter):
            parse_period("last-week", "30d")

    def test_parse_date_strips_whitespace(self) -> None:
        assert parse_date(" 2024-02-29 ", "date") == date(2024, 2, 29)

    @pytest.mark.parametrize("value", ["2023-02-29", "2024/01/01", "", None, 20240101])
    def test_parse_date_invalid(self, value) -> None:
        with pytest.raises(InvalidQueryParameter) as exc_info:
            parse_date(value, "date")

        assert exc_info.value.parameter == "date"

    @pytest.mark.parametrize("value", ["0001-01-05", "1969-12-31", "9999-01-01", "9999-12-15"])
    def test_parse_date_outside_calendar_window(self, value) -> None:
        with pytest.raises(InvalidQueryParameter) as exc_info:
            parse_date(value, "date")

        assert exc_info.value.parameter == "date"
        assert "outside the supported range" in exc_info.value.reason

    def test_parse_date_window_is_inclusive(self) -> None:
        assert parse_date(EARLIEST_DATE.isoformat(), "date") == EARLIEST_DATE
        assert parse_date(LATEST_DATE.isoformat(), "date") == LATEST_DATE
