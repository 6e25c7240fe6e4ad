"""
Stats Query Normalizer

Turns raw dashboard request parameters plus a site metadata snapshot into an
immutable, fully resolved Query consumed by the aggregation/reporting layer.

Resolution order:
1. period          - ``period`` keyword, default window when absent
2. date_range      - per-period rule (see services.periods)
3. interval        - per-period default, explicit ``interval`` when supported
4. filters         - ``filters`` JSON (see services.filters)
5. sample_threshold - "infinite" or a non-negative integer
6. comparison      - ``comparison`` mode and its own range (see services.comparisons)
7. include_imported - ``with_imported=true`` and the eligibility rule
                      (see services.imported)

The current instant is captured exactly once per Query, either passed in or
read from the clock, and stored on the Query as ``now``. Everything relative
(today, realtime windows, UTC boundaries) is derived from that stored value,
so repeated computations against one Query agree however much wall-clock time
has passed.

Any invalid parameter aborts construction with InvalidQueryParameter; a
partially built Query is never returned.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, Union

import pytz

from stats_backend.core.config import Settings, get_settings
from stats_backend.core.errors import InvalidQueryParameter
from stats_backend.models.enums import Interval, Period
from stats_backend.models.schemas import SiteMetadata
from stats_backend.services.comparisons import Comparison, comparison_from
from stats_backend.services.date_range import DateRange
from stats_backend.services.filters import FilterPredicate, parse_filters
from stats_backend.services.imported import is_imported_data_eligible
from stats_backend.services.periods import (
    PeriodContext,
    parse_period,
    resolve_date_range,
    resolve_interval,
    today_for_site,
)


logger = logging.getLogger(__name__)

# Sample threshold meaning "never sample"
INFINITE = "infinite"

SampleThreshold = Union[int, str]

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Default clock: the current instant as an aware UTC datetime."""
    return datetime.now(timezone.utc)


# =============================================================================
# Query
# =============================================================================


@dataclass(frozen=True)
class Query:
    """
    Fully resolved stats query.

    Attributes:
        period: Period the query was requested for.
        date_range: Inclusive calendar date range in the site's timezone.
        interval: Time-series bucketing granularity.
        filters: Read-only mapping of canonical dimension key to predicate.
        include_imported: Whether imported data is blended into results.
        sample_threshold: Row cap above which results are sampled, or "infinite".
        now: The instant captured when the query was built (aware, UTC).
        breakdown_property: Property the report is broken down by, if any.
        comparison: Comparison mode and range, if requested.
    """
    period: Period
    date_range: DateRange
    interval: Interval
    filters: Mapping[str, FilterPredicate]
    include_imported: bool
    sample_threshold: SampleThreshold
    now: datetime
    breakdown_property: Optional[str] = None
    comparison: Optional[Comparison] = field(default=None)

    def __hash__(self) -> int:
        # The filters proxy is unhashable; hash its items instead
        return hash((
            self.period,
            self.date_range,
            self.interval,
            frozenset(self.filters.items()),
            self.include_imported,
            self.sample_threshold,
            self.now,
            self.breakdown_property,
            self.comparison,
        ))

    @property
    def is_realtime(self) -> bool:
        return self.period.is_realtime

    @property
    def is_sampled(self) -> bool:
        return self.sample_threshold != INFINITE


# =============================================================================
# Parameter Parsing
# =============================================================================


def parse_sample_threshold(value: Any, default: int) -> SampleThreshold:
    """
    Parse the ``sample_threshold`` parameter.

    Returns:
        "infinite", the parsed non-negative integer, or ``default`` when absent.

    Raises:
        InvalidQueryParameter: For anything else.
    """
    if value is None or value == "":
        return default
    if value == INFINITE:
        return INFINITE
    if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
        return value
    if isinstance(value, str) and re.fullmatch(r"[0-9]+", value.strip()):
        return int(value.strip())
    raise InvalidQueryParameter(
        "sample_threshold", f"expected 'infinite' or a non-negative integer, got '{value}'"
    )


def _as_utc(now: datetime) -> datetime:
    # Naive instants are taken to be UTC
    if now.tzinfo is None:
        return pytz.utc.localize(now)
    return now.astimezone(pytz.utc)


# =============================================================================
# Normalizer
# =============================================================================


def query_from(
    site: SiteMetadata,
    params: Mapping[str, Any],
    now: Optional[datetime] = None,
    settings: Optional[Settings] = None,
    clock: Clock = utc_now,
) -> Query:
    """
    Build a Query from request parameters.

    Args:
        site: Snapshot of the site the query is for.
        params: Raw request parameters (period, date, from, to, interval,
            filters, comparison, compare_from, compare_to, match_day_of_week,
            with_imported, property, sample_threshold).
        now: The instant to resolve relative dates against. Read once from
            ``clock`` when omitted.
        settings: Settings providing defaults; the cached settings when omitted.
        clock: Source of the current instant when ``now`` is omitted.

    Returns:
        The resolved, immutable Query.

    Raises:
        InvalidQueryParameter: If any parameter fails to parse.

    Example:
        >>> q = query_from(site, {"period": "month", "date": "2019-01-01"})
        >>> (q.date_range.first, q.date_range.last, q.interval)
        (datetime.date(2019, 1, 1), datetime.date(2019, 1, 31), <Interval.DATE: 'date'>)
    """
    settings = settings or get_settings()
    now = _as_utc(now if now is not None else clock())

    period = parse_period(params.get("period"), settings.default_period)
    today = today_for_site(site, now)

    date_range = resolve_date_range(period, PeriodContext(today, params, site))
    interval = resolve_interval(period, date_range, params.get("interval"))
    filters = parse_filters(params.get("filters"))
    sample_threshold = parse_sample_threshold(
        params.get("sample_threshold"), settings.default_sample_threshold
    )
    comparison = comparison_from(period, date_range, params, today)

    breakdown_property = params.get("property") or None
    include_imported = params.get("with_imported") in ("true", True) and is_imported_data_eligible(
        period, date_range, breakdown_property, filters, site.imports
    )

    query = Query(
        period=period,
        date_range=date_range,
        interval=interval,
        filters=MappingProxyType(dict(filters)),
        include_imported=include_imported,
        sample_threshold=sample_threshold,
        now=now,
        breakdown_property=breakdown_property,
        comparison=comparison,
    )

    logger.debug(
        f"Resolved {period.value} query for site {site.id}: "
        f"{date_range.first}..{date_range.last} by {interval.value}, "
        f"{len(filters)} filter(s), include_imported={include_imported}"
    )
    return query
