"""
UTC boundaries of a stats query.

Events are stored with UTC timestamps, while queries are expressed in calendar
dates of the site's timezone. This module converts a resolved Query into the
pair of UTC instants the aggregation layer filters on.

- realtime, 30m: [now - realtime window, now + lookahead], truncated to the second
- everything else: local midnight starting ``date_range.first`` up to local
  midnight following ``date_range.last`` (exclusive upper bound)

Unless imported data is blended in, the lower bound never goes before the
site's first native event, since nothing native exists before it.

Only ``query.now`` is consulted for "now", so calling this repeatedly for the
same Query always yields the same result.
"""

from datetime import datetime, time, timedelta
from typing import Optional, Tuple

import pytz

from stats_backend.core.config import Settings, get_settings
from stats_backend.models.schemas import SiteMetadata
from stats_backend.services.query import Query


def utc_boundaries(
    query: Query,
    site: SiteMetadata,
    settings: Optional[Settings] = None,
) -> Tuple[datetime, datetime]:
    """
    Compute the UTC instants bounding a query.

    Args:
        query: The resolved query.
        site: The site the query was built for.
        settings: Provides the realtime window; the cached settings when omitted.

    Returns:
        Tuple of aware UTC datetimes (first, last).
    """
    if query.is_realtime:
        settings = settings or get_settings()
        now = query.now.replace(microsecond=0)
        first = now - timedelta(minutes=settings.realtime_window_minutes)
        last = now + timedelta(seconds=settings.realtime_lookahead_seconds)
    else:
        tz = site.tzinfo
        first = _local_midnight_utc(tz, query.date_range.first)
        last = _next_local_midnight_utc(tz, query.date_range.last)

    if not query.include_imported:
        # Ranges entirely before the native start collapse to an empty window
        first = min(max(first, native_stats_start(site)), last)

    return first, last


def native_stats_start(site: SiteMetadata) -> datetime:
    """First instant with native stats, as an aware UTC datetime."""
    start = site.native_stats_start_at or site.inserted_at
    if start.tzinfo is None:
        return pytz.utc.localize(start)
    return start.astimezone(pytz.utc)


def _local_midnight_utc(tz: pytz.BaseTzInfo, day) -> datetime:
    local = tz.localize(datetime.combine(day, time.min))
    return local.astimezone(pytz.utc)


def _next_local_midnight_utc(tz: pytz.BaseTzInfo, day) -> datetime:
    try:
        return _local_midnight_utc(tz, day + timedelta(days=1))
    except OverflowError:
        # No midnight follows the last day of the calendar
        return datetime.max.replace(tzinfo=pytz.utc)
