"""
Backend Services Module

This module contains the business logic for the Stats Query backend. Apart from
site metadata loading, every service is a pure, synchronous computation with no
shared state, so it can be called concurrently for unrelated requests.

Services:
- query: Query normalizer (request parameters + site snapshot -> Query)
- periods: Period keyword -> date range and interval rules
- filters: Dashboard filter JSON -> canonical predicates
- imported: Imported data eligibility rule
- comparisons: Comparison date ranges (previous period, year over year, custom)
- boundaries: UTC instants bounding a resolved Query
- ga4_report: GA4 Data API report requests used by imports
- sites: Site metadata provider (asyncpg)

All services are designed to be consumed by the API layer (stats_backend/api/).
"""

# =============================================================================
# Query Normalizer Exports
# Resolves period, date range, interval, filters, sampling, comparison and
# imported data eligibility into one immutable Query
# =============================================================================

from stats_backend.services.query import (
    INFINITE,
    Query,
    parse_sample_threshold,
    query_from,
    utc_now,
)

# =============================================================================
# Period Resolution Exports
# =============================================================================

from stats_backend.services.date_range import DateRange
from stats_backend.services.periods import (
    PERIOD_RULES,
    parse_date,
    parse_period,
    resolve_date_range,
    resolve_interval,
)

# =============================================================================
# Filter Parser Exports
# =============================================================================

from stats_backend.services.filters import (
    FILTER_KEYS,
    FilterPredicate,
    GoalReference,
    parse_filter_value,
    parse_filters,
)

# =============================================================================
# Imported Data Eligibility Exports
# =============================================================================

from stats_backend.services.imported import (
    IMPORTED_DIMENSIONS,
    SPECIAL_GOAL_PROPERTIES,
    is_imported_data_eligible,
)

# =============================================================================
# Comparison and Boundary Exports
# =============================================================================

from stats_backend.services.comparisons import Comparison, comparison_from
from stats_backend.services.boundaries import native_stats_start, utc_boundaries

# =============================================================================
# Import Pipeline Exports
# =============================================================================

from stats_backend.services.ga4_report import (
    build_report_requests,
    full_report,
    next_page,
)

# =============================================================================
# Site Metadata Exports
# =============================================================================

from stats_backend.services.sites import load_site_metadata


__all__ = [
    # Query normalizer
    "INFINITE",
    "Query",
    "parse_sample_threshold",
    "query_from",
    "utc_now",
    # Periods
    "DateRange",
    "PERIOD_RULES",
    "parse_date",
    "parse_period",
    "resolve_date_range",
    "resolve_interval",
    # Filters
    "FILTER_KEYS",
    "FilterPredicate",
    "GoalReference",
    "parse_filter_value",
    "parse_filters",
    # Imported data
    "IMPORTED_DIMENSIONS",
    "SPECIAL_GOAL_PROPERTIES",
    "is_imported_data_eligible",
    # Comparisons and boundaries
    "Comparison",
    "comparison_from",
    "native_stats_start",
    "utc_boundaries",
    # GA4 import pipeline
    "build_report_requests",
    "full_report",
    "next_page",
    # Site metadata
    "load_site_metadata",
]
