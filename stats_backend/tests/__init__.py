"""
Test package for the Stats Query backend.

Test modules:
- test_query: Query normalizer defaults, periods, validation and captured now
- test_periods: Period range and interval rules, DateRange
- test_filters: Filter parser
- test_imported: Imported data eligibility rule
- test_comparisons: Comparison date ranges
- test_boundaries: UTC query boundaries
- test_ga4_report: GA4 report requests
- test_sites: Site metadata provider
- test_api: HTTP contract of GET /api/stats/{site_id}/query
"""
