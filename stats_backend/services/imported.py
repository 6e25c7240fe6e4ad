"""
Imported Data Eligibility Rule

Decides whether historical data imported from an external provider (GA4,
Universal Analytics, CSV) may be blended into a stats query.

Imported tables only carry a fixed set of dimensions, so a query is eligible
only when every dimension it touches has an imported analog:

- Realtime queries never include imported data
- At least one completed import must overlap the requested date range
  (inclusive on both ends; touching a single day is enough)
- The breakdown property and every filter must map to an imported dimension

Custom properties have no imported analog, with one carve-out: the ``url`` and
``path`` properties are recorded by imports for a handful of special goals, so
breaking down or filtering by them is allowed while the query is filtered to
those goals only.
"""

import logging
from typing import Iterable, Mapping, Optional

from stats_backend.models.enums import FilterOperator, GoalKind, ImportStatus, Period
from stats_backend.models.schemas import SiteImport
from stats_backend.services.date_range import DateRange
from stats_backend.services.filters import GOAL_KEY, FilterPredicate, GoalReference


logger = logging.getLogger(__name__)


# =============================================================================
# Imported Dimension Tables
# =============================================================================

# Dimensions present in the imported_* tables
IMPORTED_DIMENSIONS = frozenset({
    "visit:source",
    "visit:referrer",
    "visit:utm_medium",
    "visit:utm_source",
    "visit:utm_campaign",
    "visit:utm_content",
    "visit:utm_term",
    "visit:screen",
    "visit:browser",
    "visit:os",
    "visit:os_version",
    "visit:country",
    "visit:region",
    "visit:city",
    "visit:entry_page",
    "visit:exit_page",
    "event:page",
    "event:hostname",
    "event:goal",
    "event:name",
})

# Custom properties that imports record, and the goals they are recorded for
SPECIAL_GOAL_PROPERTIES = {
    "event:props:url": frozenset({"Outbound Link: Click", "File Download"}),
    "event:props:path": frozenset({"404"}),
}


# =============================================================================
# Rule
# =============================================================================


def is_imported_data_eligible(
    period: Period,
    date_range: DateRange,
    breakdown_property: Optional[str],
    filters: Mapping[str, FilterPredicate],
    imports: Iterable[SiteImport],
) -> bool:
    """
    Decide whether imported data may be blended into a query.

    Args:
        period: Resolved query period.
        date_range: Resolved inclusive date range of the query.
        breakdown_property: Dimension the report is grouped by, if any.
        filters: Parsed filters of the query.
        imports: Imports of the site; non-completed ones are ignored.

    Returns:
        True if imported data can answer the query.
    """
    if period.is_realtime:
        return False

    if not any(
        i.status == ImportStatus.COMPLETED and date_range.overlaps(i.start_date, i.end_date)
        for i in imports
    ):
        return False

    if breakdown_property is not None and not _supports_dimension(breakdown_property, filters):
        logger.debug(f"Imported data has no analog for breakdown by {breakdown_property}")
        return False

    for key in filters:
        if not _supports_dimension(key, filters):
            logger.debug(f"Imported data has no analog for filter on {key}")
            return False

    return True


def _supports_dimension(key: str, filters: Mapping[str, FilterPredicate]) -> bool:
    if key in IMPORTED_DIMENSIONS:
        return True

    special_goals = SPECIAL_GOAL_PROPERTIES.get(key)
    if special_goals is None:
        return False

    goals = _filtered_event_goals(filters.get(GOAL_KEY))
    return bool(goals) and goals <= special_goals


def _filtered_event_goals(predicate: Optional[FilterPredicate]) -> frozenset:
    """Event goal names a positive goal filter restricts the query to."""
    if predicate is None:
        return frozenset()

    if predicate.operator == FilterOperator.IS:
        refs = (predicate.operand,)
    elif predicate.operator == FilterOperator.MEMBER:
        refs = predicate.operand
    else:
        return frozenset()

    names = set()
    for ref in refs:
        if not isinstance(ref, GoalReference) or ref.kind != GoalKind.EVENT:
            return frozenset()
        names.add(ref.name)
    return frozenset(names)
