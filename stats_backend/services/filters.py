"""
Dashboard Filter Parser

Decodes the JSON-encoded ``filters`` request parameter into canonical predicates.

The dashboard sends filters keyed by human-facing names::

    {"goal": "Signup", "source": "!Twitter", "props": {"author": "John|Jane"}}

and the query layer works with canonical dimension keys::

    {
        "event:goal": FilterPredicate(IS, GoalReference(EVENT, "Signup")),
        "visit:source": FilterPredicate(IS_NOT, "Twitter"),
        "event:props:author": FilterPredicate(MEMBER, ("John", "Jane")),
    }

Value grammar:
- A leading ``!`` negates the predicate
- ``|`` separates alternatives (``\\|`` is a literal bar)
- ``*`` anywhere in the value makes it a wildcard match
- Goal values starting with ``Visit `` refer to pageview goals, any other goal
  value refers to a custom event goal

Unknown top-level keys are ignored rather than rejected so that older or newer
dashboards can share links.
"""

import json
import logging
import re
from typing import Any, Dict, Mapping, NamedTuple, Tuple, Union

from stats_backend.core.errors import InvalidQueryParameter
from stats_backend.models.enums import FilterOperator, GoalKind


logger = logging.getLogger(__name__)


# =============================================================================
# Predicate Types
# =============================================================================


class GoalReference(NamedTuple):
    """A goal named in a goal filter, distinguished from a plain string operand."""
    kind: GoalKind
    name: str


Operand = Union[str, GoalReference, Tuple[Union[str, GoalReference], ...]]


class FilterPredicate(NamedTuple):
    """Parsed filter: operator plus operand."""
    operator: FilterOperator
    operand: Operand


# =============================================================================
# Canonical Key Table
# =============================================================================

VISIT_DIMENSIONS = (
    "source",
    "referrer",
    "utm_medium",
    "utm_source",
    "utm_campaign",
    "utm_content",
    "utm_term",
    "screen",
    "browser",
    "browser_version",
    "os",
    "os_version",
    "country",
    "region",
    "city",
    "entry_page",
    "exit_page",
)

EVENT_DIMENSIONS = (
    "goal",
    "page",
    "hostname",
    "name",
)

FILTER_KEYS: Dict[str, str] = {
    **{name: f"visit:{name}" for name in VISIT_DIMENSIONS},
    **{name: f"event:{name}" for name in EVENT_DIMENSIONS},
}

PROPS_FILTER = "props"
PROPS_PREFIX = "event:props:"
GOAL_KEY = "event:goal"

PAGE_GOAL_PREFIX = "Visit "

_MEMBER_SEPARATOR = re.compile(r"(?<!\\)\|")


# =============================================================================
# Parsing
# =============================================================================


def parse_filters(raw: Any) -> Dict[str, FilterPredicate]:
    """
    Parse the ``filters`` request parameter.

    Args:
        raw: JSON string, an already decoded mapping, or None/"" for no filters.

    Returns:
        Mapping of canonical dimension key to FilterPredicate.

    Raises:
        InvalidQueryParameter: If the JSON cannot be decoded, is not an object,
            or holds a value that is not a string (or a mapping for ``props``).
    """
    if raw is None or raw == "":
        return {}

    if isinstance(raw, str):
        try:
            decoded = json.loads(raw)
        except json.JSONDecodeError as e:
            raise InvalidQueryParameter("filters", f"not valid JSON ({e.msg})") from e
    else:
        decoded = raw

    if not isinstance(decoded, Mapping):
        raise InvalidQueryParameter("filters", "expected a JSON object")

    parsed: Dict[str, FilterPredicate] = {}
    for name, value in decoded.items():
        if name == PROPS_FILTER:
            parsed.update(_parse_props(value))
            continue

        key = FILTER_KEYS.get(name)
        if key is None:
            logger.debug(f"Ignoring unknown filter key {name!r}")
            continue

        text = _as_text(name, value)
        if text:
            parsed[key] = parse_filter_value(key, text)

    return parsed


def parse_filter_value(key: str, value: str) -> FilterPredicate:
    """
    Parse one filter value for the given canonical key.

    >>> parse_filter_value("visit:source", "!Twitter")
    FilterPredicate(operator=<FilterOperator.IS_NOT: 'is_not'>, operand='Twitter')
    """
    negated = value.startswith("!")
    if negated:
        value = value[1:]

    if key == GOAL_KEY:
        return _parse_goal(value, negated)

    if "*" in value:
        operator = FilterOperator.DOES_NOT_MATCH if negated else FilterOperator.MATCHES
        return FilterPredicate(operator, value)

    members = _split_members(value)
    if len(members) > 1:
        operator = FilterOperator.NOT_MEMBER if negated else FilterOperator.MEMBER
        return FilterPredicate(operator, tuple(members))

    operator = FilterOperator.IS_NOT if negated else FilterOperator.IS
    return FilterPredicate(operator, members[0])


def goal_reference(value: str) -> GoalReference:
    """Turn a goal filter value into a typed goal reference."""
    if value.startswith(PAGE_GOAL_PREFIX):
        return GoalReference(GoalKind.PAGE, value[len(PAGE_GOAL_PREFIX):])
    return GoalReference(GoalKind.EVENT, value)


def _parse_goal(value: str, negated: bool) -> FilterPredicate:
    refs = tuple(goal_reference(member) for member in _split_members(value))

    if len(refs) > 1:
        operator = FilterOperator.NOT_MEMBER if negated else FilterOperator.MEMBER
        return FilterPredicate(operator, refs)

    ref = refs[0]
    # Only pageview goals carry a path that can be wildcarded
    if ref.kind == GoalKind.PAGE and "*" in ref.name:
        operator = FilterOperator.DOES_NOT_MATCH if negated else FilterOperator.MATCHES
        return FilterPredicate(operator, ref)

    operator = FilterOperator.IS_NOT if negated else FilterOperator.IS
    return FilterPredicate(operator, ref)


def _parse_props(value: Any) -> Dict[str, FilterPredicate]:
    if not isinstance(value, Mapping):
        raise InvalidQueryParameter("filters", "'props' must be an object of property filters")

    parsed: Dict[str, FilterPredicate] = {}
    for prop, prop_value in value.items():
        if not prop:
            continue
        key = f"{PROPS_PREFIX}{prop}"
        text = _as_text(f"props.{prop}", prop_value)
        if text:
            parsed[key] = parse_filter_value(key, text)
    return parsed


def _split_members(value: str) -> list:
    return [member.replace("\\|", "|") for member in _MEMBER_SEPARATOR.split(value)]


def _as_text(name: str, value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    raise InvalidQueryParameter("filters", f"value for '{name}' must be a string")
