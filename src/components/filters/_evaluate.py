"""
Reference evaluator for filter trees.

Maps each (value type, operator, values) triple to a predicate over one
record value, and composes groups with and/or/not. Any query translation
layer must agree with these results.

Key behaviors:
- Comparisons never raise; unusable record values fail the test
- Text and select comparisons are case-insensitive
- ``between`` is inclusive and tolerates reversed bounds
- Empty groups match everything, for ``and`` and ``or`` alike
- A filter without values is still being edited and matches everything
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Callable, Iterable, Mapping
from datetime import date, datetime
from typing import Any, TypeVar

from ._impl import is_filter_group
from .models import Filter, FilterGroup, FilterNode

logger = logging.getLogger(__name__)

T = TypeVar("T")

ValueGetter = Callable[[Any, str], Any]

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}")

_TRUE_WORDS = ("true", "yes", "1")
_FALSE_WORDS = ("false", "no", "0")


# --- Value coercion ---


def default_value_getter(record: Any, field_id: str) -> Any:
    """Read ``field_id`` from a mapping or an attribute of an object."""
    if isinstance(record, Mapping):
        return record.get(field_id)
    return getattr(record, field_id, None)


def to_number(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        try:
            return float(value)
        except OverflowError:
            return math.inf if value > 0 else -math.inf
    if isinstance(value, float):
        return value
    try:
        return float(str(value).strip())
    except (ValueError, OverflowError):
        return None


def to_date(value: Any) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if _ISO_DATE.match(text):
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            return None
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        return None


def to_comparable_strings(value: Any) -> list[str]:
    """Lower-cased strings a select value can be matched against."""
    if value is None:
        return []
    if isinstance(value, (list, tuple, set, frozenset)):
        return [item for entry in value for item in to_comparable_strings(entry)]
    if isinstance(value, bool):
        return list(_TRUE_WORDS if value else _FALSE_WORDS)
    if isinstance(value, float) and value.is_integer():
        return [str(int(value))]
    if isinstance(value, (int, float)):
        return [str(value)]
    return [str(value).lower()]


def _ordered(low: Any, high: Any) -> tuple[Any, Any]:
    return (high, low) if low > high else (low, high)


# --- Per-type predicates ---


def _match_text(filter: Filter, raw: Any) -> bool:
    value = "" if raw is None else str(raw).lower()
    needle = filter.values[0].lower()
    if filter.operator == "contains":
        return needle in value
    if filter.operator == "notContains":
        return needle not in value
    if filter.operator == "equals":
        return value == needle
    if filter.operator == "notEquals":
        return value != needle
    return True


def _match_number(filter: Filter, raw: Any) -> bool:
    value = to_number(raw)
    if value is None:
        return False

    if filter.operator == "between":
        if len(filter.values) < 2:
            return True
        low, high = to_number(filter.values[0]), to_number(filter.values[1])
        if low is None or high is None:
            return False
        low, high = _ordered(low, high)
        return low <= value <= high

    target = to_number(filter.values[0])
    if target is None:
        return False
    if filter.operator == "equals":
        return value == target
    if filter.operator == "notEquals":
        return value != target
    if filter.operator == "greaterThan":
        return value > target
    if filter.operator == "lessThan":
        return value < target
    return True


def _match_date(filter: Filter, raw: Any) -> bool:
    value = to_date(raw)
    if value is None:
        return False

    if filter.operator == "between":
        if len(filter.values) < 2:
            return True
        start, end = to_date(filter.values[0]), to_date(filter.values[1])
        if start is None or end is None:
            return False
        start, end = _ordered(start, end)
        return start <= value <= end

    target = to_date(filter.values[0])
    if target is None:
        return False
    if filter.operator == "equals":
        return value == target
    if filter.operator == "notEquals":
        return value != target
    if filter.operator == "before":
        return value < target
    if filter.operator == "after":
        return value > target
    return True


def _match_select(filter: Filter, raw: Any) -> bool:
    options = to_comparable_strings(raw)
    targets = [value.lower() for value in filter.values]
    if filter.operator in ("is", "equals"):
        return any(target in options for target in targets)
    if filter.operator in ("isNot", "notEquals"):
        return not any(target in options for target in targets)
    return True


_MATCHERS: dict[str, Callable[[Filter, Any], bool]] = {
    "text": _match_text,
    "number": _match_number,
    "date": _match_date,
    "select": _match_select,
    "multiselect": _match_select,
}


# --- Public API ---


def matches_filter(filter: Filter, raw_value: Any) -> bool:
    """Evaluate one leaf against a record's field value."""
    if not filter.values:
        return True
    matcher = _MATCHERS.get(filter.value_type)
    if matcher is None:
        logger.debug("Unknown value type %r on filter %s", filter.value_type, filter.id)
        return True
    return matcher(filter, raw_value)


def evaluate_node(
    node: FilterNode,
    record: Any,
    get_value: ValueGetter | None = None,
) -> bool:
    """Evaluate a filter or group against one record."""
    getter = get_value or default_value_getter
    if not is_filter_group(node):
        return matches_filter(node, getter(record, node.field_id))  # type: ignore[arg-type, union-attr]

    group: FilterGroup = node  # type: ignore[assignment]
    results = (evaluate_node(child, record, getter) for child in group.children)
    if group.operator == "or":
        combined = True if not group.children else any(results)
    else:
        combined = all(results)
    return not combined if group.negated else combined


def apply_filter_tree(
    rows: Iterable[T],
    group: FilterGroup | None,
    get_value: ValueGetter | None = None,
) -> list[T]:
    """Rows matched by the tree, in input order."""
    if group is None or not group.children:
        if group is not None and group.negated:
            return []
        return list(rows)
    return [row for row in rows if evaluate_node(group, row, get_value)]


def apply_filters(
    rows: Iterable[T],
    filters: Iterable[Filter],
    get_value: ValueGetter | None = None,
) -> list[T]:
    """Legacy flat filtering: every filter must match."""
    getter = get_value or default_value_getter
    active = list(filters)
    if not active:
        return list(rows)
    return [
        row
        for row in rows
        if all(matches_filter(f, getter(row, f.field_id)) for f in active)
    ]
