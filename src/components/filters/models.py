"""
Filters component models.

Filter nodes form a tagged union: ``Filter`` leaves and ``FilterGroup``
combinators, told apart by their ``kind`` field. Both are frozen, and
children/values are tuples, so a tree is an immutable value.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

ValueType = Literal["select", "multiselect", "date", "number", "text"]

FilterOperator = Literal[
    "is",
    "isNot",
    "contains",
    "notContains",
    "equals",
    "notEquals",
    "greaterThan",
    "lessThan",
    "before",
    "after",
    "between",
]

GroupOperator = Literal["and", "or"]

VALUE_TYPES: tuple[ValueType, ...] = ("select", "multiselect", "date", "number", "text")

FILTER_OPERATORS: tuple[FilterOperator, ...] = (
    "is",
    "isNot",
    "contains",
    "notContains",
    "equals",
    "notEquals",
    "greaterThan",
    "lessThan",
    "before",
    "after",
    "between",
)

GROUP_OPERATORS: tuple[GroupOperator, ...] = ("and", "or")

DEFAULT_OPERATORS: dict[ValueType, tuple[FilterOperator, ...]] = {
    "select": ("is", "isNot"),
    "multiselect": ("is", "isNot"),
    "date": ("equals", "before", "after", "between"),
    "number": ("equals", "greaterThan", "lessThan", "notEquals"),
    "text": ("contains", "notContains", "equals", "notEquals"),
}

# Operators whose values hold a (lower, upper) pair.
RANGE_OPERATORS: frozenset[str] = frozenset({"between"})

# Operators that may carry many values (multiselect membership).
MULTI_VALUE_OPERATORS: frozenset[str] = frozenset({"is", "isNot"})

DEFAULT_MAX_DEPTH = 8


# --- Nodes ---


@dataclass(frozen=True)
class Filter:
    """A single condition: field + operator + values."""

    id: str
    field_id: str
    operator: FilterOperator
    values: tuple[str, ...] = ()
    value_type: ValueType = "text"
    field_label: str = ""
    kind: Literal["filter"] = field(default="filter", init=False)


@dataclass(frozen=True)
class FilterGroup:
    """Boolean combinator over child nodes, optionally negated."""

    id: str
    operator: GroupOperator = "and"
    negated: bool = False
    children: tuple[FilterNode, ...] = ()
    kind: Literal["group"] = field(default="group", init=False)


FilterNode = Filter | FilterGroup


# --- Validation Error ---


@dataclass(frozen=True)
class FilterValidationError:
    """Problem found in an untrusted filter tree."""

    code: str
    message: str
    path: str | None = None


# --- Input Models ---


@dataclass(frozen=True)
class AddFilterInput:
    """Append a filter to a group (root when target_group_id is None)."""

    root: FilterGroup
    filter: Filter
    target_group_id: str | None = None


@dataclass(frozen=True)
class UpdateFilterInput:
    """Replace the filter that has the same id."""

    root: FilterGroup
    filter: Filter


@dataclass(frozen=True)
class RemoveFilterInput:
    """Remove a filter leaf by id."""

    root: FilterGroup
    filter_id: str


@dataclass(frozen=True)
class AddGroupInput:
    """Append a group to a group (root when target_group_id is None)."""

    root: FilterGroup
    group: FilterGroup
    target_group_id: str | None = None


@dataclass(frozen=True)
class RemoveGroupInput:
    """Remove a non-root group by id."""

    root: FilterGroup
    group_id: str


@dataclass(frozen=True)
class UpdateGroupInput:
    """Shallow-merge operator/not/children into a group."""

    root: FilterGroup
    group_id: str
    updates: dict[str, Any]


# --- Output Models ---


@dataclass(frozen=True)
class FilterTreeOutput:
    """Result of a tree operation plus the views derived from it."""

    root: FilterGroup
    changed: bool
    signature: str
    is_advanced: bool
    filters: tuple[Filter, ...]
    errors: list[FilterValidationError] = field(default_factory=list)
    success: bool = True
