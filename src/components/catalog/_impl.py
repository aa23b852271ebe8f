"""
Field catalog - filterable fields per resource screen.

Holds the FieldDescriptor lists declared in the rules file and the helpers
screens use to turn a field choice into a Filter.

Key behaviors:
- Fields without declared operators get the defaults of their value type
- Column types are inferred from the column id first, then sample values
- Filter options are the sorted distinct non-empty values of a column
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from typing import Any

from src.components.filters import (
    DEFAULT_OPERATORS,
    Filter,
    default_value_getter,
    new_node_id,
)
from src.components.filters.models import RANGE_OPERATORS, FilterOperator, ValueType

from .models import CatalogValidationError, FieldDescriptor

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}")

DATE_HINTS = ("date", "created", "updated", "birth")
NUMBER_HINTS = (
    "age",
    "weight",
    "height",
    "count",
    "amount",
    "total",
    "steps",
    "price",
    "leads",
    "spent",
    "goal",
)
SELECT_COLUMNS = frozenset({"is_public", "has_leads"})
MULTISELECT_COLUMNS = frozenset(
    {
        "status",
        "fitnessgoal",
        "activitylevel",
        "preferredtime",
        "source",
        "tags",
        "goal_tags",
        "membership_tier",
        "currency",
    }
)
MAX_SELECT_OPTIONS = 20


# --- Catalog ---


class FieldCatalog:
    """In-memory catalog keyed by resource."""

    def __init__(self, catalogs: dict[str, Sequence[FieldDescriptor]] | None = None) -> None:
        self._catalogs: dict[str, tuple[FieldDescriptor, ...]] = {
            key: tuple(fields) for key, fields in (catalogs or {}).items()
        }

    def resource_keys(self) -> list[str]:
        return sorted(self._catalogs)

    def fields_for(self, resource_key: str) -> list[FieldDescriptor]:
        return list(self._catalogs.get(resource_key, ()))

    def has_resource(self, resource_key: str) -> bool:
        return resource_key in self._catalogs

    def get_field(self, resource_key: str, field_id: str) -> FieldDescriptor | None:
        for descriptor in self._catalogs.get(resource_key, ()):
            if descriptor.id == field_id:
                return descriptor
        return None


def catalog_from_rules(rules: Any) -> FieldCatalog:
    """Build a catalog from the ``catalogs`` section of loaded rules."""
    catalogs: dict[str, list[FieldDescriptor]] = {}
    for resource_key, field_rules in rules.catalogs.items():
        catalogs[resource_key] = [
            FieldDescriptor(
                id=rule.id,
                label=rule.label,
                value_type=rule.type,
                operators=tuple(rule.operators),
                options=tuple(rule.options),
                related_entity=rule.related_entity,
                related_entity_label=rule.related_entity_label,
                filter_key=rule.filter_key,
            )
            for rule in field_rules
        ]
    return FieldCatalog(catalogs)


# --- Filter construction ---


def create_filter(
    field: FieldDescriptor,
    operator: FilterOperator | None = None,
    values: Iterable[str] = (),
    filter_id: str | None = None,
) -> Filter:
    """Filter on ``field``; operator defaults to the field's first one."""
    return Filter(
        id=filter_id or new_node_id(field.id),
        field_id=field.id,
        field_label=field.label,
        operator=operator or field.allowed_operators[0],
        values=tuple(values),
        value_type=field.value_type,
    )


def validate_filter_for_field(
    filter: Filter,
    field: FieldDescriptor | None,
) -> list[CatalogValidationError]:
    """Check a filter against the descriptor of the field it names."""
    errors: list[CatalogValidationError] = []

    if field is None:
        errors.append(
            CatalogValidationError(
                code="unknown_field",
                message=f"Unknown field: {filter.field_id}",
                field="field_id",
            )
        )
        return errors

    if filter.operator not in field.allowed_operators:
        errors.append(
            CatalogValidationError(
                code="operator_not_allowed",
                message=f"Operator {filter.operator} is not allowed on {field.label}",
                field="operator",
            )
        )

    if filter.value_type != field.value_type:
        errors.append(
            CatalogValidationError(
                code="type_mismatch",
                message=f"Filter type {filter.value_type} does not match {field.value_type}",
                field="value_type",
            )
        )

    if filter.operator in RANGE_OPERATORS and len(filter.values) != 2:
        errors.append(
            CatalogValidationError(
                code="range_requires_two_values",
                message="between requires a lower and an upper bound",
                field="values",
            )
        )

    if field.options and field.value_type in ("select", "multiselect"):
        unknown = [value for value in filter.values if value not in field.options]
        if unknown:
            errors.append(
                CatalogValidationError(
                    code="unknown_option",
                    message=f"Values not offered by {field.label}: {unknown}",
                    field="values",
                )
            )

    return errors


# --- Column inference ---


def _looks_like_date(value: Any) -> bool:
    return isinstance(value, str) and bool(_ISO_DATE.match(value))


def infer_value_type(
    column_id: str,
    samples: Sequence[Any] = (),
    *,
    is_numeric: bool = False,
) -> ValueType:
    """Guess the value type of a table column."""
    column = column_id.lower()

    if column in SELECT_COLUMNS:
        return "select"
    if column in MULTISELECT_COLUMNS:
        return "multiselect"
    if any(hint in column for hint in DATE_HINTS):
        return "date"
    if is_numeric or any(hint in column for hint in NUMBER_HINTS):
        return "number"

    present = [value for value in samples[:10] if value is not None]
    if present:
        first = present[0]
        if isinstance(first, (int, float)) and not isinstance(first, bool):
            return "number"
        if _looks_like_date(first):
            return "date"
        distinct = {str(value) for value in present}
        if len(distinct) <= MAX_SELECT_OPTIONS:
            return "text" if len(distinct) == len(present) else "multiselect"

    return "text"


def field_from_column(
    column_id: str,
    label: str | None = None,
    rows: Sequence[Any] = (),
) -> FieldDescriptor:
    """Field descriptor for a table column, with options for select types."""
    samples = [default_value_getter(row, column_id) for row in rows]
    value_type = infer_value_type(column_id, samples)
    options: tuple[str, ...] = ()
    if value_type in ("select", "multiselect"):
        options = tuple(extract_filter_options(rows, column_id))
    return FieldDescriptor(
        id=column_id,
        label=label or column_id,
        value_type=value_type,
        operators=DEFAULT_OPERATORS[value_type],
        options=options,
    )


def extract_filter_options(rows: Iterable[Any], field_id: str) -> list[str]:
    """Sorted distinct non-empty values of ``field_id``; lists are unpacked."""
    seen: set[str] = set()
    for row in rows:
        value = default_value_getter(row, field_id)
        items = value if isinstance(value, (list, tuple, set)) else [value]
        for item in items:
            if item is None:
                continue
            text = str(item).strip()
            if text:
                seen.add(text)
    return sorted(seen)
