"""
Filter tree persistence codec.

Converts trees to and from the JSON-compatible dicts stored inside a saved
view's ``filter_config``. Dicts coming back from storage are untrusted:
``validate_filter_tree`` reports every problem it finds and
``group_from_dict`` refuses to build a tree from invalid data.

Wire shape:
- Filter: {"id", "fieldId", "fieldLabel", "operator", "values", "type"}
- Group:  {"id", "operator", "not", "children"}
"""

from __future__ import annotations

import json
from typing import Any

from ._impl import is_filter_group, new_node_id
from .models import (
    DEFAULT_MAX_DEPTH,
    FILTER_OPERATORS,
    GROUP_OPERATORS,
    MULTI_VALUE_OPERATORS,
    RANGE_OPERATORS,
    VALUE_TYPES,
    Filter,
    FilterGroup,
    FilterNode,
    FilterValidationError,
)


class FilterTreeError(ValueError):
    """Raised when a stored filter tree fails validation."""

    def __init__(self, errors: list[FilterValidationError]) -> None:
        self.errors = errors
        super().__init__(
            "Invalid filter tree: " + "; ".join(f"{e.path}: {e.message}" for e in errors)
        )


# --- Serialization ---


def filter_to_dict(filter: Filter) -> dict[str, Any]:
    return {
        "id": filter.id,
        "fieldId": filter.field_id,
        "fieldLabel": filter.field_label,
        "operator": filter.operator,
        "values": list(filter.values),
        "type": filter.value_type,
    }


def group_to_dict(group: FilterGroup) -> dict[str, Any]:
    return {
        "id": group.id,
        "operator": group.operator,
        "not": group.negated,
        "children": [node_to_dict(child) for child in group.children],
    }


def node_to_dict(node: FilterNode) -> dict[str, Any]:
    if is_filter_group(node):
        return group_to_dict(node)  # type: ignore[arg-type]
    return filter_to_dict(node)  # type: ignore[arg-type]


def dumps(group: FilterGroup) -> str:
    return json.dumps(group_to_dict(group), ensure_ascii=False)


# --- Validation ---


def _check_filter(
    data: dict[str, Any],
    path: str,
    errors: list[FilterValidationError],
) -> None:
    field_id = data.get("fieldId")
    if not isinstance(field_id, str) or not field_id:
        errors.append(
            FilterValidationError("field_required", "fieldId must be a non-empty string", path)
        )

    operator = data.get("operator")
    if operator not in FILTER_OPERATORS:
        errors.append(
            FilterValidationError("unknown_operator", f"Unknown operator: {operator!r}", path)
        )

    value_type = data.get("type", data.get("valueType", "text"))
    if value_type not in VALUE_TYPES:
        errors.append(
            FilterValidationError("unknown_type", f"Unknown value type: {value_type!r}", path)
        )

    values = data.get("values", [])
    if not isinstance(values, list) or not all(isinstance(v, str) for v in values):
        errors.append(
            FilterValidationError("invalid_values", "values must be a list of strings", path)
        )
        return

    if not values:
        errors.append(
            FilterValidationError("values_required", "Filter has no values", path)
        )
    elif operator in RANGE_OPERATORS and len(values) != 2:
        errors.append(
            FilterValidationError(
                "range_requires_two_values",
                f"{operator} requires exactly two values, got {len(values)}",
                path,
            )
        )
    elif (
        operator not in RANGE_OPERATORS
        and not (operator in MULTI_VALUE_OPERATORS and value_type == "multiselect")
        and len(values) != 1
    ):
        errors.append(
            FilterValidationError(
                "single_value_required",
                f"{operator} on {value_type} takes one value, got {len(values)}",
                path,
            )
        )


def validate_filter_tree(
    data: Any,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> list[FilterValidationError]:
    """Validate a raw tree dict. Returns an empty list when it is usable."""
    errors: list[FilterValidationError] = []
    seen_ids: set[str] = set()

    def visit(node: Any, path: str, depth: int) -> None:
        if not isinstance(node, dict):
            errors.append(FilterValidationError("invalid_node", "Node must be an object", path))
            return

        node_id = node.get("id")
        if node_id is not None:
            if not isinstance(node_id, str):
                errors.append(FilterValidationError("invalid_id", "id must be a string", path))
            elif node_id in seen_ids:
                errors.append(
                    FilterValidationError("duplicate_id", f"Duplicate node id: {node_id}", path)
                )
            else:
                seen_ids.add(node_id)

        if not is_filter_group(node):
            _check_filter(node, path, errors)
            return

        if depth > max_depth:
            errors.append(
                FilterValidationError(
                    "too_deep", f"Groups nest deeper than {max_depth} levels", path
                )
            )
            return
        if node.get("operator", "and") not in GROUP_OPERATORS:
            errors.append(
                FilterValidationError(
                    "unknown_group_operator",
                    f"Unknown group operator: {node.get('operator')!r}",
                    path,
                )
            )
        if not isinstance(node.get("not", False), bool):
            errors.append(FilterValidationError("invalid_not", "not must be a boolean", path))

        children = node.get("children")
        if not isinstance(children, list):
            errors.append(
                FilterValidationError("invalid_children", "children must be a list", path)
            )
            return
        for index, child in enumerate(children):
            visit(child, f"{path}.children[{index}]", depth + 1)

    if not is_filter_group(data):
        errors.append(FilterValidationError("root_not_group", "Root must be a group", "$"))
        return errors

    visit(data, "$", 0)
    return errors


# --- Deserialization ---


def filter_from_dict(data: dict[str, Any]) -> Filter:
    return Filter(
        id=data.get("id") or new_node_id("filter"),
        field_id=data["fieldId"],
        field_label=data.get("fieldLabel") or data["fieldId"],
        operator=data["operator"],
        values=tuple(data.get("values", [])),
        value_type=data.get("type", data.get("valueType", "text")),
    )


def _node_from_dict(data: dict[str, Any]) -> FilterNode:
    if not is_filter_group(data):
        return filter_from_dict(data)
    return FilterGroup(
        id=data.get("id") or new_node_id("group"),
        operator=data.get("operator", "and"),
        negated=bool(data.get("not", False)),
        children=tuple(_node_from_dict(child) for child in data["children"]),
    )


def group_from_dict(
    data: dict[str, Any],
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> FilterGroup:
    """Rehydrate a stored tree. Missing ids are regenerated.

    Raises:
        FilterTreeError: if the data does not describe a valid tree.
    """
    errors = validate_filter_tree(data, max_depth=max_depth)
    if errors:
        raise FilterTreeError(errors)
    return _node_from_dict(data)  # type: ignore[return-value]


def filters_from_list(items: list[dict[str, Any]]) -> list[Filter]:
    """Rehydrate a legacy flat filter list, validating it as an AND group."""
    group = group_from_dict({"operator": "and", "children": list(items)})
    return list(group.children)  # type: ignore[arg-type]


def loads(payload: str, *, max_depth: int = DEFAULT_MAX_DEPTH) -> FilterGroup:
    return group_from_dict(json.loads(payload), max_depth=max_depth)
