"""
Filter tree engine - immutable mutation, flattening and signatures.

Every mutation takes the current root group and returns a new root. Only the
path from the edited node up to the root is rebuilt; untouched subtrees are
shared by reference. When the target id is not in the tree the input root is
returned as is.

Invariants:
- I1: Mutations never modify their input
- I2: Target-not-found is a no-op, never an exception
- I3: Child order is preserved across mutations
- I4: The root group cannot be removed
- I5: Signatures ignore node ids, labels and child order
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from dataclasses import replace
from typing import Any
from uuid import uuid4

from .models import (
    DEFAULT_MAX_DEPTH,
    GROUP_OPERATORS,
    Filter,
    FilterGroup,
    FilterNode,
)

logger = logging.getLogger(__name__)

# Node predicate and the edit applied to the matching node.
# An edit returning None deletes the node from its parent.
NodeMatcher = Callable[[FilterNode], bool]
NodeEdit = Callable[[FilterNode, int], FilterNode | None]


# --- Node helpers ---


def new_node_id(prefix: str = "filter") -> str:
    """Generate a fresh node id such as ``group-3f2a9c1d7b4e``."""
    return f"{prefix}-{uuid4().hex[:12]}"


def is_filter_group(node: Any) -> bool:
    """Discriminate the Filter | FilterGroup union.

    Accepts model instances (by ``kind``) and raw dicts (by ``children``).
    """
    if isinstance(node, Mapping):
        return "children" in node
    return getattr(node, "kind", None) == "group"


def create_empty_group(operator: str = "and", group_id: str | None = None) -> FilterGroup:
    """Fresh group with no children."""
    if operator not in GROUP_OPERATORS:
        operator = "and"
    return FilterGroup(id=group_id or new_node_id("group"), operator=operator)  # type: ignore[arg-type]


def create_root_group(
    source: FilterGroup | list[Filter] | tuple[Filter, ...] | None = None,
) -> FilterGroup:
    """Build a root group.

    None gives an empty ``and`` root, a flat list of filters (legacy views)
    becomes an ``and`` root over them, an existing group is returned as is.
    """
    if source is None:
        return create_empty_group("and")
    if isinstance(source, FilterGroup):
        return source
    return FilterGroup(id=new_node_id("group"), operator="and", children=tuple(source))


# --- Generic traversal ---


def _is_filter_with_id(node_id: str) -> NodeMatcher:
    return lambda node: not is_filter_group(node) and node.id == node_id


def _is_group_with_id(node_id: str) -> NodeMatcher:
    return lambda node: is_filter_group(node) and node.id == node_id


def _rewrite_children(
    group: FilterGroup,
    matches: NodeMatcher,
    edit: NodeEdit,
    depth: int,
) -> tuple[FilterGroup, bool]:
    """Depth-first search below ``group``; returns (new group, found)."""
    children = group.children
    for index, child in enumerate(children):
        if matches(child):
            replacement = edit(child, depth + 1)
            if replacement is child:
                return group, True
            if replacement is None:
                new_children = children[:index] + children[index + 1 :]
            else:
                new_children = children[:index] + (replacement,) + children[index + 1 :]
            return replace(group, children=new_children), True

        if is_filter_group(child):
            new_child, found = _rewrite_children(child, matches, edit, depth + 1)  # type: ignore[arg-type]
            if found:
                if new_child is child:
                    return group, True
                new_children = children[:index] + (new_child,) + children[index + 1 :]
                return replace(group, children=new_children), True

    return group, False


def _rewrite(
    root: FilterGroup,
    matches: NodeMatcher,
    edit: NodeEdit,
    operation: str,
) -> FilterGroup:
    """Locate the node accepted by ``matches`` and apply ``edit`` to it.

    The root itself may be edited but never deleted. Returns ``root``
    unchanged when nothing matches.
    """
    if matches(root):
        replacement = edit(root, 0)
        if replacement is None or not is_filter_group(replacement):
            logger.debug("%s: root group cannot be removed, ignoring", operation)
            return root
        return replacement  # type: ignore[return-value]

    new_root, found = _rewrite_children(root, matches, edit, 0)
    if not found:
        logger.debug("%s: target not found in tree %s, ignoring", operation, root.id)
    return new_root


def _append_child(child: FilterNode) -> NodeEdit:
    def edit(node: FilterNode, depth: int) -> FilterNode:
        assert isinstance(node, FilterGroup)
        return replace(node, children=node.children + (child,))

    return edit


# --- Mutation operations ---


def add_filter_to_group(
    root: FilterGroup,
    filter: Filter,
    target_group_id: str | None = None,
) -> FilterGroup:
    """Append ``filter`` to the group ``target_group_id`` (root when None)."""
    target = target_group_id or root.id
    return _rewrite(root, _is_group_with_id(target), _append_child(filter), "add_filter")


def update_filter_in_group(root: FilterGroup, filter: Filter) -> FilterGroup:
    """Replace the leaf sharing ``filter.id``, keeping its position."""
    return _rewrite(
        root,
        _is_filter_with_id(filter.id),
        lambda node, depth: filter,
        "update_filter",
    )


def remove_filter_from_group(root: FilterGroup, filter_id: str) -> FilterGroup:
    """Remove the leaf ``filter_id`` wherever it sits. Emptied groups stay."""
    return _rewrite(
        root,
        _is_filter_with_id(filter_id),
        lambda node, depth: None,
        "remove_filter",
    )


def add_group_to_group(
    root: FilterGroup,
    new_group: FilterGroup,
    target_group_id: str | None = None,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> FilterGroup:
    """Append ``new_group`` under ``target_group_id`` (root when None).

    No-op if the result would nest groups deeper than ``max_depth``.
    """
    target = target_group_id or root.id
    append = _append_child(new_group)
    height = tree_depth(new_group)

    def edit(node: FilterNode, depth: int) -> FilterNode:
        if depth + 1 + height > max_depth:
            logger.warning(
                "add_group: group %s would exceed max depth %d, ignoring",
                new_group.id,
                max_depth,
            )
            return node
        return append(node, depth)  # type: ignore[return-value]

    return _rewrite(root, _is_group_with_id(target), edit, "add_group")


def remove_group_from_group(root: FilterGroup, group_id: str) -> FilterGroup:
    """Remove the group ``group_id`` and its subtree. The root is kept."""
    return _rewrite(
        root,
        _is_group_with_id(group_id),
        lambda node, depth: None,
        "remove_group",
    )


def update_group_in_group(
    root: FilterGroup,
    group_id: str,
    updates: Mapping[str, Any],
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> FilterGroup:
    """Shallow-merge ``updates`` into the group ``group_id``.

    Recognised keys: ``operator``, ``not`` (or ``negated``) and ``children``.
    Anything else is ignored. No-op if new children would nest groups
    deeper than ``max_depth``.
    """
    changes: dict[str, Any] = {}
    if updates.get("operator") in GROUP_OPERATORS:
        changes["operator"] = updates["operator"]
    for key in ("not", "negated"):
        if key in updates:
            changes["negated"] = bool(updates[key])
    if "children" in updates and updates["children"] is not None:
        changes["children"] = tuple(updates["children"])

    def edit(node: FilterNode, depth: int) -> FilterNode:
        if not changes:
            return node
        updated = replace(node, **changes)
        height = tree_depth(updated)  # type: ignore[arg-type]
        if "children" in changes and depth + height > max_depth:
            logger.warning(
                "update_group: children of %s would exceed max depth %d, ignoring",
                group_id,
                max_depth,
            )
            return node
        return updated

    return _rewrite(root, _is_group_with_id(group_id), edit, "update_group")


# --- Derived views ---


def flatten_filter_group(group: FilterGroup) -> list[Filter]:
    """Every leaf of the subtree in depth-first display order."""
    result: list[Filter] = []

    def walk(node: FilterNode) -> None:
        if is_filter_group(node):
            for child in node.children:  # type: ignore[union-attr]
                walk(child)
            return
        result.append(node)  # type: ignore[arg-type]

    walk(group)
    return result


def count_filter_leaves(group: FilterGroup) -> int:
    return len(flatten_filter_group(group))


def tree_depth(group: FilterGroup) -> int:
    """Nesting depth below ``group``; a group without child groups is 0."""
    child_groups = [child for child in group.children if is_filter_group(child)]
    if not child_groups:
        return 0
    return 1 + max(tree_depth(child) for child in child_groups)  # type: ignore[arg-type]


def find_node(root: FilterGroup, node_id: str) -> FilterNode | None:
    """Look up any node by id."""
    if root.id == node_id:
        return root
    for child in root.children:
        if child.id == node_id:
            return child
        if is_filter_group(child):
            found = find_node(child, node_id)  # type: ignore[arg-type]
            if found is not None:
                return found
    return None


def is_advanced_filter_group(group: FilterGroup | None) -> bool:
    """True when the tree cannot be shown as a flat AND list of filters."""
    if group is None:
        return False
    if group.negated:
        return True
    if group.operator == "or" and len(group.children) > 1:
        return True
    return any(is_filter_group(child) for child in group.children)


def _canonical(node: FilterNode) -> list[Any]:
    if is_filter_group(node):
        children = [_canonical(child) for child in node.children]  # type: ignore[union-attr]
        children.sort(key=lambda item: json.dumps(item, ensure_ascii=False))
        return ["group", node.operator, bool(node.negated), children]  # type: ignore[union-attr]
    return ["filter", node.field_id, node.operator, sorted(node.values)]  # type: ignore[union-attr]


def get_filter_group_signature(group: FilterGroup | None) -> str:
    """Canonical string of the tree's semantic content.

    Equal for trees that differ only in node ids, labels or child order.
    None has the signature of an empty ``and`` group.
    """
    if group is None:
        return json.dumps(["group", "and", False, []], separators=(",", ":"))
    return json.dumps(_canonical(group), ensure_ascii=False, separators=(",", ":"))


# --- Search and merge ---


def create_search_group(query: str, field_ids: list[str]) -> FilterGroup:
    """``or`` group of text ``contains`` filters, one per searchable field."""
    needle = query.strip()
    return FilterGroup(
        id=new_node_id("search"),
        operator="or",
        children=tuple(
            Filter(
                id=new_node_id(f"{field_id}-search"),
                field_id=field_id,
                field_label=field_id,
                operator="contains",
                values=(needle,),
                value_type="text",
            )
            for field_id in field_ids
        ),
    )


def merge_filter_groups(
    primary: FilterGroup | None,
    secondary: FilterGroup | None,
) -> FilterGroup | None:
    """AND two trees together, skipping whichever one is missing or empty."""
    primary_active = primary is not None and bool(primary.children)
    secondary_active = secondary is not None and bool(secondary.children)
    if not primary_active and not secondary_active:
        return primary if primary is not None else secondary
    if not secondary_active:
        return primary
    if not primary_active:
        return secondary
    return FilterGroup(
        id=new_node_id("group"),
        operator="and",
        children=(primary, secondary),  # type: ignore[arg-type]
    )
