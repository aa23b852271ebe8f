"""
Filters component - nested filter tree editing.

Entry points wrap the tree engine: each takes an input model carrying the
current root, applies one mutation and returns the new root together with
the values the UI derives from it (signature, flat chips, advanced flag).

Invariants:
- I1: Operations are total; unknown targets leave the tree unchanged
- I2: ``changed`` is False exactly when the root object is returned as is
"""

from __future__ import annotations

from ._impl import (
    add_filter_to_group,
    add_group_to_group,
    flatten_filter_group,
    get_filter_group_signature,
    is_advanced_filter_group,
    remove_filter_from_group,
    remove_group_from_group,
    update_filter_in_group,
    update_group_in_group,
)
from .models import (
    DEFAULT_MAX_DEPTH,
    AddFilterInput,
    AddGroupInput,
    FilterGroup,
    FilterTreeOutput,
    RemoveFilterInput,
    RemoveGroupInput,
    UpdateFilterInput,
    UpdateGroupInput,
)

FilterTreeInput = (
    AddFilterInput
    | UpdateFilterInput
    | RemoveFilterInput
    | AddGroupInput
    | RemoveGroupInput
    | UpdateGroupInput
)


def describe_tree(root: FilterGroup, *, changed: bool = False) -> FilterTreeOutput:
    """Build the output model for a tree."""
    return FilterTreeOutput(
        root=root,
        changed=changed,
        signature=get_filter_group_signature(root),
        is_advanced=is_advanced_filter_group(root),
        filters=tuple(flatten_filter_group(root)),
    )


def _output(before: FilterGroup, after: FilterGroup) -> FilterTreeOutput:
    return describe_tree(after, changed=after is not before)


# --- Component Entry Points ---


def run_add_filter(inp: AddFilterInput) -> FilterTreeOutput:
    """Append a filter to the target group."""
    return _output(inp.root, add_filter_to_group(inp.root, inp.filter, inp.target_group_id))


def run_update_filter(inp: UpdateFilterInput) -> FilterTreeOutput:
    """Replace a filter in place."""
    return _output(inp.root, update_filter_in_group(inp.root, inp.filter))


def run_remove_filter(inp: RemoveFilterInput) -> FilterTreeOutput:
    """Remove a filter leaf."""
    return _output(inp.root, remove_filter_from_group(inp.root, inp.filter_id))


def run_add_group(
    inp: AddGroupInput,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> FilterTreeOutput:
    """
    Append a group to the target group.

    Args:
        inp: Input containing the root, the new group and the target id.
        max_depth: Deepest nesting level allowed after the insert.

    Returns:
        FilterTreeOutput; unchanged when the target is missing or the
        insert would exceed ``max_depth``.
    """
    return _output(
        inp.root,
        add_group_to_group(inp.root, inp.group, inp.target_group_id, max_depth=max_depth),
    )


def run_remove_group(inp: RemoveGroupInput) -> FilterTreeOutput:
    """Remove a non-root group with its subtree."""
    return _output(inp.root, remove_group_from_group(inp.root, inp.group_id))


def run_update_group(
    inp: UpdateGroupInput,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> FilterTreeOutput:
    """Change a group's combinator, negation or children."""
    return _output(
        inp.root,
        update_group_in_group(inp.root, inp.group_id, inp.updates, max_depth=max_depth),
    )


def run(
    inp: FilterTreeInput,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> FilterTreeOutput:
    """
    Main entry point for the filters component.

    Dispatches to appropriate handler based on input type.
    """
    if isinstance(inp, AddFilterInput):
        return run_add_filter(inp)
    elif isinstance(inp, UpdateFilterInput):
        return run_update_filter(inp)
    elif isinstance(inp, RemoveFilterInput):
        return run_remove_filter(inp)
    elif isinstance(inp, AddGroupInput):
        return run_add_group(inp, max_depth=max_depth)
    elif isinstance(inp, RemoveGroupInput):
        return run_remove_group(inp)
    elif isinstance(inp, UpdateGroupInput):
        return run_update_group(inp, max_depth=max_depth)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
