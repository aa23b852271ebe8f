"""
Filters component unit tests.

Tests for the run_* entry points and the derived tree summary.
"""

from __future__ import annotations

import pytest

from src.components.filters import (
    AddFilterInput,
    AddGroupInput,
    Filter,
    FilterGroup,
    RemoveFilterInput,
    RemoveGroupInput,
    UpdateFilterInput,
    UpdateGroupInput,
    create_root_group,
    describe_tree,
    run,
    run_add_filter,
    run_add_group,
    run_remove_filter,
    run_remove_group,
    run_update_filter,
    run_update_group,
)

# --- Fixtures ---


@pytest.fixture
def status_filter() -> Filter:
    return Filter(
        id="f-status",
        field_id="status",
        field_label="Status",
        operator="is",
        values=("active",),
        value_type="multiselect",
    )


@pytest.fixture
def age_filter() -> Filter:
    return Filter(
        id="f-age",
        field_id="age",
        field_label="Age",
        operator="greaterThan",
        values=("30",),
        value_type="number",
    )


@pytest.fixture
def root(status_filter: Filter) -> FilterGroup:
    return FilterGroup(id="root", operator="and", children=(status_filter,))


# --- Filter Operations ---


class TestFilterOperations:
    """Test add/update/remove filter entry points."""

    def test_add_filter_to_root(self, root: FilterGroup, age_filter: Filter) -> None:
        """Appends to the root when no target is given."""
        result = run_add_filter(AddFilterInput(root=root, filter=age_filter))

        assert result.success is True
        assert result.changed is True
        assert [f.id for f in result.filters] == ["f-status", "f-age"]
        assert result.is_advanced is False

    def test_add_filter_unknown_target(self, root: FilterGroup, age_filter: Filter) -> None:
        """Unknown target leaves the tree untouched."""
        result = run_add_filter(
            AddFilterInput(root=root, filter=age_filter, target_group_id="missing")
        )

        assert result.changed is False
        assert result.root is root

    def test_update_filter(self, root: FilterGroup, status_filter: Filter) -> None:
        """Replaces the filter with the same id."""
        updated = Filter(
            id=status_filter.id,
            field_id="status",
            operator="isNot",
            values=("lost",),
            value_type="multiselect",
        )
        result = run_update_filter(UpdateFilterInput(root=root, filter=updated))

        assert result.changed is True
        assert result.filters == (updated,)

    def test_remove_filter(self, root: FilterGroup) -> None:
        """Removing the only leaf leaves an empty root."""
        result = run_remove_filter(RemoveFilterInput(root=root, filter_id="f-status"))

        assert result.changed is True
        assert result.root.children == ()
        assert result.root.id == "root"


# --- Group Operations ---


class TestGroupOperations:
    """Test add/remove/update group entry points."""

    def test_add_group_makes_tree_advanced(self, root: FilterGroup, age_filter: Filter) -> None:
        """A nested group cannot be shown as flat chips."""
        group = FilterGroup(id="g1", operator="or", children=(age_filter,))
        result = run_add_group(AddGroupInput(root=root, group=group))

        assert result.changed is True
        assert result.is_advanced is True
        assert [f.id for f in result.filters] == ["f-status", "f-age"]

    def test_add_group_respects_max_depth(self, root: FilterGroup) -> None:
        """Insert that would exceed max_depth is ignored."""
        inner = FilterGroup(id="inner")
        outer = FilterGroup(id="outer", children=(inner,))
        result = run_add_group(AddGroupInput(root=root, group=outer), max_depth=1)

        assert result.changed is False
        assert result.root is root

    def test_update_group_respects_max_depth(self, root: FilterGroup) -> None:
        """New children that would exceed max_depth are ignored."""
        outer = FilterGroup(id="outer", children=(FilterGroup(id="inner"),))
        inp = UpdateGroupInput(root=root, group_id=root.id, updates={"children": [outer]})

        assert run(inp, max_depth=1).changed is False
        assert run(inp, max_depth=2).changed is True

    def test_remove_group(self, root: FilterGroup, age_filter: Filter) -> None:
        """Removes a nested group with its subtree."""
        group = FilterGroup(id="g1", children=(age_filter,))
        with_group = run_add_group(AddGroupInput(root=root, group=group)).root

        result = run_remove_group(RemoveGroupInput(root=with_group, group_id="g1"))

        assert result.changed is True
        assert [f.id for f in result.filters] == ["f-status"]

    def test_remove_root_group_is_ignored(self, root: FilterGroup) -> None:
        """The root group cannot be removed."""
        result = run_remove_group(RemoveGroupInput(root=root, group_id="root"))

        assert result.changed is False
        assert result.root is root

    def test_update_group_operator_and_not(self, root: FilterGroup) -> None:
        """Toggles the combinator and negation of a group."""
        result = run_update_group(
            UpdateGroupInput(root=root, group_id="root", updates={"operator": "or", "not": True})
        )

        assert result.root.operator == "or"
        assert result.root.negated is True
        assert result.is_advanced is True


# --- Dispatch ---


class TestRun:
    """Test the run() dispatcher."""

    def test_run_dispatches(self, root: FilterGroup, age_filter: Filter) -> None:
        result = run(AddFilterInput(root=root, filter=age_filter))
        assert len(result.filters) == 2

    def test_run_unknown_input(self) -> None:
        with pytest.raises(ValueError, match="Unknown input type"):
            run("not an input")  # type: ignore[arg-type]


class TestDescribeTree:
    """Test describe_tree()."""

    def test_describe_empty_root(self) -> None:
        summary = describe_tree(create_root_group())

        assert summary.changed is False
        assert summary.filters == ()
        assert summary.is_advanced is False
        assert summary.signature == '["group","and",false,[]]'
