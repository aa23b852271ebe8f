"""
Saved views component unit tests.

Tests for view CRUD entry points, default handling and dirty checking.
"""

from __future__ import annotations

from datetime import UTC, datetime
from uuid import UUID, uuid4

import pytest

from src.adapters.clock import FrozenClock
from src.components.filters import Filter, FilterGroup
from src.components.saved_views import (
    CheckModifiedInput,
    CreateViewInput,
    DeleteViewInput,
    GetViewInput,
    ListViewsInput,
    SavedView,
    UpdateViewInput,
    run,
    run_check_modified,
    run_create,
    run_delete,
    run_get,
    run_list,
    run_update,
)

# --- Mock Repository ---


class MockSavedViewRepo:
    """In-memory saved view repository for testing."""

    def __init__(self) -> None:
        self._views: dict[UUID, SavedView] = {}

    def save(self, view: SavedView) -> SavedView:
        self._views[view.id] = view
        return view

    def get_by_id(self, view_id: UUID) -> SavedView | None:
        return self._views.get(view_id)

    def delete(self, view_id: UUID) -> None:
        self._views.pop(view_id, None)

    def list_by_owner(self, resource_key: str, created_by: UUID) -> list[SavedView]:
        return [
            v
            for v in self._views.values()
            if v.resource_key == resource_key and v.created_by == created_by
        ]


class MockCatalog:
    def resource_keys(self) -> list[str]:
        return ["customers", "leads"]


@pytest.fixture
def repo() -> MockSavedViewRepo:
    return MockSavedViewRepo()


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(datetime(2025, 3, 1, 9, 0, tzinfo=UTC))


@pytest.fixture
def owner() -> UUID:
    return uuid4()


@pytest.fixture
def deps(repo: MockSavedViewRepo, clock: FrozenClock) -> dict:
    return {"repo": repo, "catalog": MockCatalog(), "time_port": clock}


def _status_tree() -> dict:
    return {
        "id": "root",
        "operator": "and",
        "not": False,
        "children": [
            {
                "id": "f-status",
                "fieldId": "status",
                "fieldLabel": "Status",
                "operator": "is",
                "values": ["active"],
                "type": "multiselect",
            }
        ],
    }


# --- Creation Tests ---


class TestCreateView:
    """Test view creation."""

    def test_create_view_success(self, deps: dict, owner: UUID) -> None:
        """Creates a view and derives the flat filter list."""
        inp = CreateViewInput(
            resource_key="leads",
            view_name="  Active leads ",
            created_by=owner,
            filter_config={"searchQuery": "dana", "filterGroup": _status_tree()},
        )
        result = run_create(inp, **deps)

        assert result.success is True
        assert result.view is not None
        assert result.view.view_name == "Active leads"
        assert result.view.filter_config.search_query == "dana"
        assert [f.id for f in result.view.filter_config.flat_filters()] == ["f-status"]

    def test_create_rejects_blank_name_and_unknown_resource(
        self, deps: dict, owner: UUID
    ) -> None:
        """Reports every validation problem at once."""
        inp = CreateViewInput(resource_key="invoices", view_name="  ", created_by=owner)
        result = run_create(inp, **deps)

        assert result.success is False
        codes = {e.code for e in result.errors}
        assert codes == {"unknown_resource", "name_required"}

    def test_create_rejects_invalid_tree(self, deps: dict, owner: UUID) -> None:
        """Invalid stored trees surface as prefixed filter errors."""
        tree = _status_tree()
        tree["children"][0]["operator"] = "between"
        inp = CreateViewInput(
            resource_key="leads",
            view_name="Broken",
            created_by=owner,
            filter_config={"filterGroup": tree},
        )
        result = run_create(inp, **deps)

        assert result.success is False
        assert result.errors[0].code == "filter_range_requires_two_values"
        assert result.errors[0].field == "filter_config.children[0]"

    def test_create_default_clears_previous_default(
        self, deps: dict, repo: MockSavedViewRepo, owner: UUID
    ) -> None:
        """At most one default per resource and user."""
        first = run_create(
            CreateViewInput(resource_key="leads", view_name="A", created_by=owner, is_default=True),
            **deps,
        ).view
        second = run_create(
            CreateViewInput(resource_key="leads", view_name="B", created_by=owner, is_default=True),
            **deps,
        ).view

        assert first is not None and second is not None
        assert repo.get_by_id(first.id).is_default is False  # type: ignore[union-attr]
        assert repo.get_by_id(second.id).is_default is True  # type: ignore[union-attr]


# --- Update/Delete/Get Tests ---


class TestUpdateView:
    """Test view updates."""

    def test_update_name(self, deps: dict, owner: UUID, clock: FrozenClock) -> None:
        view = run_create(
            CreateViewInput(resource_key="leads", view_name="Old", created_by=owner), **deps
        ).view
        assert view is not None

        clock.advance(60)
        result = run_update(UpdateViewInput(view_id=view.id, updates={"view_name": "New"}), **deps)

        assert result.success is True
        assert result.view is not None
        assert result.view.view_name == "New"
        assert result.view.updated_at > view.updated_at

    def test_update_rejects_unknown_field(self, deps: dict, owner: UUID) -> None:
        view = run_create(
            CreateViewInput(resource_key="leads", view_name="V", created_by=owner), **deps
        ).view
        assert view is not None

        result = run_update(
            UpdateViewInput(view_id=view.id, updates={"resource_key": "customers"}), **deps
        )

        assert result.success is False
        assert result.errors[0].code == "field_not_updatable"

    def test_update_not_found(self, deps: dict) -> None:
        result = run_update(UpdateViewInput(view_id=uuid4(), updates={"view_name": "X"}), **deps)

        assert result.success is False
        assert result.errors[0].code == "not_found"


class TestDeleteAndGet:
    """Test delete/get/list entry points."""

    def test_delete_then_get(self, deps: dict, owner: UUID) -> None:
        view = run_create(
            CreateViewInput(resource_key="leads", view_name="Gone", created_by=owner), **deps
        ).view
        assert view is not None

        assert run_delete(DeleteViewInput(view_id=view.id), **deps).success is True
        assert run_get(GetViewInput(view_id=view.id), **deps).success is False
        assert run_delete(DeleteViewInput(view_id=view.id), **deps).success is False

    def test_list_default_first_then_newest(
        self, deps: dict, owner: UUID, clock: FrozenClock
    ) -> None:
        for name, is_default in (("old", False), ("default", True), ("new", False)):
            run_create(
                CreateViewInput(
                    resource_key="leads", view_name=name, created_by=owner, is_default=is_default
                ),
                **deps,
            )
            clock.advance(10)

        result = run_list(ListViewsInput(resource_key="leads", created_by=owner), **deps)

        assert [v.view_name for v in result.views] == ["default", "new", "old"]

    def test_list_only_own_views(self, deps: dict, owner: UUID) -> None:
        run_create(CreateViewInput(resource_key="leads", view_name="Mine", created_by=owner), **deps)
        run_create(
            CreateViewInput(resource_key="leads", view_name="Theirs", created_by=uuid4()), **deps
        )

        result = run(ListViewsInput(resource_key="leads", created_by=owner), **deps)

        assert [v.view_name for v in result.views] == ["Mine"]  # type: ignore[union-attr]


# --- Dirty Checking ---


class TestCheckModified:
    """Test signature-based dirty checking."""

    def test_same_tree_with_new_ids_is_not_modified(self, deps: dict, owner: UUID) -> None:
        """Regenerated ids do not count as a change."""
        view = run_create(
            CreateViewInput(
                resource_key="leads",
                view_name="Active",
                created_by=owner,
                filter_config={"filterGroup": _status_tree()},
            ),
            **deps,
        ).view
        assert view is not None

        current = FilterGroup(
            id="other-root",
            children=(
                Filter(
                    id="other-filter",
                    field_id="status",
                    operator="is",
                    values=("active",),
                    value_type="multiselect",
                ),
            ),
        )
        result = run_check_modified(
            CheckModifiedInput(view_id=view.id, current_group=current), **deps
        )

        assert result.success is True
        assert result.is_modified is False
        assert result.current_signature == result.saved_signature

    def test_search_text_change_is_modified(self, deps: dict, owner: UUID) -> None:
        view = run_create(
            CreateViewInput(resource_key="leads", view_name="Empty", created_by=owner), **deps
        ).view
        assert view is not None

        result = run_check_modified(
            CheckModifiedInput(view_id=view.id, current_group=None, search_query="dana"), **deps
        )

        assert result.is_modified is True

    def test_no_view_compares_against_empty_baseline(self, deps: dict) -> None:
        result = run_check_modified(
            CheckModifiedInput(view_id=None, current_group=FilterGroup(id="root")), **deps
        )

        assert result.success is True
        assert result.is_modified is False

    def test_unknown_view(self, deps: dict) -> None:
        result = run_check_modified(
            CheckModifiedInput(view_id=uuid4(), current_group=None), **deps
        )

        assert result.success is False
        assert result.errors[0].code == "not_found"
