"""
Saved views component input/output models.

A saved view is a named filter configuration for one resource screen and
one user. Its ``filter_config`` round-trips through JSON in the shape the
front end stores:

    {"searchQuery": str, "advancedFilters": [Filter], "filterGroup": Group | null}
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID

from src.components.filters import (
    DEFAULT_MAX_DEPTH,
    Filter,
    FilterGroup,
    create_root_group,
    filter_to_dict,
    filters_from_list,
    flatten_filter_group,
    group_from_dict,
    group_to_dict,
)

FILTER_CONFIG_KEYS = ("searchQuery", "advancedFilters", "filterGroup")


# --- Filter Config ---


@dataclass(frozen=True)
class FilterConfig:
    """Search text plus filter tree, with unrelated front-end keys kept aside."""

    search_query: str = ""
    filter_group: FilterGroup | None = None
    advanced_filters: tuple[Filter, ...] = ()
    extra: dict[str, Any] = field(default_factory=dict)

    def root_group(self) -> FilterGroup:
        """The tree to edit; legacy flat views become an AND root."""
        if self.filter_group is not None:
            return self.filter_group
        return create_root_group(list(self.advanced_filters))

    def flat_filters(self) -> list[Filter]:
        if self.filter_group is not None:
            return flatten_filter_group(self.filter_group)
        return list(self.advanced_filters)

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.extra,
            "searchQuery": self.search_query,
            "advancedFilters": [filter_to_dict(f) for f in self.flat_filters()],
            "filterGroup": (
                group_to_dict(self.filter_group) if self.filter_group is not None else None
            ),
        }

    @classmethod
    def from_dict(
        cls,
        payload: dict[str, Any] | None,
        *,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> FilterConfig:
        """Parse a stored config. Raises FilterTreeError on an invalid tree."""
        payload = payload or {}
        raw_group = payload.get("filterGroup")
        raw_filters = payload.get("advancedFilters") or []

        group = group_from_dict(raw_group, max_depth=max_depth) if raw_group else None
        filters: tuple[Filter, ...] = ()
        if group is not None:
            filters = tuple(flatten_filter_group(group))
        elif raw_filters:
            filters = tuple(filters_from_list(raw_filters))

        return cls(
            search_query=payload.get("searchQuery") or "",
            filter_group=group,
            advanced_filters=filters,
            extra={k: v for k, v in payload.items() if k not in FILTER_CONFIG_KEYS},
        )


# --- Validation Error ---


@dataclass(frozen=True)
class SavedViewValidationError:
    """Saved view validation error."""

    code: str
    message: str
    field: str | None = None


# --- Saved View Model ---


@dataclass(frozen=True)
class SavedView:
    """Named filter configuration of a resource screen."""

    id: UUID
    resource_key: str
    view_name: str
    filter_config: FilterConfig
    is_default: bool
    created_by: UUID
    created_at: datetime
    updated_at: datetime
    icon_name: str | None = None


# --- Input Models ---


@dataclass(frozen=True)
class CreateViewInput:
    """Input for saving a new view."""

    resource_key: str
    view_name: str
    created_by: UUID
    filter_config: FilterConfig | dict[str, Any] = field(default_factory=FilterConfig)
    is_default: bool = False
    icon_name: str | None = None


@dataclass(frozen=True)
class UpdateViewInput:
    """Input for updating an existing view."""

    view_id: UUID
    updates: dict[str, Any]


@dataclass(frozen=True)
class DeleteViewInput:
    """Input for deleting a view."""

    view_id: UUID


@dataclass(frozen=True)
class GetViewInput:
    """Input for getting a view."""

    view_id: UUID


@dataclass(frozen=True)
class ListViewsInput:
    """Input for listing a user's views of one resource."""

    resource_key: str
    created_by: UUID


@dataclass(frozen=True)
class CheckModifiedInput:
    """Input for comparing the current filters against a view."""

    view_id: UUID | None
    current_group: FilterGroup | None
    search_query: str = ""


# --- Output Models ---


@dataclass(frozen=True)
class ViewOutput:
    """Output containing a single view."""

    view: SavedView | None
    errors: list[SavedViewValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class ViewListOutput:
    """Output containing a list of views."""

    views: tuple[SavedView, ...]
    errors: list[SavedViewValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class ModifiedOutput:
    """Whether the current filters differ from the saved baseline."""

    is_modified: bool
    current_signature: str
    saved_signature: str
    errors: list[SavedViewValidationError] = field(default_factory=list)
    success: bool = True
