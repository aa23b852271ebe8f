"""
SavedViewService - named filter configurations per resource and user.

Key behaviors:
- A view stores search text plus one filter tree; the flat filter list is
  derived from the tree on every save
- At most one default view per resource and user
- Dirty checking compares tree signatures, so regenerated ids or reordered
  children do not count as changes
- Resetting a view replaces its tree with a fresh empty root
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

from src.components.filters import (
    DEFAULT_MAX_DEPTH,
    FilterGroup,
    FilterTreeError,
    create_root_group,
    get_filter_group_signature,
)

from .models import FilterConfig, SavedView, SavedViewValidationError
from .ports import ResourceCatalogPort, SavedViewRepoPort, TimePort

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset({"view_name", "filter_config", "icon_name", "is_default"})


# --- Configuration ---


@dataclass(frozen=True)
class SavedViewConfig:
    """Saved view limits from rules."""

    max_name_length: int = 80
    max_views_per_resource: int = 50
    max_depth: int = DEFAULT_MAX_DEPTH


DEFAULT_CONFIG = SavedViewConfig()


class _UtcClock:
    def now_utc(self) -> datetime:
        return datetime.now(UTC)


# --- Validation Functions ---


def validate_view_name(
    name: str,
    config: SavedViewConfig = DEFAULT_CONFIG,
) -> list[SavedViewValidationError]:
    errors: list[SavedViewValidationError] = []
    stripped = (name or "").strip()
    if not stripped:
        errors.append(
            SavedViewValidationError(
                code="name_required",
                message="View name is required",
                field="view_name",
            )
        )
    elif len(stripped) > config.max_name_length:
        errors.append(
            SavedViewValidationError(
                code="name_too_long",
                message=f"View name must be at most {config.max_name_length} characters",
                field="view_name",
            )
        )
    return errors


def validate_resource_key(
    resource_key: str,
    catalog: ResourceCatalogPort | None,
) -> list[SavedViewValidationError]:
    if not resource_key:
        return [
            SavedViewValidationError(
                code="resource_required",
                message="Resource key is required",
                field="resource_key",
            )
        ]
    if catalog is not None and resource_key not in catalog.resource_keys():
        return [
            SavedViewValidationError(
                code="unknown_resource",
                message=f"Unknown resource: {resource_key}",
                field="resource_key",
            )
        ]
    return []


def parse_filter_config(
    raw: FilterConfig | dict[str, Any] | None,
    config: SavedViewConfig = DEFAULT_CONFIG,
) -> tuple[FilterConfig | None, list[SavedViewValidationError]]:
    """Accept a parsed config or a raw stored dict."""
    if isinstance(raw, FilterConfig):
        return raw, []
    try:
        return FilterConfig.from_dict(raw, max_depth=config.max_depth), []
    except FilterTreeError as e:
        return None, [
            SavedViewValidationError(
                code=f"filter_{err.code}",
                message=err.message,
                field=f"filter_config{(err.path or '$')[1:]}",
            )
            for err in e.errors
        ]


# --- Service ---


class SavedViewService:
    """Saved view management with validation."""

    def __init__(
        self,
        repo: SavedViewRepoPort,
        catalog: ResourceCatalogPort | None = None,
        time_port: TimePort | None = None,
        config: SavedViewConfig | None = None,
    ) -> None:
        self._repo = repo
        self._catalog = catalog
        self._time = time_port or _UtcClock()
        self._config = config or DEFAULT_CONFIG

    def _now(self) -> datetime:
        return self._time.now_utc()

    def create(
        self,
        resource_key: str,
        view_name: str,
        created_by: UUID,
        filter_config: FilterConfig | dict[str, Any] | None = None,
        is_default: bool = False,
        icon_name: str | None = None,
    ) -> tuple[SavedView | None, list[SavedViewValidationError]]:
        """Create a view. Returns (view, errors)."""
        errors = validate_resource_key(resource_key, self._catalog)
        errors.extend(validate_view_name(view_name, self._config))
        parsed, config_errors = parse_filter_config(filter_config, self._config)
        errors.extend(config_errors)

        existing = self._repo.list_by_owner(resource_key, created_by) if resource_key else []
        if len(existing) >= self._config.max_views_per_resource:
            errors.append(
                SavedViewValidationError(
                    code="too_many_views",
                    message=(
                        f"At most {self._config.max_views_per_resource} views "
                        f"per resource are allowed"
                    ),
                    field="resource_key",
                )
            )

        if errors:
            return None, errors

        assert parsed is not None
        now = self._now()
        view = SavedView(
            id=uuid4(),
            resource_key=resource_key,
            view_name=view_name.strip(),
            filter_config=parsed,
            is_default=False,
            created_by=created_by,
            created_at=now,
            updated_at=now,
            icon_name=icon_name,
        )
        self._repo.save(view)
        logger.info("Created saved view %s for %s", view.id, resource_key)

        if is_default:
            return self.set_default(view.id)
        return view, []

    def update(
        self,
        view_id: UUID,
        updates: dict[str, Any],
    ) -> tuple[SavedView | None, list[SavedViewValidationError]]:
        """Update name, filters, icon or default flag. Returns (view, errors)."""
        view = self._repo.get_by_id(view_id)
        if view is None:
            return None, [
                SavedViewValidationError(
                    code="not_found",
                    message=f"Saved view {view_id} not found",
                )
            ]

        errors: list[SavedViewValidationError] = []
        changes: dict[str, Any] = {}

        unknown = sorted(set(updates) - UPDATABLE_FIELDS)
        for key in unknown:
            errors.append(
                SavedViewValidationError(
                    code="field_not_updatable",
                    message=f"Field {key} cannot be updated",
                    field=key,
                )
            )

        if "view_name" in updates:
            errors.extend(validate_view_name(updates["view_name"], self._config))
            changes["view_name"] = (updates["view_name"] or "").strip()
        if "filter_config" in updates:
            parsed, config_errors = parse_filter_config(updates["filter_config"], self._config)
            errors.extend(config_errors)
            changes["filter_config"] = parsed
        if "icon_name" in updates:
            changes["icon_name"] = updates["icon_name"]

        if errors:
            return None, errors

        updated = replace(view, **changes, updated_at=self._now())
        self._repo.save(updated)

        if "is_default" in updates:
            if updates["is_default"]:
                return self.set_default(view_id)
            if updated.is_default:
                updated = replace(updated, is_default=False)
                self._repo.save(updated)

        return updated, []

    def delete(self, view_id: UUID) -> bool:
        """Delete a view. Returns False if it did not exist."""
        if self._repo.get_by_id(view_id) is None:
            return False
        self._repo.delete(view_id)
        logger.info("Deleted saved view %s", view_id)
        return True

    def get(self, view_id: UUID) -> SavedView | None:
        return self._repo.get_by_id(view_id)

    def list_for(self, resource_key: str, created_by: UUID) -> list[SavedView]:
        """Default view first, then newest first."""
        views = self._repo.list_by_owner(resource_key, created_by)
        return sorted(views, key=lambda v: (not v.is_default, -v.created_at.timestamp()))

    def get_default(self, resource_key: str, created_by: UUID) -> SavedView | None:
        for view in self._repo.list_by_owner(resource_key, created_by):
            if view.is_default:
                return view
        return None

    def set_default(
        self,
        view_id: UUID,
    ) -> tuple[SavedView | None, list[SavedViewValidationError]]:
        """Make a view the default, clearing the flag on its siblings."""
        view = self._repo.get_by_id(view_id)
        if view is None:
            return None, [
                SavedViewValidationError(
                    code="not_found",
                    message=f"Saved view {view_id} not found",
                )
            ]

        now = self._now()
        for sibling in self._repo.list_by_owner(view.resource_key, view.created_by):
            if sibling.is_default and sibling.id != view.id:
                self._repo.save(replace(sibling, is_default=False, updated_at=now))

        updated = replace(view, is_default=True, updated_at=now)
        self._repo.save(updated)
        return updated, []

    def reset_filters(
        self,
        view_id: UUID,
    ) -> tuple[SavedView | None, list[SavedViewValidationError]]:
        """Clear search and replace the tree with a fresh empty root."""
        view = self._repo.get_by_id(view_id)
        if view is None:
            return None, [
                SavedViewValidationError(
                    code="not_found",
                    message=f"Saved view {view_id} not found",
                )
            ]

        config = replace(
            view.filter_config,
            search_query="",
            filter_group=create_root_group(),
            advanced_filters=(),
        )
        updated = replace(view, filter_config=config, updated_at=self._now())
        self._repo.save(updated)
        return updated, []


# --- Filter state helpers ---


def load_filter_state(view: SavedView | None) -> tuple[str, FilterGroup]:
    """Search text and editable root tree of a view (empty when None)."""
    if view is None:
        return "", create_root_group()
    return view.filter_config.search_query, view.filter_config.root_group()


def saved_signature(view: SavedView | None) -> str:
    if view is None:
        return get_filter_group_signature(None)
    config = view.filter_config
    if config.filter_group is None and not config.advanced_filters:
        return get_filter_group_signature(None)
    return get_filter_group_signature(config.root_group())


def is_view_modified(
    view: SavedView | None,
    current_group: FilterGroup | None,
    search_query: str = "",
) -> bool:
    """True when the current filters or search differ from the view."""
    saved_query = view.filter_config.search_query if view is not None else ""
    if (search_query or "").strip() != (saved_query or "").strip():
        return True
    return get_filter_group_signature(current_group) != saved_signature(view)
