"""
Saved views component - named filter configurations.

Handles view CRUD, the per-user default view, and dirty checking of the
current filter tree against a saved baseline.

Invariants:
- I1: At most one default view per resource and user
- I2: advancedFilters always equals the flattened filterGroup
- I3: Stored trees are validated before they are trusted
"""

from __future__ import annotations

from src.components.filters import get_filter_group_signature

from ._impl import (
    SavedViewConfig,
    SavedViewService,
    is_view_modified,
    saved_signature,
)
from .models import (
    CheckModifiedInput,
    CreateViewInput,
    DeleteViewInput,
    GetViewInput,
    ListViewsInput,
    ModifiedOutput,
    SavedViewValidationError,
    UpdateViewInput,
    ViewListOutput,
    ViewOutput,
)
from .ports import ResourceCatalogPort, SavedViewRepoPort, TimePort


def _create_service(
    repo: SavedViewRepoPort,
    catalog: ResourceCatalogPort | None,
    time_port: TimePort | None,
    config: SavedViewConfig | None,
) -> SavedViewService:
    return SavedViewService(repo=repo, catalog=catalog, time_port=time_port, config=config)


def _not_found(view_id: object) -> list[SavedViewValidationError]:
    return [
        SavedViewValidationError(
            code="not_found",
            message=f"Saved view {view_id} not found",
        )
    ]


# --- Component Entry Points ---


def run_create(
    inp: CreateViewInput,
    *,
    repo: SavedViewRepoPort,
    catalog: ResourceCatalogPort | None = None,
    time_port: TimePort | None = None,
    config: SavedViewConfig | None = None,
) -> ViewOutput:
    """
    Save a new view.

    Args:
        inp: Input containing resource, name, owner and filter config.
        repo: Saved view repository port.
        catalog: Optional catalog port used to reject unknown resources.
        time_port: Optional time provider.
        config: Optional limits.

    Returns:
        ViewOutput with the created view or errors.
    """
    service = _create_service(repo, catalog, time_port, config)
    view, errors = service.create(
        resource_key=inp.resource_key,
        view_name=inp.view_name,
        created_by=inp.created_by,
        filter_config=inp.filter_config,
        is_default=inp.is_default,
        icon_name=inp.icon_name,
    )
    return ViewOutput(view=view, errors=errors, success=len(errors) == 0)


def run_update(
    inp: UpdateViewInput,
    *,
    repo: SavedViewRepoPort,
    catalog: ResourceCatalogPort | None = None,
    time_port: TimePort | None = None,
    config: SavedViewConfig | None = None,
) -> ViewOutput:
    """Update an existing view."""
    service = _create_service(repo, catalog, time_port, config)
    view, errors = service.update(inp.view_id, inp.updates)
    return ViewOutput(view=view, errors=errors, success=len(errors) == 0)


def run_delete(
    inp: DeleteViewInput,
    *,
    repo: SavedViewRepoPort,
    catalog: ResourceCatalogPort | None = None,
    time_port: TimePort | None = None,
    config: SavedViewConfig | None = None,
) -> ViewOutput:
    """Delete a view."""
    service = _create_service(repo, catalog, time_port, config)
    if not service.delete(inp.view_id):
        return ViewOutput(view=None, errors=_not_found(inp.view_id), success=False)
    return ViewOutput(view=None, errors=[], success=True)


def run_get(
    inp: GetViewInput,
    *,
    repo: SavedViewRepoPort,
    catalog: ResourceCatalogPort | None = None,
    time_port: TimePort | None = None,
    config: SavedViewConfig | None = None,
) -> ViewOutput:
    """Get a view by ID."""
    service = _create_service(repo, catalog, time_port, config)
    view = service.get(inp.view_id)
    if view is None:
        return ViewOutput(view=None, errors=_not_found(inp.view_id), success=False)
    return ViewOutput(view=view, errors=[], success=True)


def run_list(
    inp: ListViewsInput,
    *,
    repo: SavedViewRepoPort,
    catalog: ResourceCatalogPort | None = None,
    time_port: TimePort | None = None,
    config: SavedViewConfig | None = None,
) -> ViewListOutput:
    """List a user's views of a resource, default first."""
    service = _create_service(repo, catalog, time_port, config)
    views = service.list_for(inp.resource_key, inp.created_by)
    return ViewListOutput(views=tuple(views), errors=[], success=True)


def run_check_modified(
    inp: CheckModifiedInput,
    *,
    repo: SavedViewRepoPort,
    catalog: ResourceCatalogPort | None = None,
    time_port: TimePort | None = None,
    config: SavedViewConfig | None = None,
) -> ModifiedOutput:
    """
    Compare the current filters with a saved view.

    A missing view_id compares against an empty baseline, which is what the
    table shows when no view is selected.
    """
    view = None
    if inp.view_id is not None:
        view = _create_service(repo, catalog, time_port, config).get(inp.view_id)
        if view is None:
            return ModifiedOutput(
                is_modified=False,
                current_signature=get_filter_group_signature(inp.current_group),
                saved_signature="",
                errors=_not_found(inp.view_id),
                success=False,
            )

    return ModifiedOutput(
        is_modified=is_view_modified(view, inp.current_group, inp.search_query),
        current_signature=get_filter_group_signature(inp.current_group),
        saved_signature=saved_signature(view),
    )


def run(
    inp: (
        CreateViewInput
        | UpdateViewInput
        | DeleteViewInput
        | GetViewInput
        | ListViewsInput
        | CheckModifiedInput
    ),
    *,
    repo: SavedViewRepoPort,
    catalog: ResourceCatalogPort | None = None,
    time_port: TimePort | None = None,
    config: SavedViewConfig | None = None,
) -> ViewOutput | ViewListOutput | ModifiedOutput:
    """
    Main entry point for the saved views component.

    Dispatches to appropriate handler based on input type.
    """
    kwargs = {"repo": repo, "catalog": catalog, "time_port": time_port, "config": config}
    if isinstance(inp, CreateViewInput):
        return run_create(inp, **kwargs)  # type: ignore[arg-type]
    elif isinstance(inp, UpdateViewInput):
        return run_update(inp, **kwargs)  # type: ignore[arg-type]
    elif isinstance(inp, DeleteViewInput):
        return run_delete(inp, **kwargs)  # type: ignore[arg-type]
    elif isinstance(inp, GetViewInput):
        return run_get(inp, **kwargs)  # type: ignore[arg-type]
    elif isinstance(inp, ListViewsInput):
        return run_list(inp, **kwargs)  # type: ignore[arg-type]
    elif isinstance(inp, CheckModifiedInput):
        return run_check_modified(inp, **kwargs)  # type: ignore[arg-type]
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
