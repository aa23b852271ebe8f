"""Saved view routes: per-user named filter configurations."""

from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, Field

from src.api.deps import get_current_user_id, get_rules, get_saved_view_service
from src.api.schemas import (
    ModifiedResponse,
    SavedViewListResponse,
    SavedViewResponse,
    ValidationErrorResponse,
)
from src.components.filters import FilterTreeError, get_filter_group_signature, group_from_dict
from src.components.saved_views import (
    SavedView,
    SavedViewService,
    SavedViewValidationError,
    is_view_modified,
    saved_signature,
)
from src.rules.models import Rules

router = APIRouter()


# --- Request Models ---


class CreateViewRequest(BaseModel):
    resource_key: str
    view_name: str
    filter_config: dict[str, Any] = Field(default_factory=dict)
    is_default: bool = False
    icon_name: str | None = None


class UpdateViewRequest(BaseModel):
    view_name: str | None = None
    filter_config: dict[str, Any] | None = None
    is_default: bool | None = None
    icon_name: str | None = None


class CheckModifiedRequest(BaseModel):
    filter_group: dict[str, Any] | None = Field(None, description="Current root group")
    search_query: str = ""


# --- Helper Functions ---


def _to_response(view: SavedView) -> SavedViewResponse:
    return SavedViewResponse(
        id=str(view.id),
        resource_key=view.resource_key,
        view_name=view.view_name,
        filter_config=view.filter_config.to_dict(),
        icon_name=view.icon_name,
        is_default=view.is_default,
        created_by=str(view.created_by),
        created_at=view.created_at.isoformat(),
        updated_at=view.updated_at.isoformat(),
    )


def _bad_request(errors: list[SavedViewValidationError]) -> HTTPException:
    return HTTPException(
        status_code=400,
        detail={
            "errors": [
                {"code": err.code, "message": err.message, "field": err.field}
                for err in errors
            ]
        },
    )


def _owned_view(service: SavedViewService, view_id: UUID, user_id: UUID) -> SavedView:
    """Views of other users are reported as missing."""
    view = service.get(view_id)
    if view is None or view.created_by != user_id:
        raise HTTPException(status_code=404, detail="Saved view not found")
    return view


# --- Routes ---


@router.get("", response_model=SavedViewListResponse)
def list_views(
    resource_key: str,
    user_id: UUID = Depends(get_current_user_id),
    service: SavedViewService = Depends(get_saved_view_service),
) -> SavedViewListResponse:
    """List the caller's views of one resource, default first."""
    views = service.list_for(resource_key, user_id)
    return SavedViewListResponse(views=[_to_response(v) for v in views], count=len(views))


@router.post(
    "",
    response_model=SavedViewResponse,
    status_code=201,
    responses={400: {"model": ValidationErrorResponse}},
)
def create_view(
    data: CreateViewRequest,
    user_id: UUID = Depends(get_current_user_id),
    service: SavedViewService = Depends(get_saved_view_service),
) -> SavedViewResponse:
    """Save the current filters as a new view."""
    view, errors = service.create(
        resource_key=data.resource_key,
        view_name=data.view_name,
        created_by=user_id,
        filter_config=data.filter_config,
        is_default=data.is_default,
        icon_name=data.icon_name,
    )
    if errors:
        raise _bad_request(errors)

    assert view is not None
    return _to_response(view)


@router.get("/{view_id}", response_model=SavedViewResponse)
def get_view(
    view_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    service: SavedViewService = Depends(get_saved_view_service),
) -> SavedViewResponse:
    """Get a view by ID."""
    return _to_response(_owned_view(service, view_id, user_id))


@router.put(
    "/{view_id}",
    response_model=SavedViewResponse,
    responses={400: {"model": ValidationErrorResponse}},
)
def update_view(
    view_id: UUID,
    data: UpdateViewRequest,
    user_id: UUID = Depends(get_current_user_id),
    service: SavedViewService = Depends(get_saved_view_service),
) -> SavedViewResponse:
    """Update name, filters, icon or default flag."""
    _owned_view(service, view_id, user_id)

    view, errors = service.update(view_id, data.model_dump(exclude_unset=True))
    if errors:
        raise _bad_request(errors)

    assert view is not None
    return _to_response(view)


@router.delete("/{view_id}", status_code=204)
def delete_view(
    view_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    service: SavedViewService = Depends(get_saved_view_service),
) -> Response:
    """Delete a view."""
    _owned_view(service, view_id, user_id)
    service.delete(view_id)
    return Response(status_code=204)


@router.post("/{view_id}/default", response_model=SavedViewResponse)
def make_default(
    view_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    service: SavedViewService = Depends(get_saved_view_service),
) -> SavedViewResponse:
    """Make a view the caller's default for its resource."""
    _owned_view(service, view_id, user_id)
    view, errors = service.set_default(view_id)
    if errors:
        raise _bad_request(errors)

    assert view is not None
    return _to_response(view)


@router.post("/{view_id}/reset", response_model=SavedViewResponse)
def reset_view(
    view_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    service: SavedViewService = Depends(get_saved_view_service),
) -> SavedViewResponse:
    """Clear the search text and filter tree of a view."""
    _owned_view(service, view_id, user_id)
    view, errors = service.reset_filters(view_id)
    if errors:
        raise _bad_request(errors)

    assert view is not None
    return _to_response(view)


@router.post(
    "/{view_id}/modified",
    response_model=ModifiedResponse,
    responses={400: {"model": ValidationErrorResponse}},
)
def check_modified(
    view_id: UUID,
    data: CheckModifiedRequest,
    user_id: UUID = Depends(get_current_user_id),
    service: SavedViewService = Depends(get_saved_view_service),
    rules: Rules = Depends(get_rules),
) -> ModifiedResponse:
    """Whether the caller's current filters differ from the saved view."""
    view = _owned_view(service, view_id, user_id)

    current = None
    if data.filter_group is not None:
        try:
            current = group_from_dict(data.filter_group, max_depth=rules.filters.max_depth)
        except FilterTreeError as e:
            raise HTTPException(
                status_code=400,
                detail={
                    "errors": [
                        {"code": err.code, "message": err.message, "path": err.path}
                        for err in e.errors
                    ]
                },
            ) from e

    return ModifiedResponse(
        is_modified=is_view_modified(view, current, data.search_query),
        current_signature=get_filter_group_signature(current),
        saved_signature=saved_signature(view),
    )
