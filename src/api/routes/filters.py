"""
Filter tree API routes.

Stateless endpoints: the client sends its current tree with every request
and receives the new tree plus derived values. Trees arriving over HTTP are
validated like stored ones before the engine sees them.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from src.api.deps import get_field_catalog, get_rules
from src.api.schemas import (
    FieldListResponse,
    FieldResponse,
    TreeOperation,
    TreeSummaryResponse,
    ValidationErrorResponse,
)
from src.components.catalog import FieldCatalog, ListFieldsInput, run_list_fields
from src.components.filters import (
    AddFilterInput,
    AddGroupInput,
    FilterGroup,
    FilterTreeError,
    FilterTreeOutput,
    FilterValidationError,
    RemoveFilterInput,
    RemoveGroupInput,
    UpdateFilterInput,
    UpdateGroupInput,
    apply_filter_tree,
    describe_tree,
    filter_to_dict,
    group_from_dict,
    group_to_dict,
    is_filter_group,
    run,
)
from src.rules.models import Rules

router = APIRouter()


class TreeRequest(BaseModel):
    """A filter tree in its stored JSON shape."""

    tree: dict[str, Any] = Field(..., description="Root group")


class MutateRequest(BaseModel):
    """One tree operation."""

    tree: dict[str, Any] = Field(..., description="Current root group")
    operation: TreeOperation
    target_group_id: str | None = Field(None, description="Group to add into (root if omitted)")
    filter: dict[str, Any] | None = Field(None, description="Filter for add/update_filter")
    group: dict[str, Any] | None = Field(None, description="Group for add_group")
    filter_id: str | None = None
    group_id: str | None = None
    updates: dict[str, Any] | None = Field(None, description="operator/not/children")


class EvaluateRequest(BaseModel):
    """Tree plus records to test against it."""

    tree: dict[str, Any]
    records: list[dict[str, Any]]


class EvaluateResponse(BaseModel):
    matches: list[int]
    count: int


# --- Helper Functions ---


def _serialize_errors(errors: list[FilterValidationError]) -> list[dict[str, Any]]:
    return [{"code": e.code, "message": e.message, "path": e.path} for e in errors]


def _bad_request(errors: list[FilterValidationError]) -> HTTPException:
    return HTTPException(status_code=400, detail={"errors": _serialize_errors(errors)})


def _missing(name: str) -> HTTPException:
    return _bad_request(
        [FilterValidationError(code="missing_argument", message=f"{name} is required")]
    )


def _parse_tree(data: dict[str, Any], rules: Rules) -> FilterGroup:
    try:
        return group_from_dict(data, max_depth=rules.filters.max_depth)
    except FilterTreeError as e:
        raise _bad_request(e.errors) from e


def _parse_children(items: list[Any], rules: Rules) -> list[Any]:
    return list(_parse_tree({"operator": "and", "children": items}, rules).children)


def _to_response(output: FilterTreeOutput) -> TreeSummaryResponse:
    return TreeSummaryResponse(
        tree=group_to_dict(output.root),
        changed=output.changed,
        signature=output.signature,
        is_advanced=output.is_advanced,
        leaf_count=len(output.filters),
        filters=[filter_to_dict(f) for f in output.filters],
    )


# --- Routes ---


@router.get("/fields/{resource_key}", response_model=FieldListResponse)
def list_fields(
    resource_key: str,
    include_related: bool = True,
    catalog: FieldCatalog = Depends(get_field_catalog),
) -> FieldListResponse:
    """Fields a resource screen can filter on."""
    result = run_list_fields(
        ListFieldsInput(resource_key=resource_key, include_related=include_related),
        catalog=catalog,
    )
    if not result.success:
        raise HTTPException(status_code=404, detail=result.errors[0].message)

    return FieldListResponse(
        resource_key=resource_key,
        fields=[
            FieldResponse(
                id=f.id,
                label=f.label,
                type=f.value_type,
                operators=list(f.allowed_operators),
                options=list(f.options),
                related_entity=f.related_entity,
                related_entity_label=f.related_entity_label,
            )
            for f in result.fields
        ],
    )


@router.post(
    "/describe",
    response_model=TreeSummaryResponse,
    responses={400: {"model": ValidationErrorResponse}},
)
def describe(
    request: TreeRequest,
    rules: Rules = Depends(get_rules),
) -> TreeSummaryResponse:
    """Signature, flat chips and advanced flag of a tree."""
    return _to_response(describe_tree(_parse_tree(request.tree, rules)))


@router.post(
    "/mutate",
    response_model=TreeSummaryResponse,
    responses={400: {"model": ValidationErrorResponse}},
)
def mutate(
    request: MutateRequest,
    rules: Rules = Depends(get_rules),
) -> TreeSummaryResponse:
    """Apply one operation and return the new tree."""
    root = _parse_tree(request.tree, rules)
    op = request.operation
    inp: Any

    if op in ("add_filter", "update_filter"):
        if request.filter is None:
            raise _missing("filter")
        (new_filter,) = _parse_children([request.filter], rules)
        if is_filter_group(new_filter):
            raise _bad_request(
                [FilterValidationError(code="not_a_filter", message="filter must be a leaf")]
            )
        if op == "add_filter":
            inp = AddFilterInput(root=root, filter=new_filter, target_group_id=request.target_group_id)
        else:
            inp = UpdateFilterInput(root=root, filter=new_filter)
    elif op == "remove_filter":
        if request.filter_id is None:
            raise _missing("filter_id")
        inp = RemoveFilterInput(root=root, filter_id=request.filter_id)
    elif op == "add_group":
        if request.group is None:
            raise _missing("group")
        inp = AddGroupInput(
            root=root,
            group=_parse_tree(request.group, rules),
            target_group_id=request.target_group_id,
        )
    elif op == "remove_group":
        if request.group_id is None:
            raise _missing("group_id")
        inp = RemoveGroupInput(root=root, group_id=request.group_id)
    else:
        if request.group_id is None:
            raise _missing("group_id")
        updates = dict(request.updates or {})
        if isinstance(updates.get("children"), list):
            updates["children"] = _parse_children(updates["children"], rules)
        inp = UpdateGroupInput(root=root, group_id=request.group_id, updates=updates)

    return _to_response(run(inp, max_depth=rules.filters.max_depth))


@router.post(
    "/evaluate",
    response_model=EvaluateResponse,
    responses={400: {"model": ValidationErrorResponse}},
)
def evaluate(
    request: EvaluateRequest,
    rules: Rules = Depends(get_rules),
) -> EvaluateResponse:
    """Indexes of the records the tree matches."""
    root = _parse_tree(request.tree, rules)
    indexed = list(enumerate(request.records))
    matched = apply_filter_tree(indexed, root, get_value=lambda row, field_id: row[1].get(field_id))
    matches = [index for index, _ in matched]
    return EvaluateResponse(matches=matches, count=len(matches))
