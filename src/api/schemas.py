from typing import Any, Literal

from pydantic import BaseModel, Field

# --- Shared Enums/Types ---
ValueType = Literal["select", "multiselect", "date", "number", "text"]
TreeOperation = Literal[
    "add_filter",
    "update_filter",
    "remove_filter",
    "add_group",
    "remove_group",
    "update_group",
]


# --- Errors ---
class ValidationErrorResponse(BaseModel):
    """Validation error response."""

    errors: list[dict[str, Any]]


# --- Filter trees ---
class TreeSummaryResponse(BaseModel):
    """A tree with the values derived from it."""

    tree: dict[str, Any]
    changed: bool = False
    signature: str
    is_advanced: bool
    leaf_count: int
    filters: list[dict[str, Any]]


class FieldResponse(BaseModel):
    id: str
    label: str
    type: ValueType
    operators: list[str]
    options: list[str] = Field(default_factory=list)
    related_entity: str | None = None
    related_entity_label: str | None = None


class FieldListResponse(BaseModel):
    resource_key: str
    fields: list[FieldResponse]


# --- Saved views ---
class SavedViewResponse(BaseModel):
    id: str
    resource_key: str
    view_name: str
    filter_config: dict[str, Any]
    icon_name: str | None = None
    is_default: bool
    created_by: str
    created_at: str
    updated_at: str


class SavedViewListResponse(BaseModel):
    views: list[SavedViewResponse]
    count: int


class ModifiedResponse(BaseModel):
    is_modified: bool
    current_signature: str
    saved_signature: str
