"""
Catalog component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from src.components.filters.models import (
    DEFAULT_OPERATORS,
    FilterOperator,
    ValueType,
)

# --- Field Descriptor ---


@dataclass(frozen=True)
class FieldDescriptor:
    """A filterable field offered by a resource screen."""

    id: str
    label: str
    value_type: ValueType
    operators: tuple[FilterOperator, ...] = ()
    options: tuple[str, ...] = ()
    related_entity: str | None = None
    related_entity_label: str | None = None
    filter_key: str | None = None

    @property
    def allowed_operators(self) -> tuple[FilterOperator, ...]:
        """Declared operators, or the defaults for the value type."""
        return self.operators or DEFAULT_OPERATORS[self.value_type]

    @property
    def is_related(self) -> bool:
        return self.related_entity is not None


# --- Validation Error ---


@dataclass(frozen=True)
class CatalogValidationError:
    """Filter does not fit the field it references."""

    code: str
    message: str
    field: str | None = None


# --- Input Models ---


@dataclass(frozen=True)
class ListFieldsInput:
    """Input for listing the fields of a resource."""

    resource_key: str
    include_related: bool = True


# --- Output Models ---


@dataclass(frozen=True)
class FieldListOutput:
    """Fields available on a resource."""

    resource_key: str
    fields: tuple[FieldDescriptor, ...]
    errors: list[CatalogValidationError] = field(default_factory=list)
    success: bool = True
