"""
Catalog component - filterable fields per resource.
"""

from ._impl import (
    FieldCatalog,
    catalog_from_rules,
    create_filter,
    extract_filter_options,
    field_from_column,
    infer_value_type,
    validate_filter_for_field,
)
from .component import run, run_list_fields
from .models import (
    CatalogValidationError,
    FieldDescriptor,
    FieldListOutput,
    ListFieldsInput,
)
from .ports import FieldCatalogPort

__all__ = [
    # Entry points
    "run",
    "run_list_fields",
    # Models
    "CatalogValidationError",
    "FieldDescriptor",
    "FieldListOutput",
    "ListFieldsInput",
    # Ports
    "FieldCatalogPort",
    # _impl re-exports
    "FieldCatalog",
    "catalog_from_rules",
    "create_filter",
    "extract_filter_options",
    "field_from_column",
    "infer_value_type",
    "validate_filter_for_field",
]
