"""
Catalog component - filterable fields per resource.
"""

from __future__ import annotations

from .models import CatalogValidationError, FieldListOutput, ListFieldsInput
from .ports import FieldCatalogPort


def run_list_fields(
    inp: ListFieldsInput,
    *,
    catalog: FieldCatalogPort,
) -> FieldListOutput:
    """
    List the fields a resource screen can filter on.

    Args:
        inp: Input containing the resource key.
        catalog: Field catalog port.

    Returns:
        FieldListOutput with fields, or a not_found error.
    """
    if inp.resource_key not in catalog.resource_keys():
        return FieldListOutput(
            resource_key=inp.resource_key,
            fields=(),
            errors=[
                CatalogValidationError(
                    code="not_found",
                    message=f"No field catalog for resource {inp.resource_key}",
                    field="resource_key",
                )
            ],
            success=False,
        )

    fields = catalog.fields_for(inp.resource_key)
    if not inp.include_related:
        fields = [f for f in fields if not f.is_related]

    return FieldListOutput(resource_key=inp.resource_key, fields=tuple(fields))


def run(inp: ListFieldsInput, *, catalog: FieldCatalogPort) -> FieldListOutput:
    """Main entry point for the catalog component."""
    if isinstance(inp, ListFieldsInput):
        return run_list_fields(inp, catalog=catalog)
    raise ValueError(f"Unknown input type: {type(inp)}")
