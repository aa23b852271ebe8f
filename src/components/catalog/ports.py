"""
Catalog component port definitions.
"""

from __future__ import annotations

from typing import Protocol

from .models import FieldDescriptor


class FieldCatalogPort(Protocol):
    """Read-only source of field descriptors per resource."""

    def resource_keys(self) -> list[str]:
        """Resources that have a catalog."""
        ...

    def fields_for(self, resource_key: str) -> list[FieldDescriptor]:
        """Fields of a resource, in display order. Empty if unknown."""
        ...
