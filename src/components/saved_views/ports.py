"""
Saved views component port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from .models import SavedView


class SavedViewRepoPort(Protocol):
    """Repository interface for saved views."""

    def get_by_id(self, view_id: UUID) -> SavedView | None:
        """Get view by ID."""
        ...

    def save(self, view: SavedView) -> SavedView:
        """Save or update view."""
        ...

    def delete(self, view_id: UUID) -> None:
        """Delete view."""
        ...

    def list_by_owner(self, resource_key: str, created_by: UUID) -> list[SavedView]:
        """List a user's views of one resource."""
        ...


class TimePort(Protocol):
    """Time provider interface."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...


class ResourceCatalogPort(Protocol):
    """Known resource screens."""

    def resource_keys(self) -> list[str]:
        """Resources that have a field catalog."""
        ...
