import os
from functools import lru_cache
from pathlib import Path
from uuid import UUID

from fastapi import Depends, Header, HTTPException, status

from src.adapters.clock import SystemClock
from src.adapters.sqlite.repos import SQLiteSavedViewRepo
from src.components.catalog import FieldCatalog, catalog_from_rules
from src.components.saved_views import SavedViewConfig, SavedViewService
from src.rules.loader import load_rules
from src.rules.models import Rules


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.data_dir = Path(os.environ.get("CRM_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "crm.db")
        self.rules_path = Path(os.environ.get("CRM_RULES_PATH", self.base_dir / "rules.yaml"))
        self.migrations_dir = str(self.base_dir / "migrations")


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def get_rules() -> Rules:
    return load_rules(get_settings().rules_path)


def get_field_catalog(rules: Rules = Depends(get_rules)) -> FieldCatalog:
    return catalog_from_rules(rules)


# --- Identity ---
def get_current_user_id(x_user_id: str | None = Header(default=None)) -> UUID:
    """Caller identity forwarded by the gateway in ``X-User-Id``."""
    if not x_user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing X-User-Id")
    try:
        return UUID(x_user_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid X-User-Id"
        ) from None


# --- Repos ---
def get_saved_view_repo(
    settings: Settings = Depends(get_settings),
    rules: Rules = Depends(get_rules),
) -> SQLiteSavedViewRepo:
    return SQLiteSavedViewRepo(settings.db_path, max_depth=rules.filters.max_depth)


# --- Services ---
def get_saved_view_service(
    repo: SQLiteSavedViewRepo = Depends(get_saved_view_repo),
    catalog: FieldCatalog = Depends(get_field_catalog),
    rules: Rules = Depends(get_rules),
) -> SavedViewService:
    return SavedViewService(
        repo=repo,
        catalog=catalog,
        time_port=SystemClock(),
        config=SavedViewConfig(
            max_name_length=rules.saved_views.max_name_length,
            max_views_per_resource=rules.saved_views.max_views_per_resource,
            max_depth=rules.filters.max_depth,
        ),
    )
