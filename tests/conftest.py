from pathlib import Path

import pytest

from src.adapters.sqlite.migrator import SQLiteMigrator
from src.components.catalog import FieldCatalog, catalog_from_rules
from src.rules.loader import load_rules
from src.rules.models import Rules

ROOT_DIR = Path(__file__).resolve().parent.parent


@pytest.fixture
def rules() -> Rules:
    """REAL rules from the project root."""
    rules_path = ROOT_DIR / "rules.yaml"
    if not rules_path.exists():
        raise FileNotFoundError(f"Rules not found at {rules_path}")
    return load_rules(rules_path)


@pytest.fixture
def catalog(rules: Rules) -> FieldCatalog:
    return catalog_from_rules(rules)


@pytest.fixture
def db_path(tmp_path) -> str:
    """Temporary SQLite DB with all migrations applied."""
    path = str(tmp_path / "crm.db")
    SQLiteMigrator(path, str(ROOT_DIR / "migrations")).run_migrations()
    return path
