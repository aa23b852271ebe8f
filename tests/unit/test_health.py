"""
Tests for the application wiring: health endpoint, routers and startup.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from src.api import deps

ROOT_DIR = Path(__file__).resolve().parents[2]


@pytest.fixture
def client(tmp_path, monkeypatch) -> Iterator[TestClient]:
    """App with its startup run against a temporary data directory."""
    monkeypatch.setenv("CRM_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("CRM_RULES_PATH", str(ROOT_DIR / "rules.yaml"))
    monkeypatch.chdir(ROOT_DIR)
    deps.get_settings.cache_clear()
    deps.get_rules.cache_clear()

    from src.api.main import app

    with TestClient(app) as test_client:
        yield test_client

    deps.get_settings.cache_clear()
    deps.get_rules.cache_clear()


class TestApp:
    """Tests for the assembled application."""

    def test_health(self, client: TestClient) -> None:
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "service": "api"}

    def test_startup_creates_database(self, client: TestClient, tmp_path) -> None:
        assert (tmp_path / "data" / "crm.db").exists()

    def test_routers_are_mounted(self, client: TestClient) -> None:
        assert client.get("/api/filters/fields/leads").status_code == 200

        headers = {"X-User-Id": str(uuid4())}
        response = client.post(
            "/api/views",
            json={"resource_key": "leads", "view_name": "All leads"},
            headers=headers,
        )
        assert response.status_code == 201

        response = client.get("/api/views", params={"resource_key": "leads"}, headers=headers)
        assert response.json()["count"] == 1
