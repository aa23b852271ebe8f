"""
Tests for the filter tree API endpoints.

Tests the HTTP layer: request parsing, validation errors and responses.
"""

from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.api.deps import get_rules
from src.api.routes import filters
from src.rules.models import Rules


@pytest.fixture
def client(rules: Rules) -> TestClient:
    app = FastAPI()
    app.include_router(filters.router, prefix="/api/filters")
    app.dependency_overrides[get_rules] = lambda: rules
    return TestClient(app)


def status_filter(filter_id: str = "f1") -> dict:
    return {
        "id": filter_id,
        "fieldId": "status",
        "fieldLabel": "Status",
        "operator": "is",
        "values": ["active"],
        "type": "multiselect",
    }


EMPTY_ROOT = {"id": "root", "operator": "and", "not": False, "children": []}


class TestFields:
    """GET /fields/{resource_key}"""

    def test_list_fields(self, client: TestClient) -> None:
        response = client.get("/api/filters/fields/leads")

        assert response.status_code == 200
        data = response.json()
        assert data["resource_key"] == "leads"
        status = next(f for f in data["fields"] if f["id"] == "status")
        assert status["type"] == "multiselect"
        assert status["operators"] == ["is", "isNot"]

    def test_exclude_related(self, client: TestClient) -> None:
        response = client.get("/api/filters/fields/leads", params={"include_related": "false"})
        ids = [f["id"] for f in response.json()["fields"]]
        assert "subscription.months" not in ids

    def test_unknown_resource(self, client: TestClient) -> None:
        assert client.get("/api/filters/fields/invoices").status_code == 404


class TestDescribe:
    """POST /describe"""

    def test_describe(self, client: TestClient) -> None:
        tree = {**EMPTY_ROOT, "children": [status_filter()]}
        response = client.post("/api/filters/describe", json={"tree": tree})

        assert response.status_code == 200
        data = response.json()
        assert data["leaf_count"] == 1
        assert data["is_advanced"] is False
        assert data["changed"] is False
        assert data["filters"][0]["id"] == "f1"
        assert data["tree"] == tree

    def test_invalid_tree(self, client: TestClient) -> None:
        tree = {**EMPTY_ROOT, "children": [{**status_filter(), "operator": "between"}]}
        response = client.post("/api/filters/describe", json={"tree": tree})

        assert response.status_code == 400
        errors = response.json()["detail"]["errors"]
        assert errors[0]["code"] == "range_requires_two_values"
        assert errors[0]["path"] == "$.children[0]"


class TestMutate:
    """POST /mutate"""

    def test_nested_mutation(self, client: TestClient) -> None:
        """Add a group, then a filter into it."""
        response = client.post(
            "/api/filters/mutate",
            json={
                "tree": EMPTY_ROOT,
                "operation": "add_group",
                "target_group_id": "root",
                "group": {"id": "g1", "operator": "or", "children": []},
            },
        )
        assert response.status_code == 200
        tree = response.json()["tree"]

        response = client.post(
            "/api/filters/mutate",
            json={
                "tree": tree,
                "operation": "add_filter",
                "target_group_id": "g1",
                "filter": status_filter(),
            },
        )
        data = response.json()

        assert response.status_code == 200
        assert data["changed"] is True
        assert data["is_advanced"] is True
        assert data["tree"]["children"][0]["id"] == "g1"
        assert data["tree"]["children"][0]["children"][0]["id"] == "f1"

    def test_unknown_target_is_unchanged(self, client: TestClient) -> None:
        response = client.post(
            "/api/filters/mutate",
            json={"tree": EMPTY_ROOT, "operation": "remove_filter", "filter_id": "nope"},
        )

        assert response.status_code == 200
        assert response.json()["changed"] is False

    def test_update_group(self, client: TestClient) -> None:
        tree = {**EMPTY_ROOT, "children": [status_filter()]}
        response = client.post(
            "/api/filters/mutate",
            json={
                "tree": tree,
                "operation": "update_group",
                "group_id": "root",
                "updates": {"not": True},
            },
        )

        assert response.json()["tree"]["not"] is True

    def test_update_group_children_too_deep(self, client: TestClient) -> None:
        chain: dict = {"id": "c7", "operator": "and", "not": False, "children": []}
        for level in range(6, -1, -1):
            chain = {"id": f"c{level}", "operator": "and", "not": False, "children": [chain]}
        g1 = {"id": "g1", "operator": "or", "not": False, "children": []}
        tree = {**EMPTY_ROOT, "children": [g1]}

        response = client.post(
            "/api/filters/mutate",
            json={
                "tree": tree,
                "operation": "update_group",
                "group_id": "g1",
                "updates": {"children": [chain]},
            },
        )

        assert response.status_code == 200
        assert response.json()["changed"] is False
        returned = response.json()["tree"]
        assert client.post("/api/filters/describe", json={"tree": returned}).status_code == 200

    def test_missing_argument(self, client: TestClient) -> None:
        response = client.post(
            "/api/filters/mutate", json={"tree": EMPTY_ROOT, "operation": "remove_group"}
        )

        assert response.status_code == 400
        assert response.json()["detail"]["errors"][0]["code"] == "missing_argument"

    def test_group_passed_as_filter(self, client: TestClient) -> None:
        response = client.post(
            "/api/filters/mutate",
            json={"tree": EMPTY_ROOT, "operation": "add_filter", "filter": EMPTY_ROOT},
        )

        assert response.status_code == 400
        assert response.json()["detail"]["errors"][0]["code"] == "not_a_filter"

    def test_unknown_operation(self, client: TestClient) -> None:
        response = client.post(
            "/api/filters/mutate", json={"tree": EMPTY_ROOT, "operation": "explode"}
        )
        assert response.status_code == 422


class TestEvaluate:
    """POST /evaluate"""

    def test_matches(self, client: TestClient) -> None:
        tree = {
            "id": "root",
            "operator": "or",
            "not": True,
            "children": [
                {"id": "a", "fieldId": "city", "operator": "is", "values": ["Tel Aviv"],
                 "type": "select"},
                {"id": "b", "fieldId": "city", "operator": "is", "values": ["Haifa"],
                 "type": "select"},
            ],
        }
        records = [{"city": "Jerusalem"}, {"city": "Haifa"}, {"city": "Eilat"}]

        response = client.post("/api/filters/evaluate", json={"tree": tree, "records": records})

        assert response.status_code == 200
        assert response.json() == {"matches": [0, 2], "count": 2}

    def test_huge_integer_record(self, client: TestClient) -> None:
        tree = {
            "id": "root",
            "operator": "and",
            "not": False,
            "children": [
                {"id": "a", "fieldId": "age", "operator": "greaterThan", "values": ["30"],
                 "type": "number"},
            ],
        }
        records = [{"age": 10**400}, {"age": 12}]

        response = client.post("/api/filters/evaluate", json={"tree": tree, "records": records})

        assert response.status_code == 200
        assert response.json() == {"matches": [0], "count": 1}
