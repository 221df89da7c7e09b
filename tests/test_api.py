"""
Tests for the HTTP API: authentication, status codes and response shapes.
"""

import time
import uuid

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from pantry.api import create_access_token, create_app


@pytest.fixture
def client(pantry_config):
    with TestClient(create_app(pantry_config)) as test_client:
        yield test_client


@pytest.fixture
def auth_headers(pantry_config):
    token = create_access_token("chef_anna", config=pantry_config)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def new_item():
    def _make(**overrides):
        body = {
            "name": "Mozzarella Cheese",
            "category": "Dairy",
            "unit": "kg",
            "quantity": 10,
            "reorderThreshold": 3,
            "costPrice": 8.99,
        }
        body.update(overrides)
        return body
    return _make


class TestAuthentication:

    def test_health_is_public(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["store"] == "connected"

    def test_missing_token(self, client):
        response = client.get("/items")

        assert response.status_code == 401
        assert response.json()["error"] == "unauthenticated"
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_token_signed_with_another_secret(self, client):
        token = jwt.encode({"sub": "intruder"}, "not-the-secret", algorithm="HS256")

        response = client.get("/items", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401

    def test_token_without_subject(self, client, pantry_config):
        token = jwt.encode({"role": "chef"}, pantry_config.get_auth_secret(), algorithm="HS256")

        response = client.get("/items", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401

    def test_expired_token(self, client, pantry_config):
        token = create_access_token("chef_anna", expires_minutes=-1, config=pantry_config)

        response = client.get("/items", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401

    def test_rejected_mutation_writes_nothing(self, client, auth_headers, new_item):
        response = client.post("/items", json=new_item())

        assert response.status_code == 401
        assert client.get("/items", headers=auth_headers).json()["pagination"]["total"] == 0


class TestItemEndpoints:

    @pytest.fixture(autouse=True)
    def setup(self, client, auth_headers, new_item):
        self.client = client
        self.headers = auth_headers
        self.new_item = new_item

    def _create(self, **overrides):
        response = self.client.post("/items", json=self.new_item(**overrides), headers=self.headers)
        assert response.status_code == 201
        return response.json()

    def test_create_returns_camel_case_item(self):
        item = self._create()

        assert set(item) == {
            "id", "name", "category", "unit", "quantity", "reorderThreshold",
            "costPrice", "createdBy", "createdAt", "updatedAt", "isLowStock",
        }
        assert item["createdBy"] == "chef_anna"
        assert item["isLowStock"] is False

    def test_get_item(self):
        item = self._create()

        response = self.client.get(f"/items/{item['id']}", headers=self.headers)

        assert response.status_code == 200
        assert response.json() == item

    def test_duplicate_name(self):
        self._create()

        response = self.client.post("/items", json=self.new_item(), headers=self.headers)

        assert response.status_code == 409
        assert response.json()["error"] == "conflict"

    @pytest.mark.parametrize(
        "overrides",
        [{"quantity": -1}, {"name": ""}, {"costPrice": "cheap"}, {"unit": "x" * 21}],
    )
    def test_invalid_body(self, overrides):
        response = self.client.post("/items", json=self.new_item(**overrides), headers=self.headers)

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "invalid_argument"
        assert body["details"]

    def test_malformed_id(self):
        response = self.client.get("/items/not-a-uuid", headers=self.headers)

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_argument"

    def test_unknown_id(self):
        response = self.client.get(f"/items/{uuid.uuid4()}", headers=self.headers)

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    def test_update_records_changed_fields(self):
        item = self._create()

        response = self.client.put(
            f"/items/{item['id']}", json=self.new_item(category="Cheese"), headers=self.headers
        )
        assert response.status_code == 200
        assert response.json()["category"] == "Cheese"

        logs = self.client.get(f"/items/{item['id']}/audit", headers=self.headers).json()["logs"]
        assert [entry["action"] for entry in logs] == ["update", "create"]
        assert logs[0]["changes"]["newValue"] == "category: Dairy → Cheese"
        assert logs[0]["actorId"] == "chef_anna"

    def test_update_unknown_id_is_not_found_even_with_bad_body(self):
        response = self.client.put(
            f"/items/{uuid.uuid4()}", json={"quantity": -1}, headers=self.headers
        )

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    def test_update_with_bad_body(self):
        item = self._create()

        response = self.client.put(
            f"/items/{item['id']}", json=self.new_item(quantity=-1), headers=self.headers
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "invalid_argument"
        assert body["details"][0]["loc"] == ["quantity"]

    def test_delete_keeps_audit_trail(self):
        item = self._create()

        response = self.client.delete(f"/items/{item['id']}", headers=self.headers)
        assert response.status_code == 200
        assert response.json() == {"message": "Item deleted successfully", "id": item["id"]}

        assert self.client.get(f"/items/{item['id']}", headers=self.headers).status_code == 404
        logs = self.client.get(f"/items/{item['id']}/audit", headers=self.headers).json()["logs"]
        assert [entry["action"] for entry in logs] == ["delete", "create"]
        assert logs[0]["changes"]["oldValue"] == "Deleted item with quantity: 10 kg"

    def test_audit_limit_bounds(self):
        item = self._create()

        for limit in (0, 501):
            response = self.client.get(
                f"/items/{item['id']}/audit", params={"limit": limit}, headers=self.headers
            )
            assert response.status_code == 400


class TestAdjustEndpoint:

    @pytest.fixture(autouse=True)
    def setup(self, client, auth_headers, new_item):
        self.client = client
        self.headers = auth_headers
        response = client.post("/items", json=new_item(), headers=auth_headers)
        self.item_id = response.json()["id"]

    def _adjust(self, body):
        return self.client.post(f"/items/{self.item_id}/adjust", json=body, headers=self.headers)

    def test_adjust(self):
        response = self._adjust({"delta": 5, "reason": "Delivery"})

        assert response.status_code == 200
        body = response.json()
        assert body["item"]["quantity"] == 15
        assert body["adjustment"] == {"oldQuantity": 10, "newQuantity": 15, "delta": 5}

        logs = self.client.get(f"/items/{self.item_id}/audit", headers=self.headers).json()["logs"]
        assert logs[0]["action"] == "quantity_adjust"
        assert logs[0]["changes"] == {
            "action": "quantity_adjust",
            "oldValue": 10,
            "newValue": 15,
            "delta": 5,
            "reason": "Delivery",
        }

    def test_zero_delta(self):
        response = self._adjust({"delta": 0})

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_argument"

    def test_would_go_negative(self):
        response = self._adjust({"delta": -15})

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_state"
        item = self.client.get(f"/items/{self.item_id}", headers=self.headers).json()
        assert item["quantity"] == 10

    def test_missing_delta(self):
        response = self._adjust({"reason": "Inventory count"})

        assert response.status_code == 400

    def test_unknown_item(self):
        response = self.client.post(
            f"/items/{uuid.uuid4()}/adjust", json={"delta": 1}, headers=self.headers
        )

        assert response.status_code == 404


class TestQueryEndpoints:

    @pytest.fixture(autouse=True)
    def setup(self, client, auth_headers, new_item):
        self.client = client
        self.headers = auth_headers
        self.new_item = new_item

    def test_pagination(self):
        for i in range(25):
            self.client.post("/items", json=self.new_item(name=f"Item {i:02d}"), headers=self.headers)

        response = self.client.get(
            "/items",
            params={"page": 3, "limit": 10, "sortBy": "name", "sortOrder": "asc"},
            headers=self.headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert [item["name"] for item in body["items"]] == [f"Item {i}" for i in range(20, 25)]
        assert body["pagination"] == {"page": 3, "limit": 10, "total": 25, "totalPages": 3}

    def test_default_page_size(self):
        body = self.client.get("/items", headers=self.headers).json()

        assert body["pagination"]["limit"] == 20
        assert body["pagination"]["totalPages"] == 0

    @pytest.mark.parametrize(
        "params",
        [{"limit": 101}, {"limit": 0}, {"page": 0}, {"sortBy": "unit"}, {"sortOrder": "sideways"}],
    )
    def test_invalid_listing_params(self, params):
        response = self.client.get("/items", params=params, headers=self.headers)

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_argument"

    def test_search_and_categories(self):
        self.client.post("/items", json=self.new_item(), headers=self.headers)
        self.client.post(
            "/items", json=self.new_item(name="Parmesan", category="Cheese"), headers=self.headers
        )
        self.client.post(
            "/items", json=self.new_item(name="Basil", category="Herbs"), headers=self.headers
        )

        found = self.client.get("/items", params={"search": "CHEESE"}, headers=self.headers).json()
        assert sorted(item["name"] for item in found["items"]) == ["Mozzarella Cheese", "Parmesan"]

        categories = self.client.get("/categories", headers=self.headers).json()
        assert categories == {"categories": ["Cheese", "Dairy", "Herbs"]}

    def test_low_stock_and_stats(self):
        self.client.post(
            "/items", json=self.new_item(quantity=2, reorderThreshold=5, costPrice=3), headers=self.headers
        )
        self.client.post(
            "/items", json=self.new_item(name="Flour", quantity=20, costPrice=1.5), headers=self.headers
        )

        low = self.client.get("/items/low-stock", headers=self.headers).json()
        assert [item["name"] for item in low["items"]] == ["Mozzarella Cheese"]

        stats = self.client.get("/stats", headers=self.headers).json()
        assert stats == {
            "totalItems": 2,
            "lowStockItems": 1,
            "totalQuantity": 22,
            "totalValue": 36,
            "categoryCount": 1,
        }

    def test_slow_store_times_out(self, pantry_config, monkeypatch):
        pantry_config.set("api.request_timeout_seconds", 0.05)
        service = self.client.app.state.inventory_service
        get_categories = service.get_categories

        def slow_categories():
            time.sleep(0.2)
            return get_categories()

        monkeypatch.setattr(service, "get_categories", slow_categories)

        response = self.client.get("/categories", headers=self.headers)

        assert response.status_code == 504
        assert response.json()["error"] == "timeout"


class TestMutationDeadlines:
    """A timed-out mutation is never applied, so re-issuing it is safe."""

    @pytest.fixture(autouse=True)
    def setup(self, client, auth_headers, new_item, pantry_config):
        self.client = client
        self.headers = auth_headers
        self.new_item = new_item
        self.config = pantry_config
        self.service = client.app.state.inventory_service
        response = client.post("/items", json=new_item(), headers=auth_headers)
        self.item_id = response.json()["id"]

    def _audit_actions(self):
        response = self.client.get(f"/items/{self.item_id}/audit", headers=self.headers)
        return [entry["action"] for entry in response.json()["logs"]]

    def _quantity(self):
        return self.client.get(f"/items/{self.item_id}", headers=self.headers).json()["quantity"]

    def test_timed_out_adjust_is_rolled_back(self, monkeypatch):
        import pantry.services.quantity_ledger as ledger_module

        row_to_item = ledger_module.row_to_item

        def slow_row_to_item(row):
            time.sleep(0.2)
            return row_to_item(row)

        monkeypatch.setattr(ledger_module, "row_to_item", slow_row_to_item)
        self.config.set("api.request_timeout_seconds", 0.05)

        response = self.client.post(
            f"/items/{self.item_id}/adjust", json={"delta": 5}, headers=self.headers
        )

        assert response.status_code == 504
        assert response.json()["error"] == "timeout"

        monkeypatch.undo()
        self.config.set("api.request_timeout_seconds", 10.0)
        assert self._quantity() == 10
        assert self._audit_actions() == ["create"]

        retry = self.client.post(
            f"/items/{self.item_id}/adjust", json={"delta": 5}, headers=self.headers
        )
        assert retry.status_code == 200
        assert self._quantity() == 15
        assert self._audit_actions() == ["quantity_adjust", "create"]

    def test_timed_out_create_can_be_reissued(self, monkeypatch):
        guard = self.service.uniqueness_guard
        ensure_available = guard.ensure_available

        def slow_ensure_available(*args, **kwargs):
            ensure_available(*args, **kwargs)
            time.sleep(0.2)

        monkeypatch.setattr(guard, "ensure_available", slow_ensure_available)
        self.config.set("api.request_timeout_seconds", 0.05)

        response = self.client.post("/items", json=self.new_item(name="Burrata"), headers=self.headers)
        assert response.status_code == 504

        monkeypatch.undo()
        self.config.set("api.request_timeout_seconds", 10.0)
        found = self.client.get("/items", params={"search": "burrata"}, headers=self.headers)
        assert found.json()["pagination"]["total"] == 0

        retry = self.client.post("/items", json=self.new_item(name="Burrata"), headers=self.headers)
        assert retry.status_code == 201

    def test_slow_journal_after_commit_still_reports_success(self, monkeypatch):
        audit_store = self.service.audit_store
        append = audit_store.append

        def slow_append(entry):
            time.sleep(0.2)
            append(entry)

        monkeypatch.setattr(audit_store, "append", slow_append)
        self.config.set("api.request_timeout_seconds", 0.05)

        response = self.client.post(
            f"/items/{self.item_id}/adjust", json={"delta": 5}, headers=self.headers
        )

        assert response.status_code == 200
        assert response.json()["adjustment"]["newQuantity"] == 15

        monkeypatch.undo()
        self.config.set("api.request_timeout_seconds", 10.0)
        assert self._quantity() == 15
        assert self._audit_actions() == ["quantity_adjust", "create"]
