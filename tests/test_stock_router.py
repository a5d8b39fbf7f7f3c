"""
Tests for the stock entry, delivery and inventory endpoints.
"""
from fastapi.testclient import TestClient


def entry_payload(product, store, **counts) -> dict:
    payload = {
        "date": "2024-03-01",
        "product_id": str(product.id),
        "store_id": str(store.id),
    }
    payload.update(counts)
    return payload


class TestStockEntryEndpoints:

    def test_create_entry(self, client: TestClient, retail_store, product):
        response = client.post("/api/stock-entries", json=entry_payload(product, retail_store, reported_stock=8))

        assert response.status_code == 201
        data = response.json()
        assert data["reported_stock"] == 8
        assert data["reported_remaining"] == 8
        assert data["discrepancy"] == 0

    def test_duplicate_returns_conflict(self, client: TestClient, retail_store, product):
        client.post("/api/stock-entries", json=entry_payload(product, retail_store, reported_stock=8))

        response = client.post("/api/stock-entries", json=entry_payload(product, retail_store, reported_stock=9))

        assert response.status_code == 409
        assert response.json()["error"] == "conflict"

    def test_negative_count_rejected(self, client: TestClient, retail_store, product):
        response = client.post("/api/stock-entries", json=entry_payload(product, retail_store, waste=-1))

        assert response.status_code == 422

    def test_update_entry(self, client: TestClient, retail_store, product):
        created = client.post(
            "/api/stock-entries", json=entry_payload(product, retail_store, delivered=10, reported_stock=8)
        ).json()

        response = client.patch(f"/api/stock-entries/{created['id']}", json={"sales": 2})

        assert response.status_code == 200
        assert response.json()["expected_stock"] == 8

    def test_list_filtered_by_store(self, client: TestClient, production_center, retail_store, product):
        client.post("/api/stock-entries", json=entry_payload(product, retail_store, reported_stock=8))
        client.post("/api/stock-entries", json=entry_payload(product, production_center, reported_stock=3))

        response = client.get("/api/stock-entries", params={"store_id": str(retail_store.id)})

        assert response.status_code == 200
        assert [e["reported_stock"] for e in response.json()] == [8]

    def test_bulk_reports_failures(self, client: TestClient, retail_store, product):
        payload = {
            "entries": [
                entry_payload(product, retail_store, reported_stock=5),
                entry_payload(product, retail_store, reported_stock=6),
                entry_payload(product, retail_store, date="2024-03-02", waste=-1),
            ]
        }

        response = client.post("/api/stock-entries/bulk", json=payload)

        assert response.status_code == 200
        data = response.json()
        assert len(data["created"]) == 1
        assert data["failed"][0]["index"] == 1
        assert data["failed"][0]["error"] == "conflict"
        assert data["failed"][1]["index"] == 2
        assert data["failed"][1]["error"] == "validation_error"

    def test_waste_check(self, client: TestClient, retail_store, product):
        created = client.post(
            "/api/stock-entries", json=entry_payload(product, retail_store, waste=1, reported_stock=9)
        ).json()

        response = client.get(f"/api/stock-entries/{created['id']}/waste-check")

        assert response.status_code == 200
        assert response.json()["excessive"] is True

    def test_waste_check_unknown_entry(self, client: TestClient):
        response = client.get("/api/stock-entries/00000000-0000-0000-0000-000000000000/waste-check")

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"


class TestDeliveryEndpoints:

    def test_insufficient_stock(self, client: TestClient, production_center, retail_store, product):
        response = client.post("/api/deliveries", json={
            "date": "2024-03-01",
            "store_id": str(retail_store.id),
            "product_id": str(product.id),
            "quantity_sent": 5,
        })

        assert response.status_code == 409
        data = response.json()
        assert data["error"] == "insufficient_stock"
        assert "Available: 0" in data["message"]

    def test_delivery_after_production(self, client: TestClient, production_center, retail_store, product):
        client.post("/api/inventory/production", json={
            "date": "2024-03-01",
            "product_id": str(product.id),
            "quantity_produced": 12,
        })

        response = client.post("/api/deliveries", json={
            "date": "2024-03-01",
            "store_id": str(retail_store.id),
            "product_id": str(product.id),
            "quantity_sent": 5,
        })

        assert response.status_code == 201
        levels = client.get("/api/inventory/current").json()
        assert levels[str(product.id)] == 7

    def test_delivery_to_production_center_rejected(self, client: TestClient, production_center, product):
        response = client.post("/api/deliveries", json={
            "date": "2024-03-01",
            "store_id": str(production_center.id),
            "product_id": str(product.id),
            "quantity_sent": 0,
        })

        assert response.status_code == 422
        assert response.json()["field"] == "store_id"

    def test_correct_and_remove_delivery(self, client: TestClient, production_center, retail_store, product):
        client.post("/api/inventory/production", json={
            "date": "2024-03-01",
            "product_id": str(product.id),
            "quantity_produced": 12,
        })
        created = client.post("/api/deliveries", json={
            "date": "2024-03-01",
            "store_id": str(retail_store.id),
            "product_id": str(product.id),
            "quantity_sent": 5,
        }).json()

        response = client.patch(f"/api/deliveries/{created['id']}", json={"quantity_sent": 8})

        assert response.status_code == 200
        assert response.json()["quantity_sent"] == 8
        assert client.get("/api/inventory/current").json()[str(product.id)] == 4

        response = client.delete(f"/api/deliveries/{created['id']}")

        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert client.get("/api/inventory/current").json()[str(product.id)] == 12
        assert client.get("/api/deliveries").json() == []

    def test_delete_unknown_delivery(self, client: TestClient):
        response = client.delete("/api/deliveries/00000000-0000-0000-0000-000000000000")

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    def test_standing_orders(self, client: TestClient, production_center, retail_store, product):
        client.post("/api/inventory/production", json={
            "date": "2024-03-01",
            "product_id": str(product.id),
            "quantity_produced": 12,
        })
        response = client.post("/api/predetermined-deliveries", json={
            "store_id": str(retail_store.id),
            "product_id": str(product.id),
            "default_quantity": 10,
        })
        assert response.status_code == 200
        assert response.json()["frequency"] == "daily"

        listed = client.get("/api/predetermined-deliveries").json()
        assert [(o["store_name"], o["product_name"], o["default_quantity"]) for o in listed] == [
            ("Store 1 (Main)", "Croissant", 10)
        ]

        response = client.post("/api/deliveries/predetermined", json={
            "date": "2024-03-02",
            "store_id": str(retail_store.id),
            "quantities": {str(product.id): 7},
        })

        assert response.status_code == 201
        assert [d["quantity_sent"] for d in response.json()] == [7]
        assert client.get("/api/inventory/current").json()[str(product.id)] == 5


class TestInventoryEndpoints:

    def test_adjustment_below_zero(self, client: TestClient, production_center, product):
        response = client.post("/api/inventory/adjustments", json={
            "product_id": str(product.id),
            "delta": -1,
        })

        assert response.status_code == 409
        assert response.json()["error"] == "insufficient_stock"

    def test_adjustment_for_unknown_store(self, client: TestClient, production_center, product):
        response = client.post("/api/inventory/adjustments", json={
            "product_id": str(product.id),
            "delta": 5,
            "store_id": "00000000-0000-0000-0000-000000000000",
        })

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    def test_production_must_be_positive(self, client: TestClient, production_center, product):
        response = client.post("/api/inventory/production", json={
            "date": "2024-03-01",
            "product_id": str(product.id),
            "quantity_produced": 0,
        })

        assert response.status_code == 422
