"""HTTP-level tests for the API routers."""
from decimal import Decimal

import pytest


async def _create_product(client, **overrides) -> dict:
    payload = {
        "name": "Product",
        "price": "10.00",
        "stock_quantity": 10,
    }
    payload.update(overrides)
    response = await client.post("/products", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
class TestProductEndpoints:
    """Tests for /products routes."""

    async def test_health(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    async def test_create_and_fetch(self, client):
        created = await _create_product(client, name="Kerupuk", price="7.499")

        assert created["price"] == "7.50"
        assert created["min_stock_threshold"] == 10

        response = await client.get(f"/products/{created['id']}")
        assert response.status_code == 200
        assert response.json()["name"] == "Kerupuk"

    async def test_get_missing_returns_null(self, client):
        response = await client.get("/products/999")
        assert response.status_code == 200
        assert response.json() is None

    async def test_create_rejects_bad_price(self, client):
        response = await client.post(
            "/products", json={"name": "X", "price": "-1", "stock_quantity": 1}
        )
        assert response.status_code == 422

    async def test_create_rejects_values_too_large_for_columns(self, client):
        too_expensive = await client.post(
            "/products", json={"name": "X", "price": "10000000000.00", "stock_quantity": 1}
        )
        too_many = await client.post(
            "/products", json={"name": "X", "price": "1.00", "stock_quantity": 2147483648}
        )

        assert too_expensive.status_code == 422
        assert too_many.status_code == 422
        assert (await client.get("/products")).json() == []

    async def test_partial_update(self, client):
        created = await _create_product(client, name="Old", price="3.00")

        response = await client.put(f"/products/{created['id']}", json={"price": "4.00"})

        assert response.status_code == 200
        body = response.json()
        assert body["name"] == "Old"
        assert body["price"] == "4.00"

    async def test_update_missing_is_404(self, client):
        response = await client.put("/products/99999", json={"name": "X"})
        assert response.status_code == 404
        assert response.json()["detail"] == "Product with id 99999 not found"

    async def test_delete(self, client):
        created = await _create_product(client)

        response = await client.delete(f"/products/{created['id']}")

        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert (await client.get(f"/products/{created['id']}")).json() is None

    async def test_delete_with_sales_history_is_409(self, client):
        created = await _create_product(client)
        await client.post("/sales", json={"items": [{"product_id": created["id"], "quantity": 1}]})

        response = await client.delete(f"/products/{created['id']}")

        assert response.status_code == 409
        assert "sales history" in response.json()["detail"]

    async def test_stock_adjustment(self, client):
        created = await _create_product(client, stock_quantity=50)

        response = await client.post(
            f"/products/{created['id']}/stock",
            json={"quantity_change": -75, "reason": "Stock opname"},
        )
        assert response.status_code == 409
        assert "Current stock: 50" in response.json()["detail"]

        response = await client.post(
            f"/products/{created['id']}/stock", json={"quantity_change": 5}
        )
        assert response.status_code == 200
        assert response.json()["stock_quantity"] == 55

    async def test_products_with_sales(self, client):
        sold = await _create_product(client, name="Sold", price="2.50")
        await _create_product(client, name="Unsold")
        await client.post("/sales", json={"items": [{"product_id": sold["id"], "quantity": 4}]})

        response = await client.get("/products/with-sales")

        assert response.status_code == 200
        body = response.json()
        assert [p["name"] for p in body] == ["Sold", "Unsold"]
        assert body[0]["total_sold"] == 4
        assert Decimal(body[0]["total_revenue"]) == Decimal("10.00")
        assert body[1]["total_sold"] == 0


@pytest.mark.asyncio
class TestSalesEndpoints:
    """Tests for /sales routes."""

    async def test_commit_sale(self, client):
        first = await _create_product(client, name="A", price="25.50", stock_quantity=10)
        second = await _create_product(client, name="B", price="15.75", stock_quantity=10)

        response = await client.post("/sales", json={
            "items": [
                {"product_id": first["id"], "quantity": 2},
                {"product_id": second["id"], "quantity": 4},
            ],
            "notes": "Walk-in",
        })

        assert response.status_code == 201
        body = response.json()
        assert Decimal(body["total_amount"]) == Decimal("114.00")
        assert len(body["items"]) == 2

        products = {p["name"]: p for p in (await client.get("/products")).json()}
        assert products["A"]["stock_quantity"] == 8
        assert products["B"]["stock_quantity"] == 6

        listing = (await client.get("/sales")).json()
        assert [t["id"] for t in listing] == [body["id"]]
        fetched = (await client.get(f"/sales/{body['id']}")).json()
        assert fetched["notes"] == "Walk-in"

    async def test_missing_products_is_404(self, client):
        response = await client.post(
            "/sales", json={"items": [{"product_id": 999, "quantity": 1}]}
        )
        assert response.status_code == 404
        assert response.json()["detail"] == "Products not found: 999"
        assert (await client.get("/sales")).json() == []

    async def test_insufficient_stock_is_409(self, client):
        product = await _create_product(client, name="Low Stock Product", stock_quantity=2)

        response = await client.post(
            "/sales", json={"items": [{"product_id": product["id"], "quantity": 5}]}
        )

        assert response.status_code == 409
        assert "Available: 2, Requested: 5" in response.json()["detail"]
        assert (await client.get(f"/products/{product['id']}")).json()["stock_quantity"] == 2

    async def test_empty_items_is_422(self, client):
        response = await client.post("/sales", json={"items": []})
        assert response.status_code == 422
        assert response.json()["detail"] == "At least one item is required"

    async def test_non_positive_quantity_is_422(self, client):
        product = await _create_product(client)
        response = await client.post(
            "/sales", json={"items": [{"product_id": product["id"], "quantity": 0}]}
        )
        assert response.status_code == 422

    async def test_get_missing_transaction_returns_null(self, client):
        response = await client.get("/sales/42")
        assert response.status_code == 200
        assert response.json() is None


@pytest.mark.asyncio
class TestInventoryAndReportEndpoints:
    """Tests for /inventory and /reports routes."""

    async def test_low_stock(self, client):
        product = await _create_product(client, name="Beras", stock_quantity=2, min_stock_threshold=5)
        await _create_product(client, name="Plenty", stock_quantity=100)

        response = await client.get("/inventory/low-stock")

        assert response.status_code == 200
        assert response.json() == [{
            "id": product["id"],
            "name": "Beras",
            "current_stock": 2,
            "min_stock_threshold": 5,
            "difference": 3,
        }]

    async def test_report_shape(self, client):
        response = await client.get(
            "/reports/sales", params={"period": "monthly", "start_date": "2024-02-01"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["period"] == "monthly"
        assert body["end_date"] == "2024-02-29"
        assert body["summary"]["total_transactions"] == 0
        assert body["data"] == []

    async def test_report_rejects_bad_date(self, client):
        response = await client.get(
            "/reports/sales", params={"period": "daily", "start_date": "15-03-2024"}
        )
        assert response.status_code == 422

    async def test_report_rejects_unknown_period(self, client):
        response = await client.get(
            "/reports/sales", params={"period": "hourly", "start_date": "2024-03-15"}
        )
        assert response.status_code == 422
