"""
Tests para el módulo de Órdenes
"""

import pytest
from decimal import Decimal


ITEMS = [
    {"product_name": "Agua 5L", "quantity": "3", "unit_price": "40"},
    {"product_name": "Hielo", "quantity": "2", "unit_price": "15", "free_quantity": "1"},
]


@pytest.fixture
def order(tenant_client, customer):
    response = tenant_client.post("/orders/", json={
        "customer_id": customer["id"],
        "date": "2024-04-01",
        "delivery_date": "2024-04-03",
        "delivery_address": "Av. Siempre Viva 742",
        "items": ITEMS
    })
    assert response.status_code == 201
    return response.json()


class TestOrderAPI:

    def test_create_order_amount_without_tax(self, order):
        assert order["order_number"] == "ORD-000001"
        assert Decimal(order["amount"]) == Decimal("150.00")
        assert order["status"] == "pending"
        assert order["delivery_status"] == "pending"
        assert [item["product_name"] for item in order["items"]] == ["Agua 5L", "Hielo"]

    def test_purchase_order_requires_supplier(self, tenant_client, customer):
        response = tenant_client.post("/orders/", json={
            "type": "purchase", "customer_id": customer["id"], "items": ITEMS
        })
        assert response.status_code == 400

    def test_delivery_before_order_date_rejected(self, tenant_client, customer, order):
        response = tenant_client.post("/orders/", json={
            "customer_id": customer["id"], "date": "2024-04-10", "delivery_date": "2024-04-01", "items": ITEMS
        })
        assert response.status_code == 400

        response = tenant_client.put(f"/orders/{order['id']}", json={"delivery_date": "2024-03-01"})
        assert response.status_code == 400

    def test_update_items(self, tenant_client, order):
        response = tenant_client.put(f"/orders/{order['id']}", json={
            "items": [{"product_name": "Agua 5L", "quantity": "10", "unit_price": "40"}]
        })
        assert response.status_code == 200
        assert Decimal(response.json()["amount"]) == Decimal("400.00")
        assert len(response.json()["items"]) == 1

    def test_status_changes(self, tenant_client, order):
        response = tenant_client.patch(f"/orders/{order['id']}/status", json={"status": "processing"})
        assert response.json()["status"] == "processing"

        response = tenant_client.patch(f"/orders/{order['id']}/delivery-status", json={"delivery_status": "shipped"})
        assert response.json()["delivery_status"] == "shipped"

        shipped = tenant_client.get("/orders/", params={"delivery_status": "shipped"}).json()
        assert [o["id"] for o in shipped] == [order["id"]]

    def test_assign_driver(self, tenant_client, order, sample_driver, sample_user):
        response = tenant_client.patch(f"/orders/{order['id']}/driver", json={"driver_id": str(sample_driver.id)})
        assert response.status_code == 200
        assert response.json()["driver_id"] == str(sample_driver.id)

        # Solo usuarios con rol de conductor
        response = tenant_client.patch(f"/orders/{order['id']}/driver", json={"driver_id": str(sample_user.id)})
        assert response.status_code == 400

    def test_search(self, tenant_client, order):
        results = tenant_client.get("/orders/search", params={"q": "siempre viva"}).json()
        assert [o["id"] for o in results] == [order["id"]]

    def test_delete_and_delete_all(self, tenant_client, customer, order):
        assert tenant_client.delete(f"/orders/{order['id']}").status_code == 200
        assert tenant_client.get(f"/orders/{order['id']}").status_code == 404

        tenant_client.post("/orders/", json={"customer_id": customer["id"], "items": ITEMS})
        tenant_client.post("/orders/", json={"customer_id": customer["id"], "items": ITEMS})
        response = tenant_client.delete("/orders/delete-all")
        assert response.json()["deleted_count"] == 2
