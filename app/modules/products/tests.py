"""
Tests para el módulo de Productos
"""

import pytest
from decimal import Decimal


@pytest.fixture
def product(tenant_client, supplier):
    response = tenant_client.post("/products/", json={
        "product_name": "Agua 5L",
        "category": "bebidas",
        "price": "40",
        "cost_price": "25",
        "quantity": 20,
        "min_quantity": 5,
        "barcode": "7790001",
        "supplier_ids": [supplier["id"]]
    })
    assert response.status_code == 201
    return response.json()


class TestProductAPI:

    def test_create(self, product, supplier):
        assert Decimal(product["price"]) == Decimal("40.00")
        assert product["supplier_ids"] == [supplier["id"]]
        assert product["is_low_stock"] is False

    def test_duplicate_barcode(self, tenant_client, product):
        response = tenant_client.post("/products/", json={"product_name": "Otro", "barcode": product["barcode"]})
        assert response.status_code == 409

    def test_paginated_list(self, tenant_client, product):
        for index in range(3):
            tenant_client.post("/products/", json={"product_name": f"Producto {index}"})

        page = tenant_client.get("/products/", params={"page": 1, "limit": 2}).json()
        assert page["total"] == 4
        assert len(page["products"]) == 2
        assert page["hasNext"] is True
        assert page["hasPrev"] is False

        last = tenant_client.get("/products/", params={"page": 2, "limit": 2}).json()
        assert last["hasNext"] is False
        assert last["hasPrev"] is True

    def test_adjust_quantity(self, tenant_client, product):
        response = tenant_client.patch(f"/products/{product['id']}/quantity", json={"delta": -16})
        assert response.status_code == 200
        assert response.json()["quantity"] == 4
        assert response.json()["is_low_stock"] is True

        low_stock = tenant_client.get("/products/low-stock").json()
        assert [p["id"] for p in low_stock] == [product["id"]]

        response = tenant_client.patch(f"/products/{product['id']}/quantity", json={"delta": -5})
        assert response.status_code == 400

    def test_lookups(self, tenant_client, product, supplier):
        assert len(tenant_client.get("/products/category/bebidas").json()) == 1
        assert len(tenant_client.get(f"/products/supplier/{supplier['id']}").json()) == 1
        assert len(tenant_client.get("/products/search", params={"q": "7790"}).json()) == 1

    def test_update_and_delete(self, tenant_client, product):
        response = tenant_client.put(f"/products/{product['id']}", json={"price": "45.5", "supplier_ids": []})
        assert Decimal(response.json()["price"]) == Decimal("45.50")
        assert response.json()["supplier_ids"] == []

        assert tenant_client.delete(f"/products/{product['id']}").status_code == 200
        assert tenant_client.get(f"/products/{product['id']}").status_code == 404
