"""
Tests para el módulo de Servicios
"""

import pytest
from decimal import Decimal


@pytest.fixture
def service(tenant_client, service_provider):
    response = tenant_client.post("/services/", json={
        "name": "Mantenimiento", "description": "Mantenimiento preventivo",
        "provider_ids": [service_provider["id"], service_provider["id"]]
    })
    assert response.status_code == 201
    return response.json()


class TestServiceAPI:

    def test_create_deduplicates_providers(self, service, service_provider):
        assert service["provider_ids"] == [service_provider["id"]]
        assert Decimal(service["total_expenses"]) == Decimal("0.00")
        assert service["is_active"] is True

    def test_requires_a_provider(self, tenant_client):
        response = tenant_client.post("/services/", json={"name": "Sin prestador", "provider_ids": []})
        assert response.status_code == 400

    def test_goods_supplier_cannot_provide(self, tenant_client, supplier):
        response = tenant_client.post("/services/", json={"name": "Transporte", "provider_ids": [supplier["id"]]})
        assert response.status_code == 400

    def test_duplicate_name(self, tenant_client, service, service_provider):
        response = tenant_client.post("/services/", json={
            "name": service["name"], "provider_ids": [service_provider["id"]]
        })
        assert response.status_code == 409

    def test_expense_history_totals(self, tenant_client, service):
        response = tenant_client.post(f"/services/{service['id']}/expenses", json={"amount": "120.50"})
        assert Decimal(response.json()["total_expenses"]) == Decimal("120.50")

        response = tenant_client.post(f"/services/{service['id']}/expenses", json={
            "amount": "79.50", "description": "Repuestos"
        })
        data = response.json()
        assert Decimal(data["total_expenses"]) == Decimal("200.00")
        assert len(data["expense_history"]) == 2

        first_entry = data["expense_history"][0]["id"]
        response = tenant_client.delete(f"/services/{service['id']}/expenses/{first_entry}")
        assert response.status_code == 200
        assert Decimal(response.json()["total_expenses"]) == Decimal("79.50")

    def test_add_invoice_is_idempotent(self, tenant_client, service, sales_invoice):
        tenant_client.post(f"/services/{service['id']}/invoices", json={"invoice_id": sales_invoice["id"]})
        response = tenant_client.post(f"/services/{service['id']}/invoices", json={"invoice_id": sales_invoice["id"]})
        assert response.json()["invoice_ids"] == [sales_invoice["id"]]

    def test_providers_keep_at_least_one(self, tenant_client, service, service_provider):
        response = tenant_client.delete(f"/services/{service['id']}/providers/{service_provider['id']}")
        assert response.status_code == 400

        other = tenant_client.post("/suppliers/", json={
            "supplier_name": "Técnicos Unidos", "supplier_type": "service_provider"
        }).json()
        response = tenant_client.post(f"/services/{service['id']}/providers", json={"supplier_id": other["id"]})
        assert set(response.json()["provider_ids"]) == {service_provider["id"], other["id"]}

        response = tenant_client.delete(f"/services/{service['id']}/providers/{service_provider['id']}")
        assert response.status_code == 200
        assert response.json()["provider_ids"] == [other["id"]]

    def test_list_by_supplier(self, tenant_client, service, service_provider):
        results = tenant_client.get("/services/", params={"supplier_id": service_provider["id"]}).json()
        assert [s["id"] for s in results] == [service["id"]]
        assert tenant_client.get("/services/", params={"is_active": "false"}).json() == []

    def test_update(self, tenant_client, service):
        response = tenant_client.put(f"/services/{service['id']}", json={"is_active": False})
        assert response.status_code == 200
        assert response.json()["is_active"] is False

    def test_delete(self, tenant_client, service, service_provider):
        assert tenant_client.delete(f"/services/{service['id']}").status_code == 200
        assert tenant_client.get(f"/services/{service['id']}").status_code == 404
        detail = tenant_client.get(f"/suppliers/{service_provider['id']}").json()
        assert detail["service_ids"] == []
