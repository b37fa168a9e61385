"""
Tests para el módulo de Egresos
"""

import pytest
from decimal import Decimal


@pytest.fixture
def cleaning_service(tenant_client, service_provider):
    response = tenant_client.post("/services/", json={
        "name": "Limpieza de oficinas", "provider_ids": [service_provider["id"]]
    })
    assert response.status_code == 201
    return response.json()


def expense_payload(supplier, user, **extra):
    payload = {"supplier_id": supplier["id"], "created_by": str(user.id), "amount": "100"}
    payload.update(extra)
    return payload


class TestExpenseAPI:

    def test_create_expense(self, tenant_client, supplier, sample_user):
        response = tenant_client.post("/expenses/", json=expense_payload(supplier, sample_user))
        assert response.status_code == 201
        data = response.json()
        assert data["expense_number"] == "EXP-000001"
        assert data["created_by"] == str(sample_user.id)

        detail = tenant_client.get(f"/suppliers/{supplier['id']}").json()
        assert detail["expense_ids"] == [data["id"]]
        assert Decimal(detail["balance_due"]) == Decimal("-100.00")

    def test_created_by_is_required(self, tenant_client, supplier):
        response = tenant_client.post("/expenses/", json={"supplier_id": supplier["id"], "amount": "10"})
        assert response.status_code == 400
        assert "created_by" in response.json()["error"]

    def test_expense_on_sales_invoice_rejected(self, tenant_client, supplier, sample_user, sales_invoice):
        response = tenant_client.post(
            "/expenses/", json=expense_payload(supplier, sample_user, invoice_id=sales_invoice["id"])
        )
        assert response.status_code == 400

    def test_partial_expense_and_delete(self, tenant_client, supplier, sample_user, purchase_invoice):
        expense = tenant_client.post(
            "/expenses/", json=expense_payload(supplier, sample_user, invoice_id=purchase_invoice["id"])
        ).json()

        invoice = tenant_client.get(f"/invoices/{purchase_invoice['id']}").json()
        assert invoice["status"] == "partially_paid"
        assert Decimal(invoice["remaining_amount"]) == Decimal("480.00")

        assert tenant_client.delete(f"/expenses/{expense['id']}").status_code == 200

        invoice = tenant_client.get(f"/invoices/{purchase_invoice['id']}").json()
        assert invoice["status"] == "pending"
        assert Decimal(invoice["remaining_amount"]) == Decimal("580.00")
        detail = tenant_client.get(f"/suppliers/{supplier['id']}").json()
        assert detail["expense_ids"] == []
        assert Decimal(detail["balance_due"]) == Decimal("580.00")

    def test_expense_feeds_service_history(self, tenant_client, service_provider, sample_user, cleaning_service):
        expense = tenant_client.post("/expenses/", json=expense_payload(
            service_provider, sample_user, amount="250", service_id=cleaning_service["id"], notes="Enero"
        )).json()
        assert expense["service_id"] == cleaning_service["id"]

        service = tenant_client.get(f"/services/{cleaning_service['id']}").json()
        assert Decimal(service["total_expenses"]) == Decimal("250.00")
        assert service["expense_history"][0]["description"] == "Enero"

        tenant_client.put(f"/expenses/{expense['id']}", json={"amount": "300"})
        service = tenant_client.get(f"/services/{cleaning_service['id']}").json()
        assert Decimal(service["total_expenses"]) == Decimal("300.00")

        tenant_client.delete(f"/expenses/{expense['id']}")
        service = tenant_client.get(f"/services/{cleaning_service['id']}").json()
        assert Decimal(service["total_expenses"]) == Decimal("0.00")
        assert service["expense_history"] == []

    def test_list_filters(self, tenant_client, supplier, sample_user, service_provider, cleaning_service):
        tenant_client.post("/expenses/", json=expense_payload(supplier, sample_user, method="bank_transfer"))
        tenant_client.post("/expenses/", json=expense_payload(
            service_provider, sample_user, service_id=cleaning_service["id"]
        ))

        assert len(tenant_client.get("/expenses/").json()) == 2
        assert len(tenant_client.get("/expenses/", params={"supplier_id": supplier["id"]}).json()) == 1
        assert len(tenant_client.get("/expenses/", params={"method": "bank_transfer"}).json()) == 1
        assert len(tenant_client.get("/expenses/", params={"service_id": cleaning_service["id"]}).json()) == 1

    def test_delete_all(self, tenant_client, supplier, sample_user):
        tenant_client.post("/expenses/", json=expense_payload(supplier, sample_user))
        tenant_client.post("/expenses/", json=expense_payload(supplier, sample_user))

        response = tenant_client.delete("/expenses/delete-all")
        assert response.json()["deleted_count"] == 2
        assert tenant_client.get("/expenses/").json() == []
