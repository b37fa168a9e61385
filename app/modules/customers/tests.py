"""
Tests para el módulo de Clientes

- CRUD con unicidad de nombre por empresa
- Facturas creadas desde el cliente
- Lista de pagos idempotente y reconciliación de balance_due
"""

from decimal import Decimal
from uuid import uuid4


ITEMS = [{"product_name": "Servicio mensual", "quantity": "2", "unit_price": "50"}]


class TestCustomerCRUD:

    def test_create_customer(self, tenant_client):
        response = tenant_client.post("/customers/", json={
            "customer_name": "  Tienda La Esquina ",
            "company_name": "La Esquina SA",
            "customer_type": "retail"
        })
        assert response.status_code == 201
        data = response.json()
        assert data["customer_name"] == "Tienda La Esquina"
        assert Decimal(data["balance_due"]) == Decimal("0.00")

    def test_duplicate_name_conflicts(self, tenant_client, customer):
        response = tenant_client.post("/customers/", json={"customer_name": customer["customer_name"]})
        assert response.status_code == 409

    def test_unknown_company_rejected(self, client):
        response = client.post(
            "/customers/",
            json={"customer_name": "Sin empresa"},
            headers={"X-Company-ID": str(uuid4())}
        )
        assert response.status_code == 404

    def test_list_and_filter(self, tenant_client, customer):
        tenant_client.post("/customers/", json={"customer_name": "Mayorista", "customer_type": "wholesale"})

        assert len(tenant_client.get("/customers/").json()) == 2
        wholesale = tenant_client.get("/customers/", params={"customer_type": "wholesale"}).json()
        assert [c["customer_name"] for c in wholesale] == ["Mayorista"]

    def test_search(self, tenant_client, customer):
        results = tenant_client.get("/customers/search", params={"q": "uno"}).json()
        assert [c["id"] for c in results] == [customer["id"]]

    def test_update(self, tenant_client, customer):
        response = tenant_client.put(f"/customers/{customer['id']}", json={"phone": "555-9999"})
        assert response.status_code == 200
        assert response.json()["phone"] == "555-9999"

    def test_delete_without_activity(self, tenant_client, customer):
        assert tenant_client.delete(f"/customers/{customer['id']}").status_code == 200
        assert tenant_client.get(f"/customers/{customer['id']}").status_code == 404

    def test_delete_with_invoices_rejected(self, tenant_client, customer, sales_invoice):
        response = tenant_client.delete(f"/customers/{customer['id']}")
        assert response.status_code == 400


class TestCustomerSettlement:

    def test_add_invoice_from_customer(self, tenant_client, customer):
        response = tenant_client.post(f"/customers/{customer['id']}/invoices", json={"items": ITEMS})
        assert response.status_code == 201
        invoice = response.json()
        assert invoice["type"] == "sales"
        assert invoice["customer_id"] == customer["id"]
        assert Decimal(invoice["amount"]) == Decimal("116.00")

        invoices = tenant_client.get(f"/customers/{customer['id']}/invoices").json()
        assert [i["id"] for i in invoices] == [invoice["id"]]

    def test_payment_link_is_idempotent(self, tenant_client, customer, sales_invoice):
        payment = tenant_client.post("/payments/", json={"customer_id": customer["id"], "amount": "160"}).json()

        first = tenant_client.post(f"/customers/{customer['id']}/payments", json={"payment_id": payment["id"]})
        second = tenant_client.post(f"/customers/{customer['id']}/payments", json={"payment_id": payment["id"]})
        assert first.status_code == 200
        assert second.status_code == 200
        assert second.json()["payment_ids"] == [payment["id"]]
        assert Decimal(second.json()["balance_due"]) == Decimal("1000.00")

    def test_payment_of_other_customer_rejected(self, tenant_client, customer):
        other = tenant_client.post("/customers/", json={"customer_name": "Cliente Dos"}).json()
        payment = tenant_client.post("/payments/", json={"customer_id": other["id"], "amount": "10"}).json()

        response = tenant_client.post(f"/customers/{customer['id']}/payments", json={"payment_id": payment["id"]})
        assert response.status_code == 400

    def test_remove_payment_from_list(self, tenant_client, customer, sales_invoice):
        payment = tenant_client.post("/payments/", json={"customer_id": customer["id"], "amount": "160"}).json()

        response = tenant_client.delete(f"/customers/{customer['id']}/payments/{payment['id']}")
        assert response.status_code == 200
        assert response.json()["payment_ids"] == []
        assert Decimal(response.json()["balance_due"]) == Decimal("1160.00")

        response = tenant_client.delete(f"/customers/{customer['id']}/payments/{payment['id']}")
        assert response.status_code == 404

    def test_reconcile_balance(self, tenant_client, customer, sales_invoice):
        tenant_client.post("/payments/", json={
            "customer_id": customer["id"], "invoice_id": sales_invoice["id"], "amount": "1160"
        })
        response = tenant_client.post(f"/customers/{customer['id']}/reconcile")
        assert response.status_code == 200
        assert response.json()["customer_id"] == customer["id"]
        assert Decimal(response.json()["balance_due"]) == Decimal("0.00")

    def test_customer_payments_and_cheques(self, tenant_client, customer):
        payment = tenant_client.post("/payments/", json={
            "customer_id": customer["id"], "amount": "75", "method": "check"
        }).json()
        tenant_client.post("/cheques/", json={
            "bank_name": "Banco Central",
            "cheque_date": "2024-06-01",
            "amount": "75",
            "customer_id": customer["id"],
            "payment_id": payment["id"]
        })

        payments = tenant_client.get(f"/customers/{customer['id']}/payments").json()
        cheques = tenant_client.get(f"/customers/{customer['id']}/cheques").json()
        assert [p["id"] for p in payments] == [payment["id"]]
        assert len(cheques) == 1
        assert cheques[0]["payment_id"] == payment["id"]
