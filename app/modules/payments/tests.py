"""
Tests para el módulo de Pagos
"""

from decimal import Decimal


class TestPaymentAPI:

    def test_create_payment_numbering(self, tenant_client, customer):
        first = tenant_client.post("/payments/", json={"customer_id": customer["id"], "amount": "10"}).json()
        second = tenant_client.post("/payments/", json={"customer_id": customer["id"], "amount": "20"}).json()
        assert first["payment_number"] == "PAY-000001"
        assert second["payment_number"] == "PAY-000002"
        assert first["method"] == "cash"
        assert first["status"] == "completed"

    def test_amount_must_be_positive(self, tenant_client, customer):
        response = tenant_client.post("/payments/", json={"customer_id": customer["id"], "amount": "0"})
        assert response.status_code == 400
        assert "amount" in response.json()["error"]

    def test_unknown_customer(self, tenant_client):
        response = tenant_client.post("/payments/", json={
            "customer_id": "00000000-0000-0000-0000-000000000002", "amount": "10"
        })
        assert response.status_code == 404

    def test_invoice_of_other_customer_rejected(self, tenant_client, sales_invoice):
        other = tenant_client.post("/customers/", json={"customer_name": "Cliente Dos"}).json()
        response = tenant_client.post("/payments/", json={
            "customer_id": other["id"], "invoice_id": sales_invoice["id"], "amount": "10"
        })
        assert response.status_code == 400

        # Nada quedó registrado
        assert tenant_client.get("/payments/", params={"customer_id": other["id"]}).json() == []

    def test_created_by_must_exist(self, tenant_client, customer):
        response = tenant_client.post("/payments/", json={
            "customer_id": customer["id"], "amount": "10",
            "created_by": "00000000-0000-0000-0000-000000000003"
        })
        assert response.status_code == 404

    def test_list_filters(self, tenant_client, customer, sample_user):
        tenant_client.post("/payments/", json={
            "customer_id": customer["id"], "amount": "10", "date": "2024-01-10", "method": "card"
        })
        tenant_client.post("/payments/", json={
            "customer_id": customer["id"], "amount": "20", "date": "2024-02-10",
            "created_by": str(sample_user.id)
        })

        assert len(tenant_client.get("/payments/").json()) == 2
        assert len(tenant_client.get("/payments/", params={"method": "card"}).json()) == 1
        assert len(tenant_client.get("/payments/", params={"date": "2024-02-10"}).json()) == 1
        assert len(tenant_client.get("/payments/", params={"created_by": str(sample_user.id)}).json()) == 1
        in_range = tenant_client.get("/payments/", params={"start_date": "2024-01-01", "end_date": "2024-01-31"})
        assert [Decimal(p["amount"]) for p in in_range.json()] == [Decimal("10.00")]

    def test_search(self, tenant_client, customer):
        payment = tenant_client.post("/payments/", json={
            "customer_id": customer["id"], "amount": "10", "reference": "TRX-7781"
        }).json()
        results = tenant_client.get("/payments/search", params={"q": "7781"}).json()
        assert [p["id"] for p in results] == [payment["id"]]

    def test_update_amount_resettles_invoice(self, tenant_client, customer, sales_invoice):
        payment = tenant_client.post("/payments/", json={
            "customer_id": customer["id"], "invoice_id": sales_invoice["id"], "amount": "500"
        }).json()

        response = tenant_client.put(f"/payments/{payment['id']}", json={"amount": "1160"})
        assert response.status_code == 200

        invoice = tenant_client.get(f"/invoices/{sales_invoice['id']}").json()
        assert invoice["status"] == "paid"
        assert Decimal(invoice["payments"][0]["amount"]) == Decimal("1160.00")

        detail = tenant_client.get(f"/customers/{customer['id']}").json()
        assert Decimal(detail["balance_due"]) == Decimal("0.00")

    def test_delete_check_payment_removes_cheques(self, tenant_client, customer):
        payment = tenant_client.post("/payments/", json={
            "customer_id": customer["id"], "amount": "75", "method": "check"
        }).json()
        cheque = tenant_client.post("/cheques/", json={
            "bank_name": "Banco Central", "cheque_date": "2024-06-01", "amount": "75",
            "customer_id": customer["id"], "payment_id": payment["id"]
        }).json()
        assert tenant_client.get(f"/payments/{payment['id']}").json()["cheque_ids"] == [cheque["id"]]

        assert tenant_client.delete(f"/payments/{payment['id']}").status_code == 200
        assert tenant_client.get(f"/cheques/{cheque['id']}").status_code == 404

    def test_delete_all(self, tenant_client, customer, sales_invoice):
        tenant_client.post("/payments/", json={
            "customer_id": customer["id"], "invoice_id": sales_invoice["id"], "amount": "100"
        })
        tenant_client.post("/payments/", json={"customer_id": customer["id"], "amount": "50"})

        response = tenant_client.delete("/payments/delete-all")
        assert response.status_code == 200
        assert response.json()["deleted_count"] == 2

        invoice = tenant_client.get(f"/invoices/{sales_invoice['id']}").json()
        assert invoice["status"] == "pending"
        detail = tenant_client.get(f"/customers/{customer['id']}").json()
        assert detail["payment_ids"] == []
        assert Decimal(detail["balance_due"]) == Decimal("1160.00")
