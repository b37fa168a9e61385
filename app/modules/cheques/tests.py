"""
Tests para el módulo de Cheques

Reglas de vinculación: un cheque pertenece a un cliente o a un proveedor
(nunca a ambos) y a lo sumo a un pago o a un egreso.
"""

import pytest
from decimal import Decimal


def cheque_payload(**extra):
    payload = {"bank_name": "Banco Central", "cheque_date": "2024-06-01", "amount": "250"}
    payload.update(extra)
    return payload


@pytest.fixture
def customer_cheque(tenant_client, customer):
    response = tenant_client.post("/cheques/", json=cheque_payload(customer_id=customer["id"]))
    assert response.status_code == 201
    return response.json()


class TestChequeLinks:

    def test_customer_and_supplier_rejected(self, tenant_client, customer, supplier):
        response = tenant_client.post("/cheques/", json=cheque_payload(
            customer_id=customer["id"], supplier_id=supplier["id"]
        ))
        assert response.status_code == 400
        assert tenant_client.get("/cheques/").json() == []

    def test_no_party_rejected(self, tenant_client):
        response = tenant_client.post("/cheques/", json=cheque_payload())
        assert response.status_code == 400

    def test_payment_and_expense_rejected(self, tenant_client, customer, supplier, sample_user):
        payment = tenant_client.post("/payments/", json={"customer_id": customer["id"], "amount": "10"}).json()
        expense = tenant_client.post("/expenses/", json={
            "supplier_id": supplier["id"], "created_by": str(sample_user.id), "amount": "10"
        }).json()
        response = tenant_client.post("/cheques/", json=cheque_payload(
            customer_id=customer["id"], payment_id=payment["id"], expense_id=expense["id"]
        ))
        assert response.status_code == 400

    def test_payment_of_other_customer_rejected(self, tenant_client, customer):
        other = tenant_client.post("/customers/", json={"customer_name": "Cliente Dos"}).json()
        payment = tenant_client.post("/payments/", json={"customer_id": other["id"], "amount": "10"}).json()
        response = tenant_client.post("/cheques/", json=cheque_payload(
            customer_id=customer["id"], payment_id=payment["id"]
        ))
        assert response.status_code == 400

    def test_update_cannot_break_links(self, tenant_client, customer_cheque, supplier):
        response = tenant_client.put(f"/cheques/{customer_cheque['id']}", json={"supplier_id": supplier["id"]})
        assert response.status_code == 400

        cheque = tenant_client.get(f"/cheques/{customer_cheque['id']}").json()
        assert cheque["supplier_id"] is None


class TestChequeAPI:

    def test_generated_number(self, customer_cheque):
        assert customer_cheque["cheque_number"] == "CHQ-000001"
        assert customer_cheque["status"] == "pending"
        assert customer_cheque["type"] == "received"

    def test_duplicate_number_per_bank(self, tenant_client, customer):
        tenant_client.post("/cheques/", json=cheque_payload(customer_id=customer["id"], cheque_number="0001"))
        response = tenant_client.post("/cheques/", json=cheque_payload(customer_id=customer["id"], cheque_number="0001"))
        assert response.status_code == 409

        response = tenant_client.post("/cheques/", json=cheque_payload(
            customer_id=customer["id"], cheque_number="0001", bank_name="Banco Andino"
        ))
        assert response.status_code == 201

    def test_issued_cheque_for_expense(self, tenant_client, supplier, sample_user):
        expense = tenant_client.post("/expenses/", json={
            "supplier_id": supplier["id"], "created_by": str(sample_user.id), "amount": "90", "method": "check"
        }).json()
        response = tenant_client.post("/cheques/", json=cheque_payload(
            supplier_id=supplier["id"], expense_id=expense["id"], type="issued", amount="90"
        ))
        assert response.status_code == 201

        cheques = tenant_client.get(f"/suppliers/{supplier['id']}/cheques").json()
        assert [Decimal(c["amount"]) for c in cheques] == [Decimal("90.00")]

        tenant_client.delete(f"/expenses/{expense['id']}")
        assert tenant_client.get(f"/suppliers/{supplier['id']}/cheques").json() == []

    def test_status_update(self, tenant_client, customer_cheque):
        response = tenant_client.patch(f"/cheques/{customer_cheque['id']}/status", json={"status": "cleared"})
        assert response.status_code == 200
        assert response.json()["status"] == "cleared"

        cleared = tenant_client.get("/cheques/", params={"status": "cleared"}).json()
        assert [c["id"] for c in cleared] == [customer_cheque["id"]]

    def test_filters_and_search(self, tenant_client, customer, customer_cheque):
        tenant_client.post("/cheques/", json=cheque_payload(
            customer_id=customer["id"], cheque_date="2024-09-15", holder_name="María Ruiz"
        ))
        in_range = tenant_client.get("/cheques/", params={"start_date": "2024-09-01", "end_date": "2024-09-30"})
        assert len(in_range.json()) == 1
        assert len(tenant_client.get("/cheques/", params={"date": "2024-06-01"}).json()) == 1

        results = tenant_client.get("/cheques/search", params={"q": "ruiz"}).json()
        assert results[0]["holder_name"] == "María Ruiz"

    def test_delete(self, tenant_client, customer_cheque):
        assert tenant_client.delete(f"/cheques/{customer_cheque['id']}").status_code == 200
        assert tenant_client.get(f"/cheques/{customer_cheque['id']}").status_code == 404
