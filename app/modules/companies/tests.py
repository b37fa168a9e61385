"""
Tests para el módulo de Empresas

La empresa es el tenant; sus endpoints no requieren X-Company-ID.
"""

import pytest
from datetime import datetime, timedelta, timezone
from uuid import uuid4


def unique_name(prefix="Empresa"):
    return f"{prefix} {uuid4().hex[:8]}"


@pytest.fixture
def company(client):
    response = client.post("/companies/", json={
        "name": unique_name(), "contact_email": "info@empresa.com", "settings": {"currency": "ARS"}
    })
    assert response.status_code == 201
    return response.json()


class TestCompanyAPI:

    def test_create_merges_settings(self, company):
        assert company["subscription_status"] == "active"
        assert company["settings"]["currency"] == "ARS"
        assert company["settings"]["invoice_prefix"] == "INV-"

    def test_duplicate_name(self, client, company):
        response = client.post("/companies/", json={"name": company["name"]})
        assert response.status_code == 409

    def test_past_end_date_expires_on_save(self, client):
        past = (datetime.now(timezone.utc) - timedelta(days=3)).isoformat()
        response = client.post("/companies/", json={"name": unique_name(), "subscription_end_date": past})
        assert response.status_code == 201
        assert response.json()["subscription_status"] == "expired"

    def test_extending_expired_subscription_reactivates(self, client):
        past = (datetime.now(timezone.utc) - timedelta(days=3)).isoformat()
        company = client.post("/companies/", json={"name": unique_name(), "subscription_end_date": past}).json()

        future = (datetime.now(timezone.utc) + timedelta(days=30)).isoformat()
        response = client.patch(f"/companies/{company['id']}/subscription", json={
            "subscription_end_date": future, "subscription_type": "premium"
        })
        assert response.status_code == 200
        assert response.json()["subscription_status"] == "active"
        assert response.json()["subscription_type"] == "premium"

    def test_expiring(self, client):
        soon = (datetime.now(timezone.utc) + timedelta(days=2)).isoformat()
        company = client.post("/companies/", json={"name": unique_name(), "subscription_end_date": soon}).json()

        expiring = client.get("/companies/expiring", params={"days": 3}).json()
        assert company["id"] in [c["id"] for c in expiring]

    def test_custom_invoice_prefix(self, client, company):
        client.put(f"/companies/{company['id']}", json={"settings": {"invoice_prefix": "FAC-"}})
        headers = {"X-Company-ID": company["id"]}

        customer = client.post("/customers/", json={"customer_name": "Cliente"}, headers=headers).json()
        invoice = client.post("/invoices/", json={
            "customer_id": customer["id"],
            "items": [{"product_name": "X", "quantity": "1", "unit_price": "1"}]
        }, headers=headers).json()
        assert invoice["invoice_number"] == "FAC-000001"

    def test_authorized_users_and_statistics(self, client, company, sample_user):
        response = client.post(f"/companies/{company['id']}/users", json={"user_id": str(sample_user.id)})
        assert response.status_code == 200
        client.post(f"/companies/{company['id']}/users", json={"user_id": str(sample_user.id)})

        users = client.get(f"/companies/{company['id']}/users").json()
        assert [u["id"] for u in users] == [str(sample_user.id)]

        stats = client.get(f"/companies/{company['id']}/statistics").json()
        assert stats["user_count"] == 1
        assert stats["active_subscription"] is True
        assert stats["subscription_days_left"] >= 29

        response = client.delete(f"/companies/{company['id']}/users/{sample_user.id}")
        assert response.status_code == 200
        assert client.get(f"/companies/{company['id']}/users").json() == []

    def test_search_and_delete(self, client, company):
        results = client.get("/companies/search", params={"q": company["name"]}).json()
        assert [c["id"] for c in results] == [company["id"]]

        assert client.delete(f"/companies/{company['id']}").status_code == 200
        assert client.get(f"/companies/{company['id']}").status_code == 404
