"""
Tests for the public subscription request form.
"""
import pytest
from uuid import uuid4


@pytest.fixture
def subscription_request(client):
    response = client.post("/subscription-requests/", json={
        "company_name": f"Panadería {uuid4().hex[:6]}",
        "contact_name": "Jorge Díaz",
        "email": "jorge@panaderia.com",
        "phone": "+54 11 5555-0000",
        "country": "Argentina",
        "plan": "premium"
    })
    assert response.status_code == 201
    return response.json()


def test_create_request_is_pending(subscription_request):
    assert subscription_request["status"] == "pending"
    assert subscription_request["processed_at"] is None


def test_invalid_email_rejected(client):
    response = client.post("/subscription-requests/", json={
        "company_name": "X", "contact_name": "Y", "email": "no-es-un-correo", "phone": "12345"
    })
    assert response.status_code == 400


def test_approve_request(client, subscription_request, sample_user):
    response = client.patch(f"/subscription-requests/{subscription_request['id']}/status", json={
        "status": "approved", "processed_by": str(sample_user.id)
    })
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "approved"
    assert data["processed_by"] == str(sample_user.id)
    assert data["processed_at"] is not None

    approved = client.get("/subscription-requests/status/approved").json()
    assert subscription_request["id"] in [r["id"] for r in approved]


def test_cannot_return_to_pending(client, subscription_request):
    response = client.patch(f"/subscription-requests/{subscription_request['id']}/status", json={"status": "pending"})
    assert response.status_code == 400


def test_search_update_delete(client, subscription_request):
    results = client.get("/subscription-requests/search", params={"q": subscription_request["company_name"]}).json()
    assert [r["id"] for r in results] == [subscription_request["id"]]

    response = client.put(f"/subscription-requests/{subscription_request['id']}", json={"industry": "Alimentos"})
    assert response.json()["industry"] == "Alimentos"

    assert client.delete(f"/subscription-requests/{subscription_request['id']}").status_code == 200
    assert client.get(f"/subscription-requests/{subscription_request['id']}").status_code == 404
