"""
Tests para el módulo de Usuarios
"""

from uuid import uuid4

from app.modules.users.utils import hash_password, verify_password


def user_payload(**extra):
    payload = {
        "first_name": "Carla",
        "last_name": "Suárez",
        "username": f"carla_{uuid4().hex[:8]}",
        "password": "s3creta-123",
    }
    payload.update(extra)
    return payload


class TestPasswordHashing:

    def test_hash_and_verify(self):
        hashed = hash_password("s3creta-123")
        assert hashed != "s3creta-123"
        assert verify_password("s3creta-123", hashed)
        assert not verify_password("otra-clave", hashed)


class TestUserAPI:

    def test_create_user_hides_password(self, client):
        response = client.post("/users/", json=user_payload())
        assert response.status_code == 201
        data = response.json()
        assert "password" not in data
        assert data["full_name"] == "Carla Suárez"
        assert data["role"] == "user"

    def test_short_password_rejected(self, client):
        response = client.post("/users/", json=user_payload(password="corta"))
        assert response.status_code == 400

    def test_duplicate_username(self, client):
        payload = user_payload()
        client.post("/users/", json=payload)
        response = client.post("/users/", json=payload)
        assert response.status_code == 409

    def test_lookups(self, client, sample_company):
        admin = client.post("/users/", json=user_payload(
            role="admin", company_id=str(sample_company.id)
        )).json()

        assert client.get(f"/users/username/{admin['username']}").json()["id"] == admin["id"]
        assert admin["id"] in [u["id"] for u in client.get("/users/admins").json()]
        assert [u["id"] for u in client.get(f"/users/company/{sample_company.id}").json()] == [admin["id"]]
        assert admin["id"] in [u["id"] for u in client.get("/users/", params={"role": "admin"}).json()]

    def test_update_and_delete(self, client):
        user = client.post("/users/", json=user_payload()).json()

        response = client.put(f"/users/{user['id']}", json={"role": "driver", "password": "nueva-clave-1"})
        assert response.status_code == 200
        assert response.json()["role"] == "driver"

        assert client.delete(f"/users/{user['id']}").status_code == 200
        assert client.get(f"/users/{user['id']}").status_code == 404
