"""
Tests para el módulo de Proveedores
"""

from decimal import Decimal


class TestSupplierCRUD:

    def test_create_defaults_to_goods_supplier(self, supplier):
        assert supplier["supplier_type"] == "goods_supplier"
        assert Decimal(supplier["balance_due"]) == Decimal("0.00")

    def test_duplicate_name(self, tenant_client, supplier):
        response = tenant_client.post("/suppliers/", json={"supplier_name": supplier["supplier_name"]})
        assert response.status_code == 409

    def test_filter_by_type(self, tenant_client, supplier, service_provider):
        providers = tenant_client.get("/suppliers/", params={"supplier_type": "service_provider"}).json()
        assert [s["id"] for s in providers] == [service_provider["id"]]

    def test_search(self, tenant_client, service_provider):
        results = tenant_client.get("/suppliers/search", params={"q": "limpiezas"}).json()
        assert [s["id"] for s in results] == [service_provider["id"]]

    def test_by_user(self, tenant_client, sample_user):
        created = tenant_client.post("/suppliers/", json={
            "supplier_name": "Distribuidora Norte", "user_id": str(sample_user.id)
        }).json()
        results = tenant_client.get(f"/suppliers/user/{sample_user.id}").json()
        assert [s["id"] for s in results] == [created["id"]]

    def test_provider_with_services_keeps_type(self, tenant_client, service_provider):
        tenant_client.post("/services/", json={"name": "Aseo", "provider_ids": [service_provider["id"]]})
        response = tenant_client.put(
            f"/suppliers/{service_provider['id']}", json={"supplier_type": "goods_supplier"}
        )
        assert response.status_code == 400

    def test_delete_sole_provider_rejected(self, tenant_client, service_provider):
        tenant_client.post("/services/", json={"name": "Aseo", "provider_ids": [service_provider["id"]]})
        assert tenant_client.delete(f"/suppliers/{service_provider['id']}").status_code == 400

    def test_delete_with_invoices_rejected(self, tenant_client, supplier, purchase_invoice):
        assert tenant_client.delete(f"/suppliers/{supplier['id']}").status_code == 400

    def test_delete(self, tenant_client, supplier):
        assert tenant_client.delete(f"/suppliers/{supplier['id']}").status_code == 200
        assert tenant_client.get(f"/suppliers/{supplier['id']}").status_code == 404


class TestSupplierSettlement:

    def test_add_invoice_from_supplier(self, tenant_client, supplier):
        response = tenant_client.post(f"/suppliers/{supplier['id']}/invoices", json={
            "items": [{"product_name": "Harina", "quantity": "4", "unit_price": "25"}]
        })
        assert response.status_code == 201
        invoice = response.json()
        assert invoice["type"] == "purchase"
        assert invoice["supplier_name"] == supplier["supplier_name"]
        assert Decimal(invoice["amount"]) == Decimal("116.00")

        detail = tenant_client.get(f"/suppliers/{supplier['id']}").json()
        assert detail["invoice_ids"] == [invoice["id"]]
        assert Decimal(detail["balance_due"]) == Decimal("116.00")

    def test_expense_links(self, tenant_client, supplier, sample_user, purchase_invoice):
        expense = tenant_client.post("/expenses/", json={
            "supplier_id": supplier["id"], "created_by": str(sample_user.id), "amount": "80"
        }).json()

        response = tenant_client.post(f"/suppliers/{supplier['id']}/expenses", json={"expense_id": expense["id"]})
        assert response.json()["expense_ids"] == [expense["id"]]
        assert Decimal(response.json()["balance_due"]) == Decimal("500.00")

        response = tenant_client.delete(f"/suppliers/{supplier['id']}/expenses/{expense['id']}")
        assert response.json()["expense_ids"] == []
        assert Decimal(response.json()["balance_due"]) == Decimal("580.00")

        listed = tenant_client.get(f"/suppliers/{supplier['id']}/expenses").json()
        assert listed == []

    def test_services_only_for_providers(self, tenant_client, supplier, service_provider):
        service = tenant_client.post("/services/", json={
            "name": "Aseo", "provider_ids": [service_provider["id"]]
        }).json()

        response = tenant_client.post(f"/suppliers/{supplier['id']}/services", json={"service_id": service["id"]})
        assert response.status_code == 400

        other = tenant_client.post("/suppliers/", json={
            "supplier_name": "Aseo Express", "supplier_type": "service_provider"
        }).json()
        response = tenant_client.post(f"/suppliers/{other['id']}/services", json={"service_id": service["id"]})
        assert response.json()["service_ids"] == [service["id"]]

        services = tenant_client.get(f"/suppliers/{other['id']}/services").json()
        assert [s["id"] for s in services] == [service["id"]]

        response = tenant_client.delete(f"/suppliers/{other['id']}/services/{service['id']}")
        assert response.status_code == 200
        response = tenant_client.delete(f"/suppliers/{service_provider['id']}/services/{service['id']}")
        assert response.status_code == 400
