"""
Tests para el módulo de Facturas

Cubren:
- Cálculo de totales con impuesto y redondeo ROUND_HALF_UP
- Derivación de pagado, pendiente, estado y vencimiento desde el ledger
- Ciclo completo de liquidación vía API (pago total, parcial y eliminación)
- Unión de partes: ventas -> cliente, compras -> proveedor
"""

import pytest
from datetime import date
from decimal import Decimal

from app.modules.invoices.calculator import SettlementCalculator, to_money, INCOMPLETE_DUE_DATE
from app.modules.invoices.models import (
    Invoice, InvoiceType, InvoiceStatus, InvoicePaymentEntry, InvoiceExpenseEntry
)


# ===== TESTS DEL CALCULADOR =====

class TestSettlementCalculator:
    """Tests puros del motor de liquidación (sin base de datos)"""

    def setup_method(self):
        self.calculator = SettlementCalculator(tax_rate=Decimal("0.16"))

    def test_total_applies_tax(self):
        assert self.calculator.calculate_total_amount([Decimal("1000")]) == Decimal("1160.00")

    def test_total_sums_all_lines(self):
        total = self.calculator.calculate_total_amount([Decimal("250.50"), Decimal("749.50")])
        assert total == Decimal("1160.00")

    def test_line_total_rounds_half_up(self):
        assert self.calculator.line_total(3, "33.335") == Decimal("100.01")
        assert to_money("0.005") == Decimal("0.01")
        assert to_money(None) == Decimal("0.00")

    def test_partial_payment_sets_incomplete(self):
        invoice = Invoice(type=InvoiceType.SALES, status=InvoiceStatus.PENDING, amount=Decimal("1160.00"))
        invoice.payments.append(InvoicePaymentEntry(amount=Decimal("500"), date=date(2024, 1, 10), method="cash"))

        self.calculator.apply(invoice)

        assert invoice.paid_amount == Decimal("500.00")
        assert invoice.remaining_amount == Decimal("660.00")
        assert invoice.status == InvoiceStatus.PARTIALLY_PAID
        assert invoice.due_date == INCOMPLETE_DUE_DATE

    def test_full_payment_uses_last_entry_date(self):
        invoice = Invoice(type=InvoiceType.SALES, status=InvoiceStatus.PENDING, amount=Decimal("1160.00"))
        invoice.payments.append(InvoicePaymentEntry(amount=Decimal("600"), date=date(2024, 2, 1), method="cash"))
        invoice.payments.append(InvoicePaymentEntry(amount=Decimal("560"), date=date(2024, 1, 15), method="card"))

        self.calculator.apply(invoice)

        assert invoice.status == InvoiceStatus.PAID
        assert invoice.remaining_amount == Decimal("0.00")
        # Última por orden de inserción, no por fecha
        assert invoice.due_date == "2024-01-15"

    def test_overpayment_is_paid_with_negative_remaining(self):
        invoice = Invoice(type=InvoiceType.SALES, status=InvoiceStatus.PENDING, amount=Decimal("100.00"))
        invoice.payments.append(InvoicePaymentEntry(amount=Decimal("150"), date=date(2024, 3, 1), method="cash"))

        self.calculator.apply(invoice)

        assert invoice.status == InvoiceStatus.PAID
        assert invoice.remaining_amount == Decimal("-50.00")

    def test_no_payments_keeps_status(self):
        invoice = Invoice(type=InvoiceType.SALES, status=InvoiceStatus.OVERDUE, amount=Decimal("100.00"))
        self.calculator.apply(invoice)
        assert invoice.status == InvoiceStatus.OVERDUE
        assert invoice.remaining_amount == Decimal("100.00")

    def test_emptied_ledger_restores_pending(self):
        invoice = Invoice(
            type=InvoiceType.SALES,
            status=InvoiceStatus.PARTIALLY_PAID,
            amount=Decimal("100.00"),
            due_date=INCOMPLETE_DUE_DATE,
            scheduled_due_date="2030-06-30"
        )
        self.calculator.apply(invoice, ledger_emptied=True)
        assert invoice.status == InvoiceStatus.PENDING
        assert invoice.due_date == "2030-06-30"

    def test_purchase_invoice_uses_expenses_ledger(self):
        invoice = Invoice(type=InvoiceType.PURCHASE, status=InvoiceStatus.PENDING, amount=Decimal("580.00"))
        invoice.payments.append(InvoicePaymentEntry(amount=Decimal("580"), date=date(2024, 1, 1), method="cash"))
        invoice.expenses.append(InvoiceExpenseEntry(amount=Decimal("80"), date=date(2024, 1, 1), method="cash"))

        self.calculator.apply(invoice)

        assert invoice.paid_amount == Decimal("80.00")
        assert invoice.status == InvoiceStatus.PARTIALLY_PAID


# ===== TESTS DE API =====

class TestInvoiceAPI:
    """Creación, consulta y actualización de facturas"""

    def test_create_sales_invoice_computes_total(self, tenant_client, sales_invoice, customer):
        assert sales_invoice["invoice_number"].startswith("INV-")
        assert sales_invoice["status"] == "pending"
        assert Decimal(sales_invoice["amount"]) == Decimal("1160.00")
        assert Decimal(sales_invoice["remaining_amount"]) == Decimal("1160.00")
        assert sales_invoice["customer_name"] == "Cliente Uno"
        assert len(sales_invoice["items"]) == 1
        assert Decimal(sales_invoice["items"][0]["total_price"]) == Decimal("1000.00")

        detail = tenant_client.get(f"/customers/{customer['id']}").json()
        assert sales_invoice["id"] in detail["invoice_ids"]
        assert Decimal(detail["balance_due"]) == Decimal("1160.00")

    def test_created_invoices_carry_party_ids(self, sales_invoice, purchase_invoice, customer, supplier):
        assert sales_invoice["customer_id"] == customer["id"]
        assert sales_invoice["supplier_id"] is None
        assert sales_invoice["type"] == "sales"

        assert purchase_invoice["supplier_id"] == supplier["id"]
        assert purchase_invoice["customer_id"] is None
        assert Decimal(purchase_invoice["amount"]) == Decimal("580.00")

    def test_party_rule_accepts_relationship_before_flush(self):
        from app.database.events import check_party_union
        from app.common.exceptions import ValidationError
        from app.modules.customers.models import Customer

        invoice = Invoice(type=InvoiceType.SALES, customer=Customer(customer_name="Sin guardar"))
        check_party_union(invoice, "La factura")

        with pytest.raises(ValidationError):
            check_party_union(Invoice(type=InvoiceType.PURCHASE, customer=Customer(customer_name="X")), "La factura")

    def test_update_rejects_date_after_due_date(self, tenant_client, sales_invoice):
        response = tenant_client.put(f"/invoices/{sales_invoice['id']}", json={"date": "2031-06-01"})
        assert response.status_code == 400

        invoice = tenant_client.get(f"/invoices/{sales_invoice['id']}").json()
        assert invoice["date"] == sales_invoice["date"]

        response = tenant_client.put(f"/invoices/{sales_invoice['id']}", json={"date": "2030-06-01"})
        assert response.status_code == 200
        assert response.json()["date"] == "2030-06-01"

    def test_invoice_numbers_are_sequential(self, tenant_client, customer, sales_invoice):
        second = tenant_client.post("/invoices/", json={
            "customer_id": customer["id"],
            "items": [{"product_name": "Otro", "quantity": "1", "unit_price": "10"}]
        }).json()
        first_number = int(sales_invoice["invoice_number"].split("-")[1])
        assert int(second["invoice_number"].split("-")[1]) == first_number + 1

    def test_sales_invoice_rejects_supplier(self, tenant_client, customer, supplier):
        response = tenant_client.post("/invoices/", json={
            "type": "sales",
            "customer_id": customer["id"],
            "supplier_id": supplier["id"],
            "items": [{"product_name": "X", "quantity": "1", "unit_price": "10"}]
        })
        assert response.status_code == 400
        assert "error" in response.json()

    def test_invoice_requires_items(self, tenant_client, customer):
        response = tenant_client.post("/invoices/", json={"customer_id": customer["id"], "items": []})
        assert response.status_code == 400

    def test_unknown_customer_returns_404(self, tenant_client):
        response = tenant_client.post("/invoices/", json={
            "customer_id": "00000000-0000-0000-0000-000000000001",
            "items": [{"product_name": "X", "quantity": "1", "unit_price": "10"}]
        })
        assert response.status_code == 404

    def test_missing_tenant_header(self, client):
        response = client.get("/invoices/")
        assert response.status_code == 400
        assert "X-Company-ID" in response.json()["error"]

    def test_other_tenant_cannot_read_invoice(self, client, sales_invoice, db_session):
        from app.modules.companies.models import Company

        other = Company(name="Otra empresa de pruebas")
        db_session.add(other)
        db_session.commit()

        response = client.get(f"/invoices/{sales_invoice['id']}", headers={"X-Company-ID": str(other.id)})
        assert response.status_code == 404

    def test_update_items_recalculates(self, tenant_client, sales_invoice, customer):
        response = tenant_client.put(f"/invoices/{sales_invoice['id']}", json={
            "items": [{"product_name": "Caja de agua", "quantity": "5", "unit_price": "100"}]
        })
        assert response.status_code == 200
        assert Decimal(response.json()["amount"]) == Decimal("580.00")

        detail = tenant_client.get(f"/customers/{customer['id']}").json()
        assert Decimal(detail["balance_due"]) == Decimal("580.00")

    def test_manual_status_change(self, tenant_client, sales_invoice):
        response = tenant_client.patch(f"/invoices/{sales_invoice['id']}/status", json={"status": "overdue"})
        assert response.status_code == 200
        assert response.json()["status"] == "overdue"

        response = tenant_client.patch(f"/invoices/{sales_invoice['id']}/status", json={"status": "paid"})
        assert response.status_code == 400

    def test_search_invoices(self, tenant_client, sales_invoice):
        results = tenant_client.get("/invoices/search", params={"q": "cliente uno"}).json()
        assert [invoice["id"] for invoice in results] == [sales_invoice["id"]]

    def test_list_limit_bounded_by_page_settings(self, tenant_client, sales_invoice):
        from app.core.config import settings

        response = tenant_client.get("/invoices/", params={"limit": settings.MAX_PAGE_SIZE + 1})
        assert response.status_code == 400

        response = tenant_client.get("/invoices/", params={"limit": 1})
        assert [invoice["id"] for invoice in response.json()] == [sales_invoice["id"]]


class TestInvoiceSettlement:
    """Liquidación de facturas a través de pagos y egresos"""

    def test_full_payment_marks_paid(self, tenant_client, sales_invoice, customer):
        response = tenant_client.post("/payments/", json={
            "customer_id": customer["id"],
            "invoice_id": sales_invoice["id"],
            "amount": "1160.00",
            "date": "2024-05-20"
        })
        assert response.status_code == 201

        invoice = tenant_client.get(f"/invoices/{sales_invoice['id']}").json()
        assert invoice["status"] == "paid"
        assert Decimal(invoice["remaining_amount"]) == Decimal("0.00")
        assert invoice["due_date"] == "2024-05-20"

        detail = tenant_client.get(f"/customers/{customer['id']}").json()
        assert Decimal(detail["balance_due"]) == Decimal("0.00")

    def test_partial_payment_then_delete(self, tenant_client, sales_invoice, customer):
        payment = tenant_client.post("/payments/", json={
            "customer_id": customer["id"],
            "invoice_id": sales_invoice["id"],
            "amount": "500"
        }).json()

        invoice = tenant_client.get(f"/invoices/{sales_invoice['id']}").json()
        assert invoice["status"] == "partially_paid"
        assert Decimal(invoice["paid_amount"]) == Decimal("500.00")
        assert Decimal(invoice["remaining_amount"]) == Decimal("660.00")
        assert invoice["due_date"] == "Incomplete"
        assert [entry["payment_id"] for entry in invoice["payments"]] == [payment["id"]]

        response = tenant_client.delete(f"/payments/{payment['id']}")
        assert response.status_code == 200

        invoice = tenant_client.get(f"/invoices/{sales_invoice['id']}").json()
        assert invoice["status"] == "pending"
        assert Decimal(invoice["remaining_amount"]) == Decimal("1160.00")
        assert invoice["due_date"] == "2030-12-31"
        assert invoice["payments"] == []

        detail = tenant_client.get(f"/customers/{customer['id']}").json()
        assert payment["id"] not in detail["payment_ids"]
        assert Decimal(detail["balance_due"]) == Decimal("1160.00")

    def test_status_locked_while_payments_exist(self, tenant_client, sales_invoice, customer):
        tenant_client.post("/payments/", json={
            "customer_id": customer["id"], "invoice_id": sales_invoice["id"], "amount": "100"
        })
        response = tenant_client.patch(f"/invoices/{sales_invoice['id']}/status", json={"status": "overdue"})
        assert response.status_code == 400

    def test_payment_on_purchase_invoice_rejected(self, tenant_client, purchase_invoice, customer):
        response = tenant_client.post("/payments/", json={
            "customer_id": customer["id"], "invoice_id": purchase_invoice["id"], "amount": "10"
        })
        assert response.status_code == 400

    def test_attach_and_remove_payment_through_invoice(self, tenant_client, sales_invoice, customer):
        payment = tenant_client.post("/payments/", json={"customer_id": customer["id"], "amount": "160"}).json()

        response = tenant_client.post(f"/invoices/{sales_invoice['id']}/payments", json={
            "payment_id": payment["id"], "amount": "160", "date": "2024-01-01"
        })
        assert response.status_code == 200
        assert Decimal(response.json()["remaining_amount"]) == Decimal("1000.00")

        # El mismo pago no se registra dos veces
        response = tenant_client.post(f"/invoices/{sales_invoice['id']}/payments", json={
            "payment_id": payment["id"], "amount": "160"
        })
        assert response.status_code == 400

        response = tenant_client.delete(f"/invoices/{sales_invoice['id']}/payments/{payment['id']}")
        assert response.status_code == 200
        assert response.json()["status"] == "pending"

    def test_ledger_entry_uses_payment_amount(self, tenant_client, sales_invoice, customer):
        payment = tenant_client.post("/payments/", json={"customer_id": customer["id"], "amount": "100"}).json()

        response = tenant_client.post(f"/invoices/{sales_invoice['id']}/payments", json={
            "payment_id": payment["id"], "amount": "1160"
        })
        assert response.status_code == 400
        invoice = tenant_client.get(f"/invoices/{sales_invoice['id']}").json()
        assert invoice["status"] == "pending"
        assert invoice["payments"] == []

        response = tenant_client.post(f"/invoices/{sales_invoice['id']}/payments", json={
            "payment_id": payment["id"]
        })
        assert response.status_code == 200
        invoice = response.json()
        assert invoice["status"] == "partially_paid"
        assert Decimal(invoice["remaining_amount"]) == Decimal("1060.00")
        assert Decimal(invoice["payments"][0]["amount"]) == Decimal("100.00")

        balance = tenant_client.post(f"/customers/{customer['id']}/reconcile").json()
        assert Decimal(balance["balance_due"]) == Decimal(invoice["remaining_amount"])

    def test_ledger_entry_rejects_mismatched_expense_amount(self, tenant_client, purchase_invoice, supplier, sample_user):
        expense = tenant_client.post("/expenses/", json={
            "supplier_id": supplier["id"], "created_by": str(sample_user.id), "amount": "100"
        }).json()

        response = tenant_client.post(f"/invoices/{purchase_invoice['id']}/expenses", json={
            "expense_id": expense["id"], "amount": "580"
        })
        assert response.status_code == 400

        response = tenant_client.post(f"/invoices/{purchase_invoice['id']}/expenses", json={
            "expense_id": expense["id"], "amount": "100.00"
        })
        assert response.status_code == 200
        assert Decimal(response.json()["remaining_amount"]) == Decimal("480.00")

    def test_expense_settles_purchase_invoice(self, tenant_client, purchase_invoice, supplier, sample_user):
        response = tenant_client.post("/expenses/", json={
            "supplier_id": supplier["id"],
            "invoice_id": purchase_invoice["id"],
            "created_by": str(sample_user.id),
            "amount": "580"
        })
        assert response.status_code == 201

        invoice = tenant_client.get(f"/invoices/{purchase_invoice['id']}").json()
        assert invoice["status"] == "paid"
        assert len(invoice["expenses"]) == 1

        balance = tenant_client.post(f"/suppliers/{supplier['id']}/reconcile").json()
        assert Decimal(balance["balance_due"]) == Decimal("0.00")

    def test_delete_invoice_reconciles_party(self, tenant_client, sales_invoice, customer):
        payment = tenant_client.post("/payments/", json={
            "customer_id": customer["id"], "invoice_id": sales_invoice["id"], "amount": "160"
        }).json()

        response = tenant_client.delete(f"/invoices/{sales_invoice['id']}")
        assert response.status_code == 200

        detail = tenant_client.get(f"/customers/{customer['id']}").json()
        assert sales_invoice["id"] not in detail["invoice_ids"]
        assert Decimal(detail["balance_due"]) == Decimal("-160.00")

        orphan = tenant_client.get(f"/payments/{payment['id']}").json()
        assert orphan["invoice_id"] is None
