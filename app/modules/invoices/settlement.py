"""
Liquidación de facturas y reconciliación de saldos de las partes

Reúne las operaciones que mueven dinero entre facturas, pagos, egresos,
clientes y proveedores. Ninguna hace commit: el servicio que las invoca abre
la transacción y confirma o revierte todo el conjunto.
"""

from decimal import Decimal
from typing import Optional
import logging

from sqlalchemy.orm import Session

from app.common.exceptions import ValidationError
from app.modules.invoices.calculator import SettlementCalculator, to_money
from app.modules.invoices.models import (
    Invoice, InvoiceType, InvoicePaymentEntry, InvoiceExpenseEntry
)

logger = logging.getLogger(__name__)


class SettlementService:
    """Adjuntar y retirar entradas del ledger y reconciliar saldos"""

    def __init__(self, db: Session, calculator: Optional[SettlementCalculator] = None):
        self.db = db
        self.calculator = calculator or SettlementCalculator()

    # ------------------------------------------------------------------
    # Ledger de la factura
    # ------------------------------------------------------------------

    def attach_payment(self, invoice: Invoice, payment_id, amount, date, method, reference=None) -> InvoicePaymentEntry:
        """Agregar un pago al ledger de una factura de venta y recalcular"""
        if invoice.type != InvoiceType.SALES:
            raise ValidationError("Solo las facturas de venta se liquidan con pagos")
        if any(entry.payment_id == payment_id for entry in invoice.payments):
            raise ValidationError("El pago ya está registrado en la factura")

        entry = InvoicePaymentEntry(
            payment_id=payment_id,
            amount=to_money(amount),
            date=date,
            method=_method_value(method),
            reference=reference
        )
        invoice.payments.append(entry)
        self.calculator.apply(invoice)

        logger.info(
            f"Pago {payment_id} aplicado a factura {invoice.invoice_number}: "
            f"pendiente={invoice.remaining_amount} estado={invoice.status.value}"
        )
        return entry

    def detach_payment(self, invoice: Invoice, payment_id) -> bool:
        """Retirar un pago del ledger; False si la factura no lo contiene"""
        entry = next((e for e in invoice.payments if e.payment_id == payment_id), None)
        if entry is None:
            return False

        invoice.payments.remove(entry)
        self.calculator.apply(invoice, ledger_emptied=not invoice.payments)

        logger.info(
            f"Pago {payment_id} retirado de factura {invoice.invoice_number}: "
            f"pendiente={invoice.remaining_amount} estado={invoice.status.value}"
        )
        return True

    def attach_expense(self, invoice: Invoice, expense_id, amount, date, method, reference=None) -> InvoiceExpenseEntry:
        """Agregar un egreso al ledger de una factura de compra y recalcular"""
        if invoice.type != InvoiceType.PURCHASE:
            raise ValidationError("Solo las facturas de compra se liquidan con egresos")
        if any(entry.expense_id == expense_id for entry in invoice.expenses):
            raise ValidationError("El egreso ya está registrado en la factura")

        entry = InvoiceExpenseEntry(
            expense_id=expense_id,
            amount=to_money(amount),
            date=date,
            method=_method_value(method),
            reference=reference
        )
        invoice.expenses.append(entry)
        self.calculator.apply(invoice)

        logger.info(
            f"Egreso {expense_id} aplicado a factura {invoice.invoice_number}: "
            f"pendiente={invoice.remaining_amount} estado={invoice.status.value}"
        )
        return entry

    def detach_expense(self, invoice: Invoice, expense_id) -> bool:
        """Retirar un egreso del ledger; False si la factura no lo contiene"""
        entry = next((e for e in invoice.expenses if e.expense_id == expense_id), None)
        if entry is None:
            return False

        invoice.expenses.remove(entry)
        self.calculator.apply(invoice, ledger_emptied=not invoice.expenses)

        logger.info(
            f"Egreso {expense_id} retirado de factura {invoice.invoice_number}: "
            f"pendiente={invoice.remaining_amount} estado={invoice.status.value}"
        )
        return True

    def replace_items(self, invoice: Invoice, items) -> Decimal:
        """Reemplazar los ítems, recalcular el total y la liquidación"""
        from app.modules.invoices.models import InvoiceLineItem

        invoice.items.clear()
        for position, item in enumerate(items):
            invoice.items.append(InvoiceLineItem(
                product_id=item.product_id,
                position=position,
                product_name=item.product_name,
                quantity=item.quantity,
                free_quantity=item.free_quantity,
                unit_price=to_money(item.unit_price),
                total_price=to_money(item.total_price)
            ))

        invoice.amount = self.calculator.calculate_total_amount(item.total_price for item in items)
        self.calculator.apply(invoice)
        return invoice.amount

    # ------------------------------------------------------------------
    # Listas de referencia inversa y saldos
    # ------------------------------------------------------------------

    @staticmethod
    def link(collection, record) -> bool:
        """Agregar a una lista de referencias si no está; True si se agregó"""
        if record in collection:
            return False
        collection.append(record)
        return True

    @staticmethod
    def unlink(collection, record) -> bool:
        if record not in collection:
            return False
        collection.remove(record)
        return True

    def reconcile_customer(self, customer) -> Decimal:
        """balance_due = Σ facturas del cliente − Σ pagos del cliente"""
        invoiced = sum((to_money(i.amount) for i in customer.invoice_list), Decimal("0"))
        paid = sum((to_money(p.amount) for p in customer.payment_list), Decimal("0"))
        customer.balance_due = to_money(invoiced - paid)
        logger.info(f"Saldo reconciliado cliente {customer.id}: {customer.balance_due}")
        return customer.balance_due

    def reconcile_supplier(self, supplier) -> Decimal:
        """balance_due = Σ facturas del proveedor − Σ egresos del proveedor"""
        invoiced = sum((to_money(i.amount) for i in supplier.invoice_list), Decimal("0"))
        paid = sum((to_money(e.amount) for e in supplier.expense_list), Decimal("0"))
        supplier.balance_due = to_money(invoiced - paid)
        logger.info(f"Saldo reconciliado proveedor {supplier.id}: {supplier.balance_due}")
        return supplier.balance_due

    def reconcile_invoice_party(self, invoice: Invoice):
        """Reconciliar el cliente o proveedor dueño de la factura"""
        if invoice.customer is not None:
            self.link(invoice.customer.invoice_list, invoice)
            self.reconcile_customer(invoice.customer)
        if invoice.supplier is not None:
            self.link(invoice.supplier.invoice_list, invoice)
            self.reconcile_supplier(invoice.supplier)


def _method_value(method) -> str:
    return getattr(method, "value", method)
