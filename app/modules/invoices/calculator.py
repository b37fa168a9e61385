"""
Motor de liquidación de facturas

Calcula el total de una factura a partir de sus ítems, aplica el impuesto y
deriva monto pagado, saldo pendiente, estado y fecha de vencimiento a partir
del ledger que corresponde al tipo de factura (pagos para ventas, egresos
para compras).

Política decimal: todos los montos se redondean a 2 decimales con
ROUND_HALF_UP.
"""

from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

from app.core.config import settings
from app.modules.invoices.models import Invoice, InvoiceStatus

TWO_PLACES = Decimal("0.01")

# Valor de due_date mientras la factura está parcialmente pagada
INCOMPLETE_DUE_DATE = "Incomplete"


def to_money(value) -> Decimal:
    """Normalizar un valor numérico a Decimal con 2 decimales"""
    if value is None:
        return Decimal("0.00")
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


class SettlementCalculator:
    """Cálculo de totales y estado de liquidación de facturas"""

    def __init__(self, tax_rate: Optional[Decimal] = None):
        self.tax_rate = Decimal(str(tax_rate if tax_rate is not None else settings.TAX_RATE))

    def line_total(self, quantity, unit_price) -> Decimal:
        """Total de una línea sin impuesto (cantidad × precio unitario)"""
        return to_money(Decimal(str(quantity)) * Decimal(str(unit_price)))

    def calculate_total_amount(self, line_totals: Iterable) -> Decimal:
        """
        Calcular el monto total de la factura

        Args:
            line_totals: totales por línea (total_price), ya calculados

        Returns:
            Σ(total_price) × (1 + tasa de impuesto), redondeado a 2 decimales
        """
        subtotal = sum((Decimal(str(total)) for total in line_totals), Decimal("0"))
        return to_money(subtotal * (Decimal("1") + self.tax_rate))

    def paid_amount(self, invoice: Invoice) -> Decimal:
        """Suma de las entradas del ledger aplicable al tipo de factura"""
        return to_money(sum((to_money(entry.amount) for entry in invoice.ledger), Decimal("0")))

    def apply(self, invoice: Invoice, ledger_emptied: bool = False) -> Invoice:
        """
        Recalcular pagado, pendiente, estado y vencimiento de la factura

        Reglas, en orden de prioridad:
            - pendiente <= 0: estado paid y due_date = fecha de la última
              entrada del ledger (por orden de inserción)
            - pagado > 0: estado partially_paid y due_date = "Incomplete"
            - en otro caso el estado no cambia

        Args:
            invoice: factura a recalcular (se modifica en sitio)
            ledger_emptied: True cuando se acaba de retirar la última entrada
                del ledger; la factura vuelve a pending con su vencimiento
                original

        Returns:
            La misma factura
        """
        entries = list(invoice.ledger)
        amount = to_money(invoice.amount)
        paid = self.paid_amount(invoice)
        remaining = to_money(amount - paid)

        invoice.amount = amount
        invoice.paid_amount = paid
        invoice.remaining_amount = remaining

        if ledger_emptied and not entries:
            invoice.status = InvoiceStatus.PENDING
            invoice.due_date = invoice.scheduled_due_date
        elif remaining <= 0:
            invoice.status = InvoiceStatus.PAID
            if entries:
                last_date = entries[-1].date or date.today()
                invoice.due_date = last_date.isoformat()
        elif paid > 0:
            invoice.status = InvoiceStatus.PARTIALLY_PAID
            invoice.due_date = INCOMPLETE_DUE_DATE

        return invoice
