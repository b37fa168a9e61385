"""
Listeners de sesión que mantienen los campos derivados antes de persistir

Se ejecutan en SessionEvents.before_flush, antes de que el plan de flush quede
fijado, para que los valores recalculados viajen en el mismo UPDATE/INSERT:

- Invoice: paid_amount, remaining_amount, status y due_date a partir del
  ledger aplicable; valida la parte (ventas -> cliente, compras -> proveedor).
- Order: misma validación de parte que Invoice.
- Service: total_expenses = Σ expense_history.
- Company: subscription_status pasa a expired si la fecha de fin ya pasó.
- Cheque: reglas de vinculación cliente/proveedor y pago/egreso.

register_session_listeners() debe llamarse una vez al iniciar la aplicación,
después de importar los modelos.
"""

from decimal import Decimal
import logging

from sqlalchemy import event, inspect
from sqlalchemy.orm import Session

from app.common.exceptions import ValidationError

logger = logging.getLogger(__name__)


def _ledger_attr(invoice):
    from app.modules.invoices.models import InvoiceType
    return "expenses" if invoice.type == InvoiceType.PURCHASE else "payments"


def _party_set(record, name: str) -> bool:
    # Las FK se copian desde la relación recién durante el flush
    return getattr(record, f"{name}_id") is not None or getattr(record, name) is not None


def check_party_union(record, label: str):
    """Ventas requiere solo customer_id; compras requiere solo supplier_id"""
    from app.modules.invoices.models import InvoiceType

    has_customer = _party_set(record, "customer")
    has_supplier = _party_set(record, "supplier")
    if record.type == InvoiceType.PURCHASE:
        if not has_supplier or has_customer:
            raise ValidationError(f"{label} de compra requiere supplier_id y no admite customer_id")
    else:
        if not has_customer or has_supplier:
            raise ValidationError(f"{label} de venta requiere customer_id y no admite supplier_id")


def _settle_invoice(session, invoice, calculator):
    check_party_union(invoice, "La factura")
    history = inspect(invoice).attrs[_ledger_attr(invoice)].history
    ledger_emptied = bool(history.deleted) and not history.added and not history.unchanged
    with session.no_autoflush:
        calculator.apply(invoice, ledger_emptied=ledger_emptied)


def _total_service_expenses(service, force: bool = False):
    state = inspect(service)
    if force or state.pending or state.attrs.expense_history.history.has_changes():
        service.total_expenses = sum(
            (Decimal(str(entry.amount)) for entry in service.expense_history), Decimal("0.00")
        )


def _expire_company(company):
    from app.modules.companies.models import SubscriptionStatus

    if company.subscription_expired and company.subscription_status != SubscriptionStatus.EXPIRED:
        logger.info(f"Suscripción vencida para la empresa {company.id}")
        company.subscription_status = SubscriptionStatus.EXPIRED


def _check_cheque(cheque):
    errors = cheque.integrity_errors()
    if errors:
        raise ValidationError("; ".join(errors))


def derive_before_flush(session, flush_context, instances):
    """Recalcular campos derivados de los objetos nuevos o modificados"""
    from app.modules.invoices.models import Invoice, InvoicePaymentEntry, InvoiceExpenseEntry
    from app.modules.invoices.calculator import SettlementCalculator
    from app.modules.orders.models import Order
    from app.modules.services.models import Service, ServiceExpenseEntry
    from app.modules.companies.models import Company
    from app.modules.cheques.models import Cheque

    calculator = SettlementCalculator()
    invoices = []

    for obj in list(session.new) + list(session.dirty):
        if isinstance(obj, Invoice):
            invoices.append(obj)
        elif isinstance(obj, (InvoicePaymentEntry, InvoiceExpenseEntry)) and obj.invoice is not None:
            invoices.append(obj.invoice)
        elif isinstance(obj, Order):
            check_party_union(obj, "La orden")
        elif isinstance(obj, Service):
            _total_service_expenses(obj)
        elif isinstance(obj, ServiceExpenseEntry) and obj.service is not None:
            _total_service_expenses(obj.service, force=True)
        elif isinstance(obj, Company):
            _expire_company(obj)
        elif isinstance(obj, Cheque):
            _check_cheque(obj)

    seen = set()
    for invoice in invoices:
        if id(invoice) in seen or invoice in session.deleted:
            continue
        seen.add(id(invoice))
        _settle_invoice(session, invoice, calculator)


def register_session_listeners():
    """Registrar los listeners de sesión (idempotente)"""
    if not event.contains(Session, "before_flush", derive_before_flush):
        event.listen(Session, "before_flush", derive_before_flush)
        logger.debug("Session listeners registered")
