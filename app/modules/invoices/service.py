"""
Servicios de negocio para el módulo de Facturas

Implementa:
- Creación de facturas de venta y compra con cálculo de total e impuesto
- Consulta por estado, tipo, parte, emisor, pago o egreso
- Registro y retiro de pagos/egresos sobre el ledger de la factura
- Borrado individual y masivo con limpieza de referencias y saldos
"""

from fastapi import HTTPException, status
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError
from sqlalchemy import or_
from typing import List, Optional
from uuid import UUID
import logging

from app.common.exceptions import ValidationError, NotFoundError, ConflictError
from app.common.sequences import next_document_number
from app.core.config import settings
from app.modules.invoices.models import (
    Invoice, InvoiceType, InvoiceStatus, InvoicePaymentEntry, InvoiceExpenseEntry
)
from app.modules.invoices.schemas import (
    InvoiceCreate, PartyInvoiceCreate, InvoiceUpdate, PaymentEntryCreate, ExpenseEntryCreate
)
from app.modules.invoices.calculator import to_money
from app.modules.invoices.settlement import SettlementService
from app.modules.customers.models import Customer
from app.modules.suppliers.models import Supplier
from app.modules.payments.models import Payment
from app.modules.expenses.models import Expense
from app.modules.services.models import Service

logger = logging.getLogger(__name__)


def invoice_prefix(db: Session, tenant_id: UUID) -> str:
    """Prefijo configurado por la empresa (settings.invoice_prefix)"""
    from app.modules.companies.models import Company

    company = db.query(Company).filter(Company.id == tenant_id).first()
    if company and company.settings:
        return company.settings.get("invoice_prefix") or settings.DEFAULT_INVOICE_PREFIX
    return settings.DEFAULT_INVOICE_PREFIX


def check_entry_amount(requested, recorded):
    """El ledger registra el monto del pago/egreso; un monto distinto se rechaza"""
    if requested is not None and to_money(requested) != to_money(recorded):
        raise ValidationError(
            f"El monto indicado ({to_money(requested)}) no coincide con el registrado ({to_money(recorded)})"
        )


def check_invoice_dates(invoice: Invoice):
    if invoice.scheduled_due_date and invoice.date and invoice.scheduled_due_date < invoice.date.isoformat():
        raise ValidationError("La fecha de vencimiento no puede ser anterior a la fecha de emisión")


class InvoiceService:
    """Servicio principal para gestión de facturas"""

    def __init__(self, db: Session):
        self.db = db
        self.settlement = SettlementService(db)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _get_customer(self, customer_id: UUID, tenant_id: UUID) -> Customer:
        customer = self.db.query(Customer).filter(
            Customer.id == customer_id,
            Customer.tenant_id == tenant_id
        ).first()
        if not customer:
            raise NotFoundError("Cliente no encontrado")
        return customer

    def _get_supplier(self, supplier_id: UUID, tenant_id: UUID) -> Supplier:
        supplier = self.db.query(Supplier).filter(
            Supplier.id == supplier_id,
            Supplier.tenant_id == tenant_id
        ).first()
        if not supplier:
            raise NotFoundError("Proveedor no encontrado")
        return supplier

    def build_invoice(
        self,
        data,
        tenant_id: UUID,
        customer: Optional[Customer] = None,
        supplier: Optional[Supplier] = None
    ) -> Invoice:
        """Construir la factura, sus ítems y su total; la deja en la sesión sin commit"""
        invoice_type = InvoiceType.PURCHASE if supplier is not None else InvoiceType.SALES
        due_date = data.due_date.isoformat() if data.due_date else None

        invoice = Invoice(
            tenant_id=tenant_id,
            invoice_number=next_document_number(
                self.db, tenant_id, invoice_prefix(self.db, tenant_id), Invoice.invoice_number
            ),
            type=invoice_type,
            status=data.status,
            customer_id=customer.id if customer else None,
            supplier_id=supplier.id if supplier else None,
            customer=customer,
            supplier=supplier,
            customer_name=customer.customer_name if customer else None,
            supplier_name=supplier.supplier_name if supplier else None,
            email=data.email or (customer.email if customer else supplier.email),
            date=data.date,
            due_date=due_date,
            scheduled_due_date=due_date,
            issued_by=data.issued_by,
            terms=data.terms,
            notes=data.notes
        )
        self.db.add(invoice)
        self.settlement.replace_items(invoice, data.items)
        self.settlement.reconcile_invoice_party(invoice)
        return invoice

    def _commit(self, action: str):
        try:
            self.db.commit()
        except StaleDataError:
            self.db.rollback()
            raise ConflictError(f"La factura fue modificada por otra operación ({action}); intente de nuevo")

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def create_invoice(self, invoice_data: InvoiceCreate, tenant_id: UUID) -> Invoice:
        """Crear nueva factura (venta con cliente o compra con proveedor)"""
        try:
            customer = supplier = None
            if invoice_data.type == InvoiceType.SALES:
                customer = self._get_customer(invoice_data.customer_id, tenant_id)
            else:
                supplier = self._get_supplier(invoice_data.supplier_id, tenant_id)

            invoice = self.build_invoice(invoice_data, tenant_id, customer=customer, supplier=supplier)
            self._commit("crear")
            self.db.refresh(invoice)

            logger.info(f"Factura {invoice.invoice_number} creada por {invoice.amount}")
            return invoice

        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error creando factura: {str(e)}"
            )

    def create_party_invoice(
        self,
        invoice_data: PartyInvoiceCreate,
        tenant_id: UUID,
        customer: Optional[Customer] = None,
        supplier: Optional[Supplier] = None
    ) -> Invoice:
        """Crear factura desde el cliente/proveedor y agregarla a su lista"""
        try:
            invoice = self.build_invoice(invoice_data, tenant_id, customer=customer, supplier=supplier)
            self._commit("crear")
            self.db.refresh(invoice)
            return invoice
        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error creando factura: {str(e)}"
            )

    def get_invoice(self, invoice_id: UUID, tenant_id: UUID) -> Invoice:
        invoice = self.db.query(Invoice).filter(
            Invoice.id == invoice_id,
            Invoice.tenant_id == tenant_id
        ).first()
        if not invoice:
            raise NotFoundError("Factura no encontrada")
        return invoice

    def list_invoices(
        self,
        tenant_id: UUID,
        status_filter: Optional[InvoiceStatus] = None,
        type_filter: Optional[InvoiceType] = None,
        customer_id: Optional[UUID] = None,
        supplier_id: Optional[UUID] = None,
        issued_by: Optional[UUID] = None,
        limit: int = 100,
        offset: int = 0
    ) -> List[Invoice]:
        """Listar facturas con filtros"""
        query = self.db.query(Invoice).filter(Invoice.tenant_id == tenant_id)
        if status_filter:
            query = query.filter(Invoice.status == status_filter)
        if type_filter:
            query = query.filter(Invoice.type == type_filter)
        if customer_id:
            query = query.filter(Invoice.customer_id == customer_id)
        if supplier_id:
            query = query.filter(Invoice.supplier_id == supplier_id)
        if issued_by:
            query = query.filter(Invoice.issued_by == issued_by)
        return query.order_by(Invoice.created_at.desc()).offset(offset).limit(limit).all()

    def search_invoices(self, tenant_id: UUID, term: str) -> List[Invoice]:
        pattern = f"%{term}%"
        return self.db.query(Invoice).filter(
            Invoice.tenant_id == tenant_id,
            or_(
                Invoice.invoice_number.ilike(pattern),
                Invoice.customer_name.ilike(pattern),
                Invoice.supplier_name.ilike(pattern),
                Invoice.notes.ilike(pattern)
            )
        ).order_by(Invoice.created_at.desc()).all()

    def get_invoices_by_payment(self, payment_id: UUID, tenant_id: UUID) -> List[Invoice]:
        return self.db.query(Invoice).join(InvoicePaymentEntry).filter(
            Invoice.tenant_id == tenant_id,
            InvoicePaymentEntry.payment_id == payment_id
        ).all()

    def get_invoices_by_expense(self, expense_id: UUID, tenant_id: UUID) -> List[Invoice]:
        return self.db.query(Invoice).join(InvoiceExpenseEntry).filter(
            Invoice.tenant_id == tenant_id,
            InvoiceExpenseEntry.expense_id == expense_id
        ).all()

    def update_invoice(self, invoice_id: UUID, invoice_data: InvoiceUpdate, tenant_id: UUID) -> Invoice:
        """Actualizar factura; si cambian los ítems se recalcula total y liquidación"""
        try:
            invoice = self.get_invoice(invoice_id, tenant_id)
            update_data = invoice_data.model_dump(exclude_unset=True)
            items = update_data.pop("items", None)

            if "due_date" in update_data:
                due_date = update_data.pop("due_date")
                invoice.scheduled_due_date = due_date.isoformat() if due_date else None
                if invoice.status not in (InvoiceStatus.PAID, InvoiceStatus.PARTIALLY_PAID):
                    invoice.due_date = invoice.scheduled_due_date

            for field, value in update_data.items():
                setattr(invoice, field, value)
            check_invoice_dates(invoice)

            if items is not None:
                self.settlement.replace_items(invoice, invoice_data.items)
                self.settlement.reconcile_invoice_party(invoice)

            self._commit("actualizar")
            self.db.refresh(invoice)
            return invoice

        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error actualizando factura: {str(e)}"
            )

    def update_status(self, invoice_id: UUID, new_status: InvoiceStatus, tenant_id: UUID) -> Invoice:
        """Cambiar el estado manualmente; solo sin pagos/egresos registrados"""
        try:
            invoice = self.get_invoice(invoice_id, tenant_id)
            if invoice.ledger:
                raise ValidationError("El estado de una factura con pagos registrados se deriva de su saldo")
            if new_status in (InvoiceStatus.PAID, InvoiceStatus.PARTIALLY_PAID):
                raise ValidationError("El estado de pago se deriva de los pagos registrados")

            invoice.status = new_status
            self._commit("cambiar estado")
            self.db.refresh(invoice)
            return invoice

        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error actualizando estado: {str(e)}"
            )

    def _detach_from_everything(self, invoice: Invoice):
        """Quitar la factura de listas de partes y servicios; desvincular pagos/egresos"""
        if invoice.customer is not None:
            self.settlement.unlink(invoice.customer.invoice_list, invoice)
        if invoice.supplier is not None:
            self.settlement.unlink(invoice.supplier.invoice_list, invoice)

        for service in self.db.query(Service).filter(Service.invoices.contains(invoice)).all():
            service.invoices.remove(invoice)

        self.db.query(Payment).filter(Payment.invoice_id == invoice.id).update(
            {Payment.invoice_id: None}, synchronize_session="fetch"
        )
        self.db.query(Expense).filter(Expense.invoice_id == invoice.id).update(
            {Expense.invoice_id: None}, synchronize_session="fetch"
        )

    def delete_invoice(self, invoice_id: UUID, tenant_id: UUID) -> dict:
        """Eliminar factura limpiando referencias y reconciliando el saldo de la parte"""
        try:
            invoice = self.get_invoice(invoice_id, tenant_id)
            customer, supplier = invoice.customer, invoice.supplier
            number = invoice.invoice_number

            self._detach_from_everything(invoice)
            self.db.delete(invoice)
            if customer is not None:
                self.settlement.reconcile_customer(customer)
            if supplier is not None:
                self.settlement.reconcile_supplier(supplier)

            self._commit("eliminar")
            logger.info(f"Factura {number} eliminada")
            return {"message": f"Factura {number} eliminada"}

        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error eliminando factura: {str(e)}"
            )

    def delete_all_invoices(self, tenant_id: UUID) -> dict:
        """Eliminar todas las facturas del tenant en una sola transacción"""
        try:
            invoices = self.db.query(Invoice).filter(Invoice.tenant_id == tenant_id).all()
            customers, suppliers = set(), set()

            for invoice in invoices:
                if invoice.customer is not None:
                    customers.add(invoice.customer)
                if invoice.supplier is not None:
                    suppliers.add(invoice.supplier)
                self._detach_from_everything(invoice)
                self.db.delete(invoice)

            for customer in customers:
                self.settlement.reconcile_customer(customer)
            for supplier in suppliers:
                self.settlement.reconcile_supplier(supplier)

            self._commit("eliminar todas")
            logger.info(f"{len(invoices)} facturas eliminadas para tenant {tenant_id}")
            return {"message": "Facturas eliminadas", "deleted_count": len(invoices)}

        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error eliminando facturas: {str(e)}"
            )

    # ------------------------------------------------------------------
    # Ledger
    # ------------------------------------------------------------------

    def add_payment(self, invoice_id: UUID, entry_data: PaymentEntryCreate, tenant_id: UUID) -> Invoice:
        """Registrar un pago existente en el ledger de la factura"""
        try:
            invoice = self.get_invoice(invoice_id, tenant_id)
            payment = self.db.query(Payment).filter(
                Payment.id == entry_data.payment_id,
                Payment.tenant_id == tenant_id
            ).first()
            if not payment:
                raise NotFoundError("Pago no encontrado")
            if payment.customer_id != invoice.customer_id:
                raise ValidationError("El pago pertenece a otro cliente")
            if payment.invoice_id is not None and payment.invoice_id != invoice.id:
                raise ValidationError("El pago ya está aplicado a otra factura")

            check_entry_amount(entry_data.amount, payment.amount)
            self.settlement.attach_payment(
                invoice, payment.id, payment.amount, entry_data.date or payment.date,
                payment.method, entry_data.reference or payment.reference
            )
            payment.invoice_id = invoice.id
            self.settlement.link(payment.customer.payment_list, payment)
            self.settlement.reconcile_customer(payment.customer)

            self._commit("registrar pago")
            self.db.refresh(invoice)
            return invoice

        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error registrando pago: {str(e)}"
            )

    def remove_payment(self, invoice_id: UUID, payment_id: UUID, tenant_id: UUID) -> Invoice:
        """Retirar un pago del ledger; la factura vuelve a pending si queda sin pagos"""
        try:
            invoice = self.get_invoice(invoice_id, tenant_id)
            if not self.settlement.detach_payment(invoice, payment_id):
                raise NotFoundError("El pago no está registrado en la factura")

            payment = self.db.query(Payment).filter(Payment.id == payment_id).first()
            if payment is not None and payment.invoice_id == invoice.id:
                payment.invoice_id = None

            self._commit("retirar pago")
            self.db.refresh(invoice)
            return invoice

        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error retirando pago: {str(e)}"
            )

    def add_expense(self, invoice_id: UUID, entry_data: ExpenseEntryCreate, tenant_id: UUID) -> Invoice:
        """Registrar un egreso existente en el ledger de la factura de compra"""
        try:
            invoice = self.get_invoice(invoice_id, tenant_id)
            expense = self.db.query(Expense).filter(
                Expense.id == entry_data.expense_id,
                Expense.tenant_id == tenant_id
            ).first()
            if not expense:
                raise NotFoundError("Egreso no encontrado")
            if expense.supplier_id != invoice.supplier_id:
                raise ValidationError("El egreso pertenece a otro proveedor")
            if expense.invoice_id is not None and expense.invoice_id != invoice.id:
                raise ValidationError("El egreso ya está aplicado a otra factura")

            check_entry_amount(entry_data.amount, expense.amount)
            self.settlement.attach_expense(
                invoice, expense.id, expense.amount, entry_data.date or expense.date,
                expense.method, entry_data.reference or expense.reference
            )
            expense.invoice_id = invoice.id
            self.settlement.link(expense.supplier.expense_list, expense)
            self.settlement.reconcile_supplier(expense.supplier)

            self._commit("registrar egreso")
            self.db.refresh(invoice)
            return invoice

        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error registrando egreso: {str(e)}"
            )

    def remove_expense(self, invoice_id: UUID, expense_id: UUID, tenant_id: UUID) -> Invoice:
        try:
            invoice = self.get_invoice(invoice_id, tenant_id)
            if not self.settlement.detach_expense(invoice, expense_id):
                raise NotFoundError("El egreso no está registrado en la factura")

            expense = self.db.query(Expense).filter(Expense.id == expense_id).first()
            if expense is not None and expense.invoice_id == invoice.id:
                expense.invoice_id = None

            self._commit("retirar egreso")
            self.db.refresh(invoice)
            return invoice

        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error retirando egreso: {str(e)}"
            )
