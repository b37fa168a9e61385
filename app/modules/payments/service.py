"""
Servicios de negocio para el módulo de Pagos

Un pago pertenece siempre a un cliente y opcionalmente liquida una factura de
venta. Crear, modificar o eliminar un pago actualiza en la misma transacción
el ledger de la factura, la lista de pagos del cliente y su saldo.
"""

from fastapi import HTTPException, status
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError
from sqlalchemy import or_
from typing import List, Optional
from uuid import UUID
from datetime import date
import logging

from app.common.exceptions import ValidationError, NotFoundError, ConflictError
from app.common.sequences import next_document_number
from app.modules.payments.models import Payment, PaymentMethod
from app.modules.payments.schemas import PaymentCreate, PaymentUpdate
from app.modules.customers.models import Customer
from app.modules.invoices.models import Invoice, InvoiceType
from app.modules.invoices.settlement import SettlementService
from app.modules.users.models import User

logger = logging.getLogger(__name__)

PAYMENT_PREFIX = "PAY-"


class PaymentService:
    """Servicio principal para gestión de pagos"""

    def __init__(self, db: Session):
        self.db = db
        self.settlement = SettlementService(db)

    def _get_sales_invoice(self, invoice_id: UUID, customer_id: UUID, tenant_id: UUID) -> Invoice:
        invoice = self.db.query(Invoice).filter(
            Invoice.id == invoice_id,
            Invoice.tenant_id == tenant_id
        ).first()
        if not invoice:
            raise NotFoundError("Factura no encontrada")
        if invoice.type != InvoiceType.SALES:
            raise ValidationError("Los pagos solo pueden aplicarse a facturas de venta")
        if invoice.customer_id != customer_id:
            raise ValidationError("La factura pertenece a otro cliente")
        return invoice

    def create_payment(self, payment_data: PaymentCreate, tenant_id: UUID) -> Payment:
        """
        Registrar un pago.

        Si trae invoice_id, el pago se agrega al ledger de la factura y la
        factura recalcula saldo y estado en la misma transacción.
        """
        try:
            customer = self.db.query(Customer).filter(
                Customer.id == payment_data.customer_id,
                Customer.tenant_id == tenant_id
            ).first()
            if not customer:
                raise NotFoundError("Cliente no encontrado")
            if payment_data.created_by and not self.db.query(User).filter(User.id == payment_data.created_by).first():
                raise NotFoundError("Usuario no encontrado")

            invoice = None
            if payment_data.invoice_id:
                invoice = self._get_sales_invoice(payment_data.invoice_id, customer.id, tenant_id)

            payment = Payment(
                tenant_id=tenant_id,
                payment_number=next_document_number(self.db, tenant_id, PAYMENT_PREFIX, Payment.payment_number),
                **payment_data.model_dump()
            )
            self.db.add(payment)
            self.db.flush()

            if invoice is not None:
                self.settlement.attach_payment(
                    invoice, payment.id, payment.amount, payment.date, payment.method, payment.reference
                )
            self.settlement.link(customer.payment_list, payment)
            self.settlement.reconcile_customer(customer)

            self.db.commit()
            self.db.refresh(payment)

            logger.info(f"Pago {payment.payment_number} por {payment.amount} registrado para cliente {customer.id}")
            return payment

        except StaleDataError:
            self.db.rollback()
            raise ConflictError("La factura o el cliente fue modificado por otra operación; intente de nuevo")
        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error registrando pago: {str(e)}"
            )

    def get_payment(self, payment_id: UUID, tenant_id: UUID) -> Payment:
        payment = self.db.query(Payment).filter(
            Payment.id == payment_id,
            Payment.tenant_id == tenant_id
        ).first()
        if not payment:
            raise NotFoundError("Pago no encontrado")
        return payment

    def list_payments(
        self,
        tenant_id: UUID,
        customer_id: Optional[UUID] = None,
        invoice_id: Optional[UUID] = None,
        method: Optional[PaymentMethod] = None,
        created_by: Optional[UUID] = None,
        on_date: Optional[date] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: int = 100,
        offset: int = 0
    ) -> List[Payment]:
        """Listar pagos con filtros"""
        query = self.db.query(Payment).filter(Payment.tenant_id == tenant_id)
        if customer_id:
            query = query.filter(Payment.customer_id == customer_id)
        if invoice_id:
            query = query.filter(Payment.invoice_id == invoice_id)
        if method:
            query = query.filter(Payment.method == method)
        if created_by:
            query = query.filter(Payment.created_by == created_by)
        if on_date:
            query = query.filter(Payment.date == on_date)
        if start_date:
            query = query.filter(Payment.date >= start_date)
        if end_date:
            query = query.filter(Payment.date <= end_date)
        return query.order_by(Payment.date.desc(), Payment.created_at.desc()).offset(offset).limit(limit).all()

    def search_payments(self, tenant_id: UUID, term: str) -> List[Payment]:
        pattern = f"%{term}%"
        return self.db.query(Payment).filter(
            Payment.tenant_id == tenant_id,
            or_(
                Payment.payment_number.ilike(pattern),
                Payment.reference.ilike(pattern),
                Payment.notes.ilike(pattern)
            )
        ).order_by(Payment.date.desc()).all()

    def update_payment(self, payment_id: UUID, payment_data: PaymentUpdate, tenant_id: UUID) -> Payment:
        """Actualizar pago; la entrada del ledger de la factura se mantiene sincronizada"""
        try:
            payment = self.get_payment(payment_id, tenant_id)
            update_data = payment_data.model_dump(exclude_unset=True)

            for field, value in update_data.items():
                setattr(payment, field, value)

            if payment.invoice is not None:
                entry = next((e for e in payment.invoice.payments if e.payment_id == payment.id), None)
                if entry is not None:
                    entry.amount = payment.amount
                    entry.date = payment.date
                    entry.method = payment.method.value
                    entry.reference = payment.reference
                    self.settlement.calculator.apply(payment.invoice)

            if "amount" in update_data:
                self.settlement.reconcile_customer(payment.customer)

            self.db.commit()
            self.db.refresh(payment)
            return payment

        except StaleDataError:
            self.db.rollback()
            raise ConflictError("La factura o el cliente fue modificado por otra operación; intente de nuevo")
        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error actualizando pago: {str(e)}"
            )

    def _delete_cascade(self, payment: Payment) -> Customer:
        """Quitar el pago del cliente y de la factura, borrar sus cheques y el pago"""
        customer = payment.customer
        self.settlement.unlink(customer.payment_list, payment)

        if payment.invoice is not None:
            self.settlement.detach_payment(payment.invoice, payment.id)

        if payment.method == PaymentMethod.CHECK:
            for cheque in list(payment.cheques):
                self.db.delete(cheque)

        self.db.delete(payment)
        return customer

    def delete_payment(self, payment_id: UUID, tenant_id: UUID) -> dict:
        """Eliminar pago revirtiendo su efecto en la factura y en el saldo del cliente"""
        try:
            payment = self.get_payment(payment_id, tenant_id)
            number = payment.payment_number

            customer = self._delete_cascade(payment)
            self.settlement.reconcile_customer(customer)

            self.db.commit()
            logger.info(f"Pago {number} eliminado; saldo del cliente {customer.id}: {customer.balance_due}")
            return {"message": f"Pago {number} eliminado"}

        except StaleDataError:
            self.db.rollback()
            raise ConflictError("La factura o el cliente fue modificado por otra operación; intente de nuevo")
        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error eliminando pago: {str(e)}"
            )

    def delete_all_payments(self, tenant_id: UUID) -> dict:
        """Eliminar todos los pagos del tenant en una sola transacción"""
        try:
            payments = self.db.query(Payment).filter(Payment.tenant_id == tenant_id).all()
            customers = {self._delete_cascade(payment) for payment in payments}
            for customer in customers:
                self.settlement.reconcile_customer(customer)

            self.db.commit()
            logger.info(f"{len(payments)} pagos eliminados para tenant {tenant_id}")
            return {"message": "Pagos eliminados", "deleted_count": len(payments)}

        except StaleDataError:
            self.db.rollback()
            raise ConflictError("Los datos fueron modificados por otra operación; intente de nuevo")
        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error eliminando pagos: {str(e)}"
            )
