from fastapi import HTTPException, status
from sqlalchemy.orm import Session
from sqlalchemy import or_
from typing import List, Optional
from uuid import UUID
from datetime import date
import logging

from app.common.exceptions import ValidationError, NotFoundError, ConflictError
from app.common.sequences import next_document_number
from app.modules.cheques.models import Cheque, ChequeStatus, ChequeType
from app.modules.cheques.schemas import ChequeCreate, ChequeUpdate
from app.modules.customers.models import Customer
from app.modules.suppliers.models import Supplier
from app.modules.payments.models import Payment
from app.modules.expenses.models import Expense

logger = logging.getLogger(__name__)

CHEQUE_PREFIX = "CHQ-"


class ChequeService:
    """Servicio para gestión de cheques"""

    def __init__(self, db: Session):
        self.db = db

    def _validate_links(self, cheque: Cheque, tenant_id: UUID):
        """Verificar reglas de vinculación y que las referencias existan en el tenant"""
        errors = cheque.integrity_errors()
        if errors:
            raise ValidationError("; ".join(errors))

        if cheque.customer_id and not self.db.query(Customer).filter(
            Customer.id == cheque.customer_id, Customer.tenant_id == tenant_id
        ).first():
            raise NotFoundError("Cliente no encontrado")
        if cheque.supplier_id and not self.db.query(Supplier).filter(
            Supplier.id == cheque.supplier_id, Supplier.tenant_id == tenant_id
        ).first():
            raise NotFoundError("Proveedor no encontrado")

        if cheque.payment_id:
            payment = self.db.query(Payment).filter(
                Payment.id == cheque.payment_id, Payment.tenant_id == tenant_id
            ).first()
            if not payment:
                raise NotFoundError("Pago no encontrado")
            if payment.customer_id != cheque.customer_id:
                raise ValidationError("El pago del cheque pertenece a otro cliente")
        if cheque.expense_id:
            expense = self.db.query(Expense).filter(
                Expense.id == cheque.expense_id, Expense.tenant_id == tenant_id
            ).first()
            if not expense:
                raise NotFoundError("Egreso no encontrado")
            if expense.supplier_id != cheque.supplier_id:
                raise ValidationError("El egreso del cheque pertenece a otro proveedor")

    def _validate_unique(self, tenant_id: UUID, cheque_number: str, bank_name: str, exclude_id: Optional[UUID] = None):
        query = self.db.query(Cheque).filter(
            Cheque.tenant_id == tenant_id,
            Cheque.cheque_number == cheque_number,
            Cheque.bank_name == bank_name
        )
        if exclude_id:
            query = query.filter(Cheque.id != exclude_id)
        if query.first():
            raise ConflictError(f"Ya existe el cheque {cheque_number} del banco {bank_name}")

    def create_cheque(self, cheque_data: ChequeCreate, tenant_id: UUID) -> Cheque:
        try:
            data = cheque_data.model_dump()
            if not data.get("cheque_number"):
                data["cheque_number"] = next_document_number(self.db, tenant_id, CHEQUE_PREFIX, Cheque.cheque_number)

            cheque = Cheque(tenant_id=tenant_id, **data)
            self._validate_links(cheque, tenant_id)
            self._validate_unique(tenant_id, cheque.cheque_number, cheque.bank_name)

            self.db.add(cheque)
            self.db.commit()
            self.db.refresh(cheque)

            logger.info(f"Cheque {cheque.cheque_number} ({cheque.bank_name}) registrado por {cheque.amount}")
            return cheque

        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error registrando cheque: {str(e)}"
            )

    def get_cheque(self, cheque_id: UUID, tenant_id: UUID) -> Cheque:
        cheque = self.db.query(Cheque).filter(
            Cheque.id == cheque_id,
            Cheque.tenant_id == tenant_id
        ).first()
        if not cheque:
            raise NotFoundError("Cheque no encontrado")
        return cheque

    def list_cheques(
        self,
        tenant_id: UUID,
        customer_id: Optional[UUID] = None,
        supplier_id: Optional[UUID] = None,
        payment_id: Optional[UUID] = None,
        expense_id: Optional[UUID] = None,
        cheque_type: Optional[ChequeType] = None,
        cheque_status: Optional[ChequeStatus] = None,
        on_date: Optional[date] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: int = 100,
        offset: int = 0
    ) -> List[Cheque]:
        query = self.db.query(Cheque).filter(Cheque.tenant_id == tenant_id)
        if customer_id:
            query = query.filter(Cheque.customer_id == customer_id)
        if supplier_id:
            query = query.filter(Cheque.supplier_id == supplier_id)
        if payment_id:
            query = query.filter(Cheque.payment_id == payment_id)
        if expense_id:
            query = query.filter(Cheque.expense_id == expense_id)
        if cheque_type:
            query = query.filter(Cheque.type == cheque_type)
        if cheque_status:
            query = query.filter(Cheque.status == cheque_status)
        if on_date:
            query = query.filter(Cheque.cheque_date == on_date)
        if start_date:
            query = query.filter(Cheque.cheque_date >= start_date)
        if end_date:
            query = query.filter(Cheque.cheque_date <= end_date)
        return query.order_by(Cheque.cheque_date).offset(offset).limit(limit).all()

    def search_cheques(self, tenant_id: UUID, term: str) -> List[Cheque]:
        pattern = f"%{term}%"
        return self.db.query(Cheque).filter(
            Cheque.tenant_id == tenant_id,
            or_(
                Cheque.cheque_number.ilike(pattern),
                Cheque.bank_name.ilike(pattern),
                Cheque.holder_name.ilike(pattern),
                Cheque.notes.ilike(pattern)
            )
        ).order_by(Cheque.cheque_date).all()

    def update_cheque(self, cheque_id: UUID, cheque_data: ChequeUpdate, tenant_id: UUID) -> Cheque:
        """Actualizar cheque; la combinación resultante de vínculos debe seguir siendo válida"""
        try:
            cheque = self.get_cheque(cheque_id, tenant_id)
            update_data = cheque_data.model_dump(exclude_unset=True)

            for field, value in update_data.items():
                setattr(cheque, field, value)

            self._validate_links(cheque, tenant_id)
            if "cheque_number" in update_data or "bank_name" in update_data:
                self._validate_unique(tenant_id, cheque.cheque_number, cheque.bank_name, exclude_id=cheque.id)

            self.db.commit()
            self.db.refresh(cheque)
            return cheque

        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error actualizando cheque: {str(e)}"
            )

    def update_status(self, cheque_id: UUID, new_status: ChequeStatus, tenant_id: UUID) -> Cheque:
        try:
            cheque = self.get_cheque(cheque_id, tenant_id)
            cheque.status = new_status
            self.db.commit()
            self.db.refresh(cheque)
            logger.info(f"Cheque {cheque.cheque_number} pasa a {new_status.value}")
            return cheque
        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error actualizando estado del cheque: {str(e)}"
            )

    def delete_cheque(self, cheque_id: UUID, tenant_id: UUID) -> dict:
        try:
            cheque = self.get_cheque(cheque_id, tenant_id)
            number = cheque.cheque_number
            self.db.delete(cheque)
            self.db.commit()
            return {"message": f"Cheque {number} eliminado"}
        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error eliminando cheque: {str(e)}"
            )
