"""
Servicios de negocio para el módulo de Egresos

Simétrico a pagos: el egreso pertenece a un proveedor, puede liquidar una
factura de compra y puede imputarse a un servicio (historial de gastos).
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
from app.modules.expenses.models import Expense, ExpenseMethod
from app.modules.expenses.schemas import ExpenseCreate, ExpenseUpdate
from app.modules.suppliers.models import Supplier
from app.modules.invoices.models import Invoice, InvoiceType
from app.modules.invoices.settlement import SettlementService
from app.modules.services.models import Service, ServiceExpenseEntry
from app.modules.users.models import User

logger = logging.getLogger(__name__)

EXPENSE_PREFIX = "EXP-"


class ExpenseService:
    """Servicio principal para gestión de egresos"""

    def __init__(self, db: Session):
        self.db = db
        self.settlement = SettlementService(db)

    def _get_purchase_invoice(self, invoice_id: UUID, supplier_id: UUID, tenant_id: UUID) -> Invoice:
        invoice = self.db.query(Invoice).filter(
            Invoice.id == invoice_id,
            Invoice.tenant_id == tenant_id
        ).first()
        if not invoice:
            raise NotFoundError("Factura no encontrada")
        if invoice.type != InvoiceType.PURCHASE:
            raise ValidationError("Los egresos solo pueden aplicarse a facturas de compra")
        if invoice.supplier_id != supplier_id:
            raise ValidationError("La factura pertenece a otro proveedor")
        return invoice

    def _get_service(self, service_id: UUID, tenant_id: UUID) -> Service:
        service = self.db.query(Service).filter(
            Service.id == service_id,
            Service.tenant_id == tenant_id
        ).first()
        if not service:
            raise NotFoundError("Servicio no encontrado")
        return service

    def create_expense(self, expense_data: ExpenseCreate, tenant_id: UUID) -> Expense:
        """Registrar un egreso y aplicarlo a factura y servicio si corresponde"""
        try:
            supplier = self.db.query(Supplier).filter(
                Supplier.id == expense_data.supplier_id,
                Supplier.tenant_id == tenant_id
            ).first()
            if not supplier:
                raise NotFoundError("Proveedor no encontrado")
            if not self.db.query(User).filter(User.id == expense_data.created_by).first():
                raise NotFoundError("Usuario no encontrado")

            invoice = None
            if expense_data.invoice_id:
                invoice = self._get_purchase_invoice(expense_data.invoice_id, supplier.id, tenant_id)
            service = None
            if expense_data.service_id:
                service = self._get_service(expense_data.service_id, tenant_id)

            expense = Expense(
                tenant_id=tenant_id,
                expense_number=next_document_number(self.db, tenant_id, EXPENSE_PREFIX, Expense.expense_number),
                **expense_data.model_dump()
            )
            self.db.add(expense)
            self.db.flush()

            if invoice is not None:
                self.settlement.attach_expense(
                    invoice, expense.id, expense.amount, expense.date, expense.method, expense.reference
                )
            if service is not None:
                service.expense_history.append(ServiceExpenseEntry(
                    expense_id=expense.id,
                    amount=expense.amount,
                    date=expense.date,
                    description=expense.notes or expense.expense_number
                ))
            self.settlement.link(supplier.expense_list, expense)
            self.settlement.reconcile_supplier(supplier)

            self.db.commit()
            self.db.refresh(expense)

            logger.info(f"Egreso {expense.expense_number} por {expense.amount} registrado para proveedor {supplier.id}")
            return expense

        except StaleDataError:
            self.db.rollback()
            raise ConflictError("La factura o el proveedor fue modificado por otra operación; intente de nuevo")
        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error registrando egreso: {str(e)}"
            )

    def get_expense(self, expense_id: UUID, tenant_id: UUID) -> Expense:
        expense = self.db.query(Expense).filter(
            Expense.id == expense_id,
            Expense.tenant_id == tenant_id
        ).first()
        if not expense:
            raise NotFoundError("Egreso no encontrado")
        return expense

    def list_expenses(
        self,
        tenant_id: UUID,
        supplier_id: Optional[UUID] = None,
        invoice_id: Optional[UUID] = None,
        service_id: Optional[UUID] = None,
        method: Optional[ExpenseMethod] = None,
        created_by: Optional[UUID] = None,
        on_date: Optional[date] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: int = 100,
        offset: int = 0
    ) -> List[Expense]:
        query = self.db.query(Expense).filter(Expense.tenant_id == tenant_id)
        if supplier_id:
            query = query.filter(Expense.supplier_id == supplier_id)
        if invoice_id:
            query = query.filter(Expense.invoice_id == invoice_id)
        if service_id:
            query = query.filter(Expense.service_id == service_id)
        if method:
            query = query.filter(Expense.method == method)
        if created_by:
            query = query.filter(Expense.created_by == created_by)
        if on_date:
            query = query.filter(Expense.date == on_date)
        if start_date:
            query = query.filter(Expense.date >= start_date)
        if end_date:
            query = query.filter(Expense.date <= end_date)
        return query.order_by(Expense.date.desc(), Expense.created_at.desc()).offset(offset).limit(limit).all()

    def search_expenses(self, tenant_id: UUID, term: str) -> List[Expense]:
        pattern = f"%{term}%"
        return self.db.query(Expense).filter(
            Expense.tenant_id == tenant_id,
            or_(
                Expense.expense_number.ilike(pattern),
                Expense.reference.ilike(pattern),
                Expense.notes.ilike(pattern)
            )
        ).order_by(Expense.date.desc()).all()

    def update_expense(self, expense_id: UUID, expense_data: ExpenseUpdate, tenant_id: UUID) -> Expense:
        """Actualizar egreso manteniendo sincronizados ledger e historial del servicio"""
        try:
            expense = self.get_expense(expense_id, tenant_id)
            update_data = expense_data.model_dump(exclude_unset=True)

            for field, value in update_data.items():
                setattr(expense, field, value)

            if expense.invoice is not None:
                entry = next((e for e in expense.invoice.expenses if e.expense_id == expense.id), None)
                if entry is not None:
                    entry.amount = expense.amount
                    entry.date = expense.date
                    entry.method = expense.method.value
                    entry.reference = expense.reference
                    self.settlement.calculator.apply(expense.invoice)

            if expense.service is not None:
                for entry in expense.service.expense_history:
                    if entry.expense_id == expense.id:
                        entry.amount = expense.amount
                        entry.date = expense.date

            if "amount" in update_data:
                self.settlement.reconcile_supplier(expense.supplier)

            self.db.commit()
            self.db.refresh(expense)
            return expense

        except StaleDataError:
            self.db.rollback()
            raise ConflictError("La factura o el proveedor fue modificado por otra operación; intente de nuevo")
        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error actualizando egreso: {str(e)}"
            )

    def _delete_cascade(self, expense: Expense) -> Supplier:
        """Quitar el egreso del proveedor, la factura y el servicio; borrar cheques y egreso"""
        supplier = expense.supplier
        self.settlement.unlink(supplier.expense_list, expense)

        if expense.invoice is not None:
            self.settlement.detach_expense(expense.invoice, expense.id)

        if expense.service is not None:
            for entry in [e for e in expense.service.expense_history if e.expense_id == expense.id]:
                expense.service.expense_history.remove(entry)

        if expense.method == ExpenseMethod.CHECK:
            for cheque in list(expense.cheques):
                self.db.delete(cheque)

        self.db.delete(expense)
        return supplier

    def delete_expense(self, expense_id: UUID, tenant_id: UUID) -> dict:
        try:
            expense = self.get_expense(expense_id, tenant_id)
            number = expense.expense_number

            supplier = self._delete_cascade(expense)
            self.settlement.reconcile_supplier(supplier)

            self.db.commit()
            logger.info(f"Egreso {number} eliminado; saldo del proveedor {supplier.id}: {supplier.balance_due}")
            return {"message": f"Egreso {number} eliminado"}

        except StaleDataError:
            self.db.rollback()
            raise ConflictError("La factura o el proveedor fue modificado por otra operación; intente de nuevo")
        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error eliminando egreso: {str(e)}"
            )

    def delete_all_expenses(self, tenant_id: UUID) -> dict:
        """Eliminar todos los egresos del tenant en una sola transacción"""
        try:
            expenses = self.db.query(Expense).filter(Expense.tenant_id == tenant_id).all()
            suppliers = {self._delete_cascade(expense) for expense in expenses}
            for supplier in suppliers:
                self.settlement.reconcile_supplier(supplier)

            self.db.commit()
            logger.info(f"{len(expenses)} egresos eliminados para tenant {tenant_id}")
            return {"message": "Egresos eliminados", "deleted_count": len(expenses)}

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
                detail=f"Error eliminando egresos: {str(e)}"
            )
