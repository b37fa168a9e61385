"""
Servicios de negocio para el módulo de Proveedores

- CRUD de proveedores de mercancía y prestadores de servicios
- Facturas de compra creadas desde el proveedor
- Lista de egresos sin duplicados y saldo reconciliado
- Servicios prestados (solo para prestadores de servicios)
"""

from fastapi import HTTPException, status
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError
from sqlalchemy import or_
from typing import List, Optional
from uuid import UUID
import logging

from app.common.exceptions import ValidationError, NotFoundError, ConflictError
from app.modules.suppliers.models import Supplier, SupplierType
from app.modules.suppliers.schemas import SupplierCreate, SupplierUpdate
from app.modules.companies.service import ensure_company_exists
from app.modules.invoices.models import Invoice
from app.modules.invoices.schemas import PartyInvoiceCreate
from app.modules.invoices.service import InvoiceService
from app.modules.invoices.settlement import SettlementService
from app.modules.expenses.models import Expense
from app.modules.services.models import Service
from app.modules.cheques.models import Cheque

logger = logging.getLogger(__name__)


class SupplierService:
    """Servicio principal para gestión de proveedores"""

    def __init__(self, db: Session):
        self.db = db
        self.settlement = SettlementService(db)

    def _validate_unique(self, tenant_id: UUID, supplier_name: Optional[str], exclude_id: Optional[UUID] = None):
        if not supplier_name:
            return
        query = self.db.query(Supplier).filter(
            Supplier.tenant_id == tenant_id,
            Supplier.supplier_name == supplier_name
        )
        if exclude_id:
            query = query.filter(Supplier.id != exclude_id)
        if query.first():
            raise ConflictError(f"Ya existe un proveedor con el nombre {supplier_name}")

    def create_supplier(self, supplier_data: SupplierCreate, tenant_id: UUID) -> Supplier:
        """Crear un nuevo proveedor"""
        try:
            ensure_company_exists(self.db, tenant_id)
            self._validate_unique(tenant_id, supplier_data.supplier_name)

            supplier = Supplier(tenant_id=tenant_id, **supplier_data.model_dump())
            self.db.add(supplier)
            self.db.commit()
            self.db.refresh(supplier)

            logger.info(f"Proveedor {supplier.supplier_name} creado en tenant {tenant_id}")
            return supplier

        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error creando proveedor: {str(e)}"
            )

    def get_supplier(self, supplier_id: UUID, tenant_id: UUID) -> Supplier:
        supplier = self.db.query(Supplier).filter(
            Supplier.id == supplier_id,
            Supplier.tenant_id == tenant_id
        ).first()
        if not supplier:
            raise NotFoundError("Proveedor no encontrado")
        return supplier

    def list_suppliers(self, tenant_id: UUID, supplier_type: Optional[SupplierType] = None,
                       limit: int = 100, offset: int = 0) -> List[Supplier]:
        query = self.db.query(Supplier).filter(Supplier.tenant_id == tenant_id)
        if supplier_type:
            query = query.filter(Supplier.supplier_type == supplier_type)
        return query.order_by(Supplier.supplier_name).offset(offset).limit(limit).all()

    def search_suppliers(self, tenant_id: UUID, term: str) -> List[Supplier]:
        pattern = f"%{term}%"
        return self.db.query(Supplier).filter(
            Supplier.tenant_id == tenant_id,
            or_(
                Supplier.supplier_name.ilike(pattern),
                Supplier.company_name.ilike(pattern),
                Supplier.phone.ilike(pattern),
                Supplier.location.ilike(pattern)
            )
        ).order_by(Supplier.supplier_name).all()

    def get_suppliers_by_user(self, user_id: UUID, tenant_id: UUID) -> List[Supplier]:
        return self.db.query(Supplier).filter(
            Supplier.tenant_id == tenant_id,
            Supplier.user_id == user_id
        ).order_by(Supplier.supplier_name).all()

    def update_supplier(self, supplier_id: UUID, supplier_data: SupplierUpdate, tenant_id: UUID) -> Supplier:
        try:
            supplier = self.get_supplier(supplier_id, tenant_id)
            update_data = supplier_data.model_dump(exclude_unset=True)

            self._validate_unique(tenant_id, update_data.get("supplier_name"), exclude_id=supplier.id)
            if update_data.get("supplier_type") == SupplierType.GOODS_SUPPLIER and supplier.services:
                raise ValidationError("Un proveedor con servicios asignados debe seguir siendo prestador de servicios")

            for field, value in update_data.items():
                setattr(supplier, field, value)

            self.db.commit()
            self.db.refresh(supplier)
            return supplier

        except StaleDataError:
            self.db.rollback()
            raise ConflictError("El proveedor fue modificado por otra operación; intente de nuevo")
        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error actualizando proveedor: {str(e)}"
            )

    def delete_supplier(self, supplier_id: UUID, tenant_id: UUID) -> dict:
        """Eliminar proveedor sin facturas ni egresos y que no sea único prestador de un servicio"""
        try:
            supplier = self.get_supplier(supplier_id, tenant_id)

            has_invoices = self.db.query(Invoice).filter(Invoice.supplier_id == supplier.id).first()
            has_expenses = self.db.query(Expense).filter(Expense.supplier_id == supplier.id).first()
            if has_invoices or has_expenses:
                raise ValidationError("No se puede eliminar un proveedor con facturas o egresos registrados")
            for service in supplier.services:
                if len(service.service_providers) <= 1:
                    raise ValidationError(f"El proveedor es el único prestador del servicio {service.name}")

            supplier.services.clear()
            self.db.query(Cheque).filter(Cheque.supplier_id == supplier.id).delete(synchronize_session=False)
            self.db.delete(supplier)
            self.db.commit()
            return {"message": "Proveedor eliminado"}

        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error eliminando proveedor: {str(e)}"
            )

    def add_invoice(self, supplier_id: UUID, invoice_data: PartyInvoiceCreate, tenant_id: UUID) -> Invoice:
        """Crear una factura de compra para el proveedor y sumarla a su saldo"""
        supplier = self.get_supplier(supplier_id, tenant_id)
        invoice = InvoiceService(self.db).create_party_invoice(invoice_data, tenant_id, supplier=supplier)
        logger.info(f"Factura {invoice.invoice_number} agregada al proveedor {supplier.id}")
        return invoice

    def get_supplier_invoices(self, supplier_id: UUID, tenant_id: UUID) -> List[Invoice]:
        return list(self.get_supplier(supplier_id, tenant_id).invoice_list)

    def get_supplier_expenses(self, supplier_id: UUID, tenant_id: UUID) -> List[Expense]:
        return list(self.get_supplier(supplier_id, tenant_id).expense_list)

    def get_supplier_services(self, supplier_id: UUID, tenant_id: UUID) -> List[Service]:
        return list(self.get_supplier(supplier_id, tenant_id).services)

    def get_supplier_cheques(self, supplier_id: UUID, tenant_id: UUID) -> List[Cheque]:
        supplier = self.get_supplier(supplier_id, tenant_id)
        return self.db.query(Cheque).filter(
            Cheque.tenant_id == tenant_id,
            Cheque.supplier_id == supplier.id
        ).order_by(Cheque.cheque_date).all()

    def add_expense(self, supplier_id: UUID, expense_id: UUID, tenant_id: UUID) -> Supplier:
        """Agregar un egreso a la lista del proveedor; repetirlo no tiene efecto"""
        try:
            supplier = self.get_supplier(supplier_id, tenant_id)
            expense = self.db.query(Expense).filter(
                Expense.id == expense_id,
                Expense.tenant_id == tenant_id
            ).first()
            if not expense:
                raise NotFoundError("Egreso no encontrado")
            if expense.supplier_id != supplier.id:
                raise ValidationError("El egreso pertenece a otro proveedor")

            if self.settlement.link(supplier.expense_list, expense):
                self.settlement.reconcile_supplier(supplier)
                self.db.commit()
                self.db.refresh(supplier)
            return supplier

        except StaleDataError:
            self.db.rollback()
            raise ConflictError("El proveedor fue modificado por otra operación; intente de nuevo")
        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error agregando egreso al proveedor: {str(e)}"
            )

    def remove_expense(self, supplier_id: UUID, expense_id: UUID, tenant_id: UUID) -> Supplier:
        try:
            supplier = self.get_supplier(supplier_id, tenant_id)
            expense = next((e for e in supplier.expense_list if e.id == expense_id), None)
            if expense is None:
                raise NotFoundError("El egreso no está en la lista del proveedor")

            self.settlement.unlink(supplier.expense_list, expense)
            self.settlement.reconcile_supplier(supplier)
            self.db.commit()
            self.db.refresh(supplier)
            return supplier

        except StaleDataError:
            self.db.rollback()
            raise ConflictError("El proveedor fue modificado por otra operación; intente de nuevo")
        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error quitando egreso del proveedor: {str(e)}"
            )

    def add_service(self, supplier_id: UUID, service_id: UUID, tenant_id: UUID) -> Supplier:
        """Asignar un servicio a un prestador de servicios (sin duplicados)"""
        try:
            supplier = self.get_supplier(supplier_id, tenant_id)
            if supplier.supplier_type != SupplierType.SERVICE_PROVIDER:
                raise ValidationError("Solo los prestadores de servicios pueden tener servicios")

            service = self.db.query(Service).filter(
                Service.id == service_id,
                Service.tenant_id == tenant_id
            ).first()
            if not service:
                raise NotFoundError("Servicio no encontrado")

            if self.settlement.link(supplier.services, service):
                self.db.commit()
                self.db.refresh(supplier)
            return supplier

        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error asignando servicio: {str(e)}"
            )

    def remove_service(self, supplier_id: UUID, service_id: UUID, tenant_id: UUID) -> Supplier:
        try:
            supplier = self.get_supplier(supplier_id, tenant_id)
            service = next((s for s in supplier.services if s.id == service_id), None)
            if service is None:
                raise NotFoundError("El servicio no está asignado al proveedor")
            if len(service.service_providers) <= 1:
                raise ValidationError("Un servicio debe conservar al menos un proveedor")

            supplier.services.remove(service)
            self.db.commit()
            self.db.refresh(supplier)
            return supplier

        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error quitando servicio: {str(e)}"
            )

    def reconcile_balance(self, supplier_id: UUID, tenant_id: UUID) -> Supplier:
        """Recalcular balance_due desde facturas y egresos"""
        try:
            supplier = self.get_supplier(supplier_id, tenant_id)
            self.settlement.reconcile_supplier(supplier)
            self.db.commit()
            self.db.refresh(supplier)
            return supplier
        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error reconciliando saldo: {str(e)}"
            )
