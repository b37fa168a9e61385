"""
Servicios de negocio para el módulo de Servicios

- CRUD con al menos un prestador de servicios por servicio
- Historial de gastos (total_expenses se deriva en el flush)
- Facturas y prestadores asociados sin duplicados
"""

from fastapi import HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID
import logging

from app.common.exceptions import ValidationError, NotFoundError, ConflictError
from app.modules.services.models import Service, ServiceExpenseEntry
from app.modules.services.schemas import ServiceCreate, ServiceUpdate, ServiceExpenseCreate
from app.modules.suppliers.models import Supplier, SupplierType
from app.modules.invoices.models import Invoice
from app.modules.invoices.settlement import SettlementService
from app.modules.expenses.models import Expense

logger = logging.getLogger(__name__)


class ServiceService:
    """Servicio principal para gestión de servicios"""

    def __init__(self, db: Session):
        self.db = db

    def _get_provider(self, supplier_id: UUID, tenant_id: UUID) -> Supplier:
        supplier = self.db.query(Supplier).filter(
            Supplier.id == supplier_id,
            Supplier.tenant_id == tenant_id
        ).first()
        if not supplier:
            raise NotFoundError("Proveedor no encontrado")
        if supplier.supplier_type != SupplierType.SERVICE_PROVIDER:
            raise ValidationError(f"El proveedor {supplier.supplier_name} no es prestador de servicios")
        return supplier

    def _get_providers(self, provider_ids: List[UUID], tenant_id: UUID) -> List[Supplier]:
        providers = []
        for supplier_id in dict.fromkeys(provider_ids):
            providers.append(self._get_provider(supplier_id, tenant_id))
        return providers

    def _validate_unique(self, tenant_id: UUID, name: Optional[str], exclude_id: Optional[UUID] = None):
        if not name:
            return
        query = self.db.query(Service).filter(Service.tenant_id == tenant_id, Service.name == name)
        if exclude_id:
            query = query.filter(Service.id != exclude_id)
        if query.first():
            raise ConflictError(f"Ya existe un servicio con el nombre {name}")

    def create_service(self, service_data: ServiceCreate, tenant_id: UUID) -> Service:
        try:
            self._validate_unique(tenant_id, service_data.name)
            providers = self._get_providers(service_data.provider_ids, tenant_id)

            service = Service(
                tenant_id=tenant_id,
                **service_data.model_dump(exclude={"provider_ids"})
            )
            service.service_providers = providers
            self.db.add(service)
            self.db.commit()
            self.db.refresh(service)

            logger.info(f"Servicio {service.name} creado con {len(providers)} prestador(es)")
            return service

        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error creando servicio: {str(e)}"
            )

    def get_service(self, service_id: UUID, tenant_id: UUID) -> Service:
        service = self.db.query(Service).filter(
            Service.id == service_id,
            Service.tenant_id == tenant_id
        ).first()
        if not service:
            raise NotFoundError("Servicio no encontrado")
        return service

    def list_services(
        self,
        tenant_id: UUID,
        supplier_id: Optional[UUID] = None,
        created_by: Optional[UUID] = None,
        is_active: Optional[bool] = None,
        limit: int = 100,
        offset: int = 0
    ) -> List[Service]:
        query = self.db.query(Service).filter(Service.tenant_id == tenant_id)
        if supplier_id:
            query = query.filter(Service.service_providers.any(Supplier.id == supplier_id))
        if created_by:
            query = query.filter(Service.created_by == created_by)
        if is_active is not None:
            query = query.filter(Service.is_active == is_active)
        return query.order_by(Service.name).offset(offset).limit(limit).all()

    def update_service(self, service_id: UUID, service_data: ServiceUpdate, tenant_id: UUID) -> Service:
        try:
            service = self.get_service(service_id, tenant_id)
            update_data = service_data.model_dump(exclude_unset=True)

            provider_ids = update_data.pop("provider_ids", None)
            if provider_ids is not None:
                service.service_providers = self._get_providers(provider_ids, tenant_id)

            self._validate_unique(tenant_id, update_data.get("name"), exclude_id=service.id)
            for field, value in update_data.items():
                setattr(service, field, value)

            self.db.commit()
            self.db.refresh(service)
            return service

        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error actualizando servicio: {str(e)}"
            )

    def _delete(self, service: Service):
        self.db.query(Expense).filter(Expense.service_id == service.id).update(
            {Expense.service_id: None}, synchronize_session="fetch"
        )
        service.service_providers.clear()
        service.invoices.clear()
        self.db.delete(service)

    def delete_service(self, service_id: UUID, tenant_id: UUID) -> dict:
        try:
            service = self.get_service(service_id, tenant_id)
            name = service.name
            self._delete(service)
            self.db.commit()
            return {"message": f"Servicio {name} eliminado"}
        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error eliminando servicio: {str(e)}"
            )

    def delete_all_services(self, tenant_id: UUID) -> dict:
        """Eliminar todos los servicios del tenant en una sola transacción"""
        try:
            services = self.db.query(Service).filter(Service.tenant_id == tenant_id).all()
            for service in services:
                self._delete(service)
            self.db.commit()
            logger.info(f"{len(services)} servicios eliminados para tenant {tenant_id}")
            return {"message": "Servicios eliminados", "deleted_count": len(services)}
        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error eliminando servicios: {str(e)}"
            )

    def add_expense_entry(self, service_id: UUID, entry_data: ServiceExpenseCreate, tenant_id: UUID) -> Service:
        """Agregar una entrada al historial de gastos del servicio"""
        try:
            service = self.get_service(service_id, tenant_id)
            if entry_data.expense_id and not self.db.query(Expense).filter(
                Expense.id == entry_data.expense_id, Expense.tenant_id == tenant_id
            ).first():
                raise NotFoundError("Egreso no encontrado")

            service.expense_history.append(ServiceExpenseEntry(**entry_data.model_dump()))
            self.db.commit()
            self.db.refresh(service)

            logger.info(f"Gasto de {entry_data.amount} agregado al servicio {service.name}; total={service.total_expenses}")
            return service

        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error agregando gasto al servicio: {str(e)}"
            )

    def remove_expense_entry(self, service_id: UUID, entry_id: int, tenant_id: UUID) -> Service:
        try:
            service = self.get_service(service_id, tenant_id)
            entry = next((e for e in service.expense_history if e.id == entry_id), None)
            if entry is None:
                raise NotFoundError("Gasto no encontrado en el historial del servicio")

            service.expense_history.remove(entry)
            self.db.commit()
            self.db.refresh(service)
            return service

        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error quitando gasto del servicio: {str(e)}"
            )

    def add_invoice(self, service_id: UUID, invoice_id: UUID, tenant_id: UUID) -> Service:
        """Asociar una factura al servicio; repetirlo no tiene efecto"""
        try:
            service = self.get_service(service_id, tenant_id)
            invoice = self.db.query(Invoice).filter(
                Invoice.id == invoice_id,
                Invoice.tenant_id == tenant_id
            ).first()
            if not invoice:
                raise NotFoundError("Factura no encontrada")

            if SettlementService.link(service.invoices, invoice):
                self.db.commit()
                self.db.refresh(service)
            return service

        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error asociando factura al servicio: {str(e)}"
            )

    def add_provider(self, service_id: UUID, supplier_id: UUID, tenant_id: UUID) -> Service:
        try:
            service = self.get_service(service_id, tenant_id)
            supplier = self._get_provider(supplier_id, tenant_id)
            if SettlementService.link(service.service_providers, supplier):
                self.db.commit()
                self.db.refresh(service)
            return service
        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error agregando prestador: {str(e)}"
            )

    def remove_provider(self, service_id: UUID, supplier_id: UUID, tenant_id: UUID) -> Service:
        """Quitar un prestador; el servicio debe conservar al menos uno"""
        try:
            service = self.get_service(service_id, tenant_id)
            supplier = next((s for s in service.service_providers if s.id == supplier_id), None)
            if supplier is None:
                raise NotFoundError("El proveedor no presta este servicio")
            if len(service.service_providers) <= 1:
                raise ValidationError("Un servicio debe conservar al menos un proveedor")

            service.service_providers.remove(supplier)
            self.db.commit()
            self.db.refresh(service)
            return service

        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error quitando prestador: {str(e)}"
            )
