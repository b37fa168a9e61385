from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID

from app.core.config import settings
from app.database.database import get_db
from app.dependencies.companyDependencies import TenantId
from app.modules.services.service import ServiceService
from app.modules.services.schemas import (
    ServiceCreate, ServiceUpdate, ServiceOut, ServiceExpenseCreate, InvoiceLink, ProviderLink
)
from app.modules.invoices.schemas import DeleteAllResult

router = APIRouter(prefix="/services", tags=["Services"])


@router.post("/", response_model=ServiceOut, status_code=status.HTTP_201_CREATED)
def create_service(service_data: ServiceCreate, tenant_id: TenantId, db: Session = Depends(get_db)):
    service = ServiceService(db)
    return service.create_service(service_data, tenant_id)


@router.get("/", response_model=List[ServiceOut])
def list_services(
    tenant_id: TenantId,
    supplier_id: Optional[UUID] = Query(None),
    created_by: Optional[UUID] = Query(None),
    is_active: Optional[bool] = Query(None),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db)
):
    service = ServiceService(db)
    return service.list_services(tenant_id, supplier_id, created_by, is_active, limit, offset)


@router.delete("/delete-all", response_model=DeleteAllResult)
def delete_all_services(tenant_id: TenantId, db: Session = Depends(get_db)):
    service = ServiceService(db)
    return service.delete_all_services(tenant_id)


@router.get("/{service_id}", response_model=ServiceOut)
def get_service(service_id: UUID, tenant_id: TenantId, db: Session = Depends(get_db)):
    service = ServiceService(db)
    return service.get_service(service_id, tenant_id)


@router.put("/{service_id}", response_model=ServiceOut)
def update_service(service_id: UUID, service_data: ServiceUpdate, tenant_id: TenantId, db: Session = Depends(get_db)):
    service = ServiceService(db)
    return service.update_service(service_id, service_data, tenant_id)


@router.delete("/{service_id}")
def delete_service(service_id: UUID, tenant_id: TenantId, db: Session = Depends(get_db)):
    service = ServiceService(db)
    return service.delete_service(service_id, tenant_id)


@router.post("/{service_id}/expenses", response_model=ServiceOut)
def add_service_expense(service_id: UUID, entry_data: ServiceExpenseCreate, tenant_id: TenantId, db: Session = Depends(get_db)):
    """Agregar gasto al historial; total_expenses se recalcula"""
    service = ServiceService(db)
    return service.add_expense_entry(service_id, entry_data, tenant_id)


@router.delete("/{service_id}/expenses/{entry_id}", response_model=ServiceOut)
def remove_service_expense(service_id: UUID, entry_id: int, tenant_id: TenantId, db: Session = Depends(get_db)):
    service = ServiceService(db)
    return service.remove_expense_entry(service_id, entry_id, tenant_id)


@router.post("/{service_id}/invoices", response_model=ServiceOut)
def add_service_invoice(service_id: UUID, link: InvoiceLink, tenant_id: TenantId, db: Session = Depends(get_db)):
    service = ServiceService(db)
    return service.add_invoice(service_id, link.invoice_id, tenant_id)


@router.post("/{service_id}/providers", response_model=ServiceOut)
def add_service_provider(service_id: UUID, link: ProviderLink, tenant_id: TenantId, db: Session = Depends(get_db)):
    service = ServiceService(db)
    return service.add_provider(service_id, link.supplier_id, tenant_id)


@router.delete("/{service_id}/providers/{supplier_id}", response_model=ServiceOut)
def remove_service_provider(service_id: UUID, supplier_id: UUID, tenant_id: TenantId, db: Session = Depends(get_db)):
    """Quitar prestador; debe quedar al menos uno"""
    service = ServiceService(db)
    return service.remove_provider(service_id, supplier_id, tenant_id)
