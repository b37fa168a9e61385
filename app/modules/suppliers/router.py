from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID

from app.core.config import settings
from app.database.database import get_db
from app.dependencies.companyDependencies import TenantId
from app.modules.suppliers.models import SupplierType
from app.modules.suppliers.service import SupplierService
from app.modules.suppliers.schemas import (
    SupplierCreate, SupplierUpdate, SupplierOut, SupplierDetail,
    ExpenseLink, ServiceLink, SupplierBalanceOut
)
from app.modules.invoices.schemas import InvoiceOut, PartyInvoiceCreate
from app.modules.expenses.schemas import ExpenseOut
from app.modules.services.schemas import ServiceOut
from app.modules.cheques.schemas import ChequeOut

router = APIRouter(prefix="/suppliers", tags=["Suppliers"])


@router.post("/", response_model=SupplierOut, status_code=status.HTTP_201_CREATED)
def create_supplier(supplier_data: SupplierCreate, tenant_id: TenantId, db: Session = Depends(get_db)):
    service = SupplierService(db)
    return service.create_supplier(supplier_data, tenant_id)


@router.get("/", response_model=List[SupplierOut])
def list_suppliers(
    tenant_id: TenantId,
    supplier_type: Optional[SupplierType] = Query(None),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db)
):
    service = SupplierService(db)
    return service.list_suppliers(tenant_id, supplier_type, limit, offset)


@router.get("/search", response_model=List[SupplierOut])
def search_suppliers(tenant_id: TenantId, q: str = Query(..., min_length=1), db: Session = Depends(get_db)):
    service = SupplierService(db)
    return service.search_suppliers(tenant_id, q)


@router.get("/user/{user_id}", response_model=List[SupplierOut])
def get_suppliers_by_user(user_id: UUID, tenant_id: TenantId, db: Session = Depends(get_db)):
    service = SupplierService(db)
    return service.get_suppliers_by_user(user_id, tenant_id)


@router.get("/{supplier_id}", response_model=SupplierDetail)
def get_supplier(supplier_id: UUID, tenant_id: TenantId, db: Session = Depends(get_db)):
    service = SupplierService(db)
    return SupplierDetail.from_supplier(service.get_supplier(supplier_id, tenant_id))


@router.put("/{supplier_id}", response_model=SupplierOut)
def update_supplier(supplier_id: UUID, supplier_data: SupplierUpdate, tenant_id: TenantId, db: Session = Depends(get_db)):
    service = SupplierService(db)
    return service.update_supplier(supplier_id, supplier_data, tenant_id)


@router.delete("/{supplier_id}")
def delete_supplier(supplier_id: UUID, tenant_id: TenantId, db: Session = Depends(get_db)):
    service = SupplierService(db)
    return service.delete_supplier(supplier_id, tenant_id)


@router.post("/{supplier_id}/invoices", response_model=InvoiceOut, status_code=status.HTTP_201_CREATED)
def add_invoice_to_supplier(
    supplier_id: UUID, invoice_data: PartyInvoiceCreate, tenant_id: TenantId, db: Session = Depends(get_db)
):
    """Crear una factura de compra para el proveedor"""
    service = SupplierService(db)
    return service.add_invoice(supplier_id, invoice_data, tenant_id)


@router.get("/{supplier_id}/invoices", response_model=List[InvoiceOut])
def get_supplier_invoices(supplier_id: UUID, tenant_id: TenantId, db: Session = Depends(get_db)):
    service = SupplierService(db)
    return service.get_supplier_invoices(supplier_id, tenant_id)


@router.post("/{supplier_id}/expenses", response_model=SupplierDetail)
def add_expense_to_supplier(supplier_id: UUID, link: ExpenseLink, tenant_id: TenantId, db: Session = Depends(get_db)):
    """Agregar un egreso a la lista del proveedor (sin duplicados)"""
    service = SupplierService(db)
    return SupplierDetail.from_supplier(service.add_expense(supplier_id, link.expense_id, tenant_id))


@router.delete("/{supplier_id}/expenses/{expense_id}", response_model=SupplierDetail)
def remove_expense_from_supplier(supplier_id: UUID, expense_id: UUID, tenant_id: TenantId, db: Session = Depends(get_db)):
    service = SupplierService(db)
    return SupplierDetail.from_supplier(service.remove_expense(supplier_id, expense_id, tenant_id))


@router.get("/{supplier_id}/expenses", response_model=List[ExpenseOut])
def get_supplier_expenses(supplier_id: UUID, tenant_id: TenantId, db: Session = Depends(get_db)):
    service = SupplierService(db)
    return service.get_supplier_expenses(supplier_id, tenant_id)


@router.post("/{supplier_id}/services", response_model=SupplierDetail)
def add_service_to_supplier(supplier_id: UUID, link: ServiceLink, tenant_id: TenantId, db: Session = Depends(get_db)):
    """Asignar un servicio a un prestador de servicios"""
    service = SupplierService(db)
    return SupplierDetail.from_supplier(service.add_service(supplier_id, link.service_id, tenant_id))


@router.delete("/{supplier_id}/services/{service_id}", response_model=SupplierDetail)
def remove_service_from_supplier(supplier_id: UUID, service_id: UUID, tenant_id: TenantId, db: Session = Depends(get_db)):
    service = SupplierService(db)
    return SupplierDetail.from_supplier(service.remove_service(supplier_id, service_id, tenant_id))


@router.get("/{supplier_id}/services", response_model=List[ServiceOut])
def get_supplier_services(supplier_id: UUID, tenant_id: TenantId, db: Session = Depends(get_db)):
    service = SupplierService(db)
    return service.get_supplier_services(supplier_id, tenant_id)


@router.get("/{supplier_id}/cheques", response_model=List[ChequeOut])
def get_supplier_cheques(supplier_id: UUID, tenant_id: TenantId, db: Session = Depends(get_db)):
    service = SupplierService(db)
    return service.get_supplier_cheques(supplier_id, tenant_id)


@router.post("/{supplier_id}/reconcile", response_model=SupplierBalanceOut)
def reconcile_supplier_balance(supplier_id: UUID, tenant_id: TenantId, db: Session = Depends(get_db)):
    """Recalcular el saldo del proveedor desde sus facturas y egresos"""
    service = SupplierService(db)
    supplier = service.reconcile_balance(supplier_id, tenant_id)
    return SupplierBalanceOut(supplier_id=supplier.id, balance_due=supplier.balance_due)
