from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID

from app.core.config import settings
from app.database.database import get_db
from app.dependencies.companyDependencies import TenantId
from app.modules.invoices.models import InvoiceStatus, InvoiceType
from app.modules.invoices.service import InvoiceService
from app.modules.invoices.schemas import (
    InvoiceCreate, InvoiceUpdate, InvoiceOut, InvoiceStatusUpdate,
    PaymentEntryCreate, ExpenseEntryCreate, DeleteAllResult
)

# Router principal del módulo de facturas
router = APIRouter(prefix="/invoices", tags=["Invoices"])


@router.post("/", response_model=InvoiceOut, status_code=status.HTTP_201_CREATED)
def create_invoice(invoice_data: InvoiceCreate, tenant_id: TenantId, db: Session = Depends(get_db)):
    """
    Crear una nueva factura

    Ventas requieren customer_id; compras requieren supplier_id.
    El total se calcula como Σ(total_price) más el impuesto configurado.
    """
    service = InvoiceService(db)
    return service.create_invoice(invoice_data, tenant_id)


@router.get("/", response_model=List[InvoiceOut])
def list_invoices(
    tenant_id: TenantId,
    status: Optional[InvoiceStatus] = Query(None, description="Estado de la factura"),
    type: Optional[InvoiceType] = Query(None, description="sales o purchase"),
    customer_id: Optional[UUID] = Query(None, description="Filtrar por cliente"),
    supplier_id: Optional[UUID] = Query(None, description="Filtrar por proveedor"),
    issued_by: Optional[UUID] = Query(None, description="Filtrar por usuario emisor"),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db)
):
    """Listar facturas con filtros por estado, tipo, parte y emisor"""
    service = InvoiceService(db)
    return service.list_invoices(tenant_id, status, type, customer_id, supplier_id, issued_by, limit, offset)


@router.get("/search", response_model=List[InvoiceOut])
def search_invoices(tenant_id: TenantId, q: str = Query(..., min_length=1), db: Session = Depends(get_db)):
    """Buscar por número, nombre de la parte o notas"""
    service = InvoiceService(db)
    return service.search_invoices(tenant_id, q)


@router.get("/payment/{payment_id}", response_model=List[InvoiceOut])
def get_invoices_by_payment(payment_id: UUID, tenant_id: TenantId, db: Session = Depends(get_db)):
    service = InvoiceService(db)
    return service.get_invoices_by_payment(payment_id, tenant_id)


@router.get("/expense/{expense_id}", response_model=List[InvoiceOut])
def get_invoices_by_expense(expense_id: UUID, tenant_id: TenantId, db: Session = Depends(get_db)):
    service = InvoiceService(db)
    return service.get_invoices_by_expense(expense_id, tenant_id)


@router.delete("/delete-all", response_model=DeleteAllResult)
def delete_all_invoices(tenant_id: TenantId, db: Session = Depends(get_db)):
    """Eliminar todas las facturas de la empresa y reconciliar saldos"""
    service = InvoiceService(db)
    return service.delete_all_invoices(tenant_id)


@router.get("/{invoice_id}", response_model=InvoiceOut)
def get_invoice(invoice_id: UUID, tenant_id: TenantId, db: Session = Depends(get_db)):
    service = InvoiceService(db)
    return service.get_invoice(invoice_id, tenant_id)


@router.put("/{invoice_id}", response_model=InvoiceOut)
def update_invoice(invoice_id: UUID, invoice_data: InvoiceUpdate, tenant_id: TenantId, db: Session = Depends(get_db)):
    """
    Actualizar una factura

    Si se reemplazan los ítems se recalculan total, saldo y estado.
    """
    service = InvoiceService(db)
    return service.update_invoice(invoice_id, invoice_data, tenant_id)


@router.patch("/{invoice_id}/status", response_model=InvoiceOut)
def update_invoice_status(
    invoice_id: UUID, status_data: InvoiceStatusUpdate, tenant_id: TenantId, db: Session = Depends(get_db)
):
    """Cambiar estado (draft, pending, overdue, unpaid) de una factura sin pagos"""
    service = InvoiceService(db)
    return service.update_status(invoice_id, status_data.status, tenant_id)


@router.delete("/{invoice_id}")
def delete_invoice(invoice_id: UUID, tenant_id: TenantId, db: Session = Depends(get_db)):
    service = InvoiceService(db)
    return service.delete_invoice(invoice_id, tenant_id)


@router.post("/{invoice_id}/payments", response_model=InvoiceOut)
def add_payment_to_invoice(
    invoice_id: UUID, entry_data: PaymentEntryCreate, tenant_id: TenantId, db: Session = Depends(get_db)
):
    """Registrar un pago en el ledger de una factura de venta"""
    service = InvoiceService(db)
    return service.add_payment(invoice_id, entry_data, tenant_id)


@router.delete("/{invoice_id}/payments/{payment_id}", response_model=InvoiceOut)
def remove_payment_from_invoice(invoice_id: UUID, payment_id: UUID, tenant_id: TenantId, db: Session = Depends(get_db)):
    service = InvoiceService(db)
    return service.remove_payment(invoice_id, payment_id, tenant_id)


@router.post("/{invoice_id}/expenses", response_model=InvoiceOut)
def add_expense_to_invoice(
    invoice_id: UUID, entry_data: ExpenseEntryCreate, tenant_id: TenantId, db: Session = Depends(get_db)
):
    """Registrar un egreso en el ledger de una factura de compra"""
    service = InvoiceService(db)
    return service.add_expense(invoice_id, entry_data, tenant_id)


@router.delete("/{invoice_id}/expenses/{expense_id}", response_model=InvoiceOut)
def remove_expense_from_invoice(invoice_id: UUID, expense_id: UUID, tenant_id: TenantId, db: Session = Depends(get_db)):
    service = InvoiceService(db)
    return service.remove_expense(invoice_id, expense_id, tenant_id)
