from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID
from datetime import date

from app.core.config import settings
from app.database.database import get_db
from app.dependencies.companyDependencies import TenantId
from app.modules.payments.models import PaymentMethod
from app.modules.payments.service import PaymentService
from app.modules.payments.schemas import PaymentCreate, PaymentUpdate, PaymentOut
from app.modules.invoices.schemas import DeleteAllResult

router = APIRouter(prefix="/payments", tags=["Payments"])


@router.post("/", response_model=PaymentOut, status_code=status.HTTP_201_CREATED)
def create_payment(payment_data: PaymentCreate, tenant_id: TenantId, db: Session = Depends(get_db)):
    """Registrar pago; con invoice_id se aplica a la factura en la misma transacción"""
    service = PaymentService(db)
    return service.create_payment(payment_data, tenant_id)


@router.get("/", response_model=List[PaymentOut])
def list_payments(
    tenant_id: TenantId,
    customer_id: Optional[UUID] = Query(None),
    invoice_id: Optional[UUID] = Query(None),
    method: Optional[PaymentMethod] = Query(None),
    created_by: Optional[UUID] = Query(None),
    on_date: Optional[date] = Query(None, alias="date"),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db)
):
    service = PaymentService(db)
    return service.list_payments(
        tenant_id, customer_id, invoice_id, method, created_by,
        on_date, start_date, end_date, limit, offset
    )


@router.get("/search", response_model=List[PaymentOut])
def search_payments(tenant_id: TenantId, q: str = Query(..., min_length=1), db: Session = Depends(get_db)):
    service = PaymentService(db)
    return service.search_payments(tenant_id, q)


@router.delete("/delete-all", response_model=DeleteAllResult)
def delete_all_payments(tenant_id: TenantId, db: Session = Depends(get_db)):
    service = PaymentService(db)
    return service.delete_all_payments(tenant_id)


@router.get("/{payment_id}", response_model=PaymentOut)
def get_payment(payment_id: UUID, tenant_id: TenantId, db: Session = Depends(get_db)):
    service = PaymentService(db)
    return service.get_payment(payment_id, tenant_id)


@router.put("/{payment_id}", response_model=PaymentOut)
def update_payment(payment_id: UUID, payment_data: PaymentUpdate, tenant_id: TenantId, db: Session = Depends(get_db)):
    service = PaymentService(db)
    return service.update_payment(payment_id, payment_data, tenant_id)


@router.delete("/{payment_id}")
def delete_payment(payment_id: UUID, tenant_id: TenantId, db: Session = Depends(get_db)):
    """Eliminar pago: se retira de la factura y del cliente y se recalculan los saldos"""
    service = PaymentService(db)
    return service.delete_payment(payment_id, tenant_id)
