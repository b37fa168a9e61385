from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID
from datetime import date

from app.core.config import settings
from app.database.database import get_db
from app.dependencies.companyDependencies import TenantId
from app.modules.cheques.models import ChequeStatus, ChequeType
from app.modules.cheques.service import ChequeService
from app.modules.cheques.schemas import ChequeCreate, ChequeUpdate, ChequeStatusUpdate, ChequeOut

router = APIRouter(prefix="/cheques", tags=["Cheques"])


@router.post("/", response_model=ChequeOut, status_code=status.HTTP_201_CREATED)
def create_cheque(cheque_data: ChequeCreate, tenant_id: TenantId, db: Session = Depends(get_db)):
    """Registrar cheque de un cliente o a un proveedor"""
    service = ChequeService(db)
    return service.create_cheque(cheque_data, tenant_id)


@router.get("/", response_model=List[ChequeOut])
def list_cheques(
    tenant_id: TenantId,
    customer_id: Optional[UUID] = Query(None),
    supplier_id: Optional[UUID] = Query(None),
    payment_id: Optional[UUID] = Query(None),
    expense_id: Optional[UUID] = Query(None),
    type: Optional[ChequeType] = Query(None),
    status_filter: Optional[ChequeStatus] = Query(None, alias="status"),
    on_date: Optional[date] = Query(None, alias="date"),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db)
):
    service = ChequeService(db)
    return service.list_cheques(
        tenant_id, customer_id, supplier_id, payment_id, expense_id, type, status_filter,
        on_date, start_date, end_date, limit, offset
    )


@router.get("/search", response_model=List[ChequeOut])
def search_cheques(tenant_id: TenantId, q: str = Query(..., min_length=1), db: Session = Depends(get_db)):
    service = ChequeService(db)
    return service.search_cheques(tenant_id, q)


@router.get("/{cheque_id}", response_model=ChequeOut)
def get_cheque(cheque_id: UUID, tenant_id: TenantId, db: Session = Depends(get_db)):
    service = ChequeService(db)
    return service.get_cheque(cheque_id, tenant_id)


@router.put("/{cheque_id}", response_model=ChequeOut)
def update_cheque(cheque_id: UUID, cheque_data: ChequeUpdate, tenant_id: TenantId, db: Session = Depends(get_db)):
    service = ChequeService(db)
    return service.update_cheque(cheque_id, cheque_data, tenant_id)


@router.patch("/{cheque_id}/status", response_model=ChequeOut)
def update_cheque_status(cheque_id: UUID, status_data: ChequeStatusUpdate, tenant_id: TenantId, db: Session = Depends(get_db)):
    """Marcar cheque como cobrado, rebotado o en cartera"""
    service = ChequeService(db)
    return service.update_status(cheque_id, status_data.status, tenant_id)


@router.delete("/{cheque_id}")
def delete_cheque(cheque_id: UUID, tenant_id: TenantId, db: Session = Depends(get_db)):
    service = ChequeService(db)
    return service.delete_cheque(cheque_id, tenant_id)
