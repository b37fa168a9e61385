from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID
from datetime import date

from app.core.config import settings
from app.database.database import get_db
from app.dependencies.companyDependencies import TenantId
from app.modules.expenses.models import ExpenseMethod
from app.modules.expenses.service import ExpenseService
from app.modules.expenses.schemas import ExpenseCreate, ExpenseUpdate, ExpenseOut
from app.modules.invoices.schemas import DeleteAllResult

router = APIRouter(prefix="/expenses", tags=["Expenses"])


@router.post("/", response_model=ExpenseOut, status_code=status.HTTP_201_CREATED)
def create_expense(expense_data: ExpenseCreate, tenant_id: TenantId, db: Session = Depends(get_db)):
    """Registrar egreso; con invoice_id/service_id se aplica a la factura y al servicio"""
    service = ExpenseService(db)
    return service.create_expense(expense_data, tenant_id)


@router.get("/", response_model=List[ExpenseOut])
def list_expenses(
    tenant_id: TenantId,
    supplier_id: Optional[UUID] = Query(None),
    invoice_id: Optional[UUID] = Query(None),
    service_id: Optional[UUID] = Query(None),
    method: Optional[ExpenseMethod] = Query(None),
    created_by: Optional[UUID] = Query(None),
    on_date: Optional[date] = Query(None, alias="date"),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db)
):
    service = ExpenseService(db)
    return service.list_expenses(
        tenant_id, supplier_id, invoice_id, service_id, method, created_by,
        on_date, start_date, end_date, limit, offset
    )


@router.get("/search", response_model=List[ExpenseOut])
def search_expenses(tenant_id: TenantId, q: str = Query(..., min_length=1), db: Session = Depends(get_db)):
    service = ExpenseService(db)
    return service.search_expenses(tenant_id, q)


@router.delete("/delete-all", response_model=DeleteAllResult)
def delete_all_expenses(tenant_id: TenantId, db: Session = Depends(get_db)):
    service = ExpenseService(db)
    return service.delete_all_expenses(tenant_id)


@router.get("/{expense_id}", response_model=ExpenseOut)
def get_expense(expense_id: UUID, tenant_id: TenantId, db: Session = Depends(get_db)):
    service = ExpenseService(db)
    return service.get_expense(expense_id, tenant_id)


@router.put("/{expense_id}", response_model=ExpenseOut)
def update_expense(expense_id: UUID, expense_data: ExpenseUpdate, tenant_id: TenantId, db: Session = Depends(get_db)):
    service = ExpenseService(db)
    return service.update_expense(expense_id, expense_data, tenant_id)


@router.delete("/{expense_id}")
def delete_expense(expense_id: UUID, tenant_id: TenantId, db: Session = Depends(get_db)):
    service = ExpenseService(db)
    return service.delete_expense(expense_id, tenant_id)
