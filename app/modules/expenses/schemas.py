from pydantic import BaseModel, Field
from decimal import Decimal
from typing import Optional, List
from uuid import UUID
import datetime as dt

from app.modules.expenses.models import ExpenseMethod
from app.modules.payments.models import PaymentStatus


class ExpenseBase(BaseModel):
    amount: Decimal = Field(..., gt=0, description="Monto debe ser mayor a 0")
    method: ExpenseMethod = ExpenseMethod.CASH
    date: dt.date = Field(default_factory=dt.date.today)
    status: PaymentStatus = PaymentStatus.COMPLETED
    reference: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None


class ExpenseCreate(ExpenseBase):
    supplier_id: UUID
    created_by: UUID
    invoice_id: Optional[UUID] = None
    service_id: Optional[UUID] = None


class ExpenseUpdate(BaseModel):
    amount: Optional[Decimal] = Field(None, gt=0)
    method: Optional[ExpenseMethod] = None
    date: Optional[dt.date] = None
    status: Optional[PaymentStatus] = None
    reference: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None


class ExpenseOut(ExpenseBase):
    id: UUID
    expense_number: str
    supplier_id: UUID
    invoice_id: Optional[UUID] = None
    service_id: Optional[UUID] = None
    created_by: UUID
    cheque_ids: List[UUID] = []
    created_at: dt.datetime
    updated_at: dt.datetime

    class Config:
        from_attributes = True
