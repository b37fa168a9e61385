from pydantic import BaseModel, Field
from decimal import Decimal
from typing import Optional, List
from uuid import UUID
import datetime as dt

from app.modules.payments.models import PaymentMethod, PaymentStatus


class PaymentBase(BaseModel):
    amount: Decimal = Field(..., gt=0, description="Monto debe ser mayor a 0")
    method: PaymentMethod = PaymentMethod.CASH
    date: dt.date = Field(default_factory=dt.date.today)
    status: PaymentStatus = PaymentStatus.COMPLETED
    reference: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None


class PaymentCreate(PaymentBase):
    customer_id: UUID
    invoice_id: Optional[UUID] = None
    created_by: Optional[UUID] = None


class PaymentUpdate(BaseModel):
    amount: Optional[Decimal] = Field(None, gt=0)
    method: Optional[PaymentMethod] = None
    date: Optional[dt.date] = None
    status: Optional[PaymentStatus] = None
    reference: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None


class PaymentOut(PaymentBase):
    id: UUID
    payment_number: str
    customer_id: UUID
    invoice_id: Optional[UUID] = None
    created_by: Optional[UUID] = None
    cheque_ids: List[UUID] = []
    created_at: dt.datetime
    updated_at: dt.datetime

    class Config:
        from_attributes = True
