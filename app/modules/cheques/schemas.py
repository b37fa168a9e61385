from pydantic import BaseModel, Field, model_validator
from decimal import Decimal
from typing import Optional
from uuid import UUID
import datetime as dt

from app.modules.cheques.models import ChequeStatus, ChequeType


def check_cheque_links(customer_id, supplier_id, payment_id, expense_id):
    """Un cheque pertenece a un cliente o a un proveedor y a lo sumo a un pago o egreso"""
    if (customer_id is None) == (supplier_id is None):
        raise ValueError('El cheque debe tener customer_id o supplier_id, no ambos ni ninguno')
    if payment_id is not None and expense_id is not None:
        raise ValueError('El cheque no puede vincularse a un pago y a un egreso a la vez')


class ChequeBase(BaseModel):
    bank_name: str = Field(..., min_length=1, max_length=100)
    cheque_date: dt.date
    amount: Decimal = Field(..., gt=0)
    holder_name: Optional[str] = Field(None, max_length=200)
    holder_phone: Optional[str] = Field(None, max_length=30)
    status: ChequeStatus = ChequeStatus.PENDING
    type: ChequeType = ChequeType.RECEIVED
    notes: Optional[str] = None
    customer_id: Optional[UUID] = None
    supplier_id: Optional[UUID] = None
    payment_id: Optional[UUID] = None
    expense_id: Optional[UUID] = None


class ChequeCreate(ChequeBase):
    cheque_number: Optional[str] = Field(None, min_length=1, max_length=50, description="Se genera si no se envía")

    @model_validator(mode='after')
    def validate_links(self):
        check_cheque_links(self.customer_id, self.supplier_id, self.payment_id, self.expense_id)
        return self


class ChequeUpdate(BaseModel):
    cheque_number: Optional[str] = Field(None, min_length=1, max_length=50)
    bank_name: Optional[str] = Field(None, min_length=1, max_length=100)
    cheque_date: Optional[dt.date] = None
    amount: Optional[Decimal] = Field(None, gt=0)
    holder_name: Optional[str] = Field(None, max_length=200)
    holder_phone: Optional[str] = Field(None, max_length=30)
    status: Optional[ChequeStatus] = None
    type: Optional[ChequeType] = None
    notes: Optional[str] = None
    customer_id: Optional[UUID] = None
    supplier_id: Optional[UUID] = None
    payment_id: Optional[UUID] = None
    expense_id: Optional[UUID] = None


class ChequeStatusUpdate(BaseModel):
    status: ChequeStatus


class ChequeOut(ChequeBase):
    id: UUID
    cheque_number: str
    created_at: dt.datetime
    updated_at: dt.datetime

    class Config:
        from_attributes = True
