from pydantic import BaseModel, Field
from decimal import Decimal
from typing import Optional, List
from uuid import UUID
import datetime as dt


class ServiceExpenseCreate(BaseModel):
    amount: Decimal = Field(..., gt=0)
    date: dt.date = Field(default_factory=dt.date.today)
    description: Optional[str] = Field(None, max_length=255)
    expense_id: Optional[UUID] = None


class ServiceExpenseOut(BaseModel):
    id: int
    amount: Decimal
    date: dt.date
    description: Optional[str] = None
    expense_id: Optional[UUID] = None

    class Config:
        from_attributes = True


class ServiceBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    is_active: bool = True


class ServiceCreate(ServiceBase):
    provider_ids: List[UUID] = Field(..., min_length=1, description="Al menos un prestador de servicios")
    created_by: Optional[UUID] = None


class ServiceUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    is_active: Optional[bool] = None
    provider_ids: Optional[List[UUID]] = Field(None, min_length=1)


class InvoiceLink(BaseModel):
    invoice_id: UUID


class ProviderLink(BaseModel):
    supplier_id: UUID


class ServiceOut(ServiceBase):
    id: UUID
    total_expenses: Decimal
    created_by: Optional[UUID] = None
    provider_ids: List[UUID] = []
    invoice_ids: List[UUID] = []
    expense_history: List[ServiceExpenseOut] = []
    created_at: dt.datetime
    updated_at: dt.datetime

    class Config:
        from_attributes = True
