from pydantic import BaseModel, Field
from decimal import Decimal
from typing import Optional
from uuid import UUID
from datetime import datetime

from app.modules.suppliers.models import SupplierType


class SupplierBase(BaseModel):
    supplier_name: str = Field(..., min_length=1, max_length=200)
    company_name: Optional[str] = Field(None, max_length=200)
    supplier_type: SupplierType = SupplierType.GOODS_SUPPLIER
    phone: Optional[str] = Field(None, max_length=30)
    email: Optional[str] = Field(None, max_length=255)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    location: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None
    user_id: Optional[UUID] = None


class SupplierCreate(SupplierBase):
    pass


class SupplierUpdate(BaseModel):
    supplier_name: Optional[str] = Field(None, min_length=1, max_length=200)
    company_name: Optional[str] = Field(None, max_length=200)
    supplier_type: Optional[SupplierType] = None
    phone: Optional[str] = Field(None, max_length=30)
    email: Optional[str] = Field(None, max_length=255)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    location: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None
    user_id: Optional[UUID] = None


class SupplierOut(SupplierBase):
    id: UUID
    balance_due: Decimal
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class SupplierDetail(SupplierOut):
    invoice_ids: list[UUID] = []
    expense_ids: list[UUID] = []
    service_ids: list[UUID] = []

    @classmethod
    def from_supplier(cls, supplier):
        detail = cls.model_validate(supplier)
        detail.invoice_ids = [invoice.id for invoice in supplier.invoice_list]
        detail.expense_ids = [expense.id for expense in supplier.expense_list]
        detail.service_ids = [service.id for service in supplier.services]
        return detail


class ExpenseLink(BaseModel):
    expense_id: UUID


class ServiceLink(BaseModel):
    service_id: UUID


class SupplierBalanceOut(BaseModel):
    supplier_id: UUID
    balance_due: Decimal
