from pydantic import BaseModel, Field, field_validator
from decimal import Decimal
from typing import Optional
from uuid import UUID
from datetime import datetime


class CustomerBase(BaseModel):
    customer_name: str = Field(..., min_length=1, max_length=200)
    company_name: Optional[str] = Field(None, max_length=200)
    customer_type: Optional[str] = Field(None, max_length=50)
    phone: Optional[str] = Field(None, max_length=30)
    email: Optional[str] = Field(None, max_length=255)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    location: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None
    salesman_id: Optional[UUID] = None

    @field_validator('customer_name', 'company_name')
    @classmethod
    def strip_names(cls, v):
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError('El nombre no puede estar vacío')
        return v


class CustomerCreate(CustomerBase):
    created_by: Optional[UUID] = None


class CustomerUpdate(BaseModel):
    customer_name: Optional[str] = Field(None, min_length=1, max_length=200)
    company_name: Optional[str] = Field(None, max_length=200)
    customer_type: Optional[str] = Field(None, max_length=50)
    phone: Optional[str] = Field(None, max_length=30)
    email: Optional[str] = Field(None, max_length=255)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    location: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None
    salesman_id: Optional[UUID] = None


class CustomerOut(CustomerBase):
    id: UUID
    balance_due: Decimal
    created_by: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CustomerDetail(CustomerOut):
    invoice_ids: list[UUID] = []
    payment_ids: list[UUID] = []

    @classmethod
    def from_customer(cls, customer):
        detail = cls.model_validate(customer)
        detail.invoice_ids = [invoice.id for invoice in customer.invoice_list]
        detail.payment_ids = [payment.id for payment in customer.payment_list]
        return detail


class PaymentLink(BaseModel):
    payment_id: UUID


class BalanceOut(BaseModel):
    customer_id: UUID
    balance_due: Decimal
