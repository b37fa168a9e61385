from pydantic import BaseModel, Field, model_validator
from decimal import Decimal
from typing import Optional, List
from uuid import UUID
import datetime as dt

from app.modules.invoices.models import InvoiceType
from app.modules.invoices.schemas import PartyMixin, LineItemCreate, LineItemOut
from app.modules.orders.models import OrderStatus, DeliveryStatus


class OrderCreate(PartyMixin):
    status: OrderStatus = OrderStatus.PENDING
    date: dt.date = Field(default_factory=dt.date.today)
    delivery_date: Optional[dt.date] = None
    issued_by: Optional[UUID] = None
    notes: Optional[str] = None
    delivery_address: Optional[str] = Field(None, max_length=255)
    delivery_notes: Optional[str] = None
    driver_id: Optional[UUID] = None
    items: List[LineItemCreate] = Field(..., min_length=1, description="Debe incluir al menos un item")

    @model_validator(mode='after')
    def validate_delivery_date(self):
        if self.delivery_date and self.delivery_date < self.date:
            raise ValueError('La fecha de entrega no puede ser anterior a la fecha de la orden')
        return self


class OrderUpdate(BaseModel):
    date: Optional[dt.date] = None
    delivery_date: Optional[dt.date] = None
    notes: Optional[str] = None
    delivery_address: Optional[str] = Field(None, max_length=255)
    delivery_notes: Optional[str] = None
    items: Optional[List[LineItemCreate]] = Field(None, min_length=1)


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class DeliveryStatusUpdate(BaseModel):
    delivery_status: DeliveryStatus


class DriverAssign(BaseModel):
    driver_id: UUID


class OrderOut(BaseModel):
    id: UUID
    order_number: str
    type: InvoiceType
    status: OrderStatus
    customer_id: Optional[UUID] = None
    supplier_id: Optional[UUID] = None
    amount: Decimal
    date: dt.date
    delivery_date: Optional[dt.date] = None
    issued_by: Optional[UUID] = None
    notes: Optional[str] = None
    delivery_status: DeliveryStatus
    delivery_address: Optional[str] = None
    delivery_notes: Optional[str] = None
    driver_id: Optional[UUID] = None
    items: List[LineItemOut] = []
    created_at: dt.datetime
    updated_at: dt.datetime

    class Config:
        from_attributes = True
