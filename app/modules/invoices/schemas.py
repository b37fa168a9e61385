from pydantic import BaseModel, Field, field_validator, model_validator
from decimal import Decimal
from typing import Optional, List
from uuid import UUID
import datetime as dt

from app.modules.invoices.models import InvoiceType, InvoiceStatus


# Line Item Schemas (compartidos con órdenes)
class LineItemCreate(BaseModel):
    product_id: Optional[UUID] = None
    product_name: str = Field(..., min_length=1, max_length=200)
    quantity: Decimal = Field(..., gt=0, description="Cantidad debe ser mayor a 0")
    free_quantity: Decimal = Field(Decimal("0"), ge=0, description="Unidades bonificadas")
    unit_price: Decimal = Field(..., ge=0, description="Precio unitario sin impuestos")
    total_price: Optional[Decimal] = Field(None, ge=0, description="Total de la línea; por defecto cantidad × precio")

    @model_validator(mode='after')
    def default_total_price(self):
        if self.total_price is None:
            self.total_price = self.quantity * self.unit_price
        return self


class LineItemOut(BaseModel):
    id: UUID
    product_id: Optional[UUID] = None
    product_name: str
    quantity: Decimal
    free_quantity: Decimal
    unit_price: Decimal
    total_price: Decimal

    class Config:
        from_attributes = True


class PartyMixin(BaseModel):
    """Unión etiquetada: ventas -> customer_id, compras -> supplier_id"""
    type: InvoiceType = InvoiceType.SALES
    customer_id: Optional[UUID] = None
    supplier_id: Optional[UUID] = None

    @model_validator(mode='after')
    def validate_party(self):
        if self.type == InvoiceType.SALES:
            if self.customer_id is None or self.supplier_id is not None:
                raise ValueError('Un documento de venta requiere customer_id y no admite supplier_id')
        else:
            if self.supplier_id is None or self.customer_id is not None:
                raise ValueError('Un documento de compra requiere supplier_id y no admite customer_id')
        return self


# Ledger Schemas
class LedgerEntryBase(BaseModel):
    amount: Decimal = Field(..., gt=0, description="Monto debe ser mayor a 0")
    date: dt.date = Field(default_factory=dt.date.today)
    method: str = Field("cash", max_length=20)
    reference: Optional[str] = Field(None, max_length=100)


class LedgerEntryCreate(BaseModel):
    """Monto, fecha y método se toman del pago/egreso; amount solo se verifica"""
    amount: Optional[Decimal] = Field(None, gt=0)
    date: Optional[dt.date] = None
    reference: Optional[str] = Field(None, max_length=100)


class PaymentEntryCreate(LedgerEntryCreate):
    payment_id: UUID


class ExpenseEntryCreate(LedgerEntryCreate):
    expense_id: UUID


class PaymentEntryOut(LedgerEntryBase):
    payment_id: UUID

    class Config:
        from_attributes = True


class ExpenseEntryOut(LedgerEntryBase):
    expense_id: UUID

    class Config:
        from_attributes = True


# Invoice Schemas
class InvoiceCreate(PartyMixin):
    email: Optional[str] = Field(None, max_length=255)
    date: dt.date = Field(default_factory=dt.date.today)
    due_date: Optional[dt.date] = None
    status: InvoiceStatus = InvoiceStatus.PENDING
    issued_by: Optional[UUID] = None
    terms: Optional[str] = None
    notes: Optional[str] = None
    items: List[LineItemCreate] = Field(..., min_length=1, description="Debe incluir al menos un item")

    @model_validator(mode='after')
    def validate_due_date(self):
        if self.due_date and self.date and self.due_date < self.date:
            raise ValueError('La fecha de vencimiento no puede ser anterior a la fecha de emisión')
        return self

    @field_validator('status')
    @classmethod
    def validate_initial_status(cls, v):
        if v in (InvoiceStatus.PAID, InvoiceStatus.PARTIALLY_PAID):
            raise ValueError('El estado de pago se deriva de los pagos registrados')
        return v


class PartyInvoiceCreate(BaseModel):
    """Factura creada desde un cliente o proveedor (la parte viene en la ruta)"""
    email: Optional[str] = Field(None, max_length=255)
    date: dt.date = Field(default_factory=dt.date.today)
    due_date: Optional[dt.date] = None
    status: InvoiceStatus = InvoiceStatus.PENDING
    issued_by: Optional[UUID] = None
    terms: Optional[str] = None
    notes: Optional[str] = None
    items: List[LineItemCreate] = Field(..., min_length=1)


class InvoiceUpdate(BaseModel):
    email: Optional[str] = Field(None, max_length=255)
    date: Optional[dt.date] = None
    due_date: Optional[dt.date] = None
    terms: Optional[str] = None
    notes: Optional[str] = None
    items: Optional[List[LineItemCreate]] = Field(None, min_length=1)


class InvoiceStatusUpdate(BaseModel):
    status: InvoiceStatus


class InvoiceOut(BaseModel):
    id: UUID
    invoice_number: str
    type: InvoiceType
    status: InvoiceStatus
    customer_id: Optional[UUID] = None
    supplier_id: Optional[UUID] = None
    customer_name: Optional[str] = None
    supplier_name: Optional[str] = None
    email: Optional[str] = None
    amount: Decimal
    paid_amount: Decimal
    remaining_amount: Decimal
    date: dt.date
    due_date: Optional[str] = None
    issued_by: Optional[UUID] = None
    terms: Optional[str] = None
    notes: Optional[str] = None
    items: List[LineItemOut] = []
    payments: List[PaymentEntryOut] = []
    expenses: List[ExpenseEntryOut] = []
    created_at: dt.datetime
    updated_at: dt.datetime

    class Config:
        from_attributes = True


class DeleteAllResult(BaseModel):
    message: str
    deleted_count: int
