from pydantic import BaseModel, Field, field_validator
from decimal import Decimal
from uuid import UUID
from typing import Optional, List
from datetime import datetime


# Schema base para paginación estándar
class PaginatedResponse(BaseModel):
    """Respuesta paginada estándar para listas"""
    total: int
    page: int
    limit: int
    hasNext: bool
    hasPrev: bool


class ProductBase(BaseModel):
    product_name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    category: Optional[str] = Field(None, max_length=100)
    price: Decimal = Field(Decimal("0.00"), ge=0, description="Precio de venta")
    cost_price: Decimal = Field(Decimal("0.00"), ge=0, description="Costo")
    quantity: int = Field(0, ge=0)
    unit: Optional[str] = Field(None, max_length=20)
    barcode: Optional[str] = Field(None, max_length=50)
    min_quantity: int = Field(5, ge=0, description="Umbral de stock bajo")

    @field_validator('barcode')
    @classmethod
    def empty_barcode_is_none(cls, v):
        if v is not None and not v.strip():
            return None
        return v


class ProductCreate(ProductBase):
    supplier_ids: List[UUID] = []
    user_id: Optional[UUID] = None


class ProductUpdate(BaseModel):
    product_name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    category: Optional[str] = Field(None, max_length=100)
    price: Optional[Decimal] = Field(None, ge=0)
    cost_price: Optional[Decimal] = Field(None, ge=0)
    quantity: Optional[int] = Field(None, ge=0)
    unit: Optional[str] = Field(None, max_length=20)
    barcode: Optional[str] = Field(None, max_length=50)
    min_quantity: Optional[int] = Field(None, ge=0)
    supplier_ids: Optional[List[UUID]] = None


class QuantityAdjust(BaseModel):
    """Ajuste de stock: positivo para entradas, negativo para salidas"""
    delta: int


class ProductOut(ProductBase):
    id: UUID
    supplier_ids: List[UUID] = []
    user_id: Optional[UUID] = None
    is_low_stock: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PaginatedProductResponse(PaginatedResponse):
    products: List[ProductOut]
