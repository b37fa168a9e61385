from fastapi import APIRouter, status, Depends, Query
from uuid import UUID
from typing import List, Optional
from sqlalchemy.orm import Session

from app.core.config import settings
from app.dependencies.dbDependecies import get_db
from app.dependencies.companyDependencies import TenantId
from app.modules.products import service
from app.modules.products.schemas import (
    ProductCreate,
    ProductUpdate,
    ProductOut,
    PaginatedProductResponse,
    QuantityAdjust
)

product_router = APIRouter(prefix="/products", tags=["Products"])


@product_router.post("/", response_model=ProductOut, status_code=status.HTTP_201_CREATED)
def create_product(data: ProductCreate, tenant_id: TenantId, db: Session = Depends(get_db)):
    """Create a new product."""
    return service.create_product(db, data, tenant_id)


@product_router.get("/", response_model=PaginatedProductResponse)
def list_products(
    tenant_id: TenantId,
    db: Session = Depends(get_db),
    page: int = Query(1, ge=1, description="Número de página"),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, description="Elementos por página"),
    name: Optional[str] = Query(None, description="Filtrar por nombre")
):
    return service.list_products(db, tenant_id, page, limit, name)


@product_router.get("/search", response_model=List[ProductOut])
def search_products(tenant_id: TenantId, q: str = Query(..., min_length=1), db: Session = Depends(get_db)):
    return service.search_products(db, tenant_id, q)


@product_router.get("/low-stock", response_model=List[ProductOut])
def get_low_stock_products(tenant_id: TenantId, db: Session = Depends(get_db)):
    """Products whose quantity is at or below min_quantity."""
    return service.get_low_stock_products(db, tenant_id)


@product_router.get("/category/{category}", response_model=List[ProductOut])
def get_products_by_category(category: str, tenant_id: TenantId, db: Session = Depends(get_db)):
    return service.get_products_by_category(db, tenant_id, category)


@product_router.get("/supplier/{supplier_id}", response_model=List[ProductOut])
def get_products_by_supplier(supplier_id: UUID, tenant_id: TenantId, db: Session = Depends(get_db)):
    return service.get_products_by_supplier(db, tenant_id, supplier_id)


@product_router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: UUID, tenant_id: TenantId, db: Session = Depends(get_db)):
    return service.get_product(db, product_id, tenant_id)


@product_router.put("/{product_id}", response_model=ProductOut)
def update_product(product_id: UUID, data: ProductUpdate, tenant_id: TenantId, db: Session = Depends(get_db)):
    return service.update_product(db, product_id, data, tenant_id)


@product_router.patch("/{product_id}/quantity", response_model=ProductOut)
def adjust_product_quantity(product_id: UUID, data: QuantityAdjust, tenant_id: TenantId, db: Session = Depends(get_db)):
    """Add (or subtract, with a negative delta) units of stock."""
    return service.adjust_quantity(db, product_id, data.delta, tenant_id)


@product_router.delete("/{product_id}")
def delete_product(product_id: UUID, tenant_id: TenantId, db: Session = Depends(get_db)):
    return service.delete_product(db, product_id, tenant_id)
