from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID

from app.core.config import settings
from app.database.database import get_db
from app.dependencies.companyDependencies import TenantId
from app.modules.invoices.models import InvoiceType
from app.modules.invoices.schemas import DeleteAllResult
from app.modules.orders.models import OrderStatus, DeliveryStatus
from app.modules.orders.service import OrderService
from app.modules.orders.schemas import (
    OrderCreate, OrderUpdate, OrderOut, OrderStatusUpdate, DeliveryStatusUpdate, DriverAssign
)

router = APIRouter(prefix="/orders", tags=["Orders"])


@router.post("/", response_model=OrderOut, status_code=status.HTTP_201_CREATED)
def create_order(order_data: OrderCreate, tenant_id: TenantId, db: Session = Depends(get_db)):
    """Crear orden de venta (customer_id) o de compra (supplier_id)"""
    service = OrderService(db)
    return service.create_order(order_data, tenant_id)


@router.get("/", response_model=List[OrderOut])
def list_orders(
    tenant_id: TenantId,
    status_filter: Optional[OrderStatus] = Query(None, alias="status"),
    delivery_status: Optional[DeliveryStatus] = Query(None),
    type_filter: Optional[InvoiceType] = Query(None, alias="type"),
    customer_id: Optional[UUID] = Query(None),
    supplier_id: Optional[UUID] = Query(None),
    issued_by: Optional[UUID] = Query(None),
    driver_id: Optional[UUID] = Query(None),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db)
):
    service = OrderService(db)
    return service.list_orders(
        tenant_id, status_filter, delivery_status, type_filter,
        customer_id, supplier_id, issued_by, driver_id, limit, offset
    )


@router.get("/search", response_model=List[OrderOut])
def search_orders(tenant_id: TenantId, q: str = Query(..., min_length=1), db: Session = Depends(get_db)):
    service = OrderService(db)
    return service.search_orders(tenant_id, q)


@router.delete("/delete-all", response_model=DeleteAllResult)
def delete_all_orders(tenant_id: TenantId, db: Session = Depends(get_db)):
    service = OrderService(db)
    return service.delete_all_orders(tenant_id)


@router.get("/{order_id}", response_model=OrderOut)
def get_order(order_id: UUID, tenant_id: TenantId, db: Session = Depends(get_db)):
    service = OrderService(db)
    return service.get_order(order_id, tenant_id)


@router.put("/{order_id}", response_model=OrderOut)
def update_order(order_id: UUID, order_data: OrderUpdate, tenant_id: TenantId, db: Session = Depends(get_db)):
    service = OrderService(db)
    return service.update_order(order_id, order_data, tenant_id)


@router.patch("/{order_id}/status", response_model=OrderOut)
def update_order_status(order_id: UUID, status_data: OrderStatusUpdate, tenant_id: TenantId, db: Session = Depends(get_db)):
    service = OrderService(db)
    return service.update_status(order_id, status_data.status, tenant_id)


@router.patch("/{order_id}/delivery-status", response_model=OrderOut)
def update_delivery_status(order_id: UUID, status_data: DeliveryStatusUpdate, tenant_id: TenantId, db: Session = Depends(get_db)):
    service = OrderService(db)
    return service.update_delivery_status(order_id, status_data.delivery_status, tenant_id)


@router.patch("/{order_id}/driver", response_model=OrderOut)
def assign_driver(order_id: UUID, driver_data: DriverAssign, tenant_id: TenantId, db: Session = Depends(get_db)):
    """Asignar un usuario con rol driver a la orden"""
    service = OrderService(db)
    return service.assign_driver(order_id, driver_data.driver_id, tenant_id)


@router.delete("/{order_id}")
def delete_order(order_id: UUID, tenant_id: TenantId, db: Session = Depends(get_db)):
    service = OrderService(db)
    return service.delete_order(order_id, tenant_id)
