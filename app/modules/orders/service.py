"""
Servicios de negocio para el módulo de Órdenes
"""

from fastapi import HTTPException, status
from sqlalchemy.orm import Session
from sqlalchemy import or_
from decimal import Decimal
from typing import List, Optional
from uuid import UUID
import logging

from app.common.exceptions import ValidationError, NotFoundError
from app.common.sequences import next_document_number
from app.modules.orders.models import Order, OrderLineItem, OrderStatus, DeliveryStatus
from app.modules.orders.schemas import OrderCreate, OrderUpdate
from app.modules.invoices.models import InvoiceType
from app.modules.invoices.calculator import to_money
from app.modules.customers.models import Customer
from app.modules.suppliers.models import Supplier
from app.modules.users.models import User, UserRole

logger = logging.getLogger(__name__)

ORDER_PREFIX = "ORD-"


class OrderService:
    """Servicio principal para gestión de órdenes"""

    def __init__(self, db: Session):
        self.db = db

    def _validate_party(self, order_data: OrderCreate, tenant_id: UUID):
        if order_data.type == InvoiceType.SALES:
            if not self.db.query(Customer).filter(
                Customer.id == order_data.customer_id, Customer.tenant_id == tenant_id
            ).first():
                raise NotFoundError("Cliente no encontrado")
        elif not self.db.query(Supplier).filter(
            Supplier.id == order_data.supplier_id, Supplier.tenant_id == tenant_id
        ).first():
            raise NotFoundError("Proveedor no encontrado")

    def _get_driver(self, driver_id: UUID) -> User:
        driver = self.db.query(User).filter(User.id == driver_id).first()
        if not driver:
            raise NotFoundError("Conductor no encontrado")
        if driver.role != UserRole.DRIVER:
            raise ValidationError(f"El usuario {driver.username} no tiene rol de conductor")
        return driver

    def _replace_items(self, order: Order, items):
        """Reemplazar ítems; el monto de la orden es Σ total_price sin impuesto"""
        order.items.clear()
        for position, item in enumerate(items):
            order.items.append(OrderLineItem(
                product_id=item.product_id,
                position=position,
                product_name=item.product_name,
                quantity=item.quantity,
                free_quantity=item.free_quantity,
                unit_price=to_money(item.unit_price),
                total_price=to_money(item.total_price)
            ))
        order.amount = to_money(sum((Decimal(str(item.total_price)) for item in items), Decimal("0")))

    def create_order(self, order_data: OrderCreate, tenant_id: UUID) -> Order:
        try:
            self._validate_party(order_data, tenant_id)
            if order_data.driver_id:
                self._get_driver(order_data.driver_id)

            order = Order(
                tenant_id=tenant_id,
                order_number=next_document_number(self.db, tenant_id, ORDER_PREFIX, Order.order_number),
                **order_data.model_dump(exclude={"items"})
            )
            self._replace_items(order, order_data.items)
            self.db.add(order)
            self.db.commit()
            self.db.refresh(order)

            logger.info(f"Orden {order.order_number} creada por {order.amount}")
            return order

        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error creando orden: {str(e)}"
            )

    def get_order(self, order_id: UUID, tenant_id: UUID) -> Order:
        order = self.db.query(Order).filter(
            Order.id == order_id,
            Order.tenant_id == tenant_id
        ).first()
        if not order:
            raise NotFoundError("Orden no encontrada")
        return order

    def list_orders(
        self,
        tenant_id: UUID,
        status_filter: Optional[OrderStatus] = None,
        delivery_status: Optional[DeliveryStatus] = None,
        type_filter: Optional[InvoiceType] = None,
        customer_id: Optional[UUID] = None,
        supplier_id: Optional[UUID] = None,
        issued_by: Optional[UUID] = None,
        driver_id: Optional[UUID] = None,
        limit: int = 100,
        offset: int = 0
    ) -> List[Order]:
        query = self.db.query(Order).filter(Order.tenant_id == tenant_id)
        if status_filter:
            query = query.filter(Order.status == status_filter)
        if delivery_status:
            query = query.filter(Order.delivery_status == delivery_status)
        if type_filter:
            query = query.filter(Order.type == type_filter)
        if customer_id:
            query = query.filter(Order.customer_id == customer_id)
        if supplier_id:
            query = query.filter(Order.supplier_id == supplier_id)
        if issued_by:
            query = query.filter(Order.issued_by == issued_by)
        if driver_id:
            query = query.filter(Order.driver_id == driver_id)
        return query.order_by(Order.created_at.desc()).offset(offset).limit(limit).all()

    def search_orders(self, tenant_id: UUID, term: str) -> List[Order]:
        pattern = f"%{term}%"
        return self.db.query(Order).filter(
            Order.tenant_id == tenant_id,
            or_(
                Order.order_number.ilike(pattern),
                Order.notes.ilike(pattern),
                Order.delivery_address.ilike(pattern)
            )
        ).order_by(Order.created_at.desc()).all()

    def update_order(self, order_id: UUID, order_data: OrderUpdate, tenant_id: UUID) -> Order:
        try:
            order = self.get_order(order_id, tenant_id)
            update_data = order_data.model_dump(exclude_unset=True)
            items = update_data.pop("items", None)

            for field, value in update_data.items():
                setattr(order, field, value)
            if items is not None:
                self._replace_items(order, order_data.items)
            if order.delivery_date and order.delivery_date < order.date:
                raise ValidationError("La fecha de entrega no puede ser anterior a la fecha de la orden")

            self.db.commit()
            self.db.refresh(order)
            return order

        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error actualizando orden: {str(e)}"
            )

    def _set(self, order_id: UUID, tenant_id: UUID, action: str, **values) -> Order:
        try:
            order = self.get_order(order_id, tenant_id)
            for field, value in values.items():
                setattr(order, field, value)
            self.db.commit()
            self.db.refresh(order)
            logger.info(f"Orden {order.order_number}: {action}")
            return order
        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error actualizando orden ({action}): {str(e)}"
            )

    def update_status(self, order_id: UUID, new_status: OrderStatus, tenant_id: UUID) -> Order:
        return self._set(order_id, tenant_id, f"estado {new_status.value}", status=new_status)

    def update_delivery_status(self, order_id: UUID, delivery_status: DeliveryStatus, tenant_id: UUID) -> Order:
        return self._set(order_id, tenant_id, f"entrega {delivery_status.value}", delivery_status=delivery_status)

    def assign_driver(self, order_id: UUID, driver_id: UUID, tenant_id: UUID) -> Order:
        self._get_driver(driver_id)
        return self._set(order_id, tenant_id, f"conductor {driver_id}", driver_id=driver_id)

    def delete_order(self, order_id: UUID, tenant_id: UUID) -> dict:
        try:
            order = self.get_order(order_id, tenant_id)
            number = order.order_number
            self.db.delete(order)
            self.db.commit()
            return {"message": f"Orden {number} eliminada"}
        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error eliminando orden: {str(e)}"
            )

    def delete_all_orders(self, tenant_id: UUID) -> dict:
        try:
            orders = self.db.query(Order).filter(Order.tenant_id == tenant_id).all()
            for order in orders:
                self.db.delete(order)
            self.db.commit()
            logger.info(f"{len(orders)} órdenes eliminadas para tenant {tenant_id}")
            return {"message": "Órdenes eliminadas", "deleted_count": len(orders)}
        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error eliminando órdenes: {str(e)}"
            )
