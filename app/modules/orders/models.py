from app.database.database import Base
from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, Enum, Date, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from datetime import date
from decimal import Decimal
from uuid import uuid4
from app.common.mixins import BaseMixin, TimestampMixin
from app.modules.invoices.models import InvoiceType
import enum


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    DRAFT = "draft"
    READY = "ready"


class DeliveryStatus(str, enum.Enum):
    PENDING = "pending"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    RETURNED = "returned"


class Order(Base, BaseMixin):
    __tablename__ = "orders"

    order_number = Column(String(50), nullable=False, index=True)
    type = Column(Enum(InvoiceType), nullable=False, default=InvoiceType.SALES)
    status = Column(Enum(OrderStatus), nullable=False, default=OrderStatus.PENDING)

    customer_id = Column(Uuid(as_uuid=True), ForeignKey("customers.id"), nullable=True, index=True)
    supplier_id = Column(Uuid(as_uuid=True), ForeignKey("suppliers.id"), nullable=True, index=True)

    # Σ total_price de los ítems, sin impuesto
    amount = Column(Numeric(15, 2), nullable=False, default=Decimal("0.00"))

    date = Column(Date, nullable=False, default=date.today)
    delivery_date = Column(Date, nullable=True)
    issued_by = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=True, index=True)
    notes = Column(Text, nullable=True)

    # Entrega
    delivery_status = Column(Enum(DeliveryStatus), nullable=False, default=DeliveryStatus.PENDING)
    delivery_address = Column(String(255), nullable=True)
    delivery_notes = Column(Text, nullable=True)
    driver_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=True, index=True)

    # Relationships
    customer = relationship("Customer", foreign_keys=[customer_id])
    supplier = relationship("Supplier", foreign_keys=[supplier_id])
    items = relationship(
        "OrderLineItem", back_populates="order",
        cascade="all, delete-orphan", order_by="OrderLineItem.position"
    )

    __table_args__ = (
        UniqueConstraint("tenant_id", "order_number", name="uq_order_tenant_number"),
    )


class OrderLineItem(Base, TimestampMixin):
    __tablename__ = "order_line_items"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    order_id = Column(Uuid(as_uuid=True), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Uuid(as_uuid=True), ForeignKey("products.id"), nullable=True)
    position = Column(Integer, nullable=False, default=0)

    product_name = Column(String(200), nullable=False)
    quantity = Column(Numeric(10, 3), nullable=False)
    free_quantity = Column(Numeric(10, 3), nullable=False, default=0)
    unit_price = Column(Numeric(15, 2), nullable=False)
    total_price = Column(Numeric(15, 2), nullable=False)

    order = relationship("Order", back_populates="items")
