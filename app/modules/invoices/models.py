from app.database.database import Base
from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, Enum, Date, Text, Table, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from datetime import date
from decimal import Decimal
from uuid import uuid4
from app.common.mixins import BaseMixin, TimestampMixin
import enum


class InvoiceType(str, enum.Enum):
    SALES = "sales"        # Factura de venta, se liquida con pagos (payments)
    PURCHASE = "purchase"  # Factura de compra, se liquida con egresos (expenses)


class InvoiceStatus(str, enum.Enum):
    DRAFT = "draft"
    PENDING = "pending"
    PARTIALLY_PAID = "partially_paid"
    PAID = "paid"
    OVERDUE = "overdue"
    UNPAID = "unpaid"


# Listas de referencia inversa de las partes (cliente/proveedor -> facturas)
customer_invoices = Table(
    "customer_invoices",
    Base.metadata,
    Column("customer_id", Uuid(as_uuid=True), ForeignKey("customers.id", ondelete="CASCADE"), primary_key=True),
    Column("invoice_id", Uuid(as_uuid=True), ForeignKey("invoices.id", ondelete="CASCADE"), primary_key=True),
)

supplier_invoices = Table(
    "supplier_invoices",
    Base.metadata,
    Column("supplier_id", Uuid(as_uuid=True), ForeignKey("suppliers.id", ondelete="CASCADE"), primary_key=True),
    Column("invoice_id", Uuid(as_uuid=True), ForeignKey("invoices.id", ondelete="CASCADE"), primary_key=True),
)


class Invoice(Base, BaseMixin):
    __tablename__ = "invoices"

    invoice_number = Column(String(50), nullable=False, index=True)
    type = Column(Enum(InvoiceType), nullable=False, default=InvoiceType.SALES)
    status = Column(Enum(InvoiceStatus), nullable=False, default=InvoiceStatus.PENDING)

    # Parte: customer_id para ventas, supplier_id para compras (nunca ambos)
    customer_id = Column(Uuid(as_uuid=True), ForeignKey("customers.id"), nullable=True, index=True)
    supplier_id = Column(Uuid(as_uuid=True), ForeignKey("suppliers.id"), nullable=True, index=True)

    # Snapshot de la parte al momento de emitir
    customer_name = Column(String(200), nullable=True)
    supplier_name = Column(String(200), nullable=True)
    email = Column(String(255), nullable=True)

    # Montos (Σ items × (1 + impuesto), pagado y pendiente)
    amount = Column(Numeric(15, 2), nullable=False, default=Decimal("0.00"))
    paid_amount = Column(Numeric(15, 2), nullable=False, default=Decimal("0.00"))
    remaining_amount = Column(Numeric(15, 2), nullable=False, default=Decimal("0.00"))

    # Fechas; due_date es texto porque admite el valor "Incomplete"
    date = Column(Date, nullable=False, default=date.today)
    due_date = Column(String(20), nullable=True)
    scheduled_due_date = Column(String(20), nullable=True)

    issued_by = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=True, index=True)
    terms = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    version = Column(Integer, nullable=False)

    # Relationships
    customer = relationship("Customer", foreign_keys=[customer_id])
    supplier = relationship("Supplier", foreign_keys=[supplier_id])
    items = relationship(
        "InvoiceLineItem", back_populates="invoice",
        cascade="all, delete-orphan", order_by="InvoiceLineItem.position"
    )
    payments = relationship(
        "InvoicePaymentEntry", back_populates="invoice",
        cascade="all, delete-orphan", order_by="InvoicePaymentEntry.id"
    )
    expenses = relationship(
        "InvoiceExpenseEntry", back_populates="invoice",
        cascade="all, delete-orphan", order_by="InvoiceExpenseEntry.id"
    )

    __table_args__ = (
        UniqueConstraint("tenant_id", "invoice_number", name="uq_invoice_tenant_number"),
    )
    __mapper_args__ = {"version_id_col": version}

    @property
    def ledger(self):
        """Entradas que liquidan la factura según su tipo"""
        return self.expenses if self.type == InvoiceType.PURCHASE else self.payments


class InvoiceLineItem(Base, TimestampMixin):
    __tablename__ = "invoice_line_items"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    invoice_id = Column(Uuid(as_uuid=True), ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Uuid(as_uuid=True), ForeignKey("products.id"), nullable=True)
    position = Column(Integer, nullable=False, default=0)

    # Snapshot del producto
    product_name = Column(String(200), nullable=False)

    quantity = Column(Numeric(10, 3), nullable=False)
    free_quantity = Column(Numeric(10, 3), nullable=False, default=0)
    unit_price = Column(Numeric(15, 2), nullable=False)
    total_price = Column(Numeric(15, 2), nullable=False)  # sin impuesto

    invoice = relationship("Invoice", back_populates="items")


class InvoicePaymentEntry(Base):
    """Entrada del ledger de pagos de una factura de venta"""
    __tablename__ = "invoice_payment_entries"

    id = Column(Integer, primary_key=True, autoincrement=True)  # orden de inserción
    invoice_id = Column(Uuid(as_uuid=True), ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True)
    payment_id = Column(Uuid(as_uuid=True), ForeignKey("payments.id", ondelete="CASCADE"), nullable=False, index=True)
    amount = Column(Numeric(15, 2), nullable=False)
    date = Column(Date, nullable=False, default=date.today)
    method = Column(String(20), nullable=False)
    reference = Column(String(100), nullable=True)

    invoice = relationship("Invoice", back_populates="payments")

    __table_args__ = (
        UniqueConstraint("invoice_id", "payment_id", name="uq_invoice_payment_entry"),
    )


class InvoiceExpenseEntry(Base):
    """Entrada del ledger de egresos de una factura de compra"""
    __tablename__ = "invoice_expense_entries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    invoice_id = Column(Uuid(as_uuid=True), ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True)
    expense_id = Column(Uuid(as_uuid=True), ForeignKey("expenses.id", ondelete="CASCADE"), nullable=False, index=True)
    amount = Column(Numeric(15, 2), nullable=False)
    date = Column(Date, nullable=False, default=date.today)
    method = Column(String(20), nullable=False)
    reference = Column(String(100), nullable=True)

    invoice = relationship("Invoice", back_populates="expenses")

    __table_args__ = (
        UniqueConstraint("invoice_id", "expense_id", name="uq_invoice_expense_entry"),
    )
