from app.database.database import Base
from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, Float, Text, Table, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from decimal import Decimal
from app.common.mixins import BaseMixin
from app.modules.invoices.models import customer_invoices


# Lista de pagos registrados del cliente (sin duplicados)
customer_payments = Table(
    "customer_payments",
    Base.metadata,
    Column("customer_id", Uuid(as_uuid=True), ForeignKey("customers.id", ondelete="CASCADE"), primary_key=True),
    Column("payment_id", Uuid(as_uuid=True), ForeignKey("payments.id", ondelete="CASCADE"), primary_key=True),
)


class Customer(Base, BaseMixin):
    __tablename__ = "customers"

    customer_name = Column(String(200), nullable=False)
    company_name = Column(String(200), nullable=True)
    customer_type = Column(String(50), nullable=True)  # Ej: retail, wholesale
    phone = Column(String(30), nullable=True)
    email = Column(String(255), nullable=True)

    # Saldo agregado; solo lo modifica la reconciliación
    balance_due = Column(Numeric(15, 2), nullable=False, default=Decimal("0.00"))

    # Ubicación
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    location = Column(String(255), nullable=True)

    notes = Column(Text, nullable=True)
    salesman_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=True, index=True)
    created_by = Column(Uuid(as_uuid=True), nullable=True)

    version = Column(Integer, nullable=False)

    # Relationships
    salesman = relationship("User", foreign_keys=[salesman_id])
    invoice_list = relationship("Invoice", secondary=customer_invoices, order_by="Invoice.created_at")
    payment_list = relationship("Payment", secondary=customer_payments, order_by="Payment.created_at")

    __table_args__ = (
        UniqueConstraint("tenant_id", "customer_name", name="uq_customer_tenant_name"),
        UniqueConstraint("tenant_id", "company_name", name="uq_customer_tenant_company_name"),
    )
    __mapper_args__ = {"version_id_col": version}
