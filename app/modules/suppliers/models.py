from app.database.database import Base
from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, Float, Text, Enum, Table, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from decimal import Decimal
from app.common.mixins import BaseMixin
from app.modules.invoices.models import supplier_invoices
import enum


class SupplierType(str, enum.Enum):
    GOODS_SUPPLIER = "goods_supplier"      # Proveedor de mercancía
    SERVICE_PROVIDER = "service_provider"  # Prestador de servicios


supplier_expenses = Table(
    "supplier_expenses",
    Base.metadata,
    Column("supplier_id", Uuid(as_uuid=True), ForeignKey("suppliers.id", ondelete="CASCADE"), primary_key=True),
    Column("expense_id", Uuid(as_uuid=True), ForeignKey("expenses.id", ondelete="CASCADE"), primary_key=True),
)

# Proveedores de cada servicio (muchos a muchos)
service_providers = Table(
    "service_providers",
    Base.metadata,
    Column("service_id", Uuid(as_uuid=True), ForeignKey("services.id", ondelete="CASCADE"), primary_key=True),
    Column("supplier_id", Uuid(as_uuid=True), ForeignKey("suppliers.id", ondelete="CASCADE"), primary_key=True),
)


class Supplier(Base, BaseMixin):
    __tablename__ = "suppliers"

    supplier_name = Column(String(200), nullable=False)
    company_name = Column(String(200), nullable=True)
    supplier_type = Column(Enum(SupplierType), nullable=False, default=SupplierType.GOODS_SUPPLIER)
    phone = Column(String(30), nullable=True)
    email = Column(String(255), nullable=True)

    balance_due = Column(Numeric(15, 2), nullable=False, default=Decimal("0.00"))

    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    location = Column(String(255), nullable=True)

    notes = Column(Text, nullable=True)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=True, index=True)

    version = Column(Integer, nullable=False)

    # Relationships
    invoice_list = relationship("Invoice", secondary=supplier_invoices, order_by="Invoice.created_at")
    expense_list = relationship("Expense", secondary=supplier_expenses, order_by="Expense.created_at")
    services = relationship("Service", secondary=service_providers, back_populates="service_providers")

    __table_args__ = (
        UniqueConstraint("tenant_id", "supplier_name", name="uq_supplier_tenant_name"),
    )
    __mapper_args__ = {"version_id_col": version}
