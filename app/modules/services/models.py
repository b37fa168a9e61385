from app.database.database import Base
from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, Date, Text, Table, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from datetime import date
from decimal import Decimal
from app.common.mixins import BaseMixin, ActiveMixin
from app.modules.suppliers.models import service_providers as service_providers_table


service_invoices = Table(
    "service_invoices",
    Base.metadata,
    Column("service_id", Uuid(as_uuid=True), ForeignKey("services.id", ondelete="CASCADE"), primary_key=True),
    Column("invoice_id", Uuid(as_uuid=True), ForeignKey("invoices.id", ondelete="CASCADE"), primary_key=True),
)


class Service(Base, BaseMixin, ActiveMixin):
    __tablename__ = "services"

    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    total_expenses = Column(Numeric(15, 2), nullable=False, default=Decimal("0.00"))  # Σ expense_history
    created_by = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=True, index=True)

    # Relationships
    service_providers = relationship("Supplier", secondary=service_providers_table, back_populates="services")
    invoices = relationship("Invoice", secondary=service_invoices)
    expense_history = relationship(
        "ServiceExpenseEntry", back_populates="service",
        cascade="all, delete-orphan", order_by="ServiceExpenseEntry.id"
    )

    __table_args__ = (
        UniqueConstraint("tenant_id", "name", name="uq_service_tenant_name"),
    )

    @property
    def provider_ids(self):
        return [supplier.id for supplier in self.service_providers]

    @property
    def invoice_ids(self):
        return [invoice.id for invoice in self.invoices]


class ServiceExpenseEntry(Base):
    """Historial de gastos de un servicio"""
    __tablename__ = "service_expense_entries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    service_id = Column(Uuid(as_uuid=True), ForeignKey("services.id", ondelete="CASCADE"), nullable=False, index=True)
    expense_id = Column(Uuid(as_uuid=True), ForeignKey("expenses.id", ondelete="SET NULL"), nullable=True, index=True)
    amount = Column(Numeric(15, 2), nullable=False)
    date = Column(Date, nullable=False, default=date.today)
    description = Column(String(255), nullable=True)

    service = relationship("Service", back_populates="expense_history")
