from app.database.database import Base
from sqlalchemy import Column, String, ForeignKey, Numeric, Enum, Date, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from datetime import date
from app.common.mixins import BaseMixin
from app.modules.payments.models import PaymentStatus
import enum


class ExpenseMethod(str, enum.Enum):
    CASH = "cash"
    CHECK = "check"
    BANK_TRANSFER = "bank_transfer"


class Expense(Base, BaseMixin):
    __tablename__ = "expenses"

    expense_number = Column(String(50), nullable=False, index=True)

    supplier_id = Column(Uuid(as_uuid=True), ForeignKey("suppliers.id"), nullable=False, index=True)
    invoice_id = Column(Uuid(as_uuid=True), ForeignKey("invoices.id", ondelete="SET NULL"), nullable=True, index=True)
    service_id = Column(Uuid(as_uuid=True), ForeignKey("services.id", ondelete="SET NULL"), nullable=True, index=True)

    amount = Column(Numeric(15, 2), nullable=False)
    method = Column(Enum(ExpenseMethod), nullable=False, default=ExpenseMethod.CASH)
    date = Column(Date, nullable=False, default=date.today)
    status = Column(Enum(PaymentStatus), nullable=False, default=PaymentStatus.COMPLETED)
    reference = Column(String(100), nullable=True)
    notes = Column(Text, nullable=True)
    created_by = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)

    # Relationships
    supplier = relationship("Supplier", foreign_keys=[supplier_id])
    invoice = relationship("Invoice", foreign_keys=[invoice_id])
    service = relationship("Service", foreign_keys=[service_id])
    cheques = relationship("Cheque", back_populates="expense")

    __table_args__ = (
        UniqueConstraint("tenant_id", "expense_number", name="uq_expense_tenant_number"),
    )

    @property
    def cheque_ids(self):
        return [cheque.id for cheque in self.cheques]
