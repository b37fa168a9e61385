from app.database.database import Base
from sqlalchemy import Column, String, ForeignKey, Numeric, Enum, Date, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from datetime import date
from app.common.mixins import BaseMixin
import enum


class PaymentMethod(str, enum.Enum):
    CASH = "cash"                     # Efectivo
    CHECK = "check"                   # Cheque
    CARD = "card"                     # Tarjeta
    BANK_TRANSFER = "bank_transfer"   # Transferencia


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class Payment(Base, BaseMixin):
    __tablename__ = "payments"

    payment_number = Column(String(50), nullable=False, index=True)

    customer_id = Column(Uuid(as_uuid=True), ForeignKey("customers.id"), nullable=False, index=True)
    invoice_id = Column(Uuid(as_uuid=True), ForeignKey("invoices.id", ondelete="SET NULL"), nullable=True, index=True)

    amount = Column(Numeric(15, 2), nullable=False)
    method = Column(Enum(PaymentMethod), nullable=False, default=PaymentMethod.CASH)
    date = Column(Date, nullable=False, default=date.today)
    status = Column(Enum(PaymentStatus), nullable=False, default=PaymentStatus.COMPLETED)
    reference = Column(String(100), nullable=True)  # Número de referencia, voucher, etc.
    notes = Column(Text, nullable=True)
    created_by = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=True, index=True)

    # Relationships
    customer = relationship("Customer", foreign_keys=[customer_id])
    invoice = relationship("Invoice", foreign_keys=[invoice_id])
    cheques = relationship("Cheque", back_populates="payment")

    __table_args__ = (
        UniqueConstraint("tenant_id", "payment_number", name="uq_payment_tenant_number"),
    )

    @property
    def cheque_ids(self):
        return [cheque.id for cheque in self.cheques]
