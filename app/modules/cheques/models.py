from app.database.database import Base
from sqlalchemy import Column, String, ForeignKey, Numeric, Enum, Date, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from app.common.mixins import BaseMixin
import enum


class ChequeStatus(str, enum.Enum):
    PENDING = "pending"   # En cartera
    CLEARED = "cleared"   # Cobrado
    BOUNCED = "bounced"   # Rebotado


class ChequeType(str, enum.Enum):
    RECEIVED = "received"  # Recibido de un cliente
    ISSUED = "issued"      # Emitido a un proveedor


class Cheque(Base, BaseMixin):
    __tablename__ = "cheques"

    cheque_number = Column(String(50), nullable=False, index=True)
    bank_name = Column(String(100), nullable=False)
    cheque_date = Column(Date, nullable=False)
    amount = Column(Numeric(15, 2), nullable=False)
    holder_name = Column(String(200), nullable=True)
    holder_phone = Column(String(30), nullable=True)
    status = Column(Enum(ChequeStatus), nullable=False, default=ChequeStatus.PENDING)
    type = Column(Enum(ChequeType), nullable=False, default=ChequeType.RECEIVED)
    notes = Column(Text, nullable=True)

    # Exactamente uno de customer_id/supplier_id; a lo sumo uno de payment_id/expense_id
    customer_id = Column(Uuid(as_uuid=True), ForeignKey("customers.id"), nullable=True, index=True)
    supplier_id = Column(Uuid(as_uuid=True), ForeignKey("suppliers.id"), nullable=True, index=True)
    payment_id = Column(Uuid(as_uuid=True), ForeignKey("payments.id", ondelete="CASCADE"), nullable=True, index=True)
    expense_id = Column(Uuid(as_uuid=True), ForeignKey("expenses.id", ondelete="CASCADE"), nullable=True, index=True)

    # Relationships
    customer = relationship("Customer", foreign_keys=[customer_id])
    supplier = relationship("Supplier", foreign_keys=[supplier_id])
    payment = relationship("Payment", back_populates="cheques")
    expense = relationship("Expense", back_populates="cheques")

    __table_args__ = (
        UniqueConstraint("tenant_id", "cheque_number", "bank_name", name="uq_cheque_tenant_number_bank"),
    )

    def integrity_errors(self) -> list:
        """Reglas de vinculación del cheque; lista vacía si es válido"""
        errors = []
        if (self.customer_id is None) == (self.supplier_id is None):
            errors.append("El cheque debe pertenecer a un cliente o a un proveedor, no a ambos ni a ninguno")
        if self.payment_id is not None and self.expense_id is not None:
            errors.append("El cheque no puede estar vinculado a un pago y a un egreso a la vez")
        return errors
