"""
Secuencias de numeración legible por tenant (INV-000001, PAY-000001, ...)
"""
from sqlalchemy import Column, Integer, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Session
from uuid import uuid4

from app.database.database import Base
from app.common.mixins import TenantMixin, TimestampMixin


class DocumentSequence(Base, TenantMixin, TimestampMixin):
    """Contador monotónico por empresa y prefijo"""
    __tablename__ = "document_sequences"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    prefix = Column(String(10), nullable=False)  # Ej: "INV-", "PAY-"
    current_number = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint("tenant_id", "prefix", name="uq_sequence_tenant_prefix"),
    )


def next_document_number(db: Session, tenant_id, prefix: str, column=None) -> str:
    """
    Generar el siguiente número de documento para el tenant.

    Args:
        db: sesión activa; el incremento queda en la transacción del llamador
        tenant_id: empresa dueña de la secuencia
        prefix: prefijo visible del número
        column: columna del modelo destino (ej: Invoice.invoice_number) para
            verificar que el número no exista antes del commit

    Returns:
        Número formateado, ej: "INV-000042"
    """
    sequence = db.query(DocumentSequence).filter(
        DocumentSequence.tenant_id == tenant_id,
        DocumentSequence.prefix == prefix
    ).with_for_update().first()

    if not sequence:
        sequence = DocumentSequence(tenant_id=tenant_id, prefix=prefix, current_number=0)
        db.add(sequence)
        db.flush()

    while True:
        sequence.current_number += 1
        number = f"{prefix}{sequence.current_number:06d}"
        if column is None:
            return number
        exists = db.query(column.class_).filter(
            column.class_.tenant_id == tenant_id,
            column == number
        ).first()
        if not exists:
            return number
