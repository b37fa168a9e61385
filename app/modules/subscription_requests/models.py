"""
Models for subscription requests submitted from the public signup form.
"""
from sqlalchemy import Column, String, DateTime, Text, Enum, Uuid
from uuid import uuid4
from app.database.database import Base
from app.common.mixins import TimestampMixin
from app.modules.companies.models import SubscriptionType
import enum


class RequestStatus(str, enum.Enum):
    """Estados de la solicitud."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class SubscriptionRequest(Base, TimestampMixin):
    __tablename__ = "subscription_requests"

    id = Column(Uuid(as_uuid=True), primary_key=True, index=True, default=uuid4)

    # Empresa solicitante
    company_name = Column(String(200), nullable=False)
    company_avatar = Column(String(500), nullable=True)

    # Contacto
    contact_name = Column(String(200), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    phone = Column(String(30), nullable=False)
    country = Column(String(100), nullable=True)
    company_size = Column(String(50), nullable=True)
    industry = Column(String(100), nullable=True)

    plan = Column(Enum(SubscriptionType), nullable=False, default=SubscriptionType.BASIC)
    additional_info = Column(Text, nullable=True)

    status = Column(Enum(RequestStatus), nullable=False, default=RequestStatus.PENDING)
    processed_by = Column(Uuid(as_uuid=True), nullable=True)
    processed_at = Column(DateTime(timezone=True), nullable=True)
