from app.database.database import Base
from sqlalchemy import Column, String, DateTime, Float, Text, Enum, JSON, ForeignKey, Table, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from datetime import datetime, timedelta, timezone
from uuid import uuid4
from app.common.mixins import TimestampMixin
from app.core.config import settings
import enum


class SubscriptionType(str, enum.Enum):
    BASIC = "basic"
    PREMIUM = "premium"
    ENTERPRISE = "enterprise"


class SubscriptionStatus(str, enum.Enum):
    ACTIVE = "active"
    EXPIRED = "expired"
    TRIAL = "trial"
    CANCELLED = "cancelled"


DEFAULT_COMPANY_SETTINGS = {
    "theme": "light",
    "currency": "USD",
    "language": "en",
    "timezone": "UTC",
    "invoice_prefix": "INV-",
    "fiscal_year_start": "01-01",
}


def default_subscription_end():
    return datetime.now(timezone.utc) + timedelta(days=settings.SUBSCRIPTION_TRIAL_DAYS)


company_authorized_users = Table(
    "company_authorized_users",
    Base.metadata,
    Column("company_id", Uuid(as_uuid=True), ForeignKey("companies.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class Company(Base, TimestampMixin):
    """La empresa es el tenant: su id es el tenant_id del resto de módulos"""
    __tablename__ = "companies"

    id = Column(Uuid(as_uuid=True), primary_key=True, index=True, default=uuid4)
    name = Column(String(200), unique=True, index=True, nullable=False)
    logo = Column(String(500), nullable=True)
    address = Column(String(255), nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)

    # Suscripción
    registration_date = Column(DateTime(timezone=True), server_default=func.now())
    subscription_end_date = Column(DateTime(timezone=True), nullable=False, default=default_subscription_end)
    subscription_type = Column(Enum(SubscriptionType), nullable=False, default=SubscriptionType.BASIC)
    subscription_status = Column(Enum(SubscriptionStatus), nullable=False, default=SubscriptionStatus.TRIAL)

    # Contacto
    contact_email = Column(String(255), nullable=True)
    contact_phone = Column(String(30), nullable=True)
    website = Column(String(255), nullable=True)
    tax_number = Column(String(50), nullable=True)

    notes = Column(Text, nullable=True)
    settings = Column(JSON, nullable=False, default=lambda: dict(DEFAULT_COMPANY_SETTINGS))
    created_by = Column(Uuid(as_uuid=True), nullable=True)

    # Relationships
    authorized_users = relationship("User", secondary=company_authorized_users)

    @property
    def subscription_expired(self) -> bool:
        end = self.subscription_end_date
        if end is None:
            return False
        if end.tzinfo is None:
            end = end.replace(tzinfo=timezone.utc)
        return end < datetime.now(timezone.utc)
