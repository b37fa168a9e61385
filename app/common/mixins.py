"""
Common mixins for multi-tenant models
"""
from sqlalchemy import Column, DateTime, Boolean, Uuid
from sqlalchemy.sql import func
from uuid import uuid4


class TenantMixin:
    """Mixin for multi-tenant models: tenant_id is the owning company id"""

    tenant_id = Column(Uuid(as_uuid=True), nullable=False, index=True)


class TimestampMixin:
    """Mixin for models that need timestamp tracking"""

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


class BaseMixin(TenantMixin, TimestampMixin):
    """Combines UUID primary key, tenant and timestamp functionality for business models"""

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4, index=True)


class ActiveMixin:
    """Mixin for records that can be deactivated instead of deleted"""

    is_active = Column(Boolean, default=True, nullable=False)
