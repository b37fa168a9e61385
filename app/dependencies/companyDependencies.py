from typing import Annotated
from fastapi import Depends, Request
from uuid import UUID

from app.common.exceptions import ValidationError


def get_tenant_id(request: Request) -> UUID:
    """Extract tenant_id from request state set by TenantMiddleware"""
    if not hasattr(request.state, 'tenant_id'):
        raise ValidationError("Tenant context not found. Ensure X-Company-ID header is provided.")
    return request.state.tenant_id


TenantId = Annotated[UUID, Depends(get_tenant_id)]
