"""
CRUD operations for subscription requests.
"""
from typing import List, Optional
from uuid import UUID
from datetime import datetime, timezone
import logging

from sqlalchemy.orm import Session
from sqlalchemy import or_, desc

from app.common.exceptions import NotFoundError, ValidationError
from .models import SubscriptionRequest, RequestStatus
from .schemas import SubscriptionRequestCreate, SubscriptionRequestUpdate

logger = logging.getLogger(__name__)


def create_request(db: Session, data: SubscriptionRequestCreate) -> SubscriptionRequest:
    """Registrar una solicitud enviada desde el formulario público."""
    request = SubscriptionRequest(**data.model_dump())
    db.add(request)
    db.commit()
    db.refresh(request)
    logger.info(f"Solicitud de suscripción recibida de {request.company_name} ({request.plan.value})")
    return request


def get_request(db: Session, request_id: UUID) -> SubscriptionRequest:
    """Obtener una solicitud por ID."""
    request = db.query(SubscriptionRequest).filter(SubscriptionRequest.id == request_id).first()
    if not request:
        raise NotFoundError("Solicitud no encontrada")
    return request


def get_requests(db: Session, skip: int = 0, limit: int = 20,
                 status: Optional[RequestStatus] = None) -> List[SubscriptionRequest]:
    """Obtener lista de solicitudes, las más recientes primero."""
    query = db.query(SubscriptionRequest)
    if status:
        query = query.filter(SubscriptionRequest.status == status)
    return query.order_by(desc(SubscriptionRequest.created_at)).offset(skip).limit(limit).all()


def search_requests(db: Session, term: str) -> List[SubscriptionRequest]:
    pattern = f"%{term}%"
    return db.query(SubscriptionRequest).filter(
        or_(
            SubscriptionRequest.company_name.ilike(pattern),
            SubscriptionRequest.contact_name.ilike(pattern),
            SubscriptionRequest.email.ilike(pattern),
            SubscriptionRequest.country.ilike(pattern)
        )
    ).order_by(desc(SubscriptionRequest.created_at)).all()


def update_request(db: Session, request_id: UUID, data: SubscriptionRequestUpdate) -> SubscriptionRequest:
    request = get_request(db, request_id)
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(request, field, value)
    db.commit()
    db.refresh(request)
    return request


def update_request_status(db: Session, request_id: UUID, status: RequestStatus,
                          processed_by: Optional[UUID] = None) -> SubscriptionRequest:
    """Aprobar o rechazar una solicitud; registra quién y cuándo la procesó."""
    request = get_request(db, request_id)
    if status == RequestStatus.PENDING:
        raise ValidationError("Una solicitud no puede volver a estado pendiente")

    request.status = status
    request.processed_by = processed_by
    request.processed_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(request)
    logger.info(f"Solicitud {request.id} de {request.company_name}: {status.value}")
    return request


def delete_request(db: Session, request_id: UUID) -> dict:
    request = get_request(db, request_id)
    db.delete(request)
    db.commit()
    return {"message": "Solicitud eliminada"}
