"""
API Router for subscription requests (public signup form).
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session
from uuid import UUID

from app.core.config import settings
from app.database.database import get_db

from . import crud, schemas
from .models import RequestStatus

router = APIRouter(
    prefix="/subscription-requests",
    tags=["Subscription Requests"],
    responses={404: {"description": "Not found"}}
)


@router.post("/", response_model=schemas.SubscriptionRequestOut, status_code=status.HTTP_201_CREATED)
def create_request(data: schemas.SubscriptionRequestCreate, db: Session = Depends(get_db)):
    """
    Registrar una solicitud de suscripción.

    Este endpoint es público y no requiere X-Company-ID.
    """
    return crud.create_request(db, data)


@router.get("/", response_model=List[schemas.SubscriptionRequestOut])
def get_requests(
    skip: int = Query(0, ge=0, description="Número de registros a omitir"),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, description="Número máximo de registros"),
    status_filter: Optional[RequestStatus] = Query(None, alias="status", description="Filtrar por estado"),
    db: Session = Depends(get_db)
):
    return crud.get_requests(db, skip, limit, status_filter)


@router.get("/search", response_model=List[schemas.SubscriptionRequestOut])
def search_requests(q: str = Query(..., min_length=1), db: Session = Depends(get_db)):
    return crud.search_requests(db, q)


@router.get("/status/{request_status}", response_model=List[schemas.SubscriptionRequestOut])
def get_requests_by_status(request_status: RequestStatus, db: Session = Depends(get_db)):
    return crud.get_requests(db, 0, 1000, request_status)


@router.get("/{request_id}", response_model=schemas.SubscriptionRequestOut)
def get_request(request_id: UUID, db: Session = Depends(get_db)):
    return crud.get_request(db, request_id)


@router.put("/{request_id}", response_model=schemas.SubscriptionRequestOut)
def update_request(request_id: UUID, data: schemas.SubscriptionRequestUpdate, db: Session = Depends(get_db)):
    return crud.update_request(db, request_id, data)


@router.patch("/{request_id}/status", response_model=schemas.SubscriptionRequestOut)
def update_request_status(request_id: UUID, data: schemas.SubscriptionRequestStatusUpdate, db: Session = Depends(get_db)):
    """Aprobar o rechazar la solicitud."""
    return crud.update_request_status(db, request_id, data.status, data.processed_by)


@router.delete("/{request_id}")
def delete_request(request_id: UUID, db: Session = Depends(get_db)):
    return crud.delete_request(db, request_id)
