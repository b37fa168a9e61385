from fastapi import APIRouter, status, Query
from typing import List
from uuid import UUID

from app.core.config import settings
from app.dependencies.dbDependecies import db_dependency
from app.modules.companies import service
from app.modules.companies.schemas import (
    CompanyCreate, CompanyUpdate, CompanyOut, SubscriptionUpdate, CompanyUserLink, CompanyStatistics
)
from app.modules.users.schemas import UserOut

company_router = APIRouter(prefix="/companies", tags=["Companies"])


@company_router.post("/", response_model=CompanyOut, status_code=status.HTTP_201_CREATED)
def create_company(company: CompanyCreate, db: db_dependency):
    """
    Endpoint to create a company. Its id is the X-Company-ID used by the
    tenant-scoped endpoints.
    """
    return service.create_company(db, company)


@company_router.get("/", response_model=List[CompanyOut])
def list_companies(
    db: db_dependency,
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0)
):
    return service.list_companies(db, limit, offset)


@company_router.get("/search", response_model=List[CompanyOut])
def search_companies(db: db_dependency, q: str = Query(..., min_length=1)):
    return service.search_companies(db, q)


@company_router.get("/expiring", response_model=List[CompanyOut])
def get_expiring_companies(db: db_dependency, days: int = Query(7, ge=1, le=365)):
    """Companies whose subscription ends within the next `days` days."""
    return service.get_expiring_companies(db, days)


@company_router.get("/{company_id}", response_model=CompanyOut)
def get_company(company_id: UUID, db: db_dependency):
    return service.get_company(db, company_id)


@company_router.put("/{company_id}", response_model=CompanyOut)
def update_company(company_id: UUID, company: CompanyUpdate, db: db_dependency):
    return service.update_company(db, company_id, company)


@company_router.delete("/{company_id}")
def delete_company(company_id: UUID, db: db_dependency):
    return service.delete_company(db, company_id)


@company_router.patch("/{company_id}/subscription", response_model=CompanyOut)
def update_subscription(company_id: UUID, data: SubscriptionUpdate, db: db_dependency):
    return service.update_subscription(db, company_id, data)


@company_router.post("/{company_id}/users", response_model=CompanyOut)
def add_authorized_user(company_id: UUID, link: CompanyUserLink, db: db_dependency):
    return service.add_authorized_user(db, company_id, link.user_id)


@company_router.delete("/{company_id}/users/{user_id}", response_model=CompanyOut)
def remove_authorized_user(company_id: UUID, user_id: UUID, db: db_dependency):
    return service.remove_authorized_user(db, company_id, user_id)


@company_router.get("/{company_id}/users", response_model=List[UserOut])
def get_company_users(company_id: UUID, db: db_dependency):
    return service.get_company_users(db, company_id)


@company_router.get("/{company_id}/statistics", response_model=CompanyStatistics)
def get_company_statistics(company_id: UUID, db: db_dependency):
    return service.get_company_statistics(db, company_id)
