from fastapi import APIRouter, status, Query
from typing import List, Optional
from uuid import UUID

from app.core.config import settings
from app.dependencies.dbDependecies import db_dependency
from app.modules.users import service
from app.modules.users.models import UserRole
from app.modules.users.schemas import UserCreate, UserUpdate, UserOut

user_router = APIRouter(prefix="/users", tags=["Users"])


@user_router.post("/", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_user(user: UserCreate, db: db_dependency):
    return service.create_user(db, user)


@user_router.get("/", response_model=List[UserOut])
def list_users(
    db: db_dependency,
    role: Optional[UserRole] = Query(None),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0)
):
    return service.list_users(db, role, limit, offset)


@user_router.get("/admins", response_model=List[UserOut])
def get_admins(db: db_dependency):
    return service.get_admins(db)


@user_router.get("/username/{username}", response_model=UserOut)
def get_user_by_username(username: str, db: db_dependency):
    return service.get_user_by_username(db, username)


@user_router.get("/company/{company_id}", response_model=List[UserOut])
def get_users_by_company(company_id: UUID, db: db_dependency):
    return service.get_users_by_company(db, company_id)


@user_router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: UUID, db: db_dependency):
    return service.get_user(db, user_id)


@user_router.put("/{user_id}", response_model=UserOut)
def update_user(user_id: UUID, user: UserUpdate, db: db_dependency):
    """Update a user; a new password is stored hashed."""
    return service.update_user(db, user_id, user)


@user_router.delete("/{user_id}")
def delete_user(user_id: UUID, db: db_dependency):
    return service.delete_user(db, user_id)
