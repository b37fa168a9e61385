from fastapi import HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID
import logging

from app.common.exceptions import NotFoundError, ConflictError
from app.modules.users.models import User, UserRole
from app.modules.users.schemas import UserCreate, UserUpdate
from app.modules.users.utils import hash_password
from app.modules.companies.models import Company

logger = logging.getLogger(__name__)


def _validate_unique(db: Session, username: Optional[str], phone: Optional[str], exclude_id: Optional[UUID] = None):
    if username:
        query = db.query(User).filter(User.username == username)
        if exclude_id:
            query = query.filter(User.id != exclude_id)
        if query.first():
            raise ConflictError(f"El usuario {username} ya existe")
    if phone:
        query = db.query(User).filter(User.phone == phone)
        if exclude_id:
            query = query.filter(User.id != exclude_id)
        if query.first():
            raise ConflictError(f"El teléfono {phone} ya está registrado")


def _validate_company(db: Session, company_id: Optional[UUID]):
    if company_id and not db.query(Company).filter(Company.id == company_id).first():
        raise NotFoundError("Empresa no encontrada")


def create_user(db: Session, user_data: UserCreate) -> User:
    """Create a user storing a bcrypt hash of the password."""
    try:
        _validate_unique(db, user_data.username, user_data.phone)
        _validate_company(db, user_data.company_id)

        user = User(**user_data.model_dump(exclude={"password"}))
        user.password = hash_password(user_data.password)
        db.add(user)
        db.commit()
        db.refresh(user)

        logger.info(f"Usuario {user.username} creado con rol {user.role.value}")
        return user

    except HTTPException:
        db.rollback()
        raise
    except Exception as e:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error creando usuario: {str(e)}"
        )


def get_user(db: Session, user_id: UUID) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError("Usuario no encontrado")
    return user


def get_user_by_username(db: Session, username: str) -> User:
    user = db.query(User).filter(User.username == username).first()
    if not user:
        raise NotFoundError("Usuario no encontrado")
    return user


def list_users(db: Session, role: Optional[UserRole] = None, limit: int = 100, offset: int = 0) -> List[User]:
    query = db.query(User)
    if role:
        query = query.filter(User.role == role)
    return query.order_by(User.username).offset(offset).limit(limit).all()


def get_users_by_company(db: Session, company_id: UUID) -> List[User]:
    return db.query(User).filter(User.company_id == company_id).order_by(User.username).all()


def get_admins(db: Session) -> List[User]:
    return db.query(User).filter(User.role == UserRole.ADMIN).order_by(User.username).all()


def update_user(db: Session, user_id: UUID, user_data: UserUpdate) -> User:
    try:
        user = get_user(db, user_id)
        update_data = user_data.model_dump(exclude_unset=True)

        _validate_unique(db, update_data.get("username"), update_data.get("phone"), exclude_id=user.id)
        if "company_id" in update_data:
            _validate_company(db, update_data["company_id"])

        password = update_data.pop("password", None)
        if password:
            user.password = hash_password(password)

        for field, value in update_data.items():
            setattr(user, field, value)

        db.commit()
        db.refresh(user)
        return user

    except HTTPException:
        db.rollback()
        raise
    except Exception as e:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error actualizando usuario: {str(e)}"
        )


def delete_user(db: Session, user_id: UUID) -> dict:
    try:
        user = get_user(db, user_id)
        username = user.username
        for company in db.query(Company).filter(Company.authorized_users.contains(user)).all():
            company.authorized_users.remove(user)
        db.delete(user)
        db.commit()
        return {"message": f"Usuario {username} eliminado"}
    except HTTPException:
        db.rollback()
        raise
    except Exception as e:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error eliminando usuario: {str(e)}"
        )
