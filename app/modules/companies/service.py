from fastapi import HTTPException, status
from sqlalchemy.orm import Session
from sqlalchemy import or_
from datetime import datetime, timedelta, timezone
from typing import List
from uuid import UUID
import logging

from app.common.exceptions import NotFoundError, ConflictError, ValidationError
from app.modules.companies.models import Company, SubscriptionStatus, DEFAULT_COMPANY_SETTINGS
from app.modules.companies.schemas import CompanyCreate, CompanyUpdate, SubscriptionUpdate, CompanyStatistics
from app.modules.users.models import User

logger = logging.getLogger(__name__)


def _aware(value: datetime) -> datetime:
    # SQLite devuelve fechas sin zona horaria
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def ensure_company_exists(db: Session, tenant_id: UUID) -> Company:
    """Verificar que el tenant corresponde a una empresa registrada"""
    company = db.query(Company).filter(Company.id == tenant_id).first()
    if not company:
        raise NotFoundError("Empresa no encontrada")
    return company


def create_company(db: Session, company_data: CompanyCreate) -> Company:
    """
    Create a new company.

    The subscription starts active; when no end date is given it defaults to
    now + SUBSCRIPTION_TRIAL_DAYS. Settings are merged over the defaults.

    Args:
        company_data (CompanyCreate): The company data to create.

    Returns:
        Company: The created company.
    """
    try:
        if db.query(Company).filter_by(name=company_data.name).first():
            raise ConflictError("Ya existe una empresa con ese nombre")

        company_dict = company_data.model_dump(exclude={"settings", "subscription_end_date"})
        company = Company(**company_dict)
        company.settings = {**DEFAULT_COMPANY_SETTINGS, **(company_data.settings or {})}
        if company_data.subscription_end_date:
            company.subscription_end_date = company_data.subscription_end_date
        company.subscription_status = SubscriptionStatus.ACTIVE

        db.add(company)
        db.commit()
        db.refresh(company)

        logger.info(f"Empresa {company.name} creada ({company.id})")
        return company

    except HTTPException:
        db.rollback()
        raise
    except Exception as e:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error creando empresa: {str(e)}"
        )


def get_company(db: Session, company_id: UUID) -> Company:
    return ensure_company_exists(db, company_id)


def list_companies(db: Session, limit: int = 100, offset: int = 0) -> List[Company]:
    return db.query(Company).order_by(Company.name).offset(offset).limit(limit).all()


def search_companies(db: Session, term: str) -> List[Company]:
    pattern = f"%{term}%"
    return db.query(Company).filter(
        or_(
            Company.name.ilike(pattern),
            Company.contact_email.ilike(pattern),
            Company.tax_number.ilike(pattern),
            Company.address.ilike(pattern)
        )
    ).order_by(Company.name).all()


def get_expiring_companies(db: Session, days: int = 7) -> List[Company]:
    """Empresas cuya suscripción vence dentro de los próximos `days` días"""
    now = datetime.now(timezone.utc)
    return db.query(Company).filter(
        Company.subscription_end_date >= now,
        Company.subscription_end_date <= now + timedelta(days=days),
        Company.subscription_status != SubscriptionStatus.CANCELLED
    ).order_by(Company.subscription_end_date).all()


def update_company(db: Session, company_id: UUID, company_data: CompanyUpdate) -> Company:
    try:
        company = get_company(db, company_id)
        update_data = company_data.model_dump(exclude_unset=True)

        if update_data.get("name") and update_data["name"] != company.name:
            if db.query(Company).filter(Company.name == update_data["name"], Company.id != company.id).first():
                raise ConflictError("Ya existe una empresa con ese nombre")

        new_settings = update_data.pop("settings", None)
        if new_settings is not None:
            company.settings = {**(company.settings or DEFAULT_COMPANY_SETTINGS), **new_settings}

        for field, value in update_data.items():
            setattr(company, field, value)

        db.commit()
        db.refresh(company)
        return company

    except HTTPException:
        db.rollback()
        raise
    except Exception as e:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error actualizando empresa: {str(e)}"
        )


def update_subscription(db: Session, company_id: UUID, data: SubscriptionUpdate) -> Company:
    """
    Change plan, status or end date.

    Extending the end date of an expired subscription reactivates it unless
    an explicit status is sent. An end date in the past marks it expired on
    save.
    """
    try:
        company = get_company(db, company_id)

        if data.subscription_type is not None:
            company.subscription_type = data.subscription_type
        if data.subscription_end_date is not None:
            company.subscription_end_date = data.subscription_end_date
            if (data.subscription_status is None
                    and company.subscription_status == SubscriptionStatus.EXPIRED
                    and _aware(data.subscription_end_date) > datetime.now(timezone.utc)):
                company.subscription_status = SubscriptionStatus.ACTIVE
        if data.subscription_status is not None:
            company.subscription_status = data.subscription_status

        db.commit()
        db.refresh(company)

        logger.info(
            f"Suscripción de {company.name}: {company.subscription_type.value} "
            f"{company.subscription_status.value} hasta {company.subscription_end_date}"
        )
        return company

    except HTTPException:
        db.rollback()
        raise
    except Exception as e:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error actualizando suscripción: {str(e)}"
        )


def delete_company(db: Session, company_id: UUID) -> dict:
    try:
        company = get_company(db, company_id)
        name = company.name
        company.authorized_users.clear()
        db.query(User).filter(User.company_id == company.id).update(
            {User.company_id: None}, synchronize_session="fetch"
        )
        db.delete(company)
        db.commit()
        return {"message": f"Empresa {name} eliminada"}
    except HTTPException:
        db.rollback()
        raise
    except Exception as e:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error eliminando empresa: {str(e)}"
        )


def _get_user(db: Session, user_id: UUID) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError("Usuario no encontrado")
    return user


def add_authorized_user(db: Session, company_id: UUID, user_id: UUID) -> Company:
    """Autorizar un usuario en la empresa; repetirlo no tiene efecto"""
    try:
        company = get_company(db, company_id)
        user = _get_user(db, user_id)
        if user not in company.authorized_users:
            company.authorized_users.append(user)
            db.commit()
            db.refresh(company)
        return company
    except HTTPException:
        db.rollback()
        raise
    except Exception as e:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error autorizando usuario: {str(e)}"
        )


def remove_authorized_user(db: Session, company_id: UUID, user_id: UUID) -> Company:
    try:
        company = get_company(db, company_id)
        user = next((u for u in company.authorized_users if u.id == user_id), None)
        if user is None:
            raise ValidationError("El usuario no está autorizado en la empresa")
        company.authorized_users.remove(user)
        db.commit()
        db.refresh(company)
        return company
    except HTTPException:
        db.rollback()
        raise
    except Exception as e:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error quitando usuario: {str(e)}"
        )


def get_company_users(db: Session, company_id: UUID) -> List[User]:
    """Usuarios autorizados más los usuarios cuya empresa principal es esta"""
    company = get_company(db, company_id)
    users = {user.id: user for user in company.authorized_users}
    for user in db.query(User).filter(User.company_id == company.id).all():
        users.setdefault(user.id, user)
    return sorted(users.values(), key=lambda user: user.username)


def get_company_statistics(db: Session, company_id: UUID) -> CompanyStatistics:
    company = get_company(db, company_id)
    end = _aware(company.subscription_end_date)
    days_left = max((end - datetime.now(timezone.utc)).days, 0)

    return CompanyStatistics(
        company_id=company.id,
        user_count=len(get_company_users(db, company_id)),
        active_subscription=(
            company.subscription_status in (SubscriptionStatus.ACTIVE, SubscriptionStatus.TRIAL)
            and not company.subscription_expired
        ),
        subscription_days_left=days_left
    )
