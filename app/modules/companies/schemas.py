from pydantic import BaseModel, EmailStr, Field
from uuid import UUID
from typing import Optional, Dict, Any
from datetime import datetime

from app.modules.companies.models import SubscriptionType, SubscriptionStatus


class CompanyBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    logo: Optional[str] = Field(None, max_length=500)
    address: Optional[str] = Field(None, max_length=255)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = Field(None, max_length=30)
    website: Optional[str] = Field(None, max_length=255)
    tax_number: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = None


class CompanyCreate(CompanyBase):
    subscription_type: SubscriptionType = SubscriptionType.BASIC
    subscription_end_date: Optional[datetime] = None
    settings: Optional[Dict[str, Any]] = None
    created_by: Optional[UUID] = None


class CompanyUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    logo: Optional[str] = Field(None, max_length=500)
    address: Optional[str] = Field(None, max_length=255)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = Field(None, max_length=30)
    website: Optional[str] = Field(None, max_length=255)
    tax_number: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = None
    settings: Optional[Dict[str, Any]] = None


class SubscriptionUpdate(BaseModel):
    subscription_type: Optional[SubscriptionType] = None
    subscription_status: Optional[SubscriptionStatus] = None
    subscription_end_date: Optional[datetime] = None


class CompanyOut(CompanyBase):
    id: UUID
    registration_date: Optional[datetime] = None
    subscription_end_date: datetime
    subscription_type: SubscriptionType
    subscription_status: SubscriptionStatus
    settings: Dict[str, Any]
    created_by: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CompanyUserLink(BaseModel):
    user_id: UUID


class CompanyStatistics(BaseModel):
    company_id: UUID
    user_count: int
    active_subscription: bool
    subscription_days_left: int
