"""
Pydantic schemas for subscription requests.
"""
from pydantic import BaseModel, EmailStr, Field
from uuid import UUID
from typing import Optional
from datetime import datetime

from app.modules.companies.models import SubscriptionType
from .models import RequestStatus


class SubscriptionRequestBase(BaseModel):
    company_name: str = Field(..., min_length=1, max_length=200)
    company_avatar: Optional[str] = Field(None, max_length=500)
    contact_name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    phone: str = Field(..., min_length=5, max_length=30)
    country: Optional[str] = Field(None, max_length=100)
    company_size: Optional[str] = Field(None, max_length=50)
    industry: Optional[str] = Field(None, max_length=100)
    plan: SubscriptionType = SubscriptionType.BASIC
    additional_info: Optional[str] = None


class SubscriptionRequestCreate(SubscriptionRequestBase):
    pass


class SubscriptionRequestUpdate(BaseModel):
    company_name: Optional[str] = Field(None, min_length=1, max_length=200)
    company_avatar: Optional[str] = Field(None, max_length=500)
    contact_name: Optional[str] = Field(None, min_length=1, max_length=200)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, min_length=5, max_length=30)
    country: Optional[str] = Field(None, max_length=100)
    company_size: Optional[str] = Field(None, max_length=50)
    industry: Optional[str] = Field(None, max_length=100)
    plan: Optional[SubscriptionType] = None
    additional_info: Optional[str] = None


class SubscriptionRequestStatusUpdate(BaseModel):
    status: RequestStatus
    processed_by: Optional[UUID] = None


class SubscriptionRequestOut(SubscriptionRequestBase):
    id: UUID
    status: RequestStatus
    processed_by: Optional[UUID] = None
    processed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
