# stockmaster/domains/dlv/schemas.py

"""
'dlv' 도메인 (고객/출고)의 Pydantic 스키마를 정의하는 모듈입니다.
"""

from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field
from sqlmodel import SQLModel

from stockmaster.domains.inv.schemas import LocationSummary
from .models import DeliveryStatus


# =============================================================================
# 1. 고객 (Customer) 스키마
# =============================================================================
class CustomerBase(SQLModel):
    name: str = Field(..., min_length=1, max_length=100, description="고객명")
    code: str = Field(..., min_length=1, max_length=20, description="고객 코드")
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = Field(None, max_length=255)


class CustomerCreate(CustomerBase):
    pass


class CustomerUpdate(SQLModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    code: Optional[str] = Field(None, min_length=1, max_length=20)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = Field(None, max_length=255)
    is_active: Optional[bool] = None


class CustomerRead(CustomerBase):
    id: int
    email: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime


class CustomerSummary(SQLModel):
    id: int
    name: str
    code: str


# =============================================================================
# 2. 출고 (DeliveryOrder) 스키마
# =============================================================================
class DeliveryLineCreate(BaseModel):
    product_id: int
    quantity: int = Field(..., ge=1)
    notes: Optional[str] = Field(None, max_length=255)


class DeliveryLineRead(SQLModel):
    id: int
    product_id: int
    product_name: Optional[str] = None
    product_sku: Optional[str] = None
    quantity: int
    picked: int
    packed: int
    delivered: int
    notes: Optional[str] = None


class DeliveryCreate(BaseModel):
    customer_id: Optional[int] = None
    location_id: int
    scheduled_date: Optional[datetime] = None
    notes: Optional[str] = None
    lines: List[DeliveryLineCreate] = Field(..., min_length=1)


class DeliveryUpdate(BaseModel):
    customer_id: Optional[int] = None
    location_id: Optional[int] = None
    scheduled_date: Optional[datetime] = None
    notes: Optional[str] = None


class DeliveryStatusUpdate(BaseModel):
    status: DeliveryStatus


class DeliveryRead(SQLModel):
    id: int
    delivery_number: str
    customer_id: Optional[int] = None
    location_id: int
    status: DeliveryStatus
    scheduled_date: Optional[datetime] = None
    delivered_date: Optional[datetime] = None
    notes: Optional[str] = None
    user_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime
    customer: Optional[CustomerSummary] = None
    location: Optional[LocationSummary] = None
    lines: List[DeliveryLineRead] = []


class CustomerDetail(CustomerRead):
    """고객 상세: 최근 출고 10건 포함"""
    recent_deliveries: List[DeliveryRead] = []
