# stockmaster/domains/ven/schemas.py

"""
'ven' 도메인 (공급업체)의 Pydantic 스키마를 정의하는 모듈입니다.
"""

from typing import Optional
from datetime import datetime
from pydantic import EmailStr, field_validator
from sqlmodel import SQLModel, Field


class SupplierBase(SQLModel):
    name: str = Field(..., min_length=1, max_length=100, description="공급업체명")
    code: str = Field(..., min_length=1, max_length=20, description="공급업체 코드 (대문자로 저장)")
    email: Optional[EmailStr] = Field(None, description="대표 이메일")
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = Field(None, max_length=255)

    @field_validator("code", mode="before")
    @classmethod
    def normalize_code(cls, value):
        return value.strip().upper() if isinstance(value, str) else value


class SupplierCreate(SupplierBase):
    pass


class SupplierUpdate(SQLModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    code: Optional[str] = Field(None, min_length=1, max_length=20)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = Field(None, max_length=255)
    is_active: Optional[bool] = None

    @field_validator("code", mode="before")
    @classmethod
    def normalize_code(cls, value):
        return value.strip().upper() if isinstance(value, str) else value


class SupplierRead(SupplierBase):
    id: int
    email: Optional[str] = None
    is_active: bool
    created_at: datetime = Field(..., description="레코드 생성 일시")
    updated_at: datetime = Field(..., description="레코드 마지막 업데이트 일시")
