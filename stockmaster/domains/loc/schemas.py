# stockmaster/domains/loc/schemas.py

"""
'loc' 도메인 (창고/위치)의 Pydantic 스키마를 정의하는 모듈입니다.

창고와 위치의 생성/수정 요청, 통계가 포함된 목록 응답,
재고 행이 포함된 상세 응답에 사용됩니다.
"""

from typing import Optional, List
from datetime import datetime
from pydantic import Field, field_validator
from sqlmodel import SQLModel

from .models import LocationType

CODE_PATTERN = r"^[A-Z0-9_-]+$"


def _upper_code(value):
    if isinstance(value, str):
        return value.strip().upper()
    return value


# =============================================================================
# 1. 창고 (Warehouse) 스키마
# =============================================================================
class WarehouseBase(SQLModel):
    name: str = Field(..., min_length=1, max_length=100, description="창고 명칭")
    code: str = Field(..., min_length=1, max_length=20, pattern=CODE_PATTERN, description="창고 코드 (대문자로 저장)")
    address: Optional[str] = Field(None, max_length=255, description="주소")

    @field_validator("code", mode="before")
    @classmethod
    def normalize_code(cls, value):
        return _upper_code(value)


class WarehouseCreate(WarehouseBase):
    pass


class WarehouseUpdate(SQLModel):
    """모든 필드는 선택 사항입니다 (부분 업데이트)."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    code: Optional[str] = Field(None, min_length=1, max_length=20, pattern=CODE_PATTERN)
    address: Optional[str] = Field(None, max_length=255)
    is_active: Optional[bool] = None

    @field_validator("code", mode="before")
    @classmethod
    def normalize_code(cls, value):
        return _upper_code(value)


class WarehouseRead(WarehouseBase):
    id: int = Field(..., description="창고 고유 ID")
    is_active: bool
    created_at: datetime = Field(..., description="레코드 생성 일시")
    updated_at: datetime = Field(..., description="레코드 마지막 업데이트 일시")


class WarehouseReadWithStats(WarehouseRead):
    """목록 조회용. 창고 전체의 재고 합계와 제품/위치 수를 포함합니다."""
    total_stock: int = 0
    total_products: int = 0
    total_locations: int = 0


# =============================================================================
# 2. 위치 (Location) 스키마
# =============================================================================
class LocationBase(SQLModel):
    name: str = Field(..., min_length=1, max_length=100, description="위치 명칭")
    code: str = Field(..., min_length=1, max_length=50, pattern=CODE_PATTERN, description="위치 코드 (대문자로 저장)")
    warehouse_id: int = Field(..., description="소속 창고 ID")
    type: LocationType = Field(LocationType.STORAGE, description="위치 유형")

    @field_validator("code", mode="before")
    @classmethod
    def normalize_code(cls, value):
        return _upper_code(value)


class LocationCreate(LocationBase):
    pass


class LocationUpdate(SQLModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    code: Optional[str] = Field(None, min_length=1, max_length=50, pattern=CODE_PATTERN)
    warehouse_id: Optional[int] = None
    type: Optional[LocationType] = None
    is_active: Optional[bool] = None

    @field_validator("code", mode="before")
    @classmethod
    def normalize_code(cls, value):
        return _upper_code(value)


class LocationRead(LocationBase):
    id: int = Field(..., description="위치 고유 ID")
    is_active: bool
    created_at: datetime = Field(..., description="레코드 생성 일시")
    updated_at: datetime = Field(..., description="레코드 마지막 업데이트 일시")


class LocationReadWithStats(LocationRead):
    warehouse_name: Optional[str] = None
    total_stock: int = 0
    total_products: int = 0


class LocationStockRead(SQLModel):
    """위치 상세에 포함되는 재고 행"""
    id: int
    product_id: int
    quantity: int
    reserved: int
    available: int
    average_cost: float
    last_updated: Optional[datetime] = None


class LocationDetail(LocationRead):
    stock_locations: List[LocationStockRead] = []


class WarehouseDetail(WarehouseRead):
    locations: List[LocationDetail] = []
