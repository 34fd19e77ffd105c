# stockmaster/domains/loc/models.py

"""
'loc' 도메인의 데이터베이스 ORM 모델을 정의하는 모듈입니다.
 - loc 도메인은 창고(Warehouse) -> 위치(Location) 계층 구조
 - 재고(StockLocation)는 Location 단위로 관리됩니다 (inv 도메인).
"""

from typing import Optional, List, TYPE_CHECKING
from datetime import datetime, UTC
from enum import Enum
from sqlmodel import Field, Relationship, SQLModel, Column
from sqlalchemy import ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP

if TYPE_CHECKING:
    from stockmaster.domains.inv.models import StockLocation


class LocationType(str, Enum):
    """위치의 용도 구분"""
    STORAGE = "STORAGE"
    PRODUCTION = "PRODUCTION"
    RECEIVING = "RECEIVING"
    SHIPPING = "SHIPPING"
    DAMAGED = "DAMAGED"
    QUARANTINE = "QUARANTINE"


# =============================================================================
# 1. warehouses 테이블 모델
# =============================================================================
class WarehouseBase(SQLModel):
    """
    warehouses 테이블의 기본 속성을 정의하는 SQLModel Base 클래스입니다.
    """
    name: str = Field(max_length=100, description="창고 명칭")
    code: str = Field(max_length=20, sa_column_kwargs={"unique": True}, description="창고 코드 (대문자, 숫자, _, -)")
    address: Optional[str] = Field(default=None, max_length=255, description="주소")
    is_active: bool = Field(default=True, description="사용 여부 (삭제 시 false)")


class Warehouse(WarehouseBase, table=True):
    """
    warehouses 테이블에 매핑되는 SQLModel ORM 클래스입니다.
    """
    __tablename__ = "warehouses"

    id: Optional[int] = Field(default=None, primary_key=True, description="창고 고유 ID")
    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="레코드 생성 일시"
    )
    updated_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()),
        description="레코드 마지막 업데이트 일시"
    )

    # Warehouse는 여러 Location을 가질 수 있습니다. (일대다 관계)
    locations: List["Location"] = Relationship(back_populates="warehouse")


# =============================================================================
# 2. locations 테이블 모델
# =============================================================================
class LocationBase(SQLModel):
    """
    locations 테이블의 기본 속성을 정의하는 SQLModel Base 클래스입니다.
    """
    name: str = Field(max_length=100, description="위치 명칭 (예: A-01-01, Receiving Bay 1)")
    code: str = Field(max_length=50, sa_column_kwargs={"unique": True}, description="위치 코드 (전체 창고에서 고유)")
    warehouse_id: int = Field(
        sa_column=Column(ForeignKey("warehouses.id", onupdate="CASCADE", ondelete="RESTRICT"), nullable=False, index=True),
        description="소속 창고 ID (FK)"
    )
    type: LocationType = Field(default=LocationType.STORAGE, description="위치 유형")
    is_active: bool = Field(default=True, description="사용 여부 (삭제 시 false)")


class Location(LocationBase, table=True):
    """
    locations 테이블에 매핑되는 SQLModel ORM 클래스입니다.
    """
    __tablename__ = "locations"

    id: Optional[int] = Field(default=None, primary_key=True, description="위치 고유 ID")
    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="레코드 생성 일시"
    )
    updated_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()),
        description="레코드 마지막 업데이트 일시"
    )

    warehouse: Optional[Warehouse] = Relationship(back_populates="locations")
    stock_locations: List["StockLocation"] = Relationship(back_populates="location")
