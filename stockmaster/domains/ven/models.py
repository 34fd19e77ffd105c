# stockmaster/domains/ven/models.py

"""
'ven' 도메인 (공급업체)의 데이터베이스 ORM 모델을 정의하는 모듈입니다.
"""

from typing import Optional, List, TYPE_CHECKING
from datetime import datetime, UTC
from sqlmodel import Field, Relationship, SQLModel, Column
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP

if TYPE_CHECKING:
    from stockmaster.domains.inv.models import Receipt


# =============================================================================
# 1. suppliers 테이블 모델
# =============================================================================
class SupplierBase(SQLModel):
    name: str = Field(max_length=100, description="공급업체명")
    code: str = Field(max_length=20, sa_column_kwargs={"unique": True}, description="공급업체 코드")
    email: Optional[str] = Field(default=None, max_length=100, description="대표 이메일")
    phone: Optional[str] = Field(default=None, max_length=50, description="대표 연락처")
    address: Optional[str] = Field(default=None, max_length=255, description="주소")
    is_active: bool = Field(default=True, description="거래 여부")


class Supplier(SupplierBase, table=True):
    """
    suppliers 테이블에 매핑되는 SQLModel ORM 클래스입니다.
    """
    __tablename__ = "suppliers"

    id: Optional[int] = Field(default=None, primary_key=True, description="공급업체 고유 ID")
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

    receipts: List["Receipt"] = Relationship(back_populates="supplier")
