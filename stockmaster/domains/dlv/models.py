# stockmaster/domains/dlv/models.py

"""
'dlv' 도메인 (출고)의 데이터베이스 ORM 모델을 정의하는 모듈입니다.

- 고객(Customer)
- 출고 지시(DeliveryOrder)와 품목(DeliveryOrderLine)
"""

from typing import Optional, List
from datetime import datetime, UTC
from enum import Enum
from sqlmodel import Field, Relationship, SQLModel, Column
from sqlalchemy import ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP

from stockmaster.domains.inv.models import Product
from stockmaster.domains.loc.models import Location


class DeliveryStatus(str, Enum):
    DRAFT = "DRAFT"
    WAITING = "WAITING"
    READY = "READY"
    DONE = "DONE"
    CANCELED = "CANCELED"


# =============================================================================
# 1. customers 테이블 모델
# =============================================================================
class CustomerBase(SQLModel):
    name: str = Field(max_length=100, description="고객명")
    code: str = Field(max_length=20, sa_column_kwargs={"unique": True}, description="고객 코드")
    email: Optional[str] = Field(default=None, max_length=100)
    phone: Optional[str] = Field(default=None, max_length=50)
    address: Optional[str] = Field(default=None, max_length=255)
    is_active: bool = Field(default=True)


class Customer(CustomerBase, table=True):
    __tablename__ = "customers"

    id: Optional[int] = Field(default=None, primary_key=True)
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

    deliveries: List["DeliveryOrder"] = Relationship(back_populates="customer")


# =============================================================================
# 2. delivery_orders 테이블 모델
# =============================================================================
class DeliveryOrder(SQLModel, table=True):
    """
    출고 지시. 상태는 DRAFT -> WAITING -> READY -> DONE 순으로 진행하며,
    DONE 은 validate 작업으로만 도달합니다.
    """
    __tablename__ = "delivery_orders"

    id: Optional[int] = Field(default=None, primary_key=True)
    delivery_number: str = Field(max_length=30, sa_column_kwargs={"unique": True}, description="출고 번호 (WH/OUT/0001)")
    customer_id: Optional[int] = Field(
        default=None,
        sa_column=Column(ForeignKey("customers.id", ondelete="SET NULL"), index=True)
    )
    location_id: int = Field(
        sa_column=Column(ForeignKey("locations.id", ondelete="RESTRICT"), nullable=False),
        description="출고 위치 ID"
    )
    status: DeliveryStatus = Field(default=DeliveryStatus.DRAFT, index=True)
    scheduled_date: Optional[datetime] = Field(default=None, sa_column=Column(TIMESTAMP(timezone=True)))
    delivered_date: Optional[datetime] = Field(default=None, sa_column=Column(TIMESTAMP(timezone=True)))
    notes: Optional[str] = Field(default=None)
    user_id: Optional[int] = Field(
        default=None,
        sa_column=Column(ForeignKey("users.id", ondelete="SET NULL"))
    )
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

    customer: Optional[Customer] = Relationship(back_populates="deliveries")
    location: Optional[Location] = Relationship()
    lines: List["DeliveryOrderLine"] = Relationship(
        back_populates="delivery_order",
        sa_relationship_kwargs={"cascade": "all, delete-orphan", "order_by": "DeliveryOrderLine.id"}
    )


class DeliveryOrderLine(SQLModel, table=True):
    __tablename__ = "delivery_order_lines"

    id: Optional[int] = Field(default=None, primary_key=True)
    delivery_order_id: int = Field(
        sa_column=Column(ForeignKey("delivery_orders.id", ondelete="CASCADE"), nullable=False, index=True)
    )
    product_id: int = Field(
        sa_column=Column(ForeignKey("products.id", ondelete="RESTRICT"), nullable=False)
    )
    quantity: int = Field(description="주문 수량")
    picked: int = Field(default=0, description="피킹 수량")
    packed: int = Field(default=0, description="포장 수량")
    delivered: int = Field(default=0, description="출고 확정 수량")
    notes: Optional[str] = Field(default=None, max_length=255)

    delivery_order: Optional[DeliveryOrder] = Relationship(back_populates="lines")
    product: Optional[Product] = Relationship()
