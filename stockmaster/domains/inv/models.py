# stockmaster/domains/inv/models.py

"""
'inv' 도메인의 데이터베이스 ORM 모델을 정의하는 모듈입니다.

- 제품 분류(ProductCategory)와 제품(Product)
- 위치별 재고(StockLocation): (product, location) 쌍마다 한 행
- 재고 원장(StockMovement): 수량 변화의 추가 전용(append-only) 기록
- 입고(Receipt, ReceiptItem)
"""

from typing import Optional, List, TYPE_CHECKING
from datetime import datetime, date, UTC
from enum import Enum
from sqlmodel import Field, Relationship, SQLModel, Column
from sqlalchemy import ForeignKey, Numeric, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP

if TYPE_CHECKING:
    from stockmaster.domains.loc.models import Location
    from stockmaster.domains.usr.models import User
    from stockmaster.domains.ven.models import Supplier


class MovementType(str, Enum):
    """재고 원장 항목의 유형"""
    ADJUSTMENT = "ADJUSTMENT"
    TRANSFER_IN = "TRANSFER_IN"
    TRANSFER_OUT = "TRANSFER_OUT"
    RECEIPT = "RECEIPT"
    DELIVERY = "DELIVERY"


class DocumentType(str, Enum):
    """원장 항목을 발생시킨 문서 종류"""
    ADJUSTMENT = "ADJUSTMENT"
    TRANSFER = "TRANSFER"
    RECEIPT = "RECEIPT"
    DELIVERY = "DELIVERY"


class ReceiptStatus(str, Enum):
    DRAFT = "DRAFT"
    COMPLETED = "COMPLETED"
    CANCELED = "CANCELED"


# =============================================================================
# 1. product_categories 테이블 모델
# =============================================================================
class ProductCategoryBase(SQLModel):
    name: str = Field(max_length=100, sa_column_kwargs={"unique": True}, description="분류명")
    description: Optional[str] = Field(default=None, description="설명")


class ProductCategory(ProductCategoryBase, table=True):
    __tablename__ = "product_categories"

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

    products: List["Product"] = Relationship(back_populates="category")


# =============================================================================
# 2. products 테이블 모델
# =============================================================================
class ProductBase(SQLModel):
    name: str = Field(max_length=200, description="제품명")
    sku: str = Field(max_length=50, sa_column_kwargs={"unique": True}, index=True, description="재고 관리 코드 (SKU)")
    description: Optional[str] = Field(default=None)
    category_id: Optional[int] = Field(
        default=None,
        sa_column=Column(ForeignKey("product_categories.id", onupdate="CASCADE", ondelete="SET NULL")),
        description="제품 분류 ID (FK)"
    )
    unit_of_measure: str = Field(default="unit", max_length=20, description="단위 (unit, piece, box 등)")
    initial_stock: int = Field(default=0, description="등록 시점의 기초 재고 (참고용)")
    reorder_level: int = Field(default=0, description="재주문 기준 수량 (이하이면 저재고)")
    reorder_quantity: int = Field(default=0, description="재주문 시 권장 수량")
    is_active: bool = Field(default=True)


class Product(ProductBase, table=True):
    __tablename__ = "products"

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

    category: Optional[ProductCategory] = Relationship(back_populates="products")
    stock_locations: List["StockLocation"] = Relationship(back_populates="product")


# =============================================================================
# 3. stock_locations 테이블 모델
# =============================================================================
class StockLocation(SQLModel, table=True):
    """
    위치별 현재 재고. (product_id, location_id) 쌍마다 한 행이며,
    최초 조정/이동/입고/출고 시점에 생성됩니다.
    quantity 는 0 미만이 되지 않고, available = max(0, quantity - reserved) 입니다.
    """
    __tablename__ = "stock_locations"
    __table_args__ = (
        UniqueConstraint("product_id", "location_id", name="uq_stock_locations_product_location"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    product_id: int = Field(
        sa_column=Column(ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True),
        description="제품 ID (FK)"
    )
    location_id: int = Field(
        sa_column=Column(ForeignKey("locations.id", ondelete="CASCADE"), nullable=False, index=True),
        description="위치 ID (FK)"
    )
    quantity: int = Field(default=0, description="현재고")
    reserved: int = Field(default=0, description="예약 수량")
    available: int = Field(default=0, description="가용 수량")
    average_cost: float = Field(default=0, sa_column=Column(Numeric(18, 2, asdecimal=False), nullable=False, server_default="0"))
    last_updated: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()),
        description="마지막 수량 변경 일시"
    )

    product: Optional[Product] = Relationship(back_populates="stock_locations")
    location: Optional["Location"] = Relationship(back_populates="stock_locations")


# =============================================================================
# 4. stock_movements 테이블 모델 (재고 원장)
# =============================================================================
class StockMovement(SQLModel, table=True):
    """
    재고 원장. 행은 추가만 되며 수정/삭제하지 않습니다.
    quantity 는 항상 new_quantity - previous_quantity 입니다.
    """
    __tablename__ = "stock_movements"

    id: Optional[int] = Field(default=None, primary_key=True)
    product_id: int = Field(
        sa_column=Column(ForeignKey("products.id", ondelete="RESTRICT"), nullable=False, index=True)
    )
    location_id: int = Field(
        sa_column=Column(ForeignKey("locations.id", ondelete="RESTRICT"), nullable=False, index=True)
    )
    movement_type: MovementType = Field(description="원장 항목 유형")
    quantity: int = Field(description="수량 변화량 (부호 포함)")
    previous_quantity: int = Field(description="변경 전 수량")
    new_quantity: int = Field(description="변경 후 수량")
    unit_cost: Optional[float] = Field(default=None, sa_column=Column(Numeric(18, 2, asdecimal=False)))
    reason: Optional[str] = Field(default=None, max_length=255)
    reference: Optional[str] = Field(default=None, max_length=50, description="문서 번호 (WH/IN/0001 등)")
    document_type: DocumentType = Field(description="발생 문서 종류")
    document_id: Optional[int] = Field(default=None, description="발생 문서 ID")
    user_id: Optional[int] = Field(
        default=None,
        sa_column=Column(ForeignKey("users.id", ondelete="SET NULL")),
        description="처리 사용자 ID (FK)"
    )
    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now(), index=True),
        description="기록 일시"
    )

    product: Optional[Product] = Relationship()
    location: Optional["Location"] = Relationship()
    user: Optional["User"] = Relationship()


# =============================================================================
# 5. receipts / receipt_items 테이블 모델 (입고)
# =============================================================================
class Receipt(SQLModel, table=True):
    __tablename__ = "receipts"

    id: Optional[int] = Field(default=None, primary_key=True)
    receipt_number: str = Field(max_length=30, sa_column_kwargs={"unique": True}, description="입고 번호 (WH/IN/0001)")
    supplier_id: int = Field(
        sa_column=Column(ForeignKey("suppliers.id", ondelete="RESTRICT"), nullable=False, index=True)
    )
    status: ReceiptStatus = Field(default=ReceiptStatus.DRAFT)
    received_at: Optional[datetime] = Field(default=None, sa_column=Column(TIMESTAMP(timezone=True)))
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

    supplier: Optional["Supplier"] = Relationship(back_populates="receipts")
    items: List["ReceiptItem"] = Relationship(
        back_populates="receipt",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"}
    )


class ReceiptItem(SQLModel, table=True):
    __tablename__ = "receipt_items"

    id: Optional[int] = Field(default=None, primary_key=True)
    receipt_id: int = Field(
        sa_column=Column(ForeignKey("receipts.id", ondelete="CASCADE"), nullable=False, index=True)
    )
    product_id: int = Field(
        sa_column=Column(ForeignKey("products.id", ondelete="RESTRICT"), nullable=False)
    )
    location_id: int = Field(
        sa_column=Column(ForeignKey("locations.id", ondelete="RESTRICT"), nullable=False)
    )
    quantity_ordered: int = Field(default=0)
    quantity_received: int = Field(default=0)
    unit_cost: float = Field(default=0, sa_column=Column(Numeric(18, 2, asdecimal=False), nullable=False))
    expiry_date: Optional[date] = Field(default=None)

    receipt: Optional[Receipt] = Relationship(back_populates="items")
    product: Optional[Product] = Relationship()
