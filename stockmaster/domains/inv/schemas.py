# stockmaster/domains/inv/schemas.py

"""
'inv' 도메인의 Pydantic 스키마를 정의하는 모듈입니다.

- 제품 분류 / 제품 CRUD 요청 및 응답
- 재고 조정(adjust), 이동(transfer), 입고(receive) 요청
- 재고 현황(overview), 제품별 재고, 재고 원장(movement) 응답
"""

from typing import Optional, List
from datetime import datetime, date
from enum import Enum
from pydantic import BaseModel, Field
from sqlmodel import SQLModel

from stockmaster.domains.loc.models import LocationType
from .models import MovementType, DocumentType, ReceiptStatus


class AdjustmentType(str, Enum):
    INCREASE = "INCREASE"
    DECREASE = "DECREASE"
    SET = "SET"


# =============================================================================
# 1. 제품 분류 (ProductCategory) 스키마
# =============================================================================
class ProductCategoryBase(SQLModel):
    name: str = Field(..., min_length=1, max_length=100, description="분류명")
    description: Optional[str] = Field(None, description="설명")


class ProductCategoryCreate(ProductCategoryBase):
    pass


class ProductCategoryUpdate(SQLModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None


class ProductCategoryRead(ProductCategoryBase):
    id: int
    created_at: datetime
    updated_at: datetime


# =============================================================================
# 2. 제품 (Product) 스키마
# =============================================================================
class ProductBase(SQLModel):
    name: str = Field(..., min_length=1, max_length=200, description="제품명")
    sku: str = Field(..., min_length=1, max_length=50, description="SKU (전체 제품에서 고유)")
    description: Optional[str] = None
    category_id: Optional[int] = Field(None, description="제품 분류 ID")
    unit_of_measure: str = Field("unit", min_length=1, max_length=20, description="단위")
    initial_stock: int = Field(0, ge=0, description="기초 재고 (참고용, 재고 행을 만들지 않음)")
    reorder_level: int = Field(0, ge=0, description="재주문 기준 수량")
    reorder_quantity: int = Field(0, ge=0, description="재주문 권장 수량")


class ProductCreate(ProductBase):
    pass


class ProductUpdate(SQLModel):
    """모든 필드는 선택 사항입니다 (부분 업데이트)."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    sku: Optional[str] = Field(None, min_length=1, max_length=50)
    description: Optional[str] = None
    category_id: Optional[int] = None
    unit_of_measure: Optional[str] = Field(None, min_length=1, max_length=20)
    reorder_level: Optional[int] = Field(None, ge=0)
    reorder_quantity: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None


class ProductRead(ProductBase):
    id: int
    is_active: bool
    created_at: datetime
    updated_at: datetime


class ProductReadWithStock(ProductRead):
    category_name: Optional[str] = None
    total_stock: int = 0
    total_available: int = 0


# =============================================================================
# 3. 재고 행 / 원장 응답 스키마
# =============================================================================
class ProductSummary(SQLModel):
    id: int
    name: str
    sku: str
    unit_of_measure: str
    reorder_level: int


class LocationSummary(SQLModel):
    id: int
    name: str
    code: str
    type: LocationType
    warehouse_id: int


class WarehouseSummary(SQLModel):
    id: int
    name: str
    code: str


class StockLocationRead(SQLModel):
    id: int
    product_id: int
    location_id: int
    quantity: int
    reserved: int
    available: int
    average_cost: float
    last_updated: Optional[datetime] = None


class StockMovementRead(SQLModel):
    id: int
    product_id: int
    location_id: int
    movement_type: MovementType
    quantity: int
    previous_quantity: int
    new_quantity: int
    unit_cost: Optional[float] = None
    reason: Optional[str] = None
    reference: Optional[str] = None
    document_type: DocumentType
    document_id: Optional[int] = None
    user_id: Optional[int] = None
    created_at: datetime


class StockOverviewRow(StockLocationRead):
    product: ProductSummary
    location: LocationSummary
    warehouse: WarehouseSummary
    is_low_stock: bool = False


class StockStatistics(BaseModel):
    total_products: int = 0
    total_stock: int = 0
    low_stock_items: int = 0
    total_locations: int = 0


class StockOverview(BaseModel):
    items: List[StockOverviewRow]
    statistics: StockStatistics


class ProductStockRow(StockLocationRead):
    location: LocationSummary
    warehouse: WarehouseSummary


class ProductStock(BaseModel):
    product: ProductSummary
    locations: List[ProductStockRow]
    total_stock: int = 0


class ProductDetail(ProductRead):
    """제품 상세: 분류, 위치별 재고, 최근 원장 20건"""
    category: Optional[ProductCategoryRead] = None
    stock_locations: List[ProductStockRow] = []
    recent_movements: List[StockMovementRead] = []
    total_stock: int = 0
    total_available: int = 0


# =============================================================================
# 4. 재고 변경 요청 스키마
# =============================================================================
class StockAdjustRequest(BaseModel):
    product_id: int
    location_id: int
    adjustment_type: AdjustmentType
    quantity: int = Field(..., ge=0)
    reason: Optional[str] = Field(None, max_length=255)
    unit_cost: Optional[float] = Field(None, ge=0)


class StockAdjustResponse(BaseModel):
    stock: StockLocationRead
    movement: StockMovementRead


class StockTransferRequest(BaseModel):
    product_id: int
    from_location_id: int
    to_location_id: int
    quantity: int = Field(..., ge=1)
    reason: Optional[str] = Field(None, max_length=255)


class StockTransferResponse(BaseModel):
    source: StockLocationRead
    destination: StockLocationRead
    movements: List[StockMovementRead]


class ReceiptItemCreate(BaseModel):
    product_id: int
    location_id: int
    quantity: int = Field(..., ge=1)
    unit_cost: float = Field(..., ge=0)
    expiry_date: Optional[date] = None


class StockReceiveRequest(BaseModel):
    supplier_id: int
    items: List[ReceiptItemCreate] = Field(..., min_length=1)
    notes: Optional[str] = None


# =============================================================================
# 5. 입고 (Receipt) 응답 스키마
# =============================================================================
class ReceiptItemRead(SQLModel):
    id: int
    product_id: int
    location_id: int
    quantity_ordered: int
    quantity_received: int
    unit_cost: float
    expiry_date: Optional[date] = None


class ReceiptRead(SQLModel):
    id: int
    receipt_number: str
    supplier_id: int
    status: ReceiptStatus
    received_at: Optional[datetime] = None
    notes: Optional[str] = None
    user_id: Optional[int] = None
    created_at: datetime


class ReceiptDetail(ReceiptRead):
    items: List[ReceiptItemRead] = []
