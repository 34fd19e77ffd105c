# stockmaster/domains/inv/crud.py

"""
'inv' 도메인과 관련된 CRUD 및 조회 로직을 담당하는 모듈입니다.

재고 수량을 바꾸는 작업은 이 모듈이 아니라 services.py 의 재고 엔진이 처리합니다.
"""

from typing import Dict, List, Optional
from datetime import date
import logging

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import selectinload
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from stockmaster.core.crud_base import CRUDBase
from stockmaster.domains.loc.models import Location, Warehouse
from . import models as inv_models
from . import schemas as inv_schemas

logger = logging.getLogger(__name__)


# =============================================================================
# 1. 제품 분류 (ProductCategory) CRUD
# =============================================================================
class CRUDProductCategory(
    CRUDBase[
        inv_models.ProductCategory,
        inv_schemas.ProductCategoryCreate,
        inv_schemas.ProductCategoryUpdate
    ]
):
    def __init__(self):
        super().__init__(model=inv_models.ProductCategory)

    async def get_all(self, db: AsyncSession) -> List[inv_models.ProductCategory]:
        result = await db.execute(select(self.model).order_by(self.model.name))
        return result.scalars().all()

    async def create(self, db: AsyncSession, *, obj_in: inv_schemas.ProductCategoryCreate) -> inv_models.ProductCategory:
        if await self.get_by_attribute(db, attribute="name", value=obj_in.name):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Category name already exists")
        return await super().create(db, obj_in=obj_in)

    async def update(
        self, db: AsyncSession, *, db_obj: inv_models.ProductCategory, obj_in: inv_schemas.ProductCategoryUpdate
    ) -> inv_models.ProductCategory:
        if obj_in.name and obj_in.name != db_obj.name:
            if await self.get_by_attribute(db, attribute="name", value=obj_in.name):
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Category name already exists")
        return await super().update(db, db_obj=db_obj, obj_in=obj_in)

    async def remove(self, db: AsyncSession, *, db_obj: inv_models.ProductCategory) -> inv_models.ProductCategory:
        statement = select(inv_models.Product.id).where(inv_models.Product.category_id == db_obj.id).limit(1)
        if (await db.execute(statement)).first():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot delete category with assigned products"
            )
        return await self.delete(db, db_obj=db_obj)


category = CRUDProductCategory()


# =============================================================================
# 2. 제품 (Product) CRUD
# =============================================================================
class CRUDProduct(CRUDBase[inv_models.Product, inv_schemas.ProductCreate, inv_schemas.ProductUpdate]):
    def __init__(self):
        super().__init__(model=inv_models.Product)

    async def get_by_sku(self, db: AsyncSession, *, sku: str) -> Optional[inv_models.Product]:
        result = await db.execute(select(self.model).where(self.model.sku == sku))
        return result.scalars().one_or_none()

    async def get_active(self, db: AsyncSession, *, category_id: Optional[int] = None) -> List[inv_models.Product]:
        statement = (
            select(self.model)
            .where(self.model.is_active == True)  # noqa: E712
            .options(selectinload(self.model.category))
            .order_by(self.model.name)
        )
        if category_id is not None:
            statement = statement.where(self.model.category_id == category_id)
        result = await db.execute(statement)
        return result.scalars().all()

    async def get_stock_totals(self, db: AsyncSession, *, product_ids: List[int]) -> Dict[int, Dict[str, int]]:
        """제품별 total_stock / total_available 합계 (모든 위치)"""
        totals = {pid: {"total_stock": 0, "total_available": 0} for pid in product_ids}
        if not product_ids:
            return totals
        result = await db.execute(
            select(
                inv_models.StockLocation.product_id,
                func.coalesce(func.sum(inv_models.StockLocation.quantity), 0),
                func.coalesce(func.sum(inv_models.StockLocation.available), 0),
            )
            .where(inv_models.StockLocation.product_id.in_(product_ids))
            .group_by(inv_models.StockLocation.product_id)
        )
        for product_id, total_stock, total_available in result.all():
            totals[product_id] = {"total_stock": int(total_stock), "total_available": int(total_available)}
        return totals

    async def get_detail(self, db: AsyncSession, *, id: int) -> Optional[inv_models.Product]:
        statement = (
            select(self.model)
            .where(self.model.id == id)
            .options(
                selectinload(self.model.category),
                selectinload(self.model.stock_locations)
                .selectinload(inv_models.StockLocation.location)
                .selectinload(Location.warehouse),
            )
            .execution_options(populate_existing=True)
        )
        result = await db.execute(statement)
        return result.scalars().one_or_none()

    async def _check_category(self, db: AsyncSession, category_id: Optional[int]) -> None:
        if category_id is not None and not await db.get(inv_models.ProductCategory, category_id):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Category not found")

    async def create(self, db: AsyncSession, *, obj_in: inv_schemas.ProductCreate) -> inv_models.Product:
        if await self.get_by_sku(db, sku=obj_in.sku):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Product SKU already exists")
        await self._check_category(db, obj_in.category_id)
        return await super().create(db, obj_in=obj_in)

    async def update(
        self, db: AsyncSession, *, db_obj: inv_models.Product, obj_in: inv_schemas.ProductUpdate
    ) -> inv_models.Product:
        if obj_in.sku and obj_in.sku != db_obj.sku:
            if await self.get_by_sku(db, sku=obj_in.sku):
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Product SKU already exists")
        if obj_in.category_id is not None:
            await self._check_category(db, obj_in.category_id)
        return await super().update(db, db_obj=db_obj, obj_in=obj_in)

    async def remove(self, db: AsyncSession, *, db_obj: inv_models.Product) -> inv_models.Product:
        """재고가 남아 있거나 원장 이력이 있는 제품은 삭제할 수 없습니다."""
        on_hand = await db.execute(
            select(func.coalesce(func.sum(inv_models.StockLocation.quantity), 0))
            .where(inv_models.StockLocation.product_id == db_obj.id)
        )
        history = await db.execute(
            select(inv_models.StockMovement.id).where(inv_models.StockMovement.product_id == db_obj.id).limit(1)
        )
        if on_hand.scalar_one() > 0 or history.first():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot delete product with stock or movement history"
            )
        return await self.delete(db, db_obj=db_obj)


product = CRUDProduct()


# =============================================================================
# 3. 재고 현황 조회
# =============================================================================
class CRUDStockLocation(CRUDBase[inv_models.StockLocation, inv_schemas.StockLocationRead, inv_schemas.StockLocationRead]):
    def __init__(self):
        super().__init__(model=inv_models.StockLocation)

    async def get_overview_rows(
        self,
        db: AsyncSession,
        *,
        warehouse_id: Optional[int] = None,
        location_id: Optional[int] = None,
        product_id: Optional[int] = None,
    ) -> List[inv_models.StockLocation]:
        """활성 제품/위치/창고의 재고 행을 창고명, 위치명, 제품명 순으로 조회합니다."""
        statement = (
            select(self.model)
            .join(inv_models.Product, self.model.product_id == inv_models.Product.id)
            .join(Location, self.model.location_id == Location.id)
            .join(Warehouse, Location.warehouse_id == Warehouse.id)
            .where(
                inv_models.Product.is_active == True,  # noqa: E712
                Location.is_active == True,  # noqa: E712
                Warehouse.is_active == True,  # noqa: E712
            )
            .options(
                selectinload(self.model.product),
                selectinload(self.model.location).selectinload(Location.warehouse),
            )
            .order_by(Warehouse.name, Location.name, inv_models.Product.name)
        )
        if warehouse_id is not None:
            statement = statement.where(Location.warehouse_id == warehouse_id)
        if location_id is not None:
            statement = statement.where(self.model.location_id == location_id)
        if product_id is not None:
            statement = statement.where(self.model.product_id == product_id)
        result = await db.execute(statement)
        return result.scalars().all()

    async def get_for_product(self, db: AsyncSession, *, product_id: int) -> List[inv_models.StockLocation]:
        statement = (
            select(self.model)
            .join(Location, self.model.location_id == Location.id)
            .join(Warehouse, Location.warehouse_id == Warehouse.id)
            .where(
                self.model.product_id == product_id,
                self.model.quantity > 0,
                Location.is_active == True,  # noqa: E712
                Warehouse.is_active == True,  # noqa: E712
            )
            .options(selectinload(self.model.location).selectinload(Location.warehouse))
            .order_by(Location.name)
        )
        result = await db.execute(statement)
        return result.scalars().all()


stock_location = CRUDStockLocation()


# =============================================================================
# 4. 재고 원장 (StockMovement) 조회
# =============================================================================
class CRUDStockMovement(CRUDBase[inv_models.StockMovement, inv_schemas.StockMovementRead, inv_schemas.StockMovementRead]):
    """원장은 추가 전용입니다. 조회만 제공하며 생성은 재고 엔진이 담당합니다."""
    def __init__(self):
        super().__init__(model=inv_models.StockMovement)

    async def search(
        self,
        db: AsyncSession,
        *,
        product_id: Optional[int] = None,
        location_id: Optional[int] = None,
        movement_type: Optional[inv_models.MovementType] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> List[inv_models.StockMovement]:
        return await self.get_filtered(
            db,
            filters={"product_id": product_id, "location_id": location_id, "movement_type": movement_type},
            date_range_field="created_at",
            start_date=start_date,
            end_date=end_date,
            order_by_field="created_at",
            order_desc=True,
            skip=skip,
            limit=limit,
        )

    async def get_recent_for_product(
        self, db: AsyncSession, *, product_id: int, limit: int = 20
    ) -> List[inv_models.StockMovement]:
        return await self.search(db, product_id=product_id, limit=limit)


stock_movement = CRUDStockMovement()


# =============================================================================
# 5. 입고 (Receipt) 조회
# =============================================================================
class CRUDReceipt(CRUDBase[inv_models.Receipt, inv_schemas.StockReceiveRequest, inv_schemas.StockReceiveRequest]):
    def __init__(self):
        super().__init__(model=inv_models.Receipt)

    async def get_list(
        self, db: AsyncSession, *, supplier_id: Optional[int] = None, skip: int = 0, limit: int = 50
    ) -> List[inv_models.Receipt]:
        return await self.get_filtered(
            db,
            filters={"supplier_id": supplier_id},
            order_by_field="created_at",
            skip=skip,
            limit=limit,
        )

    async def get_with_items(self, db: AsyncSession, *, id: int) -> Optional[inv_models.Receipt]:
        statement = (
            select(self.model)
            .where(self.model.id == id)
            .options(selectinload(self.model.items))
            .execution_options(populate_existing=True)
        )
        result = await db.execute(statement)
        return result.scalars().one_or_none()


receipt = CRUDReceipt()
