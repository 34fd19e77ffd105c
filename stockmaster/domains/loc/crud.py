# stockmaster/domains/loc/crud.py

"""
'loc' 도메인 (창고/위치)과 관련된 CRUD 로직을 담당하는 모듈입니다.
"""

from typing import Dict, List, Optional
import logging

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import selectinload
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from stockmaster.core.crud_base import CRUDBase
from stockmaster.domains.inv.models import StockLocation
from . import models as loc_models
from . import schemas as loc_schemas


logger = logging.getLogger(__name__)


# =============================================================================
# 1. 창고 (Warehouse) CRUD
# =============================================================================
class CRUDWarehouse(
    CRUDBase[
        loc_models.Warehouse,
        loc_schemas.WarehouseCreate,
        loc_schemas.WarehouseUpdate
    ]
):
    def __init__(self):
        super().__init__(model=loc_models.Warehouse)

    async def get_by_code(self, db: AsyncSession, *, code: str) -> Optional[loc_models.Warehouse]:
        statement = select(self.model).where(self.model.code == code.upper())
        result = await db.execute(statement)
        return result.scalars().one_or_none()

    async def get_active(self, db: AsyncSession) -> List[loc_models.Warehouse]:
        statement = select(self.model).where(self.model.is_active == True).order_by(self.model.name)  # noqa: E712
        result = await db.execute(statement)
        return result.scalars().all()

    async def get_stats(self, db: AsyncSession, *, warehouse_ids: List[int]) -> Dict[int, Dict[str, int]]:
        """
        창고별 total_stock / total_products / total_locations 를 집계합니다.
        제품 수는 수량이 0보다 큰 재고 행의 서로 다른 제품 수입니다.
        """
        stats = {wid: {"total_stock": 0, "total_products": 0, "total_locations": 0} for wid in warehouse_ids}
        if not warehouse_ids:
            return stats

        Location = loc_models.Location
        location_counts = await db.execute(
            select(Location.warehouse_id, func.count(Location.id))
            .where(Location.warehouse_id.in_(warehouse_ids), Location.is_active == True)  # noqa: E712
            .group_by(Location.warehouse_id)
        )
        for warehouse_id, count in location_counts.all():
            stats[warehouse_id]["total_locations"] = count

        stock_totals = await db.execute(
            select(
                Location.warehouse_id,
                func.coalesce(func.sum(StockLocation.quantity), 0),
                func.count(func.distinct(StockLocation.product_id)),
            )
            .join(StockLocation, StockLocation.location_id == Location.id)
            .where(
                Location.warehouse_id.in_(warehouse_ids),
                Location.is_active == True,  # noqa: E712
                StockLocation.quantity > 0,
            )
            .group_by(Location.warehouse_id)
        )
        for warehouse_id, total_stock, total_products in stock_totals.all():
            stats[warehouse_id]["total_stock"] = int(total_stock or 0)
            stats[warehouse_id]["total_products"] = total_products
        return stats

    async def get_with_locations(self, db: AsyncSession, *, id: int) -> Optional[loc_models.Warehouse]:
        statement = (
            select(self.model)
            .where(self.model.id == id)
            .options(
                selectinload(self.model.locations).selectinload(loc_models.Location.stock_locations)
            )
            .execution_options(populate_existing=True)
        )
        result = await db.execute(statement)
        return result.scalars().one_or_none()

    async def has_stock(self, db: AsyncSession, *, warehouse_id: int) -> bool:
        statement = (
            select(StockLocation.id)
            .join(loc_models.Location, StockLocation.location_id == loc_models.Location.id)
            .where(loc_models.Location.warehouse_id == warehouse_id, StockLocation.quantity > 0)
            .limit(1)
        )
        return (await db.execute(statement)).first() is not None

    async def create(self, db: AsyncSession, *, obj_in: loc_schemas.WarehouseCreate) -> loc_models.Warehouse:
        if await self.get_by_code(db, code=obj_in.code):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Warehouse code already exists")
        return await super().create(db, obj_in=obj_in)

    async def update(
        self, db: AsyncSession, *, db_obj: loc_models.Warehouse, obj_in: loc_schemas.WarehouseUpdate
    ) -> loc_models.Warehouse:
        if obj_in.code and obj_in.code != db_obj.code:
            if await self.get_by_code(db, code=obj_in.code):
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Warehouse code already exists")
        return await super().update(db, db_obj=db_obj, obj_in=obj_in)

    async def remove(self, db: AsyncSession, *, db_obj: loc_models.Warehouse) -> loc_models.Warehouse:
        """재고가 남아 있으면 거부하고, 없으면 비활성화(soft delete)합니다."""
        if await self.has_stock(db, warehouse_id=db_obj.id):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot delete warehouse with existing stock"
            )
        logger.info("Deactivating warehouse %s (%s)", db_obj.id, db_obj.code)
        return await self.soft_delete(db, db_obj=db_obj)


warehouse = CRUDWarehouse()


# =============================================================================
# 2. 위치 (Location) CRUD
# =============================================================================
class CRUDLocation(
    CRUDBase[
        loc_models.Location,
        loc_schemas.LocationCreate,
        loc_schemas.LocationUpdate
    ]
):
    def __init__(self):
        super().__init__(model=loc_models.Location)

    async def get_by_code(self, db: AsyncSession, *, code: str) -> Optional[loc_models.Location]:
        statement = select(self.model).where(self.model.code == code.upper())
        result = await db.execute(statement)
        return result.scalars().one_or_none()

    async def get_active(
        self, db: AsyncSession, *, warehouse_id: Optional[int] = None
    ) -> List[loc_models.Location]:
        """활성 위치를 창고명, 위치명 순으로 조회합니다."""
        statement = (
            select(self.model)
            .join(loc_models.Warehouse, self.model.warehouse_id == loc_models.Warehouse.id)
            .where(self.model.is_active == True)  # noqa: E712
            .options(selectinload(self.model.warehouse))
            .order_by(loc_models.Warehouse.name, self.model.name)
        )
        if warehouse_id is not None:
            statement = statement.where(self.model.warehouse_id == warehouse_id)
        result = await db.execute(statement)
        return result.scalars().all()

    async def get_stats(self, db: AsyncSession, *, location_ids: List[int]) -> Dict[int, Dict[str, int]]:
        stats = {lid: {"total_stock": 0, "total_products": 0} for lid in location_ids}
        if not location_ids:
            return stats
        result = await db.execute(
            select(
                StockLocation.location_id,
                func.coalesce(func.sum(StockLocation.quantity), 0),
                func.count(StockLocation.product_id),
            )
            .where(StockLocation.location_id.in_(location_ids), StockLocation.quantity > 0)
            .group_by(StockLocation.location_id)
        )
        for location_id, total_stock, total_products in result.all():
            stats[location_id] = {"total_stock": int(total_stock or 0), "total_products": total_products}
        return stats

    async def get_with_stock(self, db: AsyncSession, *, id: int) -> Optional[loc_models.Location]:
        statement = (
            select(self.model)
            .where(self.model.id == id)
            .options(selectinload(self.model.stock_locations))
            .execution_options(populate_existing=True)
        )
        result = await db.execute(statement)
        return result.scalars().one_or_none()

    async def _check_warehouse(self, db: AsyncSession, warehouse_id: int) -> None:
        warehouse_obj = await db.get(loc_models.Warehouse, warehouse_id)
        if not warehouse_obj or not warehouse_obj.is_active:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Warehouse not found")

    async def create(self, db: AsyncSession, *, obj_in: loc_schemas.LocationCreate) -> loc_models.Location:
        await self._check_warehouse(db, obj_in.warehouse_id)
        if await self.get_by_code(db, code=obj_in.code):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Location code already exists")
        return await super().create(db, obj_in=obj_in)

    async def update(
        self, db: AsyncSession, *, db_obj: loc_models.Location, obj_in: loc_schemas.LocationUpdate
    ) -> loc_models.Location:
        if obj_in.warehouse_id is not None and obj_in.warehouse_id != db_obj.warehouse_id:
            await self._check_warehouse(db, obj_in.warehouse_id)
        if obj_in.code and obj_in.code != db_obj.code:
            if await self.get_by_code(db, code=obj_in.code):
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Location code already exists")
        return await super().update(db, db_obj=db_obj, obj_in=obj_in)

    async def remove(self, db: AsyncSession, *, db_obj: loc_models.Location) -> loc_models.Location:
        statement = (
            select(StockLocation.id)
            .where(StockLocation.location_id == db_obj.id, StockLocation.quantity > 0)
            .limit(1)
        )
        if (await db.execute(statement)).first():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot delete location with existing stock"
            )
        logger.info("Deactivating location %s (%s)", db_obj.id, db_obj.code)
        return await self.soft_delete(db, db_obj=db_obj)


location = CRUDLocation()
