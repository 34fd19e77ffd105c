# stockmaster/domains/dlv/crud.py

"""
'dlv' 도메인 (고객/출고)과 관련된 CRUD 로직을 담당하는 모듈입니다.
"""

from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import selectinload
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from stockmaster.core.crud_base import CRUDBase
from stockmaster.domains.inv.models import Product
from stockmaster.domains.inv.services import DELIVERY_PREFIX, next_document_number
from stockmaster.domains.loc.models import Location
from . import models as dlv_models
from . import schemas as dlv_schemas


def _delivery_options():
    return (
        selectinload(dlv_models.DeliveryOrder.customer),
        selectinload(dlv_models.DeliveryOrder.location),
        selectinload(dlv_models.DeliveryOrder.lines).selectinload(dlv_models.DeliveryOrderLine.product),
    )


# =============================================================================
# 1. 고객 (Customer) CRUD
# =============================================================================
class CRUDCustomer(CRUDBase[dlv_models.Customer, dlv_schemas.CustomerCreate, dlv_schemas.CustomerUpdate]):
    def __init__(self):
        super().__init__(model=dlv_models.Customer)

    async def get_by_code(self, db: AsyncSession, *, code: str) -> Optional[dlv_models.Customer]:
        result = await db.execute(select(self.model).where(self.model.code == code))
        return result.scalars().one_or_none()

    async def get_active(self, db: AsyncSession) -> List[dlv_models.Customer]:
        statement = select(self.model).where(self.model.is_active == True).order_by(self.model.name)  # noqa: E712
        result = await db.execute(statement)
        return result.scalars().all()

    async def create(self, db: AsyncSession, *, obj_in: dlv_schemas.CustomerCreate) -> dlv_models.Customer:
        if await self.get_by_code(db, code=obj_in.code):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Customer code already exists")
        return await super().create(db, obj_in=obj_in)

    async def update(
        self, db: AsyncSession, *, db_obj: dlv_models.Customer, obj_in: dlv_schemas.CustomerUpdate
    ) -> dlv_models.Customer:
        if obj_in.code and obj_in.code != db_obj.code:
            if await self.get_by_code(db, code=obj_in.code):
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Customer code already exists")
        return await super().update(db, db_obj=db_obj, obj_in=obj_in)


customer = CRUDCustomer()


# =============================================================================
# 2. 출고 지시 (DeliveryOrder) CRUD
# =============================================================================
class CRUDDelivery(CRUDBase[dlv_models.DeliveryOrder, dlv_schemas.DeliveryCreate, dlv_schemas.DeliveryUpdate]):
    def __init__(self):
        super().__init__(model=dlv_models.DeliveryOrder)

    async def get_with_details(self, db: AsyncSession, *, id: int) -> Optional[dlv_models.DeliveryOrder]:
        statement = (
            select(self.model)
            .where(self.model.id == id)
            .options(*_delivery_options())
            .execution_options(populate_existing=True)
        )
        result = await db.execute(statement)
        return result.scalars().one_or_none()

    async def get_list(
        self,
        db: AsyncSession,
        *,
        status: Optional[dlv_models.DeliveryStatus] = None,
        customer_id: Optional[int] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[dlv_models.DeliveryOrder]:
        statement = select(self.model).options(*_delivery_options())
        if status is not None:
            statement = statement.where(self.model.status == status)
        if customer_id is not None:
            statement = statement.where(self.model.customer_id == customer_id)
        statement = statement.order_by(self.model.created_at.desc(), self.model.id.desc()).offset(skip).limit(limit)
        result = await db.execute(statement.execution_options(populate_existing=True))
        return result.scalars().all()

    async def next_delivery_number(self, db: AsyncSession) -> str:
        statement = select(self.model.delivery_number).order_by(self.model.id.desc()).limit(1)
        latest = (await db.execute(statement)).scalar_one_or_none()
        return next_document_number(DELIVERY_PREFIX, latest)

    async def _check_refs(
        self, db: AsyncSession, *, location_id: Optional[int] = None, customer_id: Optional[int] = None
    ) -> None:
        if location_id is not None and not await db.get(Location, location_id):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Location not found")
        if customer_id is not None and not await db.get(dlv_models.Customer, customer_id):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Customer not found")

    async def create(
        self, db: AsyncSession, *, obj_in: dlv_schemas.DeliveryCreate, user_id: Optional[int] = None
    ) -> dlv_models.DeliveryOrder:
        await self._check_refs(db, location_id=obj_in.location_id, customer_id=obj_in.customer_id)
        for line in obj_in.lines:
            if not await db.get(Product, line.product_id):
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Product {line.product_id} not found"
                )

        db_obj = dlv_models.DeliveryOrder(
            delivery_number=await self.next_delivery_number(db),
            customer_id=obj_in.customer_id,
            location_id=obj_in.location_id,
            scheduled_date=obj_in.scheduled_date,
            notes=obj_in.notes,
            status=dlv_models.DeliveryStatus.DRAFT,
            user_id=user_id,
            lines=[
                dlv_models.DeliveryOrderLine(
                    product_id=line.product_id, quantity=line.quantity, notes=line.notes
                )
                for line in obj_in.lines
            ],
        )
        db.add(db_obj)
        await db.commit()
        return db_obj

    async def update(
        self, db: AsyncSession, *, db_obj: dlv_models.DeliveryOrder, obj_in: dlv_schemas.DeliveryUpdate
    ) -> dlv_models.DeliveryOrder:
        if db_obj.status in (dlv_models.DeliveryStatus.DONE, dlv_models.DeliveryStatus.CANCELED):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Cannot update a delivery in {db_obj.status.value} status"
            )
        await self._check_refs(db, location_id=obj_in.location_id, customer_id=obj_in.customer_id)
        return await super().update(db, db_obj=db_obj, obj_in=obj_in)

    async def remove(self, db: AsyncSession, *, db_obj: dlv_models.DeliveryOrder) -> dlv_models.DeliveryOrder:
        if db_obj.status == dlv_models.DeliveryStatus.DONE:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot delete a completed delivery")
        return await self.delete(db, db_obj=db_obj)


delivery = CRUDDelivery()
