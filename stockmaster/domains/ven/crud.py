# stockmaster/domains/ven/crud.py

"""
'ven' 도메인 (공급업체)과 관련된 CRUD 로직을 담당하는 모듈입니다.
"""

from typing import List, Optional

from fastapi import HTTPException, status
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from stockmaster.core.crud_base import CRUDBase
from stockmaster.domains.inv.models import Receipt
from . import models as ven_models
from . import schemas as ven_schemas


class CRUDSupplier(CRUDBase[ven_models.Supplier, ven_schemas.SupplierCreate, ven_schemas.SupplierUpdate]):
    def __init__(self):
        super().__init__(model=ven_models.Supplier)

    async def get_by_code(self, db: AsyncSession, *, code: str) -> Optional[ven_models.Supplier]:
        statement = select(self.model).where(self.model.code == code.upper())
        result = await db.execute(statement)
        return result.scalars().one_or_none()

    async def get_list(
        self, db: AsyncSession, *, include_inactive: bool = False, skip: int = 0, limit: int = 100
    ) -> List[ven_models.Supplier]:
        statement = select(self.model)
        if not include_inactive:
            statement = statement.where(self.model.is_active == True)  # noqa: E712
        statement = statement.order_by(self.model.name).offset(skip).limit(limit)
        result = await db.execute(statement)
        return result.scalars().all()

    async def create(self, db: AsyncSession, *, obj_in: ven_schemas.SupplierCreate) -> ven_models.Supplier:
        if await self.get_by_code(db, code=obj_in.code):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Supplier code already exists")
        return await super().create(db, obj_in=obj_in)

    async def update(
        self, db: AsyncSession, *, db_obj: ven_models.Supplier, obj_in: ven_schemas.SupplierUpdate
    ) -> ven_models.Supplier:
        if obj_in.code and obj_in.code != db_obj.code:
            if await self.get_by_code(db, code=obj_in.code):
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Supplier code already exists")
        return await super().update(db, db_obj=db_obj, obj_in=obj_in)

    async def remove(self, db: AsyncSession, *, db_obj: ven_models.Supplier) -> ven_models.Supplier:
        """입고 이력이 있는 공급업체는 삭제할 수 없습니다."""
        statement = select(Receipt.id).where(Receipt.supplier_id == db_obj.id).limit(1)
        if (await db.execute(statement)).first():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot delete supplier with existing receipts"
            )
        return await self.delete(db, db_obj=db_obj)


supplier = CRUDSupplier()
