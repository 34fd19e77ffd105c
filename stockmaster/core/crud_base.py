# stockmaster/core/crud_base.py

"""
공통 CRUD(Create, Read, Update, Delete) 작업을 위한 기본 클래스 모듈입니다.
모든 메서드는 비동기(async) 환경에서 동작합니다.
"""

import logging
from typing import Generic, List, Optional, Type, TypeVar, Any, Dict, Union
from datetime import date, datetime, time, timedelta

from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession
from pydantic import BaseModel

ModelType = TypeVar("ModelType", bound=SQLModel)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)

logger = logging.getLogger(__name__)


class CRUDBase(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    """
    모든 CRUD 작업에 대한 기본 클래스를 정의합니다.
    """
    def __init__(self, model: Type[ModelType]):
        self.model = model

    async def get(self, db: AsyncSession, id: Any) -> Optional[ModelType]:
        """ID를 기준으로 단일 레코드를 조회합니다."""
        return await db.get(self.model, id)

    async def get_multi(
        self, db: AsyncSession, *, skip: int = 0, limit: int = 100, **kwargs: Any
    ) -> List[ModelType]:
        """
        여러 레코드를 조회합니다. 필터링을 위한 키워드 인자를 지원합니다.
        """
        query = select(self.model)

        for field, value in kwargs.items():
            if hasattr(self.model, field):
                query = query.where(getattr(self.model, field) == value)

        query = query.order_by(self.model.id).offset(skip).limit(limit)
        result = await db.execute(query)
        return result.scalars().all()

    async def get_by_attribute(
        self, db: AsyncSession, *, attribute: str, value: Any
    ) -> Optional[ModelType]:
        statement = select(self.model).where(getattr(self.model, attribute) == value)
        response = await db.execute(statement)
        return response.scalar_one_or_none()

    async def get_filtered(
        self,
        db: AsyncSession,
        *,
        filters: Optional[Dict[str, Any]] = None,  # 다중 속성 필터: {"attribute_name": "value"}
        date_range_field: Optional[str] = None,    # 기간 검색을 적용할 날짜 필드 이름 (예: "created_at")
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        order_by_field: Optional[str] = None,
        order_desc: bool = True,
        skip: int = 0,
        limit: int = 100
    ) -> List[ModelType]:
        """
        다중 속성 및 기간 검색 기능을 포함한 다중 조회.
        값이 None인 필터는 무시합니다.
        """
        query = select(self.model)
        conditions = []

        # 1. 다중 속성 필터링
        if filters:
            for attribute, value in filters.items():
                if value is None:
                    continue
                if hasattr(self.model, attribute):
                    conditions.append(getattr(self.model, attribute) == value)
                else:
                    logger.warning("Model %s has no attribute '%s'", self.model.__name__, attribute)

        # 2. 기간 검색 필터링
        if date_range_field and hasattr(self.model, date_range_field):
            date_field = getattr(self.model, date_range_field)
            if start_date is not None:
                conditions.append(date_field >= datetime.combine(start_date, time.min))
            if end_date is not None:
                # end_date 당일까지 포함
                conditions.append(date_field < datetime.combine(end_date + timedelta(days=1), time.min))
        elif date_range_field:
            logger.warning("Model %s has no attribute '%s' for date range filtering.", self.model.__name__, date_range_field)

        if conditions:
            query = query.where(*conditions)

        # 3. 정렬
        if order_by_field and hasattr(self.model, order_by_field):
            order_column = getattr(self.model, order_by_field)
            query = query.order_by(order_column.desc() if order_desc else order_column)
            if hasattr(self.model, 'id'):
                query = query.order_by(self.model.id.desc() if order_desc else self.model.id)
        elif hasattr(self.model, 'id'):
            query = query.order_by(self.model.id.desc())

        # 4. 페이징
        query = query.offset(skip).limit(limit)

        result = await db.execute(query)
        return result.scalars().all()

    async def create(self, db: AsyncSession, *, obj_in: CreateSchemaType) -> ModelType:
        """새로운 레코드를 생성합니다."""
        db_obj = self.model.model_validate(obj_in)
        db.add(db_obj)
        await db.commit()
        await db.refresh(db_obj)
        return db_obj

    async def update(
        self,
        db: AsyncSession,
        *,
        db_obj: ModelType,
        obj_in: Union[UpdateSchemaType, Dict[str, Any]]
    ) -> ModelType:
        """기존 레코드를 업데이트합니다. (부분 업데이트)"""
        update_data = obj_in if isinstance(obj_in, dict) else obj_in.model_dump(exclude_unset=True)
        for key, value in update_data.items():
            if hasattr(db_obj, key):
                setattr(db_obj, key, value)

        db.add(db_obj)
        await db.commit()
        await db.refresh(db_obj)
        return db_obj

    async def delete(self, db: AsyncSession, *, db_obj: ModelType) -> ModelType:
        """레코드를 삭제합니다. 삭제 가능 여부는 각 도메인의 remove()가 먼저 확인합니다."""
        await db.delete(db_obj)
        await db.commit()
        return db_obj

    async def soft_delete(self, db: AsyncSession, *, db_obj: ModelType) -> ModelType:
        """is_active 플래그를 내려 레코드를 비활성화합니다."""
        db_obj.is_active = False
        db.add(db_obj)
        await db.commit()
        await db.refresh(db_obj)
        return db_obj
