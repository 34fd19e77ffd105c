# stockmaster/domains/ven/routers.py

"""
'ven' 도메인 (공급업체)의 API 엔드포인트를 정의하는 모듈입니다.
"""

from typing import List
from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlmodel.ext.asyncio.session import AsyncSession

from stockmaster.core import dependencies as deps
from stockmaster.domains.usr.models import User as UsrUser
from stockmaster.domains.ven import crud as ven_crud
from stockmaster.domains.ven import schemas as ven_schemas

router = APIRouter(
    tags=["Supplier Management (공급업체 관리)"],
    responses={404: {"description": "Not found"}},
)


@router.get("/suppliers", response_model=List[ven_schemas.SupplierRead], summary="공급업체 목록 조회")
async def read_suppliers(
    include_inactive: bool = False,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1),
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    return await ven_crud.supplier.get_list(db, include_inactive=include_inactive, skip=skip, limit=limit)


@router.get("/suppliers/{supplier_id}", response_model=ven_schemas.SupplierRead, summary="공급업체 상세 조회")
async def read_supplier(
    supplier_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    db_supplier = await ven_crud.supplier.get(db, supplier_id)
    if db_supplier is None:
        raise HTTPException(status_code=404, detail="Supplier not found")
    return db_supplier


@router.post("/suppliers", response_model=ven_schemas.SupplierRead, status_code=status.HTTP_201_CREATED, summary="공급업체 등록")
async def create_supplier(
    supplier_in: ven_schemas.SupplierCreate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_manager_user),
):
    return await ven_crud.supplier.create(db, obj_in=supplier_in)


@router.put("/suppliers/{supplier_id}", response_model=ven_schemas.SupplierRead, summary="공급업체 수정")
async def update_supplier(
    supplier_id: int,
    supplier_in: ven_schemas.SupplierUpdate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_manager_user),
):
    db_supplier = await ven_crud.supplier.get(db, supplier_id)
    if db_supplier is None:
        raise HTTPException(status_code=404, detail="Supplier not found")
    return await ven_crud.supplier.update(db, db_obj=db_supplier, obj_in=supplier_in)


@router.delete("/suppliers/{supplier_id}", status_code=status.HTTP_204_NO_CONTENT, summary="공급업체 삭제")
async def delete_supplier(
    supplier_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_manager_user),
):
    """입고 문서가 참조하는 공급업체는 삭제가 거부됩니다 (대신 is_active=false 로 수정)."""
    db_supplier = await ven_crud.supplier.get(db, supplier_id)
    if db_supplier is None:
        raise HTTPException(status_code=404, detail="Supplier not found")
    await ven_crud.supplier.remove(db, db_obj=db_supplier)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
