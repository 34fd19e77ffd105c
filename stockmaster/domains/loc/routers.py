# stockmaster/domains/loc/routers.py

"""
'loc' 도메인 (창고/위치)의 API 엔드포인트를 정의하는 모듈입니다.

조회는 인증된 모든 사용자, 생성/수정/삭제는 재고 관리자 이상만 가능합니다.
삭제는 비활성화(soft delete)이며, 재고가 남아 있으면 거부됩니다.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlmodel.ext.asyncio.session import AsyncSession

from stockmaster.core import dependencies as deps
from stockmaster.domains.usr.models import User as UsrUser
from stockmaster.domains.loc import crud as loc_crud
from stockmaster.domains.loc import schemas as loc_schemas

router = APIRouter(
    tags=["Warehouse & Location (창고 및 위치)"],
    responses={404: {"description": "Not found"}},
)


# =============================================================================
# 1. 창고 (Warehouse) 엔드포인트
# =============================================================================
@router.get("/warehouses", response_model=List[loc_schemas.WarehouseReadWithStats], summary="창고 목록 조회 (통계 포함)")
async def read_warehouses(
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    warehouses = await loc_crud.warehouse.get_active(db)
    stats = await loc_crud.warehouse.get_stats(db, warehouse_ids=[w.id for w in warehouses])
    return [
        loc_schemas.WarehouseReadWithStats(
            **loc_schemas.WarehouseRead.model_validate(w).model_dump(), **stats[w.id]
        )
        for w in warehouses
    ]


@router.get("/warehouses/{warehouse_id}", response_model=loc_schemas.WarehouseDetail, summary="창고 상세 조회")
async def read_warehouse(
    warehouse_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    """창고 정보와 활성 위치, 위치별 재고 행을 함께 반환합니다."""
    db_warehouse = await loc_crud.warehouse.get_with_locations(db, id=warehouse_id)
    if db_warehouse is None:
        raise HTTPException(status_code=404, detail="Warehouse not found")
    return loc_schemas.WarehouseDetail(
        **loc_schemas.WarehouseRead.model_validate(db_warehouse).model_dump(),
        locations=[
            loc_schemas.LocationDetail.model_validate(loc)
            for loc in sorted(db_warehouse.locations, key=lambda x: x.name)
            if loc.is_active
        ],
    )


@router.post("/warehouses", response_model=loc_schemas.WarehouseRead, status_code=status.HTTP_201_CREATED, summary="창고 생성")
async def create_warehouse(
    warehouse_in: loc_schemas.WarehouseCreate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_manager_user),
):
    return await loc_crud.warehouse.create(db, obj_in=warehouse_in)


@router.put("/warehouses/{warehouse_id}", response_model=loc_schemas.WarehouseRead, summary="창고 수정")
async def update_warehouse(
    warehouse_id: int,
    warehouse_in: loc_schemas.WarehouseUpdate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_manager_user),
):
    db_warehouse = await loc_crud.warehouse.get(db, warehouse_id)
    if db_warehouse is None:
        raise HTTPException(status_code=404, detail="Warehouse not found")
    return await loc_crud.warehouse.update(db, db_obj=db_warehouse, obj_in=warehouse_in)


@router.delete("/warehouses/{warehouse_id}", status_code=status.HTTP_204_NO_CONTENT, summary="창고 삭제 (비활성화)")
async def delete_warehouse(
    warehouse_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_manager_user),
):
    db_warehouse = await loc_crud.warehouse.get(db, warehouse_id)
    if db_warehouse is None:
        raise HTTPException(status_code=404, detail="Warehouse not found")
    await loc_crud.warehouse.remove(db, db_obj=db_warehouse)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# =============================================================================
# 2. 위치 (Location) 엔드포인트
# =============================================================================
@router.get("/locations", response_model=List[loc_schemas.LocationReadWithStats], summary="위치 목록 조회 (통계 포함)")
async def read_locations(
    warehouse_id: Optional[int] = None,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    """
    활성 위치 목록을 창고명, 위치명 순으로 조회합니다.
    - `warehouse_id`: 특정 창고의 위치만 조회
    """
    locations = await loc_crud.location.get_active(db, warehouse_id=warehouse_id)
    stats = await loc_crud.location.get_stats(db, location_ids=[loc.id for loc in locations])
    return [
        loc_schemas.LocationReadWithStats(
            **loc_schemas.LocationRead.model_validate(loc).model_dump(),
            warehouse_name=loc.warehouse.name if loc.warehouse else None,
            **stats[loc.id],
        )
        for loc in locations
    ]


@router.get("/locations/{location_id}", response_model=loc_schemas.LocationDetail, summary="위치 상세 조회")
async def read_location(
    location_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    db_location = await loc_crud.location.get_with_stock(db, id=location_id)
    if db_location is None:
        raise HTTPException(status_code=404, detail="Location not found")
    return db_location


@router.post("/locations", response_model=loc_schemas.LocationRead, status_code=status.HTTP_201_CREATED, summary="위치 생성")
async def create_location(
    location_in: loc_schemas.LocationCreate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_manager_user),
):
    return await loc_crud.location.create(db, obj_in=location_in)


@router.put("/locations/{location_id}", response_model=loc_schemas.LocationRead, summary="위치 수정")
async def update_location(
    location_id: int,
    location_in: loc_schemas.LocationUpdate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_manager_user),
):
    db_location = await loc_crud.location.get(db, location_id)
    if db_location is None:
        raise HTTPException(status_code=404, detail="Location not found")
    return await loc_crud.location.update(db, db_obj=db_location, obj_in=location_in)


@router.delete("/locations/{location_id}", status_code=status.HTTP_204_NO_CONTENT, summary="위치 삭제 (비활성화)")
async def delete_location(
    location_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_manager_user),
):
    db_location = await loc_crud.location.get(db, location_id)
    if db_location is None:
        raise HTTPException(status_code=404, detail="Location not found")
    await loc_crud.location.remove(db, db_obj=db_location)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
