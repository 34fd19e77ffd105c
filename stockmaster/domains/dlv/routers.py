# stockmaster/domains/dlv/routers.py

"""
'dlv' 도메인 (고객/출고)의 API 엔드포인트를 정의하는 모듈입니다.

출고 지시는 DRAFT -> WAITING -> (pick/pack) READY -> (validate) DONE 순으로 진행됩니다.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlmodel.ext.asyncio.session import AsyncSession

from stockmaster.core import dependencies as deps
from stockmaster.domains.inv.schemas import LocationSummary
from stockmaster.domains.usr.models import User as UsrUser
from stockmaster.domains.dlv import crud as dlv_crud
from stockmaster.domains.dlv import models as dlv_models
from stockmaster.domains.dlv import schemas as dlv_schemas
from stockmaster.domains.dlv import services as dlv_services

router = APIRouter(
    tags=["Customer & Delivery (고객 및 출고)"],
    responses={404: {"description": "Not found"}},
)


def _delivery_read(order: dlv_models.DeliveryOrder) -> dlv_schemas.DeliveryRead:
    """고객, 위치, 품목(제품명/SKU 포함)이 로딩된 출고 지시를 응답 스키마로 변환합니다."""
    return dlv_schemas.DeliveryRead(
        id=order.id,
        delivery_number=order.delivery_number,
        customer_id=order.customer_id,
        location_id=order.location_id,
        status=order.status,
        scheduled_date=order.scheduled_date,
        delivered_date=order.delivered_date,
        notes=order.notes,
        user_id=order.user_id,
        created_at=order.created_at,
        updated_at=order.updated_at,
        customer=dlv_schemas.CustomerSummary.model_validate(order.customer) if order.customer else None,
        location=LocationSummary.model_validate(order.location) if order.location else None,
        lines=[
            dlv_schemas.DeliveryLineRead(
                id=line.id,
                product_id=line.product_id,
                product_name=line.product.name if line.product else None,
                product_sku=line.product.sku if line.product else None,
                quantity=line.quantity,
                picked=line.picked,
                packed=line.packed,
                delivered=line.delivered,
                notes=line.notes,
            )
            for line in order.lines
        ],
    )


async def _get_delivery_or_404(db: AsyncSession, delivery_id: int) -> dlv_models.DeliveryOrder:
    order = await dlv_crud.delivery.get_with_details(db, id=delivery_id)
    if order is None:
        raise HTTPException(status_code=404, detail="Delivery not found")
    return order


async def _reload(db: AsyncSession, delivery_id: int) -> dlv_schemas.DeliveryRead:
    return _delivery_read(await _get_delivery_or_404(db, delivery_id))


# =============================================================================
# 1. 고객 (Customer) 엔드포인트
# =============================================================================
@router.get("/customers", response_model=List[dlv_schemas.CustomerRead], summary="고객 목록 조회")
async def read_customers(
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    return await dlv_crud.customer.get_active(db)


@router.get("/customers/{customer_id}", response_model=dlv_schemas.CustomerDetail, summary="고객 상세 조회")
async def read_customer(
    customer_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    """고객 정보와 최근 출고 10건(품목 포함)을 반환합니다."""
    db_customer = await dlv_crud.customer.get(db, customer_id)
    if db_customer is None:
        raise HTTPException(status_code=404, detail="Customer not found")
    deliveries = await dlv_crud.delivery.get_list(db, customer_id=customer_id, limit=10)
    return dlv_schemas.CustomerDetail(
        **dlv_schemas.CustomerRead.model_validate(db_customer).model_dump(),
        recent_deliveries=[_delivery_read(d) for d in deliveries],
    )


@router.post("/customers", response_model=dlv_schemas.CustomerRead, status_code=status.HTTP_201_CREATED, summary="고객 등록")
async def create_customer(
    customer_in: dlv_schemas.CustomerCreate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    return await dlv_crud.customer.create(db, obj_in=customer_in)


@router.put("/customers/{customer_id}", response_model=dlv_schemas.CustomerRead, summary="고객 수정")
async def update_customer(
    customer_id: int,
    customer_in: dlv_schemas.CustomerUpdate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    db_customer = await dlv_crud.customer.get(db, customer_id)
    if db_customer is None:
        raise HTTPException(status_code=404, detail="Customer not found")
    return await dlv_crud.customer.update(db, db_obj=db_customer, obj_in=customer_in)


@router.delete("/customers/{customer_id}", status_code=status.HTTP_204_NO_CONTENT, summary="고객 삭제 (비활성화)")
async def delete_customer(
    customer_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_manager_user),
):
    db_customer = await dlv_crud.customer.get(db, customer_id)
    if db_customer is None:
        raise HTTPException(status_code=404, detail="Customer not found")
    await dlv_crud.customer.soft_delete(db, db_obj=db_customer)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# =============================================================================
# 2. 출고 지시 (DeliveryOrder) 엔드포인트
# =============================================================================
@router.get("/deliveries", response_model=List[dlv_schemas.DeliveryRead], summary="출고 목록 조회")
async def read_deliveries(
    status_filter: Optional[dlv_models.DeliveryStatus] = Query(None, alias="status"),
    customer_id: Optional[int] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    deliveries = await dlv_crud.delivery.get_list(
        db, status=status_filter, customer_id=customer_id, skip=skip, limit=limit
    )
    return [_delivery_read(d) for d in deliveries]


@router.get("/deliveries/{delivery_id}", response_model=dlv_schemas.DeliveryRead, summary="출고 상세 조회")
async def read_delivery(
    delivery_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    return await _reload(db, delivery_id)


@router.post("/deliveries", response_model=dlv_schemas.DeliveryRead, status_code=status.HTTP_201_CREATED, summary="출고 지시 생성")
async def create_delivery(
    delivery_in: dlv_schemas.DeliveryCreate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    """출고 번호(WH/OUT/NNNN)를 발번하고 DRAFT 상태로 생성합니다."""
    order = await dlv_crud.delivery.create(db, obj_in=delivery_in, user_id=current_user.id)
    return await _reload(db, order.id)


@router.put("/deliveries/{delivery_id}", response_model=dlv_schemas.DeliveryRead, summary="출고 지시 수정")
async def update_delivery(
    delivery_id: int,
    delivery_in: dlv_schemas.DeliveryUpdate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    order = await _get_delivery_or_404(db, delivery_id)
    await dlv_crud.delivery.update(db, db_obj=order, obj_in=delivery_in)
    return await _reload(db, delivery_id)


@router.patch("/deliveries/{delivery_id}/status", response_model=dlv_schemas.DeliveryRead, summary="출고 상태 변경")
async def update_delivery_status(
    delivery_id: int,
    status_in: dlv_schemas.DeliveryStatusUpdate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    order = await _get_delivery_or_404(db, delivery_id)
    await dlv_services.change_status(db, order=order, target=status_in.status)
    return await _reload(db, delivery_id)


@router.post("/deliveries/{delivery_id}/pick", response_model=dlv_schemas.DeliveryRead, summary="피킹")
async def pick_delivery(
    delivery_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    order = await _get_delivery_or_404(db, delivery_id)
    await dlv_services.pick_delivery(db, order=order)
    return await _reload(db, delivery_id)


@router.post("/deliveries/{delivery_id}/pack", response_model=dlv_schemas.DeliveryRead, summary="포장")
async def pack_delivery(
    delivery_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    order = await _get_delivery_or_404(db, delivery_id)
    await dlv_services.pack_delivery(db, order=order)
    return await _reload(db, delivery_id)


@router.post("/deliveries/{delivery_id}/validate", response_model=dlv_schemas.DeliveryRead, summary="출고 확정")
async def validate_delivery(
    delivery_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    """출고 위치의 재고를 차감하고 상태를 DONE 으로 변경합니다."""
    order = await _get_delivery_or_404(db, delivery_id)
    await dlv_services.validate_delivery(db, order=order, user_id=current_user.id)
    return await _reload(db, delivery_id)


@router.delete("/deliveries/{delivery_id}", status_code=status.HTTP_204_NO_CONTENT, summary="출고 지시 삭제")
async def delete_delivery(
    delivery_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_manager_user),
):
    order = await _get_delivery_or_404(db, delivery_id)
    await dlv_crud.delivery.remove(db, db_obj=order)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
