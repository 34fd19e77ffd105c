# stockmaster/domains/inv/routers.py

"""
'inv' 도메인 (재고 관리)의 API 엔드포인트를 정의하는 모듈입니다.

- /categories, /products : 제품 마스터 (조회는 모든 사용자, 변경은 재고 관리자 이상)
- /stock/*               : 재고 조정, 이동, 입고와 재고 현황/원장 조회
- /receipts              : 입고 문서 조회
"""

from typing import List, Optional
from datetime import date
from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlmodel.ext.asyncio.session import AsyncSession

from stockmaster.core import dependencies as deps
from stockmaster.domains.usr.models import User as UsrUser
from stockmaster.domains.inv import crud as inv_crud
from stockmaster.domains.inv import models as inv_models
from stockmaster.domains.inv import schemas as inv_schemas
from stockmaster.domains.inv import services as inv_services

router = APIRouter(
    tags=["Inventory Management (재고 관리)"],
    responses={404: {"description": "Not found"}},
)


def _stock_row(stock: inv_models.StockLocation, schema):
    """재고 행 ORM 객체를 위치/창고 요약이 포함된 응답 스키마로 변환합니다."""
    return schema(
        **inv_schemas.StockLocationRead.model_validate(stock).model_dump(),
        location=inv_schemas.LocationSummary.model_validate(stock.location),
        warehouse=inv_schemas.WarehouseSummary.model_validate(stock.location.warehouse),
    )


# =============================================================================
# 1. 제품 분류 (ProductCategory) 엔드포인트
# =============================================================================
@router.get("/categories", response_model=List[inv_schemas.ProductCategoryRead], summary="제품 분류 목록 조회")
async def read_categories(
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    return await inv_crud.category.get_all(db)


@router.post("/categories", response_model=inv_schemas.ProductCategoryRead, status_code=status.HTTP_201_CREATED, summary="제품 분류 생성")
async def create_category(
    category_in: inv_schemas.ProductCategoryCreate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_manager_user),
):
    return await inv_crud.category.create(db, obj_in=category_in)


@router.put("/categories/{category_id}", response_model=inv_schemas.ProductCategoryRead, summary="제품 분류 수정")
async def update_category(
    category_id: int,
    category_in: inv_schemas.ProductCategoryUpdate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_manager_user),
):
    db_category = await inv_crud.category.get(db, category_id)
    if db_category is None:
        raise HTTPException(status_code=404, detail="Category not found")
    return await inv_crud.category.update(db, db_obj=db_category, obj_in=category_in)


@router.delete("/categories/{category_id}", status_code=status.HTTP_204_NO_CONTENT, summary="제품 분류 삭제")
async def delete_category(
    category_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_manager_user),
):
    db_category = await inv_crud.category.get(db, category_id)
    if db_category is None:
        raise HTTPException(status_code=404, detail="Category not found")
    await inv_crud.category.remove(db, db_obj=db_category)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# =============================================================================
# 2. 제품 (Product) 엔드포인트
# =============================================================================
@router.get("/products", response_model=List[inv_schemas.ProductReadWithStock], summary="제품 목록 조회 (재고 합계 포함)")
async def read_products(
    category_id: Optional[int] = None,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    products = await inv_crud.product.get_active(db, category_id=category_id)
    totals = await inv_crud.product.get_stock_totals(db, product_ids=[p.id for p in products])
    return [
        inv_schemas.ProductReadWithStock(
            **inv_schemas.ProductRead.model_validate(p).model_dump(),
            category_name=p.category.name if p.category else None,
            **totals[p.id],
        )
        for p in products
    ]


@router.get("/products/{product_id}", response_model=inv_schemas.ProductDetail, summary="제품 상세 조회")
async def read_product(
    product_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    """제품 정보와 분류, 위치별 재고, 최근 원장 20건을 반환합니다."""
    db_product = await inv_crud.product.get_detail(db, id=product_id)
    if db_product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    movements = await inv_crud.stock_movement.get_recent_for_product(db, product_id=product_id)
    stock_rows = [_stock_row(s, inv_schemas.ProductStockRow) for s in db_product.stock_locations]
    return inv_schemas.ProductDetail(
        **inv_schemas.ProductRead.model_validate(db_product).model_dump(),
        category=(
            inv_schemas.ProductCategoryRead.model_validate(db_product.category) if db_product.category else None
        ),
        stock_locations=stock_rows,
        recent_movements=[inv_schemas.StockMovementRead.model_validate(m) for m in movements],
        total_stock=sum(row.quantity for row in stock_rows),
        total_available=sum(row.available for row in stock_rows),
    )


@router.post("/products", response_model=inv_schemas.ProductRead, status_code=status.HTTP_201_CREATED, summary="제품 등록")
async def create_product(
    product_in: inv_schemas.ProductCreate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_manager_user),
):
    return await inv_crud.product.create(db, obj_in=product_in)


@router.put("/products/{product_id}", response_model=inv_schemas.ProductRead, summary="제품 수정")
async def update_product(
    product_id: int,
    product_in: inv_schemas.ProductUpdate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_manager_user),
):
    db_product = await inv_crud.product.get(db, product_id)
    if db_product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return await inv_crud.product.update(db, db_obj=db_product, obj_in=product_in)


@router.delete("/products/{product_id}", status_code=status.HTTP_204_NO_CONTENT, summary="제품 삭제")
async def delete_product(
    product_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_manager_user),
):
    db_product = await inv_crud.product.get(db, product_id)
    if db_product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    await inv_crud.product.remove(db, db_obj=db_product)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# =============================================================================
# 3. 재고 변경 엔드포인트 (조정 / 이동 / 입고)
# =============================================================================
@router.post("/stock/adjust", response_model=inv_schemas.StockAdjustResponse, summary="재고 조정")
async def adjust_stock(
    adjust_in: inv_schemas.StockAdjustRequest,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    """
    INCREASE(증가), DECREASE(감소, 0 미만은 0), SET(지정 수량) 중 하나로 재고를 조정합니다.
    재고 행이 없으면 새로 만듭니다.
    """
    stock, movement = await inv_services.adjust_stock(db, adjust_in=adjust_in, user_id=current_user.id)
    return {"stock": stock, "movement": movement}


@router.post("/stock/transfer", response_model=inv_schemas.StockTransferResponse, summary="위치 간 재고 이동")
async def transfer_stock(
    transfer_in: inv_schemas.StockTransferRequest,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    source, destination, movements = await inv_services.transfer_stock(
        db, transfer_in=transfer_in, user_id=current_user.id
    )
    return {"source": source, "destination": destination, "movements": movements}


@router.post("/stock/receive", response_model=inv_schemas.ReceiptDetail, status_code=status.HTTP_201_CREATED, summary="입고 처리")
async def receive_stock(
    receive_in: inv_schemas.StockReceiveRequest,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    receipt = await inv_services.receive_stock(db, receive_in=receive_in, user_id=current_user.id)
    return await inv_crud.receipt.get_with_items(db, id=receipt.id)


# =============================================================================
# 4. 재고 조회 엔드포인트
# =============================================================================
@router.get("/stock", response_model=inv_schemas.StockOverview, summary="재고 현황 (통계 포함)")
async def read_stock_overview(
    warehouse_id: Optional[int] = None,
    location_id: Optional[int] = None,
    product_id: Optional[int] = None,
    low_stock: bool = False,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    """
    재고 행 목록과 통계를 반환합니다.
    통계는 low_stock 필터를 적용하기 전의 행을 기준으로 계산합니다.
    """
    rows = await inv_crud.stock_location.get_overview_rows(
        db, warehouse_id=warehouse_id, location_id=location_id, product_id=product_id
    )
    items = [
        inv_schemas.StockOverviewRow(
            **inv_schemas.StockLocationRead.model_validate(s).model_dump(),
            product=inv_schemas.ProductSummary.model_validate(s.product),
            location=inv_schemas.LocationSummary.model_validate(s.location),
            warehouse=inv_schemas.WarehouseSummary.model_validate(s.location.warehouse),
            is_low_stock=s.quantity <= s.product.reorder_level,
        )
        for s in rows
    ]
    statistics = inv_schemas.StockStatistics(
        total_products=len({item.product_id for item in items}),
        total_stock=sum(item.quantity for item in items),
        low_stock_items=sum(1 for item in items if item.is_low_stock),
        total_locations=len({item.location_id for item in items}),
    )
    if low_stock:
        items = [item for item in items if item.is_low_stock]
    return inv_schemas.StockOverview(items=items, statistics=statistics)


@router.get("/stock/products/{product_id}", response_model=inv_schemas.ProductStock, summary="제품별 위치 재고")
async def read_product_stock(
    product_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    db_product = await inv_services.get_product_or_404(db, product_id)
    rows = await inv_crud.stock_location.get_for_product(db, product_id=product_id)
    return inv_schemas.ProductStock(
        product=inv_schemas.ProductSummary.model_validate(db_product),
        locations=[_stock_row(s, inv_schemas.ProductStockRow) for s in rows],
        total_stock=sum(s.quantity for s in rows),
    )


@router.get("/stock/movements", response_model=List[inv_schemas.StockMovementRead], summary="재고 원장 조회")
async def read_stock_movements(
    product_id: Optional[int] = None,
    location_id: Optional[int] = None,
    movement_type: Optional[inv_models.MovementType] = None,
    start_date: Optional[date] = Query(None, description="조회 시작일 (YYYY-MM-DD)"),
    end_date: Optional[date] = Query(None, description="조회 종료일 (YYYY-MM-DD, 당일 포함)"),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=500),
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    return await inv_crud.stock_movement.search(
        db,
        product_id=product_id,
        location_id=location_id,
        movement_type=movement_type,
        start_date=start_date,
        end_date=end_date,
        skip=skip,
        limit=limit,
    )


# =============================================================================
# 5. 입고 (Receipt) 조회 엔드포인트
# =============================================================================
@router.get("/receipts", response_model=List[inv_schemas.ReceiptRead], summary="입고 목록 조회")
async def read_receipts(
    supplier_id: Optional[int] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=500),
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    return await inv_crud.receipt.get_list(db, supplier_id=supplier_id, skip=skip, limit=limit)


@router.get("/receipts/{receipt_id}", response_model=inv_schemas.ReceiptDetail, summary="입고 상세 조회")
async def read_receipt(
    receipt_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    db_receipt = await inv_crud.receipt.get_with_items(db, id=receipt_id)
    if db_receipt is None:
        raise HTTPException(status_code=404, detail="Receipt not found")
    return db_receipt
