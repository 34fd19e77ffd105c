# stockmaster/domains/inv/services.py

"""
재고 수량 변경을 한 곳에서 처리하는 재고 엔진 모듈입니다.

모든 수량 변경(조정, 이동, 입고, 출고 확정)은 `apply_stock_change`를 거칩니다.
이 함수는 커밋하지 않으며, 호출한 작업이 모든 변경을 마친 뒤 한 번 커밋합니다.
예외가 발생하면 세션을 롤백하여 일부만 반영되는 일이 없도록 합니다.

불변 조건:
- StockLocation.quantity 는 0 미만이 되지 않습니다.
- available = max(0, quantity - reserved)
- 원장 항목의 quantity = new_quantity - previous_quantity
  (따라서 한 위치의 원장 합계는 현재 수량과 같습니다)
"""

import logging
from datetime import datetime, UTC
from typing import List, Optional, Tuple

from fastapi import HTTPException, status
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from stockmaster.domains.loc.models import Location
from stockmaster.domains.ven.models import Supplier
from . import models as inv_models
from . import schemas as inv_schemas

logger = logging.getLogger(__name__)

RECEIPT_PREFIX = "WH/IN/"
DELIVERY_PREFIX = "WH/OUT/"


# =============================================================================
# 1. 공통 헬퍼
# =============================================================================
def next_document_number(prefix: str, latest: Optional[str]) -> str:
    """직전 문서 번호에서 일련번호를 하나 올립니다. (WH/IN/0009 -> WH/IN/0010)"""
    sequence = 0
    if latest and latest.startswith(prefix):
        try:
            sequence = int(latest[len(prefix):])
        except ValueError:
            logger.warning("Unparseable document number '%s', restarting sequence", latest)
    return f"{prefix}{sequence + 1:04d}"


def weighted_average_cost(
    current_quantity: int, current_cost: float, incoming_quantity: int, incoming_cost: float
) -> float:
    total_quantity = current_quantity + incoming_quantity
    if total_quantity <= 0:
        return round(incoming_cost, 2)
    return round(
        (current_quantity * (current_cost or 0) + incoming_quantity * incoming_cost) / total_quantity, 2
    )


async def get_product_or_404(db: AsyncSession, product_id: int) -> inv_models.Product:
    product = await db.get(inv_models.Product, product_id)
    if not product:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    return product


async def get_location_or_404(db: AsyncSession, location_id: int, detail: str = "Location not found") -> Location:
    location = await db.get(Location, location_id)
    if not location:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)
    return location


async def get_stock_row(
    db: AsyncSession, *, product_id: int, location_id: int
) -> Optional[inv_models.StockLocation]:
    """(product, location) 재고 행을 잠금과 함께 조회합니다. SQLite 에서는 잠금이 무시됩니다."""
    statement = (
        select(inv_models.StockLocation)
        .where(
            inv_models.StockLocation.product_id == product_id,
            inv_models.StockLocation.location_id == location_id,
        )
        .with_for_update()
    )
    result = await db.execute(statement)
    return result.scalars().one_or_none()


async def get_or_create_stock_row(
    db: AsyncSession, *, product_id: int, location_id: int, average_cost: float = 0
) -> inv_models.StockLocation:
    stock = await get_stock_row(db, product_id=product_id, location_id=location_id)
    if stock is None:
        stock = inv_models.StockLocation(
            product_id=product_id,
            location_id=location_id,
            quantity=0,
            reserved=0,
            available=0,
            average_cost=average_cost or 0,
        )
        db.add(stock)
        await db.flush()
    return stock


async def apply_stock_change(
    db: AsyncSession,
    *,
    stock: inv_models.StockLocation,
    new_quantity: int,
    movement_type: inv_models.MovementType,
    document_type: inv_models.DocumentType,
    unit_cost: Optional[float] = None,
    reason: Optional[str] = None,
    reference: Optional[str] = None,
    document_id: Optional[int] = None,
    user_id: Optional[int] = None,
) -> inv_models.StockMovement:
    """
    재고 행 하나에 새 수량을 반영하고 원장 항목을 하나 추가합니다.
    new_quantity 는 0 으로 하한 처리됩니다. 커밋하지 않습니다.
    """
    previous_quantity = stock.quantity or 0
    new_quantity = max(0, new_quantity)

    stock.quantity = new_quantity
    stock.available = max(0, new_quantity - (stock.reserved or 0))
    stock.last_updated = datetime.now(UTC)
    db.add(stock)

    movement = inv_models.StockMovement(
        product_id=stock.product_id,
        location_id=stock.location_id,
        movement_type=movement_type,
        quantity=new_quantity - previous_quantity,
        previous_quantity=previous_quantity,
        new_quantity=new_quantity,
        unit_cost=unit_cost,
        reason=reason,
        reference=reference,
        document_type=document_type,
        document_id=document_id,
        user_id=user_id,
    )
    db.add(movement)
    await db.flush()

    logger.info(
        "Stock %s: product=%s location=%s %s -> %s (%+d)",
        movement_type.value, stock.product_id, stock.location_id,
        previous_quantity, new_quantity, movement.quantity,
    )
    return movement


# =============================================================================
# 2. 재고 조정 (Adjustment)
# =============================================================================
async def adjust_stock(
    db: AsyncSession, *, adjust_in: inv_schemas.StockAdjustRequest, user_id: Optional[int] = None
) -> Tuple[inv_models.StockLocation, inv_models.StockMovement]:
    await get_product_or_404(db, adjust_in.product_id)
    await get_location_or_404(db, adjust_in.location_id)

    try:
        stock = await get_or_create_stock_row(
            db,
            product_id=adjust_in.product_id,
            location_id=adjust_in.location_id,
            average_cost=adjust_in.unit_cost or 0,
        )
        if adjust_in.unit_cost is not None:
            stock.average_cost = adjust_in.unit_cost
        current = stock.quantity or 0
        if adjust_in.adjustment_type == inv_schemas.AdjustmentType.INCREASE:
            new_quantity = current + adjust_in.quantity
        elif adjust_in.adjustment_type == inv_schemas.AdjustmentType.DECREASE:
            new_quantity = max(0, current - adjust_in.quantity)
        else:
            new_quantity = adjust_in.quantity

        movement = await apply_stock_change(
            db,
            stock=stock,
            new_quantity=new_quantity,
            movement_type=inv_models.MovementType.ADJUSTMENT,
            document_type=inv_models.DocumentType.ADJUSTMENT,
            unit_cost=adjust_in.unit_cost,
            reason=adjust_in.reason or f"Stock {adjust_in.adjustment_type.value.lower()}",
            user_id=user_id,
        )
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    await db.refresh(stock)
    await db.refresh(movement)
    return stock, movement


# =============================================================================
# 3. 재고 이동 (Transfer)
# =============================================================================
async def transfer_stock(
    db: AsyncSession, *, transfer_in: inv_schemas.StockTransferRequest, user_id: Optional[int] = None
) -> Tuple[inv_models.StockLocation, inv_models.StockLocation, List[inv_models.StockMovement]]:
    if transfer_in.from_location_id == transfer_in.to_location_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="From and to locations cannot be the same"
        )

    from_location = await get_location_or_404(db, transfer_in.from_location_id, "Source location not found")
    to_location = await get_location_or_404(db, transfer_in.to_location_id, "Destination location not found")
    await get_product_or_404(db, transfer_in.product_id)

    try:
        source = await get_stock_row(db, product_id=transfer_in.product_id, location_id=from_location.id)
        if source is None or (source.quantity or 0) < transfer_in.quantity:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Insufficient stock at source location"
            )

        destination = await get_or_create_stock_row(
            db,
            product_id=transfer_in.product_id,
            location_id=to_location.id,
            average_cost=source.average_cost,
        )

        out_movement = await apply_stock_change(
            db,
            stock=source,
            new_quantity=source.quantity - transfer_in.quantity,
            movement_type=inv_models.MovementType.TRANSFER_OUT,
            document_type=inv_models.DocumentType.TRANSFER,
            unit_cost=source.average_cost,
            reason=transfer_in.reason or f"Transfer to {to_location.code}",
            user_id=user_id,
        )
        in_movement = await apply_stock_change(
            db,
            stock=destination,
            new_quantity=destination.quantity + transfer_in.quantity,
            movement_type=inv_models.MovementType.TRANSFER_IN,
            document_type=inv_models.DocumentType.TRANSFER,
            unit_cost=source.average_cost,
            reason=transfer_in.reason or f"Transfer from {from_location.code}",
            user_id=user_id,
        )
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    for obj in (source, destination, out_movement, in_movement):
        await db.refresh(obj)
    return source, destination, [out_movement, in_movement]


# =============================================================================
# 4. 입고 (Receipt)
# =============================================================================
async def _next_receipt_number(db: AsyncSession) -> str:
    statement = select(inv_models.Receipt.receipt_number).order_by(inv_models.Receipt.id.desc()).limit(1)
    latest = (await db.execute(statement)).scalar_one_or_none()
    return next_document_number(RECEIPT_PREFIX, latest)


async def receive_stock(
    db: AsyncSession, *, receive_in: inv_schemas.StockReceiveRequest, user_id: Optional[int] = None
) -> inv_models.Receipt:
    """
    공급업체로부터 입고를 처리합니다.
    Receipt(COMPLETED)와 품목별 ReceiptItem 을 만들고, 품목마다 재고를 늘리며
    평균 단가를 수량 가중 평균으로 갱신합니다.
    """
    supplier = await db.get(Supplier, receive_in.supplier_id)
    if not supplier:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Supplier not found")
    for item in receive_in.items:
        await get_product_or_404(db, item.product_id)
        await get_location_or_404(db, item.location_id)

    try:
        receipt = inv_models.Receipt(
            receipt_number=await _next_receipt_number(db),
            supplier_id=supplier.id,
            status=inv_models.ReceiptStatus.COMPLETED,
            received_at=datetime.now(UTC),
            notes=receive_in.notes,
            user_id=user_id,
        )
        db.add(receipt)
        await db.flush()

        for item in receive_in.items:
            db.add(inv_models.ReceiptItem(
                receipt_id=receipt.id,
                product_id=item.product_id,
                location_id=item.location_id,
                quantity_ordered=item.quantity,
                quantity_received=item.quantity,
                unit_cost=item.unit_cost,
                expiry_date=item.expiry_date,
            ))

            stock = await get_or_create_stock_row(
                db, product_id=item.product_id, location_id=item.location_id, average_cost=item.unit_cost
            )
            stock.average_cost = weighted_average_cost(
                stock.quantity or 0, stock.average_cost, item.quantity, item.unit_cost
            )
            await apply_stock_change(
                db,
                stock=stock,
                new_quantity=(stock.quantity or 0) + item.quantity,
                movement_type=inv_models.MovementType.RECEIPT,
                document_type=inv_models.DocumentType.RECEIPT,
                unit_cost=item.unit_cost,
                reason=f"Receipt from {supplier.name}",
                reference=receipt.receipt_number,
                document_id=receipt.id,
                user_id=user_id,
            )
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info("Receipt %s completed with %d item(s)", receipt.receipt_number, len(receive_in.items))
    await db.refresh(receipt)
    return receipt
