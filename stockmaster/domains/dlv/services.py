# stockmaster/domains/dlv/services.py

"""
출고 지시의 상태 전이 규칙과 피킹/포장/출고 확정 작업을 담당하는 모듈입니다.

상태 전이는 ALLOWED_TRANSITIONS 표 하나로 검사합니다.
DONE 으로의 전이는 validate_delivery 에서만 허용되며, 재고 차감은 inv 재고 엔진을 거칩니다.
"""

import logging
from datetime import datetime, UTC
from typing import Optional

from fastapi import HTTPException, status
from sqlmodel.ext.asyncio.session import AsyncSession

from stockmaster.domains.inv import models as inv_models
from stockmaster.domains.inv import services as inv_services
from .models import DeliveryOrder, DeliveryStatus

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS = {
    DeliveryStatus.DRAFT: {DeliveryStatus.WAITING, DeliveryStatus.CANCELED},
    DeliveryStatus.WAITING: {DeliveryStatus.READY, DeliveryStatus.DRAFT, DeliveryStatus.CANCELED},
    DeliveryStatus.READY: {DeliveryStatus.DONE, DeliveryStatus.WAITING, DeliveryStatus.CANCELED},
    DeliveryStatus.DONE: set(),
    DeliveryStatus.CANCELED: {DeliveryStatus.DRAFT},
}


def can_transition(current: DeliveryStatus, target: DeliveryStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, set())


def ensure_transition(current: DeliveryStatus, target: DeliveryStatus, *, via_validate: bool = False) -> None:
    """허용되지 않는 전이이면 400 을 발생시킵니다. DONE 은 validate 경로에서만 허용됩니다."""
    if not can_transition(current, target) or (target == DeliveryStatus.DONE and not via_validate):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Cannot change status from {current.value} to {target.value}"
        )


def _require_status(order: DeliveryOrder, *allowed: DeliveryStatus, detail: str) -> None:
    if order.status not in allowed:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


async def change_status(db: AsyncSession, *, order: DeliveryOrder, target: DeliveryStatus) -> DeliveryOrder:
    ensure_transition(order.status, target)
    logger.info("Delivery %s: %s -> %s", order.delivery_number, order.status.value, target.value)
    order.status = target
    db.add(order)
    await db.commit()
    return order


async def pick_delivery(db: AsyncSession, *, order: DeliveryOrder) -> DeliveryOrder:
    _require_status(order, DeliveryStatus.WAITING, detail="Delivery must be in WAITING status to pick items")
    for line in order.lines:
        line.picked = line.quantity
        db.add(line)
    order.status = DeliveryStatus.READY
    db.add(order)
    await db.commit()
    return order


async def pack_delivery(db: AsyncSession, *, order: DeliveryOrder) -> DeliveryOrder:
    _require_status(
        order, DeliveryStatus.WAITING, DeliveryStatus.READY,
        detail="Delivery must be in WAITING or READY status to pack items"
    )
    for line in order.lines:
        quantity = line.picked if line.picked > 0 else line.quantity
        line.picked = quantity
        line.packed = quantity
        db.add(line)
    order.status = DeliveryStatus.READY
    db.add(order)
    await db.commit()
    return order


async def validate_delivery(
    db: AsyncSession, *, order: DeliveryOrder, user_id: Optional[int] = None
) -> DeliveryOrder:
    """
    출고를 확정합니다. 품목마다 포장 수량(없으면 주문 수량)만큼 출고 위치의 재고를 줄이고
    DELIVERY 원장 항목을 남깁니다. 재고가 부족하면 0 으로 하한 처리하고 경고를 남깁니다.
    모든 변경은 하나의 트랜잭션으로 커밋됩니다.
    """
    _require_status(order, DeliveryStatus.READY, detail="Delivery must be in READY status to validate")
    ensure_transition(order.status, DeliveryStatus.DONE, via_validate=True)

    try:
        for line in order.lines:
            quantity = line.packed if line.packed > 0 else line.quantity
            line.delivered = quantity
            db.add(line)

            stock = await inv_services.get_or_create_stock_row(
                db, product_id=line.product_id, location_id=order.location_id
            )
            if stock.quantity < quantity:
                logger.warning(
                    "Delivery %s: product=%s location=%s has %s on hand, %s requested; clamping to 0",
                    order.delivery_number, line.product_id, order.location_id, stock.quantity, quantity,
                )
            await inv_services.apply_stock_change(
                db,
                stock=stock,
                new_quantity=stock.quantity - quantity,
                movement_type=inv_models.MovementType.DELIVERY,
                document_type=inv_models.DocumentType.DELIVERY,
                unit_cost=stock.average_cost,
                reason=f"Delivery {order.delivery_number}",
                reference=order.delivery_number,
                document_id=order.id,
                user_id=user_id,
            )

        order.status = DeliveryStatus.DONE
        order.delivered_date = datetime.now(UTC)
        db.add(order)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info("Delivery %s validated", order.delivery_number)
    return order
