# tests/domains/test_dlv_n.py

"""
'dlv' 도메인 (고객 및 출고) API 통합 테스트입니다.

- 고객 CRUD 와 최근 출고 조회
- 출고 지시 생성 (WH/OUT/NNNN 발번), 수정, 삭제
- 상태 전이 규칙 (DONE 은 validate 로만 도달)
- 피킹 / 포장 / 출고 확정과 재고 차감 (부족 시 0 으로 하한 처리)
"""

import pytest
from httpx import AsyncClient
from sqlalchemy import func
from sqlmodel import select

from stockmaster.domains.dlv import services as dlv_services
from stockmaster.domains.dlv.models import DeliveryStatus
from stockmaster.domains.inv import models as inv_models

CUSTOMERS = "/api/v1/dlv/customers"
DELIVERIES = "/api/v1/dlv/deliveries"


@pytest.fixture
def customer_payload() -> dict:
    return {"name": "Bright Retail", "code": "BR-01", "email": "buyer@brightretail.com", "phone": "555-0199"}


async def _create_delivery(client: AsyncClient, location_id: int, lines: list, customer_id: int = None) -> dict:
    payload = {"location_id": location_id, "lines": lines}
    if customer_id is not None:
        payload["customer_id"] = customer_id
    response = await client.post(DELIVERIES, json=payload)
    assert response.status_code == 201, response.text
    return response.json()


async def _set_status(client: AsyncClient, delivery_id: int, target: str):
    return await client.patch(f"{DELIVERIES}/{delivery_id}/status", json={"status": target})


# =============================================================================
# 1. 상태 전이 표
# =============================================================================
def test_transition_table():
    assert dlv_services.can_transition(DeliveryStatus.DRAFT, DeliveryStatus.WAITING)
    assert dlv_services.can_transition(DeliveryStatus.CANCELED, DeliveryStatus.DRAFT)
    assert not dlv_services.can_transition(DeliveryStatus.DRAFT, DeliveryStatus.READY)
    assert not dlv_services.can_transition(DeliveryStatus.DONE, DeliveryStatus.CANCELED)
    # DONE 은 표에는 있지만 validate 경로에서만 허용됩니다.
    assert dlv_services.can_transition(DeliveryStatus.READY, DeliveryStatus.DONE)


# =============================================================================
# 2. 고객 (Customer)
# =============================================================================
@pytest.mark.asyncio
async def test_customer_crud(authorized_client: AsyncClient, manager_client: AsyncClient, customer_payload: dict):
    response = await authorized_client.post(CUSTOMERS, json=customer_payload)
    print(f"Response JSON: {response.json()}")
    assert response.status_code == 201
    customer_id = response.json()["id"]

    response = await authorized_client.post(CUSTOMERS, json=customer_payload)
    assert response.status_code == 400
    assert response.json()["detail"] == "Customer code already exists"

    response = await authorized_client.put(f"{CUSTOMERS}/{customer_id}", json={"phone": "555-0200"})
    assert response.status_code == 200
    assert response.json()["phone"] == "555-0200"

    response = await authorized_client.get(CUSTOMERS)
    assert [c["code"] for c in response.json()] == ["BR-01"]

    # 삭제(비활성화)는 재고 관리자 이상만 가능합니다.
    response = await authorized_client.delete(f"{CUSTOMERS}/{customer_id}")
    assert response.status_code == 403
    response = await manager_client.delete(f"{CUSTOMERS}/{customer_id}")
    assert response.status_code == 204

    response = await authorized_client.get(CUSTOMERS)
    assert response.json() == []
    response = await authorized_client.get(f"{CUSTOMERS}/{customer_id}")
    assert response.status_code == 200
    assert response.json()["is_active"] is False


@pytest.mark.asyncio
async def test_customer_detail_includes_recent_deliveries(
    authorized_client: AsyncClient, customer_payload: dict, location: dict, product: dict
):
    customer = (await authorized_client.post(CUSTOMERS, json=customer_payload)).json()
    for _ in range(3):
        await _create_delivery(
            authorized_client, location["id"], [{"product_id": product["id"], "quantity": 1}], customer["id"]
        )

    response = await authorized_client.get(f"{CUSTOMERS}/{customer['id']}")
    assert response.status_code == 200
    body = response.json()
    assert [d["delivery_number"] for d in body["recent_deliveries"]] == ["WH/OUT/0003", "WH/OUT/0002", "WH/OUT/0001"]
    assert body["recent_deliveries"][0]["lines"][0]["product_sku"] == "SKU-001"

    response = await authorized_client.get(f"{CUSTOMERS}/9999")
    assert response.status_code == 404
    assert response.json()["detail"] == "Customer not found"


# =============================================================================
# 3. 출고 지시 생성 / 수정 / 삭제
# =============================================================================
@pytest.mark.asyncio
async def test_create_delivery(authorized_client: AsyncClient, customer_payload: dict, location: dict, product: dict):
    customer = (await authorized_client.post(CUSTOMERS, json=customer_payload)).json()
    delivery = await _create_delivery(
        authorized_client,
        location["id"],
        [{"product_id": product["id"], "quantity": 4, "notes": "fragile"}],
        customer["id"],
    )

    assert delivery["delivery_number"] == "WH/OUT/0001"
    assert delivery["status"] == "DRAFT"
    assert delivery["customer"]["code"] == "BR-01"
    assert delivery["location"]["code"] == "A-01"
    line = delivery["lines"][0]
    assert line["product_name"] == "Steel Bolt"
    assert line["product_sku"] == "SKU-001"
    assert (line["quantity"], line["picked"], line["packed"], line["delivered"]) == (4, 0, 0, 0)

    second = await _create_delivery(authorized_client, location["id"], [{"product_id": product["id"], "quantity": 1}])
    assert second["delivery_number"] == "WH/OUT/0002"
    assert second["customer"] is None


@pytest.mark.asyncio
async def test_create_delivery_invalid_references(authorized_client: AsyncClient, location: dict, product: dict):
    line = {"product_id": product["id"], "quantity": 1}

    response = await authorized_client.post(DELIVERIES, json={"location_id": 9999, "lines": [line]})
    assert response.status_code == 400
    assert response.json()["detail"] == "Location not found"

    response = await authorized_client.post(
        DELIVERIES, json={"location_id": location["id"], "customer_id": 9999, "lines": [line]}
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Customer not found"

    response = await authorized_client.post(
        DELIVERIES, json={"location_id": location["id"], "lines": [{"product_id": 9999, "quantity": 1}]}
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Product 9999 not found"

    response = await authorized_client.post(DELIVERIES, json={"location_id": location["id"], "lines": []})
    assert response.status_code == 422

    response = await authorized_client.post(
        DELIVERIES, json={"location_id": location["id"], "lines": [{"product_id": product["id"], "quantity": 0}]}
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_list_deliveries_filters(authorized_client: AsyncClient, customer_payload: dict, location: dict, product: dict):
    customer = (await authorized_client.post(CUSTOMERS, json=customer_payload)).json()
    line = [{"product_id": product["id"], "quantity": 1}]
    first = await _create_delivery(authorized_client, location["id"], line, customer["id"])
    await _create_delivery(authorized_client, location["id"], line)
    await _set_status(authorized_client, first["id"], "WAITING")

    response = await authorized_client.get(DELIVERIES)
    assert [d["delivery_number"] for d in response.json()] == ["WH/OUT/0002", "WH/OUT/0001"]

    response = await authorized_client.get(DELIVERIES, params={"status": "WAITING"})
    assert [d["id"] for d in response.json()] == [first["id"]]

    response = await authorized_client.get(DELIVERIES, params={"customer_id": customer["id"]})
    assert [d["id"] for d in response.json()] == [first["id"]]

    response = await authorized_client.get(f"{DELIVERIES}/9999")
    assert response.status_code == 404
    assert response.json()["detail"] == "Delivery not found"


@pytest.mark.asyncio
async def test_update_delivery(authorized_client: AsyncClient, location: dict, other_location: dict, product: dict):
    delivery = await _create_delivery(authorized_client, location["id"], [{"product_id": product["id"], "quantity": 2}])

    response = await authorized_client.put(
        f"{DELIVERIES}/{delivery['id']}", json={"location_id": other_location["id"], "notes": "Dock 2"}
    )
    assert response.status_code == 200
    assert response.json()["location"]["code"] == "B-01"
    assert response.json()["notes"] == "Dock 2"

    response = await authorized_client.put(f"{DELIVERIES}/{delivery['id']}", json={"location_id": 9999})
    assert response.status_code == 400

    await _set_status(authorized_client, delivery["id"], "CANCELED")
    response = await authorized_client.put(f"{DELIVERIES}/{delivery['id']}", json={"notes": "too late"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Cannot update a delivery in CANCELED status"


@pytest.mark.asyncio
async def test_delete_delivery(
    authorized_client: AsyncClient, manager_client: AsyncClient, location: dict, product: dict
):
    delivery = await _create_delivery(authorized_client, location["id"], [{"product_id": product["id"], "quantity": 2}])

    response = await authorized_client.delete(f"{DELIVERIES}/{delivery['id']}")
    assert response.status_code == 403

    response = await manager_client.delete(f"{DELIVERIES}/{delivery['id']}")
    assert response.status_code == 204
    response = await manager_client.get(f"{DELIVERIES}/{delivery['id']}")
    assert response.status_code == 404


# =============================================================================
# 4. 상태 전이 / 피킹 / 포장 / 출고 확정
# =============================================================================
@pytest.mark.asyncio
async def test_status_transitions(authorized_client: AsyncClient, location: dict, product: dict):
    delivery = await _create_delivery(authorized_client, location["id"], [{"product_id": product["id"], "quantity": 1}])
    delivery_id = delivery["id"]

    response = await _set_status(authorized_client, delivery_id, "READY")
    assert response.status_code == 400
    assert response.json()["detail"] == "Cannot change status from DRAFT to READY"

    response = await _set_status(authorized_client, delivery_id, "WAITING")
    assert response.status_code == 200
    assert response.json()["status"] == "WAITING"

    response = await _set_status(authorized_client, delivery_id, "READY")
    assert response.status_code == 200

    # READY -> DONE 은 상태 변경 API 로는 불가능합니다.
    response = await _set_status(authorized_client, delivery_id, "DONE")
    assert response.status_code == 400
    assert response.json()["detail"] == "Cannot change status from READY to DONE"

    response = await _set_status(authorized_client, delivery_id, "CANCELED")
    assert response.status_code == 200
    response = await _set_status(authorized_client, delivery_id, "DRAFT")
    assert response.status_code == 200
    assert response.json()["status"] == "DRAFT"

    response = await _set_status(authorized_client, delivery_id, "SHIPPED")
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_pick_pack_validate_flow(
    authorized_client: AsyncClient, location: dict, product_factory, set_stock, db_session
):
    bolt = await product_factory("BOLT")
    nut = await product_factory("NUT")
    await set_stock(bolt["id"], location["id"], 10, unit_cost=2.0)
    await set_stock(nut["id"], location["id"], 10)
    delivery = await _create_delivery(
        authorized_client,
        location["id"],
        [{"product_id": bolt["id"], "quantity": 3}, {"product_id": nut["id"], "quantity": 5}],
    )
    delivery_id = delivery["id"]

    response = await authorized_client.post(f"{DELIVERIES}/{delivery_id}/pick")
    assert response.status_code == 400
    assert response.json()["detail"] == "Delivery must be in WAITING status to pick items"

    response = await authorized_client.post(f"{DELIVERIES}/{delivery_id}/validate")
    assert response.status_code == 400
    assert response.json()["detail"] == "Delivery must be in READY status to validate"

    await _set_status(authorized_client, delivery_id, "WAITING")
    response = await authorized_client.post(f"{DELIVERIES}/{delivery_id}/pick")
    assert response.status_code == 200
    assert response.json()["status"] == "READY"
    assert [line["picked"] for line in response.json()["lines"]] == [3, 5]

    response = await authorized_client.post(f"{DELIVERIES}/{delivery_id}/pack")
    assert response.status_code == 200
    assert [line["packed"] for line in response.json()["lines"]] == [3, 5]

    response = await authorized_client.post(f"{DELIVERIES}/{delivery_id}/validate")
    print(f"Response JSON: {response.json()}")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "DONE"
    assert body["delivered_date"] is not None
    assert [line["delivered"] for line in body["lines"]] == [3, 5]

    response = await authorized_client.get("/api/v1/inv/stock", params={"location_id": location["id"]})
    quantities = {item["product"]["sku"]: item["quantity"] for item in response.json()["items"]}
    assert quantities == {"BOLT": 7, "NUT": 5}

    response = await authorized_client.get(
        "/api/v1/inv/stock/movements", params={"product_id": bolt["id"], "movement_type": "DELIVERY"}
    )
    movement = response.json()[0]
    assert movement["quantity"] == -3
    assert movement["reference"] == "WH/OUT/0001"
    assert movement["reason"] == "Delivery WH/OUT/0001"
    assert movement["document_type"] == "DELIVERY"
    assert movement["document_id"] == delivery_id
    assert movement["unit_cost"] == 2.0

    # 완료된 출고는 수정, 상태 변경, 삭제가 모두 거부됩니다.
    response = await authorized_client.put(f"{DELIVERIES}/{delivery_id}", json={"notes": "late edit"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Cannot update a delivery in DONE status"
    response = await _set_status(authorized_client, delivery_id, "CANCELED")
    assert response.status_code == 400
    response = await authorized_client.post(f"{DELIVERIES}/{delivery_id}/validate")
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_pack_from_waiting_skips_pick(authorized_client: AsyncClient, location: dict, product: dict):
    delivery = await _create_delivery(authorized_client, location["id"], [{"product_id": product["id"], "quantity": 6}])
    await _set_status(authorized_client, delivery["id"], "WAITING")

    response = await authorized_client.post(f"{DELIVERIES}/{delivery['id']}/pack")
    assert response.status_code == 200
    line = response.json()["lines"][0]
    assert (line["picked"], line["packed"]) == (6, 6)
    assert response.json()["status"] == "READY"

    await _set_status(authorized_client, delivery["id"], "CANCELED")
    response = await authorized_client.post(f"{DELIVERIES}/{delivery['id']}/pack")
    assert response.status_code == 400
    assert response.json()["detail"] == "Delivery must be in WAITING or READY status to pack items"


@pytest.mark.asyncio
async def test_validate_clamps_insufficient_stock(
    authorized_client: AsyncClient, manager_client: AsyncClient, location: dict, product: dict, set_stock, db_session
):
    await set_stock(product["id"], location["id"], 2)
    delivery = await _create_delivery(authorized_client, location["id"], [{"product_id": product["id"], "quantity": 5}])
    await _set_status(authorized_client, delivery["id"], "WAITING")
    await authorized_client.post(f"{DELIVERIES}/{delivery['id']}/pick")

    response = await authorized_client.post(f"{DELIVERIES}/{delivery['id']}/validate")
    assert response.status_code == 200
    assert response.json()["status"] == "DONE"

    response = await authorized_client.get(f"/api/v1/inv/stock/products/{product['id']}")
    assert response.json()["total_stock"] == 0

    result = await db_session.execute(
        select(func.sum(inv_models.StockMovement.quantity)).where(
            inv_models.StockMovement.product_id == product["id"],
            inv_models.StockMovement.location_id == location["id"],
        )
    )
    assert result.scalar_one() == 0

    response = await manager_client.delete(f"{DELIVERIES}/{delivery['id']}")
    assert response.status_code == 400
    assert response.json()["detail"] == "Cannot delete a completed delivery"
