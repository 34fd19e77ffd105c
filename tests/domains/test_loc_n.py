# tests/domains/test_loc_n.py

"""
'loc' 도메인 (창고 및 위치) API 통합 테스트입니다.

- 창고: 생성/목록(통계)/상세/수정/삭제(비활성화)
- 위치: 생성/목록(창고 필터)/상세/수정/삭제(비활성화)
- 재고가 남은 창고/위치의 삭제 거부
- 역할 기반 권한 (조회는 모든 사용자, 변경은 재고 관리자 이상)
"""

import pytest
from httpx import AsyncClient

WAREHOUSES = "/api/v1/loc/warehouses"
LOCATIONS = "/api/v1/loc/locations"


# =============================================================================
# 1. 창고 (Warehouse)
# =============================================================================
@pytest.mark.asyncio
async def test_create_warehouse_upper_cases_code(manager_client: AsyncClient):
    response = await manager_client.post(WAREHOUSES, json={"name": "North Hub", "code": "north-1"})
    print(f"Response JSON: {response.json()}")

    assert response.status_code == 201
    body = response.json()
    assert body["code"] == "NORTH-1"
    assert body["is_active"] is True


@pytest.mark.asyncio
async def test_create_warehouse_invalid_code(manager_client: AsyncClient):
    response = await manager_client.post(WAREHOUSES, json={"name": "Bad", "code": "has space"})
    assert response.status_code == 422

    response = await manager_client.post(WAREHOUSES, json={"name": "Bad", "code": "WH#1"})
    assert response.status_code == 422

    # 소문자는 검증 전에 대문자로 바뀌므로 허용됩니다.
    response = await manager_client.post(WAREHOUSES, json={"name": "Lower", "code": "wh_2"})
    assert response.status_code == 201
    assert response.json()["code"] == "WH_2"

    response = await manager_client.put(f"{WAREHOUSES}/{response.json()['id']}", json={"code": "bad code"})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_create_location_invalid_code(manager_client: AsyncClient, warehouse: dict):
    response = await manager_client.post(
        LOCATIONS, json={"name": "Bad", "code": "A 01", "warehouse_id": warehouse["id"]}
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_create_warehouse_duplicate_code(manager_client: AsyncClient, warehouse: dict):
    response = await manager_client.post(WAREHOUSES, json={"name": "Other", "code": "WH1"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Warehouse code already exists"


@pytest.mark.asyncio
async def test_create_warehouse_forbidden_for_staff(authorized_client: AsyncClient):
    response = await authorized_client.post(WAREHOUSES, json={"name": "Nope", "code": "NOPE"})
    assert response.status_code == 403
    assert response.json()["detail"] == "Not enough permissions. Inventory manager role required."


@pytest.mark.asyncio
async def test_admin_can_manage_warehouses(admin_client: AsyncClient):
    response = await admin_client.post(WAREHOUSES, json={"name": "Admin Hub", "code": "ADM"})
    assert response.status_code == 201


@pytest.mark.asyncio
async def test_list_warehouses_with_stats(
    authorized_client: AsyncClient,
    warehouse: dict,
    location: dict,
    other_location: dict,
    product_factory,
    set_stock,
):
    bolt = await product_factory("SKU-A")
    nut = await product_factory("SKU-B")
    await set_stock(bolt["id"], location["id"], 30)
    await set_stock(bolt["id"], other_location["id"], 20)
    await set_stock(nut["id"], location["id"], 0)

    response = await authorized_client.get(WAREHOUSES)
    assert response.status_code == 200
    rows = response.json()
    assert len(rows) == 1
    stats = rows[0]
    assert stats["code"] == "WH1"
    assert stats["total_stock"] == 50
    # 수량이 0 인 재고 행은 제품 수에 포함되지 않습니다.
    assert stats["total_products"] == 1
    assert stats["total_locations"] == 2


@pytest.mark.asyncio
async def test_get_warehouse_detail(authorized_client: AsyncClient, warehouse: dict, location_factory):
    await location_factory("Z-09", name="Zone 9")
    await location_factory("A-02", name="Aisle 2")

    response = await authorized_client.get(f"{WAREHOUSES}/{warehouse['id']}")
    assert response.status_code == 200
    body = response.json()
    assert body["name"] == "Main Warehouse"
    assert [loc["name"] for loc in body["locations"]] == ["Aisle 2", "Zone 9"]


@pytest.mark.asyncio
async def test_update_warehouse(manager_client: AsyncClient, warehouse: dict):
    response = await manager_client.put(f"{WAREHOUSES}/{warehouse['id']}", json={"name": "Renamed", "code": "wh-main"})
    assert response.status_code == 200
    assert response.json()["name"] == "Renamed"
    assert response.json()["code"] == "WH-MAIN"

    response = await manager_client.put(f"{WAREHOUSES}/9999", json={"name": "Ghost"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_delete_warehouse_soft_deletes(manager_client: AsyncClient, warehouse: dict):
    response = await manager_client.delete(f"{WAREHOUSES}/{warehouse['id']}")
    assert response.status_code == 204

    response = await manager_client.get(WAREHOUSES)
    assert response.json() == []

    # 비활성 창고도 상세 조회는 가능하며 is_active=false 로 표시됩니다.
    response = await manager_client.get(f"{WAREHOUSES}/{warehouse['id']}")
    assert response.status_code == 200
    assert response.json()["is_active"] is False


@pytest.mark.asyncio
async def test_delete_warehouse_with_stock_refused(
    manager_client: AsyncClient, warehouse: dict, location: dict, product: dict, set_stock
):
    await set_stock(product["id"], location["id"], 5)
    response = await manager_client.delete(f"{WAREHOUSES}/{warehouse['id']}")
    assert response.status_code == 400
    assert response.json()["detail"] == "Cannot delete warehouse with existing stock"


# =============================================================================
# 2. 위치 (Location)
# =============================================================================
@pytest.mark.asyncio
async def test_create_location(manager_client: AsyncClient, warehouse: dict):
    response = await manager_client.post(
        LOCATIONS, json={"name": "Receiving Dock", "code": "rcv-1", "warehouse_id": warehouse["id"], "type": "RECEIVING"}
    )
    assert response.status_code == 201
    body = response.json()
    assert body["code"] == "RCV-1"
    assert body["type"] == "RECEIVING"
    assert body["warehouse_id"] == warehouse["id"]


@pytest.mark.asyncio
async def test_create_location_unknown_warehouse(manager_client: AsyncClient):
    response = await manager_client.post(LOCATIONS, json={"name": "Lost", "code": "LOST", "warehouse_id": 9999})
    assert response.status_code == 400
    assert response.json()["detail"] == "Warehouse not found"


@pytest.mark.asyncio
async def test_create_location_duplicate_code(manager_client: AsyncClient, warehouse: dict, location: dict):
    response = await manager_client.post(
        LOCATIONS, json={"name": "Dup", "code": "a-01", "warehouse_id": warehouse["id"]}
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Location code already exists"


@pytest.mark.asyncio
async def test_list_locations_filtered_by_warehouse(
    manager_client: AsyncClient, location: dict, product: dict, set_stock
):
    second = await manager_client.post(WAREHOUSES, json={"name": "Annex", "code": "ANX"})
    annex_id = second.json()["id"]
    await manager_client.post(LOCATIONS, json={"name": "Annex Shelf", "code": "ANX-1", "warehouse_id": annex_id})
    await set_stock(product["id"], location["id"], 12)

    response = await manager_client.get(LOCATIONS)
    assert response.status_code == 200
    rows = response.json()
    # 창고명 순 정렬: Annex -> Main Warehouse
    assert [row["code"] for row in rows] == ["ANX-1", "A-01"]
    main_row = rows[1]
    assert main_row["warehouse_name"] == "Main Warehouse"
    assert main_row["total_stock"] == 12
    assert main_row["total_products"] == 1

    response = await manager_client.get(LOCATIONS, params={"warehouse_id": annex_id})
    assert [row["code"] for row in response.json()] == ["ANX-1"]


@pytest.mark.asyncio
async def test_get_location_detail_with_stock(
    authorized_client: AsyncClient, location: dict, product: dict, set_stock
):
    await set_stock(product["id"], location["id"], 7)

    response = await authorized_client.get(f"{LOCATIONS}/{location['id']}")
    assert response.status_code == 200
    body = response.json()
    assert body["code"] == "A-01"
    assert len(body["stock_locations"]) == 1
    assert body["stock_locations"][0]["quantity"] == 7
    assert body["stock_locations"][0]["available"] == 7

    response = await authorized_client.get(f"{LOCATIONS}/9999")
    assert response.status_code == 404
    assert response.json()["detail"] == "Location not found"


@pytest.mark.asyncio
async def test_update_location_to_unknown_warehouse(manager_client: AsyncClient, location: dict):
    response = await manager_client.put(f"{LOCATIONS}/{location['id']}", json={"warehouse_id": 9999})
    assert response.status_code == 400
    assert response.json()["detail"] == "Warehouse not found"

    response = await manager_client.put(f"{LOCATIONS}/{location['id']}", json={"type": "SHIPPING"})
    assert response.status_code == 200
    assert response.json()["type"] == "SHIPPING"


@pytest.mark.asyncio
async def test_delete_location(manager_client: AsyncClient, location: dict, product: dict, set_stock):
    await set_stock(product["id"], location["id"], 3)
    response = await manager_client.delete(f"{LOCATIONS}/{location['id']}")
    assert response.status_code == 400
    assert response.json()["detail"] == "Cannot delete location with existing stock"

    await set_stock(product["id"], location["id"], 0)
    response = await manager_client.delete(f"{LOCATIONS}/{location['id']}")
    assert response.status_code == 204

    response = await manager_client.get(LOCATIONS)
    assert response.json() == []
