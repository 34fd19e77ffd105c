# tests/domains/test_ven_n.py

"""
'ven' 도메인 (공급업체) API 통합 테스트입니다.
"""

import pytest
from httpx import AsyncClient

SUPPLIERS = "/api/v1/ven/suppliers"


@pytest.mark.asyncio
async def test_create_supplier(manager_client: AsyncClient):
    payload = {"name": "Global Parts", "code": "gp-01", "email": "orders@globalparts.com", "phone": "555-0100"}
    response = await manager_client.post(SUPPLIERS, json=payload)
    print(f"Response JSON: {response.json()}")

    assert response.status_code == 201
    body = response.json()
    assert body["code"] == "GP-01"
    assert body["email"] == "orders@globalparts.com"
    assert body["is_active"] is True


@pytest.mark.asyncio
async def test_create_supplier_invalid_email(manager_client: AsyncClient):
    response = await manager_client.post(SUPPLIERS, json={"name": "Bad Mail", "code": "BM", "email": "not-an-email"})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_create_supplier_duplicate_code(manager_client: AsyncClient, supplier: dict):
    response = await manager_client.post(SUPPLIERS, json={"name": "Acme Again", "code": "ACME"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Supplier code already exists"


@pytest.mark.asyncio
async def test_staff_can_read_but_not_create(authorized_client: AsyncClient, supplier: dict):
    response = await authorized_client.get(SUPPLIERS)
    assert response.status_code == 200
    assert [s["code"] for s in response.json()] == ["ACME"]

    response = await authorized_client.get(f"{SUPPLIERS}/{supplier['id']}")
    assert response.status_code == 200
    assert response.json()["name"] == "Acme Supplies"

    response = await authorized_client.post(SUPPLIERS, json={"name": "Sneaky", "code": "SNK"})
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_list_suppliers_include_inactive(manager_client: AsyncClient, supplier: dict):
    response = await manager_client.put(f"{SUPPLIERS}/{supplier['id']}", json={"is_active": False})
    assert response.status_code == 200
    assert response.json()["is_active"] is False

    response = await manager_client.get(SUPPLIERS)
    assert response.json() == []

    response = await manager_client.get(SUPPLIERS, params={"include_inactive": True})
    assert [s["code"] for s in response.json()] == ["ACME"]


@pytest.mark.asyncio
async def test_update_supplier_duplicate_code(manager_client: AsyncClient, supplier: dict):
    other = await manager_client.post(SUPPLIERS, json={"name": "Beta", "code": "BETA"})
    response = await manager_client.put(f"{SUPPLIERS}/{other.json()['id']}", json={"code": "acme"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Supplier code already exists"


@pytest.mark.asyncio
async def test_get_supplier_not_found(authorized_client: AsyncClient):
    response = await authorized_client.get(f"{SUPPLIERS}/9999")
    assert response.status_code == 404
    assert response.json()["detail"] == "Supplier not found"


@pytest.mark.asyncio
async def test_delete_supplier(manager_client: AsyncClient, supplier: dict):
    response = await manager_client.delete(f"{SUPPLIERS}/{supplier['id']}")
    assert response.status_code == 204

    response = await manager_client.get(f"{SUPPLIERS}/{supplier['id']}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_delete_supplier_with_receipts_refused(
    manager_client: AsyncClient, supplier: dict, product: dict, location: dict
):
    response = await manager_client.post(
        "/api/v1/inv/stock/receive",
        json={
            "supplier_id": supplier["id"],
            "items": [{"product_id": product["id"], "location_id": location["id"], "quantity": 4, "unit_cost": 2.5}],
        },
    )
    assert response.status_code == 201

    response = await manager_client.delete(f"{SUPPLIERS}/{supplier['id']}")
    assert response.status_code == 400
    assert response.json()["detail"] == "Cannot delete supplier with existing receipts"
