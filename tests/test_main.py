# tests/test_main.py

"""
FastAPI 애플리케이션의 메인 엔드포인트와 전역 오류 응답 형식에 대한 테스트 모듈입니다.

- 루트 경로 (`/`) 응답
- 데이터베이스 헬스 체크 (`/health`)
- 공통 오류 응답 형식 {"success": false, "detail": ...}
"""

import json

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import IntegrityError, NoResultFound
from starlette.requests import Request

from stockmaster.core import exceptions, tasks
from stockmaster.core.config import settings


def _fake_request(method: str = "POST", path: str = "/api/v1/test") -> Request:
    return Request({"type": "http", "method": method, "path": path, "headers": [], "query_string": b""})


@pytest.mark.asyncio
async def test_read_root(client: AsyncClient):
    response = await client.get("/")
    assert response.status_code == 200
    assert response.json() == {
        "message": f"Welcome to {settings.APP_NAME}. Visit /docs for interactive API documentation."
    }


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    """헬스 체크는 DB 에 SELECT 1 을 실행하고 상태와 시각을 반환합니다."""
    response = await client.get("/health")
    print(f"Response JSON: {response.json()}")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["database"] == "connected"
    assert "timestamp" in body


@pytest.mark.asyncio
async def test_not_found_uses_error_envelope(authorized_client: AsyncClient):
    response = await authorized_client.get("/api/v1/loc/warehouses/9999")
    assert response.status_code == 404
    assert response.json() == {"success": False, "detail": "Warehouse not found"}


@pytest.mark.asyncio
async def test_unauthenticated_request_is_rejected(client: AsyncClient):
    response = await client.get("/api/v1/inv/products")
    assert response.status_code == 401
    assert response.json() == {"success": False, "detail": "Not authenticated"}
    assert response.headers.get("www-authenticate") == "Bearer"


@pytest.mark.asyncio
async def test_invalid_token_is_rejected(client: AsyncClient):
    response = await client.get("/api/v1/inv/products", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Could not validate credentials"


@pytest.mark.asyncio
async def test_validation_error_envelope(manager_client: AsyncClient):
    response = await manager_client.post("/api/v1/loc/warehouses", json={"code": "WH1"})
    assert response.status_code == 422
    body = response.json()
    assert body["success"] is False
    assert body["detail"] == "Validation error"
    assert any(err["loc"][-1] == "name" for err in body["errors"])


@pytest.mark.asyncio
async def test_integrity_error_handler_returns_400():
    exc = IntegrityError("INSERT INTO warehouses ...", {}, Exception("UNIQUE constraint failed: warehouses.code"))
    response = await exceptions.integrity_error_handler(_fake_request(), exc)

    assert response.status_code == 400
    assert json.loads(response.body) == {
        "success": False,
        "detail": "Duplicate entry - this record already exists",
    }


@pytest.mark.asyncio
async def test_no_result_handler_returns_404():
    response = await exceptions.no_result_handler(_fake_request("GET"), NoResultFound())
    assert response.status_code == 404
    assert json.loads(response.body)["detail"] == "Record not found"


@pytest.mark.asyncio
async def test_unhandled_exception_handler_hides_details():
    response = await exceptions.unhandled_exception_handler(_fake_request(), RuntimeError("secret internals"))
    assert response.status_code == 500
    assert json.loads(response.body) == {"success": False, "detail": "Internal server error"}


@pytest.mark.asyncio
async def test_health_check_task():
    """ARQ 워커의 주기적 DB 헬스 체크 태스크는 결과를 dict 로 보고합니다."""
    result = await tasks.health_check_database_task({})
    assert result == {"status": "success", "message": "Database connection successful."}
