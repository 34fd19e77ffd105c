# tests/conftest.py

import os
from typing import AsyncGenerator, Awaitable, Callable, List, Tuple
from contextlib import asynccontextmanager

# 애플리케이션 설정은 임포트 시점에 읽히므로, stockmaster 임포트 전에 테스트용 환경 변수를 지정합니다.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-stockmaster")
os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("MAIL_SUPPRESS_SEND", "1")

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from stockmaster.main import app as main_app
from stockmaster.core import dependencies as deps
from stockmaster.core.database import get_session
from stockmaster.core.security import get_password_hash
from stockmaster.domains.ntf.services import email_service

# --- 모든 모델 임포트 ---
#  SQLModel.metadata.create_all()이 모든 테이블을 인식하려면 모든 모델 클래스가 임포트되어야 합니다.
from stockmaster.domains.models import *    # noqa: F401, F403
from stockmaster.domains.usr import models as usr_models


# --- 테스트용 데이터베이스 설정 ---
# 테스트마다 독립된 인메모리 SQLite 데이터베이스를 사용합니다.
# StaticPool 은 모든 세션이 같은 연결(같은 인메모리 DB)을 공유하도록 합니다.
TEST_DATABASE_URL = "sqlite+aiosqlite://"

ADMIN_PASSWORD = "adminpass123"
MANAGER_PASSWORD = "managerpass123"
STAFF_PASSWORD = "staffpass123"


# --- 데이터베이스 픽스처 ---
@pytest_asyncio.fixture(scope="function")
async def test_engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """
    각 테스트 함수마다 새 데이터베이스 위에서 동작하는 비동기 세션을 제공합니다.
    API 요청도 이 세션을 공유하므로, 테스트 코드에서 직접 결과를 확인할 수 있습니다.
    """
    TestingSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with TestingSessionLocal() as session:
        yield session


# --- 메일 발송 대체 ---
@pytest.fixture(autouse=True)
def outbox(monkeypatch) -> List[Tuple[str, str, str]]:
    """
    실제 SMTP 대신 발송된 메일을 (수신자, 제목, 본문) 목록에 기록합니다.
    """
    sent: List[Tuple[str, str, str]] = []

    async def _fake_send(to: str, subject: str, html: str) -> None:
        sent.append((to, subject, html))

    monkeypatch.setattr(email_service, "send", _fake_send)
    return sent


# --- 사용자 픽스처 ---
@pytest_asyncio.fixture(scope="function")
def user_factory(db_session: AsyncSession) -> Callable[..., Awaitable[usr_models.User]]:
    """
    역할과 속성을 지정하여 테스트 사용자를 생성하는 팩토리 함수를 반환합니다.
    """
    async def _create_user(
        email: str,
        password: str,
        role: usr_models.UserRole = usr_models.UserRole.WAREHOUSE_STAFF,
        is_active: bool = True,
        **kwargs,
    ) -> usr_models.User:
        user = usr_models.User(
            email=email,
            name=kwargs.pop("name", email.split("@")[0]),
            password_hash=get_password_hash(password),
            role=role,
            is_active=is_active,
            **kwargs,
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user
    return _create_user


@pytest_asyncio.fixture(scope="function")
async def test_admin_user(user_factory: Callable) -> usr_models.User:
    """관리자(ADMIN) 사용자를 생성합니다."""
    return await user_factory("admin@stockmaster.com", ADMIN_PASSWORD, role=usr_models.UserRole.ADMIN, name="Admin")


@pytest_asyncio.fixture(scope="function")
async def test_manager_user(user_factory: Callable) -> usr_models.User:
    """재고 관리자(INVENTORY_MANAGER)를 생성합니다."""
    return await user_factory(
        "manager@stockmaster.com", MANAGER_PASSWORD, role=usr_models.UserRole.INVENTORY_MANAGER, name="Manager"
    )


@pytest_asyncio.fixture(scope="function")
async def test_user(user_factory: Callable) -> usr_models.User:
    """창고 작업자(WAREHOUSE_STAFF)를 생성합니다."""
    return await user_factory("staff@stockmaster.com", STAFF_PASSWORD, name="Staff")


# --- 의존성 오버라이드 ---
@pytest_asyncio.fixture(scope="function")
async def override_session(db_session: AsyncSession):
    """애플리케이션의 DB 세션 의존성을 테스트 세션으로 교체하고, 종료 후 원래대로 되돌립니다."""
    async def override_get_session():
        yield db_session

    original_overrides = main_app.dependency_overrides.copy()
    main_app.dependency_overrides.update({
        get_session: override_get_session,
        deps.get_db_session: override_get_session,
    })

    yield

    main_app.dependency_overrides.clear()
    main_app.dependency_overrides.update(original_overrides)


# --- 역할별 인증 클라이언트 픽스처 ---
# /api/v1/usr/auth/token 로그인 API를 실제로 호출하고,
# 받은 access_token 을 Authorization 헤더에 넣은 AsyncClient 를 반환합니다.
@pytest_asyncio.fixture(scope="function")
def authorized_client_factory(override_session) -> Callable[..., AsyncGenerator[AsyncClient, None]]:
    @asynccontextmanager
    async def _create_client_context(user: usr_models.User, password: str) -> AsyncGenerator[AsyncClient, None]:
        transport = ASGITransport(app=main_app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            login_data = {"username": user.email, "password": password}
            res = await client.post("/api/v1/usr/auth/token", data=login_data)
            if res.status_code != 200:
                pytest.fail(f"Login failed for {user.email}: {res.text}")

            client.headers["Authorization"] = f"Bearer {res.json()['access_token']}"
            yield client

    return _create_client_context


@pytest_asyncio.fixture(scope="function")
async def admin_client(
    authorized_client_factory: Callable[..., AsyncGenerator[AsyncClient, None]],
    test_admin_user: usr_models.User,
) -> AsyncGenerator[AsyncClient, None]:
    """관리자로 인증된 클라이언트를 반환합니다."""
    async with authorized_client_factory(test_admin_user, ADMIN_PASSWORD) as client:
        yield client


@pytest_asyncio.fixture(scope="function")
async def manager_client(
    authorized_client_factory: Callable[..., AsyncGenerator[AsyncClient, None]],
    test_manager_user: usr_models.User,
) -> AsyncGenerator[AsyncClient, None]:
    """재고 관리자로 인증된 클라이언트를 반환합니다."""
    async with authorized_client_factory(test_manager_user, MANAGER_PASSWORD) as client:
        yield client


@pytest_asyncio.fixture(scope="function")
async def authorized_client(
    authorized_client_factory: Callable[..., AsyncGenerator[AsyncClient, None]],
    test_user: usr_models.User,
) -> AsyncGenerator[AsyncClient, None]:
    """창고 작업자로 인증된 클라이언트를 반환합니다."""
    async with authorized_client_factory(test_user, STAFF_PASSWORD) as client:
        yield client


# --- 비동기 테스트 클라이언트 픽스처 ---
@pytest_asyncio.fixture(scope="function")
async def client(override_session) -> AsyncGenerator[AsyncClient, None]:
    """인증되지 않은 클라이언트를 반환합니다."""
    transport = ASGITransport(app=main_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# --- 공통 기준 데이터 픽스처 ---
# 기준 정보는 관리자 API 로 생성하고 응답 JSON(dict)을 반환합니다.
# ORM 객체 대신 dict 를 쓰면 요청 중 롤백이 일어나도 테스트 쪽 값이 만료되지 않습니다.
@pytest_asyncio.fixture(scope="function")
async def warehouse(manager_client: AsyncClient) -> dict:
    res = await manager_client.post(
        "/api/v1/loc/warehouses", json={"name": "Main Warehouse", "code": "wh1", "address": "1 Dock Road"}
    )
    assert res.status_code == 201, res.text
    return res.json()


@pytest_asyncio.fixture(scope="function")
async def location_factory(manager_client: AsyncClient, warehouse: dict) -> Callable[..., Awaitable[dict]]:
    async def _create_location(code: str, name: str = None, warehouse_id: int = None, type: str = "STORAGE") -> dict:
        res = await manager_client.post(
            "/api/v1/loc/locations",
            json={
                "name": name or f"Location {code}",
                "code": code,
                "warehouse_id": warehouse_id or warehouse["id"],
                "type": type,
            },
        )
        assert res.status_code == 201, res.text
        return res.json()
    return _create_location


@pytest_asyncio.fixture(scope="function")
async def location(location_factory: Callable) -> dict:
    return await location_factory("A-01", name="Aisle A-01")


@pytest_asyncio.fixture(scope="function")
async def other_location(location_factory: Callable) -> dict:
    return await location_factory("B-01", name="Aisle B-01")


@pytest_asyncio.fixture(scope="function")
async def product_factory(manager_client: AsyncClient) -> Callable[..., Awaitable[dict]]:
    async def _create_product(sku: str, name: str = None, reorder_level: int = 0, **kwargs) -> dict:
        res = await manager_client.post(
            "/api/v1/inv/products",
            json={"name": name or f"Product {sku}", "sku": sku, "reorder_level": reorder_level, **kwargs},
        )
        assert res.status_code == 201, res.text
        return res.json()
    return _create_product


@pytest_asyncio.fixture(scope="function")
async def product(product_factory: Callable) -> dict:
    return await product_factory("SKU-001", name="Steel Bolt", reorder_level=10)


@pytest_asyncio.fixture(scope="function")
async def supplier(manager_client: AsyncClient) -> dict:
    res = await manager_client.post(
        "/api/v1/ven/suppliers", json={"name": "Acme Supplies", "code": "acme", "email": "sales@acme.com"}
    )
    assert res.status_code == 201, res.text
    return res.json()


@pytest_asyncio.fixture(scope="function")
def set_stock(manager_client: AsyncClient) -> Callable[..., Awaitable[dict]]:
    """재고 조정(SET) API 로 특정 위치의 재고 수량을 지정합니다."""
    async def _set_stock(product_id: int, location_id: int, quantity: int, unit_cost: float = None) -> dict:
        payload = {
            "product_id": product_id,
            "location_id": location_id,
            "adjustment_type": "SET",
            "quantity": quantity,
        }
        if unit_cost is not None:
            payload["unit_cost"] = unit_cost
        res = await manager_client.post("/api/v1/inv/stock/adjust", json=payload)
        assert res.status_code == 200, res.text
        return res.json()
    return _set_stock
