# stockmaster/core/database.py

"""
애플리케이션의 데이터베이스 연결 및 세션 관리를 담당하는 모듈입니다.

- SQLModel의 비동기 엔진을 설정합니다.
- 비동기 세션 생성을 위한 유틸리티 함수를 제공합니다.
- 애플리케이션 시작 시 데이터베이스 테이블을 생성하는 함수를 포함합니다 (개발용).
"""

import logging
from typing import Any, AsyncGenerator, Dict
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine
from sqlalchemy.orm import configure_mappers, sessionmaker

from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from stockmaster.core.config import settings

# =============================================================================
# 모든 도메인 모델 임포트
# =============================================================================
# 모든 SQLModel 클래스가 SQLModel.metadata에 등록되어야
# configure_mappers()와 create_all()이 모든 테이블과 관계를 인식합니다.
from stockmaster.domains.usr import models  # noqa
from stockmaster.domains.loc import models  # noqa
from stockmaster.domains.ven import models  # noqa
from stockmaster.domains.inv import models  # noqa
from stockmaster.domains.dlv import models  # noqa

logger = logging.getLogger(__name__)


def _engine_options(url: str) -> Dict[str, Any]:
    """DB 종류에 맞는 엔진 옵션을 반환합니다. SQLite는 커넥션 풀 크기 옵션을 받지 않습니다."""
    options: Dict[str, Any] = {"echo": settings.DEBUG_MODE, "future": True}
    if url.startswith("sqlite"):
        options["connect_args"] = {"check_same_thread": False}
    else:
        options.update(
            pool_recycle=3600,  # 1시간마다 연결 재활용
            pool_size=10,       # 최소 10개의 연결 유지
            max_overflow=20,    # 최대 20개의 추가 연결 허용 (총 30개)
        )
    return options


_database_url = settings.DATABASE_URL.get_secret_value()

engine: AsyncEngine = create_async_engine(_database_url, **_engine_options(_database_url))

# 비동기 세션을 생성하는 '세션 공장'을 정의합니다.
AsyncSessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

metadata = SQLModel.metadata

# 매퍼 구성 완료 플래그 (중복 호출 방지)
_mappers_configured = False


# =============================================================================
# 데이터베이스 초기화 및 테이블 생성 함수
# =============================================================================
async def create_db_and_tables() -> None:
    """
    데이터베이스 테이블을 생성합니다.
    개발 환경 및 seed 스크립트에서만 사용하며, 운영 환경은 Alembic 마이그레이션을 사용합니다.
    """
    global _mappers_configured

    if not _mappers_configured:
        configure_mappers()
        _mappers_configured = True
        logger.debug("SQLAlchemy 매퍼 초기화 완료.")

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    logger.info("데이터베이스 테이블 생성이 완료되었습니다 (또는 이미 존재).")


# =============================================================================
# 비동기 데이터베이스 세션 의존성 주입
# =============================================================================
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI 의존성 주입을 위한 비동기 데이터베이스 세션 제너레이터입니다.
    요청마다 새로운 세션을 생성하고, 요청 처리 후 세션을 자동으로 닫습니다.
    """
    async with AsyncSessionLocal() as session:
        yield session


@asynccontextmanager
async def get_async_session_context() -> AsyncGenerator[AsyncSession, None]:
    """
    ARQ Task, CLI 스크립트 등 요청 밖에서 사용할 수 있는
    독립적인 비동기 DB 세션을 제공하는 컨텍스트 관리자입니다.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
