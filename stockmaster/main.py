# stockmaster/main.py

import logging
from datetime import datetime, UTC
from typing import AsyncGenerator
from contextlib import asynccontextmanager

from arq import cron
from arq.connections import create_pool, RedisSettings
from fastapi import FastAPI, Depends, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from stockmaster import API_PREFIX
from stockmaster.core.config import settings
from stockmaster.core.database import engine, get_session, create_db_and_tables
from stockmaster.core.exceptions import register_exception_handlers

# 태스크 모듈 임포트
from stockmaster.core import tasks as core_tasks
from stockmaster.domains.usr import tasks as usr_tasks
from stockmaster.domains.ntf import tasks as ntf_tasks

# 도메인 라우터 임포트
from stockmaster.domains.usr.routers import router as usr_router
from stockmaster.domains.loc.routers import router as loc_router
from stockmaster.domains.ven.routers import router as ven_router
from stockmaster.domains.inv.routers import router as inv_router
from stockmaster.domains.dlv.routers import router as dlv_router
from stockmaster.domains.ntf.routers import router as ntf_router

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG_MODE else logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# ARQ 워커가 실행할 태스크 함수 목록
worker_functions = [
    core_tasks.health_check_database_task,
    usr_tasks.cleanup_expired_otp_tokens_task,
    ntf_tasks.send_welcome_email_task,
    ntf_tasks.send_otp_email_task,
    ntf_tasks.send_password_changed_email_task,
]


# ARQ 워커 설정 클래스 (실행: arq stockmaster.main.ArqWorkerSettings)
class ArqWorkerSettings:
    redis_settings = RedisSettings(host=settings.REDIS_HOST, port=settings.REDIS_PORT)
    functions = worker_functions
    cron_jobs = [
        # 매시 정각: 만료된 비밀번호 재설정 코드 정리
        cron(usr_tasks.cleanup_expired_otp_tokens_task, minute=0, timeout=300),
        # 매일 00:00: 데이터베이스 헬스 체크
        cron(core_tasks.health_check_database_task, hour=0, minute=0, timeout=300, keep_result=600),
    ]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI 애플리케이션의 수명 주기 이벤트(데이터베이스, ARQ Redis)를 함께 처리합니다.
    Redis 에 연결할 수 없으면 app.state.redis 를 None 으로 두고,
    백그라운드 태스크는 요청 안에서 직접 실행됩니다.
    """
    logger.info("Starting %s %s (%s)", settings.APP_NAME, settings.APP_VERSION, settings.APP_ENV)

    # 로컬 SQLite 실행 시에는 테이블을 바로 생성합니다. 그 외에는 Alembic 을 사용합니다.
    if settings.DATABASE_URL.get_secret_value().startswith("sqlite"):
        await create_db_and_tables()

    try:
        app.state.redis = await create_pool(ArqWorkerSettings.redis_settings)
        logger.info("ARQ Redis pool connected (%s:%s)", settings.REDIS_HOST, settings.REDIS_PORT)
    except (OSError, RedisError) as e:
        logger.warning("ARQ Redis pool unavailable, background tasks will run inline: %s", e)
        app.state.redis = None

    yield

    if app.state.redis:
        await app.state.redis.close()
        logger.info("ARQ Redis pool closed.")
    await engine.dispose()
    logger.info("Database engine disposed.")


app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# 프론트엔드가 쿠키를 보내야 하므로 allow_credentials=True 이며, 출처는 설정값으로 제한합니다.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# -- 도메인 라우터 포함 --
app.include_router(usr_router, prefix=f"{API_PREFIX}/usr")
app.include_router(loc_router, prefix=f"{API_PREFIX}/loc")
app.include_router(ven_router, prefix=f"{API_PREFIX}/ven")
app.include_router(inv_router, prefix=f"{API_PREFIX}/inv")
app.include_router(dlv_router, prefix=f"{API_PREFIX}/dlv")
app.include_router(ntf_router, prefix=f"{API_PREFIX}/ntf")


@app.get("/", summary="API Root", response_description="Welcome message and documentation link.")
async def read_root():
    return {"message": f"Welcome to {settings.APP_NAME}. Visit /docs for interactive API documentation."}


@app.get("/health", summary="Health Check", response_description="Status of the application and database connection.")
async def health_check(session: AsyncSession = Depends(get_session)):
    """데이터베이스에 SELECT 1 을 실행하여 서비스 상태를 확인합니다."""
    try:
        result = await session.exec(select(1))
        if result.first() is None:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Database health check failed: No result from test query"
            )
    except SQLAlchemyError as e:
        logger.error("Health check failed: %s", e)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database connection error during health check"
        )
    return {
        "status": "ok",
        "database": "connected",
        "timestamp": datetime.now(UTC).isoformat(),
    }
