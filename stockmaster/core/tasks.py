# stockmaster/core/tasks.py

import logging
from datetime import datetime, UTC

from sqlmodel import select

from stockmaster.core.database import get_async_session_context

logger = logging.getLogger(__name__)


async def health_check_database_task(ctx):
    """
    ARQ 워커에 의해 실행될 주기적인 데이터베이스 헬스 체크 태스크.
    데이터베이스 연결 상태를 확인하고 로그를 남깁니다.
    """
    logger.info("[%s] ARQ 태스크: 데이터베이스 헬스 체크 실행", datetime.now(UTC).isoformat())

    try:
        async with get_async_session_context() as db:
            result = await db.execute(select(1))
            if result.scalar_one_or_none() == 1:
                logger.info("데이터베이스 헬스 체크: 성공적으로 연결되었습니다.")
                return {"status": "success", "message": "Database connection successful."}
            error_msg = "Database health check failed: No result from test query."
            logger.error("데이터베이스 헬스 체크: 실패 - %s", error_msg)
            return {"status": "failed", "message": error_msg}
    except Exception as e:
        # 워커는 계속 돌아야 하므로 결과로만 보고합니다.
        logger.error("데이터베이스 헬스 체크: 실패 - %s", e)
        return {"status": "failed", "message": f"Database connection error: {e}"}
