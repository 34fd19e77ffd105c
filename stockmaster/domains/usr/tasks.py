# stockmaster/domains/usr/tasks.py

import logging

from stockmaster.core.database import get_async_session_context
from . import crud as usr_crud

logger = logging.getLogger(__name__)


async def cleanup_expired_otp_tokens_task(ctx):
    """
    만료된 비밀번호 재설정 코드를 정리하는 주기 태스크입니다. (ARQ cron)
    ctx에 "db" 세션이 있으면 그 세션을 사용합니다.
    """
    db = ctx.get("db") if ctx else None
    if db is not None:
        deleted = await usr_crud.otp_token.delete_expired(db)
    else:
        async with get_async_session_context() as session:
            deleted = await usr_crud.otp_token.delete_expired(session)
    logger.info("만료된 OTP 코드 %d건을 삭제했습니다.", deleted)
    return {"status": "success", "deleted": deleted}
