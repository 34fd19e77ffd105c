# stockmaster/domains/ntf/tasks.py

"""
이메일 발송 ARQ 태스크입니다.

요청 처리 중에는 메일을 직접 보내지 않고 dispatch()로 태스크를 큐에 넣습니다.
Redis 풀이 없으면(개발/테스트) 같은 태스크 함수를 그 자리에서 실행합니다.
메일 발송 실패는 로그로만 남기며 호출한 요청을 실패시키지 않습니다.
"""

import logging
from typing import Any, Dict, Optional

from .services import email_service

logger = logging.getLogger(__name__)


async def send_welcome_email_task(ctx, email: str, name: str) -> Dict[str, Any]:
    try:
        await email_service.send_welcome(email, name)
        return {"status": "success", "to": email}
    except Exception as e:
        logger.error("Welcome email to %s failed: %s", email, e)
        return {"status": "failed", "to": email, "message": str(e)}


async def send_otp_email_task(ctx, email: str, otp: str, name: str) -> Dict[str, Any]:
    try:
        await email_service.send_otp(email, otp, name)
        return {"status": "success", "to": email}
    except Exception as e:
        logger.error("OTP email to %s failed: %s", email, e)
        return {"status": "failed", "to": email, "message": str(e)}


async def send_password_changed_email_task(ctx, email: str, name: str) -> Dict[str, Any]:
    try:
        await email_service.send_password_changed(email, name)
        return {"status": "success", "to": email}
    except Exception as e:
        logger.error("Password change notification to %s failed: %s", email, e)
        return {"status": "failed", "to": email, "message": str(e)}


EMAIL_TASKS = {
    "send_welcome_email_task": send_welcome_email_task,
    "send_otp_email_task": send_otp_email_task,
    "send_password_changed_email_task": send_password_changed_email_task,
}


async def dispatch(arq_redis_pool: Optional[Any], task_name: str, *args: Any) -> None:
    """ARQ 큐에 태스크를 넣거나, 풀이 없으면 동기적으로 실행합니다."""
    if arq_redis_pool:
        await arq_redis_pool.enqueue_job(task_name, *args)
        return
    logger.info("ARQ Redis pool not available, running '%s' inline.", task_name)
    await EMAIL_TASKS[task_name]({}, *args)
