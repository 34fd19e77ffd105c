# stockmaster/domains/ntf/routers.py

"""
'ntf' 도메인 (알림/이메일) 관리자용 점검 엔드포인트입니다.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from stockmaster.core import dependencies as deps
from stockmaster.core.config import settings
from stockmaster.domains.usr.models import User as UsrUser
from . import schemas as ntf_schemas
from .services import email_service

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["Notifications (이메일 알림)"],
    responses={404: {"description": "Not found"}},
)


@router.get("/email/test-connection", response_model=ntf_schemas.EmailResult, summary="SMTP 연결 확인")
async def test_email_connection(
    current_user: UsrUser = Depends(deps.get_current_admin_user),
):
    """SMTP 서버 접속을 확인합니다. 관리자 권한이 필요합니다."""
    try:
        await email_service.test_connection()
    except Exception as e:
        logger.error("SMTP connection check failed: %s", e)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Email connection failed: {e}",
        )
    return {"message": "Email connection verified successfully"}


@router.post("/email/test-email", response_model=ntf_schemas.EmailResult, summary="테스트 메일 발송")
async def send_test_email(
    request_in: ntf_schemas.TestEmailRequest,
    current_user: UsrUser = Depends(deps.get_current_admin_user),
):
    """
    지정한 템플릿으로 테스트 메일을 발송합니다.
    운영(production) 환경에서는 비활성화됩니다.
    """
    if settings.is_production:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Test email endpoint is disabled in production",
        )

    try:
        if request_in.type == ntf_schemas.EmailType.WELCOME:
            await email_service.send_welcome(request_in.email, "Test User")
        elif request_in.type == ntf_schemas.EmailType.OTP:
            await email_service.send_otp(request_in.email, "123456", "Test User")
        else:
            await email_service.send_password_changed(request_in.email, "Test User")
    except Exception as e:
        logger.error("Test email (%s) failed: %s", request_in.type.value, e)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Failed to send test email: {e}",
        )
    return {"message": f"Test {request_in.type.value} email sent successfully"}
