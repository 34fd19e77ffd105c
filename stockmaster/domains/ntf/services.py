# stockmaster/domains/ntf/services.py

"""
fastapi-mail 기반의 이메일 발송 서비스입니다.

회원가입 환영 메일, 비밀번호 재설정 코드(OTP), 비밀번호 변경 알림을 발송합니다.
MAIL_SUPPRESS_SEND 가 켜져 있으면 메시지를 만들기만 하고 실제 SMTP 전송은 하지 않습니다.
"""

import logging
from typing import Optional

from fastapi_mail import ConnectionConfig, FastMail, MessageSchema, MessageType
from fastapi_mail.connection import Connection

from stockmaster.core.config import settings

logger = logging.getLogger(__name__)


def get_mail_config() -> ConnectionConfig:
    return ConnectionConfig(
        MAIL_USERNAME=settings.MAIL_USERNAME,
        MAIL_PASSWORD=settings.MAIL_PASSWORD,
        MAIL_FROM=settings.MAIL_FROM,
        MAIL_FROM_NAME=settings.MAIL_FROM_NAME,
        MAIL_PORT=settings.MAIL_PORT,
        MAIL_SERVER=settings.MAIL_SERVER,
        MAIL_STARTTLS=settings.MAIL_STARTTLS,
        MAIL_SSL_TLS=settings.MAIL_SSL_TLS,
        USE_CREDENTIALS=bool(settings.MAIL_USERNAME),
        SUPPRESS_SEND=1 if settings.MAIL_SUPPRESS_SEND else 0,
    )


# =============================================================================
# 메일 본문 템플릿
# =============================================================================
def _layout(title: str, body: str) -> str:
    return (
        "<div style=\"font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;\">"
        f"<h2 style=\"color: #1f2937;\">{title}</h2>"
        f"{body}"
        f"<p style=\"color: #6b7280; font-size: 12px;\">{settings.MAIL_FROM_NAME}</p>"
        "</div>"
    )


def welcome_template(name: str) -> str:
    return _layout(
        f"Welcome to {settings.APP_NAME}, {name}!",
        "<p>Your account has been created. You can now sign in and start managing stock.</p>",
    )


def otp_template(name: str, otp: str) -> str:
    return _layout(
        "Password reset code",
        f"<p>Hello {name},</p>"
        "<p>Use the following code to reset your password:</p>"
        f"<p style=\"font-size: 28px; letter-spacing: 6px; font-weight: bold;\">{otp}</p>"
        f"<p>The code expires in {settings.OTP_EXPIRE_MINUTES} minutes. "
        "If you did not request a reset, you can ignore this email.</p>",
    )


def password_changed_template(name: str) -> str:
    return _layout(
        "Your password was changed",
        f"<p>Hello {name},</p>"
        "<p>The password for your account was just changed. "
        "If this was not you, contact an administrator immediately.</p>",
    )


# =============================================================================
# 발송 서비스
# =============================================================================
class EmailService:
    def __init__(self, config: Optional[ConnectionConfig] = None):
        self.config = config or get_mail_config()
        self.mailer = FastMail(self.config)

    async def send(self, to: str, subject: str, html: str) -> None:
        message = MessageSchema(
            subject=subject,
            recipients=[to],
            body=html,
            subtype=MessageType.html,
        )
        await self.mailer.send_message(message)
        logger.info("Email '%s' sent to %s", subject, to)

    async def send_welcome(self, to: str, name: str) -> None:
        await self.send(to, f"Welcome to {settings.APP_NAME}", welcome_template(name))

    async def send_otp(self, to: str, otp: str, name: str) -> None:
        await self.send(to, "Your password reset code", otp_template(name, otp))

    async def send_password_changed(self, to: str, name: str) -> None:
        await self.send(to, "Your password has been changed", password_changed_template(name))

    async def test_connection(self) -> None:
        """SMTP 서버에 접속 및 로그인할 수 있는지 확인합니다. 실패 시 예외가 전파됩니다."""
        async with Connection(self.config):
            pass


email_service = EmailService()
