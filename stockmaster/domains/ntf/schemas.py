# stockmaster/domains/ntf/schemas.py

from enum import Enum
from pydantic import BaseModel, EmailStr, Field


class EmailType(str, Enum):
    WELCOME = "welcome"
    OTP = "otp"
    PASSWORD_CHANGE = "password-change"


class TestEmailRequest(BaseModel):
    """관리자용 테스트 메일 발송 요청"""
    email: EmailStr = Field(..., description="수신 주소")
    type: EmailType = Field(EmailType.WELCOME, description="보낼 템플릿 종류")


class EmailResult(BaseModel):
    success: bool = True
    message: str
