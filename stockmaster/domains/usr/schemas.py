# stockmaster/domains/usr/schemas.py

"""
'usr' 도메인 (사용자 및 인증)의 API 데이터 전송 객체(DTO)를 정의하는 모듈입니다.
"""

from typing import Optional
from datetime import datetime
from sqlmodel import SQLModel
from pydantic import BaseModel, EmailStr, Field

from . import models as usr_models


# =============================================================================
# 1. 사용자 (User) 스키마
# =============================================================================
class UserBase(SQLModel):
    """사용자 정보의 기본 필드를 정의하는 스키마"""
    email: EmailStr = Field(..., max_length=100)
    name: str = Field(..., min_length=1, max_length=100)


class UserCreate(UserBase):
    """사용자 생성을 위한 스키마 (관리 스크립트용, 역할 지정 가능)"""
    password: str = Field(..., min_length=8)
    role: usr_models.UserRole = Field(default=usr_models.UserRole.WAREHOUSE_STAFF, description="사용자 역할")
    is_active: bool = True


class UserRegister(UserBase):
    """공개 회원가입 스키마. 역할은 항상 WAREHOUSE_STAFF 로 생성됩니다."""
    password: str = Field(..., min_length=8)


class UserUpdate(SQLModel):
    """관리자의 사용자 정보 수정을 위한 스키마"""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    role: Optional[usr_models.UserRole] = None
    is_active: Optional[bool] = None


class UserRead(UserBase):
    """
    사용자 정보 조회 스키마.
    비밀번호 해시값 등 민감한 정보는 제외됩니다.
    """
    id: int
    role: usr_models.UserRole
    is_active: bool
    created_at: datetime = Field(..., description="레코드 생성 일시")
    updated_at: datetime = Field(..., description="레코드 마지막 업데이트 일시")


# =============================================================================
# 2. 인증 (Auth) 스키마
# =============================================================================
class Token(BaseModel):
    """OAuth2 토큰 응답 스키마"""
    access_token: str
    token_type: str = "bearer"


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class RefreshRequest(BaseModel):
    """쿠키가 없는 클라이언트는 본문으로 refresh token을 전달할 수 있습니다."""
    refresh_token: Optional[str] = None


class AuthResponse(BaseModel):
    """회원가입/로그인/토큰 갱신 응답"""
    message: str
    user: UserRead
    tokens: TokenPair


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class VerifyOTPRequest(BaseModel):
    email: EmailStr
    otp: str = Field(..., pattern=r"^\d{6}$", description="6자리 숫자 코드")


class ResetPasswordRequest(VerifyOTPRequest):
    new_password: str = Field(..., min_length=8)


class MessageResponse(BaseModel):
    success: bool = True
    message: str
