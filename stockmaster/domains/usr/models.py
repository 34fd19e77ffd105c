# stockmaster/domains/usr/models.py

"""
'usr' 도메인의 데이터베이스 ORM 모델을 정의하는 모듈입니다.

이 모듈은 사용자(users)와 비밀번호 재설정 코드(otp_tokens) 테이블에 대한 SQLModel 클래스를 포함합니다.
각 클래스는 테이블의 구조와 컬럼을 Python 객체로 매핑하며,
SQLModel의 Field 및 Relationship을 사용하여 데이터베이스 제약 조건 및 관계를 정의합니다.
"""

from typing import Optional, List
from datetime import datetime, UTC
from enum import IntEnum
from sqlmodel import Field, Relationship, SQLModel, Column
from sqlalchemy import ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP


# =============================================================================
# 사용자 역할(RBAC)
# =============================================================================
class UserRole(IntEnum):
    """
    사용자 역할을 정의하는 정수형 Enum 클래스입니다.
    값이 작을수록 권한이 넓습니다.
    """
    ADMIN = 10              # 시스템 관리자
    INVENTORY_MANAGER = 60  # 재고 관리자 (기준 정보 관리)
    WAREHOUSE_STAFF = 100   # 창고 작업자 (입출고, 조정, 이동)


# =============================================================================
# 1. users 테이블 모델
# =============================================================================
class UserBase(SQLModel):
    """
    users 테이블의 기본 속성을 정의하는 SQLModel Base 클래스입니다.
    """
    email: str = Field(max_length=100, sa_column_kwargs={"unique": True}, index=True, description="로그인 이메일")
    name: str = Field(max_length=100, description="사용자 이름")
    role: UserRole = Field(default=UserRole.WAREHOUSE_STAFF, description="사용자 역할 (권한)")
    is_active: bool = Field(default=True, description="계정 활성 여부")


class User(UserBase, table=True):
    """
    users 테이블에 매핑되는 SQLModel ORM 클래스입니다.
    """
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True, description="사용자 고유 ID")
    password_hash: str = Field(max_length=255, description="해싱된 비밀번호")

    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="레코드 생성 일시"
    )
    updated_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()),
        description="레코드 마지막 업데이트 일시"
    )

    otp_tokens: List["OTPToken"] = Relationship(
        back_populates="user",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"}
    )


# =============================================================================
# 2. otp_tokens 테이블 모델
# =============================================================================
class OTPToken(SQLModel, table=True):
    """
    비밀번호 재설정용 6자리 일회용 코드입니다.
    사용자당 하나만 유효하며, 새 코드를 발급하면 이전 코드는 삭제됩니다.
    """
    __tablename__ = "otp_tokens"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(
        sa_column=Column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True),
        description="사용자 ID (FK)"
    )
    token: str = Field(max_length=6, description="6자리 숫자 코드")
    expires_at: datetime = Field(
        sa_column=Column(TIMESTAMP(timezone=True), nullable=False),
        description="만료 일시"
    )
    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="레코드 생성 일시"
    )

    user: Optional[User] = Relationship(back_populates="otp_tokens")
