# stockmaster/domains/usr/crud.py

"""
'usr' 도메인의 CRUD 작업을 담당하는 모듈입니다.
사용자 계정과 비밀번호 재설정 코드(OTP)를 관리합니다.
"""

import logging
import secrets
from datetime import datetime, timedelta, UTC
from typing import Optional

from sqlalchemy import delete
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from fastapi import HTTPException, status

from stockmaster.core.config import settings
from stockmaster.core.crud_base import CRUDBase
from stockmaster.core.security import get_password_hash, verify_password
from . import models as usr_models
from . import schemas as usr_schemas

logger = logging.getLogger(__name__)


# =============================================================================
# 1. users 테이블 CRUD
# =============================================================================
class CRUDUser(CRUDBase[usr_models.User, usr_schemas.UserCreate, usr_schemas.UserUpdate]):
    def __init__(self):
        super().__init__(model=usr_models.User)

    async def get_by_email(self, db: AsyncSession, *, email: str) -> Optional[usr_models.User]:
        """이메일로 사용자를 조회합니다. (대소문자 무시)"""
        return await self.get_by_attribute(db, attribute="email", value=email.lower())

    async def create(self, db: AsyncSession, *, obj_in: usr_schemas.UserCreate) -> usr_models.User:
        """새로운 사용자를 생성하며 비밀번호를 해싱하고 이메일 중복을 검사합니다."""
        if await self.get_by_email(db, email=obj_in.email):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User with this email already exists")

        user_data = obj_in.model_dump(exclude={"password"})
        user_data["email"] = obj_in.email.lower()
        db_user = usr_models.User(**user_data, password_hash=get_password_hash(obj_in.password))

        db.add(db_user)
        await db.commit()
        await db.refresh(db_user)
        return db_user

    async def register(self, db: AsyncSession, *, obj_in: usr_schemas.UserRegister) -> usr_models.User:
        """공개 회원가입. 역할은 WAREHOUSE_STAFF 로 고정됩니다."""
        return await self.create(
            db,
            obj_in=usr_schemas.UserCreate(
                email=obj_in.email,
                name=obj_in.name,
                password=obj_in.password,
                role=usr_models.UserRole.WAREHOUSE_STAFF,
            ),
        )

    async def authenticate(self, db: AsyncSession, *, email: str, password: str) -> Optional[usr_models.User]:
        """이메일과 비밀번호를 사용하여 사용자를 인증합니다."""
        user = await self.get_by_email(db, email=email)
        if not user:
            return None
        if not verify_password(password, user.password_hash):
            return None
        return user

    async def set_password(self, db: AsyncSession, *, db_obj: usr_models.User, password: str) -> usr_models.User:
        db_obj.password_hash = get_password_hash(password)
        db.add(db_obj)
        await db.commit()
        await db.refresh(db_obj)
        return db_obj

    async def update(
        self,
        db: AsyncSession,
        *,
        db_obj: usr_models.User,
        obj_in: usr_schemas.UserUpdate,
        current_user: Optional[usr_models.User] = None,
    ) -> usr_models.User:
        """
        사용자 정보를 업데이트합니다.
        관리자가 자기 자신의 역할을 낮추거나 계정을 비활성화하는 것은 막습니다.
        """
        if current_user is not None and current_user.id == db_obj.id:
            if obj_in.role is not None and obj_in.role != db_obj.role:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="You cannot change your own role."
                )
            if obj_in.is_active is False:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="You cannot deactivate your own account."
                )
        return await super().update(db, db_obj=db_obj, obj_in=obj_in)


user = CRUDUser()


# =============================================================================
# 2. otp_tokens 테이블 CRUD
# =============================================================================
class CRUDOTPToken(CRUDBase[usr_models.OTPToken, usr_schemas.VerifyOTPRequest, usr_schemas.VerifyOTPRequest]):
    def __init__(self):
        super().__init__(model=usr_models.OTPToken)

    @staticmethod
    def generate_code() -> str:
        """100000 ~ 999999 범위의 6자리 코드를 생성합니다."""
        return str(100000 + secrets.randbelow(900000))

    async def issue(self, db: AsyncSession, *, user_id: int, expires_in_minutes: Optional[int] = None) -> usr_models.OTPToken:
        """기존 코드를 모두 삭제하고 새 코드를 발급합니다."""
        minutes = expires_in_minutes if expires_in_minutes is not None else settings.OTP_EXPIRE_MINUTES
        await db.execute(delete(self.model).where(self.model.user_id == user_id))

        otp = self.model(
            user_id=user_id,
            token=self.generate_code(),
            expires_at=datetime.now(UTC) + timedelta(minutes=minutes),
        )
        db.add(otp)
        await db.commit()
        await db.refresh(otp)
        return otp

    async def get_valid(self, db: AsyncSession, *, user_id: int, token: str) -> Optional[usr_models.OTPToken]:
        """만료되지 않은 일치 코드를 조회합니다."""
        statement = select(self.model).where(
            self.model.user_id == user_id,
            self.model.token == token,
            self.model.expires_at > datetime.now(UTC),
        )
        result = await db.execute(statement)
        return result.scalars().first()

    async def consume(self, db: AsyncSession, *, user_id: int, token: str) -> None:
        """사용된 코드를 삭제합니다. 커밋은 호출 측에서 수행합니다."""
        await db.execute(
            delete(self.model).where(self.model.user_id == user_id, self.model.token == token)
        )

    async def delete_expired(self, db: AsyncSession) -> int:
        """만료된 코드를 모두 삭제하고 삭제된 건수를 반환합니다."""
        result = await db.execute(delete(self.model).where(self.model.expires_at < datetime.now(UTC)))
        await db.commit()
        return result.rowcount or 0


otp_token = CRUDOTPToken()
