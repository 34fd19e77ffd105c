# stockmaster/core/security.py

"""
애플리케이션의 보안 관련 유틸리티 함수 및 의존성 주입을 정의하는 모듈입니다.

- 비밀번호 해싱 및 검증.
- JWT(JSON Web Token) Access/Refresh 토큰 생성 및 검증.
- httpOnly 쿠키 또는 Authorization 헤더에서 토큰을 읽어 현재 사용자 획득.
- 사용자 역할(role) 기반 권한 부여(Authorization) 검사.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import jwt, JWTError
from passlib.context import CryptContext
from fastapi import Depends, HTTPException, Request, Response, status
from fastapi.security import OAuth2PasswordBearer
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from stockmaster import API_PREFIX
from stockmaster.core.config import settings
from stockmaster.core.database import get_session
from stockmaster.domains.usr import models as usr_models

logger = logging.getLogger(__name__)

ACCESS_TOKEN_COOKIE = "access_token"
REFRESH_TOKEN_COOKIE = "refresh_token"

# --- 비밀번호 해싱 설정 ---
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    일반 텍스트 비밀번호와 해싱된 비밀번호를 비교하여 일치하는지 확인합니다.
    """
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """
    주어진 비밀번호를 해싱합니다.
    """
    return pwd_context.hash(password)


# --- OAuth2 스키마 설정 ---
# 쿠키로도 인증할 수 있어야 하므로 auto_error=False 로 두고 직접 401을 발생시킵니다.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{API_PREFIX}/usr/auth/token", auto_error=False)


# --- JWT 토큰 생성 및 검증 ---
def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Access Token을 생성합니다.
    """
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode.update({"exp": expire, "type": "access"})
    return jwt.encode(to_encode, settings.SECRET_KEY.get_secret_value(), algorithm=settings.ALGORITHM)


def create_refresh_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Refresh Token을 생성합니다.
    Access Token과 다른 서명 키를 사용하며, 만료 기간이 훨씬 깁니다.
    """
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
    )
    to_encode.update({"exp": expire, "type": "refresh"})
    return jwt.encode(to_encode, settings.refresh_secret, algorithm=settings.ALGORITHM)


def create_token_pair(user: usr_models.User) -> Dict[str, str]:
    """사용자에 대한 access/refresh 토큰 쌍을 생성합니다."""
    claims = {"sub": str(user.id), "email": user.email, "role": user.role.name}
    return {
        "access_token": create_access_token(claims),
        "refresh_token": create_refresh_token(claims),
    }


def decode_refresh_token(token: str) -> Dict[str, Any]:
    """
    Refresh Token을 검증하고 payload를 반환합니다.
    서명/만료/유형이 올바르지 않으면 JWTError를 발생시킵니다.
    """
    payload = jwt.decode(token, settings.refresh_secret, algorithms=[settings.ALGORITHM])
    if payload.get("type") != "refresh" or payload.get("sub") is None:
        raise JWTError("Not a refresh token")
    return payload


# --- 인증 쿠키 ---
def set_auth_cookies(response: Response, tokens: Dict[str, str]) -> None:
    """access/refresh 토큰을 httpOnly 쿠키로 설정합니다."""
    common = {"httponly": True, "secure": settings.is_production, "samesite": "strict"}
    response.set_cookie(
        ACCESS_TOKEN_COOKIE, tokens["access_token"],
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60, **common,
    )
    response.set_cookie(
        REFRESH_TOKEN_COOKIE, tokens["refresh_token"],
        max_age=settings.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60, **common,
    )


def clear_auth_cookies(response: Response) -> None:
    response.delete_cookie(ACCESS_TOKEN_COOKIE)
    response.delete_cookie(REFRESH_TOKEN_COOKIE)


async def get_current_user_from_token(
    request: Request,
    bearer_token: Optional[str] = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_session),
) -> usr_models.User:
    """
    쿠키(access_token) 또는 Authorization 헤더의 JWT를 디코딩하고 검증하여
    현재 사용자를 데이터베이스에서 가져옵니다. 쿠키가 우선합니다.
    """
    token = request.cookies.get(ACCESS_TOKEN_COOKIE) or bearer_token
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, settings.SECRET_KEY.get_secret_value(), algorithms=[settings.ALGORITHM])
        subject: Optional[str] = payload.get("sub")
        if subject is None or payload.get("type") != "access":
            raise credentials_exception
        user_id = int(subject)
    except (JWTError, ValueError) as e:
        logger.debug("Access token rejected: %s", e)
        raise credentials_exception

    result = await db.execute(select(usr_models.User).where(usr_models.User.id == user_id))
    user = result.scalars().one_or_none()
    if user is None:
        raise credentials_exception
    return user


# --- 역할 기반 권한 부여 의존성 ---

def get_current_active_user(
    current_user: usr_models.User = Depends(get_current_user_from_token),
) -> usr_models.User:
    """
    현재 인증된 활성 사용자를 반환합니다.
    계정이 비활성화된 경우 400 Bad Request를 발생시킵니다.
    """
    if not current_user.is_active:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Inactive user")
    return current_user


def get_current_manager_user(
    current_user: usr_models.User = Depends(get_current_active_user),
) -> usr_models.User:
    """
    기준 정보(창고, 위치, 제품, 공급업체)를 관리할 수 있는 사용자를 반환합니다.
    ADMIN 또는 INVENTORY_MANAGER 가 아니면 403 Forbidden을 발생시킵니다.
    """
    allowed_roles = [usr_models.UserRole.ADMIN, usr_models.UserRole.INVENTORY_MANAGER]
    if current_user.role not in allowed_roles:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not enough permissions. Inventory manager role required."
        )
    return current_user


def get_current_admin_user(
    current_user: usr_models.User = Depends(get_current_active_user),
) -> usr_models.User:
    """
    현재 인증된 관리자 사용자를 반환합니다.
    관리자 권한이 없는 경우 403 Forbidden을 발생시킵니다.
    """
    if current_user.role != usr_models.UserRole.ADMIN:
        logger.info("Role '%s' rejected for admin endpoint (user id=%s)", current_user.role.name, current_user.id)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not enough permissions. Admin role required."
        )
    return current_user
