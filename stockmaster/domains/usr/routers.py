# stockmaster/domains/usr/routers.py

"""
'usr' 도메인 (사용자 및 인증)과 관련된 API 엔드포인트를 정의하는 모듈입니다.

인증 토큰은 응답 본문과 httpOnly 쿠키(access_token, refresh_token)로 함께 전달됩니다.
"""

from typing import List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Request, Response, status, Query
from fastapi.security import OAuth2PasswordRequestForm
from jose import JWTError
from sqlmodel.ext.asyncio.session import AsyncSession

from stockmaster.core import dependencies as deps
from stockmaster.core import security
from stockmaster.core.exceptions import error_response
from stockmaster.domains.ntf import tasks as ntf_tasks
from . import crud as usr_crud
from . import models as usr_models
from . import schemas as usr_schemas


router = APIRouter(
    tags=["User & Authentication (사용자 및 인증)"],
    responses={404: {"description": "Not found"}},
)


def _auth_response(response: Response, user: usr_models.User, message: str) -> usr_schemas.AuthResponse:
    tokens = security.create_token_pair(user)
    security.set_auth_cookies(response, tokens)
    return usr_schemas.AuthResponse(
        message=message,
        user=usr_schemas.UserRead.model_validate(user),
        tokens=usr_schemas.TokenPair(**tokens),
    )


async def _authenticate_or_401(db: AsyncSession, email: str, password: str) -> usr_models.User:
    user = await usr_crud.user.authenticate(db, email=email, password=password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Account is deactivated")
    return user


# =============================================================================
# 1. 인증 (Authentication) 엔드포인트
# =============================================================================
@router.post(
    "/auth/register",
    response_model=usr_schemas.AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="회원가입",
)
async def register(
    user_in: usr_schemas.UserRegister,
    response: Response,
    db: AsyncSession = Depends(deps.get_db_session),
    arq_redis_pool=Depends(deps.get_arq_pool),
):
    """새 계정을 만들고 바로 로그인 상태(쿠키)로 만듭니다. 환영 메일은 백그라운드로 발송됩니다."""
    user = await usr_crud.user.register(db, obj_in=user_in)
    await ntf_tasks.dispatch(arq_redis_pool, "send_welcome_email_task", user.email, user.name)
    return _auth_response(response, user, "User registered successfully")


@router.post("/auth/login", response_model=usr_schemas.AuthResponse, summary="로그인 (JSON)")
async def login(
    credentials: usr_schemas.LoginRequest,
    response: Response,
    db: AsyncSession = Depends(deps.get_db_session),
):
    user = await _authenticate_or_401(db, credentials.email, credentials.password)
    return _auth_response(response, user, "Login successful")


@router.post("/auth/token", response_model=usr_schemas.Token, summary="Access Token 획득 (OAuth2 form)")
async def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: AsyncSession = Depends(deps.get_db_session),
):
    """OpenAPI 문서의 Authorize 버튼용 엔드포인트입니다. username 필드에 이메일을 입력합니다."""
    user = await _authenticate_or_401(db, form_data.username, form_data.password)
    tokens = security.create_token_pair(user)
    return {"access_token": tokens["access_token"], "token_type": "bearer"}


@router.post("/auth/refresh", response_model=usr_schemas.AuthResponse, summary="토큰 갱신")
async def refresh_tokens(
    request: Request,
    response: Response,
    body: Optional[usr_schemas.RefreshRequest] = Body(None),
    db: AsyncSession = Depends(deps.get_db_session),
):
    """refresh token(쿠키 우선, 없으면 본문)을 검증하고 새 토큰 쌍을 발급합니다."""
    refresh_token = request.cookies.get(security.REFRESH_TOKEN_COOKIE) or (body.refresh_token if body else None)
    if not refresh_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Refresh token required")

    try:
        payload = security.decode_refresh_token(refresh_token)
        user_id = int(payload["sub"])
    except (JWTError, ValueError):
        # 잘못된 토큰이면 쿠키까지 지운 오류 응답을 돌려줍니다.
        error = error_response(status.HTTP_401_UNAUTHORIZED, "Invalid refresh token")
        security.clear_auth_cookies(error)
        return error

    user = await usr_crud.user.get(db, user_id)
    if not user or not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found or deactivated")
    return _auth_response(response, user, "Tokens refreshed successfully")


@router.post("/auth/logout", response_model=usr_schemas.MessageResponse, summary="로그아웃")
async def logout(response: Response):
    security.clear_auth_cookies(response)
    return {"message": "Logout successful"}


@router.get("/auth/me", response_model=usr_schemas.UserRead, summary="현재 사용자 정보 조회")
async def read_users_me(current_user: usr_models.User = Depends(deps.get_current_active_user)):
    return current_user


# =============================================================================
# 2. 비밀번호 재설정 (OTP) 엔드포인트
# =============================================================================
@router.post("/auth/forgot-password", response_model=usr_schemas.MessageResponse, summary="비밀번호 재설정 코드 요청")
async def forgot_password(
    request_in: usr_schemas.ForgotPasswordRequest,
    db: AsyncSession = Depends(deps.get_db_session),
    arq_redis_pool=Depends(deps.get_arq_pool),
):
    """
    가입된 이메일이면 6자리 재설정 코드를 발급하여 메일로 보냅니다.
    계정 존재 여부를 노출하지 않도록, 없는 이메일에도 같은 성공 응답을 반환합니다.
    """
    user = await usr_crud.user.get_by_email(db, email=request_in.email)
    if not user:
        return {"message": "If an account with that email exists, we have sent a password reset code."}
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Account is deactivated")

    otp = await usr_crud.otp_token.issue(db, user_id=user.id)
    await ntf_tasks.dispatch(arq_redis_pool, "send_otp_email_task", user.email, otp.token, user.name)
    return {"message": "Password reset code has been sent to your email"}


async def _get_user_with_valid_otp(db: AsyncSession, email: str, otp: str) -> usr_models.User:
    user = await usr_crud.user.get_by_email(db, email=email)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    if not await usr_crud.otp_token.get_valid(db, user_id=user.id, token=otp):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid or expired OTP")
    return user


@router.post("/auth/verify-otp", response_model=usr_schemas.MessageResponse, summary="재설정 코드 확인")
async def verify_otp(
    request_in: usr_schemas.VerifyOTPRequest,
    db: AsyncSession = Depends(deps.get_db_session),
):
    await _get_user_with_valid_otp(db, request_in.email, request_in.otp)
    return {"message": "OTP verified successfully"}


@router.post("/auth/reset-password", response_model=usr_schemas.MessageResponse, summary="비밀번호 재설정")
async def reset_password(
    request_in: usr_schemas.ResetPasswordRequest,
    db: AsyncSession = Depends(deps.get_db_session),
    arq_redis_pool=Depends(deps.get_arq_pool),
):
    """코드를 확인한 뒤 비밀번호를 바꾸고, 사용한 코드는 삭제합니다."""
    user = await _get_user_with_valid_otp(db, request_in.email, request_in.otp)
    await usr_crud.otp_token.consume(db, user_id=user.id, token=request_in.otp)
    await usr_crud.user.set_password(db, db_obj=user, password=request_in.new_password)
    await ntf_tasks.dispatch(arq_redis_pool, "send_password_changed_email_task", user.email, user.name)
    return {"message": "Password reset successfully"}


# =============================================================================
# 3. 사용자 (User) 관리 엔드포인트 (관리자)
# =============================================================================
@router.get("/users", response_model=List[usr_schemas.UserRead], summary="모든 사용자 조회")
async def read_users(
    db: AsyncSession = Depends(deps.get_db_session),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1),
    current_admin_user: usr_models.User = Depends(deps.get_current_admin_user),
):
    return await usr_crud.user.get_multi(db, skip=skip, limit=limit)


@router.get("/users/{user_id}", response_model=usr_schemas.UserRead, summary="특정 사용자 조회")
async def read_user(
    user_id: int,
    db: AsyncSession = Depends(deps.get_db_session),
    current_admin_user: usr_models.User = Depends(deps.get_current_admin_user),
):
    user = await usr_crud.user.get(db, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.put("/users/{user_id}", response_model=usr_schemas.UserRead, summary="사용자 정보 수정 (역할/활성)")
async def update_user(
    user_id: int,
    user_in: usr_schemas.UserUpdate,
    db: AsyncSession = Depends(deps.get_db_session),
    current_admin_user: usr_models.User = Depends(deps.get_current_admin_user),
):
    user = await usr_crud.user.get(db, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return await usr_crud.user.update(db, db_obj=user, obj_in=user_in, current_user=current_admin_user)
