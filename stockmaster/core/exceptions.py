# stockmaster/core/exceptions.py

"""
애플리케이션 전역 예외 핸들러를 정의하는 모듈입니다.

모든 오류 응답은 동일한 JSON 형태를 가집니다.
    {"success": false, "detail": "<메시지>"}

- HTTPException: 상태 코드와 헤더를 그대로 유지합니다.
- 요청 검증 오류: 422 + errors 목록.
- 무결성 제약 위반(IntegrityError): 400.
- 조회 결과 없음(NoResultFound): 404.
- 기타 DB 오류: 400.
- 처리되지 않은 예외: 500 (트레이스백은 로그에만 남깁니다).
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, NoResultFound, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


def error_response(status_code: int, detail, headers=None, **extra) -> JSONResponse:
    content = {"success": False, "detail": detail, **extra}
    return JSONResponse(status_code=status_code, content=jsonable_encoder(content), headers=headers)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(exc.status_code, exc.detail, headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY, "Validation error", errors=exc.errors()
    )


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.warning("Integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
    return error_response(status.HTTP_400_BAD_REQUEST, "Duplicate entry - this record already exists")


async def no_result_handler(request: Request, exc: NoResultFound) -> JSONResponse:
    return error_response(status.HTTP_404_NOT_FOUND, "Record not found")


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Database error on %s %s: %s", request.method, request.url.path, exc)
    return error_response(status.HTTP_400_BAD_REQUEST, "Database operation failed")


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    """main.py에서 호출하여 모든 핸들러를 등록합니다."""
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(NoResultFound, no_result_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
