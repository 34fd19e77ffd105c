# stockmaster/domains/ntf/__init__.py

"""
FastAPI 애플리케이션의 'ntf' (알림) 도메인 패키지입니다.

테이블을 갖지 않으며, fastapi-mail 기반의 이메일 발송 서비스와
ARQ 발송 태스크, 관리자용 메일 점검 엔드포인트를 포함합니다.

주요 서브모듈:
- `services.py`: 메일 템플릿과 EmailService.
- `tasks.py`: ARQ 발송 태스크와 dispatch 헬퍼.
- `schemas.py`: 테스트 메일 요청/응답 모델.
- `routers.py`: /ntf/email/* 엔드포인트.
"""

__title__ = "Stock Master Notification Domain"
__description__ = "Sends account and password-reset emails."
__version__ = "0.1.0"
__all__ = []
