# stockmaster/domains/usr/__init__.py

"""
FastAPI 애플리케이션의 'usr' 도메인 패키지입니다.

사용자 계정(User), 역할(UserRole), 비밀번호 재설정 코드(OTPToken)와
회원가입/로그인/토큰 갱신/비밀번호 재설정 API를 포함합니다.

주요 서브모듈:
- `models.py`: users, otp_tokens 테이블에 매핑되는 SQLModel 정의.
- `schemas.py`: 요청 및 응답 유효성 검사용 모델.
- `crud.py`: 사용자 및 OTP 비동기 CRUD 로직.
- `routers.py`: /usr/auth/*, /usr/users/* 엔드포인트.
- `tasks.py`: 만료된 OTP 정리 ARQ 태스크.
"""

__title__ = "Stock Master User Domain"
__description__ = "Manages user accounts, roles and authentication."
__version__ = "0.1.0"
__all__ = []
