# stockmaster/core/config.py

from typing import List, Optional
from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict
import os

# 프로젝트의 루트 디렉토리 경로를 계산합니다.
BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


class Settings(BaseSettings):
    """
    애플리케이션의 모든 설정을 정의하는 Pydantic BaseSettings 모델입니다.
    환경 변수 및 .env 파일에서 값을 자동으로 로드합니다.
    """

    # --- Pydantic Settings 설정 ---
    model_config = SettingsConfigDict(
        env_file=os.path.join(BASE_DIR, '.env'),  # 프로젝트 루트의 .env 파일을 명시적으로 지정
        env_file_encoding='utf-8',
        extra='ignore',                      # 모델에 없는 변수는 무시
        case_sensitive=True
    )

    # --- 애플리케이션 기본 설정 ---
    APP_NAME: str = "Stock Master API"
    APP_VERSION: str = "0.1.0"
    APP_DESCRIPTION: str = "Warehouse, stock and delivery management API"
    # 애플리케이션 환경 (예: "development", "production", "testing")
    APP_ENV: str = Field("development", description="Application environment (e.g., development, production, testing)")
    DEBUG_MODE: bool = Field(False, description="Enable debug mode for detailed logging and SQL echo")

    # --- 데이터베이스 설정 ---
    DATABASE_URL: SecretStr = Field(..., description="Async SQLAlchemy database URL (postgresql+asyncpg or sqlite+aiosqlite)")

    # --- JWT (JSON Web Token) 설정 ---
    SECRET_KEY: SecretStr = Field(..., description="Secret key for access token signing. Keep this highly secure!")
    REFRESH_SECRET_KEY: Optional[SecretStr] = Field(None, description="Secret key for refresh tokens (defaults to SECRET_KEY)")
    ALGORITHM: str = Field("HS256", description="Algorithm used for JWT signing (e.g., HS256)")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(15, description="Access token expiration time in minutes")
    REFRESH_TOKEN_EXPIRE_DAYS: int = Field(7, description="Refresh token expiration time in days")

    # --- 비밀번호 재설정 (OTP) ---
    OTP_EXPIRE_MINUTES: int = Field(10, description="Password reset code lifetime in minutes")

    # --- CORS ---
    CORS_ORIGINS: List[str] = Field(["http://localhost:5173"], description="Allowed frontend origins")

    # --- ARQ (Redis) 설정 ---
    REDIS_HOST: str = Field("localhost", description="Redis host for the ARQ worker")
    REDIS_PORT: int = Field(6379, description="Redis port for the ARQ worker")

    # --- 메일 (fastapi-mail) 설정 ---
    MAIL_USERNAME: str = Field("", description="SMTP user name")
    MAIL_PASSWORD: SecretStr = Field(SecretStr(""), description="SMTP password")
    MAIL_FROM: str = Field("noreply@stockmaster.com", description="Sender address")
    MAIL_FROM_NAME: str = Field("Stock Master", description="Sender display name")
    MAIL_SERVER: str = Field("localhost", description="SMTP host")
    MAIL_PORT: int = Field(587, description="SMTP port")
    MAIL_STARTTLS: bool = Field(True, description="Use STARTTLS")
    MAIL_SSL_TLS: bool = Field(False, description="Use implicit TLS (port 465)")
    MAIL_SUPPRESS_SEND: bool = Field(False, description="Build messages without delivering them (tests)")

    @property
    def is_production(self) -> bool:
        return self.APP_ENV == "production"

    @property
    def refresh_secret(self) -> str:
        # 별도 키가 없으면 access token 키를 재사용합니다.
        key = self.REFRESH_SECRET_KEY or self.SECRET_KEY
        return key.get_secret_value()


settings = Settings()
