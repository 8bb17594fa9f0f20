# app/core/config.py

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
        extra='ignore',                      # .env 파일에 정의되었지만 모델에 없는 변수는 무시
        case_sensitive=True                  # 환경 변수 이름 대소문자 구분
    )

    # --- 애플리케이션 기본 설정 ---
    APP_NAME: str = "BioMed CMMS API"
    APP_VERSION: str = "0.1.0"
    APP_DESCRIPTION: str = "Clinical engineering maintenance lifecycle & compliance API"
    APP_ENV: str = Field("development", description="Application environment (e.g., development, production, testing)")
    DEBUG_MODE: bool = Field(False, description="Enable debug mode for SQL echo and verbose logging")
    LOG_LEVEL: str = Field("INFO", description="Root logging level (DEBUG, INFO, WARNING, ...)")

    # --- 데이터베이스 설정 ---
    DATABASE_URL: SecretStr = Field(..., description="Async database connection URL (postgresql+asyncpg://...)")

    # --- JWT (JSON Web Token) 설정 ---
    SECRET_KEY: SecretStr = Field(..., description="Secret key for JWT token signing. Keep this highly secure!")
    ALGORITHM: str = Field("HS256", description="Algorithm used for JWT signing (e.g., HS256)")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(30, description="Access token expiration time in minutes")

    # --- 정비 엔진 상수 ---
    BULK_MAX_ITEMS: int = Field(100, description="일괄 처리(스케줄/실행) 1회 최대 건수")
    PUBLIC_REPORT_LIMIT: int = Field(5, description="공개 QR 신고: 설비당 시간창 내 최대 신고 수")
    PUBLIC_REPORT_WINDOW_SECONDS: int = Field(3600, description="공개 QR 신고 제한 시간창 (초)")
    INVALIDATION_DUE_DAYS: int = Field(30, description="무효화 후 자동 생성되는 물리 시험의 만기 (일)")


settings = Settings()
