# app/core/database.py

"""
애플리케이션의 데이터베이스 연결 및 세션 관리를 담당하는 모듈입니다.

- SQLModel의 비동기 엔진을 설정합니다.
- 비동기 세션 생성을 위한 유틸리티 함수를 제공합니다.
- 여러 쓰기 작업을 하나의 트랜잭션으로 묶는 atomic() 컨텍스트 관리자를 제공합니다.
- 애플리케이션 시작 시 데이터베이스 스키마/테이블을 생성하는 함수를 포함합니다 (개발용).
"""

import logging
from typing import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine
from sqlalchemy.orm import sessionmaker
from sqlalchemy import text

from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.config import settings

logger = logging.getLogger(__name__)

# 각 도메인은 PostgreSQL 스키마 하나에 대응합니다.
SCHEMAS = ['usr', 'fms', 'ven', 'mnt', 'phy']

_database_url = settings.DATABASE_URL.get_secret_value()
_engine_options = {
    "echo": settings.DEBUG_MODE,  # 디버그 모드일 때만 SQL 쿼리 출력
    "future": True,
    "pool_recycle": 3600,  # 1시간마다 연결 재활용
}
if not _database_url.startswith("sqlite"):
    # SQLite(StaticPool)는 커넥션 풀 크기 옵션을 받지 않습니다.
    _engine_options.update(pool_size=10, max_overflow=20)

engine: AsyncEngine = create_async_engine(_database_url, **_engine_options)

# 비동기 세션을 생성하는 '세션 공장'을 정의합니다.
AsyncSessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

metadata = SQLModel.metadata


# =============================================================================
# 데이터베이스 초기화 및 테이블 생성 함수
# =============================================================================
async def create_db_and_tables() -> None:
    """
    데이터베이스 스키마 및 테이블을 생성합니다.
    이 함수는 개발 환경에서만 사용해야 하며, 기존 테이블을 삭제하지는 않습니다.
    """
    # 모든 모델이 metadata에 등록되도록 임포트합니다.
    from app.domains import models  # noqa: F401

    async with engine.begin() as conn:
        for schema_name in SCHEMAS:
            await conn.execute(text(f"CREATE SCHEMA IF NOT EXISTS {schema_name}"))
            logger.debug("스키마 '%s' 생성 완료 또는 이미 존재.", schema_name)
        await conn.run_sync(SQLModel.metadata.create_all)
    logger.info("데이터베이스 테이블 생성이 완료되었습니다 (또는 이미 존재).")


# =============================================================================
# 비동기 데이터베이스 세션 의존성 주입
# =============================================================================
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI 의존성 주입을 위한 비동기 데이터베이스 세션 제너레이터입니다.
    요청마다 새로운 세션을 생성하고, 요청 처리 후 세션을 자동으로 닫습니다.
    """
    async with AsyncSessionLocal() as session:
        yield session


@asynccontextmanager
async def atomic(db: AsyncSession) -> AsyncGenerator[AsyncSession, None]:
    """
    블록 안의 모든 쓰기 작업을 하나의 트랜잭션으로 묶습니다.
    정상 종료 시 커밋하고, 어떤 예외든 발생하면 롤백한 뒤 예외를 다시 던집니다.
    """
    try:
        yield db
        await db.commit()
    except Exception:
        logger.warning("트랜잭션 롤백 (session=%s)", id(db))
        await db.rollback()
        raise
