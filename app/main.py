# app/main.py

"""
FastAPI 애플리케이션의 진입점입니다.

- 로깅 설정, 수명 주기(lifespan) 핸들러, CORS 미들웨어를 구성합니다.
- 도메인 예외(DomainError), 요청 형식 오류(RequestValidationError), 요청 제한 초과(slowapi),
  DB 예외(SQLAlchemyError)를 모두 `{"error": "..."}` JSON 응답으로 변환합니다.
- 각 도메인 라우터를 `/api/v1/<schema>` 경로에 등록합니다.
"""

import logging
from typing import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import text
from sqlmodel.ext.asyncio.session import AsyncSession
from fastapi import FastAPI, Depends, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

# 핵심 설정 및 데이터베이스 모듈 임포트
from app import API_PREFIX
from app.core.config import settings
from app.core.database import engine, get_session
from app.core.exceptions import DomainError
from app.core.rate_limit import RATE_LIMITED_MESSAGE, limiter

# 각 도메인의 라우터들을 임포트합니다.
# phy 패키지를 임포트하면 교정 정비 해결 이벤트 핸들러도 함께 등록됩니다.
from app.domains.usr.routers import router as usr_router
from app.domains.fms.routers import router as fms_router
from app.domains.ven.routers import router as ven_router
from app.domains.mnt.routers import router as mnt_router, public_router
from app.domains.phy.routers import router as phy_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Erro interno ao processar a solicitação."
INVALID_REQUEST_MESSAGE = "Requisicao invalida."

# 요청 본문/쿼리/경로 위치 접두어는 필드명에서 제외
_LOCATION_PREFIXES = {"body", "query", "path", "header"}


# -- 애플리케이션 수명 주기 이벤트 핸들러 --
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI 애플리케이션의 수명 주기 이벤트를 처리합니다.
    스키마/테이블 생성은 배포 절차에서 수행하며, 여기서는 종료 시 커넥션 풀만 정리합니다.
    """
    logger.info("%s %s 시작 (env=%s)", settings.APP_NAME, settings.APP_VERSION, settings.APP_ENV)
    yield  # 애플리케이션 실행
    logger.info("애플리케이션 종료 중...")
    await engine.dispose()
    logger.info("데이터베이스 연결 풀 종료 완료.")


# -- FastAPI 애플리케이션 인스턴스 생성 --
app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    docs_url="/docs",       # Swagger UI
    redoc_url="/redoc",     # ReDoc
    lifespan=lifespan,
)

# slowapi 제한기 (공개 QR 신고 라우트에서 사용)
app.state.limiter = limiter

# -- CORS 미들웨어 설정 --
# 프로덕션에서는 allow_origins를 실제 프론트엔드 도메인으로 제한해야 합니다.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# -- 예외 핸들러 --
@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """서비스 계층의 도메인 예외를 사용자 메시지와 상태 코드로 변환합니다."""
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RateLimitExceeded)
async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning("요청 제한 초과: %s (%s)", request.url.path, exc.detail)
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={"error": RATE_LIMITED_MESSAGE},
    )


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return INVALID_REQUEST_MESSAGE
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part not in _LOCATION_PREFIXES)
    if not field:
        return INVALID_REQUEST_MESSAGE
    if first.get("type") == "missing":
        return f"Campo obrigatorio ausente: {field}."
    return f"Valor invalido para o campo {field}."


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """요청 형식 오류도 도메인 검증 오류와 같은 400 `{"error": "..."}` 형태로 반환합니다."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": _validation_message(exc)},
    )


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """DB 오류의 상세 내용은 로그에만 남기고, 클라이언트에는 일반 메시지만 반환합니다."""
    logger.exception("데이터베이스 오류: %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": INTERNAL_ERROR_MESSAGE},
    )


# -- 도메인 라우터 포함 --
app.include_router(usr_router, prefix=f"{API_PREFIX}/usr")
app.include_router(fms_router, prefix=f"{API_PREFIX}/fms")
app.include_router(ven_router, prefix=f"{API_PREFIX}/ven")
app.include_router(mnt_router, prefix=f"{API_PREFIX}/mnt")
app.include_router(phy_router, prefix=f"{API_PREFIX}/phy")
app.include_router(public_router, prefix=f"{API_PREFIX}/public")


# -- 루트 엔드포인트 --
@app.get("/", summary="API Root", response_description="Welcome message and documentation link.")
async def read_root():
    """API의 시작점을 알리고 문서 링크를 제공합니다."""
    return {"message": f"Welcome to {settings.APP_NAME}. Visit /docs for interactive API documentation."}


# -- 헬스 체크 엔드포인트 --
@app.get("/health-check", summary="Health Check", response_description="Status of the application and database connection.")
async def health_check(session: AsyncSession = Depends(get_session)):
    """
    데이터베이스에 가벼운 쿼리(select 1)를 실행하여 서비스의 정상 작동 여부를 확인합니다.
    """
    try:
        result = await session.execute(text("SELECT 1"))
        if result.scalar() == 1:
            return {"status": "ok", "database_connection": "successful"}
    except SQLAlchemyError:
        logger.exception("헬스 체크 중 데이터베이스 연결 오류")
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Database health check failed",
    )


# -- Uvicorn 서버 직접 실행 (개발용) --
# if __name__ == "__main__":
#     import uvicorn
#     uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=True, log_level="info")
