# app/core/security.py

"""
애플리케이션의 보안 관련 유틸리티 함수 및 의존성 주입을 정의하는 모듈입니다.

- 비밀번호 해싱 및 검증.
- JWT(JSON Web Token) 생성 및 검증.
- OAuth2 Password Bearer 스키마를 사용하여 현재 사용자 획득.
- 테넌트 컨텍스트(tenant_id, role, plan) 구성 및 권한/요금제 검사.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from jose import jwt, JWTError
from passlib.context import CryptContext
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from app import API_PREFIX
from app.core.config import settings
from app.core.database import get_session
from app.core.exceptions import PermissionDeniedError
from app.core.permissions import has_permission, plan_allows
from app.domains.usr import models as usr_models

logger = logging.getLogger(__name__)

# --- 비밀번호 해싱 설정 ---
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    일반 텍스트 비밀번호와 해싱된 비밀번호를 비교하여 일치하는지 확인합니다.
    """
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


# --- OAuth2 스키마 설정 ---
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{API_PREFIX}/usr/auth/token")


# --- JWT 토큰 생성 및 검증 ---
def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Access Token을 생성합니다.
    """
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, settings.SECRET_KEY.get_secret_value(), algorithm=settings.ALGORITHM)
    logger.debug("Access token created, expires at: %s", expire)
    return encoded_jwt


async def get_current_user_from_token(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_session),
) -> usr_models.User:
    """
    JWT 토큰을 디코딩하고 검증하여 현재 사용자를 데이터베이스에서 가져옵니다.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, settings.SECRET_KEY.get_secret_value(), algorithms=[settings.ALGORITHM])
        username: Optional[str] = payload.get("sub")
        if username is None:
            raise credentials_exception
    except JWTError as e:
        logger.debug("JWTError: %s", e)
        raise credentials_exception

    statement = select(usr_models.User).where(usr_models.User.username == username)
    result = await db.execute(statement)
    user = result.scalars().one_or_none()
    if user is None:
        raise credentials_exception
    return user


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


# =============================================================================
# 테넌트 컨텍스트 및 권한 검사
# =============================================================================
@dataclass(frozen=True)
class TenantContext:
    """정비 엔진의 모든 연산에 전달되는 호출자 정보. 엔진은 이 값을 신뢰합니다."""
    tenant_id: int
    user_id: int
    role: usr_models.UserRole
    plan: Optional[usr_models.TenantPlan]


async def get_tenant_context(
    current_user: usr_models.User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_session),
) -> TenantContext:
    tenant = await db.get(usr_models.Tenant, current_user.tenant_id)
    if tenant is None or not tenant.is_active:
        raise PermissionDeniedError("Organização inativa ou inexistente.")
    return TenantContext(
        tenant_id=tenant.id,
        user_id=current_user.id,
        role=current_user.role,
        plan=tenant.plan,
    )


def check_permission(ctx: TenantContext, permission: str) -> None:
    if not has_permission(ctx.role, permission):
        logger.warning("권한 거부: user=%s role=%s permission=%s", ctx.user_id, ctx.role.name, permission)
        raise PermissionDeniedError("Você não tem permissão para esta operação.")
    if not plan_allows(ctx.plan, permission):
        logger.warning("요금제 제한: tenant=%s plan=%s permission=%s", ctx.tenant_id, ctx.plan, permission)
        raise PermissionDeniedError("Funcionalidade não disponível no seu plano.")


def require_permission(permission: str) -> Callable:
    """
    역할과 요금제를 모두 검사하는 FastAPI 의존성을 만듭니다.

    사용 예:
        ctx: TenantContext = Depends(require_permission("ticket.create"))
    """
    async def _dependency(ctx: TenantContext = Depends(get_tenant_context)) -> TenantContext:
        check_permission(ctx, permission)
        return ctx

    return _dependency
