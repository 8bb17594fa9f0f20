# app/domains/usr/routers.py

"""
'usr' 도메인 (테넌트 및 사용자)과 관련된 API 엔드포인트를 정의하는 모듈입니다.

- 로그인 (OAuth2 password flow) 및 Bearer 토큰 발급.
- 현재 사용자 정보 조회.
- 고장 접수 담당자로 지정 가능한 사용자 목록 조회.
"""

from typing import List
from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlmodel.ext.asyncio.session import AsyncSession

# 애플리케이션 설정 및 의존성 임포트
from app.core.config import settings
from app.core import dependencies as deps

# usr 도메인의 CRUD, 모델, 스키마
from . import crud as usr_crud
from . import models as usr_models
from . import schemas as usr_schemas


# 라우터 인스턴스 생성 (prefix는 main.py에서 관리)
router = APIRouter(
    tags=["Users & Tenants (사용자 및 테넌트)"],  # Swagger UI에 표시될 태그
    responses={404: {"description": "Not found"}},  # 이 라우터의 공통 응답 정의
)


# =============================================================================
# 1. 인증 (Authentication) 엔드포인트
# =============================================================================
@router.post("/auth/token", response_model=usr_schemas.Token, summary="Access Token 획득")
async def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: AsyncSession = Depends(deps.get_session),
):
    user = await usr_crud.user.authenticate(
        db, username=form_data.username, password=form_data.password
    )
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Inactive user")

    access_token_expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    access_token = deps.create_access_token(data={"sub": user.username}, expires_delta=access_token_expires)
    return {"access_token": access_token, "token_type": "bearer"}


@router.get("/auth/me", response_model=usr_schemas.UserReadWithTenant, summary="현재 사용자 정보 조회")
async def read_users_me(
    current_user: usr_models.User = Depends(deps.get_current_active_user),
    db: AsyncSession = Depends(deps.get_session),
):
    """현재 로그인한 사용자와 소속 테넌트(요금제 포함) 정보를 반환합니다."""
    tenant = await usr_crud.tenant.get(db, id=current_user.tenant_id)
    return usr_schemas.UserReadWithTenant.model_validate(current_user, update={"tenant": tenant})


# =============================================================================
# 2. 사용자 (User) 엔드포인트
# =============================================================================
@router.get("/users/assignable", response_model=List[usr_schemas.UserRead], summary="담당자 지정 가능 사용자 목록")
async def read_assignable_users(
    db: AsyncSession = Depends(deps.get_session),
    ctx: deps.TenantContext = Depends(deps.require_permission("ticket.accept")),
):
    """테넌트의 활성 MASTER / TECNICO 사용자 목록입니다."""
    return await usr_crud.user.get_assignable(db, tenant_id=ctx.tenant_id)
