# app/domains/ven/routers.py

"""
'ven' 도메인 (공급업체)의 API 엔드포인트를 정의하는 모듈입니다.
"""

from typing import List
from fastapi import APIRouter, Depends, status
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.database import get_session
from app.core.dependencies import require_permission, TenantContext

from app.domains.ven import crud as ven_crud
from app.domains.ven import schemas as ven_schemas


router = APIRouter(
    tags=["Provider Management (공급업체 관리)"],
    responses={404: {"description": "Not found"}},
)


@router.post("/providers", response_model=ven_schemas.ProviderResponse, status_code=status.HTTP_201_CREATED, summary="새 공급업체 등록")
async def create_provider(
    provider_create: ven_schemas.ProviderCreate,
    db: AsyncSession = Depends(get_session),
    ctx: TenantContext = Depends(require_permission("provider.manage")),
):
    return await ven_crud.provider.create(db, obj_in=provider_create, tenant_id=ctx.tenant_id)


@router.get("/providers", response_model=List[ven_schemas.ProviderResponse], summary="공급업체 목록 조회")
async def read_providers(
    skip: int = 0,
    limit: int = 100,
    db: AsyncSession = Depends(get_session),
    ctx: TenantContext = Depends(require_permission("provider.view")),
):
    return await ven_crud.provider.get_multi(db, tenant_id=ctx.tenant_id, skip=skip, limit=limit)
