# app/domains/fms/routers.py

"""
'fms' 도메인 (PostgreSQL 'fms' 스키마)의 API 엔드포인트를 정의하는 모듈입니다.

설비 유형과 설비에 대한 CRUD 엔드포인트를 제공합니다.
모든 엔드포인트는 호출자의 테넌트 범위 안에서만 동작합니다.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, status
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.database import get_session
from app.core.dependencies import require_permission, TenantContext

from app.domains.fms import crud as fms_crud
from app.domains.fms import models as fms_models
from app.domains.fms import schemas as fms_schemas


router = APIRouter(
    tags=["Equipment Management (의료기기 관리)"],
    responses={404: {"description": "Not found"}},
)


#  =============================================================================
#  1. fms.equipment_types 엔드포인트
#  =============================================================================
@router.post("/equipment_types", response_model=fms_schemas.EquipmentTypeResponse, status_code=status.HTTP_201_CREATED, summary="새 설비 유형 생성")
async def create_equipment_type(
    type_create: fms_schemas.EquipmentTypeCreate,
    db: AsyncSession = Depends(get_session),
    ctx: TenantContext = Depends(require_permission("equipment.create")),
):
    return await fms_crud.equipment_type.create(db, obj_in=type_create, tenant_id=ctx.tenant_id)


@router.get("/equipment_types", response_model=List[fms_schemas.EquipmentTypeResponse], summary="설비 유형 목록 조회")
async def read_equipment_types(
    skip: int = 0,
    limit: int = 100,
    db: AsyncSession = Depends(get_session),
    ctx: TenantContext = Depends(require_permission("equipment.view")),
):
    return await fms_crud.equipment_type.get_multi(db, tenant_id=ctx.tenant_id, skip=skip, limit=limit)


#  =============================================================================
#  2. fms.equipments 엔드포인트
#  =============================================================================
@router.post("/equipments", response_model=fms_schemas.EquipmentResponse, status_code=status.HTTP_201_CREATED, summary="새 설비 등록")
async def create_equipment(
    equipment_create: fms_schemas.EquipmentCreate,
    db: AsyncSession = Depends(get_session),
    ctx: TenantContext = Depends(require_permission("equipment.create")),
):
    """
    새로운 설비를 등록합니다.
    - `criticality`가 `A`이면 `contingency_plan`이 필수입니다.
    """
    return await fms_crud.equipment.create(db, obj_in=equipment_create, tenant_id=ctx.tenant_id)


@router.get("/equipments", response_model=List[fms_schemas.EquipmentResponse], summary="설비 목록 조회")
async def read_equipments(
    skip: int = 0,
    limit: int = 100,
    status_filter: Optional[fms_models.EquipmentStatus] = None,
    criticality: Optional[fms_models.Criticality] = None,
    db: AsyncSession = Depends(get_session),
    ctx: TenantContext = Depends(require_permission("equipment.view")),
):
    return await fms_crud.equipment.get_multi(
        db,
        tenant_id=ctx.tenant_id,
        skip=skip,
        limit=limit,
        filters={"status": status_filter, "criticality": criticality},
    )


@router.get("/equipments/{equipment_id}", response_model=fms_schemas.EquipmentResponse, summary="특정 설비 조회")
async def read_equipment(
    equipment_id: int,
    db: AsyncSession = Depends(get_session),
    ctx: TenantContext = Depends(require_permission("equipment.view")),
):
    return await fms_crud.equipment.get_or_404(db, id=equipment_id, tenant_id=ctx.tenant_id)


@router.put("/equipments/{equipment_id}", response_model=fms_schemas.EquipmentResponse, summary="설비 정보 업데이트")
async def update_equipment(
    equipment_id: int,
    equipment_update: fms_schemas.EquipmentUpdate,
    db: AsyncSession = Depends(get_session),
    ctx: TenantContext = Depends(require_permission("equipment.edit")),
):
    db_equipment = await fms_crud.equipment.get_or_404(db, id=equipment_id, tenant_id=ctx.tenant_id)
    return await fms_crud.equipment.update(db, db_obj=db_equipment, obj_in=equipment_update)


@router.delete("/equipments/{equipment_id}", status_code=status.HTTP_204_NO_CONTENT, summary="설비 삭제")
async def delete_equipment(
    equipment_id: int,
    db: AsyncSession = Depends(get_session),
    ctx: TenantContext = Depends(require_permission("equipment.delete")),
):
    await fms_crud.equipment.get_or_404(db, id=equipment_id, tenant_id=ctx.tenant_id)
    await fms_crud.equipment.delete(db, id=equipment_id, tenant_id=ctx.tenant_id)
    return None
