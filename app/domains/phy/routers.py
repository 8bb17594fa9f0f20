# app/domains/phy/routers.py

"""
'phy' 도메인 (의학 물리 시험) 관련 API 엔드포인트를 정의하는 모듈입니다.
모든 엔드포인트는 PROFISSIONAL 이상 요금제에서만 사용할 수 있습니다.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, status
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core import dependencies as deps
from app.domains.mnt.lifecycle import derive_display_status
from app.domains.mnt.models import DisplayStatus

from . import crud as phy_crud
from . import models as phy_models
from . import schemas as phy_schemas
from . import services as phy_services

router = APIRouter(
    tags=["Medical Physics (의학 물리 시험)"],
    responses={404: {"description": "Not found"}},
)


def _test_response(record: phy_models.MedicalPhysicsTest, clock: deps.Clock) -> phy_schemas.PhysicsTestResponse:
    return phy_schemas.PhysicsTestResponse.model_validate(
        record, update={"display_status": derive_display_status(record, clock.today())}
    )


@router.post("/tests", response_model=phy_schemas.PhysicsTestResponse, status_code=status.HTTP_201_CREATED, summary="의학 물리 시험 예약")
async def create_physics_test(
    test_in: phy_schemas.PhysicsTestCreate,
    db: AsyncSession = Depends(deps.get_session),
    clock: deps.Clock = Depends(deps.get_clock),
    ctx: deps.TenantContext = Depends(deps.require_permission("physics.create")),
):
    """
    - 예정일은 만기일과 같거나 이전이어야 합니다.
    - `periodicity_months`를 생략하면 방사선 측정/누설 시험은 48개월, 그 외는 12개월입니다.
    """
    record = await phy_services.create_physics_test(db, ctx, test_in)
    return _test_response(record, clock)


@router.get("/tests", response_model=List[phy_schemas.PhysicsTestResponse], summary="의학 물리 시험 목록 조회")
async def read_physics_tests(
    skip: int = 0,
    limit: int = 100,
    display_status: Optional[DisplayStatus] = None,
    equipment_id: Optional[int] = None,
    test_type: Optional[phy_models.PhysicsTestType] = None,
    db: AsyncSession = Depends(deps.get_session),
    clock: deps.Clock = Depends(deps.get_clock),
    ctx: deps.TenantContext = Depends(deps.require_permission("physics.view")),
):
    records = await phy_crud.physics_test.get_filtered(
        db,
        tenant_id=ctx.tenant_id,
        today=clock.today(),
        display_status=display_status,
        equipment_id=equipment_id,
        test_type=test_type,
        skip=skip,
        limit=limit,
    )
    return [_test_response(record, clock) for record in records]


@router.get("/tests/{test_id}", response_model=phy_schemas.PhysicsTestResponse, summary="특정 의학 물리 시험 조회")
async def read_physics_test(
    test_id: int,
    db: AsyncSession = Depends(deps.get_session),
    clock: deps.Clock = Depends(deps.get_clock),
    ctx: deps.TenantContext = Depends(deps.require_permission("physics.view")),
):
    record = await phy_crud.physics_test.get_or_404(db, id=test_id, tenant_id=ctx.tenant_id)
    return _test_response(record, clock)


@router.post("/tests/{test_id}/execute", response_model=phy_schemas.PhysicsTestExecutionResult, summary="의학 물리 시험 실행 처리")
async def execute_physics_test(
    test_id: int,
    execute_in: phy_schemas.PhysicsTestExecute,
    db: AsyncSession = Depends(deps.get_session),
    clock: deps.Clock = Depends(deps.get_clock),
    ctx: deps.TenantContext = Depends(deps.require_permission("physics.execute")),
):
    record, successor = await phy_services.execute_physics_test(db, ctx, test_id, execute_in)
    return phy_schemas.PhysicsTestExecutionResult(
        executed=_test_response(record, clock),
        successor=_test_response(successor, clock) if successor is not None else None,
    )


@router.delete("/tests/{test_id}", status_code=status.HTTP_204_NO_CONTENT, summary="의학 물리 시험 삭제")
async def delete_physics_test(
    test_id: int,
    db: AsyncSession = Depends(deps.get_session),
    ctx: deps.TenantContext = Depends(deps.require_permission("physics.delete")),
):
    await phy_services.delete_physics_test(db, ctx, test_id)
    return None
