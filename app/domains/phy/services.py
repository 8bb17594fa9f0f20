# app/domains/phy/services.py

"""
의학 물리 시험의 생성, 실행, 삭제를 처리하는 서비스 모듈입니다.

예방 정비와 달리 예정일이 만기일보다 늦은 요청은 거부하며, 작업 지시서는 만들지 않습니다.
실행 시 주기가 0보다 크면 다음 시험을 같은 트랜잭션 안에서 재생성합니다.
"""

import logging
from typing import Optional, Tuple

from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.database import atomic
from app.core.exceptions import ValidationError
from app.core.security import TenantContext
from app.domains.fms import crud as fms_crud
from app.domains.mnt.lifecycle import claim_scheduled
from app.domains.mnt.models import RecordStatus
from app.domains.mnt.periodicity import next_schedule
from app.domains.ven import crud as ven_crud

from . import crud as phy_crud
from . import models as phy_models
from . import schemas as phy_schemas

logger = logging.getLogger(__name__)


def regenerate_physics_test(
    db: AsyncSession, record: phy_models.MedicalPhysicsTest
) -> Optional[phy_models.MedicalPhysicsTest]:
    """실행된 시험의 다음 예정 시험을 만듭니다 (주기가 0이면 None)."""
    schedule = next_schedule(record.execution_date, record.periodicity_months)
    if schedule is None:
        return None

    scheduled_date, due_date = schedule
    successor = phy_models.MedicalPhysicsTest(
        tenant_id=record.tenant_id,
        equipment_id=record.equipment_id,
        type=record.type,
        status=RecordStatus.AGENDADA,
        scheduled_date=scheduled_date,
        due_date=due_date,
        periodicity_months=record.periodicity_months,
        provider_id=record.provider_id,
        provider=record.provider,
    )
    db.add(successor)
    logger.info(
        "의학 물리 시험 재생성: equipment=%s type=%s -> %s", record.equipment_id, record.type, scheduled_date
    )
    return successor


async def create_physics_test(
    db: AsyncSession, ctx: TenantContext, data: phy_schemas.PhysicsTestCreate
) -> phy_models.MedicalPhysicsTest:
    if data.equipment_id is None or data.type is None or data.scheduled_date is None or data.due_date is None:
        raise ValidationError("Equipamento, tipo, data agendada e vencimento sao obrigatorios.")
    if data.scheduled_date > data.due_date:
        raise ValidationError("Data agendada deve ser anterior ou igual ao vencimento.")

    await fms_crud.equipment.get_or_404(db, id=data.equipment_id, tenant_id=ctx.tenant_id)
    provider_id, provider_name = await ven_crud.provider.resolve_reference(
        db, provider_id=data.provider_id, tenant_id=ctx.tenant_id
    )
    periodicity = data.periodicity_months
    if periodicity is None:
        periodicity = phy_models.default_periodicity(data.type)

    async with atomic(db):
        record = phy_models.MedicalPhysicsTest(
            tenant_id=ctx.tenant_id,
            equipment_id=data.equipment_id,
            type=data.type,
            status=RecordStatus.AGENDADA,
            scheduled_date=data.scheduled_date,
            due_date=data.due_date,
            periodicity_months=periodicity,
            provider_id=provider_id,
            provider=provider_name or data.provider,
            notes=data.notes,
        )
        db.add(record)

    logger.info("의학 물리 시험 생성: id=%s type=%s tenant=%s", record.id, record.type, ctx.tenant_id)
    return record


async def execute_physics_test(
    db: AsyncSession, ctx: TenantContext, test_id: int, data: phy_schemas.PhysicsTestExecute
) -> Tuple[phy_models.MedicalPhysicsTest, Optional[phy_models.MedicalPhysicsTest]]:
    record = await phy_crud.physics_test.get_or_404(db, id=test_id, tenant_id=ctx.tenant_id)
    if record.status != RecordStatus.AGENDADA:
        raise ValidationError("Este teste ja foi realizado.")

    values = {"execution_date": data.execution_date}
    if data.report_url is not None:
        values["report_url"] = data.report_url
    if data.notes is not None:
        values["notes"] = data.notes

    async with atomic(db):
        if not await claim_scheduled(
            db, phy_models.MedicalPhysicsTest, record_id=record.id, tenant_id=ctx.tenant_id, values=values
        ):
            raise ValidationError("Este teste ja foi realizado.")
        await db.refresh(record)
        successor = regenerate_physics_test(db, record)

    logger.info("의학 물리 시험 %s: AGENDADA -> REALIZADA (tenant=%s)", record.id, ctx.tenant_id)
    return record, successor


async def delete_physics_test(db: AsyncSession, ctx: TenantContext, test_id: int) -> None:
    record = await phy_crud.physics_test.get_or_404(db, id=test_id, tenant_id=ctx.tenant_id)
    async with atomic(db):
        await db.delete(record)
    logger.info("의학 물리 시험 삭제: id=%s tenant=%s", test_id, ctx.tenant_id)
