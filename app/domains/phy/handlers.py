# app/domains/phy/handlers.py

"""
다른 도메인의 이벤트를 구독하는 'phy' 도메인 핸들러 모듈입니다.

교정 정비가 해결되면 해당 설비의 기존 시험 결과는 더 이상 유효하지 않습니다.
핸들러는 발행자의 세션에서 실행되므로 해결과 무효화는 하나의 트랜잭션으로 커밋됩니다.
"""

import logging
from datetime import date, timedelta
from typing import Optional

from sqlalchemy import update
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.config import settings
from app.core.events import event_bus
from app.domains.mnt.events import CorrectiveResolved
from app.domains.mnt.models import RecordStatus

from . import crud as phy_crud
from . import models as phy_models

logger = logging.getLogger(__name__)

INVALIDATION_NOTE = "Teste invalidado: manutencao corretiva registrada. Necessario reagendar."
SYSTEM_GENERATED_NOTE = "Gerado automaticamente pelo sistema apos manutencao corretiva."


async def ensure_scheduled_test(
    db: AsyncSession,
    *,
    tenant_id: int,
    equipment_id: int,
    test_type: phy_models.PhysicsTestType,
    today: date,
) -> Optional[phy_models.MedicalPhysicsTest]:
    """
    해당 유형의 예정(AGENDADA) 시험이 없으면 오늘 예정, 30일 뒤 만기인 시험을 하나 만듭니다.
    주기와 공급업체는 해당 유형의 가장 최근 레코드에서 이어받습니다. 이미 있으면 None.
    """
    if await phy_crud.physics_test.has_scheduled(
        db, tenant_id=tenant_id, equipment_id=equipment_id, test_type=test_type
    ):
        return None

    latest = await phy_crud.physics_test.get_latest(
        db, tenant_id=tenant_id, equipment_id=equipment_id, test_type=test_type
    )
    record = phy_models.MedicalPhysicsTest(
        tenant_id=tenant_id,
        equipment_id=equipment_id,
        type=test_type,
        status=RecordStatus.AGENDADA,
        scheduled_date=today,
        due_date=today + timedelta(days=settings.INVALIDATION_DUE_DAYS),
        periodicity_months=latest.periodicity_months if latest else phy_models.default_periodicity(test_type),
        provider_id=latest.provider_id if latest else None,
        provider=latest.provider if latest else None,
        notes=SYSTEM_GENERATED_NOTE,
        system_generated=True,
    )
    db.add(record)
    await db.flush()
    logger.info("의학 물리 시험 자동 생성: equipment=%s type=%s", equipment_id, test_type)
    return record


@event_bus.subscribe(CorrectiveResolved)
async def invalidate_physics_tests(db: AsyncSession, event: CorrectiveResolved) -> None:
    """
    1. 설비의 REALIZADA 시험을 모두 AGENDADA로 되돌리고 실행일을 지웁니다.
    2. 설비에 기록된 적이 있는 시험 유형을 모읍니다 (상태 무관).
    3. 유형마다 예정 시험이 하나는 있도록 보장합니다 (ensure_scheduled_test).
    """
    model = phy_models.MedicalPhysicsTest
    result = await db.execute(
        update(model)
        .where(
            model.tenant_id == event.tenant_id,
            model.equipment_id == event.equipment_id,
            model.status == RecordStatus.REALIZADA,
        )
        .values(status=RecordStatus.AGENDADA, execution_date=None, notes=INVALIDATION_NOTE)
        .execution_options(synchronize_session=False)
    )
    logger.info(
        "의학 물리 시험 무효화: equipment=%s ticket=%s 재설정 %d건",
        event.equipment_id, event.ticket_id, result.rowcount,
    )

    today = event.resolved_at.date()
    test_types = await phy_crud.physics_test.get_types_for_equipment(
        db, tenant_id=event.tenant_id, equipment_id=event.equipment_id
    )
    for test_type in test_types:
        await ensure_scheduled_test(
            db,
            tenant_id=event.tenant_id,
            equipment_id=event.equipment_id,
            test_type=test_type,
            today=today,
        )
