# app/domains/mnt/lifecycle.py

"""
예방 정비와 의학 물리 시험이 공유하는 2단계 상태(AGENDADA → REALIZADA) 보조 함수 모듈입니다.

'VENCIDA'는 저장하지 않는 파생 상태입니다:
    status == AGENDADA 이고 due_date <= 오늘 (주입된 시계 기준)
만기일은 자정 기준 날짜이므로, 만기 당일부터 VENCIDA로 표시됩니다.
"""

from datetime import date
from typing import Any, Dict, Optional

from sqlalchemy import and_, update
from sqlmodel.ext.asyncio.session import AsyncSession

from .models import RecordStatus, DisplayStatus


def derive_display_status(record: Any, today: date) -> DisplayStatus:
    """레코드의 표시 상태를 계산합니다. 레코드는 변경하지 않습니다."""
    if RecordStatus(record.status) == RecordStatus.REALIZADA:
        return DisplayStatus.REALIZADA
    if record.due_date <= today:
        return DisplayStatus.VENCIDA
    return DisplayStatus.AGENDADA


def display_status_clause(model: Any, display_status: Optional[DisplayStatus], today: date):
    """
    표시 상태 필터를 SQL 조건으로 변환합니다.
    AGENDADA 필터는 만기일이 아직 오지 않은 레코드만, VENCIDA 필터는 만기일이 된 예정 레코드만 선택합니다.
    """
    if display_status is None:
        return None
    if display_status == DisplayStatus.VENCIDA:
        return and_(model.status == RecordStatus.AGENDADA, model.due_date <= today)
    if display_status == DisplayStatus.AGENDADA:
        return and_(model.status == RecordStatus.AGENDADA, model.due_date > today)
    return model.status == RecordStatus.REALIZADA


async def claim_scheduled(
    db: AsyncSession, model: Any, *, record_id: int, tenant_id: int, values: Dict[str, Any]
) -> bool:
    """
    AGENDADA 상태인 경우에만 REALIZADA로 바꾸는 조건부 UPDATE를 실행합니다.
    같은 레코드를 동시에 실행하면 한 요청만 True를 받으므로, 후속 레코드도 한 번만 만들어집니다.
    커밋은 호출자가 하며, 세션의 객체는 호출자가 refresh 해야 합니다.
    """
    result = await db.execute(
        update(model)
        .where(
            model.id == record_id,
            model.tenant_id == tenant_id,
            model.status == RecordStatus.AGENDADA,
        )
        .values(status=RecordStatus.REALIZADA, **values)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1
