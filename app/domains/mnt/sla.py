# app/domains/mnt/sla.py

"""
설비 위험 등급(criticality)별 SLA(최초 대응 시한) 계산 모듈입니다.

상태가 없는 조회표와 시간 계산만 수행합니다. SLA 시한은 고장 접수 생성 시점에만 계산됩니다.
"""

from datetime import datetime, timedelta
from typing import Dict, Optional

from app.core.clock import as_utc
from app.domains.fms.models import Criticality

SLA_WINDOWS: Dict[Criticality, timedelta] = {
    Criticality.A: timedelta(minutes=10),
    Criticality.B: timedelta(hours=2),
    Criticality.C: timedelta(hours=24),
}

SLA_ON_TIME = "NO_PRAZO"
SLA_BREACHED = "ESTOURADO"
SLA_NOT_APPLICABLE = "N/A"


def sla_window(criticality: Criticality) -> timedelta:
    return SLA_WINDOWS[Criticality(criticality)]


def sla_deadline(criticality: Criticality, opened_at: datetime) -> datetime:
    return opened_at + sla_window(criticality)


def requires_contingency_plan(criticality: Criticality) -> bool:
    return Criticality(criticality) == Criticality.A


def sla_status(status: str, deadline: Optional[datetime], now: datetime) -> str:
    """
    접수 대기(ABERTO) 상태의 SLA 준수 여부를 반환합니다.
    담당자가 배정된 이후에는 최초 대응이 끝났으므로 N/A입니다.
    """
    if status != "ABERTO" or deadline is None:
        return SLA_NOT_APPLICABLE
    if as_utc(now) > as_utc(deadline):
        return SLA_BREACHED
    return SLA_ON_TIME
