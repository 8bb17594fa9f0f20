# app/domains/mnt/events.py

"""
'mnt' 도메인이 발행하는 도메인 이벤트 정의 모듈입니다.

고장 접수 해결과 의학 물리 시험 무효화 사이의 결합은 이 이벤트를 통해서만 이루어집니다.
구독자는 phy 도메인의 handlers 모듈에 있습니다.
"""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class CorrectiveResolved:
    """교정 정비(고장 접수)가 RESOLVIDO로 전이되었음을 알립니다. 해결 트랜잭션 안에서 발행됩니다."""
    tenant_id: int
    equipment_id: int
    ticket_id: int
    resolved_at: datetime
