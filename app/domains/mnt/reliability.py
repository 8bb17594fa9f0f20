# app/domains/mnt/reliability.py

"""
설비 신뢰도 지표 (MTBF, MTTR) 계산 모듈입니다.

- MTTR: 해결된 고장 접수의 (closed_at - opened_at) 평균 (시간 단위).
- MTBF: 같은 설비에서 연속된 고장 사이 간격 (opened_at[i+1] - closed_at[i]) 중
  양수인 값들의 평균 (시간 단위).

데이터가 없으면 None을 반환합니다. DB에 접근하지 않는 순수 함수들입니다.
"""

from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence

from app.core.clock import as_utc

_SECONDS_PER_HOUR = 3600.0


@dataclass(frozen=True)
class RepairInterval:
    equipment_id: int
    opened_at: datetime
    closed_at: datetime


@dataclass
class ReliabilityMetrics:
    mtbf_hours: Optional[float]
    mttr_hours: Optional[float]
    ticket_count: int


def _hours(start: datetime, end: datetime) -> float:
    return (as_utc(end) - as_utc(start)).total_seconds() / _SECONDS_PER_HOUR


def _mean(values: List[float]) -> Optional[float]:
    if not values:
        return None
    return sum(values) / len(values)


def _failure_gaps(tickets: Sequence[RepairInterval]) -> List[float]:
    ordered = sorted(tickets, key=lambda t: as_utc(t.opened_at))
    gaps = []
    for previous, current in zip(ordered, ordered[1:]):
        gap = _hours(previous.closed_at, current.opened_at)
        if gap > 0:
            gaps.append(gap)
    return gaps


def compute_equipment_mtbf_mttr(tickets: Sequence[RepairInterval]) -> ReliabilityMetrics:
    """단일 설비의 MTBF/MTTR을 계산합니다."""
    if not tickets:
        return ReliabilityMetrics(mtbf_hours=None, mttr_hours=None, ticket_count=0)

    repair_times = [_hours(t.opened_at, t.closed_at) for t in tickets]
    return ReliabilityMetrics(
        mtbf_hours=_mean(_failure_gaps(tickets)),
        mttr_hours=_mean(repair_times),
        ticket_count=len(tickets),
    )


def compute_global_mtbf_mttr(tickets: Iterable[RepairInterval]) -> ReliabilityMetrics:
    """
    테넌트 전체의 MTBF/MTTR을 계산합니다.
    MTTR은 전체 평균, MTBF는 설비별로 간격을 구한 뒤 모든 간격을 합쳐 평균합니다.
    """
    tickets = list(tickets)
    if not tickets:
        return ReliabilityMetrics(mtbf_hours=None, mttr_hours=None, ticket_count=0)

    by_equipment: Dict[int, List[RepairInterval]] = defaultdict(list)
    for ticket in tickets:
        by_equipment[ticket.equipment_id].append(ticket)

    all_gaps: List[float] = []
    for equipment_tickets in by_equipment.values():
        all_gaps.extend(_failure_gaps(equipment_tickets))

    return ReliabilityMetrics(
        mtbf_hours=_mean(all_gaps),
        mttr_hours=_mean([_hours(t.opened_at, t.closed_at) for t in tickets]),
        ticket_count=len(tickets),
    )
