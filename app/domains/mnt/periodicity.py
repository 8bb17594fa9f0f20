# app/domains/mnt/periodicity.py

"""
정비 주기(개월) 계산 모듈입니다.

날짜 수가 아닌 달력 기준으로 개월을 더하며, 대상 월에 같은 날짜가 없으면
그 달의 마지막 날로 맞춥니다 (예: 2024-01-31 + 1개월 -> 2024-02-29).
"""

import calendar
from datetime import date
from typing import Optional, Tuple

# 예방 정비 생성 시 주기(개월) 허용 범위 및 기본값
MIN_PERIODICITY_MONTHS = 1
MAX_PERIODICITY_MONTHS = 120
DEFAULT_PERIODICITY_MONTHS = 12


def add_months(value: date, months: int) -> date:
    total = value.year * 12 + (value.month - 1) + months
    year, month = divmod(total, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(value.day, last_day))


def next_schedule(execution_date: date, periodicity_months: int) -> Optional[Tuple[date, date]]:
    """
    실행일과 주기로 다음 (예정일, 만기일)을 계산합니다. 만기일은 예정일과 같습니다.
    주기가 0 이하이면 반복하지 않으므로 None을 반환합니다.
    """
    if periodicity_months <= 0:
        return None
    next_date = add_months(execution_date, periodicity_months)
    return next_date, next_date


def clamp_periodicity(value: Optional[int]) -> int:
    """입력된 주기를 1..120 범위로 제한합니다. 값이 없거나 0이면 기본값 12개월."""
    if not value:
        return DEFAULT_PERIODICITY_MONTHS
    return min(max(value, MIN_PERIODICITY_MONTHS), MAX_PERIODICITY_MONTHS)
