# app/core/clock.py

"""
현재 시각을 제공하는 주입 가능한 시계(clock) 모듈입니다.

비즈니스 로직은 datetime.now()를 직접 호출하지 않고 Clock을 통해 시각을 얻습니다.
테스트에서는 FixedClock으로 시각을 고정하거나 이동시킬 수 있습니다.
"""

from datetime import date, datetime, timedelta, UTC
from typing import Optional


class Clock:
    """시스템 시계. 항상 UTC 기준 timezone-aware datetime을 반환합니다."""

    def now(self) -> datetime:
        return datetime.now(UTC)

    def today(self) -> date:
        return self.now().date()


class FixedClock(Clock):
    """고정된 시각을 반환하는 시계 (테스트용)."""

    def __init__(self, current: datetime):
        self.current = _ensure_aware(current)

    def now(self) -> datetime:
        return self.current

    def set(self, current: datetime) -> None:
        self.current = _ensure_aware(current)

    def advance(self, delta: timedelta) -> None:
        self.current = self.current + delta


def _ensure_aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    DB에서 읽은 datetime을 UTC aware 값으로 맞춥니다.
    SQLite 등 timezone을 저장하지 않는 드라이버는 naive 값을 돌려주므로 UTC로 간주합니다.
    """
    if value is None:
        return None
    return _ensure_aware(value)


system_clock = Clock()


def get_clock() -> Clock:
    """FastAPI 의존성: 프로세스 시계를 반환합니다. 테스트에서는 dependency_overrides로 교체합니다."""
    return system_clock
