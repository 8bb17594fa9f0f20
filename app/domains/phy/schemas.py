# app/domains/phy/schemas.py

"""
'phy' 도메인 (PostgreSQL 'phy' 스키마)의 Pydantic 스키마를 정의하는 모듈입니다.
"""

from typing import Optional
from datetime import date, datetime

from sqlmodel import SQLModel
from pydantic import Field

from app.domains.mnt.models import RecordStatus, DisplayStatus
from .models import PhysicsTestType


class PhysicsTestCreate(SQLModel):
    """필수 값 누락과 날짜 순서는 서비스 계층에서 400으로 검사합니다."""
    equipment_id: Optional[int] = Field(None, description="설비 ID")
    type: Optional[PhysicsTestType] = Field(None, description="시험 유형")
    scheduled_date: Optional[date] = Field(None, description="예정일")
    due_date: Optional[date] = Field(None, description="만기일 (예정일과 같거나 이후)")
    periodicity_months: Optional[int] = Field(None, ge=0, description="주기 (개월). 생략 시 유형별 기본값")
    provider_id: Optional[int] = None
    provider: Optional[str] = Field(None, max_length=150)
    notes: Optional[str] = None


class PhysicsTestExecute(SQLModel):
    execution_date: date = Field(..., description="실행일")
    report_url: Optional[str] = Field(None, max_length=500)
    notes: Optional[str] = None


class PhysicsTestResponse(SQLModel):
    id: int
    tenant_id: int
    equipment_id: int
    type: PhysicsTestType
    status: RecordStatus
    display_status: DisplayStatus
    scheduled_date: date
    due_date: date
    execution_date: Optional[date] = None
    periodicity_months: int
    provider_id: Optional[int] = None
    provider: Optional[str] = None
    report_url: Optional[str] = None
    notes: Optional[str] = None
    system_generated: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PhysicsTestExecutionResult(SQLModel):
    executed: PhysicsTestResponse
    successor: Optional[PhysicsTestResponse] = None
