# app/domains/phy/models.py

"""
'phy' 도메인 (PostgreSQL 'phy' 스키마)의 데이터베이스 ORM 모델을 정의하는 모듈입니다.

의학 물리 시험은 예방 정비와 같은 2단계 상태(AGENDADA → REALIZADA)를 사용하며,
'VENCIDA'는 저장하지 않고 조회 시 계산합니다.
"""

from typing import Optional
from datetime import date, datetime, UTC
from enum import Enum
from sqlalchemy import ForeignKey, Integer, Text
from sqlalchemy.types import TIMESTAMP
from sqlalchemy.sql import func
from sqlmodel import Field, SQLModel, Column

from app.domains.mnt.models import RecordStatus


class PhysicsTestType(str, Enum):
    CONTROLE_QUALIDADE = "CONTROLE_QUALIDADE"
    TESTE_CONSTANCIA = "TESTE_CONSTANCIA"
    LEVANTAMENTO_RADIOMETRICO = "LEVANTAMENTO_RADIOMETRICO"
    TESTE_RADIACAO_FUGA = "TESTE_RADIACAO_FUGA"


# 시험 유형별 기본 주기 (개월). 목록에 없는 유형은 12개월.
DEFAULT_PERIODICITY_BY_TYPE = {
    PhysicsTestType.LEVANTAMENTO_RADIOMETRICO: 48,
    PhysicsTestType.TESTE_RADIACAO_FUGA: 48,
}


def default_periodicity(test_type: PhysicsTestType) -> int:
    return DEFAULT_PERIODICITY_BY_TYPE.get(PhysicsTestType(test_type), 12)


# =============================================================================
# 1. phy.medical_physics_tests 테이블 모델
# =============================================================================
class MedicalPhysicsTestBase(SQLModel):
    type: PhysicsTestType = Field(description="시험 유형")
    status: RecordStatus = Field(default=RecordStatus.AGENDADA)
    scheduled_date: date = Field(description="예정일")
    due_date: date = Field(description="만기일")
    execution_date: Optional[date] = Field(default=None, description="실행일 (실행 전에는 NULL)")
    periodicity_months: int = Field(default=12, description="반복 주기 (개월, 0 = 반복 없음)")
    provider: Optional[str] = Field(default=None, max_length=150)
    report_url: Optional[str] = Field(default=None, max_length=500)
    notes: Optional[str] = Field(default=None, sa_column=Column(Text))
    system_generated: bool = Field(default=False, description="무효화 규칙으로 시스템이 생성한 레코드 여부")


class MedicalPhysicsTest(MedicalPhysicsTestBase, table=True):
    __tablename__ = "medical_physics_tests"
    __table_args__ = {'schema': 'phy'}

    id: Optional[int] = Field(default=None, primary_key=True)
    tenant_id: int = Field(
        sa_column=Column(Integer, ForeignKey("usr.tenants.id", ondelete="CASCADE"), nullable=False, index=True)
    )
    equipment_id: int = Field(
        sa_column=Column(Integer, ForeignKey("fms.equipments.id", ondelete="CASCADE"), nullable=False, index=True)
    )
    provider_id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, ForeignKey("ven.providers.id", ondelete="SET NULL"), nullable=True)
    )
    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="레코드 생성 일시"
    )
    updated_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=lambda: datetime.now(UTC)),
        description="레코드 마지막 업데이트 일시"
    )
