# app/domains/mnt/models.py

"""
'mnt' 도메인 (PostgreSQL 'mnt' 스키마)의 데이터베이스 ORM 모델을 정의하는 모듈입니다.

- 예방 정비 (preventive_maintenances): 예정/실행 2단계 상태와 주기(개월)를 가집니다.
- 교정 정비/고장 접수 (corrective_maintenances): ABERTO → EM_ATENDIMENTO → RESOLVIDO → FECHADO.
- 작업 지시서 (service_orders): 예방/교정 정비 생성 시 함께 만들어지는 출력용 보조 원장.
- 체크리스트 (checklist_templates, checklist_items, checklist_results).

'지연(VENCIDA)' 상태는 저장하지 않습니다. 조회 시점의 날짜로 매번 계산합니다 (lifecycle.derive_display_status).
"""

from typing import Optional, List, Dict, Any
from datetime import date, datetime, UTC
from enum import Enum
from sqlalchemy import CheckConstraint, ForeignKey, Integer, Text, UniqueConstraint, JSON
from sqlalchemy.types import TIMESTAMP
from sqlalchemy.sql import func
from sqlmodel import Field, Relationship, SQLModel, Column


class ServiceType(str, Enum):
    PREVENTIVA = "PREVENTIVA"
    CALIBRACAO = "CALIBRACAO"
    TSE = "TSE"  # 전기 안전 시험


# 서비스 유형 -> 기존 화면/보고서에서 쓰던 유형 라벨
SERVICE_TYPE_LABELS: Dict[ServiceType, str] = {
    ServiceType.PREVENTIVA: "Manutencao Preventiva Geral",
    ServiceType.CALIBRACAO: "Calibracao",
    ServiceType.TSE: "Teste de Seguranca Eletrica",
}


class RecordStatus(str, Enum):
    """예방 정비와 의학 물리 시험이 공유하는 저장 상태."""
    AGENDADA = "AGENDADA"
    REALIZADA = "REALIZADA"


class DisplayStatus(str, Enum):
    """조회 시 계산되는 표시 상태. VENCIDA는 저장되지 않습니다."""
    AGENDADA = "AGENDADA"
    REALIZADA = "REALIZADA"
    VENCIDA = "VENCIDA"


class TicketUrgency(str, Enum):
    BAIXA = "BAIXA"
    MEDIA = "MEDIA"
    ALTA = "ALTA"
    CRITICA = "CRITICA"


class TicketStatus(str, Enum):
    ABERTO = "ABERTO"
    EM_ATENDIMENTO = "EM_ATENDIMENTO"
    RESOLVIDO = "RESOLVIDO"
    FECHADO = "FECHADO"


class ServiceOrderStatus(str, Enum):
    ABERTA = "ABERTA"
    EM_EXECUCAO = "EM_EXECUCAO"
    CONCLUIDA = "CONCLUIDA"


class ChecklistOutcome(str, Enum):
    CONFORME = "CONFORME"
    NAO_CONFORME = "NAO_CONFORME"


def _tenant_fk() -> Column:
    return Column(Integer, ForeignKey("usr.tenants.id", ondelete="CASCADE"), nullable=False, index=True)


def _equipment_fk() -> Column:
    return Column(Integer, ForeignKey("fms.equipments.id", ondelete="CASCADE"), nullable=False, index=True)


# =============================================================================
# 1. mnt.preventive_maintenances 테이블 모델
# =============================================================================
class PreventiveMaintenance(SQLModel, table=True):
    __tablename__ = "preventive_maintenances"
    __table_args__ = {'schema': 'mnt'}

    id: Optional[int] = Field(default=None, primary_key=True)
    tenant_id: int = Field(sa_column=_tenant_fk())
    equipment_id: int = Field(sa_column=_equipment_fk())
    type: str = Field(max_length=100, description="유형 라벨 (서비스 유형에서 유도)")
    service_type: ServiceType = Field(default=ServiceType.PREVENTIVA)
    status: RecordStatus = Field(default=RecordStatus.AGENDADA)
    scheduled_date: date = Field(description="예정일")
    due_date: date = Field(description="만기일")
    execution_date: Optional[date] = Field(default=None, description="실행일 (실행 전에는 NULL)")
    periodicity_months: int = Field(default=12, description="반복 주기 (개월, 0 = 반복 없음)")
    provider_id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, ForeignKey("ven.providers.id", ondelete="SET NULL"), nullable=True)
    )
    provider: Optional[str] = Field(default=None, max_length=150, description="공급업체명 (자유 입력 대체값)")
    cost: Optional[float] = Field(default=None)
    notes: Optional[str] = Field(default=None, sa_column=Column(Text))
    certificate_url: Optional[str] = Field(default=None, max_length=500)

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


# =============================================================================
# 2. mnt.corrective_maintenances 테이블 모델 (고장 접수)
# =============================================================================
class CorrectiveMaintenance(SQLModel, table=True):
    __tablename__ = "corrective_maintenances"
    __table_args__ = {'schema': 'mnt'}

    id: Optional[int] = Field(default=None, primary_key=True)
    tenant_id: int = Field(sa_column=_tenant_fk())
    equipment_id: int = Field(sa_column=_equipment_fk())
    description: str = Field(sa_column=Column(Text, nullable=False))
    urgency: TicketUrgency = Field(default=TicketUrgency.MEDIA)
    status: TicketStatus = Field(default=TicketStatus.ABERTO)

    opened_at: datetime = Field(sa_column=Column(TIMESTAMP(timezone=True), nullable=False))
    sla_deadline: Optional[datetime] = Field(default=None, sa_column=Column(TIMESTAMP(timezone=True)))
    opened_by_id: int = Field(
        sa_column=Column(Integer, ForeignKey("usr.users.id", ondelete="RESTRICT"), nullable=False)
    )
    assigned_to_id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, ForeignKey("usr.users.id", ondelete="SET NULL"), nullable=True)
    )

    # --- 해결 시 기록 ---
    diagnosis: Optional[str] = Field(default=None, sa_column=Column(Text))
    solution: Optional[str] = Field(default=None, sa_column=Column(Text))
    parts_used: Optional[str] = Field(default=None, sa_column=Column(Text))
    time_spent: Optional[int] = Field(default=None, description="작업 소요 시간 (분)")
    cost: Optional[float] = Field(default=None)
    closed_at: Optional[datetime] = Field(default=None, sa_column=Column(TIMESTAMP(timezone=True)))

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


# =============================================================================
# 3. mnt.service_orders 테이블 모델 (작업 지시서)
# =============================================================================
class ServiceOrder(SQLModel, table=True):
    """
    예방/교정 정비 하나당 하나씩 생성되는 출력용 작업 지시서입니다.
    상위 정비 레코드의 상태와 동기화하지 않습니다 (두 상태가 달라도 정상).
    """
    __tablename__ = "service_orders"
    __table_args__ = (
        CheckConstraint(
            "(preventive_maintenance_id IS NULL) <> (corrective_maintenance_id IS NULL)",
            name="ck_service_orders_single_parent",
        ),
        UniqueConstraint("tenant_id", "number", name="uq_service_orders_tenant_number"),
        {'schema': 'mnt'},
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    tenant_id: int = Field(sa_column=_tenant_fk())
    number: int = Field(description="테넌트별 일련번호")
    status: ServiceOrderStatus = Field(default=ServiceOrderStatus.ABERTA)
    preventive_maintenance_id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, ForeignKey("mnt.preventive_maintenances.id", ondelete="CASCADE"), nullable=True)
    )
    corrective_maintenance_id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, ForeignKey("mnt.corrective_maintenances.id", ondelete="CASCADE"), nullable=True)
    )
    started_at: Optional[datetime] = Field(default=None, sa_column=Column(TIMESTAMP(timezone=True)))
    completed_at: Optional[datetime] = Field(default=None, sa_column=Column(TIMESTAMP(timezone=True)))

    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="레코드 생성 일시"
    )


# =============================================================================
# 4. mnt.checklist_templates / checklist_items / checklist_results 테이블 모델
# =============================================================================
class ChecklistTemplate(SQLModel, table=True):
    __tablename__ = "checklist_templates"
    __table_args__ = {'schema': 'mnt'}

    id: Optional[int] = Field(default=None, primary_key=True)
    tenant_id: int = Field(sa_column=_tenant_fk())
    equipment_type_id: int = Field(
        sa_column=Column(Integer, ForeignKey("fms.equipment_types.id", ondelete="CASCADE"), nullable=False)
    )
    name: str = Field(max_length=150)
    active: bool = Field(default=True)
    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="레코드 생성 일시"
    )

    items: List["ChecklistItem"] = Relationship(
        back_populates="template",
        sa_relationship_kwargs={"order_by": "ChecklistItem.sort_order", "cascade": "all, delete-orphan"},
    )


class ChecklistItem(SQLModel, table=True):
    __tablename__ = "checklist_items"
    __table_args__ = {'schema': 'mnt'}

    id: Optional[int] = Field(default=None, primary_key=True)
    template_id: int = Field(
        sa_column=Column(Integer, ForeignKey("mnt.checklist_templates.id", ondelete="CASCADE"), nullable=False, index=True)
    )
    description: str = Field(max_length=300)
    sort_order: int = Field(default=0, description="0부터 시작하는 순서")

    template: Optional["ChecklistTemplate"] = Relationship(back_populates="items")


class ChecklistResult(SQLModel, table=True):
    """예방 정비 실행 시점에 기록되는 체크리스트 결과. items는 항목별 판정의 JSON 목록입니다."""
    __tablename__ = "checklist_results"
    __table_args__ = {'schema': 'mnt'}

    id: Optional[int] = Field(default=None, primary_key=True)
    tenant_id: int = Field(sa_column=_tenant_fk())
    template_id: int = Field(
        sa_column=Column(Integer, ForeignKey("mnt.checklist_templates.id", ondelete="RESTRICT"), nullable=False, index=True)
    )
    preventive_maintenance_id: int = Field(
        sa_column=Column(Integer, ForeignKey("mnt.preventive_maintenances.id", ondelete="CASCADE"), nullable=False, index=True)
    )
    items: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="레코드 생성 일시"
    )
