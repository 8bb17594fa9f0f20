# app/domains/mnt/schemas.py

"""
'mnt' 도메인 (PostgreSQL 'mnt' 스키마)의 Pydantic 스키마를 정의하는 모듈입니다.

예방 정비, 고장 접수, 작업 지시서, 체크리스트, 일괄 작업 및 신뢰도 지표의
API 요청/응답에 사용됩니다. 응답 스키마의 `display_status`, `sla_status`는
저장된 값이 아니라 조회 시점에 계산된 값입니다.
"""

from typing import Optional, List
from datetime import date, datetime

from sqlmodel import SQLModel
from pydantic import Field

from .models import (
    ServiceType, RecordStatus, DisplayStatus, TicketUrgency, TicketStatus, ServiceOrderStatus, ChecklistOutcome
)


# =============================================================================
# 1. 체크리스트 스키마
# =============================================================================
class ChecklistTemplateCreate(SQLModel):
    equipment_type_id: int = Field(..., description="대상 설비 유형 ID")
    name: str = Field(..., max_length=150, description="체크리스트 이름")


class ChecklistItemCreate(SQLModel):
    description: str = Field(..., max_length=300, description="점검 항목 내용")


class ChecklistItemResponse(SQLModel):
    id: int
    template_id: int
    description: str
    sort_order: int

    class Config:
        from_attributes = True


class ChecklistTemplateResponse(SQLModel):
    id: int
    tenant_id: int
    equipment_type_id: int
    name: str
    active: bool
    created_at: Optional[datetime] = None
    items: List[ChecklistItemResponse] = []

    class Config:
        from_attributes = True


class ChecklistItemResultIn(SQLModel):
    item_id: int
    result: ChecklistOutcome
    observation: Optional[str] = Field(None, max_length=500)


class ChecklistSubmission(SQLModel):
    """예방 정비 실행 시 함께 제출하는 체크리스트 결과."""
    template_id: int
    items: List[ChecklistItemResultIn] = Field(default_factory=list)


class ChecklistResultResponse(SQLModel):
    id: int
    template_id: int
    preventive_maintenance_id: int
    items: List[dict]
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# =============================================================================
# 2. mnt.preventive_maintenances 스키마
# =============================================================================
class PreventiveCreate(SQLModel):
    """
    예방 정비 생성 요청.
    필수 값(설비, 예정일, 만기일)의 누락은 요금제 검사 이후 서비스 계층에서 400으로 처리합니다.
    """
    equipment_id: Optional[int] = Field(None, description="설비 ID")
    service_type: ServiceType = Field(ServiceType.PREVENTIVA, description="서비스 유형")
    scheduled_date: Optional[date] = Field(None, description="예정일")
    due_date: Optional[date] = Field(None, description="만기일")
    periodicity_months: Optional[int] = Field(None, description="주기 (개월, 1~120으로 제한)")
    provider_id: Optional[int] = Field(None, description="공급업체 ID")
    provider: Optional[str] = Field(None, max_length=150, description="공급업체명 (provider_id가 없을 때)")
    cost: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = None


class PreventiveExecute(SQLModel):
    execution_date: date = Field(..., description="실행일")
    cost: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = None
    certificate_url: Optional[str] = Field(None, max_length=500)
    checklist: Optional[ChecklistSubmission] = None


class PreventiveResponse(SQLModel):
    id: int
    tenant_id: int
    equipment_id: int
    type: str
    service_type: ServiceType
    status: RecordStatus
    display_status: DisplayStatus = Field(..., description="표시 상태 (AGENDADA/REALIZADA/VENCIDA)")
    scheduled_date: date
    due_date: date
    execution_date: Optional[date] = None
    periodicity_months: int
    provider_id: Optional[int] = None
    provider: Optional[str] = None
    cost: Optional[float] = None
    notes: Optional[str] = None
    certificate_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PreventiveExecutionResult(SQLModel):
    """실행 결과: 실행된 레코드와 주기에 따라 재생성된 후속 레코드 (주기가 0이면 None)."""
    executed: PreventiveResponse
    successor: Optional[PreventiveResponse] = None


# =============================================================================
# 3. 일괄 작업 스키마
# =============================================================================
class BulkScheduleRequest(SQLModel):
    equipment_ids: List[int] = Field(default_factory=list, description="설비 ID 목록 (최대 100개)")
    service_type: ServiceType = ServiceType.PREVENTIVA
    scheduled_date: Optional[date] = None
    periodicity_months: Optional[int] = None
    provider_id: Optional[int] = None


class BulkExecuteRequest(SQLModel):
    maintenance_ids: List[int] = Field(default_factory=list, description="예방 정비 ID 목록 (최대 100개)")
    execution_date: Optional[date] = None
    notes: Optional[str] = None


class BulkResult(SQLModel):
    count: int = Field(..., description="처리된 레코드 수")


# =============================================================================
# 4. mnt.corrective_maintenances 스키마 (고장 접수)
# =============================================================================
class TicketCreate(SQLModel):
    equipment_id: int = Field(..., description="설비 ID")
    description: str = Field(..., description="고장 내용")
    urgency: TicketUrgency = Field(TicketUrgency.MEDIA, description="긴급도")


class TicketAccept(SQLModel):
    assignee_id: Optional[int] = Field(None, description="담당자 ID (없으면 호출자)")


class TicketResolve(SQLModel):
    solution: Optional[str] = None
    diagnosis: Optional[str] = None
    parts_used: Optional[str] = None
    time_spent: Optional[int] = Field(None, description="작업 소요 시간 (분)")
    cost: Optional[float] = None


class TicketResponse(SQLModel):
    id: int
    tenant_id: int
    equipment_id: int
    description: str
    urgency: TicketUrgency
    status: TicketStatus
    opened_at: datetime
    sla_deadline: Optional[datetime] = None
    sla_status: str = Field(..., description="SLA 준수 여부 (NO_PRAZO/ESTOURADO/N/A)")
    contingency_plan: Optional[str] = Field(None, description="위험 등급 A 설비의 진행 중 접수에만 노출")
    opened_by_id: int
    assigned_to_id: Optional[int] = None
    diagnosis: Optional[str] = None
    solution: Optional[str] = None
    parts_used: Optional[str] = None
    time_spent: Optional[int] = None
    cost: Optional[float] = None
    closed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# =============================================================================
# 5. mnt.service_orders 스키마
# =============================================================================
class ServiceOrderResponse(SQLModel):
    id: int
    tenant_id: int
    number: int
    status: ServiceOrderStatus
    preventive_maintenance_id: Optional[int] = None
    corrective_maintenance_id: Optional[int] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# =============================================================================
# 6. 신뢰도 지표 스키마
# =============================================================================
class ReliabilityResponse(SQLModel):
    equipment_id: Optional[int] = Field(None, description="설비 ID (없으면 테넌트 전체)")
    mtbf_hours: Optional[float] = None
    mttr_hours: Optional[float] = None
    ticket_count: int = 0


# =============================================================================
# 7. 공개 QR 신고 스키마
# =============================================================================
class PublicReportCreate(SQLModel):
    """인증 없이 설비 QR 코드로 접수하는 고장 신고. 최소 길이는 서비스 계층에서 검사합니다."""
    reporter_name: str = Field(..., max_length=150, description="신고자 이름")
    description: str = Field(..., description="고장 내용")
    phone: Optional[str] = Field(None, max_length=30, description="연락처")


class PublicReportResponse(SQLModel):
    success: bool = True
