# app/domains/fms/schemas.py

"""
'fms' 도메인 (PostgreSQL 'fms' 스키마)의 Pydantic 스키마를 정의하는 모듈입니다.

설비 유형과 설비 데이터에 대한 API 요청(생성, 업데이트) 및 응답(조회)에 사용됩니다.
"""

from typing import Optional
from datetime import datetime

from sqlmodel import SQLModel
from pydantic import Field

from .models import Criticality, EquipmentStatus


# =============================================================================
# 1. fms.equipment_types 테이블 스키마
# =============================================================================
class EquipmentTypeCreate(SQLModel):
    name: str = Field(..., min_length=1, max_length=100, description="설비 유형명")


class EquipmentTypeResponse(SQLModel):
    id: int
    name: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# =============================================================================
# 2. fms.equipments 테이블 스키마
# =============================================================================
class EquipmentBase(SQLModel):
    """
    설비의 기본 속성을 정의하는 Base 스키마입니다.
    위험 등급(criticality)이 A인 설비는 contingency_plan이 필수입니다 (CRUD 계층에서 검증).
    """
    name: str = Field(..., min_length=1, max_length=150, description="설비 명칭")
    serial_number: Optional[str] = Field(None, max_length=100, description="일련번호")
    manufacturer: Optional[str] = Field(None, max_length=100)
    model: Optional[str] = Field(None, max_length=100)
    location: Optional[str] = Field(None, max_length=150, description="설치 위치")
    criticality: Criticality = Field(Criticality.C, description="위험 등급 (A/B/C)")
    contingency_plan: Optional[str] = Field(None, description="비상 계획 (등급 A 필수)")
    equipment_type_id: Optional[int] = Field(None, description="설비 유형 ID")


class EquipmentCreate(EquipmentBase):
    pass


class EquipmentUpdate(SQLModel):
    """모든 필드는 선택 사항입니다 (부분 업데이트)."""
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    serial_number: Optional[str] = Field(None, max_length=100)
    manufacturer: Optional[str] = Field(None, max_length=100)
    model: Optional[str] = Field(None, max_length=100)
    location: Optional[str] = Field(None, max_length=150)
    criticality: Optional[Criticality] = None
    status: Optional[EquipmentStatus] = None
    contingency_plan: Optional[str] = None
    equipment_type_id: Optional[int] = None


class EquipmentResponse(EquipmentBase):
    id: int = Field(..., description="설비 고유 ID")
    tenant_id: int
    status: EquipmentStatus
    created_at: Optional[datetime] = Field(None, description="레코드 생성 일시")
    updated_at: Optional[datetime] = Field(None, description="레코드 마지막 업데이트 일시")

    class Config:
        from_attributes = True  # ORM 모드 활성화
