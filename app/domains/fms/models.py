# app/domains/fms/models.py

"""
'fms' 도메인 (PostgreSQL 'fms' 스키마)의 데이터베이스 ORM 모델을 정의하는 모듈입니다.

의료기기(설비)와 설비 유형을 다룹니다. 설비의 위험 등급(criticality)은
고장 접수의 SLA와 비상 계획(contingency plan) 요구 여부를 결정합니다.
"""

from typing import Optional, List
from datetime import datetime, UTC
from enum import Enum
from sqlalchemy import ForeignKey, Integer, Text
from sqlalchemy.types import TIMESTAMP
from sqlalchemy.sql import func
from sqlmodel import Field, Relationship, SQLModel, Column


class Criticality(str, Enum):
    A = "A"  # 치명적 (생명 유지 장비 등)
    B = "B"  # 중간
    C = "C"  # 낮음


class EquipmentStatus(str, Enum):
    ATIVO = "ATIVO"
    INATIVO = "INATIVO"
    EM_MANUTENCAO = "EM_MANUTENCAO"
    DESCARTADO = "DESCARTADO"


# =============================================================================
# 1. fms.equipment_types 테이블 모델
# =============================================================================
class EquipmentTypeBase(SQLModel):
    name: str = Field(max_length=100, description="설비 유형명 (예: 인공호흡기)")


class EquipmentType(EquipmentTypeBase, table=True):
    __tablename__ = "equipment_types"
    __table_args__ = {'schema': 'fms'}

    id: Optional[int] = Field(default=None, primary_key=True)
    tenant_id: int = Field(
        sa_column=Column(Integer, ForeignKey("usr.tenants.id", ondelete="CASCADE"), nullable=False, index=True)
    )
    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="레코드 생성 일시"
    )

    equipments: List["Equipment"] = Relationship(back_populates="equipment_type")


# =============================================================================
# 2. fms.equipments 테이블 모델
# =============================================================================
class EquipmentBase(SQLModel):
    name: str = Field(max_length=150)
    serial_number: Optional[str] = Field(default=None, max_length=100)
    manufacturer: Optional[str] = Field(default=None, max_length=100)
    model: Optional[str] = Field(default=None, max_length=100)
    location: Optional[str] = Field(default=None, max_length=150, description="설치 위치 (부서/병동)")
    criticality: Criticality = Field(default=Criticality.C, description="위험 등급 (A/B/C)")
    status: EquipmentStatus = Field(default=EquipmentStatus.ATIVO, description="설비 상태")
    # 위험 등급 A 설비는 비어 있지 않은 비상 계획이 필수입니다.
    contingency_plan: Optional[str] = Field(default=None, sa_column=Column(Text))
    equipment_type_id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, ForeignKey("fms.equipment_types.id", ondelete="SET NULL"), nullable=True)
    )


class Equipment(EquipmentBase, table=True):
    __tablename__ = "equipments"
    __table_args__ = {'schema': 'fms'}

    id: Optional[int] = Field(default=None, primary_key=True)
    tenant_id: int = Field(
        sa_column=Column(Integer, ForeignKey("usr.tenants.id", ondelete="CASCADE"), nullable=False, index=True)
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

    equipment_type: Optional["EquipmentType"] = Relationship(back_populates="equipments")
