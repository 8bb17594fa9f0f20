# app/domains/usr/models.py

"""
'usr' 도메인 (PostgreSQL 'usr' 스키마)의 데이터베이스 ORM 모델을 정의하는 모듈입니다.

이 모듈은 'usr' 스키마에 속하는 테이블 (tenants, users)에 대한 SQLModel 클래스를 포함합니다.
모든 정비 데이터는 테넌트(의료기관) 단위로 격리되며, 테넌트는 요금제(plan)와
작업 지시서 일련번호 카운터(last_os_number)를 가집니다.
"""

from typing import Optional, List
from datetime import datetime, UTC
from enum import Enum, IntEnum
from sqlmodel import Field, Relationship, SQLModel, Column
from sqlalchemy import ForeignKey, Integer
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP


# =============================================================================
# 사용자 역할(RBAC) 및 요금제 Enum
# =============================================================================
class UserRole(IntEnum):
    """
    사용자 역할을 정의하는 정수형 Enum 클래스입니다.
    코드에서는 명시적인 역할 이름으로 사용합니다.
    """
    MASTER = 10        # 테넌트 관리자
    TECNICO = 50       # 정비 기술자
    COORDENADOR = 60   # 부서 코디네이터 (고장 접수/종결)
    FISCAL = 90        # 감사/조회 전용


class TenantPlan(str, Enum):
    ESSENCIAL = "ESSENCIAL"
    PROFISSIONAL = "PROFISSIONAL"
    ENTERPRISE = "ENTERPRISE"


# =============================================================================
# 1. usr.tenants 테이블 모델
# =============================================================================
class TenantBase(SQLModel):
    name: str = Field(max_length=150, description="의료기관(테넌트) 명칭")
    plan: TenantPlan = Field(default=TenantPlan.ESSENCIAL, description="구독 요금제")
    is_active: bool = Field(default=True, description="테넌트 활성 여부")


class Tenant(TenantBase, table=True):
    """
    PostgreSQL의 usr.tenants 테이블에 매핑되는 SQLModel ORM 클래스입니다.
    """
    __tablename__ = "tenants"
    __table_args__ = {'schema': 'usr'}

    id: Optional[int] = Field(default=None, primary_key=True)
    # 작업 지시서 번호는 생성 트랜잭션 안에서 이 값을 1 증가시켜 발급합니다.
    last_os_number: int = Field(default=0, description="마지막으로 발급된 작업 지시서 번호")

    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="레코드 생성 일시"
    )

    users: List["User"] = Relationship(back_populates="tenant")


# =============================================================================
# 2. usr.users 테이블 모델
# =============================================================================
class UserBase(SQLModel):
    """
    usr.users 테이블의 기본 속성을 정의하는 SQLModel Base 클래스입니다.
    """
    username: str = Field(max_length=50, sa_column_kwargs={"unique": True}, description="로그인 사용자명")
    email: Optional[str] = Field(default=None, max_length=100, description="사용자 이메일")
    full_name: Optional[str] = Field(default=None, max_length=100, description="사용자 전체 이름")
    role: UserRole = Field(default=UserRole.TECNICO, description="사용자 역할 (권한)")
    is_active: bool = Field(default=True, description="계정 활성 여부")


class User(UserBase, table=True):
    """
    PostgreSQL의 usr.users 테이블에 매핑되는 SQLModel ORM 클래스입니다.
    """
    __tablename__ = "users"
    __table_args__ = {'schema': 'usr'}

    id: Optional[int] = Field(default=None, primary_key=True, description="사용자 고유 ID")
    tenant_id: int = Field(
        sa_column=Column(Integer, ForeignKey("usr.tenants.id", ondelete="CASCADE"), nullable=False, index=True),
        description="소속 테넌트 ID (FK)"
    )
    password_hash: str = Field(max_length=255, description="해싱된 비밀번호")

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

    tenant: Optional["Tenant"] = Relationship(back_populates="users")
