# app/domains/usr/schemas.py

"""
'usr' 도메인 (테넌트 및 사용자)의 API 데이터 전송 객체(DTO)를 정의하는 모듈입니다.
"""

from typing import Optional, List
from datetime import datetime
from sqlmodel import SQLModel, Field
from pydantic import BaseModel, EmailStr

from . import models as usr_models


# =============================================================================
# 1. 테넌트 (Tenant) 스키마
# =============================================================================
class TenantRead(SQLModel):
    id: int
    name: str
    plan: usr_models.TenantPlan
    is_active: bool


class PlanFeaturesRead(BaseModel):
    """테넌트 요금제로 허용되는 서비스 유형과 보고서 키"""
    plan: Optional[usr_models.TenantPlan] = None
    service_types: List[str]
    report_keys: List[str]


# =============================================================================
# 2. 사용자 (User) 스키마
# =============================================================================
class UserBase(SQLModel):
    """사용자 정보의 기본 필드를 정의하는 스키마"""
    username: str = Field(..., max_length=50)
    email: Optional[EmailStr] = Field(None, max_length=100)
    full_name: Optional[str] = Field(None, max_length=100)
    role: usr_models.UserRole = Field(default=usr_models.UserRole.TECNICO, description="사용자 역할")
    is_active: bool = True


class UserCreate(UserBase):
    """사용자 생성을 위한 스키마"""
    password: str = Field(..., min_length=8)


class UserRead(UserBase):
    """
    사용자 정보 조회를 위한 기본 스키마.
    비밀번호 해시값 등 민감한 정보는 제외됩니다.
    """
    id: int
    tenant_id: int
    created_at: Optional[datetime] = Field(None, description="레코드 생성 일시")


class UserReadWithTenant(UserRead):
    tenant: Optional[TenantRead] = None


# =============================================================================
# 3. 인증 토큰 (Token) 스키마
# =============================================================================
class Token(BaseModel):
    """JWT 토큰 응답 스키마"""
    access_token: str
    token_type: str


class TokenData(BaseModel):
    """JWT 토큰에 담길 데이터 스키마"""
    username: Optional[str] = None
