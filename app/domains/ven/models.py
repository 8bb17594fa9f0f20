# app/domains/ven/models.py

"""
'ven' 도메인 (PostgreSQL 'ven' 스키마)의 데이터베이스 ORM 모델을 정의하는 모듈입니다.

정비/교정/물리 시험을 수행하는 외부 서비스 공급업체(Provider)를 다룹니다.
정비 레코드는 provider_id와 함께 공급업체명(provider) 텍스트를 복사해 보관합니다.
"""

from typing import Optional
from datetime import datetime, UTC
from sqlmodel import Field, SQLModel, Column
from sqlalchemy import ForeignKey, Integer
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP


# =============================================================================
# 1. ven.providers 테이블 모델
# =============================================================================
class ProviderBase(SQLModel):
    name: str = Field(max_length=150, description="공급업체명")
    document_number: Optional[str] = Field(default=None, max_length=30, description="사업자 등록번호 (CNPJ)")
    contact_name: Optional[str] = Field(default=None, max_length=100)
    phone: Optional[str] = Field(default=None, max_length=30)
    email: Optional[str] = Field(default=None, max_length=100)


class Provider(ProviderBase, table=True):
    """
    PostgreSQL의 ven.providers 테이블에 매핑되는 SQLModel ORM 클래스입니다.
    """
    __tablename__ = "providers"
    __table_args__ = {'schema': 'ven'}

    id: Optional[int] = Field(default=None, primary_key=True)
    tenant_id: int = Field(
        sa_column=Column(Integer, ForeignKey("usr.tenants.id", ondelete="CASCADE"), nullable=False, index=True)
    )
    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="레코드 생성 일시"
    )
