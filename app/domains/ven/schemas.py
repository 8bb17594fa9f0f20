# app/domains/ven/schemas.py

"""
'ven' 도메인 (공급업체)의 Pydantic 스키마를 정의하는 모듈입니다.
"""

from typing import Optional
from datetime import datetime

from sqlmodel import SQLModel
from pydantic import Field


class ProviderCreate(SQLModel):
    name: str = Field(..., min_length=1, max_length=150, description="공급업체명")
    document_number: Optional[str] = Field(None, max_length=30)
    contact_name: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=30)
    email: Optional[str] = Field(None, max_length=100)


class ProviderResponse(ProviderCreate):
    id: int
    tenant_id: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
