# app/domains/models/__init__.py

"""
이 파일은 모든 도메인의 SQLModel 모델들을 한 곳에서 중앙 관리하여,
다른 모듈에서 쉽게 임포트할 수 있도록 하는 역할을 합니다.
SQLModel.metadata가 모든 테이블을 인식하도록 보장합니다 (create_db_and_tables, 테스트 픽스처).
"""

# usr (Tenant, User)
from app.domains.usr.models import Tenant, User, UserRole, TenantPlan

# fms (EquipmentType, Equipment)
from app.domains.fms.models import EquipmentType, Equipment, Criticality, EquipmentStatus

# ven (Provider)
from app.domains.ven.models import Provider

# mnt (예방/교정 정비, 작업 지시서, 체크리스트)
from app.domains.mnt.models import (
    PreventiveMaintenance, CorrectiveMaintenance, ServiceOrder,
    ChecklistTemplate, ChecklistItem, ChecklistResult,
)

# phy (MedicalPhysicsTest)
from app.domains.phy.models import MedicalPhysicsTest

__all__ = [
    "Tenant", "User", "UserRole", "TenantPlan",
    "EquipmentType", "Equipment", "Criticality", "EquipmentStatus",
    "Provider",
    "PreventiveMaintenance", "CorrectiveMaintenance", "ServiceOrder",
    "ChecklistTemplate", "ChecklistItem", "ChecklistResult",
    "MedicalPhysicsTest",
]
