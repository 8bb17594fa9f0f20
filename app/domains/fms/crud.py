# app/domains/fms/crud.py

"""
'fms' 도메인 (의료기기/설비 관리)과 관련된 CRUD 로직을 담당하는 모듈입니다.
"""

from typing import List, Optional, Sequence

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.crud_base import CRUDBase
from app.core.exceptions import NotFoundError, ValidationError
from app.domains.mnt.sla import requires_contingency_plan
from . import models as fms_models
from . import schemas as fms_schemas

EQUIPMENT_NOT_FOUND = "Equipamento nao encontrado."


# =============================================================================
# 1. 설비 유형 (EquipmentType) CRUD
# =============================================================================
class CRUDEquipmentType(
    CRUDBase[fms_models.EquipmentType, fms_schemas.EquipmentTypeCreate, fms_schemas.EquipmentTypeCreate]
):
    def __init__(self):
        super().__init__(model=fms_models.EquipmentType)


equipment_type = CRUDEquipmentType()


# =============================================================================
# 2. 설비 (Equipment) CRUD
# =============================================================================
def _check_contingency_plan(criticality: fms_models.Criticality, contingency_plan: Optional[str]) -> None:
    if requires_contingency_plan(criticality) and not (contingency_plan or "").strip():
        raise ValidationError("Equipamentos de criticidade A exigem um plano de contingencia.")


class CRUDEquipment(CRUDBase[fms_models.Equipment, fms_schemas.EquipmentCreate, fms_schemas.EquipmentUpdate]):
    def __init__(self):
        super().__init__(model=fms_models.Equipment)

    async def get_or_404(self, db: AsyncSession, *, id: int, tenant_id: int) -> fms_models.Equipment:
        db_obj = await self.get(db, id=id, tenant_id=tenant_id)
        if db_obj is None:
            raise NotFoundError(EQUIPMENT_NOT_FOUND)
        return db_obj

    async def get_public(self, db: AsyncSession, *, id: int) -> Optional[fms_models.Equipment]:
        """테넌트 조건 없이 설비를 조회합니다. QR 코드 공개 신고에서만 사용합니다."""
        return await db.get(self.model, id)

    async def get_ids_in_tenant(self, db: AsyncSession, *, ids: Sequence[int], tenant_id: int) -> List[int]:
        """주어진 ID 중 테넌트에 속한 설비 ID만 반환합니다."""
        if not ids:
            return []
        statement = select(self.model.id).where(self.model.id.in_(ids), self.model.tenant_id == tenant_id)
        result = await db.execute(statement)
        return list(result.scalars().all())

    async def _check_equipment_type(self, db: AsyncSession, *, equipment_type_id: Optional[int], tenant_id: int) -> None:
        if equipment_type_id is None:
            return
        if await equipment_type.get(db, id=equipment_type_id, tenant_id=tenant_id) is None:
            raise NotFoundError("Tipo de equipamento nao encontrado.")

    async def create(
        self, db: AsyncSession, *, obj_in: fms_schemas.EquipmentCreate, tenant_id: int
    ) -> fms_models.Equipment:
        """위험 등급 A의 비상 계획 필수 규칙과 설비 유형 소속을 확인하고 생성합니다."""
        _check_contingency_plan(obj_in.criticality, obj_in.contingency_plan)
        await self._check_equipment_type(db, equipment_type_id=obj_in.equipment_type_id, tenant_id=tenant_id)
        return await super().create(db, obj_in=obj_in, tenant_id=tenant_id)

    async def update(
        self, db: AsyncSession, *, db_obj: fms_models.Equipment, obj_in: fms_schemas.EquipmentUpdate
    ) -> fms_models.Equipment:
        update_data = obj_in.model_dump(exclude_unset=True)
        _check_contingency_plan(
            update_data.get("criticality", db_obj.criticality),
            update_data.get("contingency_plan", db_obj.contingency_plan),
        )
        if "equipment_type_id" in update_data:
            await self._check_equipment_type(
                db, equipment_type_id=update_data["equipment_type_id"], tenant_id=db_obj.tenant_id
            )
        return await super().update(db, db_obj=db_obj, obj_in=obj_in)


equipment = CRUDEquipment()
