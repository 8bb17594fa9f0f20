# app/domains/phy/crud.py

"""
'phy' 도메인 (의학 물리 시험)과 관련된 CRUD 로직을 담당하는 모듈입니다.
"""

from datetime import date
from typing import List, Optional

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.crud_base import CRUDBase
from app.core.exceptions import NotFoundError
from app.domains.mnt.lifecycle import display_status_clause
from app.domains.mnt.models import DisplayStatus, RecordStatus
from . import models as phy_models
from . import schemas as phy_schemas

PHYSICS_TEST_NOT_FOUND = "Teste de fisica medica nao encontrado."


class CRUDPhysicsTest(CRUDBase[phy_models.MedicalPhysicsTest, phy_schemas.PhysicsTestCreate, phy_schemas.PhysicsTestCreate]):
    def __init__(self):
        super().__init__(model=phy_models.MedicalPhysicsTest)

    async def get_or_404(self, db: AsyncSession, *, id: int, tenant_id: int) -> phy_models.MedicalPhysicsTest:
        db_obj = await self.get(db, id=id, tenant_id=tenant_id)
        if db_obj is None:
            raise NotFoundError(PHYSICS_TEST_NOT_FOUND)
        return db_obj

    async def get_filtered(
        self,
        db: AsyncSession,
        *,
        tenant_id: int,
        today: date,
        display_status: Optional[DisplayStatus] = None,
        equipment_id: Optional[int] = None,
        test_type: Optional[phy_models.PhysicsTestType] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[phy_models.MedicalPhysicsTest]:
        query = select(self.model).where(self.model.tenant_id == tenant_id)
        clause = display_status_clause(self.model, display_status, today)
        if clause is not None:
            query = query.where(clause)
        if equipment_id is not None:
            query = query.where(self.model.equipment_id == equipment_id)
        if test_type is not None:
            query = query.where(self.model.type == test_type)
        query = query.order_by(self.model.due_date, self.model.id).offset(skip).limit(limit)
        result = await db.execute(query)
        return result.scalars().all()

    async def get_types_for_equipment(
        self, db: AsyncSession, *, tenant_id: int, equipment_id: int
    ) -> List[phy_models.PhysicsTestType]:
        """설비에 기록된 적이 있는 시험 유형 (중복 제거)."""
        statement = (
            select(self.model.type)
            .where(self.model.tenant_id == tenant_id, self.model.equipment_id == equipment_id)
            .distinct()
        )
        result = await db.execute(statement)
        return list(result.scalars().all())

    async def has_scheduled(
        self, db: AsyncSession, *, tenant_id: int, equipment_id: int, test_type: phy_models.PhysicsTestType
    ) -> bool:
        statement = (
            select(self.model.id)
            .where(
                self.model.tenant_id == tenant_id,
                self.model.equipment_id == equipment_id,
                self.model.type == test_type,
                self.model.status == RecordStatus.AGENDADA,
            )
            .limit(1)
        )
        result = await db.execute(statement)
        return result.scalars().first() is not None

    async def get_latest(
        self, db: AsyncSession, *, tenant_id: int, equipment_id: int, test_type: phy_models.PhysicsTestType
    ) -> Optional[phy_models.MedicalPhysicsTest]:
        """해당 유형의 가장 최근 레코드 (created_at, id 내림차순)."""
        statement = (
            select(self.model)
            .where(
                self.model.tenant_id == tenant_id,
                self.model.equipment_id == equipment_id,
                self.model.type == test_type,
            )
            .order_by(self.model.created_at.desc(), self.model.id.desc())
            .limit(1)
        )
        result = await db.execute(statement)
        return result.scalars().first()


physics_test = CRUDPhysicsTest()
