# app/domains/mnt/crud.py

"""
'mnt' 도메인 (정비 관리)과 관련된 CRUD 로직을 담당하는 모듈입니다.

이 모듈은 조회와 단순 쓰기만 담당합니다. 상태 전이, 주기 재생성, 작업 지시서 발번처럼
여러 테이블에 걸친 쓰기는 services 모듈에서 하나의 트랜잭션으로 처리합니다.
"""

from datetime import date
from typing import List, Optional, Sequence

from sqlalchemy import func
from sqlalchemy.orm import selectinload
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.crud_base import CRUDBase
from app.core.exceptions import NotFoundError
from . import models as mnt_models
from . import schemas as mnt_schemas
from .lifecycle import display_status_clause

PREVENTIVE_NOT_FOUND = "Manutencao nao encontrada."
TICKET_NOT_FOUND = "Chamado nao encontrado."
SERVICE_ORDER_NOT_FOUND = "Ordem de servico nao encontrada."
CHECKLIST_NOT_FOUND = "Template nao encontrado."


# =============================================================================
# 1. 예방 정비 (PreventiveMaintenance) CRUD
# =============================================================================
class CRUDPreventive(CRUDBase[mnt_models.PreventiveMaintenance, mnt_schemas.PreventiveCreate, mnt_schemas.PreventiveCreate]):
    def __init__(self):
        super().__init__(model=mnt_models.PreventiveMaintenance)

    async def get_or_404(self, db: AsyncSession, *, id: int, tenant_id: int) -> mnt_models.PreventiveMaintenance:
        db_obj = await self.get(db, id=id, tenant_id=tenant_id)
        if db_obj is None:
            raise NotFoundError(PREVENTIVE_NOT_FOUND)
        return db_obj

    async def get_filtered(
        self,
        db: AsyncSession,
        *,
        tenant_id: int,
        today: date,
        display_status: Optional[mnt_models.DisplayStatus] = None,
        equipment_id: Optional[int] = None,
        service_type: Optional[mnt_models.ServiceType] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[mnt_models.PreventiveMaintenance]:
        """
        예방 정비 목록을 조회합니다.
        표시 상태(VENCIDA 포함) 필터는 주어진 today 기준으로 평가됩니다.
        """
        query = select(self.model).where(self.model.tenant_id == tenant_id)
        clause = display_status_clause(self.model, display_status, today)
        if clause is not None:
            query = query.where(clause)
        if equipment_id is not None:
            query = query.where(self.model.equipment_id == equipment_id)
        if service_type is not None:
            query = query.where(self.model.service_type == service_type)
        query = query.order_by(self.model.due_date, self.model.id).offset(skip).limit(limit)
        result = await db.execute(query)
        return result.scalars().all()

    async def get_scheduled_in(
        self, db: AsyncSession, *, ids: Sequence[int], tenant_id: int
    ) -> List[mnt_models.PreventiveMaintenance]:
        """주어진 ID 중 테넌트 소유이면서 AGENDADA 상태인 레코드만 반환합니다."""
        if not ids:
            return []
        statement = (
            select(self.model)
            .where(
                self.model.id.in_(ids),
                self.model.tenant_id == tenant_id,
                self.model.status == mnt_models.RecordStatus.AGENDADA,
            )
            .order_by(self.model.id)
        )
        result = await db.execute(statement)
        return result.scalars().all()


preventive = CRUDPreventive()


# =============================================================================
# 2. 교정 정비 (CorrectiveMaintenance, 고장 접수) CRUD
# =============================================================================
class CRUDTicket(CRUDBase[mnt_models.CorrectiveMaintenance, mnt_schemas.TicketCreate, mnt_schemas.TicketResolve]):
    def __init__(self):
        super().__init__(model=mnt_models.CorrectiveMaintenance)

    async def get_or_404(self, db: AsyncSession, *, id: int, tenant_id: int) -> mnt_models.CorrectiveMaintenance:
        db_obj = await self.get(db, id=id, tenant_id=tenant_id)
        if db_obj is None:
            raise NotFoundError(TICKET_NOT_FOUND)
        return db_obj

    async def get_closed(
        self, db: AsyncSession, *, tenant_id: int, equipment_id: Optional[int] = None
    ) -> List[mnt_models.CorrectiveMaintenance]:
        """신뢰도 지표 계산용: closed_at이 기록된 접수를 (설비, 접수 일시) 순으로 반환합니다."""
        statement = select(self.model).where(
            self.model.tenant_id == tenant_id,
            self.model.closed_at.is_not(None),
        )
        if equipment_id is not None:
            statement = statement.where(self.model.equipment_id == equipment_id)
        statement = statement.order_by(self.model.equipment_id, self.model.opened_at)
        result = await db.execute(statement)
        return result.scalars().all()


ticket = CRUDTicket()


# =============================================================================
# 3. 작업 지시서 (ServiceOrder) CRUD
# =============================================================================
class CRUDServiceOrder(CRUDBase[mnt_models.ServiceOrder, mnt_schemas.ServiceOrderResponse, mnt_schemas.ServiceOrderResponse]):
    def __init__(self):
        super().__init__(model=mnt_models.ServiceOrder)

    async def get_or_404(self, db: AsyncSession, *, id: int, tenant_id: int) -> mnt_models.ServiceOrder:
        db_obj = await self.get(db, id=id, tenant_id=tenant_id)
        if db_obj is None:
            raise NotFoundError(SERVICE_ORDER_NOT_FOUND)
        return db_obj


service_order = CRUDServiceOrder()


# =============================================================================
# 4. 체크리스트 (ChecklistTemplate / ChecklistItem / ChecklistResult) CRUD
# =============================================================================
class CRUDChecklistTemplate(
    CRUDBase[mnt_models.ChecklistTemplate, mnt_schemas.ChecklistTemplateCreate, mnt_schemas.ChecklistTemplateCreate]
):
    def __init__(self):
        super().__init__(model=mnt_models.ChecklistTemplate)

    async def get_with_items(self, db: AsyncSession, *, id: int, tenant_id: int) -> Optional[mnt_models.ChecklistTemplate]:
        """항목을 함께 로드합니다. 세션에 남아 있는 이전 상태는 덮어씁니다."""
        statement = (
            select(self.model)
            .where(self.model.id == id, self.model.tenant_id == tenant_id)
            .options(selectinload(self.model.items))
            .execution_options(populate_existing=True)
        )
        result = await db.execute(statement)
        return result.scalars().one_or_none()

    async def get_with_items_or_404(self, db: AsyncSession, *, id: int, tenant_id: int) -> mnt_models.ChecklistTemplate:
        db_obj = await self.get_with_items(db, id=id, tenant_id=tenant_id)
        if db_obj is None:
            raise NotFoundError(CHECKLIST_NOT_FOUND)
        return db_obj

    async def get_multi_with_items(
        self, db: AsyncSession, *, tenant_id: int, equipment_type_id: Optional[int] = None
    ) -> List[mnt_models.ChecklistTemplate]:
        statement = (
            select(self.model)
            .where(self.model.tenant_id == tenant_id)
            .options(selectinload(self.model.items))
        )
        if equipment_type_id is not None:
            statement = statement.where(self.model.equipment_type_id == equipment_type_id)
        result = await db.execute(statement.order_by(self.model.name, self.model.id))
        return result.scalars().all()

    async def count_results(self, db: AsyncSession, *, template_id: int) -> int:
        statement = select(func.count(mnt_models.ChecklistResult.id)).where(
            mnt_models.ChecklistResult.template_id == template_id
        )
        result = await db.execute(statement)
        return result.scalar_one()

    async def next_item_order(self, db: AsyncSession, *, template_id: int) -> int:
        """다음 항목 순서 (기존 최댓값 + 1, 항목이 없으면 0)."""
        statement = select(func.max(mnt_models.ChecklistItem.sort_order)).where(
            mnt_models.ChecklistItem.template_id == template_id
        )
        result = await db.execute(statement)
        current_max = result.scalar_one_or_none()
        return 0 if current_max is None else current_max + 1


checklist_template = CRUDChecklistTemplate()


class CRUDChecklistResult:
    async def get_by_preventive(
        self, db: AsyncSession, *, preventive_id: int, tenant_id: int
    ) -> List[mnt_models.ChecklistResult]:
        statement = select(mnt_models.ChecklistResult).where(
            mnt_models.ChecklistResult.preventive_maintenance_id == preventive_id,
            mnt_models.ChecklistResult.tenant_id == tenant_id,
        )
        result = await db.execute(statement.order_by(mnt_models.ChecklistResult.id))
        return result.scalars().all()


checklist_result = CRUDChecklistResult()
