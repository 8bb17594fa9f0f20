# app/domains/mnt/services.py

"""
정비 수명주기(lifecycle) 엔진의 비즈니스 로직을 처리하는 서비스 모듈입니다.

- 예방 정비: 생성, 실행(+ 체크리스트 결과, 주기 재생성), 삭제, 일괄 예약/실행.
- 고장 접수: 생성 → 접수(원자적 조건부 UPDATE) → 해결(이벤트 발행) → 종결.
- 작업 지시서: 테넌트별 일련번호 발번, 시작/완료.
- 체크리스트 템플릿 관리, 공개 QR 신고, 신뢰도 지표 조회.

여러 테이블에 쓰는 모든 연산은 `atomic(db)` 블록 안에서 수행되므로,
도중에 예외가 발생하면 어떤 변경도 커밋되지 않습니다.
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy import delete, update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.clock import Clock
from app.core.config import settings
from app.core.database import atomic
from app.core.events import event_bus
from app.core.exceptions import NotFoundError, ValidationError
from app.core.permissions import service_type_allowed
from app.core.security import TenantContext
from app.domains.fms import crud as fms_crud
from app.domains.fms import models as fms_models
from app.domains.usr import crud as usr_crud
from app.domains.usr import models as usr_models
from app.domains.ven import crud as ven_crud

from . import crud as mnt_crud
from . import models as mnt_models
from . import schemas as mnt_schemas
from .events import CorrectiveResolved
from .lifecycle import claim_scheduled
from .periodicity import clamp_periodicity, next_schedule
from .reliability import RepairInterval, compute_equipment_mtbf_mttr, compute_global_mtbf_mttr
from .sla import requires_contingency_plan, sla_deadline, sla_status

logger = logging.getLogger(__name__)

_PLAN_DENIED_MESSAGES: Dict[mnt_models.ServiceType, str] = {
    mnt_models.ServiceType.CALIBRACAO: "Calibracao nao disponivel no seu plano.",
    mnt_models.ServiceType.TSE: "TSE nao disponivel no seu plano.",
}

def _check_service_type(ctx: TenantContext, service_type: mnt_models.ServiceType) -> None:
    if not service_type_allowed(ctx.plan, service_type.value):
        raise ValidationError(
            _PLAN_DENIED_MESSAGES.get(service_type, "Tipo de servico nao disponivel no seu plano.")
        )


def _dedupe(ids: Sequence[int]) -> List[int]:
    return list(dict.fromkeys(ids))


def _check_bulk_size(ids: Sequence[int], empty_message: str) -> None:
    if not ids:
        raise ValidationError(empty_message)
    if len(ids) > settings.BULK_MAX_ITEMS:
        raise ValidationError(f"Limite de {settings.BULK_MAX_ITEMS} itens por operacao excedido.")


# =============================================================================
# 1. 작업 지시서 (Service Order)
# =============================================================================
async def create_service_order(
    db: AsyncSession,
    *,
    tenant_id: int,
    preventive_id: Optional[int] = None,
    corrective_id: Optional[int] = None,
) -> mnt_models.ServiceOrder:
    """
    호출자의 트랜잭션 안에서 작업 지시서를 만듭니다.

    번호는 tenant.last_os_number를 UPDATE로 1 증가시킨 값입니다. UPDATE가 테넌트 행을 잠그므로
    같은 테넌트의 동시 발번은 직렬화됩니다. 커밋은 호출자가 합니다.
    """
    if (preventive_id is None) == (corrective_id is None):
        raise ValueError("작업 지시서는 예방 정비 또는 교정 정비 중 정확히 하나에 연결되어야 합니다.")

    await db.execute(
        update(usr_models.Tenant)
        .where(usr_models.Tenant.id == tenant_id)
        .values(last_os_number=usr_models.Tenant.last_os_number + 1)
        .execution_options(synchronize_session=False)
    )
    result = await db.execute(select(usr_models.Tenant.last_os_number).where(usr_models.Tenant.id == tenant_id))
    number = result.scalar_one()

    order = mnt_models.ServiceOrder(
        tenant_id=tenant_id,
        number=number,
        status=mnt_models.ServiceOrderStatus.ABERTA,
        preventive_maintenance_id=preventive_id,
        corrective_maintenance_id=corrective_id,
    )
    db.add(order)
    await db.flush()
    logger.info("작업 지시서 발번: tenant=%s number=%s", tenant_id, number)
    return order


async def start_service_order(
    db: AsyncSession, ctx: TenantContext, order_id: int, clock: Clock
) -> mnt_models.ServiceOrder:
    order = await mnt_crud.service_order.get_or_404(db, id=order_id, tenant_id=ctx.tenant_id)
    if order.status != mnt_models.ServiceOrderStatus.ABERTA:
        raise ValidationError("Somente ordens de servico abertas podem ser iniciadas.")
    async with atomic(db):
        order.status = mnt_models.ServiceOrderStatus.EM_EXECUCAO
        order.started_at = clock.now()
        db.add(order)
    logger.info("작업 지시서 %s: ABERTA -> EM_EXECUCAO (tenant=%s)", order.id, ctx.tenant_id)
    return order


async def complete_service_order(
    db: AsyncSession, ctx: TenantContext, order_id: int, clock: Clock
) -> mnt_models.ServiceOrder:
    order = await mnt_crud.service_order.get_or_404(db, id=order_id, tenant_id=ctx.tenant_id)
    if order.status != mnt_models.ServiceOrderStatus.EM_EXECUCAO:
        raise ValidationError("Somente ordens de servico em execucao podem ser concluidas.")
    async with atomic(db):
        order.status = mnt_models.ServiceOrderStatus.CONCLUIDA
        order.completed_at = clock.now()
        db.add(order)
    logger.info("작업 지시서 %s: EM_EXECUCAO -> CONCLUIDA (tenant=%s)", order.id, ctx.tenant_id)
    return order


# =============================================================================
# 2. 예방 정비 (Preventive Maintenance)
# =============================================================================
def regenerate_preventive(
    db: AsyncSession, record: mnt_models.PreventiveMaintenance
) -> Optional[mnt_models.PreventiveMaintenance]:
    """
    실행된 레코드의 다음 예정 레코드를 하나 만듭니다 (주기가 0이면 만들지 않음).
    실행 트랜잭션 안에서만 호출되며, 후속 레코드에는 작업 지시서를 만들지 않습니다.
    """
    schedule = next_schedule(record.execution_date, record.periodicity_months)
    if schedule is None:
        return None

    scheduled_date, due_date = schedule
    successor = mnt_models.PreventiveMaintenance(
        tenant_id=record.tenant_id,
        equipment_id=record.equipment_id,
        type=record.type,
        service_type=record.service_type,
        status=mnt_models.RecordStatus.AGENDADA,
        scheduled_date=scheduled_date,
        due_date=due_date,
        periodicity_months=record.periodicity_months,
        provider_id=record.provider_id,
        provider=record.provider,
    )
    db.add(successor)
    logger.info(
        "예방 정비 재생성: equipment=%s %s -> %s (주기 %s개월)",
        record.equipment_id, record.execution_date, scheduled_date, record.periodicity_months,
    )
    return successor


def _execution_values(
    *,
    execution_date,
    cost: Optional[float] = None,
    notes: Optional[str] = None,
    certificate_url: Optional[str] = None,
) -> Dict[str, object]:
    # 값이 주어진 항목만 덮어씀
    values: Dict[str, object] = {"execution_date": execution_date}
    if cost is not None:
        values["cost"] = cost
    if notes is not None:
        values["notes"] = notes
    if certificate_url is not None:
        values["certificate_url"] = certificate_url
    return values


async def create_preventive(
    db: AsyncSession, ctx: TenantContext, data: mnt_schemas.PreventiveCreate
) -> mnt_models.PreventiveMaintenance:
    """
    예방 정비를 AGENDADA 상태로 생성하고 작업 지시서를 함께 만듭니다.

    검사 순서: 요금제의 서비스 유형 허용 → 필수 값 → 설비 소속.
    예정일이 만기일보다 늦어도 거부하지 않습니다.
    """
    _check_service_type(ctx, data.service_type)
    if data.equipment_id is None or data.scheduled_date is None or data.due_date is None:
        raise ValidationError("Equipamento, data agendada e vencimento sao obrigatorios.")

    await fms_crud.equipment.get_or_404(db, id=data.equipment_id, tenant_id=ctx.tenant_id)
    provider_id, provider_name = await ven_crud.provider.resolve_reference(
        db, provider_id=data.provider_id, tenant_id=ctx.tenant_id
    )

    async with atomic(db):
        record = mnt_models.PreventiveMaintenance(
            tenant_id=ctx.tenant_id,
            equipment_id=data.equipment_id,
            type=mnt_models.SERVICE_TYPE_LABELS[data.service_type],
            service_type=data.service_type,
            status=mnt_models.RecordStatus.AGENDADA,
            scheduled_date=data.scheduled_date,
            due_date=data.due_date,
            periodicity_months=clamp_periodicity(data.periodicity_months),
            provider_id=provider_id,
            provider=provider_name or data.provider,
            cost=data.cost,
            notes=data.notes,
        )
        db.add(record)
        await db.flush()
        await create_service_order(db, tenant_id=ctx.tenant_id, preventive_id=record.id)

    logger.info("예방 정비 생성: id=%s tenant=%s type=%s", record.id, ctx.tenant_id, record.service_type)
    return record


async def _build_checklist_result(
    db: AsyncSession, *, tenant_id: int, submission: mnt_schemas.ChecklistSubmission
) -> Tuple[int, List[dict]]:
    template = await mnt_crud.checklist_template.get_with_items_or_404(
        db, id=submission.template_id, tenant_id=tenant_id
    )
    if not template.active:
        raise ValidationError("Checklist inativo.")

    items_by_id = {item.id: item for item in template.items}
    entries = []
    for answer in submission.items:
        item = items_by_id.get(answer.item_id)
        if item is None:
            raise ValidationError("Item de checklist nao pertence ao template.")
        entries.append({
            "item_id": item.id,
            "description": item.description,
            "result": answer.result.value,
            "observation": answer.observation,
        })
    return template.id, entries


async def execute_preventive(
    db: AsyncSession, ctx: TenantContext, record_id: int, data: mnt_schemas.PreventiveExecute
) -> Tuple[mnt_models.PreventiveMaintenance, Optional[mnt_models.PreventiveMaintenance]]:
    """
    예방 정비를 실행 처리합니다 (AGENDADA → REALIZADA).

    Returns:
        (실행된 레코드, 재생성된 후속 레코드 또는 None)

    Raises:
        NotFoundError: 레코드가 없거나 다른 테넌트 소유인 경우.
        ValidationError: 이미 실행된 레코드이거나 체크리스트가 올바르지 않은 경우.
    """
    record = await mnt_crud.preventive.get_or_404(db, id=record_id, tenant_id=ctx.tenant_id)
    if record.status != mnt_models.RecordStatus.AGENDADA:
        raise ValidationError("Esta manutencao ja foi realizada.")

    checklist = None
    if data.checklist is not None:
        checklist = await _build_checklist_result(db, tenant_id=ctx.tenant_id, submission=data.checklist)

    async with atomic(db):
        claimed = await claim_scheduled(
            db,
            mnt_models.PreventiveMaintenance,
            record_id=record.id,
            tenant_id=ctx.tenant_id,
            values=_execution_values(
                execution_date=data.execution_date,
                cost=data.cost,
                notes=data.notes,
                certificate_url=data.certificate_url,
            ),
        )
        if not claimed:
            raise ValidationError("Esta manutencao ja foi realizada.")
        await db.refresh(record)
        if checklist is not None:
            template_id, entries = checklist
            db.add(mnt_models.ChecklistResult(
                tenant_id=ctx.tenant_id,
                template_id=template_id,
                preventive_maintenance_id=record.id,
                items=entries,
            ))
        successor = regenerate_preventive(db, record)

    logger.info("예방 정비 %s: AGENDADA -> REALIZADA (tenant=%s)", record.id, ctx.tenant_id)
    return record, successor


async def delete_preventive(db: AsyncSession, ctx: TenantContext, record_id: int) -> None:
    """상태와 관계없이 삭제합니다. 연결된 작업 지시서와 체크리스트 결과도 함께 삭제됩니다."""
    record = await mnt_crud.preventive.get_or_404(db, id=record_id, tenant_id=ctx.tenant_id)
    async with atomic(db):
        await db.execute(
            delete(mnt_models.ChecklistResult)
            .where(mnt_models.ChecklistResult.preventive_maintenance_id == record.id)
        )
        await db.execute(
            delete(mnt_models.ServiceOrder)
            .where(mnt_models.ServiceOrder.preventive_maintenance_id == record.id)
        )
        await db.delete(record)
    logger.info("예방 정비 삭제: id=%s tenant=%s", record_id, ctx.tenant_id)


# =============================================================================
# 3. 일괄 작업 (Bulk Operations)
# =============================================================================
async def bulk_schedule_preventive(
    db: AsyncSession, ctx: TenantContext, data: mnt_schemas.BulkScheduleRequest
) -> int:
    """
    여러 설비에 예방 정비를 한 번에 예약합니다. 만기일은 예정일과 같습니다.
    테넌트에 없는 설비는 조용히 건너뛰며, 생성된 레코드마다 작업 지시서를 만듭니다.
    """
    _check_service_type(ctx, data.service_type)
    _check_bulk_size(data.equipment_ids, "Selecione ao menos um equipamento.")
    if data.scheduled_date is None:
        raise ValidationError("Selecione equipamentos e informe a data agendada.")

    requested_ids = _dedupe(data.equipment_ids)
    valid_ids = set(await fms_crud.equipment.get_ids_in_tenant(db, ids=requested_ids, tenant_id=ctx.tenant_id))
    target_ids = [equipment_id for equipment_id in requested_ids if equipment_id in valid_ids]
    if len(target_ids) < len(requested_ids):
        logger.warning(
            "일괄 예약: 테넌트 외 설비 %d건 건너뜀 (tenant=%s)", len(requested_ids) - len(target_ids), ctx.tenant_id
        )
    if not target_ids:
        raise ValidationError("Nenhum equipamento valido encontrado.")

    provider_id, provider_name = await ven_crud.provider.resolve_reference(
        db, provider_id=data.provider_id, tenant_id=ctx.tenant_id
    )
    periodicity = clamp_periodicity(data.periodicity_months)

    async with atomic(db):
        for equipment_id in target_ids:
            record = mnt_models.PreventiveMaintenance(
                tenant_id=ctx.tenant_id,
                equipment_id=equipment_id,
                type=mnt_models.SERVICE_TYPE_LABELS[data.service_type],
                service_type=data.service_type,
                status=mnt_models.RecordStatus.AGENDADA,
                scheduled_date=data.scheduled_date,
                due_date=data.scheduled_date,
                periodicity_months=periodicity,
                provider_id=provider_id,
                provider=provider_name,
            )
            db.add(record)
            await db.flush()
            await create_service_order(db, tenant_id=ctx.tenant_id, preventive_id=record.id)

    logger.info("일괄 예약 완료: %d건 (tenant=%s)", len(target_ids), ctx.tenant_id)
    return len(target_ids)


async def bulk_execute_preventive(
    db: AsyncSession, ctx: TenantContext, data: mnt_schemas.BulkExecuteRequest
) -> int:
    """
    여러 예방 정비를 한 번에 실행 처리하고 각각의 후속 레코드를 재생성합니다.
    다른 테넌트 소유이거나 이미 실행된 레코드는 건너뜁니다.
    """
    _check_bulk_size(data.maintenance_ids, "Selecione ao menos uma manutencao.")
    if data.execution_date is None:
        raise ValidationError("Selecione manutencoes e informe a data de execucao.")
    requested_ids = _dedupe(data.maintenance_ids)

    records = await mnt_crud.preventive.get_scheduled_in(db, ids=requested_ids, tenant_id=ctx.tenant_id)
    if len(records) < len(requested_ids):
        logger.warning(
            "일괄 실행: 유효하지 않은 레코드 %d건 건너뜀 (tenant=%s)", len(requested_ids) - len(records), ctx.tenant_id
        )
    if not records:
        raise ValidationError("Nenhuma manutencao valida para executar.")

    values = _execution_values(execution_date=data.execution_date, notes=data.notes)
    executed = 0
    async with atomic(db):
        for record in records:
            # 조회 이후 다른 요청이 먼저 실행한 레코드는 건너뜀
            if not await claim_scheduled(
                db, mnt_models.PreventiveMaintenance, record_id=record.id, tenant_id=ctx.tenant_id, values=values
            ):
                logger.warning("일괄 실행: 레코드 %s 는 이미 실행됨, 건너뜀", record.id)
                continue
            await db.refresh(record)
            regenerate_preventive(db, record)
            executed += 1
        if executed == 0:
            raise ValidationError("Nenhuma manutencao valida para executar.")

    logger.info("일괄 실행 완료: %d건 (tenant=%s)", executed, ctx.tenant_id)
    return executed


# =============================================================================
# 4. 고장 접수 (Corrective Ticket)
# =============================================================================
async def create_ticket(
    db: AsyncSession,
    *,
    tenant_id: int,
    opened_by_id: int,
    data: mnt_schemas.TicketCreate,
    clock: Clock,
) -> mnt_models.CorrectiveMaintenance:
    """
    고장 접수를 ABERTO 상태로 생성합니다.
    SLA 시한은 설비 위험 등급으로 이 시점에 한 번만 계산되며, 설비는 EM_MANUTENCAO로 바뀝니다.
    """
    description = (data.description or "").strip()
    if not description:
        raise ValidationError("Equipamento e descricao sao obrigatorios.")

    equipment = await fms_crud.equipment.get_or_404(db, id=data.equipment_id, tenant_id=tenant_id)
    opened_at = clock.now()

    async with atomic(db):
        ticket = mnt_models.CorrectiveMaintenance(
            tenant_id=tenant_id,
            equipment_id=equipment.id,
            description=description,
            urgency=data.urgency,
            status=mnt_models.TicketStatus.ABERTO,
            opened_at=opened_at,
            sla_deadline=sla_deadline(equipment.criticality, opened_at),
            opened_by_id=opened_by_id,
        )
        db.add(ticket)
        equipment.status = fms_models.EquipmentStatus.EM_MANUTENCAO
        db.add(equipment)
        await db.flush()
        await create_service_order(db, tenant_id=tenant_id, corrective_id=ticket.id)

    logger.info(
        "고장 접수 생성: id=%s equipment=%s criticality=%s (tenant=%s)",
        ticket.id, equipment.id, equipment.criticality, tenant_id,
    )
    return ticket


async def accept_ticket(
    db: AsyncSession, ctx: TenantContext, ticket_id: int, data: mnt_schemas.TicketAccept, clock: Clock
) -> mnt_models.CorrectiveMaintenance:
    """
    ABERTO → EM_ATENDIMENTO.
    상태 조건을 포함한 UPDATE 한 번으로 전이하므로 동시에 여러 번 접수해도 하나만 성공합니다.
    """
    ticket = await mnt_crud.ticket.get_or_404(db, id=ticket_id, tenant_id=ctx.tenant_id)
    assignee_id = data.assignee_id or ctx.user_id
    if not await usr_crud.user.get_assignable(db, tenant_id=ctx.tenant_id, user_id=assignee_id):
        raise ValidationError("Responsavel invalido: apenas usuarios MASTER ou TECNICO ativos.")

    async with atomic(db):
        result = await db.execute(
            update(mnt_models.CorrectiveMaintenance)
            .where(
                mnt_models.CorrectiveMaintenance.id == ticket_id,
                mnt_models.CorrectiveMaintenance.tenant_id == ctx.tenant_id,
                mnt_models.CorrectiveMaintenance.status == mnt_models.TicketStatus.ABERTO,
            )
            .values(
                status=mnt_models.TicketStatus.EM_ATENDIMENTO,
                assigned_to_id=assignee_id,
                updated_at=clock.now(),
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise ValidationError("Chamado nao esta aberto para atendimento.")

    await db.refresh(ticket)
    logger.info("고장 접수 %s: ABERTO -> EM_ATENDIMENTO (assignee=%s)", ticket.id, assignee_id)
    return ticket


async def resolve_ticket(
    db: AsyncSession, ctx: TenantContext, ticket_id: int, data: mnt_schemas.TicketResolve, clock: Clock
) -> mnt_models.CorrectiveMaintenance:
    """
    EM_ATENDIMENTO → RESOLVIDO.

    설비 상태는 무조건 ATIVO로 되돌립니다 (같은 설비에 다른 진행 중 접수가 있어도 마지막 해결이 우선).
    같은 트랜잭션 안에서 CorrectiveResolved 이벤트를 발행하므로, 구독자의 실패는 해결 자체를 롤백합니다.
    """
    ticket = await mnt_crud.ticket.get_or_404(db, id=ticket_id, tenant_id=ctx.tenant_id)
    if ticket.status != mnt_models.TicketStatus.EM_ATENDIMENTO:
        raise ValidationError("Somente chamados em atendimento podem ser resolvidos.")

    solution = (data.solution or "").strip()
    if not solution:
        raise ValidationError("A descricao da solucao e obrigatoria.")
    if data.time_spent is not None and data.time_spent < 0:
        raise ValidationError("Tempo gasto invalido.")
    if data.cost is not None and data.cost < 0:
        raise ValidationError("Custo invalido.")

    resolved_at = clock.now()
    async with atomic(db):
        ticket.status = mnt_models.TicketStatus.RESOLVIDO
        ticket.solution = solution
        ticket.diagnosis = data.diagnosis
        ticket.parts_used = data.parts_used
        ticket.time_spent = data.time_spent
        ticket.cost = data.cost
        ticket.closed_at = resolved_at
        db.add(ticket)

        equipment = await fms_crud.equipment.get(db, id=ticket.equipment_id, tenant_id=ctx.tenant_id)
        if equipment is not None:
            equipment.status = fms_models.EquipmentStatus.ATIVO
            db.add(equipment)
        await db.flush()

        await event_bus.publish(db, CorrectiveResolved(
            tenant_id=ctx.tenant_id,
            equipment_id=ticket.equipment_id,
            ticket_id=ticket.id,
            resolved_at=resolved_at,
        ))

    logger.info("고장 접수 %s: EM_ATENDIMENTO -> RESOLVIDO (tenant=%s)", ticket.id, ctx.tenant_id)
    return ticket


async def close_ticket(db: AsyncSession, ctx: TenantContext, ticket_id: int) -> mnt_models.CorrectiveMaintenance:
    ticket = await mnt_crud.ticket.get_or_404(db, id=ticket_id, tenant_id=ctx.tenant_id)
    if ticket.status != mnt_models.TicketStatus.RESOLVIDO:
        raise ValidationError("Somente chamados resolvidos podem ser fechados.")
    async with atomic(db):
        ticket.status = mnt_models.TicketStatus.FECHADO
        db.add(ticket)
    logger.info("고장 접수 %s: RESOLVIDO -> FECHADO (tenant=%s)", ticket.id, ctx.tenant_id)
    return ticket


async def build_ticket_responses(
    db: AsyncSession, tickets: Sequence[mnt_models.CorrectiveMaintenance], clock: Clock
) -> List[mnt_schemas.TicketResponse]:
    """
    응답 스키마로 변환합니다. sla_status는 현재 시각 기준으로 계산하고,
    비상 계획은 진행 중(ABERTO/EM_ATENDIMENTO)인 위험 등급 A 설비의 접수에만 포함합니다.
    """
    equipment_ids = {t.equipment_id for t in tickets}
    equipments: Dict[int, fms_models.Equipment] = {}
    if equipment_ids:
        result = await db.execute(
            select(fms_models.Equipment).where(
                fms_models.Equipment.id.in_(equipment_ids),
                fms_models.Equipment.tenant_id == tickets[0].tenant_id,
            )
        )
        equipments = {e.id: e for e in result.scalars().all()}

    now = clock.now()
    in_progress = (mnt_models.TicketStatus.ABERTO, mnt_models.TicketStatus.EM_ATENDIMENTO)
    responses = []
    for t in tickets:
        equipment = equipments.get(t.equipment_id)
        contingency_plan = None
        if equipment is not None and t.status in in_progress and requires_contingency_plan(equipment.criticality):
            contingency_plan = equipment.contingency_plan
        responses.append(mnt_schemas.TicketResponse.model_validate(
            t,
            update={
                "sla_status": sla_status(t.status, t.sla_deadline, now),
                "contingency_plan": contingency_plan,
            },
        ))
    return responses


# =============================================================================
# 5. 공개 QR 신고
# =============================================================================
async def report_public_problem(
    db: AsyncSession,
    *,
    equipment_id: int,
    data: mnt_schemas.PublicReportCreate,
    clock: Clock,
) -> mnt_models.CorrectiveMaintenance:
    """
    인증 없이 설비 QR 코드로 고장을 신고합니다.
    설비 소유 테넌트의 활성 MASTER 사용자를 접수자로 하여 일반 고장 접수와 같은 경로로 생성합니다.
    설비당 신고 횟수 제한은 라우터의 slowapi 제한기가 담당합니다.
    """
    reporter_name = (data.reporter_name or "").strip()
    description = (data.description or "").strip()
    phone = (data.phone or "").strip()
    if not reporter_name or not description:
        raise ValidationError("Nome e descrição do problema são obrigatórios.")
    if len(reporter_name) < 2:
        raise ValidationError("Informe seu nome completo.")
    if len(description) < 10:
        raise ValidationError("Descreva o problema com mais detalhes (mínimo 10 caracteres).")

    equipment = await fms_crud.equipment.get_public(db, id=equipment_id)
    if equipment is None:
        raise NotFoundError(fms_crud.EQUIPMENT_NOT_FOUND)

    master = await usr_crud.user.get_tenant_master(db, tenant_id=equipment.tenant_id)
    if master is None:
        logger.warning("공개 신고 거부: 테넌트 %s에 활성 MASTER 없음", equipment.tenant_id)
        raise ValidationError("Não foi possível registrar o problema. Contate a equipe técnica.")

    contact = f"{reporter_name} ({phone})" if phone else reporter_name
    return await create_ticket(
        db,
        tenant_id=equipment.tenant_id,
        opened_by_id=master.id,
        data=mnt_schemas.TicketCreate(
            equipment_id=equipment.id,
            description=f"[Reporte Público] {contact}\n\n{description}",
            urgency=mnt_models.TicketUrgency.MEDIA,
        ),
        clock=clock,
    )


# =============================================================================
# 6. 체크리스트 템플릿
# =============================================================================
async def create_checklist_template(
    db: AsyncSession, ctx: TenantContext, data: mnt_schemas.ChecklistTemplateCreate
) -> mnt_models.ChecklistTemplate:
    name = (data.name or "").strip()
    if not name:
        raise ValidationError("Nome do checklist e obrigatorio.")
    if await fms_crud.equipment_type.get(db, id=data.equipment_type_id, tenant_id=ctx.tenant_id) is None:
        raise NotFoundError("Tipo de equipamento nao encontrado.")

    async with atomic(db):
        template = mnt_models.ChecklistTemplate(
            tenant_id=ctx.tenant_id,
            equipment_type_id=data.equipment_type_id,
            name=name,
            active=True,
        )
        db.add(template)
    return await mnt_crud.checklist_template.get_with_items_or_404(db, id=template.id, tenant_id=ctx.tenant_id)


async def add_checklist_item(
    db: AsyncSession, ctx: TenantContext, template_id: int, data: mnt_schemas.ChecklistItemCreate
) -> mnt_models.ChecklistTemplate:
    template = await mnt_crud.checklist_template.get_with_items_or_404(db, id=template_id, tenant_id=ctx.tenant_id)
    description = (data.description or "").strip()
    if not description:
        raise ValidationError("Descricao do item e obrigatoria.")

    async with atomic(db):
        order = await mnt_crud.checklist_template.next_item_order(db, template_id=template.id)
        db.add(mnt_models.ChecklistItem(template_id=template.id, description=description, sort_order=order))
    return await mnt_crud.checklist_template.get_with_items_or_404(db, id=template.id, tenant_id=ctx.tenant_id)


async def remove_checklist_item(
    db: AsyncSession, ctx: TenantContext, template_id: int, item_id: int
) -> mnt_models.ChecklistTemplate:
    template = await mnt_crud.checklist_template.get_with_items_or_404(db, id=template_id, tenant_id=ctx.tenant_id)
    item = next((i for i in template.items if i.id == item_id), None)
    if item is None:
        raise NotFoundError("Item nao encontrado.")
    async with atomic(db):
        template.items.remove(item)
        await db.delete(item)
    return await mnt_crud.checklist_template.get_with_items_or_404(db, id=template.id, tenant_id=ctx.tenant_id)


async def toggle_checklist_template(
    db: AsyncSession, ctx: TenantContext, template_id: int
) -> mnt_models.ChecklistTemplate:
    template = await mnt_crud.checklist_template.get_with_items_or_404(db, id=template_id, tenant_id=ctx.tenant_id)
    async with atomic(db):
        template.active = not template.active
        db.add(template)
    logger.info("체크리스트 %s 활성 상태 변경: %s", template.id, template.active)
    return template


async def delete_checklist_template(db: AsyncSession, ctx: TenantContext, template_id: int) -> None:
    """결과가 하나라도 연결된 템플릿은 삭제할 수 없습니다."""
    template = await mnt_crud.checklist_template.get_with_items_or_404(db, id=template_id, tenant_id=ctx.tenant_id)
    result_count = await mnt_crud.checklist_template.count_results(db, template_id=template.id)
    if result_count > 0:
        raise ValidationError(
            f"Este checklist possui {result_count} resultado(s) vinculado(s). Nao e possivel excluir."
        )
    async with atomic(db):
        await db.delete(template)
    logger.info("체크리스트 삭제: id=%s tenant=%s", template_id, ctx.tenant_id)


# =============================================================================
# 7. 신뢰도 지표 (MTBF / MTTR)
# =============================================================================
async def get_reliability(
    db: AsyncSession, ctx: TenantContext, equipment_id: Optional[int] = None
) -> mnt_schemas.ReliabilityResponse:
    if equipment_id is not None:
        await fms_crud.equipment.get_or_404(db, id=equipment_id, tenant_id=ctx.tenant_id)

    tickets = await mnt_crud.ticket.get_closed(db, tenant_id=ctx.tenant_id, equipment_id=equipment_id)
    intervals = [RepairInterval(t.equipment_id, t.opened_at, t.closed_at) for t in tickets]
    if equipment_id is not None:
        metrics = compute_equipment_mtbf_mttr(intervals)
    else:
        metrics = compute_global_mtbf_mttr(intervals)

    return mnt_schemas.ReliabilityResponse(
        equipment_id=equipment_id,
        mtbf_hours=metrics.mtbf_hours,
        mttr_hours=metrics.mttr_hours,
        ticket_count=metrics.ticket_count,
    )
