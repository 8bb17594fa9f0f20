# app/domains/mnt/routers.py

"""
'mnt' 도메인 (정비 관리) 관련 API 엔드포인트를 정의하는 모듈입니다.

- router: 인증이 필요한 정비 엔드포인트 (/api/v1/mnt).
- public_router: 설비 QR 코드용 공개 신고 엔드포인트 (/api/v1/public).

라우터는 요청을 검증하고 서비스 계층을 호출하는 얇은 계층입니다.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Request, status
from sqlmodel.ext.asyncio.session import AsyncSession

# 중앙 의존성 관리 모듈 임포트
from app.core import dependencies as deps
from app.core.permissions import get_allowed_report_keys, get_allowed_service_types
from app.core.rate_limit import PUBLIC_REPORT_RATE, equipment_key, limiter
from app.domains.usr import schemas as usr_schemas

# 도메인 관련 모듈 임포트
from . import crud as mnt_crud
from . import models as mnt_models
from . import schemas as mnt_schemas
from . import services as mnt_services
from .lifecycle import derive_display_status

router = APIRouter(
    tags=["Maintenance Management (정비 관리)"],
    responses={404: {"description": "Not found"}},
)

public_router = APIRouter(
    tags=["Public (공개 신고)"],
)


def _preventive_response(record: mnt_models.PreventiveMaintenance, clock: deps.Clock) -> mnt_schemas.PreventiveResponse:
    return mnt_schemas.PreventiveResponse.model_validate(
        record, update={"display_status": derive_display_status(record, clock.today())}
    )


# =============================================================================
# 1. 예방 정비 (Preventive Maintenance) 라우터
# =============================================================================
@router.post("/preventives", response_model=mnt_schemas.PreventiveResponse, status_code=status.HTTP_201_CREATED, summary="예방 정비 예약")
async def create_preventive(
    preventive_in: mnt_schemas.PreventiveCreate,
    db: AsyncSession = Depends(deps.get_session),
    clock: deps.Clock = Depends(deps.get_clock),
    ctx: deps.TenantContext = Depends(deps.require_permission("preventive.create")),
):
    """
    예방 정비를 예약하고 작업 지시서를 함께 발행합니다.
    - CALIBRACAO / TSE 유형은 PROFISSIONAL 이상 요금제에서만 허용됩니다.
    - `periodicity_months`는 1~120으로 제한되며 기본값은 12입니다.
    """
    record = await mnt_services.create_preventive(db, ctx, preventive_in)
    return _preventive_response(record, clock)


@router.get("/preventives", response_model=List[mnt_schemas.PreventiveResponse], summary="예방 정비 목록 조회")
async def read_preventives(
    skip: int = 0,
    limit: int = 100,
    display_status: Optional[mnt_models.DisplayStatus] = None,
    equipment_id: Optional[int] = None,
    service_type: Optional[mnt_models.ServiceType] = None,
    db: AsyncSession = Depends(deps.get_session),
    clock: deps.Clock = Depends(deps.get_clock),
    ctx: deps.TenantContext = Depends(deps.require_permission("preventive.view")),
):
    """`display_status=VENCIDA`는 오늘 날짜 기준으로 만기가 지난 예정 정비를 조회합니다."""
    records = await mnt_crud.preventive.get_filtered(
        db,
        tenant_id=ctx.tenant_id,
        today=clock.today(),
        display_status=display_status,
        equipment_id=equipment_id,
        service_type=service_type,
        skip=skip,
        limit=limit,
    )
    return [_preventive_response(record, clock) for record in records]


@router.post("/preventives/bulk-schedule", response_model=mnt_schemas.BulkResult, summary="예방 정비 일괄 예약")
async def bulk_schedule_preventives(
    request_in: mnt_schemas.BulkScheduleRequest,
    db: AsyncSession = Depends(deps.get_session),
    ctx: deps.TenantContext = Depends(deps.require_permission("preventive.create")),
):
    count = await mnt_services.bulk_schedule_preventive(db, ctx, request_in)
    return mnt_schemas.BulkResult(count=count)


@router.post("/preventives/bulk-execute", response_model=mnt_schemas.BulkResult, summary="예방 정비 일괄 실행")
async def bulk_execute_preventives(
    request_in: mnt_schemas.BulkExecuteRequest,
    db: AsyncSession = Depends(deps.get_session),
    ctx: deps.TenantContext = Depends(deps.require_permission("preventive.execute")),
):
    count = await mnt_services.bulk_execute_preventive(db, ctx, request_in)
    return mnt_schemas.BulkResult(count=count)


@router.get("/preventives/{preventive_id}", response_model=mnt_schemas.PreventiveResponse, summary="특정 예방 정비 조회")
async def read_preventive(
    preventive_id: int,
    db: AsyncSession = Depends(deps.get_session),
    clock: deps.Clock = Depends(deps.get_clock),
    ctx: deps.TenantContext = Depends(deps.require_permission("preventive.view")),
):
    record = await mnt_crud.preventive.get_or_404(db, id=preventive_id, tenant_id=ctx.tenant_id)
    return _preventive_response(record, clock)


@router.post("/preventives/{preventive_id}/execute", response_model=mnt_schemas.PreventiveExecutionResult, summary="예방 정비 실행 처리")
async def execute_preventive(
    preventive_id: int,
    execute_in: mnt_schemas.PreventiveExecute,
    db: AsyncSession = Depends(deps.get_session),
    clock: deps.Clock = Depends(deps.get_clock),
    ctx: deps.TenantContext = Depends(deps.require_permission("preventive.execute")),
):
    """실행 처리 후 주기가 0보다 크면 다음 예정 정비가 자동으로 생성됩니다."""
    record, successor = await mnt_services.execute_preventive(db, ctx, preventive_id, execute_in)
    return mnt_schemas.PreventiveExecutionResult(
        executed=_preventive_response(record, clock),
        successor=_preventive_response(successor, clock) if successor is not None else None,
    )


@router.get("/preventives/{preventive_id}/checklist-results", response_model=List[mnt_schemas.ChecklistResultResponse], summary="예방 정비의 체크리스트 결과 조회")
async def read_preventive_checklist_results(
    preventive_id: int,
    db: AsyncSession = Depends(deps.get_session),
    ctx: deps.TenantContext = Depends(deps.require_permission("preventive.view")),
):
    await mnt_crud.preventive.get_or_404(db, id=preventive_id, tenant_id=ctx.tenant_id)
    return await mnt_crud.checklist_result.get_by_preventive(db, preventive_id=preventive_id, tenant_id=ctx.tenant_id)


@router.delete("/preventives/{preventive_id}", status_code=status.HTTP_204_NO_CONTENT, summary="예방 정비 삭제")
async def delete_preventive(
    preventive_id: int,
    db: AsyncSession = Depends(deps.get_session),
    ctx: deps.TenantContext = Depends(deps.require_permission("preventive.delete")),
):
    await mnt_services.delete_preventive(db, ctx, preventive_id)
    return None


# =============================================================================
# 2. 고장 접수 (Corrective Ticket) 라우터
# =============================================================================
@router.post("/tickets", response_model=mnt_schemas.TicketResponse, status_code=status.HTTP_201_CREATED, summary="고장 접수 생성")
async def create_ticket(
    ticket_in: mnt_schemas.TicketCreate,
    db: AsyncSession = Depends(deps.get_session),
    clock: deps.Clock = Depends(deps.get_clock),
    ctx: deps.TenantContext = Depends(deps.require_permission("ticket.create")),
):
    """설비 위험 등급으로 SLA 시한을 계산하고 설비를 EM_MANUTENCAO 상태로 전환합니다."""
    ticket = await mnt_services.create_ticket(
        db, tenant_id=ctx.tenant_id, opened_by_id=ctx.user_id, data=ticket_in, clock=clock
    )
    return (await mnt_services.build_ticket_responses(db, [ticket], clock))[0]


@router.get("/tickets", response_model=List[mnt_schemas.TicketResponse], summary="고장 접수 목록 조회")
async def read_tickets(
    skip: int = 0,
    limit: int = 100,
    status_filter: Optional[mnt_models.TicketStatus] = None,
    urgency: Optional[mnt_models.TicketUrgency] = None,
    equipment_id: Optional[int] = None,
    db: AsyncSession = Depends(deps.get_session),
    clock: deps.Clock = Depends(deps.get_clock),
    ctx: deps.TenantContext = Depends(deps.require_permission("ticket.view")),
):
    tickets = await mnt_crud.ticket.get_multi(
        db,
        tenant_id=ctx.tenant_id,
        skip=skip,
        limit=limit,
        filters={"status": status_filter, "urgency": urgency, "equipment_id": equipment_id},
    )
    return await mnt_services.build_ticket_responses(db, tickets, clock)


@router.get("/tickets/{ticket_id}", response_model=mnt_schemas.TicketResponse, summary="특정 고장 접수 조회")
async def read_ticket(
    ticket_id: int,
    db: AsyncSession = Depends(deps.get_session),
    clock: deps.Clock = Depends(deps.get_clock),
    ctx: deps.TenantContext = Depends(deps.require_permission("ticket.view")),
):
    ticket = await mnt_crud.ticket.get_or_404(db, id=ticket_id, tenant_id=ctx.tenant_id)
    return (await mnt_services.build_ticket_responses(db, [ticket], clock))[0]


@router.post("/tickets/{ticket_id}/accept", response_model=mnt_schemas.TicketResponse, summary="고장 접수 수락 (담당자 배정)")
async def accept_ticket(
    ticket_id: int,
    accept_in: mnt_schemas.TicketAccept,
    db: AsyncSession = Depends(deps.get_session),
    clock: deps.Clock = Depends(deps.get_clock),
    ctx: deps.TenantContext = Depends(deps.require_permission("ticket.accept")),
):
    """`assignee_id`를 생략하면 호출자가 담당자가 됩니다."""
    ticket = await mnt_services.accept_ticket(db, ctx, ticket_id, accept_in, clock)
    return (await mnt_services.build_ticket_responses(db, [ticket], clock))[0]


@router.post("/tickets/{ticket_id}/resolve", response_model=mnt_schemas.TicketResponse, summary="고장 접수 해결")
async def resolve_ticket(
    ticket_id: int,
    resolve_in: mnt_schemas.TicketResolve,
    db: AsyncSession = Depends(deps.get_session),
    clock: deps.Clock = Depends(deps.get_clock),
    ctx: deps.TenantContext = Depends(deps.require_permission("ticket.resolve")),
):
    """해결 시 설비는 ATIVO로 돌아가고, 해당 설비의 완료된 의학 물리 시험은 무효화됩니다."""
    ticket = await mnt_services.resolve_ticket(db, ctx, ticket_id, resolve_in, clock)
    return (await mnt_services.build_ticket_responses(db, [ticket], clock))[0]


@router.post("/tickets/{ticket_id}/close", response_model=mnt_schemas.TicketResponse, summary="고장 접수 종결")
async def close_ticket(
    ticket_id: int,
    db: AsyncSession = Depends(deps.get_session),
    clock: deps.Clock = Depends(deps.get_clock),
    ctx: deps.TenantContext = Depends(deps.require_permission("ticket.close")),
):
    ticket = await mnt_services.close_ticket(db, ctx, ticket_id)
    return (await mnt_services.build_ticket_responses(db, [ticket], clock))[0]


# =============================================================================
# 3. 작업 지시서 (Service Order) 라우터
# =============================================================================
@router.get("/service-orders", response_model=List[mnt_schemas.ServiceOrderResponse], summary="작업 지시서 목록 조회")
async def read_service_orders(
    skip: int = 0,
    limit: int = 100,
    status_filter: Optional[mnt_models.ServiceOrderStatus] = None,
    db: AsyncSession = Depends(deps.get_session),
    ctx: deps.TenantContext = Depends(deps.require_permission("os.view")),
):
    return await mnt_crud.service_order.get_multi(
        db, tenant_id=ctx.tenant_id, skip=skip, limit=limit, filters={"status": status_filter}
    )


@router.get("/service-orders/{order_id}", response_model=mnt_schemas.ServiceOrderResponse, summary="특정 작업 지시서 조회")
async def read_service_order(
    order_id: int,
    db: AsyncSession = Depends(deps.get_session),
    ctx: deps.TenantContext = Depends(deps.require_permission("os.view")),
):
    return await mnt_crud.service_order.get_or_404(db, id=order_id, tenant_id=ctx.tenant_id)


@router.post("/service-orders/{order_id}/start", response_model=mnt_schemas.ServiceOrderResponse, summary="작업 지시서 시작")
async def start_service_order(
    order_id: int,
    db: AsyncSession = Depends(deps.get_session),
    clock: deps.Clock = Depends(deps.get_clock),
    ctx: deps.TenantContext = Depends(deps.require_permission("os.manage")),
):
    return await mnt_services.start_service_order(db, ctx, order_id, clock)


@router.post("/service-orders/{order_id}/complete", response_model=mnt_schemas.ServiceOrderResponse, summary="작업 지시서 완료")
async def complete_service_order(
    order_id: int,
    db: AsyncSession = Depends(deps.get_session),
    clock: deps.Clock = Depends(deps.get_clock),
    ctx: deps.TenantContext = Depends(deps.require_permission("os.manage")),
):
    return await mnt_services.complete_service_order(db, ctx, order_id, clock)


# =============================================================================
# 4. 체크리스트 (Checklist) 라우터
# =============================================================================
@router.get("/checklists", response_model=List[mnt_schemas.ChecklistTemplateResponse], summary="체크리스트 템플릿 목록 조회")
async def read_checklists(
    equipment_type_id: Optional[int] = None,
    db: AsyncSession = Depends(deps.get_session),
    ctx: deps.TenantContext = Depends(deps.require_permission("checklist.view")),
):
    return await mnt_crud.checklist_template.get_multi_with_items(
        db, tenant_id=ctx.tenant_id, equipment_type_id=equipment_type_id
    )


@router.post("/checklists", response_model=mnt_schemas.ChecklistTemplateResponse, status_code=status.HTTP_201_CREATED, summary="체크리스트 템플릿 생성")
async def create_checklist(
    template_in: mnt_schemas.ChecklistTemplateCreate,
    db: AsyncSession = Depends(deps.get_session),
    ctx: deps.TenantContext = Depends(deps.require_permission("checklist.manage")),
):
    return await mnt_services.create_checklist_template(db, ctx, template_in)


@router.post("/checklists/{template_id}/items", response_model=mnt_schemas.ChecklistTemplateResponse, status_code=status.HTTP_201_CREATED, summary="체크리스트 항목 추가")
async def add_checklist_item(
    template_id: int,
    item_in: mnt_schemas.ChecklistItemCreate,
    db: AsyncSession = Depends(deps.get_session),
    ctx: deps.TenantContext = Depends(deps.require_permission("checklist.manage")),
):
    return await mnt_services.add_checklist_item(db, ctx, template_id, item_in)


@router.delete("/checklists/{template_id}/items/{item_id}", response_model=mnt_schemas.ChecklistTemplateResponse, summary="체크리스트 항목 삭제")
async def remove_checklist_item(
    template_id: int,
    item_id: int,
    db: AsyncSession = Depends(deps.get_session),
    ctx: deps.TenantContext = Depends(deps.require_permission("checklist.manage")),
):
    return await mnt_services.remove_checklist_item(db, ctx, template_id, item_id)


@router.post("/checklists/{template_id}/toggle", response_model=mnt_schemas.ChecklistTemplateResponse, summary="체크리스트 활성/비활성 전환")
async def toggle_checklist(
    template_id: int,
    db: AsyncSession = Depends(deps.get_session),
    ctx: deps.TenantContext = Depends(deps.require_permission("checklist.manage")),
):
    return await mnt_services.toggle_checklist_template(db, ctx, template_id)


@router.delete("/checklists/{template_id}", status_code=status.HTTP_204_NO_CONTENT, summary="체크리스트 템플릿 삭제")
async def delete_checklist(
    template_id: int,
    db: AsyncSession = Depends(deps.get_session),
    ctx: deps.TenantContext = Depends(deps.require_permission("checklist.manage")),
):
    """결과가 연결된 템플릿은 삭제할 수 없습니다 (비활성화만 가능)."""
    await mnt_services.delete_checklist_template(db, ctx, template_id)
    return None


# =============================================================================
# 5. 신뢰도 지표 및 요금제 정보 라우터
# =============================================================================
@router.get("/reliability", response_model=mnt_schemas.ReliabilityResponse, summary="MTBF/MTTR 조회")
async def read_reliability(
    equipment_id: Optional[int] = None,
    db: AsyncSession = Depends(deps.get_session),
    ctx: deps.TenantContext = Depends(deps.require_permission("report.view")),
):
    """`equipment_id`가 없으면 테넌트 전체 지표를 계산합니다 (시간 단위)."""
    return await mnt_services.get_reliability(db, ctx, equipment_id)


@router.get("/plan", response_model=usr_schemas.PlanFeaturesRead, summary="요금제 허용 기능 조회")
async def read_plan_features(
    ctx: deps.TenantContext = Depends(deps.get_tenant_context),
):
    return usr_schemas.PlanFeaturesRead(
        plan=ctx.plan,
        service_types=get_allowed_service_types(ctx.plan),
        report_keys=get_allowed_report_keys(ctx.plan),
    )


# =============================================================================
# 6. 공개 QR 신고 라우터 (인증 없음)
# =============================================================================
@public_router.post("/equipments/{equipment_id}/report", response_model=mnt_schemas.PublicReportResponse, status_code=status.HTTP_201_CREATED, summary="QR 코드 공개 고장 신고")
@limiter.limit(PUBLIC_REPORT_RATE, key_func=equipment_key)
async def report_public_problem(
    request: Request,
    equipment_id: int,
    report_in: mnt_schemas.PublicReportCreate,
    db: AsyncSession = Depends(deps.get_session),
    clock: deps.Clock = Depends(deps.get_clock),
):
    """설비당 시간당 5회로 제한됩니다 (slowapi). 초과 시 429를 반환합니다."""
    await mnt_services.report_public_problem(db, equipment_id=equipment_id, data=report_in, clock=clock)
    return mnt_schemas.PublicReportResponse(success=True)
