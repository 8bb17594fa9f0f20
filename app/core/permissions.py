# app/core/permissions.py

"""
역할(role)별 권한 맵과 요금제(plan)별 기능 제한을 정의하는 모듈입니다.

- 권한이 PERMISSIONS에 없으면 어떤 역할에도 허용되지 않습니다.
- 권한이 PLAN_RESTRICTIONS에 없으면 모든 요금제에서 허용됩니다 (역할 검사만 적용).
- plan이 None이면 (플랫폼 관리자) 요금제 제한 없이 모두 허용합니다.
"""

from typing import Dict, List, Optional

from app.domains.usr.models import UserRole, TenantPlan

_ALL_ROLES = [UserRole.MASTER, UserRole.TECNICO, UserRole.COORDENADOR, UserRole.FISCAL]
_STAFF = [UserRole.MASTER, UserRole.TECNICO]

# =============================================================================
# 1. 역할별 권한 맵
# =============================================================================
PERMISSIONS: Dict[str, List[UserRole]] = {
    # 설비
    "equipment.view": _ALL_ROLES,
    "equipment.create": _STAFF,
    "equipment.edit": _STAFF,
    "equipment.delete": [UserRole.MASTER],

    # 예방 정비
    "preventive.view": _ALL_ROLES,
    "preventive.create": _STAFF,
    "preventive.execute": _STAFF,
    "preventive.delete": [UserRole.MASTER],

    # 교정 정비 (고장 접수)
    "ticket.view": _ALL_ROLES,
    "ticket.create": [UserRole.MASTER, UserRole.TECNICO, UserRole.COORDENADOR],
    "ticket.accept": _STAFF,
    "ticket.resolve": _STAFF,
    "ticket.close": [UserRole.MASTER, UserRole.TECNICO, UserRole.COORDENADOR],

    # 의학 물리 시험
    "physics.view": [UserRole.MASTER, UserRole.TECNICO, UserRole.FISCAL],
    "physics.create": _STAFF,
    "physics.execute": _STAFF,
    "physics.delete": [UserRole.MASTER],

    # 작업 지시서
    "os.view": _ALL_ROLES,
    "os.manage": _STAFF,

    # 체크리스트 / 공급업체
    "checklist.view": _STAFF,
    "checklist.manage": [UserRole.MASTER],
    "provider.view": _STAFF,
    "provider.manage": [UserRole.MASTER],

    # 보고서
    "report.view": [UserRole.MASTER, UserRole.TECNICO, UserRole.FISCAL],
}

# =============================================================================
# 2. 요금제별 기능 제한
# =============================================================================
_PRO_PLUS = [TenantPlan.PROFISSIONAL, TenantPlan.ENTERPRISE]

PLAN_RESTRICTIONS: Dict[str, List[TenantPlan]] = {
    "preventive.calibracao": _PRO_PLUS,
    "preventive.tse": _PRO_PLUS,

    "ticket.view": _PRO_PLUS,
    "ticket.create": _PRO_PLUS,
    "ticket.accept": _PRO_PLUS,
    "ticket.resolve": _PRO_PLUS,
    "ticket.close": _PRO_PLUS,

    "physics.view": _PRO_PLUS,
    "physics.create": _PRO_PLUS,
    "physics.execute": _PRO_PLUS,
    "physics.delete": _PRO_PLUS,

    "os.view": _PRO_PLUS,
    "os.manage": _PRO_PLUS,

    "checklist.view": _PRO_PLUS,
    "checklist.manage": _PRO_PLUS,
    "provider.view": _PRO_PLUS,
    "provider.manage": _PRO_PLUS,

    "report.calibracoes": _PRO_PLUS,
    "report.custos": _PRO_PLUS,
    "report.chamados": _PRO_PLUS,
    "report.depreciacao": [TenantPlan.ENTERPRISE],
}

# 서비스 유형 -> 요금제 권한 키 (PREVENTIVA는 모든 요금제 허용)
SERVICE_TYPE_PERMISSIONS: Dict[str, str] = {
    "CALIBRACAO": "preventive.calibracao",
    "TSE": "preventive.tse",
}


def has_permission(role: UserRole, permission: str) -> bool:
    allowed = PERMISSIONS.get(permission)
    if not allowed:
        return False
    return role in allowed


def plan_allows(plan: Optional[TenantPlan], permission: str) -> bool:
    if plan is None:
        return True
    allowed_plans = PLAN_RESTRICTIONS.get(permission)
    if allowed_plans is None:
        return True
    return plan in allowed_plans


def service_type_allowed(plan: Optional[TenantPlan], service_type: str) -> bool:
    permission = SERVICE_TYPE_PERMISSIONS.get(service_type)
    return permission is None or plan_allows(plan, permission)


def get_allowed_service_types(plan: Optional[TenantPlan]) -> List[str]:
    types = ["PREVENTIVA"]
    if plan_allows(plan, "preventive.calibracao"):
        types.append("CALIBRACAO")
    if plan_allows(plan, "preventive.tse"):
        types.append("TSE")
    return types


def get_allowed_report_keys(plan: Optional[TenantPlan]) -> List[str]:
    keys = ["inventario"]
    for key in ("calibracoes", "custos", "chamados", "depreciacao"):
        if plan_allows(plan, f"report.{key}"):
            keys.append(key)
    return keys


def get_allowed_permissions(role: UserRole) -> List[str]:
    return [perm for perm, roles in PERMISSIONS.items() if role in roles]
