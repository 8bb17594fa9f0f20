# tests/domains/test_mnt_ticket_n.py

"""
고장 접수(교정 정비) 수명주기 테스트 모듈입니다.

ABERTO → EM_ATENDIMENTO → RESOLVIDO → FECHADO 전이, SLA 시한과 준수 여부,
위험 등급 A 설비의 비상 계획 노출, 역할/요금제 거부를 검증합니다.
"""

from datetime import datetime, timedelta

import pytest
from httpx import AsyncClient

from app.domains.fms import models as fms_models
from app.domains.mnt import models as mnt_models
from app.domains.usr import models as usr_models
from tests.conftest import FIXED_NOW, reload

TICKETS_URL = "/api/v1/mnt/tickets"


def _naive(value: str) -> datetime:
    """응답의 ISO 문자열을 비교용 naive UTC datetime으로 변환합니다."""
    return datetime.fromisoformat(value.replace("Z", "+00:00")).replace(tzinfo=None)


async def _open_ticket(client: AsyncClient, equipment_id: int, **overrides) -> dict:
    payload = {"equipment_id": equipment_id, "description": "Nao liga apos queda de energia", "urgency": "ALTA"}
    payload.update(overrides)
    response = await client.post(TICKETS_URL, json=payload)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
class TestCreateTicket:
    @pytest.mark.parametrize(
        "criticality, window",
        [
            (fms_models.Criticality.A, timedelta(minutes=10)),
            (fms_models.Criticality.B, timedelta(hours=2)),
            (fms_models.Criticality.C, timedelta(hours=24)),
        ],
    )
    async def test_sla_deadline_from_criticality(
        self, tecnico_client: AsyncClient, equipment_factory, tenant: usr_models.Tenant, criticality, window
    ):
        target = await equipment_factory(
            tenant.id, criticality=criticality, contingency_plan="Plano reserva" if criticality == "A" else None
        )
        body = await _open_ticket(tecnico_client, target.id)

        assert body["status"] == "ABERTO"
        assert body["sla_status"] == "NO_PRAZO"
        assert _naive(body["opened_at"]) == FIXED_NOW.replace(tzinfo=None)
        assert _naive(body["sla_deadline"]) == (FIXED_NOW + window).replace(tzinfo=None)

    async def test_equipment_goes_to_maintenance(
        self, tecnico_client: AsyncClient, db_session, equipment: fms_models.Equipment, tecnico_user
    ):
        body = await _open_ticket(tecnico_client, equipment.id)
        assert body["opened_by_id"] == tecnico_user.id
        assert body["description"] == "Nao liga apos queda de energia"

        refreshed = await reload(db_session, fms_models.Equipment, equipment.id)
        assert refreshed.status == fms_models.EquipmentStatus.EM_MANUTENCAO

    async def test_service_order_is_issued(self, tecnico_client: AsyncClient, equipment: fms_models.Equipment):
        body = await _open_ticket(tecnico_client, equipment.id)
        orders = (await tecnico_client.get("/api/v1/mnt/service-orders")).json()
        assert len(orders) == 1
        assert orders[0]["corrective_maintenance_id"] == body["id"]
        assert orders[0]["preventive_maintenance_id"] is None

    async def test_blank_description(self, tecnico_client: AsyncClient, equipment: fms_models.Equipment):
        response = await tecnico_client.post(TICKETS_URL, json={"equipment_id": equipment.id, "description": "   "})
        assert response.status_code == 400
        assert response.json() == {"error": "Equipamento e descricao sao obrigatorios."}

    async def test_other_tenant_equipment(self, tecnico_client: AsyncClient, other_equipment: fms_models.Equipment):
        response = await tecnico_client.post(
            TICKETS_URL, json={"equipment_id": other_equipment.id, "description": "Display apagado"}
        )
        assert response.status_code == 404

    async def test_coordinator_can_open(self, coordenador_client: AsyncClient, equipment: fms_models.Equipment):
        await _open_ticket(coordenador_client, equipment.id)

    async def test_fiscal_cannot_open(self, fiscal_client: AsyncClient, equipment: fms_models.Equipment):
        response = await fiscal_client.post(TICKETS_URL, json={"equipment_id": equipment.id, "description": "Falha"})
        assert response.status_code == 403
        assert response.json() == {"error": "Você não tem permissão para esta operação."}

    async def test_essential_plan_has_no_tickets(self, basic_client: AsyncClient):
        response = await basic_client.get(TICKETS_URL)
        assert response.status_code == 403
        assert response.json() == {"error": "Funcionalidade não disponível no seu plano."}


@pytest.mark.asyncio
class TestSlaAndContingency:
    async def test_sla_breach_is_reported_while_open(
        self, tecnico_client: AsyncClient, critical_equipment: fms_models.Equipment, clock
    ):
        body = await _open_ticket(tecnico_client, critical_equipment.id)

        clock.advance(timedelta(minutes=10))
        on_deadline = (await tecnico_client.get(f"{TICKETS_URL}/{body['id']}")).json()
        assert on_deadline["sla_status"] == "NO_PRAZO"

        clock.advance(timedelta(minutes=1))
        breached = (await tecnico_client.get(f"{TICKETS_URL}/{body['id']}")).json()
        assert breached["sla_status"] == "ESTOURADO"

        accepted = (await tecnico_client.post(f"{TICKETS_URL}/{body['id']}/accept", json={})).json()
        assert accepted["sla_status"] == "N/A"

    async def test_contingency_plan_exposed_only_while_in_progress(
        self, tecnico_client: AsyncClient, critical_equipment: fms_models.Equipment
    ):
        body = await _open_ticket(tecnico_client, critical_equipment.id)
        assert body["contingency_plan"] == "Utilizar ventilador reserva da UTI 2."

        accepted = (await tecnico_client.post(f"{TICKETS_URL}/{body['id']}/accept", json={})).json()
        assert accepted["contingency_plan"] == "Utilizar ventilador reserva da UTI 2."

        resolved = (await tecnico_client.post(
            f"{TICKETS_URL}/{body['id']}/resolve", json={"solution": "Troca da fonte"}
        )).json()
        assert resolved["contingency_plan"] is None

    async def test_no_contingency_for_lower_criticality(
        self, tecnico_client: AsyncClient, equipment_factory, tenant: usr_models.Tenant
    ):
        target = await equipment_factory(
            tenant.id, criticality=fms_models.Criticality.B, contingency_plan="Plano opcional"
        )
        body = await _open_ticket(tecnico_client, target.id)
        assert body["contingency_plan"] is None

    async def test_foreign_equipment_plan_is_never_exposed(
        self,
        tecnico_client: AsyncClient,
        db_session,
        equipment_factory,
        other_tenant: usr_models.Tenant,
        critical_equipment: fms_models.Equipment,
    ):
        foreign = await equipment_factory(
            other_tenant.id, criticality=fms_models.Criticality.A, contingency_plan="Plano de outro hospital"
        )
        body = await _open_ticket(tecnico_client, critical_equipment.id)

        # 잘못 연결된 설비 참조라도 다른 테넌트의 설비 정보는 응답에 섞이지 않음
        ticket = await reload(db_session, mnt_models.CorrectiveMaintenance, body["id"])
        ticket.equipment_id = foreign.id
        db_session.add(ticket)
        await db_session.commit()

        response = await tecnico_client.get(f"{TICKETS_URL}/{body['id']}")
        assert response.status_code == 200
        assert response.json()["contingency_plan"] is None


@pytest.mark.asyncio
class TestTicketTransitions:
    async def test_accept_defaults_to_caller(
        self, tecnico_client: AsyncClient, equipment: fms_models.Equipment, tecnico_user
    ):
        body = await _open_ticket(tecnico_client, equipment.id)
        response = await tecnico_client.post(f"{TICKETS_URL}/{body['id']}/accept", json={})
        assert response.status_code == 200
        assert response.json()["status"] == "EM_ATENDIMENTO"
        assert response.json()["assigned_to_id"] == tecnico_user.id

    async def test_accept_with_explicit_assignee(
        self, master_client: AsyncClient, equipment: fms_models.Equipment, tecnico_user
    ):
        body = await _open_ticket(master_client, equipment.id)
        response = await master_client.post(
            f"{TICKETS_URL}/{body['id']}/accept", json={"assignee_id": tecnico_user.id}
        )
        assert response.json()["assigned_to_id"] == tecnico_user.id

    @pytest.mark.parametrize("role", [usr_models.UserRole.COORDENADOR, usr_models.UserRole.FISCAL])
    async def test_accept_rejects_non_staff_assignee(
        self, master_client: AsyncClient, user_factory, tenant: usr_models.Tenant, equipment: fms_models.Equipment, role
    ):
        assignee = await user_factory(f"assignee_{role.name.lower()}", role, tenant.id)
        body = await _open_ticket(master_client, equipment.id)

        response = await master_client.post(
            f"{TICKETS_URL}/{body['id']}/accept", json={"assignee_id": assignee.id}
        )
        assert response.status_code == 400
        assert response.json() == {"error": "Responsavel invalido: apenas usuarios MASTER ou TECNICO ativos."}

    async def test_accept_rejects_assignee_from_other_tenant(
        self, master_client: AsyncClient, equipment: fms_models.Equipment, other_master_user
    ):
        body = await _open_ticket(master_client, equipment.id)
        response = await master_client.post(
            f"{TICKETS_URL}/{body['id']}/accept", json={"assignee_id": other_master_user.id}
        )
        assert response.status_code == 400

    async def test_accept_rejects_inactive_assignee(
        self, master_client: AsyncClient, user_factory, tenant: usr_models.Tenant, equipment: fms_models.Equipment
    ):
        inactive = await user_factory("tecnico2", usr_models.UserRole.TECNICO, tenant.id, is_active=False)
        body = await _open_ticket(master_client, equipment.id)
        response = await master_client.post(
            f"{TICKETS_URL}/{body['id']}/accept", json={"assignee_id": inactive.id}
        )
        assert response.status_code == 400

    async def test_second_accept_fails(
        self, master_client: AsyncClient, tecnico_client: AsyncClient, db_session, equipment: fms_models.Equipment, master_user
    ):
        body = await _open_ticket(master_client, equipment.id)
        first = await master_client.post(f"{TICKETS_URL}/{body['id']}/accept", json={})
        second = await tecnico_client.post(f"{TICKETS_URL}/{body['id']}/accept", json={})

        assert first.status_code == 200
        assert second.status_code == 400
        assert second.json() == {"error": "Chamado nao esta aberto para atendimento."}

        # 먼저 수락한 담당자가 유지됨
        ticket = await reload(db_session, mnt_models.CorrectiveMaintenance, body["id"])
        assert ticket.assigned_to_id == master_user.id

    async def test_coordinator_cannot_accept(
        self, coordenador_client: AsyncClient, equipment: fms_models.Equipment
    ):
        body = await _open_ticket(coordenador_client, equipment.id)
        response = await coordenador_client.post(f"{TICKETS_URL}/{body['id']}/accept", json={})
        assert response.status_code == 403

    async def test_full_lifecycle(
        self,
        tecnico_client: AsyncClient,
        coordenador_client: AsyncClient,
        db_session,
        equipment: fms_models.Equipment,
        clock,
    ):
        body = await _open_ticket(tecnico_client, equipment.id)
        await tecnico_client.post(f"{TICKETS_URL}/{body['id']}/accept", json={})

        clock.advance(timedelta(hours=3))
        resolved = await tecnico_client.post(f"{TICKETS_URL}/{body['id']}/resolve", json={
            "solution": "Substituicao do cabo de alimentacao",
            "diagnosis": "Cabo rompido",
            "parts_used": "Cabo PP 3x1.5",
            "time_spent": 45,
            "cost": 80.0,
        })
        assert resolved.status_code == 200
        resolved_body = resolved.json()
        assert resolved_body["status"] == "RESOLVIDO"
        assert resolved_body["solution"] == "Substituicao do cabo de alimentacao"
        assert resolved_body["time_spent"] == 45
        assert resolved_body["updated_at"] is not None
        assert _naive(resolved_body["closed_at"]) == (FIXED_NOW + timedelta(hours=3)).replace(tzinfo=None)

        refreshed = await reload(db_session, fms_models.Equipment, equipment.id)
        assert refreshed.status == fms_models.EquipmentStatus.ATIVO

        closed = await coordenador_client.post(f"{TICKETS_URL}/{body['id']}/close")
        assert closed.status_code == 200
        assert closed.json()["status"] == "FECHADO"

    async def test_resolve_requires_in_progress(self, tecnico_client: AsyncClient, equipment: fms_models.Equipment):
        body = await _open_ticket(tecnico_client, equipment.id)
        response = await tecnico_client.post(f"{TICKETS_URL}/{body['id']}/resolve", json={"solution": "Ajuste"})
        assert response.status_code == 400
        assert response.json() == {"error": "Somente chamados em atendimento podem ser resolvidos."}

    @pytest.mark.parametrize(
        "payload, message",
        [
            ({"solution": "  "}, "A descricao da solucao e obrigatoria."),
            ({"solution": "Ajuste", "time_spent": -1}, "Tempo gasto invalido."),
            ({"solution": "Ajuste", "cost": -10.0}, "Custo invalido."),
        ],
    )
    async def test_resolve_validation(
        self, tecnico_client: AsyncClient, equipment: fms_models.Equipment, payload, message
    ):
        body = await _open_ticket(tecnico_client, equipment.id)
        await tecnico_client.post(f"{TICKETS_URL}/{body['id']}/accept", json={})

        response = await tecnico_client.post(f"{TICKETS_URL}/{body['id']}/resolve", json=payload)
        assert response.status_code == 400
        assert response.json() == {"error": message}

    async def test_close_requires_resolved(self, tecnico_client: AsyncClient, equipment: fms_models.Equipment):
        body = await _open_ticket(tecnico_client, equipment.id)
        await tecnico_client.post(f"{TICKETS_URL}/{body['id']}/accept", json={})

        response = await tecnico_client.post(f"{TICKETS_URL}/{body['id']}/close")
        assert response.status_code == 400
        assert response.json() == {"error": "Somente chamados resolvidos podem ser fechados."}

    async def test_resolving_one_of_two_tickets_reactivates_equipment(
        self, tecnico_client: AsyncClient, db_session, equipment: fms_models.Equipment
    ):
        first = await _open_ticket(tecnico_client, equipment.id)
        await _open_ticket(tecnico_client, equipment.id, description="Alarme disparando sem motivo")
        await tecnico_client.post(f"{TICKETS_URL}/{first['id']}/accept", json={})
        await tecnico_client.post(f"{TICKETS_URL}/{first['id']}/resolve", json={"solution": "Reset"})

        refreshed = await reload(db_session, fms_models.Equipment, equipment.id)
        assert refreshed.status == fms_models.EquipmentStatus.ATIVO


@pytest.mark.asyncio
class TestTicketQueries:
    async def test_filters(
        self,
        tecnico_client: AsyncClient,
        equipment: fms_models.Equipment,
        critical_equipment: fms_models.Equipment,
    ):
        low = await _open_ticket(tecnico_client, equipment.id, urgency="BAIXA")
        high = await _open_ticket(tecnico_client, critical_equipment.id, urgency="CRITICA")
        await tecnico_client.post(f"{TICKETS_URL}/{high['id']}/accept", json={})

        by_status = (await tecnico_client.get(TICKETS_URL, params={"status_filter": "ABERTO"})).json()
        assert [t["id"] for t in by_status] == [low["id"]]

        by_urgency = (await tecnico_client.get(TICKETS_URL, params={"urgency": "CRITICA"})).json()
        assert [t["id"] for t in by_urgency] == [high["id"]]

        by_equipment = (await tecnico_client.get(TICKETS_URL, params={"equipment_id": equipment.id})).json()
        assert [t["id"] for t in by_equipment] == [low["id"]]

    async def test_tenant_isolation(
        self, tecnico_client: AsyncClient, other_client: AsyncClient, equipment: fms_models.Equipment
    ):
        body = await _open_ticket(tecnico_client, equipment.id)

        assert (await other_client.get(TICKETS_URL)).json() == []
        response = await other_client.get(f"{TICKETS_URL}/{body['id']}")
        assert response.status_code == 404
        assert response.json() == {"error": "Chamado nao encontrado."}

    async def test_fiscal_can_view(
        self, tecnico_client: AsyncClient, fiscal_client: AsyncClient, equipment: fms_models.Equipment
    ):
        await _open_ticket(tecnico_client, equipment.id)
        response = await fiscal_client.get(TICKETS_URL)
        assert response.status_code == 200
        assert len(response.json()) == 1
