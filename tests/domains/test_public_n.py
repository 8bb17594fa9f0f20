# tests/domains/test_public_n.py

"""
설비 QR 코드를 통한 공개(비인증) 고장 신고 테스트 모듈입니다.
"""

import pytest
from httpx import AsyncClient
from sqlmodel import select

from app.domains.fms import models as fms_models
from app.domains.mnt import models as mnt_models
from app.domains.usr import models as usr_models
from tests.conftest import reload


def _report_url(equipment_id: int) -> str:
    return f"/api/v1/public/equipments/{equipment_id}/report"


def _report(**overrides) -> dict:
    payload = {
        "reporter_name": "Maria Souza",
        "description": "O monitor esta apitando sem parar na enfermaria",
        "phone": "11 99999-0000",
    }
    payload.update(overrides)
    return payload


@pytest.mark.asyncio
class TestPublicReport:
    async def test_report_opens_ticket_as_tenant_master(
        self,
        client: AsyncClient,
        db_session,
        master_user: usr_models.User,
        equipment: fms_models.Equipment,
    ):
        response = await client.post(_report_url(equipment.id), json=_report())
        assert response.status_code == 201
        assert response.json() == {"success": True}

        result = await db_session.execute(
            select(mnt_models.CorrectiveMaintenance).where(mnt_models.CorrectiveMaintenance.equipment_id == equipment.id)
        )
        tickets = result.scalars().all()
        assert len(tickets) == 1
        ticket = tickets[0]
        assert ticket.opened_by_id == master_user.id
        assert ticket.tenant_id == equipment.tenant_id
        assert ticket.status == mnt_models.TicketStatus.ABERTO
        assert ticket.urgency == mnt_models.TicketUrgency.MEDIA
        assert ticket.description == (
            "[Reporte Público] Maria Souza (11 99999-0000)\n\n"
            "O monitor esta apitando sem parar na enfermaria"
        )

        refreshed = await reload(db_session, fms_models.Equipment, equipment.id)
        assert refreshed.status == fms_models.EquipmentStatus.EM_MANUTENCAO

    async def test_report_without_phone(
        self, client: AsyncClient, db_session, master_user, equipment: fms_models.Equipment
    ):
        await client.post(_report_url(equipment.id), json=_report(phone=None))
        result = await db_session.execute(select(mnt_models.CorrectiveMaintenance))
        assert result.scalars().one().description.startswith("[Reporte Público] Maria Souza\n\n")

    @pytest.mark.parametrize(
        "overrides, message",
        [
            ({"reporter_name": "  "}, "Nome e descrição do problema são obrigatórios."),
            ({"description": ""}, "Nome e descrição do problema são obrigatórios."),
            ({"reporter_name": "M"}, "Informe seu nome completo."),
            ({"description": "Quebrou"}, "Descreva o problema com mais detalhes (mínimo 10 caracteres)."),
        ],
    )
    async def test_validation(
        self, client: AsyncClient, master_user, equipment: fms_models.Equipment, overrides, message
    ):
        response = await client.post(_report_url(equipment.id), json=_report(**overrides))
        assert response.status_code == 400
        assert response.json() == {"error": message}

    async def test_unknown_equipment(self, client: AsyncClient):
        response = await client.post(_report_url(99999), json=_report())
        assert response.status_code == 404
        assert response.json() == {"error": "Equipamento nao encontrado."}

    async def test_tenant_without_active_master(
        self, client: AsyncClient, user_factory, tenant: usr_models.Tenant, equipment: fms_models.Equipment
    ):
        await user_factory("mestre_inativo", usr_models.UserRole.MASTER, tenant.id, is_active=False)
        await user_factory("tecnico_unico", usr_models.UserRole.TECNICO, tenant.id)

        response = await client.post(_report_url(equipment.id), json=_report())
        assert response.status_code == 400
        assert response.json() == {"error": "Não foi possível registrar o problema. Contate a equipe técnica."}

    async def test_rate_limited_per_equipment(
        self,
        client: AsyncClient,
        master_user,
        equipment: fms_models.Equipment,
        critical_equipment: fms_models.Equipment,
    ):
        for _ in range(5):
            response = await client.post(_report_url(equipment.id), json=_report())
            assert response.status_code == 201

        blocked = await client.post(_report_url(equipment.id), json=_report())
        assert blocked.status_code == 429
        assert blocked.json() == {"error": "Muitas tentativas. Aguarde antes de reportar novamente."}

        # 다른 설비는 별도로 집계됨
        other = await client.post(_report_url(critical_equipment.id), json=_report())
        assert other.status_code == 201
