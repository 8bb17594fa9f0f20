# tests/domains/test_mnt_checklist_n.py

"""
체크리스트 템플릿 관리와 예방 정비 실행 시 체크리스트 결과 기록 테스트 모듈입니다.
"""

import pytest
from httpx import AsyncClient

from app.domains.fms import models as fms_models

CHECKLISTS_URL = "/api/v1/mnt/checklists"


async def _template_with_items(client: AsyncClient, *descriptions: str) -> dict:
    equipment_type = (await client.post("/api/v1/fms/equipment_types", json={"name": "Desfibrilador"})).json()
    template = (await client.post(CHECKLISTS_URL, json={
        "equipment_type_id": equipment_type["id"], "name": "Inspecao mensal"
    })).json()
    for description in descriptions:
        response = await client.post(f"{CHECKLISTS_URL}/{template['id']}/items", json={"description": description})
        template = response.json()
    return template


async def _preventive(client: AsyncClient, equipment_id: int) -> dict:
    response = await client.post("/api/v1/mnt/preventives", json={
        "equipment_id": equipment_id, "scheduled_date": "2024-07-01", "due_date": "2024-07-05"
    })
    return response.json()


@pytest.mark.asyncio
class TestChecklistTemplates:
    async def test_items_are_ordered_from_zero(self, master_client: AsyncClient):
        template = await _template_with_items(master_client, "Inspecao visual", "Teste de carga", "Bateria")

        assert template["active"] is True
        assert [i["sort_order"] for i in template["items"]] == [0, 1, 2]
        assert [i["description"] for i in template["items"]] == ["Inspecao visual", "Teste de carga", "Bateria"]

    async def test_remove_item(self, master_client: AsyncClient):
        template = await _template_with_items(master_client, "Inspecao visual", "Teste de carga")
        removed_id = template["items"][0]["id"]

        response = await master_client.delete(f"{CHECKLISTS_URL}/{template['id']}/items/{removed_id}")
        assert response.status_code == 200
        assert [i["description"] for i in response.json()["items"]] == ["Teste de carga"]

        missing = await master_client.delete(f"{CHECKLISTS_URL}/{template['id']}/items/{removed_id}")
        assert missing.status_code == 404

    async def test_toggle(self, master_client: AsyncClient):
        template = await _template_with_items(master_client)
        toggled = (await master_client.post(f"{CHECKLISTS_URL}/{template['id']}/toggle")).json()
        assert toggled["active"] is False
        toggled = (await master_client.post(f"{CHECKLISTS_URL}/{template['id']}/toggle")).json()
        assert toggled["active"] is True

    async def test_list_by_equipment_type(self, master_client: AsyncClient):
        template = await _template_with_items(master_client, "Inspecao visual")

        listed = (await master_client.get(
            CHECKLISTS_URL, params={"equipment_type_id": template["equipment_type_id"]}
        )).json()
        assert [t["id"] for t in listed] == [template["id"]]
        assert len(listed[0]["items"]) == 1

        assert (await master_client.get(CHECKLISTS_URL, params={"equipment_type_id": 99999})).json() == []

    async def test_delete_unused_template(self, master_client: AsyncClient):
        template = await _template_with_items(master_client, "Inspecao visual")
        response = await master_client.delete(f"{CHECKLISTS_URL}/{template['id']}")
        assert response.status_code == 204
        assert (await master_client.get(CHECKLISTS_URL)).json() == []

    async def test_equipment_type_of_other_tenant(self, master_client: AsyncClient, other_client: AsyncClient):
        foreign_type = (await other_client.post("/api/v1/fms/equipment_types", json={"name": "Raio-X"})).json()
        response = await master_client.post(CHECKLISTS_URL, json={
            "equipment_type_id": foreign_type["id"], "name": "Inspecao"
        })
        assert response.status_code == 404
        assert response.json() == {"error": "Tipo de equipamento nao encontrado."}

    async def test_only_master_manages(self, master_client: AsyncClient, tecnico_client: AsyncClient):
        template = await _template_with_items(master_client)

        assert (await tecnico_client.get(CHECKLISTS_URL)).status_code == 200
        response = await tecnico_client.post(f"{CHECKLISTS_URL}/{template['id']}/toggle")
        assert response.status_code == 403

    async def test_other_tenant_template(self, master_client: AsyncClient, other_client: AsyncClient):
        template = await _template_with_items(master_client)
        response = await other_client.post(f"{CHECKLISTS_URL}/{template['id']}/toggle")
        assert response.status_code == 404
        assert response.json() == {"error": "Template nao encontrado."}


@pytest.mark.asyncio
class TestChecklistResults:
    async def test_execute_with_checklist_records_result(
        self, master_client: AsyncClient, equipment: fms_models.Equipment
    ):
        template = await _template_with_items(master_client, "Inspecao visual", "Teste de carga")
        visual, load = template["items"]
        preventive = await _preventive(master_client, equipment.id)

        response = await master_client.post(f"/api/v1/mnt/preventives/{preventive['id']}/execute", json={
            "execution_date": "2024-07-01",
            "checklist": {
                "template_id": template["id"],
                "items": [
                    {"item_id": visual["id"], "result": "CONFORME"},
                    {"item_id": load["id"], "result": "NAO_CONFORME", "observation": "Carga abaixo de 90%"},
                ],
            },
        })
        assert response.status_code == 200

        results = (await master_client.get(
            f"/api/v1/mnt/preventives/{preventive['id']}/checklist-results"
        )).json()
        assert len(results) == 1
        assert results[0]["template_id"] == template["id"]
        assert results[0]["items"] == [
            {"item_id": visual["id"], "description": "Inspecao visual", "result": "CONFORME", "observation": None},
            {"item_id": load["id"], "description": "Teste de carga", "result": "NAO_CONFORME",
             "observation": "Carga abaixo de 90%"},
        ]

    async def test_template_with_results_cannot_be_deleted(
        self, master_client: AsyncClient, equipment: fms_models.Equipment
    ):
        template = await _template_with_items(master_client, "Inspecao visual")
        preventive = await _preventive(master_client, equipment.id)
        await master_client.post(f"/api/v1/mnt/preventives/{preventive['id']}/execute", json={
            "execution_date": "2024-07-01",
            "checklist": {"template_id": template["id"], "items": [
                {"item_id": template["items"][0]["id"], "result": "CONFORME"}
            ]},
        })

        response = await master_client.delete(f"{CHECKLISTS_URL}/{template['id']}")
        assert response.status_code == 400
        assert response.json() == {
            "error": "Este checklist possui 1 resultado(s) vinculado(s). Nao e possivel excluir."
        }

    async def test_inactive_template_is_rejected(self, master_client: AsyncClient, equipment: fms_models.Equipment):
        template = await _template_with_items(master_client, "Inspecao visual")
        await master_client.post(f"{CHECKLISTS_URL}/{template['id']}/toggle")
        preventive = await _preventive(master_client, equipment.id)

        response = await master_client.post(f"/api/v1/mnt/preventives/{preventive['id']}/execute", json={
            "execution_date": "2024-07-01",
            "checklist": {"template_id": template["id"], "items": []},
        })
        assert response.status_code == 400
        assert response.json() == {"error": "Checklist inativo."}

        # 실패한 실행은 레코드를 바꾸지 않음
        unchanged = (await master_client.get(f"/api/v1/mnt/preventives/{preventive['id']}")).json()
        assert unchanged["status"] == "AGENDADA"

    async def test_item_from_other_template_is_rejected(
        self, master_client: AsyncClient, equipment: fms_models.Equipment
    ):
        template = await _template_with_items(master_client, "Inspecao visual")
        other = await _template_with_items(master_client, "Teste de vazamento")
        preventive = await _preventive(master_client, equipment.id)

        response = await master_client.post(f"/api/v1/mnt/preventives/{preventive['id']}/execute", json={
            "execution_date": "2024-07-01",
            "checklist": {"template_id": template["id"], "items": [
                {"item_id": other["items"][0]["id"], "result": "CONFORME"}
            ]},
        })
        assert response.status_code == 400
        assert response.json() == {"error": "Item de checklist nao pertence ao template."}

    async def test_deleting_preventive_removes_its_results(
        self, master_client: AsyncClient, equipment: fms_models.Equipment
    ):
        template = await _template_with_items(master_client, "Inspecao visual")
        preventive = await _preventive(master_client, equipment.id)
        await master_client.post(f"/api/v1/mnt/preventives/{preventive['id']}/execute", json={
            "execution_date": "2024-07-01",
            "checklist": {"template_id": template["id"], "items": [
                {"item_id": template["items"][0]["id"], "result": "CONFORME"}
            ]},
        })

        assert (await master_client.delete(f"/api/v1/mnt/preventives/{preventive['id']}")).status_code == 204
        # 결과가 사라졌으므로 템플릿도 삭제 가능
        assert (await master_client.delete(f"{CHECKLISTS_URL}/{template['id']}")).status_code == 204
