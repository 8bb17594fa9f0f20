# tests/core/test_sla.py

from datetime import datetime, timedelta, UTC

from app.domains.fms.models import Criticality
from app.domains.mnt.sla import (
    SLA_BREACHED, SLA_NOT_APPLICABLE, SLA_ON_TIME,
    requires_contingency_plan, sla_deadline, sla_status,
)

OPENED_AT = datetime(2024, 6, 15, 12, 0, tzinfo=UTC)


def test_deadline_by_criticality():
    assert sla_deadline(Criticality.A, OPENED_AT) == OPENED_AT + timedelta(minutes=10)
    assert sla_deadline(Criticality.B, OPENED_AT) == OPENED_AT + timedelta(hours=2)
    assert sla_deadline(Criticality.C, OPENED_AT) == OPENED_AT + timedelta(hours=24)


def test_only_criticality_a_requires_contingency_plan():
    assert requires_contingency_plan(Criticality.A)
    assert not requires_contingency_plan(Criticality.B)
    assert not requires_contingency_plan("C")


class TestSlaStatus:
    def test_open_ticket_within_deadline(self):
        deadline = OPENED_AT + timedelta(minutes=10)
        assert sla_status("ABERTO", deadline, OPENED_AT + timedelta(minutes=10)) == SLA_ON_TIME

    def test_open_ticket_past_deadline(self):
        deadline = OPENED_AT + timedelta(minutes=10)
        assert sla_status("ABERTO", deadline, OPENED_AT + timedelta(minutes=11)) == SLA_BREACHED

    def test_naive_deadline_from_database_is_treated_as_utc(self):
        naive_deadline = datetime(2024, 6, 15, 12, 10)
        assert sla_status("ABERTO", naive_deadline, OPENED_AT) == SLA_ON_TIME
        assert sla_status("ABERTO", naive_deadline, OPENED_AT + timedelta(hours=1)) == SLA_BREACHED

    def test_not_applicable_after_acceptance(self):
        deadline = OPENED_AT + timedelta(minutes=10)
        assert sla_status("EM_ATENDIMENTO", deadline, OPENED_AT + timedelta(hours=5)) == SLA_NOT_APPLICABLE
        assert sla_status("ABERTO", None, OPENED_AT) == SLA_NOT_APPLICABLE
