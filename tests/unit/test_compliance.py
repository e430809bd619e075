import json
from datetime import date, timedelta

import pytest

from nonprofitsuite.db import models
from nonprofitsuite.errors import ServiceError
from nonprofitsuite.services.compliance_service import ComplianceService, add_months
from nonprofitsuite.services.state_compliance_service import (
    StateComplianceService,
    get_available_states,
    load_state_data,
    next_due_from,
)


def test_bundled_state_fixtures():
    assert get_available_states() == ["CA", "FL", "NY", "TX", "WA"]
    ca = load_state_data("CA")
    assert ca["state_name"] == "California"
    assert all(req.get("name") for req in ca["requirements"])


@pytest.mark.parametrize("code", ["", "C", "CAL", "../", "c1"])
def test_malformed_state_codes_are_rejected(code):
    assert load_state_data(code) is None


def test_unknown_state_has_no_fixture():
    assert load_state_data("ZZ") is None


def test_invalid_fixture_file(tmp_path, monkeypatch):
    (tmp_path / "oh.json").write_text("{not json")
    (tmp_path / "pa.json").write_text(json.dumps({"requirements": "nope"}))
    monkeypatch.setenv("NONPROFITSUITE_STATES_DIR", str(tmp_path))
    assert load_state_data("OH") is None
    assert load_state_data("PA") is None
    assert get_available_states() == ["OH", "PA"]


def test_next_due_from():
    assert next_due_from("05-15", date(2026, 1, 1)) == date(2026, 5, 15)
    assert next_due_from("05-15", date(2026, 6, 1)) == date(2027, 5, 15)
    assert next_due_from("02-29", date(2026, 1, 1)) == date(2026, 2, 28)
    assert next_due_from("2027-11-15", date(2026, 1, 1)) == date(2027, 11, 15)
    assert next_due_from(None) is None


def test_add_state_operation_seeds_requirements(db, admin_ctx):
    svc = StateComplianceService(db, admin_ctx)
    op = svc.add_state_operation({"state_code": "ca"})
    assert op.state_code == "CA"
    assert op.state_name == "California"

    reqs = svc.get_requirements(op.id)
    assert len(reqs) == len(load_state_data("CA")["requirements"])
    assert all(r.status == "pending" for r in reqs)
    assert all(r.next_due_date is not None and r.next_due_date >= date.today() for r in reqs)

    with pytest.raises(ServiceError) as exc:
        svc.add_state_operation({"state_code": "CA"})
    assert exc.value.code == "duplicate"


def test_state_without_fixture_still_registers(db, admin_ctx):
    svc = StateComplianceService(db, admin_ctx)
    op = svc.add_state_operation({"state_code": "ZZ", "state_name": "Nowhere"})
    assert op.state_name == "Nowhere"
    assert svc.get_requirements(op.id) == []
    with pytest.raises(ServiceError) as exc:
        svc.add_state_operation({"state_code": "Z9"})
    assert exc.value.code == "invalid_state_code"


def test_completing_requirements_moves_compliance_rate(db, admin_ctx):
    svc = StateComplianceService(db, admin_ctx)
    assert svc.calculate_compliance_rate() == 100.0
    op = svc.add_state_operation({"state_code": "NY"})
    reqs = svc.get_requirements(op.id)

    done = svc.update_requirement(reqs[0].id, {"status": "completed", "confirmation_number": "ABC-1"})
    assert done.completed_date == date.today()
    assert svc.calculate_compliance_rate() == round(1 / len(reqs) * 100, 1)
    assert reqs[0].id not in [r.id for r in svc.get_pending_requirements()]

    with pytest.raises(ServiceError) as exc:
        svc.update_requirement(reqs[0].id, {"status": "filed"})
    assert exc.value.code == "invalid_status"


def test_overdue_requirements_and_dashboard(db, admin_ctx):
    svc = StateComplianceService(db, admin_ctx)
    op = svc.add_state_operation({"state_code": "TX"})
    req = svc.get_requirements(op.id)[0]
    svc.update_requirement(req.id, {"next_due_date": (date.today() - timedelta(days=3)).isoformat()})

    assert [r.id for r in svc.get_overdue_requirements()] == [req.id]
    dashboard = svc.get_dashboard_data()
    assert dashboard["active_states"] == 1
    assert dashboard["overdue_count"] == 1
    assert dashboard["pending_count"] == len(svc.get_requirements(op.id))


def test_state_compliance_is_admin_only(db, editor_ctx):
    with pytest.raises(ServiceError) as exc:
        StateComplianceService(db, editor_ctx).add_state_operation({"state_code": "WA"})
    assert exc.value.code == "permission_denied"


def test_add_months_clamps_to_month_end():
    assert add_months(date(2026, 1, 31), 1) == date(2026, 2, 28)
    assert add_months(date(2026, 11, 15), 3) == date(2027, 2, 15)
    assert add_months(date(2024, 2, 29), 12) == date(2025, 2, 28)


def test_recurring_item_schedules_next_occurrence(db, admin_ctx):
    svc = ComplianceService(db, admin_ctx)
    item = svc.create_item({"item_name": "Board insurance", "item_type": "insurance",
                            "due_date": "2026-03-31", "recurrence": "quarterly"})
    done = svc.mark_completed(item.id, "2026-03-20")
    assert done.status == "completed"
    assert str(done.completion_date) == "2026-03-20"

    pending = db.query(models.ComplianceItem).filter(models.ComplianceItem.status == "pending").all()
    assert len(pending) == 1
    assert pending[0].due_date == date(2026, 6, 30)
    assert pending[0].recurrence == "quarterly"


def test_one_time_item_does_not_recur(db, admin_ctx):
    svc = ComplianceService(db, admin_ctx)
    item = svc.create_item({"item_name": "Form 1023", "due_date": "2026-03-31"})
    svc.mark_completed(item.id)
    assert db.query(models.ComplianceItem).count() == 1


def test_upcoming_and_overdue_items(db, admin_ctx):
    svc = ComplianceService(db, admin_ctx)
    today = date.today()
    soon = svc.create_item({"item_name": "Renew license", "item_type": "renewal",
                            "due_date": (today + timedelta(days=5)).isoformat()})
    late = svc.create_item({"item_name": "Annual audit", "item_type": "audit",
                            "due_date": (today - timedelta(days=5)).isoformat()})
    svc.create_item({"item_name": "Policy review", "item_type": "policy",
                     "due_date": (today + timedelta(days=90)).isoformat()})

    assert [i.id for i in svc.get_upcoming(30)] == [soon.id]
    assert [i.id for i in svc.get_overdue()] == [late.id]
    assert svc.get_items({"item_type": "audit"}).pagination.total == 1


@pytest.mark.parametrize(
    "payload, code",
    [
        ({"item_name": "x"}, "missing_required"),
        ({"item_name": "x", "due_date": "2026-01-01", "item_type": "party"}, "invalid_item_type"),
        ({"item_name": "x", "due_date": "2026-01-01", "recurrence": "weekly"}, "invalid_recurrence"),
    ],
)
def test_create_item_validation(db, admin_ctx, payload, code):
    with pytest.raises(ServiceError) as exc:
        ComplianceService(db, admin_ctx).create_item(payload)
    assert exc.value.code == code
