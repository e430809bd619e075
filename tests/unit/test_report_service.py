import re
from datetime import date

import pytest

from nonprofitsuite.errors import ServiceError
from nonprofitsuite.services import report_service
from nonprofitsuite.services.report_service import ReportService


def _submit(db, **kw):
    payload = {"category": "fraud", "description": "Missing petty cash", "priority": "high"}
    payload.update(kw)
    return ReportService(db, None).submit_report(payload)


def test_anyone_can_submit_and_check_status(db):
    receipt = _submit(db)
    number = receipt["report_number"]
    assert re.fullmatch(rf"AR{date.today().year}\d{{5}}", number)
    assert number in receipt["message"]

    status = ReportService(db, None).check_status(number)
    assert status.status == "submitted"
    assert status.status_label == "Submitted - Under Review"

    with pytest.raises(ServiceError) as exc:
        ReportService(db, None).check_status("AR000000000")
    assert exc.value.code == "not_found"


def test_report_numbers_are_unique_and_drawn_from_secrets(db, monkeypatch):
    draws = iter([0, 0, 89999])
    monkeypatch.setattr(report_service.secrets, "randbelow", lambda n: next(draws))
    year = date.today().year

    assert _submit(db)["report_number"] == f"AR{year}10000"
    # the second draw collides with the first report and is retried
    assert _submit(db)["report_number"] == f"AR{year}99999"


@pytest.mark.parametrize(
    "payload, code",
    [
        ({"description": ""}, "missing_required"),
        ({"priority": "urgent"}, "invalid_priority"),
    ],
)
def test_submit_validation(db, payload, code):
    with pytest.raises(ServiceError) as exc:
        _submit(db, **payload)
    assert exc.value.code == code


def test_description_is_filtered(db, admin_ctx):
    _submit(db, description="<script>alert(1)</script><b>ledger</b>")
    report = ReportService(db, admin_ctx).get_reports().items[0]
    assert "<script>" not in report.description
    assert "ledger" in report.description


def test_resolving_a_report_stamps_the_date(db, admin_ctx):
    _submit(db)
    svc = ReportService(db, admin_ctx)
    report = svc.get_reports().items[0]

    investigating = svc.update_report(report.id, {"status": "investigating", "investigation_notes": "Called treasurer"})
    assert investigating.resolved_date is None
    resolved = svc.update_report(report.id, {"status": "resolved", "resolution": "Funds recovered"})
    assert resolved.resolved_date == date.today()
    assert svc.check_status(report.report_number).status_label == "Resolved"

    with pytest.raises(ServiceError) as exc:
        svc.update_report(report.id, {"status": "archived"})
    assert exc.value.code == "invalid_status"
    with pytest.raises(ServiceError) as exc:
        svc.update_report(report.id, {"unknown": 1})
    assert exc.value.code == "no_data"


def test_only_administrators_update(db, editor_ctx):
    _submit(db)
    with pytest.raises(ServiceError) as exc:
        ReportService(db, editor_ctx).update_report(1, {"status": "closed"})
    assert exc.value.code == "permission_denied"


def test_review_requires_pro(db, admin_ctx, free_tier):
    _submit(db)
    svc = ReportService(db, admin_ctx)
    with pytest.raises(ServiceError) as exc:
        svc.get_reports()
    assert exc.value.code == "pro_required"
    assert svc.get_dashboard_data() == {}
    assert svc.get_category_stats() == []


def test_dashboard_counts(db, admin_ctx):
    _submit(db)
    _submit(db, category="harassment", priority="low")
    svc = ReportService(db, admin_ctx)
    dashboard = svc.get_dashboard_data()
    assert dashboard["new_reports"] == 2
    assert dashboard["high_priority"] == 1
    assert len(dashboard["recent_reports"]) == 2
    assert sorted(s["category"] for s in svc.get_category_stats()) == ["fraud", "harassment"]
