from datetime import date

import pytest
import requests

from nonprofitsuite.db import models
from nonprofitsuite.db.repositories import options as options_repo
from nonprofitsuite.errors import ServiceError
from nonprofitsuite.services import metrics_service
from nonprofitsuite.services.metrics_service import MetricsService, fiscal_year_bounds
from nonprofitsuite.services.treasury_service import TreasuryService


class _Response:
    def __init__(self, body=None, status=200):
        self._body = body
        self.status_code = status

    def json(self):
        return self._body

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


def test_fiscal_year_bounds():
    assert fiscal_year_bounds(2026) == (date(2026, 1, 1), date(2026, 12, 31))
    assert fiscal_year_bounds(2026, "06-30") == (date(2025, 7, 1), date(2026, 6, 30))
    assert fiscal_year_bounds(2026, "02-29") == (date(2025, 3, 1), date(2026, 2, 28))
    assert fiscal_year_bounds(2026, "junk") == (date(2026, 1, 1), date(2026, 12, 31))


def _account_id(db, number):
    return db.query(models.Account).filter(models.Account.account_number == number).one().id


def test_calculate_annual_metrics_from_ledger(db, admin_ctx):
    treasury = TreasuryService(db, admin_ctx)
    treasury.initialize_chart_of_accounts()
    entries = [
        ("4000", "credit", 1000, None),
        ("6100", "debit", 400, "Program Expenses"),
        ("6100", "debit", 100, "Fundraising"),
    ]
    for number, kind, amount, category in entries:
        treasury.record_transaction({"account_id": _account_id(db, number), "transaction_date": "2026-04-01",
                                     "transaction_type": kind, "amount": amount, "description": "x",
                                     "category": category})
    options_repo.update_option(db, metrics_service.OPT_SETTINGS, {"board_member_count": "7"})
    db.commit()

    values = MetricsService(db, admin_ctx).calculate_annual_metrics(2026)
    assert values.total_revenue == 1000
    assert values.total_expenses == 500
    assert values.program_expense_ratio == 80.0
    assert values.fundraising_ratio == 20.0
    assert values.admin_ratio == 0.0
    assert values.num_board_members == 7


def test_save_and_get_metrics(db, admin_ctx, editor_ctx):
    svc = MetricsService(db, admin_ctx)
    assert svc.get_metrics(2026) is None
    saved = svc.save_metrics({"metric_year": 2026, "total_revenue": 5000, "states_operating": ["CA"]})
    assert saved.total_revenue == 5000
    assert svc.get_metrics(2026).states_operating == ["CA"]

    svc.save_metrics({"metric_year": 2026, "total_revenue": 6000})
    assert svc.get_metrics(2026).total_revenue == 6000
    assert [m.metric_year for m in svc.get_all_metrics()] == [2026]

    with pytest.raises(ServiceError) as exc:
        svc.save_metrics({"total_revenue": 1})
    assert exc.value.code == "invalid_metrics"
    with pytest.raises(ServiceError) as exc:
        MetricsService(db, editor_ctx).save_metrics({"metric_year": 2026})
    assert exc.value.code == "permission_denied"


def test_submit_sends_only_aggregates(db, admin_ctx, monkeypatch):
    sent = []

    def fake_post(url, json=None, timeout=None):
        sent.append((url, json))
        return _Response({"ok": True})

    monkeypatch.setattr(metrics_service.requests, "post", fake_post)
    options_repo.update_option(db, metrics_service.OPT_SETTINGS, {"organization_name": "Helpers Inc"})
    db.commit()
    svc = MetricsService(db, admin_ctx)
    svc.save_metrics({"metric_year": 2026, "num_donors": 12, "states_operating": ["CA", "NY"]})

    with pytest.raises(ServiceError) as exc:
        svc.submit_metrics(2026)
    assert exc.value.code == "sharing_disabled"

    svc.set_sharing_preference(True)
    with pytest.raises(ServiceError) as exc:
        svc.submit_metrics(2025)
    assert exc.value.code == "no_metrics"

    assert svc.submit_metrics(2026) is True
    url, payload = sent[0]
    assert url == "https://metrics.nonprofitsuite.com/api/submit"
    assert payload["num_donors"] == 12
    assert payload["states_count"] == 2
    assert len(payload["installation_id"]) == 32
    assert "organization_name" not in payload
    assert "states_operating" not in payload
    assert svc.get_metrics(2026).submitted_at is not None

    # the installation id is stable across submissions
    svc.submit_metrics(2026)
    assert sent[1][1]["installation_id"] == payload["installation_id"]


def test_submit_transport_failure(db, admin_ctx, monkeypatch):
    monkeypatch.setattr(metrics_service.requests, "post", lambda *a, **kw: _Response(status=503))
    svc = MetricsService(db, admin_ctx)
    svc.save_metrics({"metric_year": 2026})
    svc.set_sharing_preference(True)
    with pytest.raises(ServiceError) as exc:
        svc.submit_metrics(2026)
    assert exc.value.code == "request_failed"
    assert exc.value.status_code == 502


def test_benchmarks(db, admin_ctx, monkeypatch):
    replies = [{"avg_program_ratio": 71.5}, [], None]
    monkeypatch.setattr(metrics_service.requests, "get", lambda *a, **kw: _Response(replies.pop(0)))
    svc = MetricsService(db, admin_ctx)
    assert svc.get_benchmarks({"state": "CA"}) == {"avg_program_ratio": 71.5}
    for _ in range(2):
        with pytest.raises(ServiceError) as exc:
            svc.get_benchmarks()
        assert exc.value.code == "invalid_response"


def test_embed_code_escapes_and_formats(db, admin_ctx):
    options_repo.update_option(db, metrics_service.OPT_SETTINGS, {"organization_name": "<b>Helpers</b>"})
    db.commit()
    svc = MetricsService(db, admin_ctx)
    assert svc.generate_embed_code(2026) == ""

    svc.save_metrics({"metric_year": 2026, "total_revenue": 1234.5, "program_expense_ratio": 81.25})
    html = svc.generate_embed_code(2026)
    assert "&lt;b&gt;Helpers&lt;/b&gt; - 2026 Metrics" in html
    assert "Total Revenue: $1,234.50" in html
    assert "Program Expense Ratio: 81.25%" in html
    assert svc.export_metrics(2026)["total_revenue"] == 1234.5


def test_metrics_without_pro(db, admin_ctx, free_tier):
    svc = MetricsService(db, admin_ctx)
    assert svc.get_metrics(2026) is None
    assert svc.get_all_metrics() == []
    assert svc.generate_embed_code(2026) == ""
    with pytest.raises(ServiceError) as exc:
        svc.calculate_annual_metrics(2026)
    assert exc.value.code == "pro_required"
