from datetime import date, timedelta

import pytest

from nonprofitsuite.errors import ServiceError
from nonprofitsuite.services.access_service import CpaAccessService, LegalAccessService


def _in(days):
    return (date.today() + timedelta(days=days)).isoformat()


def test_grant_and_duplicate(db, admin_ctx, subscriber_ctx):
    svc = CpaAccessService(db, admin_ctx)
    grant = svc.grant_access({"user_id": subscriber_ctx["id"], "contact_name": "Pat Ledger",
                              "firm_name": "Ledger & Co", "expiration_date": _in(30)})
    assert grant.status == "active"
    assert grant.access_level == "full"
    assert svc.has_access(subscriber_ctx["id"]) is True

    with pytest.raises(ServiceError) as exc:
        svc.grant_access({"user_id": subscriber_ctx["id"], "contact_name": "Pat Ledger"})
    assert exc.value.code == "duplicate"
    assert exc.value.message == "User already has active CPA access"


@pytest.mark.parametrize(
    "payload, code",
    [
        ({"contact_name": "x"}, "invalid_user_id"),
        ({"user_id": 9999, "contact_name": "x"}, "invalid_user_id"),
        ({"contact_name": "x", "access_level": "godmode"}, "invalid_access_level"),
        ({}, "missing_required"),
    ],
)
def test_grant_validation(db, admin_ctx, subscriber_ctx, payload, code):
    payload = dict(payload)
    if "user_id" not in payload and code != "invalid_user_id":
        payload["user_id"] = subscriber_ctx["id"]
    with pytest.raises(ServiceError) as exc:
        CpaAccessService(db, admin_ctx).grant_access(payload)
    assert exc.value.code == code


def test_revoke_ends_access(db, admin_ctx, subscriber_ctx):
    svc = LegalAccessService(db, admin_ctx)
    grant = svc.grant_access({"user_id": subscriber_ctx["id"], "attorney_name": "Sam Counsel",
                              "access_level": "read_only"})
    assert [a["email"] for a in svc.get_attorneys()] == ["reader@example.org"]

    revoked = svc.revoke_access(grant.id)
    assert revoked.status == "revoked"
    assert revoked.revoked_date is not None
    assert svc.has_access(subscriber_ctx["id"]) is False
    assert svc.get_attorneys() == []

    # a fresh grant is allowed once the old one is revoked
    svc.grant_access({"user_id": subscriber_ctx["id"], "attorney_name": "Sam Counsel"})
    with pytest.raises(ServiceError) as exc:
        svc.revoke_access(9999)
    assert exc.value.code == "not_found"


def test_legal_grant_needs_attorney_name(db, admin_ctx, subscriber_ctx):
    with pytest.raises(ServiceError) as exc:
        LegalAccessService(db, admin_ctx).grant_access({"user_id": subscriber_ctx["id"], "contact_name": "x"})
    assert exc.value.code == "missing_required"


def test_expired_grant_does_not_give_access(db, admin_ctx, subscriber_ctx):
    svc = CpaAccessService(db, admin_ctx)
    svc.grant_access({"user_id": subscriber_ctx["id"], "contact_name": "Pat", "expiration_date": _in(-1)})
    assert svc.has_access(subscriber_ctx["id"]) is False


def test_cpa_dashboard_days_remaining(db, admin_ctx, subscriber_ctx):
    svc = CpaAccessService(db, admin_ctx)
    assert svc.get_dashboard_data(subscriber_ctx["id"]) == {}
    svc.grant_access({"user_id": subscriber_ctx["id"], "contact_name": "Pat", "expiration_date": _in(10)})

    dashboard = svc.get_dashboard_data(subscriber_ctx["id"])
    assert dashboard["days_remaining"] == 10
    assert dashboard["access"].contact_name == "Pat"


def test_only_administrators_grant(db, editor_ctx, subscriber_ctx):
    with pytest.raises(ServiceError) as exc:
        CpaAccessService(db, editor_ctx).grant_access({"user_id": subscriber_ctx["id"], "contact_name": "x"})
    assert exc.value.code == "permission_denied"


def test_access_requires_pro(db, admin_ctx, subscriber_ctx, free_tier):
    svc = CpaAccessService(db, admin_ctx)
    with pytest.raises(ServiceError) as exc:
        svc.grant_access({"user_id": subscriber_ctx["id"], "contact_name": "x"})
    assert exc.value.code == "pro_required"
    assert svc.has_access(subscriber_ctx["id"]) is False
    assert svc.get_cpa_users() == []
