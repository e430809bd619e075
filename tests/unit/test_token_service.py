from datetime import datetime, timedelta, timezone

import pytest

from nonprofitsuite.db import models
from nonprofitsuite.errors import ServiceError
from nonprofitsuite.services.token_service import TokenService
from nonprofitsuite.utils import token_crypto


def test_parse_token():
    parsed = token_crypto.parse_token("ns_pat_abc123_se_cret")
    assert parsed.token_id == "abc123"
    assert parsed.secret == "se_cret"
    for bad in (None, "", "pat_abc_def", "ns_pat_abc", "ns_pat__secret", "ns_pat_abc_"):
        assert token_crypto.parse_token(bad) is None


def test_hash_and_verify():
    encoded = token_crypto.hash_secret("s3cret")
    assert encoded != "s3cret"
    assert token_crypto.verify_secret("s3cret", encoded) is True
    assert token_crypto.verify_secret("wrong", encoded) is False
    assert token_crypto.verify_secret("s3cret", "not-a-hash") is False


def test_generate_and_validate(db, admin_ctx):
    svc = TokenService(db, admin_ctx)
    created = svc.generate_token(admin_ctx["id"], "Phone", ["read", "WRITE"], expires_days=30)
    assert created.token.startswith("ns_pat_")
    assert created.token_name == "Phone"

    row = db.get(models.ApiToken, created.token_id)
    assert row.permissions == ["read", "write"]
    assert created.token.split("_")[2] == row.token_id
    assert row.token_hash != created.token

    validated = svc.validate_token(created.token)
    assert validated.id == created.token_id
    assert validated.last_used is not None

    listed = svc.get_user_tokens(admin_ctx["id"])
    assert [t.token_name for t in listed] == ["Phone"]
    assert not hasattr(listed[0], "token_hash")


@pytest.mark.parametrize("mangle", [lambda t: t[:-1] + ("A" if t[-1] != "A" else "B"), lambda t: "garbage",
                                    lambda t: "ns_pat_ffffffffffffffff_secret"])
def test_bad_tokens_are_rejected(db, admin_ctx, mangle):
    created = TokenService(db, admin_ctx).generate_token(admin_ctx["id"], "Phone")
    with pytest.raises(ServiceError) as exc:
        TokenService(db, None).validate_token(mangle(created.token))
    assert exc.value.code == "invalid_token"
    assert exc.value.status_code == 401


def test_expired_and_revoked_tokens(db, admin_ctx):
    svc = TokenService(db, admin_ctx)
    expired = svc.generate_token(admin_ctx["id"], "Old")
    row = db.get(models.ApiToken, expired.token_id)
    row.expires_at = datetime.now(timezone.utc) - timedelta(minutes=1)
    db.commit()
    with pytest.raises(ServiceError):
        svc.validate_token(expired.token)

    revoked = svc.generate_token(admin_ctx["id"], "Lost phone")
    assert svc.revoke_token(revoked.token_id) is True
    with pytest.raises(ServiceError) as exc:
        svc.validate_token(revoked.token)
    assert exc.value.code == "invalid_token"
    with pytest.raises(ServiceError) as exc:
        svc.revoke_token(9999)
    assert exc.value.code == "not_found"


def test_generate_validation(db, admin_ctx, editor_ctx):
    svc = TokenService(db, admin_ctx)
    with pytest.raises(ServiceError) as exc:
        svc.generate_token(admin_ctx["id"], "Phone", ["delete"])
    assert exc.value.code == "invalid_token_request"
    with pytest.raises(ServiceError) as exc:
        svc.generate_token(admin_ctx["id"], "  ")
    assert exc.value.code == "missing_required"
    with pytest.raises(ServiceError) as exc:
        svc.generate_token(9999, "Phone")
    assert exc.value.code == "invalid_user_id"
    with pytest.raises(ServiceError) as exc:
        TokenService(db, editor_ctx).generate_token(editor_ctx["id"], "Phone")
    assert exc.value.code == "permission_denied"


def test_request_log_and_usage(db, admin_ctx):
    svc = TokenService(db, admin_ctx)
    created = svc.generate_token(admin_ctx["id"], "Phone")
    svc.log_request(created.token_id, "/api/v1/donors", "get", response_code=200, response_time=0.2)
    svc.log_request(created.token_id, "/api/v1/donors", "post", response_code=422, response_time=0.4)

    assert db.query(models.ApiLog).count() == 2
    assert db.query(models.ApiLog).filter(models.ApiLog.method == "POST").count() == 1

    stats = svc.get_usage_stats(created.token_id)
    assert stats.total_requests == 2
    assert stats.successful_requests == 1
    assert stats.failed_requests == 1
    assert stats.max_response_time == pytest.approx(0.4)
    assert stats.avg_response_time == pytest.approx(0.3)


def test_tokens_require_pro(db, admin_ctx, free_tier):
    svc = TokenService(db, admin_ctx)
    with pytest.raises(ServiceError) as exc:
        svc.generate_token(admin_ctx["id"], "Phone")
    assert exc.value.code == "pro_required"
    assert svc.get_user_tokens(admin_ctx["id"]) == []
    assert svc.get_usage_stats(1) is None
