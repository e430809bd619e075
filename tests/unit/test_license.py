import time

import pytest
import requests

from nonprofitsuite.db.repositories import options as options_repo
from nonprofitsuite.errors import ServiceError
from nonprofitsuite.utils import license as license_mod
from nonprofitsuite.utils.runtime import dev_mode_active


class _Response:
    def __init__(self, body):
        self._body = body

    def json(self):
        if isinstance(self._body, Exception):
            raise self._body
        return self._body


@pytest.fixture
def license_server(monkeypatch, free_tier):
    """Record license server calls and answer with a queued body."""
    calls = []
    replies = {}

    def fake_post(url, json=None, timeout=None):
        calls.append((url, json, timeout))
        reply = replies.get(url.rsplit("/", 1)[-1])
        if isinstance(reply, requests.RequestException):
            raise reply
        return _Response(reply)

    monkeypatch.setattr(license_mod.requests, "post", fake_post)
    return calls, replies


def test_dev_mode_unlocks_pro(db):
    assert license_mod.is_pro_active(db) is True
    license_mod.require_pro(db, "Treasury")


def test_no_key_means_free_tier_without_network(db, license_server):
    calls, _ = license_server
    assert license_mod.is_pro_active(db) is False
    assert calls == []
    with pytest.raises(ServiceError) as exc:
        license_mod.require_pro(db, "Treasury")
    assert exc.value.code == "pro_required"
    assert exc.value.message == "Treasury requires Pro license."


def test_activate_then_trust_for_a_day(db, license_server):
    calls, replies = license_server
    replies["activate"] = {"success": True, "expires": "2027-01-01"}

    result = license_mod.activate_license(db, "ABCD-1234-EFGH")
    assert result == {"success": True, "message": "License activated successfully!"}
    url, payload, timeout = calls[0]
    assert url == license_mod.DEFAULT_LICENSE_SERVER + "activate"
    assert payload["license_key"] == "ABCD-1234-EFGH"
    assert timeout == 15

    assert license_mod.is_pro_active(db) is True
    assert len(calls) == 1
    info = license_mod.get_license_info(db)
    assert info["key"] == "ABCD...EFGH"
    assert info["status"] == "active"


def test_stale_status_is_revalidated(db, license_server):
    calls, replies = license_server
    options_repo.update_option(db, license_mod.OPT_KEY, "KEY-0001")
    options_repo.update_option(db, license_mod.OPT_STATUS, "active")
    options_repo.update_option(db, license_mod.OPT_LAST_CHECK, int(time.time()) - 2 * 86400)
    db.commit()

    replies["validate"] = {"status": "expired"}
    assert license_mod.is_pro_active(db) is False
    assert options_repo.get_option(db, license_mod.OPT_STATUS) == "invalid"
    assert calls[0][0].endswith("/validate")


def test_server_failures_are_not_fatal(db, license_server):
    _, replies = license_server
    replies["activate"] = requests.ConnectionError("down")
    assert license_mod.activate_license(db, "KEY")["success"] is False
    replies["activate"] = ValueError("not json")
    assert license_mod.activate_license(db, "KEY")["message"] == "Could not connect to license server."
    replies["activate"] = {"success": False, "message": "Key revoked"}
    assert license_mod.activate_license(db, "KEY") == {"success": False, "message": "Key revoked"}


def test_deactivate_clears_options(db, license_server):
    calls, replies = license_server
    replies["activate"] = {"success": True}
    license_mod.activate_license(db, "KEY-0001")
    assert license_mod.deactivate_license(db) is True
    assert calls[-1][0].endswith("/deactivate")
    assert options_repo.get_option(db, license_mod.OPT_KEY) is None
    assert license_mod.get_license_info(db)["status"] == "inactive"


def test_dev_mode_guard(monkeypatch):
    monkeypatch.setenv("DEV_MODE", "true")
    monkeypatch.setenv("APP_BASE_URL", "https://charity.example.org")
    with pytest.raises(RuntimeError):
        dev_mode_active()
    monkeypatch.setenv("APP_BASE_URL", "http://localhost:8000")
    assert dev_mode_active() is True
