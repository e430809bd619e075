import os

import pytest

from nonprofitsuite.api.permissions import (
    can_edit_record,
    can_manage_donors,
    can_manage_finances,
    check_capability,
    has_capability,
    validate_file_path,
)
from nonprofitsuite.errors import ServiceError, status_for_code
from nonprofitsuite.utils.capabilities import get_role_capabilities, validate_role


def test_role_capabilities():
    assert "manage_options" in get_role_capabilities("administrator")
    assert "manage_options" not in get_role_capabilities("editor")
    with pytest.raises(ValueError):
        get_role_capabilities("owner")
    with pytest.raises(ValueError):
        validate_role("owner")


def test_capability_falls_back_to_role():
    assert has_capability({"role": "author"}, "edit_posts")
    assert not has_capability({"role": "subscriber"}, "edit_posts")
    assert not has_capability(None, "read")


def test_module_gates(subscriber_ctx, editor_ctx, admin_ctx):
    with pytest.raises(ServiceError) as exc:
        can_manage_donors(subscriber_ctx)
    assert exc.value.code == "permission_denied"
    assert exc.value.status_code == 403

    can_manage_donors(editor_ctx)
    with pytest.raises(ServiceError):
        can_manage_finances(editor_ctx)
    can_manage_finances(admin_ctx)


def test_check_capability_message():
    with pytest.raises(ServiceError) as exc:
        check_capability({"role": "subscriber"}, "manage_options", "clear the cache")
    assert "clear the cache" in exc.value.message


def test_can_edit_record(author_ctx, editor_ctx):
    assert can_edit_record(author_ctx, author_ctx["id"])
    assert not can_edit_record(author_ctx, author_ctx["id"] + 100)
    assert can_edit_record(editor_ctx, 12345)
    assert not can_edit_record(None, 1)


def test_validate_file_path(tmp_path):
    inside = tmp_path / "ca.json"
    inside.write_text("{}")
    assert validate_file_path(str(inside), str(tmp_path)) == os.path.realpath(str(inside))
    with pytest.raises(ServiceError) as exc:
        validate_file_path(str(tmp_path / ".." / "etc" / "passwd"), str(tmp_path))
    assert exc.value.code == "invalid_path"


def test_status_mapping():
    assert status_for_code("not_found") == 404
    assert status_for_code("invalid_amount") == 422
    assert status_for_code("pro_required") == 402
    assert status_for_code("something_else") == 400
    assert ServiceError("x", "y", status_code=418).status_code == 418
