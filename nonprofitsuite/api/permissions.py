"""
Capability checks fronting every mutating service operation.

Key helpers:
- has_capability(current_user, capability)
- check_capability(current_user, capability, action) -> raises permission_denied
- can_manage_donors / can_manage_finances / ... (named module gates)
- can_edit_record(current_user, owner_id)
- validate_file_path(path, base_dir)
"""
import os
from typing import Any, Dict, Optional

from nonprofitsuite.errors import ServiceError
from nonprofitsuite.utils.capabilities import (
    CAP_EDIT_OTHERS_POSTS,
    CAP_EDIT_POSTS,
    CAP_MANAGE_OPTIONS,
    ROLE_CAPABILITIES,
)


def _capabilities(current_user: Optional[Dict[str, Any]]):
    if not current_user:
        return frozenset()
    caps = current_user.get("capabilities")
    if caps is not None:
        return caps
    return ROLE_CAPABILITIES.get(current_user.get("role") or "", frozenset())


def has_capability(current_user: Optional[Dict[str, Any]], capability: str) -> bool:
    return capability in _capabilities(current_user)


def check_capability(current_user: Optional[Dict[str, Any]], capability: str, action: str) -> None:
    """Raise ``permission_denied`` unless the user holds ``capability``."""
    if not has_capability(current_user, capability):
        raise ServiceError("permission_denied", f"You do not have permission to {action}.")


def can_manage_donors(current_user: Optional[Dict[str, Any]]) -> None:
    check_capability(current_user, CAP_EDIT_POSTS, "manage donors")


def can_manage_volunteers(current_user: Optional[Dict[str, Any]]) -> None:
    check_capability(current_user, CAP_EDIT_POSTS, "manage volunteers")


def can_manage_advocacy(current_user: Optional[Dict[str, Any]]) -> None:
    check_capability(current_user, CAP_EDIT_POSTS, "manage advocacy")


def can_manage_calendar(current_user: Optional[Dict[str, Any]]) -> None:
    check_capability(current_user, CAP_EDIT_POSTS, "manage calendar")


def can_manage_finances(current_user: Optional[Dict[str, Any]]) -> None:
    check_capability(current_user, CAP_MANAGE_OPTIONS, "manage finances")


def can_manage_compliance(current_user: Optional[Dict[str, Any]]) -> None:
    check_capability(current_user, CAP_MANAGE_OPTIONS, "manage compliance")


def can_manage_cpa_access(current_user: Optional[Dict[str, Any]]) -> None:
    check_capability(current_user, CAP_MANAGE_OPTIONS, "manage CPA access")


def can_manage_legal_access(current_user: Optional[Dict[str, Any]]) -> None:
    check_capability(current_user, CAP_MANAGE_OPTIONS, "manage legal counsel access")


def can_manage_nonprofitsuite(current_user: Optional[Dict[str, Any]]) -> None:
    check_capability(current_user, CAP_MANAGE_OPTIONS, "manage NonprofitSuite settings")


def can_edit_record(current_user: Optional[Dict[str, Any]], owner_id: Optional[int]) -> bool:
    """Owners may edit their own records; editors and above may edit anyone's."""
    if not current_user:
        return False
    if has_capability(current_user, CAP_EDIT_OTHERS_POSTS):
        return True
    return owner_id is not None and current_user.get("id") == owner_id and has_capability(current_user, CAP_EDIT_POSTS)


def validate_file_path(path: str, base_dir: str) -> str:
    """Resolve ``path`` and ensure it stays inside ``base_dir``."""
    real_base = os.path.realpath(base_dir)
    real_path = os.path.realpath(path)
    if os.path.commonpath([real_base, real_path]) != real_base:
        raise ServiceError("invalid_path", "Invalid file path.")
    return real_path
