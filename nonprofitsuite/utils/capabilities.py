"""
Role to capability mapping.

Roles follow the familiar content-management model: administrators manage
settings and finances, editors may edit anyone's records, authors may edit
their own records and subscribers can only read.
"""
import os
from enum import Enum
from typing import Dict, FrozenSet, Set

ROLE_ADMINISTRATOR = "administrator"
ROLE_EDITOR = "editor"
ROLE_AUTHOR = "author"
ROLE_SUBSCRIBER = "subscriber"

CAP_MANAGE_OPTIONS = "manage_options"
CAP_EDIT_OTHERS_POSTS = "edit_others_posts"
CAP_EDIT_POSTS = "edit_posts"
CAP_READ = "read"

ROLE_CAPABILITIES: Dict[str, FrozenSet[str]] = {
    ROLE_ADMINISTRATOR: frozenset({CAP_MANAGE_OPTIONS, CAP_EDIT_OTHERS_POSTS, CAP_EDIT_POSTS, CAP_READ}),
    ROLE_EDITOR: frozenset({CAP_EDIT_OTHERS_POSTS, CAP_EDIT_POSTS, CAP_READ}),
    ROLE_AUTHOR: frozenset({CAP_EDIT_POSTS, CAP_READ}),
    ROLE_SUBSCRIBER: frozenset({CAP_READ}),
}

ALLOWED_ROLES = set(ROLE_CAPABILITIES.keys())


class RoleEnum(str, Enum):
    """Enum for user roles used in schemas and validation."""
    administrator = ROLE_ADMINISTRATOR
    editor = ROLE_EDITOR
    author = ROLE_AUTHOR
    subscriber = ROLE_SUBSCRIBER


def get_role_capabilities(role: str) -> Set[str]:
    """
    Get the capabilities granted to a role.

    Raises:
        ValueError: If role is not recognized
    """
    if role not in ROLE_CAPABILITIES:
        raise ValueError(f"Unknown role: {role}. Allowed roles: {sorted(ROLE_CAPABILITIES)}")
    return set(ROLE_CAPABILITIES[role])


def validate_role(role: str) -> bool:
    if role not in ALLOWED_ROLES:
        raise ValueError(f"Invalid role: {role}. Must be one of: {', '.join(sorted(ALLOWED_ROLES))}")
    return True


def default_role() -> str:
    """Role assigned to newly seen users (``NONPROFITSUITE_DEFAULT_ROLE``)."""
    role = os.getenv("NONPROFITSUITE_DEFAULT_ROLE", ROLE_SUBSCRIBER).strip().lower()
    return role if role in ALLOWED_ROLES else ROLE_SUBSCRIBER
