"""
Identity resolution for API requests.

Parses the reverse-proxy identity headers, upserts the user row and builds
the ``current_user`` dictionary the services check capabilities against.
"""
import logging
import os
from typing import Any, Dict, Optional, Tuple

from sqlalchemy.orm import Session

from nonprofitsuite.db import models
from nonprofitsuite.db.repositories import users as users_repo
from nonprofitsuite.utils.capabilities import ROLE_ADMINISTRATOR, ROLE_CAPABILITIES, default_role

logger = logging.getLogger(__name__)


def _normalize_email(email: Optional[str]) -> Optional[str]:
    if not email:
        return None
    return email.strip().lower()


def _admin_emails() -> set:
    raw = os.getenv("ADMIN_EMAILS", "")
    return {e.strip().strip('"').strip("'").lower() for e in raw.split(",") if e.strip()}


def resolve_identity_from_headers(
    x_auth_request_user: Optional[str],
    x_auth_request_email: Optional[str],
    x_forwarded_user: Optional[str],
    x_forwarded_email: Optional[str],
) -> Tuple[Optional[str], Optional[str]]:
    user = x_auth_request_user or x_forwarded_user
    email = _normalize_email(x_auth_request_email or x_forwarded_email)
    return user, email


def get_or_create_user(db: Session, email: str, display_name: Optional[str] = None) -> models.User:
    """Return the user for ``email``, creating it with the default role on first sight.

    Addresses listed in ``ADMIN_EMAILS`` are promoted to administrator, also
    when they already exist with a lesser role.
    """
    is_admin = email in _admin_emails()
    user = users_repo.get_user_by_email(db, email)
    if user is None:
        user = users_repo.create_user(
            db,
            email=email,
            display_name=display_name or email.split("@")[0],
            role=ROLE_ADMINISTRATOR if is_admin else default_role(),
        )
        db.commit()
        db.refresh(user)
        logger.info("user_created: id=%s role=%s", user.id, user.role)
        return user
    if is_admin and user.role != ROLE_ADMINISTRATOR:
        user.role = ROLE_ADMINISTRATOR
        db.commit()
        db.refresh(user)
    return user


def build_user_context(user: models.User) -> Dict[str, Any]:
    return {
        "id": user.id,
        "email": user.email,
        "display_name": user.display_name,
        "role": user.role,
        "capabilities": ROLE_CAPABILITIES.get(user.role, frozenset()),
    }
