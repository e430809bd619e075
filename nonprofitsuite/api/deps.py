"""
API dependency helpers.

``get_current_user_context`` resolves the proxy-authenticated user for the
admin routes; ``get_token_user_context`` resolves a mobile API token.
Both return ``(user, current_user_dict)``.
"""
import logging
from typing import Any, Dict, Optional, Tuple

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from nonprofitsuite.api.auth import build_user_context, get_or_create_user, resolve_identity_from_headers
from nonprofitsuite.db.database import get_db
from nonprofitsuite.db.repositories import users as users_repo
from nonprofitsuite.errors import ServiceError
from nonprofitsuite.services.token_service import TokenService
from nonprofitsuite.utils.runtime import dev_mode_active

logger = logging.getLogger(__name__)

DEV_USER_EMAIL = "dev@localhost"


def get_current_user_context(
    db: Session = Depends(get_db),
    x_auth_request_user: Optional[str] = Header(default=None),
    x_auth_request_email: Optional[str] = Header(default=None),
    x_forwarded_user: Optional[str] = Header(default=None),
    x_forwarded_email: Optional[str] = Header(default=None),
) -> Tuple[Any, Dict[str, Any]]:
    if dev_mode_active():
        name, email = "Development User", DEV_USER_EMAIL
    else:
        name, email = resolve_identity_from_headers(
            x_auth_request_user=x_auth_request_user,
            x_auth_request_email=x_auth_request_email,
            x_forwarded_user=x_forwarded_user,
            x_forwarded_email=x_forwarded_email,
        )
        if not email:
            raise ServiceError("not_authenticated", "Authentication required", status_code=401)
    user = get_or_create_user(db, email=email, display_name=name)
    return user, build_user_context(user)


def get_optional_user_context(
    db: Session = Depends(get_db),
    x_auth_request_user: Optional[str] = Header(default=None),
    x_auth_request_email: Optional[str] = Header(default=None),
    x_forwarded_user: Optional[str] = Header(default=None),
    x_forwarded_email: Optional[str] = Header(default=None),
) -> Optional[Dict[str, Any]]:
    """Context for routes open to anonymous callers; None when nobody is signed in."""
    _name, email = resolve_identity_from_headers(
        x_auth_request_user, x_auth_request_email, x_forwarded_user, x_forwarded_email
    )
    if not email and not dev_mode_active():
        return None
    _user, ctx = get_current_user_context(
        db=db,
        x_auth_request_user=x_auth_request_user,
        x_auth_request_email=x_auth_request_email,
        x_forwarded_user=x_forwarded_user,
        x_forwarded_email=x_forwarded_email,
    )
    return ctx


def extract_api_token(
    x_api_token: Optional[str], authorization: Optional[str], x_api_key: Optional[str]
) -> Optional[str]:
    if x_api_token:
        return x_api_token.strip()
    if authorization and authorization.lower().startswith("bearer "):
        return authorization[7:].strip()
    if x_api_key:
        return x_api_key.strip()
    return None


def get_token_user_context(
    db: Session = Depends(get_db),
    x_api_token: Optional[str] = Header(default=None, alias="X-API-Token"),
    authorization: Optional[str] = Header(default=None),
    x_api_key: Optional[str] = Header(default=None, alias="X-API-Key"),
) -> Tuple[Any, Dict[str, Any]]:
    token = extract_api_token(x_api_token, authorization, x_api_key)
    if not token:
        raise ServiceError("no_token", "API token required")
    row = TokenService(db).validate_token(token)
    user = users_repo.get_user(db, row.user_id)
    if user is None:
        logger.warning("api_token_orphaned: token_id=%s", row.token_id)
        raise ServiceError("invalid_token", "Invalid or expired API token")
    ctx = build_user_context(user)
    ctx["api_token"] = {"id": row.id, "token_id": row.token_id, "permissions": list(row.permissions or [])}
    return user, ctx
