"""
Mobile API tokens.

Tokens are ``ns_pat_<token_id>_<secret>``; the row is found by ``token_id``
and the secret is checked against its Argon2id hash. The raw token is only
returned from ``generate_token``.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from nonprofitsuite.api.permissions import check_capability
from nonprofitsuite.db import models, schemas
from nonprofitsuite.db.repositories import tokens as token_repo
from nonprofitsuite.db.repositories import users as users_repo
from nonprofitsuite.errors import ServiceError
from nonprofitsuite.services.base import BaseService
from nonprofitsuite.utils import token_crypto
from nonprofitsuite.utils.capabilities import CAP_MANAGE_OPTIONS
from nonprofitsuite.utils.license import is_pro_active
from nonprofitsuite.utils.sanitize import absint, sanitize_text_field

logger = logging.getLogger(__name__)

_INVALID = "Invalid or expired API token"


def _now() -> datetime:
    return datetime.now(timezone.utc)


class TokenService(BaseService):
    module = "api_tokens"

    def generate_token(self, user_id: int, token_name: str, permissions: Optional[List[str]] = None,
                       expires_days: int = 365) -> schemas.TokenCreateResponse:
        check_capability(self.current_user, CAP_MANAGE_OPTIONS, "manage API tokens")
        self.require_pro("Mobile API")
        try:
            request = schemas.TokenCreateRequest(
                token_name=sanitize_text_field(token_name), permissions=permissions or [], expires_days=expires_days
            )
        except ValidationError as exc:
            raise ServiceError("invalid_token_request", exc.errors()[0]["msg"])
        if not request.token_name:
            raise ServiceError("missing_required", "Token name is required.")
        if users_repo.get_user(self.db, absint(user_id)) is None:
            raise ServiceError("invalid_user_id", "A valid user is required.")

        tid, secret, full_token = token_crypto.generate_token()
        expires_at = _now() + timedelta(days=request.expires_days)
        with self.unit_of_work("generate token"):
            row = token_repo.create_token(self.db, {
                "user_id": absint(user_id),
                "token_id": tid,
                "token_hash": token_crypto.hash_secret(secret),
                "token_name": request.token_name,
                "permissions": list(request.permissions),
                "is_active": True,
                "expires_at": expires_at,
            })
        logger.info("api_token_created: id=%s token_id=%s user_id=%s", row.id, tid, user_id)
        return schemas.TokenCreateResponse(
            token_id=row.id, token=full_token, token_name=row.token_name, expires_at=expires_at
        )

    def validate_token(self, token: Optional[str]) -> models.ApiToken:
        """Return the active token row for ``token`` and stamp its last use."""
        parsed = token_crypto.parse_token(token)
        if parsed is None:
            raise ServiceError("invalid_token", _INVALID)
        row = token_repo.get_by_token_id(self.db, token_id=parsed.token_id)
        if row is None or not row.is_active:
            raise ServiceError("invalid_token", _INVALID)
        expires_at = models.as_utc(row.expires_at)
        if expires_at is not None and expires_at <= _now():
            raise ServiceError("invalid_token", _INVALID)
        if not token_crypto.verify_secret(parsed.secret, row.token_hash):
            logger.warning("api_token_secret_mismatch: token_id=%s", parsed.token_id)
            raise ServiceError("invalid_token", _INVALID)
        with self.unit_of_work("update token usage", invalidate=[]):
            row.last_used = _now()
        return row

    def revoke_token(self, token_db_id: int) -> bool:
        check_capability(self.current_user, CAP_MANAGE_OPTIONS, "manage API tokens")
        self.require_pro("Mobile API")
        row = token_repo.get_token(self.db, token_db_id)
        if row is None:
            raise self.not_found("Token")
        with self.unit_of_work("revoke token"):
            row.is_active = False
        logger.info("api_token_revoked: id=%s", token_db_id)
        return True

    def get_user_tokens(self, user_id: int) -> List[schemas.TokenResponse]:
        if not is_pro_active(self.db):
            return []
        return [schemas.TokenResponse.model_validate(t) for t in token_repo.list_user_tokens(self.db, user_id=user_id)]

    def log_request(self, token_db_id: Optional[int], endpoint: str, method: str,
                    request_data: Optional[Dict[str, Any]] = None, response_code: int = 200,
                    response_time: float = 0.0, ip_address: Optional[str] = None,
                    user_agent: Optional[str] = None) -> None:
        with self.unit_of_work("log API request", invalidate=[]):
            token_repo.insert_log(self.db, {
                "token_id": token_db_id,
                "endpoint": sanitize_text_field(endpoint)[:255],
                "method": sanitize_text_field(method).upper()[:10],
                "request_data": request_data or {},
                "response_code": absint(response_code),
                "response_time": max(0.0, float(response_time or 0.0)),
                "ip_address": sanitize_text_field(ip_address)[:45] or None,
                "user_agent": sanitize_text_field(user_agent)[:255] or None,
            })

    def get_usage_stats(self, token_db_id: int, days: int = 30) -> Optional[schemas.TokenUsageStats]:
        if not is_pro_active(self.db):
            return None
        stats = token_repo.usage_stats(self.db, token_db_id=token_db_id, since=_now() - timedelta(days=absint(days)))
        return schemas.TokenUsageStats(**stats)
