"""
Time-boxed portal access for the organisation's outside CPA and legal counsel.

A user holds at most one active grant per kind. Revoking is a soft delete.
"""
import logging
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from nonprofitsuite.api.permissions import can_manage_cpa_access, can_manage_legal_access
from nonprofitsuite.db import models, schemas
from nonprofitsuite.db.repositories import access as access_repo
from nonprofitsuite.db.repositories import users as users_repo
from nonprofitsuite.errors import ServiceError
from nonprofitsuite.services.base import BaseService
from nonprofitsuite.utils import cache
from nonprofitsuite.utils.license import is_pro_active
from nonprofitsuite.utils.pagination import parse_pagination_args
from nonprofitsuite.utils.sanitize import absint, kses_post, parse_date, sanitize_email, sanitize_text_field

logger = logging.getLogger(__name__)

ACCESS_LEVELS = ("full", "read_only", "limited")
ACCESS_ORDERBY = ("id", "granted_date", "expiration_date", "status")


class ProfessionalAccessService(BaseService):
    """Shared grant/revoke logic; subclasses name the table and its contact fields."""

    model = None
    response_schema = None
    label = ""
    gate: Callable[[Optional[Dict[str, Any]]], None] = None

    def _contact_values(self, data: Dict[str, Any]) -> Dict[str, Any]:
        raise NotImplementedError

    def grant_access(self, data: Dict[str, Any]):
        self.gate(self.current_user)
        self.require_pro(f"{self.label} access")

        user_id = absint(data.get("user_id"))
        if not user_id or users_repo.get_user(self.db, user_id) is None:
            raise ServiceError("invalid_user_id", "A valid user is required.")
        if access_repo.get_active_grant(self.db, self.model, user_id):
            raise ServiceError("duplicate", f"User already has active {self.label} access")
        access_level = sanitize_text_field(data.get("access_level")) or "full"
        if access_level not in ACCESS_LEVELS:
            raise ServiceError("invalid_access_level", "Invalid access level.")
        values = self._contact_values(data)

        with self.unit_of_work(f"grant {self.label} access"):
            grant = access_repo.create_grant(self.db, self.model, dict(values, **{
                "user_id": user_id,
                "firm_name": sanitize_text_field(data.get("firm_name")) or None,
                "access_level": access_level,
                "expiration_date": parse_date(data.get("expiration_date")),
                "status": "active",
                "notes": kses_post(data.get("notes")) or None,
            }))
        logger.info("access_granted: kind=%s user_id=%s", self.module, user_id)
        return self.response_schema.model_validate(grant)

    def get_access_records(self, args: Optional[Dict[str, Any]] = None) -> schemas.Page:
        self.require_pro(f"{self.label} access")
        parsed = parse_pagination_args(args, ACCESS_ORDERBY, default_orderby="granted_date")

        def _load():
            rows, total = access_repo.list_grants(self.db, self.model, args=parsed)
            return self.to_page(rows, total, parsed, self.response_schema)

        return self.remember(cache.list_key(self.module, parsed.cache_args()), _load)

    def revoke_access(self, grant_id: int):
        self.gate(self.current_user)
        self.require_pro(f"{self.label} access")
        grant = access_repo.get_grant(self.db, self.model, grant_id)
        if grant is None:
            raise self.not_found(f"{self.label} access record")
        with self.unit_of_work(f"revoke {self.label} access"):
            grant.status = "revoked"
            grant.revoked_date = datetime.now(timezone.utc)
        logger.info("access_revoked: kind=%s id=%s", self.module, grant_id)
        return self.response_schema.model_validate(grant)

    def has_access(self, user_id: int) -> bool:
        if not is_pro_active(self.db):
            return False
        return access_repo.get_valid_grant(self.db, self.model, absint(user_id), today=date.today()) is not None

    def _active_users(self) -> List[Dict[str, Any]]:
        if not is_pro_active(self.db):
            return []
        return [
            {
                "access": self.response_schema.model_validate(grant),
                "email": user.email if user else None,
                "display_name": user.display_name if user else None,
            }
            for grant, user in access_repo.list_active_with_users(self.db, self.model)
        ]


class CpaAccessService(ProfessionalAccessService):
    module = "cpa_access"
    model = models.CpaAccess
    response_schema = schemas.CpaAccessResponse
    label = "CPA"
    gate = staticmethod(can_manage_cpa_access)

    def _contact_values(self, data: Dict[str, Any]) -> Dict[str, Any]:
        contact_name = sanitize_text_field(data.get("contact_name"))
        if not contact_name:
            raise ServiceError("missing_required", "Contact name is required.")
        return {
            "contact_name": contact_name,
            "contact_email": sanitize_email(data.get("contact_email")) or None,
            "phone": sanitize_text_field(data.get("phone")) or None,
        }

    def get_dashboard_data(self, user_id: int) -> Dict[str, Any]:
        """The CPA's active grant and how long it has left."""
        if not is_pro_active(self.db):
            return {}

        def _load():
            grant = access_repo.get_active_grant(self.db, self.model, absint(user_id))
            if grant is None:
                return {}
            days_remaining = None
            if grant.expiration_date is not None:
                days_remaining = max(0, (grant.expiration_date - date.today()).days)
            return {"access": self.response_schema.model_validate(grant), "days_remaining": days_remaining}

        return self.remember(cache.item_key(f"{self.module}_dashboard", user_id), _load)

    def get_cpa_users(self) -> List[Dict[str, Any]]:
        return self._active_users()


class LegalAccessService(ProfessionalAccessService):
    module = "legal_access"
    model = models.LegalAccess
    response_schema = schemas.LegalAccessResponse
    label = "legal counsel"
    gate = staticmethod(can_manage_legal_access)

    def _contact_values(self, data: Dict[str, Any]) -> Dict[str, Any]:
        attorney_name = sanitize_text_field(data.get("attorney_name"))
        if not attorney_name:
            raise ServiceError("missing_required", "Attorney name is required.")
        return {
            "attorney_name": attorney_name,
            "attorney_email": sanitize_email(data.get("attorney_email")) or None,
            "attorney_phone": sanitize_text_field(data.get("attorney_phone")) or None,
            "bar_number": sanitize_text_field(data.get("bar_number")) or None,
            "specialization": sanitize_text_field(data.get("specialization")) or None,
        }

    def get_attorneys(self) -> List[Dict[str, Any]]:
        return self._active_users()
