"""
Organisation-wide compliance calendar: filings, renewals, audits and the like.

Completing a recurring item schedules its next occurrence.
"""
import calendar as _calendar
import logging
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from nonprofitsuite.api.permissions import can_manage_compliance
from nonprofitsuite.db import schemas
from nonprofitsuite.db.repositories import compliance as compliance_repo
from nonprofitsuite.errors import ServiceError
from nonprofitsuite.services.base import BaseService
from nonprofitsuite.utils import cache
from nonprofitsuite.utils.pagination import parse_pagination_args
from nonprofitsuite.utils.sanitize import absint, parse_date, sanitize_text_field, sanitize_textarea_field

logger = logging.getLogger(__name__)

COMPLIANCE_TYPES = {
    "filing": "Government Filing",
    "report": "Required Report",
    "renewal": "License/Registration Renewal",
    "audit": "Audit",
    "insurance": "Insurance Renewal",
    "policy": "Policy Review",
    "training": "Required Training",
}
RECURRENCE_OPTIONS = {
    "none": "One-time",
    "monthly": "Monthly",
    "quarterly": "Quarterly",
    "annually": "Annually",
}
_RECURRENCE_MONTHS = {"monthly": 1, "quarterly": 3, "annually": 12}
COMPLIANCE_ORDERBY = ("id", "due_date", "item_name", "status")


def add_months(value: date, months: int) -> date:
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, _calendar.monthrange(year, month)[1])
    return date(year, month, day)


class ComplianceService(BaseService):
    module = "compliance"

    def create_item(self, data: Dict[str, Any]) -> schemas.ComplianceItemResponse:
        can_manage_compliance(self.current_user)
        self.require_pro("Compliance module")

        item_name = sanitize_text_field(data.get("item_name"))
        due_date = parse_date(data.get("due_date"))
        if not item_name or due_date is None:
            raise ServiceError("missing_required", "Item name and a valid due date are required.")
        item_type = sanitize_text_field(data.get("item_type")) or "filing"
        if item_type not in COMPLIANCE_TYPES:
            raise ServiceError("invalid_item_type", "Invalid compliance item type.")
        recurrence = sanitize_text_field(data.get("recurrence")) or "none"
        if recurrence not in RECURRENCE_OPTIONS:
            raise ServiceError("invalid_recurrence", "Invalid recurrence.")

        with self.unit_of_work("create compliance item"):
            item = compliance_repo.create_compliance_item(self.db, {
                "item_name": item_name,
                "item_type": item_type,
                "due_date": due_date,
                "responsible_person_id": absint(data.get("responsible_person_id")) or None,
                "status": "pending",
                "description": sanitize_textarea_field(data.get("description")) or None,
                "recurrence": recurrence,
            })
        return schemas.ComplianceItemResponse.model_validate(item)

    def mark_completed(self, item_id: int, completion_date: Optional[str] = None) -> schemas.ComplianceItemResponse:
        """Complete an item; recurring items spawn the next pending occurrence."""
        can_manage_compliance(self.current_user)
        item = compliance_repo.get_compliance_item(self.db, item_id)
        if item is None:
            raise self.not_found("Compliance item")

        with self.unit_of_work("complete compliance item"):
            item.completion_date = parse_date(completion_date) or date.today()
            item.status = "completed"
            if item.recurrence in _RECURRENCE_MONTHS:
                compliance_repo.create_compliance_item(self.db, {
                    "item_name": item.item_name,
                    "item_type": item.item_type,
                    "due_date": add_months(item.due_date, _RECURRENCE_MONTHS[item.recurrence]),
                    "responsible_person_id": item.responsible_person_id,
                    "status": "pending",
                    "description": item.description,
                    "recurrence": item.recurrence,
                })
        return schemas.ComplianceItemResponse.model_validate(item)

    def get_upcoming(self, days: int = 30) -> List[schemas.ComplianceItemResponse]:
        today = date.today()

        def _load():
            rows = compliance_repo.list_upcoming_items(self.db, start=today, end=today + timedelta(days=days))
            return [schemas.ComplianceItemResponse.model_validate(r) for r in rows]

        return self.remember(cache.list_key("compliance_upcoming", {"days": days, "today": today}), _load)

    def get_overdue(self) -> List[schemas.ComplianceItemResponse]:
        today = date.today()

        def _load():
            rows = compliance_repo.list_overdue_items(self.db, today=today)
            return [schemas.ComplianceItemResponse.model_validate(r) for r in rows]

        return self.remember(cache.list_key(self.module, {"overdue": today}), _load)

    def get_items(self, args: Optional[Dict[str, Any]] = None) -> schemas.Page:
        parsed = parse_pagination_args(args, COMPLIANCE_ORDERBY, default_orderby="due_date", default_order="ASC")

        def _load():
            rows, total = compliance_repo.list_compliance_items(self.db, args=parsed)
            return self.to_page(rows, total, parsed, schemas.ComplianceItemResponse)

        return self.remember(cache.list_key(self.module, parsed.cache_args()), _load)

    @staticmethod
    def get_compliance_types() -> Dict[str, str]:
        return dict(COMPLIANCE_TYPES)

    @staticmethod
    def get_recurrence_options() -> Dict[str, str]:
        return dict(RECURRENCE_OPTIONS)
