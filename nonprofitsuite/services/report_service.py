"""
Anonymous whistleblower reporting.

Submitting and checking a report needs no identity; reviewing reports needs
the PRO license, and updating one also needs ``manage_options``.
"""
import logging
import secrets
from datetime import date
from typing import Any, Dict, List, Optional

from nonprofitsuite.api.permissions import check_capability
from nonprofitsuite.db import schemas
from nonprofitsuite.db.repositories import reports as reports_repo
from nonprofitsuite.errors import ServiceError
from nonprofitsuite.services.base import BaseService
from nonprofitsuite.utils import cache
from nonprofitsuite.utils.capabilities import CAP_MANAGE_OPTIONS
from nonprofitsuite.utils.license import is_pro_active
from nonprofitsuite.utils.pagination import parse_pagination_args
from nonprofitsuite.utils.sanitize import (
    filter_allowed,
    kses_post,
    parse_date,
    sanitize_text_field,
)

logger = logging.getLogger(__name__)

STATUS_LABELS = {
    "submitted": "Submitted - Under Review",
    "investigating": "Under Investigation",
    "resolved": "Resolved",
    "closed": "Closed",
}
PRIORITIES = ("low", "medium", "high")
REPORT_ORDERBY = ("id", "submitted_date", "status", "priority", "category")
_UPDATE_FIELDS = {
    "status": "%s",
    "priority": "%s",
    "assigned_to": "%d",
    "investigation_notes": "html",
    "resolution": "html",
    "resolved_date": "date",
    "followup_required": "bool",
}


class ReportService(BaseService):
    module = "anonymous_reports"

    def _generate_report_number(self) -> str:
        year = date.today().year
        while True:
            number = f"AR{year}{secrets.randbelow(90000) + 10000}"
            if not reports_repo.number_exists(self.db, number):
                return number

    def submit_report(self, data: Dict[str, Any]) -> Dict[str, str]:
        category = sanitize_text_field(data.get("category"))
        description = kses_post(data.get("description"))
        if not category or not description:
            raise ServiceError("missing_required", "Category and description are required.")
        priority = sanitize_text_field(data.get("priority")) or "medium"
        if priority not in PRIORITIES:
            raise ServiceError("invalid_priority", "Invalid priority.")

        report_number = self._generate_report_number()
        with self.unit_of_work("submit report"):
            reports_repo.create_report(self.db, {
                "report_number": report_number,
                "category": category,
                "subject": sanitize_text_field(data.get("subject")) or None,
                "description": description,
                "incident_date": parse_date(data.get("incident_date")),
                "location": sanitize_text_field(data.get("location")) or None,
                "people_involved": kses_post(data.get("people_involved")) or None,
                "evidence_description": kses_post(data.get("evidence_description")) or None,
                "status": "submitted",
                "priority": priority,
            })
        # the number is the reporter's only handle; never log the content
        logger.info("anonymous_report_submitted: category=%s", category)
        return {
            "report_number": report_number,
            "message": f"Report submitted successfully. Save this number to check status: {report_number}",
        }

    def check_status(self, report_number: str) -> schemas.ReportStatus:
        report = reports_repo.get_by_number(self.db, sanitize_text_field(report_number))
        if report is None:
            raise ServiceError("not_found", "Report not found.")
        return schemas.ReportStatus(
            report_number=report.report_number,
            status=report.status,
            status_label=STATUS_LABELS.get(report.status, report.status.capitalize()),
            submitted_date=report.submitted_date,
        )

    def get_reports(self, args: Optional[Dict[str, Any]] = None) -> schemas.Page:
        self.require_pro("Anonymous reporting")
        parsed = parse_pagination_args(args, REPORT_ORDERBY, default_orderby="submitted_date")

        def _load():
            rows, total = reports_repo.list_reports(self.db, args=parsed)
            return self.to_page(rows, total, parsed, schemas.ReportResponse)

        return self.remember(cache.list_key(self.module, parsed.cache_args()), _load)

    def get_report(self, report_id: int) -> schemas.ReportResponse:
        self.require_pro("Anonymous reporting")

        def _load():
            report = reports_repo.get_report(self.db, report_id)
            return schemas.ReportResponse.model_validate(report) if report else None

        report = self.remember(cache.item_key(self.module, report_id), _load)
        if report is None:
            raise ServiceError("not_found", "Report not found.")
        return report

    def update_report(self, report_id: int, data: Dict[str, Any]) -> schemas.ReportResponse:
        check_capability(self.current_user, CAP_MANAGE_OPTIONS, "manage anonymous reports")
        self.require_pro("Anonymous reporting")
        values = filter_allowed(data, _UPDATE_FIELDS)
        if not values:
            raise ServiceError("no_data", "No valid data to update.")
        if "status" in values and values["status"] not in STATUS_LABELS:
            raise ServiceError("invalid_status", "Invalid report status.")
        if "priority" in values and values["priority"] not in PRIORITIES:
            raise ServiceError("invalid_priority", "Invalid priority.")

        report = reports_repo.get_report(self.db, report_id)
        if report is None:
            raise ServiceError("not_found", "Report not found.")
        if values.get("status") == "resolved" and not values.get("resolved_date") and not report.resolved_date:
            values["resolved_date"] = date.today()
        with self.unit_of_work("update report"):
            for name, value in values.items():
                setattr(report, name, value)
        return schemas.ReportResponse.model_validate(report)

    def get_dashboard_data(self) -> Dict[str, Any]:
        if not is_pro_active(self.db):
            return {}

        def _load():
            return {
                "new_reports": reports_repo.count_by_status(self.db, "submitted"),
                "investigating": reports_repo.count_by_status(self.db, "investigating"),
                "high_priority": reports_repo.count_open_high_priority(self.db),
                "recent_reports": [
                    schemas.ReportResponse.model_validate(r) for r in reports_repo.list_recent(self.db)
                ],
            }

        return self.remember(cache.item_key(f"{self.module}_dashboard", "summary"), _load)

    def get_category_stats(self) -> List[Dict[str, Any]]:
        if not is_pro_active(self.db):
            return []
        return [{"category": c, "count": int(n)} for c, n in reports_repo.category_counts(self.db)]
