"""
Volunteer management: applications, status changes and hour logging.
"""
import logging
from typing import Any, Dict, List, Optional

from nonprofitsuite.api.permissions import can_manage_volunteers
from nonprofitsuite.db import schemas
from nonprofitsuite.db.repositories import people as people_repo
from nonprofitsuite.db.repositories import volunteers as volunteers_repo
from nonprofitsuite.errors import ServiceError
from nonprofitsuite.services.base import BaseService
from nonprofitsuite.utils import cache
from nonprofitsuite.utils.pagination import parse_pagination_args
from nonprofitsuite.utils.sanitize import absint, parse_date, sanitize_textarea_field, to_float

logger = logging.getLogger(__name__)

VOLUNTEER_STATUSES = {
    "applicant": "Applicant",
    "active": "Active",
    "inactive": "Inactive",
    "suspended": "Suspended",
}
VOLUNTEER_ORDERBY = ("id", "total_hours", "created_at")


class VolunteerService(BaseService):
    module = "volunteers"

    def create_volunteer(self, data: Dict[str, Any]) -> schemas.VolunteerResponse:
        can_manage_volunteers(self.current_user)
        person_id = absint(data.get("person_id"))
        if not person_id or people_repo.get_person(self.db, person_id) is None:
            raise ServiceError("invalid_person_id", "Invalid person.")

        with self.unit_of_work("create volunteer"):
            volunteer = volunteers_repo.create_volunteer(self.db, {
                "person_id": person_id,
                "application_status": "pending",
                "volunteer_status": "applicant",
                "skills": sanitize_textarea_field(data.get("skills")) or None,
                "interests": sanitize_textarea_field(data.get("interests")) or None,
                "availability": sanitize_textarea_field(data.get("availability")) or None,
            })
        return schemas.VolunteerResponse.model_validate(volunteer)

    def get_volunteers(self, args: Optional[Dict[str, Any]] = None) -> schemas.Page:
        args = dict(args or {})
        args.setdefault("volunteer_status", "active")
        parsed = parse_pagination_args(args, VOLUNTEER_ORDERBY, default_orderby="total_hours")

        def _load():
            rows, total = volunteers_repo.list_volunteers(self.db, args=parsed)
            return self.to_page(rows, total, parsed, schemas.VolunteerResponse)

        return self.remember(cache.list_key(self.module, parsed.cache_args()), _load)

    def update_volunteer_status(self, volunteer_id: int, status: str) -> schemas.VolunteerResponse:
        can_manage_volunteers(self.current_user)
        if status not in VOLUNTEER_STATUSES:
            raise ServiceError("invalid_status", "Invalid volunteer status.")
        volunteer = volunteers_repo.get_volunteer(self.db, volunteer_id)
        if volunteer is None:
            raise self.not_found("Volunteer")
        with self.unit_of_work("update volunteer status"):
            volunteer.volunteer_status = status
            if status == "active":
                volunteer.application_status = "approved"
        return schemas.VolunteerResponse.model_validate(volunteer)

    def log_hours(self, volunteer_id: int, data: Dict[str, Any]) -> schemas.HoursResponse:
        """Insert an hours row and refresh the volunteer's total in one transaction."""
        can_manage_volunteers(self.current_user)

        if volunteers_repo.get_volunteer(self.db, volunteer_id) is None:
            raise ServiceError("invalid_volunteer_id", "Invalid volunteer.")
        hours = to_float(data.get("hours"))
        if hours <= 0:
            raise ServiceError("invalid_hours", "Hours must be greater than zero.")
        if not data.get("activity_date"):
            raise ServiceError("missing_required_field", "Activity date is required.")
        activity_date = parse_date(data.get("activity_date"))
        if activity_date is None:
            raise ServiceError("invalid_date", "Invalid activity date.")
        description = sanitize_textarea_field(data.get("description"))
        if not description:
            raise ServiceError("missing_required_field", "Description is required.")

        with self.unit_of_work("log volunteer hours"):
            row = volunteers_repo.insert_hours(self.db, {
                "volunteer_id": volunteer_id,
                "activity_date": activity_date,
                "hours": hours,
                "description": description,
                "program_id": absint(data.get("program_id")) or None,
                "approved": False,
            })
            volunteers_repo.recompute_total_hours(self.db, volunteer_id)
        logger.info("volunteer_hours_logged: volunteer_id=%s hours=%.2f", volunteer_id, hours)
        return schemas.HoursResponse.model_validate(row)

    def approve_hours(self, hours_id: int, approver_id: Optional[int] = None) -> schemas.HoursResponse:
        can_manage_volunteers(self.current_user)
        row = volunteers_repo.get_hours(self.db, hours_id)
        if row is None:
            raise self.not_found("Hours entry")
        with self.unit_of_work("approve volunteer hours"):
            volunteers_repo.approve_hours(self.db, row, approver_id=approver_id or self.user_id)
            volunteers_repo.recompute_total_hours(self.db, row.volunteer_id)
        return schemas.HoursResponse.model_validate(row)

    def get_volunteer_hours(self, volunteer_id: int, approved_only: bool = False) -> List[schemas.HoursResponse]:
        def _load():
            rows = volunteers_repo.list_hours(self.db, volunteer_id=volunteer_id, approved_only=approved_only)
            return [schemas.HoursResponse.model_validate(r) for r in rows]

        key = cache.list_key(self.module, {"hours": volunteer_id, "approved_only": approved_only})
        return self.remember(key, _load)

    @staticmethod
    def get_volunteer_statuses() -> Dict[str, str]:
        return dict(VOLUNTEER_STATUSES)
