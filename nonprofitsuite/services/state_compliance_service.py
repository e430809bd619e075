"""
Multi-state compliance: registered state operations and their filing
requirements.

Requirements are seeded from JSON fixtures in ``data/states/<code>.json``
(``NONPROFITSUITE_STATES_DIR`` overrides the directory). Each fixture holds a
``requirements`` list; a requirement's ``due_date`` may be ``MM-DD`` (recurs
yearly) or a full ``YYYY-MM-DD`` date.
"""
import json
import logging
import os
import re
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from nonprofitsuite.api.permissions import can_manage_compliance, validate_file_path
from nonprofitsuite.db import models, schemas
from nonprofitsuite.db.repositories import compliance as compliance_repo
from nonprofitsuite.errors import ServiceError
from nonprofitsuite.services.base import BaseService
from nonprofitsuite.utils import cache
from nonprofitsuite.utils.sanitize import (
    esc_url_raw,
    filter_allowed,
    parse_date,
    sanitize_text_field,
    sanitize_textarea_field,
    to_float,
)

logger = logging.getLogger(__name__)

_STATE_CODE_RE = re.compile(r"^[A-Za-z]{2}$")
_MONTH_DAY_RE = re.compile(r"^(\d{2})-(\d{2})$")
_DEFAULT_STATES_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "data", "states")

OPERATIONS_MODULE = "state_operations"
REQUIREMENTS_MODULE = "state_requirements"

_OPERATION_UPDATE_FIELDS = {
    "operation_type": "%s",
    "registration_date": "date",
    "registration_number": "%s",
    "status": "%s",
    "registered_agent": "%s",
    "registered_agent_address": "%s",
    "annual_report_due": "date",
    "charitable_registration_number": "%s",
    "notes": "%s",
}
_REQUIREMENT_UPDATE_FIELDS = {
    "status": "%s",
    "completed_date": "date",
    "next_due_date": "date",
    "confirmation_number": "%s",
    "notes": "%s",
}
REQUIREMENT_STATUSES = ("pending", "in_progress", "completed")


def states_dir() -> str:
    return os.getenv("NONPROFITSUITE_STATES_DIR") or _DEFAULT_STATES_DIR


def next_due_from(due: Optional[str], today: Optional[date] = None) -> Optional[date]:
    """Resolve a fixture due date to the next occurrence on or after ``today``."""
    if not due:
        return None
    today = today or date.today()
    m = _MONTH_DAY_RE.match(due.strip())
    if m:
        month, day = int(m.group(1)), int(m.group(2))
        for year in (today.year, today.year + 1):
            try:
                candidate = date(year, month, day)
            except ValueError:
                # Feb 29 in a non-leap year
                candidate = date(year, month, 28)
            if candidate >= today:
                return candidate
        return None
    return parse_date(due)


def load_state_data(state_code: str) -> Optional[Dict[str, Any]]:
    """Load a state's fixture; None when the code, path or JSON is unusable."""
    if not state_code or not _STATE_CODE_RE.match(state_code):
        logger.warning("state_fixture_rejected: code=%r", state_code)
        return None
    base = states_dir()
    path = os.path.join(base, f"{state_code.lower()}.json")
    try:
        path = validate_file_path(path, base)
    except ServiceError:
        logger.warning("state_fixture_outside_base: code=%s", state_code)
        return None
    if not os.path.isfile(path):
        logger.warning("state_fixture_missing: code=%s", state_code)
        return None
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
    except (OSError, ValueError):
        logger.warning("state_fixture_unreadable: path=%s", path, exc_info=True)
        return None
    if not isinstance(data, dict) or not isinstance(data.get("requirements"), list):
        logger.warning("state_fixture_invalid: code=%s", state_code)
        return None
    return data


def get_available_states() -> List[str]:
    base = states_dir()
    if not os.path.isdir(base):
        return []
    codes = []
    for name in os.listdir(base):
        stem, ext = os.path.splitext(name)
        if ext == ".json" and _STATE_CODE_RE.match(stem):
            codes.append(stem.upper())
    return sorted(codes)


class StateComplianceService(BaseService):
    module = OPERATIONS_MODULE

    def add_state_operation(self, data: Dict[str, Any]) -> schemas.StateOperationResponse:
        can_manage_compliance(self.current_user)
        self.require_pro("State compliance")

        code = sanitize_text_field(data.get("state_code")).upper()
        if not _STATE_CODE_RE.match(code):
            raise ServiceError("invalid_state_code", "State code must be two letters.")
        if compliance_repo.get_state_operation_by_code(self.db, code):
            raise ServiceError("duplicate", f"State operation for {code} already exists.")
        fixture = load_state_data(code) or {}
        name = sanitize_text_field(data.get("state_name")) or fixture.get("state_name") or code

        with self.unit_of_work("add state operation", invalidate=[OPERATIONS_MODULE, REQUIREMENTS_MODULE]):
            op = compliance_repo.create_state_operation(self.db, {
                "state_code": code,
                "state_name": name,
                "operation_type": sanitize_text_field(data.get("operation_type")) or None,
                "registration_date": parse_date(data.get("registration_date")),
                "registration_number": sanitize_text_field(data.get("registration_number")) or None,
                "status": sanitize_text_field(data.get("status")) or "active",
                "registered_agent": sanitize_text_field(data.get("registered_agent")) or None,
                "registered_agent_address": sanitize_textarea_field(data.get("registered_agent_address")) or None,
                "annual_report_due": parse_date(data.get("annual_report_due")),
                "charitable_registration_number": sanitize_text_field(data.get("charitable_registration_number")) or None,
                "notes": sanitize_textarea_field(data.get("notes")) or None,
            })
            created = self._generate_requirements(op, fixture)
        logger.info("state_operation_added: code=%s requirements=%d", code, created)
        return schemas.StateOperationResponse.model_validate(op)

    def _generate_requirements(self, op: models.StateOperation, fixture: Dict[str, Any]) -> int:
        created = 0
        today = date.today()
        for req in fixture.get("requirements", []):
            if not isinstance(req, dict) or not req.get("name"):
                continue
            due = sanitize_text_field(req.get("due_date")) or None
            compliance_repo.create_requirement(self.db, {
                "state_operation_id": op.id,
                "requirement_type": sanitize_text_field(req.get("type")) or "other",
                "requirement_name": sanitize_text_field(req.get("name")),
                "description": sanitize_textarea_field(req.get("description")) or None,
                "frequency": sanitize_text_field(req.get("frequency")) or None,
                "due_date": due,
                "next_due_date": next_due_from(due, today),
                "filing_method": sanitize_text_field(req.get("filing_method")) or None,
                "fee_amount": to_float(req.get("fee")) if req.get("fee") is not None else None,
                "agency": sanitize_text_field(req.get("agency")) or None,
                "website_url": esc_url_raw(req.get("url")) or None,
                "status": "pending",
            })
            created += 1
        return created

    def get_state_operations(self, status: Optional[str] = None) -> List[schemas.StateOperationResponse]:
        def _load():
            rows = compliance_repo.list_state_operations(self.db, status=status)
            return [schemas.StateOperationResponse.model_validate(r) for r in rows]

        return self.remember(cache.list_key(OPERATIONS_MODULE, {"status": status}), _load)

    def update_state_operation(self, op_id: int, data: Dict[str, Any]) -> schemas.StateOperationResponse:
        can_manage_compliance(self.current_user)
        values = filter_allowed(data, _OPERATION_UPDATE_FIELDS)
        if not values:
            raise ServiceError("no_data", "No valid fields to update.")
        op = compliance_repo.get_state_operation(self.db, op_id)
        if op is None:
            raise self.not_found("State operation")
        with self.unit_of_work("update state operation"):
            for name, value in values.items():
                setattr(op, name, value)
        return schemas.StateOperationResponse.model_validate(op)

    def get_requirements(self, operation_id: int) -> List[schemas.RequirementResponse]:
        def _load():
            rows = compliance_repo.list_requirements(self.db, operation_id=operation_id)
            return [schemas.RequirementResponse.model_validate(r) for r in rows]

        return self.remember(cache.list_key(REQUIREMENTS_MODULE, {"operation_id": operation_id}), _load)

    def update_requirement(self, req_id: int, data: Dict[str, Any]) -> schemas.RequirementResponse:
        can_manage_compliance(self.current_user)
        values = filter_allowed(data, _REQUIREMENT_UPDATE_FIELDS)
        if not values:
            raise ServiceError("no_data", "No valid fields to update.")
        if "status" in values and values["status"] not in REQUIREMENT_STATUSES:
            raise ServiceError("invalid_status", "Invalid requirement status.")
        req = compliance_repo.get_requirement(self.db, req_id)
        if req is None:
            raise self.not_found("Requirement")
        if values.get("status") == "completed" and not values.get("completed_date"):
            values["completed_date"] = date.today()
        with self.unit_of_work("update requirement", invalidate=[REQUIREMENTS_MODULE]):
            for name, value in values.items():
                setattr(req, name, value)
        return schemas.RequirementResponse.model_validate(req)

    def get_pending_requirements(self) -> List[schemas.RequirementResponse]:
        rows = compliance_repo.list_requirements_by_status(self.db, statuses=["pending", "in_progress"])
        return [schemas.RequirementResponse.model_validate(r) for r in rows]

    def get_overdue_requirements(self) -> List[schemas.RequirementResponse]:
        rows = compliance_repo.list_overdue_requirements(self.db, today=date.today())
        return [schemas.RequirementResponse.model_validate(r) for r in rows]

    def get_requirements_by_type(self, requirement_type: str) -> List[schemas.RequirementResponse]:
        rows = compliance_repo.list_requirements_by_type(self.db, requirement_type=requirement_type)
        return [schemas.RequirementResponse.model_validate(r) for r in rows]

    def get_dashboard_data(self) -> Dict[str, Any]:
        today = date.today()
        upcoming = compliance_repo.list_upcoming_requirements(self.db, start=today, end=today + timedelta(days=30))
        return {
            "active_states": compliance_repo.count_state_operations(self.db, status="active"),
            "pending_count": len(compliance_repo.list_requirements_by_status(self.db, statuses=["pending", "in_progress"])),
            "overdue_count": len(compliance_repo.list_overdue_requirements(self.db, today=today)),
            "upcoming": [schemas.RequirementResponse.model_validate(r) for r in upcoming],
            "compliance_rate": self.calculate_compliance_rate(),
        }

    def calculate_compliance_rate(self) -> float:
        total, completed = compliance_repo.requirement_counts(self.db)
        if total == 0:
            return 100.0
        return round(completed / total * 100, 1)

    @staticmethod
    def load_state_data(state_code: str) -> Optional[Dict[str, Any]]:
        return load_state_data(state_code)

    @staticmethod
    def get_available_states() -> List[str]:
        return get_available_states()
