"""
Public transparency metrics.

A year's figures are computed from the ledger, volunteer hours, meetings and
donations, saved as a snapshot, and optionally shared anonymously with the
benchmarking aggregator. Only counts and totals leave the installation;
never names or individual amounts.
"""
import calendar
import logging
import os
import secrets
from datetime import date, datetime, timedelta, timezone
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import requests
from jinja2 import Environment, FileSystemLoader, select_autoescape
from pydantic import ValidationError

from nonprofitsuite.api.permissions import check_capability
from nonprofitsuite.db import schemas
from nonprofitsuite.db.repositories import compliance as compliance_repo
from nonprofitsuite.db.repositories import donors as donors_repo
from nonprofitsuite.db.repositories import meetings as meetings_repo
from nonprofitsuite.db.repositories import metrics as metrics_repo
from nonprofitsuite.db.repositories import options as options_repo
from nonprofitsuite.db.repositories import treasury as treasury_repo
from nonprofitsuite.db.repositories import volunteers as volunteers_repo
from nonprofitsuite.errors import ServiceError
from nonprofitsuite.services.base import BaseService
from nonprofitsuite.utils import cache
from nonprofitsuite.utils.capabilities import CAP_MANAGE_OPTIONS
from nonprofitsuite.utils.license import is_pro_active

logger = logging.getLogger(__name__)

DEFAULT_METRICS_URL = "https://metrics.nonprofitsuite.com/api"
CALCULATED_TTL = 3600
_REQUEST_TIMEOUT = 15

OPT_SETTINGS = "nonprofitsuite_settings"
OPT_SHARING = "nonprofitsuite_metrics_sharing_enabled"
OPT_INSTALLATION_ID = "nonprofitsuite_installation_id"

PROGRAM_CATEGORIES = ["Program Expenses"]
FUNDRAISING_CATEGORIES = ["Fundraising"]
ADMIN_CATEGORIES = ["Administrative", "Management & General"]

# Fields sent to the aggregator; the organisation itself is never identified.
_SUBMISSION_FIELDS = (
    "metric_year",
    "total_revenue",
    "total_expenses",
    "program_expenses",
    "fundraising_expenses",
    "admin_expenses",
    "program_expense_ratio",
    "fundraising_ratio",
    "admin_ratio",
    "num_employees",
    "num_volunteers",
    "num_board_members",
    "num_board_meetings",
    "num_programs",
    "num_donors",
)
_WIDGET_FIELDS = (
    "total_revenue",
    "total_expenses",
    "program_expense_ratio",
    "fundraising_ratio",
    "admin_ratio",
    "num_employees",
    "num_volunteers",
    "num_board_meetings",
    "num_programs",
)

_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"


@lru_cache(maxsize=None)
def metrics_url() -> str:
    return os.getenv("NONPROFITSUITE_METRICS_URL", DEFAULT_METRICS_URL).strip().rstrip("/")


def refresh_metrics_cache() -> None:
    """Invalidate cached aggregator configuration (useful for tests)."""
    metrics_url.cache_clear()


def _money(value: Any) -> str:
    return f"{float(value or 0):,.2f}"


@lru_cache(maxsize=1)
def _template_env() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(_TEMPLATE_DIR)),
        autoescape=select_autoescape(["html"]),
    )
    env.filters["money"] = _money
    return env


def fiscal_year_bounds(year: int, fiscal_year_end: Optional[str] = None) -> Tuple[date, date]:
    """First and last day of fiscal ``year`` for a ``MM-DD`` year-end."""
    month, day = 12, 31
    if fiscal_year_end:
        try:
            month, day = (int(part) for part in fiscal_year_end.split("-", 1))
        except ValueError:
            logger.warning("fiscal_year_end_invalid: value=%s", fiscal_year_end)
            month, day = 12, 31
        if not 1 <= month <= 12:
            month, day = 12, 31

    def _clamped(y: int) -> date:
        return date(y, month, min(max(day, 1), calendar.monthrange(y, month)[1]))

    return _clamped(year - 1) + timedelta(days=1), _clamped(year)


def _ratio(part: float, whole: float) -> float:
    if whole <= 0:
        return 0.0
    return round(part / whole * 100, 2)


class MetricsService(BaseService):
    module = "public_metrics"

    def _settings(self) -> Dict[str, Any]:
        settings = options_repo.get_option(self.db, OPT_SETTINGS, {})
        return settings if isinstance(settings, dict) else {}

    def _setting_int(self, settings: Dict[str, Any], name: str) -> int:
        try:
            return max(0, int(settings.get(name) or 0))
        except (TypeError, ValueError):
            return 0

    def calculate_annual_metrics(self, year: int) -> schemas.MetricsValues:
        self.require_pro("Public metrics")
        year = int(year)
        return self.remember(
            cache.item_key("calculated_metrics", year),
            lambda: self._calculate(year),
            ttl=CALCULATED_TTL,
        )

    def _calculate(self, year: int) -> schemas.MetricsValues:
        settings = self._settings()
        start, end = fiscal_year_bounds(year, settings.get("fiscal_year_end"))
        window = {"start_date": start, "end_date": end}

        total_revenue = treasury_repo.sum_by_type(self.db, account_type="revenue", **window)
        total_expenses = treasury_repo.sum_by_type(self.db, account_type="expense", **window)
        program = treasury_repo.sum_by_type(self.db, account_type="expense", categories=PROGRAM_CATEGORIES, **window)
        fundraising = treasury_repo.sum_by_type(
            self.db, account_type="expense", categories=FUNDRAISING_CATEGORIES, **window
        )
        admin = treasury_repo.sum_by_type(self.db, account_type="expense", categories=ADMIN_CATEGORIES, **window)

        states = [op.state_code for op in compliance_repo.list_state_operations(self.db, status="active")]
        logger.debug("metrics_calculated: year=%s start=%s end=%s", year, start, end)
        return schemas.MetricsValues(
            metric_year=year,
            total_revenue=round(total_revenue, 2),
            total_expenses=round(total_expenses, 2),
            program_expenses=round(program, 2),
            fundraising_expenses=round(fundraising, 2),
            admin_expenses=round(admin, 2),
            program_expense_ratio=_ratio(program, total_expenses),
            fundraising_ratio=_ratio(fundraising, total_expenses),
            admin_ratio=_ratio(admin, total_expenses),
            num_employees=self._setting_int(settings, "employee_count"),
            num_volunteers=volunteers_repo.count_volunteers_in_range(self.db, start=start, end=end),
            num_board_members=self._setting_int(settings, "board_member_count"),
            num_board_meetings=meetings_repo.count_meetings_between(self.db, start=start, end=end),
            num_programs=self._setting_int(settings, "program_count"),
            num_donors=donors_repo.count_donors_in_range(self.db, start=start, end=end),
            states_operating=states,
        )

    def save_metrics(self, metrics: Dict[str, Any]) -> schemas.MetricsResponse:
        check_capability(self.current_user, CAP_MANAGE_OPTIONS, "manage public metrics")
        self.require_pro("Public metrics")
        try:
            values = schemas.MetricsValues.model_validate(metrics)
        except ValidationError as exc:
            raise ServiceError("invalid_metrics", exc.errors()[0]["msg"])
        if values.metric_year <= 0:
            raise ServiceError("invalid_metrics", "A metric year is required.")

        with self.unit_of_work("save metrics"):
            row = metrics_repo.upsert(self.db, values.model_dump())
        cache.delete(cache.item_key("calculated_metrics", values.metric_year))
        logger.info("public_metrics_saved: year=%s", values.metric_year)
        return schemas.MetricsResponse.model_validate(row)

    def get_metrics(self, year: int) -> Optional[schemas.MetricsResponse]:
        if not is_pro_active(self.db):
            return None

        def _load():
            row = metrics_repo.get_by_year(self.db, int(year))
            return schemas.MetricsResponse.model_validate(row) if row else None

        return self.remember(cache.item_key(self.module, int(year)), _load)

    def get_all_metrics(self) -> List[schemas.MetricsResponse]:
        if not is_pro_active(self.db):
            return []
        return self.remember(
            cache.item_key(f"{self.module}_all", "list"),
            lambda: [schemas.MetricsResponse.model_validate(r) for r in metrics_repo.list_all(self.db)],
        )

    def set_sharing_preference(self, enabled: bool) -> bool:
        check_capability(self.current_user, CAP_MANAGE_OPTIONS, "manage public metrics")
        self.require_pro("Public metrics")
        with self.unit_of_work("update sharing preference", invalidate=[]):
            options_repo.update_option(self.db, OPT_SHARING, bool(enabled))
        return bool(enabled)

    def is_sharing_enabled(self) -> bool:
        return bool(options_repo.get_option(self.db, OPT_SHARING, False))

    def get_installation_id(self) -> str:
        installation_id = options_repo.get_option(self.db, OPT_INSTALLATION_ID)
        if not installation_id:
            installation_id = secrets.token_hex(16)
            with self.unit_of_work("store installation id", invalidate=[]):
                options_repo.update_option(self.db, OPT_INSTALLATION_ID, installation_id)
        return installation_id

    def _require_saved(self, year: int) -> schemas.MetricsResponse:
        metrics = self.get_metrics(year)
        if metrics is None:
            raise ServiceError("no_metrics", "No metrics found for this year.")
        return metrics

    def submit_metrics(self, year: int) -> bool:
        self.require_pro("Public metrics")
        if not self.is_sharing_enabled():
            raise ServiceError("sharing_disabled", "Metrics sharing is not enabled.")
        metrics = self._require_saved(year)

        payload = {name: getattr(metrics, name) for name in _SUBMISSION_FIELDS}
        payload["states_count"] = len(metrics.states_operating)
        payload["installation_id"] = self.get_installation_id()
        try:
            response = requests.post(f"{metrics_url()}/submit", json=payload, timeout=_REQUEST_TIMEOUT)
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.warning("metrics_submit_failed: year=%s error=%s", year, exc)
            raise ServiceError("request_failed", "Could not reach the metrics service.")

        with self.unit_of_work("stamp metrics submission"):
            metrics_repo.mark_submitted(self.db, int(year), datetime.now(timezone.utc))
        logger.info("public_metrics_submitted: year=%s", year)
        return True

    def get_benchmarks(self, filters: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        self.require_pro("Public metrics")
        try:
            response = requests.get(f"{metrics_url()}/benchmarks", params=filters or {}, timeout=_REQUEST_TIMEOUT)
            data = response.json()
        except requests.RequestException as exc:
            logger.warning("metrics_benchmarks_failed: error=%s", exc)
            raise ServiceError("request_failed", "Could not reach the benchmarking service.")
        except ValueError:
            data = None
        if not data or not isinstance(data, dict):
            raise ServiceError("invalid_response", "Invalid response from benchmarking service.")
        return data

    def export_metrics(self, year: int) -> Dict[str, Any]:
        self.require_pro("Public metrics")
        return self._require_saved(year).model_dump(mode="json")

    def get_widget_data(self, year: int) -> Dict[str, Any]:
        self.require_pro("Public metrics")
        metrics = self._require_saved(year)
        data = {name: getattr(metrics, name) for name in _WIDGET_FIELDS}
        data["organization_name"] = self._settings().get("organization_name") or ""
        data["year"] = metrics.metric_year
        return data

    def generate_embed_code(self, year: int) -> str:
        """HTML snippet for embedding the year's public figures; empty when unavailable."""
        try:
            widget = self.get_widget_data(year)
        except ServiceError as exc:
            logger.debug("metrics_embed_unavailable: year=%s code=%s", year, exc.code)
            return ""
        return _template_env().get_template("metrics_widget.html").render(**widget)
