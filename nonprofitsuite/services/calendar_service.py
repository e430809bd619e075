"""
Unified calendar: items entered directly plus items synced from meetings and
compliance due dates, with iCalendar export.

Stored datetimes are naive and treated as UTC on export.
"""
import logging
from datetime import date, datetime, time, timezone
from typing import Any, Dict, Iterable, List, Optional

from nonprofitsuite.api.permissions import can_manage_calendar
from nonprofitsuite.db import schemas
from nonprofitsuite.db.repositories import calendar as calendar_repo
from nonprofitsuite.db.repositories import compliance as compliance_repo
from nonprofitsuite.db.repositories import meetings as meetings_repo
from nonprofitsuite.errors import ServiceError
from nonprofitsuite.services.base import BaseService
from nonprofitsuite.utils import cache
from nonprofitsuite.utils.license import is_pro_active
from nonprofitsuite.utils.sanitize import (
    absint,
    kses_post,
    parse_date,
    parse_datetime,
    sanitize_text_field,
    strip_tags,
)

logger = logging.getLogger(__name__)

MEETING_COLOR = "#2563eb"
COMPLIANCE_COLOR = "#ef4444"
ICAL_PRODID = "-//NonprofitSuite//Calendar//EN"
_ICAL_TIME = "%Y%m%dT%H%M%SZ"


def ical_escape(value: str) -> str:
    return (
        value.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\r\n", "\\n")
        .replace("\n", "\\n")
        .replace("\r", "\\n")
    )


def _field(item: Any, name: str) -> Any:
    if isinstance(item, dict):
        return item.get(name)
    return getattr(item, name, None)


def export_ical(items: Iterable[Any], now: Optional[datetime] = None) -> str:
    """Render calendar items as an RFC 5545 VCALENDAR with CRLF line endings."""
    stamp = (now or datetime.now(timezone.utc)).strftime(_ICAL_TIME)
    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{ICAL_PRODID}",
        "CALSCALE:GREGORIAN",
    ]
    for item in items:
        start = parse_datetime(_field(item, "start_datetime"))
        if start is None:
            continue
        lines.append("BEGIN:VEVENT")
        lines.append(f"UID:{_field(item, 'id')}@nonprofitsuite")
        lines.append(f"DTSTAMP:{stamp}")
        lines.append(f"DTSTART:{start.strftime(_ICAL_TIME)}")
        end = parse_datetime(_field(item, "end_datetime"))
        if end is not None:
            lines.append(f"DTEND:{end.strftime(_ICAL_TIME)}")
        lines.append(f"SUMMARY:{ical_escape(_field(item, 'title') or '')}")
        description = _field(item, "description")
        if description:
            lines.append(f"DESCRIPTION:{ical_escape(strip_tags(description))}")
        location = _field(item, "location")
        if location:
            lines.append(f"LOCATION:{ical_escape(location)}")
        lines.append("END:VEVENT")
    lines.append("END:VCALENDAR")
    return "\r\n".join(lines) + "\r\n"


class CalendarService(BaseService):
    module = "calendar"

    def create_item(self, data: Dict[str, Any]) -> schemas.CalendarItemResponse:
        can_manage_calendar(self.current_user)
        self.require_pro("Calendar")

        title = sanitize_text_field(data.get("title"))
        item_type = sanitize_text_field(data.get("item_type"))
        source_module = sanitize_text_field(data.get("source_module"))
        start = parse_datetime(data.get("start_datetime") or data.get("start_date"))
        if not title or not item_type or not source_module or start is None:
            raise ServiceError(
                "missing_required", "Title, item type, source module and start date are required."
            )
        end = parse_datetime(data.get("end_datetime") or data.get("end_date"))
        if end is not None and end < start:
            raise ServiceError("invalid_date_range", "End date cannot be before start date.")

        with self.unit_of_work("create calendar item"):
            item = self._insert(data, title=title, item_type=item_type, source_module=source_module,
                                start=start, end=end)
        return schemas.CalendarItemResponse.model_validate(item)

    def _insert(self, data: Dict[str, Any], *, title: str, item_type: str, source_module: str,
                start: datetime, end: Optional[datetime]):
        attendees = data.get("attendees")
        return calendar_repo.create_item(self.db, {
            "title": title,
            "description": kses_post(data.get("description")) or None,
            "item_type": item_type,
            "source_module": source_module,
            "source_id": absint(data.get("source_id")) or None,
            "start_datetime": start,
            "end_datetime": end,
            "all_day": bool(data.get("all_day")),
            "recurrence": sanitize_text_field(data.get("recurrence")) or None,
            "location": sanitize_text_field(data.get("location")) or None,
            "attendees": list(attendees) if attendees else None,
            "color": sanitize_text_field(data.get("color")) or None,
            "created_by": self.user_id,
        })

    def get_items(self, start_date: Any, end_date: Any,
                  filters: Optional[Dict[str, Any]] = None) -> List[schemas.CalendarItemResponse]:
        """Items overlapping the inclusive ``[start_date, end_date]`` day range."""
        self.require_pro("Calendar")
        start_day = parse_date(start_date)
        end_day = parse_date(end_date)
        if start_day is None or end_day is None:
            raise ServiceError("invalid_date", "Start and end dates must be YYYY-MM-DD.")
        filters = filters or {}
        item_type = sanitize_text_field(filters.get("item_type")) or None
        source_module = sanitize_text_field(filters.get("source_module")) or None

        def _load():
            rows = calendar_repo.list_overlapping(
                self.db,
                start=datetime.combine(start_day, time.min),
                end=datetime.combine(end_day, time(23, 59, 59)),
                item_type=item_type,
                source_module=source_module,
            )
            return [schemas.CalendarItemResponse.model_validate(r) for r in rows]

        key_args = {"start": start_day, "end": end_day, "item_type": item_type, "source_module": source_module}
        return self.remember(cache.list_key(self.module, key_args), _load)

    def sync_all(self) -> int:
        """Create calendar items for upcoming meetings and open compliance items."""
        can_manage_calendar(self.current_user)
        if not is_pro_active(self.db):
            return 0
        today = date.today()
        synced = 0
        with self.unit_of_work("sync calendar"):
            for meeting in meetings_repo.list_upcoming_meetings(self.db, since=datetime.combine(today, time.min)):
                if calendar_repo.exists_for_source(self.db, source_module="meetings", source_id=meeting.id):
                    continue
                self._insert(
                    {"source_id": meeting.id, "location": meeting.location, "color": MEETING_COLOR},
                    title=meeting.title, item_type="meeting", source_module="meetings",
                    start=meeting.meeting_date, end=None,
                )
                synced += 1
            for item in compliance_repo.list_open_items_from(self.db, start=today):
                if calendar_repo.exists_for_source(self.db, source_module="compliance", source_id=item.id):
                    continue
                self._insert(
                    {"source_id": item.id, "all_day": True, "color": COMPLIANCE_COLOR,
                     "description": item.description},
                    title=item.item_name, item_type="compliance", source_module="compliance",
                    start=datetime.combine(item.due_date, time(23, 59, 59)), end=None,
                )
                synced += 1
        logger.info("calendar_synced: created=%d", synced)
        return synced

    @staticmethod
    def export_ical(items: Iterable[Any]) -> str:
        return export_ical(items)
