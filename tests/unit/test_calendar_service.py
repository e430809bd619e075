from datetime import date, datetime, timedelta, timezone

import pytest

from nonprofitsuite.errors import ServiceError
from nonprofitsuite.services.calendar_service import CalendarService, export_ical, ical_escape
from nonprofitsuite.services.compliance_service import ComplianceService
from nonprofitsuite.services.meeting_service import MeetingService


def test_ical_escape():
    assert ical_escape("a;b,c\\d\ne") == "a\\;b\\,c\\\\d\\ne"


def test_export_ical_shape():
    items = [
        {"id": 1, "title": "Board meeting, Q1", "start_datetime": "2026-03-01 18:00:00",
         "end_datetime": "2026-03-01 20:00:00", "description": "<p>Agenda; budget</p>", "location": "Hall"},
        {"id": 2, "title": "No start"},
    ]
    text = export_ical(items, now=datetime(2026, 2, 1, 12, 0, tzinfo=timezone.utc))
    lines = text.split("\r\n")

    assert lines[0] == "BEGIN:VCALENDAR"
    assert "PRODID:-//NonprofitSuite//Calendar//EN" in lines
    assert text.endswith("END:VCALENDAR\r\n")
    assert lines.count("BEGIN:VEVENT") == 1
    assert "UID:1@nonprofitsuite" in lines
    assert "DTSTAMP:20260201T120000Z" in lines
    assert "DTSTART:20260301T180000Z" in lines
    assert "DTEND:20260301T200000Z" in lines
    assert "SUMMARY:Board meeting\\, Q1" in lines
    assert "DESCRIPTION:Agenda\\; budget" in lines
    assert "LOCATION:Hall" in lines


def test_create_item_validation(db, editor_ctx):
    svc = CalendarService(db, editor_ctx)
    with pytest.raises(ServiceError) as exc:
        svc.create_item({"title": "Gala", "item_type": "event"})
    assert exc.value.code == "missing_required"
    with pytest.raises(ServiceError) as exc:
        svc.create_item({"title": "Gala", "item_type": "event", "source_module": "events",
                         "start_datetime": "2026-05-02 18:00", "end_datetime": "2026-05-01 18:00"})
    assert exc.value.code == "invalid_date_range"


def test_items_overlapping_range(db, editor_ctx):
    svc = CalendarService(db, editor_ctx)
    gala = svc.create_item({"title": "Gala", "item_type": "event", "source_module": "events",
                            "start_datetime": "2026-05-01 18:00", "end_datetime": "2026-05-03 01:00",
                            "attendees": [1, 2]})
    svc.create_item({"title": "Retreat", "item_type": "event", "source_module": "events",
                     "start_datetime": "2026-06-10 09:00"})

    may = svc.get_items("2026-05-02", "2026-05-31")
    assert [i.id for i in may] == [gala.id]
    assert may[0].attendees == [1, 2]
    assert len(svc.get_items("2026-01-01", "2026-12-31")) == 2
    assert svc.get_items("2026-01-01", "2026-12-31", {"item_type": "meeting"}) == []

    with pytest.raises(ServiceError) as exc:
        svc.get_items("May", "2026-05-31")
    assert exc.value.code == "invalid_date"


def test_sync_pulls_meetings_and_compliance_once(db, admin_ctx):
    tomorrow = datetime.now() + timedelta(days=1)
    MeetingService(db, admin_ctx).create_meeting({"title": "Board", "meeting_date": tomorrow.strftime("%Y-%m-%d %H:%M")})
    ComplianceService(db, admin_ctx).create_item({"item_name": "990 filing",
                                                  "due_date": (date.today() + timedelta(days=10)).isoformat()})
    svc = CalendarService(db, admin_ctx)

    assert svc.sync_all() == 2
    assert svc.sync_all() == 0

    items = svc.get_items(date.today().isoformat(), (date.today() + timedelta(days=30)).isoformat())
    sources = sorted(i.source_module for i in items)
    assert sources == ["compliance", "meetings"]
    compliance_item = next(i for i in items if i.source_module == "compliance")
    assert compliance_item.all_day is True
    assert compliance_item.color == "#ef4444"


def test_sync_is_a_no_op_without_pro(db, admin_ctx, free_tier):
    assert CalendarService(db, admin_ctx).sync_all() == 0


def test_calendar_requires_pro(db, editor_ctx, free_tier):
    with pytest.raises(ServiceError) as exc:
        CalendarService(db, editor_ctx).get_items("2026-01-01", "2026-01-31")
    assert exc.value.code == "pro_required"
