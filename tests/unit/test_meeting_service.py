from datetime import datetime, timedelta

import pytest

from nonprofitsuite.errors import ServiceError
from nonprofitsuite.services.meeting_service import MeetingService, TaskService


def _when(days):
    return (datetime.now() + timedelta(days=days)).strftime("%Y-%m-%d %H:%M")


def test_upcoming_meetings_are_ordered_and_limited(db, editor_ctx):
    svc = MeetingService(db, editor_ctx)
    svc.create_meeting({"title": "Past", "meeting_date": _when(-3)})
    later = svc.create_meeting({"title": "Later", "meeting_date": _when(10)})
    sooner = svc.create_meeting({"title": "Sooner", "meeting_date": _when(2), "meeting_type": "committee"})

    upcoming = svc.get_upcoming_meetings()
    assert [m.id for m in upcoming] == [sooner.id, later.id]
    assert [m.id for m in svc.get_upcoming_meetings(limit=1)] == [sooner.id]


def test_meeting_validation(db, editor_ctx, subscriber_ctx):
    with pytest.raises(ServiceError) as exc:
        MeetingService(db, editor_ctx).create_meeting({"title": "No date"})
    assert exc.value.code == "missing_required"
    with pytest.raises(ServiceError) as exc:
        MeetingService(db, editor_ctx).create_meeting({"title": "x", "meeting_date": _when(1), "meeting_type": "party"})
    assert exc.value.code == "invalid_meeting_type"
    with pytest.raises(ServiceError) as exc:
        MeetingService(db, subscriber_ctx).create_meeting({"title": "x", "meeting_date": _when(1)})
    assert exc.value.code == "permission_denied"


def test_assignee_can_move_own_task(db, editor_ctx, subscriber_ctx):
    task = TaskService(db, editor_ctx).create_task({"title": "Draft minutes", "assigned_to": subscriber_ctx["id"]})
    assert task.status == "not_started"

    mine = TaskService(db, subscriber_ctx)
    assert [t.id for t in mine.get_user_tasks()] == [task.id]
    assert mine.update_task_status(task.id, "in_progress").status == "in_progress"


def test_others_need_edit_rights(db, editor_ctx, subscriber_ctx, author_ctx):
    task = TaskService(db, editor_ctx).create_task({"title": "Budget", "assigned_to": author_ctx["id"]})
    with pytest.raises(ServiceError) as exc:
        TaskService(db, subscriber_ctx).update_task_status(task.id, "completed")
    assert exc.value.code == "permission_denied"
    assert TaskService(db, editor_ctx).update_task_status(task.id, "completed").status == "completed"


def test_task_validation(db, editor_ctx):
    svc = TaskService(db, editor_ctx)
    with pytest.raises(ServiceError) as exc:
        svc.create_task({"title": "x", "priority": "whenever"})
    assert exc.value.code == "invalid_priority"
    task = svc.create_task({"title": "x"})
    with pytest.raises(ServiceError) as exc:
        svc.update_task_status(task.id, "abandoned")
    assert exc.value.code == "invalid_status"
    with pytest.raises(ServiceError) as exc:
        svc.update_task_status(9999, "completed")
    assert exc.value.code == "not_found"
