"""Board meetings and the tasks assigned out of them."""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from nonprofitsuite.api.permissions import check_capability
from nonprofitsuite.db import schemas
from nonprofitsuite.db.repositories import meetings as meetings_repo
from nonprofitsuite.errors import ServiceError
from nonprofitsuite.services.base import BaseService
from nonprofitsuite.utils import cache
from nonprofitsuite.utils.capabilities import CAP_EDIT_POSTS
from nonprofitsuite.utils.sanitize import absint, parse_date, parse_datetime, sanitize_text_field, sanitize_textarea_field

logger = logging.getLogger(__name__)

MEETING_TYPES = {
    "board": "Board Meeting",
    "committee": "Committee Meeting",
    "annual": "Annual Meeting",
    "special": "Special Meeting",
}
TASK_STATUSES = ("not_started", "in_progress", "completed")
TASK_PRIORITIES = ("low", "medium", "high", "urgent")


class MeetingService(BaseService):
    module = "meetings"

    def create_meeting(self, data: Dict[str, Any]) -> schemas.MeetingResponse:
        check_capability(self.current_user, CAP_EDIT_POSTS, "manage meetings")
        title = sanitize_text_field(data.get("title"))
        meeting_date = parse_datetime(data.get("meeting_date"))
        if not title or meeting_date is None:
            raise ServiceError("missing_required", "Title and meeting date are required.")
        meeting_type = sanitize_text_field(data.get("meeting_type")) or "board"
        if meeting_type not in MEETING_TYPES:
            raise ServiceError("invalid_meeting_type", "Invalid meeting type.")

        with self.unit_of_work("create meeting"):
            meeting = meetings_repo.create_meeting(self.db, {
                "title": title,
                "meeting_type": meeting_type,
                "meeting_date": meeting_date,
                "location": sanitize_text_field(data.get("location")) or None,
                "agenda": sanitize_textarea_field(data.get("agenda")) or None,
                "status": "scheduled",
            })
        return schemas.MeetingResponse.model_validate(meeting)

    def get_upcoming_meetings(self, limit: int = 5) -> List[schemas.MeetingResponse]:
        now = datetime.now().replace(second=0, microsecond=0)

        def _load():
            rows = meetings_repo.list_upcoming_meetings(self.db, since=now, limit=limit)
            return [schemas.MeetingResponse.model_validate(r) for r in rows]

        return self.remember(cache.list_key(self.module, {"upcoming": limit, "since": now}), _load)


class TaskService(BaseService):
    module = "tasks"

    def create_task(self, data: Dict[str, Any]) -> schemas.TaskResponse:
        check_capability(self.current_user, CAP_EDIT_POSTS, "manage tasks")
        title = sanitize_text_field(data.get("title"))
        if not title:
            raise ServiceError("missing_required", "Task title is required.")
        priority = sanitize_text_field(data.get("priority")) or "medium"
        if priority not in TASK_PRIORITIES:
            raise ServiceError("invalid_priority", "Invalid task priority.")

        with self.unit_of_work("create task"):
            task = meetings_repo.create_task(self.db, {
                "title": title,
                "description": sanitize_textarea_field(data.get("description")) or None,
                "assigned_to": absint(data.get("assigned_to")) or None,
                "due_date": parse_date(data.get("due_date")),
                "status": "not_started",
                "priority": priority,
                "source_module": sanitize_text_field(data.get("source_module")) or None,
                "source_id": absint(data.get("source_id")) or None,
            })
        return schemas.TaskResponse.model_validate(task)

    def update_task_status(self, task_id: int, status: str) -> schemas.TaskResponse:
        status = sanitize_text_field(status)
        if status not in TASK_STATUSES:
            raise ServiceError("invalid_status", "Invalid task status.")
        task = meetings_repo.get_task(self.db, task_id)
        if task is None:
            raise self.not_found("Task")
        # assignees may move their own tasks along
        if task.assigned_to is None or task.assigned_to != self.user_id:
            check_capability(self.current_user, CAP_EDIT_POSTS, "update tasks")
        with self.unit_of_work("update task status"):
            task.status = status
        return schemas.TaskResponse.model_validate(task)

    def get_user_tasks(self, user_id: Optional[int] = None) -> List[schemas.TaskResponse]:
        user_id = user_id or self.user_id
        if not user_id:
            return []

        def _load():
            rows = meetings_repo.list_user_tasks(self.db, user_id=user_id)
            return [schemas.TaskResponse.model_validate(r) for r in rows]

        return self.remember(cache.list_key(self.module, {"user_id": user_id}), _load)
