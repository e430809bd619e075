"""
Meeting and task repositories.
"""
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from nonprofitsuite.db import models
from nonprofitsuite.db.repositories.common import get_by_id, insert


def create_meeting(db: Session, values: Dict[str, Any]) -> models.Meeting:
    return insert(db, models.Meeting, values)


def list_upcoming_meetings(db: Session, *, since: datetime, limit: Optional[int] = None) -> List[models.Meeting]:
    q = (
        db.query(models.Meeting)
        .filter(models.Meeting.meeting_date >= since, models.Meeting.status != "cancelled")
        .order_by(models.Meeting.meeting_date.asc())
    )
    if limit is not None:
        q = q.limit(limit)
    return q.all()


def count_meetings_between(db: Session, *, start: date, end: date) -> int:
    return (
        db.query(models.Meeting)
        .filter(
            models.Meeting.meeting_date >= datetime.combine(start, datetime.min.time()),
            models.Meeting.meeting_date <= datetime.combine(end, datetime.max.time()),
        )
        .count()
    )


def create_task(db: Session, values: Dict[str, Any]) -> models.Task:
    return insert(db, models.Task, values)


def get_task(db: Session, task_id: int) -> Optional[models.Task]:
    return get_by_id(db, models.Task, task_id)


def list_user_tasks(db: Session, *, user_id: int, include_completed: bool = False) -> List[models.Task]:
    q = db.query(models.Task).filter(models.Task.assigned_to == user_id)
    if not include_completed:
        q = q.filter(models.Task.status != "completed")
    return q.order_by(models.Task.due_date.asc(), models.Task.id.asc()).all()
