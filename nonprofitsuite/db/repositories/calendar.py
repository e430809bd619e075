"""
Calendar item repository.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from nonprofitsuite.db import models
from nonprofitsuite.db.repositories.common import insert


def create_item(db: Session, values: Dict[str, Any]) -> models.CalendarItem:
    return insert(db, models.CalendarItem, values)


def list_overlapping(
    db: Session,
    *,
    start: datetime,
    end: datetime,
    item_type: Optional[str] = None,
    source_module: Optional[str] = None,
) -> List[models.CalendarItem]:
    """Items starting before ``end`` whose end (if any) is not before ``start``."""
    q = db.query(models.CalendarItem).filter(
        models.CalendarItem.start_datetime <= end,
        or_(models.CalendarItem.end_datetime.is_(None), models.CalendarItem.end_datetime >= start),
    )
    if item_type:
        q = q.filter(models.CalendarItem.item_type == item_type)
    if source_module:
        q = q.filter(models.CalendarItem.source_module == source_module)
    return q.order_by(models.CalendarItem.start_datetime.asc()).all()


def exists_for_source(db: Session, *, source_module: str, source_id: int) -> bool:
    return (
        db.query(models.CalendarItem.id)
        .filter(
            models.CalendarItem.source_module == source_module,
            models.CalendarItem.source_id == source_id,
        )
        .first()
        is not None
    )
