"""
Unified calendar API endpoints, including the iCalendar feed.
"""
from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.responses import Response
from sqlalchemy.orm import Session

from nonprofitsuite.api.deps import get_current_user_context
from nonprofitsuite.db import schemas
from nonprofitsuite.db.database import get_db
from nonprofitsuite.services.calendar_service import CalendarService

router = APIRouter(prefix="/calendar", tags=["calendar"])


def _service(db: Session, user_context) -> CalendarService:
    _user, ctx = user_context
    return CalendarService(db, ctx)


@router.get("/items", response_model=list[schemas.CalendarItemResponse])
def list_items(
    start_date: str,
    end_date: str,
    item_type: Optional[str] = None,
    source_module: Optional[str] = None,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    filters = {"item_type": item_type, "source_module": source_module}
    return _service(db, user_context).get_items(start_date, end_date, filters)


@router.post("/items", response_model=schemas.CalendarItemResponse, status_code=status.HTTP_201_CREATED)
def create_item(
    payload: schemas.CalendarItemCreate,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    return _service(db, user_context).create_item(payload.model_dump(exclude_unset=True))


@router.post("/sync")
def sync_calendar(db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    return {"synced": _service(db, user_context).sync_all()}


@router.get("/export.ics")
def export_ics(
    start_date: str,
    end_date: str,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    items = _service(db, user_context).get_items(start_date, end_date)
    return Response(
        content=CalendarService.export_ical(items),
        media_type="text/calendar",
        headers={"Content-Disposition": 'attachment; filename="nonprofitsuite.ics"'},
    )
