from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict


class CalendarItemCreate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    item_type: Optional[str] = None
    source_module: Optional[str] = None
    source_id: Optional[int] = None
    start_datetime: Optional[str] = None
    end_datetime: Optional[str] = None
    all_day: bool = False
    recurrence: Optional[str] = None
    location: Optional[str] = None
    attendees: Optional[List[Any]] = None
    color: Optional[str] = None


class CalendarItemResponse(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    item_type: str
    source_module: str
    source_id: Optional[int] = None
    start_datetime: datetime
    end_datetime: Optional[datetime] = None
    all_day: bool
    recurrence: Optional[str] = None
    location: Optional[str] = None
    attendees: Optional[List[Any]] = None
    color: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
