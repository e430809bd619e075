from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class MeetingCreate(BaseModel):
    title: Optional[str] = None
    meeting_type: Optional[str] = None
    meeting_date: Optional[str] = None
    location: Optional[str] = None
    agenda: Optional[str] = None


class MeetingResponse(BaseModel):
    id: int
    title: str
    meeting_type: str
    meeting_date: datetime
    location: Optional[str] = None
    agenda: Optional[str] = None
    status: str

    model_config = ConfigDict(from_attributes=True)


class TaskCreate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    assigned_to: Optional[int] = None
    due_date: Optional[str] = None
    priority: Optional[str] = None


class TaskStatusUpdate(BaseModel):
    status: str


class TaskResponse(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    assigned_to: Optional[int] = None
    due_date: Optional[date] = None
    status: str
    priority: str

    model_config = ConfigDict(from_attributes=True)
