from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class VolunteerCreate(BaseModel):
    person_id: Optional[int] = None
    skills: Optional[str] = None
    interests: Optional[str] = None
    availability: Optional[str] = None


class VolunteerResponse(BaseModel):
    id: int
    person_id: int
    application_status: str
    volunteer_status: str
    skills: Optional[str] = None
    interests: Optional[str] = None
    availability: Optional[str] = None
    total_hours: float
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class HoursCreate(BaseModel):
    hours: Optional[float] = None
    activity_date: Optional[str] = None
    description: Optional[str] = None
    program_id: Optional[int] = None


class HoursResponse(BaseModel):
    id: int
    volunteer_id: int
    activity_date: date
    hours: float
    description: str
    program_id: Optional[int] = None
    approved: bool
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class VolunteerStatusUpdate(BaseModel):
    status: str
