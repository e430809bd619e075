from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ReportSubmit(BaseModel):
    category: Optional[str] = None
    subject: Optional[str] = None
    description: Optional[str] = None
    incident_date: Optional[str] = None
    location: Optional[str] = None
    people_involved: Optional[str] = None
    evidence_description: Optional[str] = None
    priority: Optional[str] = None


class ReportUpdate(BaseModel):
    status: Optional[str] = None
    priority: Optional[str] = None
    assigned_to: Optional[int] = None
    investigation_notes: Optional[str] = None
    resolution: Optional[str] = None
    resolved_date: Optional[str] = None
    followup_required: Optional[bool] = None


class ReportResponse(BaseModel):
    id: int
    report_number: str
    category: str
    subject: Optional[str] = None
    description: str
    incident_date: Optional[date] = None
    location: Optional[str] = None
    people_involved: Optional[str] = None
    evidence_description: Optional[str] = None
    status: str
    priority: str
    assigned_to: Optional[int] = None
    investigation_notes: Optional[str] = None
    resolution: Optional[str] = None
    resolved_date: Optional[date] = None
    followup_required: bool
    submitted_date: datetime

    model_config = ConfigDict(from_attributes=True)


class ReportStatus(BaseModel):
    report_number: str
    status: str
    status_label: str
    submitted_date: datetime
