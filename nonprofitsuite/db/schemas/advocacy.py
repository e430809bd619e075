from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class IssueCreate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    issue_type: Optional[str] = None
    jurisdiction: Optional[str] = None
    bill_number: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    position: Optional[str] = None
    current_stage: Optional[str] = None
    target_decision_date: Optional[str] = None
    talking_points: Optional[str] = None
    notes: Optional[str] = None


class IssueResponse(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    issue_type: str
    jurisdiction: Optional[str] = None
    bill_number: Optional[str] = None
    status: str
    priority: str
    position: Optional[str] = None
    current_stage: Optional[str] = None
    target_decision_date: Optional[date] = None
    decision_date: Optional[date] = None
    outcome: Optional[str] = None
    talking_points: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class CampaignCreate(BaseModel):
    campaign_name: Optional[str] = None
    campaign_type: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    call_to_action: Optional[str] = None
    goal_count: Optional[int] = None
    email_template: Optional[str] = None
    letter_template: Optional[str] = None
    talking_points: Optional[str] = None


class CampaignResponse(BaseModel):
    id: int
    issue_id: int
    campaign_name: str
    campaign_type: str
    description: Optional[str] = None
    status: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    call_to_action: Optional[str] = None
    goal_count: int
    action_count: int
    email_template: Optional[str] = None
    letter_template: Optional[str] = None
    talking_points: Optional[str] = None
    issue_title: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ActionCreate(BaseModel):
    person_id: Optional[int] = None
    action_type: Optional[str] = None
    action_date: Optional[str] = None
    target_name: Optional[str] = None
    target_office: Optional[str] = None
    outcome: Optional[str] = None
    notes: Optional[str] = None


class ActionResponse(BaseModel):
    id: int
    campaign_id: int
    person_id: Optional[int] = None
    action_type: str
    action_date: datetime
    target_name: Optional[str] = None
    target_office: Optional[str] = None
    outcome: Optional[str] = None
    notes: Optional[str] = None
    person_name: Optional[str] = None
    person_email: Optional[str] = None
    campaign_name: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
