from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator


class StateOperationCreate(BaseModel):
    state_code: str
    state_name: Optional[str] = None
    operation_type: Optional[str] = None
    registration_date: Optional[str] = None
    registration_number: Optional[str] = None
    status: Optional[str] = None
    registered_agent: Optional[str] = None
    registered_agent_address: Optional[str] = None
    annual_report_due: Optional[str] = None
    charitable_registration_number: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("state_code")
    @classmethod
    def _upper_code(cls, v: str):
        return (v or "").strip().upper()


class StateOperationUpdate(BaseModel):
    operation_type: Optional[str] = None
    registration_date: Optional[str] = None
    registration_number: Optional[str] = None
    status: Optional[str] = None
    registered_agent: Optional[str] = None
    registered_agent_address: Optional[str] = None
    annual_report_due: Optional[str] = None
    charitable_registration_number: Optional[str] = None
    notes: Optional[str] = None


class StateOperationResponse(BaseModel):
    id: int
    state_code: str
    state_name: str
    operation_type: Optional[str] = None
    registration_date: Optional[date] = None
    registration_number: Optional[str] = None
    status: str
    registered_agent: Optional[str] = None
    registered_agent_address: Optional[str] = None
    annual_report_due: Optional[date] = None
    charitable_registration_number: Optional[str] = None
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class RequirementUpdate(BaseModel):
    status: Optional[str] = None
    completed_date: Optional[str] = None
    next_due_date: Optional[str] = None
    confirmation_number: Optional[str] = None
    notes: Optional[str] = None


class RequirementResponse(BaseModel):
    id: int
    state_operation_id: int
    requirement_type: str
    requirement_name: str
    description: Optional[str] = None
    frequency: Optional[str] = None
    due_date: Optional[str] = None
    next_due_date: Optional[date] = None
    filing_method: Optional[str] = None
    fee_amount: Optional[float] = None
    agency: Optional[str] = None
    website_url: Optional[str] = None
    status: str
    completed_date: Optional[date] = None
    confirmation_number: Optional[str] = None
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ComplianceItemCreate(BaseModel):
    item_name: Optional[str] = None
    item_type: Optional[str] = None
    due_date: Optional[str] = None
    responsible_person_id: Optional[int] = None
    description: Optional[str] = None
    recurrence: Optional[str] = None


class ComplianceItemResponse(BaseModel):
    id: int
    item_name: str
    item_type: str
    due_date: date
    completion_date: Optional[date] = None
    responsible_person_id: Optional[int] = None
    status: str
    description: Optional[str] = None
    recurrence: str

    model_config = ConfigDict(from_attributes=True)
