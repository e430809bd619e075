from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class DonorCreate(BaseModel):
    person_id: Optional[int] = None
    organization_id: Optional[int] = None
    donor_type: str = "individual"
    donor_level: Optional[str] = None
    notes: Optional[str] = None


class DonorUpdate(BaseModel):
    donor_level: Optional[str] = None
    donor_status: Optional[str] = None
    notes: Optional[str] = None
    organization_id: Optional[int] = None


class DonorResponse(BaseModel):
    id: int
    person_id: Optional[int] = None
    organization_id: Optional[int] = None
    donor_type: str
    donor_level: Optional[str] = None
    donor_status: str
    total_donated: float
    first_donation_date: Optional[date] = None
    last_donation_date: Optional[date] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class DonationCreate(BaseModel):
    amount: Optional[float] = None
    donation_date: Optional[str] = None
    payment_method: Optional[str] = None
    fund_id: Optional[int] = None
    is_recurring: bool = False
    notes: Optional[str] = None


class DonationResponse(BaseModel):
    id: int
    donor_id: int
    donation_date: date
    amount: float
    payment_method: Optional[str] = None
    fund_id: Optional[int] = None
    is_recurring: bool
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
