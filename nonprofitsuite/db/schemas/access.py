from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class CpaAccessCreate(BaseModel):
    user_id: int
    firm_name: Optional[str] = None
    contact_name: Optional[str] = None
    contact_email: Optional[str] = None
    phone: Optional[str] = None
    access_level: Optional[str] = None
    expiration_date: Optional[str] = None
    notes: Optional[str] = None


class CpaAccessResponse(BaseModel):
    id: int
    user_id: int
    firm_name: Optional[str] = None
    contact_name: str
    contact_email: Optional[str] = None
    phone: Optional[str] = None
    access_level: str
    granted_date: datetime
    expiration_date: Optional[date] = None
    status: str
    revoked_date: Optional[datetime] = None
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class LegalAccessCreate(BaseModel):
    user_id: int
    firm_name: Optional[str] = None
    attorney_name: Optional[str] = None
    attorney_email: Optional[str] = None
    attorney_phone: Optional[str] = None
    bar_number: Optional[str] = None
    specialization: Optional[str] = None
    access_level: Optional[str] = None
    expiration_date: Optional[str] = None
    notes: Optional[str] = None


class LegalAccessResponse(BaseModel):
    id: int
    user_id: int
    firm_name: Optional[str] = None
    attorney_name: str
    attorney_email: Optional[str] = None
    attorney_phone: Optional[str] = None
    bar_number: Optional[str] = None
    specialization: Optional[str] = None
    access_level: str
    granted_date: datetime
    expiration_date: Optional[date] = None
    status: str
    revoked_date: Optional[datetime] = None
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
