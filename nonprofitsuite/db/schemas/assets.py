from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class AssetCreate(BaseModel):
    asset_type: Optional[str] = None
    asset_name: Optional[str] = None
    description: Optional[str] = None
    serial_number: Optional[str] = None
    acquisition_date: Optional[str] = None
    purchase_price: Optional[float] = None
    current_value: Optional[float] = None
    depreciation_method: Optional[str] = None
    useful_life_years: Optional[int] = None
    location: Optional[str] = None
    assigned_to: Optional[int] = None
    condition_rating: Optional[str] = None
    notes: Optional[str] = None


class AssetUpdate(BaseModel):
    asset_name: Optional[str] = None
    description: Optional[str] = None
    current_value: Optional[float] = None
    condition_rating: Optional[str] = None
    location: Optional[str] = None
    assigned_to: Optional[int] = None
    status: Optional[str] = None
    notes: Optional[str] = None


class AssetDispose(BaseModel):
    disposal_method: str
    disposal_value: float = 0.0


class AssetResponse(BaseModel):
    id: int
    asset_type: str
    asset_name: str
    description: Optional[str] = None
    serial_number: Optional[str] = None
    acquisition_date: Optional[date] = None
    purchase_price: Optional[float] = None
    current_value: Optional[float] = None
    depreciation_method: str
    useful_life_years: int
    accumulated_depreciation: float
    acquisition_method: str
    in_kind_donation_id: Optional[int] = None
    location: Optional[str] = None
    assigned_to: Optional[int] = None
    condition_rating: str
    status: str
    disposal_date: Optional[date] = None
    disposal_method: Optional[str] = None
    disposal_value: Optional[float] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class InKindCreate(BaseModel):
    donor_id: Optional[int] = None
    donation_date: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    quantity: Optional[float] = None
    unit: Optional[str] = None
    fair_market_value: Optional[float] = None
    valuation_method: Optional[str] = None
    appraised: Optional[bool] = None
    appraiser_name: Optional[str] = None
    condition_rating: Optional[str] = None
    location: Optional[str] = None
    restricted: Optional[bool] = None
    restriction_details: Optional[str] = None
    notes: Optional[str] = None


class InKindResponse(BaseModel):
    id: int
    donor_id: Optional[int] = None
    donation_date: date
    category: str
    description: str
    quantity: float
    unit: Optional[str] = None
    fair_market_value: float
    valuation_method: Optional[str] = None
    appraised: bool
    appraiser_name: Optional[str] = None
    condition_rating: Optional[str] = None
    location: Optional[str] = None
    restricted: bool
    restriction_details: Optional[str] = None
    receipt_sent: bool
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
