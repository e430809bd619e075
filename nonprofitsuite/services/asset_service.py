"""
Fixed-asset register with depreciation and disposal tracking.

Depreciation is computed from the acquisition date:

- ``straight_line``: ``original / life * years``
- ``declining_balance``: double-declining, ``original * (1 - (1 - min(2/life, 1)) ** years)``

Both are capped at the original value.
"""
import logging
from datetime import date
from typing import Any, Dict, List, Optional

from nonprofitsuite.api.permissions import can_manage_finances
from nonprofitsuite.db import models, schemas
from nonprofitsuite.db.repositories import assets as assets_repo
from nonprofitsuite.errors import ServiceError
from nonprofitsuite.services.base import BaseService
from nonprofitsuite.utils import cache
from nonprofitsuite.utils.pagination import parse_pagination_args
from nonprofitsuite.utils.sanitize import (
    absint,
    filter_allowed,
    parse_date,
    sanitize_text_field,
    sanitize_textarea_field,
    to_float,
)

logger = logging.getLogger(__name__)

DEPRECIATION_METHODS = ("straight_line", "declining_balance", "none")
ASSET_ORDERBY = ("id", "asset_name", "asset_type", "acquisition_date", "current_value", "created_at")
_UPDATE_FIELDS = {
    "asset_name": "%s",
    "description": "%s",
    "current_value": "%f",
    "condition_rating": "%s",
    "location": "%s",
    "assigned_to": "%d",
    "status": "%s",
    "notes": "%s",
}


def _original_value(asset) -> float:
    return float(asset.purchase_price or asset.current_value or 0.0)


def calculate_depreciation(asset, as_of: Optional[date] = None) -> float:
    """Accumulated depreciation of ``asset`` as of ``as_of`` (default today)."""
    life = asset.useful_life_years or 0
    method = asset.depreciation_method
    if not method or method == "none" or life <= 0 or asset.acquisition_date is None:
        return 0.0
    as_of = as_of or date.today()
    original = _original_value(asset)
    years = max(0, (as_of - asset.acquisition_date).days) / 365.0

    if method == "straight_line":
        return min(original / life * years, original)
    if method == "declining_balance":
        # lives under two years would push the factor below zero
        rate = min(2.0 / life, 1.0)
        return min(original * (1 - (1 - rate) ** years), original)
    return 0.0


class AssetService(BaseService):
    module = "assets"

    def create_asset(self, data: Dict[str, Any]) -> schemas.AssetResponse:
        can_manage_finances(self.current_user)
        asset_type = sanitize_text_field(data.get("asset_type"))
        asset_name = sanitize_text_field(data.get("asset_name"))
        if not asset_type or not asset_name:
            raise ServiceError("missing_required", "Asset type and name are required.")
        method = sanitize_text_field(data.get("depreciation_method")) or "straight_line"
        if method not in DEPRECIATION_METHODS:
            raise ServiceError("invalid_depreciation_method", "Invalid depreciation method.")

        purchase_price = data.get("purchase_price")
        current_value = data.get("current_value")
        with self.unit_of_work("create asset"):
            asset = assets_repo.create_asset(self.db, {
                "asset_type": asset_type,
                "asset_name": asset_name,
                "description": sanitize_textarea_field(data.get("description")) or None,
                "serial_number": sanitize_text_field(data.get("serial_number")) or None,
                "acquisition_date": parse_date(data.get("acquisition_date")) or date.today(),
                "acquisition_method": sanitize_text_field(data.get("acquisition_method")) or "purchased",
                "in_kind_donation_id": absint(data.get("in_kind_donation_id")) or None,
                "purchase_price": None if purchase_price is None else to_float(purchase_price),
                "current_value": None if current_value is None else to_float(current_value),
                "depreciation_method": method,
                "useful_life_years": absint(data.get("useful_life_years")) or 5,
                "location": sanitize_text_field(data.get("location")) or None,
                "assigned_to": absint(data.get("assigned_to")) or None,
                "condition_rating": sanitize_text_field(data.get("condition_rating")) or "good",
                "status": "active",
                "notes": sanitize_textarea_field(data.get("notes")) or None,
            })
        return schemas.AssetResponse.model_validate(asset)

    def get_asset(self, asset_id: int) -> schemas.AssetResponse:
        def _load():
            asset = assets_repo.get_asset(self.db, asset_id)
            return schemas.AssetResponse.model_validate(asset) if asset else None

        asset = self.remember(cache.item_key(self.module, asset_id), _load)
        if asset is None:
            raise self.not_found("Asset")
        return asset

    def get_assets(self, args: Optional[Dict[str, Any]] = None) -> schemas.Page:
        parsed = parse_pagination_args(args, ASSET_ORDERBY, default_orderby="asset_name", default_order="ASC")

        def _load():
            rows, total = assets_repo.list_assets(self.db, args=parsed)
            return self.to_page(rows, total, parsed, schemas.AssetResponse)

        return self.remember(cache.list_key(self.module, parsed.cache_args()), _load)

    def update_asset(self, asset_id: int, data: Dict[str, Any]) -> schemas.AssetResponse:
        can_manage_finances(self.current_user)
        values = filter_allowed(data, _UPDATE_FIELDS)
        if not values:
            raise ServiceError("no_data", "No valid fields to update.")
        asset = self._load_asset(asset_id)
        with self.unit_of_work("update asset"):
            for name, value in values.items():
                setattr(asset, name, value)
        return schemas.AssetResponse.model_validate(asset)

    def _load_asset(self, asset_id: int) -> models.Asset:
        asset = assets_repo.get_asset(self.db, asset_id)
        if asset is None:
            raise self.not_found("Asset")
        return asset

    def depreciate_asset(self, asset_id: int, as_of: Optional[date] = None) -> float:
        """Store and return the accumulated depreciation for an asset."""
        asset = self._load_asset(asset_id)
        depreciation = round(calculate_depreciation(asset, as_of), 2)
        with self.unit_of_work("depreciate asset"):
            asset.accumulated_depreciation = depreciation
        return depreciation

    def calculate_current_value(self, asset_id: int, as_of: Optional[date] = None) -> float:
        asset = self._load_asset(asset_id)
        return max(0.0, _original_value(asset) - calculate_depreciation(asset, as_of))

    def get_depreciation_schedule(self, as_of: Optional[date] = None) -> List[Dict[str, Any]]:
        schedule = []
        for asset in assets_repo.list_register(self.db):
            if not asset.depreciation_method or asset.depreciation_method == "none":
                continue
            depreciation = calculate_depreciation(asset, as_of)
            original = _original_value(asset)
            schedule.append({
                "asset_id": asset.id,
                "asset_name": asset.asset_name,
                "original_value": original,
                "depreciation": round(depreciation, 2),
                "current_value": round(max(0.0, original - depreciation), 2),
            })
        return schedule

    def dispose_asset(self, asset_id: int, method: str, value: float = 0.0) -> schemas.AssetResponse:
        can_manage_finances(self.current_user)
        asset = self._load_asset(asset_id)
        with self.unit_of_work("dispose asset"):
            asset.status = "disposed"
            asset.disposal_date = date.today()
            asset.disposal_method = sanitize_text_field(method) or None
            asset.disposal_value = to_float(value)
        return schemas.AssetResponse.model_validate(asset)

    def assign_asset(self, asset_id: int, person_id: int) -> schemas.AssetResponse:
        return self.update_asset(asset_id, {"assigned_to": person_id})

    def transfer_asset(self, asset_id: int, new_location: str) -> schemas.AssetResponse:
        return self.update_asset(asset_id, {"location": new_location})

    def get_asset_register(self) -> List[schemas.AssetResponse]:
        def _load():
            return [schemas.AssetResponse.model_validate(a) for a in assets_repo.list_register(self.db)]

        return self.remember(cache.list_key(self.module, {"register": True}), _load)

    def get_asset_summary(self) -> List[Dict[str, Any]]:
        rows = assets_repo.summary_by_type(self.db)
        return [{"asset_type": t, "count": int(c), "total_value": float(v or 0.0)} for t, c, v in rows]

    def get_retired_assets(self, year: Optional[int] = None) -> List[schemas.AssetResponse]:
        return [schemas.AssetResponse.model_validate(a) for a in assets_repo.list_retired(self.db, year=year)]

    def convert_donation_to_asset(self, donation_id: int) -> schemas.AssetResponse:
        """Register an in-kind donation as a donated asset at fair market value."""
        donation = assets_repo.get_in_kind(self.db, donation_id)
        if donation is None:
            raise self.not_found("Donation")
        return self.create_asset({
            "asset_type": donation.category,
            "asset_name": donation.description,
            "description": donation.description,
            "acquisition_date": donation.donation_date,
            "acquisition_method": "donated",
            "in_kind_donation_id": donation.id,
            "purchase_price": 0,
            "current_value": donation.fair_market_value,
            "condition_rating": donation.condition_rating,
            "location": donation.location,
        })
