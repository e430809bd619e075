"""In-kind (non-cash) donation tracking."""
from datetime import date
from typing import Any, Dict, Optional

from nonprofitsuite.api.permissions import can_manage_finances
from nonprofitsuite.db import schemas
from nonprofitsuite.db.repositories import assets as assets_repo
from nonprofitsuite.errors import ServiceError
from nonprofitsuite.services.base import BaseService
from nonprofitsuite.utils import cache
from nonprofitsuite.utils.pagination import parse_pagination_args
from nonprofitsuite.utils.sanitize import absint, parse_date, sanitize_text_field, sanitize_textarea_field, to_float

IN_KIND_CATEGORIES = {
    "goods": "Goods",
    "services": "Professional Services",
    "equipment": "Equipment",
    "facilities": "Use of Facilities",
    "vehicles": "Vehicles",
    "other": "Other",
}
IN_KIND_ORDERBY = ("id", "donation_date", "fair_market_value", "category")


class InKindService(BaseService):
    module = "in_kind"

    def record_donation(self, data: Dict[str, Any]) -> schemas.InKindResponse:
        can_manage_finances(self.current_user)
        category = sanitize_text_field(data.get("category"))
        description = sanitize_textarea_field(data.get("description"))
        if not category or not description:
            raise ServiceError("missing_required", "Category and description are required.")
        fair_market_value = to_float(data.get("fair_market_value"))
        if fair_market_value < 0:
            raise ServiceError("invalid_amount", "Fair market value cannot be negative.")

        with self.unit_of_work("record in-kind donation"):
            row = assets_repo.create_in_kind(self.db, {
                "donor_id": absint(data.get("donor_id")) or None,
                "donation_date": parse_date(data.get("donation_date")) or date.today(),
                "category": category,
                "description": description,
                "quantity": to_float(data.get("quantity"), 1.0) or 1.0,
                "unit": sanitize_text_field(data.get("unit")) or None,
                "fair_market_value": fair_market_value,
                "valuation_method": sanitize_text_field(data.get("valuation_method")) or None,
                "appraised": bool(data.get("appraised")),
                "appraiser_name": sanitize_text_field(data.get("appraiser_name")) or None,
                "condition_rating": sanitize_text_field(data.get("condition_rating")) or None,
                "location": sanitize_text_field(data.get("location")) or None,
                "restricted": bool(data.get("restricted")),
                "restriction_details": sanitize_textarea_field(data.get("restriction_details")) or None,
                "notes": sanitize_textarea_field(data.get("notes")) or None,
            })
        return schemas.InKindResponse.model_validate(row)

    def get_donation(self, donation_id: int) -> schemas.InKindResponse:
        row = assets_repo.get_in_kind(self.db, donation_id)
        if row is None:
            raise self.not_found("Donation")
        return schemas.InKindResponse.model_validate(row)

    def get_donations(self, args: Optional[Dict[str, Any]] = None) -> schemas.Page:
        args = dict(args or {})
        for key in ("date_from", "date_to"):
            if key in args:
                args[key] = parse_date(args[key])
        parsed = parse_pagination_args(args, IN_KIND_ORDERBY, default_orderby="donation_date")

        def _load():
            rows, total = assets_repo.list_in_kind(self.db, args=parsed)
            return self.to_page(rows, total, parsed, schemas.InKindResponse)

        return self.remember(cache.list_key(self.module, parsed.cache_args()), _load)

    def calculate_annual_in_kind_value(self, year: int) -> float:
        return assets_repo.sum_in_kind_value(self.db, start=date(year, 1, 1), end=date(year, 12, 31))

    @staticmethod
    def get_categories() -> Dict[str, str]:
        return dict(IN_KIND_CATEGORIES)
