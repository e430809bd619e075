"""
Donor management: donor records, donations and running totals.
"""
import logging
from typing import Any, Dict, List, Optional

from nonprofitsuite.api.permissions import can_manage_donors
from nonprofitsuite.db import schemas
from nonprofitsuite.db.repositories import donors as donors_repo
from nonprofitsuite.db.repositories import people as people_repo
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

DONOR_TYPES = ("individual", "organization", "foundation")
DONOR_LEVELS = {
    "bronze": "Bronze",
    "silver": "Silver",
    "gold": "Gold",
    "platinum": "Platinum",
}
DONOR_ORDERBY = ("id", "total_donated", "last_donation_date", "first_donation_date", "created_at")
_UPDATE_FIELDS = {
    "donor_level": "%s",
    "donor_status": "%s",
    "notes": "%s",
    "organization_id": "%d",
}


class DonorService(BaseService):
    """Service class for donor and donation operations."""

    module = "donors"

    def create_donor(self, data: Dict[str, Any]) -> schemas.DonorResponse:
        can_manage_donors(self.current_user)
        self.require_pro("Donor management")

        donor_type = sanitize_text_field(data.get("donor_type") or "individual")
        if donor_type not in DONOR_TYPES:
            raise ServiceError("invalid_donor_type", "Invalid donor type.")
        person_id = absint(data.get("person_id")) or None
        organization_id = absint(data.get("organization_id")) or None
        if not person_id and not organization_id:
            raise ServiceError("missing_required_field", "A person or organization is required.")
        if person_id and people_repo.get_person(self.db, person_id) is None:
            raise ServiceError("invalid_person_id", "Person not found.")

        level = sanitize_text_field(data.get("donor_level")) or None
        with self.unit_of_work("create donor"):
            donor = donors_repo.create_donor(self.db, {
                "person_id": person_id,
                "organization_id": organization_id,
                "donor_type": donor_type,
                "donor_level": level,
                "donor_status": "active",
                "notes": sanitize_textarea_field(data.get("notes")) or None,
            })
        logger.info("donor_created: id=%s type=%s", donor.id, donor_type)
        return schemas.DonorResponse.model_validate(donor)

    def get_donor(self, donor_id: int) -> schemas.DonorResponse:
        def _load():
            donor = donors_repo.get_donor(self.db, donor_id)
            return schemas.DonorResponse.model_validate(donor) if donor else None

        donor = self.remember(cache.item_key(self.module, donor_id), _load)
        if donor is None:
            raise self.not_found("Donor")
        return donor

    def get_donors(self, args: Optional[Dict[str, Any]] = None) -> schemas.Page:
        """List donors; status defaults to ``active``, largest givers first."""
        args = dict(args or {})
        args.setdefault("donor_status", "active")
        parsed = parse_pagination_args(args, DONOR_ORDERBY, default_orderby="total_donated", default_order="DESC")

        def _load():
            rows, total = donors_repo.list_donors(self.db, args=parsed)
            return self.to_page(rows, total, parsed, schemas.DonorResponse)

        return self.remember(cache.list_key(self.module, parsed.cache_args()), _load)

    def update_donor(self, donor_id: int, data: Dict[str, Any]) -> schemas.DonorResponse:
        can_manage_donors(self.current_user)
        values = filter_allowed(data, _UPDATE_FIELDS)
        if not values:
            raise ServiceError("no_data", "No valid fields to update.")
        donor = donors_repo.get_donor(self.db, donor_id)
        if donor is None:
            raise self.not_found("Donor")
        with self.unit_of_work("update donor"):
            donors_repo.update_donor(self.db, donor, values)
        return schemas.DonorResponse.model_validate(donor)

    def record_donation(self, donor_id: int, data: Dict[str, Any]) -> schemas.DonationResponse:
        """Insert a donation and refresh the donor's totals in one transaction."""
        can_manage_donors(self.current_user)

        if donors_repo.get_donor(self.db, donor_id) is None:
            raise ServiceError("invalid_donor_id", "Invalid donor.")
        amount = to_float(data.get("amount"))
        if amount <= 0:
            raise ServiceError("invalid_amount", "Donation amount must be greater than zero.")
        if not data.get("donation_date"):
            raise ServiceError("missing_required_field", "Donation date is required.")
        donation_date = parse_date(data.get("donation_date"))
        if donation_date is None:
            raise ServiceError("invalid_date", "Invalid donation date.")

        with self.unit_of_work("record donation"):
            donation = donors_repo.insert_donation(self.db, {
                "donor_id": donor_id,
                "donation_date": donation_date,
                "amount": amount,
                "payment_method": sanitize_text_field(data.get("payment_method")) or None,
                "fund_id": absint(data.get("fund_id")) or None,
                "is_recurring": bool(data.get("is_recurring")),
                "notes": sanitize_textarea_field(data.get("notes")) or None,
            })
            donors_repo.recompute_donor_totals(self.db, donor_id)
        logger.info("donation_recorded: donor_id=%s amount=%.2f", donor_id, amount)
        return schemas.DonationResponse.model_validate(donation)

    def get_donation_history(self, donor_id: int) -> List[schemas.DonationResponse]:
        def _load():
            rows = donors_repo.list_donations(self.db, donor_id=donor_id)
            return [schemas.DonationResponse.model_validate(r) for r in rows]

        return self.remember(cache.list_key(self.module, {"history": donor_id}), _load)

    @staticmethod
    def get_donor_levels() -> Dict[str, str]:
        return dict(DONOR_LEVELS)
