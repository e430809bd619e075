"""
Repositories for donors and their donations.
"""
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from nonprofitsuite.db import models
from nonprofitsuite.utils.pagination import PaginationArgs


def create_donor(db: Session, values: Dict[str, Any]) -> models.Donor:
    donor = models.Donor(**values)
    db.add(donor)
    db.flush()
    return donor


def get_donor(db: Session, donor_id: int) -> Optional[models.Donor]:
    return db.get(models.Donor, donor_id)


def list_donors(db: Session, *, args: PaginationArgs) -> Tuple[List[models.Donor], int]:
    q = db.query(models.Donor)
    filters = args.filters
    if filters.get("donor_status"):
        q = q.filter(models.Donor.donor_status == filters["donor_status"])
    if filters.get("donor_type"):
        q = q.filter(models.Donor.donor_type == filters["donor_type"])
    if filters.get("donor_level"):
        q = q.filter(models.Donor.donor_level == filters["donor_level"])
    total = q.count()
    return args.apply(q, models.Donor).all(), total


def update_donor(db: Session, donor: models.Donor, values: Dict[str, Any]) -> models.Donor:
    for name, value in values.items():
        setattr(donor, name, value)
    db.flush()
    return donor


def insert_donation(db: Session, values: Dict[str, Any]) -> models.Donation:
    donation = models.Donation(**values)
    db.add(donation)
    db.flush()
    return donation


def recompute_donor_totals(db: Session, donor_id: int) -> models.Donor:
    """Refresh total_donated and first/last donation dates from the donation rows."""
    total, first, last = (
        db.query(
            func.coalesce(func.sum(models.Donation.amount), 0.0),
            func.min(models.Donation.donation_date),
            func.max(models.Donation.donation_date),
        )
        .filter(models.Donation.donor_id == donor_id)
        .one()
    )
    donor = db.get(models.Donor, donor_id)
    donor.total_donated = float(total or 0.0)
    donor.first_donation_date = first
    donor.last_donation_date = last
    db.flush()
    return donor


def list_donations(db: Session, *, donor_id: int) -> List[models.Donation]:
    return (
        db.query(models.Donation)
        .filter(models.Donation.donor_id == donor_id)
        .order_by(models.Donation.donation_date.desc(), models.Donation.id.desc())
        .all()
    )


def count_donors_in_range(db: Session, *, start, end) -> int:
    return int(
        db.query(func.count(func.distinct(models.Donation.donor_id)))
        .filter(models.Donation.donation_date >= start, models.Donation.donation_date <= end)
        .scalar()
        or 0
    )
