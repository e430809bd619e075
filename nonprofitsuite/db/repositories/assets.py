"""
Repositories for fixed assets and in-kind donations.
"""
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import extract, func
from sqlalchemy.orm import Session

from nonprofitsuite.db import models
from nonprofitsuite.utils.pagination import PaginationArgs

ASSET_REGISTER_CAP = 1000


def create_asset(db: Session, values: Dict[str, Any]) -> models.Asset:
    asset = models.Asset(**values)
    db.add(asset)
    db.flush()
    return asset


def get_asset(db: Session, asset_id: int) -> Optional[models.Asset]:
    return db.get(models.Asset, asset_id)


def list_assets(db: Session, *, args: PaginationArgs) -> Tuple[List[models.Asset], int]:
    q = db.query(models.Asset)
    f = args.filters
    if f.get("asset_type"):
        q = q.filter(models.Asset.asset_type == f["asset_type"])
    if f.get("status"):
        q = q.filter(models.Asset.status == f["status"])
    if f.get("location"):
        q = q.filter(models.Asset.location == f["location"])
    if f.get("assigned_to"):
        q = q.filter(models.Asset.assigned_to == int(f["assigned_to"]))
    total = q.count()
    return args.apply(q, models.Asset).all(), total


def list_register(db: Session) -> List[models.Asset]:
    return (
        db.query(models.Asset)
        .filter(models.Asset.status != "disposed")
        .order_by(models.Asset.asset_type.asc(), models.Asset.asset_name.asc())
        .limit(ASSET_REGISTER_CAP)
        .all()
    )


def summary_by_type(db: Session) -> List[Tuple[str, int, float]]:
    return (
        db.query(
            models.Asset.asset_type,
            func.count(models.Asset.id),
            func.coalesce(func.sum(models.Asset.current_value), 0.0),
        )
        .filter(models.Asset.status != "disposed")
        .group_by(models.Asset.asset_type)
        .order_by(models.Asset.asset_type.asc())
        .all()
    )


def list_retired(db: Session, *, year: Optional[int] = None) -> List[models.Asset]:
    q = db.query(models.Asset).filter(models.Asset.status == "disposed")
    if year:
        q = q.filter(extract("year", models.Asset.disposal_date) == year)
    return q.order_by(models.Asset.disposal_date.desc()).all()


def create_in_kind(db: Session, values: Dict[str, Any]) -> models.InKindDonation:
    row = models.InKindDonation(**values)
    db.add(row)
    db.flush()
    return row


def get_in_kind(db: Session, donation_id: int) -> Optional[models.InKindDonation]:
    return db.get(models.InKindDonation, donation_id)


def list_in_kind(db: Session, *, args: PaginationArgs) -> Tuple[List[models.InKindDonation], int]:
    q = db.query(models.InKindDonation)
    f = args.filters
    if f.get("category"):
        q = q.filter(models.InKindDonation.category == f["category"])
    if f.get("donor_id"):
        q = q.filter(models.InKindDonation.donor_id == int(f["donor_id"]))
    if f.get("date_from"):
        q = q.filter(models.InKindDonation.donation_date >= f["date_from"])
    if f.get("date_to"):
        q = q.filter(models.InKindDonation.donation_date <= f["date_to"])
    if f.get("min_value") is not None:
        q = q.filter(models.InKindDonation.fair_market_value >= float(f["min_value"]))
    total = q.count()
    return args.apply(q, models.InKindDonation).all(), total


def sum_in_kind_value(db: Session, *, start: date, end: date) -> float:
    return float(
        db.query(func.coalesce(func.sum(models.InKindDonation.fair_market_value), 0.0))
        .filter(models.InKindDonation.donation_date >= start, models.InKindDonation.donation_date <= end)
        .scalar()
        or 0.0
    )
