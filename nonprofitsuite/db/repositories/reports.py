"""
Anonymous report repository.
"""
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from nonprofitsuite.db import models
from nonprofitsuite.db.repositories.common import get_by_id, insert
from nonprofitsuite.utils.pagination import PaginationArgs


def create_report(db: Session, values: Dict[str, Any]) -> models.AnonymousReport:
    return insert(db, models.AnonymousReport, values)


def get_report(db: Session, report_id: int) -> Optional[models.AnonymousReport]:
    return get_by_id(db, models.AnonymousReport, report_id)


def get_by_number(db: Session, report_number: str) -> Optional[models.AnonymousReport]:
    return (
        db.query(models.AnonymousReport)
        .filter(models.AnonymousReport.report_number == report_number)
        .first()
    )


def number_exists(db: Session, report_number: str) -> bool:
    return get_by_number(db, report_number) is not None


def list_reports(db: Session, *, args: PaginationArgs) -> Tuple[List[models.AnonymousReport], int]:
    q = db.query(models.AnonymousReport)
    for name in ("status", "category", "priority"):
        if args.filters.get(name):
            q = q.filter(getattr(models.AnonymousReport, name) == args.filters[name])
    total = q.count()
    return args.apply(q, models.AnonymousReport).all(), total


def count_by_status(db: Session, status: str) -> int:
    return db.query(models.AnonymousReport).filter(models.AnonymousReport.status == status).count()


def count_open_high_priority(db: Session) -> int:
    return (
        db.query(models.AnonymousReport)
        .filter(
            models.AnonymousReport.priority == "high",
            models.AnonymousReport.status.notin_(["resolved", "closed"]),
        )
        .count()
    )


def list_recent(db: Session, limit: int = 10) -> List[models.AnonymousReport]:
    return (
        db.query(models.AnonymousReport)
        .order_by(models.AnonymousReport.submitted_date.desc(), models.AnonymousReport.id.desc())
        .limit(limit)
        .all()
    )


def category_counts(db: Session) -> List[Tuple[str, int]]:
    count = func.count(models.AnonymousReport.id)
    return (
        db.query(models.AnonymousReport.category, count)
        .group_by(models.AnonymousReport.category)
        .order_by(count.desc())
        .all()
    )
