"""
Repository for the per-year public metrics snapshot.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from nonprofitsuite.db import models
from nonprofitsuite.db.repositories.common import insert, update_fields


def get_by_year(db: Session, year: int) -> Optional[models.PublicMetrics]:
    return db.query(models.PublicMetrics).filter(models.PublicMetrics.metric_year == year).first()


def list_all(db: Session) -> List[models.PublicMetrics]:
    return db.query(models.PublicMetrics).order_by(models.PublicMetrics.metric_year.desc()).all()


def upsert(db: Session, values: Dict[str, Any]) -> models.PublicMetrics:
    existing = get_by_year(db, values["metric_year"])
    if existing is None:
        return insert(db, models.PublicMetrics, values)
    return update_fields(db, existing, values)


def mark_submitted(db: Session, year: int, when: datetime) -> Optional[models.PublicMetrics]:
    row = get_by_year(db, year)
    if row is not None:
        row.submitted_at = when
        db.flush()
    return row
