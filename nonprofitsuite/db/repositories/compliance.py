"""
Repositories for state operations, state requirements and compliance items.
"""
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from nonprofitsuite.db import models
from nonprofitsuite.utils.pagination import PaginationArgs


# State operations

def create_state_operation(db: Session, values: Dict[str, Any]) -> models.StateOperation:
    op = models.StateOperation(**values)
    db.add(op)
    db.flush()
    return op


def get_state_operation(db: Session, op_id: int) -> Optional[models.StateOperation]:
    return db.get(models.StateOperation, op_id)


def get_state_operation_by_code(db: Session, state_code: str) -> Optional[models.StateOperation]:
    return db.query(models.StateOperation).filter(models.StateOperation.state_code == state_code).first()


def list_state_operations(db: Session, *, status: Optional[str] = None) -> List[models.StateOperation]:
    q = db.query(models.StateOperation)
    if status:
        q = q.filter(models.StateOperation.status == status)
    return q.order_by(models.StateOperation.state_name.asc()).all()


def count_state_operations(db: Session, *, status: str) -> int:
    return db.query(models.StateOperation).filter(models.StateOperation.status == status).count()


# State requirements

def create_requirement(db: Session, values: Dict[str, Any]) -> models.StateRequirement:
    req = models.StateRequirement(**values)
    db.add(req)
    db.flush()
    return req


def get_requirement(db: Session, req_id: int) -> Optional[models.StateRequirement]:
    return db.get(models.StateRequirement, req_id)


def list_requirements(db: Session, *, operation_id: int) -> List[models.StateRequirement]:
    return (
        db.query(models.StateRequirement)
        .filter(models.StateRequirement.state_operation_id == operation_id)
        .order_by(models.StateRequirement.next_due_date.asc(), models.StateRequirement.id.asc())
        .all()
    )


def list_requirements_by_status(db: Session, *, statuses: List[str]) -> List[models.StateRequirement]:
    return (
        db.query(models.StateRequirement)
        .filter(models.StateRequirement.status.in_(statuses))
        .order_by(models.StateRequirement.next_due_date.asc())
        .all()
    )


def list_overdue_requirements(db: Session, *, today: date) -> List[models.StateRequirement]:
    return (
        db.query(models.StateRequirement)
        .filter(
            models.StateRequirement.status != "completed",
            models.StateRequirement.next_due_date.isnot(None),
            models.StateRequirement.next_due_date < today,
        )
        .order_by(models.StateRequirement.next_due_date.asc())
        .all()
    )


def list_upcoming_requirements(db: Session, *, start: date, end: date, limit: int = 10) -> List[models.StateRequirement]:
    return (
        db.query(models.StateRequirement)
        .filter(
            models.StateRequirement.status != "completed",
            models.StateRequirement.next_due_date >= start,
            models.StateRequirement.next_due_date <= end,
        )
        .order_by(models.StateRequirement.next_due_date.asc())
        .limit(limit)
        .all()
    )


def list_requirements_by_type(db: Session, *, requirement_type: str) -> List[models.StateRequirement]:
    return (
        db.query(models.StateRequirement)
        .filter(models.StateRequirement.requirement_type == requirement_type)
        .order_by(models.StateRequirement.next_due_date.asc())
        .all()
    )


def requirement_counts(db: Session) -> Tuple[int, int]:
    """Return (total, completed) requirement counts."""
    total = db.query(func.count(models.StateRequirement.id)).scalar() or 0
    completed = (
        db.query(func.count(models.StateRequirement.id))
        .filter(models.StateRequirement.status == "completed")
        .scalar()
        or 0
    )
    return int(total), int(completed)


# Compliance items

def create_compliance_item(db: Session, values: Dict[str, Any]) -> models.ComplianceItem:
    item = models.ComplianceItem(**values)
    db.add(item)
    db.flush()
    return item


def get_compliance_item(db: Session, item_id: int) -> Optional[models.ComplianceItem]:
    return db.get(models.ComplianceItem, item_id)


def list_compliance_items(db: Session, *, args: PaginationArgs) -> Tuple[List[models.ComplianceItem], int]:
    q = db.query(models.ComplianceItem)
    if args.filters.get("status"):
        q = q.filter(models.ComplianceItem.status == args.filters["status"])
    if args.filters.get("item_type"):
        q = q.filter(models.ComplianceItem.item_type == args.filters["item_type"])
    total = q.count()
    return args.apply(q, models.ComplianceItem).all(), total


def list_upcoming_items(db: Session, *, start: date, end: date) -> List[models.ComplianceItem]:
    return (
        db.query(models.ComplianceItem)
        .filter(
            models.ComplianceItem.status == "pending",
            models.ComplianceItem.due_date >= start,
            models.ComplianceItem.due_date <= end,
        )
        .order_by(models.ComplianceItem.due_date.asc())
        .all()
    )


def list_overdue_items(db: Session, *, today: date) -> List[models.ComplianceItem]:
    return (
        db.query(models.ComplianceItem)
        .filter(models.ComplianceItem.status == "pending", models.ComplianceItem.due_date < today)
        .order_by(models.ComplianceItem.due_date.asc())
        .all()
    )


def list_open_items_from(db: Session, *, start: date) -> List[models.ComplianceItem]:
    return (
        db.query(models.ComplianceItem)
        .filter(models.ComplianceItem.status != "completed", models.ComplianceItem.due_date >= start)
        .order_by(models.ComplianceItem.due_date.asc())
        .all()
    )
