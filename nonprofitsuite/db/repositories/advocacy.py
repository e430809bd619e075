"""
Repositories for advocacy issues, campaigns and logged actions.
"""
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import asc, desc, func
from sqlalchemy.orm import Session

from nonprofitsuite.db import models
from nonprofitsuite.db.repositories.common import get_by_id, insert
from nonprofitsuite.utils.pagination import PaginationArgs


# Issues

def create_issue(db: Session, values: Dict[str, Any]) -> models.AdvocacyIssue:
    return insert(db, models.AdvocacyIssue, values)


def get_issue(db: Session, issue_id: int) -> Optional[models.AdvocacyIssue]:
    return get_by_id(db, models.AdvocacyIssue, issue_id)


def list_issues(db: Session, *, args: PaginationArgs) -> Tuple[List[models.AdvocacyIssue], int]:
    q = db.query(models.AdvocacyIssue)
    for name in ("issue_type", "status", "priority", "position"):
        if args.filters.get(name):
            q = q.filter(getattr(models.AdvocacyIssue, name) == args.filters[name])
    total = q.count()
    return args.apply(q, models.AdvocacyIssue).all(), total


def list_issues_deciding_between(db: Session, *, start: date, end: date) -> List[models.AdvocacyIssue]:
    return (
        db.query(models.AdvocacyIssue)
        .filter(
            models.AdvocacyIssue.target_decision_date >= start,
            models.AdvocacyIssue.target_decision_date <= end,
            models.AdvocacyIssue.status.in_(["monitoring", "active_campaign"]),
        )
        .order_by(models.AdvocacyIssue.target_decision_date.asc())
        .all()
    )


def count_issues(db: Session, *, status: str) -> int:
    return db.query(models.AdvocacyIssue).filter(models.AdvocacyIssue.status == status).count()


# Campaigns

def create_campaign(db: Session, values: Dict[str, Any]) -> models.AdvocacyCampaign:
    return insert(db, models.AdvocacyCampaign, values)


def _campaign_query(db: Session):
    return db.query(models.AdvocacyCampaign, models.AdvocacyIssue.title).outerjoin(
        models.AdvocacyIssue, models.AdvocacyCampaign.issue_id == models.AdvocacyIssue.id
    )


def get_campaign(db: Session, campaign_id: int) -> Optional[Tuple[models.AdvocacyCampaign, Optional[str]]]:
    """Return ``(campaign, issue_title)`` or None."""
    return _campaign_query(db).filter(models.AdvocacyCampaign.id == campaign_id).first()


def list_campaigns(
    db: Session,
    *,
    issue_id: Optional[int] = None,
    status: Optional[str] = None,
    campaign_type: Optional[str] = None,
    orderby: str = "start_date",
    order: str = "DESC",
    limit: int = 50,
) -> List[Tuple[models.AdvocacyCampaign, Optional[str]]]:
    q = _campaign_query(db)
    if issue_id:
        q = q.filter(models.AdvocacyCampaign.issue_id == issue_id)
    if status:
        q = q.filter(models.AdvocacyCampaign.status == status)
    if campaign_type:
        q = q.filter(models.AdvocacyCampaign.campaign_type == campaign_type)
    direction = asc if order == "ASC" else desc
    return q.order_by(direction(getattr(models.AdvocacyCampaign, orderby))).limit(limit).all()


def list_issue_campaigns(db: Session, issue_id: int) -> List[models.AdvocacyCampaign]:
    return (
        db.query(models.AdvocacyCampaign)
        .filter(models.AdvocacyCampaign.issue_id == issue_id)
        .order_by(models.AdvocacyCampaign.start_date.desc())
        .all()
    )


def increment_action_count(db: Session, campaign_id: int) -> int:
    updated = (
        db.query(models.AdvocacyCampaign)
        .filter(models.AdvocacyCampaign.id == campaign_id)
        .update(
            {models.AdvocacyCampaign.action_count: models.AdvocacyCampaign.action_count + 1},
            synchronize_session="fetch",
        )
    )
    db.flush()
    return updated


def count_campaigns(db: Session, *, status: str) -> int:
    return db.query(models.AdvocacyCampaign).filter(models.AdvocacyCampaign.status == status).count()


def total_action_count(db: Session) -> int:
    return int(db.query(func.coalesce(func.sum(models.AdvocacyCampaign.action_count), 0)).scalar() or 0)


# Actions

def create_action(db: Session, values: Dict[str, Any]) -> models.AdvocacyAction:
    return insert(db, models.AdvocacyAction, values)


def list_actions(db: Session, campaign_id: int) -> List[Tuple[models.AdvocacyAction, Optional[models.Person]]]:
    return (
        db.query(models.AdvocacyAction, models.Person)
        .outerjoin(models.Person, models.AdvocacyAction.person_id == models.Person.id)
        .filter(models.AdvocacyAction.campaign_id == campaign_id)
        .order_by(models.AdvocacyAction.action_date.desc(), models.AdvocacyAction.id.desc())
        .all()
    )


def list_person_actions(db: Session, person_id: int) -> List[Tuple[models.AdvocacyAction, Optional[str]]]:
    return (
        db.query(models.AdvocacyAction, models.AdvocacyCampaign.campaign_name)
        .outerjoin(models.AdvocacyCampaign, models.AdvocacyAction.campaign_id == models.AdvocacyCampaign.id)
        .filter(models.AdvocacyAction.person_id == person_id)
        .order_by(models.AdvocacyAction.action_date.desc())
        .all()
    )


def action_summary(db: Session, campaign_id: int) -> List[Tuple[str, int]]:
    count = func.count(models.AdvocacyAction.id)
    return (
        db.query(models.AdvocacyAction.action_type, count)
        .filter(models.AdvocacyAction.campaign_id == campaign_id)
        .group_by(models.AdvocacyAction.action_type)
        .order_by(count.desc())
        .all()
    )
