"""
Repositories for CPA and legal-counsel access grants.

Both tables share a shape, so the functions take the model class.
"""
from datetime import date
from typing import Any, Dict, List, Optional, Tuple, Type, Union

from sqlalchemy import or_
from sqlalchemy.orm import Session

from nonprofitsuite.db import models
from nonprofitsuite.db.repositories.common import get_by_id, insert
from nonprofitsuite.utils.pagination import PaginationArgs

AccessModel = Type[Union[models.CpaAccess, models.LegalAccess]]


def create_grant(db: Session, model: AccessModel, values: Dict[str, Any]):
    return insert(db, model, values)


def get_grant(db: Session, model: AccessModel, grant_id: int):
    return get_by_id(db, model, grant_id)


def get_active_grant(db: Session, model: AccessModel, user_id: int):
    return (
        db.query(model)
        .filter(model.user_id == user_id, model.status == "active")
        .order_by(model.granted_date.desc())
        .first()
    )


def get_valid_grant(db: Session, model: AccessModel, user_id: int, *, today: date):
    """Active grant that has not passed its expiration date."""
    return (
        db.query(model)
        .filter(
            model.user_id == user_id,
            model.status == "active",
            or_(model.expiration_date.is_(None), model.expiration_date > today),
        )
        .first()
    )


def list_grants(db: Session, model: AccessModel, *, args: PaginationArgs) -> Tuple[List[Any], int]:
    q = db.query(model)
    if args.filters.get("status"):
        q = q.filter(model.status == args.filters["status"])
    total = q.count()
    return args.apply(q, model).all(), total


def list_active_with_users(db: Session, model: AccessModel) -> List[Tuple[Any, Optional[models.User]]]:
    return (
        db.query(model, models.User)
        .outerjoin(models.User, model.user_id == models.User.id)
        .filter(model.status == "active")
        .order_by(model.granted_date.desc())
        .all()
    )
