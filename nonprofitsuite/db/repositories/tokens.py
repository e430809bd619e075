"""
Repositories for mobile API tokens and their request log.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from nonprofitsuite.db import models
from nonprofitsuite.db.repositories.common import get_by_id, insert


def create_token(db: Session, values: Dict[str, Any]) -> models.ApiToken:
    return insert(db, models.ApiToken, values)


def get_token(db: Session, token_db_id: int) -> Optional[models.ApiToken]:
    return get_by_id(db, models.ApiToken, token_db_id)


def get_by_token_id(db: Session, *, token_id: str) -> Optional[models.ApiToken]:
    return db.query(models.ApiToken).filter(models.ApiToken.token_id == token_id).first()


def list_user_tokens(db: Session, *, user_id: int) -> List[models.ApiToken]:
    return (
        db.query(models.ApiToken)
        .filter(models.ApiToken.user_id == user_id)
        .order_by(models.ApiToken.created_at.desc(), models.ApiToken.id.desc())
        .all()
    )


def insert_log(db: Session, values: Dict[str, Any]) -> models.ApiLog:
    return insert(db, models.ApiLog, values)


def usage_stats(db: Session, *, token_db_id: int, since: datetime) -> Dict[str, Any]:
    code = models.ApiLog.response_code
    row = (
        db.query(
            func.count(models.ApiLog.id),
            func.avg(models.ApiLog.response_time),
            func.max(models.ApiLog.response_time),
            func.sum(case(((code >= 200) & (code < 300), 1), else_=0)),
            func.sum(case((code >= 400, 1), else_=0)),
        )
        .filter(models.ApiLog.token_id == token_db_id, models.ApiLog.created_at >= since)
        .one()
    )
    total, avg_time, max_time, ok, failed = row
    return {
        "total_requests": int(total or 0),
        "avg_response_time": float(avg_time or 0.0),
        "max_response_time": float(max_time or 0.0),
        "successful_requests": int(ok or 0),
        "failed_requests": int(failed or 0),
    }
