"""
Repositories for assistant conversations and their messages.
"""
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from nonprofitsuite.db import models
from nonprofitsuite.db.repositories.common import get_by_id, insert


def create_conversation(db: Session, values: Dict[str, Any]) -> models.AiConversation:
    return insert(db, models.AiConversation, values)


def get_conversation(db: Session, conversation_id: int) -> Optional[models.AiConversation]:
    return get_by_id(db, models.AiConversation, conversation_id)


def insert_message(db: Session, values: Dict[str, Any]) -> models.AiMessage:
    return insert(db, models.AiMessage, values)


def bump_totals(db: Session, conversation_id: int, *, tokens: int) -> None:
    (
        db.query(models.AiConversation)
        .filter(models.AiConversation.id == conversation_id)
        .update(
            {
                models.AiConversation.total_messages: models.AiConversation.total_messages + 1,
                models.AiConversation.total_tokens: models.AiConversation.total_tokens + tokens,
            },
            synchronize_session="fetch",
        )
    )
    db.flush()


def list_messages(db: Session, conversation_id: int) -> List[models.AiMessage]:
    return (
        db.query(models.AiMessage)
        .filter(models.AiMessage.conversation_id == conversation_id)
        .order_by(models.AiMessage.created_at.asc(), models.AiMessage.id.asc())
        .all()
    )


def usage_stats(db: Session, user_id: int) -> Dict[str, Any]:
    count, messages, tokens, cost = (
        db.query(
            func.count(models.AiConversation.id),
            func.sum(models.AiConversation.total_messages),
            func.sum(models.AiConversation.total_tokens),
            func.sum(models.AiConversation.cost),
        )
        .filter(models.AiConversation.user_id == user_id)
        .one()
    )
    return {
        "conversation_count": int(count or 0),
        "total_messages": int(messages or 0),
        "total_tokens": int(tokens or 0),
        "total_cost": float(cost or 0.0),
    }
