"""
AI assistant API endpoints.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from nonprofitsuite.api.deps import get_current_user_context
from nonprofitsuite.db import schemas
from nonprofitsuite.db.database import get_db
from nonprofitsuite.services.assistant_service import AssistantService, is_api_configured

router = APIRouter(prefix="/assistant", tags=["assistant"])


@router.get("/status")
def assistant_status():
    return {"configured": is_api_configured()}


@router.post("/query", response_model=schemas.AssistantReply)
def query(
    payload: schemas.AssistantQuery,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    _user, ctx = user_context
    return AssistantService(db, ctx).ask(payload)


@router.get("/conversations/{conversation_id}/messages", response_model=list[schemas.MessageResponse])
def messages(conversation_id: int, db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    _user, ctx = user_context
    return AssistantService(db, ctx).get_messages(conversation_id)


@router.get("/usage")
def usage(db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    user, ctx = user_context
    return AssistantService(db, ctx).get_usage_stats(user.id)
