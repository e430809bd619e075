"""
Mobile API token management endpoints (administrators only).
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from nonprofitsuite.api.deps import get_current_user_context
from nonprofitsuite.db import schemas
from nonprofitsuite.db.database import get_db
from nonprofitsuite.services.token_service import TokenService

router = APIRouter(prefix="/api-tokens", tags=["api-tokens"])


class GenerateTokenBody(BaseModel):
    user_id: Optional[int] = None
    token_name: str
    permissions: List[str] = []
    expires_days: int = 365


@router.post("", response_model=schemas.TokenCreateResponse, status_code=status.HTTP_201_CREATED)
def generate_token(
    payload: GenerateTokenBody,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    user, ctx = user_context
    return TokenService(db, ctx).generate_token(
        payload.user_id or user.id, payload.token_name, payload.permissions, payload.expires_days
    )


@router.get("/users/{user_id}", response_model=list[schemas.TokenResponse])
def user_tokens(user_id: int, db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    _user, ctx = user_context
    return TokenService(db, ctx).get_user_tokens(user_id)


@router.delete("/{token_db_id}", status_code=status.HTTP_204_NO_CONTENT)
def revoke_token(token_db_id: int, db: Session = Depends(get_db), user_context=Depends(get_current_user_context)):
    _user, ctx = user_context
    TokenService(db, ctx).revoke_token(token_db_id)
    return None


@router.get("/{token_db_id}/usage", response_model=Optional[schemas.TokenUsageStats])
def token_usage(
    token_db_id: int,
    days: int = 30,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    _user, ctx = user_context
    return TokenService(db, ctx).get_usage_stats(token_db_id, days)
