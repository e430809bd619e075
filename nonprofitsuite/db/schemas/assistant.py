from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class ConversationResponse(BaseModel):
    id: int
    user_id: int
    model: str
    total_messages: int
    total_tokens: int
    cost: float
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class MessageResponse(BaseModel):
    id: int
    conversation_id: int
    role: str
    message: str
    tokens: int
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class AssistantQuery(BaseModel):
    message: str
    conversation_id: Optional[int] = None
    history: List[Dict[str, str]] = []


class AssistantReply(BaseModel):
    conversation_id: int
    response: str
