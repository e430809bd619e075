from sqlalchemy import Column, DateTime, Float, ForeignKey, Index, Integer, String, Text

from .base import Base, now_utc


class AiConversation(Base):
    __tablename__ = 'ai_conversations'

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    model = Column(String(50), nullable=False, default='claude')
    total_messages = Column(Integer, nullable=False, default=0)
    total_tokens = Column(Integer, nullable=False, default=0)
    cost = Column(Float, nullable=False, default=0.0)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)


class AiMessage(Base):
    __tablename__ = 'ai_messages'

    id = Column(Integer, primary_key=True)
    conversation_id = Column(Integer, ForeignKey('ai_conversations.id', ondelete='CASCADE'), nullable=False)
    role = Column(String(20), nullable=False)  # user|assistant
    message = Column(Text, nullable=False)
    tokens = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=now_utc)

    __table_args__ = (
        Index('idx_ai_messages_conversation', 'conversation_id', 'created_at'),
    )
