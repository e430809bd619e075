from sqlalchemy import Column, Date, DateTime, ForeignKey, Index, Integer, String, Text

from .base import Base, now_utc


class Meeting(Base):
    __tablename__ = 'meetings'

    id = Column(Integer, primary_key=True)
    title = Column(String(255), nullable=False)
    meeting_type = Column(String(50), nullable=False, default='board')
    meeting_date = Column(DateTime, nullable=False)
    location = Column(String(255), nullable=True)
    agenda = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default='scheduled')
    created_at = Column(DateTime(timezone=True), default=now_utc)

    __table_args__ = (
        Index('idx_meetings_date', 'meeting_date'),
    )


class Task(Base):
    __tablename__ = 'tasks'

    id = Column(Integer, primary_key=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    assigned_to = Column(Integer, ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    due_date = Column(Date, nullable=True)
    status = Column(String(20), nullable=False, default='not_started')  # not_started|in_progress|completed
    priority = Column(String(20), nullable=False, default='medium')
    source_module = Column(String(50), nullable=True)
    source_id = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)

    __table_args__ = (
        Index('idx_tasks_assignee_status', 'assigned_to', 'status'),
    )
