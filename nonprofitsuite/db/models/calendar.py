from sqlalchemy import Boolean, Column, DateTime, Index, Integer, JSON, String, Text

from .base import Base, now_utc


class CalendarItem(Base):
    __tablename__ = 'calendar_items'

    id = Column(Integer, primary_key=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    item_type = Column(String(50), nullable=False)
    source_module = Column(String(50), nullable=False)
    source_id = Column(Integer, nullable=True)
    start_datetime = Column(DateTime, nullable=False)
    end_datetime = Column(DateTime, nullable=True)
    all_day = Column(Boolean, nullable=False, default=False)
    recurrence = Column(String(20), nullable=True)
    location = Column(String(255), nullable=True)
    attendees = Column(JSON, nullable=True)
    color = Column(String(20), nullable=True)
    created_by = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)

    __table_args__ = (
        Index('idx_calendar_source', 'source_module', 'source_id'),
        Index('idx_calendar_start', 'start_datetime'),
    )
