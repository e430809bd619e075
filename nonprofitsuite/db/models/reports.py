from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Index, Integer, String, Text

from .base import Base, now_utc


class AnonymousReport(Base):
    __tablename__ = 'anonymous_reports'

    id = Column(Integer, primary_key=True)
    report_number = Column(String(20), nullable=False, unique=True)
    category = Column(String(50), nullable=False)
    subject = Column(String(255), nullable=True)
    description = Column(Text, nullable=False)
    incident_date = Column(Date, nullable=True)
    location = Column(String(255), nullable=True)
    people_involved = Column(Text, nullable=True)
    evidence_description = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default='submitted')  # submitted|investigating|resolved|closed
    priority = Column(String(20), nullable=False, default='medium')
    assigned_to = Column(Integer, ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    investigation_notes = Column(Text, nullable=True)
    resolution = Column(Text, nullable=True)
    resolved_date = Column(Date, nullable=True)
    followup_required = Column(Boolean, nullable=False, default=False)
    submitted_date = Column(DateTime(timezone=True), default=now_utc, nullable=False)

    __table_args__ = (
        Index('idx_anonymous_reports_status', 'status', 'priority'),
    )
