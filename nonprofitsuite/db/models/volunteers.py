from sqlalchemy import Boolean, Column, Date, DateTime, Float, ForeignKey, Index, Integer, String, Text

from .base import Base, now_utc


class Volunteer(Base):
    __tablename__ = 'volunteers'

    id = Column(Integer, primary_key=True)
    person_id = Column(Integer, ForeignKey('people.id', ondelete='CASCADE'), nullable=False)
    application_status = Column(String(20), nullable=False, default='pending')
    volunteer_status = Column(String(20), nullable=False, default='applicant')  # applicant|active|inactive|suspended
    skills = Column(Text, nullable=True)
    interests = Column(Text, nullable=True)
    availability = Column(Text, nullable=True)
    total_hours = Column(Float, nullable=False, default=0.0)
    created_at = Column(DateTime(timezone=True), default=now_utc)


class VolunteerHours(Base):
    __tablename__ = 'volunteer_hours'

    id = Column(Integer, primary_key=True)
    volunteer_id = Column(Integer, ForeignKey('volunteers.id', ondelete='CASCADE'), nullable=False)
    activity_date = Column(Date, nullable=False)
    hours = Column(Float, nullable=False)
    description = Column(Text, nullable=False)
    program_id = Column(Integer, nullable=True)
    approved = Column(Boolean, nullable=False, default=False)
    approved_by = Column(Integer, nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)

    __table_args__ = (
        Index('idx_volunteer_hours_volunteer', 'volunteer_id', 'activity_date'),
    )
