from sqlalchemy import Column, DateTime, Float, Integer, JSON

from .base import Base, now_utc


class PublicMetrics(Base):
    __tablename__ = 'public_metrics'

    id = Column(Integer, primary_key=True)
    metric_year = Column(Integer, nullable=False, unique=True)
    total_revenue = Column(Float, nullable=False, default=0.0)
    total_expenses = Column(Float, nullable=False, default=0.0)
    program_expenses = Column(Float, nullable=False, default=0.0)
    fundraising_expenses = Column(Float, nullable=False, default=0.0)
    admin_expenses = Column(Float, nullable=False, default=0.0)
    program_expense_ratio = Column(Float, nullable=False, default=0.0)
    fundraising_ratio = Column(Float, nullable=False, default=0.0)
    admin_ratio = Column(Float, nullable=False, default=0.0)
    num_employees = Column(Integer, nullable=False, default=0)
    num_volunteers = Column(Integer, nullable=False, default=0)
    num_board_members = Column(Integer, nullable=False, default=0)
    num_board_meetings = Column(Integer, nullable=False, default=0)
    num_programs = Column(Integer, nullable=False, default=0)
    num_donors = Column(Integer, nullable=False, default=0)
    states_operating = Column(JSON, nullable=True)
    submitted_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)
