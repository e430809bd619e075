from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, Index, Integer, String, Text

from .base import Base, now_utc


class StateOperation(Base):
    __tablename__ = 'state_operations'

    id = Column(Integer, primary_key=True)
    state_code = Column(String(2), nullable=False, unique=True)
    state_name = Column(String(100), nullable=False)
    operation_type = Column(String(50), nullable=True)
    registration_date = Column(Date, nullable=True)
    registration_number = Column(String(100), nullable=True)
    status = Column(String(20), nullable=False, default='active')
    registered_agent = Column(String(255), nullable=True)
    registered_agent_address = Column(Text, nullable=True)
    annual_report_due = Column(Date, nullable=True)
    charitable_registration_number = Column(String(100), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)


class StateRequirement(Base):
    __tablename__ = 'state_requirements'

    id = Column(Integer, primary_key=True)
    state_operation_id = Column(Integer, ForeignKey('state_operations.id', ondelete='CASCADE'), nullable=False)
    requirement_type = Column(String(50), nullable=False)
    requirement_name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    frequency = Column(String(30), nullable=True)
    # as published in the state fixture, e.g. "05-15"
    due_date = Column(String(30), nullable=True)
    next_due_date = Column(Date, nullable=True)
    filing_method = Column(String(100), nullable=True)
    fee_amount = Column(Float, nullable=True)
    agency = Column(String(255), nullable=True)
    website_url = Column(String(500), nullable=True)
    status = Column(String(20), nullable=False, default='pending')  # pending|in_progress|completed
    completed_date = Column(Date, nullable=True)
    confirmation_number = Column(String(100), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)

    __table_args__ = (
        Index('idx_state_requirements_op_due', 'state_operation_id', 'next_due_date'),
    )


class ComplianceItem(Base):
    __tablename__ = 'compliance_items'

    id = Column(Integer, primary_key=True)
    item_name = Column(String(255), nullable=False)
    item_type = Column(String(30), nullable=False, default='filing')
    due_date = Column(Date, nullable=False)
    completion_date = Column(Date, nullable=True)
    responsible_person_id = Column(Integer, ForeignKey('people.id', ondelete='SET NULL'), nullable=True)
    status = Column(String(20), nullable=False, default='pending')  # pending|completed
    description = Column(Text, nullable=True)
    recurrence = Column(String(20), nullable=False, default='none')  # none|monthly|quarterly|annually
    created_at = Column(DateTime(timezone=True), default=now_utc)

    __table_args__ = (
        Index('idx_compliance_status_due', 'status', 'due_date'),
    )
