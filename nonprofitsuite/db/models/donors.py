from sqlalchemy import Boolean, Column, Date, DateTime, Float, ForeignKey, Index, Integer, String, Text

from .base import Base, now_utc


class Donor(Base):
    __tablename__ = 'donors'

    id = Column(Integer, primary_key=True)
    person_id = Column(Integer, ForeignKey('people.id', ondelete='SET NULL'), nullable=True)
    organization_id = Column(Integer, nullable=True)
    donor_type = Column(String(20), nullable=False, default='individual')  # individual|organization|foundation
    donor_level = Column(String(20), nullable=True)
    donor_status = Column(String(20), nullable=False, default='active')
    total_donated = Column(Float, nullable=False, default=0.0)
    first_donation_date = Column(Date, nullable=True)
    last_donation_date = Column(Date, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)

    __table_args__ = (
        Index('idx_donors_status_total', 'donor_status', 'total_donated'),
    )


class Donation(Base):
    __tablename__ = 'donations'

    id = Column(Integer, primary_key=True)
    donor_id = Column(Integer, ForeignKey('donors.id', ondelete='CASCADE'), nullable=False)
    donation_date = Column(Date, nullable=False)
    amount = Column(Float, nullable=False)
    payment_method = Column(String(50), nullable=True)
    fund_id = Column(Integer, nullable=True)
    is_recurring = Column(Boolean, nullable=False, default=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)

    __table_args__ = (
        Index('idx_donations_donor_date', 'donor_id', 'donation_date'),
    )
