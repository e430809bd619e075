"""Time-boxed portal access for outside accountants and legal counsel."""
from sqlalchemy import Column, Date, DateTime, ForeignKey, Index, Integer, String, Text

from .base import Base, now_utc


class CpaAccess(Base):
    __tablename__ = 'cpa_access'

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    firm_name = Column(String(255), nullable=True)
    contact_name = Column(String(255), nullable=False)
    contact_email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    access_level = Column(String(20), nullable=False, default='full')
    granted_date = Column(DateTime(timezone=True), default=now_utc, nullable=False)
    expiration_date = Column(Date, nullable=True)
    status = Column(String(20), nullable=False, default='active')  # active|revoked
    revoked_date = Column(DateTime(timezone=True), nullable=True)
    notes = Column(Text, nullable=True)

    __table_args__ = (
        Index('idx_cpa_access_user_status', 'user_id', 'status'),
    )


class LegalAccess(Base):
    __tablename__ = 'legal_access'

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    firm_name = Column(String(255), nullable=True)
    attorney_name = Column(String(255), nullable=False)
    attorney_email = Column(String(255), nullable=True)
    attorney_phone = Column(String(50), nullable=True)
    bar_number = Column(String(50), nullable=True)
    specialization = Column(String(100), nullable=True)
    access_level = Column(String(20), nullable=False, default='full')
    granted_date = Column(DateTime(timezone=True), default=now_utc, nullable=False)
    expiration_date = Column(Date, nullable=True)
    status = Column(String(20), nullable=False, default='active')
    revoked_date = Column(DateTime(timezone=True), nullable=True)
    notes = Column(Text, nullable=True)

    __table_args__ = (
        Index('idx_legal_access_user_status', 'user_id', 'status'),
    )
