from sqlalchemy import Boolean, Column, Date, DateTime, Float, ForeignKey, Index, Integer, String, Text

from .base import Base, now_utc


class Account(Base):
    __tablename__ = 'accounts'

    id = Column(Integer, primary_key=True)
    account_number = Column(String(20), nullable=False, unique=True)
    account_name = Column(String(255), nullable=False)
    account_type = Column(String(20), nullable=False)  # asset|liability|equity|revenue|expense
    parent_account_id = Column(Integer, ForeignKey('accounts.id', ondelete='SET NULL'), nullable=True)
    description = Column(Text, nullable=True)
    balance = Column(Float, nullable=False, default=0.0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)

    __table_args__ = (
        Index('idx_accounts_type', 'account_type', 'account_number'),
    )


class Transaction(Base):
    __tablename__ = 'transactions'

    id = Column(Integer, primary_key=True)
    account_id = Column(Integer, ForeignKey('accounts.id', ondelete='CASCADE'), nullable=False)
    transaction_date = Column(Date, nullable=False)
    transaction_type = Column(String(10), nullable=False)  # debit|credit
    amount = Column(Float, nullable=False)
    description = Column(Text, nullable=False)
    reference_number = Column(String(100), nullable=True)
    category = Column(String(100), nullable=True)
    created_by = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)

    __table_args__ = (
        Index('idx_transactions_account_date', 'account_id', 'transaction_date'),
    )
