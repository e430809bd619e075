from sqlalchemy import Column, DateTime, Float, Integer, JSON, String, Text

from .base import Base, now_utc


class User(Base):
    __tablename__ = 'users'

    id = Column(Integer, primary_key=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    display_name = Column(String(255), nullable=True)
    # administrator|editor|author|subscriber
    role = Column(String(20), nullable=False, default='subscriber')
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)


class Option(Base):
    """Site-wide name/value settings (license state, metrics sharing, fiscal year)."""
    __tablename__ = 'options'

    name = Column(String(191), primary_key=True)
    value = Column(JSON, nullable=True)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)


class CacheEntry(Base):
    __tablename__ = 'cache_entries'

    key = Column(String(191), primary_key=True)
    value = Column(Text, nullable=False)
    # epoch seconds
    expires_at = Column(Float, nullable=False, index=True)
