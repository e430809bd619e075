from sqlalchemy import Boolean, Column, Date, DateTime, Float, ForeignKey, Index, Integer, String, Text

from .base import Base, now_utc


class Asset(Base):
    __tablename__ = 'assets'

    id = Column(Integer, primary_key=True)
    asset_type = Column(String(50), nullable=False)
    asset_name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    serial_number = Column(String(100), nullable=True)
    acquisition_date = Column(Date, nullable=True)
    purchase_price = Column(Float, nullable=True)
    current_value = Column(Float, nullable=True)
    depreciation_method = Column(String(30), nullable=False, default='straight_line')
    useful_life_years = Column(Integer, nullable=False, default=5)
    accumulated_depreciation = Column(Float, nullable=False, default=0.0)
    acquisition_method = Column(String(30), nullable=False, default='purchased')
    in_kind_donation_id = Column(Integer, ForeignKey('in_kind_donations.id', ondelete='SET NULL'), nullable=True)
    location = Column(String(255), nullable=True)
    assigned_to = Column(Integer, ForeignKey('people.id', ondelete='SET NULL'), nullable=True)
    condition_rating = Column(String(20), nullable=False, default='good')
    status = Column(String(20), nullable=False, default='active')  # active|disposed
    disposal_date = Column(Date, nullable=True)
    disposal_method = Column(String(50), nullable=True)
    disposal_value = Column(Float, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)

    __table_args__ = (
        Index('idx_assets_type_status', 'asset_type', 'status'),
    )


class InKindDonation(Base):
    __tablename__ = 'in_kind_donations'

    id = Column(Integer, primary_key=True)
    donor_id = Column(Integer, ForeignKey('donors.id', ondelete='SET NULL'), nullable=True)
    donation_date = Column(Date, nullable=False)
    category = Column(String(50), nullable=False)
    description = Column(Text, nullable=False)
    quantity = Column(Float, nullable=False, default=1.0)
    unit = Column(String(30), nullable=True)
    fair_market_value = Column(Float, nullable=False, default=0.0)
    valuation_method = Column(String(50), nullable=True)
    appraised = Column(Boolean, nullable=False, default=False)
    appraiser_name = Column(String(255), nullable=True)
    condition_rating = Column(String(20), nullable=True)
    location = Column(String(255), nullable=True)
    restricted = Column(Boolean, nullable=False, default=False)
    restriction_details = Column(Text, nullable=True)
    receipt_sent = Column(Boolean, nullable=False, default=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)

    __table_args__ = (
        Index('idx_in_kind_category_date', 'category', 'donation_date'),
    )
