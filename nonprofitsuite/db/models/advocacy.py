from sqlalchemy import Column, Date, DateTime, ForeignKey, Index, Integer, String, Text

from .base import Base, now_utc


class AdvocacyIssue(Base):
    __tablename__ = 'advocacy_issues'

    id = Column(Integer, primary_key=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    issue_type = Column(String(50), nullable=False)  # legislation|regulation|ballot_measure|...
    jurisdiction = Column(String(100), nullable=True)
    bill_number = Column(String(50), nullable=True)
    status = Column(String(30), nullable=False, default='monitoring')
    priority = Column(String(20), nullable=False, default='medium')
    position = Column(String(20), nullable=True)  # support|oppose|neutral
    current_stage = Column(String(100), nullable=True)
    target_decision_date = Column(Date, nullable=True)
    decision_date = Column(Date, nullable=True)
    outcome = Column(Text, nullable=True)
    talking_points = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    created_by = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)

    __table_args__ = (
        Index('idx_advocacy_issue_status', 'status', 'priority'),
    )


class AdvocacyCampaign(Base):
    __tablename__ = 'advocacy_campaigns'

    id = Column(Integer, primary_key=True)
    issue_id = Column(Integer, ForeignKey('advocacy_issues.id', ondelete='CASCADE'), nullable=False)
    campaign_name = Column(String(255), nullable=False)
    campaign_type = Column(String(50), nullable=False)  # email|call|letter|petition|meeting|rally
    description = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default='planning')  # planning|active|completed|cancelled
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    call_to_action = Column(Text, nullable=True)
    goal_count = Column(Integer, nullable=False, default=0)
    action_count = Column(Integer, nullable=False, default=0)
    email_template = Column(Text, nullable=True)
    letter_template = Column(Text, nullable=True)
    talking_points = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)

    __table_args__ = (
        Index('idx_advocacy_campaign_issue', 'issue_id', 'status'),
    )


class AdvocacyAction(Base):
    __tablename__ = 'advocacy_actions'

    id = Column(Integer, primary_key=True)
    campaign_id = Column(Integer, ForeignKey('advocacy_campaigns.id', ondelete='CASCADE'), nullable=False)
    person_id = Column(Integer, ForeignKey('people.id', ondelete='SET NULL'), nullable=True)
    action_type = Column(String(50), nullable=False)
    action_date = Column(DateTime(timezone=True), default=now_utc, nullable=False)
    target_name = Column(String(255), nullable=True)
    target_office = Column(String(255), nullable=True)
    outcome = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)

    __table_args__ = (
        Index('idx_advocacy_action_campaign', 'campaign_id', 'action_date'),
    )
