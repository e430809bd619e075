"""
Domain-split SQLAlchemy models.

Exposes ``Base``, ``now_utc`` and every ORM class from one import point.
"""

from .base import Base, now_utc, as_utc  # re-export

from .users import User, Option, CacheEntry
from .people import Person
from .donors import Donor, Donation
from .volunteers import Volunteer, VolunteerHours
from .treasury import Account, Transaction
from .assets import Asset, InKindDonation
from .compliance import StateOperation, StateRequirement, ComplianceItem
from .calendar import CalendarItem
from .advocacy import AdvocacyIssue, AdvocacyCampaign, AdvocacyAction
from .reports import AnonymousReport
from .access import CpaAccess, LegalAccess
from .meetings import Meeting, Task
from .tokens import ApiToken, ApiLog
from .metrics import PublicMetrics
from .assistant import AiConversation, AiMessage

__all__ = [
    "Base",
    "now_utc",
    "as_utc",
    "User",
    "Option",
    "CacheEntry",
    "Person",
    "Donor",
    "Donation",
    "Volunteer",
    "VolunteerHours",
    "Account",
    "Transaction",
    "Asset",
    "InKindDonation",
    "StateOperation",
    "StateRequirement",
    "ComplianceItem",
    "CalendarItem",
    "AdvocacyIssue",
    "AdvocacyCampaign",
    "AdvocacyAction",
    "AnonymousReport",
    "CpaAccess",
    "LegalAccess",
    "Meeting",
    "Task",
    "ApiToken",
    "ApiLog",
    "PublicMetrics",
    "AiConversation",
    "AiMessage",
]
