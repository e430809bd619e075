"""
Domain-split Pydantic schemas re-exported from one import point.
"""

from .common import Page, PaginationMeta, ErrorBody
from .people import PersonCreate, PersonResponse
from .donors import DonorCreate, DonorUpdate, DonorResponse, DonationCreate, DonationResponse
from .volunteers import VolunteerCreate, VolunteerResponse, HoursCreate, HoursResponse, VolunteerStatusUpdate
from .treasury import (
    AccountCreate,
    AccountResponse,
    TransactionCreate,
    TransactionResponse,
    StatementLine,
    BalanceSheet,
    IncomeStatement,
)
from .assets import AssetCreate, AssetUpdate, AssetDispose, AssetResponse, InKindCreate, InKindResponse
from .compliance import (
    StateOperationCreate,
    StateOperationUpdate,
    StateOperationResponse,
    RequirementUpdate,
    RequirementResponse,
    ComplianceItemCreate,
    ComplianceItemResponse,
)
from .calendar import CalendarItemCreate, CalendarItemResponse
from .advocacy import (
    IssueCreate,
    IssueResponse,
    CampaignCreate,
    CampaignResponse,
    ActionCreate,
    ActionResponse,
)
from .reports import ReportSubmit, ReportUpdate, ReportResponse, ReportStatus
from .access import CpaAccessCreate, CpaAccessResponse, LegalAccessCreate, LegalAccessResponse
from .meetings import MeetingCreate, MeetingResponse, TaskCreate, TaskStatusUpdate, TaskResponse
from .tokens import TokenCreateRequest, TokenResponse, TokenCreateResponse, TokenUsageStats
from .metrics import MetricsValues, MetricsResponse, SharingPreference
from .assistant import ConversationResponse, MessageResponse, AssistantQuery, AssistantReply
