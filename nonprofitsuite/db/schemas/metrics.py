from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class MetricsValues(BaseModel):
    metric_year: int
    total_revenue: float = 0.0
    total_expenses: float = 0.0
    program_expenses: float = 0.0
    fundraising_expenses: float = 0.0
    admin_expenses: float = 0.0
    program_expense_ratio: float = 0.0
    fundraising_ratio: float = 0.0
    admin_ratio: float = 0.0
    num_employees: int = 0
    num_volunteers: int = 0
    num_board_members: int = 0
    num_board_meetings: int = 0
    num_programs: int = 0
    num_donors: int = 0
    states_operating: List[str] = []


class MetricsResponse(MetricsValues):
    id: int
    submitted_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class SharingPreference(BaseModel):
    enabled: bool
