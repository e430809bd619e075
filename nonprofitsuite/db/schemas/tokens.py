from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, field_validator


class TokenCreateRequest(BaseModel):
    token_name: str
    permissions: List[str] = []
    expires_days: int = 365

    @field_validator("permissions")
    @classmethod
    def _validate_permissions(cls, v: List[str]):
        cleaned = [p.strip().lower() for p in (v or []) if p and p.strip()]
        allowed = {"read", "write"}
        for p in cleaned:
            if p not in allowed:
                raise ValueError(f"Invalid permission: {p}")
        return cleaned

    @field_validator("expires_days")
    @classmethod
    def _validate_expiry(cls, v: int):
        if v < 1 or v > 3650:
            raise ValueError("expires_days must be between 1 and 3650")
        return v


class TokenResponse(BaseModel):
    id: int
    user_id: int
    token_name: str
    permissions: List[str]
    is_active: bool
    created_at: datetime
    last_used: Optional[datetime] = None
    expires_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class TokenCreateResponse(BaseModel):
    token_id: int
    token: str  # shown once
    token_name: str
    expires_at: Optional[datetime] = None


class TokenUsageStats(BaseModel):
    total_requests: int
    avg_response_time: float
    max_response_time: float
    successful_requests: int
    failed_requests: int
