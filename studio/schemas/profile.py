from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class DailyClaimStatus(BaseModel):
    can_claim: bool
    grant_tokens: int
    last_claimed_at: Optional[datetime] = None
    next_claim_at: Optional[datetime] = None


class ProfileResponse(BaseModel):
    id: str
    email: str
    full_name: Optional[str] = None
    tokens: int
    subscription_type: str  # Stored tier (free/monthly/yearly)
    effective_subscription_type: str  # Reads as free once the paid period has ended
    subscription_expires_at: Optional[datetime] = None
    daily_claim: DailyClaimStatus
    created_at: Optional[datetime] = None


class ProfileUpdate(BaseModel):
    full_name: Optional[str] = Field(default=None, max_length=200)


class BalanceResponse(BaseModel):
    tokens: int


class DailyClaimResponse(BaseModel):
    tokens: int
    granted: int
    next_claim_at: datetime


class PromoRedeemRequest(BaseModel):
    code: str = Field(min_length=1, max_length=64)


class PromoRedeemResponse(BaseModel):
    code: str
    granted: int
    tokens: int
