from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional, Union
from datetime import datetime

class RegistrationRequest(BaseModel):
    # Everything optional here: missing fields are reported by the service as 400s
    email: Optional[str] = None
    college_name: Optional[str] = None
    age: Optional[Union[int, str]] = None
    city: Optional[str] = None
    instagram: Optional[str] = None
    teaser_answer: Optional[str] = None
    referred_by: Optional[str] = None

class RegistrationResponse(BaseModel):
    success: bool = True
    referralCode: str
    queuePosition: int
    totalUsers: int
    priorityScore: int

class QueueStatusResponse(BaseModel):
    queuePosition: int
    totalUsers: int
    referralCode: str
    referralCount: int
    priorityScore: int

class RegistrantResponse(BaseModel):
    id: Optional[int] = None
    email: str
    college_name: str
    age: int
    city: str
    instagram: Optional[str] = None
    teaser_answer: Optional[str] = None
    referral_code: str
    referred_by: Optional[str] = None
    referral_count: int
    priority_score: int
    created_at: datetime
    status: str

    class Config:
        from_attributes = True

class RegistrantListResponse(BaseModel):
    total: int
    users: List[RegistrantResponse]

class StatsResponse(BaseModel):
    total_users: int
    answered_teaser: int
    referred_users: int
    avg_priority_score: float
    has_instagram: int
    pending_users: int
    approved_users: int

class ReferralResponse(BaseModel):
    id: int
    referrer_email: str
    referred_email: str
    referrer_code: str
    referred_college: str
    created_at: datetime

class StatusUpdate(BaseModel):
    status: Optional[str] = None

class BulkUpdate(BaseModel):
    emails: Optional[List[str]] = None
    action: Optional[str] = None
    value: Optional[Any] = None

class ClearRequest(BaseModel):
    confirm: Optional[str] = None

class ActionResponse(BaseModel):
    success: bool
    message: str
    updated_count: Optional[int] = None

class ReferralStats(BaseModel):
    total_referrals: int
    active_referrers: int
    top_referrers: List[Dict[str, Any]]

class AnalyticsResponse(BaseModel):
    registration_timeline: Dict[str, int]
    college_distribution: Dict[str, int]
    priority_distribution: Dict[str, int] = Field(default_factory=dict)
    referral_stats: ReferralStats

class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    users_count: int
    uptime: float
