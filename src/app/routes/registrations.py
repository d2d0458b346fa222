from fastapi import APIRouter, Depends, Request
from datetime import datetime, timezone
import time

from src.models.schemas import (
    RegistrationRequest, RegistrationResponse, QueueStatusResponse, HealthResponse
)
from src.services.identity_store import IdentityStore
from src.services.registration_service import RegistrationService
from src.app.dependencies import get_store, get_registration_service

router = APIRouter(tags=["waitlist"])

@router.post("/register", response_model=RegistrationResponse)
def register(
    registration: RegistrationRequest,
    service: RegistrationService = Depends(get_registration_service)
):
    """Join the waitlist and get a referral code and queue position"""
    result = service.register(registration.model_dump())
    return RegistrationResponse(
        success=True,
        referralCode=result.referral_code,
        queuePosition=result.queue_position,
        totalUsers=result.total_users,
        priorityScore=result.priority_score
    )

@router.get("/queue/{email}", response_model=QueueStatusResponse)
def queue_status(
    email: str,
    service: RegistrationService = Depends(get_registration_service)
):
    """Current queue position and referral stats for a registrant"""
    status = service.queue_status(email)
    return QueueStatusResponse(
        queuePosition=status.queue_position,
        totalUsers=status.total_users,
        referralCode=status.referral_code,
        referralCount=status.referral_count,
        priorityScore=status.priority_score
    )

@router.get("/health", response_model=HealthResponse)
def health_check(request: Request, store: IdentityStore = Depends(get_store)):
    """Health check endpoint"""
    return HealthResponse(
        status="OK",
        timestamp=datetime.now(timezone.utc),
        users_count=store.count(),
        uptime=time.monotonic() - request.app.state.started_at
    )
