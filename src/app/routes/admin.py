from fastapi import APIRouter, Depends
from typing import List

from src.models.schemas import (
    RegistrantResponse, RegistrantListResponse, StatsResponse, ReferralResponse,
    StatusUpdate, BulkUpdate, ClearRequest, ActionResponse, AnalyticsResponse
)
from src.services import admin_service
from src.services.identity_store import IdentityStore
from src.app.dependencies import get_store, admin_dependency

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[admin_dependency])

@router.get("/stats", response_model=StatsResponse)
def get_stats(store: IdentityStore = Depends(get_store)):
    """Registrant counts and average priority score"""
    return admin_service.get_stats(store)

@router.get("/users", response_model=RegistrantListResponse)
def get_users(store: IdentityStore = Depends(get_store)):
    """All registrants in queue order"""
    users = admin_service.list_registrants(store)
    return RegistrantListResponse(
        total=len(users),
        users=[RegistrantResponse.model_validate(u) for u in users]
    )

@router.get("/user/{email}", response_model=RegistrantResponse)
def get_user(email: str, store: IdentityStore = Depends(get_store)):
    """Get a single registrant"""
    return RegistrantResponse.model_validate(admin_service.get_registrant(store, email))

@router.get("/referrals", response_model=List[ReferralResponse])
def get_referrals(store: IdentityStore = Depends(get_store)):
    """Who referred whom, newest first"""
    return admin_service.get_referrals(store)

@router.put("/user/{email}/status", response_model=ActionResponse, response_model_exclude_none=True)
def update_user_status(
    email: str,
    update: StatusUpdate,
    store: IdentityStore = Depends(get_store)
):
    """Approve, reject or reset a registrant"""
    status = admin_service.update_status(store, email, update.status)
    return ActionResponse(success=True, message=f"User status updated to {status}")

@router.put("/users/bulk", response_model=ActionResponse)
def bulk_update_users(update: BulkUpdate, store: IdentityStore = Depends(get_store)):
    """Apply a status change, priority boost or delete to many registrants"""
    updated_count = admin_service.bulk_update(store, update.emails, update.action, update.value)
    return ActionResponse(
        success=True,
        message=f"{update.action} applied to {updated_count} users",
        updated_count=updated_count
    )

@router.delete("/clear", response_model=ActionResponse, response_model_exclude_none=True)
def clear_database(body: ClearRequest, store: IdentityStore = Depends(get_store)):
    """Delete every registrant; requires {"confirm": "DELETE"}"""
    removed = admin_service.clear_all(store, body.confirm)
    return ActionResponse(success=True, message=f"Database cleared - {removed} users deleted")

@router.get("/analytics", response_model=AnalyticsResponse)
def get_analytics(store: IdentityStore = Depends(get_store)):
    """Timeline, college and priority distributions, and top referrers"""
    return admin_service.get_analytics(store)
