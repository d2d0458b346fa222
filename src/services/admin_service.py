"""Admin projections and moderation actions over the identity store."""
import logging
from collections import Counter
from functools import partial
from typing import Any, Dict, List, Optional

from src.models.registrant import Registrant, RegistrantStatus
from src.services.identity_store import IdentityStore
from src.services.ranking import sort_registrants
from src.utils.exceptions import RegistrantNotFoundError, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_PRIORITY_BOOST = 10
TOP_REFERRERS_LIMIT = 10
CLEAR_CONFIRMATION = "DELETE"

BULK_ACTIONS = ("status", "priority_boost", "delete")


def validate_status(status: Any) -> str:
    """Return the status value if it is a known RegistrantStatus."""
    try:
        return RegistrantStatus(status).value
    except ValueError:
        allowed = ", ".join(s.value for s in RegistrantStatus)
        raise ValidationError(f"Status must be one of: {allowed}")


def get_stats(store: IdentityStore) -> Dict[str, Any]:
    users = store.all()
    total = len(users)
    return {
        "total_users": total,
        "answered_teaser": sum(1 for u in users if u.teaser_answer),
        "referred_users": sum(1 for u in users if u.referred_by),
        "avg_priority_score": sum(u.priority_score for u in users) / total if total else 0,
        "has_instagram": sum(1 for u in users if u.instagram),
        "pending_users": sum(1 for u in users if u.status == RegistrantStatus.PENDING.value),
        "approved_users": sum(1 for u in users if u.status == RegistrantStatus.APPROVED.value),
    }


def list_registrants(store: IdentityStore) -> List[Registrant]:
    """All registrants in queue order."""
    return sort_registrants(store.all())


def get_registrant(store: IdentityStore, email: str) -> Registrant:
    registrant = store.find_by_email(email)
    if registrant is None:
        raise RegistrantNotFoundError()
    return registrant


def get_referrals(store: IdentityStore) -> List[Dict[str, Any]]:
    """
    Referral edges whose referrer still exists, newest first.

    Returns:
        List of dicts with id, referrer_email, referred_email, referrer_code,
        referred_college and created_at (of the referred registrant)
    """
    users = store.all()
    by_code = {u.referral_code: u for u in users}

    edges = []
    for user in sorted(users, key=lambda u: u.created_at):
        referrer = by_code.get(user.referred_by) if user.referred_by else None
        if referrer is None:
            continue
        edges.append({
            "id": len(edges) + 1,
            "referrer_email": referrer.email,
            "referred_email": user.email,
            "referrer_code": referrer.referral_code,
            "referred_college": user.college_name,
            "created_at": user.created_at,
        })

    edges.sort(key=lambda e: e["created_at"], reverse=True)
    return edges


def update_status(store: IdentityStore, email: str, status: Any) -> str:
    """
    Set a registrant's moderation status.

    Raises:
        ValidationError: Unknown status value
        RegistrantNotFoundError: Unknown email
    """
    status = validate_status(status)
    if not store.update_status(email, status):
        raise RegistrantNotFoundError()
    logger.info(f"Updated registrant status to {status}")
    return status


def bulk_update(store: IdentityStore, emails: Optional[List[str]], action: str, value: Any = None) -> int:
    """
    Apply one action to several registrants.

    Args:
        store: IdentityStore
        emails: Target emails; unknown ones are skipped
        action: "status", "priority_boost" or "delete"
        value: New status, or boost amount (default 10)

    Returns:
        Number of registrants the action was applied to

    Raises:
        ValidationError: No emails, unknown action, or bad value
    """
    if not emails or not isinstance(emails, list):
        raise ValidationError("No emails provided")
    if action not in BULK_ACTIONS:
        raise ValidationError(f"Unknown action: {action}")

    if action == "status":
        status = validate_status(value)
        apply = partial(store.update_status, status=status)
    elif action == "priority_boost":
        try:
            boost = int(value) if value else DEFAULT_PRIORITY_BOOST
        except (TypeError, ValueError):
            raise ValidationError("Priority boost must be a number")
        apply = partial(store.adjust_score, delta=boost)
    else:
        apply = store.delete

    updated = sum(1 for email in emails if apply(email))
    logger.info(f"Bulk {action} applied to {updated} registrants")
    return updated


def clear_all(store: IdentityStore, confirm: Optional[str]) -> int:
    if confirm != CLEAR_CONFIRMATION:
        raise ValidationError("Confirmation required")
    removed = store.clear()
    logger.warning(f"Waitlist cleared - {removed} registrants deleted")
    return removed


def _priority_band(score: int) -> str:
    if score >= 20:
        return "high"
    if score >= 10:
        return "medium"
    return "low"


def get_analytics(store: IdentityStore) -> Dict[str, Any]:
    """Registration timeline, college and priority distributions, referral stats."""
    users = store.all()

    timeline = Counter(u.created_at.date().isoformat() for u in users if u.created_at)
    colleges = Counter(u.college_name for u in users)

    bands = {"high": 0, "medium": 0, "low": 0}
    for u in users:
        bands[_priority_band(u.priority_score)] += 1

    referrers = sorted(
        (u for u in users if u.referral_count > 0),
        key=lambda u: u.referral_count,
        reverse=True,
    )

    return {
        "registration_timeline": dict(sorted(timeline.items())),
        "college_distribution": dict(colleges),
        "priority_distribution": bands,
        "referral_stats": {
            "total_referrals": sum(1 for u in users if u.referred_by),
            "active_referrers": len(referrers),
            "top_referrers": [
                {"email": u.email, "referral_count": u.referral_count, "college": u.college_name}
                for u in referrers[:TOP_REFERRERS_LIMIT]
            ],
        },
    }
