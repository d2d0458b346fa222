"""Registration service for admitting waitlist registrants."""
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict

from src.models.registrant import Registrant, RegistrantStatus
from src.services.identity_store import IdentityStore
from src.services.ranking import calculate_priority_score, rank
from src.utils.exceptions import (
    DuplicateEmailError,
    DuplicateReferralCodeError,
    RegistrantNotFoundError,
)
from src.utils.helpers import generate_referral_code, mask_email
from src.utils.validation import validate_registration

logger = logging.getLogger(__name__)

MAX_CODE_ATTEMPTS = 5


@dataclass
class RegistrationResult:
    referral_code: str
    priority_score: int
    queue_position: int
    total_users: int


@dataclass
class QueueStatus:
    queue_position: int
    total_users: int
    referral_code: str
    referral_count: int
    priority_score: int


class RegistrationService:
    """Validates and admits registrants, and reports their queue position."""

    def __init__(self, store: IdentityStore, code_generator: Callable[[], str] = generate_referral_code):
        self.store = store
        self._generate_code = code_generator

    def _unused_code(self, referred_by: str = None) -> str:
        """Draw codes until one is not already issued (or equal to the code being redeemed)."""
        for _ in range(MAX_CODE_ATTEMPTS):
            code = self._generate_code()
            if code != referred_by and self.store.find_by_referral_code(code) is None:
                return code
        raise DuplicateReferralCodeError("Could not generate a unique referral code")

    def register(self, payload: Dict[str, Any]) -> RegistrationResult:
        """
        Register a new waitlist entry.

        Args:
            payload: Submitted fields (email, college_name, age, city,
                instagram, teaser_answer, referred_by)

        Returns:
            RegistrationResult with the issued referral code, starting score,
            queue position and total registrant count

        Raises:
            ValidationError: Missing/malformed field, under-age, non-college email
            DuplicateEmailError: Email already registered

        Behavior:
            - Validation and the duplicate check happen before any write
            - A referral code collision is retried with a fresh code
            - An unknown `referred_by` still earns the new registrant +15,
              but nobody receives a referral credit
        """
        data = validate_registration(payload)

        if self.store.find_by_email(data["email"]) is not None:
            logger.info(f"Email already registered: {mask_email(data['email'])}")
            raise DuplicateEmailError()

        priority_score = calculate_priority_score(
            len(data["teaser_answer"] or ""),
            bool(data["instagram"]),
            bool(data["referred_by"]),
        )

        last_error = None
        for attempt in range(MAX_CODE_ATTEMPTS):
            registrant = Registrant(
                email=data["email"],
                college_name=data["college_name"],
                age=data["age"],
                city=data["city"],
                instagram=data["instagram"],
                teaser_answer=data["teaser_answer"],
                referred_by=data["referred_by"],
                referral_code=self._unused_code(data["referred_by"]),
                priority_score=priority_score,
                referral_count=0,
                status=RegistrantStatus.PENDING.value,
            )
            try:
                stored = self.store.insert(registrant)
                break
            except DuplicateReferralCodeError as e:
                logger.warning(f"Referral code collision on attempt {attempt + 1}, regenerating")
                last_error = e
        else:
            raise last_error

        queue_position = rank(self.store, stored.email)
        total_users = self.store.count()

        logger.info(
            f"Registered {mask_email(stored.email)}: position {queue_position}/{total_users}, "
            f"score {stored.priority_score}, code {stored.referral_code}"
        )

        return RegistrationResult(
            referral_code=stored.referral_code,
            priority_score=stored.priority_score,
            queue_position=queue_position,
            total_users=total_users,
        )

    def queue_status(self, email: str) -> QueueStatus:
        """
        Look up a registrant's current place in the queue.

        Raises:
            RegistrantNotFoundError: If the email is not registered
        """
        email = (email or "").strip()
        registrant = self.store.find_by_email(email)
        if registrant is None:
            raise RegistrantNotFoundError()

        return QueueStatus(
            queue_position=rank(self.store, email),
            total_users=self.store.count(),
            referral_code=registrant.referral_code,
            referral_count=registrant.referral_count,
            priority_score=registrant.priority_score,
        )
