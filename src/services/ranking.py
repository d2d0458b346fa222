"""Priority scoring and queue ordering."""
from datetime import datetime, timezone
from typing import Iterable, List, Tuple

from src.models.registrant import Registrant
from src.utils.exceptions import RegistrantNotFoundError

TEASER_BONUS = 10
TEASER_MIN_LENGTH = 20  # answers must be strictly longer than this
INSTAGRAM_BONUS = 5
REFERRED_BONUS = 15
REFERRAL_BONUS = 20  # awarded to the referrer, per referral

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def calculate_priority_score(teaser_answer_len: int, has_instagram: bool, has_referrer: bool) -> int:
    """
    Compute a new registrant's starting priority score.

    Only evaluated once, at creation. Later changes to these fields never
    change the stored score; referral bonuses are the only increments.
    """
    score = 0
    if teaser_answer_len > TEASER_MIN_LENGTH:
        score += TEASER_BONUS
    if has_instagram:
        score += INSTAGRAM_BONUS
    if has_referrer:
        score += REFERRED_BONUS
    return score


def queue_key(registrant: Registrant) -> Tuple[int, datetime]:
    """Sort key: higher score first, then earlier creation first."""
    return (-registrant.priority_score, registrant.created_at or _EPOCH)


def is_ahead(a: Registrant, b: Registrant) -> bool:
    """True if `a` is strictly ordered before `b` in the queue."""
    return queue_key(a) < queue_key(b)


def position_in(registrants: Iterable[Registrant], target: Registrant) -> int:
    """1-based position of `target` among `registrants`."""
    return 1 + sum(1 for other in registrants if is_ahead(other, target))


def rank(store, email: str) -> int:
    """
    Queue position of the registrant with the given email.

    Args:
        store: IdentityStore to read from
        email: Registrant email

    Returns:
        1 + number of registrants strictly ahead

    Raises:
        RegistrantNotFoundError: If no registrant has this email
    """
    snapshot = store.all()
    target = next((r for r in snapshot if r.email == email), None)
    if target is None:
        raise RegistrantNotFoundError()
    return position_in(snapshot, target)


def sort_registrants(registrants: Iterable[Registrant]) -> List[Registrant]:
    """Full queue order, for admin listings."""
    return sorted(registrants, key=queue_key)
