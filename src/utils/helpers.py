import random
import re
import string
from datetime import datetime, timedelta, timezone
from typing import Optional

REFERRAL_CODE_LENGTH = 6

COLLEGE_EMAIL_PATTERN = re.compile(r"\.(edu|ac\.|edu\.)")

def generate_referral_code(length: int = REFERRAL_CODE_LENGTH) -> str:
    """Generate a random uppercase alphanumeric referral code of specified length"""
    characters = string.ascii_uppercase + string.digits
    return ''.join(random.choice(characters) for _ in range(length))

def is_college_email(email: str) -> bool:
    """Check whether an email's domain looks like a college (.edu, .ac., .edu.)"""
    local, at, domain = email.rpartition("@")
    if not local or not at:
        return False
    return bool(COLLEGE_EMAIL_PATTERN.search(domain))

def utc_now() -> datetime:
    return datetime.now(timezone.utc)

def next_timestamp(latest: Optional[datetime] = None) -> datetime:
    """Return the current UTC time, bumped past `latest` so creation times stay strictly increasing"""
    now = utc_now()
    if latest is None:
        return now
    if latest.tzinfo is None:
        latest = latest.replace(tzinfo=timezone.utc)
    if now <= latest:
        return latest + timedelta(microseconds=1)
    return now

def mask_email(email: str) -> str:
    """Mask the local part of an email for log output (show only first and last character)"""
    local, _, domain = email.partition("@")
    if len(local) <= 2:
        return email
    return local[0] + "*" * (len(local) - 2) + local[-1] + "@" + domain
