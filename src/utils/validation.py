"""Registration input validation."""
from typing import Any, Dict, Optional

from src.utils.exceptions import ValidationError
from src.utils.helpers import is_college_email

MINIMUM_AGE = 18

REQUIRED_FIELDS = ["email", "college_name", "age", "city"]


def _clean(value: Any) -> Optional[str]:
    """Strip a submitted string; empty strings become None."""
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _optional(value: Any) -> Optional[str]:
    """Keep a free-text field as submitted; empty values become None."""
    if value is None or value == "":
        return None
    return str(value)


def parse_age(value: Any) -> int:
    """
    Coerce a submitted age to an integer.

    Args:
        value: Raw age (int or numeric string)

    Returns:
        Age as int

    Raises:
        ValidationError: If the value is not an integer or is under 18
    """
    if isinstance(value, bool):
        raise ValidationError("Age must be a number")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValidationError("Age must be a number")
        age = int(value)
    else:
        try:
            age = int(str(value).strip())
        except (TypeError, ValueError):
            raise ValidationError("Age must be a number")

    if age < MINIMUM_AGE:
        raise ValidationError(f"You must be at least {MINIMUM_AGE} years old")
    return age


def validate_registration(payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate and normalize a registration payload.

    Args:
        payload: Raw request fields (email, college_name, age, city,
            instagram, teaser_answer, referred_by)

    Returns:
        Normalized dict with stripped required strings, optional fields
        as submitted (None when empty) and age as int

    Raises:
        ValidationError: Missing required field, bad age, or non-college email
    """
    cleaned = {
        "email": _clean(payload.get("email")),
        "college_name": _clean(payload.get("college_name")),
        "city": _clean(payload.get("city")),
        "instagram": _optional(payload.get("instagram")),
        "teaser_answer": _optional(payload.get("teaser_answer")),
        "referred_by": _optional(payload.get("referred_by")),
    }

    age = payload.get("age")
    if isinstance(age, str):
        age = _clean(age)

    if not all([cleaned["email"], cleaned["college_name"], age is not None, cleaned["city"]]):
        raise ValidationError("Missing required fields")

    cleaned["age"] = parse_age(age)

    if not is_college_email(cleaned["email"]):
        raise ValidationError("Please use your college email address")

    return cleaned
