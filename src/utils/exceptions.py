"""Custom exception classes."""


class WaitlistError(Exception):
    """Base class for waitlist errors surfaced to API callers."""
    pass


class ValidationError(WaitlistError):
    """Raised when registration data fails validation."""
    pass


class DuplicateKeyError(WaitlistError):
    """Raised when an insert would break email or referral code uniqueness."""
    pass


class DuplicateEmailError(DuplicateKeyError):
    """Raised when the email is already registered."""

    def __init__(self, message: str = "Email already registered"):
        super().__init__(message)


class DuplicateReferralCodeError(DuplicateKeyError):
    """Raised when a generated referral code is already taken."""

    def __init__(self, message: str = "Referral code already exists"):
        super().__init__(message)


class RegistrantNotFoundError(WaitlistError):
    """Raised when no registrant exists for the given email."""

    def __init__(self, message: str = "User not found"):
        super().__init__(message)
