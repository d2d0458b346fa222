"""Registrant data model for the waitlist."""
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlalchemy import Column, String, Integer, DateTime, Text

from .database import Base


class RegistrantStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


@dataclass
class Registrant:
    """One waitlist entry, independent of the backing store."""

    email: str
    college_name: str
    age: int
    city: str
    referral_code: str
    priority_score: int = 0
    instagram: Optional[str] = None
    teaser_answer: Optional[str] = None
    referred_by: Optional[str] = None
    referral_count: int = 0
    status: str = RegistrantStatus.PENDING.value
    created_at: Optional[datetime] = None  # assigned by the store on insert
    id: Optional[int] = field(default=None)

    def copy(self) -> "Registrant":
        return replace(self)


class RegistrantRow(Base):
    __tablename__ = "registrants"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    college_name = Column(String, nullable=False)
    age = Column(Integer, nullable=False)
    city = Column(String, nullable=False)
    instagram = Column(String, nullable=True)
    teaser_answer = Column(Text, nullable=True)
    referral_code = Column(String(6), unique=True, index=True, nullable=False)
    referred_by = Column(String, nullable=True)
    referral_count = Column(Integer, default=0, nullable=False)
    priority_score = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)
    status = Column(String, default=RegistrantStatus.PENDING.value, nullable=False)

    @classmethod
    def from_registrant(cls, registrant: Registrant) -> "RegistrantRow":
        return cls(
            email=registrant.email,
            college_name=registrant.college_name,
            age=registrant.age,
            city=registrant.city,
            instagram=registrant.instagram,
            teaser_answer=registrant.teaser_answer,
            referral_code=registrant.referral_code,
            referred_by=registrant.referred_by,
            referral_count=registrant.referral_count,
            priority_score=registrant.priority_score,
            created_at=registrant.created_at,
            status=registrant.status,
        )

    def to_registrant(self) -> Registrant:
        created_at = self.created_at
        # SQLite drops tzinfo on the way back
        if created_at is not None and created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return Registrant(
            id=self.id,
            email=self.email,
            college_name=self.college_name,
            age=self.age,
            city=self.city,
            instagram=self.instagram,
            teaser_answer=self.teaser_answer,
            referral_code=self.referral_code,
            referred_by=self.referred_by,
            referral_count=self.referral_count,
            priority_score=self.priority_score,
            created_at=created_at,
            status=self.status,
        )
