"""Registrant storage backends.

`IdentityStore` is the contract the registration service and ranking engine
depend on. `InMemoryIdentityStore` backs tests and local demos;
`SqlAlchemyIdentityStore` is the durable table used by the API.
"""
import logging
import threading
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from src.models.registrant import Registrant, RegistrantRow
from src.services.ranking import REFERRAL_BONUS
from src.utils.exceptions import DuplicateEmailError, DuplicateReferralCodeError
from src.utils.helpers import next_timestamp

logger = logging.getLogger(__name__)


class IdentityStore(ABC):
    """Registrants keyed by unique email and unique referral code."""

    @abstractmethod
    def insert(self, registrant: Registrant) -> Registrant:
        """
        Store a new registrant and return the stored copy.

        Assigns `id` and `created_at`. When `referred_by` is set, the matching
        registrant (if any) receives one referral credit in the same atomic
        step; an unknown code awards nothing and is not an error.

        Raises:
            DuplicateEmailError: email already stored
            DuplicateReferralCodeError: referral code already stored
        """

    @abstractmethod
    def find_by_email(self, email: str) -> Optional[Registrant]:
        pass

    @abstractmethod
    def find_by_referral_code(self, code: str) -> Optional[Registrant]:
        pass

    @abstractmethod
    def increment_referral(self, code: str, score_delta: int = REFERRAL_BONUS) -> bool:
        """referral_count += 1 and priority_score += score_delta; False if no match."""

    @abstractmethod
    def count(self) -> int:
        pass

    @abstractmethod
    def all(self) -> List[Registrant]:
        """Snapshot of every registrant, in no particular order."""

    @abstractmethod
    def update_status(self, email: str, status: str) -> bool:
        pass

    @abstractmethod
    def adjust_score(self, email: str, delta: int) -> bool:
        pass

    @abstractmethod
    def delete(self, email: str) -> bool:
        pass

    @abstractmethod
    def clear(self) -> int:
        """Remove every registrant and return how many were removed."""


class InMemoryIdentityStore(IdentityStore):
    """Dict-backed store guarded by a single lock."""

    def __init__(self):
        self._lock = threading.Lock()
        self._by_email: Dict[str, Registrant] = {}
        self._email_by_code: Dict[str, str] = {}
        self._next_id = 1
        self._latest_created_at = None

    def insert(self, registrant: Registrant) -> Registrant:
        with self._lock:
            if registrant.email in self._by_email:
                raise DuplicateEmailError()
            if registrant.referral_code in self._email_by_code:
                raise DuplicateReferralCodeError()

            stored = registrant.copy()
            stored.id = self._next_id
            stored.created_at = next_timestamp(self._latest_created_at)
            self._next_id += 1
            self._latest_created_at = stored.created_at

            self._by_email[stored.email] = stored
            self._email_by_code[stored.referral_code] = stored.email

            if stored.referred_by:
                self._increment_locked(stored.referred_by, REFERRAL_BONUS)

            return stored.copy()

    def find_by_email(self, email: str) -> Optional[Registrant]:
        with self._lock:
            found = self._by_email.get(email)
            return found.copy() if found else None

    def find_by_referral_code(self, code: str) -> Optional[Registrant]:
        with self._lock:
            email = self._email_by_code.get(code)
            return self._by_email[email].copy() if email else None

    def increment_referral(self, code: str, score_delta: int = REFERRAL_BONUS) -> bool:
        with self._lock:
            return self._increment_locked(code, score_delta)

    def _increment_locked(self, code: str, score_delta: int) -> bool:
        email = self._email_by_code.get(code)
        if email is None:
            logger.info(f"Referral code not found: {code}")
            return False
        referrer = self._by_email[email]
        referrer.referral_count += 1
        referrer.priority_score += score_delta
        logger.info(f"Referral credited to {referrer.referral_code} (+{score_delta})")
        return True

    def count(self) -> int:
        with self._lock:
            return len(self._by_email)

    def all(self) -> List[Registrant]:
        with self._lock:
            return [r.copy() for r in self._by_email.values()]

    def update_status(self, email: str, status: str) -> bool:
        with self._lock:
            registrant = self._by_email.get(email)
            if registrant is None:
                return False
            registrant.status = status
            return True

    def adjust_score(self, email: str, delta: int) -> bool:
        with self._lock:
            registrant = self._by_email.get(email)
            if registrant is None:
                return False
            registrant.priority_score += delta
            return True

    def delete(self, email: str) -> bool:
        with self._lock:
            registrant = self._by_email.pop(email, None)
            if registrant is None:
                return False
            del self._email_by_code[registrant.referral_code]
            return True

    def clear(self) -> int:
        with self._lock:
            removed = len(self._by_email)
            self._by_email.clear()
            self._email_by_code.clear()
            self._next_id = 1
            return removed


class SqlAlchemyIdentityStore(IdentityStore):
    """Durable store over the `registrants` table.

    Uniqueness is enforced by the table's unique constraints, so concurrent
    inserts with the same email or code cannot both commit.
    """

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def _session(self) -> Session:
        return self._session_factory()

    def insert(self, registrant: Registrant) -> Registrant:
        db = self._session()
        try:
            latest = db.query(func.max(RegistrantRow.created_at)).scalar()
            row = RegistrantRow.from_registrant(registrant)
            row.created_at = next_timestamp(latest)
            db.add(row)
            db.flush()

            if registrant.referred_by:
                self._increment(db, registrant.referred_by, REFERRAL_BONUS)

            db.commit()
            db.refresh(row)
            return row.to_registrant()
        except IntegrityError:
            db.rollback()
            if self._exists(db, RegistrantRow.email == registrant.email):
                raise DuplicateEmailError()
            if self._exists(db, RegistrantRow.referral_code == registrant.referral_code):
                raise DuplicateReferralCodeError()
            raise
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    @staticmethod
    def _exists(db: Session, criterion) -> bool:
        return db.query(RegistrantRow.id).filter(criterion).first() is not None

    @staticmethod
    def _increment(db: Session, code: str, score_delta: int) -> bool:
        updated = db.query(RegistrantRow).filter(RegistrantRow.referral_code == code).update(
            {
                RegistrantRow.referral_count: RegistrantRow.referral_count + 1,
                RegistrantRow.priority_score: RegistrantRow.priority_score + score_delta,
            },
            synchronize_session=False,
        )
        if updated:
            logger.info(f"Referral credited to {code} (+{score_delta})")
        else:
            logger.info(f"Referral code not found: {code}")
        return bool(updated)

    def find_by_email(self, email: str) -> Optional[Registrant]:
        with self._session() as db:
            row = db.query(RegistrantRow).filter(RegistrantRow.email == email).first()
            return row.to_registrant() if row else None

    def find_by_referral_code(self, code: str) -> Optional[Registrant]:
        with self._session() as db:
            row = db.query(RegistrantRow).filter(RegistrantRow.referral_code == code).first()
            return row.to_registrant() if row else None

    def increment_referral(self, code: str, score_delta: int = REFERRAL_BONUS) -> bool:
        with self._session() as db:
            updated = self._increment(db, code, score_delta)
            db.commit()
            return updated

    def count(self) -> int:
        with self._session() as db:
            return db.query(RegistrantRow).count()

    def all(self) -> List[Registrant]:
        with self._session() as db:
            return [row.to_registrant() for row in db.query(RegistrantRow).all()]

    def _update(self, email: str, values: dict) -> bool:
        with self._session() as db:
            updated = db.query(RegistrantRow).filter(RegistrantRow.email == email).update(
                values, synchronize_session=False
            )
            db.commit()
            return bool(updated)

    def update_status(self, email: str, status: str) -> bool:
        return self._update(email, {RegistrantRow.status: status})

    def adjust_score(self, email: str, delta: int) -> bool:
        return self._update(email, {RegistrantRow.priority_score: RegistrantRow.priority_score + delta})

    def delete(self, email: str) -> bool:
        with self._session() as db:
            deleted = db.query(RegistrantRow).filter(RegistrantRow.email == email).delete(
                synchronize_session=False
            )
            db.commit()
            return bool(deleted)

    def clear(self) -> int:
        with self._session() as db:
            removed = db.query(RegistrantRow).delete(synchronize_session=False)
            db.commit()
            return removed
