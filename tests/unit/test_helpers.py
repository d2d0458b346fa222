"""Tests for helper utilities."""
import re
from datetime import datetime, timedelta, timezone

from src.utils.helpers import (
    generate_referral_code,
    is_college_email,
    mask_email,
    next_timestamp,
)


class TestGenerateReferralCode:
    """Test generate_referral_code function."""

    def test_code_is_six_uppercase_alphanumerics(self):
        for _ in range(50):
            assert re.fullmatch(r"[A-Z0-9]{6}", generate_referral_code())

    def test_custom_length(self):
        assert len(generate_referral_code(10)) == 10


class TestIsCollegeEmail:
    """Test is_college_email function."""

    def test_edu_domain_accepted(self):
        assert is_college_email("a@mit.edu") is True

    def test_ac_domain_accepted(self):
        assert is_college_email("student@cam.ac.uk") is True

    def test_edu_country_domain_accepted(self):
        assert is_college_email("x@unimelb.edu.au") is True

    def test_gmail_rejected(self):
        assert is_college_email("x@gmail.com") is False

    def test_edu_without_dot_rejected(self):
        assert is_college_email("x@education.com") is False

    def test_edu_in_local_part_rejected(self):
        assert is_college_email("john.edu@gmail.com") is False
        assert is_college_email("jane.ac.uk@yahoo.com") is False

    def test_missing_at_rejected(self):
        assert is_college_email("mit.edu") is False
        assert is_college_email("@mit.edu") is False


class TestNextTimestamp:
    """Test next_timestamp function."""

    def test_without_previous_returns_aware_now(self):
        ts = next_timestamp()
        assert ts.tzinfo is not None
        assert abs(datetime.now(timezone.utc) - ts) < timedelta(seconds=5)

    def test_bumps_past_future_latest(self):
        latest = datetime.now(timezone.utc) + timedelta(hours=1)
        assert next_timestamp(latest) == latest + timedelta(microseconds=1)

    def test_naive_latest_treated_as_utc(self):
        latest = datetime.now(timezone.utc).replace(tzinfo=None) + timedelta(hours=1)
        ts = next_timestamp(latest)
        assert ts == latest.replace(tzinfo=timezone.utc) + timedelta(microseconds=1)

    def test_strictly_increasing(self):
        first = next_timestamp()
        second = next_timestamp(first)
        assert second > first


class TestMaskEmail:
    """Test mask_email function."""

    def test_masks_local_part(self):
        assert mask_email("alice@mit.edu") == "a***e@mit.edu"

    def test_short_local_part_unchanged(self):
        assert mask_email("ab@mit.edu") == "ab@mit.edu"
