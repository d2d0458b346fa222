"""Tests for admin dashboard helpers."""
from src.app.dashboard.main import format_date, users_to_dataframe


def make_user(email, score):
    return {
        "id": 1,
        "email": email,
        "college_name": "MIT",
        "age": 20,
        "city": "Boston",
        "instagram": None,
        "teaser_answer": None,
        "referral_code": "AAAAAA",
        "referred_by": None,
        "referral_count": 0,
        "priority_score": score,
        "created_at": "2026-10-18T09:30:00Z",
        "status": "pending",
    }


class TestUsersToDataframe:
    """Tests for the registrant table."""

    def test_positions_follow_api_order(self):
        df = users_to_dataframe([make_user("a@mit.edu", 20), make_user("b@mit.edu", 0)])

        assert list(df["Position"]) == [1, 2]
        assert list(df["Email"]) == ["a@mit.edu", "b@mit.edu"]

    def test_missing_optionals_shown_blank(self):
        df = users_to_dataframe([make_user("a@mit.edu", 0)])

        assert df.loc[0, "Instagram"] == ""
        assert df.loc[0, "Referred By"] == ""
        assert df.loc[0, "Joined"] == "2026-10-18 09:30"

    def test_empty(self):
        assert users_to_dataframe([]).empty


class TestFormatDate:
    """Tests for date formatting."""

    def test_iso_with_z(self):
        assert format_date("2026-10-18T09:30:00Z") == "2026-10-18 09:30"

    def test_invalid_returned_unchanged(self):
        assert format_date("not a date") == "not a date"

    def test_none_returned_unchanged(self):
        assert format_date(None) is None
