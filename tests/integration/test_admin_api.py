"""Integration tests for the admin API."""
import pytest


@pytest.fixture
def populated(client):
    """a refers b; c registers on its own."""
    base = {"college_name": "MIT", "age": 20, "city": "Boston"}
    code_a = client.post("/api/register", json=dict(base, email="a@mit.edu")).json()["referralCode"]
    client.post("/api/register", json=dict(base, email="b@mit.edu", referred_by=code_a))
    client.post("/api/register", json=dict(base, email="c@harvard.edu", college_name="Harvard"))
    return client


class TestAdminAuth:
    """Basic auth gate."""

    def test_missing_credentials(self, client, admin_env):
        response = client.get("/api/admin/stats")

        assert response.status_code == 401
        assert response.headers["www-authenticate"].startswith("Basic")
        assert response.json() == {"error": "Authentication required"}

    def test_wrong_password(self, client, admin_env):
        response = client.get("/api/admin/stats", auth=("admin", "wrong"))
        assert response.status_code == 401

    def test_unconfigured_password_rejects(self, client, monkeypatch):
        monkeypatch.delenv("ADMIN_PASSWORD", raising=False)
        response = client.get("/api/admin/stats", auth=("admin", ""))
        assert response.status_code == 401

    def test_valid_credentials(self, client, admin_env):
        assert client.get("/api/admin/stats", auth=admin_env).status_code == 200


class TestAdminReads:
    """Stats, listings and analytics."""

    def test_stats(self, populated, admin_env):
        stats = populated.get("/api/admin/stats", auth=admin_env).json()

        assert stats["total_users"] == 3
        assert stats["referred_users"] == 1
        assert stats["pending_users"] == 3

    def test_users_sorted(self, populated, admin_env):
        body = populated.get("/api/admin/users", auth=admin_env).json()

        assert body["total"] == 3
        assert [u["email"] for u in body["users"]] == ["a@mit.edu", "b@mit.edu", "c@harvard.edu"]
        assert body["users"][0]["priority_score"] == 20
        assert body["users"][0]["referral_count"] == 1

    def test_single_user(self, populated, admin_env):
        response = populated.get("/api/admin/user/c@harvard.edu", auth=admin_env)

        assert response.status_code == 200
        assert response.json()["college_name"] == "Harvard"

    def test_single_user_not_found(self, populated, admin_env):
        response = populated.get("/api/admin/user/ghost@mit.edu", auth=admin_env)
        assert response.status_code == 404

    def test_referrals(self, populated, admin_env):
        referrals = populated.get("/api/admin/referrals", auth=admin_env).json()

        assert len(referrals) == 1
        assert referrals[0]["referrer_email"] == "a@mit.edu"
        assert referrals[0]["referred_email"] == "b@mit.edu"

    def test_analytics(self, populated, admin_env):
        analytics = populated.get("/api/admin/analytics", auth=admin_env).json()

        assert analytics["college_distribution"] == {"MIT": 2, "Harvard": 1}
        assert analytics["priority_distribution"] == {"high": 1, "medium": 1, "low": 1}
        assert analytics["referral_stats"]["active_referrers"] == 1


class TestAdminWrites:
    """Status, bulk and clear."""

    def test_update_status(self, populated, admin_env):
        response = populated.put(
            "/api/admin/user/b@mit.edu/status", json={"status": "approved"}, auth=admin_env
        )

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "User status updated to approved"}
        user = populated.get("/api/admin/user/b@mit.edu", auth=admin_env).json()
        assert user["status"] == "approved"

    def test_update_status_invalid(self, populated, admin_env):
        response = populated.put(
            "/api/admin/user/b@mit.edu/status", json={"status": "vip"}, auth=admin_env
        )
        assert response.status_code == 400

    def test_update_status_unknown_user(self, populated, admin_env):
        response = populated.put(
            "/api/admin/user/ghost@mit.edu/status", json={"status": "approved"}, auth=admin_env
        )
        assert response.status_code == 404

    def test_bulk_priority_boost_reorders(self, populated, admin_env):
        response = populated.put(
            "/api/admin/users/bulk",
            json={"emails": ["c@harvard.edu"], "action": "priority_boost", "value": 50},
            auth=admin_env,
        )

        assert response.json() == {
            "success": True,
            "message": "priority_boost applied to 1 users",
            "updated_count": 1,
        }
        assert populated.get("/api/queue/c@harvard.edu").json()["queuePosition"] == 1

    def test_bulk_without_emails(self, populated, admin_env):
        response = populated.put(
            "/api/admin/users/bulk", json={"emails": [], "action": "delete"}, auth=admin_env
        )

        assert response.status_code == 400
        assert response.json() == {"error": "No emails provided"}

    def test_bulk_delete(self, populated, admin_env):
        populated.put(
            "/api/admin/users/bulk",
            json={"emails": ["a@mit.edu", "b@mit.edu"], "action": "delete"},
            auth=admin_env,
        )
        assert populated.get("/api/admin/stats", auth=admin_env).json()["total_users"] == 1

    def test_clear_requires_confirmation(self, populated, admin_env):
        response = populated.request("DELETE", "/api/admin/clear", json={}, auth=admin_env)

        assert response.status_code == 400
        assert response.json() == {"error": "Confirmation required"}

    def test_clear(self, populated, admin_env):
        response = populated.request(
            "DELETE", "/api/admin/clear", json={"confirm": "DELETE"}, auth=admin_env
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Database cleared - 3 users deleted"
        assert populated.get("/api/health").json()["users_count"] == 0
