"""
API tests for registration, login, profile and the monthly goal.
"""
from datetime import date, timedelta

from pipdesk import crud

USER_EMAIL = "trader@example.com"
PASSWORD = "secret123"


class TestAuth:
    def test_register_logs_in(self, client):
        response = client.post(
            "/api/auth/register",
            json={"email": "New@Example.com", "password": "longenough", "first_name": "Ana"},
        )
        assert response.status_code == 201
        body = response.json()
        assert body["token_type"] == "bearer"
        assert body["user"]["email"] == "new@example.com"
        assert body["user"]["subscription_plan"] == "free"
        assert "access_token" in response.cookies

    def test_register_rejects_duplicates_and_short_passwords(self, client, regular_user):
        assert client.post("/api/auth/register", json={"email": USER_EMAIL, "password": PASSWORD}).status_code == 400
        assert client.post("/api/auth/register", json={"email": "x@example.com", "password": "123"}).status_code == 400
        assert client.post("/api/auth/register", json={"email": "nobody", "password": PASSWORD}).status_code == 400

    def test_login_failure(self, client, regular_user):
        response = client.post("/api/auth/login", json={"email": USER_EMAIL, "password": "wrong"})
        assert response.status_code == 401

    def test_current_user_requires_token(self, client):
        assert client.get("/api/auth/user").status_code == 401

    def test_current_user(self, client, user_headers):
        response = client.get("/api/auth/user", headers=user_headers)
        assert response.status_code == 200
        assert response.json()["email"] == USER_EMAIL

    def test_cookie_authentication(self, client, regular_user):
        client.post("/api/auth/login", json={"email": USER_EMAIL, "password": PASSWORD})
        assert client.get("/api/auth/user").status_code == 200
        client.post("/api/auth/logout")
        client.cookies.clear()
        assert client.get("/api/auth/user").status_code == 401

    def test_garbage_token(self, client):
        response = client.get("/api/auth/user", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_banned_user_is_forbidden(self, client, db, regular_user, user_headers):
        crud.update_user(db, regular_user, {"is_banned": True})
        assert client.get("/api/profile", headers=user_headers).status_code == 403


class TestProfile:
    def test_update_profile(self, client, user_headers):
        response = client.put("/api/profile", json={"first_name": "Rui", "bio": "Scalper"}, headers=user_headers)
        assert response.status_code == 200
        assert response.json()["first_name"] == "Rui"
        assert response.json()["bio"] == "Scalper"

    def test_free_subscription(self, client, user_headers):
        body = client.get("/api/profile/subscription", headers=user_headers).json()
        assert body["plan"] == "free"
        assert body["is_active"] is False
        assert body["days_until_expiry"] is None

    def test_admin_subscription_status(self, client, admin_headers):
        body = client.get("/api/profile/subscription", headers=admin_headers).json()
        assert body["status"] == "admin"
        assert body["is_active"] is True


class TestGoal:
    """Goal progress is always recomputed from journal entries."""

    def test_set_goal(self, client, user_headers):
        response = client.put(
            "/api/profile/goal",
            json={"initial_balance": 1000, "monthly_goal": "500", "default_lot_size": "0.10"},
            headers=user_headers,
        )
        assert response.status_code == 200
        body = response.json()
        assert body["current_balance"] == 1000
        assert body["target_balance"] == 1500
        assert body["percent_to_goal"] == 0
        assert body["period_start"] == date.today().replace(day=1).isoformat()

    def test_negative_goal_rejected(self, client, user_headers):
        response = client.put("/api/profile/goal", json={"monthly_goal": -5}, headers=user_headers)
        assert response.status_code == 422
        assert response.json()["error"] == "InvalidPriceError"

    def test_bad_lot_size_rejected(self, client, user_headers):
        response = client.put("/api/profile/goal", json={"default_lot_size": "0"}, headers=user_headers)
        assert response.status_code == 422
        assert response.json()["error"] == "InvalidLotSizeError"

    def test_goal_without_settings(self, client, user_headers):
        body = client.get("/api/profile/goal", headers=user_headers).json()
        assert body["initial_balance"] == 0
        assert body["percent_to_goal"] == 0
        assert body["goal_reached"] is False

    def test_reset_starts_new_period(self, client, user_headers):
        response = client.post("/api/profile/goal/reset", headers=user_headers)
        assert response.status_code == 200
        assert response.json()["period_start"] == date.today().isoformat()

    def test_entries_before_period_are_excluded(self, client, db, regular_user, user_headers):
        client.put("/api/profile/goal", json={"initial_balance": 1000, "monthly_goal": 500}, headers=user_headers)
        client.post(
            "/api/trading-entries",
            json={
                "pair": "EURUSD", "direction": "BUY", "lot_size": 1,
                "entry_price": "1.0850", "exit_price": "1.0875", "result": "TP1",
            },
            headers=user_headers,
        )
        crud.reset_goal_period(db, regular_user, period_start=date.today() + timedelta(days=1))
        body = client.get("/api/profile/goal", headers=user_headers).json()
        assert body["accumulated_profit"] == 0
        assert body["current_balance"] == 1000

    def test_reset_clears_entries_recorded_today(self, client, user_headers):
        client.put("/api/profile/goal", json={"initial_balance": 1000, "monthly_goal": 500}, headers=user_headers)
        client.post(
            "/api/trading-entries",
            json={
                "pair": "EURUSD", "direction": "BUY", "lot_size": 1,
                "entry_price": "1.0850", "exit_price": "1.0875", "result": "TP1",
            },
            headers=user_headers,
        )
        body = client.post("/api/profile/goal/reset", headers=user_headers).json()
        assert body["accumulated_profit"] == 0
        assert body["current_balance"] == 1000
        assert client.get("/api/profile/goal", headers=user_headers).json()["accumulated_profit"] == 0

        # entries recorded after the reset count toward the new period
        body = client.post(
            "/api/trading-entries",
            json={
                "pair": "EURUSD", "direction": "BUY", "lot_size": 1,
                "entry_price": "1.0850", "exit_price": "1.0875", "result": "TP1",
            },
            headers=user_headers,
        ).json()
        assert body["goal"]["accumulated_profit"] == 250
        assert body["goal"]["current_balance"] == 1250
