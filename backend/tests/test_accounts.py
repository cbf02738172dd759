from datetime import datetime, timedelta

from salon_api.core.security import create_refresh_token, verify_token
from salon_api.services.dashboard import growth
from tests.conftest import PASSWORD, auth_headers


class TestAuth:
    def test_register(self, client, location):
        response = client.post(
            "/api/auth/register",
            json={"name": "New Client", "email": "New@Example.com", "password": "long-password", "selectedLocationId": "LOC-1"},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["token"] and body["refreshToken"]
        user = body["data"]["user"]
        assert user["email"] == "new@example.com"
        assert user["selectedLocationId"] == "LOC-1"
        assert user["points"] == 100
        assert user["referralProcessed"] is False

    def test_register_with_referral_code(self, client, make_user, push_mock):
        referrer = make_user()

        response = client.post(
            "/api/auth/register",
            json={"name": "Friend", "email": "friend@example.com", "password": "long-password", "referralCode": referrer.referral_code},
        )

        user = response.json()["data"]["user"]
        assert user["referralProcessed"] is True
        assert user["points"] == 200

    def test_register_with_bad_referral_code_still_succeeds(self, client):
        response = client.post(
            "/api/auth/register",
            json={"name": "Friend", "email": "friend@example.com", "password": "long-password", "referralCode": "ZZ0000"},
        )

        assert response.status_code == 201
        assert response.json()["data"]["user"]["referralMessage"] == "Invalid referral code"

    def test_register_duplicate_email(self, client, make_user):
        make_user(email="taken@example.com")
        response = client.post(
            "/api/auth/register",
            json={"name": "Again", "email": "taken@example.com", "password": "long-password"},
        )
        assert response.status_code == 400

    def test_register_unknown_location(self, client):
        response = client.post(
            "/api/auth/register",
            json={"name": "Lost", "email": "lost@example.com", "password": "long-password", "selectedLocationId": "NOPE"},
        )
        assert response.status_code == 404

    def test_register_validation_error_shape(self, client):
        response = client.post("/api/auth/register", json={"name": "Short", "email": "short@example.com", "password": "x"})

        assert response.status_code == 422
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Validation error"
        assert body["errors"]

    def test_login(self, client, db, client_user):
        response = client.post("/api/auth/login", json={"email": client_user.email, "password": PASSWORD})

        assert response.status_code == 200
        assert response.json()["data"]["user"]["id"] == str(client_user.id)
        db.refresh(client_user)
        assert client_user.last_login is not None

    def test_login_wrong_password(self, client, client_user):
        response = client.post("/api/auth/login", json={"email": client_user.email, "password": "nope-nope"})
        assert response.status_code == 401

    def test_login_inactive(self, client, make_user):
        user = make_user(is_active=False)
        response = client.post("/api/auth/login", json={"email": user.email, "password": PASSWORD})
        assert response.status_code == 403

    def test_login_is_rate_limited(self, client, client_user):
        statuses = [
            client.post("/api/auth/login", json={"email": client_user.email, "password": "nope-nope"}).status_code
            for _ in range(11)
        ]
        assert statuses[-1] == 429

    def test_refresh(self, client, client_user):
        response = client.post("/api/auth/refresh", json={"refresh_token": create_refresh_token(client_user.id)})

        assert response.status_code == 200
        tokens = response.json()
        assert client.get("/api/auth/me", headers={"Authorization": f"Bearer {tokens['access_token']}"}).status_code == 200

    def test_refresh_rejects_access_token(self, client, client_user):
        access = auth_headers(client_user)["Authorization"].split()[1]
        assert client.post("/api/auth/refresh", json={"refresh_token": access}).status_code == 401

    def test_deleted_user_token_is_rejected(self, client, make_user):
        user = make_user(is_deleted=True)
        assert client.get("/api/auth/me", headers=auth_headers(user)).status_code == 401

    def test_refresh_rejects_deleted_user(self, client, make_user):
        user = make_user(is_deleted=True)
        response = client.post("/api/auth/refresh", json={"refresh_token": create_refresh_token(user.id)})
        assert response.status_code == 401

    def test_tokens_carry_current_role(self, client, make_user):
        user = make_user(role="spa")

        login = client.post("/api/auth/login", json={"email": user.email, "password": PASSWORD}).json()
        refreshed = client.post("/api/auth/refresh", json={"refresh_token": login["refreshToken"]}).json()

        assert verify_token(login["token"])["role"] == "spa"
        assert verify_token(refreshed["access_token"])["role"] == "spa"


class TestSpaUsers:
    def test_users_of_the_callers_spa(self, client, make_user, client_user, location):
        make_user(selected_location_id="LOC-1", last_login=datetime.utcnow())
        make_user(selected_location_id="LOC-1", is_deleted=True)
        make_user(selected_location_id="LOC-2")

        data = client.get("/api/spa-users", headers=auth_headers(client_user)).json()["data"]

        assert data["stats"]["totalUsers"] == 2
        assert data["stats"]["activeUsers"] == 1
        assert data["stats"]["newUsers"] == 2
        assert data["currentUserSpa"] == {"locationId": "LOC-1", "locationName": "Glow Spa", "locationAddress": "1 Main Street"}

    def test_activity(self, client, make_user, client_user):
        make_user(selected_location_id="LOC-1", created_at=datetime.utcnow() - timedelta(days=3), points=40)

        activity = client.get("/api/spa-users/activity", headers=auth_headers(client_user)).json()["data"]["activity"]

        assert len(activity) == 2
        assert activity[0]["newUsers"] == 1
        assert activity[1]["totalPoints"] == 40

    def test_requires_selected_spa(self, client, make_user):
        response = client.get("/api/spa-users", headers=auth_headers(make_user()))
        assert response.status_code == 400
        assert response.json()["message"] == "User has not selected a spa"


class TestDashboard:
    def test_spa_dashboard(self, client, spa_user, client_user, make_booking):
        now = datetime.utcnow()
        make_booking(client_user, now - timedelta(days=2), status="completed", final_price=90.0)
        make_booking(client_user, now - timedelta(days=1), status="completed", service_name="Gold Membership")
        make_booking(client_user, now + timedelta(days=1))

        data = client.get("/api/dashboard/data", headers=auth_headers(spa_user)).json()["data"]

        assert data["role"] == "spa"
        assert data["stats"]["totalClients"] == 1
        assert data["stats"]["totalVisits"] == 2
        assert data["stats"]["activeMemberships"] == 1
        assert data["stats"]["visitGrowth"] == 100
        assert {s["name"] for s in data["analytics"]["topServices"]} == {"Facial", "Gold Membership"}
        assert len(data["liveActivity"]) == 3
        assert len(data["currentBookings"]) == 1
        assert data["currentBookings"][0]["user"]["name"] == "Cara Client"

    def test_spa_without_location(self, client, make_user):
        response = client.get("/api/dashboard/data", headers=auth_headers(make_user(role="spa")))
        assert response.status_code == 400

    def test_client_dashboard(self, client, client_user, make_booking):
        now = datetime.utcnow()
        make_booking(client_user, now + timedelta(days=1))
        make_booking(client_user, now - timedelta(days=4), status="completed", rating=5)

        data = client.get("/api/dashboard/data", headers=auth_headers(client_user)).json()["data"]

        assert data["role"] == "user"
        assert len(data["upcomingAppointments"]) == 1
        assert data["pastVisits"][0]["rating"] == 5
        assert data["referralStats"]["referralCode"] == client_user.referral_code
        assert data["referrerPoints"] == 200
        assert data["userPoints"] == 100


def test_growth():
    assert growth(5, 0) == 100
    assert growth(0, 0) == 0
    assert growth(15, 10) == 50
    assert growth(5, 10) == -50


def test_health(client):
    assert client.get("/api/health").json()["status"] == "ok"
    assert client.get("/api/health/ready").json() == {"status": "ready", "database": "connected", "cache": "memory"}
