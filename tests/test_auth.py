"""
Tests for the authentication and email verification endpoints.

Tests:
- Confirmation code send / verify
- Signup
- Signin
- Token refresh and logout
- Current user profile
- Error body format
"""

import pytest

API = "/api/users/auth"


def send_code(client, email):
    return client.post(f"{API}/email/sendconfirmationcode", json={"email": email})


def verify(client, email, code):
    return client.post(f"{API}/email/verifyconfirmationcode", json={"email": email, "code": code})


def wrong_code(code):
    return 100000 if code != 100000 else 100001


@pytest.fixture
def signup_bob(client, sent_codes):
    """Run the whole signup flow for bob and return the response body."""
    def _signup(username="bob", email="bob@x.com", password="secret1"):
        send_code(client, email)
        code = [c for c, e in sent_codes if e == email][-1]
        data = verify(client, email, code).json()["data"]
        response = client.post(f"{API}/signup", json={
            "username": username,
            "email": email,
            "password": password,
            "id": data["id"],
            "code": data["code"],
        })
        assert response.status_code == 201, response.text
        return response.json()
    return _signup


class TestEmailVerification:
    """Test confirmation code endpoints"""

    def test_send_code(self, client, sent_codes):
        response = send_code(client, "a@x.com")

        assert response.status_code == 201
        assert response.json()["message"] == "Email has been sent successfully."
        assert len(sent_codes) == 1
        assert sent_codes[0][1] == "a@x.com"

    def test_send_code_invalid_email(self, client, sent_codes):
        response = send_code(client, "not-an-email")

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Email is invalid. Please try again."
        assert sent_codes == []

    def test_send_code_for_registered_email(self, client, signup_bob):
        signup_bob()

        response = send_code(client, "bob@x.com")

        assert response.status_code == 409
        assert "already taken" in response.json()["error"]["message"]

    def test_verify_success(self, client, sent_codes):
        send_code(client, "a@x.com")
        code = sent_codes[0][0]

        response = verify(client, "a@x.com", code)

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["email"] == "a@x.com"
        assert data["code"] == code
        assert data["is_verified"] is True
        assert data["id"]

    def test_wrong_code_then_exhausted(self, client, sent_codes):
        """Three mismatches, then the fourth call reports exhausted attempts"""
        send_code(client, "a@x.com")
        bad = wrong_code(sent_codes[0][0])

        for remaining in (2, 1, 0):
            response = verify(client, "a@x.com", bad)
            assert response.status_code == 400
            error = response.json()["error"]
            assert error["code"] == "CODE_MISMATCH"
            assert error["details"]["attempts_remaining"] == remaining

        response = verify(client, "a@x.com", bad)
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "ATTEMPTS_EXHAUSTED"

    def test_resend_unlocks_exhausted_record(self, client, sent_codes):
        send_code(client, "a@x.com")
        code = sent_codes[0][0]
        for _ in range(4):
            verify(client, "a@x.com", wrong_code(code))

        send_code(client, "a@x.com")

        assert sent_codes[-1][0] == code
        assert verify(client, "a@x.com", code).status_code == 201

    def test_verify_without_request(self, client):
        response = verify(client, "nobody@x.com", 123456)

        assert response.status_code == 404

    def test_verify_rejects_short_code(self, client, sent_codes):
        """A malformed code is refused before it can spend an attempt"""
        send_code(client, "a@x.com")

        response = verify(client, "a@x.com", 12345)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "BAD_REQUEST"

        mismatch = verify(client, "a@x.com", wrong_code(sent_codes[0][0]))
        assert mismatch.json()["error"]["details"]["attempts_remaining"] == 2


class TestSignup:
    """Test user signup endpoint"""

    def test_signup_success(self, signup_bob, db_session):
        body = signup_bob()

        assert body["user"]["username"] == "bob"
        assert body["user"]["email"] == "bob@x.com"
        assert body["user"]["profile_photo_url"] == "defaultProfilePic.png"
        assert "hashed_password" not in body["user"]
        assert body["access_token"]
        assert body["refresh_token"]
        assert body["token_type"] == "bearer"

    def test_signup_duplicate_username(self, client, signup_bob, sent_codes):
        signup_bob()
        send_code(client, "other@x.com")
        code = sent_codes[-1][0]
        data = verify(client, "other@x.com", code).json()["data"]

        response = client.post(f"{API}/signup", json={
            "username": "bob",
            "email": "other@x.com",
            "password": "secret1",
            "id": data["id"],
            "code": data["code"],
        })

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "USERNAME_TAKEN"

    def test_signup_without_verification(self, client, sent_codes, db_session):
        from connect import crud

        send_code(client, "bob@x.com")
        record = crud.email_verification.get_by_email(db_session, "bob@x.com")

        response = client.post(f"{API}/signup", json={
            "username": "bob",
            "email": "bob@x.com",
            "password": "secret1",
            "id": str(record.id),
            "code": sent_codes[0][0],
        })

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "EMAIL_NOT_VERIFIED"

    @pytest.mark.parametrize("field,value,message", [
        ("username", "b", "Username is invalid. Please try again."),
        ("email", "nope", "Email is invalid. Please try again."),
        ("password", "123", "Password must be contain 6 to 32 characters long. Please try again."),
    ])
    def test_signup_invalid_fields(self, client, field, value, message):
        body = {
            "username": "bob",
            "email": "bob@x.com",
            "password": "secret1",
            "id": "3fa85f64-5717-4562-b3fc-2c963f66afa6",
            "code": 123456,
        }
        body[field] = value

        response = client.post(f"{API}/signup", json=body)

        assert response.status_code == 400
        assert response.json()["error"]["message"] == message


class TestSignin:
    """Test signin endpoint"""

    def test_signin_by_username_and_email(self, client, signup_bob):
        signup_bob()

        for login in ("bob", "bob@x.com"):
            response = client.post(f"{API}/signin", json={"username": login, "password": "secret1"})
            assert response.status_code == 200
            assert response.json()["user"]["username"] == "bob"

    def test_signin_wrong_password(self, client, signup_bob):
        signup_bob()

        response = client.post(f"{API}/signin", json={"username": "bob", "password": "wrong-pass"})

        assert response.status_code == 401

    def test_signin_unknown_user(self, client):
        response = client.post(f"{API}/signin", json={"username": "ghost", "password": "secret1"})

        assert response.status_code == 404


class TestTokenRefresh:
    """Test token refresh endpoint"""

    def test_refresh_rotates(self, client, signup_bob):
        body = signup_bob()
        old = body["refresh_token"]

        response = client.post(f"{API}/refresh-token", json={"refresh_token": old})

        assert response.status_code == 201
        data = response.json()
        assert data["id"] == body["user"]["id"]
        assert data["refresh_token"] != old

        replay = client.post(f"{API}/refresh-token", json={"refresh_token": old})
        assert replay.status_code == 401

    def test_refresh_missing_token(self, client):
        response = client.post(f"{API}/refresh-token", json={})

        assert response.status_code == 400

    def test_refresh_invalid_token(self, client):
        response = client.post(f"{API}/refresh-token", json={"refresh_token": "invalid.token.here"})

        assert response.status_code == 401

    def test_second_signin_invalidates_first(self, client, signup_bob):
        signup_bob()
        credentials = {"username": "bob", "password": "secret1"}
        p1 = client.post(f"{API}/signin", json=credentials).json()
        p2 = client.post(f"{API}/signin", json=credentials).json()

        assert client.post(f"{API}/refresh-token", json={"refresh_token": p1["refresh_token"]}).status_code == 401
        p3 = client.post(f"{API}/refresh-token", json={"refresh_token": p2["refresh_token"]})
        assert p3.status_code == 201
        assert client.post(f"{API}/refresh-token", json={"refresh_token": p2["refresh_token"]}).status_code == 401


class TestLogout:
    """Test logout endpoint"""

    def test_logout_revokes_refresh_token(self, client, signup_bob):
        body = signup_bob()
        headers = {"Authorization": f"Bearer {body['access_token']}"}

        response = client.request(
            "DELETE", f"{API}/logout", json={"refresh_token": body["refresh_token"]}, headers=headers
        )

        assert response.status_code == 200
        assert response.json()["message"] == "User logged out successfully."

        refresh = client.post(f"{API}/refresh-token", json={"refresh_token": body["refresh_token"]})
        assert refresh.status_code == 401

    def test_logout_requires_bearer(self, client, signup_bob):
        body = signup_bob()

        response = client.request("DELETE", f"{API}/logout", json={"refresh_token": body["refresh_token"]})

        assert response.status_code == 401

    def test_logout_missing_refresh_token(self, client, signup_bob):
        body = signup_bob()
        headers = {"Authorization": f"Bearer {body['access_token']}"}

        response = client.request("DELETE", f"{API}/logout", json={}, headers=headers)

        assert response.status_code == 400


class TestCurrentUser:
    """Test Bearer-protected profile endpoint"""

    def test_me(self, client, signup_bob):
        body = signup_bob()

        response = client.get(f"{API}/me", headers={"Authorization": f"Bearer {body['access_token']}"})

        assert response.status_code == 200
        assert response.json()["username"] == "bob"

    def test_me_without_token(self, client):
        response = client.get(f"{API}/me")

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "UNAUTHENTICATED"

    def test_me_with_refresh_token(self, client, signup_bob):
        body = signup_bob()

        response = client.get(f"{API}/me", headers={"Authorization": f"Bearer {body['refresh_token']}"})

        assert response.status_code == 401


class TestHealth:
    """Test health endpoints"""

    def test_health(self, client):
        assert client.get("/health").json()["status"] == "healthy"

    def test_detailed_health(self, client):
        data = client.get("/health/detailed").json()

        assert data["checks"]["database"]["status"] == "healthy"
        assert data["checks"]["session_cache"]["status"] == "healthy"
