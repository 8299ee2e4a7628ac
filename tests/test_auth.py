import pytest

from app.models.user import User
from app.services import auth_service
from app.utils.security import ACCESS_TOKEN_EXPIRE_MINUTES, verify_password


def register_body(**overrides):
    body = {
        "email": "new@example.com",
        "password": "Password123!",
        "confirmPassword": "Password123!",
        "name": "New User",
        "username": "newbie",
    }
    body.update(overrides)
    return body


@pytest.fixture
def fake_google(monkeypatch):
    """Replace Google ID token verification with a canned set of claims"""
    claims = {
        "email": "gmail@example.com",
        "email_verified": True,
        "name": "Google User",
        "picture": "https://example.com/avatar.png",
    }

    def verify(credential, request, audience):
        if credential != "good-token":
            raise ValueError("Token has wrong signature")
        assert audience == "test-client-id"
        return claims

    monkeypatch.setattr(auth_service, "GOOGLE_CLIENT_ID", "test-client-id")
    monkeypatch.setattr(auth_service.id_token, "verify_oauth2_token", verify)
    return claims


class TestRegister:

    def test_register_creates_user(self, client, db_session):
        response = client.post("/auth/register", json=register_body())

        assert response.status_code == 201
        data = response.json()
        assert data["email"] == "new@example.com"
        assert data["username"] == "newbie"
        assert "password_hash" not in data

        user = db_session.query(User).filter(User.email == "new@example.com").first()
        assert verify_password("Password123!", user.password_hash)

    def test_duplicate_email_conflicts(self, client, test_user):
        response = client.post("/auth/register", json=register_body(email=test_user.email))

        assert response.status_code == 409
        assert response.json() == {"error": "Email already registered"}

    def test_duplicate_username_conflicts(self, client, test_user):
        response = client.post("/auth/register", json=register_body(username="alice"))

        assert response.status_code == 409
        assert response.json() == {"error": "Username already taken"}

    def test_password_mismatch(self, client):
        response = client.post("/auth/register", json=register_body(confirmPassword="Different123!"))
        assert response.status_code == 400

    def test_short_password(self, client):
        response = client.post("/auth/register", json=register_body(password="short", confirmPassword="short"))
        assert response.status_code == 400


class TestLogin:

    def test_login_returns_token_usable_for_lists(self, client, test_user):
        response = client.post("/auth/login", json={"email": test_user.email, "password": "Password123!"})

        assert response.status_code == 200
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["expires_in"] == ACCESS_TOKEN_EXPIRE_MINUTES * 60
        assert data["user"]["id"] == test_user.id

        headers = {"Authorization": f"Bearer {data['access_token']}"}
        assert client.get("/lists", headers=headers).status_code == 200
        assert client.get("/auth/me", headers=headers).json()["email"] == test_user.email

    def test_wrong_password(self, client, test_user):
        response = client.post("/auth/login", json={"email": test_user.email, "password": "WrongPass123!"})

        assert response.status_code == 401
        assert response.json() == {"error": "Incorrect email or password"}

    def test_unknown_email(self, client, db_session):
        response = client.post("/auth/login", json={"email": "nobody@example.com", "password": "Password123!"})
        assert response.status_code == 401

    def test_deactivated_account(self, client, db_session, test_user):
        test_user.is_active = False
        db_session.commit()

        response = client.post("/auth/login", json={"email": test_user.email, "password": "Password123!"})
        assert response.status_code == 403

    def test_token_of_deactivated_user_is_rejected(self, client, db_session, test_user, auth_headers):
        test_user.is_active = False
        db_session.commit()

        assert client.get("/auth/me", headers=auth_headers).status_code == 401


class TestGoogleLogin:

    def test_first_sign_in_provisions_user(self, client, db_session, fake_google):
        response = client.post("/auth/google", json={"credential": "good-token"})

        assert response.status_code == 200
        assert response.json()["user"]["email"] == "gmail@example.com"

        user = db_session.query(User).filter(User.email == "gmail@example.com").one()
        assert user.password_hash == ""
        assert user.name == "Google User"
        assert user.image == "https://example.com/avatar.png"

    def test_repeat_sign_in_reuses_user(self, client, db_session, fake_google):
        client.post("/auth/google", json={"credential": "good-token"})
        client.post("/auth/google", json={"credential": "good-token"})

        assert db_session.query(User).filter(User.email == "gmail@example.com").count() == 1

    def test_existing_password_account_signs_in(self, client, db_session, make_user, fake_google):
        existing = make_user(email="gmail@example.com", username="gmailer")

        response = client.post("/auth/google", json={"credential": "good-token"})

        assert response.json()["user"]["id"] == existing.id

    def test_google_account_cannot_use_password_login(self, client, fake_google):
        client.post("/auth/google", json={"credential": "good-token"})

        response = client.post("/auth/login", json={"email": "gmail@example.com", "password": "Password123!"})
        assert response.status_code == 401

    def test_invalid_token(self, client, db_session, fake_google):
        response = client.post("/auth/google", json={"credential": "forged"})

        assert response.status_code == 401
        assert response.json() == {"error": "Invalid Google token"}
        assert db_session.query(User).count() == 0

    def test_unconfigured_client_id(self, client, monkeypatch):
        monkeypatch.setattr(auth_service, "GOOGLE_CLIENT_ID", None)

        response = client.post("/auth/google", json={"credential": "anything"})
        assert response.status_code == 401
