"""
Hospital Auth - Authentication Test Suite

Tests for:
- Password hashing
- Session token creation and validation
- POST /login outcomes
- GET /profile and the session guard
- End-to-end login/profile flows

Run with: pytest tests/test_auth.py -v
"""

import base64
import json
from datetime import timedelta

import pytest

from hospital_auth.auth.password import hash_password, verify_password
from hospital_auth.auth.tokens import create_access_token, verify_access_token, InvalidTokenError
from tests.conftest import login_user, auth_headers


def _tamper_payload(token: str, **changes) -> str:
    """Rewrite the payload segment of a JWT, keeping the original signature."""
    header, payload, signature = token.split(".")
    padded = payload + "=" * (-len(payload) % 4)
    claims = json.loads(base64.urlsafe_b64decode(padded))
    claims.update(changes)
    new_payload = base64.urlsafe_b64encode(
        json.dumps(claims, separators=(",", ":")).encode()
    ).rstrip(b"=").decode()
    return ".".join([header, new_payload, signature])


# =============================================================================
# PASSWORD HASHING TESTS
# =============================================================================

class TestPasswordHashing:
    """Unit tests for bcrypt password utilities."""

    def test_hash_password_creates_bcrypt_hash(self):
        hashed = hash_password("SecurePassword123")

        assert hashed.startswith("$2b$")
        assert len(hashed) == 60

    def test_verify_password_correct(self):
        hashed = hash_password("SecurePassword123")

        assert verify_password("SecurePassword123", hashed) is True

    def test_verify_password_incorrect(self):
        hashed = hash_password("SecurePassword123")

        assert verify_password("WrongPassword", hashed) is False

    def test_same_password_different_hashes(self):
        """Same password generates different hashes (salted)."""
        hash1 = hash_password("SecurePassword123")
        hash2 = hash_password("SecurePassword123")

        assert hash1 != hash2
        assert verify_password("SecurePassword123", hash1) is True
        assert verify_password("SecurePassword123", hash2) is True

    def test_malformed_hash_fails_closed(self):
        assert verify_password("anything", "not-a-bcrypt-hash") is False


# =============================================================================
# SESSION TOKEN TESTS
# =============================================================================

class TestSessionTokens:
    """Unit tests for token creation and validation."""

    def test_roundtrip_payload(self):
        token = create_access_token(7, "a@b.com", ["ROLE_ADMIN", "ROLE_USER"])
        payload = verify_access_token(token)

        assert payload.id == 7
        assert payload.email == "a@b.com"
        assert payload.roles == ["ROLE_ADMIN", "ROLE_USER"]

    def test_default_lifetime_is_thirty_minutes(self):
        payload = verify_access_token(create_access_token(1, "a@b.com", []))

        assert payload.exp - payload.iat == timedelta(minutes=30)

    def test_expired_token_rejected(self):
        token = create_access_token(1, "a@b.com", [], expires_delta=timedelta(seconds=-1))

        with pytest.raises(InvalidTokenError):
            verify_access_token(token)

    def test_garbage_token_rejected(self):
        with pytest.raises(InvalidTokenError):
            verify_access_token("invalid.token.here")

    def test_tampered_roles_rejected(self):
        token = create_access_token(1, "a@b.com", ["ROLE_USER"])
        forged = _tamper_payload(token, roles=["ROLE_ADMIN"])

        with pytest.raises(InvalidTokenError):
            verify_access_token(forged)

    def test_wrong_secret_rejected(self):
        from jose import jwt

        forged = jwt.encode(
            {"id": 1, "email": "a@b.com", "roles": [], "exp": 9999999999, "iat": 0},
            "another-secret",
            algorithm="HS256",
        )

        with pytest.raises(InvalidTokenError):
            verify_access_token(forged)


# =============================================================================
# LOGIN ENDPOINT TESTS
# =============================================================================

class TestLoginEndpoint:
    """Integration tests for POST /login."""

    def test_login_success_returns_token(self, client, staff_account):
        response = client.post("/login", json={"email": "a@b.com", "password": "correct"})

        assert response.status_code == 200
        data = response.json()
        assert data["token"]
        assert data["expires_in"] == 30 * 60

    def test_token_roles_match_stored_roles(self, client, staff_account, admin_account):
        for account, password in ((staff_account, "correct"), (admin_account, "AdminPass123")):
            tokens = login_user(client, account.email, password)
            payload = verify_access_token(tokens["token"])

            assert payload.id == account.id
            assert payload.roles == account.roles

    def test_email_is_case_insensitive(self, client, staff_account):
        response = client.post("/login", json={"email": "  A@B.com ", "password": "correct"})

        assert response.status_code == 200

    def test_wrong_password_and_unknown_email_look_the_same(self, client, staff_account):
        wrong_password = client.post("/login", json={"email": "a@b.com", "password": "wrong"})
        unknown_email = client.post("/login", json={"email": "nobody@b.com", "password": "wrong"})

        assert wrong_password.status_code == 401
        assert unknown_email.status_code == 401
        assert wrong_password.json() == unknown_email.json()
        assert wrong_password.json()["code"] == "invalid_credentials"

    def test_malformed_email_is_invalid_credentials(self, client, staff_account):
        response = client.post("/login", json={"email": "'; DROP TABLE accounts; --", "password": "x"})

        assert response.status_code == 401
        assert response.json()["code"] == "invalid_credentials"

    def test_unverified_account_rejected(self, client, unverified_account):
        response = client.post(
            "/login",
            json={"email": "pending@test.com", "password": "PendingPass123"},
        )

        assert response.status_code == 403
        assert response.json()["error"] == "Compte non vérifié"
        assert "token" not in response.json()

    def test_unverified_account_wrong_password_hides_status(self, client, unverified_account):
        response = client.post("/login", json={"email": "pending@test.com", "password": "nope"})

        assert response.status_code == 401
        assert response.json()["code"] == "invalid_credentials"

    @pytest.mark.parametrize("body", [
        {},
        {"email": "a@b.com"},
        {"password": "correct"},
        {"email": "", "password": "correct"},
        {"email": "a@b.com", "password": ""},
        {"email": "   ", "password": "correct"},
    ])
    def test_missing_fields_rejected(self, client, staff_account, body):
        response = client.post("/login", json=body)

        assert response.status_code == 400
        assert response.json()["code"] == "validation_error"

    def test_non_string_fields_rejected(self, client):
        response = client.post("/login", json={"email": ["a@b.com"], "password": 12})

        assert response.status_code == 400

    def test_concurrent_logins_all_succeed(self, client, staff_account):
        tokens = [login_user(client, "a@b.com", "correct") for _ in range(3)]

        for t in tokens:
            assert client.get("/profile", headers=auth_headers(t["token"])).status_code == 200


# =============================================================================
# SESSION GUARD / PROFILE TESTS
# =============================================================================

class TestProfileEndpoint:
    """Integration tests for GET /profile and the session guard."""

    def test_missing_authorization_header(self, client):
        response = client.get("/profile")

        assert response.status_code == 401
        assert response.json()["code"] == "unauthenticated"
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_non_bearer_scheme_is_unauthenticated(self, client):
        response = client.get("/profile", headers={"Authorization": "Basic YTpi"})

        assert response.status_code == 401

    def test_garbage_token_forbidden(self, client):
        response = client.get("/profile", headers=auth_headers("totally.invalid.token"))

        assert response.status_code == 403
        assert response.json()["code"] == "forbidden"

    def test_expired_token_forbidden(self, client, staff_account):
        token = create_access_token(
            staff_account.id, staff_account.email, staff_account.roles,
            expires_delta=timedelta(minutes=-5),
        )

        response = client.get("/profile", headers=auth_headers(token))

        assert response.status_code == 403

    def test_tampered_token_forbidden(self, client, staff_account):
        tokens = login_user(client, "a@b.com", "correct")
        forged = _tamper_payload(tokens["token"], id=staff_account.id + 100)

        response = client.get("/profile", headers=auth_headers(forged))

        assert response.status_code == 403

    def test_deleted_account_not_found(self, client, db_session, staff_account):
        tokens = login_user(client, "a@b.com", "correct")
        db_session.delete(staff_account)
        db_session.commit()

        response = client.get("/profile", headers=auth_headers(tokens["token"]))

        assert response.status_code == 404
        assert response.json()["code"] == "not_found"

    def test_profile_is_idempotent(self, client, staff_account):
        tokens = login_user(client, "a@b.com", "correct")
        headers = auth_headers(tokens["token"])

        first = client.get("/profile", headers=headers).json()
        second = client.get("/profile", headers=headers).json()

        assert first == second

    def test_profile_reflects_role_changes(self, client, db_session, staff_account):
        tokens = login_user(client, "a@b.com", "correct")
        staff_account.roles = ["ROLE_USER"]
        db_session.add(staff_account)
        db_session.commit()

        response = client.get("/profile", headers=auth_headers(tokens["token"]))

        assert response.json()["roles"] == ["ROLE_USER"]


# =============================================================================
# APPLICATION TESTS
# =============================================================================

class TestApplication:

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["services"]["database"] is True

    def test_security_headers(self, client):
        response = client.get("/health")

        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Request-ID"]

    def test_store_outage_is_server_error(self, client, test_engine, staff_account):
        from sqlmodel import SQLModel

        SQLModel.metadata.drop_all(test_engine)

        response = client.post("/login", json={"email": "a@b.com", "password": "correct"})

        assert response.status_code == 500
        assert response.json() == {"error": "Erreur interne du serveur", "code": "server_error"}


# =============================================================================
# END-TO-END SCENARIOS
# =============================================================================

class TestEndToEnd:

    def test_login_then_profile(self, client, staff_account):
        login = client.post("/login", json={"email": "a@b.com", "password": "correct"})
        assert login.status_code == 200

        profile = client.get("/profile", headers=auth_headers(login.json()["token"]))

        assert profile.status_code == 200
        assert profile.json() == {
            "id": staff_account.id,
            "email": "a@b.com",
            "roles": ["ROLE_ADMINISTRATIF", "ROLE_USER"],
        }

    def test_unverified_account_gets_no_token(self, client, db_session, staff_account):
        staff_account.is_verified = False
        db_session.add(staff_account)
        db_session.commit()

        response = client.post("/login", json={"email": "a@b.com", "password": "correct"})

        assert response.status_code == 403
        assert response.json()["error"] == "Compte non vérifié"
        assert "token" not in response.json()

    def test_profile_without_token(self, client):
        assert client.get("/profile").status_code == 401
