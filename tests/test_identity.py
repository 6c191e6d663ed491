"""
Identity Tests
==============

Sign-in by email or pseudo, sign-up, session restoration, sign-out,
token verification and auth-state listeners.
"""

import pytest

from app.logger import get_logger
from app.models.auth_models import AuthErrorCode, GENERIC_INVALID_CREDENTIALS
from app.repositories.user_repository import UserRepository
from app.services.identity import IdentityAccessor
from tests.conftest import DEFAULT_PASSWORD, seed_profile
from tests.fakes import FakeAuthError


@pytest.fixture
def identity(services):
    return services["identity"]


# =====================================
# Service-level
# =====================================

@pytest.mark.unit
class TestSignIn:

    def test_email_sign_in(self, identity, fake_supabase):
        # Arrange
        fake_supabase.auth.register("nadia@cercle.test", "s3cret!")

        # Act
        result = identity.sign_in("nadia@cercle.test", "s3cret!")

        # Assert
        assert result.success is True
        assert result.email == "nadia@cercle.test"
        assert result.access_token is not None
        assert result.refresh_token is not None
        assert result.used_pseudo_fallback is False
        assert fake_supabase.auth.sign_in_attempts == ["nadia@cercle.test"]

    def test_pseudo_falls_back_to_profile_email(self, identity, fake_supabase):
        seed_profile(fake_supabase, email="marie@cercle.test", pseudo="marie")

        result = identity.sign_in("marie", DEFAULT_PASSWORD)

        assert result.success is True
        assert result.used_pseudo_fallback is True
        assert result.email == "marie@cercle.test"
        assert fake_supabase.auth.sign_in_attempts == ["marie", "marie@cercle.test"]

    def test_unknown_pseudo_gets_generic_message(self, identity, fake_supabase):
        result = identity.sign_in("nobody", "whatever")

        assert result.success is False
        assert result.error_code == AuthErrorCode.INVALID_CREDENTIALS
        assert result.error_message == GENERIC_INVALID_CREDENTIALS
        assert fake_supabase.auth.sign_in_attempts == ["nobody"]

    def test_wrong_password_with_pseudo_retries_once(self, identity, fake_supabase):
        seed_profile(fake_supabase, email="marie@cercle.test", pseudo="marie")

        result = identity.sign_in("marie", "wrong-password")

        assert result.success is False
        assert result.error_code == AuthErrorCode.INVALID_CREDENTIALS
        assert result.error_message == GENERIC_INVALID_CREDENTIALS
        assert len(fake_supabase.auth.sign_in_attempts) == 2

    def test_other_provider_error_skips_pseudo_lookup(self, identity, fake_supabase):
        seed_profile(fake_supabase, email="marie@cercle.test", pseudo="marie")
        fake_supabase.auth.error = FakeAuthError(
            "Email not confirmed", code="email_not_confirmed",
        )

        result = identity.sign_in("marie", DEFAULT_PASSWORD)

        assert result.error_code == AuthErrorCode.EMAIL_NOT_CONFIRMED
        assert fake_supabase.calls_for("dd-users") == []
        assert fake_supabase.auth.sign_in_attempts == ["marie"]

    def test_network_error_is_classified(self, identity, fake_supabase):
        fake_supabase.auth.error = ConnectionError("connection reset")

        result = identity.sign_in("nadia@cercle.test", "pw")

        assert result.error_code == AuthErrorCode.NETWORK_ERROR

    def test_pseudo_lookup_failure_reads_as_invalid_credentials(self, identity, fake_supabase):
        fake_supabase.fail("dd-users", "select")

        result = identity.sign_in("marie", "pw")

        assert result.error_code == AuthErrorCode.INVALID_CREDENTIALS
        assert result.error_message == GENERIC_INVALID_CREDENTIALS

    def test_unconfigured_auth_is_service_unavailable(self, offline_db):
        accessor = IdentityAccessor(
            db=offline_db,
            user_repo=UserRepository(db=offline_db, logger=get_logger("test")),
            logger=get_logger("test"),
        )

        result = accessor.sign_in("nadia@cercle.test", "pw")

        assert result.error_code == AuthErrorCode.SERVICE_UNAVAILABLE


@pytest.mark.unit
class TestSignUp:

    def test_sign_up_lowercases_email(self, identity, fake_supabase):
        result = identity.sign_up("  New.Staff@Cercle.TEST ", "long-enough")

        assert result.success is True
        assert result.email == "new.staff@cercle.test"
        assert "new.staff@cercle.test" in fake_supabase.auth.users

    def test_sign_up_creates_no_profile(self, identity, fake_supabase):
        identity.sign_up("new.staff@cercle.test", "long-enough")

        assert fake_supabase.tables.get("dd-users", []) == []

    def test_duplicate_sign_up(self, identity, fake_supabase):
        fake_supabase.auth.register("taken@cercle.test", "pw")

        result = identity.sign_up("taken@cercle.test", "long-enough")

        assert result.error_code == AuthErrorCode.EMAIL_ALREADY_EXISTS

    def test_weak_password(self, identity, fake_supabase):
        fake_supabase.auth.error = FakeAuthError(
            "Password should be at least 6 characters", code="weak_password",
        )

        result = identity.sign_up("new.staff@cercle.test", "abc")

        assert result.error_code == AuthErrorCode.WEAK_PASSWORD


@pytest.mark.unit
class TestSessions:

    def test_get_user_verifies_token(self, identity, employe):
        result = identity.get_user(employe.token)

        assert result.success is True
        assert result.user_id == employe.profile["auth_user_id"]
        assert result.email == employe.profile["email"]

    def test_get_user_rejects_unknown_token(self, identity):
        result = identity.get_user("forged-token")

        assert result.success is False

    def test_restore_session(self, identity, employe):
        result = identity.get_session(employe.token, f"refresh-{employe.token}")

        assert result.success is True
        assert result.user_id == employe.profile["auth_user_id"]

    def test_restore_unknown_session_is_expired(self, identity):
        result = identity.get_session("stale", "stale-refresh")

        assert result.error_code == AuthErrorCode.SESSION_EXPIRED

    def test_sign_out_revokes_token(self, identity, employe, fake_supabase):
        result = identity.sign_out(employe.token)

        assert result.success is True
        assert employe.token in fake_supabase.auth.admin.signed_out
        assert identity.get_user(employe.token).success is False


@pytest.mark.unit
class TestAuthStateListeners:

    def test_listener_receives_sign_in_event(self, identity, fake_supabase):
        # Arrange
        events = []
        identity.on_auth_state_change(lambda event, session: events.append(event))
        fake_supabase.auth.register("nadia@cercle.test", "pw")

        # Act
        identity.sign_in("nadia@cercle.test", "pw")

        # Assert
        assert "SIGNED_IN" in events

    def test_unsubscribe_stops_delivery(self, identity, fake_supabase):
        events = []
        unsubscribe = identity.on_auth_state_change(
            lambda event, session: events.append(event),
        )
        unsubscribe()
        fake_supabase.auth.register("nadia@cercle.test", "pw")

        identity.sign_in("nadia@cercle.test", "pw")

        assert events == []


# =====================================
# HTTP
# =====================================

@pytest.mark.integration
class TestAuthRoutes:

    def test_sign_in_with_pseudo(self, client, fake_supabase):
        seed_profile(fake_supabase, email="marie@cercle.test", pseudo="marie")

        response = client.post(
            "/auth/sign-in",
            json={"identifier": "marie", "password": DEFAULT_PASSWORD},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["used_pseudo_fallback"] is True
        assert body["access_token"]

    def test_sign_in_bad_credentials(self, client):
        response = client.post(
            "/auth/sign-in",
            json={"identifier": "nobody", "password": "whatever"},
        )

        assert response.status_code == 401
        assert response.json() == {
            "error": GENERIC_INVALID_CREDENTIALS,
            "code": "invalid_credentials",
        }

    def test_sign_in_missing_field(self, client):
        response = client.post("/auth/sign-in", json={"identifier": "marie"})

        assert response.status_code == 422
        assert "password" in response.json()["error"]

    def test_sign_up(self, client):
        response = client.post(
            "/auth/sign-up",
            json={"email": "new.staff@cercle.test", "password": "long-enough"},
        )

        assert response.status_code == 201
        assert response.json()["email"] == "new.staff@cercle.test"

    def test_sign_up_duplicate_is_conflict(self, client, fake_supabase):
        fake_supabase.auth.register("taken@cercle.test", "pw")

        response = client.post(
            "/auth/sign-up",
            json={"email": "taken@cercle.test", "password": "long-enough"},
        )

        assert response.status_code == 409
        assert response.json()["code"] == "email_already_exists"

    def test_me(self, client, admin):
        response = client.get("/auth/me", headers=admin.headers)

        assert response.status_code == 200
        body = response.json()
        assert body["role"] == "admin"
        assert body["is_admin"] is True
        assert body["profile"]["id"] == admin.profile["id"]

    def test_me_without_token(self, client):
        response = client.get("/auth/me")

        assert response.status_code == 401
        assert response.json() == {"error": "Not authenticated"}

    def test_identity_without_profile_is_not_logged_in(self, client, fake_supabase):
        user = fake_supabase.auth.register("orphan@cercle.test", "pw")
        token = fake_supabase.auth.issue_token(user["id"])

        response = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json()["error"] == "No staff profile is linked to this account."

    def test_deactivated_profile_is_forbidden(self, client, make_staff):
        staff = make_staff("employe", is_active=False)

        response = client.get("/auth/me", headers=staff.headers)

        assert response.status_code == 403

    def test_restore_session(self, client, employe):
        response = client.post(
            "/auth/session",
            json={"access_token": employe.token, "refresh_token": f"refresh-{employe.token}"},
        )

        assert response.status_code == 200
        assert response.json()["user_id"] == employe.profile["auth_user_id"]

    def test_restore_session_without_profile(self, client, fake_supabase):
        user = fake_supabase.auth.register("orphan@cercle.test", "pw")
        token = fake_supabase.auth.issue_token(user["id"])

        response = client.post(
            "/auth/session",
            json={"access_token": token, "refresh_token": f"refresh-{token}"},
        )

        assert response.status_code == 401

    def test_sign_out_then_token_is_rejected(self, client, employe):
        response = client.post("/auth/sign-out", headers=employe.headers)
        assert response.status_code == 200

        response = client.get("/auth/me", headers=employe.headers)
        assert response.status_code == 401
