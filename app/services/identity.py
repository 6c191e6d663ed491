"""
Identity Accessor.

Wraps every auth-provider call the dashboard makes: sign-up, sign-in
(by email or pseudo), sign-out, session restoration, token verification
and auth-state-change listeners.

Each flow runs on its own short-lived anon-key client obtained from
``DatabaseManager.create_auth_client()`` so that no session state is
shared between requests.

All public methods return typed ``AuthResult`` models; the HTTP layer
never inspects raw provider exceptions.
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Optional

from supabase import Client as SupabaseClient

from app.database import DatabaseManager
from app.logger import StructuredLogger
from app.models.auth_models import (
    AuthErrorCode,
    AuthResult,
    GENERIC_INVALID_CREDENTIALS,
    classify_auth_error,
    is_invalid_credentials,
)
from app.repositories.user_repository import UserRepository
from app.services.base_service import BaseService

AuthStateListener = Callable[[str, Optional[Any]], None]

_SERVICE_UNAVAILABLE_MESSAGE: str = (
    "Authentication service is unavailable. Please try again later."
)
_NETWORK_MESSAGE: str = "Cannot reach the server. Check your internet connection."


class IdentityAccessor(BaseService):
    """Stateless facade over the Supabase auth API.

    Parameters
    ----------
    db:
        Supplies the per-flow auth clients and the service-role client.
    user_repo:
        Used to resolve a pseudo to its email during sign-in and to
        check that a verified identity has a profile.
    logger:
        Structured logger.
    """

    def __init__(
        self,
        db: DatabaseManager,
        user_repo: UserRepository,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(logger)
        self._db = db
        self._user_repo = user_repo
        self._listeners: list[AuthStateListener] = []
        self._listeners_lock = threading.Lock()

    # ==================================================================
    # Auth-state listeners
    # ==================================================================

    def on_auth_state_change(self, callback: AuthStateListener) -> Callable[[], None]:
        """Register *callback* for auth events (``SIGNED_IN``, ``SIGNED_OUT``,
        ``TOKEN_REFRESHED`` ...) raised by every subsequent auth flow.

        Returns a function that removes the listener again.
        """
        with self._listeners_lock:
            self._listeners.append(callback)

        def unsubscribe() -> None:
            with self._listeners_lock:
                if callback in self._listeners:
                    self._listeners.remove(callback)

        return unsubscribe

    def _auth_client(self) -> SupabaseClient:
        """Fresh anon client with the registered listeners attached.

        Raises:
            RuntimeError: If auth is not configured.
        """
        client = self._db.create_auth_client()
        with self._listeners_lock:
            listeners = list(self._listeners)
        for listener in listeners:
            client.auth.on_auth_state_change(listener)
        return client

    # ==================================================================
    # Sign-up
    # ==================================================================

    def sign_up(self, email: str, password: str) -> AuthResult:
        """Register a new identity. No profile row is created here."""
        email = email.strip().lower()
        try:
            client = self._auth_client()
            response = client.auth.sign_up({"email": email, "password": password})
        except RuntimeError:
            return AuthResult.failure(
                AuthErrorCode.SERVICE_UNAVAILABLE, _SERVICE_UNAVAILABLE_MESSAGE,
            )
        except Exception as exc:
            return self._classify_error(exc, "SIGN_UP")

        self._logger.info(
            "Identity registered: %s", email,
            extra={"event": "SIGN_UP", "email": email},
        )
        return self._result_from_response(response, fallback_email=email)

    # ==================================================================
    # Sign-in
    # ==================================================================

    def sign_in(self, identifier: str, password: str) -> AuthResult:
        """Sign in with an email address or a pseudo.

        The identifier is first tried as an email.  Only when that attempt
        is rejected as *invalid credentials* is it looked up as a pseudo,
        and the sign-in is retried exactly once with the profile's email.
        An unknown pseudo yields the same generic message as a bad
        password.
        """
        identifier = identifier.strip()
        try:
            client = self._auth_client()
        except RuntimeError:
            return AuthResult.failure(
                AuthErrorCode.SERVICE_UNAVAILABLE, _SERVICE_UNAVAILABLE_MESSAGE,
            )

        try:
            response = client.auth.sign_in_with_password({
                "email": identifier,
                "password": password,
            })
            result = self._result_from_response(response, fallback_email=identifier)
            self._log_sign_in(result)
            return result
        except Exception as exc:
            if not is_invalid_credentials(exc):
                return self._classify_error(exc, "SIGN_IN")

        email = self._resolve_pseudo(identifier)
        if email is None:
            self._logger.warning(
                "Sign-in rejected for identifier %s", identifier,
                extra={"event": "SIGN_IN_FAILED", "error_code": "invalid_credentials"},
            )
            return AuthResult.failure(
                AuthErrorCode.INVALID_CREDENTIALS, GENERIC_INVALID_CREDENTIALS,
            )

        try:
            response = client.auth.sign_in_with_password({
                "email": email,
                "password": password,
            })
        except Exception as exc:
            return self._classify_error(exc, "SIGN_IN")

        result = self._result_from_response(response, fallback_email=email)
        result.used_pseudo_fallback = True
        self._log_sign_in(result)
        return result

    def _resolve_pseudo(self, pseudo: str) -> Optional[str]:
        """Profile email for *pseudo*, or ``None`` on miss or lookup error."""
        try:
            return self._user_repo.get_email_by_pseudo(pseudo)
        except Exception as exc:
            self._logger.warning("Pseudo lookup failed for %s: %s", pseudo, exc)
            return None

    def _log_sign_in(self, result: AuthResult) -> None:
        self._logger.info(
            "Identity signed in: %s", result.email,
            extra={
                "event": "SIGN_IN",
                "user_id": result.user_id,
                "pseudo_fallback": result.used_pseudo_fallback,
            },
        )

    # ==================================================================
    # Sign-out
    # ==================================================================

    def sign_out(self, access_token: str) -> AuthResult:
        """Revoke the session that issued *access_token*."""
        try:
            self._db.supabase.auth.admin.sign_out(access_token)
        except RuntimeError:
            return AuthResult.failure(
                AuthErrorCode.SERVICE_UNAVAILABLE, _SERVICE_UNAVAILABLE_MESSAGE,
            )
        except Exception as exc:
            return self._classify_error(exc, "SIGN_OUT")

        self._logger.info("Session revoked.", extra={"event": "SIGN_OUT"})
        return AuthResult(success=True)

    # ==================================================================
    # Session / user
    # ==================================================================

    def get_session(self, access_token: str, refresh_token: str) -> AuthResult:
        """Restore a session from its token pair, refreshing it if expired."""
        try:
            client = self._auth_client()
            response = client.auth.set_session(access_token, refresh_token)
        except RuntimeError:
            return AuthResult.failure(
                AuthErrorCode.SERVICE_UNAVAILABLE, _SERVICE_UNAVAILABLE_MESSAGE,
            )
        except Exception as exc:
            return self._classify_error(exc, "SESSION")
        return self._result_from_response(response)

    def get_user(self, access_token: str) -> AuthResult:
        """Verify *access_token* and return the identity it belongs to."""
        try:
            client = self._auth_client()
            response = client.auth.get_user(access_token)
        except RuntimeError:
            return AuthResult.failure(
                AuthErrorCode.SERVICE_UNAVAILABLE, _SERVICE_UNAVAILABLE_MESSAGE,
            )
        except Exception as exc:
            return self._classify_error(exc, "GET_USER")

        user = getattr(response, "user", None) if response is not None else None
        if user is None:
            return AuthResult.failure(
                AuthErrorCode.SESSION_EXPIRED,
                "Your session has expired. Please sign in again.",
            )
        return AuthResult(
            success=True,
            user_id=str(user.id),
            email=getattr(user, "email", None),
            access_token=access_token,
        )

    # ==================================================================
    # Helpers
    # ==================================================================

    @staticmethod
    def _result_from_response(
        response: Any,
        fallback_email: Optional[str] = None,
    ) -> AuthResult:
        """Flatten a GoTrue ``AuthResponse`` into an ``AuthResult``."""
        user = getattr(response, "user", None)
        session = getattr(response, "session", None)
        if user is None and session is not None:
            user = getattr(session, "user", None)
        return AuthResult(
            success=True,
            user_id=str(user.id) if user is not None else None,
            email=(getattr(user, "email", None) if user is not None else None)
            or fallback_email,
            access_token=getattr(session, "access_token", None),
            refresh_token=getattr(session, "refresh_token", None),
            expires_at=getattr(session, "expires_at", None),
        )

    def _classify_error(self, exc: Exception, event: str) -> AuthResult:
        """Map a provider or network exception to a structured ``AuthResult``."""
        if isinstance(exc, (ConnectionError, TimeoutError)):
            self._logger.warning(
                "Network error during %s: %s", event.lower(), exc,
                extra={"event": f"{event}_NETWORK_ERROR"},
            )
            return AuthResult.failure(AuthErrorCode.NETWORK_ERROR, _NETWORK_MESSAGE)

        mapped = classify_auth_error(exc)
        if mapped is not None:
            error_code, human_message = mapped
            self._logger.warning(
                "Auth error (%s): %s", error_code, exc,
                extra={"event": f"{event}_FAILED", "error_code": str(error_code)},
            )
            return AuthResult.failure(error_code, human_message)

        self._logger.warning(
            "Unknown auth error: %s", exc,
            extra={"event": f"{event}_FAILED", "error_code": "unknown"},
        )
        return AuthResult.failure(
            AuthErrorCode.UNKNOWN_ERROR,
            "An unexpected error occurred. Please try again later.",
        )
