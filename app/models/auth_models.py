"""
Authentication Pipeline Models.

Pydantic models and enumerations for the auth request/response
contracts between ``IdentityAccessor`` and the HTTP layer.

Every auth operation returns a structured, inspectable result rather
than raw provider exceptions.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Optional

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Error classification
# ---------------------------------------------------------------------------

class AuthErrorCode(StrEnum):
    """Exhaustive enumeration of authentication error categories.

    Used by ``IdentityAccessor`` to classify Supabase errors and by the
    HTTP layer to pick a status code.
    """

    INVALID_CREDENTIALS = "invalid_credentials"
    EMAIL_NOT_CONFIRMED = "email_not_confirmed"
    USER_BANNED = "user_banned"
    EMAIL_ALREADY_EXISTS = "email_already_exists"
    WEAK_PASSWORD = "weak_password"
    NO_PROFILE = "no_profile"
    NETWORK_ERROR = "network_error"
    SERVICE_UNAVAILABLE = "service_unavailable"
    VALIDATION_ERROR = "validation_error"
    SESSION_EXPIRED = "session_expired"
    UNKNOWN_ERROR = "unknown_error"


GENERIC_INVALID_CREDENTIALS: str = "Invalid login credentials"

# ---------------------------------------------------------------------------
# Supabase error-code mapping.  Keys are matched against the lowercased
# error message and the GoTrue ``code`` attribute, in insertion order.
# ---------------------------------------------------------------------------

SUPABASE_ERROR_MAP: dict[str, tuple[AuthErrorCode, str]] = {
    "invalid login credentials": (
        AuthErrorCode.INVALID_CREDENTIALS,
        GENERIC_INVALID_CREDENTIALS,
    ),
    "invalid_credentials": (
        AuthErrorCode.INVALID_CREDENTIALS,
        GENERIC_INVALID_CREDENTIALS,
    ),
    "invalid_grant": (
        AuthErrorCode.INVALID_CREDENTIALS,
        GENERIC_INVALID_CREDENTIALS,
    ),
    "email not confirmed": (
        AuthErrorCode.EMAIL_NOT_CONFIRMED,
        "Please confirm your email address before signing in.",
    ),
    "user_banned": (
        AuthErrorCode.USER_BANNED,
        "Your account has been deactivated. Contact your administrator.",
    ),
    "user already registered": (
        AuthErrorCode.EMAIL_ALREADY_EXISTS,
        "An account with this email already exists. Try signing in.",
    ),
    "user_already_exists": (
        AuthErrorCode.EMAIL_ALREADY_EXISTS,
        "An account with this email already exists. Try signing in.",
    ),
    "weak_password": (
        AuthErrorCode.WEAK_PASSWORD,
        "Password is too weak.",
    ),
    "refresh token": (
        AuthErrorCode.SESSION_EXPIRED,
        "Your session has expired. Please sign in again.",
    ),
}


def classify_auth_error(exc: BaseException) -> Optional[tuple[AuthErrorCode, str]]:
    """Return the ``SUPABASE_ERROR_MAP`` entry matching *exc*, if any."""
    haystack = f"{getattr(exc, 'code', '') or ''} {exc}".lower()
    for code_key, mapped in SUPABASE_ERROR_MAP.items():
        if code_key in haystack:
            return mapped
    return None


def is_invalid_credentials(exc: BaseException) -> bool:
    """``True`` when *exc* is the provider's *invalid credentials* rejection."""
    mapped = classify_auth_error(exc)
    return mapped is not None and mapped[0] == AuthErrorCode.INVALID_CREDENTIALS


# ---------------------------------------------------------------------------
# Unified auth response
# ---------------------------------------------------------------------------

class AuthResult(BaseModel):
    """Unified response for sign-up, sign-in, sign-out and session flows.

    Attributes
    ----------
    success:
        ``True`` when the operation completed without error.
    error_code:
        Structured error category (``None`` on success).
    error_message:
        Human-readable error description (``None`` on success).
    user_id:
        The auth identity UUID.
    email:
        The identity's email address.
    access_token / refresh_token / expires_at:
        Session tokens, present when the flow produced a session.
    used_pseudo_fallback:
        ``True`` when sign-in only succeeded after resolving a pseudo
        to its email.
    """

    success: bool
    error_code: Optional[AuthErrorCode] = None
    error_message: Optional[str] = None
    user_id: Optional[str] = None
    email: Optional[str] = None
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    expires_at: Optional[int] = None
    used_pseudo_fallback: bool = False

    model_config = {"from_attributes": True}

    @classmethod
    def failure(cls, code: AuthErrorCode, message: str) -> "AuthResult":
        return cls(success=False, error_code=code, error_message=message)


# ---------------------------------------------------------------------------
# HTTP request bodies
# ---------------------------------------------------------------------------

class SignInRequest(BaseModel):
    """``identifier`` may be an email address or a pseudo."""

    identifier: str = Field(min_length=1)
    password: str = Field(min_length=1)


class SignUpRequest(BaseModel):
    email: str = Field(min_length=3)
    password: str = Field(min_length=6)


class SessionRequest(BaseModel):
    access_token: str = Field(min_length=1)
    refresh_token: str = Field(min_length=1)
