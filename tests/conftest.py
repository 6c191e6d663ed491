"""
Test Configuration and Fixtures
================================

Shared fixtures for the dashboard backend test suite.

Features:
- In-memory Supabase fake injected through ``DatabaseManager``
- Fully wired service container and FastAPI ``TestClient``
- Staff factory: auth identity + profile row + bearer headers per role
"""

import itertools
import os
import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Callable, Generator, Optional

import pytest
from fastapi.testclient import TestClient

# Set testing environment before importing app modules
os.environ["SUPABASE_URL"] = "https://test-project.supabase.co"
os.environ["SUPABASE_ANON_KEY"] = "test-anon-key"
os.environ["SUPABASE_SERVICE_ROLE_KEY"] = "test-service-role-key"
os.environ["LOG_FILE"] = ""  # console logging only
os.environ["LOG_LEVEL"] = "INFO"

from app.api import create_app
from app.auth import CurrentUser
from app.config import AppConfig, get_config, reset_config
from app.database import DatabaseManager
from app.logger import get_logger
from app.models.user import UserProfile
from app.services import ServiceContainer, create_services
from tests.fakes import FakeSupabase

PROFILE_TABLE = "dd-users"
DEFAULT_PASSWORD = "correct-horse-battery"

_clock = itertools.count()


# =====================================
# Configuration
# =====================================

@pytest.fixture(autouse=True)
def fresh_config() -> Generator[None, None, None]:
    """Every test starts from a config re-read from the environment."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def config() -> AppConfig:
    return get_config()


# =====================================
# Supabase / service graph
# =====================================

@pytest.fixture
def fake_supabase() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def db(fake_supabase: FakeSupabase, config: AppConfig) -> DatabaseManager:
    return DatabaseManager(
        supabase_url=config.SUPABASE_URL,
        anon_key=config.SUPABASE_ANON_KEY.get_secret_value(),
        service_role_key=config.SUPABASE_SERVICE_ROLE_KEY.get_secret_value(),
        logger=get_logger("database"),
        client_factory=lambda url, key: fake_supabase,
    )


@pytest.fixture
def offline_db() -> DatabaseManager:
    """A manager whose credentials are missing: every call is a 503."""
    return DatabaseManager(
        supabase_url="",
        anon_key="",
        service_role_key="",
        logger=get_logger("database"),
    )


@pytest.fixture
def services(db: DatabaseManager, config: AppConfig) -> ServiceContainer:
    return create_services(db=db, config=config)


@pytest.fixture
def client(
    config: AppConfig,
    db: DatabaseManager,
    services: ServiceContainer,
) -> Generator[TestClient, None, None]:
    app = create_app(config=config, db=db, services=services)
    with TestClient(app) as test_client:
        yield test_client


# =====================================
# Staff fixtures
# =====================================

def seed_profile(
    fake: FakeSupabase,
    *,
    role: Optional[str] = "employe",
    email: Optional[str] = None,
    pseudo: Optional[str] = None,
    password: str = DEFAULT_PASSWORD,
    is_active: bool = True,
    linked: bool = True,
    **extra: object,
) -> dict:
    """Insert a profile row (and, when *linked*, its auth identity)."""
    email = email or f"{uuid.uuid4().hex[:8]}@cercle.test"
    auth_user_id = fake.auth.register(email, password)["id"] if linked else None
    created_at = datetime(2025, 1, 1, tzinfo=timezone.utc) + timedelta(minutes=next(_clock))
    row = {
        "id": str(uuid.uuid4()),
        "auth_user_id": auth_user_id,
        "email": email,
        "pseudo": pseudo,
        "first_name": "Test",
        "last_name": (role or "user").title(),
        "phone": None,
        "role": role,
        "salary": 0,
        "hire_date": None,
        "is_active": is_active,
        "created_by": None,
        "created_at": created_at.isoformat(),
    }
    row.update(extra)
    fake.tables.setdefault(PROFILE_TABLE, []).append(row)
    return row


@pytest.fixture
def make_staff(fake_supabase: FakeSupabase) -> Callable[..., SimpleNamespace]:
    """Factory: ``make_staff("admin")`` -> profile, token and auth headers."""

    def _make(role: Optional[str] = "employe", **kwargs: object) -> SimpleNamespace:
        profile = seed_profile(fake_supabase, role=role, **kwargs)
        token = fake_supabase.auth.issue_token(profile["auth_user_id"])
        return SimpleNamespace(
            profile=profile,
            token=token,
            headers={"Authorization": f"Bearer {token}"},
        )

    return _make


@pytest.fixture
def admin(make_staff: Callable[..., SimpleNamespace]) -> SimpleNamespace:
    return make_staff("admin")


@pytest.fixture
def superadmin(make_staff: Callable[..., SimpleNamespace]) -> SimpleNamespace:
    return make_staff("superadmin")


@pytest.fixture
def employe(make_staff: Callable[..., SimpleNamespace]) -> SimpleNamespace:
    return make_staff("employe")


def as_current_user(staff: SimpleNamespace) -> CurrentUser:
    """Build the ``CurrentUser`` the HTTP layer would resolve for *staff*."""
    return CurrentUser(
        auth_user_id=staff.profile["auth_user_id"],
        email=staff.profile["email"],
        access_token=staff.token,
        profile=UserProfile(**staff.profile),
    )
