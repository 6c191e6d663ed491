"""
Application Configuration.

Pydantic Settings model for the Cercle admin dashboard backend.
All configuration is loaded from environment variables and .env files.
Inject an AppConfig instance via dependency injection where needed.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import ClassVar, Optional

from pydantic_settings import BaseSettings
from pydantic import Field, SecretStr, model_validator


class AppConfig(BaseSettings):
    """Central configuration loaded from environment variables and defaults."""

    # --- Supabase ---
    SUPABASE_URL: str = ""
    SUPABASE_ANON_KEY: SecretStr = SecretStr("")
    SUPABASE_SERVICE_ROLE_KEY: SecretStr = SecretStr("")

    # --- Profile store ---
    PROFILE_TABLE: str = "dd-users"

    # Role tiers.  ClassVar so Pydantic-settings does not try to load
    # them from environment variables.
    ADMIN_ROLES: ClassVar[frozenset[str]] = frozenset({"admin", "superadmin", "manager"})
    USER_MANAGER_ROLES: ClassVar[frozenset[str]] = frozenset({"admin", "superadmin"})

    # --- Page containers ---
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    # --- HTTP server ---
    API_HOST: str = "127.0.0.1"
    API_PORT: int = 8000
    CORS_ORIGINS: list[str] = Field(default_factory=lambda: ["http://localhost:3000"])

    # --- Logging ---
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "dashboard.log"
    LOG_MAX_BYTES: int = 5_242_880  # 5 MB
    LOG_BACKUP_COUNT: int = 3

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @model_validator(mode="after")
    def _warn_missing_env(self) -> "AppConfig":
        """Emit a startup warning when critical configuration is empty.

        Pydantic silently falls back to defaults when ``.env`` is missing,
        so operators would otherwise only find out on the first request.
        """
        _log = logging.getLogger("app.config")

        if not Path(".env").exists():
            _log.warning(
                "No .env file found; all configuration loaded from "
                "environment variables or defaults."
            )

        if not self.SUPABASE_URL:
            _log.warning(
                "SUPABASE_URL is empty; every database and auth call "
                "will answer 503 until it is configured."
            )

        if not self.SUPABASE_SERVICE_ROLE_KEY.get_secret_value():
            _log.warning(
                "SUPABASE_SERVICE_ROLE_KEY is empty; user provisioning "
                "and profile lookups are disabled."
            )

        return self

    @model_validator(mode="after")
    def _check_page_sizes(self) -> "AppConfig":
        if self.DEFAULT_PAGE_SIZE < 1 or self.MAX_PAGE_SIZE < self.DEFAULT_PAGE_SIZE:
            raise ValueError(
                "DEFAULT_PAGE_SIZE must be >= 1 and <= MAX_PAGE_SIZE"
            )
        return self

    @classmethod
    def is_admin_role(cls, role: Optional[str]) -> bool:
        """Case-insensitive membership test against :attr:`ADMIN_ROLES`."""
        return bool(role) and role.strip().lower() in cls.ADMIN_ROLES

    @classmethod
    def is_user_manager_role(cls, role: Optional[str]) -> bool:
        """Case-insensitive membership test against :attr:`USER_MANAGER_ROLES`."""
        return bool(role) and role.strip().lower() in cls.USER_MANAGER_ROLES


# ---------------------------------------------------------------------------
# Module-level singleton factory
# ---------------------------------------------------------------------------

_config_instance: Optional[AppConfig] = None
_config_lock: threading.Lock = threading.Lock()


def get_config() -> AppConfig:
    """Return a cached ``AppConfig`` singleton.

    On first call, creates an ``AppConfig`` instance (reading from ``.env``).
    Subsequent calls return the same instance.  Uses a check-lock-check
    pattern to avoid the lock overhead on the fast path while remaining
    thread-safe during first initialisation.

    Prefer direct constructor injection of ``AppConfig`` in new code.
    """
    global _config_instance
    if _config_instance is None:
        with _config_lock:
            if _config_instance is None:
                _config_instance = AppConfig()
    return _config_instance


def reset_config() -> None:
    """Drop the cached singleton so the next ``get_config()`` re-reads the env."""
    global _config_instance
    with _config_lock:
        _config_instance = None
