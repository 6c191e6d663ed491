"""
Database Abstraction Layer.

Owns every Supabase client the backend talks to:

- **Service-role client**: a single long-lived client keyed with the
  ``service_role`` secret.  Used for server-side table access (profile
  lookups, page containers) and for the GoTrue admin API (create / delete
  identities).  It never signs in as an end user, so it carries no
  per-user session state and is safe to share between requests.

- **Auth clients**: short-lived clients keyed with the anonymous key, one
  per sign-in / sign-up / session flow.  Signing in mutates a client's
  session, so these are never shared between requests.

Data access is performed through the Repository pattern.  This module only
manages the raw *clients*; it contains no query logic.

Usage (dependency injection at app startup)::

    from app.database import DatabaseManager
    from app.logger import StructuredLogger

    db = DatabaseManager(
        supabase_url=config.SUPABASE_URL,
        anon_key=config.SUPABASE_ANON_KEY.get_secret_value(),
        service_role_key=config.SUPABASE_SERVICE_ROLE_KEY.get_secret_value(),
        logger=StructuredLogger(name="database"),
    )
    # Inject `db` into repositories / services that need it.
"""

from __future__ import annotations

from typing import Callable, Optional

from supabase import create_client, Client as SupabaseClient
from supabase.client import ClientOptions

from app.logger import StructuredLogger

ClientFactory = Callable[[str, str], SupabaseClient]


def _create_stateless_client(url: str, key: str) -> SupabaseClient:
    """Build a client that neither persists nor auto-refreshes sessions."""
    return create_client(
        url,
        key,
        options=ClientOptions(
            auto_refresh_token=False,
            persist_session=False,
        ),
    )


class DatabaseManager:
    """Manages the Supabase clients used by repositories and services.

    Fully configured at construction time via dependency injection.

    When ``supabase_url`` or ``service_role_key`` is empty the service-role
    client is **not** created.  The ``supabase`` property then raises
    ``RuntimeError``, which services translate into a 503 response.

    Parameters
    ----------
    supabase_url:
        The Supabase project URL (e.g. ``https://xyz.supabase.co``).
    anon_key:
        The public anonymous key used for end-user auth flows.
    service_role_key:
        The ``service_role`` secret used for admin and server-side access.
    logger:
        A ``StructuredLogger`` instance for structured JSON log output.
    client_factory:
        Callable ``(url, key) -> Client``.  Defaults to a stateless
        ``supabase.create_client``; tests inject an in-memory fake.
    """

    def __init__(
        self,
        supabase_url: str,
        anon_key: str,
        service_role_key: str,
        logger: StructuredLogger,
        client_factory: Optional[ClientFactory] = None,
    ) -> None:
        self._logger: StructuredLogger = logger
        self._url: str = supabase_url
        self._anon_key: str = anon_key
        self._factory: ClientFactory = client_factory or _create_stateless_client

        self._supabase: Optional[SupabaseClient] = None
        if supabase_url and service_role_key:
            try:
                self._supabase = self._factory(supabase_url, service_role_key)
                self._logger.info("Supabase service-role client initialized.")
            except (ValueError, TypeError) as exc:
                self._logger.warning(
                    "Supabase credential format error: %s. "
                    "Database access is disabled.",
                    exc,
                )
            except Exception as exc:
                self._logger.error(
                    "Unexpected Supabase initialization failure: %s. "
                    "Database access is disabled.",
                    exc,
                    exc_info=True,
                )
        else:
            self._logger.warning(
                "Supabase service-role credentials not configured; "
                "database access is disabled."
            )

    # ------------------------------------------------------------------
    # Public properties
    # ------------------------------------------------------------------

    @property
    def supabase(self) -> SupabaseClient:
        """Return the shared service-role client.

        Raises
        ------
        RuntimeError
            If the client was not initialised (missing credentials).
        """
        if self._supabase is None:
            raise RuntimeError(
                "Supabase client is not initialised. "
                "Check SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY."
            )
        return self._supabase

    @property
    def is_online(self) -> bool:
        """``True`` when the service-role client is available."""
        return self._supabase is not None

    # ------------------------------------------------------------------
    # Per-flow clients
    # ------------------------------------------------------------------

    def create_auth_client(self) -> SupabaseClient:
        """Return a fresh anon-key client for a single auth flow.

        Raises
        ------
        RuntimeError
            If the project URL or anonymous key is not configured.
        """
        if not self._url or not self._anon_key:
            raise RuntimeError(
                "Supabase auth is not configured. "
                "Check SUPABASE_URL and SUPABASE_ANON_KEY."
            )
        return self._factory(self._url, self._anon_key)
