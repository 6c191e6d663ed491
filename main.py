"""
Dashboard Backend Entry Point.

Bootstraps the entire dependency graph via constructor injection and
serves the FastAPI application with uvicorn.  Every subsystem is wired
here; no module-level globals.

Usage::

    python main.py
"""

from __future__ import annotations

import sys
import traceback

import uvicorn

from app.api import create_app
from app.config import get_config
from app.database import DatabaseManager
from app.logger import StructuredLogger, get_logger
from app.services import create_services


def main() -> None:
    """Application entry point: wire dependencies and start the server."""
    logger: StructuredLogger = get_logger("main")
    logger.info("Starting dashboard backend...")

    # ------------------------------------------------------------------
    # 1. Configuration (from .env / environment variables)
    # ------------------------------------------------------------------
    config = get_config()

    # ------------------------------------------------------------------
    # 2. Database Manager (service-role client + per-flow auth clients)
    # ------------------------------------------------------------------
    db = DatabaseManager(
        supabase_url=config.SUPABASE_URL,
        anon_key=config.SUPABASE_ANON_KEY.get_secret_value(),
        service_role_key=config.SUPABASE_SERVICE_ROLE_KEY.get_secret_value(),
        logger=StructuredLogger(name="database"),
    )

    # ------------------------------------------------------------------
    # 3. Service Container (repositories + services, single composition root)
    # ------------------------------------------------------------------
    services = create_services(db=db, config=config)

    # ------------------------------------------------------------------
    # 4. HTTP application
    # ------------------------------------------------------------------
    app = create_app(config=config, db=db, services=services)

    logger.info("Listening on %s:%s", config.API_HOST, config.API_PORT)
    uvicorn.run(
        app,
        host=config.API_HOST,
        port=config.API_PORT,
        log_config=None,
    )
    logger.info("Dashboard backend shut down.")


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        pass
    except Exception as exc:
        detail = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        sys.stderr.write(f"FATAL: {type(exc).__name__}: {exc}\n{detail}")
        sys.exit(1)
