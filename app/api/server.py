"""
HTTP Application Factory.

Responsibilities:
- Build the FastAPI application around an already-wired service graph
- Configure CORS for the browser front-end
- Register routers (specific ``/admin/...`` routes before the page routes)
- Render every error as ``{"error": ...}``
"""

from __future__ import annotations

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.routers import auth, dashboard, pages, users
from app.config import AppConfig
from app.database import DatabaseManager
from app.logger import get_logger
from app.services import ServiceContainer, create_services


def create_app(
    config: AppConfig,
    db: DatabaseManager,
    services: Optional[ServiceContainer] = None,
) -> FastAPI:
    """Assemble the API.

    Args:
        config: Application configuration.
        db: Initialised DatabaseManager (also used by the health probe).
        services: Pre-built container; built from *db* when omitted.
    """
    logger = get_logger("api")

    app = FastAPI(
        title="Dashboard API",
        description="Admin dashboard backend: staff, appointments, stock, "
                    "deliveries, promotions and finances",
        version="1.0.0",
    )
    app.state.config = config
    app.state.db = db
    app.state.services = services if services is not None else create_services(db, config)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException,
    ) -> JSONResponse:
        return JSONResponse(
            {"error": exc.detail},
            status_code=exc.status_code,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError,
    ) -> JSONResponse:
        fields = ", ".join(
            ".".join(str(p) for p in error.get("loc", ())) for error in exc.errors()
        )
        return JSONResponse(
            {"error": f"Invalid request: {fields}"},
            status_code=422,
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "Unhandled error on %s %s: %s", request.method, request.url.path, exc,
            exc_info=exc,
        )
        return JSONResponse({"error": "Internal server error"}, status_code=500)

    app.include_router(dashboard.router, tags=["Dashboard"])
    app.include_router(auth.router, prefix="/auth", tags=["Auth"])
    app.include_router(users.router, tags=["Users"])
    app.include_router(pages.router, tags=["Pages"])

    logger.info("API ready", extra={"cors_origins": ",".join(config.CORS_ORIGINS)})
    return app
