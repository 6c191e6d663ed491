"""
HTTP Layer Package.

FastAPI application factory, request dependencies and routers.  Routers
stay thin: they parse the request, call one service method and translate
its ``ServiceResult`` / ``AuthResult`` into a response.
"""

from app.api.server import create_app

__all__ = ["create_app"]
