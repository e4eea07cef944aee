# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
FastAPI application factory.

Responsibilities
----------------
* Build the token service and password hasher from configuration.  A bad
  signing secret raises ``ConfigurationError`` here, so the process never
  starts serving with it.
* Register CORS and request-logging middleware.
* Map ``PortalError`` subclasses and storage errors onto JSON responses.
* Mount the feature routers (auth, admin, announcements).
* Expose a /health endpoint for container liveness checks.

Run with:
    uvicorn main:app --app-dir backend
"""

import time
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from sqlalchemy.exc import SQLAlchemyError

from core.config import Settings, settings
from core.errors import PortalError
from core.logger import logger
from core.passwords import PasswordHasher
from core.tokens import TokenService
from auth.router import router as auth_router
from admin.router import router as admin_router
from announcements.router import router as announcements_router


# ---------------------------------------------------------------------------
# Request-logging middleware
# ---------------------------------------------------------------------------
# Logs every inbound request: method, path, client IP, status, latency.
# Bodies (passwords) and the Authorization header are never echoed.


class _RequestLogMiddleware(BaseHTTPMiddleware):
    """Log method, path, client IP, response status and latency (ms)."""

    async def dispatch(self, request: Request, call_next) -> Response:
        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000

        client_ip = request.client.host if request.client else "unknown"

        logger.info(
            "%s %s | client=%s status=%d latency=%.1fms",
            request.method,
            request.url.path,
            client_ip,
            response.status_code,
            elapsed_ms,
        )
        return response


# ---------------------------------------------------------------------------
# Error handlers
# ---------------------------------------------------------------------------


async def _portal_error_handler(request: Request, exc: PortalError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message},
        headers=exc.headers,
    )


async def _storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Storage error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "A storage error occurred, please retry later"},
    )


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


def create_app(app_settings: Settings | None = None) -> FastAPI:
    cfg = app_settings or settings

    app = FastAPI(title="Smart Village API", version="1.0.0")

    # Immutable, shared by every request; see core.security accessors
    app.state.token_service = TokenService.from_settings(cfg)
    app.state.password_hasher = PasswordHasher.from_settings(cfg)

    # CORS: tighten CORS_ORIGINS to the production frontend before deploying.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Authorization", "Content-Type"],
    )
    app.add_middleware(_RequestLogMiddleware)

    app.add_exception_handler(PortalError, _portal_error_handler)
    app.add_exception_handler(SQLAlchemyError, _storage_error_handler)

    app.include_router(auth_router)
    app.include_router(admin_router)
    app.include_router(announcements_router)

    @app.get("/health")
    def health():
        return {
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    logger.info("Smart Village API configured (issuer=%s)", cfg.jwt_issuer)
    return app


app = create_app()
