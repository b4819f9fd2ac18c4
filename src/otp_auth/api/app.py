"""
otp_auth.api.app

FastAPI app factory for the authentication gateway.

Responsibilities:
- Build the FastAPI application and register routers/middleware.
- Map auth/identity errors onto HTTP responses.
- Provide a single composition root where cross-cutting concerns live.
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.status import HTTP_401_UNAUTHORIZED, HTTP_502_BAD_GATEWAY

from otp_auth import __version__
from otp_auth.api.routers.auth import router as auth_router
from otp_auth.api.routers.health import router as health_router
from otp_auth.auth.errors import NoActiveSessionError, PasscodeIssueError
from otp_auth.identity.errors import IdentityServiceError
from otp_auth.identity.memory import InMemoryIdentityService
from otp_auth.observability.logging import configure_logging, get_logger
from otp_auth.observability.middleware import RequestContextMiddleware
from otp_auth.settings import Settings

log = get_logger(__name__)


def create_app(*, settings: Settings) -> FastAPI:
    configure_logging(service_name=settings.service_name, level=settings.log_level)

    app = FastAPI(
        title="OTP Auth Gateway",
        version=__version__,
        docs_url="/docs" if settings.env != "prod" else None,
        openapi_url="/openapi.json",
    )

    app.state.settings = settings
    if settings.identity_backend == "memory":
        if settings.env == "prod":
            raise RuntimeError("identity_backend=memory is not allowed in prod")
        app.state.memory_identity = InMemoryIdentityService()

    app.add_middleware(RequestContextMiddleware)
    app.include_router(health_router, tags=["health"])
    app.include_router(auth_router)
    _register_error_handlers(app)

    @app.on_event("startup")
    async def _startup() -> None:
        log.info("startup", env=settings.env, identity_backend=settings.identity_backend)

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        log.info("shutdown")

    return app


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(NoActiveSessionError)
    async def _no_session(_: Request, exc: NoActiveSessionError) -> JSONResponse:
        return JSONResponse(status_code=HTTP_401_UNAUTHORIZED, content={"detail": str(exc)})

    @app.exception_handler(PasscodeIssueError)
    async def _passcode_issue(_: Request, exc: PasscodeIssueError) -> JSONResponse:
        return JSONResponse(status_code=HTTP_502_BAD_GATEWAY, content={"detail": str(exc)})

    @app.exception_handler(IdentityServiceError)
    async def _identity_error(_: Request, exc: IdentityServiceError) -> JSONResponse:
        # Client errors from the platform (bad passcode, expired session) pass through;
        # anything else is the upstream's fault.
        status = HTTP_502_BAD_GATEWAY
        if exc.code is not None and 400 <= exc.code < 500:
            status = exc.code
        return JSONResponse(
            status_code=status,
            content={"detail": exc.message, "type": exc.type},
        )


# --- Module Notes -----------------------------------------------------------
# Errors are already logged where the service catches them; the handlers only shape
# the HTTP response.
