"""
otp_auth.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Provide settings from app.state.
- Build a fresh Identity Service handle per request.
- Build a request-bound `AuthService`.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

import httpx
from fastapi import Depends, Request, Response

from otp_auth.auth.cookies import ResponseCookieStore
from otp_auth.auth.service import AuthService
from otp_auth.identity.appwrite import AppwriteIdentityClient
from otp_auth.identity.base import IdentityService
from otp_auth.settings import Settings


def settings_dep(request: Request) -> Settings:
    # Settings are attached in `otp_auth.api.app.create_app`.
    return request.app.state.settings  # type: ignore[attr-defined]


async def identity_service(
    request: Request,
    settings: Settings = Depends(settings_dep),
) -> AsyncIterator[IdentityService]:
    if settings.identity_backend == "memory":
        yield request.app.state.memory_identity  # type: ignore[attr-defined]
        return

    # Request-scoped HTTP client; closed when the response has been produced.
    async with httpx.AsyncClient(
        base_url=settings.appwrite_endpoint,
        timeout=settings.identity_timeout_seconds,
    ) as http:
        yield AppwriteIdentityClient(settings=settings, http=http)


def auth_service(
    request: Request,
    response: Response,
    identity: IdentityService = Depends(identity_service),
    settings: Settings = Depends(settings_dep),
) -> AuthService:
    cookies = ResponseCookieStore(request, response, secure=settings.cookie_secure)
    return AuthService(identity=identity, settings=settings, cookies=cookies)
