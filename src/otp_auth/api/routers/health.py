"""
otp_auth.api.routers.health

Health endpoint.

Responsibilities:
- Provide liveness probe (`/healthz`).
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from otp_auth.api.deps import settings_dep
from otp_auth.settings import Settings

router = APIRouter()


@router.get("/healthz")
async def healthz(settings: Settings = Depends(settings_dep)) -> dict[str, str]:
    return {"status": "ok", "identity_backend": settings.identity_backend}


# --- Module Notes -----------------------------------------------------------
# No readiness probe: the only dependency is the hosted identity platform, and
# probing it on every check would spend its rate limit.
