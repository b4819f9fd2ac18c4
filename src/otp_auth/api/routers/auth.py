"""
otp_auth.api.routers.auth

Caller-facing authentication endpoints.

Responsibilities:
- Sign up (create account + send passcode), passcode resend, sign in.
- Exchange a passcode for a session cookie.
- Resolve the current user and sign out.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from starlette.status import HTTP_303_SEE_OTHER

from otp_auth.api.deps import auth_service, identity_service, settings_dep
from otp_auth.auth.cookies import ResponseCookieStore
from otp_auth.auth.models import UserProfile
from otp_auth.auth.service import AuthService
from otp_auth.identity.base import IdentityService
from otp_auth.settings import Settings

router = APIRouter(prefix="/v1/auth", tags=["auth"])


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class CreateAccountRequest(_CamelModel):
    full_name: str = Field(alias="fullName", min_length=1, max_length=128)
    email: EmailStr


class EmailRequest(_CamelModel):
    email: EmailStr


class VerifySecretRequest(_CamelModel):
    account_id: str = Field(alias="accountId", min_length=1, max_length=36)
    password: str = Field(min_length=1, max_length=256)


class AccountIdResponse(_CamelModel):
    account_id: str = Field(alias="accountId")


class SessionIdResponse(_CamelModel):
    session_id: str = Field(alias="sessionId")


class SignInResponse(_CamelModel):
    account_id: str | None = Field(alias="accountId")
    error: str | None = None


class UserProfileResponse(_CamelModel):
    id: str
    full_name: str = Field(alias="fullName")
    email: str
    avatar: str
    account_id: str = Field(alias="accountId")

    @classmethod
    def from_profile(cls, profile: UserProfile) -> UserProfileResponse:
        return cls(
            id=profile.document_id,
            full_name=profile.full_name,
            email=profile.email,
            avatar=profile.avatar,
            account_id=profile.account_id,
        )


@router.post("/accounts", response_model=AccountIdResponse)
async def create_account(
    body: CreateAccountRequest,
    svc: AuthService = Depends(auth_service),
) -> AccountIdResponse:
    account_id = await svc.create_account(full_name=body.full_name, email=body.email)
    return AccountIdResponse(account_id=account_id)


@router.post("/otp", response_model=AccountIdResponse)
async def send_email_otp(
    body: EmailRequest,
    svc: AuthService = Depends(auth_service),
) -> AccountIdResponse:
    return AccountIdResponse(account_id=await svc.send_passcode(body.email))


@router.post("/verify", response_model=SessionIdResponse)
async def verify_secret(
    body: VerifySecretRequest,
    svc: AuthService = Depends(auth_service),
) -> SessionIdResponse:
    # The session cookie is written onto the dependency-injected response.
    session_id = await svc.verify_passcode(account_id=body.account_id, passcode=body.password)
    return SessionIdResponse(session_id=session_id)


@router.get("/me", response_model=UserProfileResponse | None)
async def get_current_user(
    svc: AuthService = Depends(auth_service),
) -> UserProfileResponse | None:
    profile = await svc.get_current_user()
    return UserProfileResponse.from_profile(profile) if profile is not None else None


@router.post("/sign-in", response_model=SignInResponse, response_model_exclude_unset=True)
async def sign_in_user(
    body: EmailRequest,
    svc: AuthService = Depends(auth_service),
) -> SignInResponse:
    result = await svc.sign_in(email=body.email)
    if result.account_id is None:
        return SignInResponse(account_id=None, error=result.error)
    return SignInResponse(account_id=result.account_id)


@router.post("/sign-out")
async def sign_out_user(
    request: Request,
    identity: IdentityService = Depends(identity_service),
    settings: Settings = Depends(settings_dep),
) -> RedirectResponse:
    # A returned Response bypasses FastAPI's injected one, so the cookie store must
    # write onto the redirect itself.
    response = RedirectResponse(url=settings.sign_in_path, status_code=HTTP_303_SEE_OTHER)
    cookies = ResponseCookieStore(request, response, secure=settings.cookie_secure)
    svc = AuthService(identity=identity, settings=settings, cookies=cookies)
    response.headers["location"] = await svc.sign_out()
    return response


# --- Module Notes -----------------------------------------------------------
# Field names are camelCase on the wire to match the web client's existing payloads.
