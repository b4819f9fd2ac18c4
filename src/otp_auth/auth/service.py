"""
otp_auth.auth.service

Passcode-based sign-up / sign-in orchestration.

Responsibilities:
- Look up and create user profile documents keyed by email.
- Ask the identity platform to mail one-time passcodes.
- Exchange passcodes for sessions and keep the session secret in a cookie.
- Resolve the current user from the cookie and sign users out.

Every collaborator (identity handle, cookie store) is passed in per request; nothing
here reads ambient request state.
"""

from __future__ import annotations

from otp_auth.auth.cookies import CookieStore
from otp_auth.auth.errors import NoActiveSessionError, PasscodeIssueError
from otp_auth.auth.models import (
    Identity,
    Session,
    SignInResult,
    UserProfile,
    normalize_email,
    profile_document_id,
)
from otp_auth.identity.base import UNIQUE_ID, IdentityService, equal
from otp_auth.identity.errors import DOCUMENT_ALREADY_EXISTS, IdentityServiceError
from otp_auth.observability.logging import get_logger
from otp_auth.settings import Settings

log = get_logger(__name__)


class AuthService:
    def __init__(
        self,
        *,
        identity: IdentityService,
        settings: Settings,
        cookies: CookieStore | None = None,
    ) -> None:
        self._identity = identity
        self._settings = settings
        self._cookies = cookies

    @property
    def _collection(self) -> str:
        return self._settings.appwrite_users_collection_id

    @property
    def _cookie_name(self) -> str:
        return self._settings.session_cookie_name

    async def get_user_by_email(self, email: str) -> UserProfile | None:
        docs = await self._identity.list_documents(
            self._collection, [equal("email", normalize_email(email))]
        )
        return UserProfile.from_document(docs[0]) if docs else None

    async def send_passcode(self, email: str) -> str:
        """
        Ask the platform to mail a passcode to `email`; returns the account id the
        passcode is bound to.
        """

        try:
            token = await self._identity.create_email_token(
                user_id=UNIQUE_ID, email=normalize_email(email)
            )
        except IdentityServiceError:
            log.exception("Failed to send email OTP", email=email)
            raise
        return str(token.get("userId") or "")

    async def create_account(self, *, full_name: str, email: str) -> str:
        email = normalize_email(email)
        existing = await self.get_user_by_email(email)

        # Sent for existing profiles too, so a retried signup acts as "resend".
        account_id = await self.send_passcode(email)
        if not account_id:
            raise PasscodeIssueError("Failed to send an OTP")

        if existing is None:
            await self._upsert_profile(
                UserProfile(
                    document_id=profile_document_id(email),
                    full_name=full_name,
                    email=email,
                    avatar=self._settings.default_avatar_url,
                    account_id=account_id,
                )
            )
            log.info("auth.profile_created", email=email, account_id=account_id)

        return account_id

    async def _upsert_profile(self, profile: UserProfile) -> None:
        try:
            await self._identity.create_document(
                self._collection, profile.document_id, profile.to_document()
            )
        except IdentityServiceError as e:
            # Deterministic document id: a concurrent signup for the same email got there first.
            if e.type == DOCUMENT_ALREADY_EXISTS:
                log.info("auth.profile_exists", email=profile.email)
                return
            log.exception("Failed to create user profile", email=profile.email)
            raise

    async def verify_passcode(self, *, account_id: str, passcode: str) -> str:
        try:
            payload = await self._identity.create_session(user_id=account_id, secret=passcode)
        except IdentityServiceError:
            log.exception("Failed to verify OTP", account_id=account_id)
            raise

        session = Session.from_payload(payload)
        self._require_cookies().set(self._cookie_name, session.secret)
        log.info("auth.session_created", account_id=account_id, session_id=session.id)
        return session.id

    async def get_current_user(self) -> UserProfile | None:
        secret = self._session_secret()
        try:
            account = await self._identity.get_account(session_secret=secret)
            identity = Identity.from_payload(account)
            docs = await self._identity.list_documents(
                self._collection, [equal("accountId", identity.id)]
            )
        except IdentityServiceError:
            log.exception("Failed to get current user")
            raise

        if not docs:
            return None
        return UserProfile.from_document(docs[0])

    async def sign_out(self) -> str:
        """
        Delete the current session and clear the cookie; returns the path the caller
        must be redirected to. Never raises on platform failure.
        """

        try:
            await self._identity.delete_session(session_secret=self._session_secret())
        except (NoActiveSessionError, IdentityServiceError):
            log.exception("Failed to sign out user")
        finally:
            self._require_cookies().delete(self._cookie_name)
        return self._settings.sign_in_path

    async def sign_in(self, *, email: str) -> SignInResult:
        try:
            existing = await self.get_user_by_email(email)
        except IdentityServiceError:
            log.exception("Failed to sign in user", email=email)
            raise

        if existing is None:
            return SignInResult.user_not_found()

        await self.send_passcode(existing.email)
        return SignInResult.found(existing.account_id)

    def _require_cookies(self) -> CookieStore:
        if self._cookies is None:
            raise RuntimeError("AuthService was built without a cookie store")
        return self._cookies

    def _session_secret(self) -> str:
        secret = self._require_cookies().get(self._cookie_name)
        if not secret:
            raise NoActiveSessionError("No session")
        return secret


# --- Module Notes -----------------------------------------------------------
# Failures are logged once where they are caught and then propagated; `sign_out` is
# the only operation that absorbs them, because its cleanup must always complete.
