"""
tests.test_auth_service

AuthService behavior against the in-memory identity backend.
"""

from __future__ import annotations

import pytest

from otp_auth.auth.errors import NoActiveSessionError, PasscodeIssueError
from otp_auth.auth.models import USER_NOT_FOUND, SignInStatus, profile_document_id
from otp_auth.auth.service import AuthService
from otp_auth.identity.errors import IdentityServiceError

COOKIE = "appwrite-session"


def _profiles(identity, settings) -> list[dict]:
    return list(identity.collections.get(settings.appwrite_users_collection_id, {}).values())


@pytest.mark.asyncio
async def test_create_account_new_email_creates_one_profile(svc, identity, settings) -> None:
    account_id = await svc.create_account(full_name="Ada Lovelace", email="ada@example.com")

    assert account_id
    profiles = _profiles(identity, settings)
    assert len(profiles) == 1
    assert profiles[0]["email"] == "ada@example.com"
    assert profiles[0]["fullName"] == "Ada Lovelace"
    assert profiles[0]["accountId"] == account_id
    assert profiles[0]["avatar"] == settings.default_avatar_url
    assert len(identity.outbox) == 1


@pytest.mark.asyncio
async def test_create_account_existing_email_resends_without_new_profile(
    svc, identity, settings
) -> None:
    first = await svc.create_account(full_name="Ada", email="ada@example.com")
    second = await svc.create_account(full_name="Ada Again", email="ADA@example.com ")

    assert second == first
    assert len(_profiles(identity, settings)) == 1
    assert _profiles(identity, settings)[0]["fullName"] == "Ada"
    # Every call mails a fresh passcode.
    assert len(identity.outbox) == 2


@pytest.mark.asyncio
async def test_create_account_empty_account_id_raises(svc, identity, settings, monkeypatch) -> None:
    async def _no_user(*, user_id: str, email: str) -> dict:
        return {"userId": ""}

    monkeypatch.setattr(identity, "create_email_token", _no_user)

    with pytest.raises(PasscodeIssueError, match="Failed to send an OTP"):
        await svc.create_account(full_name="Ada", email="ada@example.com")
    assert _profiles(identity, settings) == []


@pytest.mark.asyncio
async def test_create_account_propagates_passcode_failure(
    svc, identity, settings, monkeypatch
) -> None:
    async def _boom(*, user_id: str, email: str) -> dict:
        raise IdentityServiceError("Rate limit exceeded", code=429)

    monkeypatch.setattr(identity, "create_email_token", _boom)

    with pytest.raises(IdentityServiceError) as exc_info:
        await svc.create_account(full_name="Ada", email="ada@example.com")
    assert exc_info.value.code == 429
    assert _profiles(identity, settings) == []


@pytest.mark.asyncio
async def test_create_account_tolerates_concurrent_profile_creation(
    svc, identity, settings, monkeypatch
) -> None:
    # Another request created the profile between our lookup and our insert.
    await identity.create_document(
        settings.appwrite_users_collection_id,
        profile_document_id("ada@example.com"),
        {"fullName": "Ada", "email": "ada@example.com", "avatar": "", "accountId": "acc-1"},
    )

    async def _stale_lookup(collection_id, queries) -> list[dict]:
        return []

    monkeypatch.setattr(identity, "list_documents", _stale_lookup)

    account_id = await svc.create_account(full_name="Ada", email="ada@example.com")

    assert account_id
    assert len(_profiles(identity, settings)) == 1


@pytest.mark.asyncio
async def test_verify_passcode_sets_cookie(svc, identity, cookies) -> None:
    account_id = await svc.create_account(full_name="Ada", email="ada@example.com")
    passcode = identity.last_passcode("ada@example.com")

    session_id = await svc.verify_passcode(account_id=account_id, passcode=passcode)

    assert session_id
    assert cookies.get(COOKIE)


@pytest.mark.asyncio
async def test_verify_passcode_invalid_raises_and_sets_no_cookie(svc, cookies) -> None:
    account_id = await svc.create_account(full_name="Ada", email="ada@example.com")

    with pytest.raises(IdentityServiceError) as exc_info:
        await svc.verify_passcode(account_id=account_id, passcode="not-the-code")
    assert exc_info.value.code == 401
    assert cookies.get(COOKIE) is None


@pytest.mark.asyncio
async def test_passcode_is_single_use(svc, identity) -> None:
    account_id = await svc.create_account(full_name="Ada", email="ada@example.com")
    passcode = identity.last_passcode("ada@example.com")
    await svc.verify_passcode(account_id=account_id, passcode=passcode)

    with pytest.raises(IdentityServiceError):
        await svc.verify_passcode(account_id=account_id, passcode=passcode)


@pytest.mark.asyncio
async def test_get_current_user_without_session_raises(svc) -> None:
    with pytest.raises(NoActiveSessionError):
        await svc.get_current_user()


@pytest.mark.asyncio
async def test_get_current_user_with_unknown_session_propagates(svc, cookies) -> None:
    cookies.set(COOKIE, "stale-secret")
    with pytest.raises(IdentityServiceError):
        await svc.get_current_user()


@pytest.mark.asyncio
async def test_get_current_user_returns_matching_profile(svc, identity) -> None:
    await svc.create_account(full_name="Grace", email="grace@example.com")
    account_id = await svc.create_account(full_name="Ada", email="ada@example.com")
    await svc.verify_passcode(
        account_id=account_id, passcode=identity.last_passcode("ada@example.com")
    )

    profile = await svc.get_current_user()

    assert profile is not None
    assert profile.account_id == account_id
    assert profile.email == "ada@example.com"
    assert profile.full_name == "Ada"


@pytest.mark.asyncio
async def test_get_current_user_without_profile_returns_none(svc, identity) -> None:
    # Passcode sent without signup: the account exists but no profile document does.
    account_id = await svc.send_passcode("ghost@example.com")
    await svc.verify_passcode(
        account_id=account_id, passcode=identity.last_passcode("ghost@example.com")
    )

    assert await svc.get_current_user() is None


@pytest.mark.asyncio
async def test_sign_out_clears_cookie_and_returns_sign_in_path(svc, identity, cookies) -> None:
    account_id = await svc.create_account(full_name="Ada", email="ada@example.com")
    await svc.verify_passcode(
        account_id=account_id, passcode=identity.last_passcode("ada@example.com")
    )
    secret = cookies.get(COOKIE)

    assert await svc.sign_out() == "/sign-in"
    assert cookies.get(COOKIE) is None
    with pytest.raises(IdentityServiceError):
        await identity.get_account(session_secret=secret)


@pytest.mark.asyncio
async def test_sign_out_completes_when_session_delete_fails(
    svc, identity, cookies, monkeypatch
) -> None:
    cookies.set(COOKIE, "some-secret")

    async def _boom(*, session_secret: str, session_id: str = "current") -> None:
        raise IdentityServiceError("Server Error", code=500)

    monkeypatch.setattr(identity, "delete_session", _boom)

    assert await svc.sign_out() == "/sign-in"
    assert cookies.get(COOKIE) is None


@pytest.mark.asyncio
async def test_sign_out_without_session_still_redirects(svc, cookies) -> None:
    assert await svc.sign_out() == "/sign-in"
    assert cookies.get(COOKIE) is None


@pytest.mark.asyncio
async def test_sign_in_known_email_sends_one_passcode(svc, identity) -> None:
    account_id = await svc.create_account(full_name="Ada", email="ada@example.com")
    sent_before = len(identity.outbox)

    result = await svc.sign_in(email="ada@example.com")

    assert result.status is SignInStatus.ok
    assert result.account_id == account_id
    assert result.error is None
    assert len(identity.outbox) == sent_before + 1


@pytest.mark.asyncio
async def test_sign_in_unknown_email_returns_not_found(svc, identity) -> None:
    result = await svc.sign_in(email="nobody@example.com")

    assert result.status is SignInStatus.not_found
    assert result.account_id is None
    assert result.error == USER_NOT_FOUND
    assert identity.outbox == []


@pytest.mark.asyncio
async def test_sign_in_lookup_failure_propagates(svc, identity, monkeypatch) -> None:
    async def _boom(collection_id, queries) -> list[dict]:
        raise IdentityServiceError("Database not found", code=404)

    monkeypatch.setattr(identity, "list_documents", _boom)

    with pytest.raises(IdentityServiceError):
        await svc.sign_in(email="ada@example.com")
    assert identity.outbox == []


@pytest.mark.asyncio
async def test_service_without_cookie_store_cannot_verify(identity, settings) -> None:
    svc = AuthService(identity=identity, settings=settings)
    account_id = await svc.send_passcode("ada@example.com")

    with pytest.raises(RuntimeError):
        await svc.verify_passcode(
            account_id=account_id, passcode=identity.last_passcode("ada@example.com")
        )
