"""
otp_auth.identity.memory

In-process Identity Service used for local development and tests.

Responsibilities:
- Mirror the platform semantics the auth flow relies on (409 on duplicate document ids,
  401 on bad passcodes or unknown sessions).
- Record issued passcodes in an outbox instead of sending mail.
"""

from __future__ import annotations

import secrets
import uuid
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from otp_auth.identity.base import CURRENT_SESSION, UNIQUE_ID, Query
from otp_auth.identity.errors import DOCUMENT_ALREADY_EXISTS, IdentityServiceError


@dataclass(slots=True)
class OutboxMessage:
    email: str
    user_id: str
    passcode: str


@dataclass(slots=True)
class _Session:
    id: str
    user_id: str
    secret: str


@dataclass
class InMemoryIdentityService:
    collections: dict[str, dict[str, dict[str, Any]]] = field(default_factory=dict)
    accounts: dict[str, dict[str, Any]] = field(default_factory=dict)
    outbox: list[OutboxMessage] = field(default_factory=list)
    _tokens: dict[str, str] = field(default_factory=dict, repr=False)
    _sessions: dict[str, _Session] = field(default_factory=dict, repr=False)

    async def list_documents(
        self, collection_id: str, queries: Sequence[Query]
    ) -> list[dict[str, Any]]:
        docs = self.collections.get(collection_id, {}).values()
        return [dict(d) for d in docs if all(q.matches(d) for q in queries)]

    async def create_document(
        self, collection_id: str, document_id: str, data: dict[str, Any]
    ) -> dict[str, Any]:
        docs = self.collections.setdefault(collection_id, {})
        if document_id == UNIQUE_ID:
            document_id = uuid.uuid4().hex
        if document_id in docs:
            raise IdentityServiceError(
                "Document with the requested ID already exists.",
                code=409,
                type=DOCUMENT_ALREADY_EXISTS,
            )
        doc = {"$id": document_id, "$collectionId": collection_id, **data}
        docs[document_id] = doc
        return dict(doc)

    async def create_email_token(self, *, user_id: str, email: str) -> dict[str, Any]:
        account = self._account_by_email(email)
        if account is None:
            account_id = uuid.uuid4().hex if user_id == UNIQUE_ID else user_id
            if account_id in self.accounts:
                raise IdentityServiceError(
                    "A user with the same id already exists.", code=409, type="user_already_exists"
                )
            account = {"$id": account_id, "email": email, "name": ""}
            self.accounts[account_id] = account

        passcode = f"{secrets.randbelow(1_000_000):06d}"
        # A new passcode supersedes any earlier one for the same account.
        self._tokens[account["$id"]] = passcode
        self.outbox.append(OutboxMessage(email=email, user_id=account["$id"], passcode=passcode))
        return {"$id": uuid.uuid4().hex, "userId": account["$id"], "secret": ""}

    async def create_session(self, *, user_id: str, secret: str) -> dict[str, Any]:
        expected = self._tokens.get(user_id)
        if expected is None or not secrets.compare_digest(expected, secret):
            raise IdentityServiceError(
                "Invalid token passed in the request.", code=401, type="user_invalid_token"
            )
        del self._tokens[user_id]

        session = _Session(id=uuid.uuid4().hex, user_id=user_id, secret=secrets.token_urlsafe(32))
        self._sessions[session.secret] = session
        return {"$id": session.id, "userId": session.user_id, "secret": session.secret}

    async def get_account(self, *, session_secret: str) -> dict[str, Any]:
        session = self._require_session(session_secret)
        return dict(self.accounts[session.user_id])

    async def delete_session(
        self, *, session_secret: str, session_id: str = CURRENT_SESSION
    ) -> None:
        session = self._require_session(session_secret)
        if session_id not in (CURRENT_SESSION, session.id):
            raise IdentityServiceError(
                "Session with the requested ID could not be found.",
                code=404,
                type="user_session_not_found",
            )
        del self._sessions[session.secret]

    def last_passcode(self, email: str) -> str | None:
        for message in reversed(self.outbox):
            if message.email == email:
                return message.passcode
        return None

    def _account_by_email(self, email: str) -> dict[str, Any] | None:
        for account in self.accounts.values():
            if account["email"] == email:
                return account
        return None

    def _require_session(self, session_secret: str) -> _Session:
        session = self._sessions.get(session_secret)
        if session is None:
            raise IdentityServiceError(
                "User (role: guests) missing scope (account)",
                code=401,
                type="general_unauthorized_scope",
            )
        return session


# --- Module Notes -----------------------------------------------------------
# One instance is shared per app (see `api.app.create_app`); all mutations happen
# without awaiting, so concurrent requests on one event loop cannot interleave them.
