"""
otp_auth.auth.models

Auth domain models.

Responsibilities:
- Typed views over the platform's JSON documents (`UserProfile`, `Session`, `Identity`).
- The explicit sign-in result variant returned instead of raising on "not found".
"""

from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass
from typing import Any

USER_NOT_FOUND = "User not found"

# Fixed namespace so the same email always maps to the same profile document id.
_PROFILE_NAMESPACE = uuid.UUID("6f1c3a52-8f0e-4c39-9a57-0d2b1e4f7c11")


def normalize_email(email: str) -> str:
    return email.strip().lower()


def profile_document_id(email: str) -> str:
    # 32 hex chars fits the platform's 36-char [a-zA-Z0-9._-] document id rule.
    return uuid.uuid5(_PROFILE_NAMESPACE, normalize_email(email)).hex


@dataclass(frozen=True, slots=True)
class UserProfile:
    document_id: str
    full_name: str
    email: str
    avatar: str
    account_id: str

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> UserProfile:
        return cls(
            document_id=str(doc.get("$id", "")),
            full_name=str(doc.get("fullName", "")),
            email=str(doc.get("email", "")),
            avatar=str(doc.get("avatar", "")),
            account_id=str(doc.get("accountId", "")),
        )

    def to_document(self) -> dict[str, Any]:
        return {
            "fullName": self.full_name,
            "email": self.email,
            "avatar": self.avatar,
            "accountId": self.account_id,
        }


@dataclass(frozen=True, slots=True)
class Session:
    id: str
    secret: str
    user_id: str

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> Session:
        return cls(
            id=str(payload.get("$id", "")),
            secret=str(payload.get("secret", "")),
            user_id=str(payload.get("userId", "")),
        )


@dataclass(frozen=True, slots=True)
class Identity:
    id: str
    email: str
    name: str

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> Identity:
        return cls(
            id=str(payload.get("$id", "")),
            email=str(payload.get("email", "")),
            name=str(payload.get("name", "")),
        )


class SignInStatus(enum.StrEnum):
    ok = "OK"
    not_found = "NOT_FOUND"


@dataclass(frozen=True, slots=True)
class SignInResult:
    status: SignInStatus
    account_id: str | None = None
    error: str | None = None

    @classmethod
    def found(cls, account_id: str) -> SignInResult:
        return cls(status=SignInStatus.ok, account_id=account_id)

    @classmethod
    def user_not_found(cls) -> SignInResult:
        return cls(status=SignInStatus.not_found, account_id=None, error=USER_NOT_FOUND)


# --- Module Notes -----------------------------------------------------------
# Wire attribute names (`fullName`, `accountId`) match the users collection schema
# on the platform; only `from_document`/`to_document` know about them.
