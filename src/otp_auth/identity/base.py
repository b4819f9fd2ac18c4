"""
otp_auth.identity.base

Identity Service interface and query helpers.

Responsibilities:
- Describe the platform operations the auth flow needs (documents, email tokens, sessions).
- Provide a small `Query` value type that both backends understand.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Protocol

# Placeholder id the platform replaces with a freshly generated one.
UNIQUE_ID = "unique()"

CURRENT_SESSION = "current"


@dataclass(frozen=True, slots=True)
class Query:
    method: str
    attribute: str
    values: tuple[Any, ...]

    def to_wire(self) -> str:
        return json.dumps(
            {"method": self.method, "attribute": self.attribute, "values": list(self.values)},
            separators=(",", ":"),
        )

    def matches(self, document: dict[str, Any]) -> bool:
        if self.method != "equal":
            raise ValueError(f"unsupported query method: {self.method}")
        return document.get(self.attribute) in self.values


def equal(attribute: str, *values: Any) -> Query:
    return Query(method="equal", attribute=attribute, values=tuple(values))


class IdentityService(Protocol):
    async def list_documents(
        self, collection_id: str, queries: Sequence[Query]
    ) -> list[dict[str, Any]]: ...

    async def create_document(
        self, collection_id: str, document_id: str, data: dict[str, Any]
    ) -> dict[str, Any]: ...

    async def create_email_token(self, *, user_id: str, email: str) -> dict[str, Any]: ...

    async def create_session(self, *, user_id: str, secret: str) -> dict[str, Any]: ...

    async def get_account(self, *, session_secret: str) -> dict[str, Any]: ...

    async def delete_session(
        self, *, session_secret: str, session_id: str = CURRENT_SESSION
    ) -> None: ...


# --- Module Notes -----------------------------------------------------------
# Payloads are the platform's JSON documents (`$id`, `userId`, `secret`, ...); typed
# models live in `otp_auth.auth.models` and are built at the service boundary.
