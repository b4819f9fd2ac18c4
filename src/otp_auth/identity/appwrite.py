"""
otp_auth.identity.appwrite

HTTP client for the Appwrite REST API.

Responsibilities:
- Attach project/API-key credentials for server-side calls.
- Attach the caller's session secret for session-scoped calls (`/account`).
- Translate non-2xx responses and transport failures into `IdentityServiceError`.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import httpx

from otp_auth.identity.base import CURRENT_SESSION, Query
from otp_auth.identity.errors import IdentityServiceError
from otp_auth.settings import Settings

RESPONSE_FORMAT = "1.6.0"


class AppwriteIdentityClient:
    """
    One instance per request; the underlying `httpx.AsyncClient` is owned by the caller
    (see `otp_auth.api.deps.identity_service`).
    """

    def __init__(self, *, settings: Settings, http: httpx.AsyncClient) -> None:
        self._settings = settings
        self._http = http

    def _headers(self, *, session_secret: str | None = None) -> dict[str, str]:
        headers = {
            "X-Appwrite-Project": self._settings.appwrite_project_id,
            "X-Appwrite-Response-Format": RESPONSE_FORMAT,
        }
        if session_secret is None:
            headers["X-Appwrite-Key"] = self._settings.appwrite_api_key
        else:
            # Session-scoped calls act as the end user, so the admin key is not sent.
            headers["X-Appwrite-Session"] = session_secret
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        params: list[tuple[str, str]] | None = None,
        session_secret: str | None = None,
    ) -> Any:
        try:
            r = await self._http.request(
                method,
                path,
                json=json,
                params=params,
                headers=self._headers(session_secret=session_secret),
            )
        except httpx.HTTPError as e:
            raise IdentityServiceError(f"Identity service unreachable: {e}") from e

        if r.is_error:
            raise _error_from_response(r)
        if r.status_code == 204 or not r.content:
            return None
        return r.json()

    def _documents_path(self, collection_id: str) -> str:
        return (
            f"/databases/{self._settings.appwrite_database_id}"
            f"/collections/{collection_id}/documents"
        )

    async def list_documents(
        self, collection_id: str, queries: Sequence[Query]
    ) -> list[dict[str, Any]]:
        body = await self._request(
            "GET",
            self._documents_path(collection_id),
            params=[("queries[]", q.to_wire()) for q in queries],
        )
        return list(body.get("documents", []))

    async def create_document(
        self, collection_id: str, document_id: str, data: dict[str, Any]
    ) -> dict[str, Any]:
        return await self._request(
            "POST",
            self._documents_path(collection_id),
            json={"documentId": document_id, "data": data},
        )

    async def create_email_token(self, *, user_id: str, email: str) -> dict[str, Any]:
        # The platform mails the passcode; the response carries the account id only.
        return await self._request(
            "POST",
            "/account/tokens/email",
            json={"userId": user_id, "email": email},
        )

    async def create_session(self, *, user_id: str, secret: str) -> dict[str, Any]:
        return await self._request(
            "POST",
            "/account/sessions/token",
            json={"userId": user_id, "secret": secret},
        )

    async def get_account(self, *, session_secret: str) -> dict[str, Any]:
        return await self._request("GET", "/account", session_secret=session_secret)

    async def delete_session(
        self, *, session_secret: str, session_id: str = CURRENT_SESSION
    ) -> None:
        await self._request(
            "DELETE",
            f"/account/sessions/{session_id}",
            session_secret=session_secret,
        )


def _error_from_response(r: httpx.Response) -> IdentityServiceError:
    try:
        body = r.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}
    message = str(body.get("message") or r.reason_phrase or "Identity service error")
    return IdentityServiceError(
        message,
        code=int(body.get("code") or r.status_code),
        type=body.get("type"),
    )


# --- Module Notes -----------------------------------------------------------
# Base URL, project id and timeout come from settings and are applied when the
# request-scoped httpx client is built; no retries are attempted here.
