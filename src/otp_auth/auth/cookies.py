"""
otp_auth.auth.cookies

Session cookie store bound to one request/response pair.

Responsibilities:
- Read the session secret from the inbound request.
- Write/clear the cookie on the outbound response with fixed security attributes.
"""

from __future__ import annotations

from typing import Protocol

from starlette.requests import Request
from starlette.responses import Response


class CookieStore(Protocol):
    def get(self, name: str) -> str | None: ...

    def set(self, name: str, value: str) -> None: ...

    def delete(self, name: str) -> None: ...


class ResponseCookieStore:
    """
    Writes are also reflected in `get`, so a cookie set (or deleted) earlier in the
    same request is seen by later reads.
    """

    def __init__(self, request: Request, response: Response, *, secure: bool = True) -> None:
        self._request = request
        self._response = response
        self._secure = secure
        self._pending: dict[str, str | None] = {}

    def get(self, name: str) -> str | None:
        if name in self._pending:
            return self._pending[name]
        return self._request.cookies.get(name) or None

    def set(self, name: str, value: str) -> None:
        self._response.set_cookie(
            key=name,
            value=value,
            path="/",
            httponly=True,
            samesite="strict",
            secure=self._secure,
        )
        self._pending[name] = value

    def delete(self, name: str) -> None:
        self._response.delete_cookie(
            key=name,
            path="/",
            httponly=True,
            samesite="strict",
            secure=self._secure,
        )
        self._pending[name] = None
