"""
otp_auth.identity.errors

Errors raised by Identity Service implementations.
"""

from __future__ import annotations


class IdentityServiceError(Exception):
    """
    A call to the identity platform failed.

    `code` mirrors the platform's HTTP status (None for transport failures) and
    `type` its machine-readable error type, e.g. ``user_invalid_token``.
    """

    def __init__(self, message: str, *, code: int | None = None, type: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.type = type

    def __str__(self) -> str:
        if self.code is None:
            return self.message
        return f"{self.message} (code={self.code}, type={self.type})"


DOCUMENT_ALREADY_EXISTS = "document_already_exists"
