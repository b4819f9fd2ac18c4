"""
otp_auth.auth.errors

Auth-layer errors. Platform call failures are `identity.errors.IdentityServiceError`.
"""

from __future__ import annotations


class AuthError(Exception):
    pass


class PasscodeIssueError(AuthError):
    """The platform accepted the request but returned no account id."""


class NoActiveSessionError(AuthError):
    """No session cookie was presented."""
