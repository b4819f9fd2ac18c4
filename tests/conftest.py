"""
tests.conftest

Shared fixtures: test settings, the in-memory identity backend, and a dict-backed
cookie store for service-level tests.
"""

from __future__ import annotations

import pytest

from otp_auth.auth.service import AuthService
from otp_auth.identity.memory import InMemoryIdentityService
from otp_auth.settings import Settings


class MemoryCookieStore:
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.jar: dict[str, str] = dict(initial or {})

    def get(self, name: str) -> str | None:
        return self.jar.get(name)

    def set(self, name: str, value: str) -> None:
        self.jar[name] = value

    def delete(self, name: str) -> None:
        self.jar.pop(name, None)


@pytest.fixture
def settings() -> Settings:
    return Settings(env="test", identity_backend="memory")


@pytest.fixture
def identity() -> InMemoryIdentityService:
    return InMemoryIdentityService()


@pytest.fixture
def cookies() -> MemoryCookieStore:
    return MemoryCookieStore()


@pytest.fixture
def svc(identity: InMemoryIdentityService, settings: Settings, cookies: MemoryCookieStore):
    return AuthService(identity=identity, settings=settings, cookies=cookies)
