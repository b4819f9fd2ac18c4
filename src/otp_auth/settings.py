"""
otp_auth.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for all layers.
- Hide secrets from repr/logging (e.g., the platform API key).
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_AVATAR_URL = (
    "https://th.bing.com/th/id/OIP.hGSCbXlcOjL_9mmzerqAbQHaHa?w=181&h=181&c=7&r=0&o=5&pid=1.7"
)


class Settings(BaseSettings):
    """
    - Strict env-driven configuration
    - Defaults safe for local dev (in-memory identity backend)
    - Single settings object injected across layers
    """

    model_config = SettingsConfigDict(env_prefix="OTP_AUTH_", case_sensitive=False)

    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "otp-auth"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Identity Service
    identity_backend: Literal["appwrite", "memory"] = "memory"
    appwrite_endpoint: str = "https://cloud.appwrite.io/v1"
    appwrite_project_id: str = ""
    appwrite_api_key: str = Field(default="", repr=False)
    appwrite_database_id: str = ""
    appwrite_users_collection_id: str = "users"
    identity_timeout_seconds: float = 10.0

    # Session cookie
    session_cookie_name: str = "appwrite-session"
    cookie_secure: bool = True

    default_avatar_url: str = DEFAULT_AVATAR_URL
    sign_in_path: str = "/sign-in"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# `identity_backend="memory"` is for local development and tests only; production
# deployments point at a real Appwrite project.
