"""
otp_auth.api.__main__

Entrypoint for running the FastAPI application via `python -m otp_auth.api`.
"""

from __future__ import annotations

import uvicorn

from otp_auth.api.app import create_app
from otp_auth.settings import get_settings


def main() -> None:
    settings = get_settings()
    app = create_app(settings=settings)

    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_config=None,  # structlog
    )


if __name__ == "__main__":
    main()
