from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi.middleware.cors import CORSMiddleware

if TYPE_CHECKING:
    from fastapi import FastAPI

    from timewise.config import Settings


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Configure application middleware.

    The web client sends the caller identity in ``X-User-Id`` and ``X-Role``,
    so those headers must pass the CORS preflight.
    """
    app.add_middleware(
        CORSMiddleware,  # ty: ignore[invalid-argument-type]
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "OPTIONS"],
        allow_headers=["Content-Type", "X-User-Id", "X-Role"],
    )
