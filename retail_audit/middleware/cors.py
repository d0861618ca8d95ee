"""CORS configuration helper.

Applies CORS for the web dashboard and mobile clients and exposes the
correlation header to browsers.
"""

from __future__ import annotations

from typing import Iterable
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware


EXPOSE_HEADERS: list[str] = ["X-Request-Id"]


def apply_cors(app: FastAPI, *, origins: Iterable[str] | None = None) -> None:
    allowed = list(origins or ["*"])
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed,
        # Browsers reject credentials with a wildcard origin
        allow_credentials="*" not in allowed,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=EXPOSE_HEADERS,
    )


__all__ = ["apply_cors", "EXPOSE_HEADERS"]
