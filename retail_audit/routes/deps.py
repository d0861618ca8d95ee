"""Shared route dependencies: the configured storage and the current user."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import Header, Request

from retail_audit.logic.errors import AuthenticationError
from retail_audit.logic.presets import DEMO_USER_ID
from retail_audit.storage.base import Storage

logger = logging.getLogger(__name__)


def get_storage(request: Request) -> Storage:
    return request.app.state.storage


def current_user_id(
    request: Request,
    x_user_id: Optional[str] = Header(default=None, alias="X-User-Id"),
) -> str:
    """Resolve the signed-in user from the session header.

    Demo mode has no sign-in, so a missing header becomes the demo user.
    """
    if x_user_id and x_user_id.strip():
        return x_user_id.strip()
    if request.app.state.config.demo_mode:
        return DEMO_USER_ID
    logger.info("auth_missing_user path=%s", request.url.path)
    raise AuthenticationError("X-User-Id header is required")


__all__ = ["get_storage", "current_user_id"]
