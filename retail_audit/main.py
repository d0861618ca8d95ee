"""FastAPI application factory for the retail audit service.

Wires logging, configuration, storage selection, the problem+json handlers
and cross-cutting middleware, then mounts the API under ``/api/v1``.
Run with ``uvicorn --factory retail_audit.main:create_app``.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError

from retail_audit.config import AppConfig, load_config
from retail_audit.http.problem import (
    handle_domain_error,
    handle_http_exception,
    handle_request_validation_error,
    handle_unexpected_error,
)
from retail_audit.http.request_id import RequestIdMiddleware
from retail_audit.logging_setup import configure_logging
from retail_audit.logic.errors import AuditServiceError, ConfigurationError
from retail_audit.logic.live_cache import LiveList
from retail_audit.middleware.cors import apply_cors
from retail_audit.routes import api_router
from retail_audit.storage import build_storage
from retail_audit.storage.base import Storage

logger = logging.getLogger(__name__)


def create_app(config: Optional[AppConfig] = None, storage: Optional[Storage] = None) -> FastAPI:
    """Build the application.

    ``config`` defaults to ``load_config()``; ``storage`` defaults to the
    implementation the configuration selects. A ConfigurationError from
    storage selection is fatal and propagates to the caller.
    """
    configure_logging()
    cfg = config or load_config()
    if storage is None:
        try:
            storage = build_storage(cfg)
        except ConfigurationError:
            logger.error("startup_configuration_invalid", exc_info=True)
            raise

    app = FastAPI(title="Retail Audit Service")
    app.state.config = cfg
    app.state.storage = storage
    app.state.audit_cache = LiveList(storage, "audits", "audit_id").start()

    app.add_exception_handler(AuditServiceError, handle_domain_error)
    app.add_exception_handler(HTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    apply_cors(app, origins=cfg.cors.origins)
    app.add_middleware(RequestIdMiddleware)

    app.include_router(api_router, prefix="/api/v1")

    @app.get("/health")
    def health():
        backend_ok = app.state.storage.ping()
        return {
            "status": "ok" if backend_ok else "degraded",
            "demo_mode": cfg.demo_mode,
            "backend": type(app.state.storage).__name__,
        }

    @app.on_event("shutdown")
    def _close_storage() -> None:
        app.state.audit_cache.close()
        app.state.storage.close()
        logger.info("app_shutdown_complete")

    logger.info("app_created demo_mode=%s storage=%s", cfg.demo_mode, type(storage).__name__)
    return app


# Intentionally do not instantiate the app at import time to prevent side effects.
__all__ = ["create_app"]
