"""APIRouter registration for the audit service."""

from __future__ import annotations

from fastapi import APIRouter

from retail_audit.routes.audits import router as audits_router
from retail_audit.routes.categories import router as categories_router
from retail_audit.routes.reports import router as reports_router
from retail_audit.routes.templates import router as templates_router

api_router = APIRouter()
api_router.include_router(categories_router, tags=["Categories"])
api_router.include_router(templates_router, tags=["Templates"])
api_router.include_router(audits_router, tags=["Audits"])
api_router.include_router(reports_router, tags=["Reports"])

__all__ = ["api_router"]
