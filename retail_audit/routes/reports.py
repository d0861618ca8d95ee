"""Dashboard report endpoints, served from the live audits cache."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from retail_audit.logic.reports import summarize_audits
from retail_audit.routes.deps import current_user_id

router = APIRouter()


@router.get("/reports/summary", summary="Audit counts, average score and compliance rate")
def get_summary(
    request: Request,
    template_id: Optional[str] = Query(default=None, alias="templateId"),
    _user: str = Depends(current_user_id),
):
    return summarize_audits(request.app.state.audit_cache.snapshot(), template_id=template_id)


__all__ = ["router"]
