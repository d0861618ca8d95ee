"""Audit assignment models and status constants."""

from __future__ import annotations

from typing import Any, Dict, Literal, Optional

from pydantic import Field

from retail_audit.models.template import CamelModel


class AuditStatus:
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"

    # Position in the one-directional lifecycle
    ORDER = {PENDING: 0, IN_PROGRESS: 1, COMPLETED: 2}


AuditStatusName = Literal["pending", "in_progress", "completed"]


class Coordinates(CamelModel):
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)


class Location(CamelModel):
    store_name: Optional[str] = None
    address: Optional[str] = None
    coordinates: Optional[Coordinates] = None


class Audit(CamelModel):
    audit_id: str
    template_id: str
    status: AuditStatusName = AuditStatus.PENDING
    assigned_to: str
    location: Location = Field(default_factory=Location)
    responses: Dict[str, Any] = Field(default_factory=dict)
    score: Optional[float] = None
    passed: Optional[bool] = None
    submitted_at: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


__all__ = ["AuditStatus", "Coordinates", "Location", "Audit"]
