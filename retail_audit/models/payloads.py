"""Pydantic models for request payloads.

Kept apart from the route modules so the payload shapes can be shared by
routes and tests. Field names accept both snake_case and the camelCase the
web and mobile clients send.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import ConfigDict, Field

from retail_audit.models.audit import Location
from retail_audit.models.template import CamelModel, ScoringRules, Section


class TemplateCreate(CamelModel):
    template_id: Optional[str] = None
    name: str = Field(min_length=1)
    description: Optional[str] = None
    category_id: Optional[str] = None
    sections: List[Section] = Field(default_factory=list)
    scoring_rules: ScoringRules = Field(default_factory=ScoringRules)


class TemplateUpdate(CamelModel):
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    category_id: Optional[str] = None
    sections: Optional[List[Section]] = None
    scoring_rules: Optional[ScoringRules] = None


class CategoryCreate(CamelModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    sort_order: Optional[int] = None


class AuditCreate(CamelModel):
    template_id: str
    assigned_to: Optional[str] = None
    location: Location = Field(default_factory=Location)


class ResponseUpdate(CamelModel):
    value: Any = None


class ProgressSave(CamelModel):
    responses: Dict[str, Any] = Field(default_factory=dict)


class SubmitRequest(CamelModel):
    responses: Optional[Dict[str, Any]] = None


class PreviewRequest(CamelModel):
    responses: Dict[str, Any] = Field(default_factory=dict)


__all__ = [
    "TemplateCreate",
    "TemplateUpdate",
    "CategoryCreate",
    "AuditCreate",
    "ResponseUpdate",
    "ProgressSave",
    "SubmitRequest",
    "PreviewRequest",
]
