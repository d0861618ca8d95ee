"""Template authoring operations.

Templates are editable until published. Publishing runs the rule graph
check and refuses templates whose conditional rules form a cycle; later
changes go through a new version. Deletion is a soft delete.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError

from retail_audit.logic.actions import index_rules_by_source, apply_action
from retail_audit.logic.errors import (
    InvalidTemplateError,
    NotFoundError,
    RuleCycleError,
    TemplatePublishedError,
)
from retail_audit.logic.rule_graph import check_rule_graph
from retail_audit.logic.visibility import section_progress, visible_sections
from retail_audit.models.template import Template, TemplateCategory
from retail_audit.storage.base import Storage, utc_now

logger = logging.getLogger(__name__)

TEMPLATES = "templates"
CATEGORIES = "template_categories"

# Fields an author may change through update_template
EDITABLE_FIELDS = {"name", "description", "category_id", "sections", "scoring_rules"}


def _parse_template(data: Mapping[str, Any]) -> Template:
    try:
        return Template.model_validate(dict(data))
    except PydanticValidationError as e:
        raise InvalidTemplateError(
            "template failed validation",
            errors=[{"loc": list(err["loc"]), "msg": err["msg"]} for err in e.errors()],
        )


def list_templates(
    storage: Storage,
    published: Optional[bool] = None,
    category_id: Optional[str] = None,
) -> List[Template]:
    filters: Dict[str, Any] = {"is_active": True}
    if published is not None:
        filters["is_published"] = published
    if category_id:
        filters["category_id"] = category_id
    rows = storage.fetch(TEMPLATES, filters=filters, order_by="created_at", descending=True)
    return [_parse_template(r) for r in rows]


def get_template(storage: Storage, template_id: str, include_inactive: bool = False) -> Template:
    row = storage.fetch_one(TEMPLATES, "template_id", template_id)
    if row is None or (not include_inactive and not row.get("is_active", True)):
        raise NotFoundError(f"template {template_id} not found")
    return _parse_template(row)


def create_template(storage: Storage, payload: Mapping[str, Any], user_id: str) -> Template:
    data = {k: v for k, v in dict(payload).items() if k in EDITABLE_FIELDS}
    data.update(
        {
            "template_id": payload.get("template_id") or "pending",
            "version": 1,
            "is_published": False,
            "is_active": True,
            "created_by": user_id,
        }
    )
    template = _parse_template(data)
    record = template.model_dump()
    if not payload.get("template_id"):
        record.pop("template_id")
    stored = storage.insert(TEMPLATES, record)
    logger.info("template_created template_id=%s created_by=%s", stored["template_id"], user_id)
    return _parse_template(stored)


def update_template(storage: Storage, template_id: str, changes: Mapping[str, Any]) -> Template:
    current = get_template(storage, template_id)
    if current.is_published:
        raise TemplatePublishedError(f"template {template_id} is published; create a new version to change it")
    unknown = sorted(set(changes) - EDITABLE_FIELDS)
    if unknown:
        raise InvalidTemplateError(f"fields cannot be updated: {unknown}")
    merged = current.model_dump()
    merged.update(dict(changes))
    validated = _parse_template(merged).model_dump()
    rows = storage.update(TEMPLATES, {"template_id": template_id}, {k: validated[k] for k in changes})
    logger.info("template_updated template_id=%s fields=%s", template_id, sorted(changes))
    return _parse_template(rows[0]) if rows else get_template(storage, template_id)


def delete_template(storage: Storage, template_id: str) -> None:
    get_template(storage, template_id)
    storage.update(TEMPLATES, {"template_id": template_id}, {"is_active": False})
    logger.info("template_soft_deleted template_id=%s", template_id)


def publish_template(storage: Storage, template_id: str) -> Dict[str, Any]:
    """Publish a template after checking its rule graph.

    Returns the published template and any non-blocking warnings.
    """
    template = get_template(storage, template_id)
    if template.is_published:
        return {"template": template, "warnings": []}
    report = check_rule_graph(template)
    if report.cycles:
        logger.warning("template_publish_rejected template_id=%s cycles=%s", template_id, report.cycles)
        raise RuleCycleError(report.cycles)
    warnings = report.warnings()
    if warnings:
        logger.warning("template_publish_warnings template_id=%s warnings=%s", template_id, warnings)
    rows = storage.update(
        TEMPLATES,
        {"template_id": template_id},
        {"is_published": True, "published_at": utc_now()},
    )
    logger.info("template_published template_id=%s version=%s", template_id, template.version)
    published = _parse_template(rows[0]) if rows else get_template(storage, template_id)
    return {"template": published, "warnings": warnings}


def create_new_version(storage: Storage, template_id: str, user_id: str) -> Template:
    """Copy a template into a new unpublished version one higher."""
    source = get_template(storage, template_id)
    record = source.model_dump(exclude={"template_id", "created_at", "updated_at", "published_at"})
    record.update(
        {
            "version": source.version + 1,
            "is_published": False,
            "is_active": True,
            "created_by": user_id,
            "published_at": None,
        }
    )
    stored = storage.insert(TEMPLATES, record)
    logger.info(
        "template_version_created template_id=%s from=%s version=%s",
        stored["template_id"],
        template_id,
        record["version"],
    )
    return _parse_template(stored)


def preview_logic(template: Template, responses: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Evaluate a template's logic against sample responses without persisting.

    Runs every rule once in traversal order, then reports visible sections
    and the actions that fired.
    """
    current = dict(responses or {})
    fired: List[str] = []
    navigation: List[Dict[str, str]] = []
    for rules in index_rules_by_source(template).values():
        for rule in rules:
            result = apply_action(rule, current, template)
            current = result.responses
            if result.applied:
                fired.append(rule.id)
            if result.intent is not None:
                navigation.append({"rule_id": result.intent.rule_id, "section_id": result.intent.section_id})
    return {
        "responses": current,
        "sections": [
            {
                "section_id": section.section_id,
                "title": section.title,
                "visible_question_ids": [q.question_id for q in questions],
            }
            for section, questions in visible_sections(template, current)
        ],
        "progress": section_progress(template, current),
        "applied_rule_ids": fired,
        "navigation": navigation,
    }


def list_categories(storage: Storage) -> List[TemplateCategory]:
    rows = storage.fetch(CATEGORIES, filters={"is_active": True}, order_by="sort_order")
    return [TemplateCategory.model_validate(r) for r in rows]


def create_category(storage: Storage, payload: Mapping[str, Any]) -> TemplateCategory:
    existing = storage.fetch(CATEGORIES, filters={"is_active": True})
    data = dict(payload)
    data.setdefault("sort_order", len(existing) + 1)
    data["is_active"] = True
    try:
        category = TemplateCategory.model_validate({"category_id": "pending", **data})
    except PydanticValidationError as e:
        raise InvalidTemplateError(
            "category failed validation",
            errors=[{"loc": list(err["loc"]), "msg": err["msg"]} for err in e.errors()],
        )
    record = category.model_dump()
    if not payload.get("category_id"):
        record.pop("category_id")
    stored = storage.insert(CATEGORIES, record)
    logger.info("category_created category_id=%s", stored["category_id"])
    return TemplateCategory.model_validate(stored)


__all__ = [
    "EDITABLE_FIELDS",
    "list_templates",
    "get_template",
    "create_template",
    "update_template",
    "delete_template",
    "publish_template",
    "create_new_version",
    "preview_logic",
    "list_categories",
    "create_category",
]
