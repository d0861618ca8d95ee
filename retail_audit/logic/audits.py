"""Audit lifecycle: assignment, answering, saving progress and submission.

Status moves one way, pending -> in_progress -> completed. A completed audit
is frozen: its responses and score never change again.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError

from retail_audit.logic.actions import process_response_change
from retail_audit.logic.errors import (
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    SubmissionValidationError,
    UnprocessableError,
)
from retail_audit.logic.scoring import score_audit
from retail_audit.logic.templates import get_template
from retail_audit.logic.validation import validate_submission
from retail_audit.logic.visibility import (
    compute_visibility_delta,
    section_progress,
    visible_question_ids,
    visible_sections,
)
from retail_audit.models.answers import is_absent
from retail_audit.models.audit import Audit, AuditStatus, Location
from retail_audit.models.template import Template
from retail_audit.storage.base import Storage, utc_now

logger = logging.getLogger(__name__)

AUDITS = "audits"


def advance_status(current: str, target: str) -> str:
    """Return ``target`` if the lifecycle allows moving there from ``current``.

    Staying in place is allowed except for completed, which is terminal.
    """
    order = AuditStatus.ORDER
    if current not in order or target not in order:
        raise InvalidTransitionError(f"unknown status transition {current} -> {target}")
    if current == AuditStatus.COMPLETED:
        raise InvalidTransitionError("audit is already completed")
    if order[target] < order[current]:
        raise InvalidTransitionError(f"audit cannot move from {current} back to {target}")
    return target


def get_audit(storage: Storage, audit_id: str) -> Audit:
    row = storage.fetch_one(AUDITS, "audit_id", audit_id)
    if row is None:
        raise NotFoundError(f"audit {audit_id} not found")
    return Audit.model_validate(row)


def list_audits(storage: Storage, assigned_to: str, status: Optional[str] = None) -> List[Audit]:
    filters: Dict[str, Any] = {"assigned_to": assigned_to}
    if status:
        filters["status"] = status
    rows = storage.fetch(AUDITS, filters=filters, order_by="created_at", descending=True)
    return [Audit.model_validate(r) for r in rows]


def assign_audit(
    storage: Storage,
    template_id: str,
    assigned_to: str,
    location: Optional[Mapping[str, Any]] = None,
) -> Audit:
    template = get_template(storage, template_id)
    if not template.is_published:
        raise ConflictError(f"template {template_id} is not published")
    try:
        loc = Location.model_validate(dict(location or {}))
    except PydanticValidationError as e:
        raise UnprocessableError(
            "location failed validation",
            errors=[{"loc": list(err["loc"]), "msg": err["msg"]} for err in e.errors()],
        )
    stored = storage.insert(
        AUDITS,
        {
            "template_id": template_id,
            "status": AuditStatus.PENDING,
            "assigned_to": assigned_to,
            "location": loc.model_dump(),
            "responses": {},
            "score": None,
            "passed": None,
            "submitted_at": None,
        },
    )
    logger.info("audit_assigned audit_id=%s template_id=%s assigned_to=%s", stored["audit_id"], template_id, assigned_to)
    return Audit.model_validate(stored)


def _load_for_edit(storage: Storage, audit_id: str) -> tuple[Audit, Template]:
    audit = get_audit(storage, audit_id)
    if audit.status == AuditStatus.COMPLETED:
        raise InvalidTransitionError(f"audit {audit_id} is completed and can no longer change")
    template = get_template(storage, audit.template_id, include_inactive=True)
    return audit, template


def _write(storage: Storage, audit_id: str, changes: Mapping[str, Any]) -> Audit:
    rows = storage.update(AUDITS, {"audit_id": audit_id}, changes)
    if not rows:
        raise NotFoundError(f"audit {audit_id} not found")
    return Audit.model_validate(rows[0])


def record_response(storage: Storage, audit_id: str, question_id: str, value: Any) -> Dict[str, Any]:
    """Record one answer, run the rules sourced at it and report the effect."""
    audit, template = _load_for_edit(storage, audit_id)
    if not template.has_question(question_id):
        raise NotFoundError(f"question {question_id} is not part of template {template.template_id}")

    pre_visible = visible_question_ids(template, audit.responses)
    responses = dict(audit.responses)
    responses[question_id] = value
    outcome = process_response_change(template, responses, question_id)
    post_visible = visible_question_ids(template, outcome.responses)
    now_visible, now_hidden, suppressed = compute_visibility_delta(
        pre_visible,
        post_visible,
        lambda qid: not is_absent(outcome.responses.get(qid)),
    )

    status = advance_status(audit.status, AuditStatus.IN_PROGRESS)
    updated = _write(storage, audit_id, {"responses": outcome.responses, "status": status})
    logger.info(
        "audit_response_recorded audit_id=%s question_id=%s now_visible=%s now_hidden=%s",
        audit_id,
        question_id,
        now_visible,
        now_hidden,
    )
    return {
        "audit_id": audit_id,
        "status": updated.status,
        "responses": updated.responses,
        "visible_question_ids": post_visible,
        "visibility_delta": {"now_visible": now_visible, "now_hidden": now_hidden},
        "suppressed_answers": suppressed,
        "applied_rule_ids": outcome.applied_rule_ids,
        "navigation": [{"rule_id": i.rule_id, "section_id": i.section_id} for i in outcome.intents],
    }


def save_progress(storage: Storage, audit_id: str, responses: Mapping[str, Any]) -> Audit:
    audit, _template = _load_for_edit(storage, audit_id)
    status = advance_status(audit.status, AuditStatus.IN_PROGRESS)
    merged = {**audit.responses, **dict(responses)}
    updated = _write(storage, audit_id, {"responses": merged, "status": status})
    logger.info("audit_progress_saved audit_id=%s answers=%s", audit_id, len(responses))
    return updated


def submit_audit(storage: Storage, audit_id: str, responses: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """Validate, score and complete an audit."""
    audit, template = _load_for_edit(storage, audit_id)
    final = {**audit.responses, **dict(responses or {})}

    blocking = validate_submission(template, final)
    if blocking:
        logger.info("audit_submit_blocked audit_id=%s items=%s", audit_id, len(blocking))
        raise SubmissionValidationError(blocking)

    result = score_audit(template, final)
    status = advance_status(audit.status, AuditStatus.COMPLETED)
    updated = _write(
        storage,
        audit_id,
        {
            "responses": final,
            "status": status,
            "score": result.score,
            "passed": result.passed,
            "submitted_at": utc_now(),
        },
    )
    logger.info(
        "audit_submitted audit_id=%s score=%s passed=%s critical_failures=%s",
        audit_id,
        result.score,
        result.passed,
        result.critical_failures,
    )
    return {
        "audit": updated,
        "score": result.score,
        "passed": result.passed,
        "completion": result.completion,
        "section_scores": result.section_scores,
        "critical_failures": result.critical_failures,
    }


def audit_screen(storage: Storage, audit_id: str) -> Dict[str, Any]:
    """Visible sections and questions for the audit's current answers."""
    audit = get_audit(storage, audit_id)
    template = get_template(storage, audit.template_id, include_inactive=True)
    progress = section_progress(template, audit.responses)
    return {
        "audit_id": audit.audit_id,
        "template_id": template.template_id,
        "status": audit.status,
        "sections": [
            {
                "section_id": section.section_id,
                "title": section.title,
                "description": section.description,
                "order_index": section.order_index,
                "questions": [q.model_dump() for q in questions],
                "progress": progress[section.section_id],
            }
            for section, questions in visible_sections(template, audit.responses)
        ],
        "responses": audit.responses,
    }


__all__ = [
    "advance_status",
    "get_audit",
    "list_audits",
    "assign_audit",
    "record_response",
    "save_progress",
    "submit_audit",
    "audit_screen",
]
