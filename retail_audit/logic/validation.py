"""Submission validation over the currently visible questions.

Produces blocking items with the shape ``{"question_id", "reason"}``; an
empty list means the audit may be submitted. Hidden questions never block.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

from retail_audit.models.answers import is_absent, parse_number
from retail_audit.models.template import Question, QuestionType, Template
from retail_audit.logic.visibility import visible_questions

logger = logging.getLogger(__name__)

MISSING_REQUIRED_ANSWER = "missing_required_answer"
NOT_A_NUMBER = "not_a_number"
BELOW_MINIMUM = "below_minimum"
ABOVE_MAXIMUM = "above_maximum"
INVALID_OPTION = "invalid_option"

_SINGLE_OPTION_TYPES = {QuestionType.SINGLE_CHOICE, QuestionType.DROPDOWN}


def validate_answer(question: Question, raw: Any) -> Optional[str]:
    """Return the blocking reason for one answer, or None when acceptable."""
    if is_absent(raw):
        return MISSING_REQUIRED_ANSWER if question.validation.mandatory else None

    if question.type == QuestionType.NUMERIC:
        number = parse_number(raw)
        if number is None:
            return NOT_A_NUMBER
        if question.validation.min_value is not None and number < question.validation.min_value:
            return BELOW_MINIMUM
        if question.validation.max_value is not None and number > question.validation.max_value:
            return ABOVE_MAXIMUM
        return None

    if question.options and question.type in _SINGLE_OPTION_TYPES:
        return None if isinstance(raw, str) and raw in question.options else INVALID_OPTION

    if question.options and question.type == QuestionType.MULTIPLE_CHOICE:
        if not isinstance(raw, (list, tuple)):
            return INVALID_OPTION
        return None if all(item in question.options for item in raw) else INVALID_OPTION

    return None


def validate_submission(template: Template, responses: Optional[Mapping[str, Any]]) -> List[Dict[str, str]]:
    answers = responses or {}
    items: List[Dict[str, str]] = []
    for question in visible_questions(template.iter_questions(), answers):
        reason = validate_answer(question, answers.get(question.question_id))
        if reason is not None:
            items.append({"question_id": question.question_id, "reason": reason})
    logger.info(
        "submission_validation template_id=%s blocking=%s",
        template.template_id,
        [i["question_id"] for i in items],
    )
    return items


__all__ = [
    "MISSING_REQUIRED_ANSWER",
    "NOT_A_NUMBER",
    "BELOW_MINIMUM",
    "ABOVE_MAXIMUM",
    "INVALID_OPTION",
    "validate_answer",
    "validate_submission",
]
