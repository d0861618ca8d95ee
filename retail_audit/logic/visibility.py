"""Visibility resolution for conditional questions.

Centralizes the visible-set computation used by audit execution, the
template logic preview and scoring so every consumer agrees on which
questions are currently in play.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from retail_audit.logic.conditions import evaluate
from retail_audit.models.answers import is_absent
from retail_audit.models.template import Question, Section, Template


def is_question_visible(question: Question, responses: Optional[Mapping[str, Any]]) -> bool:
    """Return True if the question should currently be displayed.

    Non-conditional questions are always visible. A conditional question is
    visible when at least one of its rules is satisfied by the answer to that
    rule's source question; with no rules it stays hidden.
    """
    if not question.is_conditional:
        return True
    answers = responses or {}
    return any(
        evaluate(rule.condition, answers.get(rule.source_question_id))
        for rule in question.conditional_rules
    )


def visible_questions(
    all_questions: Iterable[Question],
    responses: Optional[Mapping[str, Any]],
) -> List[Question]:
    """Return the visible subset of ``all_questions`` in their original order."""
    return [q for q in all_questions if is_question_visible(q, responses)]


def visible_question_ids(template: Template, responses: Optional[Mapping[str, Any]]) -> List[str]:
    return [q.question_id for q in visible_questions(template.iter_questions(), responses)]


def visible_sections(
    template: Template,
    responses: Optional[Mapping[str, Any]],
) -> List[Tuple[Section, List[Question]]]:
    """Pair each section (in order_index order) with its visible questions."""
    return [
        (section, visible_questions(section.questions, responses))
        for section in template.ordered_sections()
    ]


def compute_visibility_delta(
    pre_visible: Iterable[str],
    post_visible: Iterable[str],
    has_answer: Callable[[str], bool],
) -> Tuple[List[str], List[str], List[str]]:
    """Compute visibility delta and suppressed answers.

    - now_visible: questions newly visible (in post but not in pre)
    - now_hidden: questions newly hidden (in pre but not in post)
    - suppressed_answers: subset of now_hidden that still hold an answer

    Both lists keep the order of the inputs so callers can present them in
    traversal order.
    """
    pre_list = [str(qid) for qid in pre_visible if qid]
    post_list = [str(qid) for qid in post_visible if qid]
    pre_set = set(pre_list)
    post_set = set(post_list)

    now_visible = [qid for qid in post_list if qid not in pre_set]
    now_hidden = [qid for qid in pre_list if qid not in post_set]
    suppressed_answers = [qid for qid in now_hidden if has_answer(qid)]
    return now_visible, now_hidden, suppressed_answers


def section_progress(
    template: Template,
    responses: Optional[Mapping[str, Any]],
) -> Dict[str, Dict[str, int]]:
    """Answered/visible counts per section, keyed by section_id."""
    answers = responses or {}
    progress: Dict[str, Dict[str, int]] = {}
    for section, questions in visible_sections(template, answers):
        answered = sum(1 for q in questions if not is_absent(answers.get(q.question_id)))
        progress[section.section_id] = {"answered": answered, "visible": len(questions)}
    return progress


__all__ = [
    "is_question_visible",
    "visible_questions",
    "visible_question_ids",
    "visible_sections",
    "compute_visibility_delta",
    "section_progress",
]
