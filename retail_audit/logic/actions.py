"""Rule-triggered actions.

Visibility is derived by the resolver, so show/hide actions are no-ops here.
This module handles the two action types with an effect the resolver cannot
produce: ``set_value`` (writes a response) and ``skip_to_section`` (emits a
navigation intent for the caller).

Rules whose target no longer exists in the template are skipped and logged;
one inconsistent rule never blocks the rest of the pass.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, List, Mapping, Optional

from retail_audit.logic.conditions import evaluate
from retail_audit.models.template import ActionType, ConditionalRule, Template

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SkipToSection:
    rule_id: str
    section_id: str


@dataclass
class ActionOutcome:
    responses: Dict[str, Any]
    applied: bool = False
    intent: Optional[SkipToSection] = None


@dataclass
class ResponseChangeOutcome:
    responses: Dict[str, Any]
    applied_rule_ids: List[str] = field(default_factory=list)
    intents: List[SkipToSection] = field(default_factory=list)


def apply_action(
    rule: ConditionalRule,
    responses: Mapping[str, Any],
    template: Optional[Template] = None,
) -> ActionOutcome:
    """Apply ``rule``'s action against ``responses``.

    Returns a new response map; the input is never mutated. When a template
    is given, targets are checked against it and missing ones are skipped.
    """
    current = dict(responses or {})
    action = rule.action

    if action.type in (ActionType.SHOW_QUESTION, ActionType.HIDE_QUESTION):
        return ActionOutcome(current)

    if not evaluate(rule.condition, current.get(rule.source_question_id)):
        return ActionOutcome(current)

    if action.type == ActionType.SET_VALUE:
        target = action.target_question_id
        if not target or action.value is None:
            logger.info("rule_action_incomplete rule_id=%s type=%s", rule.id, action.type)
            return ActionOutcome(current)
        if template is not None and not template.has_question(target):
            logger.warning("rule_target_missing rule_id=%s target_question_id=%s", rule.id, target)
            return ActionOutcome(current)
        current[target] = action.value
        return ActionOutcome(current, applied=True)

    if action.type == ActionType.SKIP_TO_SECTION:
        target = action.target_section_id
        if not target:
            logger.info("rule_action_incomplete rule_id=%s type=%s", rule.id, action.type)
            return ActionOutcome(current)
        if template is not None and not template.has_section(target):
            logger.warning("rule_target_missing rule_id=%s target_section_id=%s", rule.id, target)
            return ActionOutcome(current)
        return ActionOutcome(current, applied=True, intent=SkipToSection(rule.id, target))

    return ActionOutcome(current)


def index_rules_by_source(template: Template) -> Dict[str, List[ConditionalRule]]:
    """Group every rule in the template by its source question id."""
    index: Dict[str, List[ConditionalRule]] = {}
    for question in template.iter_questions():
        for rule in question.conditional_rules:
            index.setdefault(rule.source_question_id, []).append(rule)
    return index


def process_response_change(
    template: Template,
    responses: Mapping[str, Any],
    question_id: str,
) -> ResponseChangeOutcome:
    """Run every rule sourced at ``question_id`` after its answer changed.

    A set_value write re-queues the rules sourced at the written question.
    Each rule fires at most once per pass.
    """
    index = index_rules_by_source(template)
    outcome = ResponseChangeOutcome(responses=dict(responses or {}))
    # Keyed on the rule object: authored rule ids are not guaranteed unique
    fired: set[int] = set()
    pending: Deque[str] = deque([question_id])

    while pending:
        source = pending.popleft()
        for rule in index.get(source, []):
            if id(rule) in fired:
                continue
            fired.add(id(rule))
            result = apply_action(rule, outcome.responses, template)
            outcome.responses = result.responses
            if not result.applied:
                continue
            outcome.applied_rule_ids.append(rule.id)
            if result.intent is not None:
                outcome.intents.append(result.intent)
            if rule.action.type == ActionType.SET_VALUE and rule.action.target_question_id:
                pending.append(rule.action.target_question_id)

    if outcome.applied_rule_ids:
        logger.info(
            "rule_actions_applied question_id=%s rules=%s intents=%s",
            question_id,
            outcome.applied_rule_ids,
            [i.section_id for i in outcome.intents],
        )
    return outcome


__all__ = [
    "SkipToSection",
    "ActionOutcome",
    "ResponseChangeOutcome",
    "apply_action",
    "index_rules_by_source",
    "process_response_change",
]
