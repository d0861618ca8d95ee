"""Audit scoring.

Only visible questions count. Without configured section weights the score
is the completion ratio (answered / visible x 100). With weights it is the
weighted mean of per-section completion ratios; sections absent from the
weights map get weight 1. A visible, unanswered critical question fails the
audit regardless of score; otherwise the audit passes at ``threshold``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from retail_audit.logic.visibility import visible_sections
from retail_audit.models.answers import is_absent
from retail_audit.models.template import Template


@dataclass
class ScoreResult:
    score: int
    passed: bool
    completion: float
    section_scores: Dict[str, float] = field(default_factory=dict)
    critical_failures: List[str] = field(default_factory=list)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def score_audit(template: Template, responses: Optional[Mapping[str, Any]]) -> ScoreResult:
    answers = responses or {}
    rules = template.scoring_rules
    critical = set(rules.critical_questions)

    answered_total = 0
    visible_total = 0
    section_scores: Dict[str, float] = {}
    critical_failures: List[str] = []
    weighted_sum = 0.0
    weight_total = 0.0

    for section, questions in visible_sections(template, answers):
        if not questions:
            continue
        answered = 0
        for question in questions:
            if is_absent(answers.get(question.question_id)):
                if question.question_id in critical:
                    critical_failures.append(question.question_id)
            else:
                answered += 1
        ratio = answered / len(questions) * 100
        section_scores[section.section_id] = round(ratio, 2)
        answered_total += answered
        visible_total += len(questions)
        weight = rules.weights.get(section.section_id, 1.0)
        weighted_sum += ratio * weight
        weight_total += weight

    completion = answered_total / visible_total * 100 if visible_total else 0.0
    if rules.weights:
        raw_score = weighted_sum / weight_total if weight_total else 0.0
    else:
        raw_score = completion

    score = _round_half_up(raw_score)
    passed = not critical_failures and score >= rules.threshold
    return ScoreResult(
        score=score,
        passed=passed,
        completion=round(completion, 2),
        section_scores=section_scores,
        critical_failures=critical_failures,
    )


__all__ = ["ScoreResult", "score_audit"]
