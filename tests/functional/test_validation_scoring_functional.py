"""Submission validation and audit scoring over the retail execution template."""

from __future__ import annotations

import pytest

from retail_audit.logic.scoring import score_audit
from retail_audit.logic.validation import (
    ABOVE_MAXIMUM,
    BELOW_MINIMUM,
    INVALID_OPTION,
    MISSING_REQUIRED_ANSWER,
    NOT_A_NUMBER,
    validate_answer,
    validate_submission,
)
from retail_audit.models.template import Question, Template

COMPLIANT = {
    "product_available": "Yes",
    "stock_quantity": 20,
    "shelf_placement": "Eye Level",
    "competitor_products": ["None"],
    "correct_mrp": "Yes",
}


def test_compliant_responses_have_no_blocking_items(execution_template):
    assert validate_submission(execution_template, COMPLIANT) == []


def test_visible_mandatory_follow_up_blocks_submission(execution_template):
    responses = dict(COMPLIANT, product_available="No")
    assert validate_submission(execution_template, responses) == [
        {"question_id": "unavailable_reason", "reason": MISSING_REQUIRED_ANSWER}
    ]


def test_hidden_mandatory_questions_do_not_block(execution_template):
    responses = dict(COMPLIANT, unavailable_reason="")
    assert validate_submission(execution_template, responses) == []


def test_optional_visible_question_does_not_block(execution_template):
    responses = dict(COMPLIANT, competitor_products=["Brand A"], competitor_promotion="No")
    assert validate_submission(execution_template, responses) == []


@pytest.mark.parametrize(
    "raw, reason",
    [("abc", NOT_A_NUMBER), (-1, BELOW_MINIMUM), (101, ABOVE_MAXIMUM), ("42", None), (None, MISSING_REQUIRED_ANSWER)],
)
def test_numeric_answer_bounds(raw, reason):
    question = Question.model_validate(
        {
            "question_id": "facings",
            "text": "Facings",
            "type": "numeric",
            "validation": {"mandatory": True, "min_value": 0, "max_value": 100},
        }
    )
    assert validate_answer(question, raw) == reason


def test_choice_answers_must_come_from_options():
    single = Question(question_id="s", text="s", type="single_choice", options=["Yes", "No"])
    multi = Question(question_id="m", text="m", type="multiple_choice", options=["A", "B"])
    assert validate_answer(single, "Maybe") == INVALID_OPTION
    assert validate_answer(single, "Yes") is None
    assert validate_answer(multi, ["A", "C"]) == INVALID_OPTION
    assert validate_answer(multi, ["A", "B"]) is None
    assert validate_answer(multi, "A") == INVALID_OPTION


def test_full_compliance_scores_100_and_passes(execution_template):
    result = score_audit(execution_template, COMPLIANT)
    assert result.score == 100
    assert result.passed is True
    assert result.critical_failures == []


def test_weighted_score_uses_section_weights(execution_template):
    responses = dict(COMPLIANT, competitor_products=["Brand A"])
    result = score_audit(execution_template, responses)
    # competition: 1 of 3 visible answered; weights availability 2, placement 1, competition 1, pricing 2
    assert result.section_scores["competition"] == pytest.approx(33.33, abs=0.01)
    assert result.score == 89
    assert result.completion == pytest.approx(71.43, abs=0.01)
    assert result.passed is True


def test_unanswered_critical_question_fails_audit(execution_template):
    responses = {k: v for k, v in COMPLIANT.items() if k != "correct_mrp"}
    result = score_audit(execution_template, responses)
    assert result.critical_failures == ["correct_mrp"]
    assert result.passed is False


def test_without_weights_score_is_completion_ratio():
    template = Template.model_validate(
        {
            "template_id": "t",
            "name": "Plain",
            "sections": [
                {
                    "section_id": "s1",
                    "title": "S",
                    "order_index": 1,
                    "questions": [
                        {"question_id": "a", "text": "a", "type": "text"},
                        {"question_id": "b", "text": "b", "type": "text"},
                        {"question_id": "c", "text": "c", "type": "text"},
                    ],
                }
            ],
            "scoring_rules": {"threshold": 60},
        }
    )
    result = score_audit(template, {"a": "x", "b": "y"})
    assert result.score == 67
    assert result.passed is True
    assert score_audit(template, {"a": "x"}).passed is False
