"""Visibility resolution, the visibility delta and the preset scenarios."""

from __future__ import annotations

from retail_audit.logic.visibility import (
    compute_visibility_delta,
    is_question_visible,
    section_progress,
    visible_question_ids,
    visible_sections,
)
from retail_audit.models.template import Question


def _conditional(question_id: str, *rules: dict) -> Question:
    return Question.model_validate(
        {
            "question_id": question_id,
            "text": question_id,
            "type": "text",
            "is_conditional": True,
            "conditional_rules": list(rules),
        }
    )


def _rule(rule_id: str, source: str, operator: str, value) -> dict:
    return {
        "id": rule_id,
        "source_question_id": source,
        "condition": {"operator": operator, "value": value},
        "action": {"type": "show_question"},
    }


def test_non_conditional_questions_are_always_visible():
    q = Question(question_id="q1", text="Store open?", type="single_choice", options=["Yes", "No"])
    assert is_question_visible(q, {}) is True
    assert is_question_visible(q, None) is True


def test_conditional_question_hidden_while_sources_unanswered():
    q = _conditional("q2", _rule("r1", "q1", "equals", "No"))
    assert is_question_visible(q, {}) is False
    assert is_question_visible(q, {"q1": ""}) is False
    assert is_question_visible(q, {"q1": None}) is False


def test_conditional_question_without_rules_stays_hidden():
    assert is_question_visible(_conditional("q2"), {"q1": "anything"}) is False


def test_any_satisfied_rule_shows_the_question():
    q = _conditional(
        "follow_up",
        _rule("r1", "a", "equals", "No"),
        _rule("r2", "b", "less_than", 3),
    )
    assert is_question_visible(q, {"a": "Yes", "b": 10}) is False
    assert is_question_visible(q, {"a": "No", "b": 10}) is True
    assert is_question_visible(q, {"a": "Yes", "b": 1}) is True


def test_camel_case_payloads_are_accepted():
    q = Question.model_validate(
        {
            "questionId": "q2",
            "text": "Why?",
            "type": "text",
            "isConditional": True,
            "conditionalRules": [
                {
                    "id": "r1",
                    "sourceQuestionId": "q1",
                    "condition": {"operator": "equals", "value": "No"},
                    "action": {"type": "show_question", "targetQuestionId": "q2"},
                }
            ],
        }
    )
    assert is_question_visible(q, {"q1": "No"}) is True


def test_product_availability_scenario(execution_template):
    responses = {}
    assert "unavailable_reason" not in visible_question_ids(execution_template, responses)

    responses["product_available"] = "No"
    assert "unavailable_reason" in visible_question_ids(execution_template, responses)

    responses["product_available"] = "Yes"
    assert "unavailable_reason" not in visible_question_ids(execution_template, responses)


def test_stock_quantity_scenario(execution_template):
    assert "informed_staff_replenish" in visible_question_ids(execution_template, {"stock_quantity": 3})
    assert "informed_staff_replenish" in visible_question_ids(execution_template, {"stock_quantity": 5})
    assert "informed_staff_replenish" not in visible_question_ids(execution_template, {"stock_quantity": 6})
    assert "informed_staff_replenish" not in visible_question_ids(execution_template, {"stock_quantity": 12})
    assert "informed_staff_replenish" not in visible_question_ids(execution_template, {"stock_quantity": ""})
    assert "informed_staff_replenish" not in visible_question_ids(execution_template, {"stock_quantity": "lots"})


def test_competitor_follow_ups_shown_unless_none_selected(execution_template):
    shown = visible_question_ids(execution_template, {"competitor_products": ["Brand A", "Brand B"]})
    assert {"competitor_promotion", "competitor_prices"} <= set(shown)
    hidden = visible_question_ids(execution_template, {"competitor_products": ["None"]})
    assert "competitor_promotion" not in hidden


def test_visible_sections_keep_section_and_question_order(execution_template):
    pairs = visible_sections(execution_template, {"product_available": "No"})
    assert [s.section_id for s, _ in pairs] == ["availability", "placement", "competition", "pricing"]
    availability = [q.question_id for q in pairs[0][1]]
    assert availability == ["product_available", "unavailable_reason", "stock_quantity"]


def test_visibility_delta_reports_suppressed_answers():
    answered = {"c"}
    now_visible, now_hidden, suppressed = compute_visibility_delta(
        ["a", "b", "c"], ["a", "d"], lambda qid: qid in answered
    )
    assert now_visible == ["d"]
    assert now_hidden == ["b", "c"]
    assert suppressed == ["c"]


def test_section_progress_counts_visible_questions_only(execution_template):
    progress = section_progress(execution_template, {"product_available": "No", "stock_quantity": 20})
    assert progress["availability"] == {"answered": 2, "visible": 3}
    assert progress["pricing"] == {"answered": 0, "visible": 1}
