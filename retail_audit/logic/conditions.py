"""Condition evaluation for conditional rules.

A condition compares the current answer to a rule's source question against
an expected value. Evaluation is pure and total: unanswered sources and
values that cannot take part in a comparison yield False, never an error.
"""

from __future__ import annotations

from typing import Any, Callable, Dict

from retail_audit.models.answers import (
    Answer,
    ChoiceListAnswer,
    FileAnswer,
    NumberAnswer,
    TextAnswer,
    answer_number,
    answer_text,
    number_text,
    parse_answer,
    parse_number,
)
from retail_audit.models.template import Condition, Operator


def _strict_equals(answer: Answer, expected: Any) -> bool:
    if isinstance(answer, TextAnswer):
        return isinstance(expected, str) and answer.value == expected
    if isinstance(answer, NumberAnswer):
        return (
            isinstance(expected, (int, float))
            and not isinstance(expected, bool)
            and answer.value == float(expected)
        )
    if isinstance(answer, ChoiceListAnswer):
        return isinstance(expected, (list, tuple)) and answer.values == tuple(expected)
    if isinstance(answer, FileAnswer):
        if isinstance(expected, dict):
            expected = expected.get("uri") or expected.get("url")
        return isinstance(expected, str) and answer.uri == expected
    return False


def _expected_text(expected: Any) -> str:
    if isinstance(expected, bool):
        return "true" if expected else "false"
    if isinstance(expected, (int, float)):
        return number_text(float(expected))
    return str(expected)


def _contains(answer: Answer, expected: Any) -> bool:
    if expected is None:
        return False
    if isinstance(answer, ChoiceListAnswer):
        return expected in answer.values
    return _expected_text(expected) in answer_text(answer)


_NUMERIC: Dict[str, Callable[[float, float], bool]] = {
    Operator.LESS_THAN: lambda a, b: a < b,
    Operator.LESS_THAN_OR_EQUAL: lambda a, b: a <= b,
    Operator.GREATER_THAN: lambda a, b: a > b,
    Operator.GREATER_THAN_OR_EQUAL: lambda a, b: a >= b,
}


def evaluate(condition: Condition, actual_value: Any) -> bool:
    """Return True when ``actual_value`` satisfies ``condition``.

    - Absent answers (missing, None, "", empty list) never satisfy a condition.
      An empty selection list counts as unanswered, so not_contains is False
      for it too.
    - equals / not_equals compare without cross-type coercion.
    - Ordering operators coerce both sides to numbers; non-numeric input is False.
    - contains / not_contains test list membership for multi-select answers and
      substring containment on the text form otherwise.
    """
    answer = parse_answer(actual_value)
    if answer is None:
        return False

    operator = condition.operator
    expected = condition.value

    if operator == Operator.EQUALS:
        return _strict_equals(answer, expected)
    if operator == Operator.NOT_EQUALS:
        return not _strict_equals(answer, expected)

    compare = _NUMERIC.get(operator)
    if compare is not None:
        left = answer_number(answer)
        right = parse_number(expected)
        if left is None or right is None:
            return False
        return compare(left, right)

    if operator == Operator.CONTAINS:
        return _contains(answer, expected)
    if operator == Operator.NOT_CONTAINS:
        return not _contains(answer, expected)
    return False


__all__ = ["evaluate"]
