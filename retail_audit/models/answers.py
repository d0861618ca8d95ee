"""Answer value tagged union.

Response maps travel as plain JSON values (string, number, list of strings,
or a file reference object). The engine parses each raw value into exactly
one of the answer classes below so the condition evaluator can branch on the
answer kind instead of coercing ad hoc.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Optional, Union


@dataclass(frozen=True)
class TextAnswer:
    value: str


@dataclass(frozen=True)
class NumberAnswer:
    value: float


@dataclass(frozen=True)
class ChoiceListAnswer:
    values: tuple[str, ...]


@dataclass(frozen=True)
class FileAnswer:
    uri: str


Answer = Union[TextAnswer, NumberAnswer, ChoiceListAnswer, FileAnswer]


def is_absent(raw: Any) -> bool:
    """Return True when a raw response counts as unanswered.

    Missing, null, empty string and an empty selection list are all absent.
    """
    if raw is None:
        return True
    if isinstance(raw, str) and raw == "":
        return True
    if isinstance(raw, (list, tuple)) and len(raw) == 0:
        return True
    return False


def parse_answer(raw: Any) -> Optional[Answer]:
    """Parse a raw response value into an Answer, or None when absent."""
    if is_absent(raw):
        return None
    if isinstance(raw, bool):
        return TextAnswer("true" if raw else "false")
    if isinstance(raw, (int, float)):
        return NumberAnswer(float(raw))
    if isinstance(raw, str):
        return TextAnswer(raw)
    if isinstance(raw, (list, tuple)):
        return ChoiceListAnswer(tuple(str(item) for item in raw))
    if isinstance(raw, dict):
        uri = raw.get("uri") or raw.get("url")
        if uri:
            return FileAnswer(str(uri))
    return TextAnswer(str(raw))


def number_text(value: float) -> str:
    """Render a number the way it is displayed: integral values without '.0'."""
    if math.isfinite(value) and float(int(value)) == value:
        return str(int(value))
    return str(value)


def answer_text(answer: Answer) -> str:
    if isinstance(answer, TextAnswer):
        return answer.value
    if isinstance(answer, NumberAnswer):
        return number_text(answer.value)
    if isinstance(answer, ChoiceListAnswer):
        return ",".join(answer.values)
    return answer.uri


def answer_number(answer: Answer) -> Optional[float]:
    """Numeric view of an answer; None when it cannot take part in a comparison."""
    if isinstance(answer, NumberAnswer):
        return answer.value if not math.isnan(answer.value) else None
    if isinstance(answer, TextAnswer):
        return parse_number(answer.value)
    return None


def parse_number(raw: Any) -> Optional[float]:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        value = float(raw)
    elif isinstance(raw, str):
        try:
            value = float(raw.strip())
        except ValueError:
            return None
    else:
        return None
    if math.isnan(value):
        return None
    return value


__all__ = [
    "Answer",
    "TextAnswer",
    "NumberAnswer",
    "ChoiceListAnswer",
    "FileAnswer",
    "is_absent",
    "parse_answer",
    "answer_text",
    "answer_number",
    "number_text",
    "parse_number",
]
