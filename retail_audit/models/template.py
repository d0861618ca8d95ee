"""Pydantic models for audit templates and their conditional rules.

Field names are snake_case. The camelCase names used by the dashboard and
mobile clients (``sourceQuestionId``, ``conditionalRules`` ...) are accepted
as aliases on input.
"""

from __future__ import annotations

from typing import Any, Dict, Iterator, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class QuestionType:
    TEXT = "text"
    NUMERIC = "numeric"
    SINGLE_CHOICE = "single_choice"
    MULTIPLE_CHOICE = "multiple_choice"
    DROPDOWN = "dropdown"
    DATE = "date"
    FILE_UPLOAD = "file_upload"
    BARCODE = "barcode"


class Operator:
    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    LESS_THAN = "less_than"
    LESS_THAN_OR_EQUAL = "less_than_or_equal"
    GREATER_THAN = "greater_than"
    GREATER_THAN_OR_EQUAL = "greater_than_or_equal"
    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"


class ActionType:
    SHOW_QUESTION = "show_question"
    HIDE_QUESTION = "hide_question"
    SKIP_TO_SECTION = "skip_to_section"
    SET_VALUE = "set_value"


QuestionTypeName = Literal[
    "text",
    "numeric",
    "single_choice",
    "multiple_choice",
    "dropdown",
    "date",
    "file_upload",
    "barcode",
]
OperatorName = Literal[
    "equals",
    "not_equals",
    "less_than",
    "less_than_or_equal",
    "greater_than",
    "greater_than_or_equal",
    "contains",
    "not_contains",
]
ActionTypeName = Literal["show_question", "hide_question", "skip_to_section", "set_value"]

# Raw value shapes a condition or set_value action may carry
RuleValue = Union[int, float, str, List[str], Dict[str, Any]]


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)


class Condition(CamelModel):
    operator: OperatorName
    value: Optional[RuleValue] = None


class RuleAction(CamelModel):
    type: ActionTypeName
    target_question_id: Optional[str] = None
    target_section_id: Optional[str] = None
    value: Optional[RuleValue] = None


class ConditionalRule(CamelModel):
    id: str
    source_question_id: str
    condition: Condition
    action: RuleAction


class QuestionValidation(CamelModel):
    mandatory: bool = False
    min_value: Optional[float] = None
    max_value: Optional[float] = None

    @model_validator(mode="after")
    def _bounds_ordered(self) -> "QuestionValidation":
        if self.min_value is not None and self.max_value is not None and self.min_value > self.max_value:
            raise ValueError("validation.min_value must not exceed validation.max_value")
        return self


class Question(CamelModel):
    question_id: str
    text: str
    type: QuestionTypeName
    options: List[str] = Field(default_factory=list)
    validation: QuestionValidation = Field(default_factory=QuestionValidation)
    is_conditional: bool = False
    conditional_rules: List[ConditionalRule] = Field(default_factory=list)
    parent_question_id: Optional[str] = None
    order_index: int = 0


class Section(CamelModel):
    section_id: str
    title: str
    description: str = ""
    order_index: int = 0
    questions: List[Question] = Field(default_factory=list)


class ScoringRules(CamelModel):
    weights: Dict[str, float] = Field(default_factory=dict)
    threshold: float = Field(default=0, ge=0, le=100)
    critical_questions: List[str] = Field(default_factory=list)

    @field_validator("weights")
    @classmethod
    def weights_non_negative(cls, v: Dict[str, float]) -> Dict[str, float]:
        for section_id, weight in v.items():
            if weight < 0:
                raise ValueError(f"scoring_rules.weights[{section_id}] must be non-negative")
        return v


class TemplateCategory(CamelModel):
    category_id: str
    name: str
    description: str = ""
    icon: str = "folder"
    color: str = "#3B82F6"
    sort_order: int = 0
    is_active: bool = True
    created_at: Optional[str] = None


class Template(CamelModel):
    template_id: str
    name: str
    description: str = ""
    category_id: Optional[str] = None
    version: int = 1
    sections: List[Section] = Field(default_factory=list)
    scoring_rules: ScoringRules = Field(default_factory=ScoringRules)
    is_published: bool = False
    is_active: bool = True
    created_by: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    published_at: Optional[str] = None

    @model_validator(mode="after")
    def _unique_identities(self) -> "Template":
        seen_orders: set[int] = set()
        for section in self.sections:
            if section.order_index in seen_orders:
                raise ValueError(f"duplicate section order_index {section.order_index}")
            seen_orders.add(section.order_index)
        seen_questions: set[str] = set()
        for question in self.iter_questions():
            if question.question_id in seen_questions:
                raise ValueError(f"duplicate question_id {question.question_id}")
            seen_questions.add(question.question_id)
        return self

    def ordered_sections(self) -> List[Section]:
        return sorted(self.sections, key=lambda s: s.order_index)

    def iter_questions(self) -> Iterator[Question]:
        """Yield every question in traversal order (sections by order_index)."""
        for section in self.ordered_sections():
            yield from section.questions

    def all_questions(self) -> List[Question]:
        return list(self.iter_questions())

    def find_question(self, question_id: str) -> Optional[Question]:
        for question in self.iter_questions():
            if question.question_id == question_id:
                return question
        return None

    def has_question(self, question_id: Optional[str]) -> bool:
        return question_id is not None and self.find_question(question_id) is not None

    def has_section(self, section_id: Optional[str]) -> bool:
        return section_id is not None and any(s.section_id == section_id for s in self.sections)


__all__ = [
    "CamelModel",
    "QuestionType",
    "Operator",
    "ActionType",
    "Condition",
    "RuleAction",
    "ConditionalRule",
    "QuestionValidation",
    "Question",
    "Section",
    "ScoringRules",
    "TemplateCategory",
    "Template",
]
