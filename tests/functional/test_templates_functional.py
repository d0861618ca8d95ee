"""Template authoring: drafts, publishing, versions and the logic preview."""

from __future__ import annotations

import pytest

from retail_audit.logic.errors import (
    InvalidTemplateError,
    NotFoundError,
    RuleCycleError,
    TemplatePublishedError,
)
from retail_audit.logic.presets import preset_questions
from retail_audit.logic.templates import (
    create_category,
    create_new_version,
    create_template,
    delete_template,
    get_template,
    list_categories,
    list_templates,
    preview_logic,
    publish_template,
    update_template,
)


def _draft(storage, **overrides):
    payload = {
        "name": "Pricing Check",
        "category_id": "cat-5",
        "sections": [
            {"section_id": "pricing", "title": "Pricing", "order_index": 1, "questions": preset_questions("pricing_compliance")}
        ],
    }
    payload.update(overrides)
    return create_template(storage, payload, "author-1")


def test_create_template_starts_as_unpublished_version_one(storage):
    template = _draft(storage)
    assert template.template_id
    assert template.version == 1
    assert template.is_published is False
    assert template.created_by == "author-1"
    assert get_template(storage, template.template_id).name == "Pricing Check"


def test_duplicate_question_ids_are_rejected(storage):
    sections = [
        {"section_id": "a", "title": "A", "order_index": 1, "questions": [{"question_id": "q", "text": "q", "type": "text"}]},
        {"section_id": "b", "title": "B", "order_index": 2, "questions": [{"question_id": "q", "text": "q", "type": "text"}]},
    ]
    with pytest.raises(InvalidTemplateError):
        _draft(storage, sections=sections)


def test_update_draft_then_publish_locks_it(storage):
    template = _draft(storage)
    updated = update_template(storage, template.template_id, {"name": "Pricing Check v1"})
    assert updated.name == "Pricing Check v1"

    result = publish_template(storage, template.template_id)
    assert result["template"].is_published is True
    assert result["template"].published_at
    assert result["warnings"] == []

    with pytest.raises(TemplatePublishedError):
        update_template(storage, template.template_id, {"name": "Changed"})


def test_update_rejects_unknown_fields(storage):
    template = _draft(storage)
    with pytest.raises(InvalidTemplateError):
        update_template(storage, template.template_id, {"is_published": True})


def test_publish_rejects_rule_cycles(storage):
    sections = [
        {
            "section_id": "s",
            "title": "S",
            "order_index": 1,
            "questions": [
                {
                    "question_id": "q1",
                    "text": "q1",
                    "type": "text",
                    "is_conditional": True,
                    "conditional_rules": [
                        {
                            "id": "r1",
                            "source_question_id": "q2",
                            "condition": {"operator": "equals", "value": "x"},
                            "action": {"type": "show_question", "target_question_id": "q1"},
                        }
                    ],
                },
                {
                    "question_id": "q2",
                    "text": "q2",
                    "type": "text",
                    "is_conditional": True,
                    "conditional_rules": [
                        {
                            "id": "r2",
                            "source_question_id": "q1",
                            "condition": {"operator": "equals", "value": "y"},
                            "action": {"type": "show_question", "target_question_id": "q2"},
                        }
                    ],
                },
            ],
        }
    ]
    template = _draft(storage, sections=sections)
    with pytest.raises(RuleCycleError) as excinfo:
        publish_template(storage, template.template_id)
    assert excinfo.value.cycles == [["q1", "q2", "q1"]]
    assert get_template(storage, template.template_id).is_published is False


def test_new_version_copies_sections_unpublished(storage):
    source = get_template(storage, "demo-2")
    copy = create_new_version(storage, "demo-2", "author-2")
    assert copy.template_id != "demo-2"
    assert copy.version == source.version + 1
    assert copy.is_published is False
    assert copy.published_at is None
    assert [s.section_id for s in copy.sections] == [s.section_id for s in source.sections]


def test_soft_delete_hides_template_from_lists(storage):
    template = _draft(storage)
    delete_template(storage, template.template_id)
    assert template.template_id not in [t.template_id for t in list_templates(storage)]
    with pytest.raises(NotFoundError):
        get_template(storage, template.template_id)
    assert get_template(storage, template.template_id, include_inactive=True).is_active is False


def test_list_templates_filters_by_published_and_category(storage):
    _draft(storage)
    published = list_templates(storage, published=True)
    assert {t.template_id for t in published} == {"demo-1", "demo-2"}
    assert [t.name for t in list_templates(storage, category_id="cat-5")] == ["Pricing Check"]


def test_preview_reports_visible_sections_without_persisting(storage):
    template = get_template(storage, "demo-2")
    preview = preview_logic(template, {"correct_mrp": "No - Higher"})
    pricing = next(s for s in preview["sections"] if s["section_id"] == "pricing")
    assert pricing["visible_question_ids"] == ["correct_mrp", "actual_selling_price"]
    assert preview["progress"]["pricing"] == {"answered": 1, "visible": 2}
    assert get_template(storage, "demo-2").model_dump() == template.model_dump()


def test_categories_are_listed_by_sort_order(storage):
    created = create_category(storage, {"name": "Store Hygiene"})
    assert created.sort_order == 7
    names = [c.name for c in list_categories(storage)]
    assert names[0] == "Merchandising"
    assert names[-1] == "Store Hygiene"
