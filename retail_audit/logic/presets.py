"""Retail conditional-logic presets and demo-mode seed data.

The presets are the ready-made source/follow-up question pairs offered to
template authors. The demo seed fills an in-memory store so the service is
usable without backend credentials.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List

if TYPE_CHECKING:
    from retail_audit.storage.base import Storage

DEMO_USER_ID = "demo-user"


def _follow_up(question_id: str, text: str, qtype: str, source: str, operator: str, value: Any, **extra: Any) -> Dict[str, Any]:
    question = {
        "question_id": question_id,
        "text": text,
        "type": qtype,
        "validation": {"mandatory": True},
        "is_conditional": True,
        "parent_question_id": source,
        "conditional_rules": [
            {
                "id": f"show_{question_id}",
                "source_question_id": source,
                "condition": {"operator": operator, "value": value},
                "action": {"type": "show_question", "target_question_id": question_id},
            }
        ],
    }
    question.update(extra)
    return question


RETAIL_CONDITIONAL_PRESETS: Dict[str, Dict[str, Any]] = {
    "product_availability": {
        "source_question": {
            "question_id": "product_available",
            "text": "Is our product available on the shelf?",
            "type": "single_choice",
            "options": ["Yes", "No"],
            "validation": {"mandatory": True},
        },
        "conditional_questions": [
            _follow_up(
                "unavailable_reason",
                "Why is the product unavailable?",
                "single_choice",
                "product_available",
                "equals",
                "No",
                options=["No stock", "Not ordered", "Delisted", "Other"],
            )
        ],
    },
    "shelf_placement": {
        "source_question": {
            "question_id": "shelf_placement",
            "text": "Is the product placed at eye level or in a prime location?",
            "type": "single_choice",
            "options": ["Eye Level", "Mid-shelf", "Bottom Shelf"],
            "validation": {"mandatory": True},
        },
        "conditional_questions": [
            _follow_up(
                "can_move_shelf",
                "Can the product be moved to a better shelf?",
                "single_choice",
                "shelf_placement",
                "equals",
                "Bottom Shelf",
                options=["Yes", "No", "Need permission"],
            )
        ],
    },
    "stock_quantity": {
        "source_question": {
            "question_id": "stock_quantity",
            "text": "Estimate the stock quantity on display",
            "type": "numeric",
            "validation": {"mandatory": True, "min_value": 0},
        },
        "conditional_questions": [
            _follow_up(
                "informed_staff_replenish",
                "Did you inform store staff to replenish?",
                "single_choice",
                "stock_quantity",
                "less_than_or_equal",
                5,
                options=["Yes", "No", "Staff not available"],
            )
        ],
    },
    "competitor_analysis": {
        "source_question": {
            "question_id": "competitor_products",
            "text": "Which competitor products are present next to ours?",
            "type": "multiple_choice",
            "options": ["Brand A", "Brand B", "Brand C", "Brand D", "None"],
            "validation": {"mandatory": True},
        },
        "conditional_questions": [
            _follow_up(
                "competitor_promotion",
                "Are those competitor products on promotion?",
                "single_choice",
                "competitor_products",
                "not_contains",
                "None",
                options=["Yes", "No", "Some of them"],
            ),
            _follow_up(
                "competitor_prices",
                "Note competitor prices (separate multiple prices with commas)",
                "text",
                "competitor_products",
                "not_contains",
                "None",
                validation={"mandatory": False},
            ),
        ],
    },
    "pricing_compliance": {
        "source_question": {
            "question_id": "correct_mrp",
            "text": "Is the product being sold at the correct MRP?",
            "type": "single_choice",
            "options": ["Yes", "No - Higher", "No - Lower"],
            "validation": {"mandatory": True},
        },
        "conditional_questions": [
            _follow_up(
                "actual_selling_price",
                "Enter the actual selling price displayed",
                "numeric",
                "correct_mrp",
                "not_equals",
                "Yes",
                validation={"mandatory": True, "min_value": 0},
            )
        ],
    },
}


def preset_questions(name: str) -> List[Dict[str, Any]]:
    """Return the source question followed by its follow-ups for one preset."""
    preset = RETAIL_CONDITIONAL_PRESETS[name]
    return [dict(preset["source_question"])] + [dict(q) for q in preset["conditional_questions"]]


DEMO_CATEGORIES: List[Dict[str, Any]] = [
    {"category_id": "cat-1", "name": "Merchandising", "description": "Product placement and visibility audits", "icon": "package", "color": "#3B82F6", "sort_order": 1},
    {"category_id": "cat-2", "name": "Stock Management", "description": "Inventory and stock level checks", "icon": "archive", "color": "#10B981", "sort_order": 2},
    {"category_id": "cat-3", "name": "Quality Control", "description": "Product quality and compliance checks", "icon": "shield-check", "color": "#F59E0B", "sort_order": 3},
    {"category_id": "cat-4", "name": "Competitor Analysis", "description": "Competitive landscape assessment", "icon": "users", "color": "#8B5CF6", "sort_order": 4},
    {"category_id": "cat-5", "name": "Pricing Compliance", "description": "Price verification and compliance", "icon": "dollar-sign", "color": "#EF4444", "sort_order": 5},
    {"category_id": "cat-6", "name": "Brand Visibility", "description": "Brand presence and POSM audits", "icon": "eye", "color": "#06B6D4", "sort_order": 6},
]


def demo_templates() -> List[Dict[str, Any]]:
    sample = {
        "template_id": "demo-1",
        "name": "Sample Retail Audit",
        "description": "A comprehensive retail execution audit template",
        "category_id": "cat-1",
        "version": 1,
        "sections": [
            {
                "section_id": "sec-1",
                "title": "Product Availability",
                "description": "Check product availability and stock levels",
                "order_index": 1,
                "questions": [
                    {
                        "question_id": "q1",
                        "text": "Is the product available on shelf?",
                        "type": "single_choice",
                        "options": ["Yes", "No"],
                        "validation": {"mandatory": True},
                    }
                ],
            }
        ],
        "scoring_rules": {"weights": {}, "threshold": 0, "critical_questions": []},
        "is_published": True,
        "is_active": True,
        "created_by": DEMO_USER_ID,
    }
    execution = {
        "template_id": "demo-2",
        "name": "Retail Execution Audit",
        "description": "Availability, shelf, stock, competitor and pricing checks",
        "category_id": "cat-1",
        "version": 1,
        "sections": [
            {
                "section_id": "availability",
                "title": "Availability",
                "order_index": 1,
                "questions": preset_questions("product_availability") + preset_questions("stock_quantity"),
            },
            {
                "section_id": "placement",
                "title": "Shelf Placement",
                "order_index": 2,
                "questions": preset_questions("shelf_placement"),
            },
            {
                "section_id": "competition",
                "title": "Competition",
                "order_index": 3,
                "questions": preset_questions("competitor_analysis"),
            },
            {
                "section_id": "pricing",
                "title": "Pricing",
                "order_index": 4,
                "questions": preset_questions("pricing_compliance"),
            },
        ],
        "scoring_rules": {
            "weights": {"availability": 2, "placement": 1, "competition": 1, "pricing": 2},
            "threshold": 70,
            "critical_questions": ["product_available", "correct_mrp"],
        },
        "is_published": True,
        "is_active": True,
        "created_by": DEMO_USER_ID,
    }
    return [sample, execution]


def seed_demo_data(storage: "Storage") -> None:
    for category in DEMO_CATEGORIES:
        storage.insert("template_categories", dict(category, is_active=True))
    for template in demo_templates():
        storage.insert("templates", template)
    storage.insert(
        "audits",
        {
            "audit_id": "demo-audit-1",
            "template_id": "demo-2",
            "status": "pending",
            "assigned_to": DEMO_USER_ID,
            "location": {"store_name": "Downtown Store", "address": "1 Main Street"},
            "responses": {},
        },
    )


__all__ = [
    "DEMO_USER_ID",
    "RETAIL_CONDITIONAL_PRESETS",
    "DEMO_CATEGORIES",
    "preset_questions",
    "demo_templates",
    "seed_demo_data",
]
