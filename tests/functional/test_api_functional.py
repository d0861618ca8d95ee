"""HTTP contract: routes, problem+json errors, auth header and middleware."""

from __future__ import annotations

from fastapi.testclient import TestClient

from retail_audit.config import AppConfig, BackendConfig
from retail_audit.http.problem import PROBLEM_MEDIA_TYPE
from retail_audit.logic.presets import preset_questions
from retail_audit.main import create_app

API = "/api/v1"
COMPLIANT = {
    "product_available": "Yes",
    "stock_quantity": 20,
    "shelf_placement": "Eye Level",
    "competitor_products": ["None"],
    "correct_mrp": "Yes",
}


def test_health_reports_demo_mode(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "demo_mode": True, "backend": "InMemoryStorage"}


def test_request_id_is_generated_or_echoed(client):
    assert client.get("/health").headers.get("X-Request-Id")
    resp = client.get("/health", headers={"X-Request-Id": "req-123"})
    assert resp.headers["X-Request-Id"] == "req-123"


def test_categories_and_presets(client):
    cats = client.get(f"{API}/template-categories").json()["categories"]
    assert [c["sort_order"] for c in cats] == [1, 2, 3, 4, 5, 6]
    presets = client.get(f"{API}/templates/conditional-presets").json()["presets"]
    assert set(presets) == {
        "product_availability",
        "shelf_placement",
        "stock_quantity",
        "competitor_analysis",
        "pricing_compliance",
    }


def test_template_authoring_flow_with_camel_case_payload(client):
    payload = {
        "name": "Shelf Check",
        "categoryId": "cat-1",
        "sections": [
            {"sectionId": "shelf", "title": "Shelf", "orderIndex": 1, "questions": preset_questions("shelf_placement")}
        ],
        "scoringRules": {"threshold": 50},
    }
    created = client.post(f"{API}/templates", json=payload, headers={"X-User-Id": "author-7"})
    assert created.status_code == 201
    body = created.json()
    template_id = body["template_id"]
    assert body["created_by"] == "author-7"
    assert body["scoring_rules"]["threshold"] == 50

    patched = client.patch(f"{API}/templates/{template_id}", json={"description": "Eye-level placement"})
    assert patched.status_code == 200
    assert patched.json()["description"] == "Eye-level placement"

    preview = client.post(f"{API}/templates/{template_id}/preview", json={"responses": {"shelf_placement": "Bottom Shelf"}})
    assert preview.json()["sections"][0]["visible_question_ids"] == ["shelf_placement", "can_move_shelf"]

    published = client.post(f"{API}/templates/{template_id}/publish")
    assert published.status_code == 200
    assert published.json()["template"]["is_published"] is True

    locked = client.patch(f"{API}/templates/{template_id}", json={"name": "Renamed"})
    assert locked.status_code == 409
    assert locked.headers["content-type"].startswith(PROBLEM_MEDIA_TYPE)
    assert locked.json()["code"] == "template_published"

    version = client.post(f"{API}/templates/{template_id}/versions")
    assert version.status_code == 201
    assert version.json()["version"] == 2

    assert client.delete(f"{API}/templates/{template_id}").status_code == 204
    assert client.get(f"{API}/templates/{template_id}").status_code == 404


def test_patch_with_unknown_field_is_422(client):
    created = client.post(f"{API}/templates", json={"name": "Draft"}).json()
    resp = client.patch(f"{API}/templates/{created['template_id']}", json={"isPublished": True})
    assert resp.status_code == 422
    assert resp.headers["content-type"].startswith(PROBLEM_MEDIA_TYPE)


def test_publish_with_cycle_returns_problem(client):
    def gated(qid, source):
        return {
            "questionId": qid,
            "text": qid,
            "type": "text",
            "isConditional": True,
            "conditionalRules": [
                {
                    "id": f"r_{qid}",
                    "sourceQuestionId": source,
                    "condition": {"operator": "equals", "value": "x"},
                    "action": {"type": "show_question", "targetQuestionId": qid},
                }
            ],
        }

    payload = {"name": "Loop", "sections": [{"sectionId": "s", "title": "S", "orderIndex": 1, "questions": [gated("a", "b"), gated("b", "a")]}]}
    template_id = client.post(f"{API}/templates", json=payload).json()["template_id"]
    resp = client.post(f"{API}/templates/{template_id}/publish")
    assert resp.status_code == 422
    assert resp.json()["code"] == "rule_cycle"
    assert resp.json()["cycles"] == [["a", "b", "a"]]


def test_audit_execution_flow_and_report(client):
    assigned = client.post(
        f"{API}/audits",
        json={"templateId": "demo-2", "location": {"storeName": "Airport", "coordinates": {"lat": 1.5, "lng": 2.5}}},
    )
    assert assigned.status_code == 201
    audit_id = assigned.json()["audit_id"]
    assert assigned.json()["assigned_to"] == "demo-user"
    assert assigned.json()["location"]["store_name"] == "Airport"

    answer = client.patch(f"{API}/audits/{audit_id}/responses/stock_quantity", json={"value": 3})
    assert answer.status_code == 200
    assert answer.json()["visibility_delta"]["now_visible"] == ["informed_staff_replenish"]

    screen = client.get(f"{API}/audits/{audit_id}/screen").json()
    assert screen["status"] == "in_progress"

    blocked = client.post(f"{API}/audits/{audit_id}/submit", json={"responses": dict(COMPLIANT, stock_quantity=3)})
    assert blocked.status_code == 422
    assert blocked.json()["blocking_items"] == [
        {"question_id": "informed_staff_replenish", "reason": "missing_required_answer"}
    ]

    saved = client.put(f"{API}/audits/{audit_id}/responses", json={"responses": COMPLIANT})
    assert saved.status_code == 200

    submitted = client.post(f"{API}/audits/{audit_id}/submit")
    assert submitted.status_code == 200
    assert submitted.json()["score"] == 100
    assert submitted.json()["audit"]["status"] == "completed"

    frozen = client.patch(f"{API}/audits/{audit_id}/responses/product_available", json={"value": "No"})
    assert frozen.status_code == 409
    assert frozen.json()["code"] == "invalid_status_transition"

    mine = client.get(f"{API}/audits", params={"status": "completed"}).json()["audits"]
    assert [a["audit_id"] for a in mine] == [audit_id]

    summary = client.get(f"{API}/reports/summary").json()
    assert summary["total_audits"] == 2
    assert summary["completed_audits"] == 1
    assert summary["pending_audits"] == 1
    assert summary["average_score"] == 100
    assert summary["compliance_rate"] == 100


def test_assigning_unknown_template_is_404(client):
    resp = client.post(f"{API}/audits", json={"templateId": "missing"})
    assert resp.status_code == 404
    assert resp.json()["code"] == "not_found"


def test_invalid_body_is_problem_json(client):
    resp = client.post(f"{API}/audits", json={})
    assert resp.status_code == 422
    assert resp.json()["code"] == "request_invalid"
    assert resp.headers["content-type"].startswith(PROBLEM_MEDIA_TYPE)


def test_missing_user_header_is_401_outside_demo_mode(storage):
    config = AppConfig(backend=BackendConfig(demo_mode_fallback=False))
    with TestClient(create_app(config=config, storage=storage)) as client:
        assert client.get(f"{API}/templates").status_code == 401
        ok = client.get(f"{API}/templates", headers={"X-User-Id": "auditor-1"})
        assert ok.status_code == 200
