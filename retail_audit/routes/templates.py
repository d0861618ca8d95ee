"""Template authoring endpoints.

Thin wrappers over ``retail_audit.logic.templates``; domain errors propagate
to the problem+json handlers.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from retail_audit.logic.presets import RETAIL_CONDITIONAL_PRESETS
from retail_audit.logic.templates import (
    create_new_version,
    create_template,
    delete_template,
    get_template,
    list_templates,
    preview_logic,
    publish_template,
    update_template,
)
from retail_audit.models.payloads import PreviewRequest, TemplateCreate, TemplateUpdate
from retail_audit.routes.deps import current_user_id, get_storage
from retail_audit.storage.base import Storage

router = APIRouter()

@router.get("/templates", summary="List active templates")
def get_templates(
    published: Optional[bool] = Query(default=None),
    category_id: Optional[str] = Query(default=None, alias="categoryId"),
    storage: Storage = Depends(get_storage),
    _user: str = Depends(current_user_id),
):
    templates = list_templates(storage, published=published, category_id=category_id)
    return {"templates": [t.model_dump() for t in templates]}


@router.post("/templates", status_code=201, summary="Create a draft template")
def post_template(
    payload: TemplateCreate,
    storage: Storage = Depends(get_storage),
    user_id: str = Depends(current_user_id),
):
    template = create_template(storage, payload.model_dump(exclude_none=True), user_id)
    return template.model_dump()


# Declared before /templates/{template_id} so the literal path wins
@router.get("/templates/conditional-presets", summary="Retail conditional-logic presets")
def get_conditional_presets(_user: str = Depends(current_user_id)):
    return {"presets": RETAIL_CONDITIONAL_PRESETS}


@router.get("/templates/{template_id}", summary="Fetch a template")
def get_one_template(template_id: str, storage: Storage = Depends(get_storage), _user: str = Depends(current_user_id)):
    return get_template(storage, template_id).model_dump()


@router.patch("/templates/{template_id}", summary="Update an unpublished template")
def patch_template(
    template_id: str,
    payload: TemplateUpdate,
    storage: Storage = Depends(get_storage),
    _user: str = Depends(current_user_id),
):
    return update_template(storage, template_id, payload.model_dump(exclude_unset=True)).model_dump()


@router.delete("/templates/{template_id}", status_code=204, summary="Soft delete a template")
def remove_template(template_id: str, storage: Storage = Depends(get_storage), _user: str = Depends(current_user_id)):
    delete_template(storage, template_id)
    return Response(status_code=204)


@router.post("/templates/{template_id}/publish", summary="Publish a template after the rule check")
def post_publish(template_id: str, storage: Storage = Depends(get_storage), _user: str = Depends(current_user_id)):
    result = publish_template(storage, template_id)
    return {"template": result["template"].model_dump(), "warnings": result["warnings"]}


@router.post("/templates/{template_id}/versions", status_code=201, summary="Create a new template version")
def post_version(
    template_id: str,
    storage: Storage = Depends(get_storage),
    user_id: str = Depends(current_user_id),
):
    return create_new_version(storage, template_id, user_id).model_dump()


@router.post("/templates/{template_id}/preview", summary="Preview conditional logic without saving")
def post_preview(
    template_id: str,
    payload: PreviewRequest,
    storage: Storage = Depends(get_storage),
    _user: str = Depends(current_user_id),
):
    template = get_template(storage, template_id)
    return preview_logic(template, payload.responses)


__all__ = ["router"]
