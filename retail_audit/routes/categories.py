"""Template category endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from retail_audit.logic.templates import create_category, list_categories
from retail_audit.models.payloads import CategoryCreate
from retail_audit.routes.deps import current_user_id, get_storage
from retail_audit.storage.base import Storage

router = APIRouter()


@router.get("/template-categories", summary="List active template categories")
def get_categories(storage: Storage = Depends(get_storage), _user: str = Depends(current_user_id)):
    return {"categories": [c.model_dump() for c in list_categories(storage)]}


@router.post("/template-categories", status_code=201, summary="Create a template category")
def post_category(
    payload: CategoryCreate,
    storage: Storage = Depends(get_storage),
    _user: str = Depends(current_user_id),
):
    category = create_category(storage, payload.model_dump(exclude_none=True))
    return category.model_dump()


__all__ = ["router"]
