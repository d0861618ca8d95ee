"""Audit assignment and execution endpoints."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from retail_audit.logic.audits import (
    assign_audit,
    audit_screen,
    get_audit,
    list_audits,
    record_response,
    save_progress,
    submit_audit,
)
from retail_audit.models.audit import AuditStatusName
from retail_audit.models.payloads import AuditCreate, ProgressSave, ResponseUpdate, SubmitRequest
from retail_audit.routes.deps import current_user_id, get_storage
from retail_audit.storage.base import Storage

router = APIRouter()

@router.get("/audits", summary="List audits assigned to the current user")
def get_audits(
    status: Optional[AuditStatusName] = Query(default=None),
    storage: Storage = Depends(get_storage),
    user_id: str = Depends(current_user_id),
):
    return {"audits": [a.model_dump() for a in list_audits(storage, user_id, status)]}


@router.post("/audits", status_code=201, summary="Assign an audit")
def post_audit(
    payload: AuditCreate,
    storage: Storage = Depends(get_storage),
    user_id: str = Depends(current_user_id),
):
    audit = assign_audit(
        storage,
        payload.template_id,
        payload.assigned_to or user_id,
        payload.location.model_dump(),
    )
    return audit.model_dump()


@router.get("/audits/{audit_id}", summary="Fetch an audit")
def get_one_audit(audit_id: str, storage: Storage = Depends(get_storage), _user: str = Depends(current_user_id)):
    return get_audit(storage, audit_id).model_dump()


@router.get("/audits/{audit_id}/screen", summary="Visible sections and questions")
def get_screen(audit_id: str, storage: Storage = Depends(get_storage), _user: str = Depends(current_user_id)):
    return audit_screen(storage, audit_id)


@router.patch("/audits/{audit_id}/responses/{question_id}", summary="Record one response")
def patch_response(
    audit_id: str,
    question_id: str,
    payload: ResponseUpdate,
    storage: Storage = Depends(get_storage),
    _user: str = Depends(current_user_id),
):
    return record_response(storage, audit_id, question_id, payload.value)


@router.put("/audits/{audit_id}/responses", summary="Save audit progress")
def put_responses(
    audit_id: str,
    payload: ProgressSave,
    storage: Storage = Depends(get_storage),
    _user: str = Depends(current_user_id),
):
    return save_progress(storage, audit_id, payload.responses).model_dump()


@router.post("/audits/{audit_id}/submit", summary="Validate, score and complete an audit")
def post_submit(
    audit_id: str,
    payload: Optional[SubmitRequest] = None,
    storage: Storage = Depends(get_storage),
    _user: str = Depends(current_user_id),
):
    result = submit_audit(storage, audit_id, payload.responses if payload else None)
    return {**result, "audit": result["audit"].model_dump()}


__all__ = ["router"]
