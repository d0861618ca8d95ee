"""Domain exceptions for the audit service.

Every error carries the HTTP status, a stable problem code and a title so the
problem+json handler can render it without a per-route mapping.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class AuditServiceError(Exception):
    status = 500
    code = "internal_error"
    title = "Internal Server Error"

    def __init__(self, detail: str = "", **extra: Any) -> None:
        super().__init__(detail or self.title)
        self.detail = detail or self.title
        self.extra: Dict[str, Any] = extra

    def to_problem(self) -> Dict[str, Any]:
        problem: Dict[str, Any] = {
            "title": self.title,
            "status": self.status,
            "detail": self.detail,
            "code": self.code,
        }
        problem.update(self.extra)
        return problem


class ConfigurationError(AuditServiceError):
    code = "configuration_error"
    title = "Configuration Error"


class NotFoundError(AuditServiceError):
    status = 404
    code = "not_found"
    title = "Not Found"


class ConflictError(AuditServiceError):
    status = 409
    code = "conflict"
    title = "Conflict"


class TemplatePublishedError(ConflictError):
    code = "template_published"


class InvalidTransitionError(ConflictError):
    code = "invalid_status_transition"


class UnprocessableError(AuditServiceError):
    status = 422
    code = "unprocessable"
    title = "Unprocessable Entity"


class InvalidTemplateError(UnprocessableError):
    code = "invalid_template"


class RuleCycleError(UnprocessableError):
    code = "rule_cycle"

    def __init__(self, cycles: List[List[str]]) -> None:
        rendered = "; ".join(" -> ".join(c) for c in cycles)
        super().__init__(f"conditional rules form a cycle: {rendered}", cycles=cycles)
        self.cycles = cycles


class SubmissionValidationError(UnprocessableError):
    code = "submission_invalid"

    def __init__(self, blocking_items: List[Dict[str, Any]]) -> None:
        super().__init__(
            f"{len(blocking_items)} question(s) block submission",
            blocking_items=blocking_items,
        )
        self.blocking_items = blocking_items


class AuthenticationError(AuditServiceError):
    status = 401
    code = "unauthenticated"
    title = "Unauthorized"


class StorageError(AuditServiceError):
    status = 503
    code = "backend_unavailable"
    title = "Service Unavailable"

    def __init__(self, detail: str = "", table: Optional[str] = None) -> None:
        extra = {"table": table} if table else {}
        super().__init__(detail, **extra)


__all__ = [
    "AuditServiceError",
    "ConfigurationError",
    "NotFoundError",
    "ConflictError",
    "TemplatePublishedError",
    "InvalidTransitionError",
    "UnprocessableError",
    "InvalidTemplateError",
    "RuleCycleError",
    "SubmissionValidationError",
    "AuthenticationError",
    "StorageError",
]
