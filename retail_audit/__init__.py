"""FastAPI application package for the retail audit service.

Exposes the application factory. The conditional-question engine lives in
`retail_audit/logic/`, pydantic models in `retail_audit/models/`, storage
backends in `retail_audit/storage/` and route handlers in
`retail_audit/routes/`.
"""

from __future__ import annotations

from retail_audit.main import create_app

__all__ = ["create_app"]
