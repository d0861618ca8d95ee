"""Dashboard and report summaries over audit rows."""

from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping, Optional

from retail_audit.models.audit import AuditStatus


def summarize_audits(audits: Iterable[Mapping[str, Any]], template_id: Optional[str] = None) -> Dict[str, Any]:
    """Count audits by status and aggregate completed results.

    average_score and compliance_rate are over completed audits only and are
    None when nothing has been completed yet.
    """
    rows = [a for a in audits if template_id is None or a.get("template_id") == template_id]
    counts = {AuditStatus.PENDING: 0, AuditStatus.IN_PROGRESS: 0, AuditStatus.COMPLETED: 0}
    for row in rows:
        status = row.get("status")
        if status in counts:
            counts[status] += 1

    completed = [r for r in rows if r.get("status") == AuditStatus.COMPLETED]
    scores = [float(r["score"]) for r in completed if r.get("score") is not None]
    passed = [r for r in completed if r.get("passed")]

    return {
        "total_audits": len(rows),
        "pending_audits": counts[AuditStatus.PENDING],
        "in_progress_audits": counts[AuditStatus.IN_PROGRESS],
        "completed_audits": counts[AuditStatus.COMPLETED],
        "average_score": round(sum(scores) / len(scores), 1) if scores else None,
        "compliance_rate": round(len(passed) / len(completed) * 100, 1) if completed else None,
    }


__all__ = ["summarize_audits"]
