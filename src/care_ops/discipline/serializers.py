"""JSON shapes for the discipline endpoints."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from .model import CorrectiveAction, DisciplineStats, Signature
from .service import (
    ActionDetail,
    ActionList,
    CreateResult,
    DisciplineHistory,
    EmployeeDiscipline,
    PointsSummary,
    SignatureStatus,
)


def _iso(value: Optional[date | datetime | str]) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


def signature_to_dict(sig: Signature, *, include_data: bool = False) -> dict:
    out = {
        "id": sig.signature_id,
        "signer_type": sig.signer_type.value,
        "signer_id": sig.signer_id,
        "signer_name": sig.signer_name,
        "signed_at": _iso(sig.signed_at),
    }
    if include_data:
        out["signature_data"] = sig.signature_data
    return out


def action_to_dict(action: CorrectiveAction, *, include_signature_data: bool = False) -> dict:
    return {
        "id": action.action_id,
        "employee": {
            "id": action.employee_id,
            "first_name": action.employee_first_name,
            "last_name": action.employee_last_name,
            "position": action.employee_position,
        },
        "issued_by": {"id": action.issued_by_id, "name": action.issued_by_name},
        "house": {"id": action.house_id, "name": action.house_name} if action.house_id is not None else None,
        "category": {
            "id": action.category_id,
            "name": action.category_name,
            "severity_level": action.severity_level.value,
        },
        "violation_date": _iso(action.violation_date),
        "violation_time": action.violation_time,
        "incident_description": action.incident_description,
        "mitigating_circumstances": action.mitigating_circumstances,
        "points_assigned": action.points_assigned,
        "points_adjusted": action.points_adjusted,
        "points": action.points,
        "adjustment_reason": action.adjustment_reason,
        "discipline_level": action.discipline_level.label,
        "corrective_expectations": list(action.corrective_expectations),
        "consequences_text": action.consequences_text,
        "pip_scheduled": action.pip_scheduled,
        "pip_date": _iso(action.pip_date),
        "status": action.status.value,
        "employee_comments": action.employee_comments,
        "voided_at": _iso(action.voided_at),
        "voided_by": action.voided_by_name,
        "void_reason": action.void_reason,
        "created_at": _iso(action.created_at),
        "signatures": [signature_to_dict(s, include_data=include_signature_data) for s in action.signatures],
    }


def stats_to_dict(stats: DisciplineStats) -> dict:
    return {
        "current_points": stats.current_points,
        "discipline_level": stats.discipline_level.label,
        "rolling_count": stats.rolling_count,
        "expired_count": stats.expired_count,
        "voided_count": stats.voided_count,
        "total_count": stats.total_count,
    }


def employee_discipline_to_dict(view: EmployeeDiscipline) -> dict:
    return {
        "employee": view.employee.as_dict(),
        "stats": stats_to_dict(view.stats),
        "progress": {"percent": view.bar.percent, "color": view.bar.color},
        "rolling_actions": [action_to_dict(a) for a in view.rolling],
        "expired_actions": [action_to_dict(a) for a in view.expired],
        "voided_actions": [action_to_dict(a) for a in view.voided],
    }


def points_summary_to_dict(summary: PointsSummary) -> dict:
    return {
        "employee": summary.employee.as_dict(),
        "current_points": summary.current_points,
        "max_points": summary.max_points,
        "discipline_level": summary.discipline_level.label,
        "next_threshold": summary.next_threshold,
        "points_to_next_threshold": summary.points_to_next_threshold,
        "actions_count": summary.actions_count,
        "expiring_points": [
            {
                "action_id": e.action_id,
                "violation_date": _iso(e.violation_date),
                "expiration_date": _iso(e.expiration_date),
                "days_until_expiration": e.days_until_expiration,
                "points": e.points,
                "category": e.category_name,
            }
            for e in summary.expiring_points
        ],
        "thresholds": summary.thresholds,
    }


def history_to_dict(history: DisciplineHistory) -> dict:
    s = history.stats
    return {
        "employee": history.employee.as_dict(),
        "actions": [action_to_dict(a) for a in history.actions],
        "stats": {
            "total_actions": s.total_actions,
            "active_actions": s.active_actions,
            "voided_actions": s.voided_actions,
            "pending_signatures": s.pending_signatures,
            "acknowledged": s.acknowledged,
            "disputed": s.disputed,
            "total_points_ever": s.total_points_ever,
            "by_severity": s.by_severity,
        },
        "by_year": {str(year): [action_to_dict(a) for a in items] for year, items in history.by_year.items()},
    }


def action_list_to_dict(result: ActionList) -> dict:
    return {
        "actions": [action_to_dict(a) for a in result.actions],
        "stats": {
            "total": result.total,
            "pending_signatures": result.pending_signatures,
            "this_week": result.this_week,
            "at_risk_employees": result.at_risk_employees,
        },
    }


def action_detail_to_dict(detail: ActionDetail) -> dict:
    return {
        "action": action_to_dict(detail.action, include_signature_data=True),
        "current_points": detail.current_points,
        "points_before_action": detail.points_before_action,
        "recent_actions": [action_to_dict(a) for a in detail.recent_actions],
    }


def create_result_to_dict(result: CreateResult) -> dict:
    return {
        "id": result.action_id,
        "current_points": result.current_points,
        "new_points": result.new_points,
        "total_points": result.total_points,
        "discipline_level": result.discipline_level.label,
        "thresholds_crossed": list(result.thresholds_crossed),
    }


def signature_status_to_dict(status: SignatureStatus) -> dict:
    return {
        "action_id": status.action_id,
        "status": status.status.value,
        "signatures": {
            kind: signature_to_dict(sig, include_data=True) if sig else None for kind, sig in status.signatures.items()
        },
        "has_supervisor_signature": status.has_supervisor_signature,
        "has_witness_signature": status.has_witness_signature,
        "has_employee_signature": status.has_employee_signature,
    }
