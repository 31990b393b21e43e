"""
Manager score overrides.

Per report: NO_OVERRIDE <-> OVERRIDDEN. Score and justification are always
written together; a rejected transition leaves the report untouched. Only the
report owner's direct manager may move a report between states.
"""
import enum
import logging
import math
from typing import Optional, Sequence

from app.core.exceptions import AccessDeniedError, OverrideValidationError
from app.schemas.records import Employee, Report
from app.services.permissions import is_direct_manager

logger = logging.getLogger(__name__)

MIN_SCORE = 0.0
MAX_SCORE = 10.0


class OverrideState(str, enum.Enum):
    NO_OVERRIDE = "no_override"
    OVERRIDDEN = "overridden"


def override_state(report: Report) -> OverrideState:
    if report.manager_overall_score is not None:
        return OverrideState.OVERRIDDEN
    return OverrideState.NO_OVERRIDE


def validate_override(score, reasoning: Optional[str]) -> str:
    """Return the trimmed reasoning, or raise OverrideValidationError."""
    if isinstance(score, bool) or not isinstance(score, (int, float)) or not math.isfinite(score):
        raise OverrideValidationError("Score must be a number", details={"score": repr(score)})
    if not MIN_SCORE <= score <= MAX_SCORE:
        raise OverrideValidationError(
            f"Score must be between {MIN_SCORE:g} and {MAX_SCORE:g}",
            details={"score": score},
        )
    trimmed = (reasoning or "").strip()
    if not trimmed:
        raise OverrideValidationError("A justification is required to override a score")
    return trimmed


def apply_override(report: Report, score: float, reasoning: str) -> Report:
    trimmed = validate_override(score, reasoning)
    updated = report.model_copy(update={
        "manager_overall_score": float(score),
        "manager_override_reasoning": trimmed,
    })
    logger.info(
        "Score override applied",
        extra={
            "report_id": report.id,
            "before": report.manager_overall_score,
            "after": updated.manager_overall_score,
            "evaluation_score": report.evaluation_score,
        },
    )
    return updated


def clear_override(report: Report) -> Report:
    if override_state(report) == OverrideState.NO_OVERRIDE and report.manager_override_reasoning is None:
        return report
    logger.info(
        "Score override cleared",
        extra={"report_id": report.id, "before": report.manager_overall_score},
    )
    return report.model_copy(update={
        "manager_overall_score": None,
        "manager_override_reasoning": None,
    })


def can_override(report_owner: Optional[Employee], manager_id: Optional[str]) -> bool:
    return is_direct_manager(report_owner, manager_id)


def authorize_override(employees: Sequence[Employee], report: Report, manager_id: str) -> Employee:
    """Return the report owner when `manager_id` is their direct manager."""
    owner = next((e for e in employees if e.id == report.employee_id), None)
    if not can_override(owner, manager_id):
        logger.warning(
            "Override denied: not the direct manager",
            extra={"report_id": report.id, "manager_id": manager_id},
        )
        raise AccessDeniedError("Only the employee's direct manager can override this score")
    return owner
