"""
Goal criteria commit rules.
Edits may violate the weight invariant while in progress; committing them
requires a non-empty list whose integer weights sum to exactly 100.
"""
import logging
from typing import List, Sequence

from app.core.exceptions import CriteriaWeightError
from app.schemas.records import Criterion, Goal

logger = logging.getLogger(__name__)

TOTAL_WEIGHT = 100


def total_weight(criteria: Sequence[Criterion]) -> int:
    return sum(c.weight for c in criteria)


def validate_criteria(criteria: Sequence[Criterion]) -> None:
    if not criteria:
        raise CriteriaWeightError("A goal needs at least one criterion")

    names = [c.name.strip() for c in criteria]
    if any(not name for name in names):
        raise CriteriaWeightError("Criterion names must not be empty")
    if len(set(n.lower() for n in names)) != len(names):
        raise CriteriaWeightError("Criterion names must be unique within a goal")
    ids = [c.id for c in criteria]
    if len(set(ids)) != len(ids):
        raise CriteriaWeightError("Criterion ids must be unique within a goal")

    for criterion in criteria:
        if not 0 < criterion.weight <= TOTAL_WEIGHT:
            raise CriteriaWeightError(
                f"Weight of '{criterion.name}' must be between 1 and {TOTAL_WEIGHT}",
                details={"criterion": criterion.name, "weight": criterion.weight},
            )

    total = total_weight(criteria)
    if total != TOTAL_WEIGHT:
        raise CriteriaWeightError(
            f"Total weight must be {TOTAL_WEIGHT}% (currently {total}%)",
            details={"total_weight": total},
        )


def commit_criteria(goal: Goal, criteria: List[Criterion]) -> Goal:
    """Return `goal` with `criteria` committed. Raises before touching anything."""
    validate_criteria(criteria)
    updated = goal.model_copy(update={"criteria": list(criteria)})
    logger.info(
        "Committed goal criteria",
        extra={"goal_id": goal.id, "criteria_count": len(criteria)},
    )
    return updated
