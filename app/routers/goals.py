import logging
from typing import List, Optional
import uuid

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from app.core.exceptions import AccessDeniedError, CriteriaWeightError, NotFoundError
from app.database import get_db
from app.routers.deps import get_current_employee, get_dataset
from app.schemas.records import Criterion, Employee, EmployeeRole, Goal
from app.services import dataset as dataset_service
from app.services.dataset import Dataset
from app.services.goals import commit_criteria
from app.services.visibility import can_edit_goal, projects_for_employee, visible_goals

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/goals", tags=["goals"])


# --- Pydantic Schemas ---
class GoalView(BaseModel):
    goal: Goal
    can_edit: bool


class CriterionIn(BaseModel):
    id: Optional[str] = None
    name: str
    weight: int


class CriteriaUpdate(BaseModel):
    criteria: List[CriterionIn] = Field(default_factory=list)


# --- Endpoints ---

@router.get("/visible", response_model=List[GoalView])
def list_visible_goals(
    actor: Employee = Depends(get_current_employee),
    data: Dataset = Depends(get_dataset),
):
    if actor.role == EmployeeRole.MANAGER:
        goals = visible_goals(data.goals, data.projects, data.employees, actor.id)
    else:
        project_ids = {p.id for p in projects_for_employee(data.projects, actor.id)}
        goals = [g for g in data.goals if g.project_id in project_ids]
    return [GoalView(goal=g, can_edit=can_edit_goal(g, actor.id)) for g in goals]


@router.put("/{goal_id}/criteria", response_model=Goal)
def update_goal_criteria(
    goal_id: str,
    payload: CriteriaUpdate,
    actor: Employee = Depends(get_current_employee),
    data: Dataset = Depends(get_dataset),
    db: Session = Depends(get_db),
):
    goal = data.goal(goal_id)
    if goal is None:
        raise NotFoundError("Goal", goal_id)
    if not can_edit_goal(goal, actor.id):
        logger.warning(f"Criteria edit denied on goal {goal_id} for {actor.id}")
        raise AccessDeniedError("Only the goal's author can edit its criteria")

    supplied = [c.id for c in payload.criteria if c.id]
    if len(set(supplied)) != len(supplied):
        raise CriteriaWeightError("Criterion ids must be unique within a goal")

    # Ids the goal does not already own are replaced with fresh ones
    owned = {c.id for c in goal.criteria}
    criteria = [
        Criterion(
            id=c.id if c.id in owned else str(uuid.uuid4()),
            name=c.name.strip(),
            weight=c.weight,
        )
        for c in payload.criteria
    ]
    updated = commit_criteria(goal, criteria)
    return dataset_service.save_goal_criteria(db, updated)
