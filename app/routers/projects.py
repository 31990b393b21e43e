from typing import List

from fastapi import APIRouter, Depends, Query

from app.routers.deps import get_current_employee, get_dataset
from app.schemas.records import Employee, EmployeeRole, Project
from app.schemas.scope import ScopeMode
from app.services.dataset import Dataset
from app.services.scope import resolve
from app.services.visibility import projects_for_employee, visible_projects

router = APIRouter(prefix="/projects", tags=["projects"])


@router.get("/visible", response_model=List[Project])
def list_visible_projects(
    mode: ScopeMode = Query(default=ScopeMode.DIRECT_REPORTS),
    actor: Employee = Depends(get_current_employee),
    data: Dataset = Depends(get_dataset),
):
    """Projects in view for the actor under the requested scope mode."""
    if actor.role != EmployeeRole.MANAGER:
        return projects_for_employee(data.projects, actor.id)
    scope = resolve(actor.id, mode, data.employees)
    return visible_projects(data.projects, data.employees, actor.id, scope)
