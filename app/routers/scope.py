from fastapi import APIRouter, Depends, Query

from app.routers.deps import get_current_employee, get_dataset
from app.schemas.records import Employee
from app.schemas.scope import ScopeMode, ScopeResponse
from app.services.dataset import Dataset
from app.services.scope import scope_for_viewer

router = APIRouter(prefix="/scope", tags=["scope"])


@router.get("", response_model=ScopeResponse)
def get_scope(
    mode: ScopeMode = Query(default=ScopeMode.DIRECT_REPORTS),
    actor: Employee = Depends(get_current_employee),
    data: Dataset = Depends(get_dataset),
):
    """
    Employee ids the actor may act upon. `mode` in the response is the one
    actually applied; it differs from `requested_mode` after a fallback.
    """
    scope = scope_for_viewer(actor, mode, data.employees)
    return ScopeResponse.from_scope(scope)
