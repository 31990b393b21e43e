"""
Analytics endpoints.
Every figure is recomputed from the organization dataset on each request;
nothing here is cached or persisted.
"""
import logging
from datetime import date, timedelta
from enum import Enum
from typing import Optional, Tuple

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from app.core.exceptions import AccessDeniedError, ValidationFailedError
from app.routers.deps import get_current_employee, get_dataset, require_manager
from app.schemas.metrics import EmployeeSnapshot, Granularity, MetricsSnapshot
from app.schemas.records import Employee, EmployeeRole
from app.schemas.scope import ScopeMode
from app.services.dataset import Dataset
from app.services.hierarchy import HierarchyIndex
from app.services.metrics import (
    build_employee_snapshot,
    build_manager_snapshot,
    filter_window,
    submission_reliability,
)
from app.services.scope import filter_reports_by_scope, resolve
from app.services.summary_ai import SummaryResult, generate_summary, summary_generations
from app.services.visibility import visible_goals

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analytics", tags=["analytics"])

DEFAULT_WINDOW_DAYS = 30


class SummaryKind(str, Enum):
    TEAM = "team"
    SELF = "self"


class SummaryRequest(BaseModel):
    kind: SummaryKind = SummaryKind.SELF
    mode: ScopeMode = ScopeMode.DIRECT_REPORTS
    start_date: Optional[date] = None
    end_date: Optional[date] = None


def _window(start_date: Optional[date], end_date: Optional[date]) -> Tuple[date, date]:
    end_date = end_date or date.today()
    start_date = start_date or end_date - timedelta(days=DEFAULT_WINDOW_DAYS - 1)
    if start_date > end_date:
        raise ValidationFailedError(
            "start_date must not be after end_date",
            details={"start_date": start_date.isoformat(), "end_date": end_date.isoformat()},
        )
    return start_date, end_date


@router.get("/dashboard", response_model=MetricsSnapshot)
def get_dashboard(
    mode: ScopeMode = Query(default=ScopeMode.DIRECT_REPORTS),
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    granularity: Granularity = Query(default=Granularity.WEEKLY),
    actor: Employee = Depends(require_manager),
    data: Dataset = Depends(get_dataset),
):
    """Manager dashboard for one (scope, date window) pair."""
    start_date, end_date = _window(start_date, end_date)
    return build_manager_snapshot(
        actor.id,
        mode,
        data.employees,
        data.projects,
        data.goals,
        data.reports,
        start_date,
        end_date,
        granularity,
    )


@router.get("/me", response_model=EmployeeSnapshot)
def get_my_analytics(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    granularity: Granularity = Query(default=Granularity.WEEKLY),
    actor: Employee = Depends(get_current_employee),
    data: Dataset = Depends(get_dataset),
):
    start_date, end_date = _window(start_date, end_date)
    return build_employee_snapshot(
        actor.id,
        data.projects,
        data.goals,
        data.reports,
        start_date,
        end_date,
        granularity,
    )


@router.post("/summary", response_model=SummaryResult)
def create_summary(
    request: SummaryRequest,
    actor: Employee = Depends(get_current_employee),
    data: Dataset = Depends(get_dataset),
):
    """
    Ask the oracle for a narrative summary. A request superseded by a newer
    one from the same viewer comes back with status `stale` and no text.
    """
    start_date, end_date = _window(request.start_date, request.end_date)
    generations = summary_generations.for_key(f"{actor.id}:{request.kind.value}")
    token = generations.issue()

    if request.kind == SummaryKind.SELF:
        own = [r for r in data.reports if r.employee_id == actor.id]
        reports = filter_window(own, start_date, end_date)
        return generate_summary(reports, generations, token=token)

    if actor.role != EmployeeRole.MANAGER:
        raise AccessDeniedError("Team summaries are only available to managers")

    index = HierarchyIndex(data.employees)
    scope = resolve(actor.id, request.mode, data.employees, index)
    goals_in_scope = visible_goals(data.goals, data.projects, data.employees, actor.id, index)
    reports = filter_window(filter_reports_by_scope(data.reports, scope), start_date, end_date)
    reliability = submission_reliability(reports, data.projects, goals_in_scope, start_date, end_date)

    logger.info(
        "Team summary requested",
        extra={"manager_id": actor.id, "mode": scope.mode.value, "token": token},
    )
    return generate_summary(reports, generations, token=token, reliability=reliability, team=True)
