"""
Scope resolution: which employees a manager may act upon.

Modes:
- direct-reports: immediate reports only
- reporting-chain: every descendant, the manager excluded
- organization: every employee, when org-wide visibility is granted;
  otherwise silently falls back to direct reports
"""
import logging
from typing import Iterable, List, Optional, Sequence

from app.schemas.records import Employee, EmployeeRole, Report
from app.schemas.scope import Scope, ScopeMode
from app.services.hierarchy import HierarchyIndex
from app.services.permissions import capabilities_of

logger = logging.getLogger(__name__)


def _find(employees: Iterable[Employee], employee_id: str) -> Optional[Employee]:
    return next((e for e in employees if e.id == employee_id), None)


def resolve(
    manager_id: str,
    mode: ScopeMode,
    employees: Sequence[Employee],
    index: Optional[HierarchyIndex] = None,
) -> Scope:
    """
    Resolve the scope of `manager_id` under `mode`.
    Callers must read `Scope.mode`: it reports the mode actually applied.
    """
    mode = ScopeMode(mode)
    if index is None:
        index = HierarchyIndex(employees)

    if mode == ScopeMode.REPORTING_CHAIN:
        ids = index.all_descendants(manager_id)
        applied = ScopeMode.REPORTING_CHAIN
    elif mode == ScopeMode.ORGANIZATION and capabilities_of(_find(employees, manager_id)).view_org_wide:
        ids = index.employee_ids
        applied = ScopeMode.ORGANIZATION
    else:
        if mode == ScopeMode.ORGANIZATION:
            logger.info(
                "Organization scope denied, falling back to direct reports",
                extra={"manager_id": manager_id},
            )
        elif mode == ScopeMode.SELF:
            logger.warning("Self scope requested through the manager resolver", extra={"manager_id": manager_id})
        ids = index.direct_reports(manager_id)
        applied = ScopeMode.DIRECT_REPORTS

    return Scope(
        requested_mode=mode,
        mode=applied,
        employee_ids=frozenset(ids),
        manager_id=manager_id,
    )


def self_scope(employee_id: str) -> Scope:
    """Employee view: no resolution, the caller only sees its own id."""
    return Scope(
        requested_mode=ScopeMode.SELF,
        mode=ScopeMode.SELF,
        employee_ids=frozenset({employee_id}),
    )


def scope_for_viewer(
    viewer: Employee,
    mode: ScopeMode,
    employees: Sequence[Employee],
    index: Optional[HierarchyIndex] = None,
) -> Scope:
    if viewer.role == EmployeeRole.MANAGER:
        return resolve(viewer.id, mode, employees, index)
    return self_scope(viewer.id)


def filter_reports_by_scope(reports: Iterable[Report], scope: Scope) -> List[Report]:
    return [r for r in reports if r.employee_id in scope.employee_ids]
