"""
Goal and project visibility for managers.

Two predicates stay separate on purpose:
- can_edit_goal: authorship only
- visible_goals: authorship, or the goal's project has a *direct* report
  among its assignees. Never widened by the reporting-chain scope.
"""
from typing import Iterable, List, Optional, Sequence

from app.schemas.records import Employee, Goal, Project
from app.schemas.scope import Scope
from app.services.hierarchy import HierarchyIndex
from app.services.permissions import capabilities_of


def is_goal_author(goal: Goal, manager_id: Optional[str]) -> bool:
    if not manager_id:
        return False
    return goal.created_by == manager_id or goal.manager_id == manager_id


def can_edit_goal(goal: Goal, manager_id: Optional[str]) -> bool:
    """Editing rights follow authorship, independent of scope or hierarchy."""
    return is_goal_author(goal, manager_id)


def visible_goals(
    goals: Iterable[Goal],
    projects: Iterable[Project],
    employees: Sequence[Employee],
    manager_id: Optional[str],
    index: Optional[HierarchyIndex] = None,
) -> List[Goal]:
    goals = list(goals)
    if not manager_id:
        return goals

    if index is None:
        index = HierarchyIndex(employees)
    direct_ids = index.direct_reports(manager_id)

    relevant_project_ids = {
        project.id
        for project in projects
        if any(assignee.id in direct_ids for assignee in project.assignees)
    }

    # Goals whose project is missing can only be seen through authorship
    return [
        goal for goal in goals
        if is_goal_author(goal, manager_id) or goal.project_id in relevant_project_ids
    ]


def visible_projects(
    projects: Iterable[Project],
    employees: Sequence[Employee],
    manager_id: str,
    scope: Scope,
) -> List[Project]:
    """
    Projects a manager sees: created by them, assigned to them, or assigned to
    anyone in `scope`. Settings managers and the account owner see all.
    """
    projects = list(projects)
    manager = next((e for e in employees if e.id == manager_id), None)
    capabilities = capabilities_of(manager)
    if capabilities.manage_settings or capabilities.is_owner:
        return projects

    visible = []
    for project in projects:
        if project.created_by == manager_id:
            visible.append(project)
        elif any(a.id == manager_id or a.id in scope.employee_ids for a in project.assignees):
            visible.append(project)
    return visible


def projects_for_employee(projects: Iterable[Project], employee_id: str) -> List[Project]:
    """Employee view: only projects the employee is assigned to."""
    return [p for p in projects if any(a.id == employee_id for a in p.assignees)]
