"""
Dataset Service Layer

Reads the four collections the engine consumes (employees, projects, goals,
reports) for one organization and converts ORM rows into plain records.
Writes back the only mutations the engine produces: score overrides and
committed goal criteria.

Architecture:
- Router -> Dataset (this module) -> Models
- Router -> Engine services (pure, record based)
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from app.core.exceptions import NotFoundError
from app.models.employee import Employee as EmployeeRow
from app.models.goal import Goal as GoalRow, GoalCriterion as GoalCriterionRow
from app.models.project import Project as ProjectRow
from app.models.report import Report as ReportRow
from app.schemas.records import (
    Assignee,
    AssigneeType,
    Criterion,
    CriterionScore,
    Employee,
    EmployeePermissions,
    Goal,
    Project,
    Report,
    ReportFrequency,
)

logger = logging.getLogger(__name__)


@dataclass
class Dataset:
    employees: List[Employee] = field(default_factory=list)
    projects: List[Project] = field(default_factory=list)
    goals: List[Goal] = field(default_factory=list)
    reports: List[Report] = field(default_factory=list)

    def employee(self, employee_id: str) -> Optional[Employee]:
        return next((e for e in self.employees if e.id == employee_id), None)

    def report(self, report_id: str) -> Optional[Report]:
        return next((r for r in self.reports if r.id == report_id), None)

    def goal(self, goal_id: str) -> Optional[Goal]:
        return next((g for g in self.goals if g.id == goal_id), None)


# ---------------------------------------------------------------------------
# Row -> record conversion
# ---------------------------------------------------------------------------

def employee_record(row: EmployeeRow) -> Employee:
    flags = (row.can_view_organization_wide, row.can_manage_settings, row.can_set_global_frequency)
    permissions = None
    if any(flag is not None for flag in flags):
        permissions = EmployeePermissions(
            can_view_organization_wide=row.can_view_organization_wide,
            can_manage_settings=row.can_manage_settings,
            can_set_global_frequency=row.can_set_global_frequency,
        )
    return Employee(
        id=row.id,
        organization_id=row.organization_id,
        name=row.name,
        email=row.email,
        title=row.title,
        role=row.role,
        manager_id=row.manager_id or None,
        is_account_owner=row.is_account_owner,
        permissions=permissions,
    )


def _frequency(value: Optional[str]) -> ReportFrequency:
    try:
        return ReportFrequency(value)
    except ValueError:
        logger.warning(f"Unknown report frequency {value!r}, treating as custom")
        return ReportFrequency.CUSTOM


def project_record(row: ProjectRow) -> Project:
    assignees = []
    seen = set()
    for assignee in row.assignees:
        if assignee.assignee_id in seen:
            continue  # first occurrence wins
        seen.add(assignee.assignee_id)
        try:
            assignee_type = AssigneeType(assignee.assignee_type)
        except ValueError:
            assignee_type = AssigneeType.EMPLOYEE
        assignees.append(Assignee(id=assignee.assignee_id, type=assignee_type))

    return Project(
        id=row.id,
        organization_id=row.organization_id,
        name=row.name,
        category=row.category,
        description=row.description,
        assignees=assignees,
        report_frequency=_frequency(row.report_frequency),
        created_by=row.created_by,
    )


def goal_record(row: GoalRow) -> Goal:
    return Goal(
        id=row.id,
        name=row.name,
        project_id=row.project_id,
        criteria=[Criterion(id=c.id, name=c.name, weight=c.weight) for c in row.criteria],
        instructions=row.instructions,
        deadline=row.deadline,
        created_by=row.created_by,
        manager_id=row.manager_id,
    )


def report_record(row: ReportRow) -> Report:
    return Report(
        id=row.id,
        goal_id=row.goal_id,
        employee_id=row.employee_id,
        submission_date=row.submission_date,
        evaluation_score=row.evaluation_score or 0.0,
        evaluation_reasoning=row.evaluation_reasoning or "",
        criterion_scores=[
            CriterionScore(criterion_name=s.criterion_name, score=s.score) for s in row.criterion_scores
        ],
        report_text=row.report_text,
        manager_overall_score=row.manager_overall_score,
        manager_override_reasoning=row.manager_override_reasoning,
    )


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------

def get_employee(db: Session, employee_id: str) -> Employee:
    row = db.query(EmployeeRow).filter(EmployeeRow.id == employee_id).first()
    if row is None:
        raise NotFoundError("Employee", employee_id)
    return employee_record(row)


def get_report(db: Session, report_id: str) -> Report:
    row = (
        db.query(ReportRow)
        .options(selectinload(ReportRow.criterion_scores))
        .filter(ReportRow.id == report_id)
        .first()
    )
    if row is None:
        raise NotFoundError("Report", report_id)
    return report_record(row)


def load_dataset(db: Session, organization_id: str) -> Dataset:
    """All four collections of one organization, as records."""
    employees = db.query(EmployeeRow).filter(EmployeeRow.organization_id == organization_id).all()
    projects = (
        db.query(ProjectRow)
        .options(selectinload(ProjectRow.assignees))
        .filter(ProjectRow.organization_id == organization_id)
        .all()
    )
    project_ids = [p.id for p in projects]
    employee_ids = [e.id for e in employees]

    # Goals with a dangling project stay reachable through authorship
    goals = (
        db.query(GoalRow)
        .options(selectinload(GoalRow.criteria))
        .filter(or_(
            GoalRow.project_id.in_(project_ids),
            GoalRow.created_by.in_(employee_ids),
            GoalRow.manager_id.in_(employee_ids),
        ))
        .all()
    ) if project_ids or employee_ids else []
    reports = (
        db.query(ReportRow)
        .options(selectinload(ReportRow.criterion_scores))
        .filter(ReportRow.employee_id.in_(employee_ids))
        .all()
    ) if employee_ids else []

    dataset = Dataset(
        employees=[employee_record(e) for e in employees],
        projects=[project_record(p) for p in projects],
        goals=[goal_record(g) for g in goals],
        reports=[report_record(r) for r in reports],
    )
    logger.info(
        "Loaded organization dataset",
        extra={
            "organization_id": organization_id,
            "employees": len(dataset.employees),
            "projects": len(dataset.projects),
            "goals": len(dataset.goals),
            "reports": len(dataset.reports),
        },
    )
    return dataset


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------

def save_report_override(db: Session, report: Report) -> Report:
    row = db.query(ReportRow).filter(ReportRow.id == report.id).first()
    if row is None:
        raise NotFoundError("Report", report.id)
    row.manager_overall_score = report.manager_overall_score
    row.manager_override_reasoning = report.manager_override_reasoning
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(row)
    return report_record(row)


def save_goal_criteria(db: Session, goal: Goal) -> Goal:
    row = db.query(GoalRow).filter(GoalRow.id == goal.id).first()
    if row is None:
        raise NotFoundError("Goal", goal.id)
    try:
        # Flush the removals first so re-used criterion ids do not collide
        row.criteria.clear()
        db.flush()
        row.criteria = [
            GoalCriterionRow(id=c.id, name=c.name, weight=c.weight, position=position)
            for position, c in enumerate(goal.criteria)
        ]
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(row)
    return goal_record(row)
