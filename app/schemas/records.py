"""
Plain records the scope and analytics engine operates on.
Every optional field is explicit; the engine never reads ORM rows directly.
"""
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional
from datetime import date, datetime
from enum import Enum


class EmployeeRole(str, Enum):
    MANAGER = "manager"
    EMPLOYEE = "employee"


class ReportFrequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    BI_WEEKLY = "bi-weekly"
    MONTHLY = "monthly"
    CUSTOM = "custom"  # no fixed cadence, never expected


class AssigneeType(str, Enum):
    EMPLOYEE = "employee"
    MANAGER = "manager"


class EmployeePermissions(BaseModel):
    model_config = ConfigDict(frozen=True)

    can_view_organization_wide: Optional[bool] = None
    can_manage_settings: Optional[bool] = None
    can_set_global_frequency: Optional[bool] = None


class Employee(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    organization_id: str
    name: str
    role: EmployeeRole = EmployeeRole.EMPLOYEE
    email: Optional[str] = None
    title: Optional[str] = None
    manager_id: Optional[str] = None  # None marks a root/owner
    is_account_owner: Optional[bool] = None
    permissions: Optional[EmployeePermissions] = None


class Assignee(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    type: AssigneeType = AssigneeType.EMPLOYEE


class Project(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    organization_id: str
    name: str
    category: Optional[str] = None
    description: Optional[str] = None
    assignees: List[Assignee] = Field(default_factory=list)
    report_frequency: ReportFrequency = ReportFrequency.WEEKLY
    created_by: Optional[str] = None

    @field_validator("assignees")
    @classmethod
    def unique_assignees(cls, assignees: List[Assignee]) -> List[Assignee]:
        seen = set()
        for assignee in assignees:
            if assignee.id in seen:
                raise ValueError(f"Duplicate assignee '{assignee.id}'")
            seen.add(assignee.id)
        return assignees


class Criterion(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    weight: int  # Percentage (e.g., 40 for 40%)


class Goal(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    project_id: str
    criteria: List[Criterion] = Field(default_factory=list)
    instructions: Optional[str] = None
    deadline: Optional[date] = None
    created_by: Optional[str] = None
    manager_id: Optional[str] = None


class CriterionScore(BaseModel):
    model_config = ConfigDict(frozen=True)

    criterion_name: str
    score: float


class Report(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    goal_id: str
    employee_id: str
    submission_date: datetime
    evaluation_score: float = 0.0
    evaluation_reasoning: str = ""
    criterion_scores: List[CriterionScore] = Field(default_factory=list)
    report_text: Optional[str] = None
    manager_overall_score: Optional[float] = None
    manager_override_reasoning: Optional[str] = None

    @property
    def effective_score(self) -> float:
        """Score shown to readers: the manager override when present."""
        if self.manager_overall_score is not None:
            return self.manager_overall_score
        return self.evaluation_score

    @property
    def submitted_on(self) -> date:
        return self.submission_date.date()
