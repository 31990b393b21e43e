from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date
from enum import Enum

from app.schemas.records import Report
from app.schemas.scope import ScopeResponse


class Granularity(str, Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class ConsistencyResult(BaseModel):
    value: float  # 0-100, higher is steadier
    std_dev: float
    cv: float  # coefficient of variation, percent


class ReliabilityResult(BaseModel):
    rate: float  # 0-100
    expected: int
    actual: int
    trend: List[float] = Field(default_factory=list)  # oldest week first


class ContributorStat(BaseModel):
    employee_id: str
    total_score: float
    report_count: int
    average_score: float


class TimeBucket(BaseModel):
    period: str
    start: date
    end: date
    total: int = 0
    red_flag: int = 0


class GoalAlignmentRow(BaseModel):
    goal_id: str
    goal: str
    project: str
    total: int
    high: int
    medium: int
    low: int


class BandBounds(BaseModel):
    high: float = 8.0
    mid: float = 6.0


class CriterionAverage(BaseModel):
    name: str
    average_score: float
    frequency: int


class SkillRadarPoint(BaseModel):
    skill: str
    current: float
    previous: float


class ProjectAverage(BaseModel):
    project_id: str
    project: str
    report_count: int
    average_score: float


class MetricsSnapshot(BaseModel):
    """Aggregate output for one (scope, date-window) pair. Never persisted."""
    scope: ScopeResponse
    start_date: date
    end_date: date
    report_count: int
    average_score: float
    consistency: Optional[ConsistencyResult] = None
    reliability: Optional[ReliabilityResult] = None
    red_flags: List[Report] = Field(default_factory=list)
    recent_reports: List[Report] = Field(default_factory=list)
    top_contributors: List[ContributorStat] = Field(default_factory=list)
    trend: List[TimeBucket] = Field(default_factory=list)
    goal_alignment: List[GoalAlignmentRow] = Field(default_factory=list)
    criteria_averages: List[CriterionAverage] = Field(default_factory=list)


class EmployeeSnapshot(BaseModel):
    """Self view: the employee's own reports, no scope resolution."""
    employee_id: str
    start_date: date
    end_date: date
    report_count: int
    average_score: float
    consistency: Optional[ConsistencyResult] = None
    leaderboard_position: Optional[int] = None
    key_skills: List[CriterionAverage] = Field(default_factory=list)
    skill_radar: List[SkillRadarPoint] = Field(default_factory=list)
    project_averages: List[ProjectAverage] = Field(default_factory=list)
    trend: List[TimeBucket] = Field(default_factory=list)
