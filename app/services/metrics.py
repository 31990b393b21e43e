"""
Metrics Aggregator

Single home for every dashboard derivation over a report set: averages,
consistency, submission reliability, red flags, contributor ranking,
time-bucketed series, goal alignment bands and per-criterion skill data.

Conventions:
- Inputs are reports already narrowed to (scope ∩ date window), unless a
  function says otherwise. Nothing here resolves scope.
- Windows are inclusive calendar dates; a report belongs to the day of its
  submission timestamp.
- Empty or zero-count inputs return 0, None or an empty list. No path divides
  by zero.
"""
import bisect
import calendar
import logging
import math
from collections import defaultdict
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from app.core.config import settings
from app.schemas.metrics import (
    BandBounds,
    ConsistencyResult,
    ContributorStat,
    CriterionAverage,
    EmployeeSnapshot,
    GoalAlignmentRow,
    Granularity,
    MetricsSnapshot,
    ProjectAverage,
    ReliabilityResult,
    SkillRadarPoint,
    TimeBucket,
)
from app.schemas.records import Employee, Goal, Project, Report, ReportFrequency
from app.schemas.scope import ScopeMode, ScopeResponse
from app.services.hierarchy import HierarchyIndex
from app.services.scope import filter_reports_by_scope, resolve
from app.services.visibility import visible_goals

logger = logging.getLogger(__name__)

# Days covered by one expected report, per cadence. Custom cadences expect none.
FREQUENCY_PERIOD_DAYS: Dict[ReportFrequency, int] = {
    ReportFrequency.DAILY: 1,
    ReportFrequency.WEEKLY: 7,
    ReportFrequency.BI_WEEKLY: 14,
    ReportFrequency.MONTHLY: 30,
}


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


# ---------------------------------------------------------------------------
# Windows
# ---------------------------------------------------------------------------

def in_window(report: Report, start_date: date, end_date: date) -> bool:
    return start_date <= report.submitted_on <= end_date


def filter_window(reports: Iterable[Report], start_date: date, end_date: date) -> List[Report]:
    return [r for r in reports if in_window(r, start_date, end_date)]


def days_in_window(start_date: date, end_date: date) -> int:
    return max(0, (end_date - start_date).days + 1)


def previous_period(start_date: date, end_date: date) -> Tuple[date, date]:
    """The equally long window that ends the day before `start_date`."""
    prev_end = start_date - timedelta(days=1)
    return prev_end - (end_date - start_date), prev_end


# ---------------------------------------------------------------------------
# Summary statistics
# ---------------------------------------------------------------------------

def average(reports: Sequence[Report]) -> float:
    if not reports:
        return 0.0
    return sum(r.evaluation_score for r in reports) / len(reports)


def consistency(reports: Sequence[Report]) -> Optional[ConsistencyResult]:
    """
    Steadiness of scores from the coefficient of variation.
    The x10 factor spreads typical CVs (0-10%) over most of the 0-100 range.
    """
    if len(reports) < 2:
        return None

    scores = [r.evaluation_score for r in reports]
    mean = sum(scores) / len(scores)
    variance = sum((s - mean) ** 2 for s in scores) / len(scores)
    std_dev = math.sqrt(variance)
    cv = (std_dev / mean) * 100 if mean > 0 else 0.0

    return ConsistencyResult(value=_clamp(100 - cv * 10), std_dev=std_dev, cv=cv)


# ---------------------------------------------------------------------------
# Submission reliability
# ---------------------------------------------------------------------------

def expected_reports(days: int, frequency: ReportFrequency, goal_count: int) -> int:
    period = FREQUENCY_PERIOD_DAYS.get(ReportFrequency(frequency))
    if not period or days <= 0 or goal_count <= 0:
        return 0
    # ceil(days * (1/period) * goals) without the float round-trip
    return -(-days * goal_count // period)


def _goals_by_project(goals: Iterable[Goal]) -> Dict[str, List[Goal]]:
    grouped: Dict[str, List[Goal]] = defaultdict(list)
    for goal in goals:
        grouped[goal.project_id].append(goal)
    return grouped


def submission_reliability(
    reports: Sequence[Report],
    projects: Iterable[Project],
    goals_in_scope: Iterable[Goal],
    start_date: date,
    end_date: date,
    trend_weeks: Optional[int] = None,
) -> Optional[ReliabilityResult]:
    """
    Actual vs. expected submissions over the window, summed across projects
    that have at least one goal in scope. None when nothing is expected.
    """
    if trend_weeks is None:
        trend_weeks = settings.analytics.reliability_trend_weeks

    grouped = _goals_by_project(goals_in_scope)
    windowed = filter_window(reports, start_date, end_date)
    days = days_in_window(start_date, end_date)

    # (frequency, goal count, goal ids) per contributing project
    contributing = []
    for project in projects:
        project_goals = grouped.get(project.id)
        if not project_goals:
            continue
        contributing.append((
            project.report_frequency,
            len(project_goals),
            {g.id for g in project_goals},
        ))

    total_expected = 0
    total_actual = 0
    for frequency, goal_count, goal_ids in contributing:
        total_expected += expected_reports(days, frequency, goal_count)
        total_actual += sum(1 for r in windowed if r.goal_id in goal_ids)

    if total_expected == 0:
        return None

    trend = []
    for weeks_back in range(trend_weeks - 1, -1, -1):
        week_end = end_date - timedelta(days=7 * weeks_back)
        week_start = week_end - timedelta(days=6)
        week_expected = 0
        week_actual = 0
        for frequency, goal_count, goal_ids in contributing:
            week_expected += expected_reports(7, frequency, goal_count)
            week_actual += sum(
                1 for r in windowed
                if r.goal_id in goal_ids and week_start <= r.submitted_on <= week_end
            )
        week_rate = (week_actual / week_expected) * 100 if week_expected > 0 else 0.0
        trend.append(_clamp(week_rate))

    return ReliabilityResult(
        rate=_clamp((total_actual / total_expected) * 100),
        expected=total_expected,
        actual=total_actual,
        trend=trend,
    )


# ---------------------------------------------------------------------------
# Report lists and rankings
# ---------------------------------------------------------------------------

def red_flags(
    reports: Iterable[Report],
    threshold: Optional[float] = None,
    limit: Optional[int] = None,
) -> List[Report]:
    """Reports below threshold, worst score first, then most recent first."""
    if threshold is None:
        threshold = settings.analytics.red_flag_threshold
    if limit is None:
        limit = settings.analytics.red_flag_limit

    flagged = [r for r in reports if r.evaluation_score < threshold]
    flagged.sort(key=lambda r: (r.evaluation_score, -r.submission_date.timestamp()))
    return flagged[:limit]


def recent_reports(reports: Iterable[Report], limit: Optional[int] = None) -> List[Report]:
    if limit is None:
        limit = settings.analytics.recent_reports_limit
    return sorted(reports, key=lambda r: r.submission_date.timestamp(), reverse=True)[:limit]


def rank_contributors(reports: Iterable[Report]) -> List[ContributorStat]:
    """Per-employee totals ranked by average score, then by report count."""
    totals: Dict[str, List[float]] = {}
    for report in reports:
        entry = totals.setdefault(report.employee_id, [0.0, 0])
        entry[0] += report.evaluation_score
        entry[1] += 1

    ranked = [
        ContributorStat(
            employee_id=employee_id,
            total_score=total,
            report_count=count,
            average_score=total / count,
        )
        for employee_id, (total, count) in totals.items()
    ]
    ranked.sort(key=lambda c: (-c.average_score, -c.report_count))
    return ranked


def top_contributors(reports: Iterable[Report], limit: Optional[int] = None) -> List[ContributorStat]:
    if limit is None:
        limit = settings.analytics.top_contributors_limit
    return rank_contributors(reports)[:limit]


def leaderboard_position(
    reports: Iterable[Report],
    employee_id: str,
    start_date: date,
    end_date: date,
) -> Optional[int]:
    """1-based rank over the whole, unscoped report set in the window."""
    ranked = rank_contributors(filter_window(reports, start_date, end_date))
    for position, contributor in enumerate(ranked, start=1):
        if contributor.employee_id == employee_id:
            return position
    return None


# ---------------------------------------------------------------------------
# Time series
# ---------------------------------------------------------------------------

def _week_label(start: date, end: date) -> str:
    return f"{start:%b} {start.day} - {end:%b} {end.day}"


def period_buckets(start_date: date, end_date: date, granularity: Granularity) -> List[TimeBucket]:
    """Calendar-aligned, gapless buckets covering the window."""
    buckets: List[TimeBucket] = []
    if end_date < start_date:
        return buckets

    if Granularity(granularity) == Granularity.WEEKLY:
        # date.weekday(): Monday == 0, so this steps back to Sunday
        current = start_date - timedelta(days=(start_date.weekday() + 1) % 7)
        while current <= end_date:
            bucket_end = current + timedelta(days=6)
            buckets.append(TimeBucket(period=_week_label(current, bucket_end), start=current, end=bucket_end))
            current += timedelta(days=7)
    else:
        current = date(start_date.year, start_date.month, 1)
        while current <= end_date:
            last_day = calendar.monthrange(current.year, current.month)[1]
            bucket_end = date(current.year, current.month, last_day)
            buckets.append(TimeBucket(period=f"{current:%b %Y}", start=current, end=bucket_end))
            current = bucket_end + timedelta(days=1)
    return buckets


def time_bucketed(
    reports: Iterable[Report],
    start_date: date,
    end_date: date,
    granularity: Granularity = Granularity.WEEKLY,
    threshold: Optional[float] = None,
) -> List[TimeBucket]:
    """Report totals and red-flag counts per period; empty periods are kept."""
    if threshold is None:
        threshold = settings.analytics.red_flag_threshold

    buckets = period_buckets(start_date, end_date, granularity)
    starts = [b.start for b in buckets]
    for report in reports:
        day = report.submitted_on
        position = bisect.bisect_right(starts, day) - 1
        if position < 0 or day > buckets[position].end:
            continue
        bucket = buckets[position]
        bucket.total += 1
        if report.evaluation_score < threshold:
            bucket.red_flag += 1
    return buckets


# ---------------------------------------------------------------------------
# Goal alignment
# ---------------------------------------------------------------------------

def goal_alignment(
    reports: Iterable[Report],
    goals: Iterable[Goal],
    projects: Iterable[Project],
    band_bounds: Optional[BandBounds] = None,
    limit: Optional[int] = None,
) -> List[GoalAlignmentRow]:
    """Per-goal report counts stacked into High / Medium / Low score bands."""
    if band_bounds is None:
        band_bounds = BandBounds(high=settings.analytics.band_high, mid=settings.analytics.band_mid)
    if limit is None:
        limit = settings.analytics.goal_alignment_limit

    by_goal: Dict[str, List[Report]] = defaultdict(list)
    for report in reports:
        by_goal[report.goal_id].append(report)
    project_names = {p.id: p.name for p in projects}

    rows = []
    seen = set()
    for goal in goals:
        goal_reports = by_goal.get(goal.id)
        if not goal_reports or goal.id in seen:
            continue
        seen.add(goal.id)
        high = sum(1 for r in goal_reports if r.evaluation_score >= band_bounds.high)
        medium = sum(1 for r in goal_reports if band_bounds.mid <= r.evaluation_score < band_bounds.high)
        rows.append(GoalAlignmentRow(
            goal_id=goal.id,
            goal=goal.name,
            project=project_names.get(goal.project_id, "Unknown"),
            total=len(goal_reports),
            high=high,
            medium=medium,
            low=len(goal_reports) - high - medium,
        ))

    rows.sort(key=lambda row: -row.total)
    return rows[:limit]


# ---------------------------------------------------------------------------
# Criteria / skills
# ---------------------------------------------------------------------------

def criteria_averages(reports: Iterable[Report]) -> List[CriterionAverage]:
    totals: Dict[str, List[float]] = {}
    for report in reports:
        for entry in report.criterion_scores:
            bucket = totals.setdefault(entry.criterion_name, [0.0, 0])
            bucket[0] += entry.score
            bucket[1] += 1
    return [
        CriterionAverage(name=name, average_score=total / count, frequency=count)
        for name, (total, count) in totals.items()
    ]


def key_skills(reports: Iterable[Report], limit: Optional[int] = None) -> List[CriterionAverage]:
    """Most frequently scored criteria, ties broken by higher average."""
    if limit is None:
        limit = settings.analytics.key_skills_limit
    skills = criteria_averages(reports)
    skills.sort(key=lambda s: (-s.frequency, -s.average_score))
    return skills[:limit]


def skill_radar(
    current: Iterable[Report],
    previous: Iterable[Report],
    limit: Optional[int] = None,
) -> List[SkillRadarPoint]:
    """Current-period key skills next to the prior period's averages (0 when unscored)."""
    if limit is None:
        limit = settings.analytics.radar_limit
    previous_scores = {c.name: c.average_score for c in criteria_averages(previous)}
    return [
        SkillRadarPoint(
            skill=skill.name,
            current=skill.average_score,
            previous=previous_scores.get(skill.name, 0.0),
        )
        for skill in key_skills(current, limit=limit)
    ]


def project_averages(
    reports: Iterable[Report],
    goals: Iterable[Goal],
    projects: Iterable[Project],
) -> List[ProjectAverage]:
    goal_projects = {g.id: g.project_id for g in goals}
    project_names = {p.id: p.name for p in projects}

    scores: Dict[str, List[float]] = {}
    for report in reports:
        project_id = goal_projects.get(report.goal_id)
        if project_id is None:
            continue
        scores.setdefault(project_id, []).append(report.evaluation_score)

    return [
        ProjectAverage(
            project_id=project_id,
            project=project_names.get(project_id, "Unknown"),
            report_count=len(values),
            average_score=sum(values) / len(values),
        )
        for project_id, values in scores.items()
    ]


# ---------------------------------------------------------------------------
# Snapshots
# ---------------------------------------------------------------------------

def build_manager_snapshot(
    manager_id: str,
    mode: ScopeMode,
    employees: Sequence[Employee],
    projects: Sequence[Project],
    goals: Sequence[Goal],
    reports: Sequence[Report],
    start_date: date,
    end_date: date,
    granularity: Granularity = Granularity.WEEKLY,
) -> MetricsSnapshot:
    """Recompute every manager dashboard figure for one (scope, window) pair."""
    index = HierarchyIndex(employees)
    scope = resolve(manager_id, mode, employees, index)
    goals_in_scope = visible_goals(goals, projects, employees, manager_id, index)
    windowed = filter_window(filter_reports_by_scope(reports, scope), start_date, end_date)

    logger.info(
        "Building manager snapshot",
        extra={
            "manager_id": manager_id,
            "requested_mode": scope.requested_mode.value,
            "mode": scope.mode.value,
            "scope_size": len(scope.employee_ids),
            "report_count": len(windowed),
        },
    )

    return MetricsSnapshot(
        scope=ScopeResponse.from_scope(scope),
        start_date=start_date,
        end_date=end_date,
        report_count=len(windowed),
        average_score=average(windowed),
        consistency=consistency(windowed),
        reliability=submission_reliability(windowed, projects, goals_in_scope, start_date, end_date),
        red_flags=red_flags(windowed),
        recent_reports=recent_reports(windowed),
        top_contributors=top_contributors(windowed),
        trend=time_bucketed(windowed, start_date, end_date, granularity),
        goal_alignment=goal_alignment(windowed, goals_in_scope, projects),
        criteria_averages=criteria_averages(windowed),
    )


def build_employee_snapshot(
    employee_id: str,
    projects: Sequence[Project],
    goals: Sequence[Goal],
    reports: Sequence[Report],
    start_date: date,
    end_date: date,
    granularity: Granularity = Granularity.WEEKLY,
) -> EmployeeSnapshot:
    """Self view over the employee's own reports, compared with the prior period."""
    own = [r for r in reports if r.employee_id == employee_id]
    windowed = filter_window(own, start_date, end_date)
    prev_start, prev_end = previous_period(start_date, end_date)
    previous = filter_window(own, prev_start, prev_end)

    return EmployeeSnapshot(
        employee_id=employee_id,
        start_date=start_date,
        end_date=end_date,
        report_count=len(windowed),
        average_score=average(windowed),
        consistency=consistency(windowed),
        leaderboard_position=leaderboard_position(reports, employee_id, start_date, end_date),
        key_skills=key_skills(windowed),
        skill_radar=skill_radar(windowed, previous),
        project_averages=project_averages(windowed, goals, projects),
        trend=time_bucketed(windowed, start_date, end_date, granularity),
    )
