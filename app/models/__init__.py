# Models package
# Importing modules here ensures they are registered with SQLAlchemy Base
from . import employee, project, goal, report

# Explicit class exports for cleaner imports
from .employee import Employee, EmployeeRole
from .project import Project, ProjectAssignee
from .goal import Goal, GoalCriterion
from .report import Report, ReportCriterionScore

__all__ = [
    "Employee",
    "EmployeeRole",
    "Project",
    "ProjectAssignee",
    "Goal",
    "GoalCriterion",
    "Report",
    "ReportCriterionScore",
]
