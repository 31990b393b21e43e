"""
Seed a small demo organization for local development.
Run from the repository root: python -m scripts.seed_demo
"""
from datetime import datetime, timedelta, timezone

from app.database import init_db, session_scope
from app.models.employee import Employee
from app.models.goal import Goal, GoalCriterion
from app.models.project import Project, ProjectAssignee
from app.models.report import Report, ReportCriterionScore
from app.schemas.records import EmployeeRole

ORG_ID = "demo-org"


def create_employee(db, employee_id, name, role, manager_id=None, **flags):
    # Check if the employee already exists to keep the script re-runnable
    if db.query(Employee).filter(Employee.id == employee_id).first():
        print(f"Employee {employee_id} already exists. Skipping.")
        return
    db.add(Employee(
        id=employee_id,
        organization_id=ORG_ID,
        name=name,
        email=f"{employee_id}@example.com",
        role=role,
        manager_id=manager_id,
        **flags,
    ))
    db.commit()
    print(f"Created {role.value} -> {employee_id}")


def create_project(db, project_id, name, assignee_ids, created_by):
    if db.query(Project).filter(Project.id == project_id).first():
        print(f"Project {project_id} already exists. Skipping.")
        return
    project = Project(id=project_id, organization_id=ORG_ID, name=name, created_by=created_by)
    project.assignees = [
        ProjectAssignee(assignee_id=assignee_id, position=position)
        for position, assignee_id in enumerate(assignee_ids)
    ]
    db.add(project)
    goal = Goal(id=f"{project_id}-goal", name=f"{name} milestone", project_id=project_id, created_by=created_by)
    goal.criteria = [
        GoalCriterion(name="Quality", weight=50, position=0),
        GoalCriterion(name="Delivery", weight=30, position=1),
        GoalCriterion(name="Communication", weight=20, position=2),
    ]
    db.add(goal)
    db.commit()
    print(f"Created project -> {project_id}")


def create_reports(db, employee_id, goal_id, scores):
    today = datetime.now(timezone.utc)
    for weeks_back, score in enumerate(scores):
        report = Report(
            goal_id=goal_id,
            employee_id=employee_id,
            submission_date=today - timedelta(weeks=weeks_back),
            evaluation_score=score,
            evaluation_reasoning=f"Weekly update scored {score}/10.",
        )
        report.criterion_scores = [
            ReportCriterionScore(criterion_name="Quality", score=score, position=0),
            ReportCriterionScore(criterion_name="Delivery", score=max(0.0, score - 1), position=1),
        ]
        db.add(report)
    db.commit()
    print(f"Created {len(scores)} reports -> {employee_id}")


def main():
    init_db()
    with session_scope() as db:
        create_employee(db, "owner", "Olivia Owner", EmployeeRole.MANAGER, is_account_owner=True)
        create_employee(db, "director", "Dana Director", EmployeeRole.MANAGER, "owner", can_view_organization_wide=True)
        create_employee(db, "lead", "Lee Lead", EmployeeRole.MANAGER, "director")
        create_employee(db, "dev1", "Sam Developer", EmployeeRole.EMPLOYEE, "lead")
        create_employee(db, "dev2", "Kim Developer", EmployeeRole.EMPLOYEE, "lead")
        create_employee(db, "analyst", "Ari Analyst", EmployeeRole.EMPLOYEE, "director")

        create_project(db, "platform", "Platform", ["dev1", "dev2"], "lead")
        create_project(db, "insights", "Insights", ["analyst"], "director")

        if not db.query(Report).filter(Report.employee_id == "dev1").first():
            create_reports(db, "dev1", "platform-goal", [8.5, 7.0, 9.0, 6.5])
            create_reports(db, "dev2", "platform-goal", [5.5, 6.0, 7.5])
            create_reports(db, "analyst", "insights-goal", [8.0, 8.0])


if __name__ == "__main__":
    main()
