import pytest
import os
from datetime import datetime
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set env before importing app components
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ.setdefault("OPENROUTER_API_KEY", "")

from app.database import Base, get_db
from app.main import app
from fastapi.testclient import TestClient

# SQLite in-memory database configuration
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

@pytest.fixture(scope="session", autouse=True)
def setup_database():
    """Create tables once for the whole test session."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)

@pytest.fixture(scope="function")
def db_session():
    """Get a clean database session for each test function with rollback safety."""
    connection = engine.connect()
    transaction = connection.begin()
    session = TestingSessionLocal(bind=connection)

    yield session

    session.close()
    transaction.rollback()
    connection.close()

@pytest.fixture(scope="function")
def org_data(db_session):
    """
    A small organization:

        owner (account owner)
          └── boss (manager)
                ├── alice
                └── lead (manager)
                      └── bob
        outsider (manager, no reports)

    Project "apollo" is assigned to alice, "hermes" to bob.
    """
    from app.models.employee import Employee
    from app.models.project import Project, ProjectAssignee
    from app.models.goal import Goal, GoalCriterion
    from app.models.report import Report, ReportCriterionScore
    from app.schemas.records import EmployeeRole

    org_id = "org-test"
    people = [
        Employee(id="owner", organization_id=org_id, name="Owner", role=EmployeeRole.MANAGER, is_account_owner=True),
        Employee(id="boss", organization_id=org_id, name="Boss", role=EmployeeRole.MANAGER, manager_id="owner"),
        Employee(id="alice", organization_id=org_id, name="Alice", role=EmployeeRole.EMPLOYEE, manager_id="boss"),
        Employee(id="lead", organization_id=org_id, name="Lead", role=EmployeeRole.MANAGER, manager_id="boss"),
        Employee(id="bob", organization_id=org_id, name="Bob", role=EmployeeRole.EMPLOYEE, manager_id="lead"),
        Employee(id="outsider", organization_id=org_id, name="Outsider", role=EmployeeRole.MANAGER),
    ]
    db_session.add_all(people)

    apollo = Project(id="apollo", organization_id=org_id, name="Apollo", report_frequency="weekly", created_by="boss")
    apollo.assignees = [ProjectAssignee(assignee_id="alice", assignee_type="employee", position=0)]
    hermes = Project(id="hermes", organization_id=org_id, name="Hermes", report_frequency="weekly", created_by="lead")
    hermes.assignees = [ProjectAssignee(assignee_id="bob", assignee_type="employee", position=0)]
    db_session.add_all([apollo, hermes])

    launch = Goal(id="launch", name="Launch", project_id="apollo", created_by="boss")
    launch.criteria = [
        GoalCriterion(id="launch-quality", name="Quality", weight=60, position=0),
        GoalCriterion(id="launch-speed", name="Speed", weight=40, position=1),
    ]
    courier = Goal(id="courier", name="Courier", project_id="hermes", created_by="lead")
    db_session.add_all([launch, courier])

    def _report(report_id, employee_id, goal_id, day, score, reasoning=""):
        row = Report(
            id=report_id,
            goal_id=goal_id,
            employee_id=employee_id,
            submission_date=datetime(2025, 3, day, 10, 0),
            evaluation_score=score,
            evaluation_reasoning=reasoning,
        )
        row.criterion_scores = [
            ReportCriterionScore(criterion_name="Quality", score=score, position=0),
        ]
        return row

    db_session.add_all([
        _report("r-alice-1", "alice", "launch", 3, 9.0, "Shipped the release checklist."),
        _report("r-alice-2", "alice", "launch", 10, 5.0, "Blocked on reviews."),
        _report("r-bob-1", "bob", "courier", 4, 7.0, "Routing service done."),
    ])
    db_session.commit()
    return {"organization_id": org_id}

@pytest.fixture(scope="function")
def as_employee():
    """Headers identifying the acting employee."""
    def _headers(employee_id):
        return {"X-Employee-ID": employee_id}
    return _headers

@pytest.fixture(scope="function")
def client(db_session):
    """Get a TestClient that uses the test database session via dependency override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
