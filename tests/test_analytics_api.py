from datetime import datetime

import pytest

from app.core.exceptions import AIError
from app.services import summary_ai

WINDOW = {"start_date": "2025-03-01", "end_date": "2025-03-31"}


# --- actor identity ---

def test_missing_actor_header_is_rejected(client, org_data):
    response = client.get("/api/scope")
    assert response.status_code == 401
    assert response.json()["errors"][0]["code"] == "AUTH_FAILED"


def test_unknown_actor_is_rejected(client, org_data, as_employee):
    response = client.get("/api/scope", headers=as_employee("ghost"))
    assert response.status_code == 401


# --- scope ---

def test_scope_reporting_chain(client, org_data, as_employee):
    response = client.get("/api/scope", params={"mode": "reporting-chain"}, headers=as_employee("boss"))
    assert response.status_code == 200
    assert response.json()["employee_ids"] == ["alice", "bob", "lead"]


def test_scope_organization_falls_back_without_permission(client, org_data, as_employee):
    data = client.get("/api/scope", params={"mode": "organization"}, headers=as_employee("boss")).json()
    assert data["requested_mode"] == "organization"
    assert data["mode"] == "direct-reports"
    assert data["fell_back"] is True
    assert data["employee_ids"] == ["alice", "lead"]


def test_scope_organization_for_owner(client, org_data, as_employee):
    data = client.get("/api/scope", params={"mode": "organization"}, headers=as_employee("owner")).json()
    assert data["mode"] == "organization"
    assert len(data["employee_ids"]) == 6


def test_employee_gets_self_scope(client, org_data, as_employee):
    data = client.get("/api/scope", params={"mode": "reporting-chain"}, headers=as_employee("alice")).json()
    assert data["mode"] == "self"
    assert data["employee_ids"] == ["alice"]


def test_invalid_mode_is_a_validation_error(client, org_data, as_employee):
    response = client.get("/api/scope", params={"mode": "galaxy"}, headers=as_employee("boss"))
    assert response.status_code == 422
    assert response.json()["errors"][0]["field"] == "mode"


# --- goals ---

def test_visible_goals_for_managers(client, org_data, as_employee):
    boss = client.get("/api/goals/visible", headers=as_employee("boss")).json()
    assert [(g["goal"]["id"], g["can_edit"]) for g in boss] == [("launch", True)]

    lead = client.get("/api/goals/visible", headers=as_employee("lead")).json()
    assert [g["goal"]["id"] for g in lead] == ["courier"]


def test_visible_goals_for_employee(client, org_data, as_employee):
    alice = client.get("/api/goals/visible", headers=as_employee("alice")).json()
    assert [(g["goal"]["id"], g["can_edit"]) for g in alice] == [("launch", False)]


def test_update_criteria(client, org_data, as_employee):
    response = client.put(
        "/api/goals/launch/criteria",
        headers=as_employee("boss"),
        json={"criteria": [
            {"id": "launch-quality", "name": "Quality", "weight": 50},
            {"id": "launch-speed", "name": "Speed", "weight": 30},
            {"name": "Docs", "weight": 20},
        ]},
    )
    assert response.status_code == 200
    assert [(c["name"], c["weight"]) for c in response.json()["criteria"]] == [
        ("Quality", 50), ("Speed", 30), ("Docs", 20),
    ]


def test_update_criteria_rejects_bad_total(client, org_data, as_employee):
    response = client.put(
        "/api/goals/launch/criteria",
        headers=as_employee("boss"),
        json={"criteria": [{"name": "Quality", "weight": 60}, {"name": "Speed", "weight": 30}]},
    )
    assert response.status_code == 422
    assert response.json()["errors"][0]["code"] == "INVALID_CRITERIA_WEIGHTS"

    goals = client.get("/api/goals/visible", headers=as_employee("boss")).json()
    assert [c["weight"] for c in goals[0]["goal"]["criteria"]] == [60, 40]


def test_update_criteria_rejects_repeated_ids(client, org_data, as_employee):
    response = client.put(
        "/api/goals/launch/criteria",
        headers=as_employee("boss"),
        json={"criteria": [
            {"id": "dup", "name": "Quality", "weight": 50},
            {"id": "dup", "name": "Speed", "weight": 50},
        ]},
    )
    assert response.status_code == 422
    assert response.json()["errors"][0]["code"] == "INVALID_CRITERIA_WEIGHTS"

    goals = client.get("/api/goals/visible", headers=as_employee("boss")).json()
    assert [c["id"] for c in goals[0]["goal"]["criteria"]] == ["launch-quality", "launch-speed"]


def test_update_criteria_ignores_ids_of_other_goals(client, org_data, as_employee):
    response = client.put(
        "/api/goals/courier/criteria",
        headers=as_employee("lead"),
        json={"criteria": [{"id": "launch-quality", "name": "Quality", "weight": 100}]},
    )
    assert response.status_code == 200
    [criterion] = response.json()["criteria"]
    assert criterion["id"] != "launch-quality"

    launch = client.get("/api/goals/visible", headers=as_employee("boss")).json()[0]["goal"]
    assert [c["id"] for c in launch["criteria"]] == ["launch-quality", "launch-speed"]


def test_update_criteria_requires_authorship(client, org_data, as_employee):
    response = client.put(
        "/api/goals/launch/criteria",
        headers=as_employee("lead"),
        json={"criteria": [{"name": "Quality", "weight": 100}]},
    )
    assert response.status_code == 403


def test_update_criteria_unknown_goal(client, org_data, as_employee):
    response = client.put(
        "/api/goals/nope/criteria",
        headers=as_employee("boss"),
        json={"criteria": [{"name": "Quality", "weight": 100}]},
    )
    assert response.status_code == 404


# --- projects ---

@pytest.mark.parametrize("actor, mode, expected", [
    ("boss", "direct-reports", {"apollo"}),
    ("boss", "reporting-chain", {"apollo", "hermes"}),
    ("lead", "direct-reports", {"hermes"}),
    ("owner", "direct-reports", {"apollo", "hermes"}),
    ("alice", "organization", {"apollo"}),
    ("outsider", "reporting-chain", set()),
])
def test_visible_projects(client, org_data, as_employee, actor, mode, expected):
    response = client.get("/api/projects/visible", params={"mode": mode}, headers=as_employee(actor))
    assert response.status_code == 200
    assert {p["id"] for p in response.json()} == expected


# --- dashboards ---

def test_dashboard_direct_reports(client, org_data, as_employee):
    response = client.get("/api/analytics/dashboard", params=WINDOW, headers=as_employee("boss"))
    assert response.status_code == 200
    data = response.json()
    assert data["report_count"] == 2
    assert data["average_score"] == 7.0
    assert [r["id"] for r in data["red_flags"]] == ["r-alice-2"]
    assert data["reliability"]["expected"] == 5
    assert data["reliability"]["actual"] == 2


def test_dashboard_reporting_chain(client, org_data, as_employee):
    params = dict(WINDOW, mode="reporting-chain", granularity="monthly")
    data = client.get("/api/analytics/dashboard", params=params, headers=as_employee("boss")).json()
    assert data["report_count"] == 3
    assert [c["employee_id"] for c in data["top_contributors"]] == ["alice", "bob"]
    assert [b["period"] for b in data["trend"]] == ["Mar 2025"]
    assert data["trend"][0]["total"] == 3


def test_dashboard_is_for_managers(client, org_data, as_employee):
    response = client.get("/api/analytics/dashboard", params=WINDOW, headers=as_employee("alice"))
    assert response.status_code == 403


def test_dashboard_rejects_reversed_window(client, org_data, as_employee):
    params = {"start_date": "2025-03-31", "end_date": "2025-03-01"}
    response = client.get("/api/analytics/dashboard", params=params, headers=as_employee("boss"))
    assert response.status_code == 422


def test_my_analytics(client, org_data, as_employee):
    alice = client.get("/api/analytics/me", params=WINDOW, headers=as_employee("alice")).json()
    assert alice["report_count"] == 2
    assert alice["leaderboard_position"] == 1
    assert alice["consistency"]["std_dev"] == 2.0

    bob = client.get("/api/analytics/me", params=WINDOW, headers=as_employee("bob")).json()
    assert bob["leaderboard_position"] == 2


# --- summaries ---

def test_self_summary(client, org_data, as_employee, monkeypatch):
    monkeypatch.setattr(summary_ai, "call_openrouter", lambda messages, temperature=None: "Solid month.")
    response = client.post(
        "/api/analytics/summary",
        headers=as_employee("alice"),
        json=dict(WINDOW, kind="self"),
    )
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["text"] == "Solid month."
    assert data["token"] >= 1


def test_team_summary_failure_falls_back(client, org_data, as_employee, monkeypatch):
    def failing(messages, temperature=None):
        raise AIError("AI service reached timeout limit.")

    monkeypatch.setattr(summary_ai, "call_openrouter", failing)
    response = client.post(
        "/api/analytics/summary",
        headers=as_employee("boss"),
        json=dict(WINDOW, kind="team", mode="reporting-chain"),
    )
    assert response.status_code == 200
    assert response.json()["status"] == "failed"
    assert response.json()["text"] == "Failed to generate summary."


def test_team_summary_is_for_managers(client, org_data, as_employee):
    response = client.post("/api/analytics/summary", headers=as_employee("alice"), json={"kind": "team"})
    assert response.status_code == 403


def test_summary_tokens_increase_per_viewer(client, org_data, as_employee, monkeypatch):
    monkeypatch.setattr(summary_ai, "call_openrouter", lambda messages, temperature=None: "ok")
    first = client.post("/api/analytics/summary", headers=as_employee("bob"), json=WINDOW).json()
    second = client.post("/api/analytics/summary", headers=as_employee("bob"), json=WINDOW).json()
    assert second["token"] > first["token"]


# --- overrides ---

def test_override_and_clear(client, org_data, as_employee):
    response = client.put(
        "/api/reports/r-alice-2/override",
        headers=as_employee("boss"),
        json={"score": 7.5, "reasoning": "  Reviews were blocked by another team.  "},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["state"] == "overridden"
    assert data["effective_score"] == 7.5
    assert data["report"]["evaluation_score"] == 5.0
    assert data["report"]["manager_override_reasoning"] == "Reviews were blocked by another team."

    # aggregates keep using the oracle score
    dashboard = client.get("/api/analytics/dashboard", params=WINDOW, headers=as_employee("boss")).json()
    assert dashboard["average_score"] == 7.0

    cleared = client.delete("/api/reports/r-alice-2/override", headers=as_employee("boss")).json()
    assert cleared["state"] == "no_override"
    assert cleared["report"]["manager_overall_score"] is None
    assert cleared["report"]["manager_override_reasoning"] is None


def test_clear_without_override_is_a_noop(client, org_data, as_employee):
    response = client.delete("/api/reports/r-alice-1/override", headers=as_employee("boss"))
    assert response.status_code == 200
    assert response.json()["state"] == "no_override"


@pytest.mark.parametrize("payload", [
    {"score": 7.0, "reasoning": "   "},
    {"score": 7.0},
    {"score": 10.5, "reasoning": "Too generous"},
    {"score": -1, "reasoning": "Too harsh"},
])
def test_invalid_override_leaves_report_unchanged(client, org_data, as_employee, payload):
    response = client.put("/api/reports/r-alice-2/override", headers=as_employee("boss"), json=payload)
    assert response.status_code == 422
    assert response.json()["errors"][0]["code"] == "INVALID_OVERRIDE"

    cleared = client.delete("/api/reports/r-alice-2/override", headers=as_employee("boss")).json()
    assert cleared["state"] == "no_override"


@pytest.mark.parametrize("actor, status_code", [("owner", 403), ("lead", 403), ("alice", 403)])
def test_override_is_direct_manager_only(client, org_data, as_employee, actor, status_code):
    response = client.put(
        "/api/reports/r-alice-2/override",
        headers=as_employee(actor),
        json={"score": 9.0, "reasoning": "Skip-level opinion"},
    )
    assert response.status_code == status_code


def test_override_unknown_report(client, org_data, as_employee):
    response = client.put(
        "/api/reports/missing/override",
        headers=as_employee("boss"),
        json={"score": 9.0, "reasoning": "n/a"},
    )
    assert response.status_code == 404


def test_override_report_of_another_organization(client, org_data, db_session, as_employee):
    from app.models.employee import Employee
    from app.models.report import Report
    from app.schemas.records import EmployeeRole

    db_session.add(Employee(
        id="stranger", organization_id="org-other", name="Stranger",
        role=EmployeeRole.EMPLOYEE, manager_id="boss",
    ))
    db_session.add(Report(
        id="r-stranger", goal_id="launch", employee_id="stranger",
        submission_date=datetime(2025, 3, 5, 10, 0), evaluation_score=6.0,
    ))
    db_session.commit()

    response = client.put(
        "/api/reports/r-stranger/override",
        headers=as_employee("boss"),
        json={"score": 9.0, "reasoning": "n/a"},
    )
    assert response.status_code == 404
