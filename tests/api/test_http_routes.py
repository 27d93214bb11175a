from __future__ import annotations

from datetime import date

import pytest

from src.review_cycle.review_cycle.employees.model import Employee
from src.review_cycle.review_cycle.main import create_app


@pytest.fixture
def client(monkeypatch, container, employees):
    monkeypatch.setenv("APP_ENV", "testing")
    employees.add(Employee(7, "E007", "Gia", date_of_joining=date(2024, 1, 1)))
    app = create_app(container)
    return app.test_client()


def _login(client, user_id: int, role: str) -> None:
    with client.session_transaction() as sess:
        sess["user_id"] = user_id
        sess["role"] = role


def test_window_routes_require_login(client):
    assert client.get("/api/cycles/1/quarters/2/window").status_code == 401


def test_employee_cannot_edit_windows(client):
    _login(client, 7, "employee")

    resp = client.put("/api/cycles/1/quarters/2/window", json={})

    assert resp.status_code == 403


def test_admin_creates_and_reads_quarter_window(client):
    _login(client, 1, "hr_admin")

    resp = client.put("/api/cycles/1/quarters/2/window", json={"self_review_start": "2026-06-10"})
    assert resp.status_code == 200
    body = client.get("/api/cycles/1/quarters/2/window").get_json()["data"]

    assert body["review"]["quarter_start"] == "2026-04-01"
    assert body["review"]["self_review_start"] == "2026-06-10"
    assert body["review"]["manager_review_end"] == "2026-06-30"


def test_invalid_window_update_returns_field_and_range(client):
    _login(client, 1, "hr_admin")

    resp = client.put("/api/cycles/1/quarters/2/window", json={"self_review_end": "2026-07-05"})

    assert resp.status_code == 400
    assert resp.get_json() == {
        "error": "self_review_end must be between 2026-04-01 and 2026-06-30",
        "field": "self_review_end",
        "allowed_range": ["2026-04-01", "2026-06-30"],
    }


def test_unknown_cycle_is_404(client):
    _login(client, 1, "hr_admin")

    assert client.put("/api/cycles/9/quarters/1/window", json={}).status_code == 404


def test_grant_then_conflict_then_check(client):
    _login(client, 1, "hr_admin")
    payload = {"employee_id": 7, "cycle_id": 1, "quarter": 2, "reason": "travel"}

    first = client.post("/api/permissions/late-submission", json=payload)
    second = client.post("/api/permissions/late-submission", json=payload)

    assert first.status_code == 201
    assert first.get_json()["data"]["quarter"] == "2"
    assert second.status_code == 409

    _login(client, 7, "employee")
    check = client.get("/api/permissions/late-submission/check?cycle_id=1&quarter=2").get_json()
    assert check["has_permission"] is True


def test_grant_requires_employee_id(client):
    _login(client, 1, "hr_admin")

    resp = client.post("/api/permissions/late-submission", json={"cycle_id": 1})

    assert resp.status_code == 400
    assert resp.get_json()["field"] == "employee_id"


def test_stats_require_quarter(client):
    _login(client, 1, "hr_admin")

    resp = client.get("/api/permissions/late-submission-details?cycle_id=1")

    assert resp.status_code == 400
    assert resp.get_json()["field"] == "quarter"


def test_dashboard_for_active_cycle(client):
    _login(client, 7, "manager")

    body = client.get("/api/cycles/active/dashboard").get_json()

    assert body["data"]["cycle_id"] == 1
    assert body["data"]["direct_reports_count"] == 0
