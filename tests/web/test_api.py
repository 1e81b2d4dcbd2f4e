from __future__ import annotations

import pytest

from care_ops.core.enums import CorrectiveActionStatus
from care_ops.main import create_app

SIG = "data:image/png;base64,iVBORw0KGgo="


@pytest.fixture
def app(container, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    return create_app(container=container)


@pytest.fixture
def client(app):
    return app.test_client()


def login(client, username):
    resp = client.post("/api/auth/login", json={"username": username, "password": "secret123"})
    assert resp.status_code == 200
    return resp


def test_requires_login(client):
    assert client.get("/api/corrective-actions").status_code == 401
    assert client.get("/api/employees/100/points").get_json() == {"error": "Unauthorized"}


def test_bad_login(client):
    resp = client.post("/api/auth/login", json={"username": "manager", "password": "nope"})

    assert resp.status_code == 401
    assert resp.get_json()["error"] == "Invalid username or password"


def test_login_and_logout(client):
    body = login(client, "hr").get_json()
    assert body["user"]["role"] == "HR"

    assert client.post("/api/auth/logout").status_code == 200
    assert client.get("/api/corrective-actions").status_code == 401


def test_create_then_fetch_action(client, repos):
    repos.actions.add(days_ago=10, points_assigned=5)
    login(client, "manager")

    resp = client.post(
        "/api/corrective-actions",
        json={
            "employee_id": 100,
            "category_id": 2,
            "violation_date": "2026-03-14",
            "incident_description": "No call, no show for the morning shift.",
            "house_id": 10,
            "supervisor_signature": SIG,
        },
    )
    assert resp.status_code == 201
    created = resp.get_json()
    assert created["total_points"] == 11
    assert created["discipline_level"] == "Written Warning"
    assert created["thresholds_crossed"] == [6, 10]

    detail = client.get(f"/api/corrective-actions/{created['id']}").get_json()
    assert detail["action"]["status"] == "PENDING_SIGNATURE"
    assert detail["action"]["signatures"][0]["signer_type"] == "SUPERVISOR"
    assert detail["points_before_action"] == 5
    assert detail["current_points"] == 11


def test_create_validation_error_is_400(client):
    login(client, "manager")

    resp = client.post("/api/corrective-actions", json={"employee_id": 100})

    assert resp.status_code == 400
    assert "required" in resp.get_json()["error"]


def test_dsp_cannot_create(client):
    login(client, "dsp")

    resp = client.post(
        "/api/corrective-actions",
        json={"employee_id": 100, "category_id": 1, "violation_date": "2026-03-14", "incident_description": "x"},
    )

    assert resp.status_code == 403


def test_list_with_filters(client, repos):
    repos.actions.add(days_ago=1, status=CorrectiveActionStatus.ACKNOWLEDGED)
    repos.actions.add(days_ago=2)
    login(client, "admin")

    body = client.get("/api/corrective-actions?status=acknowledged").get_json()

    assert body["stats"]["total"] == 1
    assert body["actions"][0]["status"] == "ACKNOWLEDGED"
    assert client.get("/api/corrective-actions?status=bogus").status_code == 400


def test_sign_and_status(client, repos):
    action = repos.actions.add()
    login(client, "manager")

    resp = client.post(
        f"/api/corrective-actions/{action.action_id}/sign",
        json={"signer_type": "EMPLOYEE", "signature_data": SIG, "acknowledged": False, "employee_comments": "Disagree"},
    )
    assert resp.status_code == 200
    assert resp.get_json()["status"] == "DISPUTED"

    status = client.get(f"/api/corrective-actions/{action.action_id}/sign").get_json()
    assert status["has_employee_signature"] is True
    assert status["signatures"]["EMPLOYEE"]["signature_data"] == SIG


def test_update_action(client, repos):
    action = repos.actions.add(issued_by_id=3)
    login(client, "manager")

    resp = client.put(
        f"/api/corrective-actions/{action.action_id}",
        json={"corrective_expectations": ["Arrive on time"], "status": "ACKNOWLEDGED"},
    )

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["corrective_expectations"] == ["Arrive on time"]
    assert body["status"] == "PENDING_SIGNATURE"


def test_void_flow(client, repos):
    action = repos.actions.add()
    url = f"/api/corrective-actions/{action.action_id}/void"

    login(client, "manager")
    assert client.post(url, json={"reason": "Duplicate of #12"}).status_code == 403

    login(client, "hr")
    assert client.post(url, json={"reason": "short"}).status_code == 400
    resp = client.post(url, json={"reason": "Duplicate of an earlier entry"})
    assert resp.status_code == 200
    assert resp.get_json()["status"] == "VOIDED"


def test_missing_action_is_404(client):
    login(client, "admin")

    resp = client.get("/api/corrective-actions/404")

    assert resp.status_code == 404
    assert resp.get_json() == {"error": "Corrective action not found"}


def test_pdf_download(client, repos):
    action = repos.actions.add(days_ago=1)
    login(client, "hr")

    resp = client.get(f"/api/corrective-actions/{action.action_id}/pdf")

    assert resp.status_code == 200
    assert resp.mimetype == "application/pdf"
    assert resp.data.startswith(b"%PDF")
    assert "Corrective_Action_Reyes_Jordan_2026-03-14.pdf" in resp.headers["Content-Disposition"]


def test_employee_endpoints(client, repos):
    repos.actions.add(days_ago=70, points_assigned=4)
    repos.actions.add(days_ago=100, points_assigned=9)
    login(client, "manager")

    points = client.get("/api/employees/100/points").get_json()
    assert points["current_points"] == 4
    assert points["discipline_level"] == "Coaching"
    assert points["next_threshold"] == 6
    assert points["expiring_points"][0]["days_until_expiration"] == 20

    discipline = client.get("/api/employees/100/discipline").get_json()
    assert discipline["stats"]["expired_count"] == 1
    assert discipline["progress"]["color"] == "green"

    history = client.get("/api/employees/100/discipline-history?limit=1").get_json()
    assert history["stats"]["total_actions"] == 1

    assert client.get("/api/employees/999/points").status_code == 404


def test_categories_endpoints(client, repos):
    login(client, "manager")
    body = client.get("/api/violation-categories").get_json()
    assert len(body["categories"]) == 3
    assert client.post("/api/violation-categories", json={"category_name": "x"}).status_code == 403

    login(client, "admin")
    resp = client.post(
        "/api/violation-categories",
        json={"category_name": "Smoking on premises", "severity_level": "MODERATE", "default_points": 3},
    )
    assert resp.status_code == 201
    new_id = resp.get_json()["id"]

    assert client.put(f"/api/violation-categories/{new_id}", json={"default_points": 4}).get_json()["default_points"] == 4
    assert client.delete(f"/api/violation-categories/{new_id}").get_json()["soft_delete"] is False
    assert client.get(f"/api/violation-categories/{new_id}").status_code == 404

    seed = client.get("/api/violation-categories/seed").get_json()
    assert seed["seeded"] is True
    assert client.post("/api/violation-categories/seed").status_code == 400


def test_thresholds_endpoints(client, repos):
    repos.categories.bulk_create_thresholds([(1, 5, "Coaching", "Documented coaching")])
    login(client, "admin")

    assert client.get("/api/discipline-thresholds").get_json()["thresholds"][0]["action_required"] == "Coaching"
    resp = client.put("/api/discipline-thresholds", json={"thresholds": [{"id": 1, "action_required": "Coach"}]})
    assert resp.get_json()["thresholds"][0]["action_required"] == "Coach"


def test_unknown_route_is_json_404(client):
    resp = client.get("/api/nope")

    assert resp.status_code == 404
    assert "error" in resp.get_json()
