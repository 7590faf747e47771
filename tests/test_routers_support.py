"""
test_routers_support.py — Tests for support ticket endpoints

Called by: pytest
Depends on: crm/routers/support.py, tests/conftest.py
"""

from crm.models import Notification


def test_create_starts_open(client, test_user, db_session):
    resp = client.post("/api/support-tickets", json={"user": "Ewa", "issue": "Login fails", "priority": "high"})
    assert resp.status_code == 201
    assert resp.json()["status"] == "open"
    assert db_session.query(Notification).filter_by(user_id=test_user.id).count() == 1


def test_create_rejects_blank_issue(client):
    assert client.post("/api/support-tickets", json={"user": "Ewa", "issue": ""}).status_code == 422


def test_workflow(client, test_ticket, test_user, db_session):
    url = f"/api/support-tickets/{test_ticket.id}/status"
    assert client.post(url, json={"status": "in_progress"}).json()["status"] == "in_progress"
    resolved = client.post(url, json={"status": "resolved"}).json()
    assert resolved["status"] == "resolved"
    assert resolved["resolved_at"] is not None
    messages = [n.message for n in db_session.query(Notification).filter_by(user_id=test_user.id)]
    assert "Support ticket from Jan Nowak resolved" in messages

    resp = client.post(url, json={"status": "open"})
    assert resp.status_code == 409


def test_put_guards_status(client, test_ticket):
    url = f"/api/support-tickets/{test_ticket.id}"
    assert client.put(url, json={"status": "open", "priority": "low"}).json()["priority"] == "low"
    client.post(f"{url}/status", json={"status": "resolved"})
    assert client.put(url, json={"status": "in_progress"}).status_code == 409


def test_list_filter_and_delete(client, test_ticket):
    client.post("/api/support-tickets", json={"user": "Ewa", "issue": "x"})
    client.post(f"/api/support-tickets/{test_ticket.id}/status", json={"status": "resolved"})
    open_ids = [t["user"] for t in client.get("/api/support-tickets", params={"status": "open"}).json()]
    assert open_ids == ["Ewa"]

    assert client.delete(f"/api/support-tickets/{test_ticket.id}").json() == {"ok": True}
    assert client.get(f"/api/support-tickets/{test_ticket.id}").status_code == 404
