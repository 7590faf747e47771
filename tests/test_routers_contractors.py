"""
test_routers_contractors.py — Tests for contractor CRUD endpoints

Called by: pytest
Depends on: crm/routers/contractors.py, tests/conftest.py
"""

from crm.models import Notification, Offer

NEW = {"name": "Nowak Sp. z o.o.", "email": "kontakt@nowak.pl", "phone": "+48 22 100 00 00"}


def test_create_returns_201(client, test_user, db_session):
    resp = client.post("/api/contractors", json={**NEW, "nip": "123-456-32-18", "postalCode": "00-001"})
    assert resp.status_code == 201
    data = resp.json()
    assert data["name"] == "Nowak Sp. z o.o."
    assert data["nip"] == "1234563218"
    assert data["postal_code"] == "00-001"
    assert data["status"] == "active"
    assert data["country"] == "Polska"
    assert db_session.query(Notification).filter_by(user_id=test_user.id).count() == 1


def test_create_requires_name_email_phone(client):
    resp = client.post("/api/contractors", json={"name": "X"})
    assert resp.status_code == 422
    fields = {tuple(e["loc"])[-1] for e in resp.json()["detail"]}
    assert {"email", "phone"} <= fields


def test_create_rejects_blank_name(client):
    resp = client.post("/api/contractors", json={**NEW, "name": "   "})
    assert resp.status_code == 422


def test_list_and_filter(client, test_contractor):
    client.post("/api/contractors", json={**NEW, "status": "inactive"})
    assert len(client.get("/api/contractors").json()) == 2
    active = client.get("/api/contractors", params={"status": "active"}).json()
    assert [c["id"] for c in active] == [test_contractor.id]


def test_get_unknown_is_404(client):
    resp = client.get("/api/contractors/does-not-exist")
    assert resp.status_code == 404
    assert resp.json()["status_code"] == 404


def test_update_partial(client, test_contractor):
    resp = client.put(f"/api/contractors/{test_contractor.id}", json={"city": "Gdańsk", "name": None})
    assert resp.status_code == 200
    data = resp.json()
    assert data["city"] == "Gdańsk"
    assert data["name"] == "Kowalski Budownictwo"
    assert data["email"] == "biuro@kowalski.pl"


def test_delete_keeps_offers(client, test_contractor, test_offer, db_session):
    resp = client.delete(f"/api/contractors/{test_contractor.id}")
    assert resp.json() == {"ok": True}
    db_session.expire_all()
    offer = db_session.get(Offer, test_offer.id)
    assert offer.contractor_id is None
    assert offer.contractor_name == "Kowalski Budownictwo"
    assert client.get(f"/api/contractors/{test_contractor.id}").status_code == 404
