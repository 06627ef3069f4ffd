from app.application.services.notification_service import notify

from conftest import auth_headers


def test_list_and_mark_read(client, db, customer, customer_headers):
    first = notify(db, customer.id, "Application received", "Pending approval")
    notify(db, customer.id, "Application approved", "You are live", "success")

    listed = client.get("/api/notifications", headers=customer_headers).json()
    assert listed["unread"] == 2
    assert len(listed["items"]) == 2

    read = client.post(f"/api/notifications/{first.id}/read", headers=customer_headers)
    assert read.status_code == 200
    assert read.json()["read"] is True
    assert client.get("/api/notifications", headers=customer_headers).json()["unread"] == 1

    all_read = client.post("/api/notifications/read-all", headers=customer_headers)
    assert all_read.json() == {"updated": 1}
    assert client.get("/api/notifications", headers=customer_headers).json()["unread"] == 0


def test_cannot_touch_other_users_notifications(client, db, customer, other_customer):
    note = notify(db, customer.id, "Application received", "Pending approval")

    resp = client.post(f"/api/notifications/{note.id}/read", headers=auth_headers(other_customer))

    assert resp.status_code == 404
    assert client.get("/api/notifications", headers=auth_headers(other_customer)).json()["items"] == []
