import asyncio
import os
from datetime import datetime, timedelta, timezone

from app.main import app
from app.domain.models.service_provider import ServiceProvider
from app.infrastructure.storage import PROFILES_BUCKET, PROVIDER_IMAGES_BUCKET, ObjectStorage
from app.interfaces.deps import get_feed
from app.scheduler import jobs

from conftest import PNG_BYTES, STORAGE_DIR


def test_stats(client, db, customer, other_customer, make_provider, admin_headers):
    make_provider(customer, status="pending")
    make_provider(other_customer, status="approved")

    resp = client.get("/api/admin/stats", headers=admin_headers)

    assert resp.status_code == 200
    assert resp.json() == {
        "providers": 2,
        "categories": 1,
        "reviews": 0,
        "providers_by_status": {"pending": 1, "approved": 1, "rejected": 0, "suspended": 0},
    }


def test_export_is_json_attachment(client, customer, make_provider, admin_headers):
    provider = make_provider(customer, status="pending")

    resp = client.get("/api/admin/providers/export", headers=admin_headers)

    assert resp.status_code == 200
    disposition = resp.headers["content-disposition"]
    assert disposition.startswith('attachment; filename="providers_export_')
    assert disposition.endswith('.json"')
    assert [p["id"] for p in resp.json()["providers"]] == [provider.id]


def test_cleanup_removes_old_rejected_only(client, db, customer, other_customer, admin, make_provider, admin_headers, feed):
    app.dependency_overrides[get_feed] = lambda: feed
    storage = ObjectStorage()
    photo = f"profile_images/{customer.id}/old-photo.png"
    proof = f"id_proofs/{customer.id}/old-proof.png"
    storage.upload(PROFILES_BUCKET, photo, PNG_BYTES)
    storage.upload(PROVIDER_IMAGES_BUCKET, proof, PNG_BYTES)

    old = datetime.now(timezone.utc) - timedelta(days=40)
    expired = make_provider(
        customer,
        status="rejected",
        created_at=old,
        profile_image_url=storage.public_url(PROFILES_BUCKET, photo),
        id_proof_url=storage.public_url(PROVIDER_IMAGES_BUCKET, proof),
    )
    expired_id = expired.id
    recent = make_provider(other_customer, status="rejected", created_at=datetime.now(timezone.utc) - timedelta(days=5))
    kept_pending = make_provider(admin, status="pending", created_at=old)

    resp = client.post("/api/admin/cleanup", headers=admin_headers)

    assert resp.status_code == 200
    assert resp.json() == {"deleted": 1}
    remaining = {p.id for p in db.query(ServiceProvider).all()}
    assert remaining == {recent.id, kept_pending.id}

    deletes = [(table, record) for table, event, record in feed.events if event == "DELETE"]
    assert len(deletes) == 1
    assert deletes[0][0] == "service_providers"
    assert deletes[0][1]["id"] == expired_id
    assert deletes[0][1]["status"] == "rejected"

    assert not os.path.exists(os.path.join(STORAGE_DIR, PROFILES_BUCKET, photo))
    assert not os.path.exists(os.path.join(STORAGE_DIR, PROVIDER_IMAGES_BUCKET, proof))


def test_cleanup_with_nothing_expired_publishes_nothing(client, customer, make_provider, admin_headers, feed):
    app.dependency_overrides[get_feed] = lambda: feed
    make_provider(customer, status="rejected")

    resp = client.post("/api/admin/cleanup", headers=admin_headers)

    assert resp.json() == {"deleted": 0}
    assert feed.events == []


def test_cleanup_requires_admin(client, customer_headers):
    assert client.post("/api/admin/cleanup", headers=customer_headers).status_code == 403


def test_user_search(client, customer, other_customer, admin_headers):
    resp = client.get("/api/admin/users", params={"q": "VIKRAM"}, headers=admin_headers)
    assert [u["email"] for u in resp.json()] == ["vikram@example.com"]


def test_admin_triggered_password_reset(client, customer, admin_headers):
    resp = client.post(f"/api/admin/users/{customer.id}/password-reset", headers=admin_headers)
    assert resp.status_code == 202

    missing = client.post("/api/admin/users/999/password-reset", headers=admin_headers)
    assert missing.status_code == 404


def test_system_settings_round_trip(client, admin_headers):
    defaults = client.get("/api/admin/settings", headers=admin_headers).json()
    assert defaults == {
        "site_name": "ServiceHub",
        "maintenance_mode": False,
        "allow_registration": True,
        "max_file_size_mb": 10,
    }

    saved = client.put("/api/admin/settings", json={"site_name": "Seva", "max_file_size_mb": 5}, headers=admin_headers)
    assert saved.json()["site_name"] == "Seva"
    assert saved.json()["allow_registration"] is True

    assert client.get("/api/admin/settings", headers=admin_headers).json()["max_file_size_mb"] == 5

    too_big = client.put("/api/admin/settings", json={"max_file_size_mb": 100}, headers=admin_headers)
    assert too_big.status_code == 422


def test_scheduler_registers_daily_cleanup():
    async def scenario():
        jobs.start_scheduler()
        try:
            job = jobs.scheduler.get_job("cleanup_rejected_providers")
            assert job is not None
            assert str(job.trigger.fields[5]) == str(jobs.settings.CLEANUP_HOUR)
        finally:
            jobs.stop_scheduler()

    asyncio.run(scenario())


def test_unknown_route_uses_error_shape(client):
    resp = client.get("/api/nothing-here")
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "NotFound"
