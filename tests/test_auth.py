from datetime import datetime, timedelta, timezone

import httpx
import respx

from app.application.services.auth_service import create_password_reset_token
from app.application.services.settings_service import update_system_settings
from app.domain.models.password_reset import PasswordResetToken
from app.domain.models.user import User
from app.domain.schemas.settings import SystemSettingsUpdate
from app.infrastructure.mail_api import MailClient
from app.interfaces.deps import get_mailer
from app.main import app


def test_register_creates_customer(client):
    resp = client.post(
        "/api/auth/register",
        json={"name": "Meera", "email": "Meera@Example.com", "password": "secret123"},
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["email"] == "meera@example.com"
    assert body["role"] == "customer"


def test_register_duplicate_email_conflicts(client, customer):
    resp = client.post(
        "/api/auth/register",
        json={"name": "Asha", "email": "ASHA@example.com", "password": "secret123"},
    )
    assert resp.status_code == 409
    assert resp.json()["error"]["code"] == "ConflictException"


def test_register_rejects_malformed_email(client, db):
    resp = client.post(
        "/api/auth/register",
        json={"name": "Meera", "email": "meera-at-example", "password": "secret123"},
    )
    assert resp.status_code == 422
    assert resp.json()["error"]["code"] == "ValidationError"
    assert db.query(User).count() == 0


def test_register_rejects_blank_name(client, db):
    resp = client.post(
        "/api/auth/register",
        json={"name": "   ", "email": "meera@example.com", "password": "secret123"},
    )
    assert resp.status_code == 422
    assert db.query(User).count() == 0


def test_register_trims_name(client):
    resp = client.post(
        "/api/auth/register",
        json={"name": "  Meera  ", "email": "meera@example.com", "password": "secret123"},
    )
    assert resp.status_code == 201
    assert resp.json()["name"] == "Meera"


def test_register_refused_when_disabled(client, db):
    update_system_settings(db, SystemSettingsUpdate(allow_registration=False))
    resp = client.post(
        "/api/auth/register",
        json={"name": "Meera", "email": "meera@example.com", "password": "secret123"},
    )
    assert resp.status_code == 403


def test_login_records_sign_in_and_returns_token(client, db, customer):
    assert customer.last_sign_in_at is None
    resp = client.post("/api/auth/login", json={"email": "asha@example.com", "password": "secret123"})
    assert resp.status_code == 200
    token = resp.json()["access_token"]

    db.refresh(customer)
    assert customer.last_sign_in_at is not None

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["email"] == "asha@example.com"


def test_login_wrong_password(client, customer):
    resp = client.post("/api/auth/login", json={"email": "asha@example.com", "password": "nope"})
    assert resp.status_code == 401
    assert resp.json()["error"]["message"] == "Invalid email or password"


def test_me_requires_token(client):
    assert client.get("/api/auth/me").status_code == 401
    resp = client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})
    assert resp.status_code == 401


def test_update_metadata(client, customer_headers):
    resp = client.patch("/api/auth/me", json={"name": "Asha R.", "phone": "9000000000"}, headers=customer_headers)
    assert resp.status_code == 200
    assert resp.json()["name"] == "Asha R."
    assert resp.json()["phone"] == "9000000000"

    blank = client.patch("/api/auth/me", json={"name": "   "}, headers=customer_headers)
    assert blank.status_code == 422


def test_password_reset_request_same_answer_for_unknown_email(client, db, customer):
    unknown = client.post("/api/auth/password-reset", json={"email": "nobody@example.com"})
    known = client.post("/api/auth/password-reset", json={"email": "asha@example.com"})

    assert unknown.status_code == known.status_code == 202
    assert unknown.json() == known.json()
    assert db.query(PasswordResetToken).filter(PasswordResetToken.user_id == customer.id).count() == 1


@respx.mock
def test_password_reset_mail_is_dispatched(client, customer):
    route = respx.post("https://mail.test/send").mock(return_value=httpx.Response(200, json={"id": "m1"}))
    app.dependency_overrides[get_mailer] = lambda: MailClient(api_url="https://mail.test/send", api_key="k")

    resp = client.post("/api/auth/password-reset", json={"email": "asha@example.com"})

    assert resp.status_code == 202
    assert route.called
    sent = route.calls.last.request
    assert sent.headers["Authorization"] == "Bearer k"
    assert b"asha@example.com" in sent.content
    assert b"reset-password?token=" in sent.content


def test_password_reset_confirm_is_single_use(client, db, customer):
    token = create_password_reset_token(db, customer)

    resp = client.post("/api/auth/password-reset/confirm", json={"token": token, "new_password": "newpass99"})
    assert resp.status_code == 200

    login = client.post("/api/auth/login", json={"email": "asha@example.com", "password": "newpass99"})
    assert login.status_code == 200

    again = client.post("/api/auth/password-reset/confirm", json={"token": token, "new_password": "another99"})
    assert again.status_code == 422


def test_password_reset_token_expires(client, db, customer):
    token = create_password_reset_token(db, customer)
    record = db.query(PasswordResetToken).filter(PasswordResetToken.user_id == customer.id).one()
    record.expires_at = datetime.now(timezone.utc) - timedelta(minutes=1)
    db.commit()

    resp = client.post("/api/auth/password-reset/confirm", json={"token": token, "new_password": "newpass99"})
    assert resp.status_code == 422
    assert resp.json()["error"]["message"] == "Reset token has expired"
