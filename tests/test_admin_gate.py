import pytest

from app.application.services.admin_gate import AdminAccess, evaluate_admin_access
from app.domain.models.user import User

from conftest import ADMIN_EMAIL


def _user(email="someone@example.com", role="customer", is_active=True):
    return User(name="X", email=email, role=role, is_active=is_active, password_hash="x")


@pytest.mark.parametrize(
    "user, state, promote",
    [
        (None, AdminAccess.UNAUTHENTICATED, False),
        (_user(is_active=False), AdminAccess.UNAUTHENTICATED, False),
        (_user(), AdminAccess.NON_ADMIN, False),
        (_user(role="admin"), AdminAccess.ADMIN, False),
        (_user(email="Boss@Example.com"), AdminAccess.ADMIN, True),
    ],
)
def test_evaluate_admin_access(user, state, promote):
    decision = evaluate_admin_access(user, ["boss@example.com"])
    assert decision.state is state
    assert decision.promote is promote


def test_unauthenticated_redirects_to_auth(client):
    resp = client.get("/api/admin/access")
    assert resp.status_code == 401
    error = resp.json()["error"]
    assert error["message"] == "Authentication Required"
    assert error["details"]["redirect_to"] == "/auth"


def test_non_admin_is_denied_without_provider_data(client, customer, customer_headers, make_provider):
    make_provider(customer, status="pending")

    resp = client.get("/api/admin/providers", headers=customer_headers)
    assert resp.status_code == 403
    body = resp.json()
    assert body["error"]["message"] == "Access Denied"
    assert body["error"]["details"]["redirect_to"] == "/"
    assert "pending" not in body


def test_admin_role_passes(client, admin_headers):
    resp = client.get("/api/admin/access", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["state"] == "authenticated-admin"


def test_configured_email_is_promoted_to_admin(client, db, customer, customer_headers):
    denied = client.get("/api/admin/access", headers=customer_headers)
    assert denied.status_code == 403
    assert denied.json()["error"]["message"] == "Access Denied"

    customer.email = ADMIN_EMAIL.upper()
    db.commit()

    granted = client.get("/api/admin/access", headers=customer_headers)
    assert granted.status_code == 200

    db.refresh(customer)
    assert customer.role == "admin"
