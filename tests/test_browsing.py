from app.application.services.settings_service import update_system_settings
from app.domain.models.category import Category
from app.domain.models.review import Review
from app.domain.schemas.settings import SystemSettingsUpdate

from conftest import auth_headers


def _review(db, provider, user, rating, comment=None):
    db.add(Review(provider_id=provider.id, user_id=user.id, rating=rating, comment=comment))
    db.commit()


def test_services_count_only_approved(client, db, category, customer, other_customer, admin, make_provider):
    db.add(Category(name="Plumbing", slug="plumbing"))
    db.commit()
    make_provider(customer, status="approved")
    make_provider(other_customer, status="approved")
    make_provider(admin, status="pending")

    resp = client.get("/api/services")
    counts = {c["slug"]: c["provider_count"] for c in resp.json()}
    assert counts == {"home-cleaning": 2, "plumbing": 0}


def test_category_page_filters_and_sorts(client, db, category, customer, other_customer, admin, make_provider):
    top = make_provider(customer, name="Zara Cleaners", city="Mumbai")
    low = make_provider(other_customer, name="Anil Services", city="Pune", about="Sofa and carpet shampoo")
    make_provider(admin, status="suspended", city="Mumbai")
    _review(db, top, admin, 5)
    _review(db, low, admin, 2)

    page = client.get("/api/services/home-cleaning")
    assert page.status_code == 200
    assert page.json()["category"]["name"] == "Home Cleaning"
    assert len(page.json()["providers"]) == 2

    by_rating = client.get("/api/services/home-cleaning", params={"sort": "rating"}).json()["providers"]
    assert [p["id"] for p in by_rating] == [top.id, low.id]

    by_name = client.get("/api/services/home-cleaning", params={"sort": "name"}).json()["providers"]
    assert [p["name"] for p in by_name] == ["Anil Services", "Zara Cleaners"]

    in_mumbai = client.get("/api/services/home-cleaning", params={"city": "mumbai"}).json()["providers"]
    assert [p["id"] for p in in_mumbai] == [top.id]

    searched = client.get("/api/services/home-cleaning", params={"q": "carpet"}).json()["providers"]
    assert [p["id"] for p in searched] == [low.id]

    bad_sort = client.get("/api/services/home-cleaning", params={"sort": "price"})
    assert bad_sort.status_code == 422


def test_unknown_category_slug(client):
    resp = client.get("/api/services/does-not-exist")
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "EntityNotFoundException"


def test_provider_search_limit(client, customer, other_customer, make_provider):
    make_provider(customer)
    make_provider(other_customer)

    resp = client.get("/api/providers", params={"limit": 1})
    assert resp.status_code == 200
    assert len(resp.json()) == 1


def test_profile_only_for_approved(client, customer, make_provider):
    pending = make_provider(customer, status="pending")
    assert client.get(f"/api/providers/{pending.id}").status_code == 404


def test_profile_includes_reviews_and_rounded_rating(client, db, customer, other_customer, admin, make_provider):
    provider = make_provider(customer)
    _review(db, provider, other_customer, 5, "Spotless work")
    _review(db, provider, admin, 4)
    _review(db, provider, customer, 4)

    resp = client.get(f"/api/providers/{provider.id}")

    assert resp.status_code == 200
    body = resp.json()
    assert body["rating"] == {"average": 4.3, "count": 3}
    assert len(body["reviews"]) == 3
    assert body["phone"] == "9876543210"
    assert body["category"]["slug"] == "home-cleaning"


def test_submit_review(client, db, customer, other_customer, make_provider):
    provider = make_provider(customer)
    headers = auth_headers(other_customer)

    resp = client.post(f"/api/providers/{provider.id}/reviews", json={"rating": 5, "comment": "   "}, headers=headers)
    assert resp.status_code == 201
    assert resp.json()["comment"] is None
    assert resp.json()["user_id"] == other_customer.id

    listed = client.get(f"/api/providers/{provider.id}/reviews")
    assert [r["rating"] for r in listed.json()] == [5]


def test_review_validation(client, customer, customer_headers, make_provider):
    provider = make_provider(customer)

    assert client.post(f"/api/providers/{provider.id}/reviews", json={"rating": 5}).status_code == 401
    assert client.post(
        f"/api/providers/{provider.id}/reviews", json={"rating": 6}, headers=customer_headers
    ).status_code == 422
    assert client.post(
        f"/api/providers/{provider.id}/reviews", json={"rating": 0}, headers=customer_headers
    ).status_code == 422


def test_review_requires_approved_provider(client, customer, customer_headers, make_provider):
    provider = make_provider(customer, status="suspended")
    resp = client.post(f"/api/providers/{provider.id}/reviews", json={"rating": 4}, headers=customer_headers)
    assert resp.status_code == 404


def test_review_blocked_in_maintenance(client, db, customer, customer_headers, make_provider):
    provider = make_provider(customer)
    update_system_settings(db, SystemSettingsUpdate(maintenance_mode=True))

    resp = client.post(f"/api/providers/{provider.id}/reviews", json={"rating": 4}, headers=customer_headers)
    assert resp.status_code == 503
