import pytest

from app.application.services import category_service
from app.core.exceptions import BusinessRuleViolationException
from app.domain.models.category import Category
from app.domain.models.service_provider import ServiceProvider
from app.infrastructure.repositories.category_repository import SQLAlchemyCategoryRepository
from app.infrastructure.repositories.provider_repository import SQLAlchemyProviderRepository


@pytest.mark.parametrize(
    "name, slug",
    [
        ("Home Cleaning", "home-cleaning"),
        ("  Plumbing  ", "plumbing"),
        ("AC   Repair\tService", "ac-repair-service"),
        ("Pest-Control", "pest-control"),
    ],
)
def test_slugify(name, slug):
    assert category_service.slugify(name) == slug


def test_list_is_public_and_ordered(client, db):
    for name in ("Plumbing", "Carpentry", "Electrical"):
        db.add(Category(name=name, slug=category_service.slugify(name)))
    db.commit()

    resp = client.get("/api/categories")
    assert resp.status_code == 200
    assert [c["name"] for c in resp.json()] == ["Carpentry", "Electrical", "Plumbing"]


def test_add_category(client, admin_headers):
    resp = client.post("/api/admin/categories", json={"name": " Appliance Repair "}, headers=admin_headers)
    assert resp.status_code == 201
    assert resp.json()["name"] == "Appliance Repair"
    assert resp.json()["slug"] == "appliance-repair"


def test_blank_name_refused(client, admin_headers):
    resp = client.post("/api/admin/categories", json={"name": "   "}, headers=admin_headers)
    assert resp.status_code == 422


def test_customer_cannot_manage_categories(client, customer_headers):
    resp = client.post("/api/admin/categories", json={"name": "Painting"}, headers=customer_headers)
    assert resp.status_code == 403


def test_rename_recomputes_slug(client, category, admin_headers):
    resp = client.put(f"/api/admin/categories/{category.id}", json={"name": "Deep Cleaning"}, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["slug"] == "deep-cleaning"


def test_delete_unused_category(client, db, category, admin_headers):
    resp = client.delete(f"/api/admin/categories/{category.id}", headers=admin_headers)
    assert resp.status_code == 204
    assert db.query(Category).count() == 0


def test_delete_referenced_category_refused(client, db, category, customer, make_provider, admin_headers):
    make_provider(customer, status="rejected")

    resp = client.delete(f"/api/admin/categories/{category.id}", headers=admin_headers)

    assert resp.status_code == 422
    assert resp.json()["error"]["details"]["provider_count"] == 1
    assert db.query(Category).count() == 1


class CountingCategories(SQLAlchemyCategoryRepository):
    def __init__(self, db):
        super().__init__(db, Category)
        self.deletes = 0

    def delete(self, id):
        self.deletes += 1
        return super().delete(id)


def test_referenced_category_issues_no_delete(db, category, customer, make_provider, feed):
    make_provider(customer)
    categories = CountingCategories(db)
    providers = SQLAlchemyProviderRepository(db, ServiceProvider)

    with pytest.raises(BusinessRuleViolationException):
        category_service.delete_category(categories, providers, feed, category.id)

    assert categories.deletes == 0
    assert feed.events == []


def test_writes_publish_changes(db, feed):
    categories = SQLAlchemyCategoryRepository(db, Category)
    providers = SQLAlchemyProviderRepository(db, ServiceProvider)

    category = category_service.add_category(categories, feed, "Gardening")
    category_service.rename_category(categories, feed, category.id, "Garden Care")
    category_service.delete_category(categories, providers, feed, category.id)

    assert [(t, e) for t, e, _ in feed.events] == [
        ("service_categories", "INSERT"),
        ("service_categories", "UPDATE"),
        ("service_categories", "DELETE"),
    ]
    assert feed.events[1][2]["slug"] == "garden-care"
