"""Integration tests for Reviews API endpoints via TestClient."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from protean import current_domain
from protean.integrations.fastapi import register_exception_handlers
from reviews.admin.admin_user import AdminUser
from reviews.admin.registration import RegisterAdminUser
from reviews.api.routes import review_router
from reviews.collection.memory_adapter import InMemoryReviewCollection
from reviews.store.review_store import ReviewStore


@pytest.fixture()
def review_collection(make_document):
    return InMemoryReviewCollection(
        [
            make_document(id="approved-5", rating=5, status="approved", minutes=0, helpful_count=2),
            make_document(id="approved-3", rating=3, status="approved", minutes=5, is_verified_purchase=True),
            make_document(id="pending-1", rating=1, status="pending", minutes=10),
        ]
    )


@pytest.fixture()
def client(review_collection, catalog):
    app = FastAPI()
    app.include_router(review_router)
    register_exception_handlers(app)
    with ReviewStore(review_collection, catalog=catalog) as store:
        app.state.review_store = store
        yield TestClient(app)


def _admin(role, email):
    admin_id = current_domain.process(
        RegisterAdminUser(email=email, name=f"Test {role}", role=role),
        asynchronous=False,
    )
    return {"X-Admin-Id": admin_id}


@pytest.fixture()
def moderator_headers():
    return _admin("moderator", "mod-api@zeloura.example")


@pytest.fixture()
def support_headers():
    return _admin("customer_service", "cs-api@zeloura.example")


class TestShopperAPI:
    def test_submit_returns_201(self, client, review_collection):
        response = client.post(
            "/reviews",
            json={
                "product_id": "ring-001",
                "user_id": "user-api",
                "rating": 4,
                "title": "Elegant",
                "comment": "Exactly as pictured, great packaging.",
            },
        )
        assert response.status_code == 201
        assert response.json()["status"] == "pending"
        assert review_collection.write_count == 1

    def test_submit_invalid_returns_400(self, client, review_collection):
        response = client.post(
            "/reviews",
            json={"product_id": "ring-001", "user_id": "u", "rating": 4, "title": "Hmm", "comment": "too short"},
        )
        assert response.status_code == 400
        assert review_collection.write_count == 0

    def test_submit_when_collection_down_returns_503(self, client, review_collection):
        review_collection.configure(should_succeed=False)
        response = client.post(
            "/reviews",
            json={"product_id": "ring-001", "user_id": "u", "rating": 4, "title": "Hmm", "comment": "Long enough now."},
        )
        assert response.status_code == 503

    def test_list_shows_approved_only(self, client):
        response = client.get("/reviews/products/ring-001")
        assert response.status_code == 200
        assert [r["id"] for r in response.json()] == ["approved-3", "approved-5"]

    def test_list_with_controls(self, client):
        response = client.get("/reviews/products/ring-001", params={"sort": "helpful", "filter": "all"})
        assert [r["id"] for r in response.json()] == ["approved-5", "approved-3"]

        response = client.get("/reviews/products/ring-001", params={"filter": "verified"})
        assert [r["id"] for r in response.json()] == ["approved-3"]

    def test_list_rejects_unknown_sort(self, client):
        assert client.get("/reviews/products/ring-001", params={"sort": "random"}).status_code == 422

    def test_summary(self, client):
        body = client.get("/reviews/products/ring-001/summary").json()
        assert body["average_rating"] == 4.0
        assert body["total_reviews"] == 2
        assert body["rating_distribution"] == {"5": 1, "4": 0, "3": 1, "2": 0, "1": 0}

    def test_helpful(self, client):
        assert client.post("/reviews/approved-5/helpful").status_code == 200
        body = client.get("/reviews/products/ring-001", params={"sort": "helpful"}).json()
        assert body[0]["helpful_count"] == 3

    def test_helpful_unknown_review_404(self, client):
        assert client.post("/reviews/missing/helpful").status_code == 404

    def test_report(self, client):
        response = client.post("/reviews/approved-5/reports", json={"reported_by": "user-9", "reason": "Spam"})
        assert response.status_code == 201


class TestAdminAPI:
    def test_queue_requires_admin(self, client):
        assert client.get("/reviews/moderation").status_code == 401

    def test_unknown_admin_401(self, client):
        assert client.get("/reviews/moderation", headers={"X-Admin-Id": "nobody"}).status_code == 401

    def test_admin_request_records_login(self, client, moderator_headers):
        admin_id = moderator_headers["X-Admin-Id"]
        assert current_domain.repository_for(AdminUser).get(admin_id).last_login_at is None

        assert client.get("/reviews/moderation", headers=moderator_headers).status_code == 200
        assert current_domain.repository_for(AdminUser).get(admin_id).last_login_at is not None

    def test_queue(self, client, moderator_headers):
        response = client.get("/reviews/moderation", headers=moderator_headers)
        assert response.status_code == 200
        [entry] = response.json()
        assert entry["review_id"] == "pending-1"
        assert entry["product_name"] == "Aurora Solitaire Ring"

    def test_queue_by_status(self, client, moderator_headers):
        response = client.get("/reviews/moderation", params={"status": "approved"}, headers=moderator_headers)
        assert {e["review_id"] for e in response.json()} == {"approved-5", "approved-3"}

    def test_stats(self, client, moderator_headers):
        body = client.get("/reviews/stats", headers=moderator_headers).json()
        assert body["total"] == 3
        assert body["approved"] == 2
        assert body["approval_rate"] == 67

    def test_moderate(self, client, moderator_headers):
        response = client.put(
            "/reviews/pending-1/moderate",
            json={"action": "approve", "note": "Fine"},
            headers=moderator_headers,
        )
        assert response.status_code == 200
        assert response.json()["status"] == "approved"
        assert len(client.get("/reviews/products/ring-001").json()) == 3

    def test_moderate_without_permission_403(self, client, support_headers, review_collection):
        response = client.put("/reviews/pending-1/moderate", json={"action": "approve"}, headers=support_headers)
        assert response.status_code == 403
        assert review_collection.write_count == 0

    def test_moderate_unknown_action_400(self, client, moderator_headers):
        response = client.put("/reviews/pending-1/moderate", json={"action": "archive"}, headers=moderator_headers)
        assert response.status_code == 400

    def test_moderate_unknown_review_404(self, client, moderator_headers):
        response = client.put("/reviews/missing/moderate", json={"action": "approve"}, headers=moderator_headers)
        assert response.status_code == 404

    def test_reply(self, client, support_headers):
        response = client.post(
            "/reviews/approved-3/replies",
            json={"message": "Thank you for your kind words!"},
            headers=support_headers,
        )
        assert response.status_code == 201
        body = response.json()
        assert body["admin_role"] == "customer_service"
        assert body["sequence"] == 1

    def test_blank_reply_400(self, client, support_headers):
        response = client.post("/reviews/approved-3/replies", json={"message": "  "}, headers=support_headers)
        assert response.status_code == 400
