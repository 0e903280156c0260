"""
Tests for the text and image approval endpoints.
"""


class TestTextApprovals:
    """Stage 1 review."""

    def test_approve_text_opens_image_review(self, client, auth_headers, make_post):
        post = make_post(approved=False)
        response = client.post(
            "/api/approvals",
            headers=auth_headers,
            json={"post_id": post.id, "status": "approved"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "approved"
        assert data["image_status"] == "pending"

    def test_reject_without_reason(self, client, auth_headers, make_post):
        post = make_post(approved=False)
        response = client.post(
            "/api/approvals",
            headers=auth_headers,
            json={"post_id": post.id, "status": "rejected"},
        )
        assert response.status_code == 400
        body = response.json()
        assert body["ok"] is False
        assert body["error_code"] == "VALIDATION_ERROR"

    def test_reject_with_reason(self, client, auth_headers, make_post):
        post = make_post(approved=False)
        response = client.post(
            "/api/approvals",
            headers=auth_headers,
            json={"post_id": post.id, "status": "rejected", "rejection_reason": "Off brand"},
        )
        assert response.status_code == 200
        assert response.json()["rejection_reason"] == "Off brand"

    def test_text_locked_while_scheduled(self, client, auth_headers, make_post):
        post = make_post()
        client.post(
            "/api/schedule",
            headers=auth_headers,
            json={"post_id": post.id, "scheduled_for": "2030-03-01T09:00:00"},
        )
        response = client.post(
            "/api/approvals",
            headers=auth_headers,
            json={"post_id": post.id, "status": "pending"},
        )
        assert response.status_code == 400
        assert response.json()["error_code"] == "PRECONDITION_FAILED"

    def test_unauthenticated(self, client, make_post):
        post = make_post(approved=False)
        response = client.post("/api/approvals", json={"post_id": post.id, "status": "approved"})
        assert response.status_code == 401

    def test_missing_post(self, client, auth_headers, tenant):
        response = client.post(
            "/api/approvals",
            headers=auth_headers,
            json={"post_id": 999, "status": "approved"},
        )
        assert response.status_code == 404
        assert response.json()["error_code"] == "NOT_FOUND"

    def test_other_tenants_post(self, client, auth_headers, make_post, other_brand):
        post = make_post(approved=False, target_brand=other_brand)
        response = client.post(
            "/api/approvals",
            headers=auth_headers,
            json={"post_id": post.id, "status": "approved"},
        )
        assert response.status_code == 403
        assert response.json()["error_code"] == "FORBIDDEN"

    def test_malformed_body_is_400(self, client, auth_headers, tenant):
        response = client.post("/api/approvals", headers=auth_headers, json={"status": "approved"})
        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"


class TestImageApprovals:
    """Stage 2 review."""

    def test_image_before_text(self, client, auth_headers, make_post):
        post = make_post(approved=False)
        response = client.post(
            "/api/image-approvals",
            headers=auth_headers,
            json={"post_id": post.id, "image_status": "approved"},
        )
        assert response.status_code == 400
        assert response.json()["error_code"] == "PRECONDITION_FAILED"

    def test_approve_image(self, client, auth_headers, make_post, db):
        post = make_post(approved=False)
        client.post("/api/approvals", headers=auth_headers, json={"post_id": post.id, "status": "approved"})
        response = client.post(
            "/api/image-approvals",
            headers=auth_headers,
            json={"post_id": post.id, "image_status": "approved"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "approved"
        assert data["image_status"] == "approved"
        assert data["image_reviewed_at"] is not None

    def test_reject_image_requires_reason(self, client, auth_headers, make_post):
        post = make_post(approved=False)
        client.post("/api/approvals", headers=auth_headers, json={"post_id": post.id, "status": "approved"})
        response = client.post(
            "/api/image-approvals",
            headers=auth_headers,
            json={"post_id": post.id, "image_status": "rejected"},
        )
        assert response.status_code == 400

        response = client.post(
            "/api/image-approvals",
            headers=auth_headers,
            json={"post_id": post.id, "image_status": "rejected", "image_rejection_reason": "Wrong logo"},
        )
        assert response.status_code == 200
        assert response.json()["image_rejection_reason"] == "Wrong logo"
