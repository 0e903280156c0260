"""
Tests for posts, brands and tenant endpoints.
"""
from socialdesk.models.post import Post


class TestPostsEndpoints:
    """Test posts endpoints."""

    def test_create_post(self, client, auth_headers, brand):
        """Hand-written posts start with the text approved."""
        response = client.post(
            "/api/posts",
            headers=auth_headers,
            json={"brand_id": brand.id, "title": "Spring launch", "content": "New seasonal roast"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "Spring launch"
        assert data["post_index"] == 0
        assert data["image_filename"] == "acme-coffee-placeholder-0.png"
        assert data["approval"]["status"] == "approved"
        assert data["approval"]["image_status"] == "pending"

    def test_post_index_increments(self, client, auth_headers, brand):
        for title in ("One", "Two"):
            response = client.post(
                "/api/posts",
                headers=auth_headers,
                json={"brand_id": brand.id, "title": title, "content": "Caption"},
            )
        assert response.json()["post_index"] == 1

    def test_create_post_unauthenticated(self, client, brand):
        response = client.post(
            "/api/posts",
            json={"brand_id": brand.id, "title": "T", "content": "C"},
        )
        assert response.status_code == 401

    def test_create_post_for_other_tenant(self, client, auth_headers, other_brand):
        response = client.post(
            "/api/posts",
            headers=auth_headers,
            json={"brand_id": other_brand.id, "title": "T", "content": "C"},
        )
        assert response.status_code == 403

    def test_get_posts_empty(self, client, auth_headers, brand):
        response = client.get("/api/posts", headers=auth_headers)
        assert response.status_code == 200
        assert response.json() == []

    def test_list_hides_duplicates_and_other_tenants(self, client, auth_headers, make_post, other_brand):
        original = make_post()
        make_post(is_duplicate=True, platform="facebook")
        make_post(title="Globex post", target_brand=other_brand)

        response = client.get("/api/posts", headers=auth_headers)
        assert response.status_code == 200
        assert [p["id"] for p in response.json()] == [original.id]

    def test_list_by_brand(self, client, auth_headers, make_post, other_brand):
        make_post()
        response = client.get("/api/posts?brand=acme-coffee", headers=auth_headers)
        assert len(response.json()) == 1

        response = client.get("/api/posts?brand=globex-tea", headers=auth_headers)
        assert response.status_code == 403

    def test_get_post_not_found(self, client, auth_headers, tenant):
        response = client.get("/api/posts/12345", headers=auth_headers)
        assert response.status_code == 404

    def test_edit_caption_resubmits_text(self, client, auth_headers, make_post, db):
        post = make_post()
        response = client.patch(
            f"/api/posts/{post.id}",
            headers=auth_headers,
            json={"content": "Now with oat milk"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["content"] == "Now with oat milk"
        assert data["approval"]["status"] == "pending"
        assert data["approval"]["image_status"] == "not_ready"

    def test_edit_image_keeps_text_approval(self, client, auth_headers, make_post, db):
        post = make_post()
        response = client.patch(
            f"/api/posts/{post.id}",
            headers=auth_headers,
            json={"image_filename": "new.png"},
        )
        assert response.status_code == 200
        assert response.json()["approval"]["status"] == "approved"
        assert db.get(Post, post.id).image_filename == "new.png"


class TestBrandsEndpoints:

    def test_tenant(self, client, auth_headers, tenant):
        response = client.get("/api/tenant", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["subdomain"] == "acme"

    def test_brands_are_tenant_scoped(self, client, auth_headers, brand, other_brand):
        response = client.get("/api/brands", headers=auth_headers)
        assert [b["slug"] for b in response.json()] == ["acme-coffee"]

    def test_brand_by_slug(self, client, auth_headers, brand, other_brand):
        assert client.get("/api/brands/acme-coffee", headers=auth_headers).json()["oneup_category_id"] == 42
        assert client.get("/api/brands/globex-tea", headers=auth_headers).status_code == 403
        assert client.get("/api/brands/missing", headers=auth_headers).status_code == 404
