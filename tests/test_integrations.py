"""
Tests for the OneUp and content-research clients and their endpoints.
"""
from datetime import datetime
from unittest.mock import MagicMock

import pytest
import requests

from socialdesk.main import app
from socialdesk.clients.content_research import ContentResearchClient, get_content_research_client
from socialdesk.clients.oneup import OneUpClient, format_oneup_datetime, get_oneup_client, network_param
from socialdesk.scheduling.errors import ExternalServiceError, NotFoundError, ValidationError
from socialdesk.models import Website


def fake_response(status_code=200, payload=None):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status_code} error")
    return response


class TestOneUpClient:

    def test_formatting(self):
        assert format_oneup_datetime(datetime(2030, 3, 1, 9, 5)) == "2030-03-01 09:05"
        assert network_param("ALL") == "ALL"
        assert network_param([]) == "ALL"
        assert network_param(["ig-1", "fb-2"]) == '["ig-1", "fb-2"]'

    def test_schedule_image_post_sends_query_params(self):
        session = MagicMock()
        session.get.return_value = fake_response(payload={"error": False, "message": "Scheduled", "data": {}})
        client = OneUpClient("key-123", "https://oneup.test/api/", session=session)

        result = client.schedule_image_post(
            category_id=42,
            social_network_id="ALL",
            scheduled_datetime=datetime(2030, 3, 1, 9, 0),
            image_url="https://cdn.test/a.png",
            content="Caption",
        )

        assert result == {"error": False, "message": "Scheduled"}
        url = session.get.call_args.args[0]
        params = session.get.call_args.kwargs["params"]
        assert url == "https://oneup.test/api/scheduleimagepost"
        assert params["apiKey"] == "key-123"
        assert params["category_id"] == "42"
        assert params["scheduled_date_time"] == "2030-03-01 09:00"
        assert params["content"] == "Caption"

    def test_oneup_error_is_returned(self):
        session = MagicMock()
        session.get.return_value = fake_response(payload={"error": True, "message": "Invalid category"})
        client = OneUpClient("key-123", "https://oneup.test/api", session=session)

        result = client.schedule_image_post(42, "ALL", datetime(2030, 3, 1), "https://cdn.test/a.png")
        assert result == {"error": True, "message": "Invalid category"}

    def test_transport_failure(self):
        session = MagicMock()
        session.get.side_effect = requests.ConnectionError("boom")
        client = OneUpClient("key-123", "https://oneup.test/api", session=session)

        with pytest.raises(ExternalServiceError):
            client.list_categories()

    def test_non_object_body(self):
        session = MagicMock()
        session.get.return_value = fake_response(payload=["unexpected", "list"])
        client = OneUpClient("key-123", "https://oneup.test/api", session=session)

        with pytest.raises(ExternalServiceError):
            client.schedule_image_post(42, "ALL", datetime(2030, 3, 1), "https://cdn.test/a.png")

    def test_not_configured(self):
        client = OneUpClient(None, "https://oneup.test/api", session=MagicMock())
        assert client.configured is False
        with pytest.raises(ValidationError):
            client.list_categories()


class TestContentResearchClient:

    def test_fetch(self):
        session = MagicMock()
        session.get.return_value = fake_response(payload={"topics": ["espresso"]})
        client = ContentResearchClient("http://vps.test/", session=session)

        assert client.get_website_content("blog.acme.test") == {"topics": ["espresso"]}
        assert session.get.call_args.args[0] == "http://vps.test/website-content/blog.acme.test"

    def test_missing_domain(self):
        session = MagicMock()
        session.get.return_value = fake_response(status_code=404)
        client = ContentResearchClient("http://vps.test", session=session)

        with pytest.raises(NotFoundError):
            client.get_website_content("unknown.test")

    def test_server_error(self):
        session = MagicMock()
        session.get.return_value = fake_response(status_code=502)
        client = ContentResearchClient("http://vps.test", session=session)

        with pytest.raises(ExternalServiceError):
            client.get_website_content("blog.acme.test")


class TestIntegrationEndpoints:

    def test_oneup_categories(self, client, auth_headers, oneup):
        response = client.get("/api/oneup/categories", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()[0]["id"] == 42

    def test_publish_without_api_key(self, client, auth_headers, make_post):
        app.dependency_overrides[get_oneup_client] = lambda: OneUpClient(None, "https://oneup.test/api")
        post = make_post()
        client.post("/api/schedule", headers=auth_headers, json={"post_id": post.id, "scheduled_for": "2030-03-01T09:00:00"})

        response = client.post("/api/schedule/publish", headers=auth_headers, json={"post_id": post.id})
        assert response.status_code == 400
        assert "not configured" in response.json()["error"]

    def test_websites_are_tenant_scoped(self, client, auth_headers, website, db, other_tenant):
        db.add(Website(tenant_id=other_tenant.id, name="Globex Blog", domain="blog.globex.test"))
        db.commit()

        response = client.get("/api/websites", headers=auth_headers)
        assert [w["domain"] for w in response.json()] == ["blog.acme.test"]

    def test_website_content(self, client, auth_headers, website):
        research = MagicMock(spec=ContentResearchClient)
        research.get_website_content.return_value = {"topics": ["espresso", "cold brew"]}
        app.dependency_overrides[get_content_research_client] = lambda: research

        response = client.get(f"/api/websites/{website.id}/content", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["content"]["topics"] == ["espresso", "cold brew"]
        research.get_website_content.assert_called_once_with("blog.acme.test")

    def test_other_tenants_website(self, client, auth_headers, tenant, db, other_tenant):
        foreign = Website(tenant_id=other_tenant.id, name="Globex Blog", domain="blog.globex.test")
        db.add(foreign)
        db.commit()

        response = client.get(f"/api/websites/{foreign.id}/content", headers=auth_headers)
        assert response.status_code == 403

    def test_health(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
