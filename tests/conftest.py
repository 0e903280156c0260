"""
Pytest configuration and fixtures for SocialDesk API tests.
"""
import os
from unittest.mock import MagicMock

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from socialdesk.database import Base, get_db
from socialdesk.limiter import limiter
from socialdesk.main import app
from socialdesk.models import Tenant, Brand, Website
from socialdesk.auth import create_access_token
from socialdesk.clients.oneup import OneUpClient, get_oneup_client
from socialdesk.scheduling import service, state_machine

# Disable rate limiting for tests
limiter.enabled = False

# Use in-memory SQLite for tests with shared connection
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Global session for sharing across requests
_test_session = None


def get_test_db():
    """Get the shared test database session."""
    global _test_session
    try:
        yield _test_session
    finally:
        pass


class FakeOneUpClient(OneUpClient):
    """Records scheduleimagepost calls instead of hitting OneUp."""

    def __init__(self):
        super().__init__("test-key", "https://oneup.test/api")
        self.calls = []
        self.fail_with = None

    def schedule_image_post(self, category_id, social_network_id, scheduled_datetime, image_url, content=None):
        self.calls.append({
            "category_id": category_id,
            "social_network_id": social_network_id,
            "scheduled_datetime": scheduled_datetime,
            "image_url": image_url,
            "content": content,
        })
        if self.fail_with:
            return {"error": True, "message": self.fail_with}
        return {"error": False, "message": "Post scheduled successfully"}

    def list_categories(self):
        return [{"id": 42, "category_name": "Acme Coffee"}]


@pytest.fixture(scope="function")
def db():
    """Create a fresh database for each test."""
    global _test_session

    Base.metadata.create_all(bind=engine)
    _test_session = TestingSessionLocal()
    app.dependency_overrides[get_db] = get_test_db

    yield _test_session

    app.dependency_overrides.clear()
    _test_session.close()
    _test_session = None

    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db):
    """Create a test client."""
    with TestClient(app) as c:
        yield c


@pytest.fixture(scope="function")
def oneup(db):
    """Replace the OneUp client for the duration of a test."""
    fake = FakeOneUpClient()
    app.dependency_overrides[get_oneup_client] = lambda: fake
    return fake


@pytest.fixture(scope="function")
def garbled_oneup(db):
    """A real OneUp client whose API answers with a JSON list instead of an object."""
    response = MagicMock()
    response.status_code = 200
    response.json.return_value = ["unexpected", "list"]
    session = MagicMock()
    session.get.return_value = response
    client = OneUpClient("key-123", "https://oneup.test/api", session=session)
    app.dependency_overrides[get_oneup_client] = lambda: client
    return session


@pytest.fixture(scope="function")
def tenant(db):
    tenant = Tenant(subdomain="acme", name="Acme Agency", email="ops@acme.test", is_active=True)
    db.add(tenant)
    db.commit()
    db.refresh(tenant)
    return tenant


@pytest.fixture(scope="function")
def other_tenant(db):
    tenant = Tenant(subdomain="globex", name="Globex", email="ops@globex.test", is_active=True)
    db.add(tenant)
    db.commit()
    db.refresh(tenant)
    return tenant


@pytest.fixture(scope="function")
def brand(db, tenant):
    brand = Brand(tenant_id=tenant.id, slug="acme-coffee", name="Acme Coffee", oneup_category_id=42)
    db.add(brand)
    db.commit()
    db.refresh(brand)
    return brand


@pytest.fixture(scope="function")
def other_brand(db, other_tenant):
    brand = Brand(tenant_id=other_tenant.id, slug="globex-tea", name="Globex Tea", oneup_category_id=7)
    db.add(brand)
    db.commit()
    db.refresh(brand)
    return brand


@pytest.fixture(scope="function")
def website(db, tenant):
    website = Website(tenant_id=tenant.id, name="Acme Blog", domain="blog.acme.test")
    db.add(website)
    db.commit()
    db.refresh(website)
    return website


@pytest.fixture(scope="function")
def auth_headers(tenant):
    """Get auth headers for the test tenant."""
    return {"Authorization": f"Bearer {create_access_token({'sub': tenant.id})}"}


@pytest.fixture(scope="function")
def make_post(db, brand):
    """Factory for posts; ``approved`` approves both text and image."""

    def _make(title="Spring launch", content="New seasonal roast is here", approved=True, target_brand=None,
              is_duplicate=False, platform="social"):
        post = service.create_post(
            db,
            target_brand or brand,
            title=title,
            content=content,
            approve_text=approved,
        )
        post.is_duplicate = is_duplicate
        post.platform = platform
        if approved:
            state_machine.decide_image(post.approval, "approved")
        db.commit()
        db.refresh(post)
        return post

    return _make
