"""Shared test fixtures for CV Tailor tests."""

import copy
import time

import httpx
import pytest

from api_client import ApiClient
from config_loader import DEFAULT_CONFIG
from fake_backend import FakeBackend
from services import (
    AuthService,
    BuilderService,
    CatalogService,
    ProfileService,
    SessionStore,
)
from services.models import Session

BASE_URL = "http://backend.test"


@pytest.fixture
def test_config():
    """Default configuration with a short debounce for fast tests."""
    config = copy.deepcopy(DEFAULT_CONFIG)
    config["api"]["base_url"] = BASE_URL
    config["search"]["debounce_ms"] = 10
    return config


@pytest.fixture
def backend():
    """Fake backend seeded with a user and a small catalog."""
    fake = FakeBackend()
    fake.add_user("jane@example.com", "correct-horse", full_name="Jane Doe")
    fake.add_catalog("skills", "s1", name="Java")
    fake.add_catalog("skills", "s2", name="JavaScript")
    fake.add_catalog("skills", "s3", name="Python")
    fake.add_catalog("certifications", "c1", name="AWS Solutions Architect")
    fake.add_catalog("certifications", "c2", name="Certified Kubernetes Administrator")
    fake.add_catalog("projects", "p1", name="Resume Parser", description="PDF to JSON")
    fake.add_catalog("job-descriptions", "jd1", name="unused", title="Backend Engineer")
    return fake


@pytest.fixture
def jane(backend):
    """The seeded user record."""
    return next(u for u in backend.users.values() if u["email"] == "jane@example.com")


@pytest.fixture
async def api_client(backend):
    """ApiClient routed to the fake backend over ASGI."""
    client = ApiClient(BASE_URL, transport=httpx.ASGITransport(app=backend.app))
    yield client
    await client.aclose()


@pytest.fixture
def session_store(tmp_path):
    return SessionStore(tmp_path / "session.json")


@pytest.fixture
def signed_in(backend, jane, session_store):
    """Store a live session for the seeded user."""
    session = Session(
        access_token=backend.issue_token(jane["id"]),
        user_id=jane["id"],
        email=jane["email"],
        name=jane["full_name"],
        expires_at=time.time() + 600,
    )
    session_store.save(session)
    return session


@pytest.fixture
def service_kwargs(test_config, api_client, session_store):
    return {"config": test_config, "client": api_client, "sessions": session_store}


@pytest.fixture
def auth_service(service_kwargs):
    return AuthService(**service_kwargs)


@pytest.fixture
def profile_service(service_kwargs):
    return ProfileService(**service_kwargs)


@pytest.fixture
def catalog_service(service_kwargs):
    return CatalogService(**service_kwargs)


@pytest.fixture
def builder_service(service_kwargs):
    return BuilderService(**service_kwargs)
