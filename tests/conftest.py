"""Shared fixtures: an in-memory store, seeded principals and an API client."""

from typing import Any, Callable, Dict

import httpx
import pytest
from fastapi.testclient import TestClient

from job_board.api.main import create_app
from job_board.config import Settings
from job_board.core.models import Principal, Role
from job_board.db.database import Database
from job_board.services import JobService, ProfileService
from job_board.storage.blob import BlobStorageClient


def build_job_data(**overrides: Any) -> Dict[str, Any]:
    """A valid job posting body; keys use the API's camelCase names."""
    data = {
        "title": "Backend Engineer",
        "department": "Engineering",
        "location": "Remote",
        "salary": "$120k",
        "description": "Build and run our APIs.",
        "requirements": "Python, SQL",
        "resumeRequired": False,
        "customFields": [],
    }
    data.update(overrides)
    return data


def add_principal(database: Database, email: str, role: Role, name: str = "Test User") -> Principal:
    with database.session() as session:
        user = ProfileService(session).create_user({"email": email, "name": name, "role": role})
    return Principal(user_id=user.id, email=user.email, role=user.role)


@pytest.fixture
def database():
    db = Database("sqlite://")
    db.create_all()
    yield db
    db.dispose()


@pytest.fixture
def session(database):
    session = database.session_factory()
    yield session
    session.close()


@pytest.fixture
def admin(database) -> Principal:
    return add_principal(database, "owner@example.com", Role.ADMIN, "Olivia Owner")


@pytest.fixture
def other_admin(database) -> Principal:
    return add_principal(database, "rival@example.com", Role.ADMIN, "Rita Rival")


@pytest.fixture
def seeker(database) -> Principal:
    return add_principal(database, "seeker@example.com", Role.USER, "Sam Seeker")


@pytest.fixture
def other_seeker(database) -> Principal:
    return add_principal(database, "second@example.com", Role.USER, "Sid Second")


@pytest.fixture
def job_data() -> Callable[..., Dict[str, Any]]:
    return build_job_data


@pytest.fixture
def job(session, admin):
    """An ACTIVE job owned by ``admin`` with one optional and one required question."""
    return JobService(session).create(admin, build_job_data(customFields=[
        {"id": "q1", "label": "Are you eligible to work here?", "type": "radio",
         "required": True, "options": ["yes", "no"]},
        {"id": "q2", "label": "Anything else?", "type": "textarea", "required": False},
    ]))


def storage_handler(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json={
        "secure_url": "https://res.cloudinary.com/demo/raw/upload/resumes/cv.pdf",
        "public_id": "resumes/cv",
    })


@pytest.fixture
def app_settings() -> Settings:
    return Settings(
        database_url="sqlite://",
        jwt_secret_key="api-test-secret-that-is-at-least-32-bytes",
        cloudinary_cloud_name="demo",
        cloudinary_api_key="key",
        cloudinary_api_secret="secret",
    )


@pytest.fixture
def app(app_settings, database):
    storage = BlobStorageClient(
        cloud_name="demo",
        api_key="key",
        api_secret="secret",
        transport=httpx.MockTransport(storage_handler),
    )
    return create_app(app_settings, database=database, storage=storage)


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def auth(app) -> Callable[[Principal], Dict[str, str]]:
    """Authorization headers for a principal."""
    def headers(principal: Principal) -> Dict[str, str]:
        return {"Authorization": f"Bearer {app.state.identity.issue_token(principal.user_id)}"}
    return headers
