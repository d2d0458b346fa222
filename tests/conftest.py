"""Shared fixtures."""
import os
import tempfile

# Keep the default engine away from the working directory's database
os.environ.setdefault(
    "DATABASE_URL", f"sqlite:///{os.path.join(tempfile.mkdtemp(), 'test_waitlist.db')}"
)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from src.app.app import create_app
from src.models.database import Base, make_engine
from src.services.identity_store import InMemoryIdentityStore, SqlAlchemyIdentityStore
from src.services.registration_service import RegistrationService

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "test-secret"


@pytest.fixture
def memory_store():
    """Empty in-memory identity store."""
    return InMemoryIdentityStore()


@pytest.fixture
def sql_store():
    """Identity store over a private in-memory SQLite database."""
    engine = make_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    store = SqlAlchemyIdentityStore(sessionmaker(autocommit=False, autoflush=False, bind=engine))
    yield store
    engine.dispose()


@pytest.fixture(params=["memory", "sql"])
def store(request):
    """Each test using this fixture runs against both backends."""
    return request.getfixturevalue(f"{request.param}_store")


@pytest.fixture
def service(memory_store):
    return RegistrationService(memory_store)


@pytest.fixture
def valid_payload():
    return {
        "email": "a@mit.edu",
        "college_name": "MIT",
        "age": 20,
        "city": "Boston",
    }


@pytest.fixture
def admin_env(monkeypatch):
    monkeypatch.setenv("ADMIN_USERNAME", ADMIN_USERNAME)
    monkeypatch.setenv("ADMIN_PASSWORD", ADMIN_PASSWORD)
    return (ADMIN_USERNAME, ADMIN_PASSWORD)


@pytest.fixture
def client(store):
    """API client; API tests run against both identity store backends."""
    with TestClient(create_app(store)) as test_client:
        yield test_client
