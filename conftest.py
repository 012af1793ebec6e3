import os

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

# Import app and the dependencies we override first
from main import app
from database import Base, configure_sqlite, get_db
from settings import Settings, get_settings
import models  # noqa: F401  # register tables on Base.metadata

TEST_DATABASE_URL = "sqlite:///./job-board-test.db"
TEST_JWT_SECRET = "test-secret"

test_engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
configure_sqlite(test_engine)
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Own a throwaway SQLite file for the whole test session."""
    db_path = TEST_DATABASE_URL.split("///")[-1]
    if os.path.exists(db_path):
        os.unlink(db_path)

    yield  # Tests run here

    test_engine.dispose()
    for suffix in ("", "-wal", "-shm"):
        if os.path.exists(db_path + suffix):
            os.unlink(db_path + suffix)


@pytest.fixture(autouse=True)
def fresh_tables(setup_test_database):
    """Every test starts from empty tables."""
    Base.metadata.drop_all(bind=test_engine)
    Base.metadata.create_all(bind=test_engine)
    yield


@pytest.fixture(scope="function")
def db_session():
    """Yields a SQLAlchemy session directly from the test factory."""
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def test_settings():
    # Low bcrypt cost keeps the suite fast; hashes stay valid bcrypt
    return Settings(jwt_secret=TEST_JWT_SECRET, password_hash_rounds=4)


SAMPLE_JOB = {
    "company": "Photosnap",
    "logo": "./images/photosnap.svg",
    "position": "Senior Frontend Developer",
    "role": "Frontend",
    "level": "Senior",
    "postedAt": "1d ago",
    "contract": "Full Time",
    "location": "USA Only",
    "languages": ["HTML", "CSS", "JavaScript"],
    "tools": [],
}


@pytest.fixture
def create_job(test_client):
    """Create a job through the API and return its JSON."""

    def _create(**overrides) -> dict:
        response = test_client.post("/api/job", json={**SAMPLE_JOB, **overrides})
        assert response.status_code == 200, response.text
        return response.json()

    return _create


@pytest.fixture
def register_and_login(test_client):
    """Register a user, log in, and return (user JSON, auth headers)."""

    def _register(email: str = "a@x.com", password: str = "secret1"):
        created = test_client.post("/api/user", json={"email": email, "password": password})
        assert created.status_code == 200, created.text
        login = test_client.post("/api/user/login", json={"email": email, "password": password})
        assert login.status_code == 200, login.text
        headers = {"Authorization": f"Bearer {login.json()['token']}"}
        return created.json(), headers

    return _register


@pytest.fixture(scope="function")
def override_dependencies(test_settings):
    """Point get_db at the test database and get_settings at test_settings.

    A new session is created for each API call, like in production.
    """

    def _override_get_db():
        db = TestSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_settings] = lambda: test_settings

    yield

    app.dependency_overrides.pop(get_db, None)
    app.dependency_overrides.pop(get_settings, None)


@pytest.fixture(scope="function")
def test_client(override_dependencies):
    """Provides a test client configured with our test database and settings."""
    return TestClient(app)
