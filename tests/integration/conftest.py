"""
Integration test fixtures.
These fixtures set up the Firestore emulator and FastAPI test client.
"""
import os

os.environ.setdefault("JWT_SECRET", "integration-test-secret")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient
from google.cloud import firestore
from google.auth.credentials import AnonymousCredentials
from app.main import app
from app.dependencies import verify_token


@pytest.fixture(scope="session")
def firestore_emulator_host():
    """Get Firestore emulator host from environment or use default."""
    return os.getenv("FIRESTORE_EMULATOR_HOST", "localhost:8080")


@pytest.fixture(scope="session")
def test_project_id():
    """Get test project ID."""
    return os.getenv("TEST_GCP_PROJECT_ID", "test-project")


@pytest.fixture(scope="function")
def test_db(firestore_emulator_host, test_project_id):
    """
    Create a test Firestore client connected to the emulator.
    Cleans up test data after each test.
    """
    os.environ["FIRESTORE_EMULATOR_HOST"] = firestore_emulator_host
    os.environ["GCP_PROJECT_ID"] = test_project_id

    test_client = firestore.Client(
        project=test_project_id,
        credentials=AnonymousCredentials()
    )

    for collection in test_client.collections():
        for doc in collection.stream():
            doc.reference.delete()

    yield test_client

    for collection in test_client.collections():
        for doc in collection.stream():
            doc.reference.delete()


@pytest.fixture
def client(test_db):
    """FastAPI test client with test database."""
    return TestClient(app)


@pytest.fixture
def registration():
    return {
        "first_name": "Test",
        "last_name": "User",
        "email": "testuser@example.com",
        "password": "testpassword123",
        "phone_number": "0612345678",
        "gender": "female",
        "age": 30
    }


@pytest.fixture
def registered_user(client, registration):
    """Register a user and return user data with token."""
    response = client.post("/auth/register", json=registration)
    payload = response.json()

    return {
        "user_id": verify_token(payload["token"])["sub"],
        "email": registration["email"],
        "password": registration["password"],
        "token": payload["token"],
        "payload": payload,
        "headers": {"Authorization": f"Bearer {payload['token']}"}
    }


@pytest.fixture
def auth_headers(registered_user):
    """Just the auth headers for authenticated requests."""
    return registered_user["headers"]
