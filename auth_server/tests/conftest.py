import mongomock
import pytest

from auth_server import create_flask_app
from auth_server.managers.mongodb_management import MongoDBManager


@pytest.fixture
def mongodb():
    """
    A connector backed by an in-memory MongoDB, already READY.
    """
    manager = MongoDBManager(
        uri="mongodb://localhost:27017",
        db_name="auth_test_db",
        ready_timeout=0,
        client=mongomock.MongoClient(),
    )
    manager.connect()
    yield manager
    manager.close()


@pytest.fixture
def failed_mongodb(monkeypatch):
    """A connector whose DB_ACCESS is missing, so it settles as FAILED."""
    monkeypatch.delenv("DB_ACCESS", raising=False)
    manager = MongoDBManager(uri=None, ready_timeout=0)
    manager.connect()
    return manager


@pytest.fixture
def app(mongodb):
    """
    Create and configure a new app instance for each test.
    """
    app_instance = create_flask_app(env="testing", mongodb=mongodb)
    yield app_instance


@pytest.fixture
def client(app):
    """
    A test client for the app.
    This allows us to send HTTP requests to the app without running the server.
    """
    return app.test_client()


@pytest.fixture
def registered_user(client):
    payload = {"name": "Ada Lovelace", "email": "ada@example.com", "password": "s3cret-pw"}
    response = client.post("/api/user/register", json=payload)
    assert response.status_code == 201
    return payload
