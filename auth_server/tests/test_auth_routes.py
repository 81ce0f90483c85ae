from unittest import mock

import pytest
from pymongo.errors import AutoReconnect, ServerSelectionTimeoutError

from auth_server import create_flask_app


def _login_count(app, status):
    return app.metrics_registry.get_sample_value(
        "auth_login_attempts_total", {"status": status}
    )


# ---------------- REGISTER ---------------- #


def test_register_creates_user(client, mongodb):
    response = client.post(
        "/api/user/register",
        json={"name": "Ada Lovelace", "email": "Ada@Example.com ", "password": "s3cret-pw"},
    )

    body = response.get_json()
    assert response.status_code == 201
    assert body["success"] is True
    assert body["data"]["email"] == "ada@example.com"
    assert body["data"]["name"] == "Ada Lovelace"
    assert "password_hash" not in body["data"]

    stored = mongodb.get_collection("users").find_one({"email": "ada@example.com"})
    assert stored["password_hash"] != "s3cret-pw"
    assert str(stored["_id"]) == body["data"]["id"]


def test_register_duplicate_email_conflicts(client, registered_user):
    response = client.post("/api/user/register", json=registered_user)

    assert response.status_code == 409
    assert response.get_json()["error"] == "Email already registered"


@pytest.mark.parametrize(
    "payload",
    [
        {"email": "ada@example.com", "password": "s3cret-pw"},
        {"name": "Ada", "password": "s3cret-pw"},
        {"name": "Ada", "email": "ada@example.com"},
        {"name": "Ada", "email": 42, "password": "s3cret-pw"},
    ],
)
def test_register_missing_fields(client, payload):
    response = client.post("/api/user/register", json=payload)

    assert response.status_code == 400
    assert response.get_json()["error"] == "Missing name, email or password"


def test_register_short_password(client):
    response = client.post(
        "/api/user/register",
        json={"name": "Ada", "email": "ada@example.com", "password": "12345"},
    )

    assert response.status_code == 400
    assert "at least 6" in response.get_json()["error"]


def test_register_with_json_array_body(client):
    response = client.post("/api/user/register", json=["not", "an", "object"])

    assert response.status_code == 400


# ---------------- LOGIN / LOGOUT ---------------- #


def test_login_success_starts_session(app, client, registered_user):
    response = client.post(
        "/api/user/login",
        json={"email": registered_user["email"], "password": registered_user["password"]},
    )

    body = response.get_json()
    assert response.status_code == 200
    assert body["data"]["user"]["email"] == registered_user["email"]
    assert _login_count(app, "success") == 1.0

    me = client.get("/api/user/me")
    assert me.status_code == 200
    assert me.get_json()["data"]["user"]["name"] == registered_user["name"]


def test_login_email_is_case_insensitive(client, registered_user):
    response = client.post(
        "/api/user/login",
        json={"email": "ADA@example.com", "password": registered_user["password"]},
    )

    assert response.status_code == 200


def test_login_wrong_password(app, client, registered_user):
    response = client.post(
        "/api/user/login",
        json={"email": registered_user["email"], "password": "wrong-password"},
    )

    assert response.status_code == 401
    assert response.get_json()["error"] == "Invalid credentials"
    assert _login_count(app, "failure_credentials") == 1.0
    assert client.get("/api/user/me").status_code == 401


def test_login_unknown_email(client):
    response = client.post(
        "/api/user/login", json={"email": "nobody@example.com", "password": "whatever"}
    )

    assert response.status_code == 401


def test_login_missing_data(app, client):
    response = client.post("/api/user/login", json={"email": "ada@example.com"})

    assert response.status_code == 400
    assert _login_count(app, "failure_missing_data") == 1.0


def test_logout_clears_session(client, registered_user):
    client.post(
        "/api/user/login",
        json={"email": registered_user["email"], "password": registered_user["password"]},
    )

    response = client.post("/api/user/logout")

    assert response.status_code == 200
    assert client.get("/api/user/me").status_code == 401


def test_me_requires_login(client):
    response = client.get("/api/user/me")

    assert response.status_code == 401
    assert response.get_json()["error"] == "Please log in first"


def test_me_after_account_removed(client, mongodb, registered_user):
    client.post(
        "/api/user/login",
        json={"email": registered_user["email"], "password": registered_user["password"]},
    )
    mongodb.get_collection("users").delete_many({})

    assert client.get("/api/user/me").status_code == 401
    assert client.get("/api/user/me").get_json()["error"] == "Please log in first"


# ---------------- DATABASE NOT READY ---------------- #


def test_routes_needing_database_return_503_when_failed(failed_mongodb):
    client = create_flask_app(env="testing", mongodb=failed_mongodb).test_client()

    response = client.post(
        "/api/user/register",
        json={"name": "Ada", "email": "ada@example.com", "password": "s3cret-pw"},
    )

    body = response.get_json()
    assert response.status_code == 503
    assert body["error"] == "Database unavailable"
    assert "failed" in body["message"]


def test_login_returns_503_while_connecting():
    from auth_server.managers.mongodb_management import MongoDBManager

    # never connected: stays CONNECTING
    pending = MongoDBManager(uri="mongodb://localhost:27017", ready_timeout=0)
    pending.connect_async = lambda: None

    client = create_flask_app(env="testing", mongodb=pending).test_client()
    response = client.post(
        "/api/user/login", json={"email": "ada@example.com", "password": "s3cret-pw"}
    )

    assert response.status_code == 503
    assert "connecting" in response.get_json()["message"]


def test_password_whitespace_is_kept(client):
    credentials = {"email": "ada@example.com", "password": "     a"}

    response = client.post("/api/user/register", json={"name": "Ada", **credentials})
    assert response.status_code == 201

    assert client.post("/api/user/login", json=credentials).status_code == 200
    assert client.post(
        "/api/user/login", json={"email": "ada@example.com", "password": "a"}
    ).status_code == 401


# ---------------- DATABASE DROPPED AFTER READY ---------------- #


@pytest.fixture
def dropped_users(monkeypatch, mongodb):
    users = mock.MagicMock()
    users.find_one.side_effect = ServerSelectionTimeoutError("no servers available")
    monkeypatch.setattr(mongodb, "get_collection", lambda name: users)
    return users


def test_login_returns_503_when_database_drops(client, dropped_users):
    response = client.post(
        "/api/user/login", json={"email": "ada@example.com", "password": "s3cret-pw"}
    )

    body = response.get_json()
    assert response.status_code == 503
    assert response.mimetype == "application/json"
    assert body["error"] == "Database unavailable"
    assert client.get("/readyz").get_json()["data"] == {"database": "ready"}


def test_register_returns_503_when_database_drops(client, dropped_users):
    response = client.post(
        "/api/user/register",
        json={"name": "Ada", "email": "ada@example.com", "password": "s3cret-pw"},
    )

    assert response.status_code == 503
    assert response.get_json()["success"] is False
    dropped_users.insert_one.assert_not_called()


def test_register_insert_failure_returns_503(client, monkeypatch, mongodb):
    users = mock.MagicMock()
    users.find_one.return_value = None
    users.insert_one.side_effect = AutoReconnect("connection reset")
    monkeypatch.setattr(mongodb, "get_collection", lambda name: users)

    response = client.post(
        "/api/user/register",
        json={"name": "Ada", "email": "ada@example.com", "password": "s3cret-pw"},
    )

    assert response.status_code == 503
    assert response.get_json()["error"] == "Database unavailable"
