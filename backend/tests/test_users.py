"""Tests for user registration and lookup endpoints."""
from tests.conftest import create_test_user, login


class TestUserCRUD:
    """User create / get / list."""

    def test_create_user(self, client):
        data = create_test_user(client, first_name="Alice", last_name="Nguyen")
        assert data["first_name"] == "Alice"
        assert data["last_name"] == "Nguyen"
        assert data["email"].endswith("@acme.io")
        assert "user_id" in data
        assert "password_hash" not in data

    def test_duplicate_email_conflict(self, client):
        user = create_test_user(client)
        resp = client.post("/api/users", json={
            "email": user["email"].upper(),
            "first_name": "Copy",
            "last_name": "Cat",
            "password": "another-password",
        })
        assert resp.status_code == 409

    def test_short_password_rejected(self, client):
        resp = client.post("/api/users", json={
            "email": "short@acme.io",
            "first_name": "Short",
            "last_name": "Password",
            "password": "abc",
        })
        assert resp.status_code == 422

    def test_get_user_requires_session(self, client):
        user = create_test_user(client)
        resp = client.get(f"/api/users/{user['user_id']}")
        assert resp.status_code == 401

    def test_get_user(self, client):
        user = create_test_user(client, first_name="Bob", last_name="Stone")
        login(client, user)
        resp = client.get(f"/api/users/{user['user_id']}")
        assert resp.status_code == 200
        assert resp.json()["first_name"] == "Bob"

    def test_get_user_not_found(self, client):
        user = create_test_user(client)
        login(client, user)
        resp = client.get("/api/users/00000000-0000-0000-0000-000000000000")
        assert resp.status_code == 404

    def test_list_users(self, client):
        alice = create_test_user(client, first_name="Alice", last_name="Adams")
        create_test_user(client, first_name="Bob", last_name="Brown")
        login(client, alice)
        resp = client.get("/api/users")
        assert resp.status_code == 200
        names = [u["first_name"] for u in resp.json()]
        assert names == ["Alice", "Bob"]
