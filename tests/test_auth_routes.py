"""
tests/test_auth_routes.py -- Integration tests for register, login and the token guard.

These tests exercise the full stack: FastAPI routing -> require_token ->
UserStore/TokenService -> response model serialization.

Coverage:
  - POST /api/register: 201 with stored row (hash, not plaintext); duplicate -> 500
  - Numeric usernames are stored as text; passwords over 72 bytes still work
  - POST /api/login: unknown user 400, wrong password 400, success 200 + token
  - Login with an unreadable stored hash -> 500, not "Invalid password"
  - Protected routes: no/odd Authorization header -> 401, bad/expired/non-expiring token -> 403

Fixtures used (from conftest.py):
  - api_client: ApiContext with a pre-created user "testuser"/"testpass123"
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from conftest import TEST_PASSWORD, TEST_SECRET, TEST_USERNAME, ApiContext


class TestRegister:
    def test_register_returns_created_user(self, api_client: ApiContext) -> None:
        resp = api_client.client.post("/api/register", json={"username": "alice", "password": "pw1"})
        assert resp.status_code == 201, resp.text
        data = resp.json()
        assert data["message"] == "User registered successfully"
        assert data["user"]["username"] == "alice"
        assert isinstance(data["user"]["id"], int)
        assert data["user"]["password"] != "pw1"
        assert data["user"]["password"].startswith("$2")

    def test_register_duplicate_username_fails(self, api_client: ApiContext) -> None:
        client = api_client.client
        first = client.post("/api/register", json={"username": "bob", "password": "one"})
        assert first.status_code == 201
        second = client.post("/api/register", json={"username": "bob", "password": "two"})
        assert second.status_code == 500
        assert second.json() == {"message": "Failed to register user"}
        # original password still works: the row was not overwritten
        login = client.post("/api/login", json={"username": "bob", "password": "one"})
        assert login.status_code == 200

    def test_register_needs_no_token(self, api_client: ApiContext) -> None:
        resp = api_client.client.post("/api/register", json={"username": "carol", "password": "x"})
        assert resp.status_code == 201

    def test_register_without_password_is_rejected(self, api_client: ApiContext) -> None:
        resp = api_client.client.post("/api/register", json={"username": "dave"})
        assert resp.status_code == 422
        assert api_client.users.get_by_username("dave") is None

    def test_numeric_username_is_stored_as_text(self, api_client: ApiContext) -> None:
        client = api_client.client
        resp = client.post("/api/register", json={"username": 12345, "password": 67890})
        assert resp.status_code == 201, resp.text
        assert resp.json()["user"]["username"] == "12345"
        login = client.post("/api/login", json={"username": "12345", "password": "67890"})
        assert login.status_code == 200, login.text

    def test_long_password_registers_and_logs_in(self, api_client: ApiContext) -> None:
        client = api_client.client
        resp = client.post("/api/register", json={"username": "erin", "password": "p" * 80})
        assert resp.status_code == 201, resp.text
        login = client.post("/api/login", json={"username": "erin", "password": "p" * 80})
        assert login.status_code == 200, login.text
        assert "token" in login.json()


class TestLogin:
    def test_login_success_returns_token(self, api_client: ApiContext) -> None:
        resp = api_client.client.post("/api/login", json={"username": TEST_USERNAME, "password": TEST_PASSWORD})
        assert resp.status_code == 200, resp.text
        data = resp.json()
        assert data["message"] == "Login successful"
        claims = api_client.tokens.verify(data["token"])
        assert claims.user_id == api_client.user_id
        assert claims.username == TEST_USERNAME
        assert resp.headers["Cache-Control"] == "no-store"

    def test_login_wrong_password(self, api_client: ApiContext) -> None:
        resp = api_client.client.post("/api/login", json={"username": TEST_USERNAME, "password": "wrong"})
        assert resp.status_code == 400
        assert resp.json() == {"message": "Invalid password"}

    def test_login_unknown_user(self, api_client: ApiContext) -> None:
        resp = api_client.client.post("/api/login", json={"username": "ghost", "password": "x"})
        assert resp.status_code == 400
        assert resp.json() == {"message": "User not found"}

    def test_login_with_unreadable_hash_is_internal_error(self, api_client: ApiContext) -> None:
        api_client.users.create_user("broken", "not-a-bcrypt-hash")
        resp = api_client.client.post("/api/login", json={"username": "broken", "password": "x"})
        assert resp.status_code == 500
        assert resp.json() == {"message": "Failed to login"}

    def test_logged_in_token_opens_protected_routes(self, api_client: ApiContext) -> None:
        client = api_client.client
        client.post("/api/register", json={"username": "erin", "password": "pw"})
        token = client.post("/api/login", json={"username": "erin", "password": "pw"}).json()["token"]
        resp = client.get("/api/zakazky", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 200


class TestTokenGuard:
    @pytest.mark.parametrize("path", ["/api/invoices", "/api/zakazky", "/api/invoices/1", "/api/zakazky/1"])
    def test_missing_header_is_401(self, api_client: ApiContext, path: str) -> None:
        resp = api_client.client.get(path)
        assert resp.status_code == 401
        assert resp.json() == {"message": "Access denied, no token provided"}

    @pytest.mark.parametrize("header", ["Bearer", "Basic dXNlcjpwdw==", "token-without-scheme"])
    def test_header_without_bearer_token_is_401(self, api_client: ApiContext, header: str) -> None:
        resp = api_client.client.get("/api/invoices", headers={"Authorization": header})
        assert resp.status_code == 401

    def test_garbage_token_is_403(self, api_client: ApiContext) -> None:
        resp = api_client.client.get("/api/invoices", headers={"Authorization": "Bearer not-a-jwt"})
        assert resp.status_code == 403
        assert resp.json() == {"message": "Invalid token"}

    def test_expired_token_is_403(self, api_client: ApiContext) -> None:
        issued = datetime.now(timezone.utc) - timedelta(hours=2)
        token = jwt.encode(
            {"userId": api_client.user_id, "username": TEST_USERNAME, "iat": issued, "exp": issued + timedelta(hours=1)},
            TEST_SECRET,
            algorithm="HS256",
        )
        resp = api_client.client.get("/api/zakazky", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 403

    def test_token_without_expiry_is_403(self, api_client: ApiContext) -> None:
        token = jwt.encode({"userId": api_client.user_id, "username": TEST_USERNAME}, TEST_SECRET, algorithm="HS256")
        resp = api_client.client.get("/api/zakazky", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 403
        assert resp.json() == {"message": "Invalid token"}

    def test_token_signed_with_other_secret_is_403(self, api_client: ApiContext) -> None:
        exp = datetime.now(timezone.utc) + timedelta(hours=1)
        token = jwt.encode({"userId": 1, "username": "x", "exp": exp}, "x" * 40, algorithm="HS256")
        resp = api_client.client.get("/api/zakazky", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 403

    def test_scheme_is_case_insensitive(self, api_client: ApiContext) -> None:
        resp = api_client.client.get("/api/zakazky", headers={"Authorization": f"bearer {api_client.token}"})
        assert resp.status_code == 200

    def test_unprotected_write_is_rejected_before_store(self, api_client: ApiContext) -> None:
        before = len(api_client.zakazky.list_all())
        resp = api_client.client.post("/api/zakazky", json={"nazev": "No auth"})
        assert resp.status_code == 401
        assert len(api_client.zakazky.list_all()) == before
