from __future__ import annotations

from fastapi import FastAPI
from fastapi.testclient import TestClient

from storefront.config import Settings
from storefront.main import create_app

from conftest import ADMIN_PASSWORD, ADMIN_USERNAME


def test_login_returns_user_and_sets_session_cookie(client: TestClient) -> None:
    response = client.post("/api/auth/login", json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["user"]["username"] == ADMIN_USERNAME
    assert body["user"]["isAdmin"] is True
    assert "passwordHash" not in body["user"]
    assert "password_hash" not in body["user"]

    cookie_header = response.headers["set-cookie"]
    assert cookie_header.startswith("sf.session=")
    assert "HttpOnly" in cookie_header
    assert "SameSite=strict" in cookie_header
    assert "Max-Age=86400" in cookie_header
    assert "Secure" not in cookie_header


def test_session_cookie_is_secure_in_production(tmp_path) -> None:
    settings = Settings(
        environment="production", debug=False, configure_logging=False, image_dir=str(tmp_path / "img")
    )
    with TestClient(create_app(settings)) as client:
        response = client.post("/api/auth/login", json={"username": "admin", "password": "password"})

    assert response.status_code == 200
    assert "Secure" in response.headers["set-cookie"]


def test_wrong_password_and_unknown_user_look_the_same(client: TestClient) -> None:
    wrong_password = client.post("/api/auth/login", json={"username": ADMIN_USERNAME, "password": "bad"})
    unknown_user = client.post("/api/auth/login", json={"username": "nobody", "password": ADMIN_PASSWORD})

    assert wrong_password.status_code == 401
    assert unknown_user.status_code == 401
    assert wrong_password.json() == unknown_user.json() == {"detail": "Invalid credentials", "error": "Invalid credentials"}
    assert "set-cookie" not in wrong_password.headers


def test_login_with_missing_fields_is_a_validation_error(client: TestClient) -> None:
    missing = client.post("/api/auth/login", json={"username": ADMIN_USERNAME})
    blank = client.post("/api/auth/login", json={"username": "", "password": ""})

    assert missing.status_code == 400
    assert missing.json()["detail"] == missing.json()["error"] == "Invalid request data"
    assert any(error["loc"][-1] == "password" for error in missing.json()["errors"])
    assert blank.status_code == 400


def test_me_requires_a_session(client: TestClient) -> None:
    response = client.get("/api/auth/me")
    assert response.status_code == 401
    assert response.json() == {"detail": "Not authenticated", "error": "Not authenticated"}


def test_me_returns_logged_in_user(admin_client: TestClient) -> None:
    response = admin_client.get("/api/auth/me")

    assert response.status_code == 200
    assert response.json()["user"]["username"] == ADMIN_USERNAME
    assert response.json()["user"]["isAdmin"] is True


def test_logout_destroys_session(admin_client: TestClient) -> None:
    response = admin_client.post("/api/auth/logout")

    assert response.status_code == 200
    assert response.json() == {"success": True}
    assert admin_client.get("/api/auth/me").status_code == 401


def test_logout_without_session_is_harmless(client: TestClient) -> None:
    response = client.post("/api/auth/logout")
    assert response.status_code == 200


def test_login_regenerates_session_id(app: FastAPI, admin_client: TestClient) -> None:
    first_id = admin_client.cookies.get("sf.session")

    response = admin_client.post("/api/auth/login", json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD})
    second_id = admin_client.cookies.get("sf.session")

    assert response.status_code == 200
    assert first_id and second_id
    assert first_id != second_id
    assert app.state.sessions.get(first_id) is None
    assert app.state.sessions.get(second_id) is not None


def test_forged_session_cookie_is_rejected(client: TestClient) -> None:
    client.cookies.set("sf.session", "0" * 64)
    assert client.get("/api/auth/me").status_code == 401
