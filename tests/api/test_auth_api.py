"""HTTP tests for login, refresh rotation, logout and the profile endpoint."""

import pytest

from tests.conftest import TEST_PASSWORD, cookie_value, login_headers

LOGIN = "/api/v1/auth/login"
REFRESH = "/api/v1/auth/refresh"


async def _refresh(client, token: str | None):
    client.cookies.clear()
    headers = {"Cookie": f"refresh_token={token}"} if token else {}
    return await client.post(REFRESH, headers=headers)


@pytest.fixture
def admin(fakes, password_hash):
    return fakes.admins.add("admin@example.com", password_hash, "admin", name="Ada Admin")


async def test_login_sets_cookie_and_returns_access_token(client, admin) -> None:
    response = await client.post(LOGIN, json={"email": "Admin@Example.com", "password": TEST_PASSWORD})

    assert response.status_code == 200
    body = response.json()
    assert body["two_factor_required"] is False
    assert body["access_token"]
    assert body["admin"]["email"] == "admin@example.com"
    assert "refresh_token" not in body
    assert cookie_value(response)
    set_cookie = response.headers["set-cookie"].lower()
    assert "httponly" in set_cookie
    assert "samesite=strict" in set_cookie
    assert "path=/api/v1/auth" in set_cookie
    assert response.headers["cache-control"] == "no-store"


@pytest.mark.parametrize(
    ("email", "password"),
    [("admin@example.com", "wrong-password"), ("nobody@example.com", TEST_PASSWORD)],
)
async def test_login_failures_are_indistinguishable(client, admin, email, password) -> None:
    response = await client.post(LOGIN, json={"email": email, "password": password})

    assert response.status_code == 401
    assert response.json() == {"error": "AUTHENTICATION_ERROR", "message": "Invalid credentials"}
    assert response.headers["www-authenticate"] == "Bearer"
    assert cookie_value(response) is None


async def test_inactive_admin_cannot_log_in(client, fakes, admin) -> None:
    fakes.admins.set(admin.id, is_active=False)
    response = await client.post(LOGIN, json={"email": admin.email, "password": TEST_PASSWORD})
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid credentials"


async def test_login_rejects_unexpected_fields(client, admin) -> None:
    response = await client.post(
        LOGIN, json={"email": admin.email, "password": TEST_PASSWORD, "role": "superadmin"}
    )
    assert response.status_code == 422


async def test_me_requires_bearer_token(client, admin) -> None:
    response = await client.get("/api/v1/auth/me")
    assert response.status_code == 401
    assert response.json()["message"] == "Not authenticated"
    assert response.headers["www-authenticate"] == "Bearer"

    headers = await login_headers(client, admin.email)
    me = await client.get("/api/v1/auth/me", headers=headers)
    assert me.status_code == 200
    assert me.json()["id"] == admin.id


async def test_deactivation_applies_to_existing_access_token(client, fakes, admin) -> None:
    headers = await login_headers(client, admin.email)
    fakes.admins.set(admin.id, is_active=False)

    response = await client.get("/api/v1/auth/me", headers=headers)
    assert response.status_code == 401


async def test_refresh_rotates_cookie(client, fakes, admin) -> None:
    login = await client.post(LOGIN, json={"email": admin.email, "password": TEST_PASSWORD})
    first = cookie_value(login)

    response = await _refresh(client, first)

    assert response.status_code == 200
    assert response.json()["access_token"]
    second = cookie_value(response)
    assert second and second != first
    assert len(fakes.refresh_tokens.active(admin.id)) == 1


async def test_reused_refresh_token_revokes_the_family(client, fakes, admin) -> None:
    login = await client.post(LOGIN, json={"email": admin.email, "password": TEST_PASSWORD})
    first = cookie_value(login)
    second = cookie_value(await _refresh(client, first))

    replay = await _refresh(client, first)

    assert replay.status_code == 401
    assert cookie_value(replay) == ""
    assert (await _refresh(client, second)).status_code == 401
    assert fakes.refresh_tokens.active(admin.id) == []
    assert "auth.refresh_reuse" in fakes.audit.actions(success=False)


async def test_refresh_without_cookie(client) -> None:
    response = await _refresh(client, None)
    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


async def test_logout_revokes_session_and_is_idempotent(client, fakes, admin) -> None:
    login = await client.post(LOGIN, json={"email": admin.email, "password": TEST_PASSWORD})
    token = cookie_value(login)
    client.cookies.clear()

    response = await client.post("/api/v1/auth/logout", headers={"Cookie": f"refresh_token={token}"})
    assert response.status_code == 204
    assert cookie_value(response) == ""
    assert fakes.refresh_tokens.active(admin.id) == []
    assert (await _refresh(client, token)).status_code == 401

    client.cookies.clear()
    assert (await client.post("/api/v1/auth/logout")).status_code == 204


async def test_logout_all(client, fakes, admin) -> None:
    await client.post(LOGIN, json={"email": admin.email, "password": TEST_PASSWORD})
    headers = await login_headers(client, admin.email)

    response = await client.post("/api/v1/auth/logout-all", headers=headers)

    assert response.status_code == 200
    assert response.json() == {"revoked_sessions": 2}
    assert fakes.refresh_tokens.active(admin.id) == []


async def test_change_password(client, fakes, admin) -> None:
    headers = await login_headers(client, admin.email)

    wrong = await client.post(
        "/api/v1/auth/change-password",
        headers=headers,
        json={"current_password": "not-it", "new_password": "a-new-password"},
    )
    assert wrong.status_code == 401

    response = await client.post(
        "/api/v1/auth/change-password",
        headers=headers,
        json={"current_password": TEST_PASSWORD, "new_password": "a-new-password"},
    )
    assert response.status_code == 204
    assert fakes.refresh_tokens.active(admin.id) == []
    await login_headers(client, admin.email, "a-new-password")
