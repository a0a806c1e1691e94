import pytest
from httpx import AsyncClient

from flyergen.core.database.entities.users import DEFAULT_CREDITS

pytestmark = pytest.mark.asyncio


async def _register(client: AsyncClient, **overrides):
    payload = {"username": "new_user", "email": "New.User@Example.com", "password": "s3cret-pass"}
    payload.update(overrides)
    return await client.post("/api/v1/auth/register", json=payload)


async def test_register_creates_user_with_free_credits(client: AsyncClient):
    response = await _register(client)
    assert response.status_code == 201
    data = response.json()
    assert data["username"] == "new_user"
    assert data["email"] == "new.user@example.com"
    assert data["role"] == "USER"
    assert data["credits"] == DEFAULT_CREDITS
    assert "password_hash" not in data


async def test_register_rejects_duplicate_email(client: AsyncClient):
    await _register(client)
    response = await _register(client, username="other_user")
    assert response.status_code == 400
    assert response.json()["detail"] == "Email already registered"


async def test_register_rejects_duplicate_username(client: AsyncClient):
    await _register(client)
    response = await _register(client, email="other@example.com")
    assert response.status_code == 400
    assert response.json()["detail"] == "Username already taken"


@pytest.mark.parametrize(
    "overrides",
    [
        {"username": "ab"},
        {"username": "a" * 21},
        {"username": "bad name!"},
        {"email": "not-an-email"},
        {"password": "short"},
    ],
)
async def test_register_validates_fields(client: AsyncClient, overrides):
    response = await _register(client, **overrides)
    assert response.status_code == 400
    body = response.json()
    field = next(iter(overrides))
    assert body["errors"][0]["loc"] == ["body", field]
    assert body["detail"].startswith(f"{field}: ")


async def test_login_with_email_sets_session_cookie(client: AsyncClient, make_user, password):
    user = await make_user("bob")
    response = await client.post("/api/v1/auth/login", json={"identifier": "bob@example.com", "password": password})
    assert response.status_code == 200
    data = response.json()
    assert data["token_type"] == "bearer"
    assert data["user"]["id"] == user.id
    assert response.cookies.get("session") == data["access_token"]


async def test_login_with_username(client: AsyncClient, make_user, password):
    await make_user("carol")
    response = await client.post("/api/v1/auth/login", json={"identifier": "carol", "password": password})
    assert response.status_code == 200


async def test_login_rejects_bad_password(client: AsyncClient, make_user):
    await make_user("dave")
    response = await client.post("/api/v1/auth/login", json={"identifier": "dave", "password": "wrong-password"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid credentials"


async def test_login_rejects_unknown_user(client: AsyncClient, password):
    response = await client.post("/api/v1/auth/login", json={"identifier": "ghost", "password": password})
    assert response.status_code == 401


async def test_session_cookie_authenticates(client: AsyncClient, make_user, password):
    await make_user("erin")
    login = await client.post("/api/v1/auth/login", json={"identifier": "erin", "password": password})
    client.cookies.set("session", login.json()["access_token"])
    response = await client.get("/api/v1/users/me")
    assert response.status_code == 200
    assert response.json()["username"] == "erin"


async def test_logout_clears_cookie(client: AsyncClient):
    response = await client.post("/api/v1/auth/logout")
    assert response.status_code == 204
    assert "session=" in response.headers.get("set-cookie", "")
