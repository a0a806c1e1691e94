import pytest
from httpx import AsyncClient

from flyergen.core.database.entities.users import UserRole

pytestmark = pytest.mark.asyncio

BASE = "/api/v1/admin/provider-settings"


@pytest.fixture
async def admin_headers(make_user, auth_headers):
    admin = await make_user("admin", role=UserRole.ADMIN)
    return auth_headers(admin)


async def _save(client: AsyncClient, headers, **overrides):
    payload = {
        "provider_id": "fal-qwen",
        "name": "Sharp",
        "base_settings": {"defaultQuality": "high"},
        "specific_settings": {"numInferenceSteps": 40},
    }
    payload.update(overrides)
    return await client.post(BASE, json=payload, headers=headers)


async def test_upsert_creates_then_bumps_version(client: AsyncClient, admin_headers):
    created = await _save(client, admin_headers)
    assert created.status_code == 200
    assert created.json()["version"] == 1

    updated = await _save(client, admin_headers, specific_settings={"numInferenceSteps": 30})
    assert updated.json()["id"] == created.json()["id"]
    assert updated.json()["version"] == 2
    assert updated.json()["specific_settings"] == {"numInferenceSteps": 30}


async def test_upsert_rejects_unknown_provider(client: AsyncClient, admin_headers):
    response = await _save(client, admin_headers, provider_id="dall-e")
    assert response.status_code == 400


async def test_only_one_default_per_provider(client: AsyncClient, admin_headers):
    first = (await _save(client, admin_headers, name="A", is_default=True)).json()
    second = (await _save(client, admin_headers, name="B", is_default=True)).json()

    listing = (await client.get(BASE, params={"providerId": "fal-qwen"}, headers=admin_headers)).json()
    defaults = {row["id"]: row["is_default"] for row in listing}
    assert defaults == {first["id"]: False, second["id"]: True}

    default_only = (await client.get(BASE, params={"defaultOnly": "true"}, headers=admin_headers)).json()
    assert [row["id"] for row in default_only] == [second["id"]]


async def test_update_by_id(client: AsyncClient, admin_headers):
    created = (await _save(client, admin_headers)).json()
    response = await client.patch(f"{BASE}/{created['id']}", json={"is_active": False}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["is_active"] is False
    assert response.json()["version"] == 2

    missing = await client.patch(f"{BASE}/missing", json={"is_active": False}, headers=admin_headers)
    assert missing.status_code == 404


async def test_delete_refuses_default(client: AsyncClient, admin_headers):
    default = (await _save(client, admin_headers, name="Default", is_default=True)).json()
    other = (await _save(client, admin_headers, name="Other")).json()

    refused = await client.delete(f"{BASE}/{default['id']}", headers=admin_headers)
    assert refused.status_code == 400
    assert refused.json()["detail"] == "Cannot delete default settings"

    deleted = await client.delete(f"{BASE}/{other['id']}", headers=admin_headers)
    assert deleted.status_code == 204


async def test_admin_endpoints_reject_users(client: AsyncClient, make_user, auth_headers):
    user = await make_user()
    response = await client.get(BASE, headers=auth_headers(user))
    assert response.status_code == 403


async def test_public_default_for_signed_in_users(client: AsyncClient, admin_headers, make_user, auth_headers):
    user = await make_user("member")
    empty = await client.get("/api/v1/provider-settings/default", headers=auth_headers(user))
    assert empty.status_code == 200
    assert empty.json() is None

    await _save(client, admin_headers, is_default=True)
    response = await client.get("/api/v1/provider-settings/default", headers=auth_headers(user))
    assert response.json()["provider_id"] == "fal-qwen"


async def test_provider_status(client: AsyncClient, override_provider_manager, admin_headers):
    response = await client.get("/api/v1/admin/providers/status", headers=admin_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["default_provider"] == "ideogram"
    assert data["available_providers"] == ["ideogram"]
    assert data["validation"]["valid"] is True
    assert data["health"]["ideogram"]["healthy"] is True
    assert data["circuit_breakers"]["ideogram"]["is_open"] is False
