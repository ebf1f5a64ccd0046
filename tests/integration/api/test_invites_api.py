import pytest
from httpx import AsyncClient

from tests.fixtures.api_helpers import (
    auth_headers,
    create_invite,
    create_workspace,
    sign_in,
)


@pytest.mark.asyncio
async def test_redeem_invite_joins_workspace(client: AsyncClient):
    """A new user redeems a code, becomes PARTICIPANT and gets a zero balance"""
    await create_workspace(client, "acme")
    invite = await create_invite(client, "acme", max_uses=2)
    headers, user_id = await sign_in(client, "new.hire@acme.com")

    response = await client.post(
        "/invites/redeem", json={"code": invite["code"].lower()}, headers=headers
    )

    assert response.status_code == 200
    data = response.json()
    assert data["workspace_slug"] == "acme"
    assert data["role"] == "PARTICIPANT"
    assert data["already_member"] is False

    context = await client.get("/workspaces/acme", headers=headers)
    assert context.status_code == 200
    assert context.json()["role"] == "PARTICIPANT"
    assert context.json()["is_primary"] is True

    balance = await client.get("/workspaces/acme/points", headers=headers)
    assert balance.json() == {
        "user_id": user_id,
        "workspace_id": data["workspace_id"],
        "total_points": 0,
        "available_points": 0,
    }


@pytest.mark.asyncio
async def test_single_use_code_admits_one_user(client: AsyncClient):
    await create_workspace(client, "acme")
    invite = await create_invite(client, "acme", max_uses=1)
    first, _ = await sign_in(client, "first@acme.com")
    second, _ = await sign_in(client, "second@acme.com")

    accepted = await client.post("/invites/redeem", json={"code": invite["code"]}, headers=first)
    rejected = await client.post("/invites/redeem", json={"code": invite["code"]}, headers=second)

    assert accepted.status_code == 200
    assert rejected.status_code == 409
    assert rejected.json()["error"]["code"] == "EXHAUSTED"

    details = await client.get(f"/invites/{invite['code']}")
    assert details.json()["remaining_uses"] == 0
    assert details.json()["is_exhausted"] is True


@pytest.mark.asyncio
async def test_second_click_is_idempotent(client: AsyncClient):
    await create_workspace(client, "acme")
    invite = await create_invite(client, "acme", max_uses=1)
    headers, _ = await sign_in(client, "clicker@acme.com")

    first = await client.post("/invites/redeem", json={"code": invite["code"]}, headers=headers)
    again = await client.post("/invites/redeem", json={"code": invite["code"]}, headers=headers)

    assert first.status_code == 200
    assert again.status_code == 200
    assert again.json()["already_member"] is True
    assert again.json()["workspace_id"] == first.json()["workspace_id"]


@pytest.mark.asyncio
async def test_unknown_code_is_not_found(client: AsyncClient):
    headers, _ = await sign_in(client, "someone@acme.com")

    response = await client.post("/invites/redeem", json={"code": "ZZZZZZZZ"}, headers=headers)

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_FOUND"


@pytest.mark.asyncio
async def test_targeted_code_refuses_other_email(client: AsyncClient):
    await create_workspace(client, "acme")
    invite = await create_invite(client, "acme", target_email="bob@acme.com")
    headers, _ = await sign_in(client, "mallory@acme.com")

    response = await client.post("/invites/redeem", json={"code": invite["code"]}, headers=headers)

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_only_admins_create_invites(client: AsyncClient):
    await create_workspace(client, "acme")
    invite = await create_invite(client, "acme")
    headers, _ = await sign_in(client, "member@acme.com")
    await client.post("/invites/redeem", json={"code": invite["code"]}, headers=headers)

    response = await client.post("/workspaces/acme/invites", json={}, headers=headers)

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_missing_token_is_rejected(client: AsyncClient):
    response = await client.post("/invites/redeem", json={"code": "ABC"})

    assert response.status_code in (401, 403)


@pytest.mark.asyncio
async def test_invalid_token_is_unauthorized(client: AsyncClient):
    response = await client.get("/me", headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_me_reports_superadmin(client: AsyncClient):
    response = await client.get("/me", headers=auth_headers("root@platform.io"))

    assert response.status_code == 200
    assert response.json()["is_superadmin"] is True
