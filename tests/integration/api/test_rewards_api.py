from uuid import UUID

import pytest
from httpx import AsyncClient

from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.use_cases.rewards import CancelRewardUseCase
from src.domain.principal import Principal
from tests.fixtures.api_helpers import (
    SUPERADMIN_EMAIL,
    add_catalog_item,
    auth_headers,
    award,
    create_workspace,
    join,
    sign_in,
)


async def member_with_points(client: AsyncClient, points: int = 150):
    await create_workspace(client, "acme")
    item = await add_catalog_item(client, "acme", cost=100)
    headers, user_id = await join(client, "acme", "member@acme.com")
    await award(client, "acme", user_id, points)
    return headers, user_id, item


async def balance(client: AsyncClient, headers) -> dict:
    response = await client.get("/workspaces/acme/points", headers=headers)
    assert response.status_code == 200
    return response.json()


@pytest.mark.asyncio
async def test_redeem_reward_debits_and_issues(client: AsyncClient, provider):
    headers, user_id, item = await member_with_points(client)

    response = await client.post(
        "/workspaces/acme/rewards", json={"catalog_item_id": item["id"]}, headers=headers
    )

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "ISSUED"
    assert data["user_id"] == user_id
    assert data["provider_transaction_id"] == "tx_1"
    assert data["provider_status"] == "PROCESSING"
    assert provider.placed[0].idempotency_key == data["id"]
    assert provider.placed[0].program_id == "program-acme"
    assert await balance(client, headers) == {
        "user_id": user_id,
        "workspace_id": data["workspace_id"],
        "total_points": 150,
        "available_points": 50,
    }


@pytest.mark.asyncio
async def test_insufficient_balance(client: AsyncClient, provider):
    headers, _, item = await member_with_points(client, points=40)

    response = await client.post(
        "/workspaces/acme/rewards", json={"catalog_item_id": item["id"]}, headers=headers
    )

    assert response.status_code == 402
    assert response.json()["error"]["code"] == "INSUFFICIENT_BALANCE"
    assert provider.placed == []
    assert (await balance(client, headers))["available_points"] == 40


@pytest.mark.asyncio
async def test_provider_failure_refunds_points(client: AsyncClient, provider):
    headers, _, item = await member_with_points(client)
    provider.fail_next("upstream down")

    response = await client.post(
        "/workspaces/acme/rewards", json={"catalog_item_id": item["id"]}, headers=headers
    )

    assert response.status_code == 502
    assert response.json()["error"]["code"] == "EXTERNAL_PROVIDER_ERROR"
    assert "upstream down" not in response.text
    points = await balance(client, headers)
    assert points["available_points"] == 150
    assert points["total_points"] == 150


@pytest.mark.asyncio
async def test_rewards_disabled_workspace(client: AsyncClient):
    await create_workspace(client, "quiet", rewards=False)
    item = await add_catalog_item(client, "quiet")
    headers, _ = await join(client, "quiet", "member@quiet.com")

    response = await client.post(
        "/workspaces/quiet/rewards", json={"catalog_item_id": item["id"]}, headers=headers
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_confirm_shipping_owner_only(client: AsyncClient):
    headers, _, item = await member_with_points(client)
    issued = (
        await client.post(
            "/workspaces/acme/rewards", json={"catalog_item_id": item["id"]}, headers=headers
        )
    ).json()
    other_headers, _ = await join(client, "acme", "other@acme.com")

    denied = await client.post(
        f"/workspaces/acme/rewards/{issued['id']}/confirm-shipping", headers=other_headers
    )
    confirmed = await client.post(
        f"/workspaces/acme/rewards/{issued['id']}/confirm-shipping", headers=headers
    )
    again = await client.post(
        f"/workspaces/acme/rewards/{issued['id']}/confirm-shipping", headers=headers
    )

    assert denied.status_code == 403
    assert confirmed.status_code == 200
    assert confirmed.json()["shipping_confirmed"] is True
    assert again.json()["shipping_confirmed_at"] == confirmed.json()["shipping_confirmed_at"]


@pytest.mark.asyncio
async def test_confirm_shipping_in_wrong_workspace(client: AsyncClient):
    headers, _, item = await member_with_points(client)
    issued = (
        await client.post(
            "/workspaces/acme/rewards", json={"catalog_item_id": item["id"]}, headers=headers
        )
    ).json()
    await create_workspace(client, "beta")
    await join(client, "beta", "member@acme.com")

    response = await client.post(
        f"/workspaces/beta/rewards/{issued['id']}/confirm-shipping", headers=headers
    )

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "WORKSPACE_MISMATCH"


@pytest.mark.asyncio
async def test_admin_cancel_refunds_once(client: AsyncClient):
    headers, _, item = await member_with_points(client)
    issued = (
        await client.post(
            "/workspaces/acme/rewards", json={"catalog_item_id": item["id"]}, headers=headers
        )
    ).json()
    admin = auth_headers(SUPERADMIN_EMAIL)

    first = await client.post(
        f"/workspaces/acme/rewards/{issued['id']}/cancel", json={"reason": "typo"}, headers=admin
    )
    second = await client.post(f"/workspaces/acme/rewards/{issued['id']}/cancel", headers=admin)

    assert first.status_code == 200
    assert first.json()["status"] == "CANCELLED"
    assert second.status_code == 200
    assert (await balance(client, headers))["available_points"] == 150


@pytest.mark.asyncio
async def test_cancel_during_order_placement_keeps_provider_ids(
    client: AsyncClient, provider, db_session, monkeypatch
):
    headers, _, item = await member_with_points(client)
    _, admin_id = await sign_in(client, SUPERADMIN_EMAIL)
    admin = Principal(
        user_id=UUID(admin_id), email=SUPERADMIN_EMAIL, external_auth_id=f"auth|{SUPERADMIN_EMAIL}"
    )
    place_order = provider.place_order

    async def cancel_then_place(request):
        cancelled = await CancelRewardUseCase(SqlAlchemyUnitOfWork(db_session)).execute(
            admin, "acme", UUID(request.idempotency_key), "changed my mind"
        )
        assert cancelled.is_ok()
        return await place_order(request)

    monkeypatch.setattr(provider, "place_order", cancel_then_place)

    response = await client.post(
        "/workspaces/acme/rewards", json={"catalog_item_id": item["id"]}, headers=headers
    )

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "CANCELLED"
    assert data["provider_transaction_id"] == "tx_1"
    assert (await balance(client, headers))["available_points"] == 150

    webhook = await client.post(
        f"/webhooks/rewards/{data['workspace_id']}",
        json={"id": "evt_late", "type": "transaction.completed", "data": {"id": "tx_1"}},
    )
    assert webhook.json()["matched_issuance_ids"] == [data["id"]]
    assert webhook.json()["outcomes"] == ["updated"]
    assert (await balance(client, headers))["available_points"] == 150
