from datetime import timedelta
from uuid import UUID, uuid4

import pytest
from httpx import AsyncClient
from sqlmodel import update

from config import ApplicationConfig
from src.app.services.reward_provider import ProviderOrder
from src.domain.base import utcnow
from src.domain.entities import PointsBalance, RewardIssuance, RewardStatus
from tests.fixtures.api_helpers import award, create_workspace, join


async def stranded_issuance(client: AsyncClient, db_session, minutes_ago: int = 45):
    """A PENDING issuance whose debit committed but whose provider call never returned"""
    workspace = await create_workspace(client, "acme")
    headers, user_id = await join(client, "acme", "member@acme.com")
    await award(client, "acme", user_id, 100)

    issuance_id = uuid4()
    await db_session.execute(
        update(PointsBalance)
        .where(PointsBalance.user_id == UUID(user_id))
        .values(available_points=0)
    )
    db_session.add(
        RewardIssuance(
            id=issuance_id,
            user_id=UUID(user_id),
            workspace_id=UUID(workspace["id"]),
            sku="MUG-1",
            amount=100,
            status=RewardStatus.pending,
            created_at=utcnow() - timedelta(minutes=minutes_ago),
        )
    )
    await db_session.commit()
    return headers, issuance_id


def admin_headers():
    return {"X-Admin-API-Key": ApplicationConfig.ADMIN_API_KEY}


@pytest.mark.asyncio
async def test_unknown_order_is_failed_and_refunded(client: AsyncClient, db_session):
    headers, _ = await stranded_issuance(client, db_session)

    response = await client.post("/admin/rewards/reconcile", headers=admin_headers())

    assert response.status_code == 200
    assert response.json()["examined"] == 1
    assert response.json()["failed"] == 1
    points = (await client.get("/workspaces/acme/points", headers=headers)).json()
    assert points["available_points"] == 100


@pytest.mark.asyncio
async def test_known_order_is_issued(client: AsyncClient, db_session, provider):
    headers, issuance_id = await stranded_issuance(client, db_session)
    provider.orders[str(issuance_id)] = ProviderOrder(transaction_id="tx_late")

    response = await client.post("/admin/rewards/reconcile", headers=admin_headers())

    assert response.json()["issued"] == 1
    points = (await client.get("/workspaces/acme/points", headers=headers)).json()
    assert points["available_points"] == 0


@pytest.mark.asyncio
async def test_recent_pending_issuance_is_left_alone(client: AsyncClient, db_session):
    await stranded_issuance(client, db_session, minutes_ago=1)

    response = await client.post("/admin/rewards/reconcile", headers=admin_headers())

    assert response.json()["examined"] == 0


@pytest.mark.asyncio
async def test_requires_admin_key(client: AsyncClient):
    missing = await client.post("/admin/rewards/reconcile")
    wrong = await client.post("/admin/rewards/reconcile", headers={"X-Admin-API-Key": "nope"})

    assert missing.status_code == 401
    assert wrong.status_code == 401
