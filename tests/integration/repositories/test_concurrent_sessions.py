"""Concurrent redemptions and debits, one database session per caller"""

import asyncio
from datetime import timedelta
from uuid import uuid4

import pytest
import pytest_asyncio
from sqlalchemy import func
from sqlalchemy.orm import sessionmaker
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories.invite_code_repository import InviteCodeRepository
from src.adapter.repositories.points_balance_repository import PointsBalanceRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.points_ledger import PointsLedger
from src.app.use_cases.invites import RedeemInviteCodeUseCase
from src.domain.base import utcnow
from src.domain.entities import InviteCode, Membership, User, Workspace
from src.domain.principal import Principal


def outcome(result) -> str:
    return "OK" if result.is_ok() else result.error.code


@pytest_asyncio.fixture
async def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def workspace_id(db_session):
    workspace = Workspace(id=uuid4(), slug="acme", name="Acme")
    db_session.add(workspace)
    await db_session.commit()
    return workspace.id


async def seed_users(db_session, count: int):
    principals = []
    for n in range(count):
        user = User(id=uuid4(), external_auth_id=f"auth|racer{n}", email=f"racer{n}@acme.com")
        db_session.add(user)
        principals.append(
            Principal(user_id=user.id, email=user.email, external_auth_id=user.external_auth_id)
        )
    await db_session.commit()
    return principals


@pytest.mark.asyncio
async def test_concurrent_redemptions_never_exceed_max_uses(
    session_factory, db_session, workspace_id
):
    invite = InviteCode(
        id=uuid4(),
        code="RACE2222",
        workspace_id=workspace_id,
        max_uses=2,
        expires_at=utcnow() + timedelta(days=1),
    )
    db_session.add(invite)
    await db_session.commit()
    principals = await seed_users(db_session, 4)

    async def redeem(principal):
        async with session_factory() as session:
            result = await RedeemInviteCodeUseCase(SqlAlchemyUnitOfWork(session)).execute(
                principal, "race2222"
            )
            return outcome(result)

    outcomes = await asyncio.gather(*(redeem(principal) for principal in principals))

    assert sorted(outcomes) == ["EXHAUSTED", "EXHAUSTED", "OK", "OK"]
    async with session_factory() as session:
        fresh = await InviteCodeRepository(session).get_by_id(invite.id)
        members = await session.exec(
            select(func.count()).select_from(Membership).where(
                Membership.workspace_id == workspace_id
            )
        )
        assert fresh.used_count == 2
        assert members.one() == 2


@pytest.mark.asyncio
async def test_concurrent_debits_of_the_whole_balance_only_one_wins(
    session_factory, db_session, workspace_id
):
    (principal,) = await seed_users(db_session, 1)
    balances = PointsBalanceRepository(db_session)
    await balances.get_or_create(principal.user_id, workspace_id)
    await balances.add_earned(principal.user_id, workspace_id, 100)
    await db_session.commit()

    async def debit():
        async with session_factory() as session:
            uow = SqlAlchemyUnitOfWork(session)
            async with uow:
                result = await PointsLedger(uow).debit(principal.user_id, workspace_id, 100)
                if result.is_ok():
                    await uow.commit()
                return outcome(result)

    outcomes = await asyncio.gather(debit(), debit())

    assert sorted(outcomes) == ["INSUFFICIENT_BALANCE", "OK"]
    async with session_factory() as session:
        balance = await PointsBalanceRepository(session).get(principal.user_id, workspace_id)
        assert (balance.total_points, balance.available_points) == (100, 0)
