from uuid import uuid4

import pytest

from src.app.use_cases.points.award_points_use_case import AwardPointsUseCase
from src.app.use_cases.points.get_balance_use_case import GetBalanceUseCase
from src.domain.entities import MembershipStatus, WorkspaceRole
from tests.fixtures.factories import (
    make_balance,
    make_membership,
    make_principal,
    make_workspace,
    membership_lookup,
)


def nobody(principal):
    return False


@pytest.fixture
def workspace(mock_uow):
    workspace = make_workspace("acme")
    mock_uow.workspaces.get_by_slug.return_value = workspace
    return workspace


@pytest.mark.asyncio
async def test_manager_awards_points(mock_uow, workspace):
    manager = make_principal("manager@acme.com")
    member = make_membership(uuid4(), workspace.id)
    mock_uow.memberships.get_by_user_and_workspace.side_effect = membership_lookup(
        make_membership(manager.user_id, workspace.id, WorkspaceRole.manager), member
    )
    mock_uow.points_balances.get.return_value = make_balance(member.user_id, workspace.id, 40, 40)

    result = await AwardPointsUseCase(mock_uow, nobody).execute(
        manager, "acme", member.user_id, 40, reason="step_challenge"
    )

    assert result.value.total_points == 40
    mock_uow.points_balances.add_earned.assert_awaited_once_with(member.user_id, workspace.id, 40)
    entry = mock_uow.points_balances.add_ledger_entry.call_args[0][0]
    assert entry.reason == "step_challenge"
    assert entry.actor_user_id == manager.user_id
    mock_uow.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_participant_cannot_award(mock_uow, workspace):
    principal = make_principal()
    mock_uow.memberships.get_by_user_and_workspace.return_value = make_membership(
        principal.user_id, workspace.id
    )

    result = await AwardPointsUseCase(mock_uow, nobody).execute(principal, "acme", uuid4(), 10)

    assert result.error.code == "FORBIDDEN"
    mock_uow.points_balances.add_earned.assert_not_called()


@pytest.mark.asyncio
async def test_award_to_removed_member_is_not_found(mock_uow, workspace):
    manager = make_principal("manager@acme.com")
    removed = make_membership(uuid4(), workspace.id, status=MembershipStatus.removed)
    mock_uow.memberships.get_by_user_and_workspace.side_effect = membership_lookup(
        make_membership(manager.user_id, workspace.id, WorkspaceRole.manager), removed
    )

    result = await AwardPointsUseCase(mock_uow, nobody).execute(manager, "acme", removed.user_id, 10)

    assert result.error.code == "NOT_FOUND"


@pytest.mark.asyncio
async def test_own_balance_without_row_reads_zero(mock_uow, workspace):
    principal = make_principal()
    mock_uow.memberships.get_by_user_and_workspace.return_value = make_membership(
        principal.user_id, workspace.id
    )

    result = await GetBalanceUseCase(mock_uow, nobody).execute(principal, "acme")

    assert result.value.total_points == 0
    assert result.value.available_points == 0
    mock_uow.points_balances.get_or_create.assert_not_called()


@pytest.mark.asyncio
async def test_participant_cannot_read_others_balance(mock_uow, workspace):
    principal = make_principal()
    mock_uow.memberships.get_by_user_and_workspace.return_value = make_membership(
        principal.user_id, workspace.id
    )

    result = await GetBalanceUseCase(mock_uow, nobody).execute(principal, "acme", uuid4())

    assert result.error.code == "FORBIDDEN"
