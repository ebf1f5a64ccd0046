from uuid import uuid4

import pytest

from src.app.services.reward_provider import ProviderOrder, RewardProviderError
from src.app.use_cases.rewards.sweep_stale_issuances_use_case import SweepStaleIssuancesUseCase
from src.domain.entities import RewardStatus
from tests.fixtures.factories import make_balance, make_issuance, make_workspace
from tests.fixtures.fake_provider import FakeRewardProvider


class SweepConfig:
    REWARD_STALE_AFTER_MINUTES = 30
    REWARD_RECONCILE_MAX_ATTEMPTS = 3
    REWARD_SWEEP_BATCH_SIZE = 50


@pytest.fixture
def workspace(mock_uow):
    workspace = make_workspace("acme")
    mock_uow.workspaces.get_by_id.return_value = workspace
    return workspace


@pytest.fixture
def issuance(mock_uow, workspace):
    issuance = make_issuance(uuid4(), workspace.id)
    mock_uow.reward_issuances.get_stale_pending.return_value = [issuance]
    mock_uow.reward_issuances.get_by_id.return_value = issuance
    mock_uow.points_balances.get.return_value = make_balance(issuance.user_id, workspace.id, 100, 100)
    return issuance


@pytest.fixture
def provider():
    return FakeRewardProvider()


def sweep(mock_uow, provider):
    return SweepStaleIssuancesUseCase(mock_uow, provider, config=SweepConfig)


@pytest.mark.asyncio
async def test_known_order_is_marked_issued(mock_uow, issuance, provider):
    provider.orders[str(issuance.id)] = ProviderOrder(transaction_id="tx_77")

    result = await sweep(mock_uow, provider).execute()

    assert result.value.issued == 1
    args, kwargs = mock_uow.reward_issuances.transition.call_args
    assert args[2] == RewardStatus.issued
    assert kwargs["provider_transaction_id"] == "tx_77"
    mock_uow.points_balances.restore_available.assert_not_called()


@pytest.mark.asyncio
async def test_unknown_order_is_failed_and_refunded(mock_uow, issuance, provider):
    result = await sweep(mock_uow, provider).execute()

    assert result.value.failed == 1
    mock_uow.points_balances.restore_available.assert_awaited_once_with(
        issuance.user_id, issuance.workspace_id, 100
    )


@pytest.mark.asyncio
async def test_provider_error_counts_an_attempt(mock_uow, issuance, provider):
    provider.find_errors.append(RewardProviderError("down", code="SERVER_ERROR"))

    result = await sweep(mock_uow, provider).execute()

    assert result.value.retried == 1
    mock_uow.reward_issuances.increment_reconcile_attempts.assert_awaited_once_with(issuance.id)
    mock_uow.reward_issuances.transition.assert_not_called()


@pytest.mark.asyncio
async def test_last_attempt_gives_up_with_refund(mock_uow, issuance, provider):
    issuance.reconcile_attempts = SweepConfig.REWARD_RECONCILE_MAX_ATTEMPTS - 1
    provider.find_errors.append(RewardProviderError("down", code="TIMEOUT"))

    result = await sweep(mock_uow, provider).execute()

    assert result.value.failed == 1
    mock_uow.points_balances.restore_available.assert_awaited_once()


@pytest.mark.asyncio
async def test_issuance_resolved_meanwhile_is_skipped(mock_uow, workspace, provider):
    stale = make_issuance(uuid4(), workspace.id)
    mock_uow.reward_issuances.get_stale_pending.return_value = [stale]
    mock_uow.reward_issuances.get_by_id.return_value = make_issuance(
        stale.user_id, workspace.id, id=stale.id, status=RewardStatus.issued
    )

    result = await sweep(mock_uow, provider).execute()

    assert result.value.skipped == 1
    mock_uow.reward_issuances.transition.assert_not_called()


@pytest.mark.asyncio
async def test_queries_provider_with_idempotency_key(mock_uow, issuance, provider):
    calls = []

    async def find_order(program_id, key):
        calls.append((program_id, key))
        return None

    provider.find_order = find_order

    await sweep(mock_uow, provider).execute()

    assert calls == [("program-1", str(issuance.id))]
