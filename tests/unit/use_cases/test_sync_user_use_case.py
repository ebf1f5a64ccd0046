from uuid import uuid4

import pytest
from sqlalchemy.exc import IntegrityError

from src.app.use_cases.auth.sync_user_use_case import SyncUserUseCase
from src.domain.entities import User, UserStatus


def make_user(**overrides):
    values = dict(id=uuid4(), external_auth_id="auth|abc", email="ana@acme.com")
    values.update(overrides)
    return User(**values)


@pytest.mark.asyncio
async def test_first_authentication_creates_user(mock_uow):
    result = await SyncUserUseCase(mock_uow).execute("auth|abc", "Ana@Acme.com")

    assert result.is_ok()
    created = mock_uow.users.create.call_args[0][0]
    assert created.external_auth_id == "auth|abc"
    assert created.email == "ana@acme.com"
    assert result.value.user_id == created.id
    mock_uow.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_existing_user_is_reused(mock_uow):
    user = make_user()
    mock_uow.users.get_by_external_auth_id.return_value = user

    result = await SyncUserUseCase(mock_uow).execute("auth|abc", "ana@acme.com")

    assert result.value.user_id == user.id
    mock_uow.users.create.assert_not_called()
    mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
async def test_changed_email_follows_identity_provider(mock_uow):
    user = make_user()
    mock_uow.users.get_by_external_auth_id.return_value = user

    result = await SyncUserUseCase(mock_uow).execute("auth|abc", "ana.new@acme.com")

    assert result.value.email == "ana.new@acme.com"
    mock_uow.users.update.assert_awaited_once_with(user)


@pytest.mark.asyncio
async def test_deactivated_user_is_refused(mock_uow):
    mock_uow.users.get_by_external_auth_id.return_value = make_user(status=UserStatus.deactivated)

    result = await SyncUserUseCase(mock_uow).execute("auth|abc", "ana@acme.com")

    assert result.is_err()
    assert result.error.code == "FORBIDDEN"


@pytest.mark.asyncio
async def test_missing_subject_is_invalid(mock_uow):
    result = await SyncUserUseCase(mock_uow).execute("", "ana@acme.com")

    assert result.error.code == "INVALID_INPUT"
    mock_uow.users.get_by_external_auth_id.assert_not_called()


@pytest.mark.asyncio
async def test_concurrent_first_request_reads_the_winner(mock_uow):
    """Losing the insert race falls back to the row the other request created"""
    winner = make_user()
    mock_uow.users.get_by_external_auth_id.side_effect = [None, winner]
    mock_uow.users.create.side_effect = IntegrityError("insert", {}, Exception("duplicate"))

    result = await SyncUserUseCase(mock_uow).execute("auth|abc", "ana@acme.com")

    assert result.value.user_id == winner.id
    mock_uow.rollback.assert_awaited_once()
