from uuid import uuid4

import pytest

from src.app.use_cases.invites.codes import CODE_ALPHABET
from src.app.use_cases.invites.create_invite_code_use_case import CreateInviteCodeUseCase
from src.app.use_cases.invites.get_invite_details_use_case import GetInviteDetailsUseCase
from src.domain.entities import Challenge, WorkspaceRole
from tests.fixtures.factories import make_invite, make_membership, make_principal, make_workspace


class InviteConfig:
    INVITE_CODE_TTL_DAYS = 14
    INVITE_CODE_LENGTH = 8


def nobody(principal):
    return False


@pytest.fixture
def workspace(mock_uow):
    workspace = make_workspace("acme")
    mock_uow.workspaces.get_by_slug.return_value = workspace
    mock_uow.workspaces.get_by_id.return_value = workspace
    return workspace


@pytest.fixture
def admin(mock_uow, workspace):
    principal = make_principal("admin@acme.com")
    mock_uow.memberships.get_by_user_and_workspace.return_value = make_membership(
        principal.user_id, workspace.id, WorkspaceRole.admin
    )
    return principal


def use_case(mock_uow):
    return CreateInviteCodeUseCase(mock_uow, nobody, config=InviteConfig)


@pytest.mark.asyncio
async def test_admin_creates_code(mock_uow, admin):
    result = await use_case(mock_uow).execute(admin, "acme", "participant", max_uses=25)

    assert result.is_ok()
    invite = mock_uow.invite_codes.create.call_args[0][0]
    assert len(invite.code) == InviteConfig.INVITE_CODE_LENGTH
    assert set(invite.code) <= set(CODE_ALPHABET)
    assert invite.max_uses == 25
    assert invite.used_count == 0
    assert (invite.expires_at - invite.created_at).days in (13, 14)
    mock_uow.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_participant_cannot_create_codes(mock_uow, workspace):
    principal = make_principal()
    mock_uow.memberships.get_by_user_and_workspace.return_value = make_membership(
        principal.user_id, workspace.id
    )

    result = await use_case(mock_uow).execute(principal, "acme")

    assert result.error.code == "FORBIDDEN"
    mock_uow.invite_codes.create.assert_not_called()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "kwargs", [{"max_uses": 0}, {"role": "OWNER"}, {"expires_in_days": 0}, {"max_uses": True}]
)
async def test_invalid_parameters(mock_uow, admin, kwargs):
    result = await use_case(mock_uow).execute(admin, "acme", **kwargs)

    assert result.error.code == "INVALID_INPUT"


@pytest.mark.asyncio
async def test_challenge_from_other_workspace_is_not_found(mock_uow, admin):
    challenge = Challenge(id=uuid4(), workspace_id=uuid4(), title="Steps")
    mock_uow.challenges.get_by_id.return_value = challenge

    result = await use_case(mock_uow).execute(admin, "acme", challenge_id=challenge.id)

    assert result.error.code == "NOT_FOUND"


@pytest.mark.asyncio
async def test_target_email_is_normalized(mock_uow, admin):
    result = await use_case(mock_uow).execute(admin, "acme", target_email=" Bob@Acme.com ")

    assert result.value.target_email == "bob@acme.com"


@pytest.mark.asyncio
async def test_collisions_exhaust_attempts(mock_uow, workspace, admin):
    mock_uow.invite_codes.get_by_code.return_value = make_invite(workspace.id)

    result = await use_case(mock_uow).execute(admin, "acme")

    assert result.error.code == "CONFLICT"


@pytest.mark.asyncio
async def test_invite_details_are_public(mock_uow, workspace):
    mock_uow.invite_codes.get_by_code.return_value = make_invite(
        workspace.id, max_uses=3, used_count=1
    )

    result = await GetInviteDetailsUseCase(mock_uow).execute("welcome1")

    assert result.value.workspace_slug == "acme"
    assert result.value.remaining_uses == 2
    assert result.value.is_exhausted is False
