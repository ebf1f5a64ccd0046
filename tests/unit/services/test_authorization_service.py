import pytest

from src.app.services.authorization_service import AuthorizationService, is_platform_superadmin
from src.domain.entities import MembershipStatus, WorkspaceRole
from src.domain.roles import role_at_least, role_rank
from tests.fixtures.factories import make_membership, make_principal, make_workspace


class SuperadminConfig:
    PLATFORM_SUPERADMIN_EMAILS = ["Root@Platform.io"]
    PLATFORM_SUPERADMIN_AUTH_IDS = ["auth|root"]


def test_role_ranking_is_explicit():
    assert role_rank(WorkspaceRole.admin) > role_rank(WorkspaceRole.manager)
    assert role_rank(WorkspaceRole.manager) > role_rank(WorkspaceRole.participant)
    assert role_at_least(WorkspaceRole.admin, WorkspaceRole.participant)
    assert not role_at_least(WorkspaceRole.participant, WorkspaceRole.manager)
    assert not role_at_least(None, WorkspaceRole.participant)


def test_superadmin_allowlist_matches_email_case_insensitively():
    principal = make_principal(email="root@platform.io")
    assert is_platform_superadmin(principal, SuperadminConfig)


def test_superadmin_allowlist_matches_auth_id():
    principal = make_principal(email="someone@else.io").model_copy(
        update={"external_auth_id": "auth|root"}
    )
    assert is_platform_superadmin(principal, SuperadminConfig)


def test_workspace_admin_is_not_superadmin():
    assert not is_platform_superadmin(make_principal(), SuperadminConfig)


@pytest.mark.asyncio
async def test_resolve_role_unknown_workspace_is_not_found(mock_uow):
    result = await AuthorizationService(mock_uow).resolve_role(make_principal(), "missing")

    assert result.is_err()
    assert result.error.code == "NOT_FOUND"


@pytest.mark.asyncio
async def test_resolve_role_without_membership_is_none(mock_uow):
    mock_uow.workspaces.get_by_slug.return_value = make_workspace("other")

    result = await AuthorizationService(mock_uow).resolve_role(make_principal(), "other")

    assert result.is_ok()
    assert result.value is None


@pytest.mark.asyncio
async def test_removed_membership_resolves_to_no_role(mock_uow):
    principal = make_principal()
    workspace = make_workspace()
    mock_uow.workspaces.get_by_slug.return_value = workspace
    mock_uow.memberships.get_by_user_and_workspace.return_value = make_membership(
        principal.user_id, workspace.id, WorkspaceRole.admin, MembershipStatus.removed
    )

    result = await AuthorizationService(mock_uow).resolve_role(principal, workspace.slug)

    assert result.value is None


@pytest.mark.asyncio
async def test_require_role_rejects_lower_role(mock_uow):
    principal = make_principal()
    workspace = make_workspace()
    mock_uow.workspaces.get_by_slug.return_value = workspace
    mock_uow.memberships.get_by_user_and_workspace.return_value = make_membership(
        principal.user_id, workspace.id, WorkspaceRole.participant
    )

    result = await AuthorizationService(mock_uow).require_role(
        principal, workspace.slug, WorkspaceRole.manager
    )

    assert result.is_err()
    assert result.error.code == "FORBIDDEN"


@pytest.mark.asyncio
async def test_require_role_accepts_higher_role(mock_uow):
    principal = make_principal()
    workspace = make_workspace()
    mock_uow.workspaces.get_by_slug.return_value = workspace
    mock_uow.memberships.get_by_user_and_workspace.return_value = make_membership(
        principal.user_id, workspace.id, WorkspaceRole.admin
    )

    result = await AuthorizationService(mock_uow).require_role(
        principal, workspace.slug, WorkspaceRole.manager
    )

    assert result.is_ok()
    assert result.value.role == WorkspaceRole.admin
    assert result.value.workspace is workspace
    assert not result.value.via_superadmin


@pytest.mark.asyncio
async def test_superadmin_bypasses_membership(mock_uow):
    workspace = make_workspace()
    mock_uow.workspaces.get_by_slug.return_value = workspace

    service = AuthorizationService(mock_uow, superadmin_check=lambda principal: True)
    result = await service.require_role(make_principal(), workspace.slug, WorkspaceRole.admin)

    assert result.is_ok()
    assert result.value.via_superadmin
    assert result.value.role == WorkspaceRole.admin


@pytest.mark.asyncio
async def test_membership_lookup_uses_callers_own_identity(mock_uow):
    principal = make_principal()
    workspace = make_workspace()
    mock_uow.workspaces.get_by_slug.return_value = workspace

    await AuthorizationService(mock_uow).require_role(
        principal, workspace.slug, WorkspaceRole.participant
    )

    mock_uow.memberships.get_by_user_and_workspace.assert_awaited_once_with(
        principal.user_id, workspace.id
    )
