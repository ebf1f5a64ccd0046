"""
Switch Primary Workspace Use Case

Moves the caller's primary flag to another of their workspaces.
"""

from libs.result import Error, Result, Return
from src.app.errors import ErrorCode, translate_storage_errors
from src.app.services.authorization_service import AuthorizationService
from src.app.services.unit_of_work import UnitOfWork
from src.domain.principal import Principal

from .dtos import WorkspaceContextResponse, WorkspaceResponse


class SwitchPrimaryWorkspaceUseCase:
    """
    Use case for switching the primary workspace.

    Business Rules:
    - Only workspaces the caller actively belongs to can become primary
    - At most one primary membership per user: clear all, then set one
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    @translate_storage_errors
    async def execute(self, principal: Principal, slug: str) -> Result[WorkspaceContextResponse]:
        async with self.uow:
            resolved = await AuthorizationService(self.uow).resolve_role(principal, slug)
            if resolved.is_err():
                return resolved
            if resolved.value is None:
                return Return.err(
                    Error(ErrorCode.FORBIDDEN, "You are not a member of this workspace")
                )

            workspace = await self.uow.workspaces.get_by_slug(slug)
            membership = await self.uow.memberships.get_by_user_and_workspace(
                principal.user_id, workspace.id
            )

            if not membership.is_primary:
                await self.uow.memberships.clear_primary(principal.user_id)
                await self.uow.memberships.set_primary(membership.id)
                await self.uow.commit()

            return Return.ok(
                WorkspaceContextResponse(
                    workspace=WorkspaceResponse.from_entity(workspace),
                    role=resolved.value.value,
                    is_primary=True,
                )
            )
