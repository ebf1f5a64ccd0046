"""
Get Workspace Context Use Case
"""

from typing import Callable

from libs.result import Error, Result, Return
from src.app.errors import ErrorCode, translate_storage_errors
from src.app.services.authorization_service import AuthorizationService, is_platform_superadmin
from src.app.services.unit_of_work import UnitOfWork
from src.domain.principal import Principal

from .dtos import WorkspaceContextResponse, WorkspaceResponse


class GetWorkspaceContextUseCase:
    """Workspace details plus the caller's role in it"""

    def __init__(
        self,
        uow: UnitOfWork,
        superadmin_check: Callable[[Principal], bool] = is_platform_superadmin,
    ):
        self.uow = uow
        self.superadmin_check = superadmin_check

    @translate_storage_errors
    async def execute(self, principal: Principal, slug: str) -> Result[WorkspaceContextResponse]:
        async with self.uow:
            resolved = await AuthorizationService(self.uow, self.superadmin_check).resolve_role(
                principal, slug
            )
            if resolved.is_err():
                return resolved

            role = resolved.value
            is_superadmin = self.superadmin_check(principal)
            if role is None and not is_superadmin:
                return Return.err(
                    Error(ErrorCode.FORBIDDEN, "You are not a member of this workspace")
                )

            workspace = await self.uow.workspaces.get_by_slug(slug)
            membership = await self.uow.memberships.get_by_user_and_workspace(
                principal.user_id, workspace.id
            )
            return Return.ok(
                WorkspaceContextResponse(
                    workspace=WorkspaceResponse.from_entity(workspace),
                    role=role.value if role else None,
                    is_primary=bool(role and membership and membership.is_primary),
                    is_superadmin=is_superadmin,
                )
            )
