"""
Authorization Resolver

Answers "what role does this principal hold in this workspace". Every
workspace-scoped use case goes through here with the caller's own identity
before touching workspace rows.
"""

from dataclasses import dataclass
from typing import Callable, Optional

from config import ApplicationConfig
from libs.result import Error, Result, Return
from src.app.errors import ErrorCode
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import Membership, MembershipStatus, Workspace, WorkspaceRole
from src.domain.principal import Principal
from src.domain.roles import role_at_least


def is_platform_superadmin(principal: Principal, config=ApplicationConfig) -> bool:
    """
    Platform-level capability check against the static allowlist.

    Independent of any Membership row; workspace roles never imply it.
    """
    auth_ids = set(config.PLATFORM_SUPERADMIN_AUTH_IDS or [])
    emails = {email.lower() for email in (config.PLATFORM_SUPERADMIN_EMAILS or [])}
    if principal.external_auth_id in auth_ids:
        return True
    return bool(principal.email) and principal.email.lower() in emails


@dataclass
class WorkspaceAccess:
    """Outcome of a successful role check"""

    workspace: Workspace
    role: WorkspaceRole
    membership: Optional[Membership] = None
    via_superadmin: bool = False


class AuthorizationService:
    """
    Resolves principal -> role per workspace.

    Role ordering is ADMIN > MANAGER > PARTICIPANT, taken from the ranking
    table in src.domain.roles.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        superadmin_check: Callable[[Principal], bool] = is_platform_superadmin,
    ):
        self.uow = uow
        self.superadmin_check = superadmin_check

    async def resolve_role(
        self, principal: Principal, slug: str
    ) -> Result[Optional[WorkspaceRole]]:
        """
        Effective membership role, or None when the principal has no access.

        Fails with NOT_FOUND only when the workspace itself does not exist.
        """
        workspace = await self.uow.workspaces.get_by_slug(slug)
        if workspace is None:
            return Return.err(Error(ErrorCode.NOT_FOUND, "Workspace not found"))

        membership = await self._active_membership(principal, workspace)
        return Return.ok(membership.role if membership else None)

    async def require_role(
        self, principal: Principal, slug: str, min_role: WorkspaceRole
    ) -> Result[WorkspaceAccess]:
        """Workspace plus role, or FORBIDDEN unless the role is at least min_role"""
        workspace = await self.uow.workspaces.get_by_slug(slug)
        if workspace is None:
            return Return.err(Error(ErrorCode.NOT_FOUND, "Workspace not found"))

        # Superadmin is decided before, and independently of, membership data
        if self.superadmin_check(principal):
            membership = await self._active_membership(principal, workspace)
            return Return.ok(
                WorkspaceAccess(
                    workspace=workspace,
                    role=WorkspaceRole.admin,
                    membership=membership,
                    via_superadmin=True,
                )
            )

        membership = await self._active_membership(principal, workspace)
        if membership is None or not role_at_least(membership.role, min_role):
            return Return.err(
                Error(
                    ErrorCode.FORBIDDEN,
                    f"{min_role.value} access to this workspace is required",
                )
            )

        return Return.ok(
            WorkspaceAccess(workspace=workspace, role=membership.role, membership=membership)
        )

    async def _active_membership(
        self, principal: Principal, workspace: Workspace
    ) -> Optional[Membership]:
        membership = await self.uow.memberships.get_by_user_and_workspace(
            principal.user_id, workspace.id
        )
        if membership is None or membership.status != MembershipStatus.active:
            return None
        return membership
