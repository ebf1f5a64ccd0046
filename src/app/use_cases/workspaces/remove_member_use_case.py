"""
Remove Member Use Case

Offboards a member by soft-removing the membership.
"""

from typing import Callable
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.errors import ErrorCode, translate_storage_errors
from src.app.services.authorization_service import AuthorizationService, is_platform_superadmin
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import AuditEvent, MembershipStatus, WorkspaceRole
from src.domain.principal import Principal

from .dtos import MemberResponse


class RemoveMemberUseCase:
    """
    Use case for removing a member from a workspace.

    Business Rules:
    - ADMIN only; an admin cannot remove themselves
    - Membership is kept with status removed (points, issuances and audit stay)
    - A removed member resolves to no role until they redeem a new invite
    """

    def __init__(
        self,
        uow: UnitOfWork,
        superadmin_check: Callable[[Principal], bool] = is_platform_superadmin,
    ):
        self.uow = uow
        self.superadmin_check = superadmin_check

    @translate_storage_errors
    async def execute(
        self, principal: Principal, slug: str, user_id: UUID
    ) -> Result[MemberResponse]:
        if user_id == principal.user_id:
            return Return.err(
                Error(ErrorCode.INVALID_INPUT, "You cannot remove yourself from a workspace")
            )

        async with self.uow:
            access = await AuthorizationService(self.uow, self.superadmin_check).require_role(
                principal, slug, WorkspaceRole.admin
            )
            if access.is_err():
                return access
            workspace = access.value.workspace

            membership = await self.uow.memberships.get_by_user_and_workspace(
                user_id, workspace.id
            )
            if membership is None or membership.status != MembershipStatus.active:
                return Return.err(
                    Error(ErrorCode.NOT_FOUND, "User is not a member of this workspace")
                )

            membership.status = MembershipStatus.removed
            membership.is_primary = False
            await self.uow.memberships.update(membership)
            await self.uow.audit_events.create(
                AuditEvent(
                    workspace_id=workspace.id,
                    user_id=user_id,
                    actor_user_id=principal.user_id,
                    action="member_removed",
                    event_metadata={"role": membership.role.value},
                )
            )
            await self.uow.commit()

            return Return.ok(MemberResponse.from_entity(membership))
