"""
Change Member Role Use Case
"""

import logging
from typing import Callable
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.errors import ErrorCode, translate_storage_errors
from src.app.services.authorization_service import AuthorizationService, is_platform_superadmin
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import AuditEvent, MembershipStatus, WorkspaceRole
from src.domain.principal import Principal

from .dtos import MemberResponse

logger = logging.getLogger(__name__)


class ChangeMemberRoleUseCase:
    """
    Use case for changing a member's role within a workspace.

    Business Rules:
    - ADMIN only
    - An admin cannot change their own role
    - Target must be an active member of the same workspace
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
        self, principal: Principal, slug: str, user_id: UUID, new_role: str
    ) -> Result[MemberResponse]:
        try:
            role = WorkspaceRole((new_role or "").upper())
        except ValueError:
            return Return.err(
                Error(ErrorCode.INVALID_INPUT, f"Invalid role: {new_role}")
            )

        if user_id == principal.user_id:
            return Return.err(Error(ErrorCode.FORBIDDEN, "You cannot change your own role"))

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

            old_role = membership.role
            if old_role != role:
                membership.role = role
                await self.uow.memberships.update(membership)
                await self.uow.audit_events.create(
                    AuditEvent(
                        workspace_id=workspace.id,
                        user_id=user_id,
                        actor_user_id=principal.user_id,
                        action="member_role_changed",
                        event_metadata={"old_role": old_role.value, "new_role": role.value},
                    )
                )
                await self.uow.commit()
                logger.info(
                    "Role of %s in %s changed from %s to %s",
                    user_id,
                    workspace.slug,
                    old_role.value,
                    role.value,
                )

            return Return.ok(MemberResponse.from_entity(membership))
