"""
Create Workspace Use Case

Provisions a new workspace with its creator as first ADMIN.
"""

import logging
import re
from typing import Callable

from sqlalchemy.exc import IntegrityError

from libs.result import Error, Result, Return
from src.app.errors import ErrorCode, translate_storage_errors
from src.app.services.authorization_service import is_platform_superadmin
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import (
    AuditEvent,
    Membership,
    MembershipStatus,
    Workspace,
    WorkspaceRole,
)
from src.domain.principal import Principal

from .dtos import WorkspaceContextResponse, WorkspaceResponse

logger = logging.getLogger(__name__)

SLUG_PATTERN = re.compile(r"^[a-z0-9][a-z0-9-]{1,62}[a-z0-9]$")


class CreateWorkspaceUseCase:
    """
    Use case for creating a workspace.

    Business Rules:
    - Only platform superadmins provision workspaces
    - Slugs are lowercase, unique and immutable
    - The creator becomes ADMIN; the membership is primary if the creator has none
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
        self, principal: Principal, name: str, slug: str
    ) -> Result[WorkspaceContextResponse]:
        if not self.superadmin_check(principal):
            return Return.err(
                Error(ErrorCode.FORBIDDEN, "Only platform administrators can create workspaces")
            )

        name = (name or "").strip()
        slug = (slug or "").strip().lower()
        if not name:
            return Return.err(Error(ErrorCode.INVALID_INPUT, "Workspace name is required"))
        if not SLUG_PATTERN.match(slug):
            return Return.err(
                Error(
                    ErrorCode.INVALID_INPUT,
                    "Slug must be 3-64 lowercase letters, digits or hyphens",
                )
            )

        async with self.uow:
            if await self.uow.workspaces.get_by_slug(slug):
                return Return.err(Error(ErrorCode.CONFLICT, "Workspace slug is already taken"))

            memberships = await self.uow.memberships.get_by_user_id(principal.user_id)
            has_primary = any(m.is_primary for m in memberships)

            try:
                workspace = await self.uow.workspaces.create(Workspace(slug=slug, name=name))
                membership = await self.uow.memberships.create(
                    Membership(
                        user_id=principal.user_id,
                        workspace_id=workspace.id,
                        role=WorkspaceRole.admin,
                        status=MembershipStatus.active,
                        is_primary=not has_primary,
                    )
                )
                await self.uow.audit_events.create(
                    AuditEvent(
                        workspace_id=workspace.id,
                        user_id=principal.user_id,
                        actor_user_id=principal.user_id,
                        action="workspace_created",
                        event_metadata={"slug": slug},
                    )
                )
                await self.uow.commit()
            except IntegrityError:
                await self.uow.rollback()
                return Return.err(Error(ErrorCode.CONFLICT, "Workspace slug is already taken"))

            logger.info("Workspace %s created by %s", slug, principal.user_id)
            return Return.ok(
                WorkspaceContextResponse(
                    workspace=WorkspaceResponse.from_entity(workspace),
                    role=membership.role.value,
                    is_primary=membership.is_primary,
                    is_superadmin=True,
                )
            )
