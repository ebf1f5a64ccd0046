"""
Update Workspace Settings Use Case

Reward-provider integration flags of a workspace.
"""

from typing import Callable, Optional

from libs.result import Error, Result, Return
from src.app.errors import ErrorCode, translate_storage_errors
from src.app.services.authorization_service import AuthorizationService, is_platform_superadmin
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import AuditEvent, WorkspaceRole
from src.domain.principal import Principal

from .dtos import WorkspaceResponse


class UpdateWorkspaceSettingsUseCase:
    """
    Use case for changing workspace settings.

    Business Rules:
    - ADMIN only
    - Fields left as None are unchanged; an empty string clears an optional field
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
        self,
        principal: Principal,
        slug: str,
        reward_provider_enabled: Optional[bool] = None,
        provider_program_id: Optional[str] = None,
        webhook_secret: Optional[str] = None,
    ) -> Result[WorkspaceResponse]:
        async with self.uow:
            access = await AuthorizationService(self.uow, self.superadmin_check).require_role(
                principal, slug, WorkspaceRole.admin
            )
            if access.is_err():
                return access
            workspace = access.value.workspace

            changed = []
            if reward_provider_enabled is not None:
                workspace.reward_provider_enabled = reward_provider_enabled
                changed.append("reward_provider_enabled")
            if provider_program_id is not None:
                workspace.provider_program_id = provider_program_id.strip() or None
                changed.append("provider_program_id")
            if webhook_secret is not None:
                workspace.webhook_secret = webhook_secret or None
                changed.append("webhook_secret")

            if workspace.reward_provider_enabled and not workspace.provider_program_id:
                return Return.err(
                    Error(
                        ErrorCode.INVALID_INPUT,
                        "A provider program id is required to enable rewards",
                    )
                )

            if changed:
                await self.uow.workspaces.update(workspace)
                await self.uow.audit_events.create(
                    AuditEvent(
                        workspace_id=workspace.id,
                        actor_user_id=principal.user_id,
                        action="workspace_settings_updated",
                        event_metadata={"fields": changed},
                    )
                )
                await self.uow.commit()

            return Return.ok(WorkspaceResponse.from_entity(workspace))
