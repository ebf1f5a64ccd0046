"""
List Webhook Events Use Case

Audit view over the webhook log.
"""

from typing import Callable, List, Optional
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.errors import ErrorCode, translate_storage_errors
from src.app.services.authorization_service import AuthorizationService, is_platform_superadmin
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import WorkspaceRole
from src.domain.principal import Principal

from .dtos import WebhookEventResponse


class ListWebhookEventsUseCase:
    """
    ADMIN lists either the events correlated to one issuance (by its
    provider ids) or the workspace's events that matched nothing.
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
        issuance_id: Optional[UUID] = None,
        limit: int = 100,
    ) -> Result[List[WebhookEventResponse]]:
        limit = max(1, min(limit, 500))

        async with self.uow:
            access = await AuthorizationService(self.uow, self.superadmin_check).require_role(
                principal, slug, WorkspaceRole.admin
            )
            if access.is_err():
                return access
            workspace = access.value.workspace

            if issuance_id is None:
                events = await self.uow.webhook_events.get_unmatched(workspace.id, limit)
            else:
                issuance = await self.uow.reward_issuances.get_by_id(issuance_id)
                if issuance is None or issuance.workspace_id != workspace.id:
                    return Return.err(Error(ErrorCode.NOT_FOUND, "Reward not found"))
                events = await self.uow.webhook_events.get_by_entity_ids(
                    workspace.id,
                    [issuance.provider_transaction_id, issuance.provider_adjustment_id],
                    limit,
                )

            return Return.ok([WebhookEventResponse.from_entity(event) for event in events])
