"""
Cancel Reward Use Case
"""

import logging
from typing import Callable, Optional
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.errors import ErrorCode, translate_storage_errors
from src.app.services.authorization_service import AuthorizationService, is_platform_superadmin
from src.app.services.reward_state_machine import RewardStateMachine
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import RewardStatus, WorkspaceRole
from src.domain.principal import Principal

from .dtos import RewardIssuanceResponse

logger = logging.getLogger(__name__)


class CancelRewardUseCase:
    """
    Use case for an administrative cancel.

    Business Rules:
    - ADMIN only
    - Allowed from PENDING, or ISSUED while the provider has not completed it
    - Refunds the points exactly once; cancelling twice is a no-op
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
        issuance_id: UUID,
        reason: Optional[str] = None,
    ) -> Result[RewardIssuanceResponse]:
        async with self.uow:
            access = await AuthorizationService(self.uow, self.superadmin_check).require_role(
                principal, slug, WorkspaceRole.admin
            )
            if access.is_err():
                return access
            workspace = access.value.workspace

            issuance = await self.uow.reward_issuances.get_by_id(issuance_id)
            if issuance is None or issuance.workspace_id != workspace.id:
                return Return.err(Error(ErrorCode.NOT_FOUND, "Reward not found"))

            if issuance.status == RewardStatus.cancelled:
                return Return.ok(RewardIssuanceResponse.from_entity(issuance))

            cancelled = await RewardStateMachine(self.uow).cancel_and_refund(
                issuance, principal.user_id, reason
            )
            if cancelled.is_err():
                return cancelled
            if not cancelled.value:
                current = await self.uow.reward_issuances.get_by_id(issuance_id)
                if current.status == RewardStatus.cancelled:
                    return Return.ok(RewardIssuanceResponse.from_entity(current))
                return Return.err(
                    Error(
                        ErrorCode.CONFLICT,
                        "This reward has already been fulfilled or failed",
                    )
                )

            await self.uow.commit()
            logger.info("Issuance %s cancelled by %s", issuance_id, principal.user_id)

            issuance = await self.uow.reward_issuances.get_by_id(issuance_id)
            return Return.ok(RewardIssuanceResponse.from_entity(issuance))
