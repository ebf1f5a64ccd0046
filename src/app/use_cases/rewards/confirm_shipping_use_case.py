"""
Confirm Shipping Use Case
"""

from typing import Callable
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.errors import ErrorCode, translate_storage_errors
from src.app.services.authorization_service import AuthorizationService, is_platform_superadmin
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import AuditEvent, WorkspaceRole
from src.domain.principal import Principal
from src.domain.reward_state import TERMINAL_STATUSES

from .dtos import RewardIssuanceResponse


class ConfirmShippingUseCase:
    """
    Use case for a participant confirming receipt of a shipped reward.

    Business Rules:
    - Only the owning user may confirm (FORBIDDEN otherwise)
    - The issuance must belong to the route's workspace (WORKSPACE_MISMATCH)
    - Idempotent: a confirmed issuance is returned without re-timestamping
    - Failed or cancelled issuances cannot be confirmed (CONFLICT)
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
        self, principal: Principal, slug: str, issuance_id: UUID
    ) -> Result[RewardIssuanceResponse]:
        async with self.uow:
            access = await AuthorizationService(self.uow, self.superadmin_check).require_role(
                principal, slug, WorkspaceRole.participant
            )
            if access.is_err():
                return access
            workspace = access.value.workspace

            issuance = await self.uow.reward_issuances.get_by_id(issuance_id)
            if issuance is None:
                return Return.err(Error(ErrorCode.NOT_FOUND, "Reward not found"))
            if issuance.user_id != principal.user_id:
                return Return.err(
                    Error(ErrorCode.FORBIDDEN, "Only the recipient can confirm shipping")
                )
            if issuance.workspace_id != workspace.id:
                return Return.err(
                    Error(
                        ErrorCode.WORKSPACE_MISMATCH,
                        "This reward belongs to a different workspace",
                    )
                )

            if issuance.shipping_confirmed:
                return Return.ok(RewardIssuanceResponse.from_entity(issuance))

            if issuance.status in TERMINAL_STATUSES:
                return Return.err(
                    Error(
                        ErrorCode.CONFLICT,
                        f"A {issuance.status.value.lower()} reward cannot be confirmed",
                    )
                )

            if await self.uow.reward_issuances.confirm_shipping(issuance.id, utcnow()):
                await self.uow.audit_events.create(
                    AuditEvent(
                        workspace_id=workspace.id,
                        user_id=principal.user_id,
                        actor_user_id=principal.user_id,
                        action="shipping_confirmed",
                        event_metadata={"issuance_id": str(issuance.id)},
                    )
                )
                await self.uow.commit()

            issuance = await self.uow.reward_issuances.get_by_id(issuance_id)
            return Return.ok(RewardIssuanceResponse.from_entity(issuance))
