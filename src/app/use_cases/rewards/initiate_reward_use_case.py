"""
Initiate Reward Use Case

Spends points on a catalog item and places the order with the reward
provider.
"""

import logging
from typing import Callable
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.errors import ErrorCode, translate_storage_errors
from src.app.services.authorization_service import AuthorizationService, is_platform_superadmin
from src.app.services.points_ledger import PointsLedger
from src.app.services.reward_provider import (
    IRewardProvider,
    ProviderOrder,
    ProviderOrderRequest,
    RewardProviderError,
)
from src.app.services.reward_state_machine import EventOutcome, RewardStateMachine
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import AuditEvent, RewardIssuance, RewardStatus, WorkspaceRole
from src.domain.principal import Principal

from .dtos import RewardIssuanceResponse

logger = logging.getLogger(__name__)


class InitiateRewardUseCase:
    """
    Use case for redeeming points for a reward.

    Business Rules:
    - PARTICIPANT or above, provider integration enabled for the workspace
    - Catalog item must belong to the workspace and be active
    - The debit and the PENDING issuance commit together; no issuance
      exists when the debit fails
    - The provider is called outside any transaction with the issuance id
      as idempotency key
    - Provider failure: FAILED plus exactly one refund, EXTERNAL_PROVIDER_ERROR
    - A crash after the debit leaves the issuance PENDING for the sweep
    - Provider ids are kept even if the issuance was cancelled while the
      order was being placed; the status returned with the order is applied
    """

    def __init__(
        self,
        uow: UnitOfWork,
        provider: IRewardProvider,
        superadmin_check: Callable[[Principal], bool] = is_platform_superadmin,
    ):
        self.uow = uow
        self.provider = provider
        self.superadmin_check = superadmin_check

    @translate_storage_errors
    async def execute(
        self, principal: Principal, slug: str, catalog_item_id: UUID
    ) -> Result[RewardIssuanceResponse]:
        async with self.uow:
            access = await AuthorizationService(self.uow, self.superadmin_check).require_role(
                principal, slug, WorkspaceRole.participant
            )
            if access.is_err():
                return access
            workspace = access.value.workspace

            if not workspace.reward_provider_enabled:
                return Return.err(
                    Error(ErrorCode.FORBIDDEN, "Rewards are not enabled for this workspace")
                )

            item = await self.uow.catalog_items.get_by_id(catalog_item_id)
            if item is None or item.workspace_id != workspace.id or not item.is_active:
                return Return.err(Error(ErrorCode.NOT_FOUND, "Catalog item not found"))

            issuance = RewardIssuance(
                user_id=principal.user_id,
                workspace_id=workspace.id,
                catalog_item_id=item.id,
                sku=item.sku,
                amount=item.point_cost,
                status=RewardStatus.pending,
            )
            debited = await PointsLedger(self.uow).debit(
                principal.user_id,
                workspace.id,
                item.point_cost,
                reason="reward_redemption",
                reference_id=issuance.id,
                actor_user_id=principal.user_id,
            )
            if debited.is_err():
                return debited

            issuance = await self.uow.reward_issuances.create(issuance)
            await self.uow.audit_events.create(
                AuditEvent(
                    workspace_id=workspace.id,
                    user_id=principal.user_id,
                    actor_user_id=principal.user_id,
                    action="reward_requested",
                    event_metadata={
                        "issuance_id": str(issuance.id),
                        "sku": item.sku,
                        "amount": item.point_cost,
                    },
                )
            )
            await self.uow.commit()

            issuance_id = issuance.id
            order_request = ProviderOrderRequest(
                idempotency_key=str(issuance_id),
                program_id=workspace.provider_program_id,
                participant_id=str(principal.user_id),
                sku=item.sku,
                points=item.point_cost,
                metadata={"workspace": workspace.slug, "issuance_id": str(issuance_id)},
            )

        try:
            order = await self.provider.place_order(order_request)
        except RewardProviderError as e:
            logger.warning("Reward provider failed for issuance %s: %s", issuance_id, e.message)
            return await self._fail(issuance_id, e)

        return await self._issue(issuance_id, order)

    async def _fail(
        self, issuance_id: UUID, error: RewardProviderError
    ) -> Result[RewardIssuanceResponse]:
        async with self.uow:
            issuance = await self.uow.reward_issuances.get_by_id(issuance_id)
            failed = await RewardStateMachine(self.uow).fail_and_refund(
                issuance, f"{error.code}: {error.message}"
            )
            if failed.is_err():
                logger.error(
                    "Could not refund issuance %s, leaving it PENDING: %s",
                    issuance_id,
                    failed.error.message,
                )
                return failed
            await self.uow.commit()

        return Return.err(
            Error(
                ErrorCode.EXTERNAL_PROVIDER_ERROR,
                "The reward provider could not place the order; your points were returned",
            )
        )

    async def _issue(
        self, issuance_id: UUID, order: ProviderOrder
    ) -> Result[RewardIssuanceResponse]:
        async with self.uow:
            machine = RewardStateMachine(self.uow)
            issuance = await self.uow.reward_issuances.get_by_id(issuance_id)
            if not await machine.mark_issued(issuance, order.transaction_id, order.adjustment_id):
                current = await self.uow.reward_issuances.get_by_id(issuance_id)
                logger.warning(
                    "Issuance %s left PENDING before the provider answered, now %s",
                    issuance_id,
                    current.status.value,
                )
                await machine.record_order(current, order.transaction_id, order.adjustment_id)

            applied = await machine.apply_order_status(
                await self.uow.reward_issuances.get_by_id(issuance_id), order.status
            )
            if applied.is_err():
                return applied
            replayed = await machine.replay_logged_events(issuance_id)
            if replayed.is_err():
                return replayed
            await self.uow.commit()

            if applied.value == EventOutcome.FAILED:
                return Return.err(
                    Error(
                        ErrorCode.EXTERNAL_PROVIDER_ERROR,
                        "The reward provider rejected the order; your points were returned",
                    )
                )
            issuance = await self.uow.reward_issuances.get_by_id(issuance_id)
            return Return.ok(RewardIssuanceResponse.from_entity(issuance))
