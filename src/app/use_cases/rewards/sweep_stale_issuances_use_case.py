"""
Sweep Stale Issuances Use Case

Reconciliation sweep for issuances left PENDING by a crash or lost
response between the debit and the provider call. Triggered by an external
scheduler.
"""

import logging
from datetime import datetime, timedelta
from typing import Dict, Optional
from uuid import UUID

from config import ApplicationConfig
from libs.result import Result, Return
from src.app.errors import translate_storage_errors
from src.app.services.reward_provider import IRewardProvider, ProviderOrder, RewardProviderError
from src.app.services.reward_state_machine import RewardStateMachine
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import RewardStatus, Workspace

from .dtos import SweepReportResponse

logger = logging.getLogger(__name__)


class SweepStaleIssuancesUseCase:
    """
    Use case for resolving stale PENDING issuances.

    Business Rules:
    - Stale = PENDING and older than REWARD_STALE_AFTER_MINUTES
    - The provider is asked for an order under the issuance's idempotency key
    - Known order -> ISSUED (and any early webhook events are replayed)
    - Unknown order -> FAILED with one refund
    - Provider error -> reconcile_attempts += 1; at
      REWARD_RECONCILE_MAX_ATTEMPTS the issuance is failed and refunded
    - Each issuance is resolved in its own transaction
    """

    def __init__(self, uow: UnitOfWork, provider: IRewardProvider, config=ApplicationConfig):
        self.uow = uow
        self.provider = provider
        self.config = config

    @translate_storage_errors
    async def execute(self, now: Optional[datetime] = None) -> Result[SweepReportResponse]:
        cutoff = (now or utcnow()) - timedelta(minutes=self.config.REWARD_STALE_AFTER_MINUTES)
        report = SweepReportResponse()

        async with self.uow:
            stale = await self.uow.reward_issuances.get_stale_pending(
                cutoff, self.config.REWARD_SWEEP_BATCH_SIZE
            )
            candidates = [(issuance.id, issuance.workspace_id) for issuance in stale]
            workspaces: Dict[UUID, Workspace] = {}
            for _, workspace_id in candidates:
                if workspace_id not in workspaces:
                    workspaces[workspace_id] = await self.uow.workspaces.get_by_id(workspace_id)
            program_ids = {
                workspace_id: workspace.provider_program_id if workspace else None
                for workspace_id, workspace in workspaces.items()
            }

        for issuance_id, workspace_id in candidates:
            report.examined += 1
            try:
                order = await self.provider.find_order(program_ids[workspace_id], str(issuance_id))
            except RewardProviderError as e:
                logger.warning("Sweep could not query provider for %s: %s", issuance_id, e.message)
                outcome = await self._record_attempt(issuance_id, e)
            else:
                outcome = await self._resolve(issuance_id, order)

            if outcome == "issued":
                report.issued += 1
            elif outcome == "failed":
                report.failed += 1
            elif outcome == "retried":
                report.retried += 1
            else:
                report.skipped += 1

        if report.examined:
            logger.info(
                "Reward sweep examined %s: %s issued, %s failed, %s retried, %s skipped",
                report.examined,
                report.issued,
                report.failed,
                report.retried,
                report.skipped,
            )
        return Return.ok(report)

    async def _resolve(self, issuance_id: UUID, order: Optional[ProviderOrder]) -> str:
        async with self.uow:
            issuance = await self.uow.reward_issuances.get_by_id(issuance_id)
            if issuance is None or issuance.status != RewardStatus.pending:
                return "skipped"

            machine = RewardStateMachine(self.uow)
            if order is not None and (order.transaction_id or order.adjustment_id):
                if not await machine.mark_issued(issuance, order.transaction_id, order.adjustment_id):
                    return "skipped"
                applied = await machine.apply_order_status(
                    await self.uow.reward_issuances.get_by_id(issuance_id), order.status
                )
                if applied.is_err():
                    logger.error(
                        "Sweep could not apply order status for %s: %s",
                        issuance_id,
                        applied.error.message,
                    )
                    return "skipped"
                replayed = await machine.replay_logged_events(issuance_id)
                if replayed.is_err():
                    logger.error("Sweep replay failed for %s: %s", issuance_id, replayed.error.message)
                    return "skipped"
                await self.uow.commit()
                return "issued"

            failed = await machine.fail_and_refund(
                issuance, "Order unknown to the reward provider after timeout"
            )
            if failed.is_err() or not failed.value:
                return "skipped"
            await self.uow.commit()
            return "failed"

    async def _record_attempt(self, issuance_id: UUID, error: RewardProviderError) -> str:
        async with self.uow:
            issuance = await self.uow.reward_issuances.get_by_id(issuance_id)
            if issuance is None or issuance.status != RewardStatus.pending:
                return "skipped"

            if issuance.reconcile_attempts + 1 >= self.config.REWARD_RECONCILE_MAX_ATTEMPTS:
                failed = await RewardStateMachine(self.uow).fail_and_refund(
                    issuance, f"Reconciliation gave up: {error.code}: {error.message}"
                )
                if failed.is_err() or not failed.value:
                    return "skipped"
                await self.uow.reward_issuances.increment_reconcile_attempts(issuance_id)
                await self.uow.commit()
                return "failed"

            await self.uow.reward_issuances.increment_reconcile_attempts(issuance_id)
            await self.uow.commit()
            return "retried"
